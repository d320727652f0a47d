from fastapi import APIRouter, HTTPException, Depends, Request, Response
from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Dict, Any

from gymhub.utils.security import require_user, set_session_cookie, clear_session_cookie
from gymhub.utils.rate_limit import optional_rate_limit
from gymhub.connect.views import get_connect_registry
from .service import login as svc_login, signup as svc_signup

# --- API Router (/api/v1/auth) ---

api_router = APIRouter(prefix="/api/v1/auth", tags=["Auth API"])

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    full_name: Optional[str] = None
    gym_name: Optional[str] = None

@api_router.post("/login", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
def api_login(req: LoginRequest, response: Response):
    """Connexion (API JSON).
    - Délègue la vérification des identifiants au service (svc_login).
    - Pose le cookie de session (sb_access) et retourne {access_token, token_type, user}.
    """
    result = svc_login(req.email, req.password)
    if not result.success:
        raise HTTPException(status_code=401, detail=result.error or "Identifiants invalides")
    if result.access_token:
        set_session_cookie(response, result.access_token)
    return {"access_token": result.access_token, "token_type": "bearer", "user": result.user}

@api_router.post("/signup", dependencies=[Depends(optional_rate_limit(times=3, seconds=60))])
def api_signup(req: SignupRequest, response: Response):
    """Inscription d'un gérant de salle.
    - Session immédiate si la confirmation email est désactivée, sinon message d'information.
    """
    result = svc_signup(req.email, req.password, full_name=req.full_name, gym_name=req.gym_name)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error or "Inscription impossible")
    if result.access_token:
        set_session_cookie(response, result.access_token)
        return {"access_token": result.access_token, "token_type": "bearer", "user": result.user}
    return {"message": result.error or "Inscription réussie"}

@api_router.post("/logout")
def api_logout(request: Request, response: Response, user: Dict[str, Any] = Depends(require_user)):
    """Déconnexion: efface le cookie et abandonne la session Stripe Connect embarquée."""
    get_connect_registry(request).discard(user.get("id"))
    clear_session_cookie(response)
    return {"status": "ok"}

@api_router.get("/me")
def api_me(user: Dict[str, Any] = Depends(require_user)):
    return {k: v for k, v in user.items() if k != "token"}
