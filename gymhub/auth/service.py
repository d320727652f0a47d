from typing import Optional, Dict, Any
from gymhub.auth.models import AuthResponse, make_auth_response, handle_exception
from gymhub.config import SIGNUP_REDIRECT_URL
from .repository import (
    auth_sign_in_password as sign_in_password,
    auth_sign_up_account as sign_up_account,
    get_user_from_access_token as _repo_get_user_from_token,
)

# --- Cas d'usage Auth exposés ---

def login(email: str, password: str) -> AuthResponse:
    """Connexion:
    - Délègue à supabase.auth.sign_in_with_password via repository
    - Normalise la réponse en AuthResponse
    """
    try:
        email = (email or "").strip()
        res = sign_in_password(email, password)
        return make_auth_response(res, fallback_error="Identifiants invalides ou email non confirmé")
    except Exception as e:
        return handle_exception("sign_in", e)

def signup(email: str, password: str, full_name: Optional[str] = None, gym_name: Optional[str] = None) -> AuthResponse:
    """Inscription d'un gérant:
    - Injecte full_name et gym_name dans user_metadata
    - Le compte Stripe Connect est créé ensuite par le webhook d'insertion (create-connect-account)
    - Retourne une session ou un message invitant à confirmer l'email
    """
    try:
        email = (email or "").strip()
        options_data: Dict[str, Any] = {}
        if full_name and full_name.strip():
            options_data["full_name"] = full_name.strip()
        if gym_name and gym_name.strip():
            options_data["gym_name"] = gym_name.strip()

        res = sign_up_account(
            email=email,
            password=password,
            options_data=options_data or None,
            email_redirect_to=SIGNUP_REDIRECT_URL,
        )

        sess = getattr(res, "session", None)
        if sess and getattr(sess, "access_token", None):
            return make_auth_response(res)
        return AuthResponse(True, error="Inscription réussie, vérifiez votre email")
    except Exception as e:
        msg = str(e).lower()
        if any(k in msg for k in ["already", "registered", "exists", "23505"]):
            return AuthResponse(False, error="Utilisateur existe déjà")
        return handle_exception("sign_up", e)

# --- Intégration sécurité ---

def get_user_from_token(access_token: str) -> Dict[str, Any]:
    """Normalise l'utilisateur issu de supabase.auth.get_user(access_token):
    - Retourne {id, email, metadata, token}
    """
    raw = _repo_get_user_from_token(access_token)
    return {
        "id": raw.get("id"),
        "email": raw.get("email"),
        "metadata": raw.get("user_metadata") or {},
        "token": access_token,
    }
