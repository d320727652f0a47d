from typing import Optional, Dict, Any
from gymhub.infra import supabase_client

# --- Auth (supabase.auth.*) ---

def auth_sign_in_password(email: str, password: str):
    """Wrapper Supabase Auth: connexion par email/mot de passe (GoTrue)."""
    return supabase_client.get_supabase().auth.sign_in_with_password({"email": email, "password": password})

def auth_sign_up_account(
    email: str,
    password: str,
    options_data: Optional[Dict[str, Any]] = None,
    email_redirect_to: Optional[str] = None,
):
    """Wrapper Supabase Auth: inscription d'un compte gérant.
    - options.data: metadata (full_name, gym_name)
    - options.email_redirect_to: URL de confirmation
    """
    credentials: Dict[str, Any] = {"email": email, "password": password}
    options: Dict[str, Any] = {}
    if options_data:
        options["data"] = options_data
    if email_redirect_to:
        options["email_redirect_to"] = email_redirect_to
    if options:
        credentials["options"] = options
    return supabase_client.get_supabase().auth.sign_up(credentials)

def get_user_from_access_token(access_token: str) -> Dict[str, Any]:
    """Récupère et normalise l'utilisateur depuis supabase.auth.get_user(access_token)."""
    res = supabase_client.get_supabase().auth.get_user(access_token)
    user = getattr(res, "user", None) or {}
    if not isinstance(user, dict):
        user = {
            "id": getattr(user, "id", None),
            "email": getattr(user, "email", None),
            "user_metadata": getattr(user, "user_metadata", None),
        }
    return user or {}
