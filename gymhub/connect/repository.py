"""
Accès aux profils de salle (table profiles) pour Stripe Connect.
Utilise le client service-role: ces lectures/écritures sont faites par les fonctions serveur.
"""
from typing import Any, Dict, Optional
import logging
import gymhub.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

# module gymhub.connect.repository
def get_profile(user_id: str) -> Optional[Dict[str, Any]]:
    """
    Profil de la salle (id = utilisateur Supabase).
    - Retourne None si introuvable ou en cas d'erreur (loggée).
    """
    if not user_id:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("profiles")
            .select("*")
            .eq("id", user_id)
            .maybe_single()
            .execute()
        )
        return (res.data if res else None) or None
    except Exception:
        logger.exception("connect.repository.get_profile failed user_id=%s", user_id)
        return None

def get_stripe_account_id(user_id: str) -> Optional[str]:
    profile = get_profile(user_id) or {}
    return profile.get("stripe_account_id") or None

def set_stripe_account_id(user_id: str, account_id: str) -> bool:
    """
    Enregistre l'identifiant du compte connecté sur le profil.
    Lève l'exception Supabase: l'appelant décide de la réponse (500 côté fonction).
    """
    (
        supabase_client.get_service_supabase()
        .table("profiles")
        .update({"stripe_account_id": account_id})
        .eq("id", user_id)
        .execute()
    )
    return True
