"""Cas d'usage Stripe Connect (côté fonctions serveur).
Rôles:
- Créer le compte Connect Express d'une salle (webhook d'inscription ou action du gérant).
- Générer le lien d'onboarding hébergé par Stripe.
- Fournir la session de compte (client secret) des composants embarqués.
"""
from typing import Any, Dict, Optional
import logging

from gymhub.config import CONNECT_REFRESH_URL, CONNECT_RETURN_URL
from gymhub.connect import repository
from gymhub.payments import stripe_client

logger = logging.getLogger(__name__)

STRIPE_ACCOUNT_NOT_FOUND = "Compte Stripe introuvable"


class StripeAccountNotFound(Exception):
    """Le profil n'a pas (encore) de compte Stripe connecté."""

    def __init__(self, message: str = STRIPE_ACCOUNT_NOT_FOUND):
        super().__init__(message)


class ProfileUpdateError(Exception):
    """Compte Stripe créé mais non enregistré sur le profil."""


def require_stripe_account_id(user_id: str) -> str:
    account_id = repository.get_stripe_account_id(user_id)
    if not account_id:
        raise StripeAccountNotFound()
    return account_id


def get_account_info(user_id: str) -> Dict[str, Any]:
    """Session de compte + instantané du compte connecté.
    - Lève StripeAccountNotFound si le profil n'a pas encore de compte (provisionnement en cours).
    - Retour: {clientSecret, components, stripeAccountId, account}
    """
    account_id = require_stripe_account_id(user_id)
    session = stripe_client.create_account_session(account_id)
    account = stripe_client.retrieve_account(account_id)
    return {
        "clientSecret": session.get("client_secret"),
        "components": session.get("components"),
        "stripeAccountId": account_id,
        "account": account,
    }


def create_connect_account(user_id: str, email: str) -> str:
    """Crée le compte Express et le rattache au profil. Retourne l'id du compte."""
    account = stripe_client.create_express_account(email=email, user_id=user_id)
    account_id = account.get("id")
    try:
        repository.set_stripe_account_id(user_id, account_id)
    except Exception as e:
        logger.exception("connect.service.create_connect_account: profile update failed user_id=%s account=%s", user_id, account_id)
        raise ProfileUpdateError("Échec de la mise à jour du profil") from e
    logger.info("Compte Connect %s créé pour user_id=%s", account_id, user_id)
    return account_id


def handle_signup_record(record: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Variante webhook (insertion d'un utilisateur): {record: {id, email}} -> {connectAccountId}.
    - Lève ValueError si le payload est incomplet.
    """
    if not record or not record.get("id") or not record.get("email"):
        raise ValueError("Payload invalide")
    account_id = create_connect_account(str(record["id"]), str(record["email"]))
    return {"connectAccountId": account_id}


def create_onboarding_link(user_id: str, email: Optional[str]) -> Dict[str, Any]:
    """Variante gérant: crée le compte si absent, puis un lien d'onboarding -> {url}."""
    account_id = repository.get_stripe_account_id(user_id)
    if not account_id:
        if not email:
            raise ValueError("Email requis pour créer le compte Stripe")
        account_id = create_connect_account(user_id, email)
    link = stripe_client.create_account_link(
        account_id=account_id,
        refresh_url=CONNECT_REFRESH_URL,
        return_url=CONNECT_RETURN_URL,
    )
    return {"url": link.get("url")}
