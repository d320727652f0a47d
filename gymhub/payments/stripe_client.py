"""
Adaptateur Stripe: centralise les appels et la configuration Stripe (Connect, catalogue).
Tous les objets créés côté catalogue le sont sur le compte connecté de la salle (stripe_account).
"""
import stripe
from typing import Any, Dict, List, Optional

from gymhub.config import STRIPE_SECRET_KEY, STRIPE_API_VERSION

# Composants Connect embarqués activés pour chaque session de compte
EMBEDDED_COMPONENTS: Dict[str, Any] = {
    "notification_banner": {
        "enabled": True,
        "features": {"external_account_collection": True},
    },
    "account_onboarding": {
        "enabled": True,
        "features": {"external_account_collection": True},
    },
    "account_management": {
        "enabled": True,
        "features": {"external_account_collection": True},
    },
}

# module gymhub.payments.stripe_client
def require_stripe() -> stripe:
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY si disponible.
    - En absence de clé, les appels Stripe échoueront côté SDK (No API key provided).
    """
    if STRIPE_SECRET_KEY:
        stripe.api_key = STRIPE_SECRET_KEY
    if STRIPE_API_VERSION:
        stripe.api_version = STRIPE_API_VERSION
    return stripe

# --- Connect ---

def create_express_account(*, email: str, user_id: str) -> Dict[str, Any]:
    """
    Crée un compte Connect Express (paiements carte + virements) relié à l'utilisateur Supabase.
    """
    require_stripe()
    account = stripe.Account.create(
        type="express",
        email=email,
        capabilities={
            "card_payments": {"requested": True},
            "transfers": {"requested": True},
        },
        metadata={"supabaseUserId": user_id},
    )
    return dict(account)

def retrieve_account(account_id: str) -> Dict[str, Any]:
    require_stripe()
    return dict(stripe.Account.retrieve(account_id))

def create_account_session(account_id: str, components: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Session de compte pour les composants embarqués.
    Retour: dict incluant client_secret et components.
    """
    require_stripe()
    session = stripe.AccountSession.create(
        account=account_id,
        components=components or EMBEDDED_COMPONENTS,
    )
    return dict(session)

def create_account_link(*, account_id: str, refresh_url: str, return_url: str) -> Dict[str, Any]:
    """
    Lien d'onboarding hébergé par Stripe (usage unique, expire rapidement).
    """
    require_stripe()
    link = stripe.AccountLink.create(
        account=account_id,
        refresh_url=refresh_url,
        return_url=return_url,
        type="account_onboarding",
    )
    return dict(link)

# --- Catalogue (sur le compte connecté) ---

def create_product(*, account_id: str, name: str, description: Optional[str], metadata: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    require_stripe()
    params: Dict[str, Any] = {"name": name}
    if description:
        params["description"] = description
    if metadata:
        params["metadata"] = metadata
    product = stripe.Product.create(**params, stripe_account=account_id)
    return dict(product)

def create_price(
    *,
    account_id: str,
    product_id: str,
    unit_amount: int,
    currency: str,
    interval: Optional[str] = None,
    interval_count: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Prix unique, ou récurrent si `interval` est fourni (day/week/month/year).
    """
    require_stripe()
    params: Dict[str, Any] = {
        "product": product_id,
        "unit_amount": unit_amount,
        "currency": currency.lower(),
    }
    if interval:
        params["recurring"] = {"interval": interval, "interval_count": int(interval_count or 1)}
    price = stripe.Price.create(**params, stripe_account=account_id)
    return dict(price)

def create_payment_link(*, account_id: str, line_items: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Lien de paiement partageable: {"id": "plink_...", "url": "https://buy.stripe.com/..."}.
    """
    require_stripe()
    link = stripe.PaymentLink.create(line_items=line_items, stripe_account=account_id)
    return dict(link)
