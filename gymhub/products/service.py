"""Couche service du catalogue.
Rôles:
- Créer produit + prix (+ lien de paiement) sur le compte Connect de la salle.
- Persister la ligne locale avec les identifiants Stripe.
Atomicité vue de l'appelant: un échec Stripe n'écrit rien en base. Un échec d'écriture
locale après création côté Stripe laisse des objets orphelins (loggés, non compensés).
"""
from typing import Any, Dict, List, Optional
import logging

from gymhub.connect import service as connect_service
from gymhub.payments import stripe_client
from gymhub.products import repository
from gymhub.products.models import ProductCreate
from gymhub.validation.forms import to_minor_units

logger = logging.getLogger(__name__)


class ProductPersistError(Exception):
    """Objets Stripe créés mais ligne locale non écrite."""


def create_product(gym_id: str, data: ProductCreate) -> Dict[str, Any]:
    """Crée le produit Stripe, son prix, éventuellement un lien de paiement, puis la ligne locale.
    - Lève StripeAccountNotFound si la salle n'a pas de compte Connect.
    - Les erreurs Stripe remontent telles quelles (aucune écriture locale).
    """
    account_id = connect_service.require_stripe_account_id(gym_id)

    product = stripe_client.create_product(
        account_id=account_id,
        name=data.name,
        description=data.description,
        metadata={"gym_id": str(gym_id), "type": data.type},
    )
    price = stripe_client.create_price(
        account_id=account_id,
        product_id=product["id"],
        unit_amount=to_minor_units(data.price, data.currency),
        currency=data.currency,
        interval=data.interval_unit,
        interval_count=data.interval_count,
    )
    link: Optional[Dict[str, Any]] = None
    if data.create_payment_link:
        link = stripe_client.create_payment_link(
            account_id=account_id,
            line_items=[{"price": price["id"], "quantity": 1}],
        )

    row = {
        "gym_id": gym_id,
        "name": data.name,
        "description": data.description,
        "price": data.price,
        "type": data.type,
        "currency": data.currency,
        "interval_unit": data.interval_unit,
        "interval_count": data.interval_count,
        "stripe_product_id": product["id"],
        "stripe_price_id": price["id"],
        "stripe_payment_link_id": (link or {}).get("id"),
        "payment_link_url": (link or {}).get("url"),
        "active": True,
    }
    try:
        created = repository.insert_product(row)
    except Exception as e:
        logger.exception(
            "products.service.create_product: insertion échouée, objets Stripe orphelins account=%s product=%s price=%s link=%s",
            account_id, product["id"], price["id"], (link or {}).get("id"),
        )
        raise ProductPersistError("Échec de l'enregistrement du produit") from e
    logger.info("Produit %s créé pour gym_id=%s (price=%s)", created.get("id"), gym_id, price["id"])
    return created


def list_products(gym_id: str, user_token: str, product_type: Optional[str] = None) -> List[dict]:
    return repository.list_products(gym_id, user_token, product_type)


def toggle_product_status(product_id: str, gym_id: str, user_token: str) -> Optional[dict]:
    """Inverse le statut actif du produit. Retourne None si le produit n'appartient pas à la salle."""
    product = repository.get_product(product_id, gym_id, user_token)
    if not product:
        return None
    return repository.set_active(product_id, gym_id, not bool(product.get("active")), user_token)
