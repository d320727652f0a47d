"""
Accès aux données pour le catalogue (table 'products').
Lectures au nom du gérant (RLS), écriture de création via service-role (fonction create-product).
"""
from typing import Any, Dict, List, Optional
import logging
import gymhub.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

# module gymhub.products.repository
def list_products(gym_id: str, user_token: str, product_type: Optional[str] = None) -> List[dict]:
    """
    Produits de la salle, plus récents d'abord.
    - product_type: filtre optionnel (membership, service, product)
    """
    if not gym_id:
        return []
    query = (
        supabase_client.get_user_supabase(user_token)
        .table("products")
        .select("*")
        .eq("gym_id", gym_id)
    )
    if product_type:
        query = query.eq("type", product_type)
    res = query.order("created_at", desc=True).execute()
    return res.data or []

def get_product(product_id: str, gym_id: str, user_token: str) -> Optional[dict]:
    try:
        res = (
            supabase_client.get_user_supabase(user_token)
            .table("products")
            .select("*")
            .eq("id", product_id)
            .eq("gym_id", gym_id)
            .maybe_single()
            .execute()
        )
        return (res.data if res else None) or None
    except Exception:
        logger.exception("products.repository.get_product failed id=%s", product_id)
        return None

def set_active(product_id: str, gym_id: str, active: bool, user_token: str) -> Optional[dict]:
    res = (
        supabase_client.get_user_supabase(user_token)
        .table("products")
        .update({"active": active})
        .eq("id", product_id)
        .eq("gym_id", gym_id)
        .execute()
    )
    rows = res.data or []
    return rows[0] if rows else None

def insert_product(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insère la ligne produit et retourne la ligne créée.
    Lève l'exception Supabase: le service décide (objets Stripe déjà créés).
    """
    res = supabase_client.get_service_supabase().table("products").insert(row).execute()
    rows = res.data or []
    if not rows:
        raise RuntimeError("Insertion produit sans retour")
    return rows[0]
