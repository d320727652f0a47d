"""
Accès aux données pour les membres (table 'members').
Toutes les requêtes passent par le client du gérant (RLS) et sont bornées par gym_id.
"""
from typing import Any, Dict, List, Optional
import logging
import gymhub.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

def _client(user_token: str):
    return supabase_client.get_user_supabase(user_token)

# module gymhub.members.repository
def list_members(
    gym_id: str,
    user_token: str,
    sort_field: str = "created_at",
    ascending: bool = False,
    search: Optional[str] = None,
) -> List[dict]:
    query = _client(user_token).table("members").select("*").eq("gym_id", gym_id)
    if search:
        pattern = f"%{search}%"
        query = query.or_(
            f"first_name.ilike.{pattern},last_name.ilike.{pattern},email.ilike.{pattern}"
        )
    res = query.order(sort_field, desc=not ascending).execute()
    return res.data or []

def get_member(member_id: str, gym_id: str, user_token: str) -> Optional[dict]:
    try:
        res = (
            _client(user_token)
            .table("members")
            .select("*")
            .eq("id", member_id)
            .eq("gym_id", gym_id)
            .maybe_single()
            .execute()
        )
        return (res.data if res else None) or None
    except Exception:
        logger.exception("members.repository.get_member failed id=%s", member_id)
        return None

def insert_member(row: Dict[str, Any], user_token: str) -> Dict[str, Any]:
    res = _client(user_token).table("members").insert(row).execute()
    rows = res.data or []
    if not rows:
        raise RuntimeError("Insertion membre sans retour")
    return rows[0]

def update_member(member_id: str, gym_id: str, fields: Dict[str, Any], user_token: str) -> Optional[dict]:
    res = (
        _client(user_token)
        .table("members")
        .update(fields)
        .eq("id", member_id)
        .eq("gym_id", gym_id)
        .execute()
    )
    rows = res.data or []
    return rows[0] if rows else None
