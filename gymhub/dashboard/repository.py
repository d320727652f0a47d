"""
Accès aux données du tableau de bord: table 'dashboard_config' et RPC 'get_gym_metrics'.
"""
from typing import Any, Dict, Optional
import logging
import gymhub.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

# module gymhub.dashboard.repository
def get_config(gym_id: str, user_token: str) -> Optional[dict]:
    res = (
        supabase_client.get_user_supabase(user_token)
        .table("dashboard_config")
        .select("*")
        .eq("gym_id", gym_id)
        .maybe_single()
        .execute()
    )
    return (res.data if res else None) or None

def upsert_config(row: Dict[str, Any], user_token: str) -> Dict[str, Any]:
    res = (
        supabase_client.get_user_supabase(user_token)
        .table("dashboard_config")
        .upsert(row, on_conflict="gym_id")
        .execute()
    )
    rows = res.data or []
    return rows[0] if rows else row

def get_gym_metrics(gym_id: str, start_iso: str, end_iso: str, user_token: str) -> Any:
    """Appelle la procédure get_gym_metrics(p_gym_id, p_start_date, p_end_date)."""
    res = (
        supabase_client.get_user_supabase(user_token)
        .rpc("get_gym_metrics", {"p_gym_id": gym_id, "p_start_date": start_iso, "p_end_date": end_iso})
        .execute()
    )
    return res.data
