"""
Accès aux données pour les notes et le journal d'activité d'un membre
(tables 'member_notes' et 'member_activities').
"""
from typing import Any, Dict, List
import gymhub.infra.supabase_client as supabase_client

# module gymhub.notes.repository
def _list(table: str, member_id: str, user_token: str) -> List[dict]:
    res = (
        supabase_client.get_user_supabase(user_token)
        .table(table)
        .select("*")
        .eq("member_id", member_id)
        .order("created_at", desc=True)
        .execute()
    )
    return res.data or []

def list_notes(member_id: str, user_token: str) -> List[dict]:
    return _list("member_notes", member_id, user_token)

def list_activities(member_id: str, user_token: str) -> List[dict]:
    return _list("member_activities", member_id, user_token)

def _insert(table: str, row: Dict[str, Any], user_token: str) -> Dict[str, Any]:
    res = supabase_client.get_user_supabase(user_token).table(table).insert(row).execute()
    rows = res.data or []
    return rows[0] if rows else row

def insert_note(row: Dict[str, Any], user_token: str) -> Dict[str, Any]:
    return _insert("member_notes", row, user_token)

def insert_activity(row: Dict[str, Any], user_token: str) -> Dict[str, Any]:
    return _insert("member_activities", row, user_token)
