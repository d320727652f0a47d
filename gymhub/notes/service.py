"""Notes et activités d'un membre.
Une note ajoutée produit aussi une entrée 'Note' dans le journal d'activité.
"""
import logging
from typing import Any, Dict, List, Optional

from gymhub.members import repository as members_repository
from gymhub.notes import repository

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "General"


class MemberNotFound(Exception):
    pass


def _require_member(member_id: str, gym_id: str, user_token: str) -> dict:
    member = members_repository.get_member(member_id, gym_id, user_token)
    if not member:
        raise MemberNotFound("Membre introuvable")
    return member


def list_notes(member_id: str, gym_id: str, user_token: str) -> List[dict]:
    _require_member(member_id, gym_id, user_token)
    return repository.list_notes(member_id, user_token)


def list_activities(member_id: str, gym_id: str, user_token: str) -> List[dict]:
    _require_member(member_id, gym_id, user_token)
    return repository.list_activities(member_id, user_token)


def add_note(
    member_id: str,
    gym_id: str,
    content: str,
    user_token: str,
    category: Optional[str] = None,
) -> Dict[str, Any]:
    _require_member(member_id, gym_id, user_token)
    category = (category or "").strip() or DEFAULT_CATEGORY
    note = repository.insert_note(
        {
            "member_id": member_id,
            "content": content,
            "category": category,
            "created_by": gym_id,
        },
        user_token,
    )
    activity = repository.insert_activity(
        {
            "member_id": member_id,
            "type": "Note",
            "description": f"Added a note in {category}",
            "category": category,
            "metadata": {"note_content": content},
        },
        user_token,
    )
    logger.info("Note ajoutée member_id=%s category=%s", member_id, category)
    return {"note": note, "activity": activity}
