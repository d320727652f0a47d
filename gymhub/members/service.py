"""Couche service des membres.
- Validation du formulaire avant toute écriture (FormValidationError).
- Téléphone stocké en chiffres seuls, champs optionnels vides stockés à null.
"""
import re
from typing import Any, Dict, List, Optional

from gymhub.members import repository
from gymhub.members.models import MemberIn, SORT_FIELDS
from gymhub.validation.forms import FormValidationError, clean_phone_number, validate_member_form

# Caractères réservés de la syntaxe de filtre PostgREST
_SEARCH_RESERVED = re.compile(r"[,()*%\\]")


def _none_if_empty(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def to_row(data: MemberIn) -> Dict[str, Any]:
    """Valide le formulaire puis construit la ligne 'members' à écrire."""
    validate_member_form(
        data.first_name, data.last_name, data.email, data.phone,
        data.street, data.city, data.state, data.zip_code,
    )
    return {
        "first_name": data.first_name.strip(),
        "last_name": data.last_name.strip(),
        "email": _none_if_empty(data.email),
        "phone": clean_phone_number(data.phone) or None,
        "street": _none_if_empty(data.street),
        "city": _none_if_empty(data.city),
        "state": _none_if_empty(data.state),
        "zip_code": _none_if_empty(data.zip_code),
        "status": data.status,
        "plan": _none_if_empty(data.plan),
    }


def list_members(
    gym_id: str,
    user_token: str,
    sort: str = "created_at",
    direction: str = "desc",
    q: Optional[str] = None,
) -> List[dict]:
    if sort not in SORT_FIELDS:
        raise FormValidationError(f"Tri non supporté: {sort}")
    if direction not in ("asc", "desc"):
        raise FormValidationError("Direction de tri invalide (asc ou desc)")
    search = _SEARCH_RESERVED.sub(" ", q or "").strip() or None
    return repository.list_members(gym_id, user_token, sort, direction == "asc", search)


def get_member(member_id: str, gym_id: str, user_token: str) -> Optional[dict]:
    return repository.get_member(member_id, gym_id, user_token)


def create_member(gym_id: str, data: MemberIn, user_token: str) -> Dict[str, Any]:
    row = to_row(data)
    row["gym_id"] = gym_id
    return repository.insert_member(row, user_token)


def update_member(member_id: str, gym_id: str, data: MemberIn, user_token: str) -> Optional[dict]:
    return repository.update_member(member_id, gym_id, to_row(data), user_token)
