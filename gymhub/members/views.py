# module gymhub.members.views

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from gymhub.members import service as members_service
from gymhub.members.models import MemberIn
from gymhub.utils.security import require_user
from gymhub.validation.forms import FormValidationError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/members", tags=["Members API"])


@router.get("")
def list_members(
    sort: str = Query(default="created_at"),
    direction: str = Query(default="desc"),
    q: Optional[str] = Query(default=None, max_length=100),
    user: Dict[str, Any] = Depends(require_user),
):
    """Membres de la salle, triables (first_name, status, plan, created_at, last_visit) et filtrables par texte."""
    try:
        members = members_service.list_members(user.get("id"), user.get("token"), sort, direction, q)
    except FormValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Erreur list_members")
        raise HTTPException(status_code=500, detail="Impossible de charger les membres")
    return {"members": members}


@router.get("/{member_id}")
def get_member(member_id: str, user: Dict[str, Any] = Depends(require_user)):
    member = members_service.get_member(member_id, user.get("id"), user.get("token"))
    if not member:
        raise HTTPException(status_code=404, detail="Membre introuvable")
    return {"member": member}


@router.post("", status_code=201)
def create_member(payload: MemberIn, user: Dict[str, Any] = Depends(require_user)):
    try:
        member = members_service.create_member(user.get("id"), payload, user.get("token"))
    except FormValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Erreur create_member")
        raise HTTPException(status_code=500, detail="Impossible de créer le membre")
    return {"member": member}


@router.put("/{member_id}")
def update_member(member_id: str, payload: MemberIn, user: Dict[str, Any] = Depends(require_user)):
    try:
        member = members_service.update_member(member_id, user.get("id"), payload, user.get("token"))
    except FormValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Erreur update_member id=%s", member_id)
        raise HTTPException(status_code=500, detail="Impossible de mettre à jour le membre")
    if not member:
        raise HTTPException(status_code=404, detail="Membre introuvable")
    return {"member": member}
