# module gymhub.notes.views

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from gymhub.notes import service as notes_service
from gymhub.utils.security import require_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/members", tags=["Member notes API"])


class NoteCreate(BaseModel):
    content: str = Field(min_length=1, max_length=5000)
    category: Optional[str] = None


@router.get("/{member_id}/notes")
def list_notes(member_id: str, user: Dict[str, Any] = Depends(require_user)):
    try:
        notes = notes_service.list_notes(member_id, user.get("id"), user.get("token"))
    except notes_service.MemberNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"notes": notes}


@router.get("/{member_id}/activities")
def list_activities(member_id: str, user: Dict[str, Any] = Depends(require_user)):
    try:
        activities = notes_service.list_activities(member_id, user.get("id"), user.get("token"))
    except notes_service.MemberNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"activities": activities}


@router.post("/{member_id}/notes", status_code=201)
def add_note(member_id: str, payload: NoteCreate, user: Dict[str, Any] = Depends(require_user)):
    try:
        return notes_service.add_note(
            member_id, user.get("id"), payload.content, user.get("token"), payload.category
        )
    except notes_service.MemberNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception:
        logger.exception("Erreur add_note member_id=%s", member_id)
        raise HTTPException(status_code=500, detail="Impossible d'enregistrer la note")
