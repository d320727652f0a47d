# module gymhub.dashboard.views

"""Endpoints du tableau de bord.
- GET /api/v1/dashboard: configuration (créée par défaut au premier accès)
- PUT /api/v1/dashboard: enregistrement complet de la configuration
- GET /api/v1/dashboard/metrics?start=&end=: valeurs today + overview
- POST /api/v1/dashboard/stats/remove | /stats/add
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from gymhub.dashboard import service as dashboard_service
from gymhub.utils.security import require_user
from gymhub.validation.forms import FormValidationError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/dashboard", tags=["Dashboard API"])

Section = Literal["today", "overview"]


class MetricChange(BaseModel):
    value: float = 0
    isPositive: bool = True


class Metric(BaseModel):
    id: str = Field(min_length=1)
    title: str
    value: Any = "0"
    change: Optional[MetricChange] = None
    color: Optional[str] = None
    gradient: Optional[str] = None


class DashboardConfigIn(BaseModel):
    today_metrics: List[Metric] = []
    overview_metrics: List[Metric] = []
    removed_metrics: List[Metric] = []


class RemoveStatRequest(BaseModel):
    metric_id: str
    section: Section


class AddStatRequest(BaseModel):
    metric: Metric
    section: Section


def _dump(metrics: List[Metric]) -> List[dict]:
    return [m.model_dump(exclude_none=True) for m in metrics]


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@router.get("")
def get_dashboard(user: Dict[str, Any] = Depends(require_user)):
    try:
        return dashboard_service.load_config(user.get("id"), user.get("token"))
    except Exception:
        logger.exception("Erreur get_dashboard")
        raise HTTPException(status_code=500, detail="Impossible de charger le tableau de bord")


@router.put("")
def save_dashboard(payload: DashboardConfigIn, user: Dict[str, Any] = Depends(require_user)):
    try:
        return dashboard_service.save_config(
            user.get("id"),
            _dump(payload.today_metrics),
            _dump(payload.overview_metrics),
            _dump(payload.removed_metrics),
            user.get("token"),
        )
    except Exception:
        logger.exception("Erreur save_dashboard")
        raise HTTPException(status_code=500, detail="Impossible d'enregistrer le tableau de bord")


@router.get("/metrics")
def get_metrics(
    start: Optional[datetime] = Query(default=None),
    end: Optional[datetime] = Query(default=None),
    user: Dict[str, Any] = Depends(require_user),
):
    try:
        return dashboard_service.load_metrics(user.get("id"), user.get("token"), _aware(start), _aware(end))
    except FormValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Erreur get_metrics")
        raise HTTPException(status_code=500, detail="Impossible de charger les métriques")


@router.post("/stats/remove")
def remove_stat(payload: RemoveStatRequest, user: Dict[str, Any] = Depends(require_user)):
    try:
        return dashboard_service.remove_stat(user.get("id"), payload.metric_id, payload.section, user.get("token"))
    except Exception:
        logger.exception("Erreur remove_stat")
        raise HTTPException(status_code=500, detail="Impossible de retirer la statistique")


@router.post("/stats/add")
def add_stat(payload: AddStatRequest, user: Dict[str, Any] = Depends(require_user)):
    try:
        return dashboard_service.add_stat(
            user.get("id"), payload.metric.model_dump(exclude_none=True), payload.section, user.get("token")
        )
    except Exception:
        logger.exception("Erreur add_stat")
        raise HTTPException(status_code=500, detail="Impossible d'ajouter la statistique")
