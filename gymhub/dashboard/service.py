"""Couche service du tableau de bord.
Rôles:
- Configuration des cartes (sections today / overview, cartes retirées), créée par défaut au premier accès.
- Valeurs des métriques via la RPC get_gym_metrics, pour aujourd'hui et pour une période.
"""
import copy
import logging
from datetime import datetime, time, timezone
from typing import Any, Dict, List, Optional, Tuple

from gymhub.dashboard import repository
from gymhub.validation.forms import FormValidationError, add_interval

logger = logging.getLogger(__name__)

SECTIONS = ("today", "overview")

DEFAULT_TODAY_METRICS: List[Dict[str, Any]] = [
    {"id": "checkins", "title": "Check-ins", "value": "0"},
    {"id": "active-members", "title": "Active members", "value": "0"},
    {"id": "new-members", "title": "New members", "value": "0"},
    {"id": "retention-rate", "title": "Retention rate", "value": "0%"},
]

DEFAULT_OVERVIEW_METRICS: List[Dict[str, Any]] = [
    {"id": "checkins-overview", "title": "Check-ins", "value": "0", "change": {"value": 0, "isPositive": True}},
    {"id": "active-members-overview", "title": "Active members", "value": "0", "change": {"value": 0, "isPositive": True}},
    {"id": "new-members-overview", "title": "New members", "value": "0", "change": {"value": 0, "isPositive": True}},
    {"id": "retention-rate-overview", "title": "Retention rate", "value": "0%", "change": {"value": 0, "isPositive": True}},
]

# Clé renvoyée par la RPC -> identifiant de carte (sans le suffixe de section)
RPC_METRIC_KEYS = {
    "checkins": "checkins",
    "active_members": "active-members",
    "new_members": "new-members",
    "retention_rate": "retention-rate",
}
PERCENT_METRICS = frozenset({"retention-rate"})


def default_config(gym_id: str) -> Dict[str, Any]:
    return {
        "gym_id": gym_id,
        "today_metrics": copy.deepcopy(DEFAULT_TODAY_METRICS),
        "overview_metrics": copy.deepcopy(DEFAULT_OVERVIEW_METRICS),
        "removed_metrics": [],
    }


def load_config(gym_id: str, user_token: str) -> Dict[str, Any]:
    """Configuration du gérant; crée (upsert) la configuration par défaut si absente."""
    data = repository.get_config(gym_id, user_token)
    if not data:
        config = default_config(gym_id)
        repository.upsert_config(config, user_token)
        logger.info("Configuration du tableau de bord créée pour gym_id=%s", gym_id)
        return config
    return {
        "gym_id": gym_id,
        "today_metrics": data.get("today_metrics") or [],
        "overview_metrics": data.get("overview_metrics") or [],
        "removed_metrics": data.get("removed_metrics") or [],
    }


def save_config(
    gym_id: str,
    today_metrics: List[dict],
    overview_metrics: List[dict],
    removed_metrics: List[dict],
    user_token: str,
) -> Dict[str, Any]:
    config = {
        "gym_id": gym_id,
        "today_metrics": today_metrics,
        "overview_metrics": overview_metrics,
        "removed_metrics": removed_metrics,
    }
    repository.upsert_config(config, user_token)
    return config


def _section_key(section: str) -> str:
    if section not in SECTIONS:
        raise FormValidationError(f"Section inconnue: {section}")
    return f"{section}_metrics"


def remove_stat(gym_id: str, metric_id: str, section: str, user_token: str) -> Dict[str, Any]:
    """Retire une carte de la section et la range dans removed_metrics. Sans effet si l'id est absent."""
    key = _section_key(section)
    config = load_config(gym_id, user_token)
    metrics = config[key]
    removed = next((m for m in metrics if m.get("id") == metric_id), None)
    if removed is None:
        return config
    config[key] = [m for m in metrics if m.get("id") != metric_id]
    config["removed_metrics"] = config["removed_metrics"] + [removed]
    return save_config(
        gym_id, config["today_metrics"], config["overview_metrics"], config["removed_metrics"], user_token
    )


def add_stat(gym_id: str, metric: Dict[str, Any], section: str, user_token: str) -> Dict[str, Any]:
    """Ajoute une carte en fin de section et la retire de removed_metrics."""
    key = _section_key(section)
    config = load_config(gym_id, user_token)
    metric_id = metric.get("id")
    config["removed_metrics"] = [m for m in config["removed_metrics"] if m.get("id") != metric_id]
    config[key] = config[key] + [metric]
    return save_config(
        gym_id, config["today_metrics"], config["overview_metrics"], config["removed_metrics"], user_token
    )


def today_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Début (00:00) et fin (23:59:59.999) de la journée de `now`."""
    now = now or datetime.now(timezone.utc)
    start = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)
    end = datetime.combine(now.date(), time(23, 59, 59, 999000), tzinfo=now.tzinfo)
    return start, end


def default_range(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Trois derniers mois jusqu'à maintenant."""
    now = now or datetime.now(timezone.utc)
    return add_interval(now, "month", -3), now


def _first_row(data: Any) -> Dict[str, Any]:
    if isinstance(data, list):
        return data[0] if data and isinstance(data[0], dict) else {}
    return data if isinstance(data, dict) else {}


def apply_metric_values(metrics: List[dict], data: Any, suffix: str = "") -> List[dict]:
    """
    Reporte les valeurs de la RPC sur les cartes dont l'id correspond.
    - Les cartes sans valeur renvoyée sont conservées telles quelles.
    - '<clé>_change' (si présent) alimente change {value, isPositive}.
    """
    row = _first_row(data)
    by_id: Dict[str, Tuple[Any, Any]] = {}
    for rpc_key, metric_id in RPC_METRIC_KEYS.items():
        if rpc_key in row and row[rpc_key] is not None:
            by_id[metric_id + suffix] = (row[rpc_key], row.get(f"{rpc_key}_change"))

    updated = []
    for metric in metrics:
        metric = dict(metric)
        hit = by_id.get(metric.get("id"))
        if hit is not None:
            value, change = hit
            base_id = metric["id"][: len(metric["id"]) - len(suffix)] if suffix else metric["id"]
            metric["value"] = f"{value}%" if base_id in PERCENT_METRICS else str(value)
            if change is not None:
                metric["change"] = {"value": abs(change), "isPositive": change >= 0}
        updated.append(metric)
    return updated


def load_metrics(
    gym_id: str,
    user_token: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Valeurs des cartes 'today' (journée en cours) et 'overview' (période, 3 derniers mois par défaut).
    Lève FormValidationError si start > end.
    """
    if start is None or end is None:
        default_start, default_end = default_range(now)
        start = start or default_start
        end = end or default_end
    if start > end:
        raise FormValidationError("La date de début doit précéder la date de fin")

    config = load_config(gym_id, user_token)
    day_start, day_end = today_bounds(now)
    today_data = repository.get_gym_metrics(gym_id, day_start.isoformat(), day_end.isoformat(), user_token)
    overview_data = repository.get_gym_metrics(gym_id, start.isoformat(), end.isoformat(), user_token)
    return {
        "range": {"start": start.isoformat(), "end": end.isoformat()},
        "today_metrics": apply_metric_values(config["today_metrics"], today_data),
        "overview_metrics": apply_metric_values(config["overview_metrics"], overview_data, suffix="-overview"),
        "removed_metrics": config["removed_metrics"],
    }
