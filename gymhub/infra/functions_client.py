"""
Invocation des fonctions serverless par nom (équivalent de supabase.functions.invoke).
- POST/GET JSON vers {FUNCTIONS_URL}/<nom> avec Authorization: Bearer <token utilisateur>
- Réponse 2xx: corps JSON retourné tel quel
- Réponse non-2xx: FunctionsHttpError portant le statut et le message {"error": ...} du corps
"""
import logging
from typing import Any, Dict, Optional

import httpx

from gymhub.config import FUNCTIONS_URL, FUNCTIONS_TIMEOUT, SUPABASE_ANON

logger = logging.getLogger(__name__)


class FunctionsHttpError(Exception):
    """Erreur HTTP renvoyée par une fonction (statut non-2xx)."""

    def __init__(self, name: str, status_code: int, error: str):
        super().__init__(f"{name}: {status_code} {error}")
        self.name = name
        self.status_code = status_code
        self.error = error


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"status {resp.status_code}"
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or body.get("message") or "")
    return str(body)


async def invoke_function(
    name: str,
    user_token: str,
    *,
    method: str = "POST",
    body: Optional[Dict[str, Any]] = None,
    base_url: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Any:
    """
    Appelle la fonction `name` au nom de l'utilisateur.
    - transport: injectable (httpx.MockTransport en tests)
    Lève FunctionsHttpError si la fonction répond hors 2xx.
    """
    url = f"{(base_url or FUNCTIONS_URL).rstrip('/')}/{name}"
    headers = {"Authorization": f"Bearer {user_token}"}
    if SUPABASE_ANON:
        headers["apikey"] = SUPABASE_ANON
    async with httpx.AsyncClient(timeout=FUNCTIONS_TIMEOUT, transport=transport) as client:
        if method.upper() == "GET":
            resp = await client.get(url, headers=headers)
        else:
            resp = await client.request(method.upper(), url, headers=headers, json=body or {})
    if not (200 <= resp.status_code < 300):
        error = _error_message(resp)
        logger.warning("functions.invoke %s failed status=%s error=%s", name, resp.status_code, error)
        raise FunctionsHttpError(name, resp.status_code, error)
    if not resp.content:
        return None
    return resp.json()
