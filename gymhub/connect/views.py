# module gymhub.connect.views

"""Endpoints Stripe Connect.
- /functions/v1/get-stripe-account-info: session de compte pour les composants embarqués.
- /functions/v1/create-connect-account: création du compte Express (webhook d'inscription ou gérant).
- /api/v1/stripe/session: établit (avec retries) la session embarquée du gérant connecté.
- /api/v1/stripe/session/reinitialize: repart de zéro (après onboarding, ou après un échec).
Les fonctions répondent {"error": "..."} en cas d'échec (contrat des fonctions serverless).
"""
import logging
import secrets
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from gymhub import config
from gymhub.config import CONNECT_WEBHOOK_SECRET
from gymhub.connect import service as connect_service
from gymhub.connect import embedding
from gymhub.connect.embedding import ConnectContext, ConnectSession, ConnectSessionRegistry
from gymhub.utils.security import require_user, get_current_user

logger = logging.getLogger(__name__)

functions_router = APIRouter(prefix="/functions/v1", tags=["Functions"])
router = APIRouter(prefix="/api/v1/stripe", tags=["Stripe Connect API"])


def _error(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def get_connect_registry(request: Request) -> ConnectSessionRegistry:
    registry = getattr(request.app.state, "connect_sessions", None)
    if registry is None:
        registry = ConnectSessionRegistry()
        request.app.state.connect_sessions = registry
    return registry


@functions_router.get("/get-stripe-account-info")
async def get_stripe_account_info(user: Dict[str, Any] = Depends(require_user)):
    """Session de compte Stripe du gérant.
    - 200: {clientSecret, components, stripeAccountId, account}
    - 400: {"error": "Compte Stripe introuvable"} tant que le compte n'est pas provisionné
    - 400: {"error": <message Stripe>} pour toute autre erreur
    """
    try:
        return await run_in_threadpool(connect_service.get_account_info, user.get("id"))
    except connect_service.StripeAccountNotFound as e:
        return _error(str(e))
    except Exception as e:
        logger.exception("Erreur get_stripe_account_info")
        return _error(str(e))


def _is_signup_webhook(request: Request) -> bool:
    if not CONNECT_WEBHOOK_SECRET:
        return False
    auth_header = request.headers.get("Authorization", "")
    token = auth_header[7:].strip() if auth_header.startswith("Bearer ") else ""
    return bool(token) and secrets.compare_digest(token, CONNECT_WEBHOOK_SECRET)


@functions_router.post("/create-connect-account")
async def create_connect_account(request: Request):
    """Création du compte Connect Express.
    - Webhook d'inscription (Bearer CONNECT_WEBHOOK_SECRET, body {record: {id, email}}) -> {connectAccountId}
    - Gérant authentifié -> crée le compte si absent puis renvoie le lien d'onboarding {url}
    """
    try:
        body = await request.json()
    except ValueError:
        body = {}

    if isinstance(body, dict) and "record" in body:
        if not _is_signup_webhook(request):
            return _error("Non autorisé", status_code=401)
        try:
            result = await run_in_threadpool(connect_service.handle_signup_record, body.get("record"))
        except ValueError as e:
            return _error(str(e))
        except connect_service.ProfileUpdateError as e:
            return _error(str(e), status_code=500)
        except Exception:
            logger.exception("Erreur create_connect_account (webhook)")
            return _error("Erreur interne du serveur", status_code=500)
        return result

    user = get_current_user(request)
    try:
        return await run_in_threadpool(connect_service.create_onboarding_link, user.get("id"), user.get("email"))
    except ValueError as e:
        return _error(str(e))
    except Exception as e:
        logger.exception("Erreur create_connect_account (gérant)")
        return _error(str(e))


def _context_from_user(user: Dict[str, Any]) -> ConnectContext:
    return ConnectContext(user_id=user.get("id"), access_token=user.get("token"))


def _new_session(user: Dict[str, Any]) -> ConnectSession:
    # source lue à l'appel (patchable en tests)
    fetch = embedding.select_fetcher(config.CONNECT_SESSION_SOURCE)
    return ConnectSession(_context_from_user(user), fetch=fetch)


@router.api_route("/session", methods=["GET", "POST"])
async def get_embedded_session(request: Request, user: Dict[str, Any] = Depends(require_user)):
    """Retourne la session embarquée du gérant, en l'établissant au premier appel.
    - {loading, error, attempts, account, client: {publishableKey, clientSecret, appearance} | null}
    - Une session en échec reste en échec jusqu'à /reinitialize.
    """
    registry = get_connect_registry(request)
    session = registry.get(user.get("id"))
    if session is None:
        session = registry.replace(_new_session(user))
        await session.initialize()
    return await session.to_dict()


@router.post("/session/reinitialize")
async def reinitialize_embedded_session(request: Request, user: Dict[str, Any] = Depends(require_user)):
    """Efface l'état et relance le protocole depuis la première tentative."""
    registry = get_connect_registry(request)
    session = registry.replace(_new_session(user))
    await session.reinitialize()
    return await session.to_dict()
