"""
Établissement de la session Stripe Connect embarquée.

Juste après l'inscription, le compte Connect de la salle peut ne pas encore exister
(il est créé par le webhook d'inscription). La récupération du client secret est donc
retentée jusqu'à 3 fois avec un backoff exponentiel (1s, 2s, 4s, plafonné à 8s)
tant que la réponse est « compte introuvable ». Toute autre erreur est terminale.

La décision « retentable / terminale » est prise une seule fois, par la fonction de
récupération (fetch_from_service, fetch_from_functions), qui renvoie un
SessionFetchResult typé. La boucle ne fait qu'aiguiller sur ce statut.

Le contexte utilisateur (ConnectContext) est passé explicitement: aucun état global.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx
from starlette.concurrency import run_in_threadpool

from gymhub.config import STRIPE_PUBLISHABLE_KEY
from gymhub.connect import service as connect_service
from gymhub.infra.functions_client import FunctionsHttpError, invoke_function

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
BASE_DELAY_MS = 1000
MAX_DELAY_MS = 8000

# Messages affichés à l'utilisateur
INIT_FAILED_MESSAGE = "Échec de l'initialisation de Stripe. Veuillez réessayer plus tard."
NO_DATA_MESSAGE = "Aucune donnée reçue pour la session Stripe."
RETRIES_EXHAUSTED_MESSAGE = "Échec de l'initialisation de Stripe après plusieurs tentatives. Veuillez réessayer plus tard."
UNEXPECTED_MESSAGE = "Une erreur inattendue est survenue. Veuillez réessayer plus tard."

DEFAULT_APPEARANCE: Dict[str, Any] = {
    "overlays": "dialog",
    "variables": {"colorPrimary": "#625afa"},
}


def backoff_delay(attempt: int) -> float:
    """Délai (secondes) après la tentative `attempt` (0-indexée): min(1000 * 2^i, 8000) ms."""
    return min(BASE_DELAY_MS * (2 ** attempt), MAX_DELAY_MS) / 1000


class FetchStatus(str, Enum):
    OK = "ok"
    RETRYABLE = "retryable"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class SessionFetchResult:
    status: FetchStatus
    data: Optional[Dict[str, Any]] = None
    error: Optional[Any] = None

    @classmethod
    def ok(cls, data: Optional[Dict[str, Any]]) -> "SessionFetchResult":
        return cls(FetchStatus.OK, data=data)

    @classmethod
    def retryable(cls, error: Any) -> "SessionFetchResult":
        return cls(FetchStatus.RETRYABLE, error=error)

    @classmethod
    def terminal(cls, error: Any) -> "SessionFetchResult":
        return cls(FetchStatus.TERMINAL, error=error)


@dataclass(frozen=True)
class ConnectContext:
    """Identité de l'utilisateur courant, résolue par la couche auth."""
    user_id: Optional[str] = None
    access_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id and self.access_token)


SessionFetcher = Callable[[ConnectContext], Awaitable[SessionFetchResult]]
Sleeper = Callable[[float], Awaitable[Any]]


@dataclass
class EmbeddedConnectClient:
    """
    Poignée d'initialisation des composants Connect embarqués côté navigateur:
    clé publiable + callback renvoyant le client secret de la session.
    """
    publishable_key: str
    fetch_client_secret: Callable[[], Awaitable[Optional[str]]]
    appearance: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_APPEARANCE))

    async def to_dict(self) -> Dict[str, Any]:
        return {
            "publishableKey": self.publishable_key,
            "clientSecret": await self.fetch_client_secret(),
            "appearance": self.appearance,
        }


def is_account_not_found(message: Any) -> bool:
    return connect_service.STRIPE_ACCOUNT_NOT_FOUND in str(message or "")


async def fetch_from_service(context: ConnectContext) -> SessionFetchResult:
    """Récupération en processus (même service que la fonction get-stripe-account-info)."""
    try:
        data = await run_in_threadpool(connect_service.get_account_info, context.user_id)
    except connect_service.StripeAccountNotFound as e:
        return SessionFetchResult.retryable(e)
    except Exception as e:
        logger.warning("connect.embedding.fetch_from_service failed user_id=%s: %s", context.user_id, e)
        return SessionFetchResult.terminal(e)
    return SessionFetchResult.ok(data)


async def fetch_from_functions(context: ConnectContext) -> SessionFetchResult:
    """Récupération via la fonction serverless get-stripe-account-info (GET, sans corps)."""
    try:
        data = await invoke_function("get-stripe-account-info", context.access_token, method="GET")
    except FunctionsHttpError as e:
        if is_account_not_found(e.error):
            return SessionFetchResult.retryable(e)
        return SessionFetchResult.terminal(e)
    except httpx.HTTPError as e:
        return SessionFetchResult.terminal(e)
    return SessionFetchResult.ok(data)


def select_fetcher(source: Optional[str]) -> SessionFetcher:
    """'functions' -> fetch_from_functions; toute autre valeur -> fetch_from_service."""
    if (source or "").strip().lower() == "functions":
        return fetch_from_functions
    return fetch_from_service


class ConnectSession:
    """
    État de session Connect d'un utilisateur: loading, error, account, client.
    Un seul écrivain (le protocole), remplacé en bloc à chaque réinitialisation.
    """

    def __init__(
        self,
        context: ConnectContext,
        fetch: SessionFetcher = fetch_from_service,
        *,
        publishable_key: Optional[str] = None,
        sleep: Sleeper = asyncio.sleep,
        max_attempts: int = MAX_ATTEMPTS,
        appearance: Optional[Dict[str, Any]] = None,
    ):
        self.context = context
        self._fetch = fetch
        self._sleep = sleep
        self.publishable_key = publishable_key if publishable_key is not None else STRIPE_PUBLISHABLE_KEY
        self.max_attempts = max_attempts
        self.appearance = appearance or dict(DEFAULT_APPEARANCE)
        self.loading = context.is_authenticated
        self.error = ""
        self.account: Optional[Dict[str, Any]] = None
        self.client: Optional[EmbeddedConnectClient] = None
        self.attempts = 0

    @property
    def is_ready(self) -> bool:
        return self.client is not None

    def _establish(self, data: Dict[str, Any]) -> None:
        self.account = data.get("account")
        client_secret = data.get("clientSecret")

        async def _fetch_client_secret() -> Optional[str]:
            return client_secret

        self.client = EmbeddedConnectClient(
            publishable_key=self.publishable_key,
            fetch_client_secret=_fetch_client_secret,
            appearance=self.appearance,
        )

    async def initialize(self) -> "ConnectSession":
        """
        Exécute le protocole (tentatives 0..max_attempts-1).
        Inerte si l'utilisateur n'est pas authentifié.
        """
        if not self.context.is_authenticated:
            self.loading = False
            return self

        self.loading = True
        self.error = ""
        self.attempts = 0
        last_error: Any = None
        try:
            for attempt in range(self.max_attempts):
                self.attempts += 1
                result = await self._fetch(self.context)

                if result.status is FetchStatus.RETRYABLE:
                    last_error = result.error
                    delay = backoff_delay(attempt)
                    logger.info(
                        "Compte Stripe non provisionné (tentative %s/%s), nouvel essai dans %.0fs",
                        attempt + 1, self.max_attempts, delay,
                    )
                    await self._sleep(delay)
                    continue

                if result.status is FetchStatus.TERMINAL:
                    logger.error("Erreur lors de la récupération du client secret: %s", result.error)
                    self.error = INIT_FAILED_MESSAGE
                    return self

                if not result.data:
                    self.error = NO_DATA_MESSAGE
                    return self

                self._establish(result.data)
                return self

            logger.error("Toutes les tentatives ont échoué: %s", last_error)
            self.error = RETRIES_EXHAUSTED_MESSAGE
        except Exception:
            logger.exception("Erreur inattendue à l'initialisation de Stripe Connect")
            self.error = UNEXPECTED_MESSAGE
        finally:
            self.loading = False
        return self

    async def reinitialize(self) -> "ConnectSession":
        """Efface l'état local puis relance le protocole depuis la tentative 0."""
        self.client = None
        self.account = None
        self.error = ""
        return await self.initialize()

    async def to_dict(self) -> Dict[str, Any]:
        return {
            "loading": self.loading,
            "error": self.error,
            "attempts": self.attempts,
            "account": self.account,
            "client": await self.client.to_dict() if self.client else None,
        }


class ConnectSessionRegistry:
    """Sessions Connect par utilisateur (app.state), supprimées à la déconnexion."""

    def __init__(self):
        self._sessions: Dict[str, ConnectSession] = {}

    def get(self, user_id: str) -> Optional[ConnectSession]:
        return self._sessions.get(user_id)

    def replace(self, session: ConnectSession) -> ConnectSession:
        self._sessions[str(session.context.user_id)] = session
        return session

    def discard(self, user_id: Optional[str]) -> None:
        if user_id:
            self._sessions.pop(user_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
