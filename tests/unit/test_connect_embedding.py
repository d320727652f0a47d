import httpx
import pytest
from gymhub.connect import embedding
from gymhub.connect import service as connect_service
from gymhub.connect.embedding import (
    ConnectContext,
    ConnectSession,
    ConnectSessionRegistry,
    FetchStatus,
    SessionFetchResult,
)

CTX = ConnectContext(user_id="gym-1", access_token="tok")
SESSION_DATA = {"clientSecret": "acs_secret", "account": {"id": "acct_1"}, "stripeAccountId": "acct_1"}


class _ScriptedFetch:
    """Rejoue une liste de résultats, un par appel."""

    def __init__(self, results):
        self.results = list(results)
        self.calls = 0

    async def __call__(self, context):
        self.calls += 1
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class _RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def _session(fetch, sleep=None, **kwargs):
    return ConnectSession(CTX, fetch, publishable_key="pk_test", sleep=sleep or _RecordingSleep(), **kwargs)


def test_backoff_delay_is_capped():
    assert [embedding.backoff_delay(i) for i in range(5)] == [1.0, 2.0, 4.0, 8.0, 8.0]


@pytest.mark.asyncio
async def test_first_attempt_success_builds_client():
    fetch = _ScriptedFetch([SessionFetchResult.ok(SESSION_DATA)])
    sleep = _RecordingSleep()
    session = await _session(fetch, sleep).initialize()

    assert fetch.calls == 1
    assert sleep.delays == []
    assert session.is_ready
    assert session.loading is False
    assert session.error == ""
    assert session.account == {"id": "acct_1"}
    payload = await session.to_dict()
    assert payload["client"]["publishableKey"] == "pk_test"
    assert payload["client"]["clientSecret"] == "acs_secret"


@pytest.mark.asyncio
async def test_not_found_twice_then_success():
    not_found = SessionFetchResult.retryable(connect_service.STRIPE_ACCOUNT_NOT_FOUND)
    fetch = _ScriptedFetch([not_found, not_found, SessionFetchResult.ok(SESSION_DATA)])
    sleep = _RecordingSleep()
    session = await _session(fetch, sleep).initialize()

    assert fetch.calls == 3
    assert sleep.delays == [1.0, 2.0]
    assert session.is_ready
    assert session.error == ""


@pytest.mark.asyncio
async def test_not_found_every_time_exhausts_retries():
    not_found = SessionFetchResult.retryable(connect_service.STRIPE_ACCOUNT_NOT_FOUND)
    fetch = _ScriptedFetch([not_found] * 3)
    sleep = _RecordingSleep()
    session = await _session(fetch, sleep).initialize()

    assert fetch.calls == 3
    assert sleep.delays == [1.0, 2.0, 4.0]
    assert session.client is None
    assert session.error == embedding.RETRIES_EXHAUSTED_MESSAGE
    assert session.loading is False


@pytest.mark.asyncio
async def test_terminal_error_stops_immediately():
    fetch = _ScriptedFetch([SessionFetchResult.terminal("Invalid API Key")])
    sleep = _RecordingSleep()
    session = await _session(fetch, sleep).initialize()

    assert fetch.calls == 1
    assert sleep.delays == []
    assert session.error == embedding.INIT_FAILED_MESSAGE
    assert session.client is None


@pytest.mark.asyncio
async def test_empty_payload_is_no_data_error():
    fetch = _ScriptedFetch([SessionFetchResult.ok(None)])
    session = await _session(fetch).initialize()
    assert session.error == embedding.NO_DATA_MESSAGE
    assert session.client is None


@pytest.mark.asyncio
async def test_unexpected_exception_sets_generic_error():
    fetch = _ScriptedFetch([RuntimeError("boom")])
    session = await _session(fetch).initialize()
    assert session.error == embedding.UNEXPECTED_MESSAGE
    assert session.loading is False


@pytest.mark.asyncio
async def test_unauthenticated_context_is_inert():
    fetch = _ScriptedFetch([])
    session = ConnectSession(ConnectContext(), fetch, sleep=_RecordingSleep())
    assert session.loading is False
    await session.initialize()
    assert fetch.calls == 0
    assert session.client is None
    assert session.error == ""


@pytest.mark.asyncio
async def test_reinitialize_restarts_from_first_attempt():
    fetch = _ScriptedFetch([
        SessionFetchResult.terminal("boom"),
        SessionFetchResult.ok(SESSION_DATA),
    ])
    session = _session(fetch)
    await session.initialize()
    assert session.error == embedding.INIT_FAILED_MESSAGE

    await session.reinitialize()
    assert session.error == ""
    assert session.attempts == 1
    assert session.is_ready


@pytest.mark.asyncio
async def test_fetch_from_service_classifies(monkeypatch):
    def _missing(user_id):
        raise connect_service.StripeAccountNotFound()
    monkeypatch.setattr(connect_service, "get_account_info", _missing)
    assert (await embedding.fetch_from_service(CTX)).status is FetchStatus.RETRYABLE

    def _stripe_down(user_id):
        raise RuntimeError("stripe down")
    monkeypatch.setattr(connect_service, "get_account_info", _stripe_down)
    assert (await embedding.fetch_from_service(CTX)).status is FetchStatus.TERMINAL

    monkeypatch.setattr(connect_service, "get_account_info", lambda user_id: SESSION_DATA)
    result = await embedding.fetch_from_service(CTX)
    assert result.status is FetchStatus.OK
    assert result.data == SESSION_DATA


def _functions_transport(status_code, body):
    def handler(request: httpx.Request):
        assert request.url.path.endswith("/get-stripe-account-info")
        assert request.headers["Authorization"] == "Bearer tok"
        return httpx.Response(status_code, json=body)
    return httpx.MockTransport(handler)


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code, body, expected", [
    (200, SESSION_DATA, FetchStatus.OK),
    (400, {"error": "Compte Stripe introuvable"}, FetchStatus.RETRYABLE),
    (400, {"error": "No such account"}, FetchStatus.TERMINAL),
    (500, {"error": "Erreur interne du serveur"}, FetchStatus.TERMINAL),
])
async def test_fetch_from_functions_classifies(monkeypatch, status_code, body, expected):
    real_invoke = embedding.invoke_function

    async def _invoke(name, token, **kwargs):
        kwargs["transport"] = _functions_transport(status_code, body)
        kwargs["base_url"] = "https://functions.test/functions/v1"
        return await real_invoke(name, token, **kwargs)

    monkeypatch.setattr(embedding, "invoke_function", _invoke)
    result = await embedding.fetch_from_functions(CTX)
    assert result.status is expected


def test_registry_replace_and_discard():
    registry = ConnectSessionRegistry()
    first = registry.replace(_session(_ScriptedFetch([])))
    assert registry.get("gym-1") is first
    second = registry.replace(_session(_ScriptedFetch([])))
    assert registry.get("gym-1") is second
    assert len(registry) == 1
    registry.discard("gym-1")
    registry.discard(None)
    assert registry.get("gym-1") is None
    assert len(registry) == 0


@pytest.mark.parametrize("source, expected", [
    ("functions", "fetch_from_functions"),
    (" Functions ", "fetch_from_functions"),
    ("service", "fetch_from_service"),
    ("", "fetch_from_service"),
    (None, "fetch_from_service"),
])
def test_select_fetcher(source, expected):
    assert embedding.select_fetcher(source) is getattr(embedding, expected)
