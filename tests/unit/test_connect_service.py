import pytest
from gymhub.connect import service as svc


def test_get_account_info_without_account_raises_not_found(monkeypatch):
    monkeypatch.setattr(svc.repository, "get_stripe_account_id", lambda user_id: None)
    with pytest.raises(svc.StripeAccountNotFound) as exc:
        svc.get_account_info("gym-1")
    assert str(exc.value) == "Compte Stripe introuvable"


def test_get_account_info_returns_session_and_account(monkeypatch):
    calls = {}
    monkeypatch.setattr(svc.repository, "get_stripe_account_id", lambda user_id: "acct_1")

    def fake_session(account_id):
        calls["session"] = account_id
        return {"client_secret": "acs_1", "components": {"account_onboarding": {"enabled": True}}}

    monkeypatch.setattr(svc.stripe_client, "create_account_session", fake_session)
    monkeypatch.setattr(svc.stripe_client, "retrieve_account", lambda account_id: {"id": account_id})

    data = svc.get_account_info("gym-1")
    assert calls["session"] == "acct_1"
    assert data["clientSecret"] == "acs_1"
    assert data["stripeAccountId"] == "acct_1"
    assert data["account"] == {"id": "acct_1"}
    assert "account_onboarding" in data["components"]


@pytest.mark.parametrize("record", [None, {}, {"id": "u1"}, {"email": "a@b.c"}])
def test_handle_signup_record_invalid_payload(record):
    with pytest.raises(ValueError):
        svc.handle_signup_record(record)


def test_handle_signup_record_creates_and_stores_account(monkeypatch):
    stored = {}
    monkeypatch.setattr(svc.stripe_client, "create_express_account", lambda email, user_id: {"id": "acct_new"})
    monkeypatch.setattr(svc.repository, "set_stripe_account_id", lambda uid, aid: stored.update({uid: aid}))

    res = svc.handle_signup_record({"id": "u1", "email": "owner@example.com"})
    assert res == {"connectAccountId": "acct_new"}
    assert stored == {"u1": "acct_new"}


def test_profile_update_failure_is_reported(monkeypatch):
    monkeypatch.setattr(svc.stripe_client, "create_express_account", lambda email, user_id: {"id": "acct_new"})

    def boom(uid, aid):
        raise RuntimeError("db down")

    monkeypatch.setattr(svc.repository, "set_stripe_account_id", boom)
    with pytest.raises(svc.ProfileUpdateError):
        svc.create_connect_account("u1", "owner@example.com")


def test_create_onboarding_link_reuses_existing_account(monkeypatch):
    monkeypatch.setattr(svc.repository, "get_stripe_account_id", lambda user_id: "acct_1")
    created = []
    monkeypatch.setattr(svc, "create_connect_account", lambda *a: created.append(a))

    def fake_link(account_id, refresh_url, return_url):
        assert account_id == "acct_1"
        return {"url": "https://connect.stripe.com/setup/e/acct_1"}

    monkeypatch.setattr(svc.stripe_client, "create_account_link", fake_link)
    assert svc.create_onboarding_link("gym-1", "owner@example.com") == {"url": "https://connect.stripe.com/setup/e/acct_1"}
    assert created == []


def test_create_onboarding_link_creates_missing_account(monkeypatch):
    monkeypatch.setattr(svc.repository, "get_stripe_account_id", lambda user_id: None)
    monkeypatch.setattr(svc, "create_connect_account", lambda user_id, email: "acct_new")
    monkeypatch.setattr(
        svc.stripe_client, "create_account_link",
        lambda account_id, refresh_url, return_url: {"url": f"https://connect.stripe.com/{account_id}"},
    )
    assert svc.create_onboarding_link("gym-1", "owner@example.com")["url"].endswith("acct_new")


def test_create_onboarding_link_requires_email_for_new_account(monkeypatch):
    monkeypatch.setattr(svc.repository, "get_stripe_account_id", lambda user_id: None)
    with pytest.raises(ValueError):
        svc.create_onboarding_link("gym-1", None)
