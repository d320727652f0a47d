from gymhub.dashboard import service as dashboard_service


def test_get_dashboard_config(client, monkeypatch):
    monkeypatch.setattr(dashboard_service, "load_config", lambda gid, tok: dashboard_service.default_config(gid))
    res = client.get("/api/v1/dashboard")
    assert res.status_code == 200
    assert len(res.json()["today_metrics"]) == 4


def test_metrics_inverted_range_is_400(client):
    res = client.get("/api/v1/dashboard/metrics?start=2024-05-01T00:00:00Z&end=2024-01-01T00:00:00Z")
    assert res.status_code == 400
    assert "date de début" in res.json()["detail"]


def test_metrics_passes_range(client, monkeypatch):
    captured = {}

    def fake_load(gym_id, token, start=None, end=None):
        captured.update(start=start, end=end)
        return {"today_metrics": [], "overview_metrics": [], "removed_metrics": []}

    monkeypatch.setattr(dashboard_service, "load_metrics", fake_load)
    res = client.get("/api/v1/dashboard/metrics?start=2024-01-01T00:00:00&end=2024-03-01T00:00:00")
    assert res.status_code == 200
    assert captured["start"].tzinfo is not None
    assert captured["end"].month == 3


def test_remove_and_add_stat_endpoints(client, monkeypatch):
    calls = []
    monkeypatch.setattr(
        dashboard_service, "remove_stat",
        lambda gid, mid, section, tok: calls.append(("remove", mid, section)) or {"ok": True},
    )
    monkeypatch.setattr(
        dashboard_service, "add_stat",
        lambda gid, metric, section, tok: calls.append(("add", metric["id"], section)) or {"ok": True},
    )
    assert client.post("/api/v1/dashboard/stats/remove", json={"metric_id": "checkins", "section": "today"}).status_code == 200
    res = client.post("/api/v1/dashboard/stats/add", json={
        "metric": {"id": "checkins", "title": "Check-ins", "value": "0"}, "section": "today",
    })
    assert res.status_code == 200
    assert calls == [("remove", "checkins", "today"), ("add", "checkins", "today")]
    assert client.post("/api/v1/dashboard/stats/remove", json={"metric_id": "x", "section": "weekly"}).status_code == 422


def test_save_dashboard(client, monkeypatch):
    saved = {}

    def fake_save(gid, today, overview, removed, tok):
        saved.update(today=today, overview=overview, removed=removed)
        return {"gym_id": gid, "today_metrics": today, "overview_metrics": overview, "removed_metrics": removed}

    monkeypatch.setattr(dashboard_service, "save_config", fake_save)
    res = client.put("/api/v1/dashboard", json={
        "today_metrics": [{"id": "checkins", "title": "Check-ins", "value": "0", "color": "blue"}],
    })
    assert res.status_code == 200
    assert saved["today"] == [{"id": "checkins", "title": "Check-ins", "value": "0", "color": "blue"}]
    assert saved["removed"] == []
