import pytest
from gymhub.notes import service as svc


@pytest.fixture
def member_exists(monkeypatch):
    monkeypatch.setattr(svc.members_repository, "get_member", lambda mid, gid, tok: {"id": mid, "gym_id": gid})


def test_add_note_also_logs_activity(monkeypatch, member_exists):
    notes, activities = [], []
    monkeypatch.setattr(svc.repository, "insert_note", lambda row, tok: notes.append(row) or row)
    monkeypatch.setattr(svc.repository, "insert_activity", lambda row, tok: activities.append(row) or row)

    res = svc.add_note("m1", "gym-1", "Knee injury, avoid squats", "tok", category="Health")
    assert notes == [{"member_id": "m1", "content": "Knee injury, avoid squats", "category": "Health", "created_by": "gym-1"}]
    assert activities == [{
        "member_id": "m1",
        "type": "Note",
        "description": "Added a note in Health",
        "category": "Health",
        "metadata": {"note_content": "Knee injury, avoid squats"},
    }]
    assert res["note"]["category"] == "Health"


def test_add_note_defaults_category(monkeypatch, member_exists):
    monkeypatch.setattr(svc.repository, "insert_note", lambda row, tok: row)
    monkeypatch.setattr(svc.repository, "insert_activity", lambda row, tok: row)
    res = svc.add_note("m1", "gym-1", "Hello", "tok")
    assert res["activity"]["description"] == "Added a note in General"


def test_add_note_requires_member_of_gym(monkeypatch):
    monkeypatch.setattr(svc.members_repository, "get_member", lambda mid, gid, tok: None)
    inserted = []
    monkeypatch.setattr(svc.repository, "insert_note", lambda row, tok: inserted.append(row))
    with pytest.raises(svc.MemberNotFound):
        svc.add_note("m1", "other-gym", "x", "tok")
    assert inserted == []


def test_list_notes_and_activities_query_one_table_each(monkeypatch, member_exists):
    calls = []
    monkeypatch.setattr(svc.repository, "list_notes", lambda mid, tok: calls.append("notes") or [{"id": "n2"}, {"id": "n1"}])
    monkeypatch.setattr(svc.repository, "list_activities", lambda mid, tok: calls.append("activities") or [{"id": "a1"}])

    assert svc.list_notes("m1", "gym-1", "tok") == [{"id": "n2"}, {"id": "n1"}]
    assert calls == ["notes"]
    assert svc.list_activities("m1", "gym-1", "tok") == [{"id": "a1"}]
    assert calls == ["notes", "activities"]


def test_list_notes_requires_member_of_gym(monkeypatch):
    monkeypatch.setattr(svc.members_repository, "get_member", lambda mid, gid, tok: None)
    listed = []
    monkeypatch.setattr(svc.repository, "list_notes", lambda mid, tok: listed.append(mid))
    with pytest.raises(svc.MemberNotFound):
        svc.list_notes("m1", "other-gym", "tok")
    assert listed == []
