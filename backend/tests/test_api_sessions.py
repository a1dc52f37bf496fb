from datetime import datetime, timezone

from worktime.models import ActiveSession, AuditLog, CompletedSession

from conftest import add_completed

API = "/api/v1"


def test_employee_starts_and_stops_own_session(client, headers, clock, db):
    started = client.post(f"{API}/active-sessions", json={"project_id": "P1"}, headers=headers["employee"])
    assert started.status_code == 201
    body = started.json()
    assert body["user_id"] == "U1"
    assert body["project_name"] == "Web Redesign"
    assert body["cost_center_name"] == "Vývoj"
    assert body["elapsed_formatted"] == "00:00:00"

    clock.advance(minutes=12, seconds=5)
    listing = client.get(f"{API}/active-sessions", headers=headers["employee"]).json()
    assert listing[0]["elapsed_seconds"] == 12 * 60 + 5
    assert listing[0]["elapsed_formatted"] == "00:12:05"

    stopped = client.delete(f"{API}/active-sessions/U1", headers=headers["employee"])
    assert stopped.status_code == 200
    assert stopped.json()["duration_minutes"] == 12
    assert stopped.json()["duration_formatted"] == "0h 12m"

    actions = sorted(a for (a,) in db.query(AuditLog.action).all())
    assert actions == ["session_started", "session_stopped"]


def test_second_start_conflicts(client, headers):
    assert client.post(f"{API}/active-sessions", json={"project_id": "P1"}, headers=headers["employee"]).status_code == 201
    again = client.post(f"{API}/active-sessions", json={"project_id": "P1"}, headers=headers["employee"])
    assert again.status_code == 409
    assert again.json()["detail"]["code"] == "SESSION_ALREADY_ACTIVE"


def test_employee_cannot_act_for_others(client, headers, db):
    response = client.post(f"{API}/active-sessions", json={"user_id": "U2", "project_id": "P1"}, headers=headers["employee"])
    assert response.status_code == 403
    assert db.query(ActiveSession).count() == 0


def test_manager_starts_and_stops_for_employee(client, headers):
    started = client.post(f"{API}/active-sessions", json={"user_id": "U2", "project_id": "P1"}, headers=headers["manager"])
    assert started.status_code == 201
    assert client.delete(f"{API}/active-sessions/U2", headers=headers["manager"]).status_code == 200


def test_stop_without_session_is_not_found(client, headers):
    response = client.delete(f"{API}/active-sessions/U1", headers=headers["employee"])
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "NO_ACTIVE_SESSION"


def test_unknown_project_and_manual_rules(client, headers):
    unknown = client.post(f"{API}/active-sessions", json={"project_id": "nope"}, headers=headers["employee"])
    assert unknown.status_code == 404
    assert unknown.json()["detail"]["code"] == "UNKNOWN_PROJECT"

    manual = client.post(f"{API}/active-sessions", json={"project_id": "P1", "trigger": "manual"}, headers=headers["employee"])
    assert manual.status_code == 400
    assert manual.json()["detail"]["code"] == "PROJECT_NOT_SELECTABLE"

    bad_trigger = client.post(f"{API}/active-sessions", json={"project_id": "P1", "trigger": "remote"}, headers=headers["employee"])
    assert bad_trigger.status_code == 422


def test_active_sessions_are_scoped(client, headers, session_engine):
    session_engine.start_session("U1", "P1")
    session_engine.start_session("U4", "P2")
    assert {s["user_id"] for s in client.get(f"{API}/active-sessions", headers=headers["admin"]).json()} == {"U1", "U4"}
    assert {s["user_id"] for s in client.get(f"{API}/active-sessions", headers=headers["manager"]).json()} == {"U1"}


def test_post_sessions_closes_the_running_session(client, headers, session_engine, clock, db):
    session_engine.start_session("U2", "P1")
    clock.advance(minutes=90)
    response = client.post(f"{API}/sessions", json={"user_id": "U2"}, headers=headers["manager"])
    assert response.status_code == 201
    assert response.json()["duration_formatted"] == "1h 30m"
    db.expire_all()
    assert db.query(ActiveSession).count() == 0
    assert db.query(CompletedSession).count() == 1

    assert client.post(f"{API}/sessions", json={"user_id": "U2"}, headers=headers["manager"]).status_code == 404


def test_completed_sessions_listing(client, headers, seeded, db):
    add_completed(db, seeded.employee, seeded.p1, datetime(2024, 3, 1, 9, tzinfo=timezone.utc), 60)
    add_completed(db, seeded.picker, seeded.p1, datetime(2024, 3, 2, 9, tzinfo=timezone.utc), 30)
    add_completed(db, seeded.outsider, seeded.p2, datetime(2024, 3, 3, 9, tzinfo=timezone.utc), 45)

    admin_view = client.get(f"{API}/sessions", headers=headers["admin"]).json()
    assert [s["duration_minutes"] for s in admin_view] == [45, 30, 60]
    assert admin_view[0]["timestamp"].startswith("2024-03-03T09:00:00")

    manager_view = client.get(f"{API}/sessions", headers=headers["manager"]).json()
    assert {s["project_id"] for s in manager_view} == {"P1"}

    windowed = client.get(f"{API}/sessions", params={"start_date": "2024-03-02", "end_date": "2024-03-02"}, headers=headers["admin"]).json()
    assert [s["employee_id"] for s in windowed] == ["U2"]

    own = client.get(f"{API}/sessions", headers=headers["employee"]).json()
    assert [s["employee_id"] for s in own] == ["U1"]


def test_sessions_export_csv(client, headers, seeded, db):
    add_completed(db, seeded.employee, seeded.p1, datetime(2024, 3, 1, 9, 15, tzinfo=timezone.utc), 135)

    response = client.get(f"{API}/sessions/export", headers=headers["manager"])
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=\"report_" in response.headers["content-disposition"]

    text = response.content.decode("utf-8")
    assert text.startswith("\ufeff")
    lines = text.lstrip("\ufeff").splitlines()
    assert lines[0].startswith("Dátum;Čas;ID Zamestnanca")
    assert lines[1] == "01.03.2024;09:15:00;U1;John Doe;P1;Web Redesign;135;2h 15m"


def test_export_requires_permission(client, headers):
    assert client.get(f"{API}/sessions/export", headers=headers["employee"]).status_code == 403


def test_initial_data(client, headers, session_engine, seeded, db):
    session_engine.start_session("U1", "P1")
    add_completed(db, seeded.outsider, seeded.p2, datetime(2024, 3, 3, 9, tzinfo=timezone.utc), 45)

    data = client.get(f"{API}/initial-data", headers=headers["manager"]).json()
    assert {p["id"] for p in data["projects"]} == {"P1", "P3"}
    assert len(data["cost_centers"]) == 2
    assert [s["user_id"] for s in data["active_sessions"]] == ["U1"]
    assert data["completed_sessions"] == []
    assert any(u["id"] == "U2" for u in data["users"])

    admin_data = client.get(f"{API}/initial-data", headers=headers["admin"]).json()
    assert len(admin_data["completed_sessions"]) == 1

    assert client.get(f"{API}/initial-data", headers=headers["employee"]).status_code == 403


def test_own_history_includes_projects_outside_cost_centers(client, headers, seeded, db):
    # U1 belongs to cost center 1 only; P2 sits in cost center 2
    add_completed(db, seeded.employee, seeded.p2, datetime(2024, 3, 1, 9, tzinfo=timezone.utc), 40)
    add_completed(db, seeded.employee, seeded.p1, datetime(2024, 3, 2, 9, tzinfo=timezone.utc), 20)

    own = client.get(f"{API}/sessions", headers=headers["employee"]).json()
    assert [s["project_id"] for s in own] == ["P1", "P2"]

    manager_view = client.get(f"{API}/sessions", headers=headers["manager"]).json()
    assert [s["project_id"] for s in manager_view] == ["P1"]
