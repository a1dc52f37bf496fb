from worktime.api.v1.endpoints import users as users_endpoint
from worktime.models import ActiveSession, AuditLog, CompletedSession, Project, User

from conftest import token_headers

API = "/api/v1"


# Users

def test_admin_creates_user_with_generated_id(client, headers, db):
    response = client.post(f"{API}/users", json={
        "name": "New Hire",
        "username": "newbie",
        "password": "secret",
        "cost_center_ids": [1, 2],
    }, headers=headers["admin"])
    assert response.status_code == 201
    data = response.json()
    assert data["id"].startswith("user")
    assert data["role"] == "employee"
    assert data["cost_center_ids"] == [1, 2]
    assert "password" not in data and "hashed_password" not in data
    assert db.query(AuditLog).filter_by(action="user_created").count() == 1


def test_duplicate_username_is_conflict(client, headers):
    response = client.post(f"{API}/users", json={"name": "X", "username": "john", "password": "pw"}, headers=headers["admin"])
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "DUPLICATE_USERNAME"


def test_duplicate_user_id_is_conflict(client, headers):
    response = client.post(f"{API}/users", json={"id": "U1", "name": "X", "username": "x", "password": "pw"}, headers=headers["admin"])
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "ALREADY_EXISTS"


def test_unknown_cost_center_is_rejected(client, headers):
    response = client.post(f"{API}/users", json={"name": "X", "username": "x", "password": "pw", "cost_center_ids": [99]}, headers=headers["admin"])
    assert response.status_code == 404


def test_update_user_keeps_password_when_blank(client, headers, db):
    old_hash = db.get(User, "U1").hashed_password
    response = client.put(f"{API}/users/U1", json={"name": "John Q", "password": ""}, headers=headers["admin"])
    assert response.status_code == 200
    assert response.json()["name"] == "John Q"
    db.expire_all()
    assert db.get(User, "U1").hashed_password == old_hash

    login = client.post(f"{API}/login", json={"username": "john", "password": "password123"})
    assert login.status_code == 200


def test_update_user_password_and_cost_centers(client, headers):
    response = client.put(f"{API}/users/U1", json={"password": "fresh", "cost_center_ids": [2], "role": "manager"}, headers=headers["admin"])
    assert response.status_code == 200
    assert response.json()["cost_center_ids"] == [2]
    assert response.json()["role"] == "manager"
    assert client.post(f"{API}/login", json={"username": "john", "password": "fresh"}).status_code == 200


def test_update_user_to_taken_username(client, headers):
    response = client.put(f"{API}/users/U1", json={"username": "mike"}, headers=headers["admin"])
    assert response.status_code == 409


def test_delete_user_cascades_sessions(client, headers, session_engine, clock, db):
    session_engine.start_session("U1", "P1")
    clock.advance(minutes=5)
    session_engine.stop_session("U1")
    session_engine.start_session("U1", "P1")

    response = client.delete(f"{API}/users/U1", headers=headers["admin"])
    assert response.status_code == 204
    db.expire_all()
    assert db.get(User, "U1") is None
    assert db.query(ActiveSession).count() == 0
    assert db.query(CompletedSession).count() == 0


def test_user_lookup_for_badges(client, headers):
    assert client.get(f"{API}/users/U1", headers=headers["manager"]).json()["name"] == "John Doe"
    assert client.get(f"{API}/users/ghost", headers=headers["manager"]).status_code == 404


def test_employees_cannot_manage_users(client, headers):
    assert client.get(f"{API}/users", headers=headers["employee"]).status_code == 403
    response = client.post(f"{API}/users", json={"name": "X", "username": "x", "password": "pw"}, headers=headers["manager"])
    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "FORBIDDEN"


def test_blocked_user_token_is_rejected(client, seeded):
    response = client.get(f"{API}/projects", headers=token_headers(seeded.blocked))
    assert response.status_code == 403


# Projects

def test_project_listing_is_scoped(client, headers):
    admin_ids = {p["id"] for p in client.get(f"{API}/projects", headers=headers["admin"]).json()}
    manager_ids = {p["id"] for p in client.get(f"{API}/projects", headers=headers["manager"]).json()}
    outsider_ids = {p["id"] for p in client.get(f"{API}/projects", headers=headers["outsider"]).json()}
    assert admin_ids == {"P1", "P2", "P3"}
    assert manager_ids == {"P1", "P3"}
    assert outsider_ids == {"P2"}

    open_only = client.get(f"{API}/projects", params={"include_closed": False}, headers=headers["employee"]).json()
    assert [p["id"] for p in open_only] == ["P1"]
    assert open_only[0]["cost_center_name"] == "Vývoj"


def test_project_outside_scope_is_hidden(client, headers):
    assert client.get(f"{API}/projects/P2", headers=headers["manager"]).status_code == 404
    assert client.get(f"{API}/projects/P2", headers=headers["admin"]).status_code == 200


def test_manager_creates_project_in_own_cost_center(client, headers, db):
    response = client.post(f"{API}/projects", json={
        "name": "Intranet",
        "budget": 3000,
        "estimated_hours": 40,
        "deadline": "2024-09-30",
        "cost_center_id": 1,
    }, headers=headers["manager"])
    assert response.status_code == 201
    data = response.json()
    assert data["id"].startswith("proj")
    assert data["closed"] is False
    assert data["budget"] == 3000

    foreign = client.post(f"{API}/projects", json={"name": "Ads", "cost_center_id": 2}, headers=headers["manager"])
    assert foreign.status_code == 403


def test_project_validation(client, headers):
    negative = client.post(f"{API}/projects", json={"name": "X", "budget": -1}, headers=headers["admin"])
    assert negative.status_code == 422
    zero_hours = client.post(f"{API}/projects", json={"name": "X", "estimated_hours": 0}, headers=headers["admin"])
    assert zero_hours.status_code == 422
    duplicate = client.post(f"{API}/projects", json={"id": "P1", "name": "X"}, headers=headers["admin"])
    assert duplicate.status_code == 409


def test_toggle_status(client, headers):
    response = client.put(f"{API}/projects/P1/toggle-status", headers=headers["manager"])
    assert response.status_code == 200
    assert response.json()["closed"] is True

    blocked = client.post(f"{API}/active-sessions", json={"project_id": "P1"}, headers=headers["employee"])
    assert blocked.status_code == 409
    assert blocked.json()["detail"]["code"] == "PROJECT_CLOSED"

    reopened = client.put(f"{API}/projects/P1/toggle-status", headers=headers["manager"])
    assert reopened.json()["closed"] is False


def test_update_project_keeps_session_snapshots(client, headers, session_engine, db):
    session_engine.start_session("U1", "P1")
    response = client.put(f"{API}/projects/P1", json={"name": "Web Relaunch", "budget": 1200}, headers=headers["admin"])
    assert response.status_code == 200
    assert response.json()["name"] == "Web Relaunch"
    db.expire_all()
    assert db.query(ActiveSession).one().project_name == "Web Redesign"


def test_employees_cannot_edit_projects(client, headers):
    assert client.put(f"{API}/projects/P1", json={"name": "X"}, headers=headers["employee"]).status_code == 403
    assert client.delete(f"{API}/projects/P1", headers=headers["employee"]).status_code == 403


def test_delete_project(client, headers, db):
    assert client.delete(f"{API}/projects/P3", headers=headers["admin"]).status_code == 204
    db.expire_all()
    assert db.get(Project, "P3") is None


# Cost centers

def test_cost_center_crud(client, headers, db):
    created = client.post(f"{API}/cost-centers", json={"name": "Support"}, headers=headers["admin"])
    assert created.status_code == 201
    center_id = created.json()["id"]

    assert client.post(f"{API}/cost-centers", json={"name": "Support"}, headers=headers["admin"]).status_code == 409

    renamed = client.put(f"{API}/cost-centers/{center_id}", json={"name": "Helpdesk"}, headers=headers["admin"])
    assert renamed.json()["name"] == "Helpdesk"

    names = [c["name"] for c in client.get(f"{API}/cost-centers", headers=headers["manager"]).json()]
    assert "Helpdesk" in names

    assert client.delete(f"{API}/cost-centers/{center_id}", headers=headers["admin"]).status_code == 204
    assert client.delete(f"{API}/cost-centers/{center_id}", headers=headers["admin"]).status_code == 404


def test_deleting_cost_center_detaches_projects(client, headers, db):
    assert client.delete(f"{API}/cost-centers/2", headers=headers["admin"]).status_code == 204
    db.expire_all()
    assert db.get(Project, "P2").cost_center_id is None
    assert db.get(User, "U4").cost_center_ids == []


def test_managers_cannot_edit_cost_centers(client, headers):
    assert client.post(f"{API}/cost-centers", json={"name": "X"}, headers=headers["manager"]).status_code == 403
    assert client.get(f"{API}/cost-centers", headers=headers["employee"]).status_code == 403


def test_username_race_is_a_conflict_not_a_crash(client, headers, monkeypatch):
    # Let the pre-check miss the clash once so the unique constraint decides
    checked = []
    real_check = users_endpoint._username_taken

    def racing_check(db, username, exclude_id=None):
        checked.append(username)
        return False if len(checked) == 1 else real_check(db, username, exclude_id)

    monkeypatch.setattr(users_endpoint, "_username_taken", racing_check)
    response = client.post(f"{API}/users", json={"name": "X", "username": "john", "password": "pw"}, headers=headers["admin"])
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "DUPLICATE_USERNAME"

    checked.clear()
    renamed = client.put(f"{API}/users/U2", json={"username": "john"}, headers=headers["admin"])
    assert renamed.status_code == 409
    assert renamed.json()["detail"]["code"] == "DUPLICATE_USERNAME"
