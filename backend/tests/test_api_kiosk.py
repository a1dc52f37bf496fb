from worktime.models import ActiveSession, AuditLog

API = "/api/v1/kiosk"


def scan(client, payload, kiosk="front"):
    return client.post(f"{API}/{kiosk}/scan", json={"payload": payload})


def test_fresh_kiosk_is_logged_out(client, seeded):
    view = client.get(f"{API}/front").json()
    assert view["state"] == "logged_out"
    assert view["user"] is None
    assert view["access_token"] is None


def test_badge_then_project_starts_and_logs_employee_out(client, seeded, db):
    login = scan(client, "USER_ID:U1")
    assert login.status_code == 200
    assert login.json()["state"] == "logged_in"
    assert login.json()["user"]["name"] == "John Doe"
    assert login.json()["access_token"]

    started = scan(client, "PROJECT_ID:P1")
    assert started.status_code == 200
    body = started.json()
    assert body["state"] == "logged_out"
    assert body["started_session"]["project_name"] == "Web Redesign"
    assert body["user"] is None

    entry = db.query(AuditLog).filter_by(action="session_started").one()
    assert entry.user == "john"
    assert entry.details["trigger"] == "qr"


def test_project_scan_without_login(client, seeded, db):
    response = scan(client, "PROJECT_ID:P1")
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "LOGIN_REQUIRED"
    assert db.query(ActiveSession).count() == 0


def test_unrecognized_payload(client, seeded):
    response = scan(client, "WIFI:S:guest;;")
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "UNRECOGNIZED_QR_FORMAT"


def test_kiosks_are_independent(client, seeded):
    scan(client, "USER_ID:mgr1", kiosk="a")
    assert client.get(f"{API}/a").json()["state"] == "logged_in"
    assert client.get(f"{API}/b").json()["state"] == "logged_out"


def test_credentials_login_is_audited(client, seeded, db):
    ok = client.post(f"{API}/front/login", json={"username": "jane", "password": "jane-pw"})
    assert ok.status_code == 200
    assert ok.json()["state"] == "logged_in"

    bad = client.post(f"{API}/front/login", json={"username": "jane", "password": "nope"})
    assert bad.status_code == 401
    assert bad.json()["detail"]["code"] == "INVALID_CREDENTIALS"
    # A failed attempt keeps the previous login
    assert client.get(f"{API}/front").json()["user"]["id"] == "mgr1"

    actions = [a for (a,) in db.query(AuditLog.action).order_by(AuditLog.id).all()]
    assert actions == ["login_success", "login_failed"]


def test_manual_selection(client, seeded):
    scan(client, "USER_ID:U2")
    rejected = client.post(f"{API}/front/select-project", json={"project_id": "P2"})
    assert rejected.status_code == 400
    assert rejected.json()["detail"]["code"] == "PROJECT_NOT_SELECTABLE"

    started = client.post(f"{API}/front/select-project", json={"project_id": "P1"})
    assert started.status_code == 200
    assert started.json()["started_session"]["user_id"] == "U2"


def test_stop_confirmation_flow(client, seeded, session_engine, clock, db):
    session_engine.start_session("U1", "P1")
    clock.advance(minutes=75)

    prompt = scan(client, "USER_ID:U1").json()
    assert prompt["state"] == "awaiting_stop_confirmation"
    assert prompt["pending_session"]["elapsed_formatted"] == "01:15:00"
    assert prompt["access_token"] is None

    confirmed = client.post(f"{API}/front/confirm-stop")
    assert confirmed.status_code == 200
    body = confirmed.json()
    assert body["state"] == "logged_out"
    assert body["completed_session"]["duration_formatted"] == "1h 15m"
    assert db.query(AuditLog).filter_by(action="session_stopped").one().user == "john"

    again = client.post(f"{API}/front/confirm-stop")
    assert again.status_code == 400
    assert again.json()["detail"]["code"] == "NO_PENDING_STOP"


def test_cancel_stop_logs_manager_in(client, seeded, session_engine, db):
    session_engine.start_session("mgr1", "P1")
    scan(client, "USER_ID:mgr1")

    view = client.post(f"{API}/front/cancel-stop").json()
    assert view["state"] == "logged_in"
    assert view["user"]["id"] == "mgr1"
    assert view["access_token"]
    db.expire_all()
    assert db.query(ActiveSession).filter_by(user_id="mgr1").count() == 1


def test_cancel_stop_logs_employee_out(client, seeded, session_engine):
    session_engine.start_session("U1", "P1")
    scan(client, "USER_ID:U1")
    assert client.post(f"{API}/front/cancel-stop").json()["state"] == "logged_out"


def test_logout(client, seeded):
    scan(client, "USER_ID:admin001")
    view = client.post(f"{API}/front/logout").json()
    assert view["state"] == "logged_out"
    assert view["user"] is None


def test_reading_the_kiosk_never_returns_a_token(client, seeded):
    scan(client, "USER_ID:admin001")
    started = scan(client, "PROJECT_ID:P1").json()
    assert started["state"] == "logged_in"
    assert started["access_token"] is None

    view = client.get(f"{API}/front").json()
    assert view["state"] == "logged_in"
    assert view["user"]["id"] == "admin001"
    assert view["access_token"] is None
