"""
Tests for the Flask console API using the Flask test client.
"""

import pytest

from evalconsole.api.app import create_app
from evalconsole.credentials import MemoryCredentialStore
from evalconsole.errors import ServiceUnavailable, Unauthorized
from evalconsole.models import EvaluationRecord, LoginResult, Role, Session, User
from evalconsole.session import SessionManager


# ── Helpers / Fakes ──────────────────────────────────────────────────

class FakeClient:
    def __init__(self, role="hr_manager", login_error=None, list_error=None):
        self.user = User(id=1, email="u@x.com", first_name="Uma", role=Role(1, role))
        self.login_error = login_error
        self.list_error = list_error

    def login(self, email, password):
        if self.login_error:
            raise self.login_error
        return LoginResult(token="tok", refresh_token="ref", user=self.user)

    def get_me(self, token):
        return self.user

    def logout(self, token):
        pass

    def list_evaluations(self, **filters):
        if self.list_error:
            raise self.list_error
        return [
            EvaluationRecord(id=1, employee_name="Ana", status="atrasada", due_date="2020-01-01", evaluator_id=1),
            EvaluationRecord(id=2, employee_name="Beto", status="realizada", weighted_score=90, evaluator_id=2),
        ]

    def list_period_evaluations(self, period_id):
        return []

    def my_evaluations(self):
        return {"as_employee": [EvaluationRecord(id=5, employee_name="Uma", status="pendiente")], "as_evaluator": []}


def make_client(fake, login=True):
    manager = SessionManager(fake, MemoryCredentialStore())
    manager.restore()
    if login:
        manager.login("u@x.com", "pw")
    app = create_app(manager=manager, restore=False)
    app.config["TESTING"] = True
    return app.test_client(), manager


# ── Tests: session endpoints ─────────────────────────────────────────

def test_health():
    client, _ = make_client(FakeClient(), login=False)
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["session_state"] == "anonymous"


def test_login_and_session_payload_hide_tokens():
    client, _ = make_client(FakeClient(), login=False)
    resp = client.post("/api/auth/login", json={"email": "u@x.com", "password": "pw"})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["is_authenticated"] is True
    assert body["default_route"] == "/dashboard"
    assert "tok" not in resp.get_data(as_text=True)


def test_login_requires_fields():
    client, _ = make_client(FakeClient(), login=False)
    assert client.post("/api/auth/login", json={"email": "u@x.com"}).status_code == 400
    assert client.post("/api/auth/login", data="x").status_code == 400


@pytest.mark.parametrize("error,code", [(Unauthorized("bad", 401), 401), (ServiceUnavailable("down", 503), 503)])
def test_login_errors_are_classified(error, code):
    client, manager = make_client(FakeClient(login_error=error), login=False)
    resp = client.post("/api/auth/login", json={"email": "u@x.com", "password": "pw"})
    assert resp.status_code == code
    assert manager.session.is_authenticated is False


def test_logout():
    client, manager = make_client(FakeClient())
    resp = client.post("/api/auth/logout")
    assert resp.status_code == 200
    assert manager.session.is_authenticated is False


# ── Tests: guarded screens ───────────────────────────────────────────

def test_dashboard_requires_login():
    client, _ = make_client(FakeClient(), login=False)
    resp = client.get("/api/dashboard")
    assert resp.status_code == 401
    assert resp.get_json()["redirect_to"] == "/login"


def test_dashboard_while_loading():
    client, manager = make_client(FakeClient(), login=False)
    manager._publish(Session(is_loading=True))
    resp = client.get("/api/dashboard")
    assert resp.status_code == 503
    assert resp.get_json()["status"] == "loading"


def test_dashboard_denied_for_employee():
    client, _ = make_client(FakeClient(role="employee"))
    resp = client.get("/api/dashboard")
    assert resp.status_code == 403
    assert resp.get_json()["redirect_to"] == "/my-evaluations"


def test_dashboard_filters_and_sorts():
    client, _ = make_client(FakeClient())
    resp = client.get("/api/dashboard?status=overdue&sort=days_overdue&direction=desc")
    assert resp.status_code == 200
    body = resp.get_json()
    assert [r["id"] for r in body["rows"]] == [1]
    assert body["rows"][0]["days_overdue"] > 0
    assert body["summary"]["total"] == 2
    assert body["filters"]["status"] == "overdue"
    assert body["sort"] == {"column": "days_overdue", "direction": "desc"}


def test_dashboard_upstream_outage():
    client, _ = make_client(FakeClient(list_error=ServiceUnavailable("HTTP 503", 503)))
    resp = client.get("/api/dashboard")
    assert resp.status_code == 503
    assert "try again" in resp.get_json()["error"]


def test_my_evaluations_for_employee():
    client, _ = make_client(FakeClient(role="employee"))
    resp = client.get("/api/my-evaluations")
    assert resp.status_code == 200
    assert [r["id"] for r in resp.get_json()["rows"]] == [5]


def test_navigate_and_menu():
    client, _ = make_client(FakeClient(role="employee"))
    decision = client.get("/api/navigate/employees").get_json()
    assert decision["action"] == "redirect"
    assert decision["target"] == "/my-evaluations"
    items = client.get("/api/menu").get_json()["items"]
    assert [i["id"] for i in items] == ["my_evaluations"]


def test_unknown_endpoint():
    client, _ = make_client(FakeClient())
    assert client.get("/nope").status_code == 404
