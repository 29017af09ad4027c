"""
Tests for the clientdash command line.

Commands run through click's CliRunner against an httpx.MockTransport that
stands in for the API server.
"""

import json
from datetime import date, timedelta

import httpx
import pytest
from click.testing import CliRunner

from clientdash.cli import CliState, cli
from clientdash.sdk.session import MemoryTokenStore, SessionContext


def client_json(**overrides):
    data = {
        "_id": "c1",
        "name": "Ada Lovelace",
        "email": "ada@analytical.io",
        "phone": "5551234567",
        "company": "Analytical Engines",
        "subscriptionRenewalDate": (date.today() + timedelta(days=5)).isoformat(),
        "subscriptionAmount": 120.5,
        "notes": None,
        "createdAt": "2026-01-01T10:00:00Z",
        "updatedAt": "2026-01-01T10:00:00Z",
    }
    data.update(overrides)
    return data


class FakeApi:
    """Routes requests by (method, path) to canned responses."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, status=200, body=None):
        self.routes[(method, path)] = (status, body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes.get(
            (request.method, request.url.path), (404, {"message": "Route not found"})
        )
        return httpx.Response(status, json=body)

    def sent(self, method, path):
        for request in self.requests:
            if request.method == method and request.url.path == path:
                return json.loads(request.content) if request.content else None
        raise AssertionError(f"{method} {path} was not requested")


@pytest.fixture(autouse=True)
def quiet_logging(mocker):
    mocker.patch("clientdash.cli.setup_logging")


@pytest.fixture
def fake_api():
    return FakeApi()


@pytest.fixture
def state(fake_api):
    return CliState(
        api_url="http://api.test",
        session=SessionContext(MemoryTokenStore("cli-token")),
        transport=httpx.MockTransport(fake_api),
    )


@pytest.fixture
def invoke(state):
    runner = CliRunner()

    def _invoke(*args, input=None):
        return runner.invoke(cli, list(args), obj=state, input=input)

    return _invoke


class TestAuthCommands:

    def test_login(self, invoke, state, fake_api):
        fake_api.add("POST", "/users/loginUser", 200,
                     {"_id": "u1", "name": "Ada", "email": "ada@x.io", "token": "new-token"})

        result = invoke("login", "--email", "ada@x.io", "--password", "secret1")

        assert result.exit_code == 0, result.output
        assert "Logged in as Ada <ada@x.io>" in result.output
        assert state.session.token == "new-token"

    def test_login_failure_shows_server_message(self, invoke, state, fake_api):
        fake_api.add("POST", "/users/loginUser", 401, {"message": "Invalid email or password"})

        result = invoke("login", "--email", "ada@x.io", "--password", "secret1")

        assert result.exit_code == 1
        assert "Invalid email or password" in result.output
        assert state.session.token == "cli-token"

    def test_login_validates_before_sending(self, invoke, fake_api):
        result = invoke("login", "--email", "not-an-email", "--password", "secret1")

        assert result.exit_code == 1
        assert "Invalid email address" in result.output
        assert fake_api.requests == []

    def test_register(self, invoke, state, fake_api):
        fake_api.add("POST", "/users/registerUser", 201,
                     {"_id": "u1", "name": "Ada", "email": "ada@x.io", "token": "reg-token"})

        result = invoke("register", "--name", "Ada", "--email", "ada@x.io", "--password", "secret1")

        assert result.exit_code == 0, result.output
        assert "Welcome, Ada!" in result.output
        assert state.session.token == "reg-token"

    def test_logout_clears_even_when_server_fails(self, invoke, state, fake_api):
        fake_api.add("POST", "/users/logoutUser", 500, {"message": "boom"})

        result = invoke("logout")

        assert result.exit_code == 0
        assert "Logged out." in result.output
        assert state.session.token is None

    def test_whoami(self, invoke, fake_api):
        fake_api.add("GET", "/users/getProfile", 200, {"_id": "u1", "name": "Ada", "email": "ada@x.io"})

        result = invoke("whoami")

        assert result.exit_code == 0
        assert "Ada <ada@x.io>" in result.output

    def test_whoami_not_logged_in(self, invoke, state, fake_api):
        state.session.clear()

        result = invoke("whoami")

        assert result.exit_code == 1
        assert "Not logged in." in result.output
        assert fake_api.requests == []

    def test_forgot_password(self, invoke, fake_api):
        fake_api.add("POST", "/users/forgot-password", 200,
                     {"message": "If the email exists, a password reset link has been sent."})

        result = invoke("forgot-password", "--email", "ada@x.io")

        assert result.exit_code == 0
        assert "password reset link" in result.output
        assert fake_api.sent("POST", "/users/forgot-password") == {"email": "ada@x.io"}

    def test_reset_password(self, invoke, fake_api):
        fake_api.add("POST", "/users/reset-password/tok123", 200, {"message": "Password reset successful"})

        result = invoke("reset-password", "tok123", input="newpass1\nnewpass1\n")

        assert result.exit_code == 0, result.output
        assert "Password reset successful" in result.output
        assert fake_api.sent("POST", "/users/reset-password/tok123") == {"password": "newpass1"}


class TestClientCommands:

    def test_list_empty(self, invoke, fake_api):
        fake_api.add("GET", "/clients", 200, [])

        result = invoke("clients", "list")

        assert result.exit_code == 0
        assert "No clients yet" in result.output

    def test_list_with_search(self, invoke, fake_api):
        fake_api.add("GET", "/clients", 200, [
            client_json(),
            client_json(_id="c2", name="Grace Hopper", email="grace@navy.mil", company="US Navy"),
        ])

        result = invoke("clients", "list", "--search", "navy")

        assert result.exit_code == 0
        assert "Grace Hopper" in result.output
        assert "Ada Lovelace" not in result.output

    def test_list_search_without_match(self, invoke, fake_api):
        fake_api.add("GET", "/clients", 200, [client_json()])

        result = invoke("clients", "list", "--search", "zzz")

        assert "No clients found matching your search." in result.output

    def test_list_requires_auth(self, invoke, fake_api):
        fake_api.add("GET", "/clients", 401, {"message": "Not authorized, token failed"})

        result = invoke("clients", "list")

        assert result.exit_code == 1
        assert "Not authorized, token failed" in result.output

    def test_show_not_found(self, invoke, fake_api):
        fake_api.add("GET", "/clients/missing", 404, {"message": "Client not found"})

        result = invoke("clients", "show", "missing")

        assert result.exit_code == 1
        assert "Client not found" in result.output

    def test_find_by_email(self, invoke, fake_api):
        fake_api.add("GET", "/clients/email/ada@analytical.io", 200, client_json(notes="VIP"))

        result = invoke("clients", "find", "ada@analytical.io")

        assert result.exit_code == 0
        assert "Ada Lovelace" in result.output
        assert "VIP" in result.output

    def test_add(self, invoke, fake_api):
        fake_api.add("POST", "/clients", 201, client_json())

        result = invoke(
            "clients", "add",
            "--name", "Ada Lovelace",
            "--email", "ada@analytical.io",
            "--phone", "5551234567",
            "--company", "Analytical Engines",
            "--renewal-date", "2030-01-15",
            "--amount", "120.5",
        )

        assert result.exit_code == 0, result.output
        assert "Client created successfully" in result.output
        assert fake_api.sent("POST", "/clients") == {
            "name": "Ada Lovelace",
            "email": "ada@analytical.io",
            "phone": "5551234567",
            "company": "Analytical Engines",
            "subscriptionRenewalDate": "2030-01-15",
            "subscriptionAmount": 120.5,
        }

    def test_add_rejects_negative_amount(self, invoke, fake_api):
        result = invoke(
            "clients", "add",
            "--name", "Ada Lovelace",
            "--email", "ada@analytical.io",
            "--phone", "5551234567",
            "--company", "Analytical Engines",
            "--renewal-date", "2030-01-15",
            "--amount", "-1",
        )

        assert result.exit_code == 1
        assert "greater than or equal to 0" in result.output
        assert fake_api.requests == []

    def test_update_merges_current_values(self, invoke, fake_api):
        fake_api.add("GET", "/clients/c1", 200, client_json(notes="keep"))
        fake_api.add("PUT", "/clients/c1", 200, client_json(company="New Co", notes="keep"))

        result = invoke("clients", "update", "c1", "--company", "New Co")

        assert result.exit_code == 0, result.output
        sent = fake_api.sent("PUT", "/clients/c1")
        assert sent["company"] == "New Co"
        assert sent["name"] == "Ada Lovelace"
        assert sent["notes"] == "keep"

    def test_set_sends_only_given_fields(self, invoke, fake_api):
        fake_api.add("PATCH", "/clients/c1", 200, client_json(subscriptionAmount=50))

        result = invoke("clients", "set", "c1", "--amount", "50")

        assert result.exit_code == 0, result.output
        assert fake_api.sent("PATCH", "/clients/c1") == {"subscriptionAmount": 50.0}
        assert "$50.00" in result.output

    def test_set_without_fields(self, invoke, fake_api):
        result = invoke("clients", "set", "c1")

        assert result.exit_code == 2
        assert fake_api.requests == []

    def test_delete_with_confirmation(self, invoke, fake_api):
        fake_api.add("DELETE", "/clients/c1", 200, {"message": "Client removed"})

        result = invoke("clients", "delete", "c1", input="y\n")

        assert result.exit_code == 0
        assert "Client removed" in result.output

    def test_delete_aborted(self, invoke, fake_api):
        result = invoke("clients", "delete", "c1", input="n\n")

        assert result.exit_code == 1
        assert fake_api.requests == []


class TestDashboardCommand:

    def test_summary(self, invoke, fake_api):
        fake_api.add("GET", "/clients", 200, [
            client_json(subscriptionAmount=100),
            client_json(_id="c2", name="Grace Hopper", email="grace@navy.mil",
                        subscriptionRenewalDate=(date.today() + timedelta(days=90)).isoformat(),
                        subscriptionAmount=250),
        ])

        result = invoke("dashboard")

        assert result.exit_code == 0, result.output
        assert "Total clients: 2" in result.output
        assert "Upcoming renewals: 1" in result.output
        assert "$350.00" in result.output

    def test_network_error(self, invoke, state):
        def refuse(request):
            raise httpx.ConnectError("connection refused")

        state.transport = httpx.MockTransport(refuse)

        result = invoke("dashboard")

        assert result.exit_code == 1
        assert "Network error" in result.output
