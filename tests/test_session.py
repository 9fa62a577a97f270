# tests/test_session.py

from __future__ import annotations

import httpx
import pytest

from taskdesk.auth.session import AuthRequiredError, SessionClient, SessionUser

USER = {
    "id": 7,
    "email": "ada@example.com",
    "username": "Ada",
    "firstName": "Ada",
    "lastName": "Lovelace",
    "createdAt": "2024-01-01T00:00:00Z",
}


class FakeAuthApi:
    """Minimal /api/auth/me: one valid token, everything else 401."""

    def __init__(self, valid_token: str = "good-token") -> None:
        self.valid_token = valid_token
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        assert request.url.path == "/api/auth/me"
        if request.headers.get("Authorization") != f"Bearer {self.valid_token}":
            return httpx.Response(401, json={"success": False, "message": "Invalid or expired session"})
        return httpx.Response(200, json={"success": True, "user": USER})


def _client(api, token: str | None) -> SessionClient:
    return SessionClient("http://auth.test/", token, transport=httpx.MockTransport(api))


def test_valid_token_resolves_user_and_is_cached() -> None:
    api = FakeAuthApi()
    client = _client(api, "good-token")

    user = client.require_auth()
    assert user == SessionUser(id=7, email="ada@example.com", first_name="Ada", last_name="Lovelace")
    assert user.display_name == "Ada"

    assert client.get_current_user() is user
    assert len(api.requests) == 1

    client.refresh()
    assert len(api.requests) == 2
    client.close()


def test_rejected_token() -> None:
    client = _client(FakeAuthApi(), "stale-token")
    assert client.is_authenticated()
    assert client.get_current_user() is None
    with pytest.raises(AuthRequiredError):
        client.require_auth()


def test_missing_token_makes_no_request() -> None:
    api = FakeAuthApi()
    client = _client(api, "   ")
    assert not client.is_authenticated()
    assert client.get_current_user() is None
    assert api.requests == []


def test_transport_error_and_bad_body_resolve_to_none() -> None:
    def down(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    assert _client(down, "good-token").get_current_user() is None

    def garbage(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    assert _client(garbage, "good-token").get_current_user() is None

    def no_user(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": True})

    assert _client(no_user, "good-token").get_current_user() is None


def test_display_name_fallbacks() -> None:
    assert SessionUser(id=1, email="bob@example.com").display_name == "bob"
    assert SessionUser(id=1, email="").display_name == "User"
