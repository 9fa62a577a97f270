# src/taskdesk/auth/session.py

from __future__ import annotations

"""
Session gate.

The auth API (registration, login, session storage) lives elsewhere.
We only hold an opaque bearer token and ask the API who it belongs to.
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ..core.errors import TaskdeskError

logger = logging.getLogger(__name__)

ME_ENDPOINT = "/api/auth/me"


class AuthRequiredError(TaskdeskError):
    """No session resolved; task operations must not start."""


@dataclass(slots=True, frozen=True)
class SessionUser:
    id: Any
    email: str
    first_name: str | None = None
    last_name: str | None = None

    @property
    def display_name(self) -> str:
        if self.first_name:
            return self.first_name
        if self.email:
            return self.email.split("@", 1)[0]
        return "User"

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> SessionUser:
        return cls(
            id=data.get("id"),
            email=str(data.get("email") or ""),
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
        )


class SessionClient:
    """
    Bearer-token session lookup against the auth API.

    The resolved user is cached until refresh()/close().
    """

    def __init__(
        self,
        base_url: str,
        token: str | None,
        *,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._token = (token or "").strip() or None
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout),
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self._user: SessionUser | None = None
        self._resolved = False

    def close(self) -> None:
        self._client.close()
        self._user = None
        self._resolved = False

    def is_authenticated(self) -> bool:
        return self._token is not None

    def refresh(self) -> SessionUser | None:
        self._resolved = False
        self._user = None
        return self.get_current_user()

    def get_current_user(self) -> SessionUser | None:
        if self._resolved:
            return self._user

        self._user = self._fetch_user()
        self._resolved = True
        return self._user

    def require_auth(self) -> SessionUser:
        user = self.get_current_user()
        if user is None:
            raise AuthRequiredError("Not signed in: a valid session token is required")
        return user

    def _fetch_user(self) -> SessionUser | None:
        if self._token is None:
            logger.info("No session token configured")
            return None

        try:
            resp = self._client.get(ME_ENDPOINT, headers={"Authorization": f"Bearer {self._token}"})
        except httpx.HTTPError as e:
            logger.warning("Session check failed: %s", e)
            return None

        try:
            data = resp.json()
        except ValueError:
            logger.warning("Session check returned a non-JSON body (status=%s)", resp.status_code)
            return None

        if not resp.is_success or not isinstance(data, dict) or not data.get("success"):
            message = data.get("message") if isinstance(data, dict) else None
            logger.info("Session rejected status=%s message=%s", resp.status_code, message)
            return None

        user = data.get("user")
        if not isinstance(user, dict):
            logger.warning("Session check returned no user object")
            return None

        resolved = SessionUser.from_payload(user)
        logger.info("Session resolved user_id=%s", resolved.id)
        return resolved
