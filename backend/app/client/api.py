"""
HTTP client for the CareerGuard API.

Wraps an ``httpx.Client`` (anything with the same interface works, including
FastAPI's ``TestClient``). Non-2xx answers become ``ApiError`` carrying the
server's message verbatim; transport failures become ``ApiError`` with status 0.
When a request made with the session's token is rejected because of the
token, the session is invalidated so the caller falls back to logged-out.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from app.client.session import SessionContext
from app.core.errors import TOKEN_FAILURE_CODES

logger = logging.getLogger("client.api")


class ApiError(Exception):
    """A request that did not complete successfully."""

    def __init__(self, status_code: int, message: str, code: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.code = code
        super().__init__(message)

    @property
    def is_token_failure(self) -> bool:
        return self.code in TOKEN_FAILURE_CODES


@dataclass(frozen=True)
class ResumeFile:
    """A file staged for upload."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class AuthResult:
    message: str
    token: str
    user: dict[str, Any]


class ApiClient:
    def __init__(self, http: httpx.Client, session: Optional[SessionContext] = None):
        self.http = http
        self.session = session

    @classmethod
    def connect(
        cls,
        base_url: str,
        session: Optional[SessionContext] = None,
        timeout: float = 30.0,
    ) -> "ApiClient":
        return cls(httpx.Client(base_url=base_url, timeout=timeout), session)

    # ============== Plumbing ==============

    def _request(self, method: str, path: str, *, auth: bool = False, **kwargs: Any) -> Any:
        headers = dict(kwargs.pop("headers", None) or {})
        if auth and self.session is not None:
            headers.update(self.session.auth_header())

        try:
            response = self.http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(0, "Network error, please try again", code="network_error") from exc

        if response.is_success:
            return response.json() if response.content else None

        error = _error_from(response)
        if auth and error.is_token_failure and self.session is not None:
            logger.info("Session token rejected (%s); clearing session", error.code)
            self.session.invalidate()
        raise error

    # ============== Authentication ==============

    def login(self, email: str, password: str) -> AuthResult:
        body = self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        return _auth_result(body)

    def register(self, name: str, email: str, password: str, role: Optional[str] = None) -> AuthResult:
        payload: dict[str, Any] = {"name": name, "email": email, "password": password}
        if role is not None:
            payload["role"] = role
        body = self._request("POST", "/api/auth/register", json=payload, auth=role is not None)
        return _auth_result(body)

    def register_detailed(self, fields: dict[str, str], resume: Optional[ResumeFile] = None) -> AuthResult:
        """Submit the whole registration draft as one multipart request."""
        files = None
        if resume is not None:
            files = {"resume": (resume.filename, resume.data, resume.content_type)}
        body = self._request("POST", "/api/auth/register-detailed", data=fields, files=files)
        return _auth_result(body)

    def me(self) -> dict[str, Any]:
        return self._request("GET", "/api/auth/me", auth=True)

    # ============== Profiles ==============

    def get_profile(self, user_id: str) -> dict[str, Any]:
        return self._request("GET", f"/api/users/{user_id}", auth=True)

    def update_profile(
        self,
        user_id: str,
        fields: dict[str, Any],
        resume: Optional[ResumeFile] = None,
    ) -> dict[str, Any]:
        data = {
            key: json.dumps(value) if isinstance(value, list) else str(value)
            for key, value in fields.items()
            if value is not None
        }
        files = None
        if resume is not None:
            files = {"resume": (resume.filename, resume.data, resume.content_type)}
        body = self._request("PUT", f"/api/users/{user_id}", auth=True, data=data, files=files)
        return body["user"]

    def list_users(self) -> list[dict[str, Any]]:
        return self._request("GET", "/api/users", auth=True)


def _error_from(response: httpx.Response) -> ApiError:
    message = f"Request failed ({response.status_code})"
    code = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or message
        code = body.get("code")
    return ApiError(response.status_code, message, code)


def _auth_result(body: dict[str, Any]) -> AuthResult:
    return AuthResult(message=body.get("message", ""), token=body["token"], user=body["user"])
