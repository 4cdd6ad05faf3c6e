"""
HTTP client for the remote evaluation API.

Every failure is raised as one of the ConsoleApiError subclasses so the
session manager and the console can tell credential problems from outages.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

import requests

from evalconsole.config import API_BASE_URL, REQUEST_TIMEOUT_SECONDS
from evalconsole.errors import ConsoleApiError, NetworkFailure, ServiceUnavailable, Unauthorized
from evalconsole.models import EvaluationRecord, LoginResult, User

logger = logging.getLogger(__name__)


def classify_error(status: int, message: str) -> ConsoleApiError:
    """Map an HTTP error status to the matching exception."""
    if status in (401, 403):
        return Unauthorized(message, status)
    if status >= 500:
        return ServiceUnavailable(message, status)
    return ConsoleApiError(message, status)


def _unwrap(payload: Any) -> Any:
    # Some endpoints answer {"success": true, "data": ...}
    if isinstance(payload, dict) and "data" in payload and "success" in payload:
        return payload["data"]
    return payload


def _records(payload: Any) -> List[EvaluationRecord]:
    payload = _unwrap(payload)
    if isinstance(payload, dict):
        payload = payload.get("evaluations") or []
    if not isinstance(payload, list):
        return []
    return [EvaluationRecord.from_dict(item) for item in payload if isinstance(item, dict) and "id" in item]


class ApiClient:
    """Thin wrapper around a requests.Session bound to the API base URL."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        http: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token_provider = token_provider
        self.http = http or requests.Session()

    # ── Plumbing ─────────────────────────────────────────────────────

    def _request(self, method: str, path: str, token: Optional[str] = None, **kwargs) -> Any:
        headers = {"Content-Type": "application/json"}
        if token is None and self.token_provider is not None:
            token = self.token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise NetworkFailure(f"Request to {path} failed: {e}") from e

        return self._handle_response(response, path)

    def _handle_response(self, response, path: str) -> Any:
        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            message = f"HTTP {response.status_code}: {response.reason}"
            if isinstance(body, dict):
                message = body.get("error") or body.get("message") or message
            logger.debug("%s answered %s: %s", path, response.status_code, message)
            raise classify_error(response.status_code, message)

        return body

    # ── Authentication / identity ────────────────────────────────────

    def login(self, email: str, password: str) -> LoginResult:
        data = _unwrap(self._request("POST", "/auth/login", json={"email": email, "password": password}))
        if not isinstance(data, dict) or not data.get("token") or not isinstance(data.get("user"), dict):
            raise ConsoleApiError("Malformed login response from the authentication endpoint.")
        return LoginResult(
            token=data["token"],
            refresh_token=data.get("refresh_token"),
            user=User.from_dict(data["user"]),
        )

    def get_me(self, token: str) -> User:
        data = _unwrap(self._request("GET", "/me", token=token))
        if not isinstance(data, dict) or "id" not in data:
            raise ConsoleApiError("Malformed response from the identity endpoint.")
        return User.from_dict(data)

    def logout(self, token: str) -> None:
        self._request("POST", "/auth/logout", token=token)

    # ── Evaluation sources ───────────────────────────────────────────

    def list_evaluations(self, **filters) -> List[EvaluationRecord]:
        params = {k: v for k, v in filters.items() if v is not None}
        return _records(self._request("GET", "/evaluations", params=params or None))

    def list_period_evaluations(self, period_id: int) -> List[EvaluationRecord]:
        return _records(self._request("GET", f"/evaluations/period/{int(period_id)}"))

    def list_employee_evaluations(self, employee_id: int) -> List[EvaluationRecord]:
        return _records(self._request("GET", f"/evaluations/employee/{int(employee_id)}"))

    def my_evaluations(self) -> Dict[str, List[EvaluationRecord]]:
        data = _unwrap(self._request("GET", "/me/evaluations"))
        if not isinstance(data, dict):
            data = {}
        return {
            "as_employee": _records((data.get("as_employee") or {}).get("evaluations") or []),
            "as_evaluator": _records((data.get("as_evaluator") or {}).get("evaluations") or []),
        }

    def hr_dashboard(self, period_id: Optional[int] = None) -> Dict[str, Any]:
        params = {"period_id": period_id} if period_id is not None else None
        return _unwrap(self._request("GET", "/evaluations/dashboard", params=params)) or {}
