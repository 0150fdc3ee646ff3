# portal/invportal/client/http.py
"""
HTTP transport to the inventory REST backend.

Every request carries the JSON/XHR headers the backend expects and, when the
portal session holds one, the user's bearer token. Error responses are
mapped onto a small exception hierarchy so page handlers can tell field
validation (422) apart from an expired session (401) and everything else.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# CONFIG
# ---------------------------------------------------------------------------

BACKEND_URL = os.getenv("INVENTORY_BACKEND_URL", "http://localhost:8000").rstrip("/")

try:
    BACKEND_TIMEOUT_SEC: float = float(os.getenv("BACKEND_TIMEOUT_SEC", "15"))
except ValueError:
    BACKEND_TIMEOUT_SEC = 15.0

DEFAULT_HEADERS = {
    "X-Requested-With": "XMLHttpRequest",
    "Content-Type": "application/json",
    "Accept": "application/json",
}


# ---------------------------------------------------------------------------
# ERRORS
# ---------------------------------------------------------------------------


class BackendError(Exception):
    """Any failed call to the inventory backend."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    @property
    def backend_message(self) -> Optional[str]:
        """The `message` field of the error body, if the backend sent one."""
        if isinstance(self.payload, dict):
            message = self.payload.get("message")
            if isinstance(message, str) and message:
                return message
        return None


class ValidationFailed(BackendError):
    """HTTP 422 with a Laravel-style `errors` mapping."""

    @property
    def errors(self) -> Dict[str, List[str]]:
        raw = self.payload.get("errors") if isinstance(self.payload, dict) else None
        if not isinstance(raw, dict):
            return {}
        errors: Dict[str, List[str]] = {}
        for field, messages in raw.items():
            if isinstance(messages, (list, tuple)):
                errors[str(field)] = [str(m) for m in messages]
            elif messages:
                errors[str(field)] = [str(messages)]
        return errors


class Unauthorized(BackendError):
    """HTTP 401: the bearer token is missing, expired or revoked."""


class BackendUnavailable(BackendError):
    """The backend could not be reached at all."""


# ---------------------------------------------------------------------------
# RESPONSE HELPERS
# ---------------------------------------------------------------------------


def unwrap(body: Any) -> Any:
    """Return `body["data"]` for wrapped payloads, the body otherwise."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def unwrap_list(body: Any) -> List[Any]:
    data = unwrap(body)
    return data if isinstance(data, list) else []


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# CLIENT
# ---------------------------------------------------------------------------


class BackendClient:
    """
    Thin wrapper around `httpx.Client`.

    `on_unauthorized` is invoked before `Unauthorized` is raised so the
    caller can drop the stored token.
    """

    def __init__(
        self,
        base_url: str = BACKEND_URL,
        *,
        token: Optional[str] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
        timeout: float = BACKEND_TIMEOUT_SEC,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.on_unauthorized = on_unauthorized
        self._http = httpx.Client(
            base_url=self.base_url,
            headers=dict(DEFAULT_HEADERS),
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "BackendClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def request(self, method: str, path: str, *, json: Any = None) -> Any:
        try:
            response = self._http.request(
                method,
                path,
                json=json,
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "Inventory backend unreachable",
                extra={"method": method, "path": path, "error": str(exc)},
            )
            raise BackendUnavailable("The inventory service is unavailable.") from exc

        body = _decode(response)
        if response.status_code < 400:
            return body

        logger.warning(
            "Inventory backend call failed",
            extra={"method": method, "path": path, "status_code": response.status_code},
        )
        message = ""
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            message = body["message"]
        message = message or f"Backend responded with HTTP {response.status_code}."

        if response.status_code == 401:
            if self.on_unauthorized is not None:
                self.on_unauthorized()
            raise Unauthorized(message, status_code=401, payload=body)
        if response.status_code == 422:
            raise ValidationFailed(message, status_code=422, payload=body)
        raise BackendError(message, status_code=response.status_code, payload=body)

    def get(self, path: str) -> Any:
        return self.request("GET", path)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def patch(self, path: str, json: Any = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
