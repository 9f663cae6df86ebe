"""Error taxonomy for RUCKUS One calls.

Errors are raised with their structure attached at the point of failure.
``classify_error`` is the one place that maps an exception to a coarse
category; it falls back to message heuristics only for exceptions that do not
come from this package.
"""

from __future__ import annotations

import enum
import json
from typing import Any, List, Optional

import httpx


class R1Error(Exception):
    """Base error for RUCKUS One client failures."""


class AuthenticationError(R1Error):
    """Client-credentials exchange was rejected or could not be performed."""

    def __init__(
        self,
        message: str,
        *,
        http_status: Optional[int] = None,
        error: Optional[str] = None,
        error_description: Optional[str] = None,
    ):
        super().__init__(message)
        self.http_status = http_status
        self.error = error
        self.error_description = error_description


class ApiError(R1Error):
    """Non-2xx response from a RUCKUS One API call.

    Sub-fields of the response body are extracted when present so callers can
    diagnose failures without re-parsing the body.
    """

    def __init__(self, operation: str, http_status: int, body: Any = None):
        self.operation = operation
        self.http_status = http_status
        self.body = body

        self.api_error: Optional[str] = None
        self.code: Optional[str] = None
        self.api_message: Optional[str] = None
        self.reason: Optional[str] = None
        self.details: Any = None

        if isinstance(body, dict):
            self.api_error = _as_text(body.get("error"))
            errors = body.get("errors")
            if isinstance(errors, list) and errors and isinstance(errors[0], dict):
                first = errors[0]
                self.code = _as_text(first.get("code"))
                self.api_message = _as_text(first.get("message"))
                self.reason = _as_text(first.get("reason"))
            if self.api_message is None:
                self.api_message = _as_text(body.get("message"))
            if self.code is None:
                self.code = _as_text(body.get("code"))
            self.details = body.get("details")

        super().__init__(self._describe())

    def _describe(self) -> str:
        parts = [f"{self.operation} failed with status {self.http_status}"]
        if self.api_error:
            parts.append(f"API Error: {self.api_error}")
        if self.code:
            parts.append(f"Error Code: {self.code}")
        if self.api_message:
            parts.append(f"Error Message: {self.api_message}")
        if self.reason:
            parts.append(f"Reason: {self.reason}")
        if self.details:
            parts.append(f"Details: {json.dumps(self.details, default=str)}")
        return " - ".join(parts)


class ProtocolError(R1Error):
    """Synchronous/asynchronous expectation mismatch."""


class NotFoundError(R1Error):
    """A human-readable name did not match any listed entity."""

    def __init__(self, kind: str, name: str, available: List[str]):
        self.kind = kind
        self.name = name
        self.available = list(available)
        listing = ", ".join(self.available) if self.available else "(none)"
        super().__init__(f'{kind} "{name}" not found. Available {kind.lower()} names: {listing}')


def _as_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


class ErrorCategory(str, enum.Enum):
    AUTH = "auth"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    INTERNAL = "internal"

    @property
    def rpc_code(self) -> int:
        """JSON-RPC error code: invalid request vs internal error."""
        if self in (ErrorCategory.AUTH, ErrorCategory.NOT_FOUND):
            return -32600
        return -32603


def classify_error(exc: BaseException) -> ErrorCategory:
    if isinstance(exc, AuthenticationError):
        return ErrorCategory.AUTH
    if isinstance(exc, NotFoundError):
        return ErrorCategory.NOT_FOUND
    if isinstance(exc, ApiError):
        if exc.http_status in (401, 403):
            return ErrorCategory.AUTH
        if exc.http_status == 404:
            return ErrorCategory.NOT_FOUND
        if exc.http_status == 429:
            return ErrorCategory.RATE_LIMIT
        if exc.http_status in (408, 504):
            return ErrorCategory.TIMEOUT
        return ErrorCategory.INTERNAL
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError)):
        return ErrorCategory.TIMEOUT
    if isinstance(exc, R1Error):
        return ErrorCategory.INTERNAL

    # Foreign exceptions carry no structure; fall back to their text.
    text = str(exc).lower()
    if any(s in text for s in ("authentication failed", "unauthorized", "invalid token", "401")):
        return ErrorCategory.AUTH
    if "not found" in text or "404" in text:
        return ErrorCategory.NOT_FOUND
    if any(s in text for s in ("timeout", "timed out", "econnreset", "enotfound")):
        return ErrorCategory.TIMEOUT
    if "rate limit" in text or "too many requests" in text:
        return ErrorCategory.RATE_LIMIT
    return ErrorCategory.INTERNAL
