"""Errors that end a trace early.

They are attached to the returned ``TraceResult`` rather than raised out of
the tracer, so callers always get the hops recorded before the failure.
"""

from __future__ import annotations

from typing import Any

from .schemas import TraceErrorPayload


class TraceError(RuntimeError):
    code = "TRACE_ERROR"

    def __init__(self, message: str, url: str | None = None, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        self.details = details or {}

    def to_payload(self) -> TraceErrorPayload:
        return TraceErrorPayload(
            code=self.code,
            message=self.message,
            url=self.url,
            details=self.details or None,
        )


class RequestConstructionError(TraceError):
    """The URL for a hop cannot be turned into a request."""
    code = "INVALID_URL"


class TransportError(TraceError):
    """Network level failure while issuing a hop's request."""
    code = "TRANSPORT_ERROR"


class MissingRedirectTargetError(TraceError):
    code = "MISSING_LOCATION"

    def __init__(self, url: str | None = None, status_code: int | None = None) -> None:
        details = {"status_code": status_code} if status_code is not None else None
        super().__init__(
            "redirection status code received but no Location header found",
            url=url,
            details=details,
        )
