"""Redirect chain tracer.

Issues one GET per hop with automatic redirects disabled, resolves the
``Location`` header against the current URL itself and stops at the first
non-3xx response, on the first error, or once ``max_hops`` requests were made.
"""

from __future__ import annotations

import time
from contextlib import closing

import httpx

from .errors import MissingRedirectTargetError, RequestConstructionError, TraceError, TransportError
from .logging import get_logger
from .schemas import HopRecord, TraceResult
from .settings import RedirSettings, get_settings

logger = get_logger("tracer")

ALLOWED_SCHEMES = ("http", "https")


def resolve_location(current_url: str, location: str) -> str:
    """Resolve a Location value (absolute or relative) against the current URL."""
    try:
        return str(httpx.URL(current_url).join(location))
    except (httpx.InvalidURL, ValueError) as exc:
        raise RequestConstructionError(f"invalid Location header {location!r}: {exc}", url=current_url) from exc


class RedirectTracer:
    def __init__(
        self,
        settings: RedirSettings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._transport = transport

    def trace(self, start_url: str, max_hops: int | None = None) -> TraceResult:
        if max_hops is None:
            max_hops = self._settings.max_hops
        if max_hops < 1:
            raise ValueError(f"max_hops must be a positive integer, got {max_hops}")

        result = TraceResult(start_url=start_url)
        started = time.perf_counter_ns()
        # A fresh client per trace keeps concurrent traces independent.
        with self._build_client() as client:
            try:
                self._follow(client, result, max_hops)
            except TraceError as exc:
                result.error = exc

        elapsed_ms = (time.perf_counter_ns() - started) // 1_000_000
        if result.error is not None:
            logger.warning(
                "redir_trace_error",
                extra={
                    "extra": {
                        "url": start_url,
                        "hops": len(result),
                        "error_code": result.error.code,
                        "error": result.error.message,
                        "latency_ms": elapsed_ms,
                    }
                },
            )
        else:
            logger.info(
                "redir_trace_done",
                extra={
                    "extra": {
                        "url": start_url,
                        "hops": len(result),
                        "final_status": result.final.status_code if result.final else None,
                        "truncated": result.truncated,
                        "latency_ms": elapsed_ms,
                    }
                },
            )
        return result

    def _build_client(self) -> httpx.Client:
        settings = self._settings
        return httpx.Client(
            follow_redirects=False,
            timeout=settings.request_timeout_s,
            headers={"User-Agent": settings.user_agent},
            verify=settings.verify_tls,
            trust_env=settings.trust_env,
            transport=_SharedTransport(self._transport) if self._transport is not None else None,
        )

    def _follow(self, client: httpx.Client, result: TraceResult, max_hops: int) -> None:
        current_url = result.start_url
        for hop_index in range(max_hops):
            request = _build_request(client, current_url)
            start = time.perf_counter_ns()
            try:
                # Streaming: headers only, the body is never read and is
                # released when the block exits.
                with closing(client.send(request, stream=True)) as response:
                    duration = time.perf_counter_ns() - start
                    hop = HopRecord(url=current_url, status_code=response.status_code, duration=duration)
                    result.append(hop)
                    location = _first_location(response.headers)
            except httpx.UnsupportedProtocol as exc:
                raise RequestConstructionError(str(exc), url=current_url) from exc
            except httpx.TransportError as exc:
                raise TransportError(f"{type(exc).__name__}: {exc}", url=current_url) from exc

            logger.debug(
                "redir_hop",
                extra={
                    "extra": {
                        "hop": hop_index,
                        "url": current_url,
                        "status_code": hop.status_code,
                        "duration_ms": round(hop.duration_ms, 3),
                    }
                },
            )

            if not hop.is_redirect:
                return
            if not location:
                raise MissingRedirectTargetError(url=current_url, status_code=hop.status_code)
            current_url = resolve_location(current_url, location)


def _first_location(headers: httpx.Headers) -> str:
    # Repeated Location headers: the first non-empty value wins.
    for value in headers.get_list("location"):
        value = value.strip()
        if value:
            return value
    return ""


class _SharedTransport(httpx.BaseTransport):
    """Caller-owned transport; closing the per-trace client leaves it open."""

    def __init__(self, transport: httpx.BaseTransport) -> None:
        self._transport = transport

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        return self._transport.handle_request(request)

    def close(self) -> None:
        pass


def _build_request(client: httpx.Client, url: str) -> httpx.Request:
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise RequestConstructionError(f"invalid URL {url!r}: {exc}", url=url) from exc
    if parsed.scheme not in ALLOWED_SCHEMES:
        raise RequestConstructionError(f"unsupported URL scheme in {url!r}", url=url)
    if not parsed.host:
        raise RequestConstructionError(f"missing host in {url!r}", url=url)
    return client.build_request("GET", parsed)


def trace(
    url: str,
    max_hops: int | None = None,
    *,
    settings: RedirSettings | None = None,
    transport: httpx.BaseTransport | None = None,
) -> TraceResult:
    return RedirectTracer(settings=settings, transport=transport).trace(url, max_hops)
