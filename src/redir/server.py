"""FastAPI app exposing redirect tracing over HTTP."""

from __future__ import annotations

import time
import uuid

from fastapi import FastAPI, Query, Request

from .logging import get_logger
from .schemas import TraceMeta, TraceResponse
from .settings import get_settings
from .tracer import RedirectTracer

logger = get_logger("server")

app = FastAPI(title="redir trace service", version="0.1.0")

MAX_HOPS_LIMIT = 50


def get_tracer() -> RedirectTracer:
    return RedirectTracer(get_settings())


@app.on_event("startup")
def log_startup_config() -> None:
    settings = get_settings()
    logger.info(
        "redir_server_config",
        extra={
            "extra": {
                "max_hops": settings.max_hops,
                "request_timeout_s": settings.request_timeout_s,
                "verify_tls": settings.verify_tls,
                "trust_env": settings.trust_env,
            }
        },
    )


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/v1/trace")
def trace_url(
    request: Request,
    url: str = Query(..., min_length=1, description="Absolute http(s) URL to start from"),
    max_hops: int | None = Query(default=None, ge=1, le=MAX_HOPS_LIMIT),
) -> TraceResponse:
    trace_id = request.headers.get("x-trace-id") or str(uuid.uuid4())
    start = time.time()

    result = get_tracer().trace(url, max_hops)
    latency_ms = int((time.time() - start) * 1000)

    logger.info(
        "trace_request",
        extra={
            "extra": {
                "trace_id": trace_id,
                "url": url,
                "hops": len(result),
                "latency_ms": latency_ms,
                "ok": result.ok,
                "error_code": result.error.code if result.error else None,
            }
        },
    )
    return TraceResponse(
        ok=result.ok,
        url=url,
        hops=result.hops,
        truncated=result.truncated,
        error=result.error.to_payload() if result.error else None,
        meta=TraceMeta(trace_id=trace_id, latency_ms=latency_ms),
    )


def main() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "redir.server:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
