from __future__ import annotations

import socket
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator

import httpx
import pytest
import uvicorn

from redir.settings import RedirSettings, get_settings

Route = tuple[int, dict[str, str]]


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> RedirSettings:
    # Ignore proxy env vars so localhost servers are reached directly.
    return RedirSettings(trust_env=False, request_timeout_s=5.0)


def route_transport(routes: dict[str, Route | Callable[[httpx.Request], httpx.Response]]) -> httpx.MockTransport:
    """MockTransport answering by exact URL: ``{url: (status, headers)}``."""

    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get(str(request.url))
        if route is None:
            return httpx.Response(404)
        if callable(route):
            return route(request)
        status, headers = route
        return httpx.Response(status, headers=headers)

    return httpx.MockTransport(handler)


@contextmanager
def serve(app) -> Iterator[str]:
    """Run an ASGI app with uvicorn on an ephemeral localhost port."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]

    server = uvicorn.Server(uvicorn.Config(app, log_level="warning", lifespan="off"))
    thread = threading.Thread(target=server.run, kwargs={"sockets": [sock]}, daemon=True)
    thread.start()
    deadline = time.monotonic() + 10
    while not server.started:
        if not thread.is_alive() or time.monotonic() > deadline:
            raise RuntimeError("uvicorn test server failed to start")
        time.sleep(0.01)
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        server.should_exit = True
        thread.join(timeout=10)
        sock.close()
