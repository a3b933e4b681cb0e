"""HTTP middleware: CORS for the front end, response hardening, per-client rate limit."""

import math
import time
from collections import deque
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from civic_sync.core.config import Settings

# Checked in order; the first non-empty one wins
_CLIENT_IP_HEADERS = ("CF-Connecting-IP", "X-Forwarded-For", "X-Real-IP")

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Cache-Control": "no-store",
}


def get_client_ip(request: Request, trusted_headers: list[str] | None = None) -> str:
    """Best-effort client address for rate limiting.

    Proxy headers are consulted first; ``X-Forwarded-For`` contributes its
    leftmost entry.  Falls back to the socket peer, then ``"unknown"``.
    """
    for header in _CLIENT_IP_HEADERS if trusted_headers is None else trusted_headers:
        value = request.headers.get(header, "").strip()
        if value and header.lower() == "x-forwarded-for":
            return value.split(",", 1)[0].strip()
        if value:
            return value
    return request.client.host if request.client else "unknown"


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Configure CORS for the front end's read calls.

    No origins are allowed unless ``cors_origins`` lists them.
    """
    kwargs: dict[str, Any] = {
        "allow_credentials": False,
        "allow_methods": ["GET", "POST"],
        "allow_headers": ["Authorization", "Content-Type"],
        "allow_origins": settings.cors_origin_list,
    }
    app.add_middleware(CORSMiddleware, **kwargs)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp hardening headers onto every response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers.update(_SECURITY_HEADERS)
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """In-memory per-client limit over a sliding one-minute window.

    Clients with no request inside the window are swept out once per window,
    so the table only holds recently active clients.

    Args:
        app: The wrapped ASGI app.
        requests_per_minute: Requests allowed per client per window.
        trusted_proxy_headers: Headers consulted for the client IP.
    """

    window_seconds = 60.0

    def __init__(
        self,
        app: ASGIApp,
        requests_per_minute: int = 60,
        trusted_proxy_headers: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.trusted_proxy_headers = trusted_proxy_headers
        self._hits: dict[str, deque[float]] = {}
        self._next_sweep = 0.0

    @property
    def tracked_clients(self) -> int:
        return len(self._hits)

    def _sweep(self, window_start: float) -> None:
        idle = [ip for ip, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for ip in idle:
            del self._hits[ip]

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        client_ip = get_client_ip(request, self.trusted_proxy_headers)
        now = time.monotonic()
        window_start = now - self.window_seconds

        if now >= self._next_sweep:
            self._sweep(window_start)
            self._next_sweep = now + self.window_seconds

        hits = self._hits.setdefault(client_ip, deque())
        while hits and hits[0] <= window_start:
            hits.popleft()

        if len(hits) >= self.requests_per_minute:
            oldest = hits[0] if hits else now
            retry_after = max(1, math.ceil(oldest + self.window_seconds - now))
            return JSONResponse(
                {"detail": "Rate limit exceeded"},
                status_code=429,
                headers={"Retry-After": str(retry_after)},
            )

        hits.append(now)
        return await call_next(request)
