"""CORS, rate limiting, and security headers middleware."""

import time
from collections import defaultdict, deque
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from portal_api.core.config import Settings

_DEFAULT_TRUSTED_HEADERS = ["X-Forwarded-For", "X-Real-IP"]

# Credential endpoints get their own, tighter budget.
CREDENTIAL_PATH_SUFFIXES = ("/login", "/password-reset/request", "/password-reset/verify")


def get_client_ip(request: Request, trusted_headers: list[str] | None = None) -> str | None:
    """Extract the client IP from trusted proxy headers or the socket peer.

    Headers are checked in priority order. For X-Forwarded-For the leftmost
    entry (the original client) is used.

    Args:
        request: The incoming Starlette request.
        trusted_headers: Ordered list of header names to check.

    Returns:
        The client IP address, or None if it cannot be determined.
    """
    headers = trusted_headers if trusted_headers is not None else _DEFAULT_TRUSTED_HEADERS

    for header in headers:
        value = request.headers.get(header, "").strip()
        if not value:
            continue
        if header.lower() == "x-forwarded-for":
            first = value.split(",")[0].strip()
            if first:
                return first
            continue
        return value

    return request.client.host if request.client else None


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Configure CORS middleware on the FastAPI app."""
    kwargs: dict[str, Any] = {
        "allow_credentials": True,
        "allow_methods": ["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        "allow_headers": ["Authorization", "Content-Type"],
    }
    if settings.cors_origin_list:
        kwargs["allow_origins"] = settings.cors_origin_list
    if settings.cors_origin_regex.strip():
        kwargs["allow_origin_regex"] = settings.cors_origin_regex.strip()
    app.add_middleware(CORSMiddleware, **kwargs)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to every response and disable caching of API bodies."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers.setdefault("Cache-Control", "no-store")
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """In-memory sliding-window rate limit per client IP.

    Credential endpoints (login and the reset flow) are counted in a
    separate bucket with a lower limit.
    """

    def __init__(
        self,
        app: ASGIApp,
        requests_per_minute: int = 60,
        credential_requests_per_minute: int = 20,
        trusted_proxy_headers: list[str] | None = None,
        window_seconds: float = 60.0,
    ) -> None:
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.credential_requests_per_minute = credential_requests_per_minute
        self.trusted_proxy_headers = trusted_proxy_headers
        self.window_seconds = window_seconds
        self._hits: dict[tuple[str, str], deque[float]] = defaultdict(deque)

    def _bucket(self, path: str) -> tuple[str, int]:
        if path.rstrip("/").endswith(CREDENTIAL_PATH_SUFFIXES):
            return "credentials", self.credential_requests_per_minute
        return "default", self.requests_per_minute

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        client_ip = get_client_ip(request, self.trusted_proxy_headers) or "unknown"
        bucket, limit = self._bucket(request.url.path)
        now = time.monotonic()

        hits = self._hits[(client_ip, bucket)]
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()

        if len(hits) >= limit:
            return Response(
                content='{"detail":"Rate limit exceeded","code":"rate_limited"}',
                status_code=429,
                media_type="application/json",
                headers={"Retry-After": str(int(self.window_seconds))},
            )

        hits.append(now)
        return await call_next(request)
