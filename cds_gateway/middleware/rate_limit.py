"""Rate limiting middleware for the API surface.

Limits apply per client IP and path prefix. Health and readiness probes are
never limited. Uses in-memory storage, so limits are per worker process.
"""

import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

# Path prefixes that are rate limited
DEFAULT_LIMITED_PREFIXES: tuple[str, ...] = ("/api/library", "/cds-services")


@dataclass
class RateLimitConfig:
    """Configuration for a rate limit rule."""

    requests: int  # Number of allowed requests
    window_seconds: int  # Time window in seconds


@dataclass
class RateLimitEntry:
    """Tracking entry for rate limit state."""

    count: int = 0
    window_start: float = field(default_factory=time.time)


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request.

    Handles X-Forwarded-For header for reverse proxy scenarios.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Take the first IP in the chain (original client)
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


def match_prefix(path: str, prefixes: tuple[str, ...]) -> str | None:
    """Return the configured prefix a path falls under, if any."""
    for prefix in prefixes:
        if path == prefix or path.startswith(prefix + "/"):
            return prefix
    return None


class InMemoryRateLimitStorage:
    """In-memory fixed-window rate limit storage."""

    def __init__(self) -> None:
        self._storage: dict[str, RateLimitEntry] = defaultdict(RateLimitEntry)
        self._last_cleanup = time.time()
        self._cleanup_interval = 300  # 5 minutes

    def _cleanup_expired(self, max_window: int) -> None:
        """Remove expired entries to prevent memory growth."""
        now = time.time()
        if now - self._last_cleanup < self._cleanup_interval:
            return

        expired_keys = [
            key
            for key, entry in self._storage.items()
            if now - entry.window_start > max_window
        ]

        for key in expired_keys:
            del self._storage[key]

        self._last_cleanup = now

    def check_and_increment(
        self, key: str, limit: int, window_seconds: int
    ) -> tuple[bool, int, int]:
        """Check rate limit and increment counter.

        Returns:
            Tuple of (is_allowed, remaining_requests, reset_seconds)
        """
        self._cleanup_expired(window_seconds)

        now = time.time()
        entry = self._storage[key]

        # Check if window has expired
        if now - entry.window_start > window_seconds:
            entry.count = 1
            entry.window_start = now
            return True, limit - 1, window_seconds

        if entry.count < limit:
            entry.count += 1
            remaining = limit - entry.count
            reset = int(window_seconds - (now - entry.window_start))
            return True, remaining, reset

        reset = int(window_seconds - (now - entry.window_start))
        return False, 0, reset


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limiting middleware for FastAPI.

    Returns 429 Too Many Requests when a client exceeds the limit for a
    path prefix.
    """

    def __init__(
        self,
        app,
        config: RateLimitConfig,
        prefixes: tuple[str, ...] = DEFAULT_LIMITED_PREFIXES,
        storage: InMemoryRateLimitStorage | None = None,
        enabled: bool = True,
    ) -> None:
        super().__init__(app)
        self.config = config
        self.prefixes = prefixes
        self.storage = storage or InMemoryRateLimitStorage()
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and apply rate limiting."""
        if not self.enabled:
            return await call_next(request)

        path = request.url.path
        prefix = match_prefix(path, self.prefixes)
        if prefix is None:
            return await call_next(request)

        client_ip = get_client_ip(request)
        key = f"{prefix}:{client_ip}"

        is_allowed, remaining, reset = self.storage.check_and_increment(
            key, self.config.requests, self.config.window_seconds
        )

        if not is_allowed:
            logger.warning(f"Rate limit exceeded: {request.method} {path} from {client_ip}")

            return JSONResponse(
                status_code=429,
                content={
                    "error": "Too many requests, please try again later.",
                    "status": 429,
                    "retry_after": reset,
                },
                headers={
                    "Retry-After": str(reset),
                    "RateLimit-Limit": str(self.config.requests),
                    "RateLimit-Remaining": "0",
                    "RateLimit-Reset": str(reset),
                },
            )

        response = await call_next(request)

        response.headers["RateLimit-Limit"] = str(self.config.requests)
        response.headers["RateLimit-Remaining"] = str(remaining)
        response.headers["RateLimit-Reset"] = str(reset)

        return response
