"""In-memory sliding window rate limiter keyed by owner."""

from __future__ import annotations

import time
from collections import defaultdict

from fastapi import Depends, HTTPException, Request, status

from huddle_engine.api.auth import verify_token
from huddle_engine.observability.logger import get_logger

logger = get_logger("rate_limiter")


class SlidingWindowRateLimiter:
    """Request timestamps per key within a rolling window."""

    def __init__(self) -> None:
        self._requests: dict[str, list[float]] = defaultdict(list)

    def check(self, key: str, max_requests: int, window_seconds: int = 60) -> bool:
        """Return True if request is allowed, False if rate-limited."""
        now = time.monotonic()
        cutoff = now - window_seconds

        recent = [t for t in self._requests[key] if t > cutoff]
        if len(recent) >= max_requests:
            self._requests[key] = recent
            return False

        recent.append(now)
        self._requests[key] = recent
        return True


async def current_owner(
    request: Request,
    token_payload: dict = Depends(verify_token),
) -> str:
    """FastAPI dependency: authenticate, rate-limit, and return the owner id."""
    settings = request.app.state.settings
    limiter: SlidingWindowRateLimiter = request.app.state.rate_limiter
    owner_id = token_payload["sub"]

    if not limiter.check(owner_id, settings.rate_limit_requests_per_minute):
        logger.warning("rate_limited", owner_id=owner_id)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Try again later.",
            headers={"Retry-After": "60"},
        )

    return owner_id
