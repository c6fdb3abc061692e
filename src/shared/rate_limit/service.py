"""Fixed-window rate limiting keyed on client address."""

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from enum import StrEnum

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import HTTPConnection

from src.config.settings import settings

from .models import RateWindow

logger = logging.getLogger(__name__)


class RateLimitDecision(StrEnum):
    ALLOW = "allow"
    REJECT = "reject"


def get_client_address(request: HTTPConnection) -> str:
    """Resolve the address a request is counted against.

    ``X-Forwarded-For`` is taken verbatim when trusted; clients can spoof it
    unless a proxy in front of the app overwrites it.
    """
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RateLimitService:
    """Counts requests per address in non-overlapping windows.

    A single lock serialises read-modify-write of the counters and is held
    until the commit, so two concurrent requests can never both observe the
    same count. Bursts of up to twice the limit are possible across a window
    boundary.
    """

    def __init__(self, max_requests: int | None = None, window_seconds: int | None = None):
        self.max_requests = max_requests if max_requests is not None else settings.rate_limit_requests
        self.window = timedelta(
            seconds=window_seconds if window_seconds is not None else settings.rate_limit_window_seconds
        )
        self._lock = asyncio.Lock()

    async def check(self, session: AsyncSession, address: str, now: datetime | None = None) -> RateLimitDecision:
        """Record one request from ``address`` and decide whether it may proceed.

        Args:
            session: Database session; the window is committed before the lock is released
            address: Client address key
            now: Evaluation time (defaults to the current time)

        Returns:
            RateLimitDecision.ALLOW or RateLimitDecision.REJECT

        """
        now = now or datetime.now(UTC)
        window_floor = now - self.window

        async with self._lock:
            # Lazy cleanup of stale windows from every address
            await session.execute(delete(RateWindow).where(RateWindow.window_start < window_floor))

            result = await session.execute(select(RateWindow).where(RateWindow.ip_address == address))
            window = result.scalar_one_or_none()

            if window is None:
                session.add(RateWindow(ip_address=address, request_count=1, window_start=now))
                decision = RateLimitDecision.ALLOW
            elif window.window_start <= window_floor:
                window.request_count = 1
                window.window_start = now
                decision = RateLimitDecision.ALLOW
            else:
                window.request_count += 1
                over_limit = window.request_count > self.max_requests
                decision = RateLimitDecision.REJECT if over_limit else RateLimitDecision.ALLOW

            # The next holder of the lock must read this count
            await session.commit()

        if decision is RateLimitDecision.REJECT:
            logger.warning(f"Rate limit exceeded for {address} ({window.request_count} requests)")
        return decision
