# Bounded exponential backoff with jitter around opening a backend stream.
# Only call establishment is retried; once fragments flow, errors propagate.

from __future__ import annotations
import asyncio
import logging
import random
from typing import AsyncIterator, Awaitable, Callable, Optional

from .errors import ConfigurationError
from .types import GenerationRequest, RetryState

logger = logging.getLogger(__name__)

OVERLOAD_MARKERS = ("503", "overloaded", "unavailable")
OVERLOAD_STATUS = 503


def is_transient_overload(exc: BaseException) -> bool:
    """True when the error looks like a temporary backend overload (HTTP 503)."""
    if isinstance(exc, ConfigurationError):
        return False
    for attr in ("status", "code", "status_code"):
        value = getattr(exc, attr, None)
        try:
            if value is not None and int(value) == OVERLOAD_STATUS:
                return True
        except (TypeError, ValueError):
            pass
    signature = f"{exc!r} {getattr(exc, 'message', '') or ''} {exc}".lower()
    return any(marker in signature for marker in OVERLOAD_MARKERS)


def backoff_delay(attempt: int, base_delay: float = 1.0, jitter: float = 1.0, rng: Optional[random.Random] = None) -> float:
    """Seconds to wait after failed attempt `attempt` (0-indexed).

    Lies in [2**(attempt+1) * base_delay, 2**(attempt+1) * base_delay + jitter).
    """
    rng = rng or random
    return (2 ** (attempt + 1)) * base_delay + rng.random() * jitter


class RetryController:
    """Opens a streaming call, retrying transient overload failures.

    Non-transient errors propagate unchanged on the attempt that raised them.
    When the retry budget runs out, the last backend error is re-raised as is.
    `state` exposes the most recent call's RetryState while it is in flight.
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        jitter: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.jitter = jitter
        self._sleep = sleep
        self._rng = rng or random.Random()
        self.state: Optional[RetryState] = None

    def delay_for(self, attempt: int) -> float:
        return backoff_delay(attempt, self.base_delay, self.jitter, self._rng)

    async def open(self, client, request: GenerationRequest) -> AsyncIterator[str]:
        state = RetryState(attempt=0, max_retries=self.max_retries)
        self.state = state
        try:
            while True:
                try:
                    return await client.open_stream(request)
                except Exception as exc:
                    state.last_error = exc
                    if not is_transient_overload(exc):
                        raise
                    if state.attempt >= state.max_retries:
                        logger.error("Backend still overloaded after %d attempts; giving up", state.attempt + 1)
                        raise
                    delay = self.delay_for(state.attempt)
                    logger.warning(
                        "Backend overloaded (503). Retrying in %dms... (attempt %d/%d)",
                        round(delay * 1000),
                        state.attempt + 1,
                        state.max_retries,
                    )
                    await self._sleep(delay)
                    state.attempt += 1
        finally:
            if self.state is state:
                self.state = None
