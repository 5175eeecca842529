"""
KeyForge HTTP Client
====================

Small async client over **httpx** used to pull word lists from a remote
mirror.

A request is retried on HTTP 429/5xx and on transport errors, sleeping
a fully jittered exponential delay between attempts. Failed requests
(after their retries) are counted by a :class:`CircuitBreaker`; once it
trips, calls fail immediately until its cool-down has passed and one
request after it succeeds.

References:
    - Nygard, M. T. (2018). Release It! (2nd ed.), ch. 5, Circuit Breaker.
    - Brooker, M. (2015). Exponential Backoff and Jitter. AWS
      Architecture Blog.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

import httpx

logger = logging.getLogger("keyforge.network")

RETRY_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})


class ForgeHTTPError(Exception):
    """A request could not produce a usable response."""


# ============================ Resilience ====================================


class BreakerState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreaker:
    """Opens after *threshold* failed requests in a row.

    ``clock`` is injectable so tests can move time forward.
    """

    threshold: int = 5
    cooldown: float = 30.0
    clock: Callable[[], float] = time.monotonic
    state: BreakerState = BreakerState.CLOSED
    failures: int = 0
    opened_at: float = 0.0

    def check(self, target: str) -> None:
        """Raise :class:`ForgeHTTPError` if a request to *target* must not run."""
        if self.state is not BreakerState.OPEN:
            return
        if self.clock() - self.opened_at < self.cooldown:
            raise ForgeHTTPError(f"circuit open, refusing request to {target}")
        self.state = BreakerState.HALF_OPEN
        logger.info("Circuit half-open, trying %s", target)

    def succeeded(self) -> None:
        self.failures = 0
        self.state = BreakerState.CLOSED

    def failed(self) -> None:
        self.failures += 1
        if self.state is BreakerState.HALF_OPEN or self.failures >= self.threshold:
            self.state = BreakerState.OPEN
            self.opened_at = self.clock()
            logger.warning("Circuit open after %d failed requests", self.failures)


@dataclass(frozen=True)
class Backoff:
    """Full-jitter delay: ``U(0, 1) * min(cap, base * 2**attempt)``."""

    base: float = 0.5
    cap: float = 8.0

    def delay(self, attempt: int) -> float:
        return random.random() * min(self.cap, self.base * 2 ** attempt)


# ============================= Client =======================================


class ForgeHTTP:
    """Async JSON-over-HTTP client with retries and a circuit breaker.

    Usage::

        async with ForgeHTTP(base_url="https://lists.example.org") as http:
            words = await http.fetch_json("/english.json")

    Args:
        base_url: Prefix for relative request paths.
        timeout: Per-request timeout in seconds.
        max_retries: Extra attempts after the first for retryable failures.
        backoff: Delay policy between attempts.
        breaker: Shared breaker; a private one is created when omitted.
        user_agent: ``User-Agent`` header value.
        transport: httpx transport override (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout: float = 10.0,
        max_retries: int = 2,
        backoff: Backoff | None = None,
        breaker: CircuitBreaker | None = None,
        user_agent: str = "KeyForge/1.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._max_retries = max(0, max_retries)
        self._backoff = backoff or Backoff()
        self._breaker = breaker or CircuitBreaker()
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> ForgeHTTP:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    async def get(self, url: str, **params: Any) -> httpx.Response:
        """GET *url*, retrying transient failures.

        Raises:
            ForgeHTTPError: Open circuit, a non-retryable status, or every
                attempt failed.
        """
        self._breaker.check(url)
        try:
            response = await self._get_with_retries(url, params or None)
        except ForgeHTTPError:
            self._breaker.failed()
            raise
        self._breaker.succeeded()
        return response

    async def fetch_json(self, url: str, **params: Any) -> Any:
        """GET *url* and decode the body as JSON."""
        response = await self.get(url, **params)
        try:
            return response.json()
        except ValueError as exc:
            raise ForgeHTTPError(f"invalid JSON from {url}") from exc

    async def _get_with_retries(
        self, url: str, params: dict[str, Any] | None
    ) -> httpx.Response:
        attempts = self._max_retries + 1
        for attempt in range(attempts):
            try:
                response = await self._client.get(url, params=params)
            except httpx.TransportError as exc:
                reason = f"{type(exc).__name__}: {exc}"
            except httpx.RequestError as exc:
                # redirect loops and undecodable bodies do not improve on retry
                raise ForgeHTTPError(f"GET {url} failed: {type(exc).__name__}: {exc}") from exc
            else:
                if response.status_code not in RETRY_STATUSES:
                    if response.is_error:
                        raise ForgeHTTPError(f"HTTP {response.status_code} from {url}")
                    return response
                reason = f"HTTP {response.status_code}"

            logger.warning("GET %s failed (%s), attempt %d/%d", url, reason, attempt + 1, attempts)
            if attempt + 1 < attempts:
                await asyncio.sleep(self._backoff.delay(attempt))

        raise ForgeHTTPError(f"GET {url} failed after {attempts} attempts ({reason})")
