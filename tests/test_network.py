"""Tests for shared.network."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from shared.network import Backoff, BreakerState, CircuitBreaker, ForgeHTTP, ForgeHTTPError

NO_WAIT = Backoff(base=0.0)


def _client(handler, **kwargs) -> ForgeHTTP:
    return ForgeHTTP(
        base_url="https://words.example",
        backoff=NO_WAIT,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


async def _fetch(http: ForgeHTTP, path: str = "/english.json"):
    async with http:
        return await http.fetch_json(path)


class TestRetries:

    def test_retries_transient_status(self):
        statuses = iter([503, 429, 200])

        def handler(request):
            status = next(statuses)
            return httpx.Response(status, json=["ok"] if status == 200 else None)

        assert asyncio.run(_fetch(_client(handler, max_retries=2))) == ["ok"]

    def test_retries_transport_errors_then_gives_up(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ForgeHTTPError, match="after 3 attempts"):
            asyncio.run(_fetch(_client(handler, max_retries=2)))
        assert len(calls) == 3

    def test_client_error_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(404)

        with pytest.raises(ForgeHTTPError, match="HTTP 404"):
            asyncio.run(_fetch(_client(handler, max_retries=3)))
        assert len(calls) == 1

    def test_redirect_loop_is_wrapped_and_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(302, headers={"Location": str(request.url)})

        http = _client(handler, max_retries=3)
        with pytest.raises(ForgeHTTPError, match="TooManyRedirects"):
            asyncio.run(_fetch(http))
        # one redirect chain (httpx follows at most 20), not four
        assert len(calls) <= 21
        assert http.breaker.failures == 1

    def test_invalid_json(self):
        http = _client(lambda request: httpx.Response(200, content=b"not json"))
        with pytest.raises(ForgeHTTPError, match="invalid JSON"):
            asyncio.run(_fetch(http))

    def test_backoff_is_capped(self):
        policy = Backoff(base=1.0, cap=2.0)
        assert all(0.0 <= policy.delay(attempt) <= 2.0 for attempt in range(10))


class FakeClock:

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestCircuitBreaker:

    def test_opens_after_threshold_and_blocks(self):
        clock = FakeClock()
        breaker = CircuitBreaker(threshold=2, cooldown=10.0, clock=clock)
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        async def scenario():
            async with _client(handler, max_retries=0, breaker=breaker) as http:
                for _ in range(3):
                    with pytest.raises(ForgeHTTPError):
                        await http.fetch_json("/english.json")

        asyncio.run(scenario())
        assert breaker.state is BreakerState.OPEN
        assert len(calls) == 2

    def test_half_open_success_closes(self):
        clock = FakeClock()
        breaker = CircuitBreaker(threshold=1, cooldown=5.0, clock=clock)
        breaker.failed()
        assert breaker.state is BreakerState.OPEN

        with pytest.raises(ForgeHTTPError, match="circuit open"):
            breaker.check("/x")

        clock.now = 5.0
        breaker.check("/x")
        assert breaker.state is BreakerState.HALF_OPEN
        breaker.succeeded()
        assert breaker.state is BreakerState.CLOSED
        assert breaker.failures == 0

    def test_failed_half_open_request_reopens(self):
        clock = FakeClock()
        breaker = CircuitBreaker(threshold=3, cooldown=1.0, clock=clock)
        for _ in range(3):
            breaker.failed()
        clock.now = 2.0
        breaker.check("/x")
        breaker.failed()
        assert breaker.state is BreakerState.OPEN
        assert breaker.opened_at == 2.0
