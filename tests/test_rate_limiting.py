"""Tests for the sliding-window rate limiters."""

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import create_app
from src.middleware.rate_limiting import RATE_LIMIT_MESSAGE, SlidingWindowRateLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _client_from(app, address: str) -> AsyncClient:
    """Client whose socket peer address is ``address``."""
    transport = ASGITransport(app=app, client=(address, 54321))
    return AsyncClient(transport=transport, base_url="http://test")


def _register_body(username: str) -> dict:
    return {"username": username, "password": "Passw0rd", "role": "Fan"}


class TestSlidingWindowRateLimiter:
    @pytest.mark.asyncio
    async def test_allows_up_to_limit(self):
        limiter = SlidingWindowRateLimiter(limit=3, window=60, clock=FakeClock())

        assert [await limiter.check_rate_limit("1.2.3.4") for _ in range(4)] == [True, True, True, False]

    @pytest.mark.asyncio
    async def test_keys_are_independent(self):
        limiter = SlidingWindowRateLimiter(limit=1, window=60, clock=FakeClock())

        assert await limiter.check_rate_limit("1.1.1.1")
        assert await limiter.check_rate_limit("2.2.2.2")
        assert not await limiter.check_rate_limit("1.1.1.1")

    @pytest.mark.asyncio
    async def test_window_slides(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(limit=2, window=60, clock=clock)

        await limiter.check_rate_limit("ip")
        clock.now += 30
        await limiter.check_rate_limit("ip")
        assert not await limiter.check_rate_limit("ip")

        clock.now += 31
        assert await limiter.check_rate_limit("ip")
        assert not await limiter.check_rate_limit("ip")

    @pytest.mark.asyncio
    async def test_retry_after(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(limit=1, window=60, clock=clock)

        assert limiter.retry_after("ip") == 0
        await limiter.check_rate_limit("ip")
        clock.now += 20
        assert limiter.retry_after("ip") == 41

    @pytest.mark.asyncio
    async def test_stale_keys_are_cleaned_up(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(limit=1, window=10, clock=clock)

        await limiter.check_rate_limit("a")
        await limiter.check_rate_limit("b")

        clock.now += 100
        await limiter.check_rate_limit("c")
        assert set(limiter.requests) == {"c"}


@pytest.mark.asyncio
async def test_auth_limit_is_shared_between_register_and_login(app):
    async with _client_from(app, "203.0.113.7") as client:
        for attempt in range(5):
            response = await client.post("/api/auth/register", json=_register_body(f"limited{attempt}"))
            assert response.status_code == 200
        for _ in range(5):
            response = await client.post("/api/auth/login", json={"username": "limited0", "password": "Wr0ngpass"})
            assert response.status_code in (401, 403)

        response = await client.post("/api/auth/login", json={"username": "limited1", "password": "Passw0rd"})

    assert response.status_code == 429
    assert "Retry-After" in response.headers
    error = response.json()["errors"][0]
    assert error["code"] == "RATE_LIMIT_EXCEEDED"
    assert error["detail"] == RATE_LIMIT_MESSAGE

    async with _client_from(app, "198.51.100.1") as other_origin:
        response = await other_origin.post("/api/auth/login", json={"username": "limited1", "password": "Passw0rd"})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_forwarded_for_header_cannot_evade_auth_limit(app):
    async with _client_from(app, "203.0.113.9") as client:
        statuses = []
        for attempt in range(11):
            response = await client.post(
                "/api/auth/login",
                json={"username": "nobody_here", "password": "Passw0rd"},
                headers={"X-Forwarded-For": f"10.9.9.{attempt}"},
            )
            statuses.append(response.status_code)

    assert statuses[:10] == [401] * 10
    assert statuses[10] == 429


@pytest.mark.asyncio
async def test_trusted_proxy_uses_the_hop_it_appended(test_settings):
    settings = test_settings.model_copy(update={"trust_proxy_headers": True, "trusted_proxy_hops": 1})
    app = create_app(settings)
    await app.state.database.create_all()

    async with _client_from(app, "10.0.0.1") as proxy:
        statuses = []
        for attempt in range(11):
            response = await proxy.post(
                "/api/auth/login",
                json={"username": "nobody_here", "password": "Passw0rd"},
                headers={"X-Forwarded-For": f"10.9.9.{attempt}, 192.0.2.44"},
            )
            statuses.append(response.status_code)

        other_client = await proxy.post(
            "/api/auth/login",
            json={"username": "nobody_here", "password": "Passw0rd"},
            headers={"X-Forwarded-For": "192.0.2.45"},
        )

    assert statuses[10] == 429
    assert other_client.status_code == 401

    entries = await app.state.audit_logger.recent_entries(limit=20)
    assert {row.AuditLogEntry.origin_address for row in entries} == {"192.0.2.44", "192.0.2.45"}

    await app.state.database.disconnect()


@pytest.mark.asyncio
async def test_auth_limit_does_not_apply_to_other_routes(app):
    async with _client_from(app, "203.0.113.8") as client:
        for attempt in range(10):
            await client.post("/api/auth/register", json=_register_body(f"quota{attempt}"))

        response = await client.get("/api/auth/me")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_global_limit_covers_every_route(test_settings):
    settings = test_settings.model_copy(update={"global_rate_limit_requests": 2})
    app = create_app(settings)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        assert (await client.get("/version")).status_code == 200
        assert (await client.get("/health")).status_code == 200
        response = await client.get("/version")

        assert response.status_code == 429
        error = response.json()["errors"][0]
        assert error["code"] == "RATE_LIMIT_EXCEEDED"
        assert error["detail"] == RATE_LIMIT_MESSAGE

        assert (await client.get("/health")).status_code == 429

    await app.state.database.disconnect()
