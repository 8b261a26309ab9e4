import asyncio

import fakeredis
from redis.exceptions import ConnectionError as RedisConnectionError
from starlette.requests import Request

from hostel_allocation.core.rate_limiting import RateLimiter, extract_identifier


def _run(coro):
    return asyncio.run(coro)


def _request(headers=None, client=("10.0.0.9", 5000)):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


def test_fixed_window_counts_and_blocks():
    async def scenario():
        redis_client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer())
        limiter = RateLimiter(redis_client, limit=2, window_seconds=60)
        results = [await limiter.hit("application_submit", "user:1") for _ in range(3)]
        ttl = await redis_client.ttl("rate_limit:application_submit:user:1")
        other = await limiter.hit("application_submit", "user:2")
        return results, ttl, other

    results, ttl, other = _run(scenario())

    assert [r.allowed for r in results] == [True, True, False]
    assert [r.remaining for r in results] == [1, 0, 0]
    assert results[2].retry_after > 0
    assert 0 < ttl <= 60
    assert other.allowed


class _UnavailableRedis:
    def pipeline(self, transaction=True):
        raise RedisConnectionError("redis is down")


def test_unavailable_store_fails_open():
    result = _run(RateLimiter(_UnavailableRedis(), limit=1).hit("application_submit", "user:1"))

    assert result.allowed
    assert result.total_hits == 0


def test_extract_identifier_prefers_user_then_forwarded_ip():
    assert extract_identifier(_request({"X-User-Id": "abc"})) == "user:abc"
    assert extract_identifier(_request({"X-Forwarded-For": "203.0.113.5, 10.0.0.1"})) == "ip:203.0.113.5"
    assert extract_identifier(_request()) == "ip:10.0.0.9"
    assert extract_identifier(_request(client=None)) == "ip:unknown"
