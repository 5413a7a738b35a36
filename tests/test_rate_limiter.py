import pytest
from fastapi import HTTPException

from edupal.utils.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_minute_window_blocks_then_recovers():
    clock = FakeClock()
    limiter = RateLimiter(requests_per_minute=2, requests_per_hour=100, clock=clock)

    limiter.check("10.0.0.1")
    limiter.check("10.0.0.1")
    with pytest.raises(HTTPException) as exc_info:
        limiter.check("10.0.0.1")
    assert exc_info.value.status_code == 429
    assert exc_info.value.headers == {"Retry-After": "60"}
    assert exc_info.value.detail["retry_after"] == 60

    # Other clients are unaffected
    limiter.check("10.0.0.2")

    clock.now += 61
    limiter.check("10.0.0.1")


def test_hour_window():
    clock = FakeClock()
    limiter = RateLimiter(requests_per_minute=100, requests_per_hour=3, clock=clock)

    for _ in range(3):
        limiter.check("student")
        clock.now += 120

    with pytest.raises(HTTPException) as exc_info:
        limiter.check("student")
    assert exc_info.value.headers == {"Retry-After": "3600"}


def test_generate_endpoint_is_rate_limited(client, make_resource):
    from edupal.dependencies import generation_rate_limiter
    from edupal.main import app

    app.dependency_overrides[generation_rate_limiter] = RateLimiter(requests_per_minute=1)
    resource = make_resource()
    payload = {"resourceId": str(resource.id), "type": "quiz"}

    client.post("/api/study/generate", json=payload)
    response = client.post("/api/study/generate", json=payload)

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "60"
    body = response.json()
    assert body["error"] == "rate_limit_exceeded"
    assert body["retry_after"] == 60
    assert body["status_code"] == 429


def test_forwarded_for_header_does_not_open_new_windows(client, make_resource):
    from edupal.dependencies import generation_rate_limiter
    from edupal.main import app

    app.dependency_overrides[generation_rate_limiter] = RateLimiter(requests_per_minute=1)
    resource = make_resource()
    payload = {"resourceId": str(resource.id), "type": "quiz"}

    codes = [
        client.post(
            "/api/study/generate",
            json=payload,
            headers={"X-Forwarded-For": f"203.0.113.{n}"}
        ).status_code
        for n in range(1, 5)
    ]

    assert codes[0] != 429
    assert codes[1:] == [429, 429, 429]
