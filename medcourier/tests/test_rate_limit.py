from __future__ import annotations

from flask.testing import FlaskClient

from medcourier.shared.middleware.rate_limit import (
    AUTH,
    FixedWindowRateLimiter,
    RateLimitPolicy,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_limit_allows_threshold_then_rejects() -> None:
    clock = FakeClock()
    limiter = FixedWindowRateLimiter({AUTH: RateLimitPolicy(3, 60.0)}, clock=clock)

    decisions = [limiter.check("10.0.0.1", AUTH) for _ in range(4)]

    assert [d.allowed for d in decisions] == [True, True, True, False]
    assert [d.remaining for d in decisions] == [2, 1, 0, 0]
    assert decisions[-1].retry_after == 60


def test_counter_resets_in_next_window() -> None:
    clock = FakeClock()
    limiter = FixedWindowRateLimiter({AUTH: RateLimitPolicy(2, 60.0)}, clock=clock)
    for _ in range(3):
        limiter.check("10.0.0.1", AUTH)

    clock.now += 45
    blocked = limiter.check("10.0.0.1", AUTH)
    clock.now += 15
    reopened = limiter.check("10.0.0.1", AUTH)

    assert not blocked.allowed
    assert blocked.retry_after == 15
    assert reopened.allowed
    assert reopened.remaining == 1


def test_clients_and_classes_are_counted_separately() -> None:
    limiter = FixedWindowRateLimiter(
        {AUTH: RateLimitPolicy(1, 60.0), "api": RateLimitPolicy(1, 60.0)}, clock=FakeClock()
    )

    assert limiter.check("a", AUTH).allowed
    assert limiter.check("b", AUTH).allowed
    assert limiter.check("a", "api").allowed
    assert not limiter.check("a", AUTH).allowed


def test_stale_windows_are_swept() -> None:
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(
        {AUTH: RateLimitPolicy(5, 60.0)}, clock=clock, sweep_interval=10.0
    )
    limiter.check("old-client", AUTH)

    clock.now += 120
    limiter.check("new-client", AUTH)

    assert limiter.store.get("auth:old-client") is None
    assert limiter.store.get("auth:new-client") is not None


def test_auth_endpoint_rejects_request_over_limit(client: FlaskClient) -> None:
    payload = {"email": "nobody@example.com", "password": "whatever-1"}
    headers = {"X-Forwarded-For": "203.0.113.9"}

    statuses = [
        client.post("/api/auth/driver/login", json=payload, headers=headers).status_code
        for _ in range(5)
    ]
    rejected = client.post("/api/auth/driver/login", json=payload, headers=headers)

    assert statuses == [401] * 5
    assert rejected.status_code == 429
    assert rejected.get_json()["error"] == "RateLimitError"
    assert int(rejected.headers["Retry-After"]) >= 1
    assert rejected.headers["X-RateLimit-Remaining"] == "0"

    other_client = client.post(
        "/api/auth/driver/login", json=payload, headers={"X-Forwarded-For": "198.51.100.2"}
    )
    assert other_client.status_code == 401


def test_rejected_request_never_reaches_validation(client: FlaskClient) -> None:
    headers = {"X-Forwarded-For": "203.0.113.10"}
    for _ in range(5):
        client.post("/api/auth/shipper/forgot-password", json={"email": "x@y.co"}, headers=headers)

    response = client.post("/api/auth/shipper/forgot-password", json={}, headers=headers)

    assert response.status_code == 429


def test_exempt_endpoints_are_not_counted(client: FlaskClient) -> None:
    for _ in range(10):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert "X-RateLimit-Limit" not in response.headers
