from fastapi import FastAPI
from fastapi.testclient import TestClient

from accounts_api.core.rate_limit import RateLimiter, RateLimitMiddleware


def test_login_is_limited_to_five_attempts(client, regular_user):
    payload = {"email": regular_user.email, "password": "wrong999"}
    for _ in range(5):
        assert client.post("/api/auth/login", json=payload).status_code == 401

    response = client.post("/api/auth/login", json=payload)
    assert response.status_code == 429
    assert response.json()["success"] is False
    assert int(response.headers["Retry-After"]) >= 1
    assert response.headers["X-RateLimit-Remaining"] == "0"


def test_health_is_not_limited(client):
    for _ in range(10):
        assert client.get("/api/health").status_code == 200


def _limited_app(max_requests):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, rate_limiter=RateLimiter(max_requests=max_requests, window_seconds=60))

    @app.get("/api/ping")
    async def ping():
        return {"pong": True}

    @app.get("/docs-page")
    async def docs_page():
        return {"ok": True}

    return app


def test_default_limit_applies_per_client():
    client = TestClient(_limited_app(max_requests=3))
    responses = [client.get("/api/ping") for _ in range(4)]
    assert [r.status_code for r in responses] == [200, 200, 200, 429]
    assert responses[0].headers["X-RateLimit-Limit"] == "3"
    assert responses[0].headers["X-RateLimit-Remaining"] == "2"

    other = client.get("/api/ping", headers={"X-Forwarded-For": "10.0.0.8"})
    assert other.status_code == 200


def test_non_api_paths_are_not_limited():
    client = TestClient(_limited_app(max_requests=1))
    assert all(client.get("/docs-page").status_code == 200 for _ in range(3))
