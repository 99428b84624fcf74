from __future__ import annotations

import importlib
from contextlib import contextmanager

from fastapi.testclient import TestClient

from jobboard.core import config as app_config
from jobboard.core.database import get_db


@contextmanager
def rate_limited_client(db_session, **limits):
    """
    SlowAPI decorators and middleware bind at import time, so reload the limiter,
    routes and app after toggling settings. Module state is restored on exit so
    other tests don't inherit rate-limited routes.
    """
    import jobboard.core.rate_limit as rate_limit
    import jobboard.routes.auth as auth_routes
    import jobboard.main as main

    try:
        app_config.settings.ENABLE_RATE_LIMITING = True
        for key, value in limits.items():
            setattr(app_config.settings, key, value)

        # Fresh limiter, then rebind routes + app to it.
        importlib.reload(rate_limit)
        importlib.reload(auth_routes)
        importlib.reload(main)

        def override_get_db():
            yield db_session

        main.app.dependency_overrides[get_db] = override_get_db

        with TestClient(main.app) as client:
            yield client
    finally:
        app_config.settings.ENABLE_RATE_LIMITING = False
        main.app.dependency_overrides.clear()
        importlib.reload(rate_limit)
        importlib.reload(auth_routes)
        importlib.reload(main)


def test_rate_limiting_returns_429_when_enabled(db_session):
    """
    Enable SlowAPI rate limiting and assert auth endpoints return 429 after exceeding the limit.
    """
    with rate_limited_client(db_session, RATE_LIMIT_AUTH="3/minute") as client:
        payload = {"email": "nobody@example.com", "password": "wrong-password"}

        # Limit is 3/minute on login: first 3 reach the handler, 4th blocked.
        statuses: list[int] = []
        for _ in range(4):
            r = client.post("/auth/login", json=payload)
            statuses.append(r.status_code)

        assert statuses[:3] == [401] * 3, statuses
        assert statuses[3] == 429, statuses
        body = r.json()
        assert body.get("error") == "RATE_LIMITED"
        assert isinstance(body.get("message"), str) and body["message"]


def test_default_limit_applies_to_undecorated_routes(db_session):
    with rate_limited_client(db_session, RATE_LIMIT_AUTH="3/minute", RATE_LIMIT_DEFAULT="2/minute") as client:
        statuses = [client.get("/jobs").status_code for _ in range(3)]

        assert statuses == [200, 200, 429], statuses
        assert client.get("/jobs").json()["error"] == "RATE_LIMITED"

        # Login keeps its own limit rather than the default.
        payload = {"email": "nobody@example.com", "password": "wrong-password"}
        login_statuses = [client.post("/auth/login", json=payload).status_code for _ in range(3)]
        assert login_statuses == [401] * 3, login_statuses
