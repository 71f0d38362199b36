from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator

_DB_DIR = tempfile.mkdtemp(prefix="medcourier-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_DB_DIR}/test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-fernet")
os.environ.setdefault("CRON_SECRET", "cron-test-secret")
os.environ.setdefault("RL_API_LIMIT", "1000")
os.environ.setdefault("APP_ENV", "test")
os.environ["GOOGLE_MAPS_API_KEY"] = ""

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from medcourier.app import create_app  # noqa: E402
from medcourier.infrastructure.container import container  # noqa: E402
from medcourier.infrastructure.db import drop_db, init_db  # noqa: E402
from medcourier.shared.middleware.rate_limit import reset_rate_limiter  # noqa: E402


@pytest.fixture(autouse=True)
def clean_state() -> Iterator[None]:
    drop_db()
    init_db()
    reset_rate_limiter()
    container.cache.clear()
    container.mailer.outbox.clear()
    yield
    container.cache.clear()


@pytest.fixture()
def app() -> Flask:
    flask_app = create_app()
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    return app.test_client()
