from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

import pytest
from flask import Flask
from flask.testing import FlaskClient
from sqlalchemy import create_engine, text

from medcourier.domain.enums import UserType
from medcourier.infrastructure.container import container
from medcourier.infrastructure.health import check_database
from medcourier.interfaces.http.dto.auth import DriverSignupDTO
from medcourier.shared.config import load_config
from medcourier.shared.errors.http import translate_error
from medcourier.shared.errors.validation import ValidationFailure, ValidationSuccess, validate
from medcourier.shared.logging import sanitize_message

from .factories import make_admin, make_driver, make_vehicle


def test_create_admin_then_login(app: Flask) -> None:
    runner = app.test_cli_runner()

    result = runner.invoke(
        args=["create-admin", "ops@example.com", "Ops Lead", "--password", "admin-pass-1"]
    )

    assert result.exit_code == 0, result.output
    assert "Created admin ops@example.com" in result.output
    login = app.test_client().post(
        "/api/auth/admin/login", json={"email": "ops@example.com", "password": "admin-pass-1"}
    )
    assert login.status_code == 200


def test_create_admin_rejects_short_password_and_duplicates(app: Flask) -> None:
    make_admin("taken@example.com")
    runner = app.test_cli_runner()

    short = runner.invoke(args=["create-admin", "new@example.com", "New", "--password", "short"])
    duplicate = runner.invoke(
        args=["create-admin", "taken@example.com", "Dup", "--password", "long-enough-1"]
    )

    assert short.exit_code != 0
    assert duplicate.exit_code == 1
    assert "already exists" in duplicate.output


def test_clear_lockout_command(app: Flask) -> None:
    make_driver("locked@example.com")
    for _ in range(5):
        container.login_attempts.record("locked@example.com", UserType.DRIVER, success=False)

    result = app.test_cli_runner().invoke(args=["clear-lockout", "locked@example.com", "driver"])

    assert result.exit_code == 0
    assert "Removed 5 login attempt(s)" in result.output
    assert not container.login_attempts.is_locked("locked@example.com", UserType.DRIVER)


def test_cleanup_auth_reports_counts(app: Flask) -> None:
    driver = make_driver()
    token = container.reset_tokens.create(driver.id, UserType.DRIVER)
    container.reset_tokens.mark_used(token)

    result = app.test_cli_runner().invoke(args=["cleanup-auth"])

    assert result.exit_code == 0
    assert json.loads(result.output) == {"login_attempts": 0, "reset_tokens": 1}


def test_vehicle_expiry_check_command(app: Flask) -> None:
    driver = make_driver()
    make_vehicle(driver.id, datetime.now(UTC).date() + timedelta(days=3))

    result = app.test_cli_runner().invoke(args=["vehicle-expiry-check"])

    assert result.exit_code == 0
    assert json.loads(result.output)["notified"] == 1


def test_health_reports_database(client: FlaskClient) -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.get_json()
    assert body["ok"] is True
    assert body["database"]["status"] == "ok"
    assert body["database"]["dialect"] == "sqlite"
    assert body["database"]["missing_tables"] == []


def test_health_flags_missing_core_tables() -> None:
    engine = create_engine("sqlite://")
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE drivers (id TEXT)"))

    report = check_database(engine)

    assert not report.ok
    assert report.to_dict()["status"] == "degraded"
    assert "load_requests" in report.missing_tables
    assert "drivers" not in report.missing_tables


def test_metrics_exposes_request_counters(client: FlaskClient) -> None:
    client.get("/api/health")

    response = client.get("/api/metrics")

    assert response.status_code == 200
    assert "medcourier_requests_total" in response.get_data(as_text=True)


def test_unknown_route_uses_error_envelope(client: FlaskClient) -> None:
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert "error" in response.get_json()


def test_request_id_is_echoed(client: FlaskClient) -> None:
    response = client.get("/api/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"

    generated = client.get("/api/health").headers["X-Request-ID"]
    assert generated and generated != "req-123"


def test_log_messages_are_redacted() -> None:
    message = sanitize_message(
        "login ok for dana@example.com password=hunter22 Authorization: Bearer abcdefghijkl"
    )

    assert "dana@example.com" not in message
    assert "hunter22" not in message
    assert "abcdefghijkl" not in message


def test_validate_reports_fields_in_order_without_coercion() -> None:
    failure = validate(DriverSignupDTO, {"email": "bad", "password": 12345678, "name": ""})
    assert isinstance(failure, ValidationFailure)
    assert [error.field for error in failure.errors] == ["email", "password", "name"]

    raw = b'{"email": "A@B.co", "password": "long-enough", "name": "Ana"}'
    success = validate(DriverSignupDTO, raw)
    assert isinstance(success, ValidationSuccess)
    assert success.data.email == "a@b.co"


def test_unknown_errors_hide_their_message_in_production() -> None:
    payload, status, headers = translate_error(RuntimeError("secret detail"), production=True)

    assert status == 500
    assert payload["error"] == "InternalServerError"
    assert payload["message"] == "An internal server error occurred"
    assert "secret detail" not in json.dumps(payload)
    assert "timestamp" in payload
    assert headers == {}


def test_unknown_errors_keep_their_message_outside_production() -> None:
    payload, status, _ = translate_error(RuntimeError("secret detail"), production=False)

    assert status == 500
    assert payload["error"] == "InternalServerError"
    assert payload["message"] == "secret detail"


def test_route_crash_renders_the_error_envelope(
    app: Flask, monkeypatch: pytest.MonkeyPatch
) -> None:
    def crash() -> None:
        raise RuntimeError("db password leaked here")

    app.add_url_rule("/api/crash", view_func=crash)
    production = load_config().model_copy(update={"app_env": "production"})
    monkeypatch.setattr("medcourier.shared.errors.http.load_config", lambda: production)

    response = app.test_client().get("/api/crash")

    assert response.status_code == 500
    body = response.get_json()
    assert body["error"] == "InternalServerError"
    assert "leaked" not in body["message"]
