from __future__ import annotations

from datetime import UTC, datetime, timedelta

from flask.testing import FlaskClient

from medcourier.application.use_cases.auth.password_reset import FORGOT_PASSWORD_MESSAGE
from medcourier.domain.enums import DriverStatus, UserType
from medcourier.infrastructure.auth.session_cookie import COOKIE_NAME, SessionCookieCodec
from medcourier.infrastructure.container import container
from medcourier.infrastructure.db import session_scope
from medcourier.infrastructure.db.models import Driver

from .factories import PASSWORD, make_driver, make_shipper, sign_in


def _cookie_header(response) -> str:
    return "; ".join(response.headers.getlist("Set-Cookie"))


def test_driver_signup_sets_cookie_and_starts_pending(client: FlaskClient) -> None:
    response = client.post(
        "/api/auth/driver/signup",
        json={"email": "New.Driver@Example.com", "password": PASSWORD, "name": "Ana Lima"},
    )

    assert response.status_code == 201
    body = response.get_json()
    assert body["user"]["email"] == "new.driver@example.com"
    assert body["user"]["user_type"] == "driver"
    cookie = _cookie_header(response)
    assert cookie.startswith(f"{COOKIE_NAME}=")
    assert "HttpOnly" in cookie

    profile = container.driver_accounts.get_profile(body["user"]["id"])
    assert profile.status is DriverStatus.PENDING_APPROVAL


def test_signup_reports_every_invalid_field(client: FlaskClient) -> None:
    response = client.post(
        "/api/auth/shipper/signup", json={"email": "not-an-email", "password": "short"}
    )

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["error"] == "ValidationError"
    fields = [error["field"] for error in payload["details"]["errors"]]
    assert fields == ["email", "password", "name"]


def test_signup_rejects_string_typed_numbers_and_unknown_portal(client: FlaskClient) -> None:
    response = client.post(
        "/api/auth/driver/signup",
        json={"email": "a@b.co", "password": 12345678, "name": "Ana"},
    )
    assert response.status_code == 400

    assert client.post("/api/auth/admin/signup", json={}).status_code == 404


def test_duplicate_signup_conflicts(client: FlaskClient) -> None:
    make_shipper("dup@example.com")
    response = client.post(
        "/api/auth/shipper/signup",
        json={"email": "dup@example.com", "password": PASSWORD, "name": "Sam"},
    )
    assert response.status_code == 409


def test_login_success_and_session_check(client: FlaskClient) -> None:
    make_shipper("ship@example.com")

    response = client.post(
        "/api/auth/shipper/login", json={"email": "SHIP@example.com", "password": PASSWORD}
    )
    assert response.status_code == 200

    check = client.get("/api/auth/check").get_json()
    assert check["authenticated"] is True
    assert check["user"]["email"] == "ship@example.com"


def test_login_failures_are_indistinguishable(client: FlaskClient) -> None:
    make_driver("known@example.com")

    wrong_password = client.post(
        "/api/auth/driver/login", json={"email": "known@example.com", "password": "nope-nope"}
    )
    unknown_email = client.post(
        "/api/auth/driver/login", json={"email": "ghost@example.com", "password": "nope-nope"}
    )
    wrong_portal = client.post(
        "/api/auth/shipper/login", json={"email": "known@example.com", "password": PASSWORD}
    )

    for response in (wrong_password, unknown_email, wrong_portal):
        assert response.status_code == 401
        assert response.get_json()["message"] == "Invalid email or password"


def test_lockout_after_repeated_failures(client: FlaskClient) -> None:
    make_driver("locked@example.com")
    store = container.login_attempts
    for _ in range(5):
        store.record("locked@example.com", UserType.DRIVER, success=False, ip_address="1.2.3.4")

    response = client.post(
        "/api/auth/driver/login", json={"email": "locked@example.com", "password": PASSWORD}
    )
    assert response.status_code == 401
    assert response.get_json()["message"] == "Invalid email or password"

    container.clear_lockout_use_case.execute("locked@example.com", UserType.DRIVER)
    response = client.post(
        "/api/auth/driver/login", json={"email": "locked@example.com", "password": PASSWORD}
    )
    assert response.status_code == 200


def test_logout_clears_cookie(client: FlaskClient) -> None:
    sign_in(client, UserType.SHIPPER, make_shipper())

    response = client.post("/api/auth/logout")

    assert response.status_code == 200
    assert f"{COOKIE_NAME}=;" in _cookie_header(response)


def test_deleted_account_is_unauthenticated_and_cookie_cleared(client: FlaskClient) -> None:
    driver = make_driver()
    sign_in(client, UserType.DRIVER, driver)
    with session_scope() as session:
        session.delete(session.get(Driver, driver.id))

    response = client.get(f"/api/drivers/{driver.id}")
    assert response.status_code == 401
    assert f"{COOKIE_NAME}=;" in _cookie_header(response)

    check = client.get("/api/auth/check")
    assert check.get_json() == {"authenticated": False, "user": None}


def test_tampered_cookie_is_rejected(client: FlaskClient) -> None:
    driver = make_driver()
    _, token = container.session_codec.issue(driver.id, UserType.DRIVER, driver.email)
    tampered = token[:-4] + ("AAAA" if not token.endswith("AAAA") else "BBBB")
    client.set_cookie(COOKIE_NAME, tampered)

    assert client.get(f"/api/drivers/{driver.id}").status_code == 401


def test_session_cookie_expires() -> None:
    codec = SessionCookieCodec("another-secret", duration=timedelta(days=7))
    issued = datetime(2025, 1, 1, tzinfo=UTC)
    _, token = codec.issue("driver-1", UserType.DRIVER, "d@example.com", now=issued)

    assert codec.decode(token, now=issued + timedelta(days=6)) is not None
    assert codec.decode(token, now=issued + timedelta(days=7, seconds=1)) is None
    other = SessionCookieCodec("different-secret", duration=timedelta(days=7))
    assert other.decode(token, now=issued) is None


def test_forgot_password_answers_identically(client: FlaskClient) -> None:
    make_shipper("real@example.com")

    known = client.post("/api/auth/shipper/forgot-password", json={"email": "real@example.com"})
    unknown = client.post("/api/auth/shipper/forgot-password", json={"email": "nobody@example.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.get_json() == unknown.get_json()
    assert known.get_json()["message"] == FORGOT_PASSWORD_MESSAGE
    assert [mail["to"] for mail in container.mailer.outbox] == ["real@example.com"]


def test_reset_token_is_single_use(client: FlaskClient) -> None:
    shipper = make_shipper("reset@example.com")
    token = container.reset_tokens.create(shipper.id, UserType.SHIPPER)
    new_password = "brand-new-secret-1"

    first = client.post(
        "/api/auth/shipper/reset-password", json={"token": token, "password": new_password}
    )
    second = client.post(
        "/api/auth/shipper/reset-password", json={"token": token, "password": "another-one-22"}
    )

    assert first.status_code == 200
    assert second.status_code == 400
    login = client.post(
        "/api/auth/shipper/login", json={"email": "reset@example.com", "password": new_password}
    )
    assert login.status_code == 200


def test_reset_token_can_only_be_claimed_once() -> None:
    shipper = make_shipper("claim@example.com")
    token = container.reset_tokens.create(shipper.id, UserType.SHIPPER)

    assert container.reset_tokens.mark_used(token) is True
    assert container.reset_tokens.mark_used(token) is False


def test_reset_token_for_other_portal_is_invalid(client: FlaskClient) -> None:
    driver = make_driver()
    token = container.reset_tokens.create(driver.id, UserType.DRIVER)

    response = client.post(
        "/api/auth/shipper/reset-password", json={"token": token, "password": "brand-new-secret"}
    )
    assert response.status_code == 400
    assert response.get_json()["details"]["errors"][0]["field"] == "token"


def test_change_password_requires_current_password(client: FlaskClient) -> None:
    driver = make_driver()
    sign_in(client, UserType.DRIVER, driver)

    wrong = client.patch(
        f"/api/drivers/{driver.id}/password",
        json={"current_password": "wrong-one", "new_password": "next-password-1"},
    )
    assert wrong.status_code == 400

    ok = client.patch(
        f"/api/drivers/{driver.id}/password",
        json={"current_password": PASSWORD, "new_password": "next-password-1"},
    )
    assert ok.status_code == 200


def test_password_hashes_are_salted_and_verifiable() -> None:
    hasher = container.password_hasher
    first = hasher.hash(PASSWORD)
    second = hasher.hash(PASSWORD)

    assert first != second
    assert PASSWORD not in first
    assert hasher.verify(PASSWORD, first)
    assert not hasher.verify("wrong", first)
    assert not hasher.verify(PASSWORD, "")
