from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from flask.testing import FlaskClient

from medcourier.application.use_cases.compliance.vehicle_expiry import VehicleExpiryCheckUseCase
from medcourier.domain.enums import FleetRole, UserType
from medcourier.domain.notifications.entities import Recipient
from medcourier.infrastructure.container import container
from medcourier.shared.config import load_config
from medcourier.shared.middleware import cron_auth

from .factories import (
    make_admin,
    make_driver,
    make_fleet,
    make_vehicle,
    set_fleet_owner,
    sign_in,
)

CRON_HEADERS = {"Authorization": "Bearer cron-test-secret"}


def _today():
    return datetime.now(UTC).date()


class ShiftedClock:
    def __init__(self) -> None:
        self.offset = timedelta()

    def __call__(self) -> datetime:
        return datetime.now(UTC) + self.offset


def _fleet_with_expiring_vehicle():
    fleet_id = make_fleet()
    owner = make_driver("owner@example.com", fleet_id=fleet_id, fleet_role=FleetRole.OWNER)
    set_fleet_owner(fleet_id, owner.id)
    member = make_driver("member@example.com", fleet_id=fleet_id, fleet_role=FleetRole.DRIVER)
    make_vehicle(member.id, _today() + timedelta(days=5), plate="EXP0005")
    make_vehicle(member.id, _today() + timedelta(days=90), plate="OK00090")
    return owner, member


def _inbox(driver_id: str):
    recipient = Recipient(user_type=UserType.DRIVER, user_id=driver_id)
    return container.notification_repository.list_for(recipient)


def test_reminders_are_sorted_by_urgency(client: FlaskClient) -> None:
    driver = make_driver(license_expiry=_today() - timedelta(days=2))
    make_vehicle(driver.id, _today() + timedelta(days=5), plate="SOON005")
    make_vehicle(driver.id, _today() + timedelta(days=20), plate="LATE020")
    make_vehicle(driver.id, _today() + timedelta(days=200), plate="FAR0200")
    sign_in(client, UserType.ADMIN, make_admin())

    body = client.get("/api/compliance/reminders").get_json()

    assert body["count"] == 3
    reminders = body["reminders"]
    assert [reminder["type"] for reminder in reminders] == [
        "DRIVER_LICENSE",
        "VEHICLE_REGISTRATION",
        "VEHICLE_REGISTRATION",
    ]
    assert reminders[0]["days_until_expiry"] < 0
    assert [reminder["severity"] for reminder in reminders] == ["CRITICAL", "CRITICAL", "WARNING"]
    assert "SOON005" in reminders[1]["title"]


def test_reminders_require_admin(client: FlaskClient) -> None:
    sign_in(client, UserType.DRIVER, make_driver())
    assert client.get("/api/compliance/reminders").status_code == 403


def test_expiry_check_notifies_driver_and_fleet_owner_once_a_day() -> None:
    owner, member = _fleet_with_expiring_vehicle()
    clock = ShiftedClock()
    job = VehicleExpiryCheckUseCase(
        compliance=container.compliance_repository,
        notifications=container.notification_repository,
        mailer=container.mailer,
        clock=clock,
    )

    first = job.execute()
    repeat = job.execute()

    assert first["checked"] == 1
    assert first["notified"] == 2
    assert repeat["notified"] == 0

    [driver_note] = _inbox(member.id)
    [owner_note] = _inbox(owner.id)
    assert driver_note.type == "VEHICLE_REGISTRATION_EXPIRING"
    assert driver_note.to_dict()["metadata"]["level"] == "URGENT_7_DAYS"
    assert owner_note.message.startswith("Dana Reyes: ")
    assert sorted(mail["to"] for mail in container.mailer.outbox) == [
        "member@example.com",
        "owner@example.com",
    ]
    [owner_mail] = [mail for mail in container.mailer.outbox if mail["to"] == "owner@example.com"]
    assert "EXP0005" in owner_mail["body"]
    assert owner_mail["body"].startswith("Dana Reyes: ")

    clock.offset = timedelta(hours=25)
    assert job.execute()["notified"] == 2


def test_cron_endpoint_runs_job_with_valid_secret(client: FlaskClient) -> None:
    _fleet_with_expiring_vehicle()

    response = client.post("/api/cron/vehicle-expiry-check", headers=CRON_HEADERS)

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["notified"] == 2
    assert "timestamp" in body


def test_cron_endpoint_rejects_wrong_secret(client: FlaskClient) -> None:
    response = client.post(
        "/api/cron/vehicle-expiry-check", headers={"Authorization": "Bearer nope"}
    )
    assert response.status_code == 401

    missing = client.post("/api/cron/vehicle-expiry-check")
    assert missing.status_code == 401


def test_cron_endpoint_closed_without_secret(
    client: FlaskClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    unset = load_config().model_copy(update={"cron_secret": None})
    monkeypatch.setattr(cron_auth, "load_config", lambda: unset)

    response = client.post("/api/cron/vehicle-expiry-check", headers=CRON_HEADERS)

    assert response.status_code == 503
    assert response.get_json()["error"] == "ServiceUnavailable"
