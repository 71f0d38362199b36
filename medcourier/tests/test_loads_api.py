from __future__ import annotations

from decimal import Decimal

import pytest
from flask.testing import FlaskClient

from medcourier.application.use_cases.loads.transitions import apply, build_transition
from medcourier.domain.auth.entities import Principal
from medcourier.domain.enums import DriverStatus, FleetRole, LoadStatus, UserType
from medcourier.infrastructure.container import container
from medcourier.shared.errors import ConflictError

from .factories import (
    make_admin,
    make_driver,
    make_facility,
    make_fleet,
    make_load,
    make_shipper,
    sign_in,
)


def _create_load(client: FlaskClient, shipper_id: str) -> dict:
    pickup = make_facility(shipper_id, name="Clinic A", city="Fresno")
    dropoff = make_facility(shipper_id, name="Lab B", city="Clovis")
    response = client.post(
        "/api/load-requests",
        json={
            "pickup_facility_id": pickup,
            "dropoff_facility_id": dropoff,
            "service_type": "STAT",
            "commodity_description": "Two coolers of specimens",
            "temperature_requirement": "REFRIGERATED",
            "ready_time": "2025-05-01T08:00:00Z",
            "delivery_deadline": "2025-05-01T12:00:00Z",
        },
    )
    assert response.status_code == 201, response.get_json()
    return response.get_json()["load"]


def test_full_lifecycle_from_request_to_completion(client: FlaskClient) -> None:
    shipper = make_shipper()
    admin = make_admin()
    driver = make_driver()

    sign_in(client, UserType.SHIPPER, shipper)
    load = _create_load(client, shipper.id)
    assert load["status"] == "NEW"
    assert load["tracking_code"].startswith("MED-0001-")
    assert [event["code"] for event in load["events"]] == ["REQUEST_RECEIVED"]

    sign_in(client, UserType.ADMIN, admin)
    quoted = client.post(
        f"/api/load-requests/{load['id']}/quote", json={"quote_amount": 125.5}
    ).get_json()["load"]
    assert quoted["status"] == "QUOTED"
    assert quoted["quote_amount"] == 125.5

    sign_in(client, UserType.SHIPPER, shipper)
    accepted = client.post(f"/api/load-requests/{load['id']}/accept-quote")
    assert accepted.get_json()["load"]["status"] == "QUOTE_ACCEPTED"

    sign_in(client, UserType.ADMIN, admin)
    scheduled = client.post(
        f"/api/load-requests/{load['id']}/assign-driver", json={"driver_id": driver.id}
    ).get_json()["load"]
    assert scheduled["status"] == "SCHEDULED"
    assert scheduled["driver_id"] == driver.id

    sign_in(client, UserType.DRIVER, driver)
    for status in ("PICKED_UP", "IN_TRANSIT", "DELIVERED"):
        response = client.patch(
            f"/api/load-requests/{load['id']}/status",
            json={"status": status, "location_text": "Hwy 41"},
        )
        assert response.status_code == 200, response.get_json()

    sign_in(client, UserType.ADMIN, admin)
    completed = client.patch(
        f"/api/load-requests/{load['id']}/status", json={"status": "COMPLETED"}
    ).get_json()["load"]

    assert completed["status"] == "COMPLETED"
    assert [event["code"] for event in completed["events"]] == [
        "REQUEST_RECEIVED",
        "PRICE_QUOTED",
        "SHIPPER_CONFIRMED",
        "DRIVER_ASSIGNED",
        "PICKED_UP",
        "IN_TRANSIT",
        "DELIVERED",
        "COMPLETED",
    ]

    sign_in(client, UserType.DRIVER, driver)
    notes = client.get("/api/notifications").get_json()["notifications"]
    assert [note["type"] for note in notes] == ["DRIVER_ASSIGNED"]

    sign_in(client, UserType.SHIPPER, shipper)
    shipper_notes = client.get("/api/notifications").get_json()["notifications"]
    assert {note["type"] for note in shipper_notes} == {
        "QUOTE_READY",
        "DRIVER_ASSIGNED",
        "LOAD_STATUS",
    }


def test_create_rejects_foreign_facility_and_bad_window(client: FlaskClient) -> None:
    shipper = make_shipper()
    other = make_shipper("other@example.com")
    own = make_facility(shipper.id)
    foreign = make_facility(other.id)
    sign_in(client, UserType.SHIPPER, shipper)

    response = client.post(
        "/api/load-requests",
        json={
            "pickup_facility_id": own,
            "dropoff_facility_id": foreign,
            "service_type": "SAME_DAY",
            "commodity_description": "Records",
            "ready_time": "2025-05-01T12:00:00Z",
            "delivery_deadline": "2025-05-01T08:00:00Z",
        },
    )

    assert response.status_code == 400
    fields = {error["field"] for error in response.get_json()["details"]["errors"]}
    assert fields == {"dropoff_facility_id", "delivery_deadline"}


def test_create_rejects_same_pickup_and_dropoff(client: FlaskClient) -> None:
    shipper = make_shipper()
    facility = make_facility(shipper.id)
    sign_in(client, UserType.SHIPPER, shipper)

    response = client.post(
        "/api/load-requests",
        json={
            "pickup_facility_id": facility,
            "dropoff_facility_id": facility,
            "service_type": "STAT",
            "commodity_description": "Specimens",
        },
    )
    assert response.status_code == 400
    errors = response.get_json()["details"]["errors"]
    assert [error["field"] for error in errors] == ["dropoff_facility_id"]


def test_invalid_transition_is_a_validation_error(client: FlaskClient) -> None:
    shipper = make_shipper()
    load_id = make_load(shipper.id)
    sign_in(client, UserType.ADMIN, make_admin())

    response = client.patch(f"/api/load-requests/{load_id}/status", json={"status": "DELIVERED"})

    assert response.status_code == 400
    assert response.get_json()["details"]["errors"][0]["field"] == "status"


def test_drivers_only_move_their_own_loads_forward(client: FlaskClient) -> None:
    shipper = make_shipper()
    assigned = make_driver("assigned@example.com")
    load_id = make_load(shipper.id, status=LoadStatus.SCHEDULED, driver_id=assigned.id)

    sign_in(client, UserType.DRIVER, assigned)
    cancel_attempt = client.patch(
        f"/api/load-requests/{load_id}/status", json={"status": "CANCELLED"}
    )
    assert cancel_attempt.status_code == 403

    stranger = make_driver("stranger@example.com")
    sign_in(client, UserType.DRIVER, stranger)
    assert client.get(f"/api/load-requests/{load_id}").status_code == 404


def test_fleet_owner_sees_fleet_loads_but_cannot_update_them(client: FlaskClient) -> None:
    shipper = make_shipper()
    fleet_id = make_fleet()
    owner = make_driver("owner@example.com", fleet_id=fleet_id, fleet_role=FleetRole.OWNER)
    member = make_driver("member@example.com", fleet_id=fleet_id, fleet_role=FleetRole.DRIVER)
    load_id = make_load(shipper.id, status=LoadStatus.SCHEDULED, driver_id=member.id)

    sign_in(client, UserType.DRIVER, owner)
    assert client.get(f"/api/load-requests/{load_id}").status_code == 200
    listed = client.get("/api/load-requests").get_json()["loads"]
    assert [load["id"] for load in listed] == [load_id]

    response = client.patch(f"/api/load-requests/{load_id}/status", json={"status": "PICKED_UP"})
    assert response.status_code == 403


def test_shipper_cannot_see_another_shippers_load(client: FlaskClient) -> None:
    owner = make_shipper()
    load_id = make_load(owner.id)
    sign_in(client, UserType.SHIPPER, make_shipper("nosy@example.com"))

    assert client.get(f"/api/load-requests/{load_id}").status_code == 404
    assert client.get("/api/load-requests").get_json()["loads"] == []


def test_assign_requires_active_driver(client: FlaskClient) -> None:
    shipper = make_shipper()
    pending = make_driver("pending@example.com", status=DriverStatus.PENDING_APPROVAL)
    load_id = make_load(shipper.id, status=LoadStatus.QUOTE_ACCEPTED, quote=Decimal("80"))
    sign_in(client, UserType.ADMIN, make_admin())

    response = client.post(
        f"/api/load-requests/{load_id}/assign-driver", json={"driver_id": pending.id}
    )

    assert response.status_code == 400
    assert response.get_json()["details"]["errors"][0]["field"] == "driver_id"


def test_quote_requires_admin(client: FlaskClient) -> None:
    shipper = make_shipper()
    load_id = make_load(shipper.id)
    sign_in(client, UserType.SHIPPER, shipper)

    response = client.post(f"/api/load-requests/{load_id}/quote", json={"quote_amount": 10})
    assert response.status_code == 403


def test_cancel_before_pickup_only(client: FlaskClient) -> None:
    shipper = make_shipper()
    new_load = make_load(shipper.id, code="MED-0001-AA")
    picked_up = make_load(
        shipper.id,
        status=LoadStatus.PICKED_UP,
        driver_id=make_driver().id,
        code="MED-0002-BB",
    )
    sign_in(client, UserType.SHIPPER, shipper)

    cancelled = client.post(f"/api/load-requests/{new_load}/cancel", json={"reason": "Dup"})
    assert cancelled.status_code == 200
    assert cancelled.get_json()["load"]["cancellation_reason"] == "Dup"

    too_late = client.post(f"/api/load-requests/{picked_up}/cancel", json={})
    assert too_late.status_code == 400


def test_rating_once_per_delivered_load(client: FlaskClient) -> None:
    shipper = make_shipper()
    driver = make_driver()
    load_id = make_load(shipper.id, status=LoadStatus.DELIVERED, driver_id=driver.id)
    sign_in(client, UserType.SHIPPER, shipper)

    before = client.get(f"/api/drivers/{driver.id}/ratings").get_json()
    first = client.post(f"/api/load-requests/{load_id}/rate-driver", json={"rating": 5})
    second = client.post(f"/api/load-requests/{load_id}/rate-driver", json={"rating": 1})
    after = client.get(f"/api/drivers/{driver.id}/ratings").get_json()

    assert before["rating_count"] == 0
    assert first.status_code == 201
    assert second.status_code == 409
    assert after["rating_count"] == 1
    assert after["average_rating"] == 5.0


def test_documents_lock_after_delivery(client: FlaskClient) -> None:
    shipper = make_shipper()
    driver = make_driver()
    load_id = make_load(shipper.id, status=LoadStatus.IN_TRANSIT, driver_id=driver.id)
    sign_in(client, UserType.DRIVER, driver)

    uploaded = client.post(
        f"/api/load-requests/{load_id}/documents",
        json={
            "document_type": "PROOF_OF_PICKUP",
            "title": "Pickup photo",
            "file_url": "https://files.example.com/pickup.jpg",
        },
    )
    assert uploaded.status_code == 201
    document = uploaded.get_json()["document"]
    assert document["uploaded_by_type"] == "driver"
    assert document["is_locked"] is False

    delivered = client.patch(f"/api/load-requests/{load_id}/status", json={"status": "DELIVERED"})
    assert delivered.status_code == 200

    listed = client.get(f"/api/load-requests/{load_id}/documents").get_json()["documents"]
    assert listed[0]["is_locked"] is True
    response = client.delete(f"/api/load-requests/{load_id}/documents/{document['id']}")
    assert response.status_code == 409


def test_document_url_must_be_http(client: FlaskClient) -> None:
    shipper = make_shipper()
    load_id = make_load(shipper.id)
    sign_in(client, UserType.SHIPPER, shipper)

    response = client.post(
        f"/api/load-requests/{load_id}/documents",
        json={"document_type": "BOL", "title": "BOL", "file_url": "javascript:alert(1)"},
    )
    assert response.status_code == 400


def test_public_tracking_hides_private_fields(client: FlaskClient) -> None:
    shipper = make_shipper()
    make_load(shipper.id, quote=Decimal("99.00"), code="MED-0042-QZ")

    response = client.get("/api/tracking/med-0042-qz")

    assert response.status_code == 200
    shipment = response.get_json()["shipment"]
    assert shipment["tracking_code"] == "MED-0042-QZ"
    assert shipment["pickup_city"] == "Fresno"
    assert "quote_amount" not in shipment
    assert "shipper_id" not in shipment

    assert client.get("/api/tracking/MED-9999-ZZ").status_code == 404
    assert client.get("/api/tracking/garbage").status_code == 404


def test_loads_require_a_session(client: FlaskClient) -> None:
    response = client.get("/api/load-requests")
    assert response.status_code == 401
    assert response.get_json()["error"] == "AuthenticationError"


def _load_body(pickup: str, dropoff: str, **times: str) -> dict:
    return {
        "pickup_facility_id": pickup,
        "dropoff_facility_id": dropoff,
        "service_type": "STAT",
        "commodity_description": "Specimens",
        **times,
    }


def test_create_rejects_timestamps_without_offset(client: FlaskClient) -> None:
    shipper = make_shipper()
    pickup, dropoff = make_facility(shipper.id), make_facility(shipper.id)
    sign_in(client, UserType.SHIPPER, shipper)

    response = client.post(
        "/api/load-requests",
        json=_load_body(
            pickup,
            dropoff,
            ready_time="2025-05-01T08:00:00",
            delivery_deadline="2025-05-01T12:00:00Z",
        ),
    )

    assert response.status_code == 400
    body = response.get_json()
    assert body["error"] == "ValidationError"
    assert [error["field"] for error in body["details"]["errors"]] == ["ready_time"]


def test_create_stores_offset_timestamps_as_utc(client: FlaskClient) -> None:
    shipper = make_shipper()
    pickup, dropoff = make_facility(shipper.id), make_facility(shipper.id)
    sign_in(client, UserType.SHIPPER, shipper)

    response = client.post(
        "/api/load-requests",
        json=_load_body(
            pickup,
            dropoff,
            ready_time="2025-05-01T08:00:00+05:00",
            delivery_deadline="2025-05-01T04:30:00Z",
        ),
    )

    assert response.status_code == 201, response.get_json()
    load_id = response.get_json()["load"]["id"]
    stored = client.get(f"/api/load-requests/{load_id}").get_json()["load"]
    assert stored["ready_time"] == "2025-05-01T03:00:00Z"
    assert stored["delivery_deadline"] == "2025-05-01T04:30:00Z"


def test_transition_built_from_a_stale_read_is_rejected() -> None:
    shipper = make_shipper()
    driver = make_driver()
    load_id = make_load(shipper.id, status=LoadStatus.SCHEDULED, driver_id=driver.id)
    loads = container.load_repository
    snapshot = loads.get(load_id)
    assert snapshot is not None

    admin = Principal(
        user_id="a" * 32,
        user_type=UserType.ADMIN,
        email="ops@example.com",
        name="Ops",
        is_admin=True,
    )
    courier = Principal(
        user_id=driver.id, user_type=UserType.DRIVER, email=driver.email, name="Dana Reyes"
    )
    cancel = build_transition(snapshot, LoadStatus.CANCELLED, admin)
    pick_up = build_transition(snapshot, LoadStatus.PICKED_UP, courier)

    assert apply(loads, snapshot, cancel).status is LoadStatus.CANCELLED
    with pytest.raises(ConflictError):
        apply(loads, snapshot, pick_up)

    current = loads.get(load_id)
    assert current is not None
    assert current.status is LoadStatus.CANCELLED
