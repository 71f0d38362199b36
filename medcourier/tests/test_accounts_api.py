from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

from flask.testing import FlaskClient

from medcourier.domain.enums import DriverStatus, FleetRole, LoadStatus, UserType
from medcourier.infrastructure.container import container

from .factories import (
    Seeded,
    make_admin,
    make_driver,
    make_facility,
    make_fleet,
    make_load,
    make_shipper,
    make_vehicle,
    sign_in,
)


def _fleet() -> dict[str, Seeded]:
    fleet_id = make_fleet()
    return {
        "owner": make_driver("owner@example.com", fleet_id=fleet_id, fleet_role=FleetRole.OWNER),
        "member": make_driver(
            "member@example.com", fleet_id=fleet_id, fleet_role=FleetRole.DRIVER
        ),
        "outsider": make_driver("solo@example.com"),
    }


def test_fleet_owner_lists_whole_fleet(client: FlaskClient) -> None:
    fleet = _fleet()
    sign_in(client, UserType.DRIVER, fleet["owner"])

    drivers = client.get(f"/api/drivers/{fleet['owner'].id}/fleet").get_json()["drivers"]

    assert {driver["id"] for driver in drivers} == {fleet["owner"].id, fleet["member"].id}


def test_independent_driver_sees_only_themself(client: FlaskClient) -> None:
    fleet = _fleet()
    outsider = fleet["outsider"]
    sign_in(client, UserType.DRIVER, outsider)

    drivers = client.get(f"/api/drivers/{outsider.id}/fleet").get_json()["drivers"]
    assert [driver["id"] for driver in drivers] == [outsider.id]

    hidden = client.get(f"/api/drivers/{outsider.id}/fleet/{fleet['member'].id}")
    assert hidden.status_code == 404


def test_fleet_member_detail_includes_vehicle_compliance(client: FlaskClient) -> None:
    fleet = _fleet()
    owner, member = fleet["owner"], fleet["member"]
    make_vehicle(member.id, datetime.now(UTC).date() + timedelta(days=5))
    sign_in(client, UserType.DRIVER, owner)

    detail = client.get(f"/api/drivers/{owner.id}/fleet/{member.id}").get_json()

    assert detail["driver"]["id"] == member.id
    compliance = detail["vehicles"][0]["compliance"]
    assert compliance["registration_status"] == "URGENT_7_DAYS"
    assert compliance["severity"] == "CRITICAL"


def test_plain_fleet_driver_cannot_see_teammates(client: FlaskClient) -> None:
    fleet = _fleet()
    member = fleet["member"]
    sign_in(client, UserType.DRIVER, member)

    response = client.get(f"/api/drivers/{member.id}/fleet/{fleet['owner'].id}")
    assert response.status_code == 404


def test_driver_cannot_use_another_drivers_fleet_route(client: FlaskClient) -> None:
    fleet = _fleet()
    sign_in(client, UserType.DRIVER, fleet["outsider"])

    assert client.get(f"/api/drivers/{fleet['owner'].id}/fleet").status_code == 403


def test_driver_cannot_read_another_driver(client: FlaskClient) -> None:
    first = make_driver("first@example.com")
    second = make_driver("second@example.com")
    sign_in(client, UserType.DRIVER, first)

    assert client.get(f"/api/drivers/{second.id}").status_code == 403


def test_admin_can_read_any_driver(client: FlaskClient) -> None:
    driver = make_driver()
    sign_in(client, UserType.ADMIN, make_admin())

    assert client.get(f"/api/drivers/{driver.id}").status_code == 200


def test_driver_updates_profile_and_adds_vehicle(client: FlaskClient) -> None:
    driver = make_driver()
    sign_in(client, UserType.DRIVER, driver)

    updated = client.patch(
        f"/api/drivers/{driver.id}",
        json={"phone": "+1 559 555 0100", "license_expiry": "2027-01-31"},
    )
    assert updated.status_code == 200
    assert updated.get_json()["driver"]["license_expiry"] == "2027-01-31"

    added = client.post(
        f"/api/drivers/{driver.id}/vehicles",
        json={
            "vehicle_type": "VAN",
            "vehicle_plate": "8XYZ001",
            "year": 2021,
            "registration_expiry_date": "2030-06-30",
        },
    )
    assert added.status_code == 201
    assert added.get_json()["vehicle"]["compliance"]["registration_status"] == "VALID"

    vehicles = client.get(f"/api/drivers/{driver.id}/vehicles").get_json()["vehicles"]
    assert [vehicle["vehicle_plate"] for vehicle in vehicles] == ["8XYZ001"]


def test_vehicle_without_expiry_reports_unknown(client: FlaskClient) -> None:
    driver = make_driver()
    make_vehicle(driver.id, None)
    sign_in(client, UserType.DRIVER, driver)

    vehicles = client.get(f"/api/drivers/{driver.id}/vehicles").get_json()["vehicles"]
    assert vehicles[0]["compliance"]["registration_status"] == "UNKNOWN"


def test_driver_loads_cover_fleet_scope(client: FlaskClient) -> None:
    fleet = _fleet()
    owner = fleet["owner"]
    shipper = make_shipper()
    load_id = make_load(shipper.id, status=LoadStatus.SCHEDULED, driver_id=fleet["member"].id)
    sign_in(client, UserType.DRIVER, owner)

    loads = client.get(f"/api/drivers/{owner.id}/loads").get_json()["loads"]
    assert [load["id"] for load in loads] == [load_id]

    filtered = client.get(f"/api/drivers/{owner.id}/loads?status=DELIVERED").get_json()
    assert filtered["loads"] == []


def test_shipper_manages_facilities(client: FlaskClient) -> None:
    shipper = make_shipper()
    sign_in(client, UserType.SHIPPER, shipper)

    created = client.post(
        f"/api/shippers/{shipper.id}/facilities",
        json={
            "name": "Eastside Dialysis",
            "facility_type": "DIALYSIS",
            "address": {
                "line1": "12 Cedar Ave",
                "city": "Fresno",
                "state": "CA",
                "postal_code": "93702",
            },
            "contact_phone": "(559) 555-0133",
        },
    )
    assert created.status_code == 201
    facility = created.get_json()["facility"]
    assert facility["address_line1"] == "12 Cedar Ave"

    renamed = client.patch(f"/api/facilities/{facility['id']}", json={"name": "Eastside Center"})
    assert renamed.get_json()["facility"]["name"] == "Eastside Center"

    listed = client.get(f"/api/shippers/{shipper.id}/facilities").get_json()["facilities"]
    assert [item["id"] for item in listed] == [facility["id"]]

    assert client.delete(f"/api/facilities/{facility['id']}").status_code == 200
    assert client.get(f"/api/facilities/{facility['id']}").status_code == 404


def test_facility_in_use_cannot_be_deleted(client: FlaskClient) -> None:
    shipper = make_shipper()
    load_id = make_load(shipper.id)
    pickup_id = container.load_repository.get(load_id).pickup_facility_id
    sign_in(client, UserType.SHIPPER, shipper)

    assert client.delete(f"/api/facilities/{pickup_id}").status_code == 409


def test_other_shippers_facility_is_forbidden(client: FlaskClient) -> None:
    owner = make_shipper()
    facility_id = make_facility(owner.id)
    sign_in(client, UserType.SHIPPER, make_shipper("other@example.com"))

    assert client.get(f"/api/facilities/{facility_id}").status_code == 403
    assert client.get(f"/api/shippers/{owner.id}").status_code == 403


def test_shipper_profile_update(client: FlaskClient) -> None:
    shipper = make_shipper()
    sign_in(client, UserType.SHIPPER, shipper)

    response = client.patch(f"/api/shippers/{shipper.id}", json={"company_name": "Valley Labs"})

    assert response.status_code == 200
    assert response.get_json()["shipper"]["company_name"] == "Valley Labs"


def test_admin_approves_pending_driver(client: FlaskClient) -> None:
    pending = make_driver("pending@example.com", status=DriverStatus.PENDING_APPROVAL)
    make_driver("active@example.com")
    sign_in(client, UserType.ADMIN, make_admin())

    queue = client.get("/api/admin/drivers?status=PENDING_APPROVAL").get_json()["drivers"]
    assert [driver["id"] for driver in queue] == [pending.id]

    approved = client.post(f"/api/admin/drivers/{pending.id}/approve")
    assert approved.get_json()["driver"]["status"] == "ACTIVE"


def test_admin_stats_are_cached(client: FlaskClient) -> None:
    shipper = make_shipper()
    make_load(shipper.id, code="MED-0001-AA")
    sign_in(client, UserType.ADMIN, make_admin())

    first = client.get("/api/admin/stats").get_json()
    make_load(shipper.id, code="MED-0002-BB")
    second = client.get("/api/admin/stats").get_json()

    assert first["total_loads"] == second["total_loads"] == 1
    assert first["pending_quotes"] == 1
    assert first["total_shippers"] == 1


def test_admin_routes_refuse_non_admins(client: FlaskClient) -> None:
    sign_in(client, UserType.SHIPPER, make_shipper())
    assert client.get("/api/admin/stats").status_code == 403


def test_driver_flagged_admin_passes_admin_guard(client: FlaskClient) -> None:
    sign_in(client, UserType.DRIVER, make_driver("boss@example.com", is_admin=True))
    assert client.get("/api/admin/shippers").status_code == 200


def test_admin_lists_and_clears_lockouts(client: FlaskClient) -> None:
    make_driver("victim@example.com")
    for _ in range(5):
        container.login_attempts.record("victim@example.com", UserType.DRIVER, success=False)
    sign_in(client, UserType.ADMIN, make_admin())

    locked = client.get("/api/admin/lockouts").get_json()["lockouts"]
    assert [entry["email"] for entry in locked] == ["victim@example.com"]

    cleared = client.post(
        "/api/admin/lockouts/clear", json={"email": "victim@example.com", "user_type": "driver"}
    )
    assert cleared.get_json()["removed"] == 5
    assert client.get("/api/admin/lockouts").get_json()["lockouts"] == []


def test_notifications_are_scoped_and_marked_read(client: FlaskClient) -> None:
    shipper = make_shipper()
    admin = make_admin()
    load_id = make_load(shipper.id)
    sign_in(client, UserType.ADMIN, admin)
    client.post(f"/api/load-requests/{load_id}/quote", json={"quote_amount": 40})

    assert client.get("/api/notifications").status_code == 403

    sign_in(client, UserType.SHIPPER, shipper)
    unread = client.get("/api/notifications?unread_only=true").get_json()["notifications"]
    assert len(unread) == 1

    assert client.post(f"/api/notifications/{unread[0]['id']}/read").status_code == 200
    assert client.get("/api/notifications?unread_only=true").get_json()["notifications"] == []
    assert client.post("/api/notifications/missing/read").status_code == 404

    sign_in(client, UserType.SHIPPER, make_shipper("other@example.com"))
    assert client.post(f"/api/notifications/{unread[0]['id']}/read").status_code == 404


def test_ratings_cache_expires_after_ttl() -> None:
    from medcourier.infrastructure.cache import InMemoryTTLCache

    now = [100.0]
    cache = InMemoryTTLCache(ttl_seconds=10, max_size=2, clock=lambda: now[0])
    calls: list[int] = []

    def factory() -> int:
        calls.append(1)
        return len(calls)

    assert cache.get_or_set("k", factory) == 1
    assert cache.get_or_set("k", factory) == 1
    now[0] += 10
    assert cache.get_or_set("k", factory) == 2

    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("k") is None
    assert len(cache) == 2

    now[0] += 60
    assert cache.sweep() == 2


def test_license_dates_roundtrip_through_profile() -> None:
    driver = make_driver(license_expiry=date(2026, 2, 1))
    assert container.driver_accounts.get_profile(driver.id).license_expiry == date(2026, 2, 1)
