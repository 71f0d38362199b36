from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

from flask.testing import FlaskClient

from medcourier.domain.enums import LoadStatus, UserType

from .factories import make_admin, make_load, make_shipper, sign_in


def _delivered(shipper_id: str, amount: str, code: str) -> str:
    return make_load(
        shipper_id, status=LoadStatus.DELIVERED, quote=Decimal(amount), code=code
    )


def test_generate_invoice_totals_and_numbering(client: FlaskClient) -> None:
    shipper = make_shipper()
    first = _delivered(shipper.id, "100.00", "MED-0001-AA")
    second = _delivered(shipper.id, "45.55", "MED-0002-BB")
    make_load(shipper.id, code="MED-0003-CC")
    sign_in(client, UserType.ADMIN, make_admin())

    response = client.post(
        "/api/invoices/generate", json={"shipper_id": shipper.id, "tax_rate": 0.0825}
    )

    assert response.status_code == 201
    invoice = response.get_json()["invoice"]
    year = datetime.now(UTC).year
    assert invoice["invoice_number"] == f"INV-{year}-001"
    assert invoice["status"] == "DRAFT"
    assert invoice["subtotal"] == 145.55
    assert invoice["tax"] == 12.01
    assert invoice["total"] == 157.56
    assert set(invoice["load_ids"]) == {first, second}


def test_loads_are_billed_once_and_numbers_increase(client: FlaskClient) -> None:
    shipper = make_shipper()
    _delivered(shipper.id, "50", "MED-0001-AA")
    sign_in(client, UserType.ADMIN, make_admin())

    first = client.post("/api/invoices/generate", json={"shipper_id": shipper.id})
    again = client.post("/api/invoices/generate", json={"shipper_id": shipper.id})
    assert first.status_code == 201
    assert again.status_code == 400
    assert again.get_json()["details"]["errors"][0]["field"] == "load_ids"

    _delivered(shipper.id, "75", "MED-0002-BB")
    second = client.post("/api/invoices/generate", json={"shipper_id": shipper.id})
    year = datetime.now(UTC).year
    assert second.get_json()["invoice"]["invoice_number"] == f"INV-{year}-002"


def test_explicit_load_ids_must_all_be_invoiceable(client: FlaskClient) -> None:
    shipper = make_shipper()
    ready = _delivered(shipper.id, "20", "MED-0001-AA")
    not_ready = make_load(shipper.id, code="MED-0002-BB")
    sign_in(client, UserType.ADMIN, make_admin())

    response = client.post(
        "/api/invoices/generate",
        json={"shipper_id": shipper.id, "load_ids": [ready, not_ready]},
    )

    assert response.status_code == 400
    error = response.get_json()["details"]["errors"][0]
    assert error["field"] == "load_ids"
    assert not_ready in error["message"]


def test_unknown_shipper_is_not_found(client: FlaskClient) -> None:
    sign_in(client, UserType.ADMIN, make_admin())
    response = client.post("/api/invoices/generate", json={"shipper_id": "missing"})
    assert response.status_code == 404


def test_shipper_sees_only_own_invoices(client: FlaskClient) -> None:
    owner = make_shipper()
    other = make_shipper("other@example.com")
    _delivered(owner.id, "30", "MED-0001-AA")
    sign_in(client, UserType.ADMIN, make_admin())
    invoice_id = client.post(
        "/api/invoices/generate", json={"shipper_id": owner.id}
    ).get_json()["invoice"]["id"]

    sign_in(client, UserType.SHIPPER, owner)
    assert [item["id"] for item in client.get("/api/invoices").get_json()["invoices"]] == [
        invoice_id
    ]
    assert client.get(f"/api/invoices/{invoice_id}").status_code == 200

    sign_in(client, UserType.SHIPPER, other)
    assert client.get("/api/invoices").get_json()["invoices"] == []
    assert client.get(f"/api/invoices/{invoice_id}").status_code == 404


def test_invoice_status_transitions(client: FlaskClient) -> None:
    shipper = make_shipper()
    _delivered(shipper.id, "30", "MED-0001-AA")
    sign_in(client, UserType.ADMIN, make_admin())
    invoice_id = client.post(
        "/api/invoices/generate", json={"shipper_id": shipper.id}
    ).get_json()["invoice"]["id"]

    def move(status: str):
        return client.patch(f"/api/invoices/{invoice_id}/status", json={"status": status})

    assert move("PAID").status_code == 400
    assert move("SENT").get_json()["invoice"]["status"] == "SENT"
    assert move("PAID").get_json()["invoice"]["status"] == "PAID"
    assert move("VOID").status_code == 400


def test_only_admins_generate_invoices(client: FlaskClient) -> None:
    shipper = make_shipper()
    sign_in(client, UserType.SHIPPER, shipper)

    response = client.post("/api/invoices/generate", json={"shipper_id": shipper.id})
    assert response.status_code == 403
