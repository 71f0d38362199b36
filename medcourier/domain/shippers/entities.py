# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from medcourier.domain.enums import PaymentTerms
from medcourier.domain.values import iso


@dataclass(slots=True, frozen=True)
class ShipperProfile:
    id: str
    email: str
    company_name: str
    contact_name: str
    phone: str | None
    payment_terms: PaymentTerms
    is_active: bool
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "company_name": self.company_name,
            "contact_name": self.contact_name,
            "phone": self.phone,
            "payment_terms": self.payment_terms.value,
            "is_active": self.is_active,
            "created_at": iso(self.created_at),
        }


@dataclass(slots=True, frozen=True)
class FacilityRecord:
    id: str
    shipper_id: str
    name: str
    facility_type: str
    address_line1: str
    address_line2: str | None
    city: str
    state: str
    postal_code: str
    contact_name: str | None
    contact_phone: str | None
    access_notes: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "shipper_id": self.shipper_id,
            "name": self.name,
            "facility_type": self.facility_type,
            "address_line1": self.address_line1,
            "address_line2": self.address_line2,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "contact_name": self.contact_name,
            "contact_phone": self.contact_phone,
            "access_notes": self.access_notes,
        }
