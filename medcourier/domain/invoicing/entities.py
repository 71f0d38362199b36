# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from medcourier.domain.enums import InvoiceStatus
from medcourier.domain.values import iso, money


@dataclass(slots=True, frozen=True)
class InvoiceRecord:
    id: str
    invoice_number: str
    shipper_id: str
    invoice_date: date
    due_date: date
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    status: InvoiceStatus
    notes: str | None
    created_at: datetime
    load_ids: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "invoice_number": self.invoice_number,
            "shipper_id": self.shipper_id,
            "invoice_date": iso(self.invoice_date),
            "due_date": iso(self.due_date),
            "subtotal": money(self.subtotal),
            "tax": money(self.tax),
            "total": money(self.total),
            "status": self.status.value,
            "notes": self.notes,
            "load_ids": list(self.load_ids),
            "created_at": iso(self.created_at),
        }


@dataclass(slots=True, frozen=True)
class NewInvoice:
    invoice_number: str
    shipper_id: str
    invoice_date: date
    due_date: date
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    notes: str | None
    load_ids: tuple[str, ...]
