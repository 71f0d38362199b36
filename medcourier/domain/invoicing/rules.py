# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from medcourier.domain.enums import InvoiceStatus, PaymentTerms
from medcourier.domain.exceptions import InvalidTransitionError, InvariantViolationError

DEFAULT_TERM_DAYS = 14

TERM_DAYS: Mapping[PaymentTerms, int] = {
    PaymentTerms.NET_7: 7,
    PaymentTerms.NET_14: 14,
    PaymentTerms.NET_30: 30,
    PaymentTerms.INVOICE_ONLY: 30,
}

INVOICE_TRANSITIONS: Mapping[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({InvoiceStatus.SENT, InvoiceStatus.VOID}),
    InvoiceStatus.SENT: frozenset({InvoiceStatus.PAID, InvoiceStatus.VOID}),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.VOID: frozenset(),
}

_CENT = Decimal("0.01")
_SEQUENCE = re.compile(r"-(\d+)$")


@dataclass(slots=True, frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def invoice_prefix(year: int) -> str:
    return f"INV-{year}-"


def next_invoice_number(year: int, last_number: str | None) -> str:
    """Follow the highest number issued this year, starting at ``001``."""

    sequence = 1
    if last_number:
        match = _SEQUENCE.search(last_number)
        if match:
            sequence = int(match.group(1)) + 1
    return f"{invoice_prefix(year)}{sequence:03d}"


def due_date_for(invoice_date: date, terms: PaymentTerms | str | None) -> date:
    try:
        days = TERM_DAYS[PaymentTerms(terms)] if terms else DEFAULT_TERM_DAYS
    except ValueError:
        days = DEFAULT_TERM_DAYS
    return invoice_date + timedelta(days=days)


def compute_totals(amounts: Iterable[Decimal], tax_rate: Decimal) -> InvoiceTotals:
    if tax_rate < 0:
        raise InvariantViolationError("Tax rate cannot be negative", field="tax_rate")
    subtotal = sum(amounts, Decimal("0")).quantize(_CENT, rounding=ROUND_HALF_UP)
    tax = (subtotal * tax_rate).quantize(_CENT, rounding=ROUND_HALF_UP)
    return InvoiceTotals(subtotal=subtotal, tax=tax, total=subtotal + tax)


def ensure_invoice_transition(current: InvoiceStatus, requested: InvoiceStatus) -> None:
    if requested not in INVOICE_TRANSITIONS[current]:
        raise InvalidTransitionError(current.value, requested.value)


__all__ = [
    "DEFAULT_TERM_DAYS",
    "INVOICE_TRANSITIONS",
    "InvoiceTotals",
    "compute_totals",
    "due_date_for",
    "ensure_invoice_transition",
    "invoice_prefix",
    "next_invoice_number",
]
