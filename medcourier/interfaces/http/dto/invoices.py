# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from pydantic import BaseModel, Field

from medcourier.domain.enums import InvoiceStatus

from .common import Id, LongText


class InvoiceGenerateDTO(BaseModel):
    shipper_id: Id
    load_ids: list[Id] | None = Field(default=None, min_length=1)
    tax_rate: float = Field(default=0, ge=0, le=1)
    notes: LongText | None = None


class InvoiceStatusDTO(BaseModel):
    status: InvoiceStatus
