# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from medcourier.domain.enums import (
    DocumentType,
    LoadStatus,
    ServiceType,
    TemperatureRequirement,
)

from .common import Id, LongText, Text, UtcDatetime


class LoadCreateDTO(BaseModel):
    pickup_facility_id: Id
    dropoff_facility_id: Id
    service_type: ServiceType
    commodity_description: LongText
    temperature_requirement: TemperatureRequirement = TemperatureRequirement.AMBIENT
    ready_time: UtcDatetime | None = None
    delivery_deadline: UtcDatetime | None = None

    def to_record(self) -> dict[str, Any]:
        data = self.model_dump()
        data["service_type"] = self.service_type.value
        data["temperature_requirement"] = self.temperature_requirement.value
        return data


class LoadListQuery(BaseModel):
    status: LoadStatus | None = None


class QuoteDTO(BaseModel):
    quote_amount: float = Field(gt=0)
    quote_notes: LongText | None = None


class AssignDriverDTO(BaseModel):
    driver_id: Id


class StatusUpdateDTO(BaseModel):
    status: LoadStatus
    location_text: Text | None = None


class CancelDTO(BaseModel):
    reason: LongText | None = None


class RatingDTO(BaseModel):
    rating: int = Field(ge=1, le=5)
    feedback: LongText | None = None


class DocumentCreateDTO(BaseModel):
    document_type: DocumentType
    title: Text
    file_url: str = Field(min_length=1, max_length=1024, pattern=r"^https?://")
    mime_type: str | None = Field(default=None, max_length=128)
    file_size: int | None = Field(default=None, ge=0)

    def to_record(self) -> dict[str, Any]:
        data = self.model_dump()
        data["document_type"] = self.document_type.value
        return data
