# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from pydantic import BaseModel, Field


class GeocodeQuery(BaseModel):
    address: str = Field(min_length=3, max_length=500)


class ReverseGeocodeQuery(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
