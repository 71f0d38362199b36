# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any

from medcourier.infrastructure.geocoding import GoogleGeocodingClient
from medcourier.shared.errors import NotFoundError


class GeocodeAddressUseCase:
    def __init__(self, client: GoogleGeocodingClient) -> None:
        self._client = client

    def execute(self, address: str) -> dict[str, Any]:
        result = self._client.geocode(address)
        if result is None:
            raise NotFoundError("Address")
        return result.to_dict()


class ReverseGeocodeUseCase:
    def __init__(self, client: GoogleGeocodingClient) -> None:
        self._client = client

    def execute(self, latitude: float, longitude: float) -> dict[str, Any]:
        result = self._client.reverse(latitude, longitude)
        if result is None:
            raise NotFoundError("Address")
        return result.to_dict()


__all__ = ["GeocodeAddressUseCase", "ReverseGeocodeUseCase"]
