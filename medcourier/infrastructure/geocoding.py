# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from medcourier.infrastructure.cache import InMemoryTTLCache
from medcourier.infrastructure.resilience import (
    CircuitBreaker,
    CircuitOpenError,
    RetryPolicy,
    build_breaker,
    resilient_call,
)
from medcourier.shared.config import AppConfig
from medcourier.shared.logging import logger

_MISS = "__miss__"
# Only these statuses are real answers; quota and auth errors are never cached.
_ANSWERED_STATUSES = frozenset({"OK", "ZERO_RESULTS"})


@dataclass(slots=True, frozen=True)
class GeocodedAddress:
    formatted_address: str
    latitude: float
    longitude: float
    city: str
    state: str
    postal_code: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "formatted_address": self.formatted_address,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
        }


def _component(components: Sequence[Mapping[str, Any]], kind: str, name: str) -> str | None:
    for component in components:
        if kind in component.get("types", ()):
            value = component.get(name)
            if value:
                return str(value)
    return None


def parse_result(result: Mapping[str, Any]) -> GeocodedAddress:
    components = result.get("address_components") or []
    location = result["geometry"]["location"]
    return GeocodedAddress(
        formatted_address=str(result.get("formatted_address", "")),
        latitude=float(location["lat"]),
        longitude=float(location["lng"]),
        city=_component(components, "locality", "long_name")
        or _component(components, "sublocality", "long_name")
        or "",
        state=_component(components, "administrative_area_level_1", "short_name") or "",
        postal_code=_component(components, "postal_code", "long_name") or "",
    )


class GoogleGeocodingClient:
    """Google Geocoding REST API over httpx.

    Lookups answer ``None`` when no key is configured, when Google has no
    result, and when the upstream call fails after retries. Answers, including
    misses, are cached for ``cache_ttl`` seconds.
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str,
        timeout: float,
        cache: InMemoryTTLCache,
        cache_ttl: float,
        breaker: CircuitBreaker,
        policy: RetryPolicy,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._cache = cache
        self._cache_ttl = cache_ttl
        self._breaker = breaker
        self._policy = policy
        self._client = httpx.Client(timeout=timeout, transport=transport)

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        cache: InMemoryTTLCache,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> GoogleGeocodingClient:
        return cls(
            api_key=config.geocoding.api_key,
            base_url=config.geocoding.base_url,
            timeout=config.geocoding.timeout,
            cache=cache,
            cache_ttl=config.geocoding.cache_ttl,
            breaker=build_breaker(config),
            policy=RetryPolicy.from_config(
                config, retry_on=(httpx.TransportError, httpx.HTTPStatusError)
            ),
            transport=transport,
        )

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def geocode(self, address: str) -> GeocodedAddress | None:
        normalized = " ".join(address.split()).lower()
        return self._lookup(f"geocode:{normalized}", {"address": address})

    def reverse(self, latitude: float, longitude: float) -> GeocodedAddress | None:
        return self._lookup(
            f"reverse:{latitude:.6f},{longitude:.6f}", {"latlng": f"{latitude},{longitude}"}
        )

    def close(self) -> None:
        self._client.close()

    def _lookup(self, cache_key: str, params: dict[str, str]) -> GeocodedAddress | None:
        if not self._api_key:
            logger.warning("geocoding: GOOGLE_MAPS_API_KEY not configured, lookup disabled")
            return None

        cached = self._cache.get(cache_key)
        if cached is not None:
            return None if cached == _MISS else cached

        try:
            payload = resilient_call(
                self._request, {**params, "key": self._api_key},
                breaker=self._breaker, policy=self._policy,
            )
        except CircuitOpenError:
            logger.warning("geocoding: circuit open, skipping upstream call")
            return None
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"geocoding: upstream failure {type(exc).__name__}: {exc}")
            return None

        status = payload.get("status")
        results = payload.get("results") or []
        if status not in _ANSWERED_STATUSES:
            logger.error(f"geocoding: upstream refused lookup status={status}")
            return None
        if not results:
            logger.info(f"geocoding: no result status={status}")
            self._cache.set(cache_key, _MISS, self._cache_ttl)
            return None

        try:
            address = parse_result(results[0])
        except (KeyError, TypeError, ValueError) as exc:
            logger.error(f"geocoding: malformed result {type(exc).__name__}")
            return None
        self._cache.set(cache_key, address, self._cache_ttl)
        return address

    def _request(self, params: dict[str, str]) -> dict[str, Any]:
        response = self._client.get(self._base_url, params=params)
        response.raise_for_status()
        return response.json()


__all__ = ["GeocodedAddress", "GoogleGeocodingClient", "parse_result"]
