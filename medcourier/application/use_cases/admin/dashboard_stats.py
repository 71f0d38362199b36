# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any

from medcourier.domain.enums import DriverStatus, LoadStatus
from medcourier.infrastructure.cache import InMemoryTTLCache
from medcourier.infrastructure.repositories.drivers import SqlAlchemyDriverRepository
from medcourier.infrastructure.repositories.loads import SqlAlchemyLoadRepository
from medcourier.infrastructure.repositories.shippers import SqlAlchemyShipperRepository

STATS_CACHE_KEY = "admin:stats"
STATS_TTL_SECONDS = 60


class GetDashboardStatsUseCase:
    def __init__(
        self,
        *,
        loads: SqlAlchemyLoadRepository,
        drivers: SqlAlchemyDriverRepository,
        shippers: SqlAlchemyShipperRepository,
        cache: InMemoryTTLCache,
    ) -> None:
        self._loads = loads
        self._drivers = drivers
        self._shippers = shippers
        self._cache = cache

    def execute(self) -> dict[str, Any]:
        return self._cache.get_or_set(STATS_CACHE_KEY, self._compute, STATS_TTL_SECONDS)

    def _compute(self) -> dict[str, Any]:
        load_counts = self._loads.count_by_status()
        driver_counts = self._drivers.count_by_status()
        loads_by_status = {status.value: load_counts.get(status.value, 0) for status in LoadStatus}
        active = sum(
            loads_by_status[status.value]
            for status in (
                LoadStatus.SCHEDULED,
                LoadStatus.PICKED_UP,
                LoadStatus.IN_TRANSIT,
            )
        )
        return {
            "loads_by_status": loads_by_status,
            "total_loads": sum(loads_by_status.values()),
            "active_loads": active,
            "pending_quotes": loads_by_status[LoadStatus.NEW.value],
            "drivers_pending": driver_counts.get(DriverStatus.PENDING_APPROVAL.value, 0),
            "drivers_active": driver_counts.get(DriverStatus.ACTIVE.value, 0),
            "total_shippers": self._shippers.count(),
        }


__all__ = ["GetDashboardStatsUseCase", "STATS_CACHE_KEY"]
