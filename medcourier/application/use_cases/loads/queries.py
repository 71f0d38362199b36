# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any

from medcourier.domain.auth.entities import Principal
from medcourier.domain.enums import LoadStatus, UserType
from medcourier.domain.loads.entities import LoadRecord
from medcourier.domain.loads.tracking import is_valid_tracking_code, normalize_tracking_code
from medcourier.infrastructure.repositories.loads import SqlAlchemyLoadRepository
from medcourier.shared.errors import AuthorizationError, NotFoundError
from medcourier.shared.logging import logger

from .access import load_for


class ListLoadsUseCase:
    def __init__(self, loads: SqlAlchemyLoadRepository) -> None:
        self._loads = loads

    def execute(self, principal: Principal, status: LoadStatus | None = None) -> list[LoadRecord]:
        if principal.is_admin:
            return self._loads.list_loads(status=status)
        if principal.user_type is UserType.SHIPPER:
            return self.for_shipper(principal.user_id, status)
        if principal.user_type is UserType.DRIVER:
            return self.for_driver(principal.user_id, status)
        raise AuthorizationError()

    def for_shipper(self, shipper_id: str, status: LoadStatus | None = None) -> list[LoadRecord]:
        return self._loads.list_loads(shipper_id=shipper_id, status=status)

    def for_driver(self, viewer_id: str, status: LoadStatus | None = None) -> list[LoadRecord]:
        return self._loads.list_for_driver(viewer_id, status=status)


class GetLoadUseCase:
    def __init__(self, loads: SqlAlchemyLoadRepository) -> None:
        self._loads = loads

    def execute(self, principal: Principal, load_id: str) -> LoadRecord:
        return load_for(self._loads, principal, load_id)


class TrackLoadUseCase:
    """Public lookup by tracking code."""

    def __init__(self, loads: SqlAlchemyLoadRepository) -> None:
        self._loads = loads

    def execute(self, code: str) -> dict[str, Any]:
        normalized = normalize_tracking_code(code)
        load = None
        if is_valid_tracking_code(normalized):
            load = self._loads.get_by_tracking_code(normalized)
        if load is None:
            logger.info(f"tracking: unknown code {normalized!r}")
            raise NotFoundError("Shipment")
        return load.to_public_dict()


__all__ = ["GetLoadUseCase", "ListLoadsUseCase", "TrackLoadUseCase"]
