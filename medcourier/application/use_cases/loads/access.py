# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Who may see and act on a load.

Admins see every load, shippers see their own and drivers see loads assigned
to anyone in their fleet scope. A load outside the caller's reach is reported
as missing rather than forbidden so ids cannot be enumerated.
"""

from __future__ import annotations

from medcourier.domain.auth.entities import Principal
from medcourier.domain.enums import UserType
from medcourier.domain.loads.entities import LoadRecord
from medcourier.infrastructure.repositories.loads import SqlAlchemyLoadRepository
from medcourier.shared.errors import AuthorizationError, NotFoundError


def load_for(loads: SqlAlchemyLoadRepository, principal: Principal, load_id: str) -> LoadRecord:
    if principal.is_admin:
        load = loads.get(load_id)
    elif principal.user_type is UserType.SHIPPER:
        load = loads.get(load_id)
        if load is not None and load.shipper_id != principal.user_id:
            load = None
    elif principal.user_type is UserType.DRIVER:
        load = loads.get_for_driver(principal.user_id, load_id)
    else:
        load = None
    if load is None:
        raise NotFoundError("Load request")
    return load


def is_owning_shipper(principal: Principal, load: LoadRecord) -> bool:
    return principal.user_type is UserType.SHIPPER and load.shipper_id == principal.user_id


def is_assigned_driver(principal: Principal, load: LoadRecord) -> bool:
    return principal.user_type is UserType.DRIVER and load.driver_id == principal.user_id


def require_admin_actor(principal: Principal) -> None:
    if not principal.is_admin:
        raise AuthorizationError("Admin access required")


__all__ = ["is_assigned_driver", "is_owning_shipper", "load_for", "require_admin_actor"]
