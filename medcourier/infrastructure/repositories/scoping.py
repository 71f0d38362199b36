# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from medcourier.domain.enums import FleetRole
from medcourier.domain.fleet.visibility import FleetMember, sees_whole_fleet, visible_driver_ids
from medcourier.infrastructure.db.models import Driver


def driver_scope(session: Session, viewer_id: str) -> frozenset[str]:
    """Driver ids visible to ``viewer_id``, resolved inside ``session``.

    Driver-data queries filter on this set with ``IN``; an unknown viewer gets
    an empty scope and therefore no rows.
    """

    viewer = session.get(Driver, viewer_id)
    if viewer is None:
        return frozenset()
    member = FleetMember(
        driver_id=viewer.id, fleet_id=viewer.fleet_id, fleet_role=FleetRole(viewer.fleet_role)
    )
    fleet_ids: list[str] = []
    if sees_whole_fleet(member):
        fleet_ids = list(
            session.execute(select(Driver.id).where(Driver.fleet_id == viewer.fleet_id)).scalars()
        )
    return visible_driver_ids(member, fleet_ids)


__all__ = ["driver_scope"]
