# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from medcourier.domain.fleet.repositories import FleetMemberRepository
from medcourier.domain.fleet.visibility import sees_whole_fleet, visible_driver_ids


class FleetVisibilityService:
    """Which drivers a driver may see.

    Repositories apply the same rule inside their queries; this service answers
    the question for callers that need the id set itself.
    """

    def __init__(self, members: FleetMemberRepository) -> None:
        self._members = members

    def visible_driver_ids(self, viewer_id: str) -> frozenset[str]:
        viewer = self._members.get_member(viewer_id)
        if viewer is None:
            return frozenset()
        fleet_ids: list[str] = []
        if sees_whole_fleet(viewer) and viewer.fleet_id is not None:
            fleet_ids = self._members.list_fleet_driver_ids(viewer.fleet_id)
        return visible_driver_ids(viewer, fleet_ids)

    def can_view(self, viewer_id: str, driver_id: str) -> bool:
        return driver_id in self.visible_driver_ids(viewer_id)


__all__ = ["FleetVisibilityService"]
