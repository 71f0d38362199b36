# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from medcourier.domain.enums import FleetRole

_FLEET_MANAGERS = frozenset({FleetRole.OWNER, FleetRole.ADMIN})


@dataclass(slots=True, frozen=True)
class FleetMember:
    driver_id: str
    fleet_id: str | None
    fleet_role: FleetRole


def sees_whole_fleet(viewer: FleetMember) -> bool:
    return viewer.fleet_id is not None and viewer.fleet_role in _FLEET_MANAGERS


def visible_driver_ids(viewer: FleetMember, fleet_driver_ids: Iterable[str]) -> frozenset[str]:
    """Driver ids whose records ``viewer`` may read.

    ``fleet_driver_ids`` are the drivers sharing the viewer's fleet. Only fleet
    owners and fleet admins see them; everybody else sees themself.
    """

    if not sees_whole_fleet(viewer):
        return frozenset({viewer.driver_id})
    return frozenset(fleet_driver_ids) | {viewer.driver_id}


__all__ = ["FleetMember", "sees_whole_fleet", "visible_driver_ids"]
