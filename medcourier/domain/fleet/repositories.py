# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Protocol

from .visibility import FleetMember


class FleetMemberRepository(Protocol):
    def get_member(self, driver_id: str) -> FleetMember | None: ...
    def list_fleet_driver_ids(self, fleet_id: str) -> list[str]: ...
