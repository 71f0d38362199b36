# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Readiness check behind ``GET /api/health``."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Engine, inspect, text

from medcourier.infrastructure.db import ENGINE

# Tables the dispatch flow cannot work without.
CORE_TABLES = ("drivers", "shippers", "facilities", "load_requests", "tracking_events")


@dataclass(slots=True)
class DatabaseHealth:
    dialect: str
    latency_ms: float
    missing_tables: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing_tables

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "ok" if self.ok else "degraded",
            "dialect": self.dialect,
            "latency_ms": self.latency_ms,
            "missing_tables": self.missing_tables,
        }


def check_database(engine: Engine = ENGINE) -> DatabaseHealth:
    """Ping the database and confirm the core schema exists.

    Connection failures propagate as ``SQLAlchemyError``.
    """

    started = time.perf_counter()
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
        present = set(inspect(connection).get_table_names())
    latency_ms = round((time.perf_counter() - started) * 1000, 2)
    return DatabaseHealth(
        dialect=engine.dialect.name,
        latency_ms=latency_ms,
        missing_tables=[name for name in CORE_TABLES if name not in present],
    )


__all__ = ["CORE_TABLES", "DatabaseHealth", "check_database"]
