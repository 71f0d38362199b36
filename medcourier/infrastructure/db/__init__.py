# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .session import ENGINE, Base, SessionFactory, SessionLocal, drop_db, init_db, session_scope

__all__ = [
    "Base",
    "ENGINE",
    "SessionFactory",
    "SessionLocal",
    "drop_db",
    "init_db",
    "session_scope",
]
