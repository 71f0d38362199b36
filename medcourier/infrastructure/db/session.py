# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker

from medcourier.shared.config import load_config
from medcourier.shared.logging import logger

_config = load_config()


class Base(DeclarativeBase):
    pass


def _engine_options(url: str) -> dict[str, object]:
    options: dict[str, object] = {"echo": False, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        options["connect_args"] = {
            "check_same_thread": False,
            "timeout": int(_config.database.pool_timeout),
        }
        if ":memory:" in url or url.rstrip("/") == "sqlite:":
            return options
    options.update(
        pool_size=_config.database.pool_size,
        max_overflow=_config.database.max_overflow,
        pool_timeout=_config.database.pool_timeout,
    )
    return options


ENGINE: Engine = create_engine(_config.database.url, **_engine_options(_config.database.url))

SessionFactory = sessionmaker(
    bind=ENGINE, autoflush=False, autocommit=False, expire_on_commit=False
)
SessionLocal = scoped_session(SessionFactory)


@contextmanager
def session_scope() -> Iterator[Session]:
    session = SessionLocal()
    logger.debug("db.session: opened scoped session")
    try:
        yield session
        session.commit()
    except Exception:
        logger.debug("db.session: error, rolling back")
        session.rollback()
        raise
    finally:
        session.close()
        SessionLocal.remove()


def init_db() -> None:
    from . import models  # noqa: F401  registers the tables on Base.metadata

    Base.metadata.create_all(bind=ENGINE)
    logger.info("Database schema ensured")


def drop_db() -> None:
    from . import models  # noqa: F401

    Base.metadata.drop_all(bind=ENGINE)
