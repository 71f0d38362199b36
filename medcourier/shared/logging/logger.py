# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Loguru setup shared by the web app, the CLI and scheduled jobs.

Every record carries the current request id and the principal that made the
request (``driver:<id>``, ``shipper:<id>``, ``admin:<id>`` or ``-``). Both
live in context variables so they follow the request through use cases and
repositories without being passed around.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

from .sensitive_filter import sanitize_record

if TYPE_CHECKING:
    from medcourier.shared.config.settings import LoggingConfig

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<magenta>{extra[request_id]}</magenta> "
    "<yellow>{extra[principal]}</yellow> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)

_REQUEST_ID: ContextVar[str] = ContextVar("request_id", default="-")
_PRINCIPAL: ContextVar[str] = ContextVar("principal", default="-")

# Libraries that log through the stdlib and their floor level.
_STDLIB_LEVELS = {
    "werkzeug": logging.INFO,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}


def _inject_context(record: dict[str, Any]) -> None:
    record["extra"].setdefault("request_id", _REQUEST_ID.get())
    record["extra"].setdefault("principal", _PRINCIPAL.get())


class _StdlibBridge(logging.Handler):
    """Forward stdlib ``logging`` records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def bind_request(request_id: str, principal: str | None = None) -> None:
    _REQUEST_ID.set(request_id)
    _PRINCIPAL.set(principal or "-")


def bind_principal(user_type: str, user_id: str) -> None:
    _PRINCIPAL.set(f"{user_type}:{user_id}")


def current_request_id() -> str:
    return _REQUEST_ID.get()


def reset_request() -> None:
    _REQUEST_ID.set("-")
    _PRINCIPAL.set("-")


def setup_logging(config: LoggingConfig | None = None, *, debug_mode: bool = False) -> None:
    level = (config.level if config and config.level else None) or (
        "DEBUG" if debug_mode else "INFO"
    )
    level = level.upper()
    serialize = bool(config and config.json_output)

    logger.remove()
    logger.configure(patcher=_inject_context)
    logger.add(
        sys.stderr,
        level=level,
        format=_FORMAT,
        colorize=not serialize,
        serialize=serialize,
        backtrace=False,
        diagnose=False,
        filter=sanitize_record,
    )

    if config and config.file:
        Path(config.file).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            config.file,
            level=level,
            format=_FORMAT,
            serialize=serialize,
            colorize=False,
            backtrace=False,
            diagnose=False,
            enqueue=True,
            rotation=config.rotation,
            retention=config.retention,
            encoding="utf-8",
            filter=sanitize_record,
        )

    logging.basicConfig(handlers=[_StdlibBridge()], level=0, force=True)
    for name, floor in _STDLIB_LEVELS.items():
        logging.getLogger(name).setLevel(floor)


__all__ = [
    "bind_principal",
    "bind_request",
    "current_request_id",
    "logger",
    "reset_request",
    "setup_logging",
]
