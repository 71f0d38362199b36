# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hmac
from collections.abc import Callable
from functools import wraps
from http import HTTPStatus
from typing import Any

from flask import request

from medcourier.shared.config import load_config
from medcourier.shared.errors import AppError, AuthenticationError
from medcourier.shared.logging import logger


class CronNotConfiguredError(AppError):
    def __init__(self) -> None:
        super().__init__(
            kind="ServiceUnavailable",
            status=HTTPStatus.SERVICE_UNAVAILABLE,
            message="Scheduled jobs are not configured",
        )


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


def require_cron_secret(func: Callable[..., Any]) -> Callable[..., Any]:
    """Allow the call only with ``Authorization: Bearer <CRON_SECRET>``."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        secret = load_config().cron_secret
        if not secret:
            logger.error(f"cron: CRON_SECRET is not set, refusing {request.path}")
            raise CronNotConfiguredError()

        if not hmac.compare_digest(_bearer_token().encode(), secret.encode()):
            logger.warning(f"cron: invalid secret on {request.path}")
            raise AuthenticationError("Unauthorized")

        return func(*args, **kwargs)

    return wrapper


__all__ = ["CronNotConfiguredError", "require_cron_secret"]
