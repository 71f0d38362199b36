# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hashlib
import secrets
import time
from typing import Any

from flask import Flask, Response, g, request

from medcourier.shared.config import load_config
from medcourier.shared.logging import bind_request, current_request_id, logger, reset_request

from .rate_limit import client_key

_SENSITIVE_HEADERS = frozenset(
    {"authorization", "cookie", "set-cookie", "x-api-key", "x-auth-token", "x-cron-secret"}
)
_SENSITIVE_PARAMS = ("password", "token", "key", "secret", "auth")


def _principal_id() -> str | None:
    principal = g.get("principal")
    return getattr(principal, "user_id", None)


def sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    sanitized = {}
    for key, value in headers.items():
        if key.lower() in _SENSITIVE_HEADERS:
            sanitized[key] = f"<hashed:{hashlib.sha256(value.encode()).hexdigest()[:8]}>"
        else:
            sanitized[key] = value
    return sanitized


def sanitize_query_params(params: dict[str, Any]) -> dict[str, Any]:
    return {
        key: "<redacted>" if any(word in key.lower() for word in _SENSITIVE_PARAMS) else value
        for key, value in params.items()
    }


def configure_request_logging(app: Flask) -> None:
    debug_mode = load_config().debug_logging

    @app.before_request
    def _log_request_start() -> None:
        bind_request(request.headers.get("X-Request-ID") or secrets.token_urlsafe(8))
        g.request_start_time = time.perf_counter()

        if debug_mode:
            logger.info(
                f"Request started: {request.method} {request.path} "
                f"from {client_key(request)}, "
                f"query={sanitize_query_params(request.args.to_dict())}, "
                f"headers={sanitize_headers(dict(request.headers))}, "
                f"body_size={request.content_length or 0}"
            )
        else:
            logger.info(f"Request: {request.method} {request.path} from {client_key(request)}")

    @app.after_request
    def _log_request_end(response: Response) -> Response:
        start = g.get("request_start_time", time.perf_counter())
        duration = time.perf_counter() - start
        logger.info(
            f"Response: {request.method} {request.path} "
            f"status={response.status_code}, duration={duration:.3f}s, "
            f"user={_principal_id()}"
        )
        response.headers.setdefault("X-Request-ID", current_request_id())
        return response

    @app.teardown_request
    def _clear_request_context(exc: BaseException | None) -> None:
        reset_request()


__all__ = ["configure_request_logging", "sanitize_headers", "sanitize_query_params"]
