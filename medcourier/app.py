# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import importlib
from typing import Any, Protocol, cast

from flask import Flask, Response

from medcourier.infrastructure.container import container
from medcourier.infrastructure.db import init_db
from medcourier.infrastructure.observability import configure_metrics
from medcourier.interfaces.cli import register_cli
from medcourier.shared.config import load_config
from medcourier.shared.errors import register_error_handler
from medcourier.shared.logging import logger, setup_logging
from medcourier.shared.middleware import configure_rate_limiting, configure_request_logging


class _CORSCallable(Protocol):
    def __call__(self, app: Flask, **kwargs: Any) -> Any: ...


_flask_cors = importlib.import_module("flask_cors")
CORS = cast(_CORSCallable, _flask_cors.CORS)


def create_app() -> Flask:
    config = load_config()
    init_db()
    setup_logging(config.logging, debug_mode=config.debug_logging)

    app = Flask(__name__)
    # Registered first so a rejected request never reaches validation or the database.
    configure_rate_limiting(app)
    register_error_handler(app)
    configure_request_logging(app)
    configure_metrics(app)

    app.config.update(
        SECRET_KEY=config.secret_key,
        MAX_CONTENT_LENGTH=1024 * 1024,
    )

    cors_kwargs: dict[str, object] = {
        "resources": {r"/api/*": {"origins": config.security.allowed_origins}}
    }
    if any(origin != "*" for origin in config.security.allowed_origins):
        cors_kwargs["supports_credentials"] = True
    CORS(app, **cors_kwargs)

    for controller in container.controllers():
        app.register_blueprint(controller.as_blueprint())

    register_cli(app)
    container.cache.start_sweeper(config.cache.sweep_interval)

    @app.after_request
    def _add_security_headers(resp: Response) -> Response:
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Cross-Origin-Resource-Policy", "same-origin")
        resp.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
        resp.headers.setdefault(
            "Permissions-Policy",
            "geolocation=(self), microphone=(), camera=(), payment=(), usb=()",
        )
        resp.headers.setdefault("X-Permitted-Cross-Domain-Policies", "none")
        resp.headers.setdefault("Cache-Control", "no-store")

        if config.security.enable_hsts:
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return resp

    logger.info(f"Flask app initialized env={config.app_env}")
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
