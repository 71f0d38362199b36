# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify
from sqlalchemy.exc import SQLAlchemyError

from medcourier.infrastructure.health import check_database
from medcourier.infrastructure.observability import metrics_enabled, render_metrics
from medcourier.shared.errors import NotFoundError
from medcourier.shared.logging import logger
from medcourier.shared.middleware import rate_limit_exempt


class MiscController:
    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("misc", __name__)
        bp.add_url_rule("/api/health", view_func=self.health, methods=["GET"])
        bp.add_url_rule("/api/metrics", view_func=self.metrics, methods=["GET"])
        return bp

    @rate_limit_exempt
    def health(self) -> tuple[Response, int]:
        try:
            report = check_database()
        except SQLAlchemyError as exc:
            logger.error(f"health: database check failed: {type(exc).__name__}")
            return jsonify({"ok": False, "database": {"status": "error"}}), 503
        if not report.ok:
            logger.warning(f"health: missing tables {report.missing_tables}")
        return jsonify({"ok": report.ok, "database": report.to_dict()}), 200 if report.ok else 503

    @rate_limit_exempt
    def metrics(self) -> Response:
        if not metrics_enabled():
            raise NotFoundError("Metrics")
        body, content_type = render_metrics()
        return Response(body, content_type=content_type)
