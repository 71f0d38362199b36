# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from medcourier.domain.auth.repositories import Mailer
from medcourier.shared.logging import logger


class LoggingMailer(Mailer):
    """Records outgoing mail in the log instead of delivering it."""

    def __init__(self) -> None:
        self.outbox: list[dict[str, str]] = []

    def send(self, *, to: str, subject: str, body: str) -> None:
        self.outbox.append({"to": to, "subject": subject, "body": body})
        logger.info(f"mailer: queued message to={to} subject={subject!r}")


__all__ = ["LoggingMailer"]
