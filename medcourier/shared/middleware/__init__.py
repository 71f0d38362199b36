# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .cron_auth import require_cron_secret
from .rate_limit import configure_rate_limiting, rate_limit, rate_limit_exempt
from .request_logger import configure_request_logging

__all__ = [
    "configure_rate_limiting",
    "configure_request_logging",
    "rate_limit",
    "rate_limit_exempt",
    "require_cron_secret",
]
