# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig


from .logger import (
    bind_principal,
    bind_request,
    current_request_id,
    logger,
    reset_request,
    setup_logging,
)
from .sensitive_filter import sanitize_message

__all__ = [
    "bind_principal",
    "bind_request",
    "current_request_id",
    "logger",
    "reset_request",
    "sanitize_message",
    "setup_logging",
]
