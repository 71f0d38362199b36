# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import random
import re
import string

_TRACKING_CODE = re.compile(r"^MED-\d{4,}-[A-Z]{2}$")


def generate_tracking_code(sequence: int, rng: random.Random | None = None) -> str:
    """``MED-<sequence padded to 4>-<two random capitals>``."""

    chooser = rng or random.SystemRandom()
    suffix = "".join(chooser.choice(string.ascii_uppercase) for _ in range(2))
    return f"MED-{sequence:04d}-{suffix}"


def normalize_tracking_code(code: str) -> str:
    return code.strip().upper()


def is_valid_tracking_code(code: str) -> bool:
    return bool(_TRACKING_CODE.match(code))


__all__ = ["generate_tracking_code", "is_valid_tracking_code", "normalize_tracking_code"]
