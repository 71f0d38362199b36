# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Fixed-window request limiting.

Every client key gets one counter per limit class. The counter resets when
its window elapses, so a client can burst up to twice the threshold across a
window boundary. Counters are process-local; a multi-instance deployment needs
a shared ``RateLimitStore``.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from threading import Lock
from typing import Protocol, TypeVar

from flask import Flask, Request, Response, g, request

from medcourier.shared.config import AppConfig, load_config
from medcourier.shared.errors import RateLimitError
from medcourier.shared.logging import logger

AUTH = "auth"
API = "api"
EXEMPT = "exempt"
RATE_LIMIT_ATTR = "_rate_limit_class"
SWEEP_INTERVAL_SECONDS = 5 * 60.0

F = TypeVar("F", bound=Callable)


@dataclass(slots=True)
class RateLimitWindow:
    key: str
    count: int
    window_start: float


@dataclass(slots=True, frozen=True)
class RateLimitPolicy:
    limit: int
    window_seconds: float


@dataclass(slots=True, frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    retry_after: int


class RateLimitStore(Protocol):
    def get(self, key: str) -> RateLimitWindow | None: ...

    def put(self, window: RateLimitWindow) -> None: ...

    def remove_started_before(self, cutoff: float) -> int: ...

    def clear(self) -> None: ...


class InMemoryRateLimitStore:
    def __init__(self) -> None:
        self._windows: dict[str, RateLimitWindow] = {}

    def get(self, key: str) -> RateLimitWindow | None:
        return self._windows.get(key)

    def put(self, window: RateLimitWindow) -> None:
        self._windows[window.key] = window

    def remove_started_before(self, cutoff: float) -> int:
        stale = [key for key, window in self._windows.items() if window.window_start < cutoff]
        for key in stale:
            del self._windows[key]
        return len(stale)

    def clear(self) -> None:
        self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)


class FixedWindowRateLimiter:
    def __init__(
        self,
        policies: Mapping[str, RateLimitPolicy],
        *,
        store: RateLimitStore | None = None,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: float = SWEEP_INTERVAL_SECONDS,
    ) -> None:
        self._policies = dict(policies)
        self._store = store if store is not None else InMemoryRateLimitStore()
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._lock = Lock()
        self._last_sweep = clock()
        self._max_window = max(
            (policy.window_seconds for policy in self._policies.values()), default=0.0
        )

    @property
    def store(self) -> RateLimitStore:
        return self._store

    def policy(self, limit_class: str) -> RateLimitPolicy:
        try:
            return self._policies[limit_class]
        except KeyError:
            raise ValueError(f"Unknown rate limit class: {limit_class}") from None

    def check(self, client_key: str, limit_class: str) -> RateLimitDecision:
        policy = self.policy(limit_class)
        key = f"{limit_class}:{client_key}"

        with self._lock:
            now = self._clock()
            self._maybe_sweep(now)

            window = self._store.get(key)
            if window is None or now - window.window_start >= policy.window_seconds:
                window = RateLimitWindow(key=key, count=0, window_start=now)
            window.count += 1
            self._store.put(window)

            reset_in = policy.window_seconds - (now - window.window_start)
            retry_after = max(1, math.ceil(reset_in))

            if window.count > policy.limit:
                return RateLimitDecision(
                    allowed=False, limit=policy.limit, remaining=0, retry_after=retry_after
                )
            return RateLimitDecision(
                allowed=True,
                limit=policy.limit,
                remaining=policy.limit - window.count,
                retry_after=retry_after,
            )

    def reset(self) -> None:
        with self._lock:
            self._store.clear()

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep < self._sweep_interval:
            return
        self._last_sweep = now
        removed = self._store.remove_started_before(now - self._max_window)
        if removed:
            logger.debug(f"rate_limit: swept {removed} stale windows")


def build_rate_limiter(config: AppConfig) -> FixedWindowRateLimiter:
    security = config.security
    return FixedWindowRateLimiter(
        {
            AUTH: RateLimitPolicy(security.auth_rate_limit, security.auth_rate_window),
            API: RateLimitPolicy(security.api_rate_limit, security.api_rate_window),
        }
    )


_limiter: FixedWindowRateLimiter | None = None
_limiter_lock = Lock()


def get_rate_limiter() -> FixedWindowRateLimiter:
    global _limiter
    with _limiter_lock:
        if _limiter is None:
            _limiter = build_rate_limiter(load_config())
        return _limiter


def reset_rate_limiter() -> None:
    global _limiter
    with _limiter_lock:
        _limiter = None


def client_key(req: Request) -> str:
    forwarded = req.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    if forwarded:
        return forwarded
    real_ip = req.headers.get("X-Real-IP", "").strip()
    return real_ip or (req.remote_addr or "unknown")


def rate_limit(limit_class: str) -> Callable[[F], F]:
    """Tag a view with the limit class enforced for it."""

    def decorator(f: F) -> F:
        setattr(f, RATE_LIMIT_ATTR, limit_class)
        return f

    return decorator


def rate_limit_exempt(f: F) -> F:
    setattr(f, RATE_LIMIT_ATTR, EXEMPT)
    return f


def _limit_class_for(app: Flask) -> str | None:
    if request.method == "OPTIONS" or not request.path.startswith("/api/"):
        return None
    view = app.view_functions.get(request.endpoint) if request.endpoint else None
    limit_class = getattr(view, RATE_LIMIT_ATTR, API)
    return None if limit_class == EXEMPT else limit_class


def configure_rate_limiting(app: Flask) -> None:
    """Install the limiter. Must be called before any other request hook."""

    @app.before_request
    def _enforce_rate_limit() -> None:
        if not load_config().security.enable_rate_limit:
            return
        limit_class = _limit_class_for(app)
        if limit_class is None:
            return

        key = client_key(request)
        decision = get_rate_limiter().check(key, limit_class)
        g.rate_limit_decision = decision
        g.rate_limit_class = limit_class
        if not decision.allowed:
            logger.warning(
                f"rate_limit: rejected class={limit_class} client={key} "
                f"path={request.path} retry_after={decision.retry_after}s"
            )
            raise RateLimitError(retry_after=decision.retry_after)

    @app.after_request
    def _rate_limit_headers(response: Response) -> Response:
        decision: RateLimitDecision | None = g.get("rate_limit_decision")
        if decision is not None:
            response.headers["X-RateLimit-Limit"] = str(decision.limit)
            response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
            response.headers["X-RateLimit-Reset"] = str(decision.retry_after)
        return response


__all__ = [
    "API",
    "AUTH",
    "FixedWindowRateLimiter",
    "InMemoryRateLimitStore",
    "RateLimitDecision",
    "RateLimitPolicy",
    "RateLimitStore",
    "RateLimitWindow",
    "build_rate_limiter",
    "client_key",
    "configure_rate_limiting",
    "get_rate_limiter",
    "rate_limit",
    "rate_limit_exempt",
    "reset_rate_limiter",
]
