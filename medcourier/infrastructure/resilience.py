# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Retries and a circuit breaker for outbound HTTP calls."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from medcourier.shared.config import AppConfig
from medcourier.shared.logging import logger

T = TypeVar("T")


class CircuitOpenError(RuntimeError):
    pass


@dataclass
class CircuitBreaker:
    """Simple in-memory circuit breaker."""

    failure_threshold: int
    reset_timeout: float
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)

    def __post_init__(self) -> None:
        self._failures = 0
        self._opened_at: float | None = None
        self._half_open = False

    @property
    def is_open(self) -> bool:
        return self._opened_at is not None

    def allow(self) -> bool:
        if self._opened_at is None:
            return True
        if self.clock() - self._opened_at >= self.reset_timeout:
            logger.info("breaker: half-open state")
            self._opened_at = None
            self._half_open = True
            return True
        logger.warning("breaker: open state refusing call")
        return False

    def on_success(self) -> None:
        self._failures = 0
        self._opened_at = None
        self._half_open = False

    def on_failure(self) -> None:
        self._failures += 1
        # A failed trial call re-opens at once.
        if self._half_open or self._failures >= self.failure_threshold:
            self._half_open = False
            self._opened_at = self.clock()
            logger.error("breaker: opening circuit after failures")


@dataclass
class RetryPolicy:
    max_retries: int = 2
    backoff_base: float = 0.5
    backoff_cap: float = 4.0
    retry_on: tuple[type[BaseException], ...] = (Exception,)

    @classmethod
    def from_config(
        cls, config: AppConfig, retry_on: tuple[type[BaseException], ...] = (Exception,)
    ) -> RetryPolicy:
        return cls(
            max_retries=config.resilience.max_retries,
            backoff_base=config.resilience.backoff_base,
            backoff_cap=config.resilience.backoff_cap,
            retry_on=retry_on,
        )


def build_breaker(config: AppConfig) -> CircuitBreaker:
    return CircuitBreaker(
        failure_threshold=config.resilience.circuit_fail_threshold,
        reset_timeout=config.resilience.circuit_reset_timeout,
    )


def resilient_call(  # noqa: UP047
    func: Callable[..., T],
    *args: Any,
    breaker: CircuitBreaker,
    policy: RetryPolicy,
    **kwargs: Any,
) -> T:
    """Run ``func`` with exponential-backoff retries behind ``breaker``.

    The breaker counts one failure per exhausted call, not per attempt. The
    last underlying exception is re-raised unchanged.
    """

    if not breaker.allow():
        raise CircuitOpenError("Circuit breaker is open")

    retry = Retrying(
        stop=stop_after_attempt(policy.max_retries + 1),
        wait=wait_exponential(multiplier=policy.backoff_base, max=policy.backoff_cap),
        retry=retry_if_exception_type(policy.retry_on),
        reraise=True,
    )

    try:
        for attempt in retry:
            with attempt:
                logger.debug(
                    f"resilience: attempt={attempt.retry_state.attempt_number} "
                    f"func={getattr(func, '__name__', repr(func))}"
                )
                result = func(*args, **kwargs)
    except RetryError as exc:
        breaker.on_failure()
        last_exc = exc.last_attempt.exception()
        if last_exc is None:
            raise RuntimeError("resilience: retry failed without exception") from exc
        raise last_exc from exc
    except Exception:
        breaker.on_failure()
        raise

    breaker.on_success()
    return result


__all__ = [
    "CircuitBreaker",
    "CircuitOpenError",
    "RetryPolicy",
    "build_breaker",
    "resilient_call",
]
