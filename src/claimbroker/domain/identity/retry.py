"""Classified retry policy for outbound registry calls."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger

from claimbroker.domain.errors import RegistryError, TransportError
from claimbroker.domain.ports.observability import EventKind, EventSink, NullEventSink

log = getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3

type RetryablePredicate = Callable[[Exception], bool]


def is_transient(exc: Exception) -> bool:
    """Transport failures and registry-side server errors are worth another attempt."""

    if isinstance(exc, TransportError):
        return True
    if isinstance(exc, RegistryError):
        return exc.cause.is_retryable
    return False


@dataclass(frozen=True, slots=True)
class AttemptPolicy:
    """How many times to try an operation and which failures earn another try.

    Backoff is off by default; the transport already enforces its own timeouts.
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    classify_retryable: RetryablePredicate = is_transient
    backoff_seconds: float = 0.0
    backoff_multiplier: float = 2.0
    max_backoff_seconds: float = 30.0
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must be non-negative")

    def delay_for(self, failed_attempt: int) -> float:
        if self.backoff_seconds <= 0:
            return 0.0
        delay = self.backoff_seconds * self.backoff_multiplier ** (failed_attempt - 1)
        return min(delay, self.max_backoff_seconds)

    def call[T](
        self,
        operation: Callable[[], T],
        *,
        sink: EventSink | None = None,
        key: str = "",
    ) -> T:
        """Run ``operation`` until it succeeds, fails fast, or runs out of attempts.

        Every failed attempt that will be retried is reported as a ``retry`` event
        before the next attempt; the attempt that gives up is reported as
        ``failure``. The last exception is re-raised as-is.
        """

        events = sink or NullEventSink()
        attempt = 0
        while True:
            attempt += 1
            try:
                return operation()
            except Exception as exc:
                retryable = self.classify_retryable(exc)
                if not retryable or attempt >= self.max_attempts:
                    events.emit(
                        EventKind.FAILURE,
                        key,
                        attempt=attempt,
                        error=type(exc).__name__,
                        retryable=retryable,
                    )
                    log.warning(
                        "Giving up on %s after %s attempt(s): %s",
                        key or "operation",
                        attempt,
                        exc,
                    )
                    raise
                delay = self.delay_for(attempt)
                events.emit(
                    EventKind.RETRY,
                    key,
                    attempt=attempt,
                    error=type(exc).__name__,
                    delay=delay,
                )
                log.info(
                    "Attempt %s/%s for %s failed (%s); retrying",
                    attempt,
                    self.max_attempts,
                    key or "operation",
                    exc,
                )
                if delay > 0:
                    self.sleep(delay)


def call_with_retry[T](
    operation: Callable[[], T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    classify_retryable: RetryablePredicate = is_transient,
    *,
    sink: EventSink | None = None,
    key: str = "",
) -> T:
    policy = AttemptPolicy(max_attempts=max_attempts, classify_retryable=classify_retryable)
    return policy.call(operation, sink=sink, key=key)
