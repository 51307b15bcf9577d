"""Bounded retry for remote storage operations.

Every remote mutation goes through ``with_retry``. Only errors the classifier
calls transient are retried; everything else, and the last transient error
once attempts run out, is re-raised unchanged.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from ..core.config import Settings, settings
from ..exceptions import RemoteTransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_BASE_DELAY = 5.0
DEFAULT_MAX_DELAY = 60.0


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try and how long to wait between tries.

    ``backoff`` multiplies the delay after each failed attempt; 1.0 keeps the
    delay fixed. A provider ``Retry-After`` hint can lengthen a wait, but
    never beyond ``max_delay``.
    """
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay: float = DEFAULT_BASE_DELAY
    backoff: float = 1.0
    max_delay: float = DEFAULT_MAX_DELAY

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay cannot be negative")

    @classmethod
    def from_settings(cls, cfg: Settings = settings) -> "RetryPolicy":
        return cls(
            max_attempts=cfg.remote_retry_attempts,
            base_delay=cfg.remote_retry_delay_seconds,
            backoff=cfg.remote_retry_backoff,
        )

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number *attempt* (1-based)."""
        return self.base_delay * (self.backoff ** (attempt - 1))

    def delay_after(self, attempt: int, exc: BaseException) -> float:
        """Delay for *attempt*, raised to the error's ``retry_after`` hint if larger."""
        delay = self.delay_for(attempt)
        hint = getattr(exc, "retry_after", None)
        if hint is not None and hint > delay:
            delay = min(hint, max(self.max_delay, delay))
        return delay


# Deletes are best-effort: one attempt, errors propagate to the caller.
SINGLE_ATTEMPT = RetryPolicy(max_attempts=1, base_delay=0.0)


def is_transient(exc: BaseException) -> bool:
    """Default classifier: provider throttling and short outages."""
    return isinstance(exc, RemoteTransientError)


def with_retry(
    operation: Callable[[], T],
    policy: RetryPolicy = RetryPolicy(),
    classify: Callable[[BaseException], bool] = is_transient,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "remote operation",
) -> T:
    """Run *operation*, retrying transient failures according to *policy*.

    Args:
        operation: Zero-argument callable performing one remote call.
        policy: Attempt budget and delay.
        classify: Returns True when an error is worth retrying.
        sleep: Injectable for tests.
        label: Used in log messages.

    Returns:
        Whatever *operation* returns on its first successful attempt.

    Raises:
        The error from the last attempt, unchanged.
    """
    attempt = 1
    while True:
        try:
            return operation()
        except Exception as exc:
            if not classify(exc):
                logger.error("%s failed (not retryable): %s", label, exc)
                raise
            if attempt >= policy.max_attempts:
                logger.error(
                    "%s failed after %d attempts", label, attempt,
                    extra={"attempts": attempt},
                )
                raise
            delay = policy.delay_after(attempt, exc)
            logger.warning(
                "%s failed (attempt %d/%d), retrying in %.1fs",
                label, attempt, policy.max_attempts, delay,
                extra={"attempt": attempt, "delay": delay},
            )
            sleep(delay)
            attempt += 1
