"""Bounded exponential-backoff retry shared by every network call site.

Embedding and upsert calls both go through :class:`RetryPolicy` so the
attempt ceiling and backoff curve are configured (and tested) once::

    policy = RetryPolicy(max_attempts=4, base_delay=2.0, max_delay=15.0)
    vectors = policy.call(lambda: embeddings.embed_documents(batch), "embed-batch-1/3")
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable, TypeVar

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from kb_ingest.errors import AlignmentError, ConfigError, ProviderError

if TYPE_CHECKING:
    from kb_ingest.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Contract violations are surfaced immediately, never retried.
_NON_RETRYABLE = (AlignmentError, ConfigError)


def _is_retryable(exc: BaseException) -> bool:
    # KeyboardInterrupt and SystemExit are not failed attempts
    return isinstance(exc, Exception) and not isinstance(exc, _NON_RETRYABLE)


class RetryPolicy:
    """Retry a callable with capped exponential backoff.

    Parameters
    ----------
    max_attempts:
        Total number of attempts, including the first one.
    base_delay:
        Seconds slept before the first retry; doubled for each further retry.
    max_delay:
        Cap on any single delay.
    sleep:
        Sleep function, injectable so tests do not wait.
    """

    def __init__(
        self,
        max_attempts: int = 4,
        base_delay: float = 2.0,
        max_delay: float = 15.0,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ConfigError(f"max_attempts must be >= 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        return cls(
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
        )

    def delay_for(self, attempt: int) -> float:
        """Seconds slept after the *attempt*-th (1-based) failure."""
        return min(self.base_delay * 2 ** (attempt - 1), self.max_delay)

    def call(self, fn: Callable[[], T], label: str) -> T:
        """Run *fn* until it succeeds or the attempt ceiling is reached.

        Raises
        ------
        ProviderError
            When every attempt failed; chained to the last underlying error.
        AlignmentError, ConfigError
            Propagated on first occurrence.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.base_delay, max=self.max_delay),
            retry=retry_if_exception(_is_retryable),
            sleep=self._sleep,
            before_sleep=self._log_retry(label),
        )
        try:
            return retrying(fn)
        except RetryError as exc:
            last = exc.last_attempt
            logger.error("[%s] giving up after %d attempt(s)", label, last.attempt_number)
            raise ProviderError(label, last.attempt_number) from last.exception()

    def _log_retry(self, label: str) -> Callable[[RetryCallState], None]:
        def before_sleep(state: RetryCallState) -> None:
            wait = state.next_action.sleep if state.next_action else 0.0
            logger.warning(
                "[%s] attempt %d/%d failed (%s); retrying in %.1fs",
                label,
                state.attempt_number,
                self.max_attempts,
                state.outcome.exception() if state.outcome else "unknown error",
                wait,
            )

        return before_sleep
