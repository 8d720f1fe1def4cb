"""Retry handler with linear backoff.

Retries transient failures on top of tenacity's AsyncRetrying:
- Configurable attempt budget
- Linear backoff: attempt N waits ``retry_delay * N`` before attempt N+1
- Non-retryable exceptions propagate untouched after a single attempt
- Exhaustion is reported as ExhaustedRetriesError wrapping the last error
- Built-in structured logging for observability
"""

import asyncio
from typing import Awaitable, Callable, Optional, Set, Type, TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
)

from carbon_enrichment.models.request import RetryConfig
from carbon_enrichment.observability.metrics import RETRY_ATTEMPTS
from carbon_enrichment.utils.exceptions import ExhaustedRetriesError

logger = structlog.get_logger(__name__)


T = TypeVar("T")


class RetryContext:
    """Tracks retry state for one logical operation."""

    def __init__(self) -> None:
        self.total_attempts: int = 0
        self.total_retries: int = 0
        self.total_delay_seconds: float = 0.0
        self.last_error: Optional[BaseException] = None

    def record_attempt(self) -> None:
        self.total_attempts += 1

    def record_retry(self, delay: float, error: BaseException) -> None:
        """Record a retry with delay.

        Args:
            delay: Delay before retry in seconds
            error: Exception that triggered the retry
        """
        self.total_retries += 1
        self.total_delay_seconds += delay
        self.last_error = error


class RetryHandler:
    """Async retry handler with linear backoff."""

    def __init__(
        self,
        config: RetryConfig,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize retry handler.

        Args:
            config: Retry configuration with attempt budget and delay unit
            sleep: Awaitable used to wait between attempts
        """
        self.config = config
        self._sleep = sleep

    def calculate_delay(self, attempt: int) -> float:
        """Delay to wait after the given (1-indexed) failed attempt."""
        return self.config.retry_delay_seconds * attempt

    async def execute(
        self,
        func: Callable[[], Awaitable[T]],
        retryable_exceptions: Set[Type[BaseException]],
        on_retry: Optional[Callable[[int, BaseException, float], None]] = None,
        context: Optional[RetryContext] = None,
    ) -> T:
        """Execute function with retry logic.

        Args:
            func: Async function to execute
            retryable_exceptions: Exception types that should trigger retry
            on_retry: Optional callback called before each retry with
                     (attempt_number, exception, delay_seconds)
            context: Optional RetryContext to record attempts into

        Returns:
            Result of successful function execution

        Raises:
            ExhaustedRetriesError: All attempts failed with retryable errors
            Exception: Any non-retryable exception, after one attempt
        """
        ctx = context if context is not None else RetryContext()

        async def attempt() -> T:
            ctx.record_attempt()
            return await func()

        def before_sleep(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
            if error is None:  # pragma: no cover
                return

            ctx.record_retry(delay, error)
            RETRY_ATTEMPTS.labels(reason=type(error).__name__).inc()
            logger.warning(
                "retry_attempt",
                attempt=retry_state.attempt_number,
                max_attempts=self.config.retry_attempts,
                error_type=type(error).__name__,
                error_message=str(error),
                delay_seconds=delay,
            )

            if on_retry is not None:
                on_retry(retry_state.attempt_number, error, delay)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.retry_attempts),
            wait=lambda retry_state: self.calculate_delay(retry_state.attempt_number),
            retry=retry_if_exception_type(tuple(retryable_exceptions)),
            sleep=self._sleep,
            before_sleep=before_sleep,
            reraise=False,
        )

        try:
            return await retrying(attempt)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            logger.error(
                "retries_exhausted",
                attempts=e.last_attempt.attempt_number,
                error_type=type(last_error).__name__,
                error_message=str(last_error),
            )
            raise ExhaustedRetriesError(
                attempts=e.last_attempt.attempt_number, last_error=last_error
            ) from last_error
