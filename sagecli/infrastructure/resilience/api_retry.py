"""Service for executing API calls with automatic retries.

Every attempt goes through the shared RequestQueue. Rate limits (429) and
transient server errors (500/503) are retried with aggressive exponential
backoff plus jitter; anything else fails immediately.
"""

import asyncio
import logging
import random
import time
from typing import Any, Awaitable, Callable, Iterable, List, Optional, TypeVar

from sagecli.infrastructure.resilience.request_queue import RequestQueue
from sagecli.domain.errors import (
    FatalRequestError,
    RetriesExhaustedError,
    RetryableTransportError,
    TransportError,
    RATE_LIMIT,
    TIMEOUT,
)
from sagecli.domain.events.api_events import (
    DomainEvent, ApiCallInitiated, ApiCallSucceeded, ApiCallFailed, RetryScheduled
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 5
DEFAULT_BACKOFF_BASE = 3.0
DEFAULT_BACKOFF_UNIT_SECONDS = 1.0
DEFAULT_MAX_JITTER_SECONDS = 2.0
DEFAULT_RETRYABLE_STATUS_CODES = frozenset({429, 500, 503})
DEFAULT_RETRYABLE_FAILURE_CLASSES = frozenset({RATE_LIMIT, TIMEOUT})

T = TypeVar("T")

EventListener = Callable[[DomainEvent], None]


class RetryPolicy:
    """Decides whether a failed attempt may be retried."""

    def __init__(
        self,
        retryable_status_codes: Iterable[int] = DEFAULT_RETRYABLE_STATUS_CODES,
        retryable_failure_classes: Iterable[str] = DEFAULT_RETRYABLE_FAILURE_CLASSES,
    ):
        self.retryable_status_codes = frozenset(int(code) for code in retryable_status_codes)
        self.retryable_failure_classes = frozenset(retryable_failure_classes)

    def is_retryable(self, error: BaseException) -> bool:
        """A status code, when the error carries one, is decided by `retryable_status_codes` alone."""
        status = getattr(error, "status_code", None)
        if status is None:
            status = getattr(error, "status", None)
        if status is not None:
            return status in self.retryable_status_codes
        if isinstance(error, RetryableTransportError):
            return True
        failure_class = getattr(error, "failure_class", None)
        return failure_class is not None and failure_class in self.retryable_failure_classes


class ApiRetryService:
    """Handles API call execution with admission control and retries."""

    def __init__(
        self,
        request_queue: RequestQueue,
        retry_policy: Optional[RetryPolicy] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_base: float = DEFAULT_BACKOFF_BASE,
        backoff_unit_s: float = DEFAULT_BACKOFF_UNIT_SECONDS,
        max_jitter_s: float = DEFAULT_MAX_JITTER_SECONDS,
        attempt_timeout_s: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        event_listeners: Optional[List[EventListener]] = None,
    ):
        """Initializes the ApiRetryService.

        Args:
            request_queue: The queue every attempt is admitted through.
            retry_policy: Classification of retryable failures.
            max_retries: Default number of attempts per call.
            backoff_base: Growth factor of the wait between attempts.
            backoff_unit_s: Wait unit; attempt i waits base**(i+1) units.
            max_jitter_s: Upper bound of the random jitter added to each wait.
            attempt_timeout_s: Optional limit on a single attempt. None disables it.
            sleep: Coroutine used for backoff waits.
            event_listeners: Callables notified of every API event.
        """
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1.")
        self.request_queue = request_queue
        self.retry_policy = retry_policy or RetryPolicy()
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.backoff_unit_s = backoff_unit_s
        self.max_jitter_s = max_jitter_s
        self.attempt_timeout_s = attempt_timeout_s
        self._sleep = sleep
        self.event_listeners: List[EventListener] = list(event_listeners or [])

        logger.info(
            f"ApiRetryService initialized: max_retries={max_retries}, "
            f"backoff={backoff_base}^(i+1)*{backoff_unit_s}s + jitter(0, {max_jitter_s}s), "
            f"attempt_timeout={attempt_timeout_s}"
        )

    def compute_backoff(self, attempt: int, jitter: bool = True) -> float:
        """Returns the wait in seconds after failed attempt `attempt` (0-based)."""
        delay = (self.backoff_base ** (attempt + 1)) * self.backoff_unit_s
        if jitter and self.max_jitter_s > 0:
            delay += random.uniform(0, self.max_jitter_s)
        return delay

    def _dispatch_event(self, event: DomainEvent) -> None:
        logger.debug(f"EVENT: {event}")
        for listener in self.event_listeners:
            listener(event)

    def _wrap_attempt(self, func: Callable[[], Awaitable[T]]) -> Callable[[], Awaitable[T]]:
        if self.attempt_timeout_s is None:
            return func

        timeout = self.attempt_timeout_s

        async def timed_attempt() -> T:
            try:
                return await asyncio.wait_for(func(), timeout)
            except asyncio.TimeoutError as e:
                raise TransportError(
                    f"Attempt timed out after {timeout}s", failure_class=TIMEOUT
                ) from e

        return timed_attempt

    async def execute(
        self,
        func: Callable[[], Awaitable[T]],
        max_retries: Optional[int] = None,
        endpoint_name: Optional[str] = None,
    ) -> T:
        """Executes an outbound call through the queue, retrying transient failures.

        Args:
            func: Zero-argument coroutine function making the network call.
            max_retries: Number of attempts (defaults to the service setting).
            endpoint_name: Name used in logs and events.

        Returns:
            The result of the first successful attempt.

        Raises:
            FatalRequestError: On the first non-retryable failure.
            RetriesExhaustedError: When every attempt failed with a retryable error.
        """
        attempts = self.max_retries if max_retries is None else max_retries
        if attempts < 1:
            raise ValueError("max_retries must be at least 1.")
        endpoint = endpoint_name or getattr(func, "__name__", "call")
        attempt_func = self._wrap_attempt(func)
        last_exception: Optional[Exception] = None

        for attempt in range(attempts):
            self._dispatch_event(ApiCallInitiated(endpoint=endpoint, attempt_number=attempt + 1))
            start_time = time.perf_counter()
            try:
                result = await self.request_queue.run(attempt_func)
            except Exception as e:
                last_exception = e
                if not self.retry_policy.is_retryable(e):
                    logger.error(f"Non-retryable error calling {endpoint} on attempt {attempt + 1}: {e!r}")
                    self._dispatch_event(ApiCallFailed(
                        endpoint=endpoint, error_type=type(e).__name__,
                        error_message=str(e), attempts=attempt + 1,
                    ))
                    raise FatalRequestError(e) from e

                if attempt + 1 >= attempts:
                    break

                delay = self.compute_backoff(attempt)
                logger.warning(
                    f"Retryable error calling {endpoint} (status={getattr(e, 'status_code', None)}). "
                    f"Waiting {delay * 1000:.0f}ms... (Attempt {attempt + 1}/{attempts})"
                )
                self._dispatch_event(RetryScheduled(
                    endpoint=endpoint, attempt_number=attempt + 1, delay_seconds=delay,
                    status_code=getattr(e, "status_code", None),
                ))
                await self._sleep(delay)
                continue

            latency_ms = (time.perf_counter() - start_time) * 1000
            self._dispatch_event(ApiCallSucceeded(
                endpoint=endpoint, attempt_number=attempt + 1, latency_ms=latency_ms,
                response_summary=getattr(result, "token_usage", None),
            ))
            return result

        logger.error(f"Max retries ({attempts}) reached for {endpoint}. Last error: {last_exception!r}")
        self._dispatch_event(ApiCallFailed(
            endpoint=endpoint, error_type=type(last_exception).__name__,
            error_message=str(last_exception), attempts=attempts,
        ))
        raise RetriesExhaustedError(last_exception, attempts) from last_exception
