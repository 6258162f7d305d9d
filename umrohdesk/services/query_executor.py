"""Resilient query executor - retry with backoff, state tracking and failure toast

A QueryExecutor owns the state of one logical query ("bookings page 2",
"active departures", ...): the last result, a loading flag and the last
terminal error message. Screens create one executor per query site, call
execute() with a zero-argument coroutine function and re-render from the
executor's state via listeners.

The operation returns a (data, error) pair, the same shape Supabase
responses have. Raising an exception counts as returning an error.
"""
import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, NamedTuple, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ERROR_MESSAGE = "Gagal memuat data"


class QueryResult(NamedTuple):
    """Outcome of a single attempt: exactly one of data/error is meaningful"""

    data: Any = None
    error: Any = None


QueryOperation = Callable[[], Awaitable[Any]]
Notifier = Callable[[str, str], None]  # (title, detail)
Listener = Callable[[], None]


class QueryStatus(Enum):
    """Executor lifecycle"""

    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class QueryOptions:
    """Retry configuration

    Args:
        max_retries: Retries after the first try (total attempts = max_retries + 1)
        retry_delay: Base delay in seconds; retry n waits retry_delay * n
        error_message: Notification title and fallback error text
    """

    max_retries: int = 2
    retry_delay: float = 1.0
    error_message: str = DEFAULT_ERROR_MESSAGE

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay must be >= 0, got {self.retry_delay}")

    @classmethod
    def from_settings(cls, settings, error_message: Optional[str] = None) -> "QueryOptions":
        """Build options from application settings"""
        return cls(
            max_retries=settings.query_max_retries,
            retry_delay=settings.query_retry_delay,
            error_message=error_message or settings.query_error_message,
        )

    def delay_for(self, retry_number: int) -> float:
        """Delay before 1-indexed retry number"""
        return self.retry_delay * retry_number


def extract_error_message(failure: Any) -> Optional[str]:
    """Human-readable message of a failure, whichever channel produced it.

    Handles PostgREST APIError (.message), plain dict errors, arbitrary
    exceptions and bare strings. Returns None when nothing usable is found.
    """
    if failure is None:
        return None

    message = getattr(failure, "message", None)
    if isinstance(message, str) and message.strip():
        return message

    if isinstance(failure, Mapping):
        message = failure.get("message")
        if isinstance(message, str) and message.strip():
            return message
        return None

    if isinstance(failure, BaseException):
        text = str(failure)
        return text if text.strip() else None

    if isinstance(failure, str) and failure.strip():
        return failure

    return None


def _is_failure(error: Any) -> bool:
    """Whether the error slot of a result signals failure"""
    if error is None:
        return False
    # Falsy scalars (False, 0, 0.0, "") are not failures; empty containers are
    if isinstance(error, (bool, int, float, str)) and not error:
        return False
    return True


class QueryExecutor(Generic[T]):
    """Runs a query operation with bounded retries and tracks its state.

    Overlapping execute() calls on the same instance are not guarded: both run
    to completion and whichever settles last owns the final state. Screens
    disable their triggers while `loading` is set.
    """

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        options: Optional[QueryOptions] = None,
        name: str = "query",
    ):
        self.notifier = notifier
        self.options = options or QueryOptions()
        self.name = name

        self._data: Optional[T] = None
        self._loading = False
        self._error: Optional[str] = None
        self._status = QueryStatus.IDLE
        self._last_operation: Optional[QueryOperation] = None
        self._listeners: list[Listener] = []

    # State

    @property
    def data(self) -> Optional[T]:
        return self._data

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def status(self) -> QueryStatus:
        return self._status

    @property
    def last_operation(self) -> Optional[QueryOperation]:
        return self._last_operation

    def set_data(self, value: Optional[T]) -> None:
        """Replace the result outside the fetch lifecycle (optimistic updates)"""
        self._data = value
        self._emit_change()

    # Listeners

    def add_listener(self, callback: Listener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: Listener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _emit_change(self) -> None:
        for callback in list(self._listeners):
            try:
                callback()
            except Exception as e:
                logger.error(f"[{self.name}] State listener failed: {type(e).__name__}: {e}", exc_info=True)

    # Execution

    async def execute(self, operation: QueryOperation) -> Optional[T]:
        """Run operation with retries. Never raises for operation failures.

        Returns the data on success, None after the attempt budget is spent.
        """
        self._loading = True
        self._error = None
        self._status = QueryStatus.RUNNING
        self._last_operation = operation
        self._emit_change()

        max_retries = self.options.max_retries
        total_attempts = max_retries + 1
        last_error: Any = None

        for attempt in range(total_attempts):
            try:
                data, error = await operation()
            except Exception as e:
                data, error = None, e

            if not _is_failure(error):
                self._data = data
                self._loading = False
                self._status = QueryStatus.SUCCEEDED
                if attempt > 0:
                    logger.info(f"[{self.name}] Succeeded on attempt {attempt + 1}/{total_attempts}")
                self._emit_change()
                return data

            last_error = error
            if attempt < max_retries:
                delay = self.options.delay_for(attempt + 1)
                logger.warning(
                    f"[{self.name}] Attempt {attempt + 1}/{total_attempts} failed: "
                    f"{type(error).__name__}: {extract_error_message(error)}. "
                    f"Retrying in {delay:.1f}s..."
                )
                await asyncio.sleep(delay)

        message = extract_error_message(last_error) or self.options.error_message
        self._error = message
        self._loading = False
        self._status = QueryStatus.FAILED
        logger.error(
            f"[{self.name}] Max attempts ({total_attempts}) reached. "
            f"Last error: {type(last_error).__name__}: {message}"
        )
        self._emit_change()
        self._notify_failure(message)
        return None

    async def retry(self) -> Optional[T]:
        """Re-run the last executed operation with a fresh attempt budget"""
        if self._last_operation is None:
            logger.debug(f"[{self.name}] Retry requested before any execution, ignoring")
            return None
        logger.info(f"[{self.name}] Manual retry")
        return await self.execute(self._last_operation)

    def _notify_failure(self, detail: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier(self.options.error_message, detail)
        except Exception as e:
            logger.error(f"[{self.name}] Failure notification failed: {type(e).__name__}: {e}", exc_info=True)
