"""Bounded retry with linear backoff for the extraction pipeline.

Failures are split into two groups:
- permanent: missing/invalid API key, unknown model, HTTP 401/403/404.
  These are re-raised at once.
- transient: everything else. These are retried after a pause that grows
  linearly with the attempt number.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set, TypeVar

from exam_extraction.errors import ExamExtractionError

# Configure logging
logger = logging.getLogger(__name__)

T = TypeVar("T")

# HTTP status codes that should NOT trigger retry
NON_RETRYABLE_STATUS_CODES: Set[int] = {
    401,  # Unauthorized
    403,  # Forbidden
    404,  # Not found
}

# Message fragments (lowercase) that mark configuration errors
PERMANENT_ERROR_MARKERS = (
    "api key",
    "api anahtarı",
    "not found",
)

# Retry configuration
MAX_ATTEMPTS = 3
BACKOFF_SECONDS = 2.0  # multiplied by the attempt number


def is_permanent_error(exception: BaseException) -> bool:
    """Determine if an exception must be re-raised without retrying.

    Args:
        exception: The exception that was raised

    Returns:
        True for configuration/credential errors, False for transient ones
    """
    if isinstance(exception, ExamExtractionError) and not exception.retryable:
        return True

    status_code = _extract_status_code(exception)
    if status_code in NON_RETRYABLE_STATUS_CODES:
        return True

    message = str(exception).lower()
    return any(marker in message for marker in PERMANENT_ERROR_MARKERS)


def _extract_status_code(exception: BaseException) -> Optional[int]:
    """Extract HTTP status code from exception.

    Args:
        exception: Exception that may contain status code

    Returns:
        HTTP status code if found, None otherwise
    """
    # Check for status_code attribute (our GeminiAPIError, HTTP client libraries)
    status_code = getattr(exception, "status_code", None)
    if isinstance(status_code, int):
        return status_code

    # Check for code attribute (google-genai APIError)
    code = getattr(exception, "code", None)
    if isinstance(code, int):
        return code

    return None


async def retry_async(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    max_attempts: int = MAX_ATTEMPTS,
    backoff_seconds: float = BACKOFF_SECONDS,
    on_retry: Optional[Callable[[int, float, Exception], None]] = None,
    **kwargs: Any,
) -> T:
    """Await func up to max_attempts times, backing off between attempts.

    The pause before attempt N+1 is backoff_seconds * N.

    Args:
        func: Coroutine function to call
        *args: Positional arguments for func
        max_attempts: Total number of attempts (default: 3)
        backoff_seconds: Backoff unit in seconds (default: 2.0)
        on_retry: Called with (failed attempt, delay, error) before each pause
        **kwargs: Keyword arguments for func

    Returns:
        Whatever func returns on its first successful attempt

    Raises:
        ValueError: If max_attempts is less than 1
        Exception: The permanent error, or the last error once attempts run out
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    name = getattr(func, "__name__", repr(func))

    for attempt in range(1, max_attempts + 1):
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            if is_permanent_error(e):
                logger.error(f"{name} failed with a non-retryable error: {e}")
                raise

            if attempt >= max_attempts:
                logger.error(f"{name} failed after {max_attempts} attempts: {e}")
                raise

            delay = backoff_seconds * attempt
            logger.warning(
                f"{name} attempt {attempt}/{max_attempts} failed: {e}. "
                f"Retrying in {delay:.2f}s..."
            )
            if on_retry is not None:
                on_retry(attempt, delay, e)

            await asyncio.sleep(delay)

    # Should never reach here, but satisfy type checker
    raise RuntimeError("Unexpected retry loop exit")
