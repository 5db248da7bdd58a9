"""Error types raised by the exam result extraction pipeline.

Every error carries a human-readable message that callers can show directly
to the user. ``retryable`` tells the retry wrapper whether a failure is worth
another attempt; configuration and credential problems never are.
"""

from typing import Optional


class ExamExtractionError(Exception):
    """Base class for all extraction pipeline errors."""

    retryable: bool = True

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(ExamExtractionError):
    """Raised when the Gemini API key is missing or obviously invalid."""

    retryable = False


class GeminiAPIError(ExamExtractionError):
    """Raised when the Gemini API answers with a non-success status.

    Attributes:
        status_code: HTTP status code returned by the API (None if unknown)
        server_message: Message provided by the API, if any
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        server_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.server_message = server_message


class AuthError(GeminiAPIError):
    """HTTP 403: the API key is invalid, expired or not authorized."""

    retryable = False


class NotFoundError(GeminiAPIError):
    """HTTP 404: the model does not exist or the key has no access to it."""

    retryable = False


class RateLimitError(GeminiAPIError):
    """HTTP 429: quota exceeded."""


class EmptyModelResponseError(ExamExtractionError):
    """Raised when the model response contains no candidate text."""


class ModelJSONParseError(ExamExtractionError):
    """Raised when the model output cannot be parsed as the expected JSON.

    Attributes:
        raw_text: The model output that failed to parse
    """

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text


class EmptyResultError(ExamExtractionError):
    """Raised when no student records were found in any chunk."""
