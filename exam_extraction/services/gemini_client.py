"""Gemini API client with status-code-specific error handling.

Uses the modern google-genai SDK (not google.generativeai). One call per
prompt, with a near-deterministic generation config so the model returns
reproducible structured output.
"""

import logging
from functools import lru_cache
from typing import Any, Optional

import httpx
from google import genai
from google.genai import errors, types

from exam_extraction.config import Settings, get_settings
from exam_extraction.errors import (
    AuthError,
    ConfigurationError,
    EmptyModelResponseError,
    GeminiAPIError,
    NotFoundError,
    RateLimitError,
)

logger = logging.getLogger(__name__)


# Distinct keys kept alive at once; callers may bring their own key per request
CLIENT_CACHE_SIZE = 16


@lru_cache(maxsize=CLIENT_CACHE_SIZE)
def client_for_key(api_key: str) -> genai.Client:
    """Return the shared client for a key, creating it on first use."""
    return genai.Client(api_key=api_key)


def get_gemini_client(api_key: Optional[str] = None) -> genai.Client:
    """Return the Gemini API client for a key.

    Clients are reused per key, so repeated extractions share one
    connection pool instead of opening a new one per request.

    Args:
        api_key: Key to use; falls back to GEMINI_API_KEY from settings

    Returns:
        genai.Client: Initialized Gemini client ready for API calls.

    Raises:
        ConfigurationError: If no API key is available.

    Example:
        >>> client = get_gemini_client()
        >>> text = await generate_text(None, "Hello", client=client)
    """
    if api_key is None:
        api_key = get_settings().gemini_api_key

    if not api_key or not api_key.strip():
        raise ConfigurationError(
            "Gemini API key is not configured. "
            "Set GEMINI_API_KEY or enter your API key in the settings."
        )

    return client_for_key(api_key.strip())


def build_generation_config(settings: Settings) -> types.GenerateContentConfig:
    """Build the low-randomness generation config used for extraction calls."""
    return types.GenerateContentConfig(
        temperature=settings.temperature,
        top_k=settings.top_k,
        top_p=settings.top_p,
        max_output_tokens=settings.max_output_tokens,
    )


def classify_api_error(error: errors.APIError) -> GeminiAPIError:
    """
    Translate an SDK APIError into the matching pipeline error.

    Args:
        error: Error raised by the google-genai SDK

    Returns:
        AuthError for 401/403, NotFoundError for 404, RateLimitError for 429,
        GeminiAPIError carrying the status and server message otherwise
    """
    status_code = getattr(error, "code", None)
    server_message = getattr(error, "message", None) or None

    if status_code == 404:
        return NotFoundError(
            "Gemini model not found. Check the model name and your API access.",
            status_code=status_code,
            server_message=server_message,
        )
    if status_code in (401, 403):
        return AuthError(
            "Invalid or unauthorized API key. Please check your Gemini API key.",
            status_code=status_code,
            server_message=server_message,
        )
    if status_code == 429:
        return RateLimitError(
            "Gemini API quota exceeded. Please wait a few minutes and retry later.",
            status_code=status_code,
            server_message=server_message,
        )

    message = f"Gemini API error ({status_code})"
    if server_message:
        message = f"{message}: {server_message}"
    return GeminiAPIError(message, status_code=status_code, server_message=server_message)


def extract_first_candidate_text(response: Any) -> str:
    """
    Return the text of the first candidate in a generate_content response.

    Raises:
        EmptyModelResponseError: If there is no candidate or it has no text
    """
    candidates = getattr(response, "candidates", None)
    if not candidates:
        raise EmptyModelResponseError("The model returned no output.")

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    text = "".join(part.text for part in parts if getattr(part, "text", None))

    if not text:
        raise EmptyModelResponseError("The model returned no output.")

    return text


async def generate_text(
    api_key: Optional[str],
    prompt: str,
    *,
    model: Optional[str] = None,
    client: Optional[genai.Client] = None,
    settings: Optional[Settings] = None,
) -> str:
    """
    Send one prompt to Gemini and return the raw text answer.

    Args:
        api_key: Gemini API key (ignored when client is given)
        prompt: Full prompt text
        model: Model name override (default: settings.model_name)
        client: Pre-built client, mainly for tests and connection reuse
        settings: Settings override (default: cached settings)

    Returns:
        Raw text of the first candidate

    Raises:
        ConfigurationError: If no API key is available
        AuthError, NotFoundError, RateLimitError, GeminiAPIError: On API errors
        GeminiAPIError: Without a status code when the API cannot be reached
        EmptyModelResponseError: If the model produced no text
    """
    settings = settings or get_settings()
    if client is None:
        client = get_gemini_client(api_key)

    model_name = model or settings.model_name
    logger.debug(f"Calling {model_name} with prompt of {len(prompt)} characters")

    try:
        response = await client.aio.models.generate_content(
            model=model_name,
            contents=prompt,
            config=build_generation_config(settings),
        )
    except errors.APIError as e:
        raise classify_api_error(e) from e
    except httpx.HTTPError as e:
        # Connection failures and timeouts never reach an HTTP status
        raise GeminiAPIError(
            f"Could not reach the Gemini API ({type(e).__name__}). Please try again.",
            status_code=None,
        ) from e

    return extract_first_candidate_text(response)
