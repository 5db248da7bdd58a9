"""Clean up and parse JSON returned as free text by the model."""

import json
import logging
import re
from typing import Any

from exam_extraction.errors import ModelJSONParseError

logger = logging.getLogger(__name__)

# Raw output longer than this is cut in logs
MAX_LOGGED_RAW_CHARS = 2000

_LEADING_FENCE = re.compile(r"^```[a-zA-Z0-9_-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?```$")


def strip_code_fences(raw_text: str) -> str:
    """Remove a leading ```json / ``` fence and a trailing ``` fence."""
    text = raw_text.strip()
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def parse_model_json(raw_text: str) -> Any:
    """
    Parse model output as JSON, tolerating Markdown code fences.

    Args:
        raw_text: Text returned by the model

    Returns:
        Parsed JSON value

    Raises:
        ModelJSONParseError: If the cleaned text is not valid JSON. The raw
            text is logged and attached to the error.
    """
    cleaned = strip_code_fences(raw_text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(
            f"Model returned invalid JSON ({e.msg} at position {e.pos}). "
            f"Raw output: {raw_text[:MAX_LOGGED_RAW_CHARS]}"
        )
        raise ModelJSONParseError(
            "The model returned invalid JSON.", raw_text=raw_text
        ) from e
