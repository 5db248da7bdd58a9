"""Extract student results from a single chunk of document text."""

import logging
from typing import Optional

from google import genai

from exam_extraction.config import Settings
from exam_extraction.models.extraction import ExtractionResult
from exam_extraction.services.gemini_client import generate_text
from exam_extraction.services.prompt_builder import build_extraction_prompt
from exam_extraction.services.record_validator import validate_extraction_payload
from exam_extraction.utils.json_normalizer import parse_model_json

logger = logging.getLogger(__name__)


async def process_chunk(
    api_key: Optional[str],
    chunk: str,
    file_name: str,
    index: int,
    total: int,
    *,
    client: Optional[genai.Client] = None,
    settings: Optional[Settings] = None,
) -> ExtractionResult:
    """
    Run prompt -> model -> JSON -> validation for one chunk.

    Errors from the model call or JSON parsing propagate unchanged; this
    function does not retry.

    Args:
        api_key: Gemini API key
        chunk: Chunk text
        file_name: Name of the uploaded file
        index: 0-based chunk index
        total: Total number of chunks
        client: Optional pre-built Gemini client
        settings: Optional settings override

    Returns:
        ExtractionResult for this chunk
    """
    prompt = build_extraction_prompt(chunk, file_name, index, total)
    raw_text = await generate_text(api_key, prompt, client=client, settings=settings)
    payload = parse_model_json(raw_text)
    result = validate_extraction_payload(payload)

    logger.info(
        f"Chunk {index + 1}/{total} of {file_name}: "
        f"{len(result.students)} students, {len(result.rejected)} rejected"
    )
    return result
