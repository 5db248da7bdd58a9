"""
Chunked exam result extraction pipeline.

This module implements the document-level flow:
1. Validate the API key configuration
2. Split the document text into chunks on line boundaries
3. Extract each chunk sequentially with the model (pausing between calls)
4. Merge partial results: the first non-empty exam name wins, students are
   appended in chunk order
5. Fail if no students were found at all

process_exam_data_with_retry wraps the whole flow in a bounded retry that
gives up immediately on configuration errors.
"""

import asyncio
import logging
import os
from typing import Callable, List, Optional

from google import genai

from exam_extraction.config import Settings, get_settings
from exam_extraction.errors import ConfigurationError, EmptyResultError
from exam_extraction.models.extraction import (
    AggregateResult,
    RawDocument,
    RejectedRecord,
    StudentRecord,
)
from exam_extraction.services.chunk_processor import process_chunk
from exam_extraction.services.chunker import chunk_document
from exam_extraction.services.gemini_client import get_gemini_client
from exam_extraction.utils.retry import retry_async

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]

# Keys shorter than this cannot be real Gemini keys
MIN_API_KEY_LENGTH = 20


def resolve_api_key(api_key: Optional[str], settings: Settings) -> str:
    """
    Pick the caller's key, else the configured one, and sanity-check it.

    Raises:
        ConfigurationError: If no key is available or it looks like a placeholder
    """
    key = (api_key or "").strip() or settings.gemini_api_key
    if not key:
        raise ConfigurationError(
            "Gemini API key is not configured. "
            "Please enter your API key in the settings."
        )
    if "YOUR_" in key or len(key) < MIN_API_KEY_LENGTH:
        raise ConfigurationError(
            "Gemini API key looks invalid. "
            "Please make sure you entered the correct key."
        )
    return key


def exam_name_from_file_name(file_name: str) -> str:
    """'Deneme 1.xlsx' -> 'Deneme 1'."""
    stem, _ = os.path.splitext(os.path.basename(file_name))
    return stem or file_name


def _report(on_progress: Optional[ProgressCallback], message: str) -> None:
    if on_progress is not None:
        on_progress(message)


async def process_exam_data(
    file_name: str,
    file_content: str,
    on_progress: Optional[ProgressCallback] = None,
    *,
    api_key: Optional[str] = None,
    settings: Optional[Settings] = None,
    client: Optional[genai.Client] = None,
) -> AggregateResult:
    """
    Extract student exam results from a document's text.

    Chunks are processed strictly one at a time. A failed chunk is logged
    and skipped, except when it is the last chunk and nothing has been
    collected yet; then its error is re-raised.

    Args:
        file_name: Name of the uploaded file
        file_content: Full decoded text of the file
        on_progress: Optional callback receiving human-readable status messages
        api_key: Gemini API key (default: GEMINI_API_KEY from settings)
        settings: Settings override (default: cached settings)
        client: Pre-built Gemini client, mainly for tests

    Returns:
        AggregateResult with the merged students of all chunks

    Raises:
        ConfigurationError: If no usable API key is configured
        EmptyResultError: If no student records were found
        ExamExtractionError: The last chunk's error when every chunk failed
    """
    settings = settings or get_settings()
    key = resolve_api_key(api_key, settings)
    if client is None:
        client = get_gemini_client(key)

    _report(on_progress, f"Analyzing {file_name}...")

    document = RawDocument(file_name=file_name, content=file_content)
    chunks = chunk_document(document, settings.chunk_size)
    total = len(chunks)
    if total == 0:
        raise EmptyResultError(f"No content to process in {file_name}.")

    logger.info(f"Processing {file_name} in {total} chunk(s)")

    exam_name = ""
    students: List[StudentRecord] = []
    rejected: List[RejectedRecord] = []
    failed_chunks: List[int] = []

    for chunk in chunks:
        index = chunk.index
        _report(on_progress, f"Processing chunk {index + 1}/{total}...")

        try:
            result = await process_chunk(
                key, chunk.text, file_name, index, total,
                client=client, settings=settings,
            )
        except Exception as e:
            failed_chunks.append(index)
            logger.error(
                f"Chunk {index + 1}/{total} of {file_name} failed: "
                f"{type(e).__name__}: {e}"
            )
            if index == total - 1 and not students:
                raise
        else:
            if not exam_name and result.exam_name:
                exam_name = result.exam_name
            students.extend(result.students)
            rejected.extend(result.rejected)

        if index < total - 1:
            await asyncio.sleep(settings.inter_chunk_delay_seconds)

    _report(on_progress, "Merging results...")

    if not students:
        raise EmptyResultError(
            f"No student results could be found in {file_name}."
        )

    aggregate = AggregateResult(
        exam_name=exam_name or exam_name_from_file_name(file_name),
        students=students,
        rejected=rejected,
        chunk_count=total,
        failed_chunks=failed_chunks,
    )

    logger.info(
        f"Extracted {len(students)} students from {file_name} "
        f"({len(failed_chunks)} failed chunk(s), {len(rejected)} rejected entries)"
    )
    _report(on_progress, f"Done: {len(students)} students found.")
    return aggregate


async def process_exam_data_with_retry(
    file_name: str,
    file_content: str,
    on_progress: Optional[ProgressCallback] = None,
    max_attempts: Optional[int] = None,
    *,
    api_key: Optional[str] = None,
    settings: Optional[Settings] = None,
    client: Optional[genai.Client] = None,
) -> AggregateResult:
    """
    Run process_exam_data, retrying transient failures with linear backoff.

    API key and "not found" errors are re-raised without retrying. Other
    errors wait retry_backoff_seconds * attempt before the next attempt.

    Args:
        file_name: Name of the uploaded file
        file_content: Full decoded text of the file
        on_progress: Optional progress callback
        max_attempts: Attempts before giving up (default: settings.max_attempts)
        api_key: Gemini API key (default: from settings)
        settings: Settings override
        client: Pre-built Gemini client

    Returns:
        AggregateResult from the first successful attempt

    Raises:
        ExamExtractionError: The permanent error, or the last error seen
    """
    settings = settings or get_settings()
    attempts = max_attempts if max_attempts is not None else settings.max_attempts

    def report_retry(attempt: int, delay: float, error: Exception) -> None:
        _report(
            on_progress,
            f"Attempt {attempt}/{attempts} failed ({error}). "
            f"Retrying in {delay:.0f}s...",
        )

    return await retry_async(
        process_exam_data,
        file_name,
        file_content,
        on_progress,
        api_key=api_key,
        settings=settings,
        client=client,
        max_attempts=attempts,
        backoff_seconds=settings.retry_backoff_seconds,
        on_retry=report_retry,
    )
