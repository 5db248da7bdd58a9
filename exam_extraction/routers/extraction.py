"""
Exam result extraction API endpoints.

Accepts already-decoded file text and returns the merged student results.
Persistence is left to the caller.
"""

import logging

from fastapi import APIRouter, Request, Response, status

from exam_extraction.errors import (
    AuthError,
    ConfigurationError,
    EmptyModelResponseError,
    EmptyResultError,
    ExamExtractionError,
    ModelJSONParseError,
    NotFoundError,
    RateLimitError,
)
from exam_extraction.middleware.logging import get_request_id
from exam_extraction.models.extraction import ExtractionRequest
from exam_extraction.services.exam_data_processor import process_exam_data_with_retry

router = APIRouter(prefix="/api", tags=["extraction"])
logger = logging.getLogger(__name__)


def error_status_code(error: ExamExtractionError) -> int:
    """Map a pipeline error to the HTTP status returned to the client."""
    if isinstance(error, ConfigurationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, AuthError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, RateLimitError):
        return status.HTTP_429_TOO_MANY_REQUESTS
    if isinstance(error, (ModelJSONParseError, EmptyResultError, EmptyModelResponseError)):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    return status.HTTP_502_BAD_GATEWAY


@router.post("/extractions", status_code=status.HTTP_201_CREATED)
async def create_extraction(request: Request, body: ExtractionRequest) -> Response:
    """
    Extract student exam results from decoded file content.

    Pipeline errors propagate to the application's ExamExtractionError handler,
    which answers with error_status_code() and the error message.

    Returns:
        201: AggregateResult JSON, with X-Student-Count and X-Chunk-Count headers
        400: API key missing or invalid-looking
        403: API key rejected by Gemini
        404: Model not found
        422: No students found or the model output could not be parsed
        429: Gemini quota exceeded
        502: Other Gemini API errors
    """
    request_id = get_request_id(request)

    result = await process_exam_data_with_retry(
        body.file_name,
        body.content,
        on_progress=lambda message: logger.info(f"[{request_id}] {message}"),
        api_key=body.api_key,
    )

    return Response(
        content=result.model_dump_json(),
        media_type="application/json",
        status_code=status.HTTP_201_CREATED,
        headers={
            "X-Student-Count": str(len(result.students)),
            "X-Chunk-Count": str(result.chunk_count),
        },
    )
