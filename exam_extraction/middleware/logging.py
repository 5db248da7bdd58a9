"""Structured JSON logging for the HTTP layer.

configure_logging() installs a JSON-lines formatter on the root logger so
service logs and request logs share one format on stdout.
RequestLoggingMiddleware then emits one record per request.
"""

import json
import logging
import sys
import time
from typing import Any, Awaitable, Callable, Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Response headers set by the extraction route, logged as integers
COUNT_HEADERS = {
    "X-Student-Count": "student_count",
    "X-Chunk-Count": "chunk_count",
}


class JsonLogFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
        }
        fields = getattr(record, "fields", None)
        if isinstance(fields, dict):
            entry.update(fields)
        else:
            entry["message"] = record.getMessage()
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logging(level: int = logging.INFO) -> None:
    """Send all logs to stdout as JSON lines. Safe to call more than once."""
    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers:
        if isinstance(handler.formatter, JsonLogFormatter):
            return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonLogFormatter())
    root.addHandler(handler)


def _response_counts(response: Response) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for header, key in COUNT_HEADERS.items():
        value = response.headers.get(header)
        if value is None:
            continue
        try:
            counts[key] = int(value)
        except ValueError:
            pass  # Ignore malformed counts
    return counts


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log one structured record per request.

    Records include the request ID, method, path, status code, duration and
    the student/chunk counts reported by the extraction route.

    Security notes:
    - Does NOT log API keys or document contents
    - Does NOT log request/response bodies
    """

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        request_id = getattr(request.state, "request_id", "unknown")
        start_time = time.perf_counter()
        fields: Dict[str, Any] = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }

        try:
            response = await call_next(request)
        except Exception as e:
            fields.update({
                "status_code": 500,
                "processing_time_ms": round((time.perf_counter() - start_time) * 1000, 2),
                "error_type": type(e).__name__,
                "message": f"Request failed: {request.method} {request.url.path}",
            })
            logger.error(json.dumps(fields), extra={"fields": fields}, exc_info=True)
            raise

        fields["status_code"] = response.status_code
        fields["processing_time_ms"] = round((time.perf_counter() - start_time) * 1000, 2)
        fields.update(_response_counts(response))

        logger.info(json.dumps(fields), extra={"fields": fields})
        return response


def get_request_id(request: Request) -> str:
    """
    Get the request ID from the request state.

    Args:
        request: FastAPI request object

    Returns:
        Request ID string (UUID unless the client sent its own)
    """
    return getattr(request.state, "request_id", "unknown")
