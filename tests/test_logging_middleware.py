"""Tests for JSON log formatting and request logging."""

import json
import logging

import pytest
from fastapi import FastAPI, Response
from fastapi.testclient import TestClient

from exam_extraction.middleware.logging import (
    JsonLogFormatter,
    RequestLoggingMiddleware,
    configure_logging,
)
from exam_extraction.middleware.request_id import RequestIDMiddleware


def _record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("exam", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_plain_message():
    entry = json.loads(JsonLogFormatter().format(_record("Merging results...")))

    assert entry["message"] == "Merging results..."
    assert entry["level"] == "INFO"
    assert entry["logger"] == "exam"
    assert entry["timestamp"].endswith("Z")


def test_formatter_structured_fields():
    record = _record("ignored", fields={"request_id": "abc", "status_code": 201})
    entry = json.loads(JsonLogFormatter().format(record))

    assert entry["request_id"] == "abc"
    assert entry["status_code"] == 201
    assert "message" not in entry


def test_formatter_keeps_turkish_text():
    output = JsonLogFormatter().format(_record("Öğrenci Ayşe"))

    assert "Öğrenci Ayşe" in output


def test_configure_logging_is_idempotent():
    root = logging.getLogger()
    configure_logging()
    configure_logging()

    json_handlers = [h for h in root.handlers if isinstance(h.formatter, JsonLogFormatter)]
    assert len(json_handlers) == 1


@pytest.fixture
def logged_app() -> TestClient:
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/counts")
    async def counts() -> Response:
        return Response(
            content="{}",
            media_type="application/json",
            headers={"X-Student-Count": "3", "X-Chunk-Count": "not-a-number"},
        )

    return TestClient(app)


def test_request_log_contains_counts(logged_app: TestClient, caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.INFO, logger="exam_extraction.middleware.logging")

    logged_app.get("/counts", headers={"X-Request-ID": "req-42"})

    records = [r for r in caplog.records if r.name == "exam_extraction.middleware.logging"]
    assert len(records) == 1
    fields = records[0].fields
    assert fields["request_id"] == "req-42"
    assert fields["method"] == "GET"
    assert fields["path"] == "/counts"
    assert fields["status_code"] == 200
    assert fields["student_count"] == 3
    assert "chunk_count" not in fields
