"""
Shared test fixtures for the exam extraction tests.
Zero network calls: the Gemini client is always a mock.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from exam_extraction.config import Settings, get_settings
from exam_extraction.services.gemini_client import client_for_key
from tests.gemini_fakes import TEST_API_KEY


@pytest.fixture(autouse=True)
def _clear_caches():
    """Make every test read settings fresh and build its own Gemini clients."""
    get_settings.cache_clear()
    client_for_key.cache_clear()
    yield
    get_settings.cache_clear()
    client_for_key.cache_clear()


@pytest.fixture
def settings():
    """Settings with a valid-looking key and no delays."""
    return Settings(
        _env_file=None,
        gemini_api_key=TEST_API_KEY,
        inter_chunk_delay_seconds=0,
        retry_backoff_seconds=0,
    )


@pytest.fixture
def mock_client():
    """Gemini client mock; set generate_content.side_effect/return_value per test."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock()
    return client
