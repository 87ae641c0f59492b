"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration, marker handling and
shared fixtures. Fixtures here are autouse unless noted.
"""

from __future__ import annotations

from contextlib import suppress
import logging
import os

import pytest

from tests.helpers import FakeClient
from vertexchat.config import Config
from vertexchat.retry import RetryPolicy

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_google_env(request, monkeypatch):
    """Ensure a clean Google Cloud environment for each test.

    Clears GOOGLE_CLOUD_* env vars to prevent test pollution.
    Opt-out: @pytest.mark.allow_env_pollution or @pytest.mark.api
    """
    if request.node.get_closest_marker("allow_env_pollution") or (
        "api" in request.node.keywords
    ):
        return

    for key in list(os.environ.keys()):
        if key.startswith("GOOGLE_CLOUD_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)


# =============================================================================
# Pytest Hooks
# =============================================================================

API_TESTS_REASON = "API tests require ENABLE_API_TESTS=1"


def _api_tests_enabled() -> bool:
    return bool(os.getenv("ENABLE_API_TESTS"))


def pytest_collection_modifyitems(items):
    """Automatically skip API tests when not explicitly enabled."""
    if _api_tests_enabled():
        return
    skip_api = pytest.mark.skip(reason=API_TESTS_REASON)
    for item in items:
        if "api" in item.keywords:
            item.add_marker(skip_api)


# =============================================================================
# Shared Fixtures
# =============================================================================

_GEMINI_TEST_MODEL = "gemini-2.0-flash"


@pytest.fixture
def gemini_model() -> str:
    """Model name used by offline tests."""
    return _GEMINI_TEST_MODEL


@pytest.fixture
def no_wait_retry() -> RetryPolicy:
    """Three attempts with no sleeping between them."""
    return RetryPolicy(max_attempts=3, initial_delay_s=0.0, jitter=False)


@pytest.fixture
def config(gemini_model: str, no_wait_retry: RetryPolicy) -> Config:
    return Config(
        model=gemini_model,
        project="test-project",
        location="us-central1",
        retry=no_wait_retry,
    )


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()
