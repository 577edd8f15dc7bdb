"""
Pytest configuration and fixtures for Composer service tests.
"""

from __future__ import annotations

import os

# Set test environment variables before importing config
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("COMPOSER_LOG_LEVEL", "WARNING")
os.environ.setdefault("COMPOSER_MAX_EVAL_STEPS", "50000")

import httpx  # noqa: E402
import pytest_asyncio  # noqa: E402

from backend.main import app  # noqa: E402
from backend.routes import preview as preview_routes  # noqa: E402


@pytest_asyncio.fixture
async def client():
    """ASGI client against the app; no network, no server process."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    preview_routes.instantiator.clear_cache()
