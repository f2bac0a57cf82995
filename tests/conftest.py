"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before any app import so the global settings
are built from them instead of a local .env file.
"""

import os

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")

import pytest
from fastapi.testclient import TestClient

from app.core.app_factory import create_app
from app.core.config import AppSettings, LogSettings, Settings


@pytest.fixture
def make_settings():
    """Build Settings with AppSettings overrides."""

    def _make(**app_overrides) -> Settings:
        return Settings(app=AppSettings(**app_overrides), log=LogSettings())

    return _make


@pytest.fixture
def make_client(make_settings):
    """Build a TestClient around a fresh app (and a fresh limiter)."""

    def _make(client_key_extractor=None, **app_overrides) -> TestClient:
        kwargs = {}
        if client_key_extractor is not None:
            kwargs["client_key_extractor"] = client_key_extractor
        return TestClient(create_app(make_settings(**app_overrides), **kwargs))

    return _make
