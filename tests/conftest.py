"""Shared test fixtures for the bridge test suite."""

from __future__ import annotations

import os

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from mailchimp_bridge.config.settings import BridgeSettings
from mailchimp_bridge.main import create_app
from mailchimp_bridge.resilience.rate_limiter import SlidingWindowRateLimiter

CSRF_TOKEN = "test-csrf-token"
WEBHOOK_SECRET = "test-webhook-secret"


# ---------------------------------------------------------------------------
# Isolate tests from the developer's environment and config file
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop MAILCHIMP_* variables and point the config file somewhere empty."""
    for key in list(os.environ):
        if key.startswith("MAILCHIMP_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("MAILCHIMP_CONFIG_PATH", "does-not-exist.yaml")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Settings and component fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> BridgeSettings:
    """Test settings with safe defaults."""
    return BridgeSettings(
        api_key="abc123def456-us6",
        list_id="list123",
        webhook_secret=None,
        config_path="does-not-exist.yaml",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(clock: FakeClock) -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(max_requests=30, window_seconds=60, clock=clock)


@pytest.fixture
def app(settings: BridgeSettings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client carrying a valid CSRF cookie."""
    return TestClient(app, cookies={"CSRF_TOKEN": CSRF_TOKEN}, raise_server_exceptions=False)
