"""Shared test fixtures."""

from collections.abc import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from news_curator.app import app
from news_curator.config import Settings
from news_curator.extraction.context import ExtractionContext
from news_curator.extraction.identity import IDENTITY_POOL


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a TestClient for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def settings() -> Settings:
    """Settings with the polite delay off and short browser settle periods."""
    return Settings(
        _env_file=None,
        polite_delay_enabled=False,
        post_settle_ms=0,
        profile_settle_ms=0,
        scroll_settle_ms=0,
    )


@pytest.fixture
def make_context(settings: Settings) -> Callable[..., ExtractionContext]:
    """Build an ExtractionContext whose HTTP calls go to ``handler``.

    Uses a single Chrome identity so request headers are deterministic.
    """

    def _make(handler: Callable[[httpx.Request], httpx.Response] | None = None, **overrides) -> ExtractionContext:
        kwargs = {
            "settings": settings,
            "identities": (IDENTITY_POOL[0],),
            "transport": httpx.MockTransport(handler) if handler else None,
        }
        kwargs.update(overrides)
        return ExtractionContext(**kwargs)

    return _make
