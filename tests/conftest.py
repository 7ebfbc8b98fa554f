"""Shared pytest fixtures for Katika tests."""

import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from katika.api.main import create_app
from katika.core.config import KatikaConfig
from katika.core.models import Artist, Portfolio, PortfolioAggregate, Section
from katika.core.store import PortfolioStore

FIXED_NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now() -> datetime:
    """A fixed instant for deterministic rendering and statistics."""
    return FIXED_NOW


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> KatikaConfig:
    """Create a test configuration with temporary directories.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        KatikaConfig instance for testing
    """
    return KatikaConfig(
        environment="testing",
        data_dir=temp_dir / "data",
        uploads_dir=temp_dir / "uploads",
        _env_file=None,
    )


@pytest.fixture
def store(test_config: KatikaConfig) -> PortfolioStore:
    """Document store backed by the test configuration's store path."""
    return PortfolioStore(test_config.store_path)


@pytest.fixture
def artist_payload() -> dict:
    """A fully populated artist payload."""
    return {
        "name": "Amani Wanjiru",
        "email": "amani@wanjiru.studio",
        "category": "visual_artist",
        "experience": "professional",
        "bio": "Painter and muralist working between Nairobi and Lagos.",
        "location": {"city": "Nairobi", "country": "Kenya"},
        "genres": ["Murals", "Portraiture", "Afrofuturism"],
        "socialLinks": {
            "instagram": "https://instagram.com/amani",
            "website": "https://wanjiru.studio",
            "twitter": "",
        },
        "media": [{"url": "https://cdn.wanjiru.studio/profile.jpg"}],
        "isVerified": True,
    }


@pytest.fixture
def sample_artist(store: PortfolioStore, artist_payload: dict) -> Artist:
    """An artist persisted in the test store."""
    return store.create_artist(artist_payload)


@pytest.fixture
def sample_aggregate(store: PortfolioStore, sample_artist: Artist) -> PortfolioAggregate:
    """A persisted portfolio with two sections, owned by ``sample_artist``."""
    return store.create_portfolio(
        sample_artist.id,
        {
            "title": "Walls That Speak",
            "description": "Selected public murals, 2019-2025.",
            "sections": [
                {"type": "experience", "content": "Lead muralist, Nairobi Street Art Festival\nResident, Lagos Art Lab"},
                {"type": "gallery", "title": "Selected Works", "content": "", "media": ["a.jpg", "b.jpg"]},
            ],
            "customizations": {"colors": {"primary": "#1a2b3c", "accent": "#FFAA00"}},
        },
    )


@pytest.fixture
def minimal_aggregate() -> PortfolioAggregate:
    """An in-memory portfolio with no sections, bio, genres or social links."""
    artist = Artist(name="Kofi Mensah", email="kofi@mensah.art")
    portfolio = Portfolio(artist_id=artist.id, title="Sketchbook")
    return PortfolioAggregate(portfolio=portfolio, artist=artist)


@pytest.fixture
def make_aggregate():
    """Factory for in-memory aggregates with overridable fields."""

    def _make(*, sections=None, artist_fields=None, portfolio_fields=None) -> PortfolioAggregate:
        artist = Artist(name="Zola Dube", email="zola@dube.design", **(artist_fields or {}))
        portfolio = Portfolio(
            artist_id=artist.id,
            title="Zola Dube Portfolio",
            sections=[Section(**section) for section in (sections or [])],
            **(portfolio_fields or {}),
        )
        return PortfolioAggregate(portfolio=portfolio, artist=artist)

    return _make


@pytest.fixture
def test_client(test_config: KatikaConfig) -> Generator[TestClient, None, None]:
    """TestClient bound to an app built from the test configuration."""
    app = create_app(test_config)
    with TestClient(app) as client:
        yield client
