"""Pytest configuration and shared fixtures."""

from collections.abc import Generator

import pytest

from markertime.core.media import Chapter, Marker, MarkerType
from markertime.utils.config import get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the get_settings LRU cache before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def markers() -> list[Marker]:
    """Return one intro followed by one credits marker."""
    return [
        Marker(marker_type=MarkerType.INTRO, start=1000, end=2000),
        Marker(marker_type=MarkerType.CREDITS, start=3000, end=4000),
    ]


@pytest.fixture
def chapters() -> list[Chapter]:
    """Return four simple chapters."""
    return [
        Chapter(name="Opening", start=1000, end=2000),
        Chapter(name="Ending", start=3000, end=4000),
        Chapter(name="End", start=5000, end=6000),
        Chapter(name="Chapter Four", start=7000, end=8000),
    ]


@pytest.fixture
def complex_chapters() -> list[Chapter]:
    """Return chapters whose names contain wildcard and regex characters."""
    return [
        Chapter(name="Chapter*One", start=1000, end=2000),
        Chapter(name="Chapter?Two", start=3000, end=4000),
        Chapter(name="Chapter[Three]", start=5000, end=6000),
        Chapter(name="Chapter\\[Four)", start=7000, end=8000),
        Chapter(name="[[Amazing ** Chapter Five?]]", start=9000, end=10000),
        Chapter(name="^Chapter Six$", start=10000, end=11000),
        Chapter(name="Chapter Seven", start=11000, end=12000),
        Chapter(name="Chapter\\/Eight", start=12000, end=13000),
        Chapter(name="Chapter Nine", start=13000, end=14000),
        Chapter(name="Chapter T\ten", start=14000, end=15000),
        Chapter(name="Chapter Eleven", start=15000, end=16000),
    ]
