"""Shared pytest fixtures."""

from pathlib import Path

import pytest

from ws_export.core.id_registry import IdRegistry, default_registry
from ws_export.core.page_parser import PageParser

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def clean_default_registry():
    """Every test starts a new export run on the shared registry."""
    default_registry.reset()
    yield
    default_registry.reset()


@pytest.fixture
def registry() -> IdRegistry:
    return IdRegistry()


@pytest.fixture
def navigation_path() -> Path:
    return FIXTURES_DIR / "tales_of_unrest.html"


@pytest.fixture
def navigation_parser(navigation_path: Path, registry: IdRegistry) -> PageParser:
    return PageParser(navigation_path.read_bytes(), registry=registry)
