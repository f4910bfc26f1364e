"""Data models."""

from ws_export.models.book import Chapter, ParsedPage, Picture
from ws_export.models.config import (
    DEFAULT_EXCLUDED_NAMESPACES,
    DEFAULT_METADATA_KEYS,
    ParserConfig,
)

__all__ = [
    # Book models
    "Chapter",
    "Picture",
    "ParsedPage",
    # Configuration
    "ParserConfig",
    "DEFAULT_EXCLUDED_NAMESPACES",
    "DEFAULT_METADATA_KEYS",
]
