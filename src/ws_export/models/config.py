"""Parser configuration."""

import json
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_METADATA_KEYS = [
    "ws-title",
    "ws-author",
    "ws-translator",
    "ws-illustrator",
    "ws-school",
    "ws-publisher",
    "ws-year",
    "ws-place",
    "ws-key",
    "ws-progress",
    "ws-volume",
    "ws-scan",
    "ws-cover",
    "ws-language",
]

# Namespaces never treated as chapters (canonical English names)
DEFAULT_EXCLUDED_NAMESPACES = [
    "Special",
    "File",
    "Image",
    "Media",
    "Category",
    "Help",
    "Template",
    "User",
    "Talk",
    "User_talk",
    "Wikisource",
    "Portal",
    "MediaWiki",
    "Index",
]


class ParserConfig(BaseModel):
    """Knobs for the page parser.

    Defaults match the markup produced by Wikisource's templates. Other
    wikis can override any list, e.g. to add their localized namespace
    names to ``excluded_namespaces``.
    """

    summary_ids: list[str] = Field(default_factory=lambda: ["ws-summary"])
    chrome_selectors: list[str] = Field(
        default_factory=lambda: [
            ".ws-noexport",
            "#toc",
            ".toc",
            ".mw-editsection",
            ".editsection",
            ".navbox",
            ".mw-jump-link",
        ]
    )
    # Only removed from non-main pages
    header_selectors: list[str] = Field(
        default_factory=lambda: ["#headertemplate", ".ws-header"]
    )
    excluded_namespaces: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_NAMESPACES)
    )
    metadata_keys: list[str] = Field(
        default_factory=lambda: list(DEFAULT_METADATA_KEYS)
    )

    @classmethod
    def from_file(cls, path: Path) -> "ParserConfig":
        """Load configuration from a JSON file."""
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls.model_validate(data)
