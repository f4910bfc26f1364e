"""Data models for pages extracted from a wiki export."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Chapter(BaseModel):
    """Single entry in the table of contents."""

    model_config = ConfigDict(frozen=True)

    title: str  # Wiki page title, underscores for spaces
    name: str = ""  # Link text shown to the reader
    subchapters: list["Chapter"] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _default_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("name"):
            data = {**data, "name": data.get("title", "")}
        return data


class Picture(BaseModel):
    """Image referenced from a page."""

    model_config = ConfigDict(frozen=True)

    title: str  # De-duplication key across a book
    name: str  # File name
    url: str


class ParsedPage(BaseModel):
    """Everything extracted from one document."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    content: Any  # bs4.BeautifulSoup
    chapters: list[Chapter] = Field(default_factory=list)
    pictures: dict[str, Picture] = Field(default_factory=dict)
    metadata: dict[str, str] = Field(default_factory=dict)
    pages: list[str] = Field(default_factory=list)
