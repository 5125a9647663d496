"""Data models for parsed books (EPUB, PDF and TXT)."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class BookFormat(str, Enum):
    """Container format of a book file."""

    EPUB = "epub"
    PDF = "pdf"
    TXT = "txt"
    MOBI = "mobi"


class Chapter(BaseModel):
    """Single entry in a book's table of contents."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    href: str  # Position token, only meaningful to the parser that issued it
    children: list["Chapter"] = Field(default_factory=list)


class BookMetadata(BaseModel):
    """Book-level metadata."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    author: str = "Unknown Author"
    language: str
    description: str | None = None
    publisher: str | None = None
    identifier: str | None = None
    publication_date: str | None = None
    cover: str | None = None  # Internal path of the declared cover image


class CoverImage(BaseModel):
    """Cover image bytes extracted from a book."""

    file_name: str
    media_type: str = "image/jpeg"
    data: bytes

    def save(self, directory: Path) -> Path:
        """Write the image into directory and return the written path."""
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / Path(self.file_name).name
        target.write_bytes(self.data)
        return target
