"""Data models."""

from bookparser.models.book import (
    BookFormat,
    BookMetadata,
    Chapter,
    CoverImage,
)
from bookparser.models.results import (
    FormatCapabilities,
    ParseResult,
    ValidationVerdict,
)

__all__ = [
    # Book models
    "BookFormat",
    "BookMetadata",
    "Chapter",
    "CoverImage",
    # Outcome models
    "ParseResult",
    "ValidationVerdict",
    "FormatCapabilities",
]
