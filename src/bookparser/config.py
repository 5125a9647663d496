"""Tunable parser settings."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class ParserSettings(BaseModel):
    """Thresholds and defaults shared by all format parsers."""

    default_language: str = "zh-CN"
    unknown_author: str = "Unknown Author"

    # TXT metadata
    author_scan_lines: int = Field(default=20, ge=1)
    description_min_length: int = 50
    description_max_length: int = 200
    cjk_language_threshold: float = Field(default=0.3, ge=0.0, le=1.0)

    # TXT chapter segmentation
    chapter_title_min_length: int = 2
    chapter_title_max_length: int = 100
    fallback_chunk_min_chars: int = Field(default=5000, ge=1)
    fallback_chunk_count: int = Field(default=20, ge=1)

    # PDF
    pdf_toc_sections: int = Field(default=10, ge=1)
    pdf_estimated_pages_per_mb: int = Field(default=10, ge=1)
    pdf_language_sample_pages: int = Field(default=5, ge=1)

    # EPUB
    epub_content_format: Literal["text", "markdown", "html"] = "text"

    @classmethod
    def load(cls, path: Path) -> "ParserSettings":
        """Load settings from a JSON file; missing keys keep their defaults."""
        return cls.model_validate_json(path.read_text(encoding="utf-8"))
