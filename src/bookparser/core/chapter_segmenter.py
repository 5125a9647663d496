"""Heuristic chapter detection for plain text books."""

import logging
import re

from bookparser.config import ParserSettings
from bookparser.core.parser_factory import generate_id
from bookparser.models.book import Chapter

log = logging.getLogger(__name__)

CJK_NUMERALS = "一二三四五六七八九十百千万"

# Checked in order, first match wins
CHAPTER_PATTERNS: list[re.Pattern] = [
    re.compile(rf"^第[{CJK_NUMERALS}0-9]+章"),  # 第一章, 第12章
    re.compile(r"^Chapter\s+[0-9]+", re.IGNORECASE),
    re.compile(r"^章节\s*[0-9]+"),
    re.compile(r"^[0-9]+\."),  # "1. The Beginning"
    re.compile(rf"^[{CJK_NUMERALS}]+[、.]"),  # 一、 / 二.
]

POSITION_PATTERN = re.compile(r"^(line|char)_(\d+)$")


class TextChapterSegmenter:
    """Split line-oriented text into chapters and resolve position tokens.

    Chapters found by pattern get ``line_<index>`` hrefs (0-based line
    index). When no line looks like a chapter heading, the raw content is
    cut into fixed-size parts with ``char_<offset>`` hrefs instead.
    """

    def __init__(self, settings: ParserSettings | None = None):
        self.settings = settings or ParserSettings()

    def is_chapter_title(self, line: str) -> bool:
        """Check whether a trimmed line looks like a chapter heading."""
        if not (
            self.settings.chapter_title_min_length
            <= len(line)
            <= self.settings.chapter_title_max_length
        ):
            return False
        return any(pattern.match(line) for pattern in CHAPTER_PATTERNS)

    def segment(self, content: str) -> list[Chapter]:
        """Return the chapter list for content."""
        chapters: list[Chapter] = []

        for i, raw_line in enumerate(content.split("\n")):
            line = raw_line.strip()
            if self.is_chapter_title(line):
                chapters.append(
                    Chapter(
                        id=generate_id(),
                        title=line or f"第 {len(chapters) + 1} 章",
                        href=f"line_{i}",
                    )
                )

        if chapters:
            log.debug(f"Detected {len(chapters)} chapter headings")
            return chapters

        return self.chunk_by_length(content)

    def chunk_size(self, total_length: int) -> int:
        return max(
            self.settings.fallback_chunk_min_chars,
            total_length // self.settings.fallback_chunk_count,
        )

    def chunk_by_length(self, content: str) -> list[Chapter]:
        """Fallback: fixed-size parts over the raw content."""
        total_length = len(content)
        chunk = self.chunk_size(total_length)

        chapters = [
            Chapter(
                id=generate_id(),
                title=f"第 {number} 部分",
                href=f"char_{start}",
            )
            for number, start in enumerate(range(0, total_length, chunk), start=1)
        ]
        log.debug(
            f"No chapter headings found; split into {len(chapters)} parts "
            f"of {chunk} characters"
        )
        return chapters

    def resolve(self, content: str, position: str | None) -> str:
        """Return content starting at position.

        ``line_<n>`` gives lines n.. joined by newlines, ``char_<n>`` gives
        content[n:]. Anything else gives the full content.
        """
        if not position:
            return content

        match = POSITION_PATTERN.match(position)
        if not match:
            log.debug(f"Unrecognized text position {position!r}; returning full content")
            return content

        kind, offset = match.group(1), int(match.group(2))
        if kind == "line":
            return "\n".join(content.split("\n")[offset:])
        return content[offset:]
