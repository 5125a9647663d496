"""Plain text parsing with encoding detection and chapter heuristics."""

import logging
import re

import chardet

from bookparser.config import ParserSettings
from bookparser.core.chapter_segmenter import TextChapterSegmenter
from bookparser.core.language import detect_language
from bookparser.core.parser_factory import BookParser, PathLike, title_from_filename
from bookparser.models.book import BookFormat, BookMetadata, Chapter

log = logging.getLogger(__name__)

AUTHOR_PATTERNS: list[re.Pattern] = [
    re.compile(r"作者[：:]\s*(.+)"),
    re.compile(r"著[：:]\s*(.+)"),
    re.compile(r"Author[：:]\s*(.+)", re.IGNORECASE),
    re.compile(r"By[：:]\s*(.+)", re.IGNORECASE),
]

# Bytes sampled for charset detection
DETECTION_SAMPLE = 30000


def detect_encoding(chunk: bytes) -> str:
    """Guess the text encoding of a byte sample."""
    try:
        chunk.decode("utf-8")
        return "utf-8-sig"
    except UnicodeDecodeError as e:
        # A multi-byte sequence cut at the sample end is still UTF-8
        if e.start >= len(chunk) - 3 and e.reason == "unexpected end of data":
            return "utf-8-sig"

    res = chardet.detect(chunk)
    if res["encoding"] and res["confidence"] > 0.6:
        return res["encoding"]
    return "gb18030"


def read_text(path: PathLike) -> str:
    """Read a text file, detecting its encoding. Newlines are left untouched."""
    with open(path, "rb") as f:
        data = f.read()
    encoding = detect_encoding(data[:DETECTION_SAMPLE])
    log.debug(f"Decoding {path} as {encoding}")
    return data.decode(encoding, errors="replace")


class TxtParser(BookParser):
    """Parse plain text files."""

    format = BookFormat.TXT
    extensions = ("txt",)

    def __init__(self, settings: ParserSettings | None = None):
        super().__init__(settings)
        self.segmenter = TextChapterSegmenter(self.settings)

    def _read_metadata(self, path: PathLike) -> BookMetadata:
        content = read_text(path)
        # CRLF files keep their "\r" after the split
        lines = [line.rstrip("\r") for line in content.split("\n") if line.strip()]

        return BookMetadata(
            title=title_from_filename(path),
            author=self._find_author(lines) or self.settings.unknown_author,
            language=detect_language(content, self.settings.cjk_language_threshold),
            description=self._build_description(lines),
        )

    def _find_author(self, lines: list[str]) -> str | None:
        """Scan the first non-blank lines for an author label."""
        for line in lines[: self.settings.author_scan_lines]:
            for pattern in AUTHOR_PATTERNS:
                match = pattern.search(line)
                if match and match.group(1).strip():
                    return match.group(1).strip()
        return None

    def _build_description(self, lines: list[str]) -> str:
        """First long line, truncated, as a short description."""
        for line in lines:
            if len(line) > self.settings.description_min_length:
                return line[: self.settings.description_max_length] + "..."
        return ""

    def _read_toc(self, path: PathLike) -> list[Chapter]:
        return self.segmenter.segment(read_text(path))

    def _read_content(self, path: PathLike, position: str | None) -> str:
        return self.segmenter.resolve(read_text(path), position)
