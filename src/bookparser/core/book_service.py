"""Format-agnostic façade over the per-format book parsers."""

import logging
from collections.abc import Mapping

from bookparser.core.format_detector import detect_format
from bookparser.core.parser_factory import BookParser, PathLike
from bookparser.errors import ErrorKind
from bookparser.models.book import BookFormat, Chapter, CoverImage
from bookparser.models.results import (
    FormatCapabilities,
    ParseResult,
    ValidationVerdict,
)

log = logging.getLogger(__name__)

UNSUPPORTED_FORMAT = "Unsupported file format"

DISPLAY_NAMES: dict[str, str] = {
    "epub": "EPUB电子书",
    "pdf": "PDF文档",
    "txt": "文本文件",
    "mobi": "Kindle电子书",
}

CAPABILITIES: dict[str, FormatCapabilities] = {
    "epub": FormatCapabilities(
        has_table_of_contents=True,
        has_cover=True,
        supports_bookmarks=True,
        supports_search=True,
    ),
    "pdf": FormatCapabilities(
        has_table_of_contents=True,
        has_cover=False,
        supports_bookmarks=True,
        supports_search=False,
    ),
    "txt": FormatCapabilities(
        has_table_of_contents=True,
        has_cover=False,
        supports_bookmarks=True,
        supports_search=True,
    ),
}


def no_parser_error(book_format: BookFormat) -> str:
    return f"No parser available for {book_format.value}"


class BookParsingService:
    """Detect a book's format and dispatch to the matching parser.

    Every operation returns a typed outcome instead of raising: a detection
    miss or a missing parser yields None, [], "" or a failed ParseResult.

    Args:
        parsers: One parser per format; build the default table with
            ``ParserFactory.create_service()``.
    """

    def __init__(self, parsers: Mapping[BookFormat, BookParser]):
        self._parsers = dict(parsers)

    def detect_file_format(self, path: PathLike) -> BookFormat | None:
        return detect_format(path)

    def _resolve(self, path: PathLike) -> tuple[BookFormat | None, BookParser | None]:
        book_format = detect_format(path)
        if book_format is None:
            log.debug(f"Unsupported file format: {path}")
            return None, None
        parser = self._parsers.get(book_format)
        if parser is None:
            log.debug(f"{no_parser_error(book_format)}: {path}")
        return book_format, parser

    async def parse_book_metadata(self, path: PathLike) -> ParseResult:
        """Extract metadata, or a failed result explaining why not."""
        book_format, parser = self._resolve(path)
        if book_format is None:
            return ParseResult.fail(UNSUPPORTED_FORMAT, ErrorKind.UNSUPPORTED_FORMAT)
        if parser is None:
            return ParseResult.fail(no_parser_error(book_format), ErrorKind.NO_PARSER)

        try:
            return await parser.parse_metadata(path)
        except Exception as e:
            log.exception(f"Unexpected error parsing metadata of {path}")
            return ParseResult.fail(str(e) or "Unknown error", ErrorKind.PARSE_FAILURE)

    async def extract_book_cover(self, path: PathLike) -> CoverImage | None:
        _, parser = self._resolve(path)
        if parser is None:
            return None

        try:
            return await parser.extract_cover(path)
        except Exception:
            log.exception(f"Error extracting book cover from {path}")
            return None

    async def get_book_table_of_contents(self, path: PathLike) -> list[Chapter]:
        _, parser = self._resolve(path)
        if parser is None:
            return []

        try:
            return await parser.get_table_of_contents(path)
        except Exception:
            log.exception(f"Error getting book table of contents for {path}")
            return []

    async def get_book_content(
        self, path: PathLike, position: str | None = None
    ) -> str:
        """Content from position onward; "" when unsupported or unreadable."""
        _, parser = self._resolve(path)
        if parser is None:
            return ""

        try:
            return await parser.get_content(path, position)
        except Exception:
            log.exception(f"Error getting book content for {path}")
            return ""

    async def validate_book_file(self, path: PathLike) -> ValidationVerdict:
        """A file is valid when its metadata can be parsed."""
        book_format, parser = self._resolve(path)
        if book_format is None:
            return ValidationVerdict(
                is_valid=False,
                error=UNSUPPORTED_FORMAT,
                error_kind=ErrorKind.UNSUPPORTED_FORMAT,
            )
        if parser is None:
            return ValidationVerdict(
                is_valid=False,
                format=book_format,
                error=no_parser_error(book_format),
                error_kind=ErrorKind.NO_PARSER,
            )

        result = await self.parse_book_metadata(path)
        return ValidationVerdict(
            is_valid=result.success,
            format=book_format,
            error=result.error,
            error_kind=result.error_kind,
        )

    def get_supported_formats(self) -> list[str]:
        return [fmt.value for fmt in self._parsers]

    def is_format_supported(self, book_format: str) -> bool:
        return book_format.lower() in self.get_supported_formats()

    def get_format_display_name(self, book_format: str) -> str:
        return DISPLAY_NAMES.get(book_format.lower(), book_format.upper())

    def get_format_capabilities(self, book_format: str) -> FormatCapabilities:
        """Static per-format flags; all False for unknown formats."""
        return CAPABILITIES.get(book_format.lower(), FormatCapabilities()).model_copy()
