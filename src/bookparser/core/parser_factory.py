"""Parser contract shared by all book formats, and the factory that wires them."""

import asyncio
import functools
import logging
import os
import uuid
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, TypeVar

from bookparser.config import ParserSettings
from bookparser.core.format_detector import file_extension
from bookparser.errors import BookParseError, ErrorKind
from bookparser.models.book import BookFormat, BookMetadata, Chapter, CoverImage
from bookparser.models.results import ParseResult

if TYPE_CHECKING:
    from bookparser.core.book_service import BookParsingService

log = logging.getLogger(__name__)

T = TypeVar("T")

PathLike = str | os.PathLike


def title_from_filename(path: PathLike) -> str:
    """Derive a display title from a file name.

    Drops the final extension and replaces underscores with spaces,
    e.g. "my_great_book.txt" -> "my great book". Never returns "".
    """
    name = os.path.basename(os.fspath(path))
    stem = name.rsplit(".", 1)[0] if "." in name else name
    title = stem.replace("_", " ").strip()
    return title or name.strip() or "Untitled"


def generate_id() -> str:
    """Random chapter id, unique within a parse."""
    return uuid.uuid4().hex


async def run_blocking(fn: Callable[..., T], *args) -> T:
    """Run a blocking call in the loop's default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(fn, *args))


class BookParser(ABC):
    """Abstract base class for book parsers.

    Subclasses implement the blocking ``_read_*`` methods. The public async
    operations run them off the event loop and turn failures into the
    documented soft results, so nothing raises past this boundary.
    """

    format: BookFormat
    extensions: tuple[str, ...] = ()

    def __init__(self, settings: ParserSettings | None = None):
        self.settings = settings or ParserSettings()

    def accepts(self, path: PathLike) -> bool:
        """Check the path's extension against this parser's own."""
        return file_extension(path) in self.extensions

    async def parse_metadata(self, path: PathLike) -> ParseResult:
        """Extract book metadata, reporting failure as a result tag."""
        if not self.accepts(path):
            return ParseResult.fail(
                f"Invalid {self.format.value.upper()} file format",
                ErrorKind.INVALID_FORMAT_FOR_PARSER,
            )
        try:
            metadata = await run_blocking(self._read_metadata, path)
        except BookParseError as e:
            log.info(f"Metadata parse failed for {path}: {e.message}")
            return ParseResult.fail(e.message, e.kind)
        except Exception as e:
            log.warning(f"Metadata parse failed for {path}: {e}")
            return ParseResult.fail(str(e) or type(e).__name__, ErrorKind.PARSE_FAILURE)
        return ParseResult.ok(metadata)

    async def extract_cover(self, path: PathLike) -> CoverImage | None:
        """Best-effort cover extraction; None when absent or unreadable."""
        try:
            return await run_blocking(self._read_cover, path)
        except Exception as e:
            log.warning(f"Error extracting {self.format.value} cover from {path}: {e}")
            return None

    async def get_table_of_contents(self, path: PathLike) -> list[Chapter]:
        """Chapter tree of the book; [] when no structure can be derived."""
        try:
            return await run_blocking(self._read_toc, path)
        except Exception as e:
            log.warning(
                f"Error getting {self.format.value} table of contents for {path}: {e}"
            )
            return []

    async def get_content(self, path: PathLike, position: str | None = None) -> str:
        """Content from position to the end; full content without one.

        Returns "" when the content cannot be read.
        """
        try:
            return await run_blocking(self._read_content, path, position)
        except Exception as e:
            log.warning(f"Error getting {self.format.value} content for {path}: {e}")
            return ""

    @abstractmethod
    def _read_metadata(self, path: PathLike) -> BookMetadata:
        """Blocking metadata extraction; raise BookParseError on bad input."""
        pass

    def _read_cover(self, path: PathLike) -> CoverImage | None:
        return None

    @abstractmethod
    def _read_toc(self, path: PathLike) -> list[Chapter]:
        pass

    @abstractmethod
    def _read_content(self, path: PathLike, position: str | None) -> str:
        pass


class ParserFactory:
    """Factory for creating one parser per supported format."""

    SUPPORTED_FORMATS = (BookFormat.EPUB, BookFormat.PDF, BookFormat.TXT)

    @classmethod
    def create(
        cls, book_format: BookFormat, settings: ParserSettings | None = None
    ) -> BookParser:
        """Create the parser for a format.

        Raises:
            ValueError: If no parser exists for the format
        """
        if book_format == BookFormat.EPUB:
            from bookparser.core.epub_parser import EpubParser

            return EpubParser(settings)
        elif book_format == BookFormat.PDF:
            from bookparser.core.pdf_parser import PdfParser

            return PdfParser(settings)
        elif book_format == BookFormat.TXT:
            from bookparser.core.txt_parser import TxtParser

            return TxtParser(settings)

        supported = ", ".join(f.value for f in cls.SUPPORTED_FORMATS)
        raise ValueError(
            f"Unsupported format: {book_format}. Supported formats: {supported}"
        )

    @classmethod
    def create_all(
        cls, settings: ParserSettings | None = None
    ) -> dict[BookFormat, BookParser]:
        """Build the format -> parser table."""
        settings = settings or ParserSettings()
        return {fmt: cls.create(fmt, settings) for fmt in cls.SUPPORTED_FORMATS}

    @classmethod
    def create_service(
        cls, settings: ParserSettings | None = None
    ) -> "BookParsingService":
        """Composition root: a parsing service with every supported parser."""
        from bookparser.core.book_service import BookParsingService

        return BookParsingService(cls.create_all(settings))
