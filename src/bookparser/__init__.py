"""Parse EPUB, PDF and TXT ebooks into metadata, chapter trees and content."""

from bookparser.config import ParserSettings
from bookparser.core.book_service import BookParsingService
from bookparser.core.parser_factory import BookParser, ParserFactory
from bookparser.errors import BookParseError, ErrorKind

__version__ = "0.1.0"

__all__ = [
    "BookParseError",
    "BookParser",
    "BookParsingService",
    "ErrorKind",
    "ParserFactory",
    "ParserSettings",
]
