"""Error taxonomy for book parsing."""

from enum import Enum


class ErrorKind(str, Enum):
    """Structured reason attached to a failed parse."""

    UNSUPPORTED_FORMAT = "unsupported_format"
    INVALID_FORMAT_FOR_PARSER = "invalid_format_for_parser"
    NO_PARSER = "no_parser"
    PARSE_FAILURE = "parse_failure"


class BookParseError(Exception):
    """Error raised inside a parser; converted to a ParseResult at its boundary."""

    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)
