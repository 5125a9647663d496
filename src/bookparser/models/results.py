"""Outcome models returned by parsers and the parsing service."""

from pydantic import BaseModel, model_validator

from bookparser.errors import ErrorKind
from bookparser.models.book import BookFormat, BookMetadata


class ParseResult(BaseModel):
    """Tagged outcome of a metadata parse: metadata on success, error otherwise."""

    success: bool
    metadata: BookMetadata | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None

    @model_validator(mode="after")
    def _check_tag(self) -> "ParseResult":
        if self.success and (self.metadata is None or self.error is not None):
            raise ValueError("successful result must carry metadata and no error")
        if not self.success and (self.metadata is not None or not self.error):
            raise ValueError("failed result must carry an error and no metadata")
        return self

    @classmethod
    def ok(cls, metadata: BookMetadata) -> "ParseResult":
        return cls(success=True, metadata=metadata)

    @classmethod
    def fail(cls, error: str, kind: ErrorKind) -> "ParseResult":
        return cls(success=False, error=error, error_kind=kind)


class ValidationVerdict(BaseModel):
    """Whether a file is a readable book of its detected format."""

    is_valid: bool
    format: BookFormat | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None


class FormatCapabilities(BaseModel):
    """Which optional operations give meaningful results for a format."""

    has_table_of_contents: bool = False
    has_cover: bool = False
    supports_bookmarks: bool = False
    supports_search: bool = False
