from pathlib import Path

import pytest
from pydantic import ValidationError

from bookparser.config import ParserSettings
from bookparser.errors import BookParseError, ErrorKind
from bookparser.models import BookMetadata, Chapter, CoverImage, ParseResult


def _metadata(**overrides) -> BookMetadata:
    fields = {"title": "Dune", "language": "en"}
    fields.update(overrides)
    return BookMetadata(**fields)


def test_metadata_defaults() -> None:
    metadata = _metadata()

    assert metadata.author == "Unknown Author"
    assert metadata.description is None
    assert metadata.cover is None


def test_metadata_requires_title() -> None:
    with pytest.raises(ValidationError):
        _metadata(title="")


def test_metadata_is_frozen() -> None:
    metadata = _metadata()

    with pytest.raises(ValidationError):
        metadata.title = "Other"


def test_chapter_tree() -> None:
    leaf = Chapter(id="b", title="Section", href="ch1.xhtml#s1")
    root = Chapter(id="a", title="Chapter", href="ch1.xhtml", children=[leaf])

    assert root.children[0].href == "ch1.xhtml#s1"
    assert Chapter(id="c", title="Other", href="line_3").children == []


def test_parse_result_success_and_failure() -> None:
    ok = ParseResult.ok(_metadata())
    failed = ParseResult.fail("Unsupported file format", ErrorKind.UNSUPPORTED_FORMAT)

    assert ok.success and ok.error is None and ok.error_kind is None
    assert not failed.success and failed.metadata is None
    assert failed.error_kind == ErrorKind.UNSUPPORTED_FORMAT


def test_parse_result_rejects_inconsistent_tags() -> None:
    with pytest.raises(ValidationError):
        ParseResult(success=True)
    with pytest.raises(ValidationError):
        ParseResult(success=True, metadata=_metadata(), error="oops")
    with pytest.raises(ValidationError):
        ParseResult(success=False, error="")
    with pytest.raises(ValidationError):
        ParseResult(success=False, metadata=_metadata(), error="oops")


def test_cover_image_save(tmp_path: Path) -> None:
    cover = CoverImage(file_name="OEBPS/images/cover.png", media_type="image/png", data=b"png")

    written = cover.save(tmp_path / "out")

    assert written == tmp_path / "out" / "cover.png"
    assert written.read_bytes() == b"png"


def test_book_parse_error_carries_kind() -> None:
    err = BookParseError(ErrorKind.PARSE_FAILURE, "PDF file is empty.")

    assert err.kind == ErrorKind.PARSE_FAILURE
    assert err.message == "PDF file is empty."
    assert str(err) == "PDF file is empty."


def test_settings_load_partial_file(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text('{"default_language": "en", "pdf_toc_sections": 4}', encoding="utf-8")

    settings = ParserSettings.load(path)

    assert settings.default_language == "en"
    assert settings.pdf_toc_sections == 4
    assert settings.fallback_chunk_min_chars == 5000


def test_settings_validation(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text('{"epub_content_format": "pdf"}', encoding="utf-8")

    with pytest.raises(ValidationError):
        ParserSettings.load(path)
    with pytest.raises(ValidationError):
        ParserSettings(cjk_language_threshold=1.5)
