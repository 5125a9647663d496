"""PDF parsing with outline-based or page-range table of contents."""

import logging
import os
import re

# Suppress warnings about malformed PDF object references from PDF libraries
logging.getLogger("pdfminer").setLevel(logging.ERROR)
logging.getLogger("pypdf").setLevel(logging.ERROR)

import pdfplumber
import pypdf
from pypdf.errors import EmptyFileError, FileNotDecryptedError, PdfReadError

from bookparser.core.language import detect_language
from bookparser.core.parser_factory import (
    BookParser,
    PathLike,
    generate_id,
    title_from_filename,
)
from bookparser.errors import BookParseError, ErrorKind
from bookparser.models.book import BookFormat, BookMetadata, Chapter

log = logging.getLogger(__name__)

PAGE_POSITION = re.compile(r"^page_(\d+)$")

BYTES_PER_MB = 1024 * 1024


def open_reader(path: PathLike) -> pypdf.PdfReader:
    """Open a PDF with pypdf, mapping read errors to BookParseError."""
    try:
        reader = pypdf.PdfReader(str(path))
        if reader.is_encrypted and not reader.decrypt(""):
            raise BookParseError(
                ErrorKind.PARSE_FAILURE, "PDF is encrypted. Please decrypt first."
            )
    except FileNotDecryptedError:
        raise BookParseError(
            ErrorKind.PARSE_FAILURE, "PDF is encrypted. Please decrypt first."
        )
    except EmptyFileError:
        raise BookParseError(ErrorKind.PARSE_FAILURE, "PDF file is empty.")
    except PdfReadError as e:
        raise BookParseError(ErrorKind.PARSE_FAILURE, f"PDF appears corrupted: {e}")
    return reader


def estimate_page_count(path: PathLike, pages_per_mb: int = 10) -> int:
    """Rough page count from file size alone.

    This is an approximation for files pypdf cannot read, not a real
    page count.
    """
    size_mb = os.path.getsize(path) / BYTES_PER_MB
    return max(1, int(size_mb * pages_per_mb))


def page_range_chapters(page_count: int, sections: int = 10) -> list[Chapter]:
    """Split pages 1..page_count into roughly `sections` equal ranges."""
    step = max(1, page_count // sections)
    chapters = []

    for number, first in enumerate(range(1, page_count + 1, step), start=1):
        last = min(first + step - 1, page_count)
        chapters.append(
            Chapter(
                id=generate_id(),
                title=f"第 {number} 章 (页 {first}-{last})",
                href=f"page_{first}",
            )
        )

    return chapters


class PdfParser(BookParser):
    """Parse PDF files: info dictionary, bookmarks and page text."""

    format = BookFormat.PDF
    extensions = ("pdf",)

    def _read_metadata(self, path: PathLike) -> BookMetadata:
        reader = open_reader(path)
        if len(reader.pages) == 0:
            raise BookParseError(ErrorKind.PARSE_FAILURE, "PDF has no pages.")

        info = reader.metadata or {}

        return BookMetadata(
            title=self._info_text(info, "/Title") or title_from_filename(path),
            author=self._info_text(info, "/Author") or self.settings.unknown_author,
            language=self._detect_language(reader),
            description=self._info_text(info, "/Subject") or "PDF document",
            publisher=self._info_text(info, "/Producer"),
            publication_date=self._info_text(info, "/CreationDate"),
        )

    def _info_text(self, info, key: str) -> str | None:
        value = info.get(key)
        if value is None:
            return None
        return str(value).strip() or None

    def _detect_language(self, reader: pypdf.PdfReader) -> str:
        """Catalog /Lang, else the CJK heuristic on the first pages."""
        lang = reader.root_object.get("/Lang")
        if lang and str(lang).strip():
            return str(lang).strip()

        try:
            sample = self._extract_sample_text(reader)
        except Exception as e:
            # Malformed fonts or content streams; the document is still readable
            log.warning(f"Could not sample PDF text for language detection: {e}")
            return self.settings.default_language
        if sample.strip():
            return detect_language(sample, self.settings.cjk_language_threshold)
        return self.settings.default_language

    def _extract_sample_text(self, reader: pypdf.PdfReader) -> str:
        """Extract sample text from the first pages."""
        sample_pages = min(self.settings.pdf_language_sample_pages, len(reader.pages))
        text_parts = []
        for i in range(sample_pages):
            text_parts.append(reader.pages[i].extract_text() or "")
        return " ".join(text_parts)

    def _read_toc(self, path: PathLike) -> list[Chapter]:
        try:
            reader = open_reader(path)
        except BookParseError as e:
            page_count = estimate_page_count(
                path, self.settings.pdf_estimated_pages_per_mb
            )
            log.warning(
                f"{e.message} Estimating {page_count} pages from file size "
                f"for the table of contents of {path}"
            )
            return page_range_chapters(page_count, self.settings.pdf_toc_sections)

        chapters = self._outline_chapters(reader)
        if chapters:
            return chapters

        log.info(f"No bookmarks in {path}; using page ranges")
        return page_range_chapters(len(reader.pages), self.settings.pdf_toc_sections)

    def _outline_chapters(self, reader: pypdf.PdfReader) -> list[Chapter]:
        """Flatten the PDF outline into chapters in document order."""
        chapters: list[Chapter] = []

        def flatten_outline(items: list) -> None:
            for item in items:
                if isinstance(item, list):
                    # Nested items
                    flatten_outline(item)
                    continue
                try:
                    page_num = reader.get_destination_page_number(item)
                except Exception:
                    # Skip malformed destinations
                    continue
                if page_num is None:
                    continue
                chapters.append(
                    Chapter(
                        id=generate_id(),
                        title=item.title or f"Page {page_num + 1}",
                        href=f"page_{page_num + 1}",
                    )
                )

        try:
            flatten_outline(reader.outline)
        except PdfReadError as e:
            log.warning(f"Unreadable PDF outline: {e}")
            return []

        return chapters

    def _read_content(self, path: PathLike, position: str | None) -> str:
        with pdfplumber.open(str(path)) as pdf:
            first = self._first_page_index(position, len(pdf.pages))
            text_parts = [self._page_text(page) for page in pdf.pages[first:]]
        return "\n\n".join(text_parts)

    def _page_text(self, page) -> str:
        """Layout-aware text of one pdfplumber page."""
        return page.extract_text() or ""

    def _first_page_index(self, position: str | None, page_count: int) -> int:
        """0-based index of the page a ``page_<n>`` token points at."""
        if not position:
            return 0
        match = PAGE_POSITION.match(position)
        if match and 1 <= int(match.group(1)) <= page_count:
            return int(match.group(1)) - 1
        log.debug(f"Unknown PDF position {position!r}; returning full content")
        return 0
