"""EPUB parsing using ebooklib."""

import logging
import posixpath
import warnings
from urllib.parse import unquote

import ebooklib
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning
from ebooklib import epub

from bookparser.config import ParserSettings
from bookparser.core.content_processor import ContentProcessor, html_to_text
from bookparser.core.parser_factory import (
    BookParser,
    PathLike,
    generate_id,
    title_from_filename,
)
from bookparser.errors import BookParseError, ErrorKind
from bookparser.models.book import BookFormat, BookMetadata, Chapter, CoverImage

# Suppress XML parsing warnings - EPUB files often use XHTML
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

log = logging.getLogger(__name__)


def read_book(path: PathLike) -> epub.EpubBook:
    """Open an EPUB archive, mapping read errors to BookParseError."""
    try:
        # Prefer the EPUB 3 navigation document, NCX only when it is missing
        return epub.read_epub(str(path), {"ignore_ncx": True})
    except Exception as e:
        raise BookParseError(
            ErrorKind.PARSE_FAILURE, f"Failed to read EPUB file: {e}"
        ) from e


def split_href(href: str) -> tuple[str, str | None]:
    """Split "text/ch1.xhtml#sec" into a normalized path and fragment."""
    path, _, fragment = href.partition("#")
    path = posixpath.normpath(unquote(path)) if path else ""
    return path, fragment or None


class EpubParser(BookParser):
    """Parse EPUB files and extract structure."""

    format = BookFormat.EPUB
    extensions = ("epub",)

    def __init__(self, settings: ParserSettings | None = None):
        super().__init__(settings)
        self.processor = ContentProcessor()

    # -- metadata -------------------------------------------------------------

    def _read_metadata(self, path: PathLike) -> BookMetadata:
        book = read_book(path)

        title = self._first_value(book, "DC", "title")
        authors = [a for a in self._values(book, "DC", "creator") if a]
        description = self._first_value(book, "DC", "description")
        cover_item = self._find_cover_item(book)

        return BookMetadata(
            title=title or title_from_filename(path),
            author=", ".join(authors) or self.settings.unknown_author,
            language=self._first_value(book, "DC", "language")
            or self.settings.default_language,
            description=html_to_text(description) if description else "",
            publisher=self._first_value(book, "DC", "publisher"),
            identifier=self._first_value(book, "DC", "identifier"),
            publication_date=self._first_value(book, "DC", "date"),
            cover=cover_item.get_name() if cover_item else None,
        )

    def _values(self, book: epub.EpubBook, namespace: str, name: str) -> list[str]:
        """Stripped text values of a metadata field."""
        try:
            entries = book.get_metadata(namespace, name)
        except KeyError:
            # Namespace absent from the package document
            return []
        return [value.strip() for value, _ in entries if value and value.strip()]

    def _first_value(self, book: epub.EpubBook, namespace: str, name: str) -> str | None:
        values = self._values(book, namespace, name)
        return values[0] if values else None

    # -- cover ----------------------------------------------------------------

    def _read_cover(self, path: PathLike) -> CoverImage | None:
        book = read_book(path)
        item = self._find_cover_item(book)
        if item is None:
            log.debug(f"No cover image declared in {path}")
            return None

        return CoverImage(
            file_name=item.get_name(),
            media_type=item.media_type or "image/jpeg",
            data=item.get_content(),
        )

    def _find_cover_item(self, book: epub.EpubBook):
        """Locate the cover image item, or None."""
        # EPUB 3: manifest item with properties="cover-image"
        covers = list(book.get_items_of_type(ebooklib.ITEM_COVER))
        if covers:
            return covers[0]

        # EPUB 2: <meta name="cover" content="item-id"/>, which ebooklib
        # files under the "meta" key with the tag attributes
        try:
            meta_tags = book.get_metadata("OPF", "meta")
        except KeyError:
            meta_tags = []
        for _, attrs in meta_tags:
            attrs = attrs or {}
            if attrs.get("name") != "cover":
                continue
            item_id = attrs.get("content")
            item = book.get_item_with_id(item_id) if item_id else None
            if item is not None and item.get_type() == ebooklib.ITEM_IMAGE:
                return item

        # Last resort: an image whose name looks like a cover
        for item in book.get_items_of_type(ebooklib.ITEM_IMAGE):
            if "cover" in item.get_name().lower():
                return item

        return None

    # -- table of contents ----------------------------------------------------

    def _read_toc(self, path: PathLike) -> list[Chapter]:
        book = read_book(path)
        chapters = self._parse_toc_recursive(book.toc)
        if chapters:
            return chapters

        log.info(f"No navigation document entries in {path}; using spine order")
        return self._spine_chapters(book)

    def _parse_toc_recursive(self, toc_items) -> list[Chapter]:
        """Recursively convert ebooklib TOC items into a chapter tree."""
        chapters = []

        for item in toc_items:
            if isinstance(item, tuple):
                # Section with children: (Section | Link, [children])
                section, children = item
                chapters.append(
                    Chapter(
                        id=generate_id(),
                        title=section.title or "Untitled",
                        href=section.href or self._first_href(children),
                        children=self._parse_toc_recursive(children),
                    )
                )
            elif isinstance(item, list):
                chapters.extend(self._parse_toc_recursive(item))
            else:
                # Simple link
                chapters.append(
                    Chapter(
                        id=generate_id(),
                        title=item.title or "Untitled",
                        href=item.href or "",
                    )
                )

        return chapters

    def _first_href(self, toc_items) -> str:
        """href of the first descendant link, for sections without their own."""
        for item in toc_items:
            if isinstance(item, tuple):
                section, children = item
                href = section.href or self._first_href(children)
            elif isinstance(item, list):
                href = self._first_href(item)
            else:
                href = item.href
            if href:
                return href
        return ""

    def _spine_chapters(self, book: epub.EpubBook) -> list[Chapter]:
        """One chapter per spine document."""
        chapters = []
        for item in self._spine_documents(book):
            chapters.append(
                Chapter(
                    id=generate_id(),
                    title=self._extract_title_from_content(item.get_content())
                    or item.get_name(),
                    href=item.get_name(),
                )
            )
        return chapters

    def _extract_title_from_content(self, content: bytes) -> str | None:
        """Try to extract title from HTML content."""
        soup = BeautifulSoup(content, "lxml")
        # Try h1 first, then h2, then title tag
        for tag in ["h1", "h2", "title"]:
            element = soup.find(tag)
            if element:
                text = element.get_text(strip=True)
                if text:
                    return text
        return None

    # -- content --------------------------------------------------------------

    def _spine_documents(self, book: epub.EpubBook) -> list:
        """Document items in reading order."""
        documents = []
        for idref, _linear in book.spine:
            item = book.get_item_with_id(idref)
            if item is not None and self._is_text_document(item):
                documents.append(item)

        if not documents:
            documents = [
                item
                for item in book.get_items_of_type(ebooklib.ITEM_DOCUMENT)
                if self._is_text_document(item)
            ]
        return documents

    def _is_text_document(self, item) -> bool:
        # EpubNav reports ITEM_DOCUMENT too
        return item.get_type() == ebooklib.ITEM_DOCUMENT and not isinstance(
            item, epub.EpubNav
        )

    def _read_content(self, path: PathLike, position: str | None) -> str:
        book = read_book(path)
        documents = self._spine_documents(book)
        output_format = self.settings.epub_content_format

        start, anchor = 0, None
        if position:
            target, anchor = split_href(position)
            names = [posixpath.normpath(item.get_name()) for item in documents]
            if target in names:
                start = names.index(target)
            else:
                log.debug(f"Unknown EPUB position {position!r}; returning full content")
                anchor = None

        parts = []
        for i, item in enumerate(documents[start:]):
            text = self.processor.process(
                item.get_content(),
                output_format,
                anchor=anchor if i == 0 else None,
            )
            if text:
                parts.append(text)

        return "\n\n".join(parts)
