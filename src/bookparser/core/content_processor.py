"""Convert EPUB XHTML documents into readable content strings."""

import warnings
from typing import Literal

from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning
from markdownify import markdownify as md

# EPUB documents are XHTML; lxml's HTML parser reads them fine
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

OutputFormat = Literal["text", "markdown", "html"]


class ContentProcessor:
    """Process HTML content into text, Markdown or cleaned HTML."""

    def process(
        self,
        html_content: bytes | str,
        output_format: OutputFormat = "text",
        anchor: str | None = None,
    ) -> str:
        """Convert HTML to the specified format.

        If anchor names an element id, everything before that element is
        dropped first.
        """
        soup = BeautifulSoup(html_content, "lxml")

        # Remove scripts, styles, and navigation elements
        for tag in soup(["script", "style", "nav"]):
            tag.decompose()

        if anchor:
            self._drop_before(soup, anchor)

        if output_format == "html":
            return self._to_clean_html(soup)
        elif output_format == "markdown":
            return self._to_markdown(soup)
        else:
            return self._to_plain_text(soup)

    def _drop_before(self, soup: BeautifulSoup, anchor: str) -> None:
        """Remove all text and elements preceding the anchor element."""
        target = soup.find(id=anchor)
        if target is None:
            return

        ancestors = {id(parent) for parent in target.parents}
        previous_strings = list(target.find_all_previous(string=True))
        previous_tags = [
            tag for tag in target.find_all_previous() if id(tag) not in ancestors
        ]

        for string in previous_strings:
            string.extract()
        for tag in previous_tags:
            tag.decompose()

    def _to_markdown(self, soup: BeautifulSoup) -> str:
        """Convert BeautifulSoup to clean Markdown."""
        body = soup.body or soup
        markdown = md(
            str(body),
            heading_style="ATX",
            bullets="-",
            strip=["a"],  # Remove link formatting but keep text
        )
        # Clean up excessive whitespace
        lines = [line.rstrip() for line in markdown.split("\n")]
        # Remove multiple consecutive blank lines
        cleaned = []
        prev_blank = False
        for line in lines:
            is_blank = not line.strip()
            if is_blank and prev_blank:
                continue
            cleaned.append(line)
            prev_blank = is_blank

        return "\n".join(cleaned).strip()

    def _to_plain_text(self, soup: BeautifulSoup) -> str:
        """Extract plain text with paragraph preservation."""
        paragraphs = []
        blocks = soup.find_all(
            ["p", "h1", "h2", "h3", "h4", "h5", "h6", "li", "blockquote", "pre"]
        )
        for block in blocks:
            # Nested blocks are reported by their innermost element
            if block.find(["p", "li", "blockquote", "pre"]):
                continue
            text = " ".join(block.get_text().split())
            if text:
                paragraphs.append(text)

        if not paragraphs:
            body = soup.body or soup
            return body.get_text(separator="\n", strip=True)
        return "\n\n".join(paragraphs)

    def _to_clean_html(self, soup: BeautifulSoup) -> str:
        """Return cleaned HTML."""
        body = soup.body or soup
        return str(body)


def html_to_text(html: str) -> str:
    """Flatten an HTML fragment (e.g. an EPUB description) to one line of text."""
    text = BeautifulSoup(html, "lxml").get_text(separator=" ", strip=True)
    return " ".join(text.split())
