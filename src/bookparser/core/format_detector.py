"""Map a file path to its book format."""

import os

from bookparser.models.book import BookFormat

EXTENSION_FORMATS: dict[str, BookFormat] = {
    "epub": BookFormat.EPUB,
    "pdf": BookFormat.PDF,
    "txt": BookFormat.TXT,
    "mobi": BookFormat.MOBI,
}


def file_extension(path: str | os.PathLike) -> str:
    """Return the lowercase final extension of path's last component, or ''."""
    name = os.path.basename(os.fspath(path))
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def detect_format(path: str | os.PathLike) -> BookFormat | None:
    """Detect book format from the file extension.

    Args:
        path: Path to the book file; it is never opened.

    Returns:
        The matching BookFormat, or None for unknown or missing extensions.
    """
    return EXTENSION_FORMATS.get(file_extension(path))
