import zipfile
from pathlib import Path

import pytest
from ebooklib import epub
from pypdf import PdfWriter
from pypdf.generic import NameObject, TextStringObject

# Bytes only need to look like an image to ebooklib, which never decodes them
FAKE_JPEG = b"\xff\xd8\xff\xe0fake-jpeg-data\xff\xd9"


def build_epub(
    path: Path,
    *,
    with_toc: bool = True,
    with_cover: bool = False,
    with_metadata: bool = True,
) -> Path:
    book = epub.EpubBook()
    book.set_identifier("urn:isbn:9780000000001")
    book.set_language("en")
    if with_metadata:
        book.set_title("Test Book")
        book.add_author("Jane Doe")
        book.add_author("John Roe")
        book.add_metadata("DC", "description", "<p>A <b>short</b> test book.</p>")
        book.add_metadata("DC", "publisher", "Acme Press")
        book.add_metadata("DC", "date", "2021-05-01")

    chapter1 = epub.EpubHtml(title="Chapter 1", file_name="chap1.xhtml", lang="en")
    chapter1.content = "<h1>Chapter 1</h1><p>Hello world.</p>"

    chapter2 = epub.EpubHtml(title="Chapter 2", file_name="chap2.xhtml", lang="en")
    chapter2.content = (
        "<h1>Chapter 2</h1>"
        "<p>Intro text.</p>"
        '<p id="s2">Section two body.</p>'
        "<p>Closing words.</p>"
    )

    book.add_item(chapter1)
    book.add_item(chapter2)

    if with_cover:
        book.set_cover("cover.jpg", FAKE_JPEG)

    if with_toc:
        book.toc = [
            epub.Link("chap1.xhtml", "Chapter 1", "c1"),
            (
                epub.Section("Part Two"),
                [
                    epub.Link("chap2.xhtml", "Chapter 2", "c2"),
                    epub.Link("chap2.xhtml#s2", "Section 2.1", "c2s"),
                ],
            ),
        ]

    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chapter1, chapter2]

    epub.write_epub(str(path), book)
    return path


EPUB2_CONTAINER = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

EPUB2_OPF = """<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="2.0" unique-identifier="bookid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:opf="http://www.idpf.org/2007/opf">
    <dc:title>Old Style Book</dc:title>
    <dc:language>en</dc:language>
    <dc:identifier id="bookid">urn:uuid:old-style</dc:identifier>
    <meta name="cover" content="cimg"/>
  </metadata>
  <manifest>
    <item id="ncx" href="toc.ncx" media-type="application/x-dtbncx+xml"/>
    <item id="chap1" href="text/chap1.xhtml" media-type="application/xhtml+xml"/>
    <item id="cimg" href="images/front.jpg" media-type="image/jpeg"/>
  </manifest>
  <spine toc="ncx">
    <itemref idref="chap1"/>
  </spine>
</package>
"""

EPUB2_NCX = """<?xml version="1.0" encoding="UTF-8"?>
<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">
  <head><meta name="dtb:uid" content="urn:uuid:old-style"/></head>
  <docTitle><text>Old Style Book</text></docTitle>
  <navMap>
    <navPoint id="np1" playOrder="1">
      <navLabel><text>Opening</text></navLabel>
      <content src="text/chap1.xhtml"/>
    </navPoint>
  </navMap>
</ncx>
"""

EPUB2_CHAPTER = """<?xml version="1.0" encoding="UTF-8"?>
<html xmlns="http://www.w3.org/1999/xhtml">
  <head><title>Opening</title></head>
  <body><h1>Opening</h1><p>Old style text.</p></body>
</html>
"""


def build_epub2(path: Path) -> Path:
    """EPUB 2 archive whose cover is declared only by <meta name="cover">."""
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("mimetype", "application/epub+zip", compress_type=zipfile.ZIP_STORED)
        zf.writestr("META-INF/container.xml", EPUB2_CONTAINER)
        zf.writestr("OEBPS/content.opf", EPUB2_OPF)
        zf.writestr("OEBPS/toc.ncx", EPUB2_NCX)
        zf.writestr("OEBPS/text/chap1.xhtml", EPUB2_CHAPTER)
        zf.writestr("OEBPS/images/front.jpg", FAKE_JPEG)
    return path


def build_pdf(
    path: Path,
    *,
    pages: int = 3,
    outline: bool = False,
    metadata: dict | None = None,
    lang: str | None = None,
    password: str | None = None,
) -> Path:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=200, height=200)

    if outline:
        part = writer.add_outline_item("Part 1", 0)
        writer.add_outline_item("Section 1.1", 1, parent=part)
        writer.add_outline_item("Appendix", pages - 1)

    if metadata:
        writer.add_metadata(metadata)
    if lang:
        writer.root_object[NameObject("/Lang")] = TextStringObject(lang)
    if password:
        writer.encrypt(password)

    with open(path, "wb") as f:
        writer.write(f)
    return path


@pytest.fixture
def sample_epub(tmp_path: Path) -> Path:
    return build_epub(tmp_path / "test_book.epub", with_cover=True)


@pytest.fixture
def sample_pdf(tmp_path: Path) -> Path:
    return build_pdf(
        tmp_path / "sample.pdf",
        pages=4,
        outline=True,
        metadata={"/Title": "Sample PDF", "/Author": "Ada Lovelace"},
        lang="en-US",
    )


@pytest.fixture
def sample_txt(tmp_path: Path) -> Path:
    path = tmp_path / "my_great_book.txt"
    path.write_text(
        "作者：张三\n"
        "\n"
        "第一章 开始\n"
        "很久以前，在一个遥远的山村里，住着一位老人和他的孙子，他们每天上山砍柴，下山卖柴，日子过得清贫却快乐，村里的人都很喜欢他们。每到冬天，老人就会给孙子讲很多很多古老的故事。\n"
        "第二章 旅程\n"
        "孙子长大后离开了山村。\n",
        encoding="utf-8",
    )
    return path
