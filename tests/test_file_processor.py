import io
import zipfile

import pytest

from conftest import make_pdf
from talentmatch.services.errors import ResumeExtractionError
from talentmatch.services.file_processor import (
    DOCX_PLACEHOLDER,
    FileProcessor,
    clean_extracted_text,
    detect_resume_kind,
    extraction_method,
    is_placeholder,
    scrape_docx_text,
    scrape_pdf_text,
)

DOCUMENT_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">'
    '<w:body>'
    '<w:p><w:r><w:t>Jane Doe</w:t></w:r></w:p>'
    '<w:p><w:r><w:t>Backend engineer with seven years of Python, Django and PostgreSQL.</w:t></w:r></w:p>'
    '</w:body></w:document>'
)


def make_docx(xml=DOCUMENT_XML) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("word/document.xml", xml)
    return buffer.getvalue()


def test_scrape_pdf_text_reads_text_blocks():
    content = b"%PDF-1.4\nstream\nBT /F1 12 Tf 72 712 Td (Hello World) Tj ET\nendstream"
    assert scrape_pdf_text(content) == "Hello World"


def test_scrape_pdf_text_falls_back_to_letter_runs():
    content = b"%PDF-1.4\n\x00\x01Experienced software engineer with Python\x00\x02"
    assert "Experienced software engineer with Python" in scrape_pdf_text(content)


def test_scrape_docx_text_reads_word_runs():
    text = scrape_docx_text(make_docx())
    assert text.startswith("Jane Doe")
    assert "seven years of Python" in text


def test_scrape_docx_text_returns_placeholder_for_unreadable_bytes():
    assert scrape_docx_text(b"\x00\x01\x02\x03") == DOCX_PLACEHOLDER
    assert is_placeholder(DOCX_PLACEHOLDER)
    assert not is_placeholder("Jane Doe")


@pytest.mark.parametrize("content_type, source, kind, method", [
    ("image/png", "https://cdn.test/scan", "image", "OCR"),
    ("", "https://cdn.test/resume.JPG", "image", "OCR"),
    ("application/pdf", "https://cdn.test/file", "pdf", "PDF"),
    ("", "https://cdn.test/resume.pdf", "pdf", "PDF"),
    ("text/plain; charset=utf-8", "https://cdn.test/file", "text", "Text"),
    ("application/octet-stream", "https://cdn.test/resume.docx", "document", "Document"),
])
def test_detect_resume_kind(content_type, source, kind, method):
    assert detect_resume_kind(content_type, source) == kind
    assert extraction_method(content_type, source) == method


def test_rtf_by_extension_is_text_but_labelled_document():
    assert detect_resume_kind("", "https://cdn.test/resume.rtf") == "text"
    assert extraction_method("", "https://cdn.test/resume.rtf") == "Document"


def test_clean_extracted_text():
    raw = "Hello,   world!\n\n★ Python — dev\t(remote) jane@example.com"
    assert clean_extracted_text(raw) == "Hello, world!  Python  dev (remote) jane@example.com"


def test_clean_extracted_text_keeps_words_split_by_unicode_spaces():
    assert clean_extracted_text("Jane\u00a0Doe\u00a0Senior\u2003Engineer") == "Jane Doe Senior Engineer"


async def test_extract_pdf_text_with_pymupdf():
    text = await FileProcessor().extract_pdf_text(make_pdf())
    assert "Jane Doe" in text
    assert "PostgreSQL" in text


async def test_extract_docx_text():
    text = await FileProcessor().extract_docx_text(make_docx())
    assert "Jane Doe" in text
    assert "Django" in text


async def test_extract_plain_text_decodes_latin1():
    text = await FileProcessor().extract_plain_text("José García\n".encode("latin-1"))
    assert text == "José García"


async def test_extract_plain_text_rejects_empty_file():
    with pytest.raises(ResumeExtractionError):
        await FileProcessor().extract_plain_text(b"   \n")


async def test_extract_dispatches_on_kind():
    processor = FileProcessor()
    assert await processor.extract("text", b"plain resume") == "plain resume"


async def test_extract_image_text_filters_low_confidence():
    class StubReader:
        def readtext(self, image):
            return [
                ([[0, 0]], "Jane", 0.9),
                ([[0, 0]], "smudge", 0.1),
                ([[0, 0]], "Doe", 0.8),
            ]

    from PIL import Image

    buffer = io.BytesIO()
    Image.new("L", (20, 20), color=255).save(buffer, format="PNG")

    processor = FileProcessor()
    processor._ocr_reader = StubReader()
    assert await processor.extract_image_text(buffer.getvalue()) == "Jane Doe"


async def test_extract_image_text_rejects_non_images():
    processor = FileProcessor()
    processor._ocr_reader = object()
    with pytest.raises(ResumeExtractionError):
        await processor.extract_image_text(b"not an image")
