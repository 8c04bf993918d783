"""
File processing service for resume text extraction.
Extracts text from PDF, Word, plain text and image resumes. Library
extraction is tried first; for PDFs and Word files a best-effort byte scan
takes over when the library produces too little text.
"""

import io
import re
import logging
import zipfile
from typing import Optional

import fitz  # PyMuPDF
import docx2txt
import numpy as np
from PIL import Image

from talentmatch.config.settings import settings
from talentmatch.services.errors import ResumeExtractionError

# Configure logging
logger = logging.getLogger(__name__)

PDF_PLACEHOLDER = "Unable to extract text from PDF. Please ensure the file is a valid PDF document."
DOCX_PLACEHOLDER = "Unable to extract text from DOCX. Please ensure the file is a valid Word document."

SCRAPED_TEXT_LIMIT = 2000

# PDF content stream operators
_TEXT_BLOCK = re.compile(r"BT\s*(.*?)\s*ET", re.DOTALL)
_BLOCK_MARKERS = re.compile(r"BT|ET")
_FONT_SELECT = re.compile(r"/\w+\s+\d+\s+Tf", re.ASCII)
_TEXT_POSITION = re.compile(r"\d+\s+\d+\s+Td", re.ASCII)
_FILL_COLOUR = re.compile(r"\d+\.\d+\s+\d+\.\d+\s+\d+\.\d+\s+rg", re.ASCII)
_SHOW_TEXT = re.compile(r"\(([^)]+)\)\s*Tj")
_SHOW_TEXT_ARRAY = re.compile(r"\[([^\]]+)\]\s*TJ")
_LETTER_RUN = re.compile(r"[A-Za-z\s]{20,}")

# Word documents
_WORD_TEXT_ELEMENT = re.compile(r"<w:t[^>]*>([^<]+)</w:t>")
_READABLE_RUN = re.compile(r"[A-Za-z][A-Za-z\s,.-]{10,}")

_IMAGE_SUFFIX = re.compile(r"\.(jpg|jpeg|png|gif|bmp|webp)$")
_TEXT_SUFFIX = re.compile(r"\.(txt|rtf)$")
_DISALLOWED_CHARS = re.compile(r"[^\w\s.,;:!?\-@()]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")


def scrape_pdf_text(file_content: bytes) -> str:
    """
    Pull readable text out of raw PDF bytes by scanning content streams.

    This is not a PDF parser: it only sees uncompressed BT/ET text blocks,
    and otherwise falls back to long runs of letters.

    Args:
        file_content (bytes): Raw PDF bytes

    Returns:
        str: Best-effort text, or PDF_PLACEHOLDER when scanning fails
    """
    try:
        text = file_content.decode("utf-8", errors="replace")

        blocks = [match.group(0) for match in _TEXT_BLOCK.finditer(text)]
        if blocks:
            extracted = ""
            for block in blocks:
                clean = _BLOCK_MARKERS.sub("", block)
                clean = _FONT_SELECT.sub("", clean)
                clean = _TEXT_POSITION.sub("", clean)
                clean = _FILL_COLOUR.sub("", clean)
                clean = _SHOW_TEXT.sub(r"\1 ", clean)
                clean = _SHOW_TEXT_ARRAY.sub(r"\1 ", clean)
                extracted += clean.strip() + " "
            return extracted.strip()

        return " ".join(_LETTER_RUN.findall(text))[:SCRAPED_TEXT_LIMIT]
    except Exception as e:
        logger.error(f"PDF content stream scan failed: {str(e)}")
        return PDF_PLACEHOLDER


def scrape_docx_text(file_content: bytes) -> str:
    """
    Best-effort Word text without docx2txt.

    Reads <w:t> runs from word/document.xml when the bytes are a zip archive,
    otherwise joins readable letter runs from the raw bytes.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(file_content)) as archive:
            xml = archive.read("word/document.xml").decode("utf-8", errors="replace")
        runs = [run for run in _WORD_TEXT_ELEMENT.findall(xml) if run.strip()]
        if runs:
            return " ".join(runs).strip()
    except (zipfile.BadZipFile, KeyError):
        pass

    text = file_content.decode("utf-8", errors="replace")
    runs = _READABLE_RUN.findall(text)
    if runs:
        return " ".join(runs)[:SCRAPED_TEXT_LIMIT]
    return DOCX_PLACEHOLDER


def is_placeholder(text: Optional[str]) -> bool:
    return text in (PDF_PLACEHOLDER, DOCX_PLACEHOLDER)


def detect_resume_kind(content_type: str, source: str) -> str:
    """
    Decide how to read a resume from its content type and URL or path.

    Returns:
        str: One of "image", "pdf", "text" or "document"
    """
    content_type = (content_type or "").lower()
    source = (source or "").lower()

    if "image/" in content_type or _IMAGE_SUFFIX.search(source):
        return "image"
    if "application/pdf" in content_type or ".pdf" in source:
        return "pdf"
    if "text/" in content_type or _TEXT_SUFFIX.search(source):
        return "text"
    return "document"


def extraction_method(content_type: str, source: str) -> str:
    """Label reported to callers for the extraction path that was used."""
    content_type = (content_type or "").lower()
    source = (source or "").lower()

    if "image/" in content_type or _IMAGE_SUFFIX.search(source):
        return "OCR"
    if "application/pdf" in content_type or ".pdf" in source:
        return "PDF"
    if "text/" in content_type:
        return "Text"
    return "Document"


def clean_extracted_text(text: str) -> str:
    """Collapse whitespace (Unicode spaces included) to single spaces, then strip unusual characters."""
    text = _WHITESPACE.sub(" ", text or "")
    return _DISALLOWED_CHARS.sub("", text).strip()


class FileProcessor:
    """Service for extracting text content from resume files."""

    def __init__(self):
        # EasyOCR pulls in torch; the reader is built on the first image only
        self._ocr_reader = None

    async def extract_pdf_text(self, file_content: bytes) -> str:
        """
        Extract text from a PDF using PyMuPDF, scanning raw content streams
        when PyMuPDF fails or finds too little text.

        Args:
            file_content (bytes): PDF file content

        Returns:
            str: Extracted text content (may be PDF_PLACEHOLDER)
        """
        text = ""
        try:
            pages = []
            with fitz.open(stream=file_content, filetype="pdf") as pdf_document:
                for page in pdf_document:
                    page_text = page.get_text()
                    if page_text.strip():
                        pages.append(page_text)
            text = "\n".join(pages).strip()
        except Exception as e:
            logger.warning(f"PyMuPDF could not read PDF: {str(e)}")

        if len(text) >= settings.MIN_EXTRACTED_TEXT_LENGTH:
            logger.info(f"Successfully extracted text from PDF: {len(text)} characters")
            return text

        logger.info("PDF text too short, scanning content streams instead")
        return scrape_pdf_text(file_content)

    async def extract_docx_text(self, file_content: bytes) -> str:
        """
        Extract text from a DOCX/DOC file using docx2txt, with a raw scan as
        the fallback.

        Args:
            file_content (bytes): Word file content

        Returns:
            str: Extracted text content (may be DOCX_PLACEHOLDER)
        """
        try:
            text = docx2txt.process(io.BytesIO(file_content))
            if text and len(text.strip()) >= settings.MIN_EXTRACTED_TEXT_LENGTH:
                logger.info(f"Successfully extracted text from DOCX: {len(text.strip())} characters")
                return text.strip()
        except Exception as e:
            logger.warning(f"docx2txt could not read document: {str(e)}")

        logger.info("DOCX text too short, scanning document bytes instead")
        return scrape_docx_text(file_content)

    async def extract_plain_text(self, file_content: bytes) -> str:
        """
        Decode a plain text or RTF resume.

        Raises:
            ResumeExtractionError: If the file holds no text
        """
        try:
            text = file_content.decode("utf-8")
        except UnicodeDecodeError:
            text = file_content.decode("latin-1")

        if not text.strip():
            raise ResumeExtractionError("No text content found in the file")

        logger.info(f"Successfully extracted text from text file: {len(text)} characters")
        return text.strip()

    async def extract_image_text(self, file_content: bytes) -> str:
        """
        Extract text from an image resume using EasyOCR.

        Raises:
            ResumeExtractionError: If OCR finds no confident text
        """
        try:
            image = Image.open(io.BytesIO(file_content))
            if image.mode != "RGB":
                image = image.convert("RGB")
            results = self._get_ocr_reader().readtext(np.array(image))
        except Exception as e:
            logger.error(f"Error processing image: {str(e)}")
            raise ResumeExtractionError(f"Failed to process image file: {str(e)}")

        text = " ".join(
            text for (_bbox, text, prob) in results
            if prob > settings.OCR_CONFIDENCE_THRESHOLD
        ).strip()

        if not text:
            raise ResumeExtractionError("No text content could be extracted from the image")

        logger.info(f"Successfully extracted text from image using EasyOCR: {len(text)} characters")
        return text

    async def extract(self, kind: str, file_content: bytes) -> str:
        """Extract text for a kind returned by detect_resume_kind."""
        if kind == "image":
            return await self.extract_image_text(file_content)
        if kind == "pdf":
            return await self.extract_pdf_text(file_content)
        if kind == "text":
            return await self.extract_plain_text(file_content)
        return await self.extract_docx_text(file_content)

    def _get_ocr_reader(self):
        if self._ocr_reader is None:
            import easyocr

            logger.info("Initializing EasyOCR...")
            self._ocr_reader = easyocr.Reader([settings.OCR_LANGUAGE], gpu=settings.USE_GPU)
            logger.info("EasyOCR initialized successfully")
        return self._ocr_reader


file_processor = FileProcessor()


def get_file_processor() -> FileProcessor:
    return file_processor
