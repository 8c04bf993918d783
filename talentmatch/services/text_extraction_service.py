"""
Resume text extraction from a URL.
Fetches the file, picks an extractor from the content type and URL, and
returns cleaned text.
"""

import logging
from typing import Any, Dict, Tuple

import aiohttp
from fastapi import Depends

from talentmatch.config.settings import settings
from talentmatch.services.errors import BadRequestError, ResumeExtractionError
from talentmatch.services.file_processor import (
    FileProcessor,
    clean_extracted_text,
    detect_resume_kind,
    extraction_method,
    get_file_processor,
    is_placeholder,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_ERRORS = {
    "pdf": "PDF text extraction failed. Please try uploading the resume as a text file (.txt) or ensure the PDF contains selectable text.",
    "document": "Document text extraction failed. Please try uploading the resume as a text file (.txt) or PDF.",
}

INSUFFICIENT_TEXT_ERROR = (
    "Insufficient text extracted from resume. Please ensure the file contains readable text "
    "or try uploading a different format."
)

FILE_TOO_LARGE_ERROR = "Resume file is too large to process."


class TextExtractionService:
    """Extract resume text from files reachable over HTTP."""

    def __init__(self, processor: FileProcessor):
        self.processor = processor

    async def fetch(self, url: str) -> Tuple[bytes, str]:
        """
        Download a file.

        Returns:
            Tuple[bytes, str]: File content and its Content-Type header

        Raises:
            ResumeExtractionError: On a non-2xx response or a body over MAX_FETCH_SIZE
        """
        limit = settings.MAX_FETCH_SIZE
        timeout = aiohttp.ClientTimeout(total=settings.FETCH_TIMEOUT)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url) as response:
                if response.status >= 300:
                    raise ResumeExtractionError(f"Failed to fetch file: {response.status} {response.reason}")
                if response.content_length is not None and response.content_length > limit:
                    raise ResumeExtractionError(FILE_TOO_LARGE_ERROR)

                content = bytearray()
                async for chunk in response.content.iter_chunked(64 * 1024):
                    content.extend(chunk)
                    if len(content) > limit:
                        raise ResumeExtractionError(FILE_TOO_LARGE_ERROR)

                content_type = response.headers.get("Content-Type", "")
                return bytes(content), content_type

    async def extract_from_url(self, resume_url: str) -> Dict[str, Any]:
        """
        Fetch a resume and extract its text.

        Args:
            resume_url (str): Public URL of the resume

        Returns:
            Dict[str, Any]: text, extractionMethod, contentType

        Raises:
            BadRequestError: If no URL is given
            ResumeExtractionError: If the file cannot be fetched or read
        """
        if not resume_url:
            raise BadRequestError("Resume URL is required")

        logger.info(f"Starting text extraction from: {resume_url}")

        content, content_type = await self.fetch(resume_url)
        logger.info(f"File info - Size: {len(content)} Content-Type: {content_type}")

        kind = detect_resume_kind(content_type, resume_url)
        logger.info(f"Processing as {kind} file")

        text = await self.processor.extract(kind, content)
        if is_placeholder(text):
            raise ResumeExtractionError(PLACEHOLDER_ERRORS.get(kind, INSUFFICIENT_TEXT_ERROR))

        text = clean_extracted_text(text)
        if len(text) < settings.MIN_EXTRACTED_TEXT_LENGTH:
            raise ResumeExtractionError(INSUFFICIENT_TEXT_ERROR)

        logger.info(f"Text extraction completed, final length: {len(text)}")
        logger.info(f"Text preview: {text[:200]}...")

        return {
            "text": text,
            "extractionMethod": extraction_method(content_type, resume_url),
            "contentType": content_type,
        }


def get_text_extraction_service(
    processor: FileProcessor = Depends(get_file_processor),
) -> TextExtractionService:
    return TextExtractionService(processor)
