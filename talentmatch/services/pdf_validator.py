"""
Pre-flight checks for PDF resumes before they are uploaded or parsed.
"""

import re
from typing import Optional

from talentmatch.config.settings import settings
from talentmatch.models.schemas import PDFValidationInfo, PDFValidationResult

HEADER_SCAN_BYTES = 1024
_VERSION = re.compile(r"%PDF-(\d\.\d)")


def validate_pdf(file_content: bytes, filename: str, content_type: Optional[str] = None) -> PDFValidationResult:
    """
    Inspect a PDF's size, header, encryption and text markers.

    Only the first kilobyte is scanned, so a missing font or text marker
    is a warning rather than an error.

    Args:
        file_content (bytes): Whole file content
        filename (str): Original file name
        content_type (str): MIME type reported by the uploader

    Returns:
        PDFValidationResult: Validity flag, errors, warnings and file info
    """
    content_type = content_type or ""
    size = len(file_content)
    result = PDFValidationResult(
        is_valid=True,
        info=PDFValidationInfo(size=size, type=content_type),
    )

    if size > settings.MAX_PDF_VALIDATION_SIZE:
        result.errors.append("File size exceeds 10MB limit")
        result.is_valid = False

    if size == 0:
        result.errors.append("File is empty")
        result.is_valid = False

    if "pdf" not in content_type and not (filename or "").lower().endswith(".pdf"):
        result.errors.append("File is not a PDF")
        result.is_valid = False

    head = file_content[:HEADER_SCAN_BYTES]
    header = head[:8].decode("utf-8", errors="replace")

    if not header.startswith("%PDF-"):
        result.errors.append("File does not have a valid PDF header")
        result.is_valid = False
        return result

    version_match = _VERSION.match(header)
    if version_match:
        result.info.version = version_match.group(1)

    content = head.decode("utf-8", errors="replace")

    if "/Encrypt" in content or "/Filter/Standard" in content:
        result.errors.append("PDF appears to be password-protected or encrypted")
        result.info.is_encrypted = True
        result.is_valid = False

    result.info.has_text = "/Type/Font" in content or "BT" in content or "Tj" in content
    if not result.info.has_text:
        result.warnings.append("PDF may not contain searchable text - OCR may be required")

    if size < HEADER_SCAN_BYTES:
        result.warnings.append("File is very small - may not contain sufficient content")

    if result.info.version and float(result.info.version) > 2.0:
        result.warnings.append("PDF version is very new - compatibility may vary")

    return result


def validation_message(result: PDFValidationResult) -> str:
    """One human-readable line summarising a validation result."""
    if not result.is_valid:
        return ". ".join(result.errors)
    if result.warnings:
        return ". ".join(result.warnings)
    return "PDF file looks good for processing"
