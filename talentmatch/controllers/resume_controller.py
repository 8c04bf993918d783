"""
Resume controller: text extraction, AI analysis, upload, delete, download
and PDF pre-flight validation.
"""

import os
import logging
import mimetypes

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from talentmatch.config.settings import settings
from talentmatch.controllers.responses import error_response
from talentmatch.middleware.rate_limit import limiter
from talentmatch.models.schemas import (
    DeleteResumeRequest,
    DeleteResumeResult,
    ExtractTextRequest,
    ExtractTextResponse,
    ParseResumeRequest,
    ParseResumeResponse,
    PDFValidationResult,
    ResumeUploadResult,
)
from talentmatch.services.database_service import DatabaseService, get_database_service
from talentmatch.services.errors import ServiceError, StorageError
from talentmatch.services.pdf_validator import validate_pdf, validation_message
from talentmatch.services.resume_analysis_service import ResumeAnalysisService, get_resume_analysis_service
from talentmatch.services.resume_upload_service import ResumeUploadService, get_resume_upload_service
from talentmatch.services.text_extraction_service import TextExtractionService, get_text_extraction_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix=settings.API_PREFIX, tags=["Resumes"])


@router.post("/extract-resume-text", response_model=ExtractTextResponse)
@limiter.limit(settings.AI_RATE_LIMIT)
async def extract_resume_text(
    request: Request,
    body: ExtractTextRequest,
    service: TextExtractionService = Depends(get_text_extraction_service),
):
    """
    Fetch a resume from a URL and return its cleaned text.

    Images go through OCR, PDFs and Word files through their extractors and
    text files are decoded directly.
    """
    try:
        result = await service.extract_from_url(body.resume_url)
        return ExtractTextResponse(**result)

    except HTTPException:
        raise
    except ServiceError as e:
        return error_response(e.status_code, e.message)
    except Exception as e:
        logger.error(f"Error in extract-resume-text function: {str(e)}")
        return error_response(500, str(e) or "Failed to extract text from resume")


@router.post("/parse-resume-ai", response_model=ParseResumeResponse)
@limiter.limit(settings.AI_RATE_LIMIT)
async def parse_resume_ai(
    request: Request,
    body: ParseResumeRequest,
    service: ResumeAnalysisService = Depends(get_resume_analysis_service),
):
    """Summarise a stored resume with the model and save the analysis."""
    try:
        result = await service.analyze_stored_resume(body.user_id, body.file_name)
        logger.info(f"Analysis saved successfully: {result['analysis_id']}")
        return ParseResumeResponse(success=True, **result)

    except HTTPException:
        raise
    except ServiceError as e:
        return error_response(e.status_code, e.message, with_success=True)
    except Exception as e:
        logger.error(f"Function error: {str(e)}", exc_info=True)
        return error_response(500, str(e) or "Failed to parse resume", with_success=True)


@router.post("/resumes/upload", response_model=ResumeUploadResult)
async def upload_resume(
    file: UploadFile = File(...),
    user_id: str = Form(...),
    service: ResumeUploadService = Depends(get_resume_upload_service),
):
    """
    Store a resume and link it to the user's profile.

    Failures answer 400 with ``success: false`` and a user-facing message.
    """
    content = await file.read()
    result = await service.upload_resume(user_id, file.filename or "", content, file.content_type or "")

    if not result.success:
        return JSONResponse(status_code=400, content=result.model_dump(by_alias=True))
    return result


@router.delete("/resumes", response_model=DeleteResumeResult)
async def delete_resume(
    body: DeleteResumeRequest,
    service: ResumeUploadService = Depends(get_resume_upload_service),
):
    """Remove a resume file and clear it from the profile."""
    result = await service.delete_resume(body.file_path, body.user_id)

    if not result.success:
        return JSONResponse(status_code=400, content=result.model_dump())
    return result


@router.get("/resumes/download")
async def download_resume(
    file_path: str = Query(..., description="Storage path of the resume"),
    service: ResumeUploadService = Depends(get_resume_upload_service),
):
    """Stream a stored resume back as an attachment."""
    try:
        content = await service.download_resume(file_path)
    except StorageError as e:
        logger.error(f"Download error for {file_path}: {str(e)}")
        return error_response(404, f"Failed to download file: {str(e)}", with_success=True)

    filename = os.path.basename(file_path)
    media_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/resumes/analyses/{user_id}")
async def get_resume_analyses(
    user_id: str,
    limit: int = Query(10, ge=1, le=100),
    database: DatabaseService = Depends(get_database_service),
):
    """Most recent saved analyses for a user."""
    try:
        analyses = await database.get_resume_analyses(user_id, limit)
        return {"success": True, "analyses": analyses}
    except Exception as e:
        logger.error(f"Error fetching analyses for {user_id}: {str(e)}")
        return error_response(500, f"Failed to fetch analyses: {str(e)}", with_success=True)


@router.post("/resumes/validate-pdf", response_model=PDFValidationResult)
async def validate_pdf_file(file: UploadFile = File(...)):
    """Pre-flight check of a PDF before upload or parsing."""
    content = await file.read()
    result = validate_pdf(content, file.filename or "", file.content_type)
    result.message = validation_message(result)

    logger.info(f"PDF validation for {file.filename}: valid={result.is_valid}")
    return result
