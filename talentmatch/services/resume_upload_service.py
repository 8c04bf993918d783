"""
Resume upload service.
Stores a candidate's resume in the object store and points their profile at
it. Failures come back as ResumeUploadResult messages meant for end users.
"""

import time
import logging
from typing import Optional

from fastapi import Depends

from talentmatch.config.settings import settings
from talentmatch.models.schemas import DeleteResumeResult, ResumeUploadResult
from talentmatch.services.database_service import DatabaseService, get_database_service
from talentmatch.services.errors import StorageError
from talentmatch.services.storage_service import StorageService, clean_resume_path, get_storage_service

logger = logging.getLogger(__name__)


def build_resume_path(user_id: str, filename: str, timestamp_ms: Optional[int] = None) -> str:
    """
    Unique storage path for a new resume upload.

    Args:
        user_id (str): Owner of the resume
        filename (str): Original file name; only its extension is kept
        timestamp_ms (int): Upload time in epoch milliseconds

    Returns:
        str: e.g. resumes/resume_42_1700000000000.pdf
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    extension = filename.rsplit(".", 1)[-1]
    return f"{settings.RESUME_FOLDER}/resume_{user_id}_{timestamp_ms}.{extension}"


def _is_missing_column_error(message: str) -> bool:
    return "column" in message and "does not exist" in message


class ResumeUploadService:
    """Upload, replace and delete resumes for a user profile."""

    def __init__(self, storage: StorageService, database: DatabaseService):
        self.storage = storage
        self.database = database

    async def upload_resume(self, user_id: str, filename: str, content: bytes,
                            content_type: str) -> ResumeUploadResult:
        """
        Validate, store and register a resume.

        Args:
            user_id (str): Profile id of the uploader
            filename (str): Original file name
            content (bytes): File content
            content_type (str): MIME type reported by the uploader

        Returns:
            ResumeUploadResult: Public URL and storage path, or an error message
        """
        try:
            logger.info(f"Starting resume upload for user: {user_id}")
            logger.info(f"File details: name={filename}, size={len(content)}, type={content_type}")

            if content_type not in settings.ALLOWED_RESUME_MIME_TYPES:
                logger.error(f"Invalid file type: {content_type}")
                return ResumeUploadResult(
                    success=False,
                    error="Please upload a PDF or Word document (.pdf, .doc, .docx)"
                )

            if len(content) > settings.MAX_RESUME_UPLOAD_SIZE:
                logger.error(f"File too large: {len(content)} bytes")
                return ResumeUploadResult(success=False, error="File size must be less than 5MB")

            file_path = build_resume_path(user_id, filename)
            logger.info(f"Upload path: {file_path}")

            upload_error = await self._store(file_path, content, content_type)
            if upload_error:
                return ResumeUploadResult(success=False, error=upload_error)

            public_url = await self.storage.public_url(file_path)
            logger.info(f"Public URL generated: {public_url}")

            # Test database schema before updating profile
            try:
                if not await self.database.profile_has_resume_columns():
                    logger.error("Database schema error - missing resume columns on profiles")
                    return ResumeUploadResult(
                        success=False,
                        error="Database not configured for resume uploads. Please contact support to run the migration."
                    )
            except Exception as e:
                logger.error(f"Schema test failed: {str(e)}")

            try:
                await self.database.update_profile_resume(user_id, public_url, file_path)
            except Exception as e:
                message = str(e)
                logger.error(f"Profile update error: {message}")
                logger.warning("File uploaded but profile update failed")
                if _is_missing_column_error(message):
                    return ResumeUploadResult(
                        success=False,
                        error="Database schema missing resume fields. Please contact support."
                    )
                return ResumeUploadResult(success=False, error=f"Profile update failed: {message}")

            logger.info("Resume upload completed successfully")
            return ResumeUploadResult(success=True, file_url=public_url, file_path=file_path)

        except Exception as e:
            logger.error(f"Resume upload error: {str(e)}", exc_info=True)
            return ResumeUploadResult(success=False, error="An unexpected error occurred. Please try again.")

    async def _store(self, file_path: str, content: bytes, content_type: str) -> Optional[str]:
        """Upload the file, replacing on a duplicate. Returns an error message or None."""
        try:
            await self.storage.upload(file_path, content, content_type, upsert=False)
            logger.info(f"File uploaded successfully: {file_path}")
            return None
        except StorageError as e:
            message = str(e)
            logger.error(f"Upload error details: {message}")

            if "Bucket not found" in message:
                return "Document storage not found. Please contact support to set up the storage bucket."

            if "duplicate" in message:
                logger.info("File exists, trying to replace...")
                try:
                    await self.storage.upload(file_path, content, content_type, upsert=True)
                    return None
                except StorageError as replace_error:
                    logger.error(f"Replace upload error: {str(replace_error)}")
                    return "Failed to replace existing file. Please try again."

            if "policy" in message:
                return "Permission denied. Please contact support to configure storage policies."

            return f"Upload failed: {message}"

    async def delete_resume(self, file_path: str, user_id: str) -> DeleteResumeResult:
        """
        Remove a resume file and clear the profile's resume columns.

        A failing profile update is logged only; the file is already gone.
        """
        try:
            try:
                await self.storage.remove([file_path])
            except StorageError as e:
                logger.error(f"Delete error: {str(e)}")
                return DeleteResumeResult(success=False, error="Failed to delete file")

            try:
                await self.database.clear_profile_resume(user_id)
            except Exception as e:
                logger.error(f"Profile update error: {str(e)}")

            return DeleteResumeResult(success=True)

        except Exception as e:
            logger.error(f"Resume delete error: {str(e)}", exc_info=True)
            return DeleteResumeResult(success=False, error="An unexpected error occurred")

    async def download_resume(self, file_path: str) -> bytes:
        """
        Raw bytes of a stored resume.

        Raises:
            StorageError: If the object cannot be downloaded
        """
        return await self.storage.download(clean_resume_path(file_path))


def get_resume_upload_service(
    storage: StorageService = Depends(get_storage_service),
    database: DatabaseService = Depends(get_database_service),
) -> ResumeUploadService:
    return ResumeUploadService(storage, database)
