"""
Setup check for the hosted database and storage.
Reports each step with the SQL an operator needs to run when something is missing.
"""

import logging
from typing import Callable, List

from talentmatch.config.settings import settings
from talentmatch.models.schemas import SetupCheckResult
from talentmatch.services.database_service import DatabaseService, get_database_service
from talentmatch.services.errors import StorageError
from talentmatch.services.storage_service import StorageService, get_storage_service

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"
MISSING = "missing"

PROFILE_COLUMNS_SQL = """
-- Add resume fields to profiles table
ALTER TABLE profiles ADD COLUMN IF NOT EXISTS resume_url TEXT;
ALTER TABLE profiles ADD COLUMN IF NOT EXISTS resume_file_path TEXT;"""

BUCKET_SQL = """
-- Create documents bucket (run in Supabase SQL Editor)
INSERT INTO storage.buckets (id, name, public, file_size_limit, allowed_mime_types)
VALUES (
  '{bucket}',
  '{bucket}',
  true,
  52428800,
  ARRAY['application/pdf', 'application/msword', 'application/vnd.openxmlformats-officedocument.wordprocessingml.document']
);"""

STORAGE_POLICY_SQL = """
-- Storage policies (run in Supabase dashboard)
CREATE POLICY "Users can upload resumes" ON storage.objects
FOR INSERT WITH CHECK (bucket_id = '{bucket}' AND (storage.foldername(name))[1] = '{folder}');

CREATE POLICY "Users can view resumes" ON storage.objects
FOR SELECT USING (bucket_id = '{bucket}' AND (storage.foldername(name))[1] = '{folder}');"""


class SetupCheckService:
    """Runs the database and storage checks in order."""

    def __init__(self, database: DatabaseService,
                 storage_factory: Callable[[], StorageService] = get_storage_service):
        self.database = database
        self.storage_factory = storage_factory

    async def run_setup_checks(self) -> List[SetupCheckResult]:
        """
        Check database connectivity, profile schema, bucket and bucket permissions.

        Stops after a failed database connection; the permission check only
        runs when the bucket was found.
        """
        results: List[SetupCheckResult] = []

        try:
            await self.database.check_connection()
            results.append(SetupCheckResult(
                step="Database Connection", status=SUCCESS,
                message="Successfully connected to the database",
            ))
        except Exception as e:
            results.append(SetupCheckResult(
                step="Database Connection", status=ERROR,
                message=f"Connection failed: {str(e)}",
            ))
            return results

        results.append(await self._check_profile_schema())

        bucket_result = await self._check_bucket()
        results.append(bucket_result)

        if bucket_result.status == SUCCESS:
            results.append(await self._check_permissions())

        for result in results:
            log = logger.info if result.status == SUCCESS else logger.warning
            log(f"Setup check - {result.step}: {result.status} - {result.message}")

        return results

    async def _check_profile_schema(self) -> SetupCheckResult:
        step = "Database Schema"
        try:
            if await self.database.profile_has_resume_columns():
                return SetupCheckResult(step=step, status=SUCCESS, message="Resume fields exist in profiles table")
            return SetupCheckResult(
                step=step, status=MISSING,
                message="Resume fields missing from profiles table",
                sql_to_run=PROFILE_COLUMNS_SQL,
            )
        except Exception as e:
            return SetupCheckResult(step=step, status=ERROR, message=f"Schema check failed: {str(e)}")

    async def _check_bucket(self) -> SetupCheckResult:
        bucket = settings.STORAGE_BUCKET
        step = f"Storage Bucket '{bucket}'"
        try:
            storage = self.storage_factory()
            await storage.list("", limit=1)
        except StorageError as e:
            if "bucket not found" in str(e).lower():
                return SetupCheckResult(
                    step=step, status=MISSING,
                    message=f"The '{bucket}' bucket was not found. Please create it.",
                    sql_to_run=BUCKET_SQL.format(bucket=bucket),
                )
            return SetupCheckResult(
                step=f"{step} Access", status=ERROR,
                message=f"Failed to access '{bucket}' bucket: {str(e)}. Check RLS policies for bucket listing or network issues.",
            )
        except Exception as e:
            return SetupCheckResult(
                step=step, status=ERROR,
                message=f"Error during '{bucket}' bucket check: {str(e)}",
            )

        return SetupCheckResult(step=step, status=SUCCESS, message=f"'{bucket}' bucket exists and is accessible.")

    async def _check_permissions(self) -> SetupCheckResult:
        step = "Storage Permissions"
        try:
            await self.storage_factory().list(settings.RESUME_FOLDER, limit=1)
        except StorageError:
            return SetupCheckResult(
                step=step, status=MISSING,
                message="Storage policies not configured",
                sql_to_run=STORAGE_POLICY_SQL.format(bucket=settings.STORAGE_BUCKET, folder=settings.RESUME_FOLDER),
            )
        except Exception as e:
            return SetupCheckResult(step=step, status=ERROR, message=f"Permissions check error: {str(e)}")

        return SetupCheckResult(step=step, status=SUCCESS, message="Storage policies working correctly")


def get_setup_check_service() -> SetupCheckService:
    return SetupCheckService(get_database_service())
