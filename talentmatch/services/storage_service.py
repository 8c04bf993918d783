"""
Storage service for resume files in the hosted object store.
Wraps one Supabase Storage bucket; vendor errors are re-raised as
StorageError with the vendor's message so callers can match on it.
"""

import asyncio
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from talentmatch.config.settings import settings
from talentmatch.services.errors import StorageError

logger = logging.getLogger(__name__)


def clean_resume_path(file_name: str) -> str:
    """
    Normalise a stored resume path to exactly one leading resumes/ folder.

    Args:
        file_name (str): Path as sent by the client

    Returns:
        str: Path inside the bucket, e.g. resumes/resume_42_1700000000000.pdf
    """
    folder = f"{settings.RESUME_FOLDER}/"
    doubled = f"{folder}{folder}"

    clean_path = file_name
    if clean_path.startswith(doubled):
        clean_path = clean_path.replace(doubled, folder, 1)
    if not clean_path.startswith(folder):
        clean_path = f"{folder}{clean_path}"
    return clean_path


def _error_message(error: Exception) -> str:
    message = getattr(error, "message", None)
    if message:
        return str(message)
    if error.args and isinstance(error.args[0], dict):
        return str(error.args[0].get("message") or error.args[0])
    return str(error)


class StorageService:
    """Service for file operations against one storage bucket."""

    def __init__(self, client: Optional[Client] = None, bucket: Optional[str] = None):
        if client is None:
            if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
                raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required")
            client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)

        self.client = client
        self.bucket_name = bucket or settings.STORAGE_BUCKET
        logger.info(f"Storage service initialized for bucket '{self.bucket_name}'")

    @property
    def bucket(self):
        return self.client.storage.from_(self.bucket_name)

    async def _run(self, operation: str, func, *args, **kwargs) -> Any:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except Exception as e:
            message = _error_message(e)
            logger.error(f"Storage {operation} failed: {message}")
            raise StorageError(message) from e

    async def upload(self, path: str, content: bytes, content_type: str, upsert: bool = False) -> str:
        """
        Upload bytes to the bucket.

        Raises:
            StorageError: If the store rejects the upload
        """
        file_options = {
            "content-type": content_type,
            "cache-control": settings.STORAGE_CACHE_CONTROL,
            "upsert": "true" if upsert else "false",
        }
        await self._run("upload", self.bucket.upload, path, content, file_options)
        logger.info(f"Uploaded {len(content)} bytes to {self.bucket_name}/{path}")
        return path

    async def download(self, path: str) -> bytes:
        data = await self._run("download", self.bucket.download, path)
        logger.info(f"Downloaded {self.bucket_name}/{path}, size: {len(data)}")
        return data

    async def remove(self, paths: List[str]) -> None:
        await self._run("remove", self.bucket.remove, paths)
        logger.info(f"Removed {len(paths)} object(s) from {self.bucket_name}")

    async def public_url(self, path: str) -> str:
        url = await self._run("public url", self.bucket.get_public_url, path)
        return str(url).rstrip("?")

    async def list(self, folder: str = "", limit: int = 1) -> List[Dict[str, Any]]:
        return await self._run("list", self.bucket.list, folder, {"limit": limit, "offset": 0})


@lru_cache()
def get_storage_service() -> StorageService:
    """FastAPI dependency returning the shared storage service."""
    return StorageService()
