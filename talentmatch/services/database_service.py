"""
Database service for profile and resume analysis records.
Uses asyncpg for a direct PostgreSQL connection to the hosted database.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import asyncpg

from talentmatch.config.settings import settings

# Configure logging
logger = logging.getLogger(__name__)

RESUME_COLUMNS = ("resume_url", "resume_file_path")


class DatabaseService:
    """Service for database operations using asyncpg."""

    def __init__(self, database_url: Optional[str] = None):
        """Initialize database service; the pool is created on first use."""
        self.database_url = database_url or settings.DATABASE_URL
        self.pool = None
        self._init_done = False

    async def _get_pool(self):
        """Get database connection pool."""
        if not self._init_done:
            await self._initialize()
        return self.pool

    async def _initialize(self):
        """Initialize database connection pool and create tables."""
        if not self.database_url:
            raise RuntimeError("DATABASE_URL is not configured")

        try:
            # Parse database URL
            parsed_url = urlparse(self.database_url)

            self.pool = await asyncpg.create_pool(
                host=parsed_url.hostname,
                port=parsed_url.port or 5432,
                user=parsed_url.username,
                password=parsed_url.password,
                database=parsed_url.path.lstrip("/"),
                ssl=settings.DATABASE_SSL or None,
            )

            await self._create_tables()

            self._init_done = True
            logger.info("Database service initialized successfully")

        except Exception as e:
            logger.error(f"Database initialization failed: {str(e)}")
            raise

    async def _create_tables(self):
        """Create the resume_analysis table; profiles belongs to the auth system."""
        async with self.pool.acquire() as conn:
            await conn.execute('''
                CREATE TABLE IF NOT EXISTS resume_analysis (
                    id SERIAL PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    file_name TEXT NOT NULL,
                    analysis TEXT NOT NULL,
                    created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
                )
            ''')
            await conn.execute('CREATE INDEX IF NOT EXISTS idx_resume_analysis_user_id ON resume_analysis(user_id)')

    async def close(self):
        if self.pool is not None:
            await self.pool.close()
            self.pool = None
            self._init_done = False

    async def check_connection(self) -> None:
        """
        Run a trivial query against profiles.

        Raises:
            Exception: Whatever asyncpg raises when the database is unreachable
        """
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            await conn.fetchval('SELECT id FROM profiles LIMIT 1')

    async def profile_has_resume_columns(self) -> bool:
        """Whether profiles carries the resume_url and resume_file_path columns."""
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            rows = await conn.fetch('''
                SELECT column_name
                FROM information_schema.columns
                WHERE table_name = 'profiles' AND column_name = ANY($1::text[])
            ''', list(RESUME_COLUMNS))

        found = {row['column_name'] for row in rows}
        return all(column in found for column in RESUME_COLUMNS)

    async def update_profile_resume(self, user_id: str, resume_url: Optional[str],
                                    file_path: Optional[str]) -> bool:
        """
        Point a profile at its current resume, or clear it with None values.

        Returns:
            bool: True if a profile row was updated
        """
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            result = await conn.execute('''
                UPDATE profiles
                SET resume_url = $1, resume_file_path = $2, updated_at = NOW()
                WHERE id = $3
            ''', resume_url, file_path, user_id)

        updated = result == "UPDATE 1"
        if not updated:
            logger.warning(f"No profile row updated for user {user_id}")
        return updated

    async def clear_profile_resume(self, user_id: str) -> bool:
        return await self.update_profile_resume(user_id, None, None)

    async def save_resume_analysis(self, user_id: str, file_name: str, analysis: str) -> Dict[str, Any]:
        """
        Insert one resume analysis.

        Returns:
            Dict[str, Any]: The stored record including its id
        """
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            record = await conn.fetchrow('''
                INSERT INTO resume_analysis (user_id, file_name, analysis)
                VALUES ($1, $2, $3)
                RETURNING id, user_id, file_name, analysis, created_at
            ''', user_id, file_name, analysis)

        logger.info(f"Resume analysis saved to database with ID: {record['id']}")
        return self._format_analysis(record)

    async def get_resume_analyses(self, user_id: str, limit: int = 10) -> List[Dict[str, Any]]:
        """Most recent analyses for a user, newest first."""
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            records = await conn.fetch('''
                SELECT id, user_id, file_name, analysis, created_at
                FROM resume_analysis
                WHERE user_id = $1
                ORDER BY created_at DESC
                LIMIT $2
            ''', user_id, limit)

        return [self._format_analysis(record) for record in records]

    @staticmethod
    def _format_analysis(record) -> Dict[str, Any]:
        return {
            "id": record['id'],
            "user_id": record['user_id'],
            "file_name": record['file_name'],
            "analysis": record['analysis'],
            "created_at": record['created_at'].isoformat() if record['created_at'] else None,
        }


database_service = DatabaseService()


def get_database_service() -> DatabaseService:
    """FastAPI dependency returning the shared database service."""
    return database_service
