"""
Async client for the TalentMatch AI API.
Each call returns a result object with ``success`` and ``error`` instead of
raising, so callers can show the message directly.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import aiohttp
from pydantic import BaseModel, Field

from talentmatch.models.schemas import AssistantRequest, JobListing, JobMatch, ResumeInsights

logger = logging.getLogger(__name__)

CONNECTION_ERROR = "Failed to connect to AI service"


class ResumeTextResult(BaseModel):
    success: bool
    text: Optional[str] = None
    extraction_method: Optional[str] = None
    content_type: Optional[str] = None
    error: Optional[str] = None


class AIJobMatchResult(BaseModel):
    success: bool
    matches: List[JobMatch] = Field(default_factory=list)
    analysis: Optional[ResumeInsights] = None
    error: Optional[str] = None


class AIAssistantResult(BaseModel):
    success: bool
    response: Optional[str] = None
    error: Optional[str] = None


class ParseResumeResult(BaseModel):
    success: bool
    analysis_id: Optional[int] = None
    analysis: Optional[str] = None
    insights: Optional[ResumeInsights] = None
    error: Optional[str] = None


class TalentMatchClient:
    """Thin aiohttp wrapper over the /api/v1 endpoints."""

    def __init__(self, base_url: str = "http://localhost:8000", api_prefix: str = "/api/v1",
                 timeout: float = 120.0, headers: Optional[Dict[str, str]] = None):
        self.base_url = base_url.rstrip("/")
        self.api_prefix = api_prefix
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.headers = headers or {}
        self.session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _post(self, path: str, payload: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
        """POST JSON and return the status with the decoded body."""
        if not self.session:
            self.session = aiohttp.ClientSession(headers=self.headers, timeout=self.timeout)

        url = f"{self.base_url}{self.api_prefix}{path}"
        async with self.session.post(url, json=payload) as response:
            data = await response.json(content_type=None)
            return response.status, data or {}

    @staticmethod
    def _error(status: int, data: Dict[str, Any], default: str) -> Optional[str]:
        if status < 400:
            return None
        return data.get("error") or default

    async def extract_resume_text(self, resume_url: str) -> ResumeTextResult:
        """Extract the text of a resume reachable at ``resume_url``."""
        try:
            status, data = await self._post("/extract-resume-text", {"resumeUrl": resume_url})
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Resume text extraction error: {str(e)}")
            return ResumeTextResult(success=False, error=f"Failed to extract text from resume: {str(e)}")

        error = self._error(status, data, "Failed to extract text from resume")
        if error:
            return ResumeTextResult(success=False, error=error)
        if not data.get("text"):
            return ResumeTextResult(success=False, error="No text extracted from resume")

        logger.info(f"Resume text extracted: method={data.get('extractionMethod')}, length={len(data['text'])}")
        return ResumeTextResult(
            success=True,
            text=data["text"],
            extraction_method=data.get("extractionMethod"),
            content_type=data.get("contentType"),
        )

    async def get_job_matches(self, resume_text: str, job_listings: List[JobListing]) -> AIJobMatchResult:
        """Ask for the three best-matching jobs."""
        payload = {
            "resumeText": resume_text,
            "jobListings": [job.model_dump() for job in job_listings],
        }
        try:
            status, data = await self._post("/ai-job-match", payload)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"AI job match service error: {str(e)}")
            return AIJobMatchResult(success=False, error=CONNECTION_ERROR)

        error = self._error(status, data, "Failed to get AI job matches")
        if error:
            return AIJobMatchResult(success=False, error=error)
        if not data.get("matches"):
            return AIJobMatchResult(success=False, error="No matches returned from AI")

        analysis = data.get("analysis")
        return AIJobMatchResult(
            success=True,
            matches=[JobMatch.model_validate(match) for match in data["matches"]],
            analysis=ResumeInsights.model_validate(analysis) if analysis else None,
        )

    async def ask_assistant(self, request: AssistantRequest) -> AIAssistantResult:
        try:
            status, data = await self._post(
                "/ai-assistant", request.model_dump(by_alias=True, exclude_none=True)
            )
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"AI assistant service error: {str(e)}")
            return AIAssistantResult(success=False, error=CONNECTION_ERROR)

        error = self._error(status, data, "Failed to get AI response")
        if error:
            return AIAssistantResult(success=False, error=error)
        if not data.get("response"):
            return AIAssistantResult(success=False, error="No response from AI")

        return AIAssistantResult(success=True, response=data["response"])

    async def parse_resume(self, user_id: str, file_name: str) -> ParseResumeResult:
        """Run the stored-resume analysis and return the saved summary."""
        try:
            status, data = await self._post("/parse-resume-ai", {"user_id": user_id, "file_name": file_name})
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Resume parse service error: {str(e)}")
            return ParseResumeResult(success=False, error=CONNECTION_ERROR)

        error = self._error(status, data, "Failed to parse resume")
        if error:
            return ParseResumeResult(success=False, error=error)

        insights = data.get("insights")
        return ParseResumeResult(
            success=True,
            analysis_id=data.get("analysis_id"),
            analysis=data.get("analysis"),
            insights=ResumeInsights.model_validate(insights) if insights else None,
        )

    async def close(self):
        """Close the HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None
