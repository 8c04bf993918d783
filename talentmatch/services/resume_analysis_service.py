"""
Resume analysis service.
Downloads a stored resume, extracts its text, asks the model for a short
summary, stores the summary and turns it into structured insights.
"""

import re
import asyncio
import logging
from typing import Any, Dict, List

from fastapi import Depends

from talentmatch.config.settings import settings
from talentmatch.models.schemas import ResumeInsights
from talentmatch.services.database_service import DatabaseService, get_database_service
from talentmatch.services.errors import BadRequestError, NotFoundError, ServiceError, StorageError
from talentmatch.services.file_processor import FileProcessor, get_file_processor, is_placeholder
from talentmatch.services.openai_service import OpenAIService, get_openai_service
from talentmatch.services.storage_service import StorageService, clean_resume_path, get_storage_service

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = (
    "You are a professional resume analyst. Provide clear, concise summaries with bullet points."
)

KNOWN_TECH_SKILLS = [
    "React", "Node.js", "JavaScript", "TypeScript", "Python", "Java", "AWS",
    "Docker", "SQL", "PostgreSQL", "MongoDB", "Angular", "Vue.js", "Express",
    "Spring", "Django", "Flask", "Kubernetes", "Git", "REST API",
]

DEFAULT_SUMMARY = "Professional with experience in software development and technology."
DEFAULT_SKILLS = ["Software Development", "Problem Solving"]
DEFAULT_CAREER_FOCUS = "Software development and technology solutions."

_YEARS = re.compile(r"\b([0-9]+)\s*years?\b")
_SKILL_SEPARATORS = re.compile(r"[,•\-\n]")
_BULLET_PREFIX = re.compile(r"^[•\-*]\s*")


def trim_words(text: str, limit: int) -> str:
    return " ".join(text.split()[:limit])


def build_summary_prompt(resume_text: str) -> str:
    """Summary prompt over the first RESUME_SUMMARY_WORD_LIMIT words."""
    trimmed_text = trim_words(resume_text, settings.RESUME_SUMMARY_WORD_LIMIT)
    return f"""Summarize this resume briefly.

Key skills

Most recent or current job title

Years of experience

Any certifications or major achievements

Be concise, clean, and use bullet points if needed.

Resume text:
{trimmed_text}"""


def parse_analysis_insights(analysis_text: str) -> ResumeInsights:
    """
    Read summary, skills, level and focus out of a free-text analysis.

    Works line by line on headings the summary prompt tends to produce;
    anything not found falls back to generic values.

    Args:
        analysis_text (str): Model summary

    Returns:
        ResumeInsights: Structured insights
    """
    lines = [line for line in analysis_text.split("\n") if line.strip()]

    summary = ""
    key_skills: List[str] = []
    experience_level = "Mid"
    career_focus = ""

    for i, original in enumerate(lines):
        line = original.lower()

        if "summary" in line or "overview" in line:
            summary = " ".join(lines[i + 1:i + 3]).strip()
        elif "skills" in line or "technologies" in line:
            skills_line = lines[i + 1] if i + 1 < len(lines) else ""
            skills = [_BULLET_PREFIX.sub("", skill.strip()) for skill in _SKILL_SEPARATORS.split(skills_line)]
            key_skills = [skill for skill in skills if len(skill) > 1][:8]
        elif "experience" in line and ("years" in line or "level" in line):
            years_match = _YEARS.search(original)
            if years_match:
                years = int(years_match.group(1))
                if years >= 5:
                    experience_level = "Senior"
                elif years >= 2:
                    experience_level = "Mid"
                else:
                    experience_level = "Junior"
        elif "focus" in line or "specializ" in line or "position" in line:
            next_line = lines[i + 1].strip() if i + 1 < len(lines) else ""
            career_focus = next_line or original.strip()

    if not summary and len(analysis_text) > 50:
        summary = analysis_text[:200] + "..."

    if not key_skills:
        lowered = analysis_text.lower()
        key_skills = [skill for skill in KNOWN_TECH_SKILLS if skill.lower() in lowered][:6]

    return ResumeInsights(
        summary=summary or DEFAULT_SUMMARY,
        key_skills=key_skills or list(DEFAULT_SKILLS),
        experience_level=experience_level,
        career_focus=career_focus or DEFAULT_CAREER_FOCUS,
    )


class ResumeAnalysisService:
    """Summarise resumes that already live in the object store."""

    def __init__(self, storage: StorageService, database: DatabaseService,
                 ai: OpenAIService, processor: FileProcessor):
        self.storage = storage
        self.database = database
        self.ai = ai
        self.processor = processor

    async def analyze_stored_resume(self, user_id: str, file_name: str) -> Dict[str, Any]:
        """
        Analyse a stored resume and persist the summary.

        Args:
            user_id (str): Owner of the resume
            file_name (str): Storage path of the resume

        Returns:
            Dict[str, Any]: analysis_id, analysis, extracted_text_length, insights

        Raises:
            ServiceError: With the HTTP status the caller should answer with
        """
        if not user_id or not file_name:
            logger.error(f"Missing required fields: user_id={bool(user_id)}, file_name={bool(file_name)}")
            raise BadRequestError("user_id and file_name are required")

        logger.info(f"Processing resume: {file_name} for user: {user_id}")

        clean_path = clean_resume_path(file_name)
        logger.info(f"Cleaned file path: {clean_path}")

        try:
            content = await self.storage.download(clean_path)
        except StorageError as e:
            raise NotFoundError(f"Failed to download file: {str(e)}. File path: {clean_path}")

        lowered = clean_path.lower()
        if lowered.endswith(".pdf"):
            logger.info("Extracting text from PDF...")
            extracted_text = await self.processor.extract_pdf_text(content)
        elif lowered.endswith(".docx") or lowered.endswith(".doc"):
            logger.info("Extracting text from DOCX...")
            extracted_text = await self.processor.extract_docx_text(content)
        else:
            raise BadRequestError("Unsupported file type. Only PDF and DOCX files are supported.")

        preview = extracted_text[:200] + "..." if len(extracted_text) > 200 else extracted_text
        logger.info(f"Extracted text preview: {preview}")

        if (not extracted_text or len(extracted_text) < settings.MIN_EXTRACTED_TEXT_LENGTH
                or is_placeholder(extracted_text)):
            raise BadRequestError(
                "Could not extract meaningful text from the file. Please ensure the file contains readable text."
            )

        logger.info("Sending to OpenAI for analysis...")
        analysis = await asyncio.to_thread(
            self.ai.complete,
            SUMMARY_SYSTEM_PROMPT,
            build_summary_prompt(extracted_text),
            temperature=0.3,
            max_tokens=500,
        )
        logger.info("OpenAI analysis completed")

        try:
            record = await self.database.save_resume_analysis(user_id, clean_path, analysis)
        except Exception as e:
            logger.error(f"Database insert error: {str(e)}")
            raise ServiceError(500, f"Failed to save analysis: {str(e)}")

        return {
            "analysis_id": record["id"],
            "analysis": analysis,
            "extracted_text_length": len(extracted_text),
            "insights": parse_analysis_insights(analysis),
        }

    async def list_analyses(self, user_id: str, limit: int = 10) -> List[Dict[str, Any]]:
        return await self.database.get_resume_analyses(user_id, limit)


def get_resume_analysis_service(
    storage: StorageService = Depends(get_storage_service),
    database: DatabaseService = Depends(get_database_service),
    ai: OpenAIService = Depends(get_openai_service),
    processor: FileProcessor = Depends(get_file_processor),
) -> ResumeAnalysisService:
    return ResumeAnalysisService(storage, database, ai, processor)
