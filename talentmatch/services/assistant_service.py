"""
Chat assistant service for employees and recruiters.
"""

import logging
from typing import Optional

from fastapi import Depends

from talentmatch.services.errors import BadRequestError
from talentmatch.services.openai_service import OpenAIService, get_openai_service

logger = logging.getLogger(__name__)

EMPLOYEE = "employee"
RECRUITER = "recruiter"

_STYLE_RULES = """Respond to the user's question in brief, direct, and professional sentences.
Use clear structure and formatting with short lines.
Keep each sentence short (maximum 1 line).
Avoid long paragraphs.
Format responses as clean, organized points when possible."""


def build_system_prompt(user_input: str, resume_text: Optional[str], user_type: Optional[str]) -> str:
    """
    System prompt for the assistant.

    Employees get a career assistant that sees their resume; every other
    user type gets the recruiting assistant.
    """
    if user_type == EMPLOYEE:
        return f"""You are a concise career assistant for a job-matching platform.

{_STYLE_RULES}

Resume:
{resume_text or 'No resume provided yet'}

User Question:
{user_input}

Your goal is to help the user make better career decisions. Be brief, supportive, and helpful."""

    return f"""You are a concise recruiting assistant for a job-matching platform.

{_STYLE_RULES}

User Question:
{user_input}

Your goal is to help the recruiter make better hiring decisions. Be brief, professional, and helpful."""


class AssistantService:
    """Answers short career and hiring questions."""

    def __init__(self, ai: OpenAIService):
        self.ai = ai

    def ask(self, user_input: Optional[str], resume_text: Optional[str] = None,
            user_type: Optional[str] = None, user_name: Optional[str] = None) -> str:
        """
        Answer one question.

        Raises:
            BadRequestError: If there is no question
            AIServiceError: If the API call fails
        """
        if not user_input:
            raise BadRequestError("User input is required")

        logger.info(f"Processing AI assistant request for: {user_name} Type: {user_type}")

        answer = self.ai.complete(
            build_system_prompt(user_input, resume_text, user_type),
            user_input,
            temperature=0.7,
            max_tokens=300,
        )
        logger.info("AI assistant response generated")
        return answer


def get_assistant_service(ai: OpenAIService = Depends(get_openai_service)) -> AssistantService:
    return AssistantService(ai)
