"""
OpenAI service for the AI features of TalentMatch.
Every AI feature is a single chat completion; this module owns the client,
the error mapping and the JSON clean-up shared by all of them.
"""

import json
import logging
import re
from functools import lru_cache
from typing import Any, Optional

import openai
from talentmatch.config.settings import settings
from talentmatch.services.errors import AIServiceError

# Configure logging
logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"```(?:json)?\n?")


def clean_openai_response(response: str) -> str:
    """
    Remove markdown code fences the model sometimes wraps JSON in.

    Args:
        response (str): Raw model output

    Returns:
        str: Text with every ```json / ``` marker removed
    """
    return _FENCE_PATTERN.sub("", response).strip()


def parse_json_response(response: str) -> Any:
    """
    Parse a model response as JSON after stripping code fences.

    Raises:
        json.JSONDecodeError: If the cleaned text is not valid JSON
    """
    return json.loads(clean_openai_response(response))


class OpenAIService:
    """Service for OpenAI chat completions."""

    def __init__(self, client: Optional[openai.OpenAI] = None):
        """Initialize OpenAI service with API configuration."""
        if client is None:
            # Validate API key
            if not settings.OPENAI_API_KEY:
                raise ValueError("OpenAI API key is required")
            client = openai.OpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.OPENAI_TIMEOUT)

        self.client = client
        self.model = settings.OPENAI_MODEL
        logger.info(f"OpenAI service initialized with model {self.model}")

    def complete(self, system_prompt: str, user_prompt: str,
                 temperature: float, max_tokens: int) -> str:
        """
        Make a chat completion call to OpenAI.

        Args:
            system_prompt (str): System message content
            user_prompt (str): User message content
            temperature (float): Sampling temperature
            max_tokens (int): Completion token limit

        Returns:
            str: Response content, stripped

        Raises:
            AIServiceError: If the API call fails
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.AuthenticationError:
            raise AIServiceError("OpenAI API authentication failed. Please check your API key.")
        except openai.RateLimitError:
            raise AIServiceError("OpenAI API rate limit exceeded. Please try again later.")
        except openai.APIError as e:
            raise AIServiceError(f"OpenAI API error: {str(e)}")

        content = response.choices[0].message.content or ""
        content = content.strip()
        logger.info(f"OpenAI API call successful, response length: {len(content)}")
        return content

    def complete_json(self, system_prompt: str, user_prompt: str,
                      temperature: float, max_tokens: int) -> Any:
        """
        Chat completion whose output must be JSON.

        Raises:
            AIServiceError: If the API call fails
            json.JSONDecodeError: If the output is not valid JSON
        """
        content = self.complete(system_prompt, user_prompt, temperature, max_tokens)
        return parse_json_response(content)


@lru_cache()
def get_openai_service() -> OpenAIService:
    """FastAPI dependency returning the shared OpenAI service."""
    try:
        return OpenAIService()
    except ValueError as e:
        raise AIServiceError(str(e))
