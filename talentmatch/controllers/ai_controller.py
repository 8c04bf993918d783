"""
AI controller: job matching and the chat assistant.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from talentmatch.config.settings import settings
from talentmatch.controllers.responses import error_response
from talentmatch.middleware.rate_limit import limiter
from talentmatch.models.schemas import (
    AssistantRequest,
    AssistantResponse,
    JobListing,
    JobMatchRequest,
    JobMatchResponse,
)
from talentmatch.services.assistant_service import AssistantService, get_assistant_service
from talentmatch.services.errors import ServiceError
from talentmatch.services.job_match_service import JobMatchService, get_job_match_service, sample_job_listings

logger = logging.getLogger(__name__)

router = APIRouter(prefix=settings.API_PREFIX, tags=["AI"])


@router.post("/ai-job-match", response_model=JobMatchResponse)
@limiter.limit(settings.AI_RATE_LIMIT)
def ai_job_match(
    request: Request,
    body: JobMatchRequest,
    service: JobMatchService = Depends(get_job_match_service),
):
    """
    Recommend three jobs for a resume.

    The resume is profiled first, the listings are personalised to the
    profile, and the model picks three of them with a short explanation.
    """
    try:
        result = service.match_jobs(body.resume_text, body.job_listings)
        return JobMatchResponse(**result)

    except HTTPException:
        raise
    except ServiceError as e:
        return error_response(e.status_code, e.message)
    except Exception as e:
        logger.error(f"Error in ai-job-match function: {str(e)}")
        return error_response(500, str(e) or "Failed to match jobs")


@router.get("/jobs/sample", response_model=List[JobListing])
async def get_sample_jobs():
    """Demo job listings for clients without a job board."""
    return sample_job_listings()


@router.post("/ai-assistant", response_model=AssistantResponse)
@limiter.limit(settings.AI_RATE_LIMIT)
def ai_assistant(
    request: Request,
    body: AssistantRequest,
    service: AssistantService = Depends(get_assistant_service),
):
    """Answer a career question (employees) or a hiring question (recruiters)."""
    try:
        answer = service.ask(body.user_input, body.resume_text, body.user_type, body.user_name)
        return AssistantResponse(response=answer)

    except HTTPException:
        raise
    except ServiceError as e:
        return error_response(e.status_code, e.message)
    except Exception as e:
        logger.error(f"Error in ai-assistant function: {str(e)}")
        return error_response(500, str(e) or "Failed to get AI response")
