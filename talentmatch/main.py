"""
Main FastAPI application entry point.
"""

import time
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from talentmatch.config.settings import settings
from talentmatch.controllers.ai_controller import router as ai_router
from talentmatch.controllers.resume_controller import router as resume_router
from talentmatch.middleware.rate_limit import limiter
from talentmatch.models.schemas import HealthResponse
from talentmatch.services.database_service import database_service
from talentmatch.services.errors import AIServiceError
from talentmatch.services.setup_check_service import SetupCheckService, get_setup_check_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Browsers call the AI endpoints directly
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to all responses."""
    start_time = time.time()
    response = await call_next(request)
    response.headers["X-Process-Time"] = str(time.time() - start_time)
    return response


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests and their processing time."""
    start_time = time.time()
    logger.info(f"Request: {request.method} {request.url.path}")

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(f"Response: {response.status_code} - {process_time:.3f}s")
    return response


app.include_router(ai_router)
app.include_router(resume_router)


@app.get("/")
async def root():
    """
    Root endpoint with application information.

    Returns:
        dict: Application information and available endpoints
    """
    prefix = settings.API_PREFIX
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "description": settings.APP_DESCRIPTION,
        "endpoints": {
            "health": "/health",
            "setup_check": "/setup-check",
            "test_openai": "/test-openai",
            "ai_assistant": f"{prefix}/ai-assistant",
            "ai_job_match": f"{prefix}/ai-job-match",
            "sample_jobs": f"{prefix}/jobs/sample",
            "extract_resume_text": f"{prefix}/extract-resume-text",
            "parse_resume_ai": f"{prefix}/parse-resume-ai",
            "upload_resume": f"{prefix}/resumes/upload",
            "delete_resume": f"{prefix}/resumes",
            "download_resume": f"{prefix}/resumes/download",
            "resume_analyses": f"{prefix}/resumes/analyses/{{user_id}}",
            "validate_pdf": f"{prefix}/resumes/validate-pdf",
            "docs": "/docs",
            "redoc": "/redoc"
        },
        "supported_mime_types": settings.ALLOWED_RESUME_MIME_TYPES,
        "max_upload_size_mb": settings.MAX_RESUME_UPLOAD_SIZE / (1024 * 1024)
    }


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Application health status."""
    return HealthResponse(
        status="healthy",
        version=settings.APP_VERSION,
        timestamp=str(time.time())
    )


@app.get("/setup-check")
async def setup_check(service: SetupCheckService = Depends(get_setup_check_service)):
    """
    Check the database schema and storage bucket the resume endpoints rely on.

    Steps that are not ready carry the SQL an operator should run.
    """
    results = await service.run_setup_checks()
    return {
        "ready": all(result.status == "success" for result in results),
        "results": [result.model_dump(by_alias=True) for result in results]
    }


@app.get("/test-openai")
def test_openai_api():
    """Verify the configured OpenAI API key with a tiny completion."""
    if not settings.OPENAI_API_KEY:
        return {
            "status": "FAILED",
            "message": "OpenAI API key is not set in .env file",
            "error": "OPENAI_API_KEY environment variable is missing",
            "timestamp": time.time()
        }

    try:
        from talentmatch.services.openai_service import get_openai_service

        answer = get_openai_service().complete(
            "You are a connectivity check.",
            "Hello, this is a test message",
            temperature=0,
            max_tokens=10,
        )
        return {
            "status": "WORKING",
            "message": "OpenAI API key is valid and working!",
            "model": settings.OPENAI_MODEL,
            "test_response": answer,
            "timestamp": time.time()
        }

    except Exception as e:
        error_msg = str(e)
        if "authentication" in error_msg.lower():
            message = "OpenAI API key is invalid or expired"
        elif "rate limit" in error_msg.lower():
            message = "OpenAI API rate limit exceeded"
        elif "quota" in error_msg.lower() or "insufficient" in error_msg.lower():
            message = "OpenAI account has insufficient credits/quota"
        else:
            message = "OpenAI API test failed with unknown error"
        return {
            "status": "FAILED",
            "message": message,
            "error": error_msg,
            "timestamp": time.time()
        }


@app.exception_handler(AIServiceError)
async def ai_service_exception_handler(request: Request, exc: AIServiceError):
    """AI failures raised while resolving dependencies, e.g. a missing API key."""
    logger.error(f"AI service unavailable: {str(exc)}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return a JSON 500 for anything the controllers did not handle."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": "An unexpected error occurred",
            "error_code": "INTERNAL_ERROR"
        }
    )


@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    settings.validate_settings()

    # Creates resume_analysis when missing; the API still serves AI endpoints without a database
    try:
        await database_service._initialize()
        logger.info("Database schema validation completed")
    except Exception as e:
        logger.error(f"Database schema validation failed: {str(e)}")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Shutting down {settings.APP_NAME}")
    await database_service.close()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "talentmatch.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
