"""
Pydantic schemas for the TalentMatch AI API.
Wire names follow the web client: camelCase for the AI endpoints,
snake_case for the resume storage endpoints.
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class JobListing(BaseModel):
    """A job opening offered to the matcher."""

    id: str = Field(description="Job identifier")
    title: str = Field(description="Job title")
    company: str = Field(description="Hiring company")
    description: str = Field(description="Job description")
    location: str = Field(description="Job location")
    salary: Optional[str] = Field(None, description="Salary band")

    class Config:
        json_schema_extra = {
            "example": {
                "id": "job_1",
                "title": "Senior Frontend Developer",
                "company": "TechCorp Inc.",
                "description": "React, TypeScript and modern web technologies.",
                "location": "Remote",
                "salary": "$120K - $140K"
            }
        }


class JobMatch(BaseModel):
    """A job recommended for a resume, with the model's reasoning."""

    job_id: str = Field("", alias="jobId")
    job_title: str = Field("", alias="jobTitle")
    company: str = ""
    explanation: str = ""
    location: str = ""
    salary: Optional[str] = ""

    class Config:
        populate_by_name = True


class ResumeInsights(BaseModel):
    """Structured view of a candidate profile."""

    summary: str = ""
    key_skills: List[str] = Field(default_factory=list, alias="keySkills")
    experience_level: str = Field("", alias="experienceLevel")
    career_focus: str = Field("", alias="careerFocus")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "summary": "Full-stack engineer with five years of React and Node.js work.",
                "keySkills": ["React", "Node.js", "TypeScript", "AWS", "PostgreSQL"],
                "experienceLevel": "Senior",
                "careerFocus": "Full-stack product development"
            }
        }


class JobMatchRequest(BaseModel):
    """Request body for AI job matching."""

    resume_text: Optional[str] = Field(None, alias="resumeText")
    job_listings: Optional[List[JobListing]] = Field(None, alias="jobListings")

    class Config:
        populate_by_name = True


class JobMatchResponse(BaseModel):
    """Three recommended jobs plus the resume analysis behind them."""

    matches: List[JobMatch]
    analysis: ResumeInsights


class AssistantRequest(BaseModel):
    """Request body for the chat assistant."""

    user_input: Optional[str] = Field(None, alias="userInput")
    resume_text: Optional[str] = Field(None, alias="resumeText")
    user_type: Optional[str] = Field(None, alias="userType", description="employee or recruiter")
    user_name: Optional[str] = Field(None, alias="userName")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "userInput": "Which roles fit my background best?",
                "resumeText": "Software engineer with 5 years of React...",
                "userType": "employee",
                "userName": "Alex"
            }
        }


class AssistantResponse(BaseModel):
    response: str


class ExtractTextRequest(BaseModel):
    """Request body for resume text extraction from a URL."""

    resume_url: Optional[str] = Field(None, alias="resumeUrl")

    class Config:
        populate_by_name = True


class ExtractTextResponse(BaseModel):
    text: str
    extraction_method: str = Field(alias="extractionMethod")
    content_type: str = Field(alias="contentType")

    class Config:
        populate_by_name = True


class ParseResumeRequest(BaseModel):
    """Request body for analysing a resume already in storage."""

    user_id: Optional[str] = None
    file_name: Optional[str] = Field(None, description="Storage path, with or without the resumes/ prefix")


class ParseResumeResponse(BaseModel):
    success: bool = True
    analysis_id: int
    analysis: str
    extracted_text_length: int
    insights: ResumeInsights


class ResumeAnalysisRecord(BaseModel):
    id: int
    user_id: str
    file_name: str
    analysis: str
    created_at: Optional[str] = None


class ResumeUploadResult(BaseModel):
    """Outcome of a resume upload."""

    success: bool
    file_url: Optional[str] = None
    file_path: Optional[str] = None
    error: Optional[str] = None


class DeleteResumeRequest(BaseModel):
    file_path: str
    user_id: str


class DeleteResumeResult(BaseModel):
    success: bool
    error: Optional[str] = None


class PDFValidationInfo(BaseModel):
    size: int
    type: str
    has_text: bool = False
    is_encrypted: bool = False
    version: Optional[str] = None


class PDFValidationResult(BaseModel):
    """PDF pre-flight result."""

    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    info: PDFValidationInfo
    message: Optional[str] = None


class SetupCheckResult(BaseModel):
    """One step of the backend setup check."""

    step: str
    status: str = Field(description="success, error or missing")
    message: str
    sql_to_run: Optional[str] = Field(None, alias="sqlToRun")

    class Config:
        populate_by_name = True


class ErrorResponse(BaseModel):
    """Error response model."""

    success: bool = False
    error: str = Field(description="Error message")

    class Config:
        json_schema_extra = {
            "example": {
                "success": False,
                "error": "Unsupported file type. Only PDF and DOCX files are supported."
            }
        }


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(description="Application status")
    version: str = Field(description="Application version")
    timestamp: str = Field(description="Current timestamp")

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "version": "1.0.0",
                "timestamp": "2024-01-01T12:00:00Z"
            }
        }
