"""
AI job matching service.
Two chat completions per request: one profiles the resume, the second picks
three jobs from a list personalised to that profile.
"""

import logging
from typing import Any, Dict, List

from fastapi import Depends

from talentmatch.models.schemas import JobListing, JobMatch, ResumeInsights
from talentmatch.services.errors import BadRequestError, ServiceError
from talentmatch.services.openai_service import OpenAIService, get_openai_service, parse_json_response

logger = logging.getLogger(__name__)

ANALYSIS_SYSTEM_PROMPT = "You are an expert resume analyzer. Always respond with valid JSON."
MATCH_SYSTEM_PROMPT = (
    "You are an expert job matching assistant. "
    "Always respond with valid JSON arrays containing exactly 3 job matches."
)

FALLBACK_ANALYSIS = ResumeInsights(
    summary="Experienced professional with a strong technical background and proven track record in software development.",
    key_skills=["JavaScript", "React", "Node.js", "Python", "SQL"],
    experience_level="Mid-level",
    career_focus="Full-stack development and technology solutions",
)

PERSONALIZED_COMPANIES = [
    "TechVision Solutions", "InnovateFlow Labs", "DesignCraft Studios",
    "CloudScale Systems", "NextGen Technologies", "Infrastructure Pro",
    "DevSpark Inc.", "CodeCraft Labs", "DigitalWave Technologies",
]

MAX_PERSONALIZED_JOBS = 6

# (Senior, Mid-level, other)
FRONTEND_SALARIES = ("$130K - $150K", "$100K - $120K", "$80K - $100K")
BACKEND_SALARIES = ("$140K - $160K", "$110K - $130K", "$85K - $105K")
FULLSTACK_SALARIES = ("$135K - $155K", "$105K - $125K", "$82K - $102K")

SAMPLE_JOB_LISTINGS = [
    JobListing(
        id="job_1",
        title="Senior Frontend Developer",
        company="TechCorp Inc.",
        description="We are looking for an experienced frontend developer with expertise in React, TypeScript, and modern web technologies. The ideal candidate will have 5+ years of experience building scalable web applications.",
        location="Remote",
        salary="$120K - $140K",
    ),
    JobListing(
        id="job_2",
        title="Full Stack Engineer",
        company="DataWorks Labs",
        description="Join our team as a full stack engineer working with React, Node.js, PostgreSQL, and AWS. We need someone who can work across the entire technology stack and contribute to product development.",
        location="San Francisco, CA (Hybrid)",
        salary="$130K - $150K",
    ),
    JobListing(
        id="job_3",
        title="UI/UX Developer",
        company="Creative Solutions",
        description="We are seeking a UI/UX developer with strong design sensibilities and frontend development skills. Experience with Figma, React, and CSS animations is highly valued.",
        location="New York, NY (On-site)",
        salary="$110K - $130K",
    ),
    JobListing(
        id="job_4",
        title="Backend Engineer",
        company="CloudTech Systems",
        description="Looking for a backend engineer with experience in Node.js, Python, database design, and cloud infrastructure. Must have experience with microservices architecture.",
        location="Remote",
        salary="$125K - $145K",
    ),
    JobListing(
        id="job_5",
        title="Product Manager",
        company="InnovateLabs",
        description="Seeking an experienced product manager to lead product strategy and development. Ideal candidate has technical background and experience working with engineering teams.",
        location="Austin, TX (Hybrid)",
        salary="$140K - $160K",
    ),
]


def sample_job_listings() -> List[JobListing]:
    """Demo listings used when the caller has no jobs of its own."""
    return [job.model_copy() for job in SAMPLE_JOB_LISTINGS]


def _salary_for(level: str, bands) -> str:
    senior, mid, other = bands
    if level == "Senior":
        return senior
    if level == "Mid-level":
        return mid
    return other


def _mentions(skills: List[str], *needles: str) -> bool:
    return any(needle in skill.lower() for skill in skills for needle in needles)


def generate_personalized_jobs(analysis: ResumeInsights, base_jobs: List[JobListing]) -> List[JobListing]:
    """
    Build the candidate-specific job list the matcher chooses from.

    Frontend and backend roles are added when the skills point that way, a
    full-stack role is always added, and base jobs fill the list up to six
    entries under rotated company names.

    Args:
        analysis (ResumeInsights): Profile from the analysis step
        base_jobs (List[JobListing]): Listings supplied by the caller

    Returns:
        List[JobListing]: At most six listings
    """
    skills = analysis.key_skills
    level = analysis.experience_level
    focus = analysis.career_focus.lower()
    jobs: List[JobListing] = []

    if _mentions(skills, "react", "frontend"):
        jobs.append(JobListing(
            id="job_frontend_1",
            title=f"{level} Frontend Developer",
            company=PERSONALIZED_COMPANIES[0],
            description=(
                f"We're seeking a {level.lower()} frontend developer with expertise in "
                f"{', '.join(skills[:3])}. Perfect for someone focused on {focus}."
            ),
            location="Remote",
            salary=_salary_for(level, FRONTEND_SALARIES),
        ))

    if _mentions(skills, "node", "backend", "python"):
        backend_skills = [
            skill for skill in skills
            if any(needle in skill.lower() for needle in ("node", "python", "sql"))
        ]
        jobs.append(JobListing(
            id="job_backend_1",
            title=f"{level} Backend Engineer",
            company=PERSONALIZED_COMPANIES[1],
            description=(
                f"Looking for a {level.lower()} backend engineer skilled in "
                f"{' and '.join(backend_skills[:2])}. Great opportunity for {focus}."
            ),
            location="San Francisco, CA (Hybrid)",
            salary=_salary_for(level, BACKEND_SALARIES),
        ))

    jobs.append(JobListing(
        id="job_fullstack_1",
        title=f"{level} Full Stack Developer",
        company=PERSONALIZED_COMPANIES[2],
        description=(
            f"Full stack role combining {', '.join(skills[:4])}. Ideal for someone with "
            f"{analysis.summary.lower()} looking to grow in {focus}."
        ),
        location="New York, NY (Hybrid)",
        salary=_salary_for(level, FULLSTACK_SALARIES),
    ))

    remaining_slots = MAX_PERSONALIZED_JOBS - len(jobs)
    for base_job in base_jobs[:max(remaining_slots, 0)]:
        company = PERSONALIZED_COMPANIES[len(jobs) % len(PERSONALIZED_COMPANIES)]
        jobs.append(base_job.model_copy(update={"company": company}))

    return jobs


def format_job_listings(jobs: List[JobListing]) -> str:
    return "\n".join(
        f"Job ID: {job.id}\nTitle: {job.title}\nCompany: {job.company}\n"
        f"Location: {job.location}\nSalary: {job.salary}\nDescription: {job.description}\n---"
        for job in jobs
    )


def build_analysis_prompt(resume_text: str) -> str:
    return f"""Analyze the following resume and provide insights:

Resume:
{resume_text}

Please provide a JSON response with the following structure:
{{
  "summary": "2-3 sentence summary of the candidate's profile",
  "keySkills": ["skill1", "skill2", "skill3", "skill4", "skill5"],
  "experienceLevel": "Junior/Mid-level/Senior/Executive",
  "careerFocus": "Brief description of their career focus area"
}}

Focus on extracting the most relevant technical skills, experience level, and career direction."""


def build_match_prompt(resume_text: str, formatted_jobs: str) -> str:
    return f"""You're an intelligent job match assistant.

Given the following resume, analyze the candidate's skills, experience, and interests. Recommend the 3 most suitable job opportunities from the job list provided, and explain briefly why each job is a good fit.

Resume:
{resume_text}

Available Job Listings:
{formatted_jobs}

Return your response as a JSON array with exactly 3 job matches in this format:
[
  {{
    "jobId": "job_id_from_listing",
    "jobTitle": "Job Title",
    "company": "Company Name",
    "explanation": "1-2 sentence explanation of why this is a good fit based on specific skills and experience from the resume"
  }}
]

Focus on matching specific skills, experience level, and career progression. Be specific about why each job matches the candidate's background."""


class JobMatchService:
    """Resume-to-job matching backed by chat completions."""

    def __init__(self, ai: OpenAIService):
        self.ai = ai

    def analyze_resume(self, resume_text: str) -> ResumeInsights:
        """
        Profile a resume. An unparsable answer yields FALLBACK_ANALYSIS.

        Raises:
            AIServiceError: If the API call itself fails
        """
        content = self.ai.complete(
            ANALYSIS_SYSTEM_PROMPT,
            build_analysis_prompt(resume_text),
            temperature=0.3,
            max_tokens=500,
        )
        try:
            data = parse_json_response(content)
            if not isinstance(data, dict):
                raise ValueError("analysis is not a JSON object")
            return ResumeInsights.model_validate(data)
        except ValueError as e:
            logger.error(f"Analysis parsing error: {str(e)}")
            return FALLBACK_ANALYSIS.model_copy(deep=True)

    def match_jobs(self, resume_text: str, job_listings: List[JobListing]) -> Dict[str, Any]:
        """
        Pick three jobs for a resume.

        Args:
            resume_text (str): Resume text
            job_listings (List[JobListing]): Base listings

        Returns:
            Dict[str, Any]: matches (List[JobMatch]) and analysis (ResumeInsights)

        Raises:
            ServiceError: 400 for missing input, 500 for an unusable answer
        """
        if not resume_text or job_listings is None:
            raise BadRequestError("Resume text and job listings are required")

        logger.info("Analyzing resume...")
        analysis = self.analyze_resume(resume_text)

        personalized_jobs = generate_personalized_jobs(analysis, job_listings)
        jobs_by_id = {job.id: job for job in personalized_jobs}

        logger.info("Getting job matches...")
        content = self.ai.complete(
            MATCH_SYSTEM_PROMPT,
            build_match_prompt(resume_text, format_job_listings(personalized_jobs)),
            temperature=0.7,
            max_tokens=1000,
        )

        try:
            raw_matches = parse_json_response(content)
            if not isinstance(raw_matches, list):
                raise ValueError("matches are not a JSON array")

            matches = []
            for raw in raw_matches:
                match = JobMatch.model_validate(raw)
                job = jobs_by_id.get(match.job_id)
                match.location = job.location if job else ""
                match.salary = (job.salary or "") if job else ""
                matches.append(match)
        except ValueError as e:
            logger.error(f"JSON parsing error: {str(e)}")
            raise ServiceError(500, "Failed to parse AI response")

        logger.info(f"Job matching produced {len(matches)} matches")
        return {"matches": matches, "analysis": analysis}


def get_job_match_service(ai: OpenAIService = Depends(get_openai_service)) -> JobMatchService:
    return JobMatchService(ai)
