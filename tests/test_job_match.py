import json

import pytest

from conftest import FakeAI
from talentmatch.models.schemas import JobListing, ResumeInsights
from talentmatch.services.errors import AIServiceError, ServiceError
from talentmatch.services.job_match_service import (
    FALLBACK_ANALYSIS,
    PERSONALIZED_COMPANIES,
    JobMatchService,
    format_job_listings,
    generate_personalized_jobs,
    sample_job_listings,
)

RESUME = "Senior engineer, 6 years of React, Node.js and PostgreSQL."

ANALYSIS = {
    "summary": "Senior full-stack engineer",
    "keySkills": ["React", "Node.js", "PostgreSQL"],
    "experienceLevel": "Senior",
    "careerFocus": "Product engineering",
}

MATCHES = [
    {"jobId": "job_frontend_1", "jobTitle": "Senior Frontend Developer",
     "company": "TechVision Solutions", "explanation": "Strong React background."},
    {"jobId": "job_backend_1", "jobTitle": "Senior Backend Engineer",
     "company": "InnovateFlow Labs", "explanation": "Node.js and PostgreSQL."},
    {"jobId": "job_unknown", "jobTitle": "Mystery Role",
     "company": "Nowhere", "explanation": "Not in the list."},
]


def test_sample_job_listings():
    jobs = sample_job_listings()
    assert [job.id for job in jobs] == ["job_1", "job_2", "job_3", "job_4", "job_5"]

    jobs[0].title = "changed"
    assert sample_job_listings()[0].title == "Senior Frontend Developer"


def test_generate_personalized_jobs_for_full_stack_profile():
    jobs = generate_personalized_jobs(FALLBACK_ANALYSIS, sample_job_listings())

    assert [job.id for job in jobs] == [
        "job_frontend_1", "job_backend_1", "job_fullstack_1", "job_1", "job_2", "job_3",
    ]
    assert jobs[0].title == "Mid-level Frontend Developer"
    assert jobs[0].salary == "$100K - $120K"
    assert jobs[1].salary == "$110K - $130K"
    assert "Node.js and Python" in jobs[1].description
    assert [job.company for job in jobs[3:]] == PERSONALIZED_COMPANIES[3:6]


def test_generate_personalized_jobs_without_matching_skills():
    analysis = ResumeInsights(
        summary="Designer", key_skills=["Figma"], experience_level="Junior", career_focus="Design",
    )
    jobs = generate_personalized_jobs(analysis, sample_job_listings())

    assert jobs[0].id == "job_fullstack_1"
    assert jobs[0].salary == "$82K - $102K"
    assert len(jobs) == 6
    assert jobs[1].company == PERSONALIZED_COMPANIES[1]


def test_format_job_listings():
    text = format_job_listings([JobListing(
        id="j1", title="Dev", company="Acme", description="Build", location="Remote",
    )])
    assert text == "Job ID: j1\nTitle: Dev\nCompany: Acme\nLocation: Remote\nSalary: None\nDescription: Build\n---"


def test_match_jobs_enriches_matches():
    ai = FakeAI([json.dumps(ANALYSIS), "```json\n" + json.dumps(MATCHES) + "\n```"])
    result = JobMatchService(ai).match_jobs(RESUME, sample_job_listings())

    matches = result["matches"]
    assert result["analysis"].experience_level == "Senior"
    assert matches[0].location == "Remote"
    assert matches[0].salary == "$130K - $150K"
    assert matches[1].location == "San Francisco, CA (Hybrid)"
    assert matches[2].location == ""
    assert matches[2].salary == ""

    assert [call["temperature"] for call in ai.calls] == [0.3, 0.7]
    assert [call["max_tokens"] for call in ai.calls] == [500, 1000]
    assert "job_fullstack_1" in ai.calls[1]["user_prompt"]


def test_match_jobs_uses_fallback_analysis():
    ai = FakeAI(["I could not analyse that", json.dumps(MATCHES[:1])])
    result = JobMatchService(ai).match_jobs(RESUME, [])

    assert result["analysis"] == FALLBACK_ANALYSIS
    assert result["matches"][0].job_id == "job_frontend_1"


def test_match_jobs_rejects_unparsable_matches():
    ai = FakeAI([json.dumps(ANALYSIS), "Here are three great jobs!"])
    with pytest.raises(ServiceError) as exc_info:
        JobMatchService(ai).match_jobs(RESUME, sample_job_listings())

    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Failed to parse AI response"


@pytest.mark.parametrize("resume_text, listings", [("", []), (RESUME, None)])
def test_match_jobs_requires_input(resume_text, listings):
    with pytest.raises(ServiceError) as exc_info:
        JobMatchService(FakeAI()).match_jobs(resume_text, listings)
    assert exc_info.value.status_code == 400


def test_ai_job_match_endpoint(client, fake_ai):
    fake_ai.responses = [json.dumps(ANALYSIS), json.dumps(MATCHES[:2])]
    response = client.post("/api/v1/ai-job-match", json={
        "resumeText": RESUME,
        "jobListings": [job.model_dump() for job in sample_job_listings()],
    })

    assert response.status_code == 200
    body = response.json()
    assert body["matches"][0]["jobId"] == "job_frontend_1"
    assert body["matches"][0]["salary"] == "$130K - $150K"
    assert body["analysis"]["keySkills"] == ["React", "Node.js", "PostgreSQL"]


def test_ai_job_match_endpoint_missing_fields(client):
    response = client.post("/api/v1/ai-job-match", json={"resumeText": RESUME})
    assert response.status_code == 400
    assert response.json() == {"error": "Resume text and job listings are required"}


def test_ai_job_match_endpoint_ai_failure(client, fake_ai):
    fake_ai.error = AIServiceError("OpenAI API rate limit exceeded. Please try again later.")
    response = client.post("/api/v1/ai-job-match", json={"resumeText": RESUME, "jobListings": []})

    assert response.status_code == 500
    assert response.json() == {"error": "OpenAI API rate limit exceeded. Please try again later."}


def test_sample_jobs_endpoint(client):
    response = client.get("/api/v1/jobs/sample")
    assert response.status_code == 200
    assert len(response.json()) == 5
