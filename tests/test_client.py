import json

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from talentmatch.client import CONNECTION_ERROR, TalentMatchClient
from talentmatch.models.schemas import AssistantRequest
from talentmatch.services.job_match_service import sample_job_listings


def stub_post(client, status, data, calls=None):
    async def post(path, payload):
        if calls is not None:
            calls.append((path, payload))
        return status, data

    client._post = post


def failing_post(client):
    async def post(path, payload):
        raise aiohttp.ClientConnectionError("connection refused")

    client._post = post


@pytest.fixture
def api():
    return TalentMatchClient("http://api.test/")


async def test_extract_resume_text(api):
    calls = []
    stub_post(api, 200, {"text": "Jane Doe", "extractionMethod": "PDF", "contentType": "application/pdf"}, calls)

    result = await api.extract_resume_text("https://cdn.test/cv.pdf")

    assert result.success
    assert result.text == "Jane Doe"
    assert result.extraction_method == "PDF"
    assert calls == [("/extract-resume-text", {"resumeUrl": "https://cdn.test/cv.pdf"})]


async def test_extract_resume_text_empty_payload(api):
    stub_post(api, 200, {"text": ""})
    result = await api.extract_resume_text("https://cdn.test/cv.pdf")
    assert result.error == "No text extracted from resume"


async def test_extract_resume_text_server_error(api):
    stub_post(api, 500, {"error": "Failed to fetch file: 404 Not Found"})
    result = await api.extract_resume_text("https://cdn.test/cv.pdf")

    assert not result.success
    assert result.error == "Failed to fetch file: 404 Not Found"


async def test_extract_resume_text_connection_error(api):
    failing_post(api)
    result = await api.extract_resume_text("https://cdn.test/cv.pdf")
    assert result.error == "Failed to extract text from resume: connection refused"


async def test_get_job_matches(api):
    calls = []
    stub_post(api, 200, {
        "matches": [{"jobId": "job_1", "jobTitle": "Dev", "company": "Acme",
                     "explanation": "Fits", "location": "Remote", "salary": "$1"}],
        "analysis": {"summary": "s", "keySkills": ["Python"], "experienceLevel": "Senior", "careerFocus": "f"},
    }, calls)

    result = await api.get_job_matches("resume", sample_job_listings()[:1])

    assert result.success
    assert result.matches[0].job_id == "job_1"
    assert result.analysis.key_skills == ["Python"]
    path, payload = calls[0]
    assert path == "/ai-job-match"
    assert payload["resumeText"] == "resume"
    assert payload["jobListings"][0]["id"] == "job_1"


async def test_get_job_matches_without_matches(api):
    stub_post(api, 200, {"matches": []})
    result = await api.get_job_matches("resume", [])
    assert result.error == "No matches returned from AI"


async def test_get_job_matches_connection_error(api):
    failing_post(api)
    result = await api.get_job_matches("resume", [])
    assert result.error == CONNECTION_ERROR


async def test_ask_assistant_uses_wire_names(api):
    calls = []
    stub_post(api, 200, {"response": "Apply to backend roles."}, calls)

    result = await api.ask_assistant(AssistantRequest(user_input="What next?", user_type="employee"))

    assert result.response == "Apply to backend roles."
    assert calls[0][1] == {"userInput": "What next?", "userType": "employee"}


async def test_ask_assistant_errors(api):
    stub_post(api, 400, {"error": "User input is required"})
    assert (await api.ask_assistant(AssistantRequest())).error == "User input is required"

    stub_post(api, 200, {})
    assert (await api.ask_assistant(AssistantRequest(user_input="Hi"))).error == "No response from AI"

    stub_post(api, 502, {})
    assert (await api.ask_assistant(AssistantRequest(user_input="Hi"))).error == "Failed to get AI response"


async def test_parse_resume(api):
    stub_post(api, 200, {
        "success": True, "analysis_id": 4, "analysis": "summary", "extracted_text_length": 120,
        "insights": {"summary": "s", "keySkills": ["Go"], "experienceLevel": "Mid", "careerFocus": "f"},
    })

    result = await api.parse_resume("u1", "resumes/cv.pdf")

    assert result.success
    assert result.analysis_id == 4
    assert result.insights.key_skills == ["Go"]


async def test_parse_resume_not_found(api):
    stub_post(api, 404, {"success": False, "error": "Failed to download file: Object not found"})
    result = await api.parse_resume("u1", "resumes/cv.pdf")
    assert result.error == "Failed to download file: Object not found"


async def test_close_without_session(api):
    await api.close()
    assert api.session is None


async def assistant_endpoint(request):
    payload = await request.json()
    if not payload.get("userInput"):
        return web.json_response({"error": "User input is required"}, status=400)
    # JSON served without a JSON content type
    return web.Response(text=json.dumps({"response": f"Echo: {payload['userInput']}"}), content_type="text/plain")


async def extract_endpoint(request):
    return web.json_response({"error": "Failed to fetch file: 404 Not Found"}, status=500)


@pytest.fixture
async def api_server():
    backend = web.Application()
    backend.router.add_post("/api/v1/ai-assistant", assistant_endpoint)
    backend.router.add_post("/api/v1/extract-resume-text", extract_endpoint)
    server = TestServer(backend)
    await server.start_server()
    yield server
    await server.close()


@pytest.fixture
async def live_api(api_server):
    client = TalentMatchClient(f"http://{api_server.host}:{api_server.port}")
    yield client
    await client.close()


async def test_live_session_opened_on_first_call(live_api):
    assert live_api.session is None

    result = await live_api.ask_assistant(AssistantRequest(user_input="Hello", user_type="employee"))

    assert result.success
    assert result.response == "Echo: Hello"
    assert live_api.session is not None


async def test_live_json_error_body(live_api):
    result = await live_api.ask_assistant(AssistantRequest())

    assert not result.success
    assert result.error == "User input is required"


async def test_live_server_error(live_api):
    result = await live_api.extract_resume_text("https://cdn.test/missing.pdf")

    assert not result.success
    assert result.error == "Failed to fetch file: 404 Not Found"
