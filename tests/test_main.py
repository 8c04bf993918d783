from talentmatch.main import app
from talentmatch.services.openai_service import get_openai_service
from talentmatch.config.settings import settings


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == settings.APP_NAME
    assert body["endpoints"]["ai_job_match"] == "/api/v1/ai-job-match"


def test_health_has_process_time_header(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "x-process-time" in response.headers


def test_cors_preflight(client):
    response = client.options(
        "/api/v1/ai-assistant",
        headers={
            "Origin": "https://app.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type,apikey",
        },
    )

    assert response.status_code == 200
    assert "access-control-allow-origin" in response.headers


def test_test_openai_without_key(client, monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "")
    response = client.get("/test-openai")

    assert response.status_code == 200
    assert response.json()["status"] == "FAILED"


def test_ai_endpoint_without_api_key(client, monkeypatch):
    app.dependency_overrides.pop(get_openai_service)
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "")
    get_openai_service.cache_clear()

    response = client.post("/api/v1/ai-assistant", json={"userInput": "Hi", "userType": "recruiter"})

    assert response.status_code == 500
    assert response.json() == {"error": "OpenAI API key is required"}
