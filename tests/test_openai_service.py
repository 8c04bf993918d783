from types import SimpleNamespace

import httpx
import openai
import pytest

from talentmatch.config.settings import settings
from talentmatch.services.errors import AIServiceError
from talentmatch.services.openai_service import OpenAIService, clean_openai_response, parse_json_response

OPENAI_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def make_client(content=None, error=None, calls=None):
    def create(**kwargs):
        if calls is not None:
            calls.append(kwargs)
        if error:
            raise error
        message = SimpleNamespace(content=content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def test_clean_openai_response_strips_fences():
    assert clean_openai_response('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert clean_openai_response("```\n[1, 2]\n```\n") == "[1, 2]"
    assert clean_openai_response('  {"a": 1}  ') == '{"a": 1}'


def test_parse_json_response():
    assert parse_json_response('```json\n[{"jobId": "job_1"}]\n```') == [{"jobId": "job_1"}]
    with pytest.raises(ValueError):
        parse_json_response("Sure! Here are your matches.")


def test_complete_sends_system_and_user_messages():
    calls = []
    service = OpenAIService(client=make_client("  Hi there  ", calls=calls))

    assert service.complete("system text", "user text", temperature=0.3, max_tokens=50) == "Hi there"
    assert calls[0]["messages"] == [
        {"role": "system", "content": "system text"},
        {"role": "user", "content": "user text"},
    ]
    assert calls[0]["model"] == settings.OPENAI_MODEL
    assert calls[0]["temperature"] == 0.3
    assert calls[0]["max_tokens"] == 50


def test_complete_handles_empty_content():
    service = OpenAIService(client=make_client(None))
    assert service.complete("s", "u", temperature=0.7, max_tokens=10) == ""


def test_complete_json():
    service = OpenAIService(client=make_client('```json\n{"summary": "x"}\n```'))
    assert service.complete_json("s", "u", temperature=0.3, max_tokens=10) == {"summary": "x"}


@pytest.mark.parametrize("error, message", [
    (
        openai.AuthenticationError("bad key", response=httpx.Response(401, request=OPENAI_REQUEST), body=None),
        "OpenAI API authentication failed. Please check your API key.",
    ),
    (
        openai.RateLimitError("slow down", response=httpx.Response(429, request=OPENAI_REQUEST), body=None),
        "OpenAI API rate limit exceeded. Please try again later.",
    ),
])
def test_complete_maps_api_errors(error, message):
    service = OpenAIService(client=make_client(error=error))
    with pytest.raises(AIServiceError) as exc_info:
        service.complete("s", "u", temperature=0.7, max_tokens=10)
    assert str(exc_info.value) == message


def test_complete_maps_connection_errors():
    service = OpenAIService(client=make_client(error=openai.APIConnectionError(request=OPENAI_REQUEST)))
    with pytest.raises(AIServiceError) as exc_info:
        service.complete("s", "u", temperature=0.7, max_tokens=10)
    assert str(exc_info.value).startswith("OpenAI API error:")


def test_missing_api_key(monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "")
    with pytest.raises(ValueError):
        OpenAIService()
