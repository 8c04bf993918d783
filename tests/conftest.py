import fitz  # PyMuPDF
import pytest
from fastapi.testclient import TestClient

from talentmatch.main import app
from talentmatch.middleware.rate_limit import limiter
from talentmatch.services.database_service import get_database_service
from talentmatch.services.errors import StorageError
from talentmatch.services.openai_service import get_openai_service
from talentmatch.services.storage_service import get_storage_service

RESUME_LINES = [
    "Jane Doe",
    "Senior Software Engineer",
    "Six years building Python and React applications on AWS.",
    "Led migration of billing services to PostgreSQL.",
]


def make_pdf(lines=None) -> bytes:
    """Small one-page PDF with real text objects."""
    document = fitz.open()
    page = document.new_page()
    y = 72
    for line in lines or RESUME_LINES:
        page.insert_text((72, y), line, fontsize=11)
        y += 18
    content = document.tobytes()
    document.close()
    return content


class FakeAI:
    """Returns canned completions in order and records every call."""

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    def complete(self, system_prompt, user_prompt, temperature, max_tokens):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if self.error:
            raise self.error
        return self.responses.pop(0)


class FakeStorage:
    """In-memory bucket. upload_errors are raised one per upload call."""

    def __init__(self):
        self.files = {}
        self.uploads = []
        self.upload_errors = []
        self.list_errors = {}
        self.remove_error = None

    async def upload(self, path, content, content_type, upsert=False):
        self.uploads.append({"path": path, "content_type": content_type, "upsert": upsert})
        if self.upload_errors:
            error = self.upload_errors.pop(0)
            if error:
                raise error
        self.files[path] = content
        return path

    async def download(self, path):
        if path not in self.files:
            raise StorageError("Object not found")
        return self.files[path]

    async def remove(self, paths):
        if self.remove_error:
            raise self.remove_error
        for path in paths:
            self.files.pop(path, None)

    async def public_url(self, path):
        return f"https://storage.test/documents/{path}"

    async def list(self, folder="", limit=1):
        if folder in self.list_errors:
            raise self.list_errors[folder]
        return []


class FakeDatabase:
    def __init__(self):
        self.connection_error = None
        self.has_columns = True
        self.schema_error = None
        self.update_error = None
        self.save_error = None
        self.profiles = {}
        self.analyses = []

    async def check_connection(self):
        if self.connection_error:
            raise self.connection_error

    async def profile_has_resume_columns(self):
        if self.schema_error:
            raise self.schema_error
        return self.has_columns

    async def update_profile_resume(self, user_id, resume_url, file_path):
        if self.update_error:
            raise self.update_error
        self.profiles[user_id] = {"resume_url": resume_url, "resume_file_path": file_path}
        return True

    async def clear_profile_resume(self, user_id):
        return await self.update_profile_resume(user_id, None, None)

    async def save_resume_analysis(self, user_id, file_name, analysis):
        if self.save_error:
            raise self.save_error
        record = {
            "id": len(self.analyses) + 1,
            "user_id": user_id,
            "file_name": file_name,
            "analysis": analysis,
            "created_at": "2024-01-01T12:00:00+00:00",
        }
        self.analyses.append(record)
        return record

    async def get_resume_analyses(self, user_id, limit=10):
        return [record for record in reversed(self.analyses) if record["user_id"] == user_id][:limit]


@pytest.fixture(autouse=True)
def disable_rate_limit():
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def fake_ai():
    return FakeAI()


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
def fake_database():
    return FakeDatabase()


@pytest.fixture
def client(fake_ai, fake_storage, fake_database):
    app.dependency_overrides[get_openai_service] = lambda: fake_ai
    app.dependency_overrides[get_storage_service] = lambda: fake_storage
    app.dependency_overrides[get_database_service] = lambda: fake_database
    yield TestClient(app)
    app.dependency_overrides.clear()
