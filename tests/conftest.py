"""
Shared fixtures.

The app runs against an in-memory SQLite database built from the table
metadata. The model, storage and auth service clients are replaced with
in-process fakes that record their calls.
"""
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from jobboard.core.auth import create_access_token
from jobboard.core.config import Settings
from jobboard.core.errors import ConfigurationError, ExternalServiceError, Unauthorized
from jobboard.db.postgres import Database
from jobboard.db.tables import companies, job_postings, metadata, resumes, users
from jobboard.main import create_app
from jobboard.services.openai_client import CompletionClient
from jobboard.services.storage_service import SupabaseStorageClient

SERVICE_KEY = "test-service-role-key"


# ============================================================
# FAKE CLIENTS
# ============================================================

class FakeCompletionClient(CompletionClient):
    """Answers with queued responses. An Exception in the queue is raised."""

    def __init__(self, responses=None, configured=True):
        super().__init__()
        self._configured = configured
        self.responses = list(responses or [])
        self.calls = []

    @property
    def configured(self) -> bool:
        return self._configured

    def complete(self, user_content, system_prompt="", **kwargs):
        if not self._configured:
            raise ConfigurationError("OpenAI API key not configured")
        self.calls.append({"user": user_content, "system": system_prompt, **kwargs})
        if not self.responses:
            raise ExternalServiceError("AI request failed", details="no queued response")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeStorageClient(SupabaseStorageClient):
    def __init__(self, buckets=None):
        super().__init__("http://storage.test", SERVICE_KEY)
        self.buckets = list(buckets or [])
        self.created = []
        self.uploads = []

    def list_buckets(self):
        return [{"id": name, "name": name} for name in self.buckets]

    def create_bucket(self, name, public=True, file_size_limit=None, allowed_mime_types=None):
        self.created.append({"name": name, "public": public})
        self.buckets.append(name)
        return {"name": name}

    def upload(self, bucket, path, data, content_type="application/octet-stream"):
        self.uploads.append({"bucket": bucket, "path": path, "size": len(data), "content_type": content_type})
        return path


class FakeAuthClient:
    """Stands in for the GoTrue client. Maps refresh token -> session payload."""

    def __init__(self):
        self.sessions = {}
        self.calls = []

    def refresh_session(self, refresh_token):
        self.calls.append(refresh_token)
        if refresh_token not in self.sessions:
            raise Unauthorized("Session expired")
        return self.sessions[refresh_token]

    def close(self):
        pass


# ============================================================
# APP FIXTURES
# ============================================================

@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        supabase_url="http://supabase.test",
        supabase_anon_key="anon-key",
        supabase_service_role_key=SERVICE_KEY,
        supabase_jwt_secret="test-jwt-secret-with-at-least-32-characters",
        database_url="sqlite://",
        openai_api_key="",
        debug=True,
    )


@pytest.fixture
def db():
    database = Database(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(database.engine)
    yield database
    database.dispose()


@pytest.fixture
def ai():
    return FakeCompletionClient()


@pytest.fixture
def storage():
    return FakeStorageClient()


@pytest.fixture
def auth_client():
    return FakeAuthClient()


@pytest.fixture
def app(settings, db, ai, auth_client, storage):
    return create_app(
        settings=settings,
        database=db,
        ai_client=ai,
        auth_client=auth_client,
        storage_client=storage,
    )


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


# ============================================================
# DATA HELPERS
# ============================================================

def auth_headers(settings, user_id, email="user@example.com", expires_delta=None):
    token = create_access_token(str(user_id), email, settings, expires_delta=expires_delta)
    return {"Authorization": f"Bearer {token}"}


def insert_company(db, name="Acme Corp"):
    with db.session() as s:
        return s.execute(companies.insert().values(name=name).returning(companies.c.id)).scalar_one()


def insert_user(db, user_type="individual", company_id=None, email=None):
    user_id = uuid.uuid4()
    with db.session() as s:
        s.execute(users.insert().values(
            id=user_id,
            email=email or f"{user_id.hex[:8]}@example.com",
            user_type=user_type,
            company_id=company_id,
        ))
    return user_id


def insert_job(db, company_id, title="Backend Engineer", status="PUBLISHED", created_at=None,
               required_skills=("Python", "SQL")):
    with db.session() as s:
        return s.execute(job_postings.insert().values(
            title=title,
            description=f"{title} wanted",
            required_skills=list(required_skills),
            location="Remote",
            job_type="FULL_TIME",
            salary_range="$100k",
            company_id=company_id,
            status=status,
            created_at=created_at or datetime.now(timezone.utc),
        ).returning(job_postings.c.id)).scalar_one()


def insert_resume(db, user_id, full_name="Jane Doe", created_at=None, **content):
    with db.session() as s:
        return s.execute(resumes.insert().values(
            user_id=user_id,
            content={"personalInfo": {"fullName": full_name}, **content},
            created_at=created_at or datetime.now(timezone.utc),
        ).returning(resumes.c.id)).scalar_one()


def minutes_ago(n):
    return datetime.now(timezone.utc) - timedelta(minutes=n)


@pytest.fixture
def company_user(db, settings):
    """(company_id, user_id, headers) for a company account."""
    company_id = insert_company(db)
    user_id = insert_user(db, "company", company_id)
    return company_id, user_id, auth_headers(settings, user_id, "hr@acme.example")


@pytest.fixture
def individual(db, settings):
    """(user_id, headers) for an individual account."""
    user_id = insert_user(db, "individual")
    return user_id, auth_headers(settings, user_id, "jane@example.com")
