"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown
- FastAPI test client with the API key
- Fake auth provider and jobs API client for dashboard routes
"""

import time

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jobtracker.core.config import settings
from jobtracker.core.database import Base, get_db, init_db
from jobtracker.core.deps import get_auth_service, get_jobs_client
from jobtracker.schemas.job import JobDetailResponse, JobResponse
from jobtracker.schemas.user import AuthUser, SessionTokens
from jobtracker.services.auth_provider import AuthProviderError, AuthProviderTimeout
from jobtracker.services.jobs_client import JobsApiError
from main import app

init_db()

# Use in-memory SQLite for testing (fast, isolated)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_access_token(sub: str = "user-1", expires_in: int = 3600) -> str:
    """Provider-style JWT; only the claims matter to the dashboard."""
    claims = {"sub": sub, "exp": int(time.time()) + expires_in}
    return jwt.encode(claims, "test-signing-secret", algorithm="HS256")


class FakeAuthProvider:
    """
    Stands in for SupabaseAuthService.

    `user` is what get_user returns; set `error` to an exception instance to
    make every call raise it instead.
    """

    def __init__(self, user=None, error=None):
        self.user = user
        self.error = error
        self.sent_codes = []
        self.signed_out = []

    async def get_user(self, access_token):
        if self.error:
            raise self.error
        return self.user

    async def sign_in_with_password(self, email, password):
        if self.error:
            raise self.error
        if password != "correct-password":
            raise AuthProviderError("Invalid login credentials")
        return SessionTokens(access_token=make_access_token(), expires_in=3600, user=self.user)

    async def send_email_code(self, email):
        if self.error:
            raise self.error
        self.sent_codes.append(email)

    async def verify_email_code(self, email, code):
        if code != "123456":
            raise AuthProviderError("Token has expired or is invalid")
        return SessionTokens(access_token=make_access_token(), expires_in=3600, user=self.user)

    async def sign_out(self, access_token):
        self.signed_out.append(access_token)


class FakeJobsClient:
    """In-memory JobsApiClient; `fail_list` / `fail_patch` simulate API outages."""

    def __init__(self, jobs=None, fail_list=False, fail_patch=False):
        self.jobs = list(jobs or [])
        self.fail_list = fail_list
        self.fail_patch = fail_patch
        self.patches = []

    async def list_jobs(self, status=None):
        if self.fail_list:
            raise JobsApiError("Jobs API unreachable: connection refused")
        return [job.model_copy() for job in self.jobs if status is None or job.status == status]

    async def get_job(self, job_id):
        if self.fail_list:
            raise JobsApiError("Jobs API unreachable: connection refused")
        for job in self.jobs:
            if job.id == job_id:
                return JobDetailResponse(**job.model_dump())
        raise JobsApiError(f"Job {job_id} not found", status_code=404)

    async def patch_job(self, job_id, changes):
        self.patches.append((job_id, dict(changes)))
        if self.fail_patch:
            raise JobsApiError("Internal Server Error", status_code=500)
        for job in self.jobs:
            if job.id == job_id:
                for key, value in changes.items():
                    setattr(job, key, value)
                return job.model_copy()
        raise JobsApiError(f"Job {job_id} not found", status_code=404)


@pytest.fixture
def db_session():
    """
    Create a fresh database session for each test.
    Tables are dropped after the test completes.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """
    FastAPI test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def api_headers():
    return {"x-api-key": settings.API_KEY}


@pytest.fixture
def sample_job_data():
    """Sample job data for testing"""
    return {
        "job_no": "J20481",
        "title": "Spring Gala Banners",
        "status": "intake",
        "in_hands_date": "2026-11-14",
        "owner": "dana@example.com",
        "priority": "rush",
        "est_so_no": "SO-7731",
    }


@pytest.fixture
def auth_user():
    return AuthUser(
        id="user-1",
        email="Dana@Example.com",
        user_metadata={"full_name": "Dana Reyes"},
    )


@pytest.fixture
def board_jobs():
    return [
        JobResponse(id=1, job_no="J10001", title="Team Hoodies", status="intake", owner="dana@example.com"),
        JobResponse(id=2, job_no="J10002", title="Trade Show Banner", status="design", owner="Sam"),
        JobResponse(id=3, job_no="J10003", title="Menu Reprint", status="proof", in_hands_date="2026-10-21"),
    ]


@pytest.fixture
def fake_provider(auth_user):
    return FakeAuthProvider(user=auth_user)


@pytest.fixture
def fake_jobs_client(board_jobs):
    return FakeJobsClient(jobs=board_jobs)


@pytest.fixture
def dashboard_client(client, fake_provider, fake_jobs_client):
    """
    Test client whose dashboard talks to the fakes instead of the network.
    """
    app.dependency_overrides[get_auth_service] = lambda: fake_provider
    app.dependency_overrides[get_jobs_client] = lambda: fake_jobs_client
    return client


@pytest.fixture
def signed_in(dashboard_client):
    """Dashboard client carrying a valid session cookie."""
    dashboard_client.cookies.set(settings.SESSION_COOKIE_NAME, make_access_token())
    return dashboard_client


@pytest.fixture
def provider_timeout():
    return AuthProviderTimeout("The session check timed out")
