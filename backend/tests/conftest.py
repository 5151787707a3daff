"""
LeetNotes Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set before anything from `leetnotes` is
       imported, so the settings singleton, the engine and the service
       singletons are built against test values (SQLite URL, fake keys).

Fixture Hierarchy:
    Function-scoped:
    ├── mock_db_session:   AsyncMock session (execute/flush/commit, begin_nested)
    ├── user / user_id:    the authenticated caller
    ├── sample_submissions, sample_problem: ORM-like rows (SimpleNamespace)
    ├── fetcher_payload:   a validated FetcherPayload
    └── test_client:       httpx AsyncClient on the app, auth + DB overridden
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["SUPABASE_URL"] = "https://test-project.supabase.co"
os.environ["SUPABASE_ANON_KEY"] = "test-anon-key"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from leetnotes.schemas.fetcher import FetcherPayload
from leetnotes.services.auth_service import AuthenticatedUser

TEST_USER_ID = UUID("7d0c1c9e-2f4b-4b7e-9a52-3a1f6f0c9b11")


def make_result(scalar=None, scalars=None):
    """
    Build the object returned by `await session.execute(...)`.

    `scalar` feeds scalar_one_or_none()/scalar_one(); `scalars` feeds
    scalars().all().
    """
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    result.scalar_one.return_value = scalar
    result.scalars.return_value.all.return_value = list(scalars or [])
    return result


@pytest.fixture(name="make_result")
def make_result_fixture():
    return make_result


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession.

    begin_nested() returns a MagicMock, which supports `async with`, so
    SAVEPOINT blocks in the services run unchanged.

    Usage:
        mock_db_session.execute.return_value = make_result(scalar=problem)
    """
    session = AsyncMock()
    session.execute = AsyncMock(return_value=make_result())
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.begin_nested = MagicMock()
    return session


@pytest.fixture
def user_id():
    return TEST_USER_ID


@pytest.fixture
def user():
    return AuthenticatedUser(id=TEST_USER_ID, email="coder@example.com")


@pytest.fixture
def sample_submissions():
    """Newest first, as the Problem.submissions relationship orders them."""
    return [
        SimpleNamespace(
            id=3,
            problem_id=42,
            status="Wrong Answer",
            language="python3",
            runtime="N/A",
            memory="N/A",
            code="def twoSum(self, nums, target):\n    return []",
            submission_id="1003",
            timestamp=datetime(2024, 3, 3, tzinfo=timezone.utc),
        ),
        SimpleNamespace(
            id=2,
            problem_id=42,
            status="Accepted",
            language="python3",
            runtime="52 ms",
            memory="17.9 MB",
            code="def twoSum(self, nums, target):\n    seen = {}",
            submission_id="1002",
            timestamp=datetime(2024, 3, 2, tzinfo=timezone.utc),
        ),
        SimpleNamespace(
            id=1,
            problem_id=42,
            status="Accepted",
            language="cpp",
            runtime="8 ms",
            memory="10.1 MB",
            code="vector<int> twoSum(vector<int>& nums, int target) {}",
            submission_id="1001",
            timestamp=datetime(2024, 3, 1, tzinfo=timezone.utc),
        ),
    ]


@pytest.fixture
def sample_problem(sample_submissions):
    return SimpleNamespace(
        id=42,
        user_id=TEST_USER_ID,
        title="Two Sum",
        difficulty="Easy",
        description="Given an array of integers nums and an integer target...",
        tags=["Array", "Hash Table"],
        slug="two-sum",
        created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
        submissions=sample_submissions,
    )


@pytest.fixture
def fetcher_payload():
    return FetcherPayload.model_validate(
        {
            "username": "coder",
            "profile_stats": {"total_solved": 3, "easy": 2, "medium": 1, "hard": 0},
            "problems": [
                {
                    "title": "Two Sum",
                    "slug": "two-sum",
                    "difficulty": "Easy",
                    "description": "Find two numbers...",
                    "tags": ["Array"],
                    "submissions": [
                        {"id": "1001", "status": "Accepted", "code": "x", "timestamp": "1709251200", "language": "python3"},
                        {"id": "1002", "status": "Wrong Answer", "code": "y", "timestamp": 1709164800, "language": "python3"},
                    ],
                },
                {
                    "title": "Add Two Numbers",
                    "slug": "add-two-numbers",
                    "difficulty": "Medium",
                    "description": "Linked lists...",
                    "tags": [],
                    "submissions": [],
                },
            ],
        }
    )


@pytest_asyncio.fixture
async def test_client(user, mock_db_session):
    """
    HTTP client for endpoint tests.

    get_current_user and get_db_session are overridden, so requests carry
    `user` without a token and reach `mock_db_session`.
    """
    from leetnotes.database import get_db_session
    from leetnotes.dependencies import get_current_user
    from leetnotes.main import app

    async def override_db():
        yield mock_db_session

    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_db_session] = override_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def anonymous_client():
    """HTTP client with no dependency overrides (real auth dependency)."""
    from leetnotes.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
