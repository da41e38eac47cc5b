"""Pytest configuration and fixtures for voicejournal tests."""

import os
import tempfile
from pathlib import Path
from typing import AsyncGenerator
from unittest.mock import AsyncMock

# Set test environment variables BEFORE importing voicejournal modules
# This ensures the Settings singleton loads with test values
TEST_DB_DIR = Path(tempfile.mkdtemp(prefix="voicejournal-test-"))
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{TEST_DB_DIR / 'voicejournal_test.db'}"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["OPENAI_API_KEY"] = "test-openai-key"
os.environ["ANTHROPIC_API_KEY"] = "test-anthropic-key"
os.environ["AUDIO_STORAGE_DIR"] = str(TEST_DB_DIR / "uploads")
os.environ.pop("GITHUB_CLIENT_ID", None)

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

import voicejournal.models  # noqa: F401
from voicejournal.db import get_engine, get_session
from voicejournal.db.connection import async_session_factory
from voicejournal.models import User, Week, WeeklyReflection
from voicejournal.services.reflection import ReflectionService
from voicejournal.services.weeks import WeekService

from tests.factories import UserFactory, WeekFactory
from tests.utils import REFLECTION_AT


@pytest.fixture
async def db_engine():
    """Recreate every table on the test database."""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Session for seeding and inspecting data.

    Tests commit seeded rows before calling services, which open their own
    sessions through ``session_factory``.
    """
    async with async_session_factory() as session:
        yield session


@pytest.fixture
def session_factory(db_engine):
    """The committing session context manager services use."""
    return get_session


@pytest.fixture
async def user(db_session) -> User:
    """A committed user whose reflection runs Sunday 18:00 New York time."""
    user = UserFactory(next_reflection_at=REFLECTION_AT)
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
async def recording_week(db_session, user) -> Week:
    """The user's committed recording week ending at REFLECTION_AT."""
    week = WeekFactory(user_id=user.id, reflection_date=REFLECTION_AT)
    db_session.add(week)
    await db_session.commit()
    return week


@pytest.fixture
def mock_transcription():
    """Transcription collaborator that echoes the audio reference."""
    mock = AsyncMock()
    mock.transcribe = AsyncMock(side_effect=lambda audio_ref: f"text for {audio_ref}")
    return mock


@pytest.fixture
def sample_reflection() -> WeeklyReflection:
    return WeeklyReflection(
        summary="A steady week with a few late nights.",
        mood_trend="reflective",
        key_themes=["work", "family", "sleep"],
        highlights=["Dinner with my sister", "Shipped the release"],
    )


@pytest.fixture
def mock_summarization(sample_reflection):
    mock = AsyncMock()
    mock.summarize = AsyncMock(return_value=sample_reflection)
    return mock


@pytest.fixture
def reflection(session_factory, mock_transcription, mock_summarization) -> ReflectionService:
    """ReflectionService wired to the test database and mocked collaborators."""
    return ReflectionService(
        transcription=mock_transcription,
        summarization=mock_summarization,
        session_factory=session_factory,
        weeks=WeekService(),
        transcription_timeout_seconds=1.0,
        summarization_timeout_seconds=1.0,
        transcription_concurrency=2,
    )
