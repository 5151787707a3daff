"""
LeetNotes Backend — Note Service Unit Tests
=============================================

What:  Tests for NoteService business logic (generate, get, list).
How:   Mock DB session, mock LLM provider and mock problem lookups; no real
       database or Gemini calls.

What we test:
    ✅ Full generate flow: problem → prompt → Gemini → sections → upsert
    ✅ Problem not found propagates NotFoundError and never calls Gemini
    ✅ Missing Gemini key → ConfigurationError
    ✅ Gemini failure propagates and nothing is written
    ✅ Upsert statement targets uq_notes_problem_user
    ✅ Database failure → DatabaseError with the store message
    ✅ get_note / list_notes
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from leetnotes.exceptions import ConfigurationError, DatabaseError, LLMServiceError, NotFoundError
from leetnotes.models.note import Note
from leetnotes.services.note_service import NoteService

GENERATED = """**Topic:** Two Sum
**Intuition:** Use a hash map.

**Code:** return [0,1];"""


def _note_row(problem_id=42, title="Two Sum", **sections):
    now = datetime(2024, 3, 4, tzinfo=timezone.utc)
    fields = {
        "topic": "",
        "question": "",
        "intuition": "",
        "example": "",
        "counterexample": "",
        "pseudocode": "",
        "mistake": "",
        "code": "",
    }
    fields.update(sections)
    return SimpleNamespace(
        id=7,
        problem_id=problem_id,
        title=title,
        created_at=now,
        updated_at=now,
        **fields,
    )


@pytest.fixture
def llm():
    mock = MagicMock()
    mock.is_configured.return_value = True
    mock.generate_text = AsyncMock(return_value=GENERATED)
    return mock


@pytest.fixture
def problems(sample_problem):
    mock = MagicMock()
    mock.get_problem = AsyncMock(return_value=sample_problem)
    return mock


@pytest.fixture
def service(llm, problems):
    return NoteService(llm=llm, problems=problems)


class TestGenerateNote:
    """Tests for the generate_note workflow."""

    @pytest.mark.asyncio
    async def test_success(self, service, llm, problems, mock_db_session, make_result, user_id, sample_problem):
        stored = _note_row(
            topic="Two Sum",
            question=sample_problem.description,
            intuition="Use a hash map.",
            code="return [0,1];",
        )
        mock_db_session.execute.return_value = make_result(scalar=stored)

        result = await service.generate_note(mock_db_session, user_id, 42)

        problems.get_problem.assert_awaited_once_with(mock_db_session, user_id, 42)
        prompt = llm.generate_text.call_args.args[0]
        assert "Two Sum" in prompt
        assert result.id == 7
        assert result.title == "Two Sum"
        assert result.notes.intuition == "Use a hash map."
        assert result.notes.code == "return [0,1];"

        stmt = mock_db_session.execute.call_args.args[0]
        params = stmt.compile(dialect=postgresql.dialect()).params
        assert params["topic"] == "Two Sum"
        assert params["question"] == sample_problem.description
        assert params["intuition"] == "Use a hash map."
        assert params["example"] == ""
        assert params["user_id"] == user_id
        assert params["problem_id"] == 42

    @pytest.mark.asyncio
    async def test_upsert_targets_unique_constraint(self, service, mock_db_session, make_result, user_id):
        mock_db_session.execute.return_value = make_result(scalar=_note_row())

        await service.generate_note(mock_db_session, user_id, 42)

        sql = str(mock_db_session.execute.call_args.args[0].compile(dialect=postgresql.dialect()))
        assert "ON CONFLICT ON CONSTRAINT uq_notes_problem_user DO UPDATE" in sql
        assert "updated_at = excluded.updated_at" in sql
        assert "RETURNING" in sql

    @pytest.mark.asyncio
    async def test_title_falls_back_to_problem_title(self, service, llm, mock_db_session, make_result, user_id):
        llm.generate_text.return_value = "**Intuition:** only this"
        mock_db_session.execute.return_value = make_result(scalar=_note_row())

        await service.generate_note(mock_db_session, user_id, 42)

        params = mock_db_session.execute.call_args.args[0].compile(dialect=postgresql.dialect()).params
        assert params["title"] == "Two Sum"
        assert params["topic"] == "Two Sum"

    @pytest.mark.asyncio
    async def test_long_multiline_topic_stored_whole(self, service, llm, mock_db_session, make_result, user_id):
        topic_lines = ["Two Sum with a hash map"] + [f"continued topic line {i} " * 3 for i in range(20)]
        llm.generate_text.return_value = "**Topic:** " + "\n".join(topic_lines) + "\n**Code:** x"
        mock_db_session.execute.return_value = make_result(scalar=_note_row())

        await service.generate_note(mock_db_session, user_id, 42)

        params = mock_db_session.execute.call_args.args[0].compile(dialect=postgresql.dialect()).params
        assert len(params["title"]) > 255
        assert params["title"] == params["topic"]
        assert getattr(Note.__table__.c.title.type, "length", None) is None

    @pytest.mark.asyncio
    async def test_problem_not_found(self, service, llm, problems, mock_db_session, user_id):
        problems.get_problem.side_effect = NotFoundError(resource="problem", resource_id="99")

        with pytest.raises(NotFoundError) as exc_info:
            await service.generate_note(mock_db_session, user_id, 99)

        assert exc_info.value.details == "Problem with ID 99 not found for this user."
        llm.generate_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_api_key(self, service, llm, mock_db_session, user_id):
        llm.is_configured.return_value = False

        with pytest.raises(ConfigurationError) as exc_info:
            await service.generate_note(mock_db_session, user_id, 42)

        assert exc_info.value.message == "Server configuration error"
        assert exc_info.value.details == "Missing API key."
        llm.generate_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_gemini_failure_writes_nothing(self, service, llm, mock_db_session, user_id):
        llm.generate_text.side_effect = LLMServiceError(details="Status 500")

        with pytest.raises(LLMServiceError):
            await service.generate_note(mock_db_session, user_id, 42)

        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_database_failure(self, service, mock_db_session, user_id):
        mock_db_session.execute.side_effect = OperationalError("INSERT", {}, Exception("disk full"))

        with pytest.raises(DatabaseError) as exc_info:
            await service.generate_note(mock_db_session, user_id, 42)

        assert exc_info.value.message == "Failed to store note in database."
        assert exc_info.value.details == "disk full"


class TestNoteQueries:
    @pytest.mark.asyncio
    async def test_get_note(self, service, mock_db_session, make_result, user_id):
        mock_db_session.execute.return_value = make_result(scalar=_note_row(code="x = 1"))

        note = await service.get_note(mock_db_session, user_id, 42)

        assert note.problem_id == 42
        assert note.notes.code == "x = 1"

    @pytest.mark.asyncio
    async def test_get_note_missing(self, service, mock_db_session, make_result, user_id):
        mock_db_session.execute.return_value = make_result(scalar=None)

        with pytest.raises(NotFoundError) as exc_info:
            await service.get_note(mock_db_session, user_id, 42)
        assert exc_info.value.message == "Note not found"

    @pytest.mark.asyncio
    async def test_list_notes(self, service, mock_db_session, make_result, user_id):
        mock_db_session.execute.return_value = make_result(
            scalars=[_note_row(problem_id=2), _note_row(problem_id=1)]
        )

        notes = await service.list_notes(mock_db_session, user_id)

        assert [n.problem_id for n in notes] == [2, 1]
        sql = str(mock_db_session.execute.call_args.args[0].compile(dialect=postgresql.dialect()))
        assert "ORDER BY notes.updated_at DESC" in sql
