"""
LeetNotes Backend — Fetcher Service Unit Tests
================================================

What:  Invocation of the LeetCode fetcher subprocess and validation of its
       output.
How:   FetcherService._run is patched to return (exit status, stdout,
       stderr); one test runs a real short-lived subprocess.

What we test:
    ✅ Argument list (no shell)
    ✅ Non-zero exit, fatal stderr markers → ScraperError
    ✅ Benign stderr ignored
    ✅ Empty stdout → ScraperError; bad JSON / schema → ScraperOutputError
    ✅ Schema defaults and the `id` / `submission_id` alias
    ✅ Timeout kills the process
"""

import json
import sys
from unittest.mock import AsyncMock, patch

import pytest

from leetnotes.exceptions import ScraperError, ScraperOutputError
from leetnotes.schemas.fetcher import FetchDataRequest, ScrapedSubmission
from leetnotes.services.fetcher_service import (
    FetcherService,
    parse_fetcher_output,
    stderr_is_fatal,
)

VALID_OUTPUT = json.dumps(
    {
        "username": "coder",
        "profile_stats": {"total_solved": 1, "easy": 1, "medium": 0, "hard": 0},
        "problems": [
            {
                "title": "Two Sum",
                "slug": "two-sum",
                "difficulty": "Easy",
                "description": "...",
                "tags": ["Array"],
                "submissions": [{"id": 1001, "status": "Accepted", "code": "x", "timestamp": "1709251200"}],
            }
        ],
    }
)


@pytest.fixture
def request_body():
    return FetchDataRequest(username="coder", session_cookie="sess-value", csrf_token="csrf-value")


@pytest.fixture
def fetcher():
    return FetcherService(python_executable="python3", script_path="/opt/fetcher/main.py", timeout=30)


def test_build_command(fetcher, request_body):
    assert fetcher.build_command(request_body) == [
        "python3",
        "/opt/fetcher/main.py",
        "--username",
        "coder",
        "--session",
        "sess-value",
        "--csrf",
        "csrf-value",
    ]


class TestStderrClassification:
    @pytest.mark.parametrize(
        "stderr",
        [
            "Authentication failed for user coder",
            "Rate limited by LeetCode, retry later",
            "Traceback (most recent call last):\n  File ...",
            "ERROR: could not reach graphql endpoint",
            "requests error: timeout",
        ],
    )
    def test_fatal(self, stderr):
        assert stderr_is_fatal(stderr) is True

    @pytest.mark.parametrize("stderr", ["Fetching page 2 of 5", "DeprecationWarning: something"])
    def test_benign(self, stderr):
        assert stderr_is_fatal(stderr) is False


class TestFetch:
    @pytest.mark.asyncio
    async def test_success(self, fetcher, request_body):
        with patch.object(fetcher, "_run", AsyncMock(return_value=(0, VALID_OUTPUT, ""))) as run:
            payload = await fetcher.fetch(request_body)

        run.assert_awaited_once_with(fetcher.build_command(request_body))
        assert payload.profile_stats.total_solved == 1
        assert payload.problems[0].submissions[0].submission_id == "1001"

    @pytest.mark.asyncio
    async def test_nonzero_exit(self, fetcher, request_body):
        with patch.object(fetcher, "_run", AsyncMock(return_value=(2, "", "usage error"))):
            with pytest.raises(ScraperError) as exc_info:
                await fetcher.fetch(request_body)

        assert exc_info.value.message == "Failed to execute Python script"
        assert exc_info.value.details == "Script execution failed. Check server logs. Code: 2"

    @pytest.mark.asyncio
    async def test_fatal_stderr_with_exit_zero(self, fetcher, request_body):
        with patch.object(
            fetcher, "_run", AsyncMock(return_value=(0, VALID_OUTPUT, "Authentication failed"))
        ):
            with pytest.raises(ScraperError) as exc_info:
                await fetcher.fetch(request_body)
        assert exc_info.value.message == "Python script reported an error"

    @pytest.mark.asyncio
    async def test_benign_stderr_ignored(self, fetcher, request_body):
        with patch.object(fetcher, "_run", AsyncMock(return_value=(0, VALID_OUTPUT, "progress 1/1"))):
            payload = await fetcher.fetch(request_body)
        assert len(payload.problems) == 1

    @pytest.mark.asyncio
    async def test_empty_stdout(self, fetcher, request_body):
        with patch.object(fetcher, "_run", AsyncMock(return_value=(0, "  \n", ""))):
            with pytest.raises(ScraperError) as exc_info:
                await fetcher.fetch(request_body)
        assert not isinstance(exc_info.value, ScraperOutputError)
        assert exc_info.value.message == "Python script did not produce expected data"

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self, request_body):
        slow = FetcherService(
            python_executable=sys.executable,
            script_path="-c",
            timeout=1,
        )
        command = [sys.executable, "-c", "import time; time.sleep(30)"]
        with patch.object(slow, "build_command", return_value=command):
            with pytest.raises(ScraperError) as exc_info:
                await slow.fetch(request_body)
        assert "did not finish" in exc_info.value.details

    @pytest.mark.asyncio
    async def test_missing_executable(self, request_body):
        missing = FetcherService(python_executable="/nonexistent/python", script_path="main.py", timeout=5)
        with pytest.raises(ScraperError):
            await missing.fetch(request_body)


class TestParseOutput:
    def test_invalid_json(self):
        with pytest.raises(ScraperOutputError) as exc_info:
            parse_fetcher_output("not json {")
        assert exc_info.value.message == "Invalid data format from fetcher script"

    def test_schema_mismatch(self):
        with pytest.raises(ScraperOutputError):
            parse_fetcher_output(json.dumps({"problems": [{"title": "No slug"}]}))

    def test_defaults(self):
        payload = parse_fetcher_output(
            json.dumps(
                {
                    "profile_stats": {"total_solved": 5, "easy": None},
                    "problems": [{"title": "Two Sum", "slug": "two-sum", "tags": None, "submissions": None}],
                }
            )
        )

        assert payload.username is None
        assert payload.profile_stats.easy == 0
        assert payload.profile_stats.hard == 0
        assert payload.problems[0].tags == []
        assert payload.problems[0].submissions == []

    def test_missing_stats_and_problems(self):
        payload = parse_fetcher_output("{}")
        assert payload.profile_stats.total_solved == 0
        assert payload.problems == []


class TestScrapedSubmission:
    def test_submission_id_alias(self):
        assert ScrapedSubmission.model_validate({"submission_id": "77"}).submission_id == "77"
        assert ScrapedSubmission.model_validate({"id": 78}).submission_id == "78"

    def test_missing_id_and_status(self):
        submission = ScrapedSubmission.model_validate({"code": "x"})
        assert submission.submission_id is None
        assert submission.status == "Unknown"

    def test_epoch_timestamp(self):
        submission = ScrapedSubmission.model_validate({"id": 1, "timestamp": "1709251200"})
        submitted = submission.submitted_at()
        assert submitted.year == 2024
        assert submitted.tzinfo is not None

    @pytest.mark.parametrize(
        "raw",
        ["2024-03-01T00:00:00Z", "2024-03-01T00:00:00+00:00", "2024-03-01T00:00:00"],
    )
    def test_iso_timestamp(self, raw):
        from datetime import datetime, timezone

        submitted = ScrapedSubmission.model_validate({"id": 1, "timestamp": raw}).submitted_at()
        assert submitted == datetime(2024, 3, 1, tzinfo=timezone.utc)

    def test_bad_timestamp_becomes_now(self):
        from datetime import datetime, timezone

        before = datetime.now(timezone.utc)
        submitted = ScrapedSubmission.model_validate({"id": 1, "timestamp": "yesterday"}).submitted_at()
        assert submitted >= before
