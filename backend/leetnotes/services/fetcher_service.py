"""
LeetNotes Backend — LeetCode Fetcher Invocation
=================================================

What:  Runs the external LeetCode data fetcher and returns its validated output.
How:   `asyncio.create_subprocess_exec` with an argument list (no shell, so
       usernames and cookies are never interpreted), bounded by
       FETCHER_TIMEOUT. Stdout is decoded as JSON and validated against
       FetcherPayload.
Who:   Called by the POST /api/fetch-data route before ingestion.

Command:
    <FETCHER_PYTHON> <FETCHER_SCRIPT_PATH> --username U --session S --csrf C

Outcome rules:
    exit status != 0 or timeout              → ScraperError
    stderr with a fatal marker               → ScraperError
    other stderr                             → logged, ignored
    empty stdout                             → ScraperError
    stdout not JSON / schema mismatch        → ScraperOutputError
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from leetnotes.config import settings
from leetnotes.exceptions import ScraperError, ScraperOutputError
from leetnotes.schemas.fetcher import FetchDataRequest, FetcherPayload

logger = logging.getLogger(__name__)

FATAL_STDERR_MARKERS = ("Authentication failed", "Rate limited", "Traceback")
LOG_OUTPUT_LIMIT = 2000


def stderr_is_fatal(stderr: str) -> bool:
    """True if the fetcher reported a failure on stderr."""
    return any(marker in stderr for marker in FATAL_STDERR_MARKERS) or "error:" in stderr.lower()


def parse_fetcher_output(stdout: str) -> FetcherPayload:
    """
    Decode and validate fetcher stdout.

    Raises:
        ScraperError: stdout is empty.
        ScraperOutputError: Not JSON, or not shaped like FetcherPayload.
    """
    if not stdout or not stdout.strip():
        raise ScraperError(
            message="Python script did not produce expected data",
            details="Fetcher script returned no data. Check server logs.",
        )
    try:
        raw = json.loads(stdout)
    except json.JSONDecodeError as e:
        logger.error("Fetcher stdout is not JSON: %s | stdout: %s", str(e), stdout[:LOG_OUTPUT_LIMIT])
        raise ScraperOutputError(context={"error": str(e)})
    try:
        return FetcherPayload.model_validate(raw)
    except PydanticValidationError as e:
        logger.error("Fetcher output failed validation: %s", str(e))
        raise ScraperOutputError(context={"errors": e.errors(include_url=False)})


class FetcherService:
    """Wraps the fetcher subprocess."""

    def __init__(
        self,
        python_executable: Optional[str] = None,
        script_path: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        self.python_executable = python_executable or settings.fetcher_python
        self.script_path = Path(script_path or settings.fetcher_script_path)
        self.timeout = timeout or settings.fetcher_timeout

    def build_command(self, request: FetchDataRequest) -> List[str]:
        return [
            self.python_executable,
            str(self.script_path),
            "--username",
            request.username,
            "--session",
            request.session_cookie,
            "--csrf",
            request.csrf_token,
        ]

    async def _run(self, command: List[str]) -> Tuple[int, str, str]:
        """Run the command; return (exit status, stdout, stderr)."""
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("Could not start fetcher %s: %s", self.script_path, str(e))
            raise ScraperError(
                details="Script execution failed. Check server logs.",
                context={"os_error": str(e)},
            )

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.error("Fetcher timed out after %ds", self.timeout)
            raise ScraperError(details=f"Fetcher did not finish within {self.timeout} seconds.")

        return (
            process.returncode if process.returncode is not None else -1,
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )

    async def fetch(self, request: FetchDataRequest) -> FetcherPayload:
        """
        Run the fetcher for one LeetCode account and return its parsed output.

        Raises:
            ScraperError / ScraperOutputError as listed in the module docstring.
        """
        # Log only the username; session and csrf values are credentials
        logger.info("Running fetcher %s for username=%s", self.script_path, request.username)
        returncode, stdout, stderr = await self._run(self.build_command(request))

        if returncode != 0:
            logger.error(
                "Fetcher exited with code %d. Stderr: %s",
                returncode,
                stderr[:LOG_OUTPUT_LIMIT] or "(empty)",
            )
            raise ScraperError(
                details=f"Script execution failed. Check server logs. Code: {returncode}",
                context={"returncode": returncode},
            )

        if stderr:
            logger.warning("Fetcher stderr: %s", stderr[:LOG_OUTPUT_LIMIT])
            if stderr_is_fatal(stderr):
                raise ScraperError(
                    message="Python script reported an error",
                    details="Error during data fetching. Check server logs for Python script errors.",
                )

        payload = parse_fetcher_output(stdout)
        logger.info(
            "Fetcher returned %d problems for username=%s",
            len(payload.problems),
            request.username,
        )
        return payload


fetcher_service = FetcherService()
