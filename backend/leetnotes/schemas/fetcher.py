"""
LeetNotes Backend — Fetch-Data Request & Fetcher Output Schemas
=================================================================

What:  Pydantic models for the POST /api/fetch-data body and for the JSON the
       external LeetCode fetcher prints on stdout.
Why:   The fetcher is a separate program; its output is validated here once,
       and ingestion code only ever reads typed, defaulted fields.

Expected fetcher document:
    {
        "username": "alice",
        "profile_stats": {"total_solved": 120, "easy": 60, "medium": 50, "hard": 10},
        "problems": [
            {
                "title": "Two Sum", "slug": "two-sum", "difficulty": "Easy",
                "description": "...", "tags": ["Array", "Hash Table"],
                "submissions": [
                    {"id": "1234567", "status": "Accepted", "language": "python3",
                     "runtime": "52 ms", "memory": "17.9 MB",
                     "timestamp": "1700000000", "code": "..."}
                ]
            }
        ]
    }
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class FetchDataRequest(BaseModel):
    """Body of POST /api/fetch-data. Credentials are forwarded to the fetcher only."""

    username: str = Field(min_length=1, max_length=100, description="LeetCode username")
    session_cookie: str = Field(min_length=1, description="LEETCODE_SESSION cookie value")
    csrf_token: str = Field(min_length=1, description="csrftoken cookie value")

    @field_validator("username", "session_cookie", "csrf_token")
    @classmethod
    def not_blank(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class ScrapedProfileStats(BaseModel):
    total_solved: int = Field(default=0, ge=0)
    easy: int = Field(default=0, ge=0)
    medium: int = Field(default=0, ge=0)
    hard: int = Field(default=0, ge=0)

    @field_validator("total_solved", "easy", "medium", "hard", mode="before")
    @classmethod
    def none_is_zero(cls, v):
        return 0 if v is None else v


class ScrapedSubmission(BaseModel):
    """
    One submission from the fetcher.

    The LeetCode id arrives as `id` (current fetcher) or `submission_id`
    (older output); both are accepted. A submission without an id cannot be
    deduplicated and is skipped by ingestion.
    """

    submission_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("submission_id", "id"),
    )
    status: str = "Unknown"
    language: Optional[str] = None
    runtime: Optional[str] = None
    memory: Optional[str] = None
    code: Optional[str] = None
    timestamp: Optional[str] = None

    @field_validator("submission_id", "timestamp", "runtime", "memory", mode="before")
    @classmethod
    def coerce_to_str(cls, v):
        if v is None or v == "":
            return None
        return str(v)

    def submitted_at(self) -> datetime:
        """
        Timestamp as an aware datetime.

        Accepts epoch seconds ("1709251200") or ISO 8601 ("2024-03-01T00:00:00Z");
        naive ISO values are taken as UTC. Absent or unparsable → now (UTC).
        """
        if not self.timestamp:
            return datetime.now(timezone.utc)
        try:
            return datetime.fromtimestamp(int(float(self.timestamp)), tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            pass
        try:
            parsed = datetime.fromisoformat(self.timestamp.strip().replace("Z", "+00:00"))
        except ValueError:
            return datetime.now(timezone.utc)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed


class ScrapedProblem(BaseModel):
    title: str
    slug: str
    difficulty: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    submissions: List[ScrapedSubmission] = Field(default_factory=list)

    @field_validator("tags", "submissions", mode="before")
    @classmethod
    def none_is_empty(cls, v):
        return [] if v is None else v


class FetcherPayload(BaseModel):
    """Top-level fetcher document."""

    username: Optional[str] = None
    profile_stats: ScrapedProfileStats = Field(default_factory=ScrapedProfileStats)
    problems: List[ScrapedProblem] = Field(default_factory=list)

    @field_validator("profile_stats", mode="before")
    @classmethod
    def none_is_default_stats(cls, v):
        return {} if v is None else v

    @field_validator("problems", mode="before")
    @classmethod
    def none_is_no_problems(cls, v):
        return [] if v is None else v


class FetchDataResponse(BaseModel):
    """Result of a successful fetch + ingestion run."""

    message: str = "Data fetched and stored successfully."
    problems_processed: int = Field(description="Problems inserted or matched to an existing row")
    problems_skipped: int = Field(description="Problems that could not be stored")
    submissions_inserted: int = Field(description="New submission rows")
    submissions_skipped: int = Field(description="Duplicates and submissions without an id")
