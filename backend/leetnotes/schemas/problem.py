"""
LeetNotes Backend — Problem, Submission & ProfileStats Response Schemas
=========================================================================

Response models for the read endpoints. Built from ORM rows with
`model_validate(row)` (from_attributes).
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class SubmissionResponse(BaseModel):
    id: int
    problem_id: int
    status: str
    language: Optional[str] = None
    runtime: Optional[str] = None
    memory: Optional[str] = None
    code: Optional[str] = None
    submission_id: str = Field(description="LeetCode submission identifier")
    timestamp: datetime

    model_config = {"from_attributes": True}


class ProblemResponse(BaseModel):
    """A problem with its submissions, newest submission first."""

    id: int
    title: str
    difficulty: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    slug: str
    created_at: datetime
    submissions: List[SubmissionResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class ProfileStatsResponse(BaseModel):
    user_id: uuid.UUID
    total_solved: int
    easy: int
    medium: int
    hard: int
    updated_at: datetime

    model_config = {"from_attributes": True}
