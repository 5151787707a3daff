"""
LeetNotes Backend — Note Schemas
==================================

What:  The parsed-sections record and the Note response model.
Who:   NoteSections is produced by the section parser and consumed by
       NoteService; NoteResponse is returned by the notes endpoints.

Response shape (the web client reads the sections from the nested `notes`
object):
    {
        "id": 7, "problem_id": 42, "title": "Two Sum",
        "notes": {"topic": "...", "question": "...", ..., "code": "..."},
        "created_at": "...", "updated_at": "..."
    }
"""

from datetime import datetime

from pydantic import BaseModel, Field

from leetnotes.models.note import NOTE_SECTION_FIELDS


class NoteSections(BaseModel):
    """The eight generated sections; every field defaults to an empty string."""

    topic: str = ""
    question: str = ""
    intuition: str = ""
    example: str = ""
    counterexample: str = ""
    pseudocode: str = ""
    mistake: str = ""
    code: str = ""

    model_config = {"from_attributes": True}


class NoteResponse(BaseModel):
    id: int = Field(description="Note identifier")
    problem_id: int = Field(description="Problem this note belongs to")
    title: str = Field(description="Note title (generated topic or problem title)")
    notes: NoteSections = Field(description="Generated study sections")
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, note) -> "NoteResponse":
        """Build the nested response from a flat `notes` row."""
        return cls(
            id=note.id,
            problem_id=note.problem_id,
            title=note.title,
            notes=NoteSections(**{name: getattr(note, name) or "" for name in NOTE_SECTION_FIELDS}),
            created_at=note.created_at,
            updated_at=note.updated_at,
        )
