# Models package init
"""
ORM models. Importing this package registers every table with Base.metadata,
which Alembic's env.py relies on for --autogenerate.
"""

from leetnotes.models.note import NOTE_SECTION_FIELDS, Note
from leetnotes.models.problem import Problem, Submission
from leetnotes.models.profile_stats import ProfileStats

__all__ = ["NOTE_SECTION_FIELDS", "Note", "Problem", "ProfileStats", "Submission"]
