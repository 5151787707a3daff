"""
LeetNotes Backend — Application Package Initializer
====================================================

What: Marks the `leetnotes` directory as a Python package.
Who:  Imported by uvicorn (`leetnotes.main:app`), Alembic, and pytest.

Architecture Note:
    The backend is split into the same four layers for every feature:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependency
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← scraping, ingestion, notes
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    External collaborators (Supabase Auth, the LeetCode fetcher script and
    the Gemini API) are each wrapped by exactly one service module.
"""

__version__ = "2.0.0"
