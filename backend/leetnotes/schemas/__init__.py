# Schemas package init
"""
Pydantic models for API requests/responses and for the payloads received from
external collaborators (fetcher stdout). ORM models live in `leetnotes.models`.
"""
