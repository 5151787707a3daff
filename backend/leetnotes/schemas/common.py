"""
LeetNotes Backend — Shared Response Schemas
=============================================

Error, health, and plain-message bodies used across routers.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body for every non-2xx response.

    Example:
        {
            "error": "Problem not found",
            "details": "Problem with ID 42 not found for this user.",
            "code": "not_found",
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Human-readable error description")
    details: Optional[str] = Field(default=None, description="Additional explanation")
    code: str = Field(description="Machine-readable error code")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    gemini: str = Field(description="Gemini status: configured, not_configured, circuit_open")
    auth: str = Field(description="Supabase Auth: configured, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
