"""
Murmur Backend — Shared Pydantic Schemas
==========================================

What:  Base model and response envelopes shared by every API module.
How:   `CamelModel` converts snake_case attributes to camelCase JSON keys
       (`full_name` ↔ `fullName`) and accepts either spelling on input, so
       the browser client keeps its existing field names.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for all API schemas: camelCase on the wire, ORM-readable."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    """Plain acknowledgement, e.g. logout."""
    message: str = Field(description="Human-readable result")


class CountResponse(CamelModel):
    """Result of a bulk mutation (mark read, delete all)."""
    message: str = Field(description="Human-readable result")
    count: int = Field(description="Number of rows affected")


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "Post 'a1b2...' was not found",
            "request_id": "5f2c9e1a"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    media: str = Field(description="Media host status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
