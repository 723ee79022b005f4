"""
Pokédex API: Shared Response Schemas
=====================================

What:  Envelopes shared by every resource: the write acknowledgement, the
       error body and the health report.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """
    Acknowledgement returned by create/update/delete endpoints.

    Example:
        {"message": "Type added successfully!", "id": 12}
    """
    message: str = Field(description="Human-readable outcome")
    id: Optional[int] = Field(
        default=None,
        description="Id of the created, updated or deleted row",
    )


class ErrorResponse(BaseModel):
    """
    Error body returned by every failing endpoint.

    Example:
        {
            "error": "Species with ID '999999' was not found",
            "request_id": "1f3a9c2e"
        }
    """
    error: str = Field(description="Stable, human-readable error message")
    details: Optional[Any] = Field(default=None, description="Validation details, if any")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Object storage: available, unavailable, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
