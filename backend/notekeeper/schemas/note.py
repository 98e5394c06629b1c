"""
NoteKeeper Backend — Pydantic Request/Response Schemas
========================================================

What:  Pydantic models defining the API contract.
Why:   Strict input validation and predictable JSON serialization.
How:   Request bodies are validated explicitly in the route handlers (after
       authentication) so malformed JSON maps to 400, not FastAPI's 422.

Design Decision:
    Schemas are separate from the SQLAlchemy models so internal fields
    (owner id, created_at) never leak into responses.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """
    Body of POST /notes.

    `name` is checked for blankness by the route; the stored name is the one
    the client sent, untrimmed. A missing or null `content` stores an empty
    note; a null `name` counts as blank.
    """
    name: str = Field(description="Note name, unique per user")
    content: str = Field(default="", description="Note text")

    @field_validator("name", "content", mode="before")
    @classmethod
    def null_is_empty(cls, value):
        return "" if value is None else value


class NoteUpdate(BaseModel):
    """Body of PUT /notes/{name}. Content is replaced wholesale."""
    content: str = Field(default="", description="New note text")

    @field_validator("content", mode="before")
    @classmethod
    def null_is_empty(cls, value):
        return "" if value is None else value


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """Single note as returned by GET /notes/{name}."""
    id: int
    name: str
    content: str

    model_config = {"from_attributes": True}


class StatusResponse(BaseModel):
    """Status marker returned by create, update and delete."""
    status: Literal["created", "updated", "deleted"]


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Fields:
        error: Machine-readable error code (e.g. "unauthorized", "not_found")
        message: Client-safe description
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
