"""
Family Cookbook Backend — Shared Response Schemas
===================================================

What:  Response shapes shared by several routers: the success envelope, the
       error envelope and the health check payload.
"""

from typing import Optional

from pydantic import BaseModel, Field


class SuccessResponse(BaseModel):
    """Plain acknowledgement: {"success": true}."""
    success: bool = Field(default=True)


class CreatedResponse(SuccessResponse):
    """Acknowledgement for endpoints that create a row: {"success": true, "id": 7}."""
    id: int = Field(description="Identifier of the created row")


class CountResponse(BaseModel):
    count: int = Field(ge=0, description="Number of matching rows")


class ErrorResponse(BaseModel):
    """
    What:  Error format returned by every global exception handler.

    Example:
        {
            "error": "unsupported_file_type",
            "message": "File type '.rtf' is not supported. Allowed types: .docx, .pdf, .txt",
            "details": {"extension": ".rtf", "allowed": [".docx", ".pdf", ".txt"]},
            "request_id": "1f0c9a2b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
