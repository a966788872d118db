"""
Storefront Backend: Shared Response Schemas
==============================================

What:  Response shapes shared by several routes (errors, acknowledgements,
       uploads, health).
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "No file uploaded",
            "details": {"field": "file"},
            "request_id": "1f0c9a2b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    """Acknowledgement for mutations that return no resource (deletes)."""
    success: bool = True
    message: str


class UploadedFile(BaseModel):
    url: str = Field(description="Public URL of the stored image")
    public_id: str = Field(description="Object-storage id; pass it to DELETE /api/upload/{public_id}")


class UploadResponse(MessageResponse):
    data: UploadedFile


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    email: str = Field(description="Email delivery mode: smtp, console")
    uptime_seconds: float = Field(description="Seconds since service started")
