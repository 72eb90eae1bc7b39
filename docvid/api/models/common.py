"""
Common models for docvid API
"""

from pydantic import BaseModel, Field
from datetime import datetime


class HealthResponse(BaseModel):
    """Basic health check response."""

    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Response timestamp")
    service: str = Field(..., description="Service name")


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Error message")
