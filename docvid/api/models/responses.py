"""
Response models for docvid API
"""

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    """Response model for a processed upload."""

    message: str = Field(..., description="Human-readable status")
    file: str = Field(..., description="Generated output filename")
    downloadUrl: str = Field(..., description="Relative URL serving the output")
