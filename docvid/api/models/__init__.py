"""
API models for docvid
"""

from .responses import UploadResponse
from .common import HealthResponse, ErrorResponse

__all__ = [
    'UploadResponse',
    'HealthResponse',
    'ErrorResponse'
]
