"""
Media processing package for docvid.

This package runs the ffmpeg composition and holds the media
exception types.
"""

from .exceptions import (
    MediaProcessingError,
    UploadRejectedError,
)

__all__ = [
    'MediaProcessingError',
    'UploadRejectedError',
]
