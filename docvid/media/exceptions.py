"""
Media processing exceptions for docvid.

This module defines custom exceptions for upload staging and
ffmpeg composition failures.
"""

from typing import Optional


class UploadRejectedError(Exception):
    """Raised when an uploaded file fails type or size validation"""

    def __init__(self, message: str, file_path: Optional[str] = None):
        self.file_path = file_path
        self.message = message
        if file_path:
            super().__init__(f"{message} (File: {file_path})")
        else:
            super().__init__(message)


class MediaProcessingError(Exception):
    """Raised when the ffmpeg composition fails for any reason"""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        self.message = message
        self.file_path = file_path
        self.returncode = returncode
        self.stderr = stderr or ""

        error_msg = message
        if returncode is not None:
            error_msg += f" (Exit code: {returncode})"
        if file_path:
            error_msg += f" (File: {file_path})"

        super().__init__(error_msg)
