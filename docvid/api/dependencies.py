"""
Dependency injection for docvid API
"""

from typing import Optional

from docvid.media.composer import VideoComposer
from docvid.utils.upload_store import UploadStore

# Global composer instance, built on first use
_composer: Optional[VideoComposer] = None


def get_composer() -> VideoComposer:
    """
    FastAPI dependency for the ffmpeg composer.

    Returns:
        VideoComposer: Process-wide composer configured from settings
    """
    global _composer
    if _composer is None:
        _composer = VideoComposer.from_settings()
    return _composer


def get_store() -> UploadStore:
    """
    FastAPI dependency for upload staging.

    Returns:
        UploadStore: Staging store configured from current settings
    """
    return UploadStore.from_settings()


def close_composer() -> None:
    """Shut down the process-wide composer, if one was built."""
    global _composer
    if _composer is not None:
        _composer.shutdown()
        _composer = None
