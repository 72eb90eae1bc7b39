"""
Upload staging for incoming multipart files.

This module provides UploadStore, which streams uploads into the staging
directory while enforcing the MIME allow-list and the size ceiling, and
removes staged files once a request is finished.

Usage:
    from docvid.utils.upload_store import UploadStore

    store = UploadStore.from_settings()
    staged = await store.stage(upload, field_name="video")
    try:
        ...
    finally:
        store.discard([staged])
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from fastapi import UploadFile

from docvid import settings
from docvid.media.exceptions import UploadRejectedError
from docvid.utils.filename_utils import staged_upload_name

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


@dataclass
class StagedFile:
    """An upload written to the staging directory."""
    field_name: str
    original_name: str
    content_type: str
    path: Path
    size: int

    @property
    def kind(self) -> str:
        """'image' or 'video', from the MIME type."""
        return "image" if self.content_type.startswith("image/") else "video"


class UploadStore:
    """Stage uploads on disk with validation and cleanup."""

    def __init__(
        self,
        uploads_dir: Path,
        allowed_mime_types: Iterable[str],
        max_file_size: int,
    ):
        """
        Initialize upload store.

        Args:
            uploads_dir: Staging directory
            allowed_mime_types: Accepted Content-Type values
            max_file_size: Byte ceiling per file
        """
        self.uploads_dir = Path(uploads_dir)
        self.allowed_mime_types = frozenset(allowed_mime_types)
        self.max_file_size = max_file_size

    @classmethod
    def from_settings(cls) -> "UploadStore":
        return cls(
            uploads_dir=settings.get_uploads_dir(),
            allowed_mime_types=settings.get_allowed_mime_types(),
            max_file_size=settings.get_max_file_size_bytes(),
        )

    def check_content_type(self, upload: UploadFile) -> str:
        content_type = (upload.content_type or "").split(";")[0].strip().lower()
        if content_type not in self.allowed_mime_types:
            raise UploadRejectedError("Invalid file type.", file_path=upload.filename)
        return content_type

    async def stage(self, upload: UploadFile, field_name: str) -> StagedFile:
        """
        Stream an upload to disk.

        Args:
            upload: Incoming multipart file
            field_name: Form field the file arrived in

        Returns:
            StagedFile describing the written file

        Raises:
            UploadRejectedError: Disallowed type or file above the size ceiling
        """
        content_type = self.check_content_type(upload)

        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        path = self.uploads_dir / staged_upload_name(upload.filename)
        size = 0

        try:
            with open(path, "wb") as buffer:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_file_size:
                        raise UploadRejectedError("File too large.", file_path=upload.filename)
                    buffer.write(chunk)
        except BaseException:
            self._remove(path)
            raise

        logger.info(f"Staged {field_name} upload: {path.name} ({size} bytes, {content_type})")
        return StagedFile(
            field_name=field_name,
            original_name=upload.filename or "",
            content_type=content_type,
            path=path,
            size=size,
        )

    def _remove(self, path: Path) -> bool:
        try:
            path.unlink(missing_ok=True)
            return True
        except OSError as e:
            logger.warning(f"Failed to remove staged file {path}: {e}")
            return False

    def discard(self, staged: Iterable[Optional[StagedFile]]) -> List[Path]:
        """
        Remove staged files. Failures are logged and never raised.

        Returns:
            Paths that could not be removed
        """
        leftovers = []
        for item in staged:
            if item is None:
                continue
            if self._remove(item.path):
                logger.debug(f"Cleaned up staged file: {item.path}")
            else:
                leftovers.append(item.path)
        return leftovers


def ensure_directories() -> None:
    """Create the staging and processed directories at startup."""
    uploads_dir = settings.get_uploads_dir()
    processed_dir = settings.get_processed_dir()
    uploads_dir.mkdir(parents=True, exist_ok=True)
    processed_dir.mkdir(parents=True, exist_ok=True)

    mode = settings.get_processed_dir_mode()
    if mode is not None:
        try:
            os.chmod(processed_dir, mode)
        except OSError as e:
            logger.warning(f"Could not chmod {processed_dir} to {oct(mode)}: {e}")

    logger.info(f"Directories ready: uploads={uploads_dir}, processed={processed_dir}")

