"""
Static mount for finished outputs.
"""

import logging

from fastapi.staticfiles import StaticFiles
from starlette.responses import Response
from starlette.types import Scope

from docvid.utils.filename_utils import PARTIAL_SUFFIX
from .exceptions import NotFoundError

logger = logging.getLogger(__name__)


class ProcessedFiles(StaticFiles):
    """StaticFiles that never serves an output ffmpeg is still writing."""

    async def get_response(self, path: str, scope: Scope) -> Response:
        if path.lower().endswith(PARTIAL_SUFFIX):
            logger.info(f"Refused in-progress output: {path}")
            raise NotFoundError("File not found.", {"file": path})
        return await super().get_response(path, scope)
