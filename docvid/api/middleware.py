"""
Custom middleware for docvid API
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import time
import logging

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its client, body size and duration."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client = request.client.host if request.client else "-"
        size = request.headers.get("content-length")

        if size:
            logger.info(f"Request: {request.method} {request.url.path} from {client} ({size} bytes)")
        else:
            logger.info(f"Request: {request.method} {request.url.path} from {client}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(f"Response: {request.url.path} {response.status_code} - {process_time:.3f}s")

        # Composition time dominates upload requests
        response.headers["X-Process-Time"] = str(process_time)

        return response
