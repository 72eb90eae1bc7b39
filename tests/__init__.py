"""
docvid Test Suite

This package contains all tests for the docvid project:
- unit/: Unit tests for individual components
- api/: Endpoint tests against the FastAPI app (ffmpeg replaced by a fake)
"""
