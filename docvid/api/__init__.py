"""
API module for docvid.

This module provides the upload endpoint and static download route
using FastAPI.
"""

# Avoid importing main here to prevent circular imports and runpy warnings
# when running via 'python -m docvid.api.main'

__all__ = []
