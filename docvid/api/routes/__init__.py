"""
docvid API Routes

This module contains all API route definitions.
"""

from . import health, upload

__all__ = ['health', 'upload']
