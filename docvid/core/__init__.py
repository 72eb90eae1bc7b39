"""
docvid Core Module

This module contains the text formatting and filter-graph description
used to build the ffmpeg composition.
"""

from .text_formatter import (
    TextFields,
    EscapeProfile,
    wrap_text,
    escape_drawtext_text,
    build_text_block,
)

__all__ = [
    'TextFields',
    'EscapeProfile',
    'wrap_text',
    'escape_drawtext_text',
    'build_text_block',
]
