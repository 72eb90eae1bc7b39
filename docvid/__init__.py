"""
docvid - doctor promo video service.

Composites an uploaded video onto a background and burns in a wrapped
block of doctor details using ffmpeg's drawtext filter.
"""

__version__ = "1.0.0"
