"""
docvid Utilities Module

Filename helpers and upload staging.
"""

from docvid.utils.filename_utils import (
    sanitize_filename,
    staged_upload_name,
    generate_output_filename,
)

__all__ = [
    "sanitize_filename",
    "staged_upload_name",
    "generate_output_filename",
]
