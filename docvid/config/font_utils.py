"""Font utility functions for drawtext font resolution."""

import os
import platform
import logging
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def get_platform_default_font() -> str:
    """
    Get appropriate default bold sans font based on platform.

    Returns:
        str: Path to platform-specific default font, or empty string if not found
    """
    system = platform.system()

    if system == "Darwin":  # macOS
        candidates = [
            "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
            "/Library/Fonts/Arial Bold.ttf",
        ]
    elif system == "Linux":
        candidates = [
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
            "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
            "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        ]
    elif system == "Windows":
        candidates = [
            "C:/Windows/Fonts/arialbd.ttf",
            "C:/Windows/Fonts/arial.ttf",
        ]
    else:
        logger.warning(f"Unknown platform: {system}, cannot detect default font")
        return ""

    for font_path in candidates:
        if os.path.exists(font_path):
            logger.debug(f"Using {system} font: {font_path}")
            return font_path

    logger.warning(f"No suitable {system} fonts found")
    return ""


def _resolve_bundled(bundled: Optional[str]) -> Optional[str]:
    if not bundled:
        return None
    path = Path(bundled)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return str(path)


def resolve_font_path(
    explicit: Optional[str] = None,
    bundled: Optional[str] = None,
    system: Optional[str] = None,
) -> str:
    """
    Pick the font file handed to the drawtext filter.

    Priority: explicit path, bundled font, configured system font,
    platform default. An explicit path is returned as-is even when it
    does not exist, so a misconfiguration surfaces as an ffmpeg failure
    instead of silently switching fonts.

    Args:
        explicit: Font path set directly in configuration
        bundled: Font shipped with the deployment (relative to project root)
        system: System-wide font path

    Returns:
        str: Font file path
    """
    if explicit:
        if not os.path.exists(explicit):
            logger.warning(f"Configured font does not exist: {explicit}")
        return explicit

    candidates: List[str] = [p for p in (_resolve_bundled(bundled), system) if p]
    for font_path in candidates:
        if os.path.exists(font_path):
            logger.debug(f"Resolved drawtext font: {font_path}")
            return font_path

    platform_font = get_platform_default_font()
    if platform_font:
        return platform_font

    fallback = system or (candidates[0] if candidates else "")
    logger.warning(f"No font file found, using configured path anyway: {fallback!r}")
    return fallback
