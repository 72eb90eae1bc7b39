"""
FFmpeg probing utilities for docvid

Thin wrappers around ffmpeg-python's ``probe`` used to verify finished
outputs before they are published.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import ffmpeg

from docvid import settings
from .exceptions import MediaProcessingError

logger = logging.getLogger(__name__)


@dataclass
class VideoParams:
    codec: Optional[str]
    width: Optional[int]
    height: Optional[int]
    duration: Optional[float]


def run_ffprobe(path: str | Path, timeout: Optional[float] = None) -> Dict[str, Any]:
    """Run ffprobe and return parsed JSON, raising MediaProcessingError on failure.

    Args:
        path: Path to media file
        timeout: Timeout in seconds (None = no timeout)

    Returns:
        Parsed ffprobe output as dictionary
    """
    try:
        return ffmpeg.probe(str(path), cmd=settings.get_ffprobe_binary(), timeout=timeout)
    except ffmpeg.Error as e:
        stderr = e.stderr.decode('utf-8', errors='replace') if e.stderr else str(e)
        logger.error(f"FFprobe failed for {path}: {stderr}")
        raise MediaProcessingError("Could not read media file", file_path=str(path), stderr=stderr) from e
    except FileNotFoundError as e:
        logger.error("FFprobe not found. Please install ffmpeg.")
        raise MediaProcessingError("ffprobe executable not found", file_path=str(path)) from e


def get_streams(probe: Dict[str, Any], stream_type: str) -> List[Dict[str, Any]]:
    return [s for s in probe.get("streams", []) if s.get("codec_type") == stream_type]


def get_video_params(path: str | Path) -> VideoParams:
    probe = run_ffprobe(path)
    v_streams = get_streams(probe, "video")
    if not v_streams:
        return VideoParams(None, None, None, None)
    v = v_streams[0]
    duration = v.get("duration") or probe.get("format", {}).get("duration")
    return VideoParams(
        codec=v.get("codec_name"),
        width=int(v["width"]) if v.get("width") else None,
        height=int(v["height"]) if v.get("height") else None,
        duration=float(duration) if duration else None,
    )


def verify_video_output(path: str | Path) -> VideoParams:
    """Ensure a finished output holds a decodable video stream.

    Raises:
        MediaProcessingError: If the file has no video stream
    """
    params = get_video_params(path)
    if params.codec is None:
        raise MediaProcessingError("Output contains no video stream", file_path=str(path))
    logger.info(
        f"Output verified: {Path(path).name} "
        f"({params.codec} {params.width}x{params.height}, {params.duration}s)"
    )
    return params
