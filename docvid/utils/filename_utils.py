"""
Filename utilities for upload staging and output naming.
"""
import re
import threading
import time
import uuid
from pathlib import Path
from typing import Optional

MAX_FILENAME_LENGTH = 255  # Standard filesystem limit
DEFAULT_MAX_LENGTH = 150

OUTPUT_PREFIX = "output_"
OUTPUT_SUFFIX = ".mp4"
# In-progress outputs; never served
PARTIAL_SUFFIX = ".part"

_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*]')

_output_lock = threading.Lock()
_last_output_ms = 0


def sanitize_filename(text: str, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """
    Make a client-supplied filename safe for the staging directory.

    Unsafe characters (< > : " / \\ | ? *) become underscores, control
    characters are dropped. The extension is kept when the name has to
    be truncated.

    Args:
        text: Original filename from the upload
        max_length: Maximum length of output

    Returns:
        Sanitized filename

    Examples:
        >>> sanitize_filename('clip:final?.mp4')
        'clip_final_.mp4'
        >>> sanitize_filename('../../etc/passwd')
        '.._.._etc_passwd'
    """
    if not text:
        return "untitled"

    sanitized = _UNSAFE_CHARS.sub("_", text)
    sanitized = "".join(c for c in sanitized if c.isprintable())
    sanitized = sanitized.strip()

    # Names made only of dots would resolve to the directory itself
    if not sanitized.strip("."):
        return "untitled"

    if len(sanitized) > max_length:
        path = Path(sanitized)
        suffix = path.suffix[:16]
        sanitized = path.stem[:max_length - len(suffix)] + suffix

    return sanitized


def staged_upload_name(original_name: Optional[str]) -> str:
    """
    Unique name for a staged upload: ``<ms>_<hex8>_<sanitized name>``.
    """
    stamp = int(time.time() * 1000)
    token = uuid.uuid4().hex[:8]
    return f"{stamp}_{token}_{sanitize_filename(original_name or '')}"


def generate_output_filename(directory: Path) -> str:
    """
    Allocate ``output_<timestamp>.mp4`` inside ``directory``.

    Timestamps are milliseconds, strictly increasing within the process,
    and skip names already present on disk, so two requests in the same
    millisecond still receive distinct files.

    Args:
        directory: Processed output directory

    Returns:
        Filename (not a path)
    """
    global _last_output_ms

    with _output_lock:
        stamp = max(int(time.time() * 1000), _last_output_ms + 1)
        while True:
            name = f"{OUTPUT_PREFIX}{stamp}{OUTPUT_SUFFIX}"
            candidate = Path(directory) / name
            partial = candidate.with_name(name + PARTIAL_SUFFIX)
            if not candidate.exists() and not partial.exists():
                break
            stamp += 1
        _last_output_ms = stamp

    return name
