"""
Settings management for docvid.

This module provides simple accessor functions for configuration values.
All configuration is stored in YAML files (default.yaml, config.yaml)
with DOCVID_<SECTION>_<KEY> environment overrides.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import ConfigLoader
from .config.font_utils import PROJECT_ROOT, resolve_font_path
from .core.text_formatter import EscapeProfile
from .core.video.filter_graph import BackdropBox, CompositionSettings, TextLayout

logger = logging.getLogger(__name__)

# Single source of configuration
_config_loader = ConfigLoader()


def reload() -> None:
    """Re-read YAML files and environment overrides."""
    _config_loader.reload()


def get_config_sources() -> List[str]:
    """Config files read by the last load, lowest priority first."""
    return list(_config_loader.sources)


def get_overridden_keys() -> List[str]:
    """``section.key`` entries set from DOCVID_* environment variables."""
    return list(_config_loader.overridden_keys)


# ============================================================================
# Section Accessors - Get entire configuration sections
# ============================================================================

def get_app_config() -> Dict[str, Any]:
    """Get application settings"""
    return _config_loader.get_section('app') or {}


def get_server_config() -> Dict[str, Any]:
    """Get HTTP server settings"""
    return _config_loader.get_section('server') or {}


def get_storage_config() -> Dict[str, Any]:
    """Get upload/output directory settings"""
    return _config_loader.get_section('storage') or {}


def get_upload_config() -> Dict[str, Any]:
    """Get upload validation settings"""
    return _config_loader.get_section('upload') or {}


def get_text_config() -> Dict[str, Any]:
    """Get text wrapping/escaping settings"""
    return _config_loader.get_section('text') or {}


def get_font_config() -> Dict[str, Any]:
    """Get font configuration"""
    return _config_loader.get_section('font') or {}


def get_composition_config() -> Dict[str, Any]:
    """Get canvas configuration"""
    return _config_loader.get_section('composition') or {}


def get_layout_config() -> Dict[str, Any]:
    """Get drawtext layout configuration"""
    return _config_loader.get_section('layout') or {}


def get_backdrop_config() -> Dict[str, Any]:
    """Get separate backdrop box configuration"""
    return _config_loader.get_section('backdrop') or {}


def get_processing_config() -> Dict[str, Any]:
    """Get ffmpeg processing configuration"""
    return _config_loader.get_section('processing') or {}


def get_api_config() -> Dict[str, Any]:
    """Get API behaviour configuration"""
    return _config_loader.get_section('api') or {}


# ============================================================================
# App / server
# ============================================================================

def get_log_level() -> str:
    return str(get_app_config().get('log_level', 'INFO')).upper()


def get_server_host() -> str:
    return os.environ.get('HOST') or str(get_server_config().get('host', '0.0.0.0'))


def get_server_port() -> int:
    """PORT from the environment wins over the configured port (default: 3000)."""
    return int(os.environ.get('PORT') or get_server_config().get('port', 3000))


# ============================================================================
# Storage
# ============================================================================

def _project_path(value: str) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path


def get_uploads_dir() -> Path:
    """Staging directory for incoming uploads."""
    return _project_path(get_storage_config().get('uploads_dir', 'uploads'))


def get_processed_dir() -> Path:
    """Directory holding finished outputs served under /processed."""
    return _project_path(get_storage_config().get('processed_dir', 'processed'))


def get_processed_dir_mode() -> Optional[int]:
    """
    Permission bits applied to the processed directory.

    Returns:
        int: Mode parsed from an octal string (e.g. "777"), or None to leave as created
    """
    raw = get_storage_config().get('processed_dir_mode', '777')
    if raw in (None, ''):
        return None
    return int(str(raw), 8)


# ============================================================================
# Upload validation
# ============================================================================

def get_max_file_size_bytes() -> int:
    return int(get_upload_config().get('max_file_size_bytes', 100 * 1024 * 1024))


def get_allowed_mime_types() -> List[str]:
    return list(get_upload_config().get('allowed_mime_types', []))


def is_background_required() -> bool:
    return bool(get_upload_config().get('background_required', False))


# ============================================================================
# Text
# ============================================================================

def get_wrap_width() -> int:
    return int(get_text_config().get('wrap_width', 30))


def get_escape_profile() -> EscapeProfile:
    return EscapeProfile(
        escape_comma_and_period=bool(get_text_config().get('escape_comma_and_period', False))
    )


# ============================================================================
# Font / composition
# ============================================================================

def get_font_path() -> str:
    """Resolve the drawtext font (explicit path, bundled file, system font)."""
    font_cfg = get_font_config()
    return resolve_font_path(
        explicit=font_cfg.get('path') or None,
        bundled=font_cfg.get('bundled') or None,
        system=font_cfg.get('system') or None,
    )


def get_canvas_color() -> str:
    return str(get_composition_config().get('canvas_color', 'black'))


def get_canvas_fps() -> int:
    return int(get_composition_config().get('canvas_fps', 30))


def get_text_layout() -> TextLayout:
    cfg = get_layout_config()
    return TextLayout(
        font_size=int(cfg.get('font_size', 20)),
        font_color=str(cfg.get('font_color', 'white')),
        box=bool(cfg.get('box', True)),
        box_color=str(cfg.get('box_color', 'black@0.9')),
        box_border=int(cfg.get('box_border', 30)),
        anchor_x=str(cfg.get('anchor_x', '50')),
        anchor_y=str(cfg.get('anchor_y', 'h-text_h')),
        line_spacing=int(cfg.get('line_spacing', 10)),
        fix_bounds=bool(cfg.get('fix_bounds', True)),
    )


def get_backdrop_box() -> BackdropBox:
    cfg = get_backdrop_config()
    return BackdropBox(
        enabled=bool(cfg.get('enabled', False)),
        y=int(cfg.get('y', 520)),
        height=int(cfg.get('height', 200)),
        color=str(cfg.get('color', 'black@0.6')),
    )


def build_composition_settings() -> CompositionSettings:
    """Assemble the filter graph parameters from configuration."""
    comp = get_composition_config()
    return CompositionSettings(
        font_path=get_font_path(),
        canvas_width=int(comp.get('canvas_width', 960)),
        canvas_height=int(comp.get('canvas_height', 720)),
        video_height=int(comp.get('video_height', 720)),
        layout=get_text_layout(),
        backdrop=get_backdrop_box(),
    )


# ============================================================================
# Processing
# ============================================================================

def get_ffmpeg_binary() -> str:
    return str(get_processing_config().get('ffmpeg_binary', 'ffmpeg'))


def get_ffprobe_binary() -> str:
    return str(get_processing_config().get('ffprobe_binary', 'ffprobe'))


def get_ffmpeg_timeout_seconds() -> Optional[float]:
    """
    Get the ffmpeg timeout.

    Returns:
        float: Timeout in seconds, or None when disabled (0 or unset)
    """
    value = float(get_processing_config().get('timeout_seconds', 0) or 0)
    return value if value > 0 else None


def get_max_concurrent_jobs() -> int:
    """
    Get maximum concurrent ffmpeg processes.

    Returns:
        int: Limit, 0 meaning one process per request without throttling
    """
    return max(0, int(get_processing_config().get('max_concurrent_jobs', 0) or 0))


def get_executor_workers() -> int:
    """
    Get the size of the composer's thread pool when jobs are not throttled.

    Returns:
        int: Worker threads, at least 1
    """
    return max(1, int(get_processing_config().get('executor_workers', 64) or 64))


def should_cleanup_on_failure() -> bool:
    return bool(get_processing_config().get('cleanup_on_failure', True))


def expose_processing_errors() -> bool:
    return bool(get_api_config().get('expose_processing_errors', False))


def should_verify_output() -> bool:
    return bool(get_processing_config().get('verify_output', True))
