"""
Video composition module for docvid.

Components:
    - FilterGraphBuilder: Fixed-topology filter graph (scale, overlay, drawbox, drawtext)
    - CompositionSettings: Canvas, font and text layout parameters
"""

from docvid.core.video.filter_graph import (
    FilterStage,
    FilterGraphBuilder,
    CompositionSettings,
    TextLayout,
    BackdropBox,
    render_filter_complex,
)

__all__ = [
    'FilterStage',
    'FilterGraphBuilder',
    'CompositionSettings',
    'TextLayout',
    'BackdropBox',
    'render_filter_complex',
]
