"""
Filter Graph Builder - declarative description of the composition pipeline.

This module is responsible for:
- Describing each filter-graph stage (inputs, filter, options, outputs)
- Assembling the fixed topology: scale background, scale foreground,
  overlay, optional backdrop box, drawtext
- Rendering the stages into a ``-filter_complex`` argument

Stage labels (bg, vid, tmp, boxed, final) are part of the command-line
contract with ffmpeg; the output mapping refers to ``[final]``.

Option values pass through two parsers inside ffmpeg: the filtergraph
parser (which strips ``'...'`` quoting and consumes backslashes outside
quotes) and then the filter's option parser (which splits on ``:`` and
again honours backslashes and quotes). ``escape_option_value`` handles the
second, ``quote_filtergraph_value`` the first.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

BACKGROUND_LABEL = "bg"
VIDEO_LABEL = "vid"
OVERLAY_LABEL = "tmp"
BOXED_LABEL = "boxed"
FINAL_LABEL = "final"

# Characters the option parser treats specially (backslash handled first)
OPTION_SPECIAL_CHARS = "':"
# Anything here forces a value to be escaped and quoted
_GRAPH_SPECIAL_CHARS = frozenset("\\':,;[] \t\r\n")


def escape_option_value(value: str, extra_chars: str = "") -> str:
    """
    Backslash-escape a value for a filter's ``key=value:key=value`` parser.

    Args:
        value: Raw option value
        extra_chars: Additional characters to escape (harmless, the parser
            drops the backslash)

    Returns:
        Escaped value, still needing filtergraph-level quoting
    """
    escaped = value.replace("\\", "\\\\")
    for char in OPTION_SPECIAL_CHARS + extra_chars:
        escaped = escaped.replace(char, "\\" + char)
    return escaped


def quote_filtergraph_value(value: str) -> str:
    """
    Wrap an option-escaped value in single quotes for the filtergraph parser.

    Quotes cannot be escaped inside a quoted span, so each ``'`` closes the
    span, is emitted as ``\\'`` and the span is reopened: ``O'Brien``
    becomes ``'O'\\''Brien'``.
    """
    return "'" + value.replace("'", "'\\''") + "'"


def format_option_value(value: Any) -> str:
    """Render one option value, escaping and quoting strings only when needed."""
    if isinstance(value, bool):
        return "1" if value else "0"
    text = str(value)
    if not isinstance(value, str) or not _GRAPH_SPECIAL_CHARS.intersection(text):
        return text
    return quote_filtergraph_value(escape_option_value(text))


@dataclass
class FilterStage:
    """
    One filter in the graph.

    ``args`` are positional values (``scale=960:720``), ``options`` are
    named values rendered in insertion order (``overlay=x=..:y=..``).
    Options named in ``preescaped`` are emitted as given.
    """
    filter_name: str
    inputs: Tuple[str, ...] = ()
    outputs: Tuple[str, ...] = ()
    args: Tuple[Any, ...] = ()
    options: Dict[str, Any] = field(default_factory=dict)
    preescaped: Tuple[str, ...] = ()

    def render(self) -> str:
        params = [format_option_value(a) for a in self.args]
        for key, value in self.options.items():
            rendered = str(value) if key in self.preescaped else format_option_value(value)
            params.append(f"{key}={rendered}")
        body = self.filter_name
        if params:
            body += "=" + ":".join(params)
        ins = "".join(f"[{label}]" for label in self.inputs)
        outs = "".join(f"[{label}]" for label in self.outputs)
        return f"{ins}{body}{outs}"

    def __str__(self) -> str:
        return self.render()
@dataclass(frozen=True)
class TextLayout:
    """drawtext placement and styling."""
    font_size: int = 20
    font_color: str = "white"
    box: bool = True
    box_color: str = "black@0.9"
    box_border: int = 30
    anchor_x: str = "50"
    anchor_y: str = "h-text_h"
    line_spacing: int = 10
    fix_bounds: bool = True


@dataclass(frozen=True)
class BackdropBox:
    """Rectangle drawn behind the text as a separate stage."""
    enabled: bool = False
    y: int = 520
    height: int = 200
    color: str = "black@0.6"


@dataclass(frozen=True)
class CompositionSettings:
    """Everything the builder needs besides the text block."""
    font_path: str
    canvas_width: int = 960
    canvas_height: int = 720
    video_height: int = 720
    layout: TextLayout = field(default_factory=TextLayout)
    backdrop: BackdropBox = field(default_factory=BackdropBox)


class FilterGraphBuilder:
    """
    Builds the ordered stage list for one composition.

    Input 0 is always the background (file or generated canvas), input 1
    the foreground video.

    Example:
        >>> builder = FilterGraphBuilder(CompositionSettings(font_path="/fonts/a.ttf"))
        >>> stages = builder.build("'Doctor Jane'")
        >>> render_filter_complex(stages).split(";")[0]
        '[0:v]scale=960:720[bg]'
    """

    def __init__(self, settings: CompositionSettings):
        self.settings = settings

    def scale_background(self) -> FilterStage:
        s = self.settings
        return FilterStage(
            "scale",
            inputs=("0:v",),
            outputs=(BACKGROUND_LABEL,),
            args=(s.canvas_width, s.canvas_height),
        )

    def scale_video(self) -> FilterStage:
        return FilterStage(
            "scale",
            inputs=("1:v",),
            outputs=(VIDEO_LABEL,),
            args=(-1, self.settings.video_height),
        )

    def overlay(self, shortest: bool = False) -> FilterStage:
        options: Dict[str, Any] = {"x": "(W-w)/2", "y": 0}
        if shortest:
            options["shortest"] = 1
        return FilterStage(
            "overlay",
            inputs=(BACKGROUND_LABEL, VIDEO_LABEL),
            outputs=(OVERLAY_LABEL,),
            options=options,
        )

    def backdrop(self) -> Optional[FilterStage]:
        box = self.settings.backdrop
        if not box.enabled:
            return None
        return FilterStage(
            "drawbox",
            inputs=(OVERLAY_LABEL,),
            outputs=(BOXED_LABEL,),
            options={
                "x": 0,
                "y": box.y,
                "w": "iw",
                "h": box.height,
                "color": box.color,
                "t": "fill",
            },
        )

    def drawtext(self, text_block: str, source_label: str) -> FilterStage:
        """
        Build the drawtext stage.

        Args:
            text_block: Already escaped and quoted text; emitted as given
            source_label: Label of the buffer to draw on
        """
        layout = self.settings.layout
        options: Dict[str, Any] = {
            "fontfile": self.settings.font_path,
            "text": text_block,
            "fontsize": layout.font_size,
            "fontcolor": layout.font_color,
        }
        if layout.box:
            options.update({
                "box": 1,
                "boxcolor": layout.box_color,
                "boxborderw": layout.box_border,
            })
        options.update({
            "x": layout.anchor_x,
            "y": layout.anchor_y,
            "line_spacing": layout.line_spacing,
        })
        if layout.fix_bounds:
            options["fix_bounds"] = 1
        return FilterStage(
            "drawtext",
            inputs=(source_label,),
            outputs=(FINAL_LABEL,),
            options=options,
            preescaped=("text",),
        )

    def build(self, text_block: str, shortest: bool = False) -> List[FilterStage]:
        """
        Assemble the full stage list.

        Args:
            text_block: Escaped, quoted text from ``build_text_block``
            shortest: End the overlay with the foreground video
                (needed when the background never ends on its own)

        Returns:
            Stages in execution order
        """
        stages = [
            self.scale_background(),
            self.scale_video(),
            self.overlay(shortest=shortest),
        ]
        text_source = OVERLAY_LABEL
        box_stage = self.backdrop()
        if box_stage is not None:
            stages.append(box_stage)
            text_source = BOXED_LABEL
        stages.append(self.drawtext(text_block, text_source))

        logger.debug(f"Built filter graph with {len(stages)} stages")
        return stages


def render_filter_complex(stages: Sequence[FilterStage]) -> str:
    """Join stages into a single ``-filter_complex`` value."""
    return ";".join(stage.render() for stage in stages)


def output_mapping() -> List[str]:
    """Stream mapping: final video buffer plus the foreground's audio if present."""
    return ["-map", f"[{FINAL_LABEL}]", "-map", "1:a?", "-c:a", "copy"]
