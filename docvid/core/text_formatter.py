"""
Text Formatter - prepares the doctor details block for the drawtext filter.

This module is responsible for:
- Wrapping labeled lines to a fixed column budget (no mid-word breaks)
- Escaping the text for drawtext expansion and the filter option parser
- Assembling the quoted text block interpolated into the drawtext options

Inside the quotes the block never contains a bare backslash, colon,
single quote or percent sign (nor comma/period under the extended
profile). Line breaks stay literal line feeds; drawtext has no escape
sequence for them.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

from docvid.core.video.filter_graph import escape_option_value, quote_filtergraph_value

logger = logging.getLogger(__name__)

DEFAULT_WRAP_WIDTH = 30

# (attribute, label) in display order. Differs from the form's input order.
DISPLAY_ORDER: Tuple[Tuple[str, str], ...] = (
    ("doctor_name", "Doctor"),
    ("mobile", "Mobile"),
    ("address", "Address"),
    ("degree", "Degree"),
)


@dataclass(frozen=True)
class TextFields:
    """Free-form doctor details submitted with an upload."""
    doctor_name: str
    degree: str
    mobile: str
    address: str

    def missing(self) -> List[str]:
        """Names of fields that are empty."""
        return [name for name, _ in DISPLAY_ORDER if not getattr(self, name)]


@dataclass(frozen=True)
class EscapeProfile:
    """
    Which characters get a backslash at the option-parser level.

    Backslash, colon and single quote always do. The extended profile adds
    comma and period, which the parser reads back unchanged.
    """
    escape_comma_and_period: bool = False

    @property
    def extra_chars(self) -> str:
        return ",." if self.escape_comma_and_period else ""


DEFAULT_PROFILE = EscapeProfile()
EXTENDED_PROFILE = EscapeProfile(escape_comma_and_period=True)


def wrap_text(text: str, max_line_length: int = DEFAULT_WRAP_WIDTH) -> str:
    """
    Greedily wrap text on single spaces.

    A word joins the current line only if the line stays within
    ``max_line_length``. The first word always starts a line, even
    when it alone is longer than the limit; words are never split.

    Args:
        text: Input text (may be empty)
        max_line_length: Column budget per line

    Returns:
        Lines joined with a line feed

    Example:
        >>> wrap_text("Address: 12 Long Street Name", 15)
        'Address: 12\\nLong Street\\nName'
    """
    words = text.split(" ")
    lines = []
    current_line = words[0]

    for word in words[1:]:
        if len(current_line) + 1 + len(word) <= max_line_length:
            current_line += " " + word
        else:
            lines.append(current_line)
            current_line = word

    lines.append(current_line)
    return "\n".join(lines)


def escape_expansion(text: str) -> str:
    """Escape text for drawtext's ``%{...}`` expansion (backslash first)."""
    return text.replace("\\", "\\\\").replace("%", "\\%")


def escape_drawtext_text(text: str, profile: EscapeProfile = DEFAULT_PROFILE) -> str:
    """
    Escape text for the drawtext ``text`` option, before graph-level quoting.

    Expansion escaping runs first, then option-parser escaping, so each
    level keeps the backslashes meant for the level below it.

    Args:
        text: Raw (possibly multi-line) text
        profile: Escaping profile to apply

    Returns:
        Escaped string
    """
    return escape_option_value(escape_expansion(text), profile.extra_chars)


def format_fields(fields: TextFields, wrap_width: int = DEFAULT_WRAP_WIDTH) -> str:
    """Label, wrap and join the fields in display order (unescaped)."""
    blocks = [
        wrap_text(f"{label}: {getattr(fields, name)}", wrap_width)
        for name, label in DISPLAY_ORDER
    ]
    return "\n".join(blocks)


def build_text_block(
    fields: TextFields,
    wrap_width: int = DEFAULT_WRAP_WIDTH,
    profile: EscapeProfile = DEFAULT_PROFILE,
) -> str:
    """
    Build the quoted drawtext ``text`` value for a set of fields.

    Args:
        fields: Doctor details
        wrap_width: Column budget applied to each labeled line
        profile: Escaping profile

    Returns:
        Escaped block, quoted for the filtergraph parser
    """
    raw_block = format_fields(fields, wrap_width)
    escaped = escape_drawtext_text(raw_block, profile)
    logger.debug(f"Built text block ({raw_block.count(chr(10)) + 1} lines, width={wrap_width})")
    return quote_filtergraph_value(escaped)
