"""
Shared fixtures: a model of how ffmpeg reads a -filter_complex string.

Three levels unescape the drawtext text in turn:
1. The filtergraph parser takes each filter's arguments as one token
   (quotes removed, backslashes outside quotes consumed).
2. The filter's option parser splits ``key=value`` pairs on ``:`` and
   takes each value as a token again.
3. drawtext expansion turns ``\\x`` into ``x`` and treats ``%`` as the
   start of a ``%{...}`` function.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pytest

WHITESPACE = " \n\t\r"
_KEY = re.compile(r"[ \n\t\r]*([0-9A-Za-z_\-/.]+)[ \n\t\r]*=")


@dataclass
class ParsedFilter:
    name: str
    inputs: List[str] = field(default_factory=list)
    outputs: List[str] = field(default_factory=list)
    args: Optional[str] = None
    positional: List[str] = field(default_factory=list)
    options: Dict[str, str] = field(default_factory=dict)


class FilterGraphParser:
    """Reads a filtergraph the way libavfilter does, raising where ffmpeg would fail."""

    def get_token(self, buf: str, term: str) -> Tuple[str, str]:
        """Same rules as libavutil's av_get_token; returns (token, unread rest)."""
        i = 0
        while i < len(buf) and buf[i] in WHITESPACE:
            i += 1
        out: List[str] = []
        end = 0
        while i < len(buf) and buf[i] not in term:
            char = buf[i]
            i += 1
            if char == "\\" and i < len(buf):
                out.append(buf[i])
                i += 1
                end = len(out)
            elif char == "'":
                while i < len(buf) and buf[i] != "'":
                    out.append(buf[i])
                    i += 1
                if i < len(buf):
                    i += 1
                    end = len(out)
            else:
                out.append(char)
        while len(out) > end and out[-1] in WHITESPACE:
            out.pop()
        return "".join(out), buf[i:]

    def _labels(self, buf: str) -> Tuple[List[str], str]:
        labels = []
        buf = buf.lstrip(WHITESPACE)
        while buf.startswith("["):
            end = buf.index("]")
            labels.append(buf[1:end])
            buf = buf[end + 1:].lstrip(WHITESPACE)
        return labels, buf

    def split_options(self, args: str) -> Tuple[List[str], Dict[str, str]]:
        """Option-parser level: positional values and ``key=value`` pairs."""
        positional: List[str] = []
        options: Dict[str, str] = {}
        while args:
            match = _KEY.match(args)
            if match:
                args = args[match.end():]
            value, args = self.get_token(args, ":")
            if match:
                key = match.group(1)
                if key in options:
                    raise ValueError(f"Option {key!r} given twice")
                options[key] = value
            else:
                if options:
                    raise ValueError(f"Positional value {value!r} after named options")
                positional.append(value)
            if args:
                args = args[1:]
        return positional, options

    def parse(self, graph: str) -> List[ParsedFilter]:
        """Filtergraph level: one entry per filter, with its options split."""
        filters = []
        rest = graph
        while rest:
            inputs, rest = self._labels(rest)
            name, rest = self.get_token(rest, "=,;[")
            parsed = ParsedFilter(name=name, inputs=inputs)
            if rest.startswith("="):
                parsed.args, rest = self.get_token(rest[1:], "[],;")
                parsed.positional, parsed.options = self.split_options(parsed.args)
            parsed.outputs, rest = self._labels(rest)
            filters.append(parsed)
            if rest and rest[0] in ",;":
                rest = rest[1:]
            elif rest:
                raise ValueError(f"Unexpected text after filter {name!r}: {rest!r}")
        return filters

    def expand(self, text: str) -> str:
        """drawtext expansion with nothing but escapes allowed."""
        out = []
        i = 0
        while i < len(text):
            char = text[i]
            if char == "\\" and i + 1 < len(text):
                out.append(text[i + 1])
                i += 2
            elif char == "%":
                raise ValueError(f"Stray % near {text[i:]!r}")
            else:
                out.append(char)
                i += 1
        return "".join(out)

    def drawtext_text(self, graph: str) -> str:
        """The text drawtext would finally render for a graph."""
        drawtext = [f for f in self.parse(graph) if f.name == "drawtext"]
        assert len(drawtext) == 1
        return self.expand(drawtext[0].options["text"])


@pytest.fixture
def ffmpeg_parser():
    """Parser modelling ffmpeg's filtergraph, option and drawtext unescaping."""
    return FilterGraphParser()
