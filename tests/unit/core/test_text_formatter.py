"""
Unit tests for the text formatter.

Tests:
- Greedy wrapping (boundary, long words, empty input)
- drawtext escaping (ordering, profiles, reversibility through ffmpeg's parsers)
- Text block assembly (labels, display order, quoting, full filter graph)
"""

import pytest

from docvid.core.text_formatter import (
    DEFAULT_PROFILE,
    EXTENDED_PROFILE,
    TextFields,
    build_text_block,
    escape_drawtext_text,
    format_fields,
    wrap_text,
)
from docvid.core.video.filter_graph import (
    CompositionSettings,
    FilterGraphBuilder,
    quote_filtergraph_value,
    render_filter_complex,
)


def _read_back(parser, escaped: str) -> str:
    """Quote, then unescape at graph, option and expansion level in turn."""
    graph_token, rest = parser.get_token(quote_filtergraph_value(escaped), "[],;")
    assert rest == ""
    value, rest = parser.get_token(graph_token, ":")
    assert rest == ""
    return parser.expand(value)

class TestWrapText:
    """Test suite for wrap_text."""

    @pytest.mark.parametrize("text", ["Dr. Jane", "Mobile: 555-1234", "x" * 30])
    def test_short_text_unchanged(self, text):
        """Text within the width comes back without line breaks."""
        assert wrap_text(text, 30) == text

    def test_boundary_is_inclusive(self):
        """A word that lands exactly on the limit stays on the line."""
        assert wrap_text("aaaa bbbbb", 10) == "aaaa bbbbb"
        assert wrap_text("aaaa bbbbbb", 10) == "aaaa\nbbbbbb"

    def test_greedy_wrapping(self):
        """Words accumulate until the next one would overflow."""
        result = wrap_text("Address: 12 Long Street Name", 15)
        assert result == "Address: 12\nLong Street\nName"

    def test_long_first_word_not_split(self):
        """The first word starts the first line even when it exceeds the width."""
        result = wrap_text("Supercalifragilistic x", 5)
        assert result == "Supercalifragilistic\nx"

    def test_long_middle_word_gets_own_line(self):
        """Oversized words are moved to their own line, never broken."""
        result = wrap_text("a verylongwordindeed b", 6)
        assert result.split("\n") == ["a", "verylongwordindeed", "b"]

    def test_empty_string(self):
        """Empty input yields a single empty line."""
        assert wrap_text("", 30) == ""

    @pytest.mark.parametrize(
        "text,width",
        [
            ("Address: 221B Baker Street, Marylebone, London NW1 6XE", 20),
            ("one two three four five six seven eight nine ten", 7),
            ("a b c d e f g", 1),
            ("Doctor: Maria-Jose de la Fuente y Sanchez", 30),
        ],
    )
    def test_never_breaks_inside_token(self, text, width):
        """Only separating spaces become line feeds."""
        result = wrap_text(text, width)
        assert result.replace("\n", " ") == text
        tokens = set(text.split(" "))
        for line in result.split("\n"):
            for token in line.split(" "):
                assert token in tokens

    def test_lines_respect_width_when_possible(self):
        """Lines made of multiple words never exceed the width."""
        result = wrap_text("one two three four five six seven eight nine ten", 12)
        for line in result.split("\n"):
            if " " in line:
                assert len(line) <= 12

    def test_consecutive_spaces_preserved(self):
        """Splitting is on single spaces, so empty tokens survive."""
        assert wrap_text("a  b", 30) == "a  b"



class TestEscapeDrawtextText:
    """Test suite for drawtext escaping."""

    def test_escape_colon(self):
        assert escape_drawtext_text("Doctor: Jane") == "Doctor\\: Jane"

    def test_escape_backslash(self):
        """One backslash per level below the option parser, then doubled again."""
        assert escape_drawtext_text("\\") == "\\\\\\\\"
        assert escape_drawtext_text("C:\\path") == "C\\:\\\\\\\\path"

    def test_escape_single_quote(self):
        assert escape_drawtext_text("O'Brien") == "O\\'Brien"

    def test_escape_percent(self):
        """A bare percent would start a drawtext %{...} expansion."""
        assert escape_drawtext_text("100%") == "100\\\\%"

    def test_newline_kept_literal(self):
        """drawtext has no escape for a line break; it must arrive as a real one."""
        assert escape_drawtext_text("line1\nline2") == "line1\nline2"

    def test_default_profile_leaves_comma_and_period(self):
        assert escape_drawtext_text("St. Mary, Rd.", DEFAULT_PROFILE) == "St. Mary, Rd."

    def test_extended_profile_escapes_comma_and_period(self):
        result = escape_drawtext_text("St. Mary, Rd.", EXTENDED_PROFILE)
        assert result == "St\\. Mary\\, Rd\\."

    @pytest.mark.parametrize(
        "text",
        [
            "C:\\Users\\dr's files\\n",
            "ratio 1:2 'quoted' \\ back",
            "multi\nline: 'text'\\",
            "\\\\::''",
            "O'Brien's 100% [clinic], room 4; floor 2",
            "it''s",
            "",
        ],
    )
    @pytest.mark.parametrize("profile", [DEFAULT_PROFILE, EXTENDED_PROFILE])
    def test_escape_survives_all_parser_levels(self, ffmpeg_parser, text, profile):
        """Graph, option and expansion unescaping restore the original."""
        assert _read_back(ffmpeg_parser, escape_drawtext_text(text, profile)) == text

    @pytest.mark.parametrize("text", ["a:b", "it's", "back\\slash", "x\ny", "a%b"])
    def test_no_unescaped_option_separators(self, text):
        """Colons and quotes in the output are always preceded by a backslash."""
        escaped = escape_drawtext_text(text)
        i = 0
        while i < len(escaped):
            if escaped[i] == "\\":
                i += 2
                continue
            assert escaped[i] not in ":'"
            i += 1


class TestBuildTextBlock:
    """Test suite for text block assembly."""

    @pytest.fixture
    def fields(self):
        return TextFields(
            doctor_name="Jane Doe",
            degree="MD",
            mobile="555-1234",
            address="1 Main St",
        )

    @pytest.fixture
    def builder(self):
        return FilterGraphBuilder(CompositionSettings(font_path="/fonts/DejaVuSans-Bold.ttf"))

    def test_display_order_and_labels(self, fields):
        """Lines follow name, mobile, address, degree."""
        assert format_fields(fields) == (
            "Doctor: Jane Doe\n"
            "Mobile: 555-1234\n"
            "Address: 1 Main St\n"
            "Degree: MD"
        )

    def test_block_is_escaped_and_quoted(self, fields):
        block = build_text_block(fields)
        assert block == (
            "'Doctor\\: Jane Doe\n"
            "Mobile\\: 555-1234\n"
            "Address\\: 1 Main St\n"
            "Degree\\: MD'"
        )

    def test_each_field_wrapped_independently(self):
        fields = TextFields(
            doctor_name="Jane Doe",
            degree="MD",
            mobile="555-1234",
            address="221B Baker Street Marylebone London",
        )
        raw = format_fields(fields, wrap_width=20)
        assert raw.split("\n") == [
            "Doctor: Jane Doe",
            "Mobile: 555-1234",
            "Address: 221B Baker",
            "Street Marylebone",
            "London",
            "Degree: MD",
        ]

    def test_single_quote_reopens_quoting(self):
        """A quote cannot be escaped inside '...', so the span is closed and reopened."""
        fields = TextFields("O'Brien", "MD", "1", "2")
        block = build_text_block(fields)
        assert "O\\'\\''Brien" in block
        assert block.startswith("'") and block.endswith("'")

    @pytest.mark.parametrize(
        "fields",
        [
            TextFields("Dr. Sean O'Brien", "MD", "555-1234", "1 Main St"),
            TextFields("D'Souza", "MBBS", "+91 98:76", "Road 1"),
            TextFields("Jane", "MD", "1", "C:\\Clinics\\North Wing"),
            TextFields("Jane", "100% Board Certified", "1", "2"),
            TextFields("Jane", "MD, PhD", "[ext. 4]", "Suite 5; Floor 2, Tower A"),
            TextFields("Jane", "MD", "1", "a long address that certainly wraps onto more lines"),
            TextFields("It's", "'quoted'", "'", "\\'"),
        ],
    )
    @pytest.mark.parametrize("profile", [DEFAULT_PROFILE, EXTENDED_PROFILE])
    def test_graph_renders_original_text(self, ffmpeg_parser, builder, fields, profile):
        """The full -filter_complex parses back to the unescaped text block."""
        graph = render_filter_complex(builder.build(build_text_block(fields, profile=profile)))
        filters = ffmpeg_parser.parse(graph)

        assert [f.name for f in filters] == ["scale", "scale", "overlay", "drawtext"]
        drawtext = filters[-1]
        assert drawtext.outputs == ["final"]
        assert list(drawtext.options) == [
            "fontfile", "text", "fontsize", "fontcolor", "box", "boxcolor",
            "boxborderw", "x", "y", "line_spacing", "fix_bounds",
        ]
        assert drawtext.options["fontfile"] == "/fonts/DejaVuSans-Bold.ttf"
        assert ffmpeg_parser.drawtext_text(graph) == format_fields(fields)

    def test_extended_profile_applied(self, fields):
        block = build_text_block(fields, profile=EXTENDED_PROFILE)
        assert "Address\\: 1 Main St" in block
        custom = TextFields("Dr. A", "B.Sc, MD", "1", "2")
        assert "B\\.Sc\\, MD" in build_text_block(custom, profile=EXTENDED_PROFILE)


class TestTextFields:
    """Test suite for TextFields."""

    def test_missing_reports_empty_fields(self):
        fields = TextFields(doctor_name="Jane", degree="", mobile="1", address="")
        assert fields.missing() == ["address", "degree"]

    def test_missing_empty_when_complete(self):
        assert TextFields("a", "b", "c", "d").missing() == []
