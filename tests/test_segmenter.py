"""Tests for the content segmenter."""
from __future__ import annotations

import re

import pytest

from services.content.math_spans import looks_like_math
from services.content.models import FormattedSegment, MathSegment, TextSegment
from services.content.segmenter import markup_to_html, segment_content


class TestSegmentContent:
    """Splitting mixed content into typed segments."""

    def test_empty_input(self) -> None:
        assert segment_content("") == []
        assert segment_content("   \n ") == []

    def test_plain_prose(self) -> None:
        assert segment_content("What is the area of the triangle?") == [
            TextSegment("What is the area of the triangle?")
        ]

    def test_instruction_then_bare_expression(self) -> None:
        assert segment_content("Solve: x^2 + 3x = 0") == [
            TextSegment("Solve:"),
            MathSegment("x^2 + 3x = 0", display_mode=False),
        ]

    def test_bold_lead_in_then_inline_math(self) -> None:
        """The lead-in is split at its colon, so the words between it and the
        math keep their own plain segment instead of joining the formatted one."""
        assert segment_content("**important**: solve $x=2$") == [
            FormattedSegment(content="**important**:", html="<strong>important</strong>:"),
            TextSegment("solve"),
            MathSegment("x=2", display_mode=False),
        ]

    def test_display_and_inline_order(self) -> None:
        segments = segment_content("Let $a = 1$. Then $$a + 1 = 2$$ holds")
        assert segments == [
            TextSegment("Let"),
            MathSegment("a = 1", display_mode=False),
            TextSegment(". Then"),
            MathSegment("a + 1 = 2", display_mode=True),
            TextSegment("holds"),
        ]

    def test_bracket_delimiters(self) -> None:
        segments = segment_content(r"Compute \[\frac{1}{2}\] now")
        assert segments[1] == MathSegment(r"\frac{1}{2}", display_mode=True)

    def test_empty_math_span_dropped(self) -> None:
        assert segment_content("before $$  $$ after") == [
            TextSegment("before"),
            TextSegment("after"),
        ]

    def test_unterminated_display_math_is_not_math(self) -> None:
        segments = segment_content("Price is $$ high")
        assert all(not isinstance(s, MathSegment) for s in segments)

    def test_undelimited_latex_command(self) -> None:
        assert segment_content(r"\frac{1}{2} + \frac{1}{3}") == [
            MathSegment(r"\frac{1}{2} + \frac{1}{3}", display_mode=False)
        ]

    def test_undelimited_environment_is_display(self) -> None:
        segments = segment_content(r"Solve: \begin{cases} x = 1 \\ y = 2 \end{cases}")
        assert segments[0] == TextSegment("Solve:")
        assert isinstance(segments[1], MathSegment)
        assert segments[1].display_mode

    def test_listed_system_becomes_aligned_block(self) -> None:
        assert segment_content("Solve x + y = 10, x - y = 2") == [
            TextSegment("Solve"),
            MathSegment(
                r"\left\{\begin{aligned} x + y = 10 \\ x - y = 2 \end{aligned}\right.",
                display_mode=True,
            ),
        ]

    def test_malformed_delimited_math_is_repaired(self) -> None:
        assert segment_content("Compute $2 imes 3 + 1/4$") == [
            TextSegment("Compute"),
            MathSegment(r"2 \times 3 + \frac{1}{4}"),
        ]

    def test_italic_markup(self) -> None:
        assert segment_content("a *small* step") == [
            FormattedSegment("a *small* step", "a <em>small</em> step")
        ]

    def test_unicode_in_delimited_math(self) -> None:
        assert segment_content("$x² ≥ 0$") == [MathSegment("x^2 \\geq  0")]

    def test_never_raises_on_malformed_input(self) -> None:
        for raw in ["$", "$$", "\\(", "\\[x", "**", "{{{", "$a$$", ":"]:
            segment_content(raw)

    @pytest.mark.parametrize(
        "raw",
        [
            "Find $x$ when $$x + 2 = 5$$ and **bold** text",
            "Note: the answer is $\\frac{3}{4}$.",
            "Compute $a$ then $b$ then $c$",
        ],
    )
    def test_segments_cover_original_in_order(self, raw: str) -> None:
        """Concatenated segment content is a subsequence of the original."""
        remaining = re.sub(r"\s+", "", raw)
        for seg in segment_content(raw):
            for char in re.sub(r"\s+", "", seg.content):
                index = remaining.find(char)
                assert index != -1, (seg, char)
                remaining = remaining[index + 1:]


class TestHelpers:
    """Math detection and markup expansion."""

    @pytest.mark.parametrize(
        "text",
        [r"\sqrt{2}", "x^2 - 1", "a_1 + a_2", "3 + 4", "y = 2x"],
    )
    def test_looks_like_math(self, text: str) -> None:
        assert looks_like_math(text)

    @pytest.mark.parametrize(
        "text",
        ["Read the question carefully", "Explain your reasoning before answering x = 2"],
    )
    def test_prose_is_not_math(self, text: str) -> None:
        assert not looks_like_math(text)

    def test_markup_html_escapes_everything_else(self) -> None:
        assert markup_to_html("**a** < b & *c*") == "<strong>a</strong> &lt; b &amp; <em>c</em>"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
