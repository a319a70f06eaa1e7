"""Tests for the LaTeX notation normalizer."""
from __future__ import annotations

import pytest

from services.content.latex_normalizer import (
    normalize_latex,
    replace_unicode_symbols,
    strip_delimiters,
)


class TestUnicodeSymbols:
    """Unicode math symbols become LaTeX commands."""

    def test_operators_and_greek(self) -> None:
        assert replace_unicode_symbols("a ≤ b") == "a \\leq  b"
        assert replace_unicode_symbols("2πr") == "2\\pi r"

    def test_superscript_and_subscript_digits(self) -> None:
        assert replace_unicode_symbols("x² + x₁") == "x^2 + x_1"

    def test_plain_text_untouched(self) -> None:
        assert replace_unicode_symbols("Solve for x") == "Solve for x"


class TestStripDelimiters:
    """Delimited spans keep their content; stray delimiters are removed."""

    def test_inline_and_display_spans(self) -> None:
        assert strip_delimiters("Find $x$ in $$x + 1 = 2$$") == "Find x in x + 1 = 2"

    def test_bracket_delimiters(self) -> None:
        assert strip_delimiters(r"so \(a\) and \[b\]") == "so a and b"

    def test_stray_dollar_removed(self) -> None:
        assert strip_delimiters("costs 5$ total") == "costs 5 total"

    def test_escaped_dollar_kept(self) -> None:
        assert strip_delimiters(r"costs \$5") == r"costs \$5"

    def test_delimited_fraction_survives(self) -> None:
        assert strip_delimiters(r"$\frac{1}{2}$ of $") == r"\frac{1}{2} of "


class TestNormalizeLatex:
    """Full normalization."""

    def test_empty(self) -> None:
        assert normalize_latex("") == ""
        assert normalize_latex("   ") == ""

    def test_output_is_delimiter_free(self) -> None:
        assert normalize_latex("$x=2$") == "x = 2"

    def test_comparison_spacing(self) -> None:
        assert normalize_latex("x<=3") == "x <= 3"
        assert normalize_latex("y   =2x+1") == "y = 2x+1"

    def test_doubled_backslash_collapsed(self) -> None:
        assert normalize_latex(r"\\frac{1}{2}") == r"\frac{1}{2}"

    def test_row_separators_kept_in_cases(self) -> None:
        latex = r"\begin{cases} x+y=3 \\ x-y=1 \end{cases}"
        assert normalize_latex(latex) == r"\begin{cases} x+y = 3 \\ x-y = 1 \end{cases}"

    def test_unicode_then_math(self) -> None:
        assert normalize_latex("$x² ≠ 4$") == "x^2 \\neq 4"

    @pytest.mark.parametrize(
        "raw",
        [
            "Solve $x^2 = 4$ now",
            "$$\\frac{a}{b}$$ and stray $",
            "x≤3, y≥2",
            "\\\\sqrt{2}  +   1",
            "$$a $ b$$",
            "\\begin{cases} x=1 \\\\ y=2 \\end{cases}",
            "a\\$ and \\(b\\)",
            "x=<y",
        ],
    )
    def test_idempotent(self, raw: str) -> None:
        once = normalize_latex(raw)
        assert normalize_latex(once) == once


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
