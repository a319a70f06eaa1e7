"""
Content segmenter for mixed prose / markdown / LaTeX strings.

Used by the display layer on content that has already been validated:

    segment_content("**Note**: solve $x^2 = 4$")
    -> [FormattedSegment("**Note**:", ...), TextSegment("solve"), MathSegment("x^2 = 4")]

Math is found in three ways, in priority order:
 - display spans ($$..$$, \\[..\\])
 - inline spans ($..$, \\(..\\)) outside display spans
 - undelimited LaTeX or bare notation in the prose between spans
"""

from __future__ import annotations

import html
import re
from typing import List

from core.logger import logger
from services.content.latex_normalizer import normalize_latex, replace_unicode_symbols
from services.content.latex_repair import fix_malformed_latex, split_system_of_equations
from services.content.math_spans import find_math_spans, first_math_token
from services.content.models import (
    ContentSegment,
    FormattedSegment,
    MathSegment,
    TextSegment,
)

DISPLAY_HINT_RE = re.compile(r"\\begin|\\left\s*[{\\\[]")

BOLD_RE = re.compile(r"\*\*([^*]+)\*\*")
ITALIC_RE = re.compile(r"(?<!\*)\*([^*]+)\*(?!\*)")


# -------------------------
# Markup
# -------------------------
def has_markup(text: str) -> bool:
    return bool(BOLD_RE.search(text) or ITALIC_RE.search(text))


def markup_to_html(text: str) -> str:
    """Expand **bold** / *italic*; everything else is HTML-escaped."""
    result = html.escape(text, quote=False)
    result = BOLD_RE.sub(r"<strong>\1</strong>", result)
    result = ITALIC_RE.sub(r"<em>\1</em>", result)
    return result


# -------------------------
# Segment builders
# -------------------------
def _prose_segment(text: str) -> List[ContentSegment]:
    content = text.strip()
    if not content:
        return []
    if has_markup(content):
        return [FormattedSegment(content=content, html=markup_to_html(content))]
    return [TextSegment(content=content)]


def _math_segment(text: str) -> List[ContentSegment]:
    content = normalize_latex(fix_malformed_latex(text))
    if not content:
        return []
    return [MathSegment(content=content, display_mode=bool(DISPLAY_HINT_RE.search(content)))]


def _raw_math_segment(text: str) -> List[ContentSegment]:
    # "Solve x+y=10, x-y=2": the words before a listed system stay prose
    system = split_system_of_equations(text)
    if system is not None:
        lead_in, latex = system
        return _prose_segment(lead_in) + _math_segment(latex)
    return _math_segment(text)


def _split_lead_in(text: str) -> List[ContentSegment]:
    """Prose with an instruction lead-in ("Note: ...") split after the colon.

    The lead-in becomes its own segment and the rest of the sentence another
    one, so "**important**: solve" gives a formatted "**important**:" and a
    plain "solve" rather than one formatted run.
    """
    colon = text.find(":")
    if colon == -1 or not text[colon + 1:].strip():
        return _prose_segment(text)
    return _prose_segment(text[: colon + 1]) + _prose_segment(text[colon + 1:])


def _segment_gap(text: str, before_math: bool) -> List[ContentSegment]:
    """Classify the text between (or around) delimited math spans."""
    if not text.strip():
        return []

    token = first_math_token(text)
    if token == -1:
        return _split_lead_in(text) if before_math else _prose_segment(text)

    # "Solve for x: \frac{1}{2}x = 3" -> prose lead-in, then math
    colon = text.find(":")
    if colon != -1 and colon < token:
        return _prose_segment(text[: colon + 1]) + _raw_math_segment(text[colon + 1:])

    return _raw_math_segment(text)


def segment_content(text: str) -> List[ContentSegment]:
    """Split ``text`` into ordered text / formatted / math segments. Never raises."""
    if not text or not text.strip():
        return []

    segments: List[ContentSegment] = []
    cursor = 0

    for span in find_math_spans(text):
        if span.start > cursor:
            segments.extend(_segment_gap(text[cursor:span.start], before_math=True))

        content = replace_unicode_symbols(fix_malformed_latex(span.content)).strip()
        if content:
            segments.append(MathSegment(content=content, display_mode=span.display))
        cursor = span.end

    if cursor < len(text):
        segments.extend(_segment_gap(text[cursor:], before_math=False))

    logger.debug("[SEGMENTER] %d segment(s) from %d chars", len(segments), len(text))
    return segments
