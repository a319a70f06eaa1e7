"""
Locate delimited math in mixed prose/LaTeX content.

Shared by the segmenter (display path) and the render validator so both see
exactly the same math spans. Supported delimiters:

 - display: ``$$ ... $$`` and ``\\[ ... \\]``
 - inline:  ``$ ... $`` and ``\\( ... \\)``

Display spans are located first; inline spans are only searched for in the
gaps between them, so an inline match can never start inside a display block.
Unterminated openers never match and simply stay in the surrounding text.

Undelimited math (a LaTeX command, or bare notation such as ``x^2 + 1`` in
text that is not word-heavy prose) is recognised by ``first_math_token``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Tuple

# `\[` preceded by another backslash is a `\\[2pt]` row separator, not an opener
DISPLAY_MATH_RE = re.compile(r"\$\$(.*?)\$\$|(?<!\\)\\\[(.*?)\\\]", re.DOTALL)
INLINE_MATH_RE = re.compile(
    r"(?<!\\)\$((?:\\\$|[^$])+?)(?<!\\)\$|(?<!\\)\\\((.*?)\\\)",
    re.DOTALL,
)
ANY_COMMAND_RE = re.compile(r"\\[A-Za-z]+")

# LaTeX commands that definitely indicate math
MATH_COMMAND_RE = re.compile(
    r"\\(?:frac|dfrac|sqrt|cdot|times|div|pm|mp|left|right|begin|end|text|mathbf|mathrm"
    r"|alpha|beta|gamma|delta|epsilon|varepsilon|theta|lambda|mu|pi|sigma|Sigma|phi|omega"
    r"|log|ln|sin|cos|tan|lim|sum|int|prod|leq|geq|neq|le|ge|ne|approx|infty"
    r"|Rightarrow|rightarrow|Leftarrow|leftarrow|forall|exists|in|quad)(?![A-Za-z])"
)

# Bare notation without any command
MATH_HINT_RE = re.compile(
    r"[A-Za-z0-9)\]}]\s*\^\s*[\d{A-Za-z(]"   # x^2, (a+b)^{n}
    r"|[A-Za-z]_\s*[\d{]"                  # a_1, x_{n}
    r"|\d+\s*[+\-*/]\s*\d+"                # 3 + 4
    r"|[A-Za-z0-9]\s*[=<>]\s*-?[A-Za-z0-9(]"  # x = 2, 2x < 5
)

# More than this many long words means prose that mentions math
PROSE_WORD_RE = re.compile(r"[A-Za-z]{4,}")
MAX_PROSE_WORDS = 2


@dataclass(frozen=True)
class MathSpan:
    start: int
    end: int
    content: str
    display: bool


def _span_content(match: re.Match) -> str:
    body = match.group(1) if match.group(1) is not None else match.group(2)
    return (body or "").strip()


def _gaps(spans: List[MathSpan], length: int) -> Iterator[Tuple[int, int]]:
    cursor = 0
    for span in spans:
        if span.start > cursor:
            yield cursor, span.start
        cursor = span.end
    if cursor < length:
        yield cursor, length


def find_math_spans(text: str) -> List[MathSpan]:
    """Return every delimited math span in ``text`` sorted by start offset.

    Spans with an empty interior are included (callers drop them) so that
    their delimiters are not mistaken for surrounding prose.
    """
    if not text:
        return []

    display = [
        MathSpan(m.start(), m.end(), _span_content(m), True)
        for m in DISPLAY_MATH_RE.finditer(text)
    ]

    spans = list(display)
    for gap_start, gap_end in _gaps(display, len(text)):
        for m in INLINE_MATH_RE.finditer(text[gap_start:gap_end]):
            spans.append(
                MathSpan(gap_start + m.start(), gap_start + m.end(), _span_content(m), False)
            )

    spans.sort(key=lambda s: s.start)
    return spans


def first_math_token(text: str) -> int:
    """Offset of the first math token in undelimited ``text``, or -1."""
    command = MATH_COMMAND_RE.search(text)
    if command:
        return command.start()

    if len(PROSE_WORD_RE.findall(text)) > MAX_PROSE_WORDS:
        return -1

    hint = MATH_HINT_RE.search(text)
    return hint.start() if hint else -1


def looks_like_math(text: str) -> bool:
    """True for undelimited LaTeX or bare notation like ``x^2 + 3x = 0``."""
    return first_math_token(text) != -1


def extract_math_segments(text: str) -> List[str]:
    """Math strings to certify: delimited spans, else the whole string if it holds math."""
    if not text or not text.strip():
        return []

    spans = find_math_spans(text)
    if not spans:
        # Any command counts here, known to the segmenter or not
        if ANY_COMMAND_RE.search(text) or looks_like_math(text):
            return [text.strip()]
        return []
    return [span.content for span in spans if span.content]
