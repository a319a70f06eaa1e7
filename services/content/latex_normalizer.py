"""
LaTeX notation normalizer.

Turns generator output into bare, delimiter-free LaTeX:

 1. Unicode math symbols -> LaTeX commands / ^ _ notation
 2. Well-formed $$..$$, \\[..\\], $..$, \\(..\\) spans are pulled out into
    separate chunks BEFORE stray delimiters are stripped, so a correctly
    delimited fraction is never mistaken for noise
 3. Remaining (stray) delimiters are removed from the prose chunks
 4. Chunks are joined back, math without its delimiters
 5. Doubled backslashes in front of command names are collapsed
 6. Spacing around comparison operators and whitespace runs are normalized

normalize_latex(normalize_latex(s)) == normalize_latex(s) for every s.
"""

from __future__ import annotations

import re
from typing import List, Tuple

from core.logger import logger
from services.content.math_spans import find_math_spans

UNICODE_TO_LATEX: Tuple[Tuple[str, str], ...] = (
    ("±", "\\pm "),
    ("×", "\\times "),
    ("÷", "\\div "),
    ("√", "\\sqrt "),
    ("∞", "\\infty "),
    ("≤", "\\leq "),
    ("≥", "\\geq "),
    ("≠", "\\neq "),
    ("→", "\\rightarrow "),
    ("←", "\\leftarrow "),
    ("⇒", "\\Rightarrow "),
    ("∈", "\\in "),
    ("∉", "\\notin "),
    ("∪", "\\cup "),
    ("∩", "\\cap "),
    ("⊂", "\\subset "),
    ("⊆", "\\subseteq "),
    ("α", "\\alpha "),
    ("β", "\\beta "),
    ("γ", "\\gamma "),
    ("δ", "\\delta "),
    ("θ", "\\theta "),
    ("π", "\\pi "),
    ("σ", "\\sigma "),
    ("Σ", "\\Sigma "),
    ("φ", "\\phi "),
    ("ω", "\\omega "),
    # Superscript digits (x² -> x^2)
    ("⁰", "^0"),
    ("¹", "^1"),
    ("²", "^2"),
    ("³", "^3"),
    ("⁴", "^4"),
    ("⁵", "^5"),
    ("⁶", "^6"),
    ("⁷", "^7"),
    ("⁸", "^8"),
    ("⁹", "^9"),
    # Subscript digits
    ("₀", "_0"),
    ("₁", "_1"),
    ("₂", "_2"),
    ("₃", "_3"),
    ("₄", "_4"),
    ("₅", "_5"),
    ("₆", "_6"),
    ("₇", "_7"),
    ("₈", "_8"),
    ("₉", "_9"),
)

# Unescaped $ and unpaired \( \) \[ \] left over after span extraction
STRAY_DELIMITER_RE = re.compile(r"(?<!\\)\$|(?<!\\)\\[()\[\]]")
DOUBLED_ESCAPE_RE = re.compile(r"\\{2,}(?=[A-Za-z])")
COMPARISON_RE = re.compile(r"\s*(:=|<=|>=|!=|=|<|>)\s*")
WHITESPACE_RE = re.compile(r"\s+")
MULTILINE_ENV_MARKERS = (
    "\\begin{cases}",
    "\\begin{array}",
    "\\begin{aligned}",
    "\\left\\{",
)


def replace_unicode_symbols(text: str) -> str:
    """Apply only the Unicode -> LaTeX symbol table."""
    for symbol, latex in UNICODE_TO_LATEX:
        if symbol in text:
            text = text.replace(symbol, latex)
    return text


def has_multiline_environment(text: str) -> bool:
    return any(marker in text for marker in MULTILINE_ENV_MARKERS)


def _split_math_chunks(text: str) -> List[str]:
    """Split into prose and math chunks; math chunks lose their delimiters."""
    chunks: List[str] = []
    cursor = 0
    for span in find_math_spans(text):
        if span.start > cursor:
            chunks.append(text[cursor:span.start])
        chunks.append(span.content)
        cursor = span.end
    if cursor < len(text):
        chunks.append(text[cursor:])
    return chunks


def strip_delimiters(text: str) -> str:
    """Remove math delimiters, keeping the content of well-formed spans."""
    stray = 0
    parts: List[str] = []
    for content in _split_math_chunks(text):
        # Delimiters nested inside a math span are just as stray
        cleaned, count = STRAY_DELIMITER_RE.subn("", content)
        stray += count
        parts.append(cleaned)

    if stray:
        logger.debug("[NORMALIZER] Stripped %d stray delimiter(s)", stray)
    return "".join(parts)


def normalize_latex(text: str) -> str:
    """Return canonical, delimiter-free LaTeX for ``text``. Never raises."""
    if not text or not isinstance(text, str):
        return ""

    result = replace_unicode_symbols(text.strip())
    result = strip_delimiters(result)

    # `\\` is a row separator inside multi-line environments; leave those alone
    if not has_multiline_environment(result):
        result = DOUBLED_ESCAPE_RE.sub(r"\\", result)

    result = COMPARISON_RE.sub(r" \1 ", result)
    result = WHITESPACE_RE.sub(" ", result)
    return result.strip()
