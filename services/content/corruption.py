"""
Corruption pattern library for generated exercise LaTeX.

Two classes of damage show up in generator output:

 - fixable: escape-sequence accidents with a single safe reading, e.g. the
   `\\n` of `\\neq` being swallowed as a newline ("m\\neq0" -> "meq0"), a
   command prefixed by its own first letter ("\\f\\frac"), or a command that
   lost its backslash ("rac{1}{2}")
 - fatal: placeholder artifacts of an unfinished generation ("TODO", "???",
   "[PLACEHOLDER]", ...). These are never repaired.

The table is ordered and immutable; patterns are compiled once at import.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from core.logger import logger


@dataclass(frozen=True)
class CorruptionPattern:
    name: str
    matcher: re.Pattern
    fixable: bool


# Corrupted \neq: the letter must be a lone variable, never the tail of a
# command such as \subseteq or \leq
_NEQ_ADJACENT_RE = re.compile(r"(?<![A-Za-z\\])([A-Za-z])eq(\d)")
_NEQ_NEWLINE_RE = re.compile(r"(?<![A-Za-z\\])([A-Za-z])[ \t]*\n\s*eq\s*(\d)")
_NEQ_SPACES_RE = re.compile(r"(?<![A-Za-z\\])([A-Za-z])[ \t]+eq[ \t]*(\d)")
_DOUBLE_FRAC_RE = re.compile(r"(?:\\f)+\\frac")
_DOUBLE_SQRT_RE = re.compile(r"(?:\\s)+\\sqrt")
# "\f" of "\frac" read as a form feed, or dropped altogether
_MISSING_FRAC_RE = re.compile(r"(?<![A-Za-z\\])[f\f]?rac\{")
_MISSING_SQRT_RE = re.compile(r"(?<![A-Za-z\\])s?qrt\{")
_MISSING_CDOT_RE = re.compile(r"(?<![A-Za-z\\])cdot(?![A-Za-z])")
_CASES_BLOCK_RE = re.compile(r"(\\begin\{cases\})(.*?)(\\end\{cases\})", re.DOTALL)
_SINGLE_ROW_BREAK_RE = re.compile(r"(?<!\\)\\(?=[ \t]*\n)")
# Standalone eq0. Only an eq0 separated by whitespace from a lone variable
# ("m\neq0", "m eq0") is a broken \neq; after a word, an operator or at the
# start it is a placeholder.
_PLACEHOLDER_EQ0_RE = re.compile(
    r"(?:^|(?<=[^A-Za-z\s])|(?<=[A-Za-z\\][A-Za-z]))\s*\beq0\b"
)

CORRUPTION_PATTERNS: Tuple[CorruptionPattern, ...] = (
    CorruptionPattern("corrupted_neq", _NEQ_ADJACENT_RE, True),
    CorruptionPattern("corrupted_neq_newline", _NEQ_NEWLINE_RE, True),
    CorruptionPattern("corrupted_neq_spaces", _NEQ_SPACES_RE, True),
    CorruptionPattern("double_prefix_frac", re.compile(r"\\f\\frac"), True),
    CorruptionPattern("double_prefix_sqrt", re.compile(r"\\s\\sqrt"), True),
    CorruptionPattern("missing_backslash_frac", _MISSING_FRAC_RE, True),
    CorruptionPattern("missing_backslash_sqrt", _MISSING_SQRT_RE, True),
    # Placeholder garbage - never fixable
    CorruptionPattern("placeholder_eq0", _PLACEHOLDER_EQ0_RE, False),
    CorruptionPattern("placeholder_todo", re.compile(r"\bTODO\b", re.IGNORECASE), False),
    CorruptionPattern("placeholder_question", re.compile(r"\?\?\?"), False),
    CorruptionPattern("placeholder_dots", re.compile(r"\.{4,}"), False),
    CorruptionPattern(
        "placeholder_bracket",
        re.compile(r"\[(?:INSERT|PLACEHOLDER|FILL|TBD)\]", re.IGNORECASE),
        False,
    ),
)

FATAL_PATTERNS = tuple(p for p in CORRUPTION_PATTERNS if not p.fixable)
FIXABLE_PATTERNS = tuple(p for p in CORRUPTION_PATTERNS if p.fixable)


def _first_match(text: str, patterns: Tuple[CorruptionPattern, ...]) -> Optional[CorruptionPattern]:
    for pattern in patterns:
        if pattern.matcher.search(text):
            return pattern
    return None


def detect(text: str) -> Optional[CorruptionPattern]:
    """First pattern, in table order, that matches ``text``."""
    if not text:
        return None
    return _first_match(text, CORRUPTION_PATTERNS)


def find_fatal(text: str) -> Optional[CorruptionPattern]:
    """First non-fixable pattern found anywhere in ``text``."""
    if not text:
        return None
    return _first_match(text, FATAL_PATTERNS)


def find_fixable(text: str) -> Optional[CorruptionPattern]:
    if not text:
        return None
    return _first_match(text, FIXABLE_PATTERNS)


def _fix_cases_row_breaks(match: re.Match) -> str:
    begin, body, end = match.groups()
    return begin + _SINGLE_ROW_BREAK_RE.sub(r"\\\\", body) + end


def repair(text: str) -> str:
    """Apply every fixable repair once. Idempotent; safe on clean input."""
    if not text or not text.strip():
        return ""

    result = text

    # Corrupted \neq: newline first so its "eq" is not read as glued to the letter
    result = _NEQ_NEWLINE_RE.sub(r"\1 \\neq \2", result)
    result = _NEQ_ADJACENT_RE.sub(r"\1 \\neq \2", result)
    result = _NEQ_SPACES_RE.sub(r"\1 \\neq \2", result)

    result = _DOUBLE_FRAC_RE.sub(r"\\frac", result)
    result = _DOUBLE_SQRT_RE.sub(r"\\sqrt", result)

    result = _MISSING_FRAC_RE.sub(r"\\frac{", result)
    result = _MISSING_SQRT_RE.sub(r"\\sqrt{", result)
    result = _MISSING_CDOT_RE.sub(r"\\cdot", result)

    result = _CASES_BLOCK_RE.sub(_fix_cases_row_breaks, result)

    if result != text:
        logger.debug("[CORRUPTION] Repaired %r -> %r", text, result)
    return result.strip()
