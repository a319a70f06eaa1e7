"""
Display-time repair of malformed LaTeX in math segments.

Validation (``corruption.repair``) only fixes what is safe to store. Before
a math segment is shown it also gets the broader, best-effort fixes below:

 - commands that lost their backslash ("imes", "div", "og_", "alpha", ...)
   and "f32"-style fractions
 - a bare list of two or more equations turned into an aligned system
 - exponent, log and subscript braces, and 1/25 -> \\frac{1}{25}
 - a unicode root followed by an operand gets braces
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from core.logger import logger
from services.content.corruption import repair

# "\f32", or a form feed from the same escape, read as \frac{3}{2}
_ESCAPED_DIGIT_FRAC_RE = re.compile(r"(?:\\f|\f)(\d)(\d)(?![\d{])")
_BARE_DIGIT_FRAC_RE = re.compile(r"(?<![A-Za-z\\])f(\d)(\d)(?![\d{])")

# Commands that lost their backslash. Only whole tokens, never the tail of a
# word or of another command (\times, \subsetneq, \log).
MISSING_BACKSLASH_COMMANDS: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"(?<![A-Za-z\\])s?qrt\["), r"\\sqrt["),
    (re.compile(r"(?<![A-Za-z\\])imes(?![A-Za-z])"), r"\\times"),
    (re.compile(r"(?<![A-Za-z\\])div(?![A-Za-z])"), r"\\div"),
    (re.compile(r"(?<![A-Za-z\\])pm(?![A-Za-z])"), r"\\pm"),
    (re.compile(r"(?<![A-Za-z\\])l?og_"), r"\\log_"),
    (re.compile(r"(?<![A-Za-z\\])(sin|cos|tan)\{"), r"\\\1{"),
    (
        re.compile(
            r"(?<![A-Za-z\\])(infty|leq|geq|neq|alpha|beta|gamma|delta|theta)(?![A-Za-z])"
        ),
        r"\\\1",
    ),
)

# "^{x+^2}" and "^x+^2" -> "^{x+2}"
_BRACED_SPLIT_EXPONENT_RE = re.compile(r"\^\{\s*([a-z])([+\-])\^(\d+)\s*\}", re.IGNORECASE)
_SPLIT_EXPONENT_RE = re.compile(r"\^([a-z])([+\-])\^(\d+)", re.IGNORECASE)
# "2^x+1 = 5" -> "2^{x+1} = 5"
_OPEN_EXPONENT_RE = re.compile(r"\^([a-z])([+\-])(\d+)(?=\s|=|$)", re.IGNORECASE)
# "3^2x = 9" -> "3^{2x} = 9"
_DIGIT_LETTER_EXPONENT_RE = re.compile(r"\^(\d)([a-z])(?=\s|=|$)", re.IGNORECASE)
# "e^2x+1" -> "e^{2x+1}"
_COMPOUND_EXPONENT_RE = re.compile(r"\^(\d*[a-z][+\-]\d+)(?![\d}])", re.IGNORECASE)
_LOG_BASE_RE = re.compile(r"\\log_(\d+)")
_LONG_SUBSCRIPT_RE = re.compile(r"_(\d{2,})(?![\d}])")
# 1/25, but not x/2 or 1.5/2
_NUMERIC_FRACTION_RE = re.compile(
    r"(?<![A-Za-z\d.])(\d+)\s*/\s*(\d+)(?![A-Za-z\d]|\.\d)"
)
_ROOT_OPERAND_RE = re.compile(r"√([a-z])([+\-])(\d+)", re.IGNORECASE)
_ROOT_PAREN_RE = re.compile(r"√\(([^)]+)\)")

# -------------------------
# Systems of equations
# -------------------------
SYSTEM_MARKERS = ("\\begin{cases}", "\\begin{aligned}", "\\left\\{")
SYSTEM_LEAD_IN_RES: Tuple[re.Pattern, ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"^(.*?solve\s+the\s+system\s+of\s+equations\s*:?\s*)",
        r"^(.*?system\s+of\s+equations\s*:?\s*)",
        r"^(.*?solve\s+the\s+following\s+system\s*:?\s*)",
        r"^(.*?solve\s*:?\s*)",
    )
)
_HARD_SEPARATOR_RE = re.compile(r"\s*[;\n]\s*")
_COMMA_RE = re.compile(r"\s*[,，؛]\s*")
_SPACE_RE = re.compile(r"\s+")
# Start of a new equation in a run-on list: "2x+", "y -"
_EQUATION_START_RE = re.compile(r"[0-9]*[A-Za-z]\w*\s*[+\-]")
MAX_RIGHT_HAND_SIDE = 20


def fix_corrupted_commands(text: str) -> str:
    """Restore backslashes stripped from common commands."""
    # Before repair(), whose strip would eat a leading form feed
    result = _ESCAPED_DIGIT_FRAC_RE.sub(r"\\frac{\1}{\2}", text)
    result = _BARE_DIGIT_FRAC_RE.sub(r"\\frac{\1}{\2}", result)
    result = repair(result)
    for pattern, replacement in MISSING_BACKSLASH_COMMANDS:
        result = pattern.sub(replacement, result)
    return result


def _split_run_on(chunk: str) -> List[str]:
    """Split "8x+3y=28 2x+y=8" where a second equation starts."""
    parts: List[str] = []
    start = 0
    for gap in _SPACE_RE.finditer(chunk):
        head = chunk[start:gap.start()]
        equals = head.rfind("=")
        rhs_length = len(head) - equals - 1
        if (
            equals != -1
            and 0 < rhs_length <= MAX_RIGHT_HAND_SIDE
            and _EQUATION_START_RE.match(chunk, gap.end())
        ):
            parts.append(head)
            start = gap.end()
    parts.append(chunk[start:])
    return parts


def collect_equations(text: str) -> List[str]:
    """Equations listed in ``text``, or [] when there are fewer than two."""
    pieces = [p for p in _HARD_SEPARATOR_RE.split(text.strip()) if p]
    pieces = [_SPACE_RE.sub(" ", p) for p in pieces]

    if len(pieces) == 1 or not any("=" in p for p in pieces):
        single = _SPACE_RE.sub(" ", text).strip()
        pieces = [
            part.strip()
            for piece in _COMMA_RE.split(single)
            for part in _split_run_on(piece)
            if part.strip()
        ]

    equations = [p for p in pieces if "=" in p]
    return equations if len(equations) >= 2 else []


def split_system_of_equations(text: str) -> Optional[Tuple[str, str]]:
    """``(lead_in, aligned_system)`` for a listed system, else None.

    "Solve: x+y=10, x-y=2" gives ("Solve: ", "\\left\\{\\begin{aligned} x+y=10 \\\\ x-y=2 ...").
    """
    if not text or any(marker in text for marker in SYSTEM_MARKERS):
        return None

    lead_in = ""
    body = text.strip()
    for pattern in SYSTEM_LEAD_IN_RES:
        match = pattern.match(body)
        if match:
            lead_in = match.group(1)
            body = body[match.end():].strip()
            break

    equations = collect_equations(body)
    if not equations:
        return None

    rows = " \\\\ ".join(equations)
    return lead_in, f"\\left\\{{\\begin{{aligned}} {rows} \\end{{aligned}}\\right."


def convert_system_of_equations(text: str) -> str:
    """Rewrite a listed system as an aligned block; a lead-in stays prose."""
    system = split_system_of_equations(text)
    if system is None:
        return text
    lead_in, latex = system
    logger.debug("[REPAIR] Converted system of equations: %r", text)
    return f"{lead_in}${latex}$" if lead_in else latex


def fix_malformed_latex(text: str) -> str:
    """Best-effort repair of a math segment before it is displayed. Never raises."""
    if not text or not isinstance(text, str):
        return ""

    result = fix_corrupted_commands(text)
    result = convert_system_of_equations(result)

    result = _BRACED_SPLIT_EXPONENT_RE.sub(r"^{\1\2\3}", result)
    result = _SPLIT_EXPONENT_RE.sub(r"^{\1\2\3}", result)
    result = _OPEN_EXPONENT_RE.sub(r"^{\1\2\3}", result)
    result = _DIGIT_LETTER_EXPONENT_RE.sub(r"^{\1\2}", result)
    result = _COMPOUND_EXPONENT_RE.sub(r"^{\1}", result)

    result = _LOG_BASE_RE.sub(r"\\log_{\1}", result)
    result = _LONG_SUBSCRIPT_RE.sub(r"_{\1}", result)
    result = _NUMERIC_FRACTION_RE.sub(r"\\frac{\1}{\2}", result)

    result = _ROOT_OPERAND_RE.sub(r"\\sqrt{\1\2\3}", result)
    result = _ROOT_PAREN_RE.sub(r"\\sqrt{\1}", result)

    if result != text:
        logger.debug("[REPAIR] %r -> %r", text, result)
    return result
