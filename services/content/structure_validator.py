"""Structural checks on LaTeX: brace balance and system-of-equations shape."""
from __future__ import annotations

import re

from core.logger import logger

CASES_BLOCK_RE = re.compile(r"\\begin\{cases\}(.*?)\\end\{cases\}", re.DOTALL)
ROW_SEPARATOR_RE = re.compile(r"\\\\")
CONSTRAINT_RE = re.compile(r"\\neq|\\ne\b|\\not\s*=")
LETTER_RE = re.compile(r"[A-Za-z]")


def has_balanced_braces(latex: str) -> bool:
    """Single left-to-right counter pass over unescaped braces.

    A backslash escapes the character after it, so ``\\{`` is skipped while
    the brace in ``\\\\{`` (row break, then a group) is counted.
    """
    depth = 0
    i = 0
    length = len(latex or "")
    while i < length:
        char = latex[i]
        if char == "\\":
            i += 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            # More closing than opening at any point = invalid
            if depth < 0:
                return False
        i += 1
    return depth == 0


def validate_system_of_equations(latex: str) -> bool:
    """Every row of a cases block must be a constraint, an equation, or name a variable."""
    if not latex:
        return True

    for block in CASES_BLOCK_RE.finditer(latex):
        for line in ROW_SEPARATOR_RE.split(block.group(1)):
            row = line.strip()
            if not row:
                continue
            # Constraint rows such as "m \neq 0"
            if CONSTRAINT_RE.search(row):
                continue
            if "=" not in row and not LETTER_RE.search(row):
                logger.warning("[STRUCTURE] System row has no equation or variable: %r", row)
                return False
    return True
