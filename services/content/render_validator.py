"""Trial-render math through the typesetting engine and scan the result for garbage."""
from __future__ import annotations

import html
import re

from core.logger import logger
from services.content.math_spans import extract_math_segments
from services.content.typesetting import RenderError, render

# Signatures of broken \neq and missing-backslash commands that only show up
# once the MathML is flattened back to text
GARBAGE_OUTPUT_RE = re.compile(
    r"meq\d|neq\d|xeq\d|yeq\d|\beq0\b|rac\{|qrt\{", re.IGNORECASE
)
TAG_RE = re.compile(r"<[^>]+>")


def rendered_text(mathml: str) -> str:
    """Visible text of a MathML string: tags dropped, entities decoded."""
    return html.unescape(TAG_RE.sub("", mathml))


def render_test(latex: str) -> bool:
    """True when every math segment of ``latex`` renders cleanly in strict mode."""
    if not latex or not latex.strip():
        return True

    for segment in extract_math_segments(latex):
        try:
            mathml = render(segment, strict=True)
        except RenderError as exc:
            logger.warning("[RENDER] Render failed for %r: %s", segment, exc)
            return False

        if GARBAGE_OUTPUT_RE.search(rendered_text(mathml)):
            logger.warning("[RENDER] Rendered output contains garbage: %r", segment)
            return False

    return True
