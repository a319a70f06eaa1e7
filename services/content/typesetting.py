"""
Typesetting capability used to certify LaTeX.

Thin wrapper around latex2mathml. The converter either returns MathML or
raises; in strict mode we also treat its silent pass-through of unknown
commands (``<mi>\\foo</mi>``) as a failure, since a browser renderer would
show that raw command to the user.
"""

from __future__ import annotations

import re

from latex2mathml.converter import convert as latex2mathml_convert

from core.logger import logger

# Backslash tokens in <mi>/<mo>/<mtext> tags are commands the engine did not know
UNKNOWN_COMMAND_RE = re.compile(r"<m[iot][^>]*>\s*\\[A-Za-z]+")


class RenderError(ValueError):
    """The typesetting engine could not render the given LaTeX."""


def render(notation: str, strict: bool = True, display: bool = False) -> str:
    """Render ``notation`` to MathML, raising RenderError on failure."""
    if not notation or not notation.strip():
        raise RenderError("Nothing to render")

    try:
        mathml = latex2mathml_convert(
            notation.strip(), display="block" if display else "inline"
        )
    except Exception as exc:  # noqa: BLE001 - latex2mathml has no common base error
        raise RenderError(f"{type(exc).__name__}: {exc}") from exc

    if strict:
        if not mathml or "<math" not in mathml:
            raise RenderError("Renderer produced no MathML")
        unknown = UNKNOWN_COMMAND_RE.search(mathml)
        if unknown:
            logger.debug("[RENDER] Unknown command in output: %s", unknown.group(0))
            raise RenderError(f"Unsupported command in strict mode: {unknown.group(0)}")

    return mathml
