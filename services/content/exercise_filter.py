"""
Exercise validator and batch filter.

Single entry point for generated content before it is stored or shown.
Each question goes through, in order:

 1. fatal corruption (placeholders)      -> reject
 2. fixable corruption                   -> repair once, keep going
 3. brace balance                        -> reject "unbalanced_braces"
 4. system-of-equations shape            -> reject "invalid_system"
 5. strict trial render                  -> reject "render_failure"

Nothing here raises for bad content; every outcome is a ValidationResult.
"""

from __future__ import annotations

import copy
import dataclasses
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, TypeVar

from core.config import settings
from core.logger import logger
from services.content.corruption import find_fatal, find_fixable, repair
from services.content.models import FilterDiagnostic, FilterReport, ValidationResult
from services.content.render_validator import render_test
from services.content.structure_validator import (
    has_balanced_braces,
    validate_system_of_equations,
)

T = TypeVar("T")


def validate_exercise(question: str) -> ValidationResult:
    """Validate one question, repairing fixable corruption."""
    if not question or not question.strip():
        return ValidationResult.rejected("empty", "Empty question")

    working = question

    # Fatal patterns are checked on the original text and always win
    fatal = find_fatal(working)
    if fatal is not None:
        logger.warning("[VALIDATOR] Unfixable corruption: %s", fatal.name)
        return ValidationResult.rejected(
            fatal.name, f"Contains unfixable corruption: {fatal.name}"
        )

    fixable = find_fixable(working)
    if fixable is not None:
        logger.info("[VALIDATOR] Detected fixable corruption: %s", fixable.name)
        # repair() covers every fixable rule in one pass
        working = repair(working)

    if not has_balanced_braces(working):
        logger.warning("[VALIDATOR] Unbalanced braces detected")
        return ValidationResult.rejected("unbalanced_braces", "Unbalanced braces in LaTeX")

    if not validate_system_of_equations(working):
        logger.warning("[VALIDATOR] Invalid system of equations")
        return ValidationResult.rejected(
            "invalid_system", "Invalid system of equations structure"
        )

    if not render_test(working):
        logger.warning("[VALIDATOR] Render test failed")
        return ValidationResult.rejected("render_failure", "LaTeX fails to render correctly")

    if fixable is None:
        return ValidationResult.accepted()
    return ValidationResult.accepted(working, fixable.name)


# -------------------------
# Record access (dicts, dataclasses, plain objects)
# -------------------------
def _get_field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _item_id(item: Any, index: int) -> str:
    item_id = _get_field(item, "id")
    return str(item_id) if item_id is not None else f"#{index}"


def _with_question(item: T, question: str) -> T:
    """Copy of ``item`` with its question replaced; the original is untouched."""
    if isinstance(item, Mapping):
        return {**item, "question": question}  # type: ignore[return-value]
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return dataclasses.replace(item, question=question)
    clone = copy.copy(item)
    setattr(clone, "question", question)
    return clone


# -------------------------
# Batch API
# -------------------------
def filter_exercises_with_report(
    items: Iterable[T], label: Optional[str] = None
) -> FilterReport:
    """Validate every item independently; keep valid ones, report the rest."""
    label = label or settings.default_batch_label
    kept: List[T] = []
    diagnostics: List[FilterDiagnostic] = []

    for index, item in enumerate(items):
        item_id = _item_id(item, index)
        result = validate_exercise(_get_field(item, "question") or "")

        if not result.is_valid:
            logger.warning("[FILTER:%s] Rejecting exercise %s: %s", label, item_id, result.reason)
            diagnostics.append(
                FilterDiagnostic(item_id, "rejected", result.reason or "", result.corruption_kind)
            )
            continue

        if result.fixed_content is not None:
            logger.info("[FILTER:%s] Auto-fixed exercise %s", label, item_id)
            diagnostics.append(
                FilterDiagnostic(
                    item_id, "repaired", "Auto-fixed corrupted LaTeX", result.corruption_kind
                )
            )
            kept.append(_with_question(item, result.fixed_content))
        else:
            kept.append(item)

    report = FilterReport(label=label, kept=kept, diagnostics=diagnostics)
    logger.info(
        "[FILTER:%s] Kept %d item(s), rejected %d, repaired %d",
        label,
        len(kept),
        report.rejected_count,
        report.repaired_count,
    )
    return report


def filter_exercises(items: Iterable[T], label: Optional[str] = None) -> List[T]:
    """Only the valid items, repaired ones carrying their fixed question."""
    return filter_exercises_with_report(items, label).kept


def first_valid_exercise(items: Iterable[T], label: Optional[str] = None) -> Optional[T]:
    """First item that validates (repaired if needed), or None.

    Stops at the first hit, so later items are never validated.
    """
    label = label or settings.default_batch_label
    for index, item in enumerate(items):
        result = validate_exercise(_get_field(item, "question") or "")
        if not result.is_valid:
            logger.warning(
                "[FILTER:%s] Skipping invalid exercise %s: %s",
                label,
                _item_id(item, index),
                result.reason,
            )
            continue
        if result.fixed_content is not None:
            return _with_question(item, result.fixed_content)
        return item
    return None
