"""Value types shared by the segmenter, validator and exercise filter."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Literal, Optional, Union

SegmentKind = Literal["text", "formatted", "math"]


@dataclass(frozen=True)
class TextSegment:
    """Plain prose, rendered verbatim."""

    content: str
    kind: SegmentKind = field(default="text", init=False)


@dataclass(frozen=True)
class FormattedSegment:
    """Prose with bold/italic markup; ``html`` holds the expanded form."""

    content: str
    html: str
    kind: SegmentKind = field(default="formatted", init=False)


@dataclass(frozen=True)
class MathSegment:
    """Canonical LaTeX plus block (display) or inline rendering."""

    content: str
    display_mode: bool = False
    kind: SegmentKind = field(default="math", init=False)


ContentSegment = Union[TextSegment, FormattedSegment, MathSegment]


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one question.

    ``is_valid`` with ``fixed_content`` set means the question is only valid
    after repair and the fixed text is what should be stored.
    ``corruption_kind`` names the rejecting check, or the fixable pattern
    that triggered the repair.
    """

    is_valid: bool
    fixed_content: Optional[str] = None
    reason: Optional[str] = None
    corruption_kind: Optional[str] = None

    @classmethod
    def accepted(
        cls, fixed_content: Optional[str] = None, corruption_kind: Optional[str] = None
    ) -> "ValidationResult":
        return cls(is_valid=True, fixed_content=fixed_content, corruption_kind=corruption_kind)

    @classmethod
    def rejected(cls, corruption_kind: str, reason: str) -> "ValidationResult":
        return cls(is_valid=False, reason=reason, corruption_kind=corruption_kind)


@dataclass(frozen=True)
class FilterDiagnostic:
    item_id: str
    action: Literal["rejected", "repaired"]
    reason: str
    corruption_kind: Optional[str] = None


@dataclass(frozen=True)
class FilterReport:
    """Items that survived a batch filter plus one diagnostic per change."""

    label: str
    kept: List[Any]
    diagnostics: List[FilterDiagnostic]

    @property
    def rejected_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.action == "rejected")

    @property
    def repaired_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.action == "repaired")
