"""Data models for the style checker."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from ..layout import LayoutInfo
from ..syntax import NodeKind, Span, SyntaxNode


class Severity(Enum):
    """Severity levels for style violations."""
    AUTO_FIX = "auto_fix"     # Canonical layout available
    WARNING = "warning"        # Advisory, needs a human
    ERROR = "error"           # Past a hard limit


@dataclass(frozen=True)
class Violation:
    """A single (rule, location) non-conformance finding."""
    rule_id: str
    span: Span
    message: str
    severity: Severity = Severity.AUTO_FIX
    # Evaluation context for on-demand fixing; not part of the value
    node: Optional[SyntaxNode] = field(default=None, compare=False, repr=False)
    layout: Optional[LayoutInfo] = field(default=None, compare=False, repr=False)

    @property
    def key(self) -> tuple[str, Span]:
        return (self.rule_id, self.span)

    @property
    def line(self) -> int:
        return self.span.start.line

    @property
    def column(self) -> int:
        return self.span.start.column

    def to_dict(self) -> dict:
        return {
            "rule": self.rule_id,
            "severity": self.severity.value,
            "line": self.line,
            "column": self.column,
            "end_line": self.span.end.line,
            "end_column": self.span.end.column,
            "message": self.message,
        }


CheckFn = Callable[..., Iterable[Violation]]
FixFn = Callable[..., LayoutInfo]


@dataclass(frozen=True)
class Rule:
    """
    A named style check: a predicate over a node's layout plus an optional fix.

    Rules without a fixer are advisory: reported, never rewritten.
    """
    id: str
    section: str
    applies_to: frozenset[NodeKind]
    checker: CheckFn
    fixer: Optional[FixFn] = None
    options: tuple[tuple[str, Any], ...] = ()

    @property
    def advisory(self) -> bool:
        return self.fixer is None

    @property
    def description(self) -> str:
        return (self.checker.__doc__ or "No description").strip().split('\n')[0]

    def check(self, node: SyntaxNode, layout: LayoutInfo) -> list[Violation]:
        return list(self.checker(node, layout, **dict(self.options)))

    def fix(self, node: SyntaxNode, layout: LayoutInfo) -> Optional[LayoutInfo]:
        if self.fixer is None:
            return None
        return self.fixer(node, layout, **dict(self.options))

    def configure(self, **options: Any) -> Rule:
        """Return a copy with ``options`` bound; unknown keys are ignored."""
        known = dict(self.options)
        known.update((k, v) for k, v in options.items() if k in known)
        return replace(self, options=tuple(known.items()))


@dataclass
class StyleReport:
    """Complete style report for one source unit."""
    source_path: str
    total_violations: int = 0
    auto_fixable: int = 0
    warnings: int = 0
    errors: int = 0
    violations: list[Violation] = field(default_factory=list)
    fatal: Optional[str] = None

    def add_violation(self, violation: Violation) -> None:
        """Add a violation to the report and update counts."""
        self.violations.append(violation)
        self.total_violations += 1

        if violation.severity == Severity.AUTO_FIX:
            self.auto_fixable += 1
        elif violation.severity == Severity.WARNING:
            self.warnings += 1
        elif violation.severity == Severity.ERROR:
            self.errors += 1

    def to_dict(self) -> dict:
        return {
            "source_path": self.source_path,
            "total_violations": self.total_violations,
            "auto_fixable": self.auto_fixable,
            "warnings": self.warnings,
            "errors": self.errors,
            "violations": [v.to_dict() for v in self.violations],
            "fatal": self.fatal,
        }
