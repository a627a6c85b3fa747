"""Plain-text rendering of style findings."""
from typing import Iterable, Optional

from .canonical import canonicalize, render_layout
from .models import Rule, StyleReport, Violation

SUGGESTION_PREFIX = "    | "


def format_violation(violation: Violation) -> str:
    return (
        f"{violation.line}:{violation.column}: "
        f"{violation.severity.value} [{violation.rule_id}] {violation.message}"
    )


def render(
    violations: Iterable[Violation],
    source: Optional[str] = None,
    rules: Optional[tuple[Rule, ...]] = None,
    path: Optional[str] = None
) -> str:
    """
    Render violations as text, one line each, in the order given.

    With ``source``, every violation of a fixable rule is followed by the
    node's text as the canonical layout would place it.

    Args:
        violations: Findings from evaluate(), already in report order
        source: Text the findings were computed on (enables suggestions)
        rules: Rules the findings were computed with
        path: Prefix for each violation line, usually the source file

    Returns:
        The rendered report; empty string when there is nothing to report
    """
    lines = []
    for violation in violations:
        line = format_violation(violation)
        lines.append(f"{path}:{line}" if path else line)
        if source is None:
            continue

        fixed = canonicalize(violation, rules)
        if fixed is None:
            continue
        for text in render_layout(violation.node, fixed, source).split('\n'):
            lines.append((SUGGESTION_PREFIX + text).rstrip())

    return '\n'.join(lines) + '\n' if lines else ""


def summarize(report: StyleReport) -> str:
    """One-line summary of a unit's report."""
    if report.fatal:
        return f"{report.source_path}: failed: {report.fatal}"
    if not report.total_violations:
        return f"{report.source_path}: clean"
    return (
        f"{report.source_path}: {report.total_violations} violations "
        f"({report.auto_fixable} auto-fixable, {report.warnings} warnings, "
        f"{report.errors} errors)"
    )
