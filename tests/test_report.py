"""Tests for text rendering of findings."""
from hstyle.core.linter.engine import evaluate
from hstyle.core.linter.models import Severity, StyleReport, Violation
from hstyle.core.linter.report import format_violation, render, summarize
from hstyle.core.syntax import Span

from helpers import CASES


def test_format_violation():
    violation = Violation(
        rule_id="line-length",
        span=Span.of(12, 4, 12, 99),
        message="Line runs to column 99 (soft limit 80)",
        severity=Severity.WARNING,
    )

    assert format_violation(violation) == (
        "12:4: warning [line-length] Line runs to column 99 (soft limit 80)"
    )


def test_render_empty():
    assert render([]) == ""


def test_render_without_source():
    source, tree = CASES["where"]()
    text = render(evaluate(tree, source))

    assert text.splitlines() == [
        "1:0: warning [top-level-signature] Top-level binding f has no type signature",
        "2:4: auto_fix [where-clause-layout] "
        "Put `where` on its own line at column 2, after one blank line",
    ]


def test_render_with_suggestions():
    """Fixable violations are followed by the corrected text; advisory ones are not."""
    source, tree = CASES["where"]()
    text = render(evaluate(tree, source), source, path="Where.hs")

    assert text == (
        "Where.hs:1:0: warning [top-level-signature] Top-level binding f has no type signature\n"
        "Where.hs:2:4: auto_fix [where-clause-layout] "
        "Put `where` on its own line at column 2, after one blank line\n"
        "    | f x = g x\n"
        "    |\n"
        "    |   where g = id\n"
    )


def test_render_is_byte_identical_across_runs():
    source, tree = CASES["if"]()
    assert render(evaluate(tree, source), source) == render(evaluate(tree, source), source)


def test_summarize():
    report = StyleReport(source_path="A.hs")
    assert summarize(report) == "A.hs: clean"

    report.add_violation(Violation("if-alignment", Span.of(1, 0, 3, 9), "m"))
    report.add_violation(Violation("no-rhs-let", Span.of(1, 0, 1, 9), "m", Severity.WARNING))
    assert summarize(report) == "A.hs: 2 violations (1 auto-fixable, 1 warnings, 0 errors)"

    failed = StyleReport(source_path="B.hs", fatal="rule 'x': boom")
    assert summarize(failed) == "B.hs: failed: rule 'x': boom"
