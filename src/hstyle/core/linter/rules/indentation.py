"""Indentation and line length rules."""
from dataclasses import replace
from typing import Generator

from ...layout import LayoutInfo
from ...syntax import NodeKind, Position, Span, SyntaxNode
from ..models import Severity, Violation
from ..relayout import (
    BRACKETS,
    Relayout,
    commas_match,
    hanging_layout,
    leading_comma_layout,
    leading_operator_layout,
)

INDENT = 2


def no_tabs(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag tab characters in indentation.

    Tab width is editor-dependent, so tabs make layout-sensitive code ambiguous.
    """
    for line in layout.tab_lines:
        yield Violation(
            rule_id="indent-no-tabs",
            span=Span.of(line, 0, line, 0),
            message="Tab character in indentation (use spaces)",
        )


def fix_no_tabs(node: SyntaxNode, layout: LayoutInfo) -> LayoutInfo:
    return replace(layout, tab_lines=())


def _block_items(node: SyntaxNode, layout: LayoutInfo) -> list[int]:
    # The scrutinee of a case sits on the `case` line, only the alternatives form the block
    first = 1 if node.kind == NodeKind.CASE else 0
    return list(range(first, len(layout.children)))


def _block_column(layout: LayoutInfo, items: list[int]) -> int:
    leader = layout.children[items[0]]
    if leader.start.line == layout.start.line:
        return leader.start.column
    return layout.indent + INDENT


def two_space_indent(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag block lines not indented by two spaces.

    Statements of do-blocks, let- and where-bindings and case alternatives that
    start on their own line sit two spaces in from the line that opens the
    block. A first item on the opening line fixes the column for the rest.
    """
    items = _block_items(node, layout)
    if not items:
        return

    column = _block_column(layout, items)
    misplaced = [
        i for i in items
        if layout.children[i].start.line > layout.start.line
        and layout.children[i].start.column != column
    ]
    if misplaced:
        first = layout.children[misplaced[0]].start
        yield Violation(
            rule_id="indent-two-spaces",
            span=node.span,
            message=(
                f"{len(misplaced)} item(s) of this {node.kind.value} block not at column "
                f"{column} (first at line {first.line}, column {first.column})"
            ),
        )


def fix_two_space_indent(node: SyntaxNode, layout: LayoutInfo) -> LayoutInfo:
    items = _block_items(node, layout)
    if not items:
        return layout

    column = _block_column(layout, items)
    draft = Relayout(layout)
    for i in items:
        child = layout.children[i]
        if child.start.line > layout.start.line:
            draft.move_child(i, Position(child.start.line, column))
    return draft.build()


def _can_break(node: SyntaxNode, layout: LayoutInfo) -> bool:
    if len(layout.children) < 2:
        return False
    if node.kind in BRACKETS:
        return commas_match(layout, *BRACKETS[node.kind])
    if node.kind == NodeKind.OPERATOR:
        return layout.first("op") is not None and len(layout.children) == 2
    return True


def line_length(
    node: SyntaxNode,
    layout: LayoutInfo,
    soft_limit: int = 80,
    hard_limit: int = 120
) -> Generator[Violation, None, None]:
    """
    Flag single-line expressions that run past the column limit.

    Only the outermost breakable expression on a line is reported. Past the
    soft limit is a warning, past the hard limit an error. Breaks only ever
    go between sub-expressions, so long string literals stay whole.
    """
    if layout.multiline or layout.nested or layout.end.column <= soft_limit:
        return
    if not _can_break(node, layout):
        return

    over_hard = layout.end.column > hard_limit
    yield Violation(
        rule_id="line-length",
        span=node.span,
        message=(
            f"Line runs to column {layout.end.column} "
            f"({'hard' if over_hard else 'soft'} limit "
            f"{hard_limit if over_hard else soft_limit})"
        ),
        severity=Severity.ERROR if over_hard else Severity.WARNING,
    )


def fix_line_length(node: SyntaxNode, layout: LayoutInfo, **_limits) -> LayoutInfo:
    if layout.multiline or not _can_break(node, layout):
        return layout

    if node.kind in BRACKETS:
        return leading_comma_layout(layout, *BRACKETS[node.kind])
    if node.kind == NodeKind.OPERATOR:
        return leading_operator_layout(layout)
    return hanging_layout(layout, 1, layout.start.column + INDENT)
