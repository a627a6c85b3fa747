"""Expression layout rules: applications, case, operators, collections, if."""
from typing import Generator

from ...layout import LayoutInfo
from ...syntax import NodeKind, Position, SyntaxNode
from ..models import Severity, Violation
from ..relayout import (
    BRACKETS,
    Relayout,
    has_leading_commas,
    hanging_layout,
    is_hanging,
    is_leading_operator,
    leading_comma_layout,
    leading_operator_layout,
)

INDENT = 2


def application_layout(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag applications that mix single-line and multi-line argument layout.

    An application fits on one line, or every argument goes on its own line
    indented two spaces from the function.
    """
    if not layout.multiline or len(layout.children) < 2:
        return

    column = layout.start.column + INDENT
    if not is_hanging(layout, 1, column):
        yield Violation(
            rule_id="application-layout",
            span=node.span,
            message=f"Multi-line application: put every argument on its own line at column {column}",
        )


def fix_application_layout(node: SyntaxNode, layout: LayoutInfo) -> LayoutInfo:
    if not layout.multiline or len(layout.children) < 2:
        return layout
    return hanging_layout(layout, 1, layout.start.column + INDENT)


def case_arrow_alignment(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag case alternatives whose `->` is out of line with their siblings.

    Only unguarded alternatives with a single-line pattern take part.
    """
    column = layout.target("->")
    arrow = layout.first("->")
    if column is None or arrow is None or len(layout.children) != 2:
        return

    body = layout.children[1]
    if arrow.position.column != column or body.start != Position(arrow.position.line, column + 3):
        yield Violation(
            rule_id="case-arrow-alignment",
            span=node.span,
            message=f"Align `->` of case alternatives at column {column}",
        )


def fix_case_arrow_alignment(node: SyntaxNode, layout: LayoutInfo) -> LayoutInfo:
    column = layout.target("->")
    arrow = layout.first("->")
    if column is None or arrow is None or len(layout.children) != 2:
        return layout

    line = arrow.position.line
    draft = Relayout(layout)
    draft.place_anchor(draft.anchor_indexes("->")[0], Position(line, column))
    draft.move_child(1, Position(line, column + 3))
    return draft.build()


def operator_leading(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag operator applications broken after the operator.

    When an operator application does not fit on a line, the operator
    starts the continuation line, aligned with the first operand.
    """
    if layout.multiline and not is_leading_operator(layout):
        yield Violation(
            rule_id="operator-leading",
            span=node.span,
            message="Break before the operator and align it with the first operand",
        )


def fix_operator_leading(node: SyntaxNode, layout: LayoutInfo) -> LayoutInfo:
    if not layout.multiline or is_leading_operator(layout):
        return layout
    return leading_operator_layout(layout)


def prefer_composition(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag chains of `$` that read better as a composition.

    `f $ g $ h x` is clearer as `f . g $ h x`. Advisory: rewriting changes
    tokens, not just layout.
    """
    op = layout.first("op")
    if op is None or op.text != "$" or len(layout.children) != 2:
        return

    rhs = layout.children[1]
    if rhs.kind == NodeKind.OPERATOR and rhs.label == "$":
        yield Violation(
            rule_id="prefer-composition",
            span=node.span,
            message="Chain of `$` applications: compose the functions with `.` and apply once",
            severity=Severity.WARNING,
        )


def collection_layout(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag multi-line lists, tuples and record literals without leading commas.

    Format::

        [ first
        , second
        ]
    """
    if not has_leading_commas(layout, *BRACKETS[node.kind]):
        yield Violation(
            rule_id="collection-layout",
            span=node.span,
            message="Multi-line collection should put one element per line with leading commas",
        )


def fix_collection_layout(node: SyntaxNode, layout: LayoutInfo) -> LayoutInfo:
    return leading_comma_layout(layout, *BRACKETS[node.kind])


def _if_parts(layout: LayoutInfo):
    then, otherwise = layout.first("then"), layout.first("else")
    if then is None or otherwise is None or len(layout.children) != 3:
        return None
    return then, otherwise


def if_alignment(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag multi-line if-expressions whose `then` and `else` are not aligned.

    Format::

        if condition
           then this
           else that
    """
    parts = _if_parts(layout)
    if not layout.multiline or parts is None:
        return

    then, otherwise = parts
    condition, consequent, alternative = layout.children
    column = condition.start.column
    aligned = (
        then.position == Position(condition.end.line + 1, column)
        and consequent.start == Position(then.position.line, then.end.column + 1)
        and otherwise.position == Position(consequent.end.line + 1, column)
        and alternative.start == Position(otherwise.position.line, otherwise.end.column + 1)
    )
    if not aligned:
        yield Violation(
            rule_id="if-alignment",
            span=node.span,
            message=f"Put `then` and `else` on their own lines at column {column}, under the condition",
        )


def fix_if_alignment(node: SyntaxNode, layout: LayoutInfo) -> LayoutInfo:
    parts = _if_parts(layout)
    if not layout.multiline or parts is None:
        return layout

    condition = layout.children[0]
    column = condition.start.column
    draft = Relayout(layout)

    then = draft.place_anchor(draft.anchor_indexes("then")[0], Position(condition.end.line + 1, column))
    draft.set_blank(1, 0)
    consequent = draft.move_child(1, Position(then.position.line, then.end.column + 1))

    otherwise = draft.place_anchor(
        draft.anchor_indexes("else")[0], Position(consequent.end.line + 1, column)
    )
    draft.set_blank(2, 0)
    draft.move_child(2, Position(otherwise.position.line, otherwise.end.column + 1))
    return draft.build()
