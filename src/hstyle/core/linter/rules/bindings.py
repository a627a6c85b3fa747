"""Rules for do-notation lets, where clauses and right-hand sides."""
from typing import Generator

from ...layout import LayoutInfo, Placement
from ...syntax import NodeKind, Position, SyntaxNode
from ..models import Severity, Violation
from ..relayout import Relayout

INDENT = 2

BINDING_KINDS = (NodeKind.SIGNATURE, NodeKind.DECLARATION)


def _binding_groups(layout: LayoutInfo) -> list[list[int]]:
    """Group consecutive bindings of one name (signature plus equations)."""
    order = sorted(
        (i for i, c in enumerate(layout.children) if c.kind in BINDING_KINDS),
        key=lambda i: layout.children[i].start,
    )
    groups: list[list[int]] = []
    for i in order:
        label = layout.children[i].label
        if groups and label and layout.children[groups[-1][0]].label == label:
            groups[-1].append(i)
        else:
            groups.append([i])
    return groups


def bottom_up_order(layout: LayoutInfo) -> tuple[list[list[int]], list[list[int]]]:
    """
    Order let bindings so that every name is defined before it is used.

    Stable: among bindings whose dependencies are all placed, the earliest
    in the source goes next. Mutually recursive groups keep source order.

    Returns:
        Tuple of (current_groups, canonical_groups)
    """
    groups = _binding_groups(layout)
    labels = [layout.children[g[0]].label for g in groups]
    uses = [
        {ref for i in g for ref in layout.children[i].refs} - {labels[n]}
        for n, g in enumerate(groups)
    ]

    placed: list[int] = []
    remaining = list(range(len(groups)))
    while remaining:
        pending = {labels[n] for n in remaining}
        ready = [n for n in remaining if not (uses[n] & pending)]
        chosen = ready[0] if ready else remaining[0]
        placed.append(chosen)
        remaining.remove(chosen)

    return groups, [groups[n] for n in placed]


def let_binding_order(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag let bindings in a do-block that use a name defined further down.

    Write helpers first and the bindings that use them after, bottom-up.
    """
    if layout.parent != NodeKind.DO_BLOCK:
        return

    current, canonical = bottom_up_order(layout)
    for actual, wanted in zip(current, canonical):
        if actual != wanted:
            child = layout.children[actual[0]]
            yield Violation(
                rule_id="let-binding-order",
                span=node.children[actual[0]].span,
                message=(
                    f"Binding {child.label} uses a later binding; "
                    f"define {layout.children[wanted[0]].label} first"
                ),
            )
            return


def fix_let_binding_order(node: SyntaxNode, layout: LayoutInfo) -> LayoutInfo:
    if layout.parent != NodeKind.DO_BLOCK:
        return layout

    current, canonical = bottom_up_order(layout)
    if current == canonical:
        return layout

    first = layout.children[current[0][0]]
    draft = Relayout(layout)
    line = first.start.line
    for group in canonical:
        for i in group:
            draft.set_blank(i, 0)
            moved = draft.move_child(i, Position(line, first.start.column))
            line = moved.end.line + 1
    return draft.build()


def _where_clause(layout: LayoutInfo) -> int | None:
    last = len(layout.children) - 1
    if last >= 1 and layout.children[last].kind == NodeKind.WHERE_BLOCK:
        return last
    return None


def where_clause_layout(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag where clauses not on their own line, two spaces in, after a blank line.
    """
    index = _where_clause(layout)
    if index is None:
        return

    where = layout.children[index]
    column = layout.indent + INDENT
    if where.start.column != column or where.blank_before != 1:
        yield Violation(
            rule_id="where-clause-layout",
            span=node.children[index].span,
            message=f"Put `where` on its own line at column {column}, after one blank line",
        )


def fix_where_clause_layout(node: SyntaxNode, layout: LayoutInfo) -> LayoutInfo:
    index = _where_clause(layout)
    if index is None:
        return layout

    previous = layout.children[index - 1]
    draft = Relayout(layout)
    draft.set_blank(index, 1)
    draft.move_child(index, Position(previous.end.line + 2, layout.indent + INDENT))
    return draft.build()


def _right_hand_side(layout: LayoutInfo) -> Placement | None:
    body = [c for c in layout.children[1:] if c.kind != NodeKind.WHERE_BLOCK]
    return body[-1] if body else None


def no_rhs_let(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag right-hand sides written as `let ... in`.

    Advisory: moving the bindings into a `where` clause can change what they
    scope over, so this is never rewritten automatically.
    """
    rhs = _right_hand_side(layout)
    if rhs is not None and rhs.kind == NodeKind.LET_BLOCK:
        index = layout.children.index(rhs)
        yield Violation(
            rule_id="no-rhs-let",
            span=node.children[index].span,
            message="Right-hand side is a let-expression; prefer a where clause",
            severity=Severity.WARNING,
        )


def space_salvage(
    node: SyntaxNode,
    layout: LayoutInfo,
    salvage_column: int = 40
) -> Generator[Violation, None, None]:
    """
    Flag multi-line right-hand sides that start far to the right.

    Advisory: bringing the right-hand side down to the next line is a
    judgment call the guide leaves to the author.
    """
    rhs = _right_hand_side(layout)
    if rhs is None or not rhs.multiline or rhs.start.line != layout.start.line:
        return

    if rhs.start.column - layout.indent >= salvage_column:
        index = layout.children.index(rhs)
        yield Violation(
            rule_id="space-salvage",
            span=node.children[index].span,
            message=(
                f"Right-hand side starts at column {rhs.start.column}; "
                "consider starting it on the next line"
            ),
            severity=Severity.WARNING,
        )
