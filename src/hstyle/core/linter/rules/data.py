"""Data type declaration rules.

A fixed sum type puts the head, each alternative and the deriving clause on
lines of their own, so `data Foo = X | Y deriving (A)` becomes four lines.
"""
from typing import Generator

from ...layout import Anchor, LayoutInfo
from ...syntax import NodeKind, Position, SyntaxNode
from ..models import Violation
from ..relayout import Relayout, has_leading_commas, leading_comma_layout

# Alternatives line up under the type name, just past `data `
SUM_TYPE_OFFSET = len("data ")


def _sum_type_parts(layout: LayoutInfo) -> tuple[list[int], list[int], list[int]] | None:
    """
    Split a sum type into constructors, separators and deriving clauses.

    Returns:
        Tuple of (constructor_indexes, separator_anchor_indexes, deriving_indexes),
        or None when the node is not a plain sum type
    """
    constructors = [i for i, c in enumerate(layout.children) if c.kind == NodeKind.CONSTRUCTOR]
    separators = [j for j, a in enumerate(layout.anchors) if a.name in ("=", "|")]
    deriving = [i for i, c in enumerate(layout.children) if c.kind == NodeKind.DERIVING]

    if len(constructors) < 2 or len(separators) != len(constructors):
        return None
    if layout.anchors[separators[0]].name != "=":
        return None
    return constructors, separators, deriving


def _head_line(layout: LayoutInfo, first_constructor: int) -> int:
    if first_constructor:
        return layout.children[first_constructor - 1].end.line
    return layout.start.line


def sum_type_alignment(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag sum types whose `=` and `|` are not aligned one alternative per line.

    Format::

        data Shape
             = Circle Double
             | Square Double
             deriving (Show)
    """
    parts = _sum_type_parts(layout)
    if parts is None:
        return

    constructors, separators, deriving = parts
    column = layout.start.column + SUM_TYPE_OFFSET
    line = _head_line(layout, constructors[0]) + 1
    for index, j in zip(constructors, separators):
        child = layout.children[index]
        if (
            layout.anchors[j].position != Position(line, column)
            or child.start != Position(line, column + 2)
        ):
            yield Violation(
                rule_id="sum-type-alignment",
                span=node.span,
                message=f"Put `=` and each `|` on its own line at column {column}",
            )
            return
        line = child.end.line + 1

    for index in deriving:
        child = layout.children[index]
        if child.start != Position(line, column):
            yield Violation(
                rule_id="sum-type-alignment",
                span=node.span,
                message=f"Put the deriving clause on its own line at column {column}",
            )
            return
        line = child.end.line + 1


def fix_sum_type_alignment(node: SyntaxNode, layout: LayoutInfo) -> LayoutInfo:
    parts = _sum_type_parts(layout)
    if parts is None:
        return layout

    constructors, separators, deriving = parts
    column = layout.start.column + SUM_TYPE_OFFSET
    line = _head_line(layout, constructors[0]) + 1
    draft = Relayout(layout)
    for index, j in zip(constructors, separators):
        draft.place_anchor(j, Position(line, column))
        draft.set_blank(index, 0)
        moved = draft.move_child(index, Position(line, column + 2))
        line = moved.end.line + 1

    for index in deriving:
        draft.set_blank(index, 0)
        moved = draft.move_child(index, Position(line, column))
        line = moved.end.line + 1

    return draft.build()


def deriving_parens(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag deriving clauses without parentheses.

    Write `deriving (Show)` even for a single class.
    """
    if layout.children and layout.first("(") is None:
        yield Violation(
            rule_id="deriving-parens",
            span=node.span,
            message="Parenthesise the derived classes: deriving (...)",
        )


def fix_deriving_parens(node: SyntaxNode, layout: LayoutInfo) -> LayoutInfo:
    if not layout.children or layout.first("(") is not None:
        return layout

    draft = Relayout(layout)
    first = layout.children[0]
    for i, child in enumerate(layout.children):
        draft.move_child(i, Position(child.start.line, child.start.column + 1))
    draft.add_anchor(Anchor("(", first.start, "("))
    draft.add_anchor(Anchor(")", draft.children[-1].end, ")"))
    return draft.build()


def record_layout(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag multi-line record declarations not written with leading commas.

    Format::

        { personName :: Text  -- ^ Full name
        , personAge  :: Int   -- ^ Age in years
        }
    """
    if not has_leading_commas(layout, "{", "}"):
        yield Violation(
            rule_id="record-layout",
            span=node.span,
            message="Multi-line record should put one field per line with leading commas",
        )


def fix_record_layout(node: SyntaxNode, layout: LayoutInfo) -> LayoutInfo:
    return leading_comma_layout(layout, "{", "}")


def record_field_alignment(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag record fields whose `::` or `-- ^` comment is out of line with the other fields.
    """
    colons, docs = layout.target("::"), layout.target("doc")
    separator = layout.first("::")
    if colons is None or separator is None:
        return

    field_type = layout.children[-1]
    doc = layout.first("doc")
    aligned = (
        separator.position.column == colons
        and field_type.start == Position(separator.position.line, colons + 3)
        and (doc is None or doc.position.line != field_type.end.line or doc.position.column == docs)
    )
    if not aligned:
        yield Violation(
            rule_id="record-field-alignment",
            span=node.span,
            message=f"Align `::` at column {colons} and field comments at column {docs}",
        )


def fix_record_field_alignment(node: SyntaxNode, layout: LayoutInfo) -> LayoutInfo:
    colons, docs = layout.target("::"), layout.target("doc")
    separator = layout.first("::")
    if colons is None or separator is None:
        return layout

    line = separator.position.line
    draft = Relayout(layout)
    draft.place_anchor(draft.anchor_indexes("::")[0], Position(line, colons))
    moved = draft.move_child(len(layout.children) - 1, Position(line, colons + 3))

    doc_index = draft.anchor_indexes("doc")
    if doc_index and draft.anchors[doc_index[0]].position.line == moved.end.line:
        draft.place_anchor(doc_index[0], Position(moved.end.line, docs))
    return draft.build()
