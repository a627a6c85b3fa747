"""Building blocks for canonical layouts.

Fixes never edit a LayoutInfo. They copy its placements into a ``Relayout``,
move children and anchors around, and build a new value. Moving a child
drags along the anchors that trail it on its last line (closing brackets,
doc comments, separators) unless a fix places those anchors itself.
"""
from __future__ import annotations

from dataclasses import replace

from ..layout import Anchor, LayoutInfo, Placement
from ..syntax import NodeKind, Position

# Opening and closing token of each bracketed collection
BRACKETS = {
    NodeKind.LIST: ("[", "]"),
    NodeKind.TUPLE: ("(", ")"),
    NodeKind.RECORD_LITERAL: ("{", "}"),
}


class Relayout:
    """Mutable scratch copy of a layout."""

    def __init__(self, layout: LayoutInfo):
        self.base = layout
        self.children: list[Placement] = list(layout.children)
        self.anchors: list[Anchor] = list(layout.anchors)
        self._placed: set[int] = set()
        self._owner: dict[int, int] = {}

        for j, anchor in enumerate(self.anchors):
            owner = None
            for i, child in enumerate(self.children):
                if child.end <= anchor.position:
                    owner = i
            if owner is not None and self.children[owner].end.line == anchor.position.line:
                self._owner[j] = owner

    def move_child(self, index: int, start: Position) -> Placement:
        """Move a child rigidly so that it starts at ``start``."""
        old = self.children[index]
        d_line = start.line - old.start.line
        d_column = start.column - old.start.column
        moved = old._replace(
            start=start,
            end=Position(old.end.line + d_line, old.end.column + d_column),
        )
        self.children[index] = moved

        for j, owner in self._owner.items():
            if owner == index and j not in self._placed:
                anchor = self.anchors[j]
                self.anchors[j] = anchor._replace(position=Position(
                    anchor.position.line + d_line, anchor.position.column + d_column
                ))
        return moved

    def place_anchor(self, index: int, position: Position) -> Anchor:
        self._placed.add(index)
        self.anchors[index] = self.anchors[index]._replace(position=position)
        return self.anchors[index]

    def shift_child(self, index: int, lines: int) -> Placement:
        start = self.children[index].start
        return self.move_child(index, Position(start.line + lines, start.column))

    def add_anchor(self, anchor: Anchor) -> None:
        self._placed.add(len(self.anchors))
        self.anchors.append(anchor)

    def set_blank(self, index: int, blank_lines: int) -> None:
        self.children[index] = self.children[index]._replace(blank_before=blank_lines)

    def anchor_indexes(self, *names: str) -> list[int]:
        return [j for j, a in enumerate(self.anchors) if a.name in names]

    def build(self, **changes) -> LayoutInfo:
        ends = [c.end for c in self.children] + [a.end for a in self.anchors]
        end = max(ends, default=self.base.end)
        return replace(
            self.base,
            children=tuple(self.children),
            anchors=tuple(self.anchors),
            end=end,
            **changes,
        )


def elements_after(layout: LayoutInfo, opener: Anchor) -> list[int]:
    """Indexes of the children that sit inside a bracket opened by ``opener``."""
    return [i for i, c in enumerate(layout.children) if c.start > opener.position]


def has_leading_commas(layout: LayoutInfo, open_text: str, close_text: str) -> bool:
    """
    True when a bracketed sequence is single-line or laid out as::

        [ a
        , b
        ]
    """
    opener, closer = layout.first(open_text), _last(layout, close_text)
    if opener is None or closer is None or not layout.multiline:
        return True

    elements = [layout.children[i] for i in elements_after(layout, opener)]
    commas = [a for a in layout.find(",") if opener.position < a.position < closer.position]
    if len(commas) != max(len(elements) - 1, 0):
        return True

    column = opener.position.column
    line = opener.position.line
    for k, element in enumerate(elements):
        if k and (commas[k - 1].position != Position(line, column)):
            return False
        if element.start != Position(line, column + 2):
            return False
        line = element.end.line + 1

    return closer.position == Position(line, column)


def leading_comma_layout(layout: LayoutInfo, open_text: str, close_text: str) -> LayoutInfo:
    """Lay a bracketed sequence out one element per line with leading commas."""
    opener, closer = layout.first(open_text), _last(layout, close_text)
    if opener is None or closer is None:
        return layout

    draft = Relayout(layout)
    elements = elements_after(layout, opener)
    commas = [
        j for j in draft.anchor_indexes(",")
        if opener.position < draft.anchors[j].position < closer.position
    ]
    if len(commas) != max(len(elements) - 1, 0):
        return layout

    column = opener.position.column
    line = opener.position.line
    for k, index in enumerate(elements):
        if k:
            draft.place_anchor(commas[k - 1], Position(line, column))
        draft.set_blank(index, 0)
        moved = draft.move_child(index, Position(line, column + 2))
        line = moved.end.line + 1

    draft.place_anchor(layout.anchors.index(closer), Position(line, column))
    return draft.build()


def hanging_layout(layout: LayoutInfo, first: int, column: int) -> LayoutInfo:
    """Put every child from ``first`` on its own line at ``column``."""
    draft = Relayout(layout)
    line = draft.children[first - 1].end.line + 1 if first else layout.start.line
    for index in range(first, len(draft.children)):
        draft.set_blank(index, 0)
        moved = draft.move_child(index, Position(line, column))
        line = moved.end.line + 1
    return draft.build()


def is_hanging(layout: LayoutInfo, first: int, column: int) -> bool:
    line = layout.children[first - 1].end.line + 1 if first else layout.start.line
    for child in layout.children[first:]:
        if child.start != Position(line, column):
            return False
        line = child.end.line + 1
    return True


def is_leading_operator(layout: LayoutInfo) -> bool:
    """True when a broken operator application reads ``lhs`` / ``op rhs`` under the lhs."""
    op = layout.first("op")
    if op is None or len(layout.children) != 2:
        return True

    lhs, rhs = layout.children
    if lhs.end.line == rhs.start.line:
        return True

    return (
        op.position == Position(lhs.end.line + 1, layout.start.column)
        and rhs.start == Position(op.position.line, op.end.column + 1)
    )


def leading_operator_layout(layout: LayoutInfo) -> LayoutInfo:
    """Break an operator application before its operator."""
    draft = Relayout(layout)
    op_index = draft.anchor_indexes("op")
    if not op_index or len(layout.children) != 2:
        return layout

    lhs = layout.children[0]
    op = draft.place_anchor(op_index[0], Position(lhs.end.line + 1, layout.start.column))
    draft.set_blank(1, 0)
    draft.move_child(1, Position(op.position.line, op.end.column + 1))
    return draft.build()


def commas_match(layout: LayoutInfo, open_text: str, close_text: str) -> bool:
    """True when a bracketed sequence has exactly one comma between each pair of elements."""
    opener, closer = layout.first(open_text), _last(layout, close_text)
    if opener is None or closer is None:
        return False
    elements = elements_after(layout, opener)
    commas = [a for a in layout.find(",") if opener.position < a.position < closer.position]
    return len(commas) == max(len(elements) - 1, 0)


def _last(layout: LayoutInfo, name: str) -> Anchor | None:
    found = layout.find(name)
    return found[-1] if found else None
