"""Layout model: where every construct sits in the source text.

Computed once per run from the syntax tree and the raw source. A
``LayoutInfo`` is never edited; fixes build new values with
``dataclasses.replace``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple
import logging
import re

from .errors import MalformedInputError
from .syntax import NodeKind, Position, Span, SyntaxNode

logger = logging.getLogger(__name__)

# Comments start with two or more dashes not followed by another symbol char
TOKEN_RE = re.compile(
    r"-{2,}(?![!#$%&*+./<=>?@\\^|~:])[^\n]*"
    r"|[()\[\]{},]"
    r"|[^\s()\[\]{},]+"
)
COMMENT_RE = re.compile(r"^-{2,}(?![!#$%&*+./<=>?@\\^|~:])")

# Constructs that may be broken over several lines between their children
BREAKABLE = frozenset({
    NodeKind.APPLICATION,
    NodeKind.OPERATOR,
    NodeKind.LIST,
    NodeKind.TUPLE,
    NodeKind.RECORD_LITERAL,
})

KEYWORDS = frozenset({"import", "qualified", "safe", "module", "data", "newtype", "type"})


class Anchor(NamedTuple):
    """A separator token that layout rules align (``=``, ``|``, ``then``, ...)."""
    name: str
    position: Position
    text: str

    @property
    def end(self) -> Position:
        return Position(self.position.line, self.position.column + len(self.text))


class Placement(NamedTuple):
    """Where one child sits, as seen from its parent."""
    kind: NodeKind
    start: Position
    end: Position
    blank_before: int = 0
    label: str = ""
    refs: tuple[str, ...] = ()

    @property
    def multiline(self) -> bool:
        return self.end.line > self.start.line

    @property
    def height(self) -> int:
        return self.end.line - self.start.line + 1

    @property
    def width(self) -> int:
        """Width of a single-line child; multi-line children report their first-line width as 0."""
        return 0 if self.multiline else self.end.column - self.start.column


@dataclass(frozen=True)
class LayoutInfo:
    """Layout facts for one node."""
    kind: NodeKind
    start: Position          # first code token, after any leading doc comment
    end: Position
    indent: int              # leading whitespace of the start line
    doc_lines: int = 0
    children: tuple[Placement, ...] = ()
    anchors: tuple[Anchor, ...] = ()
    targets: tuple[tuple[str, int], ...] = ()  # columns shared with siblings
    depth: int = 0
    parent: NodeKind | None = None
    nested: bool = False     # on the same line inside a single-line breakable parent
    tab_lines: tuple[int, ...] = ()

    @property
    def multiline(self) -> bool:
        return self.end.line > self.start.line

    def find(self, name: str) -> list[Anchor]:
        return [a for a in self.anchors if a.name == name]

    def first(self, name: str) -> Anchor | None:
        for anchor in self.anchors:
            if anchor.name == name:
                return anchor
        return None

    def target(self, name: str) -> int | None:
        return dict(self.targets).get(name)


@dataclass(frozen=True)
class _Context:
    depth: int = 0
    parent: NodeKind | None = None
    nested: bool = False
    targets: tuple[tuple[str, int], ...] = ()


def compute_layout(tree: SyntaxNode, source: str) -> dict[SyntaxNode, LayoutInfo]:
    """
    Compute LayoutInfo for every node of ``tree`` in one pre-order pass.

    Args:
        tree: Root node from the front-end
        source: The exact text the tree was parsed from

    Returns:
        Dict mapping each node to its layout

    Raises:
        MalformedInputError: If any span disagrees with the source text
    """
    builder = _LayoutBuilder(source)
    model: dict[SyntaxNode, LayoutInfo] = {}

    builder.validate(tree.span, "root")
    stack: list[tuple[SyntaxNode, _Context]] = [(tree, _Context())]
    while stack:
        node, ctx = stack.pop()
        for child in node.children:
            builder.validate(child.span, child.kind.value)
        builder.validate_children(node)

        layout = builder.layout(node, ctx)
        model[node] = layout

        child_contexts = builder.child_contexts(node, layout)
        stack.extend(reversed(list(zip(node.children, child_contexts))))

    logger.debug(f"Computed layout for {len(model)} nodes")
    return model


def code_start(lines: list[str], span: Span) -> tuple[Position, int]:
    """
    Find the first code token of a span, skipping leading comment lines.

    Returns:
        Tuple of (position, number_of_comment_lines_skipped)
    """
    comment_lines = 0
    line_no, column = span.start
    while line_no <= span.end.line:
        line = lines[line_no - 1]
        stop = span.end.column if line_no == span.end.line else len(line)
        text = line[column:stop]
        stripped = text.lstrip()
        if stripped and not COMMENT_RE.match(stripped):
            return Position(line_no, column + len(text) - len(stripped)), comment_lines
        if stripped:
            comment_lines += 1
        line_no += 1
        column = 0

    return span.start, 0


def tokens_between(lines: list[str], start: Position, end: Position) -> list[tuple[Position, str]]:
    """Split the text between two positions into tokens with their positions."""
    found = []
    for line_no in range(start.line, end.line + 1):
        line = lines[line_no - 1]
        first = start.column if line_no == start.line else 0
        stop = end.column if line_no == end.line else len(line)
        for match in TOKEN_RE.finditer(line, first, stop):
            found.append((Position(line_no, match.start()), match.group()))
    return found


def leading_width(line: str) -> int:
    return len(line) - len(line.lstrip(' \t'))


class _LayoutBuilder:
    """Measures nodes against the source text."""

    def __init__(self, source: str):
        self.lines = source.split('\n')

    def validate(self, span: Span, what: str) -> None:
        start, end = span.start, span.end
        if start.line < 1 or end.line > len(self.lines) or end < start:
            raise MalformedInputError(
                f"Span {span} of {what} outside source ({len(self.lines)} lines)"
            )
        if start.column < 0 or start.column > len(self.lines[start.line - 1]):
            raise MalformedInputError(f"Span {span} of {what} starts past end of line")
        if end.column > len(self.lines[end.line - 1]):
            raise MalformedInputError(f"Span {span} of {what} ends past end of line")

    def validate_children(self, node: SyntaxNode) -> None:
        previous_end = node.span.start
        for child in node.children:
            if not node.span.contains(child.span):
                raise MalformedInputError(
                    f"{child.kind.value} at {child.span} escapes parent "
                    f"{node.kind.value} at {node.span}"
                )
            if child.span.start < previous_end:
                raise MalformedInputError(
                    f"{child.kind.value} at {child.span} overlaps its previous sibling"
                )
            previous_end = child.span.end

    def layout(self, node: SyntaxNode, ctx: _Context) -> LayoutInfo:
        start, doc_lines = code_start(self.lines, node.span)

        placements = []
        previous_line = start.line
        for child in node.children:
            child_start, _ = code_start(self.lines, child.span)
            placements.append(Placement(
                kind=child.kind,
                start=child_start,
                end=child.span.end,
                blank_before=self._blank_lines(previous_line, child.span.start.line),
                label=self._label(child),
                refs=self._refs(child) if node.kind == NodeKind.LET_BLOCK else (),
            ))
            previous_line = child.span.end.line

        tab_lines: tuple[int, ...] = ()
        if node.kind == NodeKind.MODULE:
            tab_lines = tuple(
                n for n in range(node.span.start.line, node.span.end.line + 1)
                if '\t' in self.lines[n - 1][:leading_width(self.lines[n - 1])]
            )

        return LayoutInfo(
            kind=node.kind,
            start=start,
            end=node.span.end,
            indent=leading_width(self.lines[start.line - 1]),
            doc_lines=doc_lines,
            children=tuple(placements),
            anchors=self._anchors(node, start),
            targets=ctx.targets,
            depth=ctx.depth,
            parent=ctx.parent,
            nested=ctx.nested,
            tab_lines=tab_lines,
        )

    def child_contexts(self, node: SyntaxNode, layout: LayoutInfo) -> list[_Context]:
        nested = (node.kind in BREAKABLE or layout.nested) and not node.span.multiline
        targets = [()] * len(node.children)
        if node.kind == NodeKind.RECORD:
            targets = self._field_targets(node)
        elif node.kind == NodeKind.CASE:
            targets = self._arrow_targets(node)

        return [
            _Context(depth=layout.depth + 1, parent=node.kind, nested=nested, targets=t)
            for t in targets
        ]

    def _blank_lines(self, after_line: int, before_line: int) -> int:
        return sum(
            1 for n in range(after_line + 1, before_line)
            if not self.lines[n - 1].strip()
        )

    def _anchors(self, node: SyntaxNode, start: Position) -> tuple[Anchor, ...]:
        if not node.children:
            return ()

        bounds = [start]
        for child in node.children:
            bounds.extend([child.span.start, child.span.end])
        bounds.append(node.span.end)

        anchors = []
        for gap in range(len(node.children) + 1):
            gap_start, gap_end = bounds[2 * gap], bounds[2 * gap + 1]
            for position, text in tokens_between(self.lines, gap_start, gap_end):
                anchors.append(Anchor(_role(node.kind, gap, text), position, text))
        return tuple(anchors)

    def _first_tokens(self, node: SyntaxNode) -> list[str]:
        start, _ = code_start(self.lines, node.span)
        line_end = Position(start.line, len(self.lines[start.line - 1]))
        return [text for _, text in tokens_between(self.lines, start, min(line_end, node.span.end))]

    def _label(self, node: SyntaxNode) -> str:
        """Name a child by what its parent's sibling rules need to compare."""
        kind = node.kind
        if kind == NodeKind.OPERATOR and len(node.children) >= 2:
            between = tokens_between(
                self.lines, node.children[0].span.end, node.children[1].span.start
            )
            return next((t for _, t in between if not COMMENT_RE.match(t)), "")

        if kind not in (
            NodeKind.IMPORT, NodeKind.MODULE_HEADER, NodeKind.SIGNATURE,
            NodeKind.DECLARATION, NodeKind.DATA, NodeKind.FIELD,
        ):
            return ""

        words = [w for w in self._first_tokens(node) if w not in KEYWORDS]
        if kind == NodeKind.SIGNATURE and words[:1] == ["("] and len(words) > 1:
            return words[1]
        return words[0] if words else ""

    def _refs(self, node: SyntaxNode) -> tuple[str, ...]:
        """Names a let binding mentions on its right-hand side."""
        names = set()
        for child in node.children[1:]:
            for descendant in child.walk():
                if descendant.kind == NodeKind.ATOM:
                    names.update(self._first_tokens(descendant))
        return tuple(sorted(names))

    def _field_targets(self, record: SyntaxNode) -> list[tuple[tuple[str, int], ...]]:
        fields = [
            f for f in record.children
            if f.kind == NodeKind.FIELD and len(f.children) >= 2
            and _own_line(f, record.children)
            and not f.children[-2].span.multiline and not f.children[-1].span.multiline
        ]
        if len(fields) < 2:
            return [()] * len(record.children)

        colons = max(f.children[-2].span.end.column for f in fields) + 1
        widest_type = max(
            f.children[-1].span.end.column - f.children[-1].span.start.column
            for f in fields
        )
        shared = (("::", colons), ("doc", colons + 3 + widest_type + 2))
        return [shared if child in fields else () for child in record.children]

    def _arrow_targets(self, case: SyntaxNode) -> list[tuple[tuple[str, int], ...]]:
        plain = []
        for alt in case.children:
            if alt.kind != NodeKind.ALTERNATIVE or len(alt.children) != 2:
                continue
            if not _own_line(alt, case.children):
                continue
            pattern = alt.children[0]
            between = tokens_between(self.lines, pattern.span.end, alt.children[1].span.start)
            if pattern.span.multiline or [t for _, t in between] != ["->"]:
                continue
            plain.append(alt)

        if len(plain) < 2:
            return [()] * len(case.children)

        arrow = max(alt.children[0].span.end.column for alt in plain) + 1
        return [(("->", arrow),) if child in plain else () for child in case.children]


def _own_line(node: SyntaxNode, siblings: tuple[SyntaxNode, ...]) -> bool:
    """True when no sibling starts on the line ``node`` starts on."""
    line = node.span.start.line
    return not any(s is not node and s.span.start.line == line for s in siblings)


def _role(kind: NodeKind, gap: int, text: str) -> str:
    if COMMENT_RE.match(text):
        return "doc" if text.lstrip('-').lstrip().startswith('^') else "comment"
    if kind == NodeKind.OPERATOR and gap == 1:
        return "op"
    return text
