"""Syntax tree as handed over by the external front-end.

The checker only ever looks at ``kind``, ``children`` and ``span`` of a node.
Trees arrive either built in memory or as a JSON/YAML document of the form::

    {"kind": "module", "span": [1, 0, 12, 7], "children": [...]}
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, NamedTuple

import yaml

from .errors import MalformedInputError


class NodeKind(Enum):
    """Node kinds the front-end is expected to produce."""
    MODULE = "module"
    MODULE_HEADER = "module_header"
    EXPORT_LIST = "export_list"
    IMPORT = "import"
    SIGNATURE = "signature"
    DECLARATION = "declaration"
    DATA = "data"
    CONSTRUCTOR = "constructor"
    RECORD = "record"
    FIELD = "field"
    DERIVING = "deriving"
    APPLICATION = "application"
    CASE = "case"
    ALTERNATIVE = "alternative"
    DO_BLOCK = "do"
    LET_BLOCK = "let"
    WHERE_BLOCK = "where"
    IF = "if"
    LIST = "list"
    TUPLE = "tuple"
    RECORD_LITERAL = "record_literal"
    OPERATOR = "operator"
    PAREN = "paren"
    ATOM = "atom"


class Position(NamedTuple):
    """A source position: 1-based line, 0-based column."""
    line: int
    column: int


@dataclass(frozen=True)
class Span:
    """Half-open source range; ``end.column`` is exclusive."""
    start: Position
    end: Position

    @classmethod
    def of(cls, start_line: int, start_column: int, end_line: int, end_column: int) -> Span:
        return cls(Position(start_line, start_column), Position(end_line, end_column))

    @classmethod
    def from_offsets(cls, source: str, start: int, end: int) -> Span:
        """Build a span from character offsets into ``source``."""
        if not 0 <= start <= end <= len(source):
            raise MalformedInputError(
                f"Offsets {start}..{end} outside source of length {len(source)}"
            )
        return cls(_offset_position(source, start), _offset_position(source, end))

    @property
    def multiline(self) -> bool:
        return self.end.line > self.start.line

    def contains(self, other: Span) -> bool:
        return self.start <= other.start and other.end <= self.end

    def __str__(self) -> str:
        return f"{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"


def _offset_position(source: str, offset: int) -> Position:
    line = source.count('\n', 0, offset) + 1
    line_start = source.rfind('\n', 0, offset) + 1
    return Position(line, offset - line_start)


@dataclass(frozen=True, eq=False)
class SyntaxNode:
    """An opaque parse-tree node. Identity-hashed so it can key layout tables."""
    kind: NodeKind
    span: Span
    children: tuple[SyntaxNode, ...] = ()

    def walk(self) -> Iterator[SyntaxNode]:
        """Yield this node and its descendants in depth-first pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SyntaxNode:
        """Create from a front-end dump. Raises MalformedInputError on bad shape."""
        try:
            kind = NodeKind(data["kind"])
            start_line, start_column, end_line, end_column = (int(v) for v in data["span"])
            children = tuple(cls.from_dict(c) for c in data.get("children") or ())
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedInputError(f"Invalid syntax node {data!r:.80}: {e}") from e

        return cls(kind, Span.of(start_line, start_column, end_line, end_column), children)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "span": [*self.span.start, *self.span.end],
            "children": [c.to_dict() for c in self.children],
        }


def load_tree(path: Path) -> SyntaxNode:
    """
    Load a syntax tree dumped by the front-end.

    JSON is valid YAML, so both formats go through the YAML loader.

    Raises:
        MalformedInputError: If the document is unreadable or not a node
    """
    try:
        data = yaml.safe_load(path.read_text(encoding='utf-8'))
    except UnicodeDecodeError as e:
        raise MalformedInputError(f"Syntax tree {path} is not valid UTF-8: {e}") from e
    except yaml.YAMLError as e:
        raise MalformedInputError(f"Failed to parse syntax tree {path}: {e}") from e

    if not isinstance(data, dict):
        raise MalformedInputError(f"Syntax tree {path} is not a mapping")

    return SyntaxNode.from_dict(data)
