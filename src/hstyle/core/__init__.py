"""Core modules: syntax tree, layout model and the style checker."""
from .errors import MalformedInputError, RuleInternalError, StyleCheckError
from .layout import LayoutInfo, compute_layout
from .syntax import NodeKind, Position, Span, SyntaxNode, load_tree

__all__ = [
    "MalformedInputError",
    "RuleInternalError",
    "StyleCheckError",
    "LayoutInfo",
    "compute_layout",
    "NodeKind",
    "Position",
    "Span",
    "SyntaxNode",
    "load_tree",
]
