"""Canonical layouts for violations, computed on demand."""
import logging
from typing import Optional

from ..errors import RuleInternalError
from ..layout import LayoutInfo, code_start, leading_width
from ..syntax import SyntaxNode
from .models import Rule, Violation
from .rules import get_rule

logger = logging.getLogger(__name__)


def canonicalize(violation: Violation, rules: Optional[tuple[Rule, ...]] = None) -> Optional[LayoutInfo]:
    """
    Produce the layout the reporting rule considers correct.

    Pure: the evaluated layout is left untouched. Pass the same rules the
    violation was found with so configured options carry over.

    Args:
        violation: A violation returned by evaluate()
        rules: Rules the violation was found with (default: built-ins)

    Returns:
        The corrected LayoutInfo, or None if the rule is advisory

    Raises:
        KeyError: If the violation names an unknown rule
        ValueError: If the violation carries no evaluation context
        RuleInternalError: If the fix raised or does not re-check clean
    """
    rule = get_rule(violation.rule_id, rules)
    if rule.advisory:
        return None

    node, layout = violation.node, violation.layout
    if node is None or layout is None:
        raise ValueError(
            f"Violation {violation.rule_id} at {violation.span} has no evaluation context"
        )

    try:
        fixed = rule.fix(node, layout)
        leftover = rule.check(node, fixed)
    except Exception as e:
        logger.error(f"Fix for {rule.id} failed at {violation.span}: {e}", exc_info=True)
        raise RuleInternalError(rule.id, f"fix raised {e!r}") from e

    if leftover:
        raise RuleInternalError(
            rule.id, f"fix is not idempotent: {leftover[0].message} at {leftover[0].span}"
        )
    return fixed


def render_layout(node: SyntaxNode, layout: LayoutInfo, source: str) -> str:
    """
    Render a node's text as ``layout`` places it.

    Children keep their own internal layout and move as a block; separator
    tokens and comments are written where the layout's anchors put them.

    Args:
        node: The node the layout belongs to
        layout: Evaluated or canonical layout of ``node``
        source: The text the tree was parsed from

    Returns:
        The rendered text, without a trailing newline
    """
    lines = source.split('\n')
    pieces: list[tuple[int, int, str]] = []

    for child, placement in zip(node.children, layout.children):
        origin, _ = code_start(lines, child.span)
        d_line = placement.start.line - origin.line
        d_column = placement.start.column - origin.column

        for line_no in range(origin.line, child.span.end.line + 1):
            text = lines[line_no - 1]
            if line_no == child.span.end.line:
                text = text[:child.span.end.column]
            if line_no == origin.line:
                pieces.append((placement.start.line, placement.start.column, text[origin.column:]))
                continue
            column = leading_width(text)
            if text[column:]:
                pieces.append((line_no + d_line, max(0, column + d_column), text[column:]))

    for anchor in layout.anchors:
        pieces.append((anchor.position.line, anchor.position.column, anchor.text))

    if not pieces:
        return ""

    buffer: dict[int, str] = {}
    for line_no, column, text in sorted(pieces):
        current = buffer.get(line_no, "")
        if len(current) < column:
            current += " " * (column - len(current))
        elif column < len(current) and not current.endswith(" "):
            # Pieces moved into each other; keep the tokens apart
            current += " "
        buffer[line_no] = current + text

    first, last = min(buffer), max(buffer)
    return '\n'.join(buffer.get(n, "").rstrip() for n in range(first, last + 1))
