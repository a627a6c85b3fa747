"""Module header, export, import and top-level declaration rules."""
from typing import Generator

from ...layout import LayoutInfo, Placement
from ...syntax import NodeKind, Position, SyntaxNode
from ..models import Severity, Violation
from ..relayout import Relayout, has_leading_commas, leading_comma_layout

INDENT = 2

DECLARATION_KINDS = (NodeKind.SIGNATURE, NodeKind.DECLARATION, NodeKind.DATA)


def module_header_doc(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag a module header without a documentation comment.

    Every module opens with a `-- |` comment saying what it is for.
    """
    if layout.doc_lines == 0:
        yield Violation(
            rule_id="module-header-doc",
            span=node.span,
            message="Module header has no documentation comment",
            severity=Severity.WARNING,
        )


def _export_list(layout: LayoutInfo) -> int | None:
    for i, child in enumerate(layout.children):
        if child.kind == NodeKind.EXPORT_LIST:
            return i
    return None


def _header_line(layout: LayoutInfo, index: int) -> int:
    return layout.children[index - 1].end.line if index else layout.start.line


def module_header_layout(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag a module header whose export list or `where` shares a line.

    Format: `module Name`, then the export list and then `where`, each on
    its own line indented two spaces.
    """
    index = _export_list(layout)
    where = layout.first("where")
    if index is None or where is None:
        return

    column = layout.indent + INDENT
    exports = layout.children[index]
    if (
        exports.start != Position(_header_line(layout, index) + 1, column)
        or where.position != Position(exports.end.line + 1, column)
    ):
        yield Violation(
            rule_id="module-header-layout",
            span=node.span,
            message=f"Put the export list and `where` on their own lines at column {column}",
        )


def fix_module_header_layout(node: SyntaxNode, layout: LayoutInfo) -> LayoutInfo:
    index = _export_list(layout)
    if index is None or layout.first("where") is None:
        return layout

    column = layout.indent + INDENT
    draft = Relayout(layout)
    draft.set_blank(index, 0)
    exports = draft.move_child(index, Position(_header_line(layout, index) + 1, column))
    draft.place_anchor(draft.anchor_indexes("where")[0], Position(exports.end.line + 1, column))
    return draft.build()


def export_list_layout(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag a multi-line export list not written with leading commas.

    One export per line, the comma in front, the closing paren on its own line.
    """
    if not has_leading_commas(layout, "(", ")"):
        yield Violation(
            rule_id="export-list-layout",
            span=node.span,
            message="Multi-line export list should use one export per line with leading commas",
        )


def fix_export_list_layout(node: SyntaxNode, layout: LayoutInfo) -> LayoutInfo:
    return leading_comma_layout(layout, "(", ")")


def _is_local(name: str, prefixes: tuple[str, ...]) -> bool:
    return any(name == p or name.startswith(p + ".") for p in prefixes)


def _local_prefixes(layout: LayoutInfo, local_prefixes: tuple[str, ...]) -> tuple[str, ...]:
    if local_prefixes:
        return tuple(local_prefixes)
    for child in layout.children:
        if child.kind == NodeKind.MODULE_HEADER and child.label:
            return (child.label.split('.')[0],)
    return ()


def _import_plan(layout: LayoutInfo, local_prefixes: tuple[str, ...]) -> tuple[list[int], list[int]]:
    """
    Work out the current and the canonical order of a module's imports.

    Returns:
        Tuple of (current_order, canonical_order) as child indexes
    """
    prefixes = _local_prefixes(layout, local_prefixes)
    imports = [i for i, c in enumerate(layout.children) if c.kind == NodeKind.IMPORT]
    current = sorted(imports, key=lambda i: layout.children[i].start)

    def sort_key(i: int) -> tuple:
        name = layout.children[i].label
        return (0 if _is_local(name, prefixes) else 1, name.casefold(), name)

    return current, sorted(current, key=sort_key)


def _import_gaps(layout: LayoutInfo, order: list[int], prefixes: tuple[str, ...]) -> list[int]:
    """Blank lines wanted before each import: one between groups, none inside a group."""
    gaps = []
    previous = None
    for i in order:
        local = _is_local(layout.children[i].label, prefixes)
        gaps.append(0 if previous is None or previous == local else 1)
        previous = local
    return gaps


def import_order(
    node: SyntaxNode,
    layout: LayoutInfo,
    local_prefixes: tuple[str, ...] = ()
) -> Generator[Violation, None, None]:
    """
    Flag imports out of order.

    Project-local imports come first, then everything else; each group is
    alphabetical and the groups are separated by one blank line.
    """
    current, canonical = _import_plan(layout, local_prefixes)
    if len(current) < 2:
        return

    for actual, wanted in zip(current, canonical):
        if actual != wanted:
            yield Violation(
                rule_id="import-order",
                span=node.children[actual].span,
                message=(
                    f"Import of {layout.children[actual].label} out of order; "
                    f"expected {layout.children[wanted].label} here "
                    "(project imports first, alphabetical within groups)"
                ),
            )
            return

    prefixes = _local_prefixes(layout, local_prefixes)
    gaps = _import_gaps(layout, current, prefixes)
    for i, gap in zip(current[1:], gaps[1:]):
        if layout.children[i].blank_before != gap:
            yield Violation(
                rule_id="import-order",
                span=node.children[i].span,
                message=(
                    f"Expected {gap} blank line(s) before import of {layout.children[i].label} "
                    "(one between groups, none inside a group)"
                ),
            )


def fix_import_order(
    node: SyntaxNode,
    layout: LayoutInfo,
    local_prefixes: tuple[str, ...] = ()
) -> LayoutInfo:
    current, canonical = _import_plan(layout, local_prefixes)
    if len(current) < 2:
        return layout

    prefixes = _local_prefixes(layout, local_prefixes)
    gaps = _import_gaps(layout, canonical, prefixes)
    first = layout.children[current[0]]
    last_end = max(layout.children[i].end.line for i in current)

    draft = Relayout(layout)
    line = first.start.line
    for position, (i, gap) in enumerate(zip(canonical, gaps)):
        if position:
            draft.set_blank(i, gap)
            line += gap
        else:
            draft.set_blank(i, first.blank_before)
        moved = draft.move_child(i, Position(line, first.start.column))
        line = moved.end.line + 1

    _shift_after(draft, layout, last_end, line - 1 - last_end, exclude=set(current))
    return draft.build()


def _shift_after(
    draft: Relayout,
    layout: LayoutInfo,
    after_line: int,
    delta: int,
    exclude: set[int]
) -> None:
    if not delta:
        return
    for i, child in enumerate(layout.children):
        if i not in exclude and child.start.line > after_line:
            draft.shift_child(i, delta)


def _same_group(previous: Placement, current: Placement) -> bool:
    # A signature and its equations, or the equations of one function, stay together
    return (
        current.kind == NodeKind.DECLARATION
        and previous.kind in (NodeKind.SIGNATURE, NodeKind.DECLARATION)
        and bool(current.label)
        and current.label == previous.label
    )


def _declaration_gaps(layout: LayoutInfo) -> list[tuple[int, int]]:
    """(child index, wanted blank lines) for every declaration that follows another."""
    order = sorted(range(len(layout.children)), key=lambda i: layout.children[i].start)
    wanted = []
    for prev_i, cur_i in zip(order, order[1:]):
        previous, current = layout.children[prev_i], layout.children[cur_i]
        if previous.kind in DECLARATION_KINDS and current.kind in DECLARATION_KINDS:
            wanted.append((cur_i, 0 if _same_group(previous, current) else 1))
    return wanted


def blank_line_between_declarations(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag top-level declarations not separated by exactly one blank line.

    A type signature and the equations of the same function form one group
    and are written without blank lines between them.
    """
    for index, gap in _declaration_gaps(layout):
        child = layout.children[index]
        if child.blank_before == gap:
            continue

        if gap:
            message = f"Expected one blank line before declaration of {child.label or 'this binding'}"
        else:
            message = f"No blank lines inside the definition of {child.label}"
        yield Violation(
            rule_id="blank-line-between-declarations",
            span=node.children[index].span,
            message=message,
        )


def fix_blank_line_between_declarations(node: SyntaxNode, layout: LayoutInfo) -> LayoutInfo:
    wanted = dict(_declaration_gaps(layout))
    draft = Relayout(layout)
    delta = 0
    for i in sorted(range(len(layout.children)), key=lambda i: layout.children[i].start):
        child = layout.children[i]
        if i in wanted:
            delta += wanted[i] - child.blank_before
            draft.set_blank(i, wanted[i])
        if delta:
            draft.shift_child(i, delta)
    return draft.build()


def top_level_signature(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag top-level bindings without a type signature.

    Advisory only: the checker cannot infer the type to write.
    """
    signed = {c.label for c in layout.children if c.kind == NodeKind.SIGNATURE}
    seen = set()
    for child, placement in zip(node.children, layout.children):
        if placement.kind != NodeKind.DECLARATION or not placement.label:
            continue
        if placement.label in signed or placement.label in seen:
            continue
        seen.add(placement.label)
        yield Violation(
            rule_id="top-level-signature",
            span=child.span,
            message=f"Top-level binding {placement.label} has no type signature",
            severity=Severity.WARNING,
        )


def function_documentation(node: SyntaxNode, layout: LayoutInfo) -> Generator[Violation, None, None]:
    """
    Flag top-level type signatures without a `-- |` documentation comment.
    """
    if layout.parent == NodeKind.MODULE and layout.doc_lines == 0:
        yield Violation(
            rule_id="function-documentation",
            span=node.span,
            message="Top-level function has no documentation comment",
            severity=Severity.WARNING,
        )
