"""Style engine - walks the syntax tree and runs rules."""
import asyncio
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

from ..errors import MalformedInputError, RuleInternalError, StyleCheckError
from ..layout import compute_layout
from ..syntax import NodeKind, SyntaxNode, load_tree
from .models import Rule, StyleReport, Violation
from .rules import RULES, rules_for

logger = logging.getLogger(__name__)


def evaluate(
    tree: SyntaxNode,
    source: str,
    rules: Optional[tuple[Rule, ...]] = None
) -> list[Violation]:
    """
    Check a parsed source unit against every applicable rule.

    Nodes are visited depth-first in pre-order, and each node gets the rules
    for its kind in registry order. Findings are returned sorted by source
    position; the sort is stable, so traversal and registry order break ties.

    Args:
        tree: Root of the front-end's syntax tree
        source: The text the tree was parsed from
        rules: Rules to run (default: all built-in rules)

    Returns:
        Violations, each carrying the node and layout it was found on

    Raises:
        MalformedInputError: If the tree does not match the source
        RuleInternalError: If a rule raised or reported under another id
    """
    rules = RULES if rules is None else rules
    model = compute_layout(tree, source)

    by_kind: dict[NodeKind, tuple[Rule, ...]] = {}
    seen: set = set()
    found: list[Violation] = []

    for node in tree.walk():
        if node.kind not in by_kind:
            by_kind[node.kind] = rules_for(node.kind, rules)
        layout = model[node]

        for rule in by_kind[node.kind]:
            try:
                produced = rule.check(node, layout)
            except Exception as e:
                logger.error(
                    f"Rule {rule.id} failed on {node.kind.value} at {node.span}: {e}",
                    exc_info=True
                )
                raise RuleInternalError(rule.id, f"check raised {e!r}") from e

            for violation in produced:
                if violation.rule_id != rule.id:
                    raise RuleInternalError(
                        rule.id, f"reported a violation as {violation.rule_id!r}"
                    )
                if violation.key in seen:
                    continue
                seen.add(violation.key)
                found.append(replace(violation, node=node, layout=layout))

    found.sort(key=lambda v: v.span.start)
    logger.debug(f"Evaluated {len(model)} nodes, {len(found)} violations")
    return found


def check_unit(
    source_path: Path,
    tree_path: Optional[Path] = None,
    rules: Optional[tuple[Rule, ...]] = None,
    tree_suffix: str = ".tree.json"
) -> StyleReport:
    """
    Check one source file against the tree the front-end dumped for it.

    Args:
        source_path: Path to the source file
        tree_path: Path to the tree dump (default: source path + tree_suffix)
        rules: Rules to run (default: all)
        tree_suffix: Suffix appended to the source path to find the tree

    Returns:
        StyleReport with all violations found
    """
    try:
        source = source_path.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        raise MalformedInputError(f"Source {source_path} is not valid UTF-8: {e}") from e
    tree = load_tree(tree_path or Path(str(source_path) + tree_suffix))

    report = StyleReport(source_path=str(source_path))
    for violation in evaluate(tree, source, rules):
        report.add_violation(violation)
    return report


async def check_file(
    source_path: Path,
    tree_path: Optional[Path] = None,
    rules: Optional[tuple[Rule, ...]] = None,
    tree_suffix: str = ".tree.json"
) -> StyleReport:
    """Async wrapper around check_unit that runs it in a worker thread."""
    return await asyncio.to_thread(check_unit, source_path, tree_path, rules, tree_suffix)


async def check_units(
    source_paths: list[Path],
    rules: Optional[tuple[Rule, ...]] = None,
    tree_suffix: str = ".tree.json",
    max_workers: int = 4
) -> list[StyleReport]:
    """
    Check independent source units concurrently.

    A fatal error aborts only its own unit: that unit's report carries the
    error in ``fatal`` and the other units are unaffected.

    Returns:
        One report per path, in the order given
    """
    semaphore = asyncio.Semaphore(max(1, max_workers))

    async def run(path: Path) -> StyleReport:
        async with semaphore:
            try:
                return await check_file(path, rules=rules, tree_suffix=tree_suffix)
            except (StyleCheckError, OSError) as e:
                logger.error(f"{path}: {e}")
                return StyleReport(source_path=str(path), fatal=str(e))

    return list(await asyncio.gather(*(run(p) for p in source_paths)))


def get_available_rules(rules: Optional[tuple[Rule, ...]] = None) -> dict[str, str]:
    """
    Get list of available rules with descriptions.

    Returns:
        Dict mapping rule id to the first line of its docstring
    """
    return {rule.id: rule.description for rule in (RULES if rules is None else rules)}
