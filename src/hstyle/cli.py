"""CLI for hstyle.

Checks source files against the trees a front-end dumped next to them
(``Foo.hs`` is read together with ``Foo.hs.tree.json``).
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from hstyle import __version__
from hstyle.config import Config
from hstyle.core.errors import StyleCheckError
from hstyle.core.linter.engine import check_units
from hstyle.core.linter.report import render, summarize
from hstyle.core.linter.rules import build_rules

logger = logging.getLogger(__name__)

EXIT_CLEAN = 0
EXIT_VIOLATIONS = 1
EXIT_FATAL = 2


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="hstyle",
        description="Check Haskell source layout against the style guide"
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", type=Path,
        help="YAML config file (default: .hstyle.yaml if present)"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Debug logging on stderr"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # check command
    c = subparsers.add_parser("check", help="Check source files")
    c.add_argument("sources", type=Path, nargs="+", help="Source files to check")
    c.add_argument(
        "--format", choices=["text", "json"], default="text",
        help="Output format (default: text)"
    )
    c.add_argument(
        "--fix-preview", action="store_true",
        help="Show the canonical layout under each fixable violation"
    )

    # rules command
    subparsers.add_parser("rules", help="List the active rules")

    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    try:
        config = Config.load(args.config)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FATAL

    if args.command == "check":
        return asyncio.run(check_command(args, config))
    return rules_command(config)


async def check_command(args, config: Config) -> int:
    """Execute the check command."""
    console = Console(soft_wrap=True, highlight=False)
    rules = build_rules(config)

    reports = await check_units(
        args.sources,
        rules=rules,
        tree_suffix=config.tree_suffix,
        max_workers=config.max_workers
    )

    if args.format == "json":
        console.print_json(data={
            "version": __version__,
            "reports": [r.to_dict() for r in reports],
        })
    else:
        for report in reports:
            if report.fatal is None:
                source = None
                if args.fix_preview:
                    source = Path(report.source_path).read_text(encoding="utf-8")
                try:
                    text = render(report.violations, source, rules, path=report.source_path)
                except StyleCheckError as e:
                    logger.error(f"{report.source_path}: {e}")
                    report.fatal = str(e)
                else:
                    console.print(text, end="", markup=False)
            console.print(summarize(report), markup=False, style="bold" if report.fatal else None)

    if any(r.fatal for r in reports):
        return EXIT_FATAL
    if any(r.total_violations for r in reports):
        return EXIT_VIOLATIONS
    return EXIT_CLEAN


def rules_command(config: Config) -> int:
    """Execute the rules command."""
    console = Console()

    table = Table(title=f"hstyle v{__version__} rules")
    table.add_column("Rule", style="bold")
    table.add_column("Section")
    table.add_column("Fix")
    table.add_column("Description")

    for rule in build_rules(config):
        table.add_row(
            rule.id,
            rule.section,
            "advisory" if rule.advisory else "auto",
            rule.description,
        )

    console.print(table)
    return EXIT_CLEAN


if __name__ == "__main__":
    sys.exit(main())
