"""Layout style checker for parsed Haskell source."""
from .canonical import canonicalize, render_layout
from .engine import check_file, check_units, evaluate
from .models import Rule, Severity, StyleReport, Violation
from .report import render

__all__ = [
    "evaluate", "check_file", "check_units", "canonicalize", "render_layout", "render",
    "Rule", "Severity", "StyleReport", "Violation",
]
