"""hstyle: layout style checking for Haskell source."""
__version__ = "0.1.0"

from hstyle.core.linter import canonicalize, evaluate, render

__all__ = ["__version__", "evaluate", "canonicalize", "render"]
