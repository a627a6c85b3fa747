"""Configuration management with YAML file and environment variable overrides."""
from dataclasses import dataclass, field, fields
from pathlib import Path
import logging
import os

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".hstyle.yaml"

INT_FIELDS = ("soft_limit", "hard_limit", "salvage_column", "max_workers")
LIST_FIELDS = ("local_prefixes", "disabled_rules")


@dataclass
class Config:
    """Configuration for the style checker."""

    # Line length (columns): past soft is a warning, past hard an error
    soft_limit: int = 80
    hard_limit: int = 120

    # Right-hand sides starting this far right are worth bringing down
    salvage_column: int = 40

    # Module prefixes treated as project-local when grouping imports.
    # Empty means: the first component of the module's own name.
    local_prefixes: list = field(default_factory=list)

    # Rule ids to skip entirely
    disabled_rules: list = field(default_factory=list)

    # The front-end writes the tree for Foo.hs to Foo.hs + tree_suffix
    tree_suffix: str = ".tree.json"

    # Concurrency when checking several files
    max_workers: int = 4

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from a YAML file (if any), then environment variable overrides."""
        config = cls()

        if path is None and Path(CONFIG_FILE_NAME).is_file():
            path = Path(CONFIG_FILE_NAME)
        if path is not None:
            config._apply_file(path)

        if val := os.environ.get("HSTYLE_SOFT_LIMIT"):
            config.soft_limit = int(val)
        if val := os.environ.get("HSTYLE_HARD_LIMIT"):
            config.hard_limit = int(val)
        if val := os.environ.get("HSTYLE_SALVAGE_COLUMN"):
            config.salvage_column = int(val)

        # Comma-separated lists
        if val := os.environ.get("HSTYLE_LOCAL_PREFIXES"):
            config.local_prefixes = [p.strip() for p in val.split(",") if p.strip()]
        if val := os.environ.get("HSTYLE_DISABLE"):
            config.disabled_rules = [r.strip() for r in val.split(",") if r.strip()]

        if val := os.environ.get("HSTYLE_TREE_SUFFIX"):
            config.tree_suffix = val
        if val := os.environ.get("HSTYLE_MAX_WORKERS"):
            config.max_workers = int(val)

        if config.hard_limit < config.soft_limit:
            logger.warning(
                f"hard_limit {config.hard_limit} below soft_limit {config.soft_limit}; "
                "using soft_limit for both"
            )
            config.hard_limit = config.soft_limit

        return config

    def _apply_file(self, path: Path) -> None:
        """Overlay settings from a YAML config file. Raises ValueError if it is malformed."""
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")

        for key, value in data.items():
            attr = str(key).replace("-", "_")
            if attr == "disable":
                attr = "disabled_rules"
            if attr not in {f.name for f in fields(self)}:
                logger.warning(f"Unknown config key in {path}: {key}")
                continue
            setattr(self, attr, _coerce(attr, value, path))

        logger.debug(f"Loaded config from {path}")


def _coerce(attr: str, value, path: Path):
    """Convert a YAML value to the type of the field it sets. Raises ValueError."""
    if attr in INT_FIELDS:
        if isinstance(value, bool):
            raise ValueError(f"{attr} in {path} must be an integer, got {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"{attr} in {path} must be an integer, got {value!r}") from e

    if attr in LIST_FIELDS:
        # A single name is accepted in place of a one-element list
        if value is None:
            return []
        items = [value] if isinstance(value, str) else value
        if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
            raise ValueError(f"{attr} in {path} must be a list of names, got {value!r}")
        return items

    if not isinstance(value, str):
        raise ValueError(f"{attr} in {path} must be a string, got {value!r}")
    return value
