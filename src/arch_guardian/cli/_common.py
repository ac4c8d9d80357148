"""Shared CLI helpers."""

from pathlib import Path
from typing import List, Optional

from rich.console import Console

from ..config import GuardianConfig, load_config

console = Console()


def resolve_config(
    config: Optional[Path] = None,
    workers: Optional[int] = None,
    production: bool = False,
    specs: Optional[List[str]] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> GuardianConfig:
    """Build configuration from CLI options."""
    overrides = {}
    if workers is not None:
        overrides["workers"] = workers
    if production:
        overrides["production"] = True
    if specs:
        overrides["enabled_specs"] = list(specs)
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, **overrides)
