"""Configuration loading and management for Arch Guardian.

Configuration sources are merged in priority order:
    1. Defaults (defined in GuardianConfig)
    2. Global config (~/.arch-guardian.toml)
    3. Project config (./arch-guardian.toml)
    4. Explicit config file
    5. Environment variables (ARCH_GUARDIAN_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(production=True)
    >>> config.production
    True
    >>> config.thresholds.modification_threshold
    3
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "ARCH_GUARDIAN_"


@dataclass(frozen=True)
class ThresholdConfig:
    """Thresholds for the structural-failure and magic-number detectors.

    Attributes:
        Repeated modifications:
            modification_threshold: Edits to one area inside the window that
                mark a structural failure (the "three strikes" rule, never < 3)
            monitoring_window_days: Length of the look-back window

        Instability:
            instability_threshold: Visual stable-ratio below this is unstable
            flaky_min_samples: Test runs needed before judging a test
            flaky_pass_rate_low: Pass rates at or below this are plain failures
            flaky_pass_rate_high: Pass rates at or above this are healthy
            visual_min_samples: Visual samples needed before judging stability

        Parameter tuning:
            parameter_tuning_threshold: Touches that make a tuning finding urgent (at least high)
            tuning_touch_threshold: Touches of one coefficient that make a finding

        Stability score:
            urgent_stability: Score below this means refactor now
            recommended_stability: Score below this means refactor soon

        Magic numbers:
            magic_number_tolerance: Absolute tolerance when matching known values
    """

    modification_threshold: int = 3
    monitoring_window_days: int = 30

    instability_threshold: float = 0.7
    flaky_min_samples: int = 5
    flaky_pass_rate_low: float = 0.5
    flaky_pass_rate_high: float = 0.95
    visual_min_samples: int = 5

    parameter_tuning_threshold: int = 5
    tuning_touch_threshold: int = 2

    urgent_stability: float = 0.5
    recommended_stability: float = 0.7

    magic_number_tolerance: float = 0.01

    def __post_init__(self) -> None:
        """Validate threshold configuration."""
        if self.modification_threshold < 3:
            raise ValueError("modification_threshold must be at least 3")
        if self.monitoring_window_days < 1:
            raise ValueError("monitoring_window_days must be at least 1")

        for field_name in (
            "instability_threshold",
            "flaky_pass_rate_low",
            "flaky_pass_rate_high",
            "urgent_stability",
            "recommended_stability",
        ):
            value = getattr(self, field_name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{field_name} must be between 0.0 and 1.0")

        if self.flaky_pass_rate_low >= self.flaky_pass_rate_high:
            raise ValueError("flaky_pass_rate_low must be below flaky_pass_rate_high")
        if self.urgent_stability > self.recommended_stability:
            raise ValueError("urgent_stability must not exceed recommended_stability")
        if self.flaky_min_samples < 1 or self.visual_min_samples < 1:
            raise ValueError("sample minimums must be at least 1")
        if self.tuning_touch_threshold < 1 or self.parameter_tuning_threshold < 1:
            raise ValueError("tuning thresholds must be at least 1")
        if self.magic_number_tolerance < 0:
            raise ValueError("magic_number_tolerance must be non-negative")

    @property
    def monitoring_window_seconds(self) -> int:
        return self.monitoring_window_days * 86400


DEFAULT_THRESHOLDS = ThresholdConfig()


@dataclass(frozen=True)
class GuardianConfig:
    """Configuration for one governance analysis run.

    Attributes:
        production: Drop invariant-violating findings instead of failing loudly
        workers: Detector threads (None = one per detector)
        rules_file: Optional rule document overriding the built-in specs
        rules_timeout_seconds: Timeout for loading the rule document
        detector_timeout_seconds: Timeout for each detector
        enabled_specs: Spec ids to run (empty = every enabled spec)
        verbosity: Logging verbosity level
        thresholds: Detector thresholds
    """

    production: bool = False
    workers: Optional[int] = None
    rules_file: Optional[str] = None
    rules_timeout_seconds: float = 5.0
    detector_timeout_seconds: float = 30.0
    enabled_specs: list[str] = field(default_factory=list)
    verbosity: Verbosity = "normal"
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)

    def __post_init__(self) -> None:
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.rules_timeout_seconds <= 0:
            raise ValueError("rules_timeout_seconds must be positive")
        if self.detector_timeout_seconds <= 0:
            raise ValueError("detector_timeout_seconds must be positive")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError(f"unknown verbosity: {self.verbosity}")


def load_config(config_file: Optional[Path] = None, **overrides) -> GuardianConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated GuardianConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
        InvalidConfigError: If a threshold or environment value is rejected
    """
    merged: dict = {}

    global_config = Path.home() / ".arch-guardian.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except Exception as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "arch-guardian.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update(overrides)

    thresholds = merged.pop("thresholds", None)
    if isinstance(thresholds, dict):
        try:
            merged["thresholds"] = ThresholdConfig(**thresholds)
        except (TypeError, ValueError) as e:
            raise InvalidConfigError("thresholds", thresholds, str(e))
    elif isinstance(thresholds, ThresholdConfig):
        merged["thresholds"] = thresholds

    try:
        return GuardianConfig(**merged)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from ARCH_GUARDIAN_* environment variables.

    Supported environment variables:
        ARCH_GUARDIAN_PRODUCTION: bool (true/false/1/0)
        ARCH_GUARDIAN_WORKERS: int
        ARCH_GUARDIAN_RULES_FILE: str
        ARCH_GUARDIAN_RULES_TIMEOUT_SECONDS: float
        ARCH_GUARDIAN_DETECTOR_TIMEOUT_SECONDS: float
        ARCH_GUARDIAN_VERBOSITY: quiet/normal/verbose

    Returns:
        Dict of field_name -> parsed_value for any variables found.
    """
    type_hints = get_type_hints(GuardianConfig)

    result: dict[str, Any] = {}

    for field_name in GuardianConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Returns None for types that cannot be expressed in one variable.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin is list or type_hint is list:
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load a TOML file and return the parsed dict."""
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore

    with open(path, "rb") as f:
        return tomllib.load(f)
