"""
Run configuration for kvrotator.

Settings come from environment variables with sensible defaults. Each
setting is read from `KVROTATOR_<NAME>` first and then from the GitHub
Actions input variable `INPUT_<NAME>` so the same code runs as a workflow
step or from cron. CLI flags override both.

Usage:
    from kvrotator.config import get_settings
    settings = get_settings()
    print(settings.operation)        # "nothing"
    print(settings.rotation.force)   # False
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

TRUE_VALUES = {"1", "true", "yes", "on"}


def parse_bool(value: str | None) -> bool:
    """Parse an environment-style boolean ('true', 'Yes', '1', 'on')."""
    return (value or "").strip().lower() in TRUE_VALUES


def _env(name: str, default: str = "") -> str:
    # GitHub Actions keeps dashes in input names (INPUT_SECRET-VALUE-1)
    return (
        os.environ.get(f"KVROTATOR_{name}")
        or os.environ.get(f"INPUT_{name}")
        or os.environ.get(f"INPUT_{name.replace('_', '-')}")
        or default
    )


@dataclass(frozen=True)
class RotationSettings:
    """The slice of run settings the rotation engine itself consumes."""

    force: bool = False
    what_if: bool = False
    secret_value_1: str = field(default="", repr=False)
    secret_value_2: str = field(default="", repr=False)


@dataclass(frozen=True)
class RunSettings:
    """Top-level settings for one kvrotator run."""

    operation: str = "nothing"
    resources: str = "*"
    configuration: Path = field(default_factory=lambda: Path("kvrotator.yaml"))
    output_dir: Path = field(default_factory=lambda: Path("."))
    log_level: str = "INFO"

    force: bool = False
    what_if: bool = False
    secret_value_1: str = field(default="", repr=False)
    secret_value_2: str = field(default="", repr=False)

    @property
    def rotation(self) -> RotationSettings:
        return RotationSettings(
            force=self.force,
            what_if=self.what_if,
            secret_value_1=self.secret_value_1,
            secret_value_2=self.secret_value_2,
        )

    def with_overrides(self, **overrides: object) -> RunSettings:
        """Copy with every non-None override applied (used for CLI flags)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_env(cls) -> RunSettings:
        return cls(
            operation=_env("OPERATION", "nothing"),
            resources=_env("RESOURCES", "*"),
            configuration=Path(_env("CONFIGURATION", "kvrotator.yaml")),
            output_dir=Path(_env("OUTPUT_DIR", ".")),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            force=parse_bool(_env("FORCE")),
            what_if=parse_bool(_env("WHAT_IF")),
            secret_value_1=_env("SECRET_VALUE_1"),
            secret_value_2=_env("SECRET_VALUE_2"),
        )


# Singleton
_settings: RunSettings | None = None


def get_settings() -> RunSettings:
    """Get or create the singleton settings from environment variables."""
    global _settings
    if _settings is not None:
        return _settings
    _settings = RunSettings.from_env()
    return _settings


def reset_settings() -> None:
    """Reset the singleton settings (for testing)."""
    global _settings
    _settings = None
