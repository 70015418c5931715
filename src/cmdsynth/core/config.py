# src/cmdsynth/core/config.py
"""
Configuration schema and loading for cmdsynth.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import os
import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field


class LedgerConfig(BaseModel):
    """Per-request configuration for building ledger records.

    ``wave_window_minutes`` is not range-checked: a non-positive or
    non-finite value falls back to the default window when the window is
    derived.

    Example YAML:
        ledger:
          tenant: acme
          operator: oncall
          wave_window_minutes: 30
          sample_rate_ms: 5000
    """

    model_config = {"frozen": True}

    tenant: str = Field(min_length=1, description="Tenant the ledger record is filed under")
    operator: str = Field(min_length=1, description="Operator requesting the snapshot")
    wave_window_minutes: float = Field(default=15, description="Length of the sampling window in minutes")
    sample_rate_ms: int = Field(default=1000, gt=0, description="Interval between execution samples")


class LoggingSettings(BaseModel):
    model_config = {"frozen": True}

    json_output: bool = Field(default=False, description="Emit JSON log lines instead of console output")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", description="Root log level")


class SynthesisSettings(BaseModel):
    """Top-level cmdsynth configuration."""

    model_config = {"frozen": True}

    ledger: LedgerConfig = Field(description="Ledger snapshot configuration")
    logging: LoggingSettings = Field(default_factory=LoggingSettings, description="Logging configuration")


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded
    """

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default = match.group(2)
            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default is not None:
                return default
            # No env var and no default - keep original so validation reports it
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lower_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lower_keys(item) for item in value]
    return value


def load_settings(config_path: Path) -> SynthesisSettings:
    """Load settings from YAML file with environment variable overrides.

    Precedence:
    1. Environment variables (CMDSYNTH_*) - highest priority
    2. Config file
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: CMDSYNTH_LEDGER__OPERATOR for nested keys.

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="CMDSYNTH",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _lower_keys(raw_config)
    raw_config = _expand_env_vars(raw_config)

    return SynthesisSettings(**raw_config)
