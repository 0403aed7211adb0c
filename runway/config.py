"""
Runway configuration management.

This module loads parser, analysis and layout settings from pyproject.toml
(or runway.toml) and environment variables with proper precedence and
validation.
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from runway.layout import DIRECTIONS, LayoutOptions
from runway.parser.analysis import AnalysisOptions
from runway.parser.shared.constants import DEFAULT_DIALECT, PARSER_STRATEGIES, PARSER_STRATEGY_AUTO
from runway.parser.shared.exceptions import ConfigurationError


@dataclass
class RunwayConfig:
    """Settings for one run of the parse, analyze and layout workflow."""

    parser_strategy: str = PARSER_STRATEGY_AUTO
    dialect: str = DEFAULT_DIALECT
    analysis: AnalysisOptions = field(default_factory=AnalysisOptions)
    layout: LayoutOptions = field(default_factory=LayoutOptions)


class ConfigManager:
    """Manages Runway configuration from multiple sources."""

    def __init__(self, project_root: str | Path | None = None) -> None:
        self.project_root = Path(project_root) if project_root else Path.cwd()
        self.logger = logging.getLogger(self.__class__.__name__)

    def load_config(self) -> RunwayConfig:
        """
        Load configuration from TOML and environment variables.

        Returns:
            RunwayConfig with merged configuration

        Raises:
            ConfigurationError: If a configured value is invalid
        """
        # Load from pyproject.toml or runway.toml
        toml_config = self._load_toml_config()

        # Load from environment variables
        env_config = self._load_env_config()

        # Merge configurations (env vars override toml)
        merged_config = self._merge_configs(toml_config, env_config)

        return self._create_config(merged_config)

    def _load_toml_config(self) -> dict[str, Any]:
        """Load configuration from pyproject.toml or runway.toml."""
        # Try pyproject.toml first
        toml_file = self.project_root / "pyproject.toml"
        if toml_file.exists():
            data = self._read_toml(toml_file)
            runway_config = data.get("tool", {}).get("runway")
            if runway_config is not None:
                return dict(runway_config)
            self.logger.debug("No [tool.runway] section in pyproject.toml")

        # Fall back to runway.toml
        toml_file = self.project_root / "runway.toml"
        if toml_file.exists():
            return self._read_toml(toml_file)

        self.logger.debug("No Runway configuration file found")
        return {}

    def _read_toml(self, toml_file: Path) -> dict[str, Any]:
        try:
            with open(toml_file, "rb") as f:
                return tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            self.logger.warning(f"Could not read {toml_file.name}: {e}")
            return {}

    def _load_env_config(self) -> dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: dict[str, Any] = {}

        if (value := os.getenv("RUNWAY_PARSER_STRATEGY")) is not None:
            env_config["parser_strategy"] = value
        if (value := os.getenv("RUNWAY_DIALECT")) is not None:
            env_config["dialect"] = value
        if (value := os.getenv("RUNWAY_LAYOUT_DIRECTION")) is not None:
            env_config.setdefault("layout", {})["direction"] = value
        if (value := os.getenv("RUNWAY_FK_SUFFIX")) is not None:
            env_config.setdefault("analysis", {})["fk_suffix"] = value

        return env_config

    def _merge_configs(self, toml_config: dict[str, Any], env_config: dict[str, Any]) -> dict[str, Any]:
        """Merge TOML and environment configurations, one level deep for sections."""
        merged = dict(toml_config)
        for key, value in env_config.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = {**merged[key], **value}
            else:
                merged[key] = value
        return merged

    def _create_config(self, config_dict: dict[str, Any]) -> RunwayConfig:
        """Create RunwayConfig from dictionary."""
        parser_strategy = str(config_dict.get("parser_strategy", PARSER_STRATEGY_AUTO)).lower()
        if parser_strategy not in PARSER_STRATEGIES:
            raise ConfigurationError(
                f"Invalid parser_strategy '{parser_strategy}'. Expected one of: {', '.join(PARSER_STRATEGIES)}"
            )

        analysis = _build_section(AnalysisOptions, config_dict.get("analysis", {}), "analysis")
        layout = _build_section(LayoutOptions, config_dict.get("layout", {}), "layout")
        layout.direction = str(layout.direction).upper()
        if layout.direction not in DIRECTIONS:
            raise ConfigurationError(
                f"Invalid layout direction '{layout.direction}'. Expected one of: {', '.join(DIRECTIONS)}"
            )

        return RunwayConfig(
            parser_strategy=parser_strategy,
            dialect=str(config_dict.get("dialect", DEFAULT_DIALECT)),
            analysis=analysis,
            layout=layout,
        )


def _build_section(options_class, values: Any, section: str):
    """Instantiate an options dataclass, checking keys and value types against its defaults."""
    if not isinstance(values, dict):
        raise ConfigurationError(f"Configuration section '{section}' must be a table")

    defaults = options_class()
    known = {option.name for option in fields(options_class)}
    kwargs = {}
    for key, value in values.items():
        if key not in known:
            raise ConfigurationError(f"Unknown {section} option '{key}'")
        expected = type(getattr(defaults, key))
        if expected is bool and not isinstance(value, bool):
            raise ConfigurationError(f"Option {section}.{key} must be true or false")
        if expected in (int, float) and (isinstance(value, bool) or not isinstance(value, int | float)):
            raise ConfigurationError(f"Option {section}.{key} must be a number")
        if expected is str and not isinstance(value, str):
            raise ConfigurationError(f"Option {section}.{key} must be a string")
        kwargs[key] = value
    return options_class(**kwargs)


def load_config(project_root: str | Path | None = None) -> RunwayConfig:
    """
    Convenience function to load Runway configuration.

    Args:
        project_root: Project root directory (defaults to current directory)

    Returns:
        RunwayConfig object
    """
    manager = ConfigManager(project_root)
    return manager.load_config()
