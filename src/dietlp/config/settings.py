"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".dietlp"


def default_config_path() -> Path:
    return _default_config_dir() / "config.yaml"


@dataclass
class SolverConfig:
    """Solver backend configuration."""

    backend: str = "highs"  # "highs" or "clarabel"
    presolve: bool = True
    time_limit: Optional[float] = None  # seconds, highs only


@dataclass
class FormulationConfig:
    """Guideline translation tolerances."""

    min_tolerance: float = 0.0001
    max_tolerance: float = 0.0


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"


@dataclass
class DefaultsConfig:
    """Default values for various operations."""

    output_format: str = "table"  # "table" or "json"


@dataclass
class Settings:
    """Main application settings."""

    solver: SolverConfig = field(default_factory=SolverConfig)
    formulation: FormulationConfig = field(default_factory=FormulationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.dietlp/config.yaml

        Returns:
            Settings instance
        """
        if config_path is None:
            config_path = default_config_path()

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings = cls()

        # Parse solver config
        if "solver" in data:
            solver_data = data["solver"] or {}
            if "backend" in solver_data:
                settings.solver.backend = str(solver_data["backend"])
            if "presolve" in solver_data:
                settings.solver.presolve = bool(solver_data["presolve"])
            if solver_data.get("time_limit") is not None:
                settings.solver.time_limit = float(solver_data["time_limit"])

        # Parse formulation config
        if "formulation" in data:
            form_data = data["formulation"] or {}
            if "min_tolerance" in form_data:
                settings.formulation.min_tolerance = float(form_data["min_tolerance"])
            if "max_tolerance" in form_data:
                settings.formulation.max_tolerance = float(form_data["max_tolerance"])

        # Parse logging config
        if "logging" in data:
            log_data = data["logging"] or {}
            if "level" in log_data:
                settings.logging.level = str(log_data["level"]).upper()

        # Parse defaults
        if "defaults" in data:
            def_data = data["defaults"] or {}
            if "output_format" in def_data:
                settings.defaults.output_format = def_data["output_format"]

        return settings

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.dietlp/config.yaml
        """
        if config_path is None:
            config_path = default_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict:
        return {
            "solver": {
                "backend": self.solver.backend,
                "presolve": self.solver.presolve,
                "time_limit": self.solver.time_limit,
            },
            "formulation": {
                "min_tolerance": self.formulation.min_tolerance,
                "max_tolerance": self.formulation.max_tolerance,
            },
            "logging": {
                "level": self.logging.level,
            },
            "defaults": {
                "output_format": self.defaults.output_format,
            },
        }


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Optional[Path] = None) -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings
