"""Application settings and configuration management."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".lifeplan"


def _default_db_path() -> Path:
    """Return the default database path."""
    return _default_config_dir() / "lifeplan.db"


@dataclass
class DatabaseConfig:
    """Database configuration."""

    path: Path = field(default_factory=_default_db_path)


@dataclass
class AnalysisConfig:
    """Pattern analysis configuration."""

    window_size: int = 7  # days
    weight_stall_threshold_kg: float = 0.3


@dataclass
class CalibrationConfig:
    """TDEE calibration configuration."""

    max_history: int = 8
    min_period_days: int = 1
    use_trend: bool = False  # compare EMA trend instead of scale weight


@dataclass
class DefaultsConfig:
    """Default values for various operations."""

    output_format: str = "table"  # "table", "json" or "markdown"


@dataclass
class LoggingConfig:
    level: str = "WARNING"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Settings:
    """Main application settings."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.lifeplan/config.yaml

        Returns:
            Settings instance
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings = cls()

        if "database" in data:
            db_data = data["database"]
            if "path" in db_data:
                settings.database.path = Path(db_data["path"]).expanduser()

        if "analysis" in data:
            analysis_data = data["analysis"]
            if "window_size" in analysis_data:
                settings.analysis.window_size = int(analysis_data["window_size"])
            if "weight_stall_threshold_kg" in analysis_data:
                settings.analysis.weight_stall_threshold_kg = float(
                    analysis_data["weight_stall_threshold_kg"]
                )

        if "calibration" in data:
            cal_data = data["calibration"]
            if "max_history" in cal_data:
                settings.calibration.max_history = int(cal_data["max_history"])
            if "min_period_days" in cal_data:
                settings.calibration.min_period_days = int(cal_data["min_period_days"])
            if "use_trend" in cal_data:
                settings.calibration.use_trend = bool(cal_data["use_trend"])

        if "defaults" in data:
            def_data = data["defaults"]
            if "output_format" in def_data:
                settings.defaults.output_format = def_data["output_format"]

        if "logging" in data:
            log_data = data["logging"]
            if "level" in log_data:
                settings.logging.level = str(log_data["level"]).upper()
            if "format" in log_data:
                settings.logging.format = log_data["format"]

        return settings

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.lifeplan/config.yaml
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "database": {
                "path": str(self.database.path),
            },
            "analysis": {
                "window_size": self.analysis.window_size,
                "weight_stall_threshold_kg": self.analysis.weight_stall_threshold_kg,
            },
            "calibration": {
                "max_history": self.calibration.max_history,
                "min_period_days": self.calibration.min_period_days,
                "use_trend": self.calibration.use_trend,
            },
            "defaults": {
                "output_format": self.defaults.output_format,
            },
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
            },
        }

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings. Later calls are no-ops."""
    logging.basicConfig(level=settings.logging.level, format=settings.logging.format)


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings() -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load()
    return _settings
