"""Configuration management for costcast"""

import json
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)


class ForecastConfig(BaseModel):
    """Forecast horizon and confidence defaults"""
    default_forecast_days: int = 30
    min_forecast_days: int = Field(default=7, ge=1)
    max_forecast_days: int = Field(default=365, ge=1)
    default_confidence_level: float = 0.95
    seasonal_adjustment: bool = False

    @model_validator(mode="after")
    def check_horizon_bounds(self) -> "ForecastConfig":
        if self.min_forecast_days > self.max_forecast_days:
            raise ValueError("min_forecast_days must not exceed max_forecast_days")
        if not self.min_forecast_days <= self.default_forecast_days <= self.max_forecast_days:
            raise ValueError("default_forecast_days must lie within the horizon bounds")
        return self


class TrendConfig(BaseModel):
    """Trend estimation settings"""
    recent_window_days: int = Field(default=7, ge=1)
    stable_threshold: float = Field(default=0.05, ge=0)  # +/- relative change
    trend_smoothing: bool = False


class SummaryConfig(BaseModel):
    """Risk and backtesting settings for forecast summaries"""
    high_risk_burn_multiple: float = Field(default=1.3, gt=0)
    holdout_fraction: float = Field(default=0.2, gt=0, lt=1)
    min_backtest_points: int = Field(default=6, ge=4)
    fallback_accuracy: float = Field(default=0.0, ge=0, le=1)


class BudgetConfig(BaseModel):
    """Budget projection and alert settings"""
    default_growth_rate: float = Field(default=0.15, ge=0)
    warning_percent: float = Field(default=80.0, gt=0)
    critical_percent: float = Field(default=100.0, gt=0)

    @model_validator(mode="after")
    def check_alert_thresholds(self) -> "BudgetConfig":
        if self.warning_percent > self.critical_percent:
            raise ValueError("warning_percent must not exceed critical_percent")
        return self


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[Path] = None
    max_bytes: int = 10485760  # 10MB
    backup_count: int = 5
    console: bool = True
    structured: bool = False


class Settings(BaseSettings):
    """Main application settings"""
    app_name: str = "costcast"
    version: str = "0.1.0"
    environment: str = "development"
    debug: bool = False

    forecast: ForecastConfig = Field(default_factory=ForecastConfig)
    trend: TrendConfig = Field(default_factory=TrendConfig)
    summary: SummaryConfig = Field(default_factory=SummaryConfig)
    budget: BudgetConfig = Field(default_factory=BudgetConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="COSTCAST_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def from_file(cls, path: Path) -> "Settings":
        """
        Load settings from a YAML (``.yaml``/``.yml``) or JSON file.

        A missing file gives the defaults; an unparseable or invalid one
        raises InvalidConfigurationError.
        """
        path = Path(path)
        if not path.exists():
            logger.warning(f"Configuration file {path} not found, using defaults")
            return cls()

        text = path.read_text()
        try:
            data = yaml.safe_load(text) if _is_yaml(path) else json.loads(text)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise InvalidConfigurationError(f"Could not parse {path}: {e}")

        data = data or {}
        if not isinstance(data, dict):
            raise InvalidConfigurationError(f"Configuration in {path} must be a mapping")
        try:
            return cls(**data)
        except ValidationError as e:
            raise InvalidConfigurationError(f"Invalid configuration in {path}: {e}")

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        return cls.from_file(path)

    @classmethod
    def from_json(cls, path: Path) -> "Settings":
        return cls.from_file(path)

    def save(self, path: Path) -> None:
        """Write settings as YAML or JSON depending on the suffix"""
        if _is_yaml(Path(path)):
            self.to_yaml(path)
        else:
            self.to_json(path)

    def to_yaml(self, path: Path) -> None:
        _write(Path(path), yaml.safe_dump(self.model_dump(mode="json"), default_flow_style=False))

    def to_json(self, path: Path) -> None:
        _write(Path(path), json.dumps(self.model_dump(mode="json"), indent=2))


def _is_yaml(path: Path) -> bool:
    return path.suffix.lower() in (".yaml", ".yml")


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


# Global settings instance
settings: Optional[Settings] = None

SEARCH_PATHS = (
    Path("~/.costcast/config.yaml"),
    Path("~/.costcast/config.json"),
    Path("config.yaml"),
    Path("config.json"),
)


def get_settings() -> Settings:
    """Get global settings instance, loading the first config file found"""
    global settings
    if settings is not None:
        return settings

    for candidate in SEARCH_PATHS:
        path = candidate.expanduser()
        if path.exists():
            settings = Settings.from_file(path)
            logger.info(f"Loaded configuration from {path}")
            return settings

    settings = Settings()
    logger.debug("No configuration file found, using defaults")
    return settings


def reload_settings(path: Optional[Path] = None) -> Settings:
    """Reload settings, from ``path`` when given"""
    global settings
    settings = None if path is None else Settings.from_file(path)
    return get_settings()
