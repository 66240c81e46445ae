"""Facade running the full forecasting pipeline for one spend series"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from ..core.config import Settings, get_settings
from ..core.logging import get_performance_logger
from ..core.models import ForecastDataPoint, ForecastSummary, SeasonalFactors, TrendEstimate
from ..core.validation import Validator, normalize_series
from .forecasting import forecast_from_points
from .seasonal import MIN_SEASONAL_POINTS, factors_from_points
from .summary import summarize_forecast

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForecastReport:
    """Everything a dashboard needs to render one forecast"""
    forecast: List[ForecastDataPoint]
    summary: ForecastSummary
    trend: TrendEstimate
    seasonal_factors: Optional[SeasonalFactors]
    forecast_days: int
    confidence_level: float
    seasonally_adjusted: bool

    @property
    def forecast_points(self) -> List[ForecastDataPoint]:
        return [p for p in self.forecast if p.is_forecast]

    @property
    def historical_points(self) -> List[ForecastDataPoint]:
        return [p for p in self.forecast if not p.is_forecast]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "forecast_days": self.forecast_days,
            "confidence_level": self.confidence_level,
            "seasonally_adjusted": self.seasonally_adjusted,
            "summary": self.summary.to_dict(),
            "trend": self.trend.to_dict(),
            "seasonal_factors": self.seasonal_factors,
            "forecast": [p.to_dict() for p in self.forecast],
        }


class CostForecastingEngine:
    """
    Runs trend estimation, seasonal factors, forecasting and summarising
    over one series with configured defaults.

    The engine keeps only its settings; every run works on its own copy of
    the input and returns freshly built results.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def run(self, series: Iterable[Any],
            forecast_days: Optional[int] = None,
            confidence_level: Optional[float] = None,
            budget: Optional[float] = None,
            seasonal_adjustment: Optional[bool] = None) -> ForecastReport:
        """
        Forecast a series and summarise the result.

        Seasonal factors are computed whenever the series is long enough;
        they are applied to the predictions only when seasonal adjustment is
        enabled.

        Raises:
            InsufficientDataError: fewer than three distinct days
            InvalidConfigurationError: horizon outside the configured bounds
            InvalidInputError: malformed series or parameters
        """
        config = self.settings.forecast
        forecast_days = config.default_forecast_days if forecast_days is None else forecast_days
        confidence_level = (config.default_confidence_level
                            if confidence_level is None else confidence_level)
        if seasonal_adjustment is None:
            seasonal_adjustment = config.seasonal_adjustment

        forecast_days = Validator.validate_forecast_days(
            forecast_days, config.min_forecast_days, config.max_forecast_days
        )
        confidence_level = Validator.validate_confidence_level(confidence_level)

        points = normalize_series(series)

        with get_performance_logger().timer("forecast_run", points=len(points),
                                            forecast_days=forecast_days,
                                            confidence_level=confidence_level):
            factors = None
            if len(points) >= MIN_SEASONAL_POINTS:
                factors = factors_from_points(points)
            elif seasonal_adjustment:
                logger.warning(
                    f"Seasonal adjustment needs {MIN_SEASONAL_POINTS} days of history, "
                    f"got {len(points)}; forecasting without it"
                )

            applied = factors if seasonal_adjustment else None
            forecast, trend = forecast_from_points(
                points, forecast_days, confidence_level, self.settings, applied
            )
            summary = summarize_forecast(points, forecast, budget=budget, settings=self.settings)

        return ForecastReport(
            forecast=forecast,
            summary=summary,
            trend=trend,
            seasonal_factors=factors,
            forecast_days=forecast_days,
            confidence_level=confidence_level,
            seasonally_adjusted=applied is not None,
        )
