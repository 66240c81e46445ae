"""
Cost Forecasting
Projects daily spend forward from the current burn rate with confidence bands.
"""

import logging
import math
from datetime import timedelta
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..core.config import Settings, get_settings
from ..core.exceptions import InsufficientDataError, InvalidInputError
from ..core.models import DailySpendPoint, ForecastDataPoint, TrendEstimate
from ..core.validation import Validator, normalize_series, split_series
from .seasonal import MONTHS_PER_YEAR, factor_for
from .trend import TrendLine, daily_rates, estimate_from_points

logger = logging.getLogger(__name__)

MIN_FORECAST_POINTS = 3


def residual_standard_error(points: Sequence[DailySpendPoint], line: TrendLine) -> float:
    """Standard error of observed daily cost around the fitted trend line"""
    dates, _ = split_series(points)
    fitted = np.array([line.value_at(d) for d in dates])
    residuals = daily_rates(points) - fitted

    # Two parameters are estimated by the line fit
    dof = len(points) - 2
    return float(math.sqrt(np.sum(residuals ** 2) / dof))


def _validate_factors(seasonal_factors: Sequence[Any]) -> List[float]:
    if len(seasonal_factors) != MONTHS_PER_YEAR:
        raise InvalidInputError(
            f"Seasonal factors need {MONTHS_PER_YEAR} values, got {len(seasonal_factors)}"
        )
    return [Validator.validate_cost(f, field="seasonal factor") for f in seasonal_factors]


def project_cost(trend: TrendEstimate, days_ahead: int) -> float:
    """
    Trend-only cost for a day ``days_ahead`` after the last observation.

    The burn rate is the level at the centre of its window, so the slope is
    applied from there rather than from the last observation.
    """
    distance = days_ahead + trend.window_lag_days
    return max(0.0, trend.burn_rate + trend.slope * distance)


def forecast_from_points(points: List[DailySpendPoint],
                         forecast_days: int,
                         confidence_level: float,
                         settings: Settings,
                         seasonal_factors: Optional[Sequence[float]] = None,
                         ) -> Tuple[List[ForecastDataPoint], TrendEstimate]:
    """Build a forecast for an already normalised series"""
    if len(points) < MIN_FORECAST_POINTS:
        raise InsufficientDataError("forecasting", MIN_FORECAST_POINTS, len(points))

    trend, line = estimate_from_points(points, settings)
    z_score = Validator.z_score(confidence_level)
    std_error = residual_standard_error(points, line)

    result = [
        ForecastDataPoint(date=p.date, is_forecast=False, actual_cost=p.cost)
        for p in points
    ]

    last_date = points[-1].date
    for days_ahead in range(1, forecast_days + 1):
        forecast_date = last_date + timedelta(days=days_ahead)

        predicted = project_cost(trend, days_ahead)
        if seasonal_factors is not None:
            predicted *= factor_for(seasonal_factors, forecast_date.month)

        # Uncertainty compounds with distance from the last observation
        margin = z_score * std_error * math.sqrt(days_ahead)

        # A band clamped at zero is shifted up so it keeps its full width
        lower = max(0.0, predicted - margin)
        upper = max(predicted + margin, lower + 2 * margin)

        result.append(ForecastDataPoint(
            date=forecast_date,
            is_forecast=True,
            predicted_cost=predicted,
            confidence_upper=upper,
            confidence_lower=lower,
        ))

    logger.debug(
        f"Forecast {forecast_days} days from {last_date} at {confidence_level:.0%}: "
        f"std error {std_error:.2f}, z {z_score}"
    )
    return result, trend


def generate_forecast(series: Iterable[Any],
                      forecast_days: Optional[int] = None,
                      confidence_level: Optional[float] = None,
                      seasonal_factors: Optional[Sequence[float]] = None,
                      settings: Optional[Settings] = None) -> List[ForecastDataPoint]:
    """
    Forecast daily cost over a horizon with confidence bounds.

    The result covers the historical days (``actual_cost`` set) followed by
    one point per calendar day after the last historical date. Forecast
    points extrapolate the burn rate along the fitted slope, clamped at zero.
    Bounds are symmetric around the prediction, scaled by the residual
    standard error, the z-score of ``confidence_level`` and the square root
    of the days ahead. Where the lower bound would fall below zero it is
    clamped there and the upper bound is raised to keep the band width.

    Args:
        series: Daily spend points in any order
        forecast_days: Horizon in days, defaults to the configured horizon
        confidence_level: 0.90, 0.95 or 0.99, defaults to the configured level
        seasonal_factors: Optional 12 monthly multipliers applied to predictions
        settings: Settings to use instead of the global ones

    Raises:
        InsufficientDataError: fewer than three distinct days
        InvalidConfigurationError: horizon outside the configured bounds
        InvalidInputError: malformed series, confidence level or factors
    """
    settings = settings or get_settings()
    forecast_config = settings.forecast

    if forecast_days is None:
        forecast_days = forecast_config.default_forecast_days
    if confidence_level is None:
        confidence_level = forecast_config.default_confidence_level

    forecast_days = Validator.validate_forecast_days(
        forecast_days, forecast_config.min_forecast_days, forecast_config.max_forecast_days
    )
    confidence_level = Validator.validate_confidence_level(confidence_level)
    if seasonal_factors is not None:
        seasonal_factors = _validate_factors(seasonal_factors)

    points = normalize_series(series)
    forecast, _ = forecast_from_points(
        points, forecast_days, confidence_level, settings, seasonal_factors
    )
    return forecast
