"""Reduce a forecast run to a single decision-support summary"""

import logging
from typing import Any, Iterable, List, Optional, Sequence

import numpy as np

from ..core.config import Settings, get_settings
from ..core.exceptions import InsufficientDataError, InvalidInputError
from ..core.models import (
    DailySpendPoint,
    ForecastDataPoint,
    ForecastSummary,
    RiskLevel,
    TrendDirection,
    TrendEstimate,
)
from ..core.validation import Validator, normalize_series
from .forecasting import MIN_FORECAST_POINTS, project_cost
from .trend import estimate_from_points, recent_change_percent

logger = logging.getLogger(__name__)


def backtest_accuracy(points: List[DailySpendPoint], settings: Settings) -> float:
    """
    Score trend-only predictions against a held-out tail of the history.

    The last ``holdout_fraction`` of the points (at least one) is withheld,
    the trend is fitted on the rest and projected over the withheld days.
    The score is one minus the mean absolute error normalised by the mean
    actual cost of the withheld days, clamped to [0, 1].
    """
    config = settings.summary
    if len(points) < config.min_backtest_points:
        logger.warning(
            f"Only {len(points)} days of history, forecast accuracy defaults to "
            f"{config.fallback_accuracy}"
        )
        return config.fallback_accuracy

    holdout_size = max(1, int(round(len(points) * config.holdout_fraction)))
    training, holdout = points[:-holdout_size], points[-holdout_size:]
    if len(training) < MIN_FORECAST_POINTS:
        return config.fallback_accuracy

    trend, _ = estimate_from_points(training, settings)
    last_training_date = training[-1].date

    # Each held-out record is compared with the projection over the days it covers
    actual = np.array([p.cost for p in holdout])
    predicted = []
    previous_date = last_training_date
    for point in holdout:
        first_day = (previous_date - last_training_date).days + 1
        last_day = (point.date - last_training_date).days
        predicted.append(sum(project_cost(trend, day) for day in range(first_day, last_day + 1)))
        previous_date = point.date
    predicted = np.array(predicted)

    mae = float(np.mean(np.abs(actual - predicted)))
    scale = float(np.mean(actual))
    if scale == 0:
        return 1.0 if np.isclose(mae, 0.0) else 0.0

    return float(max(0.0, min(1.0, 1 - mae / scale)))


def assess_risk(trend: TrendEstimate, projected_total: float,
                budget: Optional[float], settings: Settings) -> RiskLevel:
    """Classify forecast risk from budget headroom and burn acceleration"""
    if budget is not None and projected_total > budget:
        return RiskLevel.HIGH

    if trend.trend == TrendDirection.INCREASING:
        burn_limit = trend.average_daily_cost * settings.summary.high_risk_burn_multiple
        if trend.burn_rate > burn_limit:
            return RiskLevel.HIGH
        return RiskLevel.MEDIUM

    return RiskLevel.LOW


def _forecast_points(forecast: Sequence[Any]) -> List[ForecastDataPoint]:
    points = []
    for item in forecast:
        if not isinstance(item, ForecastDataPoint):
            raise InvalidInputError(f"Expected ForecastDataPoint, got {type(item).__name__}")
        if item.is_forecast:
            if item.predicted_cost is None:
                raise InvalidInputError(f"Forecast point for {item.date} has no predicted cost")
            points.append(item)
    return points


def summarize_forecast(series: Iterable[Any],
                       forecast: Sequence[ForecastDataPoint],
                       budget: Optional[float] = None,
                       settings: Optional[Settings] = None) -> ForecastSummary:
    """
    Summarise a forecast produced by ``generate_forecast``.

    Args:
        series: The historical series the forecast was generated from
        forecast: Output of ``generate_forecast`` for that series
        budget: Optional total budget; a projected total above it is high risk
        settings: Settings to use instead of the global ones

    Raises:
        InsufficientDataError: the series is too short to have been forecast,
            or the forecast holds no forecast points
    """
    settings = settings or get_settings()

    points = normalize_series(series)
    if len(points) < MIN_FORECAST_POINTS:
        raise InsufficientDataError("forecast summary", MIN_FORECAST_POINTS, len(points))

    future = _forecast_points(forecast)
    if not future:
        raise InsufficientDataError("forecast summary", 1, 0)

    if budget is not None:
        budget = Validator.validate_cost(budget, field="budget")

    trend, _ = estimate_from_points(points, settings)

    historical_total = sum(p.cost for p in points)
    projected_total = historical_total + sum(p.predicted_cost for p in future)

    risk_level = assess_risk(trend, projected_total, budget, settings)
    accuracy = backtest_accuracy(points, settings)
    recent_change = recent_change_percent(points, settings.trend.recent_window_days)

    logger.info(
        f"Projected total {projected_total:,.2f} over {len(future)} forecast days, "
        f"trend {trend.trend.value}, risk {risk_level.value}, accuracy {accuracy:.2f}"
    )

    return ForecastSummary(
        projected_total_cost=projected_total,
        current_burn_rate=trend.burn_rate,
        trend=trend.trend,
        risk_level=risk_level,
        forecast_accuracy=accuracy,
        average_daily_cost=trend.average_daily_cost,
        projected_end_date=future[-1].date,
        recent_trend_percentage=recent_change,
    )
