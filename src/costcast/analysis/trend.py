"""
Trend estimation for daily spend series.
Fits a burn rate, a direction and a least-squares trend line.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np
from sklearn.linear_model import LinearRegression

from ..core.config import Settings, get_settings
from ..core.exceptions import InsufficientDataError
from ..core.models import DailySpendPoint, TrendDirection, TrendEstimate
from ..core.validation import normalize_series, split_series

logger = logging.getLogger(__name__)

MIN_TREND_POINTS = 2
MAX_SMOOTHING_WINDOW = 7


@dataclass(frozen=True)
class TrendLine:
    """Least-squares line over calendar-day offsets from the first date"""
    origin: date
    slope: float
    intercept: float
    r_squared: float

    def value_at(self, day: date) -> float:
        return self.intercept + self.slope * (day - self.origin).days


def day_offsets(dates: Sequence[date]) -> np.ndarray:
    """Calendar days elapsed since the first date"""
    origin = dates[0]
    return np.array([(d - origin).days for d in dates], dtype=float)


def covered_days(dates: Sequence[date]) -> np.ndarray:
    """
    Calendar days each record accounts for.

    A record covers the days since the previous record; the first record is
    given the same span as the gap after it. Gap-free daily data covers one
    day per record.
    """
    if len(dates) < 2:
        return np.ones(len(dates))
    gaps = np.diff(day_offsets(dates))
    return np.concatenate(([gaps[0]], gaps))


def daily_rates(points: Sequence[DailySpendPoint]) -> np.ndarray:
    """Cost per calendar day for each record"""
    dates, costs = split_series(points)
    return np.asarray(costs, dtype=float) / covered_days(dates)


def recent_change_percent(points: Sequence[DailySpendPoint], window: int) -> float:
    """
    Daily rate of the last ``window`` records against the ``window`` before,
    as a percentage. Returns 0.0 when there is no earlier spend to compare with.
    """
    split = len(points) - window
    start = max(0, split - window)
    if split <= 0:
        return 0.0

    dates, costs = split_series(points)
    spans = covered_days(dates)
    values = np.asarray(costs, dtype=float)

    previous_rate = values[start:split].sum() / spans[start:split].sum()
    recent_rate = values[split:].sum() / spans[split:].sum()
    if previous_rate <= 0:
        return 0.0
    return float((recent_rate - previous_rate) / previous_rate * 100)


def moving_average(values: Sequence[float], window: int) -> np.ndarray:
    """Centred moving average, shrinking the window at the edges"""
    data = np.asarray(values, dtype=float)
    if window < 2:
        return data.copy()

    smoothed = np.empty_like(data)
    for i in range(len(data)):
        start = max(0, i - window // 2)
        end = min(len(data), i + (window + 1) // 2)
        smoothed[i] = data[start:end].mean()
    return smoothed


def fit_trend_line(dates: Sequence[date], costs: Sequence[float],
                   smoothing: bool = False) -> TrendLine:
    """Fit a linear trend to costs over calendar days"""
    X = day_offsets(dates).reshape(-1, 1)
    y = np.asarray(costs, dtype=float)
    if smoothing:
        y = moving_average(y, min(MAX_SMOOTHING_WINDOW, len(y) // 3))

    model = LinearRegression()
    model.fit(X, y)

    return TrendLine(
        origin=dates[0],
        slope=float(model.coef_[0]),
        intercept=float(model.intercept_),
        r_squared=_r_squared(y, model.predict(X)),
    )


def _r_squared(actual: np.ndarray, predicted: np.ndarray) -> float:
    ss_res = float(np.sum((actual - predicted) ** 2))
    ss_tot = float(np.sum((actual - np.mean(actual)) ** 2))

    if ss_tot == 0:
        return 1.0 if np.isclose(ss_res, 0.0) else 0.0

    return max(0.0, min(1.0, 1 - ss_res / ss_tot))


def classify_trend(earlier_mean: float, recent_mean: float,
                   threshold: float) -> Tuple[TrendDirection, float]:
    """Classify the relative change between an earlier and a recent window"""
    if earlier_mean == 0:
        if recent_mean > 0:
            # Rise from nothing counts as a full 100% increase
            return TrendDirection.INCREASING, 1.0
        return TrendDirection.STABLE, 0.0

    change = (recent_mean - earlier_mean) / earlier_mean
    if change > threshold:
        return TrendDirection.INCREASING, change
    if change < -threshold:
        return TrendDirection.DECREASING, change
    return TrendDirection.STABLE, change


def estimate_from_points(points: List[DailySpendPoint],
                         settings: Settings) -> Tuple[TrendEstimate, TrendLine]:
    """Estimate the trend of an already normalised series"""
    if len(points) < MIN_TREND_POINTS:
        raise InsufficientDataError("trend estimation", MIN_TREND_POINTS, len(points))

    dates, costs = split_series(points)
    values = np.asarray(costs, dtype=float)
    spans = covered_days(dates)
    rates = values / spans

    window = settings.trend.recent_window_days
    window_days = float(spans[-window:].sum())
    burn_rate = float(values[-window:].sum() / window_days)

    half = len(rates) // 2
    trend, change = classify_trend(
        float(rates[:half].mean()),
        float(rates[half:].mean()),
        settings.trend.stable_threshold,
    )

    line = fit_trend_line(dates, rates, smoothing=settings.trend.trend_smoothing)

    estimate = TrendEstimate(
        burn_rate=burn_rate,
        trend=trend,
        slope=line.slope,
        average_daily_cost=float(values.sum() / spans.sum()),
        percent_change=change,
        r_squared=line.r_squared,
        window_lag_days=(window_days - 1) / 2,
    )
    logger.debug(
        f"Trend over {len(points)} days: burn rate {burn_rate:.2f}/day, "
        f"{trend.value} ({change:+.1%}), slope {line.slope:.4f}"
    )
    return estimate, line


def estimate_trend(series: Iterable[Any],
                   settings: Optional[Settings] = None) -> TrendEstimate:
    """
    Estimate burn rate and trend direction for a daily spend series.

    Args:
        series: Daily spend points (DailySpendPoint, mappings with ``date`` and
            ``cost``, or ``(date, cost)`` pairs), in any order
        settings: Settings to use instead of the global ones

    Records need not be contiguous: each one is read as the spend since the
    previous record, so burn rate, average and slope are per calendar day.

    Returns:
        TrendEstimate with the recent-window burn rate and the direction of
        the recent half of the series against the earlier half

    Raises:
        InsufficientDataError: fewer than two distinct days
        InvalidInputError: malformed dates or costs
    """
    settings = settings or get_settings()
    estimate, _ = estimate_from_points(normalize_series(series), settings)
    return estimate
