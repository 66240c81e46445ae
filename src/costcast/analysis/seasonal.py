"""Monthly seasonal factors for daily spend series"""

import logging
from typing import Any, Iterable, List

import pandas as pd

from ..core.exceptions import InsufficientDataError
from ..core.models import DailySpendPoint, SeasonalFactors
from ..core.validation import normalize_series

logger = logging.getLogger(__name__)

MIN_SEASONAL_POINTS = 24
MONTHS_PER_YEAR = 12
NEUTRAL_FACTOR = 1.0


def factors_from_points(points: List[DailySpendPoint]) -> SeasonalFactors:
    """Compute monthly factors for an already normalised series"""
    if len(points) < MIN_SEASONAL_POINTS:
        raise InsufficientDataError("seasonal factors", MIN_SEASONAL_POINTS, len(points))

    df = pd.DataFrame({
        "date": pd.to_datetime([p.date for p in points]),
        "cost": [p.cost for p in points],
    })

    overall_average = float(df["cost"].mean())
    if overall_average <= 0:
        logger.warning("All recorded spend is zero, seasonal factors are neutral")
        return [NEUTRAL_FACTOR] * MONTHS_PER_YEAR

    monthly_average = df.groupby(df["date"].dt.month)["cost"].mean()

    factors = [
        float(monthly_average[month] / overall_average) if month in monthly_average.index
        else NEUTRAL_FACTOR
        for month in range(1, MONTHS_PER_YEAR + 1)
    ]

    observed = len(monthly_average)
    if observed < MONTHS_PER_YEAR:
        logger.debug(f"{MONTHS_PER_YEAR - observed} month(s) unobserved, using neutral factor")
    return factors


def compute_seasonal_factors(series: Iterable[Any]) -> SeasonalFactors:
    """
    Compute twelve monthly spend multipliers, January first.

    Each factor is the month's average daily cost divided by the all-time
    average daily cost, grouping by calendar month across all years.
    Months with no observations get 1.0.

    Raises:
        InsufficientDataError: fewer than 24 daily points
        InvalidInputError: malformed dates or costs
    """
    return factors_from_points(normalize_series(series))


def factor_for(factors: SeasonalFactors, month: int) -> float:
    """Factor for a calendar month number (1-12)"""
    return factors[month - 1]
