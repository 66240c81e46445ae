"""Data model for spend series, forecasts and budget reconciliation"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional


class TrendDirection(str, Enum):
    """Trend direction types"""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class RiskLevel(str, Enum):
    """Forecast risk levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BudgetStatus(str, Enum):
    """Budget reconciliation outcome for a project"""
    UNDER_BUDGET = "under_budget"
    AT_RISK = "at_risk"
    OVER_BUDGET = "over_budget"


class AlertSeverity(str, Enum):
    """Budget alert severities"""
    WARNING = "warning"
    CRITICAL = "critical"


# Index 0 is January
SeasonalFactors = List[float]


@dataclass(frozen=True)
class DailySpendPoint:
    """One day of recorded spend"""
    date: date
    cost: float

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date.isoformat(), "cost": self.cost}


@dataclass(frozen=True)
class ForecastDataPoint:
    """
    A single day in a forecast run.

    Historical days carry ``actual_cost`` only. Forecast days carry
    ``predicted_cost`` and both confidence bounds. Absent values are ``None``,
    never zero.
    """
    date: date
    is_forecast: bool
    actual_cost: Optional[float] = None
    predicted_cost: Optional[float] = None
    confidence_upper: Optional[float] = None
    confidence_lower: Optional[float] = None

    @property
    def band_width(self) -> Optional[float]:
        """Width of the confidence band, if this is a forecast point"""
        if self.confidence_upper is None or self.confidence_lower is None:
            return None
        return self.confidence_upper - self.confidence_lower

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "is_forecast": self.is_forecast,
            "actual_cost": self.actual_cost,
            "predicted_cost": self.predicted_cost,
            "confidence_upper": self.confidence_upper,
            "confidence_lower": self.confidence_lower,
        }


@dataclass(frozen=True)
class TrendEstimate:
    """Burn rate and direction fitted to a daily spend series"""
    burn_rate: float
    trend: TrendDirection
    slope: float  # cost/day change per calendar day
    average_daily_cost: float
    percent_change: float  # recent half vs earlier half, as a fraction
    r_squared: float
    # Days between the centre of the burn-rate window and the last observation
    window_lag_days: float = 0.0

    @property
    def is_growing(self) -> bool:
        return self.trend == TrendDirection.INCREASING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "burn_rate": self.burn_rate,
            "trend": self.trend.value,
            "slope": self.slope,
            "average_daily_cost": self.average_daily_cost,
            "percent_change": self.percent_change,
            "r_squared": self.r_squared,
            "window_lag_days": self.window_lag_days,
        }


@dataclass(frozen=True)
class ForecastSummary:
    """Decision-support summary of one forecast run"""
    projected_total_cost: float
    current_burn_rate: float
    trend: TrendDirection
    risk_level: RiskLevel
    forecast_accuracy: float  # 0-1
    average_daily_cost: float
    projected_end_date: date
    recent_trend_percentage: float = 0.0  # last window vs the one before, in percent

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projected_total_cost": self.projected_total_cost,
            "current_burn_rate": self.current_burn_rate,
            "trend": self.trend.value,
            "risk_level": self.risk_level.value,
            "forecast_accuracy": self.forecast_accuracy,
            "average_daily_cost": self.average_daily_cost,
            "projected_end_date": self.projected_end_date.isoformat(),
            "recent_trend_percentage": self.recent_trend_percentage,
        }


@dataclass(frozen=True)
class ProjectBudget:
    """Budgeted vs actual vs projected cost for one project"""
    project_id: str
    project_name: str
    budgeted_cost: float
    actual_cost: float
    projected_cost: float
    variance: float  # actual - budgeted, positive means overspend
    variance_percent: Optional[float]
    status: BudgetStatus
    has_budget: bool = True  # False when the budget defaulted to the actual cost

    @property
    def is_over_budget(self) -> bool:
        return self.status == BudgetStatus.OVER_BUDGET

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_id": self.project_id,
            "project_name": self.project_name,
            "budgeted_cost": self.budgeted_cost,
            "actual_cost": self.actual_cost,
            "projected_cost": self.projected_cost,
            "variance": self.variance,
            "variance_percent": self.variance_percent,
            "status": self.status.value,
            "has_budget": self.has_budget,
        }


@dataclass(frozen=True)
class BudgetAlert:
    """Alert raised when projected spend approaches or passes a budget"""
    project_name: str
    severity: AlertSeverity
    alert_type: str  # budget_warning, budget_exceed
    utilization_percent: float
    description: str

    @property
    def is_critical(self) -> bool:
        return self.severity == AlertSeverity.CRITICAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_name": self.project_name,
            "severity": self.severity.value,
            "alert_type": self.alert_type,
            "utilization_percent": self.utilization_percent,
            "description": self.description,
        }


__all__ = [
    "TrendDirection",
    "RiskLevel",
    "BudgetStatus",
    "AlertSeverity",
    "SeasonalFactors",
    "DailySpendPoint",
    "ForecastDataPoint",
    "TrendEstimate",
    "ForecastSummary",
    "ProjectBudget",
    "BudgetAlert",
]
