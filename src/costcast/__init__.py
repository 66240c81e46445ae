"""costcast - cost forecasting and budget variance engine"""

from .analysis import (
    CostForecastingEngine,
    ForecastReport,
    analyze_budgets,
    compute_seasonal_factors,
    detect_budget_alerts,
    estimate_trend,
    generate_forecast,
    project_costs_by_growth,
    summarize_forecast,
)
from .core.exceptions import (
    CostcastError,
    DataLoadError,
    InsufficientDataError,
    InvalidConfigurationError,
    InvalidInputError,
)
from .core.models import (
    AlertSeverity,
    BudgetAlert,
    BudgetStatus,
    DailySpendPoint,
    ForecastDataPoint,
    ForecastSummary,
    ProjectBudget,
    RiskLevel,
    TrendDirection,
    TrendEstimate,
)

__version__ = "0.1.0"

__all__ = [
    'estimate_trend', 'compute_seasonal_factors', 'generate_forecast', 'summarize_forecast',
    'analyze_budgets', 'project_costs_by_growth', 'detect_budget_alerts',
    'CostForecastingEngine', 'ForecastReport',
    'CostcastError', 'InsufficientDataError', 'InvalidInputError', 'InvalidConfigurationError',
    'DataLoadError',
    'DailySpendPoint', 'ForecastDataPoint', 'ForecastSummary', 'ProjectBudget', 'BudgetAlert',
    'TrendEstimate', 'TrendDirection', 'RiskLevel', 'BudgetStatus', 'AlertSeverity',
]
