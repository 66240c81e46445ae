from .trend import estimate_trend
from .seasonal import compute_seasonal_factors
from .forecasting import generate_forecast
from .summary import summarize_forecast
from .budget import analyze_budgets, project_costs_by_growth, detect_budget_alerts
from .engine import CostForecastingEngine, ForecastReport

__all__ = [
    'estimate_trend', 'compute_seasonal_factors', 'generate_forecast', 'summarize_forecast',
    'analyze_budgets', 'project_costs_by_growth', 'detect_budget_alerts',
    'CostForecastingEngine', 'ForecastReport',
]
