"""
Budget Variance Analysis
Reconciles budgeted, actual and projected cost per project.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from ..core.config import Settings, get_settings
from ..core.exceptions import InvalidInputError
from ..core.models import AlertSeverity, BudgetAlert, BudgetStatus, ProjectBudget
from ..core.validation import ProjectCostRecord, Validator

logger = logging.getLogger(__name__)


def _coerce_project(item: Any) -> ProjectCostRecord:
    if isinstance(item, ProjectCostRecord):
        return item

    if not isinstance(item, Mapping):
        # Objects exposing project_name/actual_cost (or name/cost) attributes
        item = {
            key: getattr(item, key)
            for key in ("project_name", "name", "actual_cost", "cost", "project_id")
            if hasattr(item, key)
        }

    try:
        return ProjectCostRecord.model_validate(dict(item))
    except ValidationError as e:
        raise InvalidInputError(f"Invalid project record {dict(item)!r}: {e}")


def _cost_map(costs: Optional[Mapping[str, Any]], label: str) -> Dict[str, float]:
    if costs is None:
        return {}
    if not isinstance(costs, Mapping):
        raise InvalidInputError(f"{label} must be a mapping of project name to cost")
    return {
        str(name): Validator.validate_cost(value, field=f"{label} for {name}")
        for name, value in costs.items()
    }


def classify_budget(actual_cost: float, budgeted_cost: float,
                    projected_cost: float) -> BudgetStatus:
    """Classify a project against its budget"""
    if actual_cost > budgeted_cost:
        return BudgetStatus.OVER_BUDGET
    if projected_cost > budgeted_cost:
        return BudgetStatus.AT_RISK
    return BudgetStatus.UNDER_BUDGET


def analyze_budgets(projects: Iterable[Any],
                    budgets: Optional[Mapping[str, Any]] = None,
                    projected_costs: Optional[Mapping[str, Any]] = None) -> List[ProjectBudget]:
    """
    Reconcile budgeted vs actual vs projected cost for each project.

    Args:
        projects: Records with ``project_name`` (or ``name``) and ``actual_cost``
            (or ``cost``), as mappings or objects
        budgets: Budgets keyed by project name; a project without one is
            budgeted at its actual cost
        projected_costs: Projected costs keyed by project name; a project
            without one is projected at its actual cost

    Returns:
        One ProjectBudget per input project, in input order

    Raises:
        InvalidInputError: a cost is non-numeric, non-finite or negative
    """
    budget_map = _cost_map(budgets, "budget")
    projection_map = _cost_map(projected_costs, "projected cost")

    results = []
    for item in projects:
        record = _coerce_project(item)
        name = record.project_name
        actual = record.actual_cost

        has_budget = name in budget_map
        budgeted = budget_map.get(name, actual)
        projected = projection_map.get(name, actual)
        variance = actual - budgeted
        variance_percent = (variance / budgeted * 100) if budgeted > 0 else None
        status = classify_budget(actual, budgeted, projected)

        results.append(ProjectBudget(
            project_id=record.project_id or name,
            project_name=name,
            budgeted_cost=budgeted,
            actual_cost=actual,
            projected_cost=projected,
            variance=variance,
            variance_percent=variance_percent,
            status=status,
            has_budget=has_budget,
        ))

    unknown = set(budget_map) - {r.project_name for r in results}
    if unknown:
        logger.debug(f"Budgets given for unknown projects: {', '.join(sorted(unknown))}")

    over = sum(1 for r in results if r.is_over_budget)
    logger.info(f"Analyzed {len(results)} project budgets, {over} over budget")
    return results


def project_costs_by_growth(projects: Iterable[Any],
                            growth_rate: Optional[float] = None,
                            settings: Optional[Settings] = None) -> Dict[str, float]:
    """
    Project each project's cost with a flat growth rate.

    A growth rate of 0.15 projects every project at 115% of its actual cost.
    """
    if growth_rate is None:
        growth_rate = (settings or get_settings()).budget.default_growth_rate
    growth_rate = Validator.validate_cost(growth_rate, field="growth rate")

    projections = {}
    for item in projects:
        record = _coerce_project(item)
        projections[record.project_name] = record.actual_cost * (1 + growth_rate)
    return projections


def detect_budget_alerts(budgets: Sequence[ProjectBudget],
                         warning_percent: Optional[float] = None,
                         critical_percent: Optional[float] = None,
                         settings: Optional[Settings] = None) -> List[BudgetAlert]:
    """
    Detect projects whose projected cost approaches or passes their budget.

    Utilisation is projected cost as a percentage of budgeted cost. Above
    ``critical_percent`` the alert is critical, at or above
    ``warning_percent`` it is a warning, so a projection landing exactly on
    budget warns without contradicting its under-budget status. Projects
    with a zero budget, or whose budget defaulted to their actual cost, are
    skipped.
    """
    config = (settings or get_settings()).budget
    warning_percent = config.warning_percent if warning_percent is None else warning_percent
    critical_percent = config.critical_percent if critical_percent is None else critical_percent

    if warning_percent > critical_percent:
        raise InvalidInputError("warning_percent must not exceed critical_percent")

    alerts = []
    for budget in budgets:
        if not budget.has_budget or budget.budgeted_cost <= 0:
            logger.debug(f"Skipping alerts for {budget.project_name}: no budget")
            continue

        utilization = budget.projected_cost / budget.budgeted_cost * 100

        if utilization > critical_percent:
            alerts.append(BudgetAlert(
                project_name=budget.project_name,
                severity=AlertSeverity.CRITICAL,
                alert_type="budget_exceed",
                utilization_percent=utilization,
                description=(f"Projected cost reaches {utilization:.1f}% of budget "
                             f"{budget.budgeted_cost:,.2f}"),
            ))
        elif utilization >= warning_percent:
            alerts.append(BudgetAlert(
                project_name=budget.project_name,
                severity=AlertSeverity.WARNING,
                alert_type="budget_warning",
                utilization_percent=utilization,
                description=(f"Projected cost at {utilization:.1f}% of budget "
                             f"{budget.budgeted_cost:,.2f}"),
            ))

    return alerts
