"""Input validation and normalisation utilities"""

import math
from collections import OrderedDict
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from numbers import Number, Real
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .exceptions import InvalidConfigurationError, InvalidInputError
from .models import DailySpendPoint


# Two-sided z-scores for the supported confidence levels
Z_SCORES = {
    0.90: 1.645,
    0.95: 1.96,
    0.99: 2.576,
}


class Validator:
    """Central validation utility"""

    @classmethod
    def validate_cost(cls, value: Any, field: str = "cost") -> float:
        """Validate a non-negative, finite cost"""
        if value is None or isinstance(value, bool):
            raise InvalidInputError(f"Invalid {field}: {value!r} is not a number")

        if isinstance(value, str):
            try:
                value = Decimal(value.strip())
            except InvalidOperation:
                raise InvalidInputError(f"Invalid {field}: {value!r} is not a number")

        if not isinstance(value, (Number, Decimal)):
            raise InvalidInputError(f"Invalid {field}: {value!r} is not a number")

        try:
            cost = float(value)
        except (TypeError, ValueError):
            raise InvalidInputError(f"Invalid {field}: {value!r} is not a number")

        if not math.isfinite(cost):
            raise InvalidInputError(f"Invalid {field}: {value!r} is not finite")
        if cost < 0:
            raise InvalidInputError(f"Invalid {field}: {value!r} is negative")
        return cost

    @classmethod
    def validate_date(cls, value: Any) -> date:
        """Validate a calendar date given as a date, datetime or ISO string"""
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value.strip()[:10])
            except ValueError:
                raise InvalidInputError(f"Invalid date: {value!r}")
        raise InvalidInputError(f"Invalid date: {value!r}")

    @classmethod
    def validate_confidence_level(cls, level: Any) -> float:
        """Validate a confidence level against the supported set"""
        if isinstance(level, bool):
            raise InvalidInputError(f"Invalid confidence level: {level!r}")
        try:
            requested = float(level)
        except (TypeError, ValueError):
            raise InvalidInputError(f"Invalid confidence level: {level!r}")

        for allowed in Z_SCORES:
            if math.isclose(requested, allowed, abs_tol=1e-9):
                return allowed
        allowed_text = ", ".join(f"{lvl:.2f}" for lvl in Z_SCORES)
        raise InvalidInputError(
            f"Invalid confidence level: {level!r} (expected one of {allowed_text})"
        )

    @classmethod
    def z_score(cls, level: Any) -> float:
        """Return the two-sided z-score for a supported confidence level"""
        return Z_SCORES[cls.validate_confidence_level(level)]

    @classmethod
    def validate_forecast_days(cls, days: Any, minimum: int, maximum: int) -> int:
        """Validate a forecast horizon in days"""
        if isinstance(days, bool) or not isinstance(days, int):
            raise InvalidConfigurationError(f"Forecast horizon must be an integer: {days!r}")
        if not minimum <= days <= maximum:
            raise InvalidConfigurationError(
                f"Forecast horizon must be between {minimum} and {maximum} days: {days}"
            )
        return days

    @classmethod
    def validate_daily_point(cls, item: Any) -> DailySpendPoint:
        """Coerce one series entry into a DailySpendPoint"""
        if isinstance(item, DailySpendPoint):
            return DailySpendPoint(date=cls.validate_date(item.date),
                                   cost=cls.validate_cost(item.cost))
        if isinstance(item, Mapping):
            if "date" not in item or "cost" not in item:
                raise InvalidInputError(f"Spend record needs 'date' and 'cost': {dict(item)!r}")
            return DailySpendPoint(date=cls.validate_date(item["date"]),
                                   cost=cls.validate_cost(item["cost"]))
        if isinstance(item, (tuple, list)) and len(item) == 2:
            return DailySpendPoint(date=cls.validate_date(item[0]),
                                   cost=cls.validate_cost(item[1]))
        raise InvalidInputError(f"Unrecognised spend record: {item!r}")

    @classmethod
    def validate_batch(cls, items: Iterable[Any], validator: Callable[[Any], Any],
                       fail_fast: bool = False) -> List[Any]:
        """Validate a batch of items"""
        validated = []
        errors = []

        for i, item in enumerate(items):
            try:
                validated.append(validator(item))
            except InvalidInputError as e:
                if fail_fast:
                    raise InvalidInputError(f"Validation failed at item {i}: {e}")
                errors.append(f"Item {i}: {e}")

        if errors:
            raise InvalidInputError(f"Batch validation failed: {'; '.join(errors)}")

        return validated


def normalize_series(series: Optional[Iterable[Any]]) -> List[DailySpendPoint]:
    """
    Validate a daily spend series and return it sorted by date.

    Entries sharing a date are merged by summing their cost.
    """
    if series is None:
        raise InvalidInputError("Spend series is required")
    if isinstance(series, (str, bytes, Mapping)):
        raise InvalidInputError("Spend series must be a sequence of records")

    points = Validator.validate_batch(series, Validator.validate_daily_point)

    merged: "OrderedDict[date, float]" = OrderedDict()
    for point in sorted(points, key=lambda p: p.date):
        merged[point.date] = merged.get(point.date, 0.0) + point.cost

    return [DailySpendPoint(date=day, cost=cost) for day, cost in merged.items()]


def filter_series(points: Sequence[DailySpendPoint],
                  start: Optional[Any] = None,
                  end: Optional[Any] = None) -> List[DailySpendPoint]:
    """Keep points dated within [start, end]; either bound may be omitted"""
    start = None if start is None else Validator.validate_date(start)
    end = None if end is None else Validator.validate_date(end)
    if start and end and start > end:
        raise InvalidInputError(f"Start date {start} is after end date {end}")

    return [
        p for p in points
        if (start is None or p.date >= start) and (end is None or p.date <= end)
    ]


def split_series(points: Sequence[DailySpendPoint]) -> Tuple[List[date], List[float]]:
    """Split normalised points into parallel date and cost lists"""
    return [p.date for p in points], [p.cost for p in points]


class RequestValidator(BaseModel):
    """Base model for record validation"""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        use_enum_values=True,
        validate_assignment=True,
        populate_by_name=True,
    )


class ProjectCostRecord(RequestValidator):
    """Per-project actual cost as supplied by the data layer"""
    project_name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("project_name", "projectName", "name"),
    )
    actual_cost: float = Field(
        validation_alias=AliasChoices("actual_cost", "actualCost", "cost"),
    )
    project_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("project_id", "projectId", "id"),
    )

    @field_validator("project_name", mode="before")
    @classmethod
    def stringify_project_name(cls, value: Any) -> Any:
        # Spreadsheet exports often carry numeric project codes as names
        if isinstance(value, (Real, Decimal)) and not isinstance(value, bool) and math.isfinite(value):
            return str(value)
        return value

    @field_validator("actual_cost", mode="before")
    @classmethod
    def validate_actual_cost(cls, value: Any) -> float:
        return Validator.validate_cost(value, field="actual cost")

    @field_validator("project_id", mode="before")
    @classmethod
    def stringify_project_id(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)
