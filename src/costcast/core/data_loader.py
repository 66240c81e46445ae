"""Loaders for spend series, project totals and budget maps"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd
import yaml

from .exceptions import DataLoadError, InvalidInputError
from .models import DailySpendPoint
from .validation import Validator, filter_series, normalize_series

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _read_frame(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise DataLoadError(f"File not found: {path}")

    try:
        if path.suffix.lower() == ".csv":
            return pd.read_csv(path)
        if path.suffix.lower() == ".json":
            with open(path, 'r') as f:
                records = json.load(f)
            if isinstance(records, dict):
                records = records.get("data", records.get("records", []))
            return pd.DataFrame.from_records(records)
    except (ValueError, json.JSONDecodeError, pd.errors.ParserError) as e:
        raise DataLoadError(f"Could not parse {path}: {e}")

    raise DataLoadError(f"Unsupported file type: {path.suffix or path.name}")


def load_daily_spend(path: PathLike, start: Optional[date] = None,
                     end: Optional[date] = None) -> List[DailySpendPoint]:
    """
    Load a daily spend series from CSV or JSON.

    Expects ``date`` and ``cost`` columns (or record keys). The series is
    validated, sorted and merged by date before it is returned, keeping only
    dates within ``start`` and ``end`` when given.
    """
    path = Path(path)
    df = _read_frame(path)

    missing = {"date", "cost"} - set(df.columns)
    if missing:
        raise DataLoadError(f"{path} is missing column(s): {', '.join(sorted(missing))}")

    records = df[["date", "cost"]].to_dict(orient="records")
    try:
        series = normalize_series(records)
    except InvalidInputError as e:
        raise DataLoadError(f"Invalid spend data in {path}: {e}")
    series = filter_series(series, start, end)

    logger.debug(f"Loaded {len(series)} daily points from {path}")
    return series


def load_project_costs(path: PathLike) -> List[Dict]:
    """Load per-project actual cost records from CSV or JSON"""
    path = Path(path)
    df = _read_frame(path)

    name_column = next((c for c in ("project_name", "projectName", "name") if c in df.columns), None)
    cost_column = next((c for c in ("actual_cost", "actualCost", "cost") if c in df.columns), None)
    if name_column is None or cost_column is None:
        raise DataLoadError(f"{path} needs a project name column and an actual cost column")

    projects = []
    for row in df.to_dict(orient="records"):
        name = row[name_column]
        record = {
            "project_name": name if pd.isna(name) else str(name),
            "actual_cost": row[cost_column],
        }
        if "project_id" in df.columns and pd.notna(row["project_id"]):
            record["project_id"] = str(row["project_id"])
        projects.append(record)

    logger.debug(f"Loaded {len(projects)} project records from {path}")
    return projects


def load_cost_map(path: PathLike) -> Dict[str, float]:
    """Load a project name -> cost mapping from YAML or JSON"""
    path = Path(path)
    if not path.exists():
        raise DataLoadError(f"File not found: {path}")

    with open(path, 'r') as f:
        try:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise DataLoadError(f"Could not parse {path}: {e}")

    if not isinstance(data, dict):
        raise DataLoadError(f"{path} must contain a mapping of project name to cost")

    try:
        return {str(name): Validator.validate_cost(value, field=f"cost for {name}")
                for name, value in data.items()}
    except InvalidInputError as e:
        raise DataLoadError(f"Invalid cost map in {path}: {e}")
