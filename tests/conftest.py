"""Pytest configuration and fixtures"""

import sys
import tempfile
from datetime import date, timedelta
from pathlib import Path

import pytest
import yaml

SRC = Path(__file__).resolve().parent.parent / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from costcast.core.config import Settings
from costcast.core.models import DailySpendPoint


START = date(2024, 1, 1)

# Deterministic noise pattern, mean zero over each cycle
NOISE = [6.0, -4.0, 9.0, -7.0, 3.0, -5.0, -2.0]


def build_series(costs, start=START):
    """Daily points starting at ``start``, one per cost"""
    return [
        DailySpendPoint(date=start + timedelta(days=i), cost=float(cost))
        for i, cost in enumerate(costs)
    ]


@pytest.fixture
def make_series():
    """Factory for daily series from a list of costs"""
    return build_series


@pytest.fixture
def test_settings():
    """Create test settings"""
    return Settings(
        environment="test",
        debug=True,
        logging={
            "level": "DEBUG",
            "structured": False,
            "console": False
        },
    )


@pytest.fixture
def flat_series():
    """60 days of constant spend, spanning January and February 2024"""
    return build_series([100.0] * 60)


@pytest.fixture
def increasing_series():
    """30 days rising by 10/day from 100"""
    return build_series([100 + 10 * i for i in range(30)])


@pytest.fixture
def gently_increasing_series():
    """30 days rising by 1/day from 100"""
    return build_series([100 + i for i in range(30)])


@pytest.fixture
def decreasing_series():
    """30 days falling by 10/day from 300 to 10"""
    return build_series([300 - 10 * i for i in range(30)])


@pytest.fixture
def noisy_series():
    """42 days of spend around 200 with deterministic noise"""
    return build_series([200 + NOISE[i % len(NOISE)] for i in range(42)])


@pytest.fixture
def temp_config_file():
    """Create temporary config file"""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        config = {
            "environment": "test",
            "forecast": {
                "default_forecast_days": 14,
                "default_confidence_level": 0.90
            },
            "trend": {
                "stable_threshold": 0.1
            },
            "logging": {
                "level": "WARNING"
            }
        }
        yaml.dump(config, f)
        temp_path = Path(f.name)

    yield temp_path

    # Cleanup
    temp_path.unlink(missing_ok=True)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset singleton instances between tests"""
    import costcast.core.config as config_module
    config_module.settings = None
    yield
    config_module.settings = None


def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "cli: mark test as exercising the command line"
    )
