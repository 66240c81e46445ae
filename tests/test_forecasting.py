"""Tests for the forecast generator"""

from datetime import date, timedelta

import pytest

from costcast.analysis.forecasting import generate_forecast, residual_standard_error
from costcast.analysis.trend import fit_trend_line
from costcast.core.config import Settings
from costcast.core.exceptions import (
    InsufficientDataError,
    InvalidConfigurationError,
    InvalidInputError,
)


def forecast_points(forecast):
    return [p for p in forecast if p.is_forecast]


class TestForecastShape:
    """Test the layout of generated forecasts"""

    def test_history_then_horizon(self, increasing_series, test_settings):
        """Historical days come first, then one point per forecast day"""
        forecast = generate_forecast(increasing_series, 14, 0.95, settings=test_settings)

        assert len(forecast) == len(increasing_series) + 14

        history = forecast[:len(increasing_series)]
        for point, source in zip(history, increasing_series):
            assert not point.is_forecast
            assert point.date == source.date
            assert point.actual_cost == source.cost
            assert point.predicted_cost is None
            assert point.confidence_upper is None
            assert point.confidence_lower is None

        last_date = increasing_series[-1].date
        for days_ahead, point in enumerate(forecast_points(forecast), start=1):
            assert point.is_forecast
            assert point.date == last_date + timedelta(days=days_ahead)
            assert point.actual_cost is None
            assert point.predicted_cost is not None

    def test_defaults_come_from_settings(self, increasing_series):
        """Horizon and confidence default to the configured values"""
        settings = Settings(forecast={"default_forecast_days": 10})

        forecast = generate_forecast(increasing_series, settings=settings)

        assert len(forecast_points(forecast)) == 10

    def test_extrapolates_burn_rate_along_slope(self, increasing_series, test_settings):
        """Predictions follow the slope from the centre of the burn-rate window"""
        future = forecast_points(generate_forecast(increasing_series, 7, 0.95, settings=test_settings))

        # Burn rate 360 is the level three days before the last date (390)
        assert future[0].predicted_cost == pytest.approx(400.0)
        assert future[6].predicted_cost == pytest.approx(460.0)

    def test_linear_continuation_inside_band(self, increasing_series, test_settings):
        """The continuation of a perfectly linear series lies inside every band"""
        future = forecast_points(generate_forecast(increasing_series, 14, 0.95, settings=test_settings))

        for days_ahead, point in enumerate(future, start=1):
            expected = 390 + 10 * days_ahead
            assert point.confidence_lower - 1e-6 <= expected <= point.confidence_upper + 1e-6

    def test_gaps_are_spread_over_calendar_days(self, test_settings):
        """Weekly records forecast their cost per calendar day"""
        series = [(date(2024, 1, 7) + timedelta(weeks=i), 700.0) for i in range(10)]

        future = forecast_points(generate_forecast(series, 7, 0.95, settings=test_settings))

        assert [p.date for p in future] == [date(2024, 3, 10) + timedelta(days=i + 1) for i in range(7)]
        assert all(p.predicted_cost == pytest.approx(100.0) for p in future)

    def test_flat_series_forecast(self, flat_series, test_settings):
        """Constant spend forecasts the same cost with a collapsed band"""
        future = forecast_points(generate_forecast(flat_series, 30, 0.95, settings=test_settings))

        for point in future:
            assert point.predicted_cost == pytest.approx(100.0)
            assert point.band_width == pytest.approx(0.0, abs=1e-6)


class TestForecastProperties:
    """Test invariants of generated forecasts"""

    @pytest.mark.parametrize("level", [0.90, 0.95, 0.99])
    def test_bounds_contain_prediction(self, noisy_series, decreasing_series, test_settings, level):
        """Lower bound <= prediction <= upper bound on every forecast day"""
        for series in (noisy_series, decreasing_series):
            for point in forecast_points(generate_forecast(series, 90, level, settings=test_settings)):
                assert point.confidence_lower <= point.predicted_cost <= point.confidence_upper

    def test_uncertainty_widens(self, noisy_series, decreasing_series, test_settings):
        """The band never narrows further into the horizon"""
        for series in (noisy_series, decreasing_series):
            widths = [p.band_width for p in forecast_points(
                generate_forecast(series, 120, 0.95, settings=test_settings)
            )]
            for earlier, later in zip(widths, widths[1:]):
                assert later >= earlier - 1e-9

    def test_noisy_band_grows(self, noisy_series, test_settings):
        """Residual noise gives a band that grows over the horizon"""
        widths = [p.band_width for p in forecast_points(
            generate_forecast(noisy_series, 120, 0.95, settings=test_settings)
        )]

        assert widths[0] > 0
        assert widths[-1] > widths[0]

    def test_non_negative_under_steep_decline(self, decreasing_series, test_settings):
        """Predictions and lower bounds are clamped at zero"""
        future = forecast_points(generate_forecast(decreasing_series, 60, 0.99, settings=test_settings))

        assert all(p.predicted_cost >= 0 for p in future)
        assert all(p.confidence_lower >= 0 for p in future)
        assert future[-1].predicted_cost == 0.0

    def test_higher_confidence_is_wider(self, noisy_series, test_settings):
        """Higher confidence levels give wider bands"""
        widths = {
            level: forecast_points(generate_forecast(noisy_series, 7, level, settings=test_settings))[0].band_width
            for level in (0.90, 0.95, 0.99)
        }

        assert widths[0.90] < widths[0.95] < widths[0.99]
        assert widths[0.99] / widths[0.95] == pytest.approx(2.576 / 1.96)

    def test_margin_scales_with_square_root_of_days(self, noisy_series, test_settings):
        """Day four's band is twice as wide as day one's"""
        future = forecast_points(generate_forecast(noisy_series, 7, 0.95, settings=test_settings))

        assert future[3].band_width == pytest.approx(2 * future[0].band_width)

    def test_band_uses_residual_standard_error(self, noisy_series, test_settings):
        """Day one's half-width is z times the residual standard error"""
        dates = [p.date for p in noisy_series]
        line = fit_trend_line(dates, [p.cost for p in noisy_series])
        std_error = residual_standard_error(noisy_series, line)

        first = forecast_points(generate_forecast(noisy_series, 7, 0.95, settings=test_settings))[0]

        assert std_error > 0
        assert first.confidence_upper - first.predicted_cost == pytest.approx(1.96 * std_error)

    def test_idempotent(self, noisy_series, test_settings):
        """Identical inputs give identical output"""
        first = generate_forecast(noisy_series, 45, 0.95, settings=test_settings)
        second = generate_forecast(list(noisy_series), 45, 0.95, settings=test_settings)

        assert first == second


class TestSeasonalAdjustment:
    """Test optional seasonal factors"""

    def test_factors_scale_predictions(self, flat_series, test_settings):
        """Predictions are multiplied by the factor of their month"""
        factors = [1.0] * 12
        factors[2] = 2.0  # March

        # flat_series ends on 2024-02-29
        future = forecast_points(
            generate_forecast(flat_series, 7, 0.95, seasonal_factors=factors, settings=test_settings)
        )

        assert all(p.date.month == 3 for p in future)
        assert all(p.predicted_cost == pytest.approx(200.0) for p in future)

    def test_wrong_number_of_factors(self, flat_series, test_settings):
        """Exactly twelve factors are required"""
        with pytest.raises(InvalidInputError):
            generate_forecast(flat_series, 7, 0.95, seasonal_factors=[1.0] * 11, settings=test_settings)


class TestForecastErrors:
    """Test forecast failure modes"""

    def test_single_point_is_insufficient(self, make_series, test_settings):
        """A one-point series fails instead of producing a degenerate forecast"""
        with pytest.raises(InsufficientDataError) as exc_info:
            generate_forecast(make_series([100]), 30, 0.95, settings=test_settings)

        assert exc_info.value.required == 3

    def test_two_points_are_insufficient(self, make_series, test_settings):
        """Forecasting needs at least three points"""
        with pytest.raises(InsufficientDataError):
            generate_forecast(make_series([100, 120]), 30, 0.95, settings=test_settings)

    def test_three_points_are_enough(self, make_series, test_settings):
        """Three points produce a forecast"""
        forecast = generate_forecast(make_series([100, 120, 110]), 7, 0.95, settings=test_settings)

        assert len(forecast_points(forecast)) == 7

    @pytest.mark.parametrize("days", [0, -5, 6, 366, 10000])
    def test_horizon_out_of_bounds(self, increasing_series, test_settings, days):
        """Horizons outside 7..365 days are rejected"""
        with pytest.raises(InvalidConfigurationError):
            generate_forecast(increasing_series, days, 0.95, settings=test_settings)

    @pytest.mark.parametrize("days", [7.5, "30", True])
    def test_horizon_must_be_integer(self, increasing_series, test_settings, days):
        """Non-integer horizons are rejected"""
        with pytest.raises(InvalidConfigurationError):
            generate_forecast(increasing_series, days, 0.95, settings=test_settings)

    @pytest.mark.parametrize("level", [0.5, 0.8, 1.0, 95, "high"])
    def test_unsupported_confidence_level(self, increasing_series, test_settings, level):
        """Only 0.90, 0.95 and 0.99 are supported"""
        with pytest.raises(InvalidInputError):
            generate_forecast(increasing_series, 30, level, settings=test_settings)
