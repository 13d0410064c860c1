"""
Test cases for the detection strategies: tolerance band and magnitude, reliability gating, alert policy veto and outlier/inlier classification of the polynomial, random-walk and moving-average analyzers.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import logging

import numpy as np
import pytest

from conftest import T0, sinusoid
from engine.analyzers import (
    Analyzer,
    MovingAverageAnalyzer,
    PolynomialRegressionAnalyzer,
    RandomWalkRegressionAnalyzer,
    default_analyzers,
    tolerance_band,
)
from engine.analyzers.base import outlier_magnitude, regression_guard, relative_band
from engine.context import RunConfig
from engine.enums import NOTICE

CONTEXT = RunConfig()


def _trend_with_spike():
    values = [100.0 + 2.0 * i for i in range(50)]
    values[45] = 1000.0
    return values


def _plateau(value=50.0, count=50):
    return [value] * count


def test_tolerance_band_uses_wider_of_stddev_and_relative():
    assert tolerance_band(100.0, 5.0, 0.1) == pytest.approx((90.0, 110.0))
    assert tolerance_band(100.0, 20.0, 0.1) == pytest.approx((80.0, 120.0))


def test_tolerance_band_negative_forecast():
    lower, upper = tolerance_band(-100.0, 5.0, 0.1)
    assert lower == pytest.approx(-110.0)
    assert upper == pytest.approx(-90.0)
    assert lower < upper


def test_relative_band_floor():
    assert relative_band(0.02, 0.05) == pytest.approx(0.05)
    assert relative_band(0.3, 0.05) == pytest.approx(0.15)


def test_outlier_magnitude():
    assert outlier_magnitude(130.0, 90.0, 110.0) == pytest.approx(1.0)
    assert outlier_magnitude(80.0, 90.0, 110.0) == pytest.approx(0.5)
    assert outlier_magnitude(100.0, 90.0, 110.0) == 0.0
    # degenerate band
    assert outlier_magnitude(5.0, 2.0, 2.0) == pytest.approx(3.0)


def test_regression_guard(make_series):
    series = make_series(sinusoid(60))
    assert regression_guard(0.1, series) is None
    assert "standard deviation" in regression_guard(100.0, series)

    centered = make_series([-1.0, 1.0] * 30)
    assert "average" in regression_guard(0.5, centered)


def test_default_analyzers_follow_protocol():
    analyzers = default_analyzers()
    assert [a.name for a in analyzers] == [
        "PolynomialRegressionAnalyzer",
        "RandomWalkRegressionAnalyzer",
        "MovingAverageAnalyzer",
    ]
    assert all(isinstance(a, Analyzer) for a in analyzers)


def test_weights_default_from_settings(monkeypatch):
    monkeypatch.setattr("config.settings.default_inlier_weight", 0.25)
    analyzer = RandomWalkRegressionAnalyzer(outlier_weight=2.0)
    assert analyzer.outlier_weight == 2.0
    assert analyzer.inlier_weight == 0.25


def test_polynomial_flags_spike_on_trend(make_series):
    series = make_series(_trend_with_spike())
    result = PolynomialRegressionAnalyzer().analyze(CONTEXT, {"requests": series})

    assert [o.timestamp for o in result.outliers] == [T0 + 45 * 60]
    outlier = result.outliers[0]
    assert outlier.analyzer == "PolynomialRegressionAnalyzer"
    assert outlier.series == "requests"
    assert outlier.value == 1000.0
    assert outlier.forecast == pytest.approx(190.0)
    assert outlier.lower < outlier.forecast < outlier.upper
    assert outlier.magnitude > 1.0
    assert len(result.inliers) == 9
    assert result.active


def test_polynomial_plateau_is_all_inliers(make_series):
    result = PolynomialRegressionAnalyzer().analyze(CONTEXT, {"requests": make_series(_plateau())})
    assert result.outliers == []
    assert len(result.inliers) == 10


def test_alert_policy_veto_emits_nothing(make_series):
    values = _plateau()
    values[45] = 0.0
    series = make_series(values, alert_under=False)
    result = PolynomialRegressionAnalyzer().analyze(CONTEXT, {"requests": series})
    assert result.outliers == []
    assert len(result.inliers) == 9
    assert T0 + 45 * 60 not in {i.timestamp for i in result.inliers}


def test_polynomial_abstains_above_error_ceiling(make_series, monkeypatch, caplog):
    monkeypatch.setattr("config.settings.polynomial_max_rel_mse", 1e-9)
    caplog.set_level(NOTICE)
    result = PolynomialRegressionAnalyzer().analyze(CONTEXT, {"requests": make_series(sinusoid(60))})
    assert not result.active
    assert "relative mean square error" in caplog.text
    assert any(r.levelno == NOTICE for r in caplog.records)


def test_polynomial_abstains_when_deviation_exceeds_average(make_series, monkeypatch, caplog):
    monkeypatch.setattr("config.settings.polynomial_max_rel_mse", 1.0)
    caplog.set_level(NOTICE)
    noise = np.random.default_rng(3).normal(0.0, 5.0, 60)
    result = PolynomialRegressionAnalyzer().analyze(CONTEXT, {"requests": make_series(noise)})
    assert not result.active
    assert "average crosscheck" in caplog.text


def test_random_walk_flags_spike_on_trend(make_series):
    series = make_series(_trend_with_spike())
    result = RandomWalkRegressionAnalyzer().analyze(CONTEXT, {"requests": series})
    assert [o.timestamp for o in result.outliers] == [T0 + 45 * 60]
    assert result.outliers[0].forecast == pytest.approx(190.0)
    assert len(result.inliers) == 9


def test_random_walk_abstains_on_noise(make_series):
    noisy = 100.0 + np.random.default_rng(11).normal(0.0, 10.0, 60)
    result = RandomWalkRegressionAnalyzer().analyze(CONTEXT, {"requests": make_series(noisy)})
    assert result.outliers == []
    assert result.inliers == []


def test_random_walk_needs_two_deltas(make_series, caplog):
    caplog.set_level(NOTICE)
    series = make_series([1.0, 2.0, 3.0], horizon=1)
    result = RandomWalkRegressionAnalyzer().analyze(CONTEXT, {"requests": series})
    assert not result.active
    assert "number of deltas" in caplog.text


def test_moving_average_flags_spike_on_plateau(make_series):
    values = _plateau()
    values[45] = 500.0
    result = MovingAverageAnalyzer().analyze(CONTEXT, {"requests": make_series(values)})
    assert [o.timestamp for o in result.outliers] == [T0 + 45 * 60]
    outlier = result.outliers[0]
    assert outlier.forecast == pytest.approx(50.0)
    assert outlier.upper == pytest.approx(52.5)
    assert outlier.magnitude == pytest.approx((500.0 - 52.5) / 5.0)
    assert len(result.inliers) == 9


def test_moving_average_window_larger_than_train(make_series):
    result = MovingAverageAnalyzer(window=100).analyze(CONTEXT, {"requests": make_series(_plateau())})
    assert not result.active


def test_analyzers_cover_every_series(make_series):
    series_map = {
        "a": make_series(_plateau(), name="a"),
        "b": make_series(_plateau(20.0), name="b"),
    }
    for analyzer in default_analyzers():
        result = analyzer.analyze(CONTEXT, series_map)
        assert {i.series for i in result.inliers} == {"a", "b"}


def test_outlier_to_dict(make_series):
    series = make_series(_trend_with_spike())
    outlier = PolynomialRegressionAnalyzer().analyze(CONTEXT, {"requests": series}).outliers[0]
    data = outlier.to_dict()
    assert set(data) == {"analyzer", "series", "timestamp", "value", "lower", "upper", "forecast", "magnitude"}
    assert data["timestamp"] == T0 + 45 * 60


def test_abstain_logs_at_notice(make_series, caplog):
    caplog.set_level(logging.DEBUG)
    MovingAverageAnalyzer(window=100).analyze(CONTEXT, {"requests": make_series(_plateau())})
    notices = [r for r in caplog.records if r.levelname == "NOTICE"]
    assert notices
    assert "requests unreliable" in notices[0].getMessage()
