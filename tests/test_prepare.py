"""
Test cases for the preparation pipeline: sample parsing and bucketing, gap filling, auto-rollup, error-rate derivation and normalization.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import math

import pytest

from conftest import T0, raw_series, timestamps
from config import ERROR_RATE_SERIES, ERROR_SERIES, REGULAR_SERIES
from engine.context import RunConfig
from engine.enums import NormalizationMode
from engine.exceptions import InsufficientDataError, MalformedSampleError
from engine.prepare import (
    auto_rollup,
    bucket,
    derive_error_rate,
    error_rate,
    fill_gaps,
    ingest,
    normalize_value,
    parse_samples,
    prepare,
)


def test_bucket():
    assert bucket(65, 60) == 60
    assert bucket(120, 60) == 120
    assert bucket(T0 + 299, 300) == T0


def test_parse_samples_buckets_and_sums():
    data = parse_samples("requests", {"65": "1", "100": "2", "130": "4.5"}, 60)
    assert data == {60: 3.0, 120: 4.5}


def test_parse_samples_accepts_float_timestamps():
    assert parse_samples("requests", {"120.0": "1"}, 60) == {120: 1.0}


@pytest.mark.parametrize("raw", [
    {"abc": "1"},
    {"60": "many"},
    {"60": "nan"},
    {"60": "inf"},
    {"60.5": "1"},
])
def test_parse_samples_rejects_malformed(raw):
    with pytest.raises(MalformedSampleError):
        parse_samples("requests", raw, 60)


def test_fill_gaps_inserts_zeros():
    filled = fill_gaps({0: 1.0, 60: 2.0, 240: 3.0}, 60)
    assert filled == {0: 1.0, 60: 2.0, 120: 0.0, 180: 0.0, 240: 3.0}
    assert list(filled) == [0, 60, 120, 180, 240]


def test_fill_gaps_empty_and_single():
    assert fill_gaps({}, 60) == {}
    assert fill_gaps({T0: 4.0}, 60) == {T0: 4.0}


def test_ingest_fills_gaps_and_drops_empty_series():
    config = RunConfig(resolution=60, forecast_horizon=1)
    series_map = ingest({"a": {"0": "1", "60": "2", "240": "3"}, "empty": {}}, config)
    assert list(series_map) == ["a"]
    assert dict(series_map["a"].data) == {0: 1.0, 60: 2.0, 120: 0.0, 180: 0.0, 240: 3.0}


def test_ingest_error_series_only_alerts_upwards():
    config = RunConfig(forecast_horizon=5)
    series_map = ingest({ERROR_SERIES: raw_series([1.0] * 20), "requests": raw_series([1.0] * 20)}, config)
    assert series_map[ERROR_SERIES].alert_over
    assert not series_map[ERROR_SERIES].alert_under
    assert series_map["requests"].alert_under


def test_ingest_too_few_points_aborts():
    with pytest.raises(InsufficientDataError):
        ingest({"requests": raw_series([1.0] * 5)}, RunConfig(forecast_horizon=10))


def test_auto_rollup_single_step():
    series_map = ingest({"requests": raw_series([1.0] * 1500)}, RunConfig())
    resolution = auto_rollup(series_map, 60)
    series = series_map["requests"]
    assert resolution == 300
    assert series.resolution == 300
    assert len(series) == 300
    assert set(series.data.values()) == {5.0}
    assert all(ts % 300 == 0 for ts in series.data)


def test_auto_rollup_walks_the_ladder():
    series_map = ingest({"requests": raw_series([1.0] * 5000)}, RunConfig())
    resolution = auto_rollup(series_map, 60)
    series = series_map["requests"]
    assert resolution == 900
    assert len(series) == 334
    assert series.data[T0] == 15.0
    # last bucket only holds the remaining 5 samples
    assert list(series.data.values())[-1] == 5.0


def test_auto_rollup_applies_to_every_series():
    raw = {"short": raw_series([1.0] * 100), "long": raw_series([1.0] * 1500)}
    prepared = prepare(raw, RunConfig())
    assert prepared.resolution == 300
    assert prepared.series["short"].resolution == 300
    assert len(prepared.series["short"]) == 20


def test_auto_rollup_not_needed():
    series_map = ingest({"requests": raw_series([1.0] * 1440)}, RunConfig())
    assert auto_rollup(series_map, 60) == 60
    assert len(series_map["requests"]) == 1440


@pytest.mark.parametrize("regular,errors,expected", [
    (100.0, 0.0, 0.0),
    (0.0, 5.0, 1.0),
    (50.0, 0.0, 0.0),
    (0.0, 0.0, 0.0),
    (100.0, 20.0, 0.2),
])
def test_error_rate(regular, errors, expected):
    assert error_rate(regular, errors) == pytest.approx(expected)


def test_derive_error_rate():
    raw = {
        REGULAR_SERIES: raw_series([100.0] * 30),
        ERROR_SERIES: raw_series([20.0] * 25, start=T0 + 300),
    }
    series_map = ingest(raw, RunConfig())
    derived = derive_error_rate(series_map, 10)
    assert derived is series_map[ERROR_RATE_SERIES]
    assert not derived.alert_under
    assert derived.alert_over
    values = [derived.data[ts] for ts in timestamps(30)]
    # no error bucket yet means no errors
    assert values[:5] == [0.0] * 5
    assert values[5:] == pytest.approx([0.2] * 25)


def test_derive_error_rate_requires_minimum_averages():
    raw = {REGULAR_SERIES: raw_series([100.0] * 30), ERROR_SERIES: raw_series([5.0] * 30)}
    series_map = ingest(raw, RunConfig())
    assert derive_error_rate(series_map, 10) is None
    assert ERROR_RATE_SERIES not in series_map


def test_derive_error_rate_needs_both_series():
    series_map = ingest({REGULAR_SERIES: raw_series([100.0] * 30)}, RunConfig())
    assert derive_error_rate(series_map, 10) is None


def test_auto_normalize_large_span():
    values = [1.0 + 20.0 * i for i in range(100)]
    prepared = prepare({"bytes": raw_series(values), "flat": raw_series([5.0] * 100)}, RunConfig())
    series = prepared.series["bytes"]
    assert series.data[T0] == 0.0
    assert series.stats.max_value == pytest.approx(math.log(1.0 + 20.0 * 89))
    assert prepared.series["flat"].data[T0] == 5.0


def test_explicit_none_disables_auto_normalize():
    values = [1.0 + 20.0 * i for i in range(100)]
    config = RunConfig(normalization=NormalizationMode.none)
    prepared = prepare({"bytes": raw_series(values)}, config)
    assert prepared.series["bytes"].data[T0] == 1.0


def test_explicit_normalization_applies_to_every_series():
    config = RunConfig(normalization=NormalizationMode.log10)
    prepared = prepare({"requests": raw_series([100.0] * 20)}, config)
    assert list(prepared.series["requests"].data.values()) == pytest.approx([2.0] * 20)


@pytest.mark.parametrize("mode,value,expected", [
    (NormalizationMode.log, 0.0, 0.0),
    (NormalizationMode.log, -5.0, 0.0),
    (NormalizationMode.log, math.e, 1.0),
    (NormalizationMode.log10, 1000.0, 3.0),
    (NormalizationMode.log1p, 0.0, 0.0),
    (NormalizationMode.log1p, math.e - 1, 1.0),
    (NormalizationMode.sqrt, 9.0, 3.0),
    (NormalizationMode.sqrt, -4.0, 0.0),
    (NormalizationMode.none, -4.0, -4.0),
    (None, 7.5, 7.5),
])
def test_normalize_value(mode, value, expected):
    assert normalize_value(mode, value) == pytest.approx(expected)
