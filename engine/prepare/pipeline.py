"""
Preparation pipeline turning irregular raw samples into clean, gap-free, resampled series: bucketing, gap filling, auto-rollup, derived error-rate series and value normalization.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from config import ERROR_RATE_SERIES, ERROR_SERIES, REGULAR_SERIES, settings
from engine.context import RunConfig
from engine.enums import NormalizationMode
from engine.exceptions import MalformedSampleError
from engine.prepare.normalize import normalize_data
from engine.series import Series

log = logging.getLogger(__name__)

RawSeries = Mapping[str, str]
RawSamples = Mapping[str, RawSeries]


@dataclass
class PreparedData:
    series: Dict[str, Series] = field(default_factory=dict)
    resolution: int = 60


def bucket(ts: int, resolution: int) -> int:
    return ts - (ts % resolution)


def _parse_timestamp(name: str, raw: object) -> int:
    text = str(raw).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        raise MalformedSampleError(f"{name}: invalid timestamp {raw!r}") from None
    if not math.isfinite(number) or number != int(number):
        raise MalformedSampleError(f"{name}: invalid timestamp {raw!r}")
    return int(number)


def _parse_value(name: str, ts: int, raw: object) -> float:
    try:
        value = float(str(raw).strip())
    except ValueError:
        raise MalformedSampleError(f"{name}: invalid value {raw!r} at {ts}") from None
    if not math.isfinite(value):
        raise MalformedSampleError(f"{name}: non-finite value {raw!r} at {ts}")
    return value


def parse_samples(name: str, raw_series: RawSeries, resolution: int) -> Dict[int, float]:
    buckets: Dict[int, float] = {}
    for raw_ts, raw_val in raw_series.items():
        ts = bucket(_parse_timestamp(name, raw_ts), resolution)
        buckets[ts] = buckets.get(ts, 0.0) + _parse_value(name, ts, raw_val)
    return dict(sorted(buckets.items()))


def fill_gaps(data: Mapping[int, float], resolution: int) -> Dict[int, float]:
    filled: Dict[int, float] = {}
    previous: Optional[int] = None
    for ts in sorted(data):
        if previous is not None:
            gap_ts = previous + resolution
            while gap_ts < ts:
                filled[gap_ts] = 0.0
                gap_ts += resolution
        filled[ts] = data[ts]
        previous = ts
    return filled


def ingest(raw: RawSamples, config: RunConfig) -> Dict[str, Series]:
    series_map: Dict[str, Series] = {}
    for name, raw_series in raw.items():
        data = fill_gaps(parse_samples(name, raw_series, config.resolution), config.resolution)
        if not data:
            log.debug("skipping empty series %s", name)
            continue
        if config.normalization is not None:
            data = normalize_data(config.normalization, data)

        series = Series(name, config.forecast_horizon, config.resolution)
        if name == ERROR_SERIES:
            # fewer errors than expected is never an anomaly
            series.set_alert_policy(over=True, under=False)
        series.set_data(data)
        series_map[name] = series.prepare()
    return series_map


def _next_resolution(size: int, resolution: int) -> Optional[int]:
    for current, max_points, coarser in settings.rollup_ladder:
        if resolution == current and size > max_points:
            return coarser
    return None


def auto_rollup(series_map: Mapping[str, Series], resolution: int) -> int:
    while True:
        target: Optional[int] = None
        for series in series_map.values():
            target = _next_resolution(len(series), resolution)
            if target is not None:
                break
        if target is None:
            return resolution

        log.debug("rollup resolution from %ds to %ds", resolution, target)
        resolution = target
        for series in series_map.values():
            series.rollup(resolution)
            series.prepare()


def error_rate(regular: float, errors: float) -> float:
    if regular > 0 and errors > 0:
        return errors / regular
    if errors > 0:
        # every request failed; avoid dividing by zero
        return 1.0
    return 0.0


def derive_error_rate(series_map: Dict[str, Series], forecast_horizon: int) -> Optional[Series]:
    regular = series_map.get(REGULAR_SERIES)
    errors = series_map.get(ERROR_SERIES)
    if regular is None or errors is None:
        return None

    threshold = settings.error_rate_min_average
    if regular.stats.average < threshold or errors.stats.average < threshold:
        log.debug("not deriving %s, averages below threshold of %s", ERROR_RATE_SERIES, threshold)
        return None

    log.debug("deriving %s series", ERROR_RATE_SERIES)
    error_data = errors.data
    rates = {ts: error_rate(val, error_data.get(ts, 0.0)) for ts, val in regular.data.items()}
    derived = Series(ERROR_RATE_SERIES, forecast_horizon, regular.resolution, alert_over=True, alert_under=False)
    derived.set_data(rates)
    series_map[ERROR_RATE_SERIES] = derived.prepare()
    return derived


def _log_stats(series: Series) -> None:
    stats = series.stats
    log.debug(
        "%s min=%.6g max=%.6g avg=%.6g stddev=%.6g",
        series.name, stats.min_value, stats.max_value, stats.average, stats.std_dev,
    )


def auto_normalize(series_map: Mapping[str, Series], mode: NormalizationMode | None) -> list[str]:
    if mode is not None:
        return []
    normalized: list[str] = []
    for series in series_map.values():
        span = series.stats.span
        if span < settings.normalize_span_threshold:
            continue
        log.info("normalizing %s (max-min value delta %.6g)", series.name, span)
        _log_stats(series)
        series.set_data(normalize_data(NormalizationMode.log, series.data))
        series.prepare()
        _log_stats(series)
        normalized.append(series.name)
    return normalized


def prepare(raw: RawSamples, config: RunConfig) -> PreparedData:
    series_map = ingest(raw, config)
    resolution = auto_rollup(series_map, config.resolution)
    derive_error_rate(series_map, config.forecast_horizon)
    auto_normalize(series_map, config.normalization)
    return PreparedData(series=series_map, resolution=resolution)
