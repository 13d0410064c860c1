"""
Analyzer contract shared by every detection strategy: result records, the tolerance band, classification of the classify partition and the regression reliability guards.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple, runtime_checkable

from config import settings
from engine.context import RunConfig
from engine.enums import NOTICE
from engine.series import Series

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outlier:
    analyzer: str
    series: str
    timestamp: int
    value: float
    lower: float
    upper: float
    forecast: Optional[float] = None
    magnitude: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Inlier:
    analyzer: str
    series: str
    timestamp: int


@dataclass
class AnalyzerResult:
    outliers: List[Outlier] = field(default_factory=list)
    inliers: List[Inlier] = field(default_factory=list)

    @property
    def active(self) -> bool:
        return bool(self.outliers or self.inliers)


@runtime_checkable
class Analyzer(Protocol):
    name: str
    outlier_weight: float
    inlier_weight: float

    def analyze(self, context: RunConfig, series_map: Mapping[str, Series]) -> AnalyzerResult: ...


def tolerance_band(forecast: float, std_dev: float, rel_band: float) -> Tuple[float, float]:
    spread = abs(forecast) * rel_band
    lower = min(forecast - std_dev, forecast - spread)
    upper = max(forecast + std_dev, forecast + spread)
    return lower, upper


def relative_band(rel_error: float, floor: float) -> float:
    return max(settings.band_rel_error_factor * rel_error, floor)


def outlier_magnitude(value: float, lower: float, upper: float) -> float:
    width = upper - lower
    if width <= 0:
        width = 1.0
    if value > upper:
        return (value - upper) / width
    if value < lower:
        return (lower - value) / width
    return 0.0


def regression_guard(mad: float, series: Series) -> Optional[str]:
    """Reason the model is unreliable based on its mean absolute deviation, or None."""
    stats = series.stats
    if stats.std_dev > 0 and mad > stats.std_dev:
        return (
            f"MAD (mean absolute error) / standard deviation crosscheck "
            f"(MAD {mad:.6g} exceeds stddev {stats.std_dev:.6g})"
        )
    if mad > stats.average:
        return (
            f"MAD (mean absolute error) / average crosscheck "
            f"(MAD {mad:.6g} exceeds avg {stats.average:.6g})"
        )
    return None


def abstain(analyzer: str, series: Series, reason: str) -> None:
    log.log(NOTICE, "[%s] %s unreliable based on %s", analyzer, series.name, reason)


def classify(
    analyzer: str,
    series: Series,
    forecasts: Iterable[Tuple[int, float, float]],
    rel_band: float,
    result: AnalyzerResult,
) -> None:
    """Score (timestamp, observed, forecast) triples against the tolerance band."""
    std_dev = series.stats.std_dev
    for ts, value, expected in forecasts:
        lower, upper = tolerance_band(expected, std_dev, rel_band)
        log.debug("[%s] %s %d observed=%.6g forecast=%.6g", analyzer, series.name, ts, value, expected)
        if lower <= value <= upper:
            result.inliers.append(Inlier(analyzer=analyzer, series=series.name, timestamp=ts))
            continue
        if not series.accepts(value, lower, upper):
            continue
        result.outliers.append(Outlier(
            analyzer=analyzer,
            series=series.name,
            timestamp=ts,
            value=value,
            lower=lower,
            upper=upper,
            forecast=expected,
            magnitude=outlier_magnitude(value, lower, upper),
        ))
