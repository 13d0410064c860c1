"""
Random-walk delta regression analyzer: regresses first differences of the train partition against time and projects forward recursively from the last training value, modelling local drift rather than global trend.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from typing import Iterator, Mapping, Optional, Tuple

import numpy as np
from scipy.stats import linregress

from config import settings
from engine.analyzers.base import AnalyzerResult, abstain, classify, regression_guard, relative_band
from engine.context import RunConfig
from engine.series import Series

log = logging.getLogger(__name__)


class RandomWalkRegressionAnalyzer:
    def __init__(
        self,
        max_rel_mse: Optional[float] = None,
        min_rel_band: Optional[float] = None,
        outlier_weight: Optional[float] = None,
        inlier_weight: Optional[float] = None,
        name: str = "RandomWalkRegressionAnalyzer",
    ) -> None:
        self.name = name
        self._max_rel_mse = max_rel_mse
        self._min_rel_band = min_rel_band
        self.outlier_weight = settings.default_outlier_weight if outlier_weight is None else outlier_weight
        self.inlier_weight = settings.default_inlier_weight if inlier_weight is None else inlier_weight

    def analyze(self, context: RunConfig, series_map: Mapping[str, Series]) -> AnalyzerResult:
        result = AnalyzerResult()
        for series in series_map.values():
            self._analyze_series(series, result)
        return result

    def _analyze_series(self, series: Series, result: AnalyzerResult) -> None:
        deltas = series.train_deltas()
        if len(deltas) < 2:
            abstain(self.name, series, f"number of deltas ({len(deltas)})")
            return

        ts = np.fromiter(deltas.keys(), dtype=float, count=len(deltas))
        diffs = np.fromiter(deltas.values(), dtype=float, count=len(deltas))
        fit = linregress(ts, diffs)
        predicted = fit.intercept + fit.slope * ts
        sse = float(np.sum((diffs - predicted) ** 2))
        tss = float(np.sum((diffs - diffs.mean()) ** 2))
        rel_mse = sse / tss if tss > 0 else 0.0
        log.debug("[%s] %s slope=%.6g relative mse=%.6g", self.name, series.name, fit.slope, rel_mse)

        max_rel_mse = self._max_rel_mse if self._max_rel_mse is not None else settings.random_walk_max_rel_mse
        if rel_mse > max_rel_mse:
            abstain(
                self.name, series,
                f"relative mean square error crosscheck (is {rel_mse:.6g} exceeds {max_rel_mse})",
            )
            return
        reason = regression_guard(float(np.mean(np.abs(diffs - predicted))), series)
        if reason:
            abstain(self.name, series, reason)
            return

        floor = self._min_rel_band if self._min_rel_band is not None else settings.random_walk_min_rel_band
        classify(self.name, series, self._project(series, fit.slope, fit.intercept), relative_band(rel_mse, floor), result)

    @staticmethod
    def _project(series: Series, slope: float, intercept: float) -> Iterator[Tuple[int, float, float]]:
        previous = list(series.train.values())[-1]
        for ts, value in series.classify.items():
            # forecast error compounds over the horizon
            expected = previous + intercept + slope * ts
            previous = expected
            yield ts, value, expected
