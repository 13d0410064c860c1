"""
Moving-average analyzer: predicts each point as the mean of the trailing window and projects the classify partition by feeding its own forecasts back into the window.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterator, Mapping, Optional, Tuple

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error

from config import settings
from engine.analyzers.base import AnalyzerResult, abstain, classify, regression_guard, relative_band
from engine.context import RunConfig
from engine.series import Series

log = logging.getLogger(__name__)


def _trailing_means(vals: np.ndarray, window: int) -> np.ndarray:
    kernel = np.ones(window) / window
    # mean of vals[i - window:i] for every i >= window
    return np.convolve(vals, kernel, mode="valid")[:-1]


class MovingAverageAnalyzer:
    def __init__(
        self,
        window: Optional[int] = None,
        max_rel_mse: Optional[float] = None,
        min_rel_band: Optional[float] = None,
        outlier_weight: Optional[float] = None,
        inlier_weight: Optional[float] = None,
        name: str = "MovingAverageAnalyzer",
    ) -> None:
        self.name = name
        self._window = window
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
        window = self._window if self._window is not None else settings.moving_average_window
        _, vals = series.train_arrays()
        if window < 1 or len(vals) <= window:
            abstain(self.name, series, f"training size ({len(vals)} points for window {window})")
            return

        actual = vals[window:]
        predicted = _trailing_means(vals, window)
        mse = float(mean_squared_error(actual, predicted))
        mad = float(mean_absolute_error(actual, predicted))
        tss = float(np.sum((vals - vals.mean()) ** 2))
        rel_mse = mse / tss if tss > 0 else 0.0
        log.debug("[%s] %s mse=%.6g mad=%.6g relative mse=%.6g", self.name, series.name, mse, mad, rel_mse)

        max_rel_mse = self._max_rel_mse if self._max_rel_mse is not None else settings.moving_average_max_rel_mse
        if rel_mse > max_rel_mse:
            abstain(
                self.name, series,
                f"relative mean square error crosscheck (is {rel_mse:.6g} exceeds {max_rel_mse})",
            )
            return
        reason = regression_guard(mad, series)
        if reason:
            abstain(self.name, series, reason)
            return

        floor = self._min_rel_band if self._min_rel_band is not None else settings.moving_average_min_rel_band
        classify(self.name, series, self._project(series, vals, window), relative_band(rel_mse, floor), result)

    @staticmethod
    def _project(series: Series, vals: np.ndarray, window: int) -> Iterator[Tuple[int, float, float]]:
        recent = deque((float(v) for v in vals[-window:]), maxlen=window)
        for ts, value in series.classify.items():
            expected = sum(recent) / window
            recent.append(expected)
            yield ts, value, expected
