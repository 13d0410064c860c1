"""
Trend regression analyzer fitting a least-squares polynomial of time to the sanitized train partition and flagging classify points outside the tolerance band around its projection.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import math
from typing import Mapping, Optional

import numpy as np
from numpy.polynomial import Polynomial
from sklearn.metrics import mean_absolute_error, mean_absolute_percentage_error, mean_squared_error

from config import settings
from engine.analyzers.base import AnalyzerResult, abstain, classify, regression_guard, relative_band
from engine.context import RunConfig
from engine.series import Series

log = logging.getLogger(__name__)


def _aic(sse: float, n: int, params: int) -> float:
    if n == 0 or sse <= 0:
        return float("-inf")
    return n * math.log(sse / n) + 2 * params


class PolynomialRegressionAnalyzer:
    def __init__(
        self,
        degree: Optional[int] = None,
        max_rel_mse: Optional[float] = None,
        min_rel_band: Optional[float] = None,
        outlier_weight: Optional[float] = None,
        inlier_weight: Optional[float] = None,
        name: str = "PolynomialRegressionAnalyzer",
    ) -> None:
        self.name = name
        self._degree = degree
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
        ts, vals = series.train_arrays()
        n = len(vals)
        if n < 2:
            abstain(self.name, series, f"training size ({n} point)")
            return
        degree = self._degree if self._degree is not None else settings.polynomial_degree
        degree = max(0, min(degree, n - 1))
        model = Polynomial.fit(ts, vals, degree)
        fitted = model(ts)

        avg = float(vals.mean())
        tsos = float(np.sum((vals - avg) ** 2))
        mse = float(mean_squared_error(vals, fitted))
        mad = float(mean_absolute_error(vals, fitted))
        log.debug("[%s] %s average=%.6g total sum squares=%.6g", self.name, series.name, avg, tsos)
        log.debug(
            "[%s] %s mse=%.6g mad=%.6g mape=%.6g aic=%.6g",
            self.name, series.name, mse, mad,
            float(mean_absolute_percentage_error(vals, fitted)),
            _aic(mse * n, n, degree + 1),
        )

        # without spread around the average every fit is exact
        rel_mse = mse / tsos if tsos > 0 else 0.0
        max_rel_mse = self._max_rel_mse if self._max_rel_mse is not None else settings.polynomial_max_rel_mse
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

        floor = self._min_rel_band if self._min_rel_band is not None else settings.polynomial_min_rel_band
        classify_data = series.classify
        forecasts = model(np.fromiter(classify_data.keys(), dtype=float, count=len(classify_data)))
        classify(
            self.name,
            series,
            ((t, v, float(f)) for (t, v), f in zip(classify_data.items(), forecasts)),
            relative_band(rel_mse, floor),
            result,
        )
