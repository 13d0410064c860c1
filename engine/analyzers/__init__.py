"""
Detection strategies implementing the analyzer contract: trend regression, random-walk delta regression and moving average.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from typing import List

from engine.analyzers.base import Analyzer, AnalyzerResult, Inlier, Outlier, tolerance_band
from engine.analyzers.moving_average import MovingAverageAnalyzer
from engine.analyzers.polynomial import PolynomialRegressionAnalyzer
from engine.analyzers.random_walk import RandomWalkRegressionAnalyzer


def default_analyzers() -> List[Analyzer]:
    return [
        PolynomialRegressionAnalyzer(),
        RandomWalkRegressionAnalyzer(),
        MovingAverageAnalyzer(),
    ]


__all__ = [
    "Analyzer",
    "AnalyzerResult",
    "Inlier",
    "MovingAverageAnalyzer",
    "Outlier",
    "PolynomialRegressionAnalyzer",
    "RandomWalkRegressionAnalyzer",
    "default_analyzers",
    "tolerance_band",
]
