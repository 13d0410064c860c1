"""
Constants and configuration for Outlier Consensus.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import os
from typing import List, Optional, Tuple

from pydantic_settings import BaseSettings


CONSENSUS_RESOLUTION: int = int(os.getenv("CONSENSUS_RESOLUTION", "60"))
CONSENSUS_FORECAST_HORIZON: int = int(os.getenv("CONSENSUS_FORECAST_HORIZON", "10"))
CONSENSUS_LOG_LEVEL: str = os.getenv("CONSENSUS_LOG_LEVEL", "info").lower()

# well known series names
REGULAR_SERIES = "regular"
ERROR_SERIES = "error"
ERROR_RATE_SERIES = "error_rate"

# (current resolution, max points at that resolution, next resolution)
ROLLUP_LADDER: List[Tuple[int, int, int]] = [
    (60, 1440, 300),
    (300, 864, 900),
    (900, 480, 1800),
]


class Settings(BaseSettings):
    # run defaults, overridable per run through the loaded settings mapping
    resolution: int = CONSENSUS_RESOLUTION
    forecast_horizon: int = CONSENSUS_FORECAST_HORIZON
    normalization: Optional[str] = None
    min_score: float = 1.0
    concurrency: Optional[int] = None
    snapshot_points: int = 10
    analyzer_deadline_seconds: float = 60.0
    log_level: str = CONSENSUS_LOG_LEVEL

    # training data sanitization
    sanitize_sigma: float = 6.0

    # preparation pipeline
    rollup_ladder: List[Tuple[int, int, int]] = ROLLUP_LADDER
    error_rate_min_average: float = 10.0
    normalize_span_threshold: float = 1000.0

    # tolerance band: share of the model's relative error accepted as deviation
    band_rel_error_factor: float = 0.5

    # trend regression
    polynomial_degree: int = 3
    polynomial_max_rel_mse: float = 0.02
    polynomial_min_rel_band: float = 0.05

    # random walk delta regression
    random_walk_max_rel_mse: float = 0.05
    random_walk_min_rel_band: float = 0.02

    # moving average
    moving_average_window: int = 5
    moving_average_max_rel_mse: float = 0.05
    moving_average_min_rel_band: float = 0.05

    # consensus votes
    default_outlier_weight: float = 1.0
    default_inlier_weight: float = 0.5

    model_config = {
        "env_prefix": "CONSENSUS_",
        "extra": "ignore",
    }


settings = Settings()
