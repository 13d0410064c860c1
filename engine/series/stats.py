"""
Training statistics for a series partition, including the damped replacement of extreme historical values so that a handful of spikes cannot dominate downstream regression.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from config import settings
from engine.exceptions import EmptyPartitionError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainStats:
    average: float
    std_dev: float
    min_value: float
    max_value: float
    count: int
    replaced: int = 0

    @property
    def span(self) -> float:
        return self.max_value - self.min_value


def compute_stats(values: Sequence[float]) -> TrainStats:
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        raise EmptyPartitionError("cannot compute statistics over an empty partition")
    return TrainStats(
        average=float(arr.mean()),
        std_dev=float(arr.std()),
        min_value=float(arr.min()),
        max_value=float(arr.max()),
        count=int(arr.size),
    )


def sanitize(
    values: Sequence[float],
    stats: TrainStats,
    sigma: float | None = None,
) -> Tuple[List[float], int]:
    if sigma is None:
        sigma = settings.sanitize_sigma
    low = stats.average - stats.std_dev * sigma
    high = stats.average + stats.std_dev * sigma

    cleaned: List[float] = []
    previous = stats.average
    replaced = 0
    for val in values:
        if val < low or val > high:
            replacement = (stats.average + previous) / 2.0
            log.debug(
                "training outlier %s (avg %.4g, stddev %.4g) replaced with %.4g",
                val, stats.average, stats.std_dev, replacement,
            )
            cleaned.append(replacement)
            replaced += 1
            # an outlier never becomes the reference for the next replacement
            continue
        cleaned.append(float(val))
        previous = float(val)
    return cleaned, replaced


def sanitized_stats(values: Sequence[float], sigma: float | None = None) -> Tuple[List[float], TrainStats]:
    stats = compute_stats(values)
    cleaned, replaced = sanitize(values, stats, sigma)
    if replaced:
        recomputed = compute_stats(cleaned)
        stats = TrainStats(
            average=recomputed.average,
            std_dev=recomputed.std_dev,
            min_value=recomputed.min_value,
            max_value=recomputed.max_value,
            count=recomputed.count,
            replaced=replaced,
        )
    return cleaned, stats
