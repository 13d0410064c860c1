"""
Consensus validation merging per-analyzer outlier and inlier votes into a net score per timestamp, keeping timestamps above the minimum score with the outliers that support them and a recent data snapshot, and cross-checking against known anomalies.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from api.responses import OutlierDetail, ValidatedOutlier
from config import settings
from engine.analyzers.base import Analyzer, Inlier, Outlier
from engine.series import Series

log = logging.getLogger(__name__)


def _weights(analyzers: Iterable[Analyzer]) -> Dict[str, Tuple[float, float]]:
    return {a.name: (a.outlier_weight, a.inlier_weight) for a in analyzers}


def score_timestamps(
    outliers: Sequence[Outlier],
    inliers: Sequence[Inlier],
    analyzers: Iterable[Analyzer],
) -> Tuple[Dict[int, float], Dict[int, int]]:
    """Net score and raw outlier count per timestamp."""
    weights = _weights(analyzers)
    defaults = (settings.default_outlier_weight, settings.default_inlier_weight)
    scores: Dict[int, float] = defaultdict(float)
    counts: Dict[int, int] = defaultdict(int)

    for o in outliers:
        log.info(
            "outlier at %d in %s found by %s magnitude %.4g",
            o.timestamp, o.series, o.analyzer, o.magnitude,
        )
        outlier_weight, _ = weights.get(o.analyzer, defaults)
        scores[o.timestamp] += outlier_weight + o.magnitude
        counts[o.timestamp] += 1
    for i in inliers:
        log.debug("inlier at %d in %s found by %s", i.timestamp, i.series, i.analyzer)
        _, inlier_weight = weights.get(i.analyzer, defaults)
        scores[i.timestamp] -= inlier_weight
    return dict(scores), dict(counts)


def cross_check(
    expected_errors: Iterable[int],
    scores: Mapping[int, float],
    counts: Mapping[int, int],
) -> List[int]:
    """Expected anomalies that no analyzer flagged."""
    missed: List[int] = []
    for ts in expected_errors:
        matches = counts.get(ts, 0)
        log.debug("error at %d found %d time(s) with score %.4g", ts, matches, scores.get(ts, 0.0))
        if matches < 1:
            log.error("did not find error on %d", ts)
            missed.append(ts)
    return missed


def snapshot(series_map: Mapping[str, Series], points: int) -> Dict[str, List[float]]:
    return {name: series.snapshot(points) for name, series in series_map.items()}


def validate(
    outliers: Sequence[Outlier],
    inliers: Sequence[Inlier],
    analyzers: Iterable[Analyzer],
    series_map: Mapping[str, Series],
    expected_errors: Iterable[int] = (),
    min_score: float = 1.0,
    snapshot_points: int = 10,
) -> List[ValidatedOutlier]:
    expected = list(expected_errors)
    scores, counts = score_timestamps(outliers, inliers, analyzers)
    cross_check(expected, scores, counts)

    by_timestamp: Dict[int, List[Outlier]] = defaultdict(list)
    for o in outliers:
        by_timestamp[o.timestamp].append(o)

    recent = snapshot(series_map, snapshot_points)
    expected_set = set(expected)
    validated: List[ValidatedOutlier] = []
    # inlier-only timestamps have nothing to report
    for ts in sorted(by_timestamp):
        score = scores[ts]
        if score < min_score:
            continue
        validated.append(ValidatedOutlier(
            timestamp=ts,
            score=score,
            outliers=[OutlierDetail(**o.to_dict()) for o in by_timestamp[ts]],
            timeseries_snapshot=recent,
        ))
        if ts not in expected_set:
            log.error("found unexpected error at %d net score %.4g", ts, score)
    return validated
