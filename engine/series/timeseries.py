"""
Series store holding one named, timestamp-ordered numeric series with its train/classify partitions and frozen training statistics.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

import numpy as np

from engine.constants import TRAIN_SPLIT_RATIO
from engine.enums import SeriesState
from engine.exceptions import EmptyPartitionError, InsufficientDataError, SeriesStateError
from engine.series.stats import TrainStats, sanitized_stats


def split_point(count: int, forecast_horizon: int) -> int:
    """Number of leading points used for training; the rest is classified."""
    train = int(math.floor(count * TRAIN_SPLIT_RATIO))
    if count - train > forecast_horizon:
        train = count - forecast_horizon
    return train


class Series:
    __slots__ = (
        "name",
        "forecast_horizon",
        "resolution",
        "alert_over",
        "alert_under",
        "_data",
        "_state",
        "_train_count",
        "_train",
        "_stats",
    )

    def __init__(
        self,
        name: str,
        forecast_horizon: int,
        resolution: int = 60,
        alert_over: bool = True,
        alert_under: bool = True,
    ) -> None:
        self.name = name
        self.forecast_horizon = forecast_horizon
        self.resolution = resolution
        self.alert_over = alert_over
        self.alert_under = alert_under
        self._data: Dict[int, float] = {}
        self._state = SeriesState.uninitialized
        self._train_count = 0
        self._train: Optional[Dict[int, float]] = None
        self._stats: Optional[TrainStats] = None

    @classmethod
    def from_data(
        cls,
        name: str,
        data: Mapping[int, float],
        forecast_horizon: int,
        resolution: int = 60,
        alert_over: bool = True,
        alert_under: bool = True,
    ) -> Series:
        series = cls(name, forecast_horizon, resolution, alert_over, alert_under)
        series.set_data(data)
        return series.prepare()

    def __repr__(self) -> str:
        return f"Series({self.name!r}, points={len(self._data)}, state={self._state.value})"

    def __len__(self) -> int:
        return len(self._data)

    @property
    def state(self) -> SeriesState:
        return self._state

    def set_alert_policy(self, over: bool, under: bool) -> None:
        self.alert_over = over
        self.alert_under = under

    def set_data(self, data: Mapping[int, float]) -> None:
        ordered = {int(ts): float(data[ts]) for ts in sorted(data)}
        if len(ordered) < self.forecast_horizon:
            raise InsufficientDataError(
                f"{self.name}: not enough data available ({len(ordered)}) "
                f"to meet forecast horizon ({self.forecast_horizon})"
            )
        self._data = ordered
        self._train_count = split_point(len(ordered), self.forecast_horizon)
        self._train = None
        self._stats = None
        self._state = SeriesState.raw

    def prepare(self) -> Series:
        if self._state is SeriesState.uninitialized:
            raise SeriesStateError(f"{self.name}: cannot prepare a series without data")
        if self._state is SeriesState.prepared:
            return self
        if self._train_count < 1:
            raise EmptyPartitionError(f"{self.name}: train partition is empty ({len(self._data)} points)")
        keys = list(self._data)[: self._train_count]
        cleaned, stats = sanitized_stats([self._data[k] for k in keys])
        self._train = dict(zip(keys, cleaned))
        self._stats = stats
        self._state = SeriesState.prepared
        return self

    def rollup(self, resolution: int) -> None:
        merged: Dict[int, float] = {}
        for ts, val in self._data.items():
            bucket = ts - (ts % resolution)
            merged[bucket] = merged.get(bucket, 0.0) + val
        self.resolution = resolution
        self.set_data(merged)

    def _require_prepared(self) -> None:
        if self._state is not SeriesState.prepared:
            raise SeriesStateError(f"{self.name}: series is {self._state.value}, not prepared")

    @property
    def data(self) -> Mapping[int, float]:
        return MappingProxyType(self._data)

    @property
    def train(self) -> Mapping[int, float]:
        self._require_prepared()
        return MappingProxyType(self._train)

    @property
    def classify(self) -> Mapping[int, float]:
        if self._state is SeriesState.uninitialized:
            raise SeriesStateError(f"{self.name}: series has no data")
        keys = list(self._data)[self._train_count:]
        return MappingProxyType({k: self._data[k] for k in keys})

    @property
    def stats(self) -> TrainStats:
        self._require_prepared()
        return self._stats

    def train_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        train = self.train
        return (
            np.fromiter(train.keys(), dtype=float, count=len(train)),
            np.fromiter(train.values(), dtype=float, count=len(train)),
        )

    def train_deltas(self) -> Dict[int, float]:
        deltas: Dict[int, float] = {}
        previous: Optional[float] = None
        for ts, val in self.train.items():
            if previous is not None:
                deltas[ts] = val - previous
            previous = val
        return deltas

    def accepts(self, value: float, lower: float, upper: float) -> bool:
        """Alert policy veto for a value outside [lower, upper]."""
        if value < lower and not self.alert_under:
            return False
        if value > upper and not self.alert_over:
            return False
        return True

    def snapshot(self, points: int) -> List[float]:
        if points <= 0:
            return []
        return list(self._data.values())[-points:]
