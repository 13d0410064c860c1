"""
Run configuration captured once at load time and shared read-only by the preparation pipeline, the analyzers and the consensus validator.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from config import settings
from engine.enums import NormalizationMode
from engine.exceptions import ConfigurationError

_RESOLUTION_KEYS = ("resolution", "rollup", "desired_time_resolution")
_HORIZON_KEYS = ("forecast_horizon", "forecast_periods")


def _first(mapping: Mapping[str, str], keys: tuple[str, ...]) -> Optional[str]:
    for key in keys:
        value = mapping.get(key)
        if value is not None and str(value).strip() != "":
            return str(value).strip()
    return None


def _as_int(key: str, value: Optional[str], default: Optional[int]) -> Optional[int]:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {value!r}") from None


def _as_float(key: str, value: Optional[str], default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {value!r}") from None


@dataclass(frozen=True)
class RunConfig:
    resolution: int = 60
    forecast_horizon: int = 10
    normalization: Optional[NormalizationMode] = None
    min_score: float = 1.0
    concurrency: Optional[int] = None
    snapshot_points: int = 10
    deadline_seconds: float = 60.0
    name: str = ""

    def __post_init__(self) -> None:
        if self.resolution < 1:
            raise ConfigurationError(f"resolution must be positive, got {self.resolution}")
        if self.forecast_horizon < 1:
            raise ConfigurationError(f"forecast horizon must be positive, got {self.forecast_horizon}")
        if self.concurrency is not None and self.concurrency < 0:
            raise ConfigurationError(f"concurrency must not be negative, got {self.concurrency}")
        if self.snapshot_points < 0:
            raise ConfigurationError(f"snapshot size must not be negative, got {self.snapshot_points}")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str] | None = None) -> RunConfig:
        mapping = mapping or {}
        try:
            normalization = NormalizationMode.parse(mapping.get("normalization", settings.normalization))
        except ValueError:
            raise ConfigurationError(
                f"unsupported normalization mode {mapping.get('normalization')!r}"
            ) from None
        concurrency_raw = mapping.get("concurrency")
        if concurrency_raw is not None and str(concurrency_raw).strip().lower() in {"sync", "sequential"}:
            concurrency: Optional[int] = 0
        else:
            concurrency = _as_int("concurrency", _first(mapping, ("concurrency",)), settings.concurrency)
        return cls(
            resolution=_as_int("resolution", _first(mapping, _RESOLUTION_KEYS), settings.resolution),
            forecast_horizon=_as_int("forecast_horizon", _first(mapping, _HORIZON_KEYS), settings.forecast_horizon),
            normalization=normalization,
            min_score=_as_float("min_score", _first(mapping, ("min_score",)), settings.min_score),
            concurrency=concurrency,
            snapshot_points=_as_int("snapshot_points", _first(mapping, ("snapshot_points",)), settings.snapshot_points),
            deadline_seconds=_as_float(
                "deadline_seconds", _first(mapping, ("deadline_seconds",)), settings.analyzer_deadline_seconds
            ),
            name=str(mapping.get("name", "")),
        )
