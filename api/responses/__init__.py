"""
Response models for validated outliers returned by the in-process batch API.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class OutlierDetail(BaseModel):

    analyzer: str
    series: str
    timestamp: int
    value: float
    lower: float
    upper: float
    forecast: Optional[float] = None
    magnitude: float


class ValidatedOutlier(BaseModel):

    timestamp: int
    score: float
    outliers: List[OutlierDetail] = Field(default_factory=list)
    timeseries_snapshot: Dict[str, List[float]] = Field(default_factory=dict)

    @property
    def analyzers(self) -> List[str]:
        return sorted({o.analyzer for o in self.outliers})


class AnalysisReport(BaseModel):

    name: str = ""
    resolution: int
    active_analyzers: int
    timed_out_analyzers: List[str] = Field(default_factory=list)
    failed_analyzers: List[str] = Field(default_factory=list)
    outliers: List[ValidatedOutlier] = Field(default_factory=list)
