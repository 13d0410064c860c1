"""
Base data loader wiring the host application's data hooks (settings, raw samples, expected anomalies, log sink) to the preparation pipeline, the analyzer orchestrator and the consensus validator.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Mapping, Optional

from api.responses import AnalysisReport, ValidatedOutlier
from config import settings
from engine.analyzers import Analyzer, Outlier, default_analyzers
from engine.consensus import validate as consensus_validate
from engine.context import RunConfig
from engine.enums import LogSeverity
from engine.orchestrator import Orchestrator
from engine.prepare import PreparedData, bucket, prepare
from engine.series import Series


class DataLoader(ABC):

    def __init__(self) -> None:
        self.config: Optional[RunConfig] = None
        self.prepared: Optional[PreparedData] = None
        self.expected_errors: List[int] = []
        self.analyzers: List[Analyzer] = []
        self._orchestrator: Optional[Orchestrator] = None
        # overrides settings.log_level for this loader only
        self.log_level: Optional[str] = None

    @abstractmethod
    def load_settings(self) -> Mapping[str, str]: ...

    @abstractmethod
    def load_raw_samples(self) -> Mapping[str, Mapping[str, str]]: ...

    @abstractmethod
    def load_expected_error_timestamps(self) -> List[int]: ...

    def log(self, severity: LogSeverity | str, component: str, message: str) -> None:
        """Log sink; messages below the configured threshold are dropped."""
        severity = LogSeverity(severity)
        threshold = LogSeverity(self.log_level or settings.log_level).level()
        if severity.level() < threshold:
            return
        name = self.config.name if self.config else ""
        logging.getLogger(f"datasources.{component}").log(severity.level(), "[%s] %s", name, message)

    @property
    def series(self) -> Dict[str, Series]:
        if self.prepared is None:
            return {}
        return self.prepared.series

    @property
    def resolution(self) -> int:
        if self.prepared is not None:
            return self.prepared.resolution
        return self.config.resolution if self.config else settings.resolution

    def load(self) -> PreparedData:
        component = type(self).__name__
        self.config = RunConfig.from_mapping(self.load_settings())

        raw = self.load_raw_samples()
        self.log(LogSeverity.debug, component, f"loaded {len(raw)} raw series")
        self.prepared = prepare(raw, self.config)
        self.log(
            LogSeverity.debug, component,
            f"prepared {sorted(self.prepared.series)} at {self.prepared.resolution}s resolution",
        )

        # known anomalies are compared per bucket of the effective resolution
        self.expected_errors = list(dict.fromkeys(
            bucket(int(ts), self.prepared.resolution) for ts in self.load_expected_error_timestamps()
        ))
        self.log(LogSeverity.debug, component, f"expected errors {self.expected_errors}")
        return self.prepared

    def analyze(
        self,
        analyzers: Optional[Iterable[Analyzer]] = None,
        concurrency: Optional[int] = None,
    ) -> List[Outlier]:
        if self.prepared is None or self.config is None:
            self.load()
        self.analyzers = list(analyzers) if analyzers is not None else default_analyzers()
        self._orchestrator = Orchestrator(self.config, self.prepared.series)
        return self._orchestrator.run(self.analyzers, concurrency)

    def validate(self, min_score: Optional[float] = None) -> List[ValidatedOutlier]:
        if self._orchestrator is None:
            return []
        return consensus_validate(
            self._orchestrator.outliers,
            self._orchestrator.inliers,
            self.analyzers,
            self.prepared.series,
            expected_errors=self.expected_errors,
            min_score=self.config.min_score if min_score is None else min_score,
            snapshot_points=self.config.snapshot_points,
        )

    def report(self, min_score: Optional[float] = None) -> AnalysisReport:
        outcome = self._orchestrator.outcome if self._orchestrator else None
        return AnalysisReport(
            name=self.config.name if self.config else "",
            resolution=self.resolution,
            active_analyzers=outcome.active if outcome else 0,
            timed_out_analyzers=list(outcome.timed_out) if outcome else [],
            failed_analyzers=list(outcome.failed) if outcome else [],
            outliers=self.validate(min_score),
        )
