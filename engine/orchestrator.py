"""
Orchestrator dispatching analyzers over the prepared series, in parallel on a bounded worker pool or sequentially, and merging their findings into the shared outlier and inlier lists.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional

from engine.analyzers.base import Analyzer, AnalyzerResult, Inlier, Outlier
from engine.context import RunConfig
from engine.series import Series

log = logging.getLogger(__name__)


@dataclass
class RunOutcome:
    active: int = 0
    timed_out: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.timed_out and not self.failed


class Orchestrator:
    def __init__(self, context: RunConfig, series_map: Mapping[str, Series]) -> None:
        self.context = context
        self.series_map = series_map
        self.outliers: List[Outlier] = []
        self.inliers: List[Inlier] = []
        self.outcome = RunOutcome()
        self._lock = threading.Lock()

    @property
    def active_analyzers(self) -> int:
        return self.outcome.active

    def _reset(self) -> None:
        with self._lock:
            self.outliers = []
            self.inliers = []
            self.outcome = RunOutcome()

    def _merge(self, analyzer: Analyzer, result: AnalyzerResult) -> None:
        if not result.active:
            log.debug("analyzer %s produced no verdict", analyzer.name)
            return
        with self._lock:
            self.outcome.active += 1
            self.outliers.extend(result.outliers)
            self.inliers.extend(result.inliers)

    def _fail(self, analyzer: Analyzer, exc: BaseException) -> None:
        log.error("analyzer %s failed: %s", analyzer.name, exc, exc_info=exc)
        with self._lock:
            self.outcome.failed.append(analyzer.name)

    def _finish(self) -> List[Outlier]:
        if self.outcome.active < 1:
            log.error("no analyzers were taken into account")
        return self.outliers

    def run(self, analyzers: Iterable[Analyzer], concurrency: Optional[int] = None) -> List[Outlier]:
        """Run every analyzer; concurrency 0 runs them in the calling thread.

        Must not be called from inside a running event loop, use run_async there.
        """
        if concurrency is None:
            concurrency = self.context.concurrency
        if concurrency == 0:
            return self.run_sequential(analyzers)
        return asyncio.run(self.run_async(analyzers, concurrency))

    def run_sequential(self, analyzers: Iterable[Analyzer]) -> List[Outlier]:
        self._reset()
        for analyzer in analyzers:
            try:
                result = analyzer.analyze(self.context, self.series_map)
            except Exception as exc:
                self._fail(analyzer, exc)
                continue
            self._merge(analyzer, result)
        return self._finish()

    async def run_async(self, analyzers: Iterable[Analyzer], concurrency: Optional[int] = None) -> List[Outlier]:
        if concurrency is None:
            concurrency = self.context.concurrency
        if concurrency == 0:
            return self.run_sequential(analyzers)
        self._reset()
        analyzers = list(analyzers)
        if not analyzers:
            return self._finish()

        workers = concurrency or len(analyzers)
        loop = asyncio.get_running_loop()
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="analyzer")
        try:
            futures = [
                loop.run_in_executor(executor, analyzer.analyze, self.context, self.series_map)
                for analyzer in analyzers
            ]
            done, _ = await asyncio.wait(futures, timeout=self.context.deadline_seconds)
        finally:
            # running analyzers cannot be interrupted; their results are dropped
            executor.shutdown(wait=False, cancel_futures=True)

        for analyzer, future in zip(analyzers, futures):
            if future not in done:
                future.cancel()
                log.warning(
                    "analyzer %s did not finish within %.0fs, its results are discarded",
                    analyzer.name, self.context.deadline_seconds,
                )
                with self._lock:
                    self.outcome.timed_out.append(analyzer.name)
                continue
            exc = future.exception()
            if exc is not None:
                self._fail(analyzer, exc)
                continue
            self._merge(analyzer, future.result())
        return self._finish()
