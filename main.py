"""
Entry point for the Outlier Consensus command line: loads a sample document, runs the reference analyzers and prints the validated outliers as JSON.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from config import settings
from datasources import DataLoader, HttpJsonLoader, JsonFileLoader
from datasources.exceptions import DataSourceError
from engine.enums import LogSeverity
from engine.exceptions import DetectionError

log = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Consensus outlier detection over a batch of time series")
    parser.add_argument("source", help="Path or http(s) URL of a JSON sample document")
    parser.add_argument("--min-score", type=float, default=None, help="Minimum consensus score to report")
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Analyzer worker threads (0 runs analyzers sequentially)",
    )
    parser.add_argument("--timeout", type=float, default=30.0, help="HTTP timeout (seconds)")
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=[s.value for s in LogSeverity],
        help="Lowest severity to print",
    )
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation")
    return parser.parse_args(argv)


def _loader(source: str, timeout: float) -> DataLoader:
    if source.startswith(("http://", "https://")):
        return HttpJsonLoader(source, timeout=timeout)
    return JsonFileLoader(source)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=LogSeverity(args.log_level).level(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )

    loader = _loader(args.source, args.timeout)
    loader.log_level = args.log_level
    try:
        loader.load()
        loader.analyze(concurrency=args.concurrency)
        report = loader.report(min_score=args.min_score)
    except (DataSourceError, DetectionError) as exc:
        log.error("analysis aborted: %s", exc)
        return 2

    print(report.model_dump_json(indent=args.indent))
    return 0 if report.active_analyzers > 0 else 1


if __name__ == "__main__":
    sys.exit(main())
