"""
Preparation pipeline for raw timestamped samples: bucketing, gap filling, auto-rollup, derived series and normalization.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.prepare.normalize import normalize_data, normalize_value
from engine.prepare.pipeline import (
    PreparedData,
    auto_normalize,
    auto_rollup,
    bucket,
    derive_error_rate,
    error_rate,
    fill_gaps,
    ingest,
    parse_samples,
    prepare,
)

__all__ = [
    "PreparedData",
    "auto_normalize",
    "auto_rollup",
    "bucket",
    "derive_error_rate",
    "error_rate",
    "fill_gaps",
    "ingest",
    "normalize_data",
    "normalize_value",
    "parse_samples",
    "prepare",
]
