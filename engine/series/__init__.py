"""
Series store for the Outlier Consensus engine: one named, timestamp-ordered series with train/classify partitions and sanitized training statistics.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.series.stats import TrainStats, compute_stats, sanitize, sanitized_stats
from engine.series.timeseries import Series, split_point

__all__ = ["Series", "TrainStats", "compute_stats", "sanitize", "sanitized_stats", "split_point"]
