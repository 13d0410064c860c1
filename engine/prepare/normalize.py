"""
Value normalization modes applied to series with a large dynamic range.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import math
import sys
from typing import Dict, Mapping

from engine.enums import NormalizationMode

# logarithms of anything below this map to 0 instead of -inf / domain errors
_SMALLEST_POSITIVE = sys.float_info.min


def normalize_value(mode: NormalizationMode | None, value: float) -> float:
    if mode is NormalizationMode.log:
        return 0.0 if value < _SMALLEST_POSITIVE else math.log(value)
    if mode is NormalizationMode.log10:
        return 0.0 if value < _SMALLEST_POSITIVE else math.log10(value)
    if mode is NormalizationMode.log1p:
        return 0.0 if value < _SMALLEST_POSITIVE else math.log1p(value)
    if mode is NormalizationMode.sqrt:
        return math.sqrt(value) if value > 0 else 0.0
    return value


def normalize_data(mode: NormalizationMode | None, data: Mapping[int, float]) -> Dict[int, float]:
    return {ts: normalize_value(mode, val) for ts, val in data.items()}
