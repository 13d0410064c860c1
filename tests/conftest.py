import os
import sys
from typing import Dict, List, Sequence

import numpy as np
import pytest

# ensure workspace root is on sys.path so our application packages can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from engine.series import Series

# aligned to every rollup resolution (60, 300, 900, 1800)
T0 = 1_699_999_200


def timestamps(count: int, resolution: int = 60, start: int = T0) -> List[int]:
    return [start + i * resolution for i in range(count)]


def raw_series(values: Sequence[float], resolution: int = 60, start: int = T0) -> Dict[str, str]:
    return {str(ts): repr(float(v)) for ts, v in zip(timestamps(len(values), resolution, start), values)}


def sinusoid(count: int, seed: int = 7) -> np.ndarray:
    rng = np.random.default_rng(seed)
    i = np.arange(count)
    return 100.0 + 10.0 * np.sin(2 * np.pi * i / 50.0) + rng.normal(0.0, 1.0, count)


@pytest.fixture
def make_series():
    def _make(
        values: Sequence[float],
        name: str = "requests",
        horizon: int = 10,
        resolution: int = 60,
        alert_over: bool = True,
        alert_under: bool = True,
    ) -> Series:
        data = dict(zip(timestamps(len(values), resolution), (float(v) for v in values)))
        return Series.from_data(name, data, horizon, resolution, alert_over, alert_under)

    return _make
