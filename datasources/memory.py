"""
In-memory data loader for hosts that already hold their samples, and for tests.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Iterable, List, Mapping, Optional

from datasources.base import DataLoader


class StaticLoader(DataLoader):
    def __init__(
        self,
        samples: Mapping[str, Mapping[str, str]],
        settings: Optional[Mapping[str, str]] = None,
        expected_errors: Iterable[int] = (),
    ) -> None:
        super().__init__()
        self._samples = samples
        self._settings = dict(settings or {})
        self._expected = list(expected_errors)

    def load_settings(self) -> Mapping[str, str]:
        return self._settings

    def load_raw_samples(self) -> Mapping[str, Mapping[str, str]]:
        return self._samples

    def load_expected_error_timestamps(self) -> List[int]:
        return list(self._expected)
