"""
Data loader reading one JSON sample document from disk.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Mapping, Optional, Union

from datasources.base import DataLoader
from datasources.document import SampleDocument, parse_document
from datasources.exceptions import DataSourceUnavailable, InvalidDocument


class JsonFileLoader(DataLoader):
    def __init__(self, path: Union[str, Path]) -> None:
        super().__init__()
        self.path = Path(path)
        self._document: Optional[SampleDocument] = None

    @property
    def document(self) -> SampleDocument:
        if self._document is None:
            try:
                text = self.path.read_text(encoding="utf-8")
            except OSError as e:
                raise DataSourceUnavailable(f"cannot read sample document {self.path}: {e}") from e
            try:
                raw = json.loads(text)
            except json.JSONDecodeError as e:
                raise InvalidDocument(f"{self.path} is not valid JSON: {e}") from e
            self._document = parse_document(raw)
        return self._document

    def load_settings(self) -> Mapping[str, str]:
        return self.document.settings

    def load_raw_samples(self) -> Mapping[str, Mapping[str, str]]:
        return self.document.series

    def load_expected_error_timestamps(self) -> List[int]:
        return list(self.document.expected_errors)
