"""
Data loader fetching one JSON sample document over HTTP.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional

import httpx

from datasources.base import DataLoader
from datasources.document import SampleDocument, parse_document
from datasources.helpers import fetch_json


class HttpJsonLoader(DataLoader):
    def __init__(
        self,
        url: str,
        timeout: float = 30,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        super().__init__()
        self.url = url
        self.timeout = timeout
        self.headers = headers or {}
        self._transport = transport
        self._document: Optional[SampleDocument] = None

    @property
    def document(self) -> SampleDocument:
        if self._document is None:
            raw = fetch_json(self.url, headers=self.headers, timeout=self.timeout, transport=self._transport)
            self._document = parse_document(raw)
        return self._document

    def load_settings(self) -> Mapping[str, str]:
        return self.document.settings

    def load_raw_samples(self) -> Mapping[str, Mapping[str, str]]:
        return self.document.series

    def load_expected_error_timestamps(self) -> List[int]:
        return list(self.document.expected_errors)
