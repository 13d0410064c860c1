"""
Shared helper functions for data loaders.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from datasources.exceptions import DataSourceUnavailable, InvalidDocument, QueryTimeout


def fetch_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 30,
    transport: Optional[httpx.BaseTransport] = None,
) -> Any:
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            resp = client.get(url, params=params, headers=headers)
            resp.raise_for_status()
            return resp.json()
    except httpx.HTTPStatusError as e:
        raise InvalidDocument(f"sample request failed [{e.response.status_code}]: {e.response.text}") from e
    except httpx.TimeoutException as e:
        raise QueryTimeout(f"sample request to {url} timed out") from e
    except httpx.RequestError as e:
        raise DataSourceUnavailable(f"Cannot reach data source at {url}") from e
    except ValueError as e:
        raise InvalidDocument(f"{url} did not return JSON: {e}") from e
