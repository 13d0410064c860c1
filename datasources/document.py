"""
Sample document schema shared by the file and HTTP loaders: loader settings, raw series keyed by timestamp, and the known anomaly timestamps.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field, ValidationError, field_validator

from datasources.exceptions import InvalidDocument


class SampleDocument(BaseModel):
    settings: Dict[str, str] = Field(default_factory=dict)
    series: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    expected_errors: List[int] = Field(default_factory=list)

    @field_validator("settings", mode="before")
    @classmethod
    def stringify_settings(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {str(k): str(val) for k, val in v.items() if val is not None}
        return v

    @field_validator("series", mode="before")
    @classmethod
    def stringify_samples(cls, v: Any) -> Any:
        if not isinstance(v, dict):
            return v
        out: Dict[str, Any] = {}
        for name, samples in v.items():
            if isinstance(samples, dict):
                out[str(name)] = {str(ts): str(val) for ts, val in samples.items()}
            elif isinstance(samples, list):
                # [[ts, value], ...] pairs as returned by most metric stores
                out[str(name)] = {str(p[0]): str(p[1]) for p in samples if isinstance(p, (list, tuple)) and len(p) >= 2}
            else:
                out[str(name)] = samples
        return out


def parse_document(raw: Any) -> SampleDocument:
    if not isinstance(raw, dict):
        raise InvalidDocument(f"sample document must be an object, got {type(raw).__name__}")
    try:
        return SampleDocument.model_validate(raw)
    except ValidationError as e:
        raise InvalidDocument(f"invalid sample document: {e}") from e
