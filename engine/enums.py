"""
Enumerations for Normalization Modes, Series States and Log Severities

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from enum import Enum

NOTICE = 25
logging.addLevelName(NOTICE, "NOTICE")

_SEVERITY_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "notice": NOTICE,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


class NormalizationMode(str, Enum):
    none = "none"
    log = "log"
    log10 = "log10"
    log1p = "log1p"
    sqrt = "sqrt"

    @classmethod
    def parse(cls, value: str | None) -> NormalizationMode | None:
        # unset means auto-detect, which is distinct from an explicit "none"
        if value is None:
            return None
        text = str(value).strip().lower()
        if not text or text == "auto":
            return None
        return cls(text)


class SeriesState(str, Enum):
    uninitialized = "uninitialized"
    raw = "raw"
    prepared = "prepared"


class LogSeverity(str, Enum):
    error = "error"
    warning = "warning"
    notice = "notice"
    info = "info"
    debug = "debug"

    def level(self) -> int:
        return _SEVERITY_LEVELS[self.value]
