"""
Data loaders supplying settings, raw samples and known anomalies to the detection engine.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from datasources.base import DataLoader
from datasources.http import HttpJsonLoader
from datasources.json_file import JsonFileLoader
from datasources.memory import StaticLoader

__all__ = ["DataLoader", "HttpJsonLoader", "JsonFileLoader", "StaticLoader"]
