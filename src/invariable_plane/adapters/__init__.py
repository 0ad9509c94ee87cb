# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Adapters for body-table input and preset export.

External dependencies (json, csv, file I/O) are confined to this layer.
"""
from invariable_plane.adapters.json_io import JsonBodyTableReader, JsonPresetExporter
from invariable_plane.adapters.csv_exporter import CsvPresetExporter

__all__ = [
    "JsonBodyTableReader",
    "JsonPresetExporter",
    "CsvPresetExporter",
]
