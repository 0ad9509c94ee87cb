# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
CSV preset exporter.

Exports sorted search results as CSV, one configuration per row.
External dependencies (csv, file I/O) are confined to this adapter.
"""
import csv
import logging

from invariable_plane.domain.balance_search import SearchOutcome
from invariable_plane.ports.export import ResultExporter

logger = logging.getLogger(__name__)

_TRAILER = ['all_pass', 'fail_count']


class CsvPresetExporter(ResultExporter):
    """Exports search results to CSV with the outcome's column schema."""

    def export(self, outcome: SearchOutcome, path: str) -> int:
        with open(path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(list(outcome.columns) + _TRAILER)
            for result, row in zip(outcome.results, outcome.rows()):
                scenario, balance, *cells = row
                writer.writerow([
                    scenario,
                    f'{balance:.6f}',
                    *cells,
                    str(result.evaluation.all_pass).lower(),
                    result.evaluation.fail_count,
                ])
        logger.info("Wrote %d presets to %s", len(outcome.results), path)
        return len(outcome.results)
