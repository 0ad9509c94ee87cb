# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Port interface for search result export.

Adapters implement this to write balance presets in various formats
(JSON, CSV).
"""
from typing import Protocol, runtime_checkable

from invariable_plane.domain.balance_search import SearchOutcome


@runtime_checkable
class ResultExporter(Protocol):
    """Port for exporting search results to file."""

    def export(self, outcome: SearchOutcome, path: str) -> int:
        """
        Export the sorted search results to a file.

        Args:
            outcome: Completed search outcome.
            path: Output file path.

        Returns:
            Number of presets exported.
        """
        ...
