# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Port interfaces for body-table input.

Adapters implement these to handle different file formats.
"""
from abc import ABC, abstractmethod

from invariable_plane.domain.bodies import BodyTable


class BodyTableReader(ABC):
    """Port for reading a body table and its reference plane."""

    @abstractmethod
    def read_body_table(self, path: str) -> BodyTable:
        """Read and parse a body-table file."""
        ...
