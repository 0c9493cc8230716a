# -*- coding: utf-8 -*-
"""
Dedup guard: suppress reprocessing of the cell that was just previewed.
"""
from dataclasses import dataclass

from .cells import CellRef


def should_skip(candidate: CellRef, last: CellRef | None) -> bool:
    """True iff candidate is the same cell as the last completed preview."""
    return last is not None and last == candidate


@dataclass
class DedupGuard:
    """
    Remembers the last cell whose preview reached a terminal outcome.

    Only the pipeline marks it, and only once an attempt is fully resolved.
    Revisiting a cell after another one was previewed always re-runs.
    """

    last: CellRef | None = None

    def should_skip(self, candidate: CellRef) -> bool:
        return should_skip(candidate, self.last)

    def mark(self, cell: CellRef) -> None:
        self.last = cell

    def forget(self) -> None:
        self.last = None
