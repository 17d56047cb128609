# win.py
# Solved-board check

from __future__ import annotations

from board import DateTarget, Grid, Position
from ledger import Ledger


def uncovered_cells(ledger: Ledger, grid: Grid) -> set[Position]:
    """Fillable cells no piece covers yet."""
    return grid.fillable_cells() - ledger.occupancy.keys()


def is_solved(ledger: Ledger, target: DateTarget, grid: Grid) -> bool:
    """True iff the three target cells are empty and every other usable cell is covered."""
    if any(pos in ledger.occupancy for pos in target.cells):
        return False
    for pos in grid.positions():
        if grid.is_blocked(pos) or pos in target:
            continue
        if pos not in ledger.occupancy:
            return False
    return True
