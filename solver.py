# solver.py
# Exact-cover search for a tiling of the cells a date leaves open

from __future__ import annotations

import datetime
import logging
from typing import Iterable, Iterator

from board import DateTarget, Grid, Position
from dlx import DLXSolver
from ledger import SnapshotEntry
from pieces import PIECES, all_piece_orientations, shape_of
from placements import Placement, generate_placements, placements_by_piece

LOGGER = logging.getLogger(__name__)

# Row selections before a hint search gives up
DEFAULT_SEARCH_LIMIT = 200_000


def build_exact_cover(
    free_cells: set[Position],
    piece_ids: Iterable[str],
) -> tuple[DLXSolver, list[Placement]]:
    # Columns: one per piece (each used exactly once), then one per free cell.
    piece_orients = all_piece_orientations(piece_ids)
    placements = generate_placements(free_cells, piece_orients)

    piece_names = sorted(piece_orients)
    piece_index = {name: idx for idx, name in enumerate(piece_names)}
    cell_index = {
        cell: len(piece_names) + i for i, cell in enumerate(sorted(free_cells))
    }

    solver = DLXSolver(len(piece_names) + len(cell_index))
    for row_id, placement in enumerate(placements):
        cols = [piece_index[placement.piece]]
        cols.extend(cell_index[c] for c in placement.cells)
        solver.add_row(row_id, cols)

    LOGGER.debug(
        "exact cover: %d pieces, %d cells, placements per piece %s",
        len(piece_names), len(cell_index), placements_by_piece(placements),
    )
    return solver, placements


def _to_entry(placement: Placement) -> SnapshotEntry:
    o = placement.orientation
    return SnapshotEntry(placement.piece, placement.anchor[0], placement.anchor[1], o.rotation, o.flip_h, o.flip_v)


def iter_solutions(
    free_cells: set[Position],
    piece_ids: Iterable[str],
    limit: int | None = None,
) -> Iterator[list[SnapshotEntry]]:
    piece_ids = list(piece_ids)
    if sum(shape_of(pid).size for pid in piece_ids) != len(free_cells):
        LOGGER.debug("pieces cannot cover %d cells exactly", len(free_cells))
        return

    solver, placements = build_exact_cover(free_cells, piece_ids)
    for row_ids in solver.solve(limit):
        yield sorted((_to_entry(placements[rid]) for rid in row_ids), key=lambda e: e.piece_id)
    if solver.aborted:
        LOGGER.info("solver gave up after %d tries", solver.updates)


def solve_board(
    grid: Grid,
    occupied: Iterable[Position] = (),
    piece_ids: Iterable[str] | None = None,
    limit: int | None = DEFAULT_SEARCH_LIMIT,
) -> list[SnapshotEntry] | None:
    """One way to finish the board, given cells already covered and the pieces left."""
    free = grid.fillable_cells() - set(occupied)
    ids = list(PIECES) if piece_ids is None else list(piece_ids)
    return next(iter_solutions(free, ids, limit), None)


def solve_for_target(target: DateTarget, limit: int | None = None) -> list[SnapshotEntry] | None:
    return solve_board(Grid(target), limit=limit)


def solve_for_date(when: datetime.date) -> list[SnapshotEntry] | None:
    return solve_board(Grid.for_date(when), limit=None)
