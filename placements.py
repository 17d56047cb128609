# placements.py
# Placement legality for a transformed shape + generation of exact-fit placements

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from board import BOARD_COLS, BOARD_ROWS, Grid, Position
from config import config
from pieces import Matrix, Orientation, matrix_cells


def footprint(matrix: Matrix, anchor: Position) -> list[Position]:
    """Board positions covered by ``matrix`` with its top-left at ``anchor``."""
    ar, ac = anchor
    return [(ar + r, ac + c) for r, c in matrix_cells(matrix)]


def validate(
    matrix: Matrix,
    anchor: Position,
    grid: Grid,
    min_ratio: float | None = None,
) -> bool:
    """Can a piece with this shape rest at ``anchor``?

    A sub-cell on a blocked or target cell rejects the placement outright.
    Otherwise the piece may hang off the board as long as at least
    ``min_ratio`` of its cells land on it (``config.MIN_AREA_RATIO``
    unless given). Other pieces are not consulted:
    overlapping placements are allowed.
    """
    if min_ratio is None:
        min_ratio = config.MIN_AREA_RATIO
    total = 0
    valid = 0
    for pos in footprint(matrix, anchor):
        total += 1
        if not grid.is_in_bounds(pos):
            continue
        if grid.is_forbidden(pos):
            return False
        valid += 1

    if total == 0:
        return False
    return valid / total >= min_ratio


def fits_strictly(matrix: Matrix, anchor: Position, grid: Grid) -> bool:
    """Every sub-cell on the board and off blocked/target cells."""
    return all(
        grid.is_in_bounds(pos) and not grid.is_forbidden(pos)
        for pos in footprint(matrix, anchor)
    )


def occupied_cells(matrix: Matrix, anchor: Position, grid: Grid) -> tuple[Position, ...]:
    """The part of the footprint that actually lands on the board."""
    return tuple(pos for pos in footprint(matrix, anchor) if grid.is_in_bounds(pos))


def valid_anchors(matrix: Matrix, grid: Grid) -> list[Position]:
    return [pos for pos in grid.positions() if validate(matrix, pos, grid)]


@dataclass(frozen=True)
class Placement:
    piece: str
    anchor: Position
    orientation: Orientation
    cells: tuple[Position, ...]  # board coordinates covered by this placement


def generate_placements(
    playable_cells: set[Position],
    piece_orientations: dict[str, list[Orientation]],
) -> list[Placement]:
    """Every placement of every piece that lies entirely inside ``playable_cells``."""
    placements: list[Placement] = []

    for piece_id, orientations in piece_orientations.items():
        for orientation in orientations:
            offsets = matrix_cells(orientation.matrix)
            height = len(orientation.matrix)
            width = len(orientation.matrix[0])

            # Slide the bounding box over the 8x7 board
            for dr in range(BOARD_ROWS - height + 1):
                for dc in range(BOARD_COLS - width + 1):
                    placed = {(r + dr, c + dc) for r, c in offsets}
                    if placed.issubset(playable_cells):
                        placements.append(
                            Placement(
                                piece=piece_id,
                                anchor=(dr, dc),
                                orientation=orientation,
                                cells=tuple(sorted(placed)),
                            )
                        )

    return placements


def placements_by_piece(placements: Iterable[Placement]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for p in placements:
        counts[p.piece] = counts.get(p.piece, 0) + 1
    return counts
