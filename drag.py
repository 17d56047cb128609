# drag.py
# Snapping a free-floating dragged piece to a board cell

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum

from board import Position, is_in_bounds
from config import BoardGeometry, config
from pieces import Matrix
from placements import footprint

LOGGER = logging.getLogger(__name__)

Point = tuple[float, float]  # (x, y) in canvas pixels

# Base cell first so that, on a tie, the cell under the anchor wins.
_NEIGHBOUR_STEPS = (0, -1, 1)


class DropZone(Enum):
    BOARD = "board"
    LEFT_STORAGE = "left-storage"
    RIGHT_STORAGE = "right-storage"
    NONE = "none"


def float_anchor(pointer: Point, offset: Point, geometry: BoardGeometry | None = None) -> tuple[float, float]:
    """Continuous (row, col) of the dragged piece's top-left corner."""
    geometry = geometry or config.BOARD
    x, y = pointer
    dx, dy = offset
    ox, oy = geometry.origin
    float_col = (x - dx - ox) / geometry.tile_size
    float_row = (y - dy - oy) / geometry.tile_size
    return float_row, float_col


def candidate_score(float_row: float, float_col: float, row: int, col: int) -> float:
    """Overlap area between a unit tile at the float position and cell (row, col)."""
    return max(0.0, 1 - abs(float_col - col)) * max(0.0, 1 - abs(float_row - row))


def best_candidate(float_row: float, float_col: float) -> Position:
    base_row = math.floor(float_row)
    base_col = math.floor(float_col)
    best = (base_row, base_col)
    best_score = -1.0
    for dr in _NEIGHBOUR_STEPS:
        for dc in _NEIGHBOUR_STEPS:
            row, col = base_row + dr, base_col + dc
            score = candidate_score(float_row, float_col, row, col)
            if score > best_score:
                best, best_score = (row, col), score
    return best


def resolve_drop_cell(
    pointer: Point,
    offset: Point,
    matrix: Matrix,
    previous_snap: Position | None = None,
    geometry: BoardGeometry | None = None,
) -> Position | None:
    """Anchor cell the dragged piece snaps to, or None when it is entirely off the board.

    The choice depends only on the pointer, not on the piece's footprint; the
    footprint is used solely to decide whether anything would land on the board.
    """
    float_row, float_col = float_anchor(pointer, offset, geometry)
    snap: Position | None = best_candidate(float_row, float_col)
    if not any(is_in_bounds(pos) for pos in footprint(matrix, snap)):
        snap = None
    if snap != previous_snap:
        LOGGER.debug("snap %s -> %s (float %.2f, %.2f)", previous_snap, snap, float_row, float_col)
    return snap


@dataclass
class DragSession:
    """Lives from drag start to drag end; never touches the ledger itself."""

    piece_id: str
    offset: Point
    origin: DropZone | None = None  # storage the piece came from, if any
    pointer: Point | None = None
    candidate: Position | None = None
    valid: bool = False
    preview_cells: list[Position] = field(default_factory=list)
