# pieces.py
# Piece definitions + rotations/flips

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable

from errors import UnknownPiece

# Row-major occupancy matrix, True = the piece covers that sub-cell
Matrix = tuple[tuple[bool, ...], ...]

ROTATIONS = (0, 90, 180, 270)


def _matrix(*rows: str) -> Matrix:
    # "#" covers a sub-cell, "." leaves it empty
    return tuple(tuple(ch == "#" for ch in row) for row in rows)


@dataclass(frozen=True)
class ShapeDefinition:
    id: str
    name: str
    matrix: Matrix
    color: str

    @property
    def height(self) -> int:
        return len(self.matrix)

    @property
    def width(self) -> int:
        return len(self.matrix[0]) if self.matrix else 0

    @property
    def size(self) -> int:
        return cell_count(self.matrix)


# Canonical pieces, 47 cells in total (56 board cells - 6 blocked - 3 targets)
PIECES: dict[str, ShapeDefinition] = {
    shape.id: shape
    for shape in (
        ShapeDefinition("L1", "L (medium)", _matrix("#.", "#.", "##"), "#FF6B6B"),
        ShapeDefinition("L2", "L (small, foot right)", _matrix("#.", "##"), "#4ECDC4"),
        ShapeDefinition("L3", "L (small, cap right)", _matrix("##", "#."), "#45B7D1"),
        ShapeDefinition("I1", "I (long)", _matrix("#####"), "#96CEB4"),
        ShapeDefinition("I2", "I (medium)", _matrix("####"), "#FFEAA7"),
        ShapeDefinition("I3", "I (short)", _matrix("###"), "#DDA0DD"),
        ShapeDefinition("I4", "I (two)", _matrix("##"), "#98D8C8"),
        ShapeDefinition("T1", "T (plus)", _matrix(".#.", "###", ".#."), "#F7DC6F"),
        ShapeDefinition("T2", "T (small)", _matrix(".#.", "###"), "#AED6F1"),
        ShapeDefinition("Z1", "Z (standard)", _matrix("##.", ".##"), "#F1948A"),
        ShapeDefinition("Z2", "Z (small)", _matrix("##", ".#"), "#85C1E9"),
        ShapeDefinition("P1", "Square", _matrix("##", "##"), "#F8C471"),
        ShapeDefinition("O1", "Single", _matrix("#"), "#D7DBDD"),
        ShapeDefinition("S1", "Domino", _matrix("##"), "#C39BD3"),
    )
}


def shape_of(piece_id: str) -> ShapeDefinition:
    try:
        return PIECES[piece_id]
    except KeyError:
        raise UnknownPiece(piece_id) from None


def cell_count(matrix: Matrix) -> int:
    return sum(1 for row in matrix for filled in row if filled)


def matrix_cells(matrix: Matrix) -> list[tuple[int, int]]:
    """Offsets (r, c) of the covered sub-cells, in row-major order."""
    return [(r, c) for r, row in enumerate(matrix) for c, filled in enumerate(row) if filled]


def _rotate90(matrix: Matrix) -> Matrix:
    # R x C -> C x R, result[c][R-1-r] = matrix[r][c]
    rows = len(matrix)
    cols = len(matrix[0])
    return tuple(tuple(matrix[rows - 1 - k][j] for k in range(rows)) for j in range(cols))


def _flip_horizontal(matrix: Matrix) -> Matrix:
    return tuple(tuple(reversed(row)) for row in matrix)


def _flip_vertical(matrix: Matrix) -> Matrix:
    return tuple(reversed(matrix))


@lru_cache(maxsize=None)
def transform_matrix(matrix: Matrix, rotation: int, flip_h: bool = False, flip_v: bool = False) -> Matrix:
    """Apply flips first, then ``rotation // 90`` clockwise quarter turns."""
    if rotation not in ROTATIONS:
        raise ValueError(f"rotation must be one of {ROTATIONS}, got {rotation}")
    if flip_h:
        matrix = _flip_horizontal(matrix)
    if flip_v:
        matrix = _flip_vertical(matrix)
    for _ in range(rotation // 90):
        matrix = _rotate90(matrix)
    return matrix


def transform(shape: ShapeDefinition, rotation: int, flip_h: bool = False, flip_v: bool = False) -> Matrix:
    return transform_matrix(shape.matrix, rotation, flip_h, flip_v)


def next_rotation(rotation: int) -> int:
    return (rotation + 90) % 360


@dataclass(frozen=True)
class Orientation:
    rotation: int
    flip_h: bool
    flip_v: bool
    matrix: Matrix


def generate_orientations(shape: ShapeDefinition) -> list[Orientation]:
    """All distinct rotations of the shape and of its mirror image.

    Vertical flips are redundant here: a vertical flip equals a horizontal flip
    followed by a half turn.
    """
    seen: set[Matrix] = set()
    result: list[Orientation] = []
    for flip_h in (False, True):
        for rotation in ROTATIONS:
            matrix = transform(shape, rotation, flip_h, False)
            if matrix not in seen:
                seen.add(matrix)
                result.append(Orientation(rotation, flip_h, False, matrix))
    return result


def all_piece_orientations(piece_ids: Iterable[str] | None = None) -> dict[str, list[Orientation]]:
    ids = PIECES.keys() if piece_ids is None else piece_ids
    return {piece_id: generate_orientations(shape_of(piece_id)) for piece_id in ids}
