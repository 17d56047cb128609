# ledger.py
# Piece runtime state, placed-piece ledger and the derived board occupancy

from __future__ import annotations

import copy
import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Iterable, Mapping

from board import Grid, Position
from errors import (
    AlreadyPlaced,
    FlipRejected,
    InvalidPlacement,
    NotPlaced,
    PlacementError,
    RotationRejected,
    SnapshotError,
    UnknownPiece,
)
from pieces import PIECES, ROTATIONS, Matrix, ShapeDefinition, next_rotation, shape_of, transform
from placements import fits_strictly, occupied_cells, validate

LOGGER = logging.getLogger(__name__)


class CellState(str, Enum):
    EMPTY = "empty"
    OCCUPIED = "occupied"
    RESERVED = "reserved"  # one of today's targets, shown with its label
    BLOCKED = "blocked"


@dataclass
class PieceInstance:
    """Mutable per-game state of one catalog piece."""

    id: str
    rotation: int = 0
    flip_h: bool = False
    flip_v: bool = False
    placed: bool = False
    anchor: Position | None = None
    selected: bool = False
    dragging: bool = False

    @property
    def shape(self) -> ShapeDefinition:
        return shape_of(self.id)

    def matrix(self) -> Matrix:
        return transform(self.shape, self.rotation, self.flip_h, self.flip_v)


@dataclass(frozen=True)
class PlacedPiece:
    piece_id: str
    anchor: Position
    rotation: int
    flip_h: bool
    flip_v: bool
    cells: tuple[Position, ...]
    stack_index: int


@dataclass(frozen=True)
class SnapshotEntry:
    piece_id: str
    anchor_row: int
    anchor_col: int
    rotation: int = 0
    flip_h: bool = False
    flip_v: bool = False

    _KEYS = {
        "piece_id": "pieceId",
        "anchor_row": "anchorRow",
        "anchor_col": "anchorCol",
        "rotation": "rotation",
        "flip_h": "flipH",
        "flip_v": "flipV",
    }

    @property
    def anchor(self) -> Position:
        return (self.anchor_row, self.anchor_col)

    def to_dict(self) -> dict[str, Any]:
        return {self._KEYS[k]: v for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SnapshotEntry:
        try:
            entry = cls(
                piece_id=str(data["pieceId"]),
                anchor_row=int(data["anchorRow"]),
                anchor_col=int(data["anchorCol"]),
                rotation=int(data.get("rotation", 0)),
                flip_h=bool(data.get("flipH", False)),
                flip_v=bool(data.get("flipV", False)),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise SnapshotError(f"malformed snapshot entry {dict(data)!r}: {exc}") from exc
        if entry.rotation not in ROTATIONS:
            raise SnapshotError(f"rotation {entry.rotation} not in {ROTATIONS}")
        if entry.piece_id not in PIECES:
            raise SnapshotError(f"unknown piece {entry.piece_id!r}")
        return entry


class Ledger:
    """Which pieces are on the board, where, and in which stacking order.

    Occupancy is never patched: after every mutation it is rebuilt by stamping
    the placed pieces in ascending stack order, so on a shared cell the piece
    placed last wins.
    """

    def __init__(self, grid: Grid, piece_ids: Iterable[str] | None = None):
        self.grid = grid
        ids = list(PIECES) if piece_ids is None else list(piece_ids)
        for piece_id in ids:
            shape_of(piece_id)
        self.pieces: dict[str, PieceInstance] = {pid: PieceInstance(pid) for pid in ids}
        self._placed: dict[str, PlacedPiece] = {}
        self._last_stack_index = 0
        self.occupancy: dict[Position, str] = {}

    # -- queries -----------------------------------------------------------

    def piece(self, piece_id: str) -> PieceInstance:
        try:
            return self.pieces[piece_id]
        except KeyError:
            raise UnknownPiece(piece_id) from None

    def placed_pieces(self) -> list[PlacedPiece]:
        return sorted(self._placed.values(), key=lambda p: p.stack_index)

    def placed(self, piece_id: str) -> PlacedPiece | None:
        return self._placed.get(piece_id)

    def is_placed(self, piece_id: str) -> bool:
        return piece_id in self._placed

    def unplaced_ids(self) -> list[str]:
        return [pid for pid in self.pieces if pid not in self._placed]

    def piece_at(self, pos: Position) -> str | None:
        return self.occupancy.get(pos)

    def cell_state(self, pos: Position) -> CellState:
        if self.grid.is_blocked(pos):
            return CellState.BLOCKED
        if pos in self.occupancy:
            return CellState.OCCUPIED
        if self.grid.is_target(pos):
            return CellState.RESERVED
        return CellState.EMPTY

    def coverage(self) -> dict[Position, list[str]]:
        """Every covered cell with all pieces on it, bottom to top."""
        cover: dict[Position, list[str]] = {}
        for placed in self.placed_pieces():
            for pos in placed.cells:
                cover.setdefault(pos, []).append(placed.piece_id)
        return cover

    def contended_cells(self) -> set[Position]:
        return {pos for pos, ids in self.coverage().items() if len(ids) >= 2}

    def conflicting_pieces(self) -> set[str]:
        return {pid for ids in self.coverage().values() if len(ids) >= 2 for pid in ids}

    def is_in_conflict(self, piece_id: str) -> bool:
        return piece_id in self.conflicting_pieces()

    # -- mutations ---------------------------------------------------------

    def place(self, piece_id: str, anchor: Position) -> PlacedPiece:
        piece = self.piece(piece_id)
        if piece.placed:
            raise AlreadyPlaced(piece_id, f"{piece_id} is already on the board")

        matrix = piece.matrix()
        if not validate(matrix, anchor, self.grid):
            raise InvalidPlacement(piece_id, f"{piece_id} cannot rest at {anchor}")

        self._last_stack_index += 1
        record = PlacedPiece(
            piece_id=piece_id,
            anchor=anchor,
            rotation=piece.rotation,
            flip_h=piece.flip_h,
            flip_v=piece.flip_v,
            cells=occupied_cells(matrix, anchor, self.grid),
            stack_index=self._last_stack_index,
        )
        self._placed[piece_id] = record
        piece.placed = True
        piece.anchor = anchor
        piece.dragging = False
        piece.selected = False
        self._rebuild()
        LOGGER.info("placed %s at %s (stack %d)", piece_id, anchor, record.stack_index)
        return record

    def place_entry(self, entry: SnapshotEntry) -> PlacedPiece:
        """Give an off-board piece the entry's transform and place it at the entry's anchor."""
        piece = self.piece(entry.piece_id)
        if piece.placed:
            raise AlreadyPlaced(entry.piece_id, f"{entry.piece_id} is already on the board")
        previous = (piece.rotation, piece.flip_h, piece.flip_v)
        piece.rotation, piece.flip_h, piece.flip_v = entry.rotation, entry.flip_h, entry.flip_v
        try:
            return self.place(entry.piece_id, entry.anchor)
        except PlacementError:
            piece.rotation, piece.flip_h, piece.flip_v = previous
            raise

    def restore(self, record: PlacedPiece) -> None:
        """Put a placed piece back exactly as ``record`` describes, stack index included."""
        piece = self.piece(record.piece_id)
        if not piece.placed:
            raise NotPlaced(record.piece_id, f"{record.piece_id} is not on the board")
        piece.rotation, piece.flip_h, piece.flip_v = record.rotation, record.flip_h, record.flip_v
        piece.anchor = record.anchor
        self._placed[record.piece_id] = record
        self._rebuild()

    def remove(self, piece_id: str) -> PlacedPiece:
        piece = self.piece(piece_id)
        record = self._placed.pop(piece_id, None)
        if record is None:
            raise NotPlaced(piece_id, f"{piece_id} is not on the board")
        piece.placed = False
        piece.anchor = None
        self._rebuild()
        LOGGER.info("removed %s from %s", piece_id, record.anchor)
        return record

    def move(self, piece_id: str, anchor: Position) -> PlacedPiece:
        """Re-place a piece that is already on the board; it ends up on top."""
        piece = self.piece(piece_id)
        if not piece.placed:
            raise NotPlaced(piece_id, f"{piece_id} is not on the board")
        if not validate(piece.matrix(), anchor, self.grid):
            raise InvalidPlacement(piece_id, f"{piece_id} cannot rest at {anchor}")
        self.remove(piece_id)
        return self.place(piece_id, anchor)

    def rotate(self, piece_id: str) -> None:
        piece = self.piece(piece_id)
        self._retransform(piece, next_rotation(piece.rotation), piece.flip_h, piece.flip_v, RotationRejected)

    def flip_horizontal(self, piece_id: str) -> None:
        piece = self.piece(piece_id)
        self._retransform(piece, piece.rotation, not piece.flip_h, piece.flip_v, FlipRejected)

    def flip_vertical(self, piece_id: str) -> None:
        piece = self.piece(piece_id)
        self._retransform(piece, piece.rotation, piece.flip_h, not piece.flip_v, FlipRejected)

    def _retransform(
        self,
        piece: PieceInstance,
        rotation: int,
        flip_h: bool,
        flip_v: bool,
        error: type[PlacementError],
    ) -> None:
        record = self._placed.get(piece.id)
        if record is None:
            piece.rotation, piece.flip_h, piece.flip_v = rotation, flip_h, flip_v
            return

        # A placed piece keeps its anchor and must stay fully on usable cells.
        matrix = transform(piece.shape, rotation, flip_h, flip_v)
        if not fits_strictly(matrix, record.anchor, self.grid):
            raise error(piece.id, f"{piece.id} would leave the board or cover a target at {record.anchor}")

        piece.rotation, piece.flip_h, piece.flip_v = rotation, flip_h, flip_v
        self._placed[piece.id] = PlacedPiece(
            piece_id=piece.id,
            anchor=record.anchor,
            rotation=rotation,
            flip_h=flip_h,
            flip_v=flip_v,
            cells=occupied_cells(matrix, record.anchor, self.grid),
            stack_index=record.stack_index,
        )
        self._rebuild()

    def reset(self) -> None:
        for piece_id in self.pieces:
            self.pieces[piece_id] = PieceInstance(piece_id)
        self._placed.clear()
        self._last_stack_index = 0
        self._rebuild()

    def _rebuild(self) -> None:
        occupancy: dict[Position, str] = {}
        for placed in self.placed_pieces():
            for pos in placed.cells:
                occupancy[pos] = placed.piece_id
        self.occupancy = occupancy
        LOGGER.debug("occupancy rebuilt: %d pieces, %d cells", len(self._placed), len(occupancy))

    # -- snapshots ---------------------------------------------------------

    def snapshot(self) -> list[SnapshotEntry]:
        return [
            SnapshotEntry(p.piece_id, p.anchor[0], p.anchor[1], p.rotation, p.flip_h, p.flip_v)
            for p in self.placed_pieces()
        ]

    def apply_snapshot(self, entries: Iterable[SnapshotEntry]) -> None:
        """Clear the board and replay ``entries`` as placements, in order.

        All or nothing: if any entry cannot be placed the previous state is
        restored and the error is re-raised.
        """
        saved = (copy.deepcopy(self.pieces), dict(self._placed), self._last_stack_index)
        try:
            self.reset()
            for entry in entries:
                self.place_entry(entry)
        except Exception:
            self.pieces, self._placed, self._last_stack_index = saved
            self._rebuild()
            raise
        LOGGER.info("snapshot applied: %d pieces", len(self._placed))
