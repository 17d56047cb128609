# game.py
# One puzzle session: date, pieces, ledger, drag state, history and status

from __future__ import annotations

import datetime
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from board import DateTarget, Grid, Position
from config import BoardGeometry, config
from drag import DragSession, DropZone, Point, resolve_drop_cell
from errors import PlacementError
from ledger import Ledger, PlacedPiece, SnapshotEntry
from placements import footprint, valid_anchors, validate
from solver import solve_board
from ui_state import GameStatus, NoticeLevel, Notifications
from win import is_solved

LOGGER = logging.getLogger(__name__)


class MoveKind(str, Enum):
    PLACE = "place"
    REMOVE = "remove"
    MOVE = "move"
    ROTATE = "rotate"
    FLIP_H = "flip_h"
    FLIP_V = "flip_v"


@dataclass(frozen=True)
class GameMove:
    kind: MoveKind
    piece_id: str
    before: PlacedPiece | None  # ledger record before the move, None if off the board
    after: PlacedPiece | None
    timestamp: float

    @property
    def from_anchor(self) -> Position | None:
        return self.before.anchor if self.before else None

    @property
    def to_anchor(self) -> Position | None:
        return self.after.anchor if self.after else None


@dataclass
class GameStats:
    start_time: float
    move_count: int = 0
    hints_used: int = 0
    end_time: float | None = None

    def elapsed(self, now: float) -> float:
        end = self.end_time if self.end_time is not None else now
        return max(0.0, end - self.start_time)


class GameSession:
    """Single-writer owner of all mutable puzzle state.

    Board mutations go through the ledger; rejected ones are logged, turned
    into a warning notification and reported as ``False``.
    """

    def __init__(
        self,
        when: datetime.date | None = None,
        clock: Callable[[], float] = time.time,
        geometry: BoardGeometry | None = None,
    ):
        self._clock = clock
        self.geometry = geometry or config.BOARD
        self.notifications = Notifications()
        self.initialize_game(when)

    # -- lifecycle ---------------------------------------------------------

    def initialize_game(self, when: datetime.date | None = None) -> None:
        self.current_date = when or datetime.date.today()
        self.grid = Grid.for_date(self.current_date)
        self.ledger = Ledger(self.grid)
        self.selected_piece_id: str | None = None
        self.drag: DragSession | None = None
        self.stats = GameStats(start_time=self._clock())
        self.history: list[GameMove] = []
        self.status = GameStatus.MENU
        LOGGER.info("game initialised for %s, targets %s", self.current_date, self.target.cells)

    def start_new_game(self, when: datetime.date | None = None) -> None:
        self.initialize_game(when)
        self.status = GameStatus.PLAYING

    def reset_game(self) -> None:
        self.initialize_game(self.current_date)

    def pause_game(self) -> None:
        if self.status is GameStatus.PLAYING:
            self.status = GameStatus.PAUSED

    def resume_game(self) -> None:
        if self.status is GameStatus.PAUSED:
            self.status = GameStatus.PLAYING

    @property
    def target(self) -> DateTarget:
        return self.grid.target

    # -- selection ---------------------------------------------------------

    def select_piece(self, piece_id: str) -> None:
        self.ledger.piece(piece_id)
        for pid, piece in self.ledger.pieces.items():
            piece.selected = pid == piece_id
        self.selected_piece_id = piece_id

    def deselect_piece(self) -> None:
        for piece in self.ledger.pieces.values():
            piece.selected = False
        self.selected_piece_id = None

    # -- board mutations ---------------------------------------------------

    def place_piece(self, piece_id: str, anchor: Position) -> bool:
        try:
            after = self.ledger.place(piece_id, anchor)
        except PlacementError as exc:
            return self._rejected(exc, f"{piece_id} does not fit there")
        self.selected_piece_id = None
        self._record(MoveKind.PLACE, piece_id, None, after)
        self._sync_status()
        return True

    def remove_piece(self, piece_id: str) -> bool:
        try:
            before = self.ledger.remove(piece_id)
        except PlacementError as exc:
            return self._rejected(exc, f"{piece_id} is not on the board")
        self._record(MoveKind.REMOVE, piece_id, before, None)
        self._sync_status()
        return True

    def move_piece(self, piece_id: str, anchor: Position) -> bool:
        before = self.ledger.placed(piece_id)
        try:
            after = self.ledger.move(piece_id, anchor)
        except PlacementError as exc:
            return self._rejected(exc, f"{piece_id} does not fit there")
        self._record(MoveKind.MOVE, piece_id, before, after)
        self._sync_status()
        return True

    def rotate_piece(self, piece_id: str) -> bool:
        return self._transform(MoveKind.ROTATE, piece_id, self.ledger.rotate, "rotating")

    def flip_piece_horizontally(self, piece_id: str) -> bool:
        return self._transform(MoveKind.FLIP_H, piece_id, self.ledger.flip_horizontal, "flipping")

    def flip_piece_vertically(self, piece_id: str) -> bool:
        return self._transform(MoveKind.FLIP_V, piece_id, self.ledger.flip_vertical, "flipping")

    def _transform(self, kind: MoveKind, piece_id: str, op: Callable[[str], None], verb: str) -> bool:
        before = self.ledger.placed(piece_id)
        try:
            op(piece_id)
        except PlacementError as exc:
            return self._rejected(exc, f"{verb} {piece_id} would leave the board or cover a target")
        if before is not None:
            self._record(kind, piece_id, before, self.ledger.placed(piece_id))
            self._sync_status()
        return True

    def _record(self, kind: MoveKind, piece_id: str, before: PlacedPiece | None, after: PlacedPiece | None) -> None:
        self.history.append(GameMove(kind, piece_id, before, after, self._clock()))
        self.stats.move_count += 1

    def _rejected(self, exc: PlacementError, message: str) -> bool:
        LOGGER.warning("%s", exc)
        self.notifications.add(message, NoticeLevel.WARNING)
        return False

    def _sync_status(self) -> None:
        """Enter COMPLETED when the board becomes solved, leave it when it stops being solved."""
        solved = self.is_solved()
        if self.status is GameStatus.COMPLETED:
            if not solved:
                self.status = GameStatus.PLAYING
                self.stats.end_time = None
                LOGGER.info("board no longer solved, back to playing")
            return
        if solved:
            self.status = GameStatus.COMPLETED
            self.stats.end_time = self._clock()
            self.notifications.add("Puzzle solved!", NoticeLevel.SUCCESS)
            LOGGER.info(
                "solved %s in %d moves, %.1fs",
                self.current_date, self.stats.move_count, self.stats.elapsed(self.stats.end_time),
            )

    def is_solved(self) -> bool:
        return is_solved(self.ledger, self.target, self.grid)

    # -- undo --------------------------------------------------------------

    def undo_last_move(self) -> bool:
        if not self.history:
            return False
        move = self.history.pop()
        if move.kind is MoveKind.PLACE:
            self.ledger.remove(move.piece_id)
        elif move.kind is MoveKind.REMOVE:
            b = move.before
            self.ledger.place_entry(
                SnapshotEntry(b.piece_id, b.anchor[0], b.anchor[1], b.rotation, b.flip_h, b.flip_v)
            )
        elif move.kind is MoveKind.MOVE:
            self.ledger.move(move.piece_id, move.before.anchor)
        else:
            self.ledger.restore(move.before)

        self._sync_status()
        return True

    # -- drag --------------------------------------------------------------

    def start_drag(self, piece_id: str, offset: Point, origin: DropZone | None = None) -> None:
        piece = self.ledger.piece(piece_id)
        if self.drag is not None:
            self.cancel_drag()
        piece.dragging = True
        self.drag = DragSession(piece_id=piece_id, offset=offset, origin=origin)

    def update_drag(self, pointer: Point) -> Position | None:
        drag = self.drag
        if drag is None:
            return None
        matrix = self.ledger.piece(drag.piece_id).matrix()
        snap = resolve_drop_cell(pointer, drag.offset, matrix, drag.candidate, self.geometry)
        drag.pointer = pointer
        drag.candidate = snap
        drag.valid = snap is not None and validate(matrix, snap, self.grid)
        # Filled for every candidate, valid or not
        drag.preview_cells = (
            [pos for pos in footprint(matrix, snap) if self.grid.is_in_bounds(pos)] if snap is not None else []
        )
        return snap

    def end_drag(self, pointer: Point | None = None, zone: DropZone = DropZone.BOARD) -> bool:
        """Finish the drag; True if the board changed."""
        drag = self.drag
        if drag is None:
            return False
        if pointer is not None:
            self.update_drag(pointer)

        changed = False
        piece_id = drag.piece_id
        placed = self.ledger.is_placed(piece_id)
        if zone is DropZone.BOARD and drag.candidate is not None:
            if placed:
                changed = self.move_piece(piece_id, drag.candidate)
            else:
                changed = self.place_piece(piece_id, drag.candidate)
        elif zone in (DropZone.LEFT_STORAGE, DropZone.RIGHT_STORAGE):
            if drag.origin in (None, DropZone.BOARD, zone) and placed:
                changed = self.remove_piece(piece_id)

        self.ledger.piece(piece_id).dragging = False
        self.drag = None
        return changed

    def cancel_drag(self) -> None:
        if self.drag is not None:
            self.ledger.piece(self.drag.piece_id).dragging = False
            self.drag = None

    # -- queries, hints, snapshots -----------------------------------------

    def available_positions(self, piece_id: str) -> list[Position]:
        return valid_anchors(self.ledger.piece(piece_id).matrix(), self.grid)

    def contended_cells(self) -> set[Position]:
        return self.ledger.contended_cells()

    def conflicting_pieces(self) -> set[str]:
        return self.ledger.conflicting_pieces()

    def _completion(self) -> list[SnapshotEntry] | None:
        unplaced = self.ledger.unplaced_ids()
        if not unplaced:
            return None
        solution = solve_board(self.grid, self.ledger.occupancy.keys(), unplaced)
        if solution is None:
            self.notifications.add("No solution from this position", NoticeLevel.INFO)
        return solution

    def hint(self) -> SnapshotEntry | None:
        """Where the first off-board piece goes in one completion of the current board."""
        solution = self._completion()
        if solution is None:
            return None
        self.stats.hints_used += 1
        first = self.ledger.unplaced_ids()[0]
        return next(entry for entry in solution if entry.piece_id == first)

    def auto_solve(self) -> bool:
        solution = self._completion()
        if solution is None:
            return False
        for entry in solution:
            after = self.ledger.place_entry(entry)
            self._record(MoveKind.PLACE, entry.piece_id, None, after)
        self._sync_status()
        return True

    def snapshot(self) -> list[SnapshotEntry]:
        return self.ledger.snapshot()

    def apply_snapshot(self, entries: Iterable[SnapshotEntry]) -> None:
        self.ledger.apply_snapshot(entries)
        self.history.clear()
        self._sync_status()
