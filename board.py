# board.py
# Board geometry, month/day/weekday coordinate maps and the per-date grid

from __future__ import annotations

import datetime
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping

from errors import InvalidDateTarget

BOARD_ROWS = 8
BOARD_COLS = 7

Position = tuple[int, int]

# Month coordinates (1–12)
MONTH_COORDS: dict[int, Position] = {
    1: (0, 0),
    2: (0, 1),
    3: (0, 2),
    4: (0, 3),
    5: (0, 4),
    6: (0, 5),
    7: (1, 0),
    8: (1, 1),
    9: (1, 2),
    10: (1, 3),
    11: (1, 4),
    12: (1, 5),
}

# Day coordinates (1–31): rows 2–5 in full, then the start of row 6
DAY_COORDS: dict[int, Position] = {
    1: (2, 0),
    2: (2, 1),
    3: (2, 2),
    4: (2, 3),
    5: (2, 4),
    6: (2, 5),
    7: (2, 6),
    8: (3, 0),
    9: (3, 1),
    10: (3, 2),
    11: (3, 3),
    12: (3, 4),
    13: (3, 5),
    14: (3, 6),
    15: (4, 0),
    16: (4, 1),
    17: (4, 2),
    18: (4, 3),
    19: (4, 4),
    20: (4, 5),
    21: (4, 6),
    22: (5, 0),
    23: (5, 1),
    24: (5, 2),
    25: (5, 3),
    26: (5, 4),
    27: (5, 5),
    28: (5, 6),
    29: (6, 0),
    30: (6, 1),
    31: (6, 2),
}

# Weekday coordinates, ISO numbering (Monday=1 … Sunday=7).
# The strip reads Wed Thu Fri Sat / Sun Mon Tue.
WEEKDAY_COORDS: dict[int, Position] = {
    3: (6, 3),
    4: (6, 4),
    5: (6, 5),
    6: (6, 6),
    7: (7, 4),
    1: (7, 5),
    2: (7, 6),
}

# Cells that are never part of the board
BLOCKED_CELLS: frozenset[Position] = frozenset(
    {
        (0, 6),
        (1, 6),
        (7, 0),
        (7, 1),
        (7, 2),
        (7, 3),
    }
)

MONTH_LABELS = ["JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"]
WEEKDAY_LABELS = ["MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN"]


class CellKind(str, Enum):
    BLOCKED = "blocked"
    MONTH = "month"
    DAY = "day"
    WEEKDAY = "weekday"


@dataclass(frozen=True)
class Cell:
    position: Position
    kind: CellKind
    label: str | None = None

    @property
    def is_blocked(self) -> bool:
        return self.kind is CellKind.BLOCKED

    @property
    def is_reserved(self) -> bool:
        return self.label is not None


@dataclass(frozen=True)
class DateTarget:
    """The three cells that must stay empty for one date."""

    month: Position
    day: Position
    weekday: Position

    @property
    def cells(self) -> tuple[Position, Position, Position]:
        return (self.month, self.day, self.weekday)

    def __contains__(self, pos: object) -> bool:
        return pos in self.cells


def _build_cells() -> dict[Position, Cell]:
    cells: dict[Position, Cell] = {}
    for pos in BLOCKED_CELLS:
        cells[pos] = Cell(pos, CellKind.BLOCKED)
    for month, pos in MONTH_COORDS.items():
        cells[pos] = Cell(pos, CellKind.MONTH, MONTH_LABELS[month - 1])
    for day, pos in DAY_COORDS.items():
        cells[pos] = Cell(pos, CellKind.DAY, str(day))
    for weekday, pos in WEEKDAY_COORDS.items():
        cells[pos] = Cell(pos, CellKind.WEEKDAY, WEEKDAY_LABELS[weekday - 1])

    # The four tables have to tile the whole 8x7 rectangle exactly once.
    assert len(cells) == BOARD_ROWS * BOARD_COLS, "board tables overlap or leave gaps"
    return cells


CELLS: Mapping[Position, Cell] = MappingProxyType(_build_cells())


def is_in_bounds(pos: Position) -> bool:
    r, c = pos
    return 0 <= r < BOARD_ROWS and 0 <= c < BOARD_COLS


def date_target_for(month: int, day: int, weekday: int) -> DateTarget:
    """Map a (month, day, ISO weekday) triple to its three target cells."""
    if month not in MONTH_COORDS:
        raise InvalidDateTarget(f"month {month} outside 1..12")
    if day not in DAY_COORDS:
        raise InvalidDateTarget(f"day {day} outside 1..31")
    if weekday not in WEEKDAY_COORDS:
        raise InvalidDateTarget(f"weekday {weekday} outside 1..7")
    return DateTarget(MONTH_COORDS[month], DAY_COORDS[day], WEEKDAY_COORDS[weekday])


def date_target_for_date(when: datetime.date) -> DateTarget:
    return date_target_for(when.month, when.day, when.isoweekday())


class Grid:
    """Static partition of the board for one date.

    Blocked cells can never be covered, the three target cells of the date must
    stay empty, every other labelled cell is an ordinary fillable cell.
    """

    rows = BOARD_ROWS
    cols = BOARD_COLS

    def __init__(self, target: DateTarget, cells: Mapping[Position, Cell] = CELLS):
        for pos in target.cells:
            cell = cells.get(pos)
            if cell is None or not cell.is_reserved:
                raise InvalidDateTarget(f"{pos} is not a labelled cell")
        self.target = target
        self._cells = cells

    @classmethod
    def for_date(cls, when: datetime.date) -> Grid:
        return cls(date_target_for_date(when))

    def cell_at(self, pos: Position) -> Cell:
        if not is_in_bounds(pos):
            raise IndexError(f"{pos} is outside the {BOARD_ROWS}x{BOARD_COLS} board")
        return self._cells[pos]

    def is_in_bounds(self, pos: Position) -> bool:
        return is_in_bounds(pos)

    def is_blocked(self, pos: Position) -> bool:
        return pos in self._cells and self._cells[pos].is_blocked

    def is_reserved(self, pos: Position) -> bool:
        return pos in self._cells and self._cells[pos].is_reserved

    def is_target(self, pos: Position) -> bool:
        return pos in self.target

    def is_forbidden(self, pos: Position) -> bool:
        """Blocked or one of today's targets: no piece may ever cover it."""
        return self.is_blocked(pos) or self.is_target(pos)

    def positions(self) -> Iterator[Position]:
        for r in range(BOARD_ROWS):
            for c in range(BOARD_COLS):
                yield (r, c)

    def fillable_cells(self) -> set[Position]:
        """Cells that have to be covered to solve the board."""
        return {pos for pos in self.positions() if not self.is_forbidden(pos)}
