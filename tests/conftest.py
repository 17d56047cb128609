from __future__ import annotations

import datetime

import pytest

from board import Grid
from ledger import Ledger

# Friday: targets MAR (0, 2), 15 (4, 0), FRI (6, 5)
PUZZLE_DATE = datetime.date(2024, 3, 15)


class FakeClock:
    def __init__(self) -> None:
        self.current = 1000.0

    def advance(self, delta: float) -> None:
        self.current += delta

    def __call__(self) -> float:
        return self.current


@pytest.fixture
def grid() -> Grid:
    return Grid.for_date(PUZZLE_DATE)


@pytest.fixture
def ledger(grid: Grid) -> Ledger:
    return Ledger(grid)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
