"""
Configuration for the calendar puzzle.
Board geometry used for drag snapping plus engine and notification tuning.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Mapping

ENV_PREFIX = "CALENDAR_PUZZLE_"


@dataclass(frozen=True)
class BoardGeometry:
    """Pixel layout of the board canvas."""
    cell_size: float = 50.0
    gap: float = 3.0
    origin: tuple[float, float] = (2.5, 2.5)  # (x, y) of cell (0, 0), half the outline width

    @property
    def tile_size(self) -> float:
        return self.cell_size + self.gap

    def cell_origin(self, row: int, col: int) -> tuple[float, float]:
        """Top-left pixel of a cell."""
        return (self.origin[0] + col * self.tile_size, self.origin[1] + row * self.tile_size)


@dataclass(frozen=True)
class Config:
    """Runtime parameters of the puzzle engine."""

    BOARD: BoardGeometry = BoardGeometry()

    # Share of a piece that must land on usable board cells while overscanning
    MIN_AREA_RATIO: float = 0.5

    # Notifications
    MAX_NOTIFICATIONS: int = 3
    NOTIFICATION_TTL_S: float = 3.5

    LOG_LEVEL: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Config":
        """Build a config, overriding scalar fields from CALENDAR_PUZZLE_* variables."""
        environ = os.environ if environ is None else environ
        cfg = cls()
        overrides = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name)
            if raw is None or f.name == "BOARD":
                continue
            current = getattr(cfg, f.name)
            overrides[f.name] = type(current)(raw)

        board = cfg.BOARD
        for name in ("cell_size", "gap"):
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None:
                board = replace(board, **{name: float(raw)})
        return replace(cfg, BOARD=board, **overrides)


# Global config instance, CALENDAR_PUZZLE_* overrides applied at startup
config = Config.from_env()
