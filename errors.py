# errors.py
# Exceptions raised by the puzzle engine

from __future__ import annotations


class PuzzleError(Exception):
    """Base class for everything the engine raises on purpose."""


class InvalidDateTarget(PuzzleError, ValueError):
    """Month, day or weekday outside the board's label tables."""


class UnknownPiece(PuzzleError, KeyError):
    def __init__(self, piece_id: str):
        super().__init__(piece_id)
        self.piece_id = piece_id

    def __str__(self) -> str:
        return f"unknown piece {self.piece_id!r}"


class PlacementError(PuzzleError):
    """A board mutation was refused; nothing was changed."""

    def __init__(self, piece_id: str, message: str = ""):
        super().__init__(message or f"{type(self).__name__}: {piece_id}")
        self.piece_id = piece_id


class InvalidPlacement(PlacementError):
    pass


class AlreadyPlaced(PlacementError):
    pass


class NotPlaced(PlacementError):
    pass


class RotationRejected(PlacementError):
    pass


class FlipRejected(PlacementError):
    pass


class SnapshotError(PuzzleError, ValueError):
    """A solution snapshot entry could not be parsed."""
