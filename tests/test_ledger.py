from __future__ import annotations

import pytest

from board import Grid
from errors import (
    AlreadyPlaced,
    FlipRejected,
    InvalidPlacement,
    NotPlaced,
    RotationRejected,
    SnapshotError,
    UnknownPiece,
)
from ledger import CellState, Ledger, SnapshotEntry


def test_place_records_piece(ledger: Ledger) -> None:
    record = ledger.place("P1", (2, 2))

    assert record.stack_index == 1
    assert record.cells == ((2, 2), (2, 3), (3, 2), (3, 3))
    piece = ledger.piece("P1")
    assert piece.placed and piece.anchor == (2, 2)
    assert ledger.piece_at((3, 3)) == "P1"
    assert ledger.cell_state((3, 3)) is CellState.OCCUPIED


def test_place_over_target_is_rejected_without_change(ledger: Ledger) -> None:
    with pytest.raises(InvalidPlacement) as excinfo:
        ledger.place("P1", (3, 0))
    assert excinfo.value.piece_id == "P1"

    assert ledger.occupancy == {}
    assert not ledger.piece("P1").placed
    # The refused placement does not consume a stack index
    assert ledger.place("P1", (2, 2)).stack_index == 1


def test_place_twice(ledger: Ledger) -> None:
    ledger.place("O1", (0, 0))
    with pytest.raises(AlreadyPlaced):
        ledger.place("O1", (0, 1))
    assert ledger.placed("O1").anchor == (0, 0)


def test_remove_unplaced(ledger: Ledger) -> None:
    with pytest.raises(NotPlaced):
        ledger.remove("O1")


def test_unknown_piece(ledger: Ledger) -> None:
    with pytest.raises(UnknownPiece):
        ledger.place("Q7", (0, 0))


def test_remove_clears_cells(ledger: Ledger) -> None:
    ledger.place("S1", (5, 0))
    record = ledger.remove("S1")

    assert record.anchor == (5, 0)
    assert ledger.occupancy == {}
    assert ledger.unplaced_ids()[-1] == "S1"
    assert ledger.cell_state((5, 0)) is CellState.EMPTY


def test_cell_states(ledger: Ledger) -> None:
    assert ledger.cell_state((7, 0)) is CellState.BLOCKED
    assert ledger.cell_state((0, 2)) is CellState.RESERVED
    assert ledger.cell_state((0, 3)) is CellState.EMPTY


def test_stack_indices_keep_increasing(ledger: Ledger) -> None:
    ledger.place("O1", (0, 0))
    ledger.place("S1", (5, 0))
    ledger.remove("O1")
    ledger.place("O1", (0, 0))

    order = [(p.piece_id, p.stack_index) for p in ledger.placed_pieces()]
    assert order == [("S1", 2), ("O1", 3)]


def test_overlap_allowed_and_top_piece_wins(ledger: Ledger) -> None:
    ledger.place("P1", (2, 2))
    ledger.place("S1", (2, 2))

    assert ledger.piece_at((2, 2)) == "S1"
    assert ledger.piece_at((2, 3)) == "S1"
    assert ledger.piece_at((3, 2)) == "P1"
    assert ledger.contended_cells() == {(2, 2), (2, 3)}
    assert ledger.conflicting_pieces() == {"P1", "S1"}
    assert ledger.is_in_conflict("P1")
    assert ledger.coverage()[(2, 2)] == ["P1", "S1"]


def test_occupancy_rebuilt_after_removing_the_top_piece(ledger: Ledger) -> None:
    ledger.place("P1", (2, 2))
    ledger.place("S1", (2, 2))
    ledger.remove("S1")

    assert ledger.piece_at((2, 2)) == "P1"
    assert ledger.contended_cells() == set()


def test_earlier_piece_covered_by_later_one(ledger: Ledger) -> None:
    ledger.place("S1", (2, 2))
    ledger.place("P1", (2, 2))
    assert ledger.piece_at((2, 3)) == "P1"


def test_overscanned_piece_only_occupies_board_cells(ledger: Ledger) -> None:
    record = ledger.place("I2", (2, 5))
    assert record.cells == ((2, 5), (2, 6))
    assert set(ledger.occupancy) == {(2, 5), (2, 6)}


def test_move_puts_piece_on_top(ledger: Ledger) -> None:
    ledger.place("O1", (2, 2))
    ledger.place("P1", (2, 2))
    moved = ledger.move("O1", (3, 3))

    assert moved.stack_index == 3
    assert ledger.piece_at((3, 3)) == "O1"
    assert ledger.piece_at((2, 2)) == "P1"


def test_invalid_move_keeps_piece_in_place(ledger: Ledger) -> None:
    ledger.place("O1", (2, 2))
    with pytest.raises(InvalidPlacement):
        ledger.move("O1", (4, 0))
    assert ledger.placed("O1").anchor == (2, 2)
    assert ledger.placed("O1").stack_index == 1
    with pytest.raises(NotPlaced):
        ledger.move("S1", (2, 2))


def test_rotate_unplaced_piece_is_unconditional(ledger: Ledger) -> None:
    ledger.rotate("I1")
    assert ledger.piece("I1").rotation == 90
    for _ in range(3):
        ledger.rotate("I1")
    assert ledger.piece("I1").rotation == 0


def test_rotation_off_the_board_is_rejected(ledger: Ledger) -> None:
    # Upright L covers (2,5) (3,5) (4,5) (4,6); lying down it would reach column 7
    before = ledger.place("L1", (2, 5))

    with pytest.raises(RotationRejected):
        ledger.rotate("L1")

    assert ledger.piece("L1").rotation == 0
    assert ledger.placed("L1") == before
    assert ledger.piece_at((4, 6)) == "L1"


def test_rotation_onto_a_target_is_rejected(ledger: Ledger) -> None:
    ledger.place("I2", (3, 0))
    with pytest.raises(RotationRejected):
        ledger.rotate("I2")
    assert ledger.piece("I2").rotation == 0


def test_rotation_keeps_anchor_and_stack_index(ledger: Ledger) -> None:
    ledger.place("L1", (2, 2))
    ledger.place("O1", (0, 0))
    ledger.rotate("L1")

    record = ledger.placed("L1")
    assert record.rotation == 90
    assert record.anchor == (2, 2)
    assert record.stack_index == 1
    assert record.cells == ((2, 2), (2, 3), (2, 4), (3, 2))
    assert ledger.piece_at((4, 2)) is None


def test_rotating_an_overscanned_piece_back_onto_the_board(ledger: Ledger) -> None:
    ledger.place("I2", (2, 5))
    ledger.rotate("I2")
    assert ledger.placed("I2").cells == ((2, 5), (3, 5), (4, 5), (5, 5))


def test_flip_onto_a_target_is_rejected(ledger: Ledger) -> None:
    ledger.place("Z1", (3, 0))
    with pytest.raises(FlipRejected):
        ledger.flip_horizontal("Z1")
    with pytest.raises(FlipRejected):
        ledger.flip_vertical("Z1")
    piece = ledger.piece("Z1")
    assert not piece.flip_h and not piece.flip_v


def test_flip_unplaced_piece(ledger: Ledger) -> None:
    ledger.flip_horizontal("L1")
    ledger.flip_vertical("L1")
    piece = ledger.piece("L1")
    assert piece.flip_h and piece.flip_v


def test_restore_puts_back_the_exact_record(ledger: Ledger) -> None:
    before = ledger.place("L1", (2, 2))
    ledger.rotate("L1")
    ledger.restore(before)

    assert ledger.placed("L1") == before
    assert ledger.piece("L1").rotation == 0
    assert ledger.piece_at((4, 2)) == "L1"


def test_reset(ledger: Ledger) -> None:
    ledger.rotate("I1")
    ledger.place("O1", (0, 0))
    ledger.reset()

    assert ledger.occupancy == {}
    assert ledger.placed_pieces() == []
    assert ledger.piece("I1").rotation == 0


def test_snapshot_entry_dict_keys() -> None:
    entry = SnapshotEntry("L1", 2, 5, 90, True, False)
    data = entry.to_dict()

    assert data == {"pieceId": "L1", "anchorRow": 2, "anchorCol": 5, "rotation": 90, "flipH": True, "flipV": False}
    assert SnapshotEntry.from_dict(data) == entry
    assert SnapshotEntry.from_dict({"pieceId": "O1", "anchorRow": 0, "anchorCol": 1}).rotation == 0


@pytest.mark.parametrize(
    "data",
    [
        {"anchorRow": 0, "anchorCol": 0},
        {"pieceId": "O1", "anchorRow": "x", "anchorCol": 0},
        {"pieceId": "O1", "anchorRow": 0, "anchorCol": 0, "rotation": 45},
        {"pieceId": "Q7", "anchorRow": 0, "anchorCol": 0},
    ],
)
def test_malformed_snapshot_entries(data: dict) -> None:
    with pytest.raises(SnapshotError):
        SnapshotEntry.from_dict(data)


def test_snapshot_replays_on_a_fresh_ledger(ledger: Ledger, grid: Grid) -> None:
    ledger.place("P1", (2, 2))
    ledger.rotate("L1")
    ledger.place("L1", (5, 2))
    ledger.place("S1", (2, 2))
    entries = ledger.snapshot()

    other = Ledger(grid)
    other.apply_snapshot(entries)

    assert other.occupancy == ledger.occupancy
    assert [p.piece_id for p in other.placed_pieces()] == ["P1", "L1", "S1"]
    assert other.piece("L1").rotation == 90


def test_failed_snapshot_leaves_state_untouched(ledger: Ledger) -> None:
    ledger.place("O1", (0, 0))
    before = dict(ledger.occupancy)

    entries = [SnapshotEntry("P1", 2, 2), SnapshotEntry("S1", 4, 0)]
    with pytest.raises(InvalidPlacement):
        ledger.apply_snapshot(entries)

    assert ledger.occupancy == before
    assert ledger.is_placed("O1")
    assert not ledger.is_placed("P1")
    assert ledger.place("S1", (5, 0)).stack_index == 2
