from __future__ import annotations

import logging

import pytest

from config import BoardGeometry
from drag import best_candidate, candidate_score, float_anchor, resolve_drop_cell
from pieces import shape_of

# 10px tiles with no gap and no outline keep the pixel arithmetic readable
UNIT = BoardGeometry(cell_size=10.0, gap=0.0, origin=(0.0, 0.0))
SINGLE = shape_of("O1").matrix
LONG_BAR = shape_of("I1").matrix


def test_float_anchor_uses_tile_size_and_origin() -> None:
    geometry = BoardGeometry()
    pointer = (2.5 + 1.5 * 53 + 7, 2.5 + 3 * 53 + 4)
    row, col = float_anchor(pointer, (7, 4), geometry)
    assert row == pytest.approx(3.0)
    assert col == pytest.approx(1.5)


def test_candidate_score_is_overlap_area() -> None:
    assert candidate_score(2.9, 1.1, 3, 1) == pytest.approx(0.81)
    assert candidate_score(2.9, 1.1, 2, 1) == pytest.approx(0.09)
    assert candidate_score(2.9, 1.1, 5, 1) == 0


def test_largest_overlap_wins() -> None:
    assert best_candidate(2.9, 1.1) == (3, 1)
    assert best_candidate(2.2, 1.7) == (2, 2)


def test_tie_goes_to_the_base_cell() -> None:
    assert best_candidate(2.5, 1.0) == (2, 1)
    assert best_candidate(2.5, 1.5) == (2, 1)


def test_negative_positions_floor_towards_minus_infinity() -> None:
    assert best_candidate(-0.2, 0.0) == (0, 0)
    assert best_candidate(-0.8, 0.0) == (-1, 0)


def test_pointer_snaps_to_nearest_cell() -> None:
    assert resolve_drop_cell((11, 29), (0, 0), SINGLE, geometry=UNIT) == (3, 1)


def test_grab_offset_is_subtracted() -> None:
    assert resolve_drop_cell((35, 25), (15, 5), SINGLE, geometry=UNIT) == (2, 2)


def test_pixel_snapping_with_default_geometry() -> None:
    pointer = (2.5 + 1.1 * 53, 2.5 + 2.9 * 53)
    assert resolve_drop_cell(pointer, (0, 0), SINGLE) == (3, 1)


def test_piece_entirely_off_the_board_snaps_nowhere() -> None:
    assert resolve_drop_cell((-50, -50), (0, 0), SINGLE, geometry=UNIT) is None
    assert resolve_drop_cell((200, 0), (0, 0), SINGLE, geometry=UNIT) is None


def test_partly_visible_piece_still_snaps() -> None:
    # Anchor three columns left of the board; the last two cells of the bar are on it
    assert resolve_drop_cell((-30, 0), (0, 0), LONG_BAR, geometry=UNIT) == (0, -3)


def test_snap_changes_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="drag"):
        resolve_drop_cell((11, 29), (0, 0), SINGLE, previous_snap=(3, 1), geometry=UNIT)
        assert not caplog.records
        resolve_drop_cell((11, 29), (0, 0), SINGLE, previous_snap=(2, 1), geometry=UNIT)
    assert "snap" in caplog.text
