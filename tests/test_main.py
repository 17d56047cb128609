from __future__ import annotations

import datetime

import pygame

from game import GameSession
from main import _on_key, parse_args
from ui_state import GameStatus


def test_parse_args() -> None:
    args = parse_args(["--date", "2024-03-15", "--log-level", "debug"])
    assert args.date == datetime.date(2024, 3, 15)
    assert args.log_level == "debug"
    assert parse_args([]).date is None


def test_keys_drive_the_session() -> None:
    session = GameSession(datetime.date(2024, 3, 15))
    session.start_new_game(session.current_date)

    session.select_piece("L1")
    assert _on_key(session, pygame.K_r)
    assert session.ledger.piece("L1").rotation == 90
    _on_key(session, pygame.K_h)
    assert session.ledger.piece("L1").flip_h

    _on_key(session, pygame.K_p)
    assert session.status is GameStatus.PAUSED
    _on_key(session, pygame.K_p)
    assert session.status is GameStatus.PLAYING

    assert not _on_key(session, pygame.K_ESCAPE)
