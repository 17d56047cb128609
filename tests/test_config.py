from __future__ import annotations

import pytest

import ui_state
from config import BoardGeometry, Config


def test_defaults() -> None:
    cfg = Config()
    assert cfg.MIN_AREA_RATIO == 0.5
    assert cfg.MAX_NOTIFICATIONS == 3
    assert cfg.BOARD.tile_size == pytest.approx(53.0)
    assert cfg.BOARD.cell_origin(1, 2) == pytest.approx((2.5 + 106.0, 2.5 + 53.0))


def test_from_env_overrides() -> None:
    cfg = Config.from_env(
        {
            "CALENDAR_PUZZLE_MIN_AREA_RATIO": "0.75",
            "CALENDAR_PUZZLE_MAX_NOTIFICATIONS": "5",
            "CALENDAR_PUZZLE_LOG_LEVEL": "DEBUG",
            "CALENDAR_PUZZLE_CELL_SIZE": "40",
            "UNRELATED": "1",
        }
    )
    assert cfg.MIN_AREA_RATIO == 0.75
    assert cfg.MAX_NOTIFICATIONS == 5
    assert cfg.LOG_LEVEL == "DEBUG"
    assert cfg.BOARD == BoardGeometry(cell_size=40.0)


def test_from_env_without_overrides() -> None:
    assert Config.from_env({}) == Config()


def test_environment_is_read_at_startup(monkeypatch) -> None:
    monkeypatch.setenv("CALENDAR_PUZZLE_NOTIFICATION_TTL_S", "9")
    assert Config.from_env().NOTIFICATION_TTL_S == 9.0


def test_notifications_read_the_live_config(monkeypatch) -> None:
    monkeypatch.setattr(ui_state, "config", Config(MAX_NOTIFICATIONS=1, NOTIFICATION_TTL_S=10.0))
    notes = ui_state.Notifications()
    notes.add("first")
    notes.add("second")
    assert notes.ttl == 10.0
    assert [n.message for n in notes.items] == ["second"]
