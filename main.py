from __future__ import annotations

import argparse
import datetime
import logging
from typing import Sequence

import pygame

from config import config
from drag import DropZone
from game import GameSession
from gui import (
    GEOMETRY,
    MINI_TILE,
    WINDOW_HEIGHT,
    WINDOW_WIDTH,
    board_rect,
    cell_at_screen,
    draw_game,
    to_canvas,
    tray_rect,
    tray_slots,
)
from ui_state import GameStatus, NoticeLevel

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Daily calendar puzzle")
    parser.add_argument(
        "--date",
        type=datetime.date.fromisoformat,
        default=None,
        help="Puzzle date as YYYY-MM-DD (defaults to today).",
    )
    parser.add_argument(
        "--log-level",
        default=config.LOG_LEVEL,
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    )
    return parser.parse_args(argv)


def _grab(session: GameSession, pos: tuple[int, int]) -> None:
    """Start dragging whatever piece is under the pointer."""
    for piece_id, slot in tray_slots(session).items():
        if slot.collidepoint(pos):
            scale = GEOMETRY.tile_size / MINI_TILE
            offset = ((pos[0] - slot.x - 8) * scale, (pos[1] - slot.y - 8) * scale)
            session.select_piece(piece_id)
            session.start_drag(piece_id, offset, origin=DropZone.RIGHT_STORAGE)
            session.update_drag(to_canvas(pos))
            return

    cell = cell_at_screen(pos)
    piece_id = session.ledger.piece_at(cell) if cell else None
    if piece_id is None:
        return
    anchor = session.ledger.placed(piece_id).anchor
    ax, ay = GEOMETRY.cell_origin(*anchor)
    cx, cy = to_canvas(pos)
    session.select_piece(piece_id)
    session.start_drag(piece_id, (cx - ax, cy - ay), origin=DropZone.BOARD)
    session.update_drag((cx, cy))


def _drop(session: GameSession, pos: tuple[int, int]) -> None:
    if board_rect().collidepoint(pos):
        zone = DropZone.BOARD
    elif tray_rect().collidepoint(pos):
        zone = DropZone.RIGHT_STORAGE
    else:
        zone = DropZone.NONE
    session.end_drag(to_canvas(pos), zone)


def _on_key(session: GameSession, key: int) -> bool:
    """Handle a key press; False means quit."""
    selected = session.selected_piece_id
    if key == pygame.K_ESCAPE:
        return False
    if key == pygame.K_n:
        session.start_new_game(session.current_date)
    elif key == pygame.K_p:
        if session.status is GameStatus.PAUSED:
            session.resume_game()
        else:
            session.pause_game()
    elif key == pygame.K_u:
        session.undo_last_move()
    elif key == pygame.K_s:
        session.auto_solve()
    elif key == pygame.K_i:
        hint = session.hint()
        if hint is not None:
            session.notifications.add(
                f"Try {hint.piece_id} at row {hint.anchor_row + 1}, col {hint.anchor_col + 1}",
                NoticeLevel.INFO,
            )
    elif selected is not None:
        if key == pygame.K_r:
            session.rotate_piece(selected)
        elif key == pygame.K_h:
            session.flip_piece_horizontally(selected)
        elif key == pygame.K_v:
            session.flip_piece_vertically(selected)
    return True


def main(argv: Sequence[str] | None = None):
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(levelname)s %(name)s: %(message)s")

    pygame.init()
    screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT))
    pygame.display.set_caption("Calendar Puzzle")

    fonts = {
        "title": pygame.font.SysFont("SF Pro Display", 30, bold=True),
        "label": pygame.font.SysFont("SF Pro Text", 18),
        "cell": pygame.font.SysFont("SF Pro Text", 16, bold=True),
    }

    clock = pygame.time.Clock()
    session = GameSession(args.date)
    session.start_new_game(args.date)

    running = True
    while running:
        clock.tick(60)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                running = _on_key(session, event.key)
            elif session.status is GameStatus.PAUSED:
                continue
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                _grab(session, event.pos)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 3:
                cell = cell_at_screen(event.pos)
                piece_id = session.ledger.piece_at(cell) if cell else None
                if piece_id is not None:
                    session.rotate_piece(piece_id)
            elif event.type == pygame.MOUSEMOTION and session.drag is not None:
                session.update_drag(to_canvas(event.pos))
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1 and session.drag is not None:
                _drop(session, event.pos)

        draw_game(screen, fonts, session)
        pygame.display.flip()

    pygame.quit()


if __name__ == "__main__":
    main()
