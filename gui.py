# gui.py

from __future__ import annotations

import pygame

from board import BOARD_COLS, BOARD_ROWS, WEEKDAY_LABELS, MONTH_LABELS
from config import config
from game import GameSession
from pieces import Matrix, matrix_cells
from ui_state import GameStatus, NoticeLevel

GEOMETRY = config.BOARD
TILE = GEOMETRY.tile_size
CELL = GEOMETRY.cell_size

TOP_BAR_HEIGHT = 110
MARGIN = 24

BOARD_X = MARGIN
BOARD_Y = TOP_BAR_HEIGHT
BOARD_WIDTH = int(BOARD_COLS * TILE - GEOMETRY.gap + 2 * GEOMETRY.origin[0])
BOARD_HEIGHT = int(BOARD_ROWS * TILE - GEOMETRY.gap + 2 * GEOMETRY.origin[1])

TRAY_X = BOARD_X + BOARD_WIDTH + MARGIN
TRAY_Y = TOP_BAR_HEIGHT
TRAY_COLS = 3
SLOT_W = 110
SLOT_H = 92
MINI_TILE = 20
TRAY_WIDTH = TRAY_COLS * SLOT_W
TRAY_HEIGHT = 5 * SLOT_H

WINDOW_WIDTH = TRAY_X + TRAY_WIDTH + MARGIN
WINDOW_HEIGHT = TOP_BAR_HEIGHT + max(BOARD_HEIGHT, TRAY_HEIGHT) + 60

# Colors
BG = (15, 15, 17)
CARD_BG = (30, 30, 34)
GRID = (90, 90, 95)
TEXT_MAIN = (245, 245, 250)
TEXT_SECONDARY = (170, 170, 178)
BLOCKED = (45, 45, 49)
TARGET_BORDER = (220, 90, 90)
CONFLICT = (255, 60, 60)
PREVIEW_OK = (34, 211, 238)
PREVIEW_BAD = (239, 68, 68)
OUTLINE = (217, 119, 6)

NOTICE_COLORS: dict[NoticeLevel, tuple[int, int, int]] = {
    NoticeLevel.INFO: (60, 110, 200),
    NoticeLevel.SUCCESS: (50, 170, 80),
    NoticeLevel.WARNING: (200, 140, 40),
    NoticeLevel.ERROR: (200, 60, 60),
}


def to_canvas(screen_pos: tuple[int, int]) -> tuple[float, float]:
    """Screen pixel -> board canvas pixel (the space drag snapping works in)."""
    return (screen_pos[0] - BOARD_X, screen_pos[1] - BOARD_Y)


def board_rect() -> pygame.Rect:
    return pygame.Rect(BOARD_X, BOARD_Y, BOARD_WIDTH, BOARD_HEIGHT)


def tray_rect() -> pygame.Rect:
    return pygame.Rect(TRAY_X, TRAY_Y, TRAY_WIDTH, TRAY_HEIGHT)


def cell_rect(row: int, col: int) -> pygame.Rect:
    x, y = GEOMETRY.cell_origin(row, col)
    return pygame.Rect(BOARD_X + x, BOARD_Y + y, CELL, CELL)


def cell_at_screen(pos: tuple[int, int]) -> tuple[int, int] | None:
    x, y = to_canvas(pos)
    col = int((x - GEOMETRY.origin[0]) // TILE)
    row = int((y - GEOMETRY.origin[1]) // TILE)
    if 0 <= row < BOARD_ROWS and 0 <= col < BOARD_COLS:
        return (row, col)
    return None


def tray_slots(session: GameSession) -> dict[str, pygame.Rect]:
    """Tray slot of every piece that is off the board."""
    slots: dict[str, pygame.Rect] = {}
    for i, piece_id in enumerate(session.ledger.pieces):
        if session.ledger.is_placed(piece_id):
            continue
        r, c = divmod(i, TRAY_COLS)
        slots[piece_id] = pygame.Rect(TRAY_X + c * SLOT_W, TRAY_Y + r * SLOT_H, SLOT_W, SLOT_H)
    return slots


def draw_top_bar(screen: pygame.Surface, title_font: pygame.font.Font, label_font: pygame.font.Font, session: GameSession):
    pygame.draw.rect(screen, BG, (0, 0, WINDOW_WIDTH, TOP_BAR_HEIGHT))

    card_rect = pygame.Rect(16, 16, WINDOW_WIDTH - 32, TOP_BAR_HEIGHT - 32)
    pygame.draw.rect(screen, CARD_BG, card_rect, border_radius=16)

    title_surf = title_font.render("Calendar Puzzle", True, TEXT_MAIN)
    screen.blit(title_surf, (card_rect.x + 20, card_rect.y + 10))

    d = session.current_date
    date_text = f"{WEEKDAY_LABELS[d.isoweekday() - 1]} {MONTH_LABELS[d.month - 1]} {d.day}"
    date_surf = label_font.render(date_text, True, TEXT_MAIN)
    screen.blit(date_surf, (card_rect.right - date_surf.get_width() - 20, card_rect.y + 12))

    status = {
        GameStatus.MENU: "Press N to start",
        GameStatus.PLAYING: "Playing",
        GameStatus.PAUSED: "Paused",
        GameStatus.COMPLETED: "Solved!",
    }[session.status]
    info = f"{status}  |  moves {session.stats.move_count}  |  hints {session.stats.hints_used}"
    screen.blit(label_font.render(info, True, TEXT_SECONDARY), (card_rect.x + 20, card_rect.y + 46))


def _draw_matrix(screen: pygame.Surface, matrix: Matrix, x: float, y: float, tile: float, size: float, color, border=None):
    for r, c in matrix_cells(matrix):
        rect = pygame.Rect(x + c * tile, y + r * tile, size, size)
        pygame.draw.rect(screen, color, rect, border_radius=6)
        if border is not None:
            pygame.draw.rect(screen, border, rect, width=2, border_radius=6)


def draw_board(screen: pygame.Surface, cell_font: pygame.font.Font, session: GameSession):
    ledger = session.ledger
    grid = session.grid

    for pos in grid.positions():
        cell = grid.cell_at(pos)
        rect = cell_rect(*pos)
        if cell.is_blocked:
            continue
        if grid.is_target(pos):
            pygame.draw.rect(screen, BG, rect, border_radius=8)
            pygame.draw.rect(screen, TARGET_BORDER, rect, width=2, border_radius=8)
        else:
            pygame.draw.rect(screen, CARD_BG, rect, border_radius=8)
            pygame.draw.rect(screen, GRID, rect, width=1, border_radius=8)
        text_surf = cell_font.render(cell.label, True, TEXT_MAIN if grid.is_target(pos) else TEXT_SECONDARY)
        screen.blit(text_surf, text_surf.get_rect(center=rect.center))

    # Bottom to top, so the piece placed last covers shared cells
    contended = ledger.contended_cells()
    for placed in ledger.placed_pieces():
        if session.drag is not None and session.drag.piece_id == placed.piece_id:
            continue
        color = pygame.Color(ledger.piece(placed.piece_id).shape.color)
        for pos in placed.cells:
            rect = cell_rect(*pos)
            pygame.draw.rect(screen, color, rect, border_radius=8)
            if pos in contended:
                pygame.draw.rect(screen, CONFLICT, rect, width=3, border_radius=8)

    pygame.draw.rect(screen, OUTLINE, board_rect(), width=3, border_radius=6)


def draw_drag(screen: pygame.Surface, session: GameSession):
    drag = session.drag
    if drag is None or drag.pointer is None:
        return
    piece = session.ledger.piece(drag.piece_id)
    matrix = piece.matrix()

    # Snap target
    if drag.candidate is not None:
        color = PREVIEW_OK if drag.valid else PREVIEW_BAD
        for pos in drag.preview_cells:
            pygame.draw.rect(screen, color, cell_rect(*pos), width=3, border_radius=8)

    # Piece floating under the pointer
    x = BOARD_X + drag.pointer[0] - drag.offset[0]
    y = BOARD_Y + drag.pointer[1] - drag.offset[1]
    _draw_matrix(screen, matrix, x, y, TILE, CELL, pygame.Color(piece.shape.color), border=TEXT_MAIN)


def draw_tray(screen: pygame.Surface, label_font: pygame.font.Font, session: GameSession):
    pygame.draw.rect(screen, CARD_BG, tray_rect(), border_radius=12)
    for piece_id, slot in tray_slots(session).items():
        piece = session.ledger.piece(piece_id)
        if piece.dragging:
            continue
        if piece.selected:
            pygame.draw.rect(screen, PREVIEW_OK, slot.inflate(-6, -6), width=2, border_radius=8)
        _draw_matrix(screen, piece.matrix(), slot.x + 8, slot.y + 8, MINI_TILE, MINI_TILE - 2, pygame.Color(piece.shape.color))
        name = label_font.render(piece_id, True, TEXT_SECONDARY)
        screen.blit(name, (slot.right - name.get_width() - 8, slot.bottom - name.get_height() - 4))


def draw_notifications(screen: pygame.Surface, label_font: pygame.font.Font, session: GameSession):
    session.notifications.prune()
    y = WINDOW_HEIGHT - 50
    for note in session.notifications.items:
        surf = label_font.render(note.message, True, TEXT_MAIN)
        rect = pygame.Rect(MARGIN, y, surf.get_width() + 24, 34)
        pygame.draw.rect(screen, NOTICE_COLORS[note.level], rect, border_radius=8)
        screen.blit(surf, (rect.x + 12, rect.y + (34 - surf.get_height()) // 2))
        y -= 40


def draw_game(screen: pygame.Surface, fonts: dict[str, pygame.font.Font], session: GameSession):
    screen.fill(BG)
    draw_top_bar(screen, fonts["title"], fonts["label"], session)
    draw_board(screen, fonts["cell"], session)
    draw_tray(screen, fonts["label"], session)
    draw_drag(screen, session)
    draw_notifications(screen, fonts["label"], session)
