from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
import pygame

from tetris_ai.game import shapes
from tetris_ai.game.core import SessionSnapshot


PALETTE = {
    0: (20, 20, 26),
    1: (0, 240, 240),  # I
    2: (240, 240, 0),  # O
    3: (160, 0, 240),  # T
    4: (0, 240, 0),    # S
    5: (240, 0, 0),    # Z
    6: (0, 0, 240),    # J
    7: (240, 160, 0),  # L
}


def color_for_value(v: int) -> Tuple[int, int, int]:
    return PALETTE.get(abs(v), (200, 200, 200))


class Renderer:
    """Draws one side: board with the falling piece, next-piece preview and HUD."""

    def __init__(self, cell_size: int = 28, margin: int = 20, panel_cells: int = 6) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_cells = panel_cells
        self._font: Optional[pygame.font.Font] = None

    def side_size(self, rows: int, cols: int) -> Tuple[int, int]:
        width = self.margin * 3 + (cols + self.panel_cells) * self.cell_size
        height = self.margin * 2 + rows * self.cell_size
        return width, height

    def _font_obj(self) -> pygame.font.Font:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 24)
        return self._font

    def _grid_surface(self, state: np.ndarray) -> pygame.Surface:
        h, w = state.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill((30, 30, 36))
        for y in range(h):
            for x in range(w):
                rect = pygame.Rect(x * self.cell_size, y * self.cell_size,
                                   self.cell_size - 1, self.cell_size - 1)
                pygame.draw.rect(surf, color_for_value(int(state[y, x])), rect)
        return surf

    def _overlay(self, snap: SessionSnapshot) -> np.ndarray:
        state = snap.board.copy()
        if snap.piece_kind is not None:
            for r, c in snap.piece_cells:
                state[r, c] = -int(snap.piece_kind)
        return state

    def draw(self, screen: pygame.Surface, snap: SessionSnapshot, origin: Tuple[int, int] = (0, 0),
             label: str = "") -> None:
        ox, oy = origin
        rows, cols = snap.board.shape
        screen.blit(self._grid_surface(self._overlay(snap)), (ox + self.margin, oy + self.margin))

        px = ox + self.margin * 2 + cols * self.cell_size
        font = self._font_obj()
        lines = [label, "NEXT"] if label else ["NEXT"]
        y = oy + self.margin
        for text in lines:
            screen.blit(font.render(text, True, (230, 230, 230)), (px, y))
            y += 24

        if snap.next_kind is not None:
            preview = shapes.shape(snap.next_kind, 0)
            for r, c in zip(*np.nonzero(preview)):
                rect = pygame.Rect(px + int(c) * self.cell_size, y + int(r) * self.cell_size,
                                   self.cell_size - 1, self.cell_size - 1)
                pygame.draw.rect(screen, color_for_value(int(snap.next_kind)), rect)
        y += 3 * self.cell_size

        elapsed = int(snap.elapsed_seconds)
        hud = [
            f"SCORE {snap.score}",
            f"LINES {snap.lines}",
            f"TIME {elapsed // 60:02d}:{elapsed % 60:02d}",
        ]
        if snap.game_over:
            hud.append("GAME OVER - R")
        elif snap.paused:
            hud.append("PAUSED - P")
        for text in hud:
            screen.blit(font.render(text, True, (230, 230, 230)), (px, y))
            y += 24
