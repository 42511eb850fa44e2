from __future__ import annotations

from typing import Optional

import pygame

from blockfall.game import RenderError, TileColor
from .palette import color_for_tile


class PygameRenderSink:
    """Render sink drawing grid cells as rectangles on a pygame surface.

    ``flush`` flips the display when ``present`` is true; off-screen surfaces
    (tests, recordings) pass ``present=False``.
    """

    def __init__(self, surface: pygame.Surface, cell_size: int = 32, margin: int = 0,
                 present: bool = True) -> None:
        self.surface = surface
        self.cell_size = cell_size
        self.margin = margin
        self.present = present

    def cell_rect(self, x: int, y: int) -> pygame.Rect:
        return pygame.Rect(
            self.margin + x * self.cell_size,
            self.margin + y * self.cell_size,
            self.cell_size - 1,
            self.cell_size - 1,
        )

    def draw_cell(self, x: int, y: int, color: TileColor) -> None:
        try:
            pygame.draw.rect(self.surface, color_for_tile(int(color)), self.cell_rect(x, y))
        except pygame.error as exc:
            raise RenderError(f"failed to draw cell ({x}, {y})") from exc

    def flush(self) -> None:
        if not self.present:
            return
        try:
            pygame.display.flip()
        except pygame.error as exc:
            raise RenderError("failed to present frame") from exc


class ScorePanel:
    def __init__(self, font: pygame.font.Font, x: int, y: int) -> None:
        self.font = font
        self.x = x
        self.y = y
        self._last: Optional[int] = None
        self._surface: Optional[pygame.Surface] = None

    def draw(self, screen: pygame.Surface, score: int) -> pygame.Rect:
        if score != self._last or self._surface is None:
            self._last = score
            self._surface = self.font.render(f"Score: {score}", True, (230, 230, 230), (10, 10, 14))
        return screen.blit(self._surface, (self.x, self.y))
