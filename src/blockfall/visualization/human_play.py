from __future__ import annotations

import argparse
import logging
from typing import Dict

import pygame

from blockfall.game import Engine, GameConfig, Intent, RenderError
from .renderer import PygameRenderSink, ScorePanel

logger = logging.getLogger(__name__)


KEY_TO_INTENT: Dict[int, Intent] = {
    pygame.K_UP: Intent.ROTATE_CW,
    pygame.K_LEFT: Intent.MOVE_LEFT,
    pygame.K_RIGHT: Intent.MOVE_RIGHT,
    pygame.K_DOWN: Intent.SOFT_DROP,
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play blockfall with the keyboard.")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--cell-size", type=int, default=32)
    p.add_argument("--gravity-ms", type=int, default=600)
    p.add_argument("--log-level", default="WARNING")
    return p


def run(seed: int | None = None, cell_size: int = 32, gravity_ms: int = 600) -> int:
    pygame.init()
    try:
        config = GameConfig(random_seed=seed)
        margin = 20
        panel_h = 40
        screen = pygame.display.set_mode(
            (config.width * cell_size + margin * 2, config.height * cell_size + margin * 2 + panel_h)
        )
        pygame.display.set_caption("blockfall")
        screen.fill((10, 10, 14))
        font = pygame.font.SysFont(None, 32)
        panel = ScorePanel(font, margin, config.height * cell_size + margin * 2)

        sink = PygameRenderSink(screen, cell_size=cell_size, margin=margin)
        game = Engine(config, sink=sink,
                      on_score_changed=lambda score: panel.draw(screen, score),
                      on_loss=lambda: logger.info("game over"))
        game.start()
        panel.draw(screen, game.score.value)
        pygame.display.flip()

        clock = pygame.time.Clock()
        last_fall = pygame.time.get_ticks()
        needs_redraw = False
        running = True
        while running:
            intents = []
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key in KEY_TO_INTENT:
                        intents.append(KEY_TO_INTENT[event.key])

            # Gravity, independent of frame rate
            now = pygame.time.get_ticks()
            if now - last_fall >= gravity_ms:
                intents.append(Intent.SOFT_DROP)
                last_fall = now

            if not game.lost:
                try:
                    if needs_redraw:
                        game.redraw()
                        needs_redraw = False
                    for intent in intents:
                        if game.step(intent).lost:
                            break
                except RenderError as exc:
                    logger.warning("render failed, redrawing next frame: %s", exc)
                    needs_redraw = True

            if game.lost:
                text = font.render("Game Over - ESC to quit", True, (255, 100, 100))
                screen.blit(text, text.get_rect(center=(screen.get_width() // 2, margin // 2 + 4)))
                panel.draw(screen, game.score.value)
                pygame.display.flip()

            clock.tick(60)
        return game.score.value
    finally:
        pygame.quit()


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    score = run(seed=args.seed, cell_size=args.cell_size, gravity_ms=args.gravity_ms)
    print(f"Final score: {score}")


if __name__ == "__main__":  # pragma: no cover
    main()
