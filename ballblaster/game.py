from __future__ import annotations

import logging
from typing import Tuple

import pygame

from .config import Settings, load_settings
from .render import Renderer
from .session import GameSession
from .states import Mode
from .ui import GameUI

logger = logging.getLogger(__name__)


class Game:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.clock = pygame.time.Clock()
        flags = pygame.RESIZABLE if settings.window.resizable else 0
        self.screen = pygame.display.set_mode((settings.window.width, settings.window.height), flags)
        pygame.display.set_caption(settings.window.title)

        w, h = self.screen.get_size()
        self.session = GameSession(settings, w, h)
        self.renderer = Renderer(settings, self.screen)
        self.ui = GameUI(w, h)
        self.mouse: Tuple[int, int] = (-1, -1)

    def _resize(self, width: int, height: int) -> None:
        if self.settings.window.resizable:
            self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        self.renderer.surf = self.screen
        self.session.resize(width, height)
        self.ui.resize(width, height)

    def _touch_pos(self, event: pygame.event.Event) -> Tuple[float, float]:
        # Finger coordinates are normalised to the window
        w, h = self.screen.get_size()
        return event.x * w, event.y * h

    def handle_event(self, event: pygame.event.Event) -> bool:
        """Feed one pygame event to the session. Returns False to quit."""
        self.ui.process_event(event)
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return False
            if event.key == pygame.K_SPACE:
                self.session.press_key("space")
            elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                self.session.press_key("return")
        # SDL mirrors finger input as mouse events flagged with touch=True;
        # those are handled once, by the FINGER branches
        elif event.type == pygame.MOUSEMOTION and not getattr(event, "touch", False):
            self.mouse = event.pos
            self.session.move_pointer(event.pos[0])
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and not getattr(event, "touch", False):
            self.mouse = event.pos
            self.session.move_pointer(event.pos[0])
            self.session.click(*event.pos)
        elif event.type == pygame.FINGERMOTION:
            x, _ = self._touch_pos(event)
            self.session.move_pointer(x)
        elif event.type == pygame.FINGERDOWN:
            x, y = self._touch_pos(event)
            self.session.move_pointer(x)
            self.session.click(x, y)
        elif event.type == pygame.VIDEORESIZE:
            self._resize(event.w, event.h)
        return True

    def run(self) -> None:
        running = True
        fps = self.settings.window.fps
        while running:
            dt_ms = self.clock.tick(fps)
            for event in pygame.event.get():
                if not self.handle_event(event):
                    running = False

            state = self.session.tick(dt_ms)
            frame = self.session.snapshot()
            self.renderer.consume(frame.events, frame.arena)
            self.renderer.update(dt_ms, frame.arena)
            self.ui.consume(frame.events)

            self.renderer.draw(frame, self.mouse)
            if frame.mode is Mode.PLAYING:
                self.ui.update_hud(frame.score, frame.level, state.stats)
            else:
                self.ui.hide_hud()
            self.ui.update(dt_ms / 1000.0)
            self.ui.draw(self.screen)
            pygame.display.flip()

        stats = self.session.state.stats
        logger.info(
            "Session over: score %d, level %d, %d/%d hits, %d destroyed",
            self.session.state.score, self.session.state.level, stats.hits, stats.shots, stats.destroyed,
        )
        self.session.close()

    @staticmethod
    def init_pygame():
        pygame.init()


def run_game() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    Game.init_pygame()
    settings = load_settings()
    try:
        Game(settings).run()
    finally:
        pygame.quit()


if __name__ == "__main__":
    run_game()
