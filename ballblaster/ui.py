from __future__ import annotations

import pygame
import pygame_gui
from pathlib import Path
from typing import List, Optional

from .context import RunStats
from .events import GameEvent, ModeChanged, WaveCleared


class GameUI:
    def __init__(self, width: int, height: int, theme: str = 'assets/ui/theme.json') -> None:
        theme_path = Path(theme)
        self.manager = pygame_gui.UIManager((width, height), theme_path if theme_path.exists() else None)
        self.width = width
        self.height = height

        # HUD elements
        self.hud_panel: Optional[pygame_gui.elements.UIPanel] = None
        self.score_label: Optional[pygame_gui.elements.UILabel] = None
        self.level_label: Optional[pygame_gui.elements.UILabel] = None
        self.stats_label: Optional[pygame_gui.elements.UILabel] = None
        # Banner
        self.banner_label: Optional[pygame_gui.elements.UILabel] = None
        self.banner_time_left: float = 0.0

    def process_event(self, event: pygame.event.Event) -> None:
        self.manager.process_events(event)

    def update(self, dt: float) -> None:
        self.manager.update(dt)
        # Banner timer
        if self.banner_time_left > 0:
            self.banner_time_left -= dt
            if self.banner_time_left <= 0 and self.banner_label is not None:
                self.banner_label.kill()
                self.banner_label = None

    def draw(self, surface: pygame.Surface) -> None:
        self.manager.draw_ui(surface)

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.manager.set_window_resolution((width, height))
        # Rebuilt lazily on the next HUD update
        self.hide_hud()

    # HUD helpers
    def ensure_hud(self) -> None:
        if self.hud_panel is not None:
            return
        w = min(220, self.width - 20)
        self.hud_panel = pygame_gui.elements.UIPanel(pygame.Rect(10, 10, w, 66), manager=self.manager)
        self.score_label = pygame_gui.elements.UILabel(pygame.Rect(4, 0, w - 8, 20), text='Score: 0', manager=self.manager, container=self.hud_panel)
        self.level_label = pygame_gui.elements.UILabel(pygame.Rect(4, 20, w - 8, 20), text='Level: 1', manager=self.manager, container=self.hud_panel)
        self.stats_label = pygame_gui.elements.UILabel(pygame.Rect(4, 40, w - 8, 18), text='Hits 0/0', manager=self.manager, container=self.hud_panel)

    def hide_hud(self) -> None:
        if self.hud_panel is not None:
            # killing the panel kills its labels
            self.hud_panel.kill()
        self.hud_panel = None
        self.score_label = self.level_label = self.stats_label = None

    def update_hud(self, score: int, level: int, stats: RunStats) -> None:
        self.ensure_hud()
        if self.score_label is not None:
            self.score_label.set_text(f'Score: {score}')
        if self.level_label is not None:
            self.level_label.set_text(f'Level: {level}')
        if self.stats_label is not None:
            self.stats_label.set_text(f'Hits {stats.hits}/{stats.shots}  Time {int(stats.elapsed_ms / 1000)}s')

    def show_banner(self, text: str, seconds: float = 3.0) -> None:
        if not text:
            return
        if self.banner_label is not None:
            self.banner_label.kill()
        width = min(400, self.width - 40)
        x = (self.width - width) // 2
        self.banner_label = pygame_gui.elements.UILabel(pygame.Rect(x, 84, width, 30), text=text, manager=self.manager)
        self.banner_time_left = seconds

    def consume(self, events: List[GameEvent]) -> None:
        for ev in events:
            if isinstance(ev, WaveCleared):
                self.show_banner(f'Wave cleared! {ev.spawned} incoming', 2.0)
            elif isinstance(ev, ModeChanged) and ev.new == 'playing':
                self.show_banner('Get ready!', 1.5)
