from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import List, Optional

from .config import Settings
from .events import GameEvent
from .states import Mode


@dataclass
class Arena:
    """Playfield geometry for one viewport size.

    Every size or speed constant from the settings is multiplied by
    ``scale`` (floored, as whole pixels) so proportions survive resizes.
    """

    width: float
    height: float
    scale: float
    bottom_margin: float
    min_radius: float
    max_radius: float
    launcher_width: float
    launcher_height: float
    bullet_speed: float
    bullet_width: float
    bullet_height: float

    @classmethod
    def from_viewport(cls, width: float, height: float, settings: Settings) -> "Arena":
        width = max(1.0, float(width))
        height = max(1.0, float(height))
        ar = settings.arena
        scale = min(width / ar.reference_width, height / ar.reference_height)

        def px(v: float) -> float:
            return float(max(1, math.floor(v * scale)))

        return cls(
            width=width,
            height=height,
            scale=scale,
            bottom_margin=ar.bottom_margin,
            min_radius=px(settings.targets.min_radius),
            max_radius=px(settings.targets.max_radius),
            launcher_width=px(settings.launcher.width),
            launcher_height=px(settings.launcher.height),
            bullet_speed=px(settings.launcher.bullet_speed),
            bullet_width=settings.launcher.bullet_width * scale,
            bullet_height=settings.launcher.bullet_height * scale,
        )

    def floor_y(self, radius: float) -> float:
        return self.height - radius - self.bottom_margin


@dataclass
class RunStats:
    elapsed_ms: float = 0.0
    shots: int = 0
    hits: int = 0
    destroyed: int = 0
    waves_cleared: int = 0


@dataclass
class SessionState:
    arena: Arena
    mode: Mode = Mode.SPLASH
    score: int = 0
    level: int = 1
    fire_rate: float = 8.0
    bullet_power: int = 5
    pointer_x: Optional[float] = None
    now_ms: float = 0.0
    frame: int = 0
    rng: random.Random = field(default_factory=lambda: random.Random(2025))
    stats: RunStats = field(default_factory=RunStats)
    events: List[GameEvent] = field(default_factory=list)

    def emit(self, event: GameEvent) -> None:
        self.events.append(event)

    def drain_events(self) -> List[GameEvent]:
        out, self.events = self.events, []
        return out

    @property
    def playing(self) -> bool:
        return self.mode is Mode.PLAYING
