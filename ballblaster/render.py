from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pygame

from .config import Settings
from .context import Arena
from .events import (
    FloatingText,
    GameEvent,
    ModeChanged,
    ScoreAwarded,
    TargetDestroyed,
    TargetHit,
    TargetImpact,
    WaveCleared,
)
from .session import Frame, LauncherView, TargetView
from .states import Button, Mode, restart_button, start_button

logger = logging.getLogger(__name__)

RANKS: Tuple[Tuple[int, str, Tuple[int, int, int]], ...] = (
    (100, "ROOKIE", (150, 150, 255)),
    (500, "NOVICE", (100, 255, 100)),
    (1000, "SHARP SHOOTER", (255, 200, 0)),
    (2000, "MASTER BLASTER", (255, 100, 100)),
)
TOP_RANK = ("LEGENDARY", (255, 50, 200))


def score_rank(score: int) -> tuple[str, tuple[int, int, int]]:
    for limit, name, color in RANKS:
        if score < limit:
            return name, color
    return TOP_RANK


def load_image(path: str | Path) -> Optional[pygame.Surface]:
    """Load an optional image; the caller falls back to drawn art on None."""
    p = Path(path)
    if not p.exists():
        logger.warning("Image %s not found, using fallback art", p)
        return None
    try:
        return pygame.image.load(str(p))
    except pygame.error as exc:
        logger.warning("Failed to load %s (%s), using fallback art", p, exc)
        return None


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def _lerp_color(a, b, t: float) -> tuple[int, int, int]:
    t = max(0.0, min(1.0, t))
    return tuple(int(_lerp(x, y, t)) for x, y in zip(a, b))


@dataclass
class _Particle:
    x: float
    y: float
    vx: float
    vy: float
    size: float
    color: tuple[int, int, int]
    life: float
    max_life: float


@dataclass
class _Floating:
    text: str
    x: float
    y: float
    vy: float
    color: tuple[int, int, int]
    size: int
    age_ms: float
    lifetime_ms: float


@dataclass
class _Crystal:
    ratios: List[float]
    rotation: float
    spin: float


class Renderer:
    def __init__(self, settings: Settings, surface: pygame.Surface) -> None:
        self.settings = settings
        self.surf = surface
        self.rng = random.Random()
        self.background = load_image(settings.assets.background)
        self.splash = load_image(settings.assets.splash)
        self._scaled: Dict[tuple, pygame.Surface] = {}
        self._fonts: Dict[int, pygame.font.Font] = {}
        self.particles: List[_Particle] = []
        self.floating: List[_Floating] = []
        self.crystals: Dict[int, _Crystal] = {}

    def font(self, size: float) -> pygame.font.Font:
        key = max(8, int(size))
        if key not in self._fonts:
            self._fonts[key] = pygame.font.Font(None, key)
        return self._fonts[key]

    # Events and effects

    def consume(self, events: List[GameEvent], arena: Arena) -> None:
        s = arena.scale
        for ev in events:
            if isinstance(ev, ScoreAwarded):
                self.floating.append(_Floating(f"+{ev.points}", ev.x, ev.y, -2 * s, ev.color, int(24 * s), 0.0, 1000.0))
            elif isinstance(ev, FloatingText):
                size = int(ev.size or 20 * s)
                self.floating.append(_Floating(ev.text, ev.x, ev.y, -1 * s, ev.color, size, 0.0, ev.lifetime_ms))
            elif isinstance(ev, TargetDestroyed):
                self._burst(ev.x, ev.y, 20, ev.color, s, spread=ev.radius)
            elif isinstance(ev, TargetHit):
                self._burst(ev.x, ev.y, ev.damage + 1, ev.color, s)
            elif isinstance(ev, TargetImpact):
                self._burst(ev.x, ev.y + ev.radius, ev.particles, ev.color, s)
            elif isinstance(ev, ModeChanged) and ev.new == Mode.PLAYING.value:
                # Entity ids restart with every new world
                self.crystals.clear()
            elif isinstance(ev, WaveCleared):
                for _ in range(20):
                    x = self.rng.uniform(arena.width * 0.2, arena.width * 0.8)
                    y = self.rng.uniform(arena.height * 0.2, arena.height * 0.6)
                    color = (self.rng.randint(100, 255), self.rng.randint(150, 255), self.rng.randint(50, 200))
                    self._burst(x, y, 1, color, s)

    def _burst(self, x: float, y: float, count: int, color, scale: float, spread: float = 0.0) -> None:
        for _ in range(count):
            a = self.rng.uniform(0, math.tau)
            speed = self.rng.uniform(1, 5) * scale
            d = self.rng.uniform(0.1, 1.0) * spread
            life = self.rng.uniform(20, 40)
            self.particles.append(_Particle(
                x + math.cos(a) * d, y + math.sin(a) * d,
                math.cos(a) * speed, math.sin(a) * speed,
                self.rng.uniform(3, 8) * scale, tuple(color), life, life,
            ))

    def update(self, dt_ms: float, arena: Arena) -> None:
        frames = dt_ms / self.settings.physics.frame_ms
        for p in self.particles:
            p.x += p.vx * frames
            p.y += p.vy * frames
            p.vy += 0.1 * arena.scale * frames
            p.life -= frames
        self.particles = [p for p in self.particles if p.life > 0]
        for f in self.floating:
            f.y += f.vy * frames
            f.age_ms += dt_ms
        self.floating = [f for f in self.floating if f.age_ms < f.lifetime_ms]

    # Frame

    def draw(self, frame: Frame, mouse: tuple[int, int] = (-1, -1)) -> None:
        arena = frame.arena
        if frame.mode is Mode.SPLASH:
            self._draw_splash(self.surf, arena, 0)
        elif frame.mode is Mode.TRANSITION:
            offset = int(arena.width * frame.transition_progress)
            self.surf.fill((0, 0, 0))
            self._draw_splash(self.surf, arena, -offset)
            title = pygame.Surface((int(arena.width), int(arena.height)))
            self._draw_background(title, arena)
            self._draw_title(title, arena, (-1, -1))
            self.surf.blit(title, (int(arena.width) - offset, 0))
        elif frame.mode is Mode.TITLE:
            self._draw_background(self.surf, arena)
            self._draw_title(self.surf, arena, mouse)
        else:
            self._draw_background(self.surf, arena)
            self._draw_play(frame)
            if frame.mode is Mode.GAME_OVER:
                self._draw_game_over(frame, mouse)

    def _image(self, img: pygame.Surface, arena: Arena) -> pygame.Surface:
        key = (id(img), int(arena.width), int(arena.height))
        if key not in self._scaled:
            self._scaled[key] = pygame.transform.smoothscale(img, (int(arena.width), int(arena.height)))
        return self._scaled[key]

    def _draw_splash(self, surf: pygame.Surface, arena: Arena, x: int) -> None:
        if self.splash is not None:
            surf.blit(self._image(self.splash, arena), (x, 0))
            return
        surf.fill((0, 0, 0), pygame.Rect(x, 0, int(arena.width), int(arena.height)))
        text = self.font(40 * arena.scale).render("BALL BLASTER", True, (255, 255, 255))
        surf.blit(text, text.get_rect(center=(x + arena.width / 2, arena.height / 2)))

    def _draw_background(self, surf: pygame.Surface, arena: Arena) -> None:
        if self.background is not None:
            surf.blit(self._image(self.background, arena), (0, 0))
            return
        # Fallback sky gradient with a ground band under the floor line
        h = int(arena.height)
        w = int(arena.width)
        for y in range(0, h, 4):
            color = _lerp_color((110, 170, 235), (200, 225, 250), y / max(1, h))
            pygame.draw.rect(surf, color, pygame.Rect(0, y, w, 4))
        ground = int(arena.height - arena.bottom_margin)
        pygame.draw.rect(surf, (90, 140, 70), pygame.Rect(0, ground, w, h - ground))
        pygame.draw.line(surf, (60, 100, 50), (0, ground), (w, ground), 3)

    def _draw_button(self, surf: pygame.Surface, button: Button, arena: Arena, hover: bool) -> None:
        rect = pygame.Rect(int(button.left), int(button.top), int(button.width), int(button.height))
        fill = (70, 190, 70) if hover else (40, 150, 40)
        pygame.draw.rect(surf, fill, rect, border_radius=int(10 * arena.scale))
        pygame.draw.rect(surf, (100, 255, 100), rect, max(1, int(2 * arena.scale)), border_radius=int(10 * arena.scale))
        text = self.font(28 * arena.scale).render(button.label, True, (255, 255, 255))
        surf.blit(text, text.get_rect(center=(button.cx, button.cy)))

    def _draw_title(self, surf: pygame.Surface, arena: Arena, mouse: tuple[int, int]) -> None:
        f = self.font(24 * arena.scale)
        lines = ("Move the cannon left/right to hit the balls", "Destroy all balls before they hit you")
        for i, line in enumerate(lines):
            text = f.render(line, True, (0, 0, 0))
            surf.blit(text, text.get_rect(center=(arena.width / 2, arena.height / 2 + i * 30 * arena.scale)))
        button = start_button(arena)
        self._draw_button(surf, button, arena, button.contains(*mouse))

    def _draw_play(self, frame: Frame) -> None:
        arena = frame.arena
        if frame.launcher is not None:
            self._draw_launcher(frame.launcher, arena)
        for p in frame.projectiles:
            # Exhaust trail grows over the first few frames of flight
            for i in range(1, min(p.age, 3) + 1):
                ghost = pygame.Rect(0, 0, max(1, int(p.width * (1 - 0.25 * i))), max(1, int(p.height * 0.5)))
                ghost.center = (int(p.x), int(p.y + p.height * 0.5 * i))
                pygame.draw.ellipse(self.surf, _lerp_color((255, 230, 0), (255, 120, 0), i / 3), ghost)
            rect = pygame.Rect(0, 0, max(2, int(p.width)), max(2, int(p.height)))
            rect.center = (int(p.x), int(p.y))
            pygame.draw.ellipse(self.surf, (255, 230, 0), rect)
            pygame.draw.ellipse(self.surf, (200, 100, 0), rect, 1)

        live = set()
        for t in frame.targets:
            live.add(t.entity)
            self._draw_target(t, arena)
        for eid in [e for e in self.crystals if e not in live]:
            del self.crystals[eid]

        for p in self.particles:
            alpha = max(0.0, p.life / p.max_life)
            color = _lerp_color((255, 255, 255), p.color, 1 - alpha * 0.3)
            pygame.draw.circle(self.surf, color, (int(p.x), int(p.y)), max(1, int(p.size * alpha)))
        for fl in self.floating:
            text = self.font(fl.size).render(fl.text, True, fl.color)
            text.set_alpha(int(255 * max(0.0, 1 - fl.age_ms / fl.lifetime_ms)))
            self.surf.blit(text, text.get_rect(center=(int(fl.x), int(fl.y))))

    def _crystal(self, eid: int) -> _Crystal:
        c = self.crystals.get(eid)
        if c is None:
            n = self.rng.randint(5, 8)
            c = _Crystal([self.rng.uniform(0.8, 1.2) for _ in range(n)], self.rng.uniform(0, math.tau), self.rng.uniform(-0.01, 0.01))
            self.crystals[eid] = c
        return c

    def _draw_target(self, t: TargetView, arena: Arena) -> None:
        c = self._crystal(t.entity)
        c.rotation += c.spin
        cx, cy = t.x, t.y
        if t.shake > 0.1:
            cx += self.rng.uniform(-t.shake, t.shake)
            cy += self.rng.uniform(-t.shake, t.shake)
        n = len(c.ratios)
        points = [
            (cx + math.cos(c.rotation + i * math.tau / n) * t.radius * r,
             cy + math.sin(c.rotation + i * math.tau / n) * t.radius * r)
            for i, r in enumerate(c.ratios)
        ]
        pct = t.health / t.original_health if t.original_health > 0 else 0.0
        color = _lerp_color((255, 0, 0), t.color, pct)
        if t.flash > 0:
            color = _lerp_color(color, (255, 255, 255), t.flash / 255)
        pygame.draw.polygon(self.surf, color, points)
        pygame.draw.polygon(self.surf, (30, 30, 30), points, max(1, int(1.5 * arena.scale)))
        for crack in t.cracks:
            start = (cx + math.cos(crack.start_angle) * t.radius * 0.2, cy + math.sin(crack.start_angle) * t.radius * 0.2)
            end = (cx + math.cos(crack.end_angle) * t.radius * crack.length, cy + math.sin(crack.end_angle) * t.radius * crack.length)
            pygame.draw.line(self.surf, (255, 255, 255), start, end, 1)
        text = self.font(t.radius * 0.9).render(str(t.health), True, (255, 255, 255))
        self.surf.blit(text, text.get_rect(center=(int(cx), int(cy))))

    def _draw_launcher(self, ln: LauncherView, arena: Arena) -> None:
        s = arena.scale
        base = pygame.Rect(0, 0, int(ln.width * 0.9), int(ln.height * 0.4))
        base.center = (int(ln.x), int(ln.y + ln.height * 0.2))
        pygame.draw.rect(self.surf, (70, 70, 70), base, border_radius=int(5 * s))
        wheel_r = max(2, int(ln.height * 0.4))
        for side in (-1, 1):
            center = (int(ln.x + side * ln.width * 0.3), int(ln.y + ln.height * 0.25))
            pygame.draw.circle(self.surf, (40, 40, 40), center, wheel_r)
            spoke = (center[0] + math.cos(ln.wheel_rotation) * wheel_r, center[1] + math.sin(ln.wheel_rotation) * wheel_r)
            pygame.draw.line(self.surf, (90, 90, 90), center, spoke, 2)
        body = pygame.Rect(0, 0, int(ln.width * 0.7), int(ln.height * 0.5))
        body.center = (int(ln.x), int(ln.y - ln.height * 0.1))
        pygame.draw.rect(self.surf, (50, 50, 50), body, border_radius=int(8 * s))
        barrel_len = ln.height * 1.2
        barrel = pygame.Rect(0, 0, int(ln.width * 0.4), int(barrel_len))
        barrel.center = (int(ln.x), int(ln.y - ln.height / 2 - barrel_len / 2 + ln.recoil))
        color = _lerp_color((70, 70, 70), (255, 100, 0), ln.heat / 100)
        pygame.draw.rect(self.surf, color, barrel, border_radius=int(ln.width * 0.2))

    def _draw_game_over(self, frame: Frame, mouse: tuple[int, int]) -> None:
        arena = frame.arena
        s = arena.scale
        overlay = pygame.Surface((int(arena.width), int(arena.height)), pygame.SRCALPHA)
        overlay.fill((20, 10, 40, 200))
        self.surf.blit(overlay, (0, 0))

        def centered(text: str, size: float, color, y: float) -> None:
            img = self.font(size).render(text, True, color)
            self.surf.blit(img, img.get_rect(center=(arena.width / 2, y)))

        centered("GAME OVER", 64 * s, (255, 70, 40), arena.height * 0.22)
        centered("FINAL SCORE", 24 * s, (200, 200, 255), arena.height * 0.4 - 35 * s)
        centered(str(frame.score), 52 * s, (255, 255, 150), arena.height * 0.4)
        rank, rank_color = score_rank(frame.score)
        centered(rank, 28 * s, rank_color, arena.height * 0.4 + 48 * s)
        centered("LEVEL REACHED", 22 * s, (150, 200, 255), arena.height * 0.58 - 28 * s)
        centered(str(frame.level), 40 * s, (255, 255, 255), arena.height * 0.58)
        button = restart_button(arena)
        self._draw_button(self.surf, button, arena, button.contains(*mouse))
