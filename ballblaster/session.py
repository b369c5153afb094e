"""Headless game session: screen state machine plus the per-tick simulation.

A ``GameSession`` owns one esper world. Every public method activates that
world first, so several sessions (or a test suite) can live side by side in
one process. Nothing here draws; the pygame front end reads ``snapshot()``.
"""
from __future__ import annotations

import itertools
import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional

import esper

from .config import Settings
from .context import Arena, SessionState
from .ecs_components import Launcher, Position, Projectile, Sprite, Target, Velocity
from .ecs_systems import add_processors
from .events import GameEvent, ModeChanged, ProjectileFired
from .factories import create_launcher, create_projectile, spawn_wave
from .physics import barrel_tip, clamp, resize_launcher, resize_target
from .states import Mode, can_transition, restart_button, start_button

logger = logging.getLogger(__name__)

_world_ids = itertools.count(1)


@dataclass(frozen=True)
class TargetView:
    entity: int
    x: float
    y: float
    radius: float
    health: int
    original_health: int
    color: tuple[int, int, int]
    flash: float
    shake: float
    just_hit: bool
    cracks: tuple = ()


@dataclass(frozen=True)
class ProjectileView:
    entity: int
    x: float
    y: float
    width: float
    height: float
    age: int = 0


@dataclass(frozen=True)
class LauncherView:
    x: float
    y: float
    width: float
    height: float
    recoil: float
    heat: float
    wheel_rotation: float


@dataclass
class Frame:
    mode: Mode
    arena: Arena
    score: int
    level: int
    transition_progress: float
    targets: List[TargetView] = field(default_factory=list)
    projectiles: List[ProjectileView] = field(default_factory=list)
    launcher: Optional[LauncherView] = None
    events: List[GameEvent] = field(default_factory=list)


class GameSession:
    def __init__(self, settings: Settings, width: Optional[float] = None, height: Optional[float] = None) -> None:
        self.settings = settings
        self.world_name = f"ballblaster-{next(_world_ids)}"
        w = settings.window.width if width is None else width
        h = settings.window.height if height is None else height
        self.arena = Arena.from_viewport(w, h, settings)
        self.rng = random.Random(settings.gameplay.seed)
        self.state = self._new_state(Mode.SPLASH)
        self.splash_elapsed_ms = 0.0
        self.transition_elapsed_ms = 0.0
        self._build_world()

    # World management

    def activate(self) -> None:
        """Make this session's world the current esper world."""
        if esper.current_world != self.world_name:
            esper.switch_world(self.world_name)

    def _build_world(self) -> None:
        if esper.current_world == self.world_name:
            esper.switch_world("default")
        if self.world_name in esper.list_worlds():
            esper.delete_world(self.world_name)
        esper.switch_world(self.world_name)
        add_processors(self.settings)

    def close(self) -> None:
        """Drop this session's ECS world."""
        if esper.current_world == self.world_name:
            esper.switch_world("default")
        if self.world_name in esper.list_worlds():
            esper.delete_world(self.world_name)

    def _new_state(self, mode: Mode) -> SessionState:
        return SessionState(
            arena=self.arena,
            mode=mode,
            fire_rate=self.settings.launcher.fire_rate,
            bullet_power=self.settings.launcher.bullet_power,
            rng=self.rng,
        )

    # State machine

    @property
    def mode(self) -> Mode:
        return self.state.mode

    def _set_mode(self, mode: Mode) -> None:
        old = self.state.mode
        if old is mode:
            return
        if not can_transition(old, mode):
            raise ValueError(f"Illegal transition {old.value} -> {mode.value}")
        self.state.mode = mode
        self._announce(old, mode)

    def _announce(self, old: Mode, new: Mode) -> None:
        logger.info("Mode %s -> %s", old.value, new.value)
        self.state.emit(ModeChanged(old.value, new.value))

    def start_game(self) -> SessionState:
        """Reset score, level and entities and enter PLAYING.

        Used both from the title screen and from game over.
        """
        old = self.state.mode
        if not can_transition(old, Mode.PLAYING):
            raise ValueError(f"Cannot start a game from {old.value}")
        prev = self.state
        self.state = self._new_state(Mode.PLAYING)
        self.state.pointer_x = prev.pointer_x
        self.state.now_ms = prev.now_ms
        # Undelivered cosmetic events survive the reset
        self.state.events = prev.drain_events()

        self._build_world()
        create_launcher(self.state, self.settings)
        spawn_wave(self.state, self.settings)
        self._announce(old, Mode.PLAYING)
        return self.state

    def tick(self, elapsed_ms: float) -> SessionState:
        elapsed_ms = max(0.0, float(elapsed_ms))
        state = self.state
        state.now_ms += elapsed_ms

        if state.mode is Mode.SPLASH:
            self.splash_elapsed_ms += elapsed_ms
            if self.splash_elapsed_ms >= self.settings.timing.splash_ms:
                self._enter_transition()
        elif state.mode is Mode.TRANSITION:
            self.transition_elapsed_ms += elapsed_ms
            if self.transition_elapsed_ms >= self.settings.timing.transition_ms:
                self._set_mode(Mode.TITLE)
        elif state.mode is Mode.PLAYING:
            self._step(elapsed_ms)
        # TITLE waits for a click; GAME_OVER is frozen
        return self.state

    def _step(self, elapsed_ms: float) -> None:
        ph = self.settings.physics
        dt = min(elapsed_ms / ph.frame_ms, ph.max_frame_step)
        state = self.state
        state.frame += 1
        state.stats.elapsed_ms += elapsed_ms
        self.activate()
        esper.process(state, dt)
        if state.mode is Mode.GAME_OVER:
            self._announce(Mode.PLAYING, Mode.GAME_OVER)

    def _enter_transition(self) -> None:
        self.transition_elapsed_ms = 0.0
        self._set_mode(Mode.TRANSITION)

    @property
    def transition_progress(self) -> float:
        if self.state.mode is Mode.TRANSITION:
            return clamp(self.transition_elapsed_ms / max(1.0, self.settings.timing.transition_ms), 0.0, 1.0)
        if self.state.mode is Mode.SPLASH:
            return 0.0
        return 1.0

    # Input

    def move_pointer(self, x: float) -> None:
        self.state.pointer_x = float(x)

    def click(self, x: float, y: float) -> bool:
        """Contextual trigger. Returns True when the click changed the mode."""
        mode = self.state.mode
        if mode is Mode.SPLASH:
            self._enter_transition()
            return True
        if mode is Mode.TRANSITION:
            self._set_mode(Mode.TITLE)
            return True
        if mode is Mode.TITLE and start_button(self.arena).contains(x, y):
            self.start_game()
            return True
        if mode is Mode.GAME_OVER and restart_button(self.arena).contains(x, y):
            self.start_game()
            return True
        return False

    def press_key(self, key: str) -> bool:
        key = key.lower()
        mode = self.state.mode
        if key == "space" and mode is Mode.PLAYING:
            return self.fire_manual()
        if key in ("return", "enter"):
            if mode in (Mode.SPLASH, Mode.TRANSITION):
                return self.click(-1.0, -1.0)
            if mode is Mode.TITLE:
                b = start_button(self.arena)
                return self.click(b.cx, b.cy)
            if mode is Mode.GAME_OVER:
                b = restart_button(self.arena)
                return self.click(b.cx, b.cy)
        return False

    def fire_manual(self) -> bool:
        """Extra shot on demand; the automatic cadence is left untouched."""
        if self.state.mode is not Mode.PLAYING:
            return False
        self.activate()
        for _, (pos, launcher) in esper.get_components(Position, Launcher):
            x, y = barrel_tip(pos, launcher)
            create_projectile(self.state, x, y)
            self.state.emit(ProjectileFired(x, y, manual=True))
            return True
        return False

    def resize(self, width: float, height: float) -> Arena:
        old_scale = self.arena.scale
        self.arena = Arena.from_viewport(width, height, self.settings)
        self.state.arena = self.arena
        logger.debug("Viewport %.0fx%.0f, scale %.3f", self.arena.width, self.arena.height, self.arena.scale)

        self.activate()
        ph = self.settings.physics
        for _, (pos, vel, target) in esper.get_components(Position, Velocity, Target):
            resize_target(pos, vel, target, old_scale, self.arena, ph)
        for _, (pos, launcher) in esper.get_components(Position, Launcher):
            resize_launcher(pos, launcher, self.arena)
        for _, (pos, proj) in esper.get_components(Position, Projectile):
            proj.speed = self.arena.bullet_speed
            proj.half_width = self.arena.bullet_width / 2
            proj.height = self.arena.bullet_height
        return self.arena

    # Output

    def snapshot(self, drain: bool = True) -> Frame:
        self.activate()
        state = self.state
        frame = Frame(
            mode=state.mode,
            arena=self.arena,
            score=state.score,
            level=state.level,
            transition_progress=self.transition_progress,
        )
        for e, (pos, target, sprite) in sorted(esper.get_components(Position, Target, Sprite), key=lambda i: i[0]):
            frame.targets.append(TargetView(
                entity=e,
                x=pos.x,
                y=pos.y,
                radius=target.radius,
                health=target.health,
                original_health=target.original_health,
                color=sprite.color,
                flash=target.flash,
                shake=target.shake,
                just_hit=target.just_hit,
                cracks=tuple(target.cracks),
            ))
        for e, (pos, proj) in sorted(esper.get_components(Position, Projectile), key=lambda i: i[0]):
            frame.projectiles.append(ProjectileView(e, pos.x, pos.y, proj.half_width * 2, proj.height, proj.age))
        for _, (pos, launcher) in esper.get_components(Position, Launcher):
            frame.launcher = LauncherView(
                pos.x, pos.y, launcher.width, launcher.height,
                launcher.recoil, launcher.heat, launcher.wheel_rotation,
            )
        if drain:
            frame.events = state.drain_events()
        return frame

    # Convenience for callers that need live counts

    def target_count(self) -> int:
        self.activate()
        return len(esper.get_component(Target))

    def projectile_count(self) -> int:
        self.activate()
        return len(esper.get_component(Projectile))
