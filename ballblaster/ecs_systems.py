from __future__ import annotations

import logging
from typing import Optional

import esper

from .config import Settings
from .context import SessionState
from .ecs_components import Launcher, Position, Projectile, Sprite, Target, Velocity
from .events import (
    DESTROY_COLOR,
    LEVEL_COLOR,
    Color,
    FloatingText,
    ProjectileFired,
    ScoreAwarded,
    TargetDestroyed,
    TargetHit,
    TargetImpact,
    WaveCleared,
    score_color,
)
from .factories import create_projectile, spawn_wave
from .physics import (
    advance_launcher,
    advance_projectile,
    advance_target,
    apply_damage,
    distance,
    launcher_hits,
    projectile_hits,
    projectile_out_of_bounds,
    size_bonus,
)
from .states import Mode

logger = logging.getLogger(__name__)


def _eid(item: tuple) -> int:
    return item[0]


def award_points(state: SessionState, points: int, x: float, y: float, color: Optional[Color] = None) -> None:
    state.score += points
    state.emit(ScoreAwarded(points, x, y, color or score_color(points)))


class LauncherSystem(esper.Processor):
    def __init__(self, settings: Settings) -> None:
        super().__init__()
        self.settings = settings

    def process(self, state: SessionState, dt: float) -> None:
        if not state.playing:
            return
        for _, (pos, launcher) in esper.get_components(Position, Launcher):
            launcher.fire_rate = state.fire_rate
            shot = advance_launcher(pos, launcher, state.pointer_x, state.now_ms, state.arena, dt)
            if shot is not None:
                create_projectile(state, shot[0], shot[1])
                state.emit(ProjectileFired(shot[0], shot[1]))


class ProjectileSystem(esper.Processor):
    def process(self, state: SessionState, dt: float) -> None:
        if not state.playing:
            return
        # Creation order; projectiles leaving the top are gone before any hit test
        for e, (pos, proj) in sorted(esper.get_components(Position, Projectile), key=_eid):
            advance_projectile(pos, proj, state.frame, dt)
            if projectile_out_of_bounds(pos):
                esper.delete_entity(e, immediate=True)


class TargetPhysicsSystem(esper.Processor):
    def __init__(self, settings: Settings) -> None:
        super().__init__()
        self.settings = settings

    def process(self, state: SessionState, dt: float) -> None:
        if not state.playing:
            return
        physics = self.settings.physics
        for _, (pos, vel, target, sprite) in esper.get_components(Position, Velocity, Target, Sprite):
            bounce = advance_target(pos, vel, target, state.arena, physics, state.rng, dt)
            if bounce.impact:
                state.emit(TargetImpact(pos.x, pos.y, target.radius, sprite.color, particles=3))


class CollisionSystem(esper.Processor):
    """Resolves projectile hits, damage, removal and scoring.

    Each projectile hits at most one target per tick. When several targets
    overlap the same projectile the nearest one takes the hit (lowest entity
    id on an exact tie), so crediting never depends on container order.
    """

    def __init__(self, settings: Settings) -> None:
        super().__init__()
        self.settings = settings

    def process(self, state: SessionState, dt: float) -> None:
        if not state.playing:
            return
        targets = sorted(esper.get_components(Position, Target, Sprite), key=_eid)
        alive = {e for e, _ in targets}
        for pe, (ppos, proj) in sorted(esper.get_components(Position, Projectile), key=_eid):
            best = None
            best_d = 0.0
            for te, (tpos, target, sprite) in targets:
                if te not in alive or not projectile_hits(ppos, proj, tpos, target):
                    continue
                d = distance(ppos.x, ppos.y, tpos.x, tpos.y)
                if best is None or d < best_d:
                    best, best_d = (te, tpos, target, sprite), d
            if best is None:
                continue

            te, tpos, target, sprite = best
            if self._hit(state, te, tpos, target, sprite, proj.damage):
                alive.discard(te)
            # Single use, whether or not the target survived
            esper.delete_entity(pe, immediate=True)

    def _hit(self, state: SessionState, te: int, tpos: Position, target: Target, sprite: Sprite, damage: int) -> bool:
        result = apply_damage(tpos, target, damage, state.arena.scale, state.rng, self.settings.physics.max_cracks)
        state.stats.hits += 1
        state.emit(TargetHit(result.x, result.y, result.radius, damage, result.health, sprite.color))
        award_points(state, damage, result.x, result.y)
        if not result.destroyed:
            return False

        scoring = self.settings.scoring
        bonus = scoring.destroy_bonus + size_bonus(result.radius, state.arena.min_radius, scoring.size_bonus_factor)
        award_points(state, bonus, result.x, result.y, DESTROY_COLOR)
        state.emit(TargetDestroyed(result.x, result.y, result.radius, sprite.color))
        state.stats.destroyed += 1
        esper.delete_entity(te, immediate=True)
        return True


class LauncherContactSystem(esper.Processor):
    def process(self, state: SessionState, dt: float) -> None:
        if not state.playing:
            return
        for _, (lpos, launcher) in esper.get_components(Position, Launcher):
            for te, (tpos, target) in sorted(esper.get_components(Position, Target), key=_eid):
                if launcher_hits(lpos, launcher, tpos, target.radius):
                    logger.info("Target %d reached the launcher at level %d", te, state.level)
                    state.mode = Mode.GAME_OVER
                    return


class WaveSystem(esper.Processor):
    def __init__(self, settings: Settings) -> None:
        super().__init__()
        self.settings = settings

    def process(self, state: SessionState, dt: float) -> None:
        if not state.playing:
            return
        if esper.get_component(Target):
            return
        state.level += 1
        state.stats.waves_cleared += 1
        spawned = spawn_wave(state, self.settings)
        arena = state.arena
        state.emit(WaveCleared(state.level, len(spawned)))
        state.emit(FloatingText(
            f"LEVEL {state.level}",
            arena.width / 2,
            arena.height / 2,
            LEVEL_COLOR,
            lifetime_ms=2000.0,
            size=40 * arena.scale,
        ))


def add_processors(settings: Settings) -> None:
    """Register the per-tick pipeline on the current esper world."""
    esper.add_processor(LauncherSystem(settings), priority=100)
    esper.add_processor(ProjectileSystem(), priority=90)
    esper.add_processor(TargetPhysicsSystem(settings), priority=80)
    esper.add_processor(CollisionSystem(settings), priority=60)
    esper.add_processor(LauncherContactSystem(), priority=50)
    esper.add_processor(WaveSystem(settings), priority=40)
