from __future__ import annotations

import logging
from typing import List, Optional

import esper

from .config import Settings
from .context import SessionState
from .ecs_components import Launcher, Position, Projectile, Sprite, Target, Velocity
from .physics import clamp, launcher_y, target_health

logger = logging.getLogger(__name__)


def create_launcher(state: SessionState, settings: Settings) -> int:
    arena = state.arena
    launcher = Launcher(
        width=arena.launcher_width,
        height=arena.launcher_height,
        fire_rate=state.fire_rate,
        barrel_ratio=settings.launcher.barrel_ratio,
    )
    return esper.create_entity(
        Position(arena.width / 2, launcher_y(arena, launcher.height)),
        launcher,
    )


def create_projectile(state: SessionState, x: float, y: float, damage: Optional[int] = None) -> int:
    arena = state.arena
    proj = Projectile(
        speed=arena.bullet_speed,
        damage=state.bullet_power if damage is None else damage,
        half_width=arena.bullet_width / 2,
        height=arena.bullet_height,
    )
    state.stats.shots += 1
    return esper.create_entity(Position(x, y), proj)


def create_target(
    state: SessionState,
    settings: Settings,
    x: float,
    y: float,
    radius: float,
    health: int,
    dy: float = 0.0,
) -> int:
    arena = state.arena
    rng = state.rng
    tg = settings.targets
    ph = settings.physics
    dx = rng.uniform(tg.min_dx, tg.max_dx) * (1 if rng.random() > 0.5 else -1) * arena.scale
    target = Target(
        radius=radius,
        health=health,
        original_health=health,
        gravity=ph.gravity * arena.scale * ph.gravity_scale,
        bounce_factor=ph.bounce_dampening + ph.bounce_bonus,
        radius_ratio=radius / arena.min_radius,
    )
    base = rng.choice(tg.palette)
    color = tuple(int(clamp(c + rng.uniform(-20, 20), 0, 255)) for c in base)
    return esper.create_entity(Position(x, y), Velocity(dx, dy), target, Sprite(color))


def wave_size(level: int, settings: Settings) -> int:
    return settings.waves.base_count + min(level, settings.waves.level_cap)


def spawn_wave(state: SessionState, settings: Settings) -> List[int]:
    """Spawn the targets for ``state.level``.

    Targets are spread evenly across the width with some jitter; later
    levels start closer to the top so the player has less time.
    """
    arena = state.arena
    rng = state.rng
    wv = settings.waves
    tg = settings.targets
    count = wave_size(state.level, settings)
    segment = arena.width / (count + 1)

    spawned = []
    for i in range(count):
        radius = rng.uniform(arena.min_radius, arena.max_radius)
        x = segment * (i + 1) + rng.uniform(-segment / 3, segment / 3)

        max_y = arena.height - arena.bottom_margin - radius * 3
        min_y = radius * 2
        start_y = rng.uniform(min_y, max_y * wv.start_height_fraction)
        start_y -= (state.level - 1) * wv.level_height_step * arena.scale
        y = clamp(start_y, min_y, max_y)

        dy = rng.uniform(tg.min_initial_dy, tg.max_initial_dy) * arena.scale
        health = target_health(
            radius, state.level, arena.max_radius, rng,
            lo=wv.min_health_factor, hi=wv.max_health_factor,
        )
        spawned.append(create_target(state, settings, x, y, radius, health, dy=dy))

    logger.info("Level %d: spawned %d targets", state.level, len(spawned))
    return spawned
