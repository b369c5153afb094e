"""Kinematics, damage and collision rules for targets, projectiles and the launcher.

Everything here works on plain components and returns plain values so the
processors in ``ecs_systems`` stay thin and the rules can be tested without
an ECS world.  Velocities are in pixels per frame; ``dt`` is measured in
frames (1.0 == one 60 Hz frame).
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Optional

from .config import PhysicsConfig
from .context import Arena
from .ecs_components import Crack, Launcher, Position, Projectile, Target, Velocity


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def distance(ax: float, ay: float, bx: float, by: float) -> float:
    return math.hypot(ax - bx, ay - by)


# Targets


@dataclass(frozen=True)
class BounceResult:
    wall: bool = False
    floor: bool = False
    impact: bool = False  # floor contact fast enough to chip the crystal


@dataclass(frozen=True)
class HitResult:
    destroyed: bool
    x: float
    y: float
    radius: float
    health: int


def add_crack(target: Target, rng: random.Random, max_cracks: int) -> bool:
    if len(target.cracks) >= max_cracks:
        return False
    start = rng.uniform(0.0, math.tau)
    target.cracks.append(Crack(
        start_angle=start,
        end_angle=start + rng.uniform(-math.pi / 4, math.pi / 4),
        length=rng.uniform(0.3, 0.9),
    ))
    return True


def bounce_velocity(dy: float, bounce_factor: float, min_velocity: float) -> float:
    """Upward velocity after floor contact.

    Slow contacts get kicked up at ``min_velocity`` so a target never comes
    to rest on the floor.
    """
    if abs(dy) < min_velocity:
        return -min_velocity
    return -abs(dy * bounce_factor)


def advance_target(
    pos: Position,
    vel: Velocity,
    target: Target,
    arena: Arena,
    physics: PhysicsConfig,
    rng: random.Random,
    dt: float = 1.0,
) -> BounceResult:
    vel.y += target.gravity * dt
    pos.x += vel.x * dt
    pos.y += vel.y * dt

    wall = floor = impact = False
    r = target.radius
    if pos.x < r or pos.x > arena.width - r:
        vel.x *= -physics.wall_damping
        pos.x = clamp(pos.x, r, arena.width - r)
        add_crack(target, rng, physics.max_cracks)
        wall = True

    floor_y = arena.floor_y(r)
    if pos.y > floor_y:
        vel.y = bounce_velocity(vel.y, target.bounce_factor, physics.min_bounce_velocity * arena.scale)
        pos.y = floor_y
        vel.x *= physics.floor_friction
        floor = True
        if abs(vel.y) > physics.crack_velocity * arena.scale:
            add_crack(target, rng, physics.max_cracks)
            impact = True

    # Display hints fade out over time
    target.just_hit = False
    if target.flash > 0:
        target.flash = max(0.0, target.flash - 10 * dt)
    if target.shake > 0:
        target.shake *= 0.9 ** dt

    return BounceResult(wall=wall, floor=floor, impact=impact)


def apply_damage(
    pos: Position,
    target: Target,
    amount: int,
    scale: float,
    rng: random.Random,
    max_cracks: int = 5,
) -> HitResult:
    target.flash = 230.0
    target.shake = 4 * scale
    target.just_hit = True
    if amount >= 3 or rng.random() < 0.3:
        add_crack(target, rng, max_cracks)

    target.health = max(target.health - amount, 0)
    return HitResult(
        destroyed=target.health <= 0,
        x=pos.x,
        y=pos.y,
        radius=target.radius,
        health=target.health,
    )


def resize_target(
    pos: Position,
    vel: Velocity,
    target: Target,
    old_scale: float,
    arena: Arena,
    physics: PhysicsConfig,
) -> None:
    target.radius = arena.min_radius * target.radius_ratio
    target.gravity = physics.gravity * arena.scale * physics.gravity_scale
    if old_scale > 0:
        vel.x *= arena.scale / old_scale
    r = target.radius
    pos.x = clamp(pos.x, r, arena.width - r)
    pos.y = min(pos.y, arena.floor_y(r))


def target_health(radius: float, level: int, max_radius: float, rng: random.Random,
                  lo: float = 2.0, hi: float = 5.0) -> int:
    size_ratio = radius / max_radius if max_radius > 0 else 1.0
    return max(1, math.floor(rng.uniform(lo, hi) * level * size_ratio))


def size_bonus(radius: float, min_radius: float, factor: float = 10.0) -> int:
    if min_radius <= 0:
        return 0
    return math.floor(radius / min_radius * factor)


# Projectiles


def advance_projectile(pos: Position, proj: Projectile, frame: int, dt: float = 1.0) -> None:
    pos.y -= proj.speed * dt
    # Wobble is cosmetic and deterministic in (frame, x)
    pos.x += math.sin(frame * 0.2 + pos.x * 0.1) * 0.3 * dt
    proj.age += 1


def projectile_out_of_bounds(pos: Position) -> bool:
    return pos.y < 0


def projectile_hits(ppos: Position, proj: Projectile, tpos: Position, target: Target) -> bool:
    return distance(ppos.x, ppos.y, tpos.x, tpos.y) < target.radius + proj.half_width


# Launcher


def barrel_tip(pos: Position, launcher: Launcher) -> tuple[float, float]:
    return pos.x, pos.y - launcher.height / 2 - launcher.barrel_length + launcher.recoil


def launcher_ready(launcher: Launcher, now_ms: float) -> bool:
    if launcher.last_fire_ms is None:
        return True
    return now_ms - launcher.last_fire_ms >= launcher.fire_interval_ms


def aim_launcher(pos: Position, launcher: Launcher, pointer_x: Optional[float], arena: Arena) -> None:
    if pointer_x is None:
        return
    old_x = pos.x
    half = launcher.width / 2
    pos.x = clamp(pointer_x, half, arena.width - half)
    launcher.wheel_rotation += (pos.x - old_x) * 0.1


def advance_launcher(
    pos: Position,
    launcher: Launcher,
    pointer_x: Optional[float],
    now_ms: float,
    arena: Arena,
    dt: float = 1.0,
) -> Optional[tuple[float, float]]:
    """Track the pointer and fire when the cadence allows.

    Returns the barrel tip when a shot was fired this tick.
    """
    aim_launcher(pos, launcher, pointer_x, arena)

    shot = None
    if launcher_ready(launcher, now_ms):
        shot = barrel_tip(pos, launcher)
        launcher.last_fire_ms = now_ms
        launcher.recoil = 5 * arena.scale
        launcher.heat = min(launcher.heat + 10, 100.0)

    launcher.recoil *= 0.8 ** dt
    launcher.heat *= 0.95 ** dt
    return shot


def launcher_hits(lpos: Position, launcher: Launcher, tpos: Position, radius: float) -> bool:
    half_w = launcher.width / 2
    half_h = launcher.height / 2
    dx = abs(tpos.x - lpos.x)
    dy = abs(tpos.y - lpos.y)

    if dx > half_w + radius:
        return False
    if dy > half_h + radius:
        return False

    if dx <= half_w:
        return True
    if dy <= half_h:
        return True

    corner = (dx - half_w) ** 2 + (dy - half_h) ** 2
    return corner <= radius ** 2


def resize_launcher(pos: Position, launcher: Launcher, arena: Arena) -> None:
    launcher.width = arena.launcher_width
    launcher.height = arena.launcher_height
    pos.y = launcher_y(arena, launcher.height)
    half = launcher.width / 2
    pos.x = clamp(pos.x, half, arena.width - half)


def launcher_y(arena: Arena, height: float) -> float:
    return arena.height - height / 2 - arena.bottom_margin
