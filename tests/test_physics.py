import math
import random

import pytest

from ballblaster.ecs_components import Launcher, Position, Projectile, Target, Velocity
from ballblaster.physics import (
    advance_launcher,
    advance_projectile,
    advance_target,
    apply_damage,
    barrel_tip,
    bounce_velocity,
    launcher_hits,
    launcher_ready,
    projectile_hits,
    projectile_out_of_bounds,
    size_bonus,
    target_health,
)


def make_target(radius=30.0, health=10, gravity=0.08):
    return Target(radius=radius, health=health, original_health=health,
                  gravity=gravity, bounce_factor=0.85, radius_ratio=1.0)


def test_apply_damage_saturates_at_zero(arena):
    rng = random.Random(1)
    t = make_target(health=3)
    res = apply_damage(Position(100, 100), t, 5, arena.scale, rng)
    assert t.health == 0
    assert res.destroyed
    assert (res.x, res.y, res.radius) == (100, 100, 30.0)


def test_apply_damage_survivor_gets_hit_hints(arena):
    rng = random.Random(1)
    t = make_target(health=10)
    res = apply_damage(Position(0, 0), t, 4, arena.scale, rng)
    assert t.health == 6
    assert not res.destroyed
    assert t.flash == 230
    assert t.shake == pytest.approx(4.0)
    # amount >= 3 always cracks
    assert len(t.cracks) == 1


def test_cracks_are_capped(arena):
    rng = random.Random(2)
    t = make_target(health=100)
    for _ in range(10):
        apply_damage(Position(0, 0), t, 5, arena.scale, rng, max_cracks=5)
    assert len(t.cracks) == 5


def test_bounce_velocity():
    assert bounce_velocity(1.0, 0.85, 3.0) == -3.0
    assert bounce_velocity(10.0, 0.85, 3.0) == pytest.approx(-8.5)
    assert bounce_velocity(-10.0, 0.85, 3.0) == pytest.approx(-8.5)


def test_floor_bounce_applies_gravity_first(arena, settings):
    t = make_target(radius=30.0, gravity=0.08)
    pos = Position(200, arena.floor_y(30.0) - 1)
    vel = Velocity(0.0, 10.0)
    res = advance_target(pos, vel, t, arena, settings.physics, random.Random(0))
    assert res.floor
    assert res.impact
    assert vel.y == pytest.approx(-(10.0 + 0.08) * 0.85)
    assert pos.y == arena.floor_y(30.0)


def test_slow_floor_contact_gets_minimum_kick(arena, settings):
    t = make_target(radius=30.0, gravity=0.08)
    pos = Position(200, arena.floor_y(30.0))
    vel = Velocity(0.0, 0.5)
    res = advance_target(pos, vel, t, arena, settings.physics, random.Random(0))
    assert res.floor
    assert not res.impact
    assert vel.y == pytest.approx(-3.0)
    assert vel.y != 0


def test_wall_bounce_never_speeds_up(arena, settings):
    t = make_target(radius=30.0)
    pos = Position(arena.width - 31, 200)
    vel = Velocity(4.0, 0.0)
    res = advance_target(pos, vel, t, arena, settings.physics, random.Random(0))
    assert res.wall
    assert vel.x < 0
    assert abs(vel.x) <= 4.0
    assert pos.x == arena.width - 30
    assert len(t.cracks) == 1


def test_display_hints_fade(arena, settings):
    t = make_target()
    t.flash, t.shake, t.just_hit = 230.0, 4.0, True
    advance_target(Position(200, 100), Velocity(0, 0), t, arena, settings.physics, random.Random(0))
    assert t.flash == 220.0
    assert t.shake == pytest.approx(3.6)
    assert not t.just_hit


def test_target_health_has_floor_of_one():
    rng = random.Random(0)
    assert target_health(1.0, 1, 50.0, rng) == 1
    for level in range(1, 6):
        h = target_health(50.0, level, 50.0, rng)
        assert 2 * level <= h <= 5 * level


def test_size_bonus():
    assert size_bonus(30, 30) == 10
    assert size_bonus(45, 30) == 15
    assert size_bonus(49.9, 30) == 16


def test_projectile_motion_and_bounds():
    pos = Position(100, 12)
    proj = Projectile(speed=10, damage=5, half_width=4, height=16)
    advance_projectile(pos, proj, frame=0)
    assert pos.y == 2
    assert pos.x == pytest.approx(100 + math.sin(10.0) * 0.3)
    assert not projectile_out_of_bounds(pos)
    advance_projectile(pos, proj, frame=1)
    assert projectile_out_of_bounds(pos)
    assert proj.age == 2


def test_projectile_hit_is_strict():
    proj = Projectile(speed=10, damage=5, half_width=4, height=16)
    t = make_target(radius=30)
    assert projectile_hits(Position(0, 33.9), proj, Position(0, 0), t)
    assert not projectile_hits(Position(0, 34), proj, Position(0, 0), t)


def test_launcher_cadence():
    ln = Launcher(width=50, height=30, fire_rate=8)
    assert launcher_ready(ln, 0.0)
    ln.last_fire_ms = 1000.0
    assert not launcher_ready(ln, 1124.9)
    assert launcher_ready(ln, 1125.0)


def test_advance_launcher_clamps_and_fires(arena):
    ln = Launcher(width=50, height=30, fire_rate=8)
    pos = Position(200, 485)
    shot = advance_launcher(pos, ln, -500.0, 0.0, arena)
    assert pos.x == 25
    assert shot == pytest.approx((25, 485 - 15 - 36))
    assert ln.last_fire_ms == 0.0
    assert ln.recoil == pytest.approx(4.0)
    assert ln.heat == pytest.approx(9.5)
    assert ln.wheel_rotation != 0

    assert advance_launcher(pos, ln, 1000.0, 50.0, arena) is None
    assert pos.x == arena.width - 25


def test_barrel_tip_follows_recoil():
    ln = Launcher(width=50, height=30, fire_rate=8, recoil=5)
    assert barrel_tip(Position(100, 400), ln) == pytest.approx((100, 400 - 15 - 36 + 5))


@pytest.mark.parametrize("tx,ty,expected", [
    (100, 400, True),      # centre inside
    (100, 446, False),     # below, out of reach on y
    (100, 444, True),      # below, touching edge band
    (156, 400, False),     # right, out of reach on x
    (154, 400, True),
    (150, 440, False),     # corner gap
    (140, 430, True),      # corner within radius
])
def test_launcher_contact(tx, ty, expected):
    ln = Launcher(width=50, height=30, fire_rate=8)
    assert launcher_hits(Position(100, 400), ln, Position(tx, ty), 30) is expected
