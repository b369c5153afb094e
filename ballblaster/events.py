"""Cosmetic events emitted by the simulation.

The renderer drains these once per frame. None of them feed back into
gameplay, so dropping any of them is harmless.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

Color = tuple[int, int, int]

SCORE_COLORS: tuple[Color, ...] = (
    (255, 255, 150),  # small
    (255, 200, 50),  # medium
    (255, 150, 50),  # large
    (255, 100, 50),  # huge
)
DESTROY_COLOR: Color = (255, 200, 50)
LEVEL_COLOR: Color = (255, 230, 50)


def score_color(points: int) -> Color:
    if points >= 20:
        return SCORE_COLORS[3]
    if points >= 10:
        return SCORE_COLORS[2]
    if points >= 5:
        return SCORE_COLORS[1]
    return SCORE_COLORS[0]


@dataclass(frozen=True)
class ProjectileFired:
    x: float
    y: float
    manual: bool = False


@dataclass(frozen=True)
class TargetImpact:
    """Target struck a wall or the floor hard enough to chip."""

    x: float
    y: float
    radius: float
    color: Color
    particles: int


@dataclass(frozen=True)
class TargetHit:
    x: float
    y: float
    radius: float
    damage: int
    health: int
    color: Color


@dataclass(frozen=True)
class TargetDestroyed:
    x: float
    y: float
    radius: float
    color: Color


@dataclass(frozen=True)
class ScoreAwarded:
    points: int
    x: float
    y: float
    color: Color


@dataclass(frozen=True)
class FloatingText:
    text: str
    x: float
    y: float
    color: Color
    lifetime_ms: float = 1500.0
    size: Optional[float] = None


@dataclass(frozen=True)
class WaveCleared:
    level: int
    spawned: int


@dataclass(frozen=True)
class ModeChanged:
    old: str
    new: str


GameEvent = Union[
    ProjectileFired,
    TargetImpact,
    TargetHit,
    TargetDestroyed,
    ScoreAwarded,
    FloatingText,
    WaveCleared,
    ModeChanged,
]
