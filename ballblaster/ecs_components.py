from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Position:
    x: float
    y: float


@dataclass
class Velocity:
    x: float = 0.0
    y: float = 0.0


@dataclass
class Sprite:
    color: tuple[int, int, int]


@dataclass
class Crack:
    start_angle: float
    end_angle: float
    length: float  # fraction of the radius


@dataclass
class Target:
    radius: float
    health: int
    original_health: int
    gravity: float
    bounce_factor: float
    radius_ratio: float  # radius / minimum target radius, kept across rescales
    cracks: List[Crack] = field(default_factory=list)
    # Display hints
    flash: float = 0.0
    shake: float = 0.0
    just_hit: bool = False


@dataclass
class Projectile:
    speed: float
    damage: int
    half_width: float
    height: float
    age: int = 0  # frames since fired


@dataclass
class Launcher:
    width: float
    height: float
    fire_rate: float
    barrel_ratio: float = 1.2
    last_fire_ms: Optional[float] = None
    # Display hints
    recoil: float = 0.0
    heat: float = 0.0
    wheel_rotation: float = 0.0

    @property
    def barrel_length(self) -> float:
        return self.height * self.barrel_ratio

    @property
    def fire_interval_ms(self) -> float:
        return 1000.0 / max(0.01, self.fire_rate)
