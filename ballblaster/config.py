from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass
class WindowConfig:
    width: int = 512
    height: int = 768
    title: str = "Ball Blaster"
    fps: int = 60
    resizable: bool = True


@dataclass
class ArenaConfig:
    # Sizes below are expressed at the reference resolution and scaled by
    # min(width / reference_width, height / reference_height).
    reference_width: float = 400.0
    reference_height: float = 600.0
    bottom_margin: float = 100.0


@dataclass
class PhysicsConfig:
    gravity: float = 0.1
    gravity_scale: float = 0.8
    bounce_dampening: float = 0.8
    bounce_bonus: float = 0.05
    wall_damping: float = 0.99
    floor_friction: float = 0.99
    min_bounce_velocity: float = 3.0
    crack_velocity: float = 5.0
    max_cracks: int = 5
    frame_ms: float = 1000.0 / 60.0
    max_frame_step: float = 3.0


@dataclass
class TargetConfig:
    min_radius: float = 30.0
    max_radius: float = 50.0
    min_dx: float = 0.3
    max_dx: float = 0.8
    min_initial_dy: float = 0.1
    max_initial_dy: float = 0.5
    palette: list[tuple[int, int, int]] = field(default_factory=lambda: [
        (70, 130, 230),
        (160, 70, 230),
        (230, 70, 100),
        (70, 200, 170),
        (200, 180, 70),
    ])


@dataclass
class LauncherConfig:
    width: float = 50.0
    height: float = 30.0
    barrel_ratio: float = 1.2
    fire_rate: float = 8.0
    bullet_power: int = 5
    bullet_speed: float = 10.0
    bullet_width: float = 8.0
    bullet_height: float = 16.0


@dataclass
class WaveConfig:
    base_count: int = 2
    level_cap: int = 6
    start_height_fraction: float = 0.3
    level_height_step: float = 50.0
    min_health_factor: float = 2.0
    max_health_factor: float = 5.0


@dataclass
class ScoringConfig:
    destroy_bonus: int = 25
    size_bonus_factor: float = 10.0


@dataclass
class TimingConfig:
    splash_ms: float = 3000.0
    transition_ms: float = 1000.0


@dataclass
class AssetsConfig:
    background: str = "assets/ball_blaster_bg.webp"
    splash: str = "assets/title_bg.webp"


@dataclass
class GameplayConfig:
    seed: Optional[int] = None


@dataclass
class Settings:
    window: WindowConfig = field(default_factory=WindowConfig)
    arena: ArenaConfig = field(default_factory=ArenaConfig)
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    targets: TargetConfig = field(default_factory=TargetConfig)
    launcher: LauncherConfig = field(default_factory=LauncherConfig)
    waves: WaveConfig = field(default_factory=WaveConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    assets: AssetsConfig = field(default_factory=AssetsConfig)
    gameplay: GameplayConfig = field(default_factory=GameplayConfig)


def _tuple3(v: Any, default: tuple[int, int, int]) -> tuple[int, int, int]:
    try:
        a, b, c = v
        return int(a), int(b), int(c)
    except (TypeError, ValueError):
        return default


def _palette(v: Any, default: list[tuple[int, int, int]]) -> list[tuple[int, int, int]]:
    if not v:
        return list(default)
    out = [_tuple3(c, (255, 255, 255)) for c in v]
    return out or list(default)


def load_settings(path: str | Path = "config/settings.yaml") -> Settings:
    p = Path(path)
    raw: Dict[str, Any] = {}
    if p.exists():
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    else:
        logger.debug("Settings file %s not found, using defaults", p)

    win = raw.get("window", {})
    window = WindowConfig(
        width=int(win.get("width", 512)),
        height=int(win.get("height", 768)),
        title=str(win.get("title", "Ball Blaster")),
        fps=int(win.get("fps", 60)),
        resizable=bool(win.get("resizable", True)),
    )

    ar = raw.get("arena", {})
    arena = ArenaConfig(
        reference_width=float(ar.get("reference_width", 400.0)),
        reference_height=float(ar.get("reference_height", 600.0)),
        bottom_margin=float(ar.get("bottom_margin", 100.0)),
    )

    ph = raw.get("physics", {})
    physics = PhysicsConfig(
        gravity=float(ph.get("gravity", 0.1)),
        gravity_scale=float(ph.get("gravity_scale", 0.8)),
        bounce_dampening=float(ph.get("bounce_dampening", 0.8)),
        bounce_bonus=float(ph.get("bounce_bonus", 0.05)),
        wall_damping=float(ph.get("wall_damping", 0.99)),
        floor_friction=float(ph.get("floor_friction", 0.99)),
        min_bounce_velocity=float(ph.get("min_bounce_velocity", 3.0)),
        crack_velocity=float(ph.get("crack_velocity", 5.0)),
        max_cracks=int(ph.get("max_cracks", 5)),
        frame_ms=float(ph.get("frame_ms", 1000.0 / 60.0)),
        max_frame_step=float(ph.get("max_frame_step", 3.0)),
    )

    tg = raw.get("targets", {})
    default_targets = TargetConfig()
    targets = TargetConfig(
        min_radius=float(tg.get("min_radius", 30.0)),
        max_radius=float(tg.get("max_radius", 50.0)),
        min_dx=float(tg.get("min_dx", 0.3)),
        max_dx=float(tg.get("max_dx", 0.8)),
        min_initial_dy=float(tg.get("min_initial_dy", 0.1)),
        max_initial_dy=float(tg.get("max_initial_dy", 0.5)),
        palette=_palette(tg.get("palette"), default_targets.palette),
    )

    ln = raw.get("launcher", {})
    launcher = LauncherConfig(
        width=float(ln.get("width", 50.0)),
        height=float(ln.get("height", 30.0)),
        barrel_ratio=float(ln.get("barrel_ratio", 1.2)),
        fire_rate=float(ln.get("fire_rate", 8.0)),
        bullet_power=int(ln.get("bullet_power", 5)),
        bullet_speed=float(ln.get("bullet_speed", 10.0)),
        bullet_width=float(ln.get("bullet_width", 8.0)),
        bullet_height=float(ln.get("bullet_height", 16.0)),
    )

    wv = raw.get("waves", {})
    waves = WaveConfig(
        base_count=int(wv.get("base_count", 2)),
        level_cap=int(wv.get("level_cap", 6)),
        start_height_fraction=float(wv.get("start_height_fraction", 0.3)),
        level_height_step=float(wv.get("level_height_step", 50.0)),
        min_health_factor=float(wv.get("min_health_factor", 2.0)),
        max_health_factor=float(wv.get("max_health_factor", 5.0)),
    )

    sc = raw.get("scoring", {})
    scoring = ScoringConfig(
        destroy_bonus=int(sc.get("destroy_bonus", 25)),
        size_bonus_factor=float(sc.get("size_bonus_factor", 10.0)),
    )

    tm = raw.get("timing", {})
    timing = TimingConfig(
        splash_ms=float(tm.get("splash_ms", 3000.0)),
        transition_ms=float(tm.get("transition_ms", 1000.0)),
    )

    at = raw.get("assets", {})
    assets = AssetsConfig(
        background=str(at.get("background", "assets/ball_blaster_bg.webp")),
        splash=str(at.get("splash", "assets/title_bg.webp")),
    )

    gp = raw.get("gameplay", {})
    seed = gp.get("seed")
    gameplay = GameplayConfig(seed=int(seed) if seed is not None else None)

    return Settings(
        window=window,
        arena=arena,
        physics=physics,
        targets=targets,
        launcher=launcher,
        waves=waves,
        scoring=scoring,
        timing=timing,
        assets=assets,
        gameplay=gameplay,
    )
