from pathlib import Path

import pytest

from ballblaster.config import Settings, load_settings


def test_missing_file_gives_defaults(tmp_path):
    s = load_settings(tmp_path / "nope.yaml")
    assert s == Settings()
    assert s.window.width == 512
    assert s.launcher.fire_rate == 8
    assert s.physics.frame_ms == pytest.approx(1000 / 60)
    assert s.gameplay.seed is None


def test_partial_override(tmp_path):
    p = tmp_path / "settings.yaml"
    p.write_text(
        "window:\n"
        "  width: 800\n"
        "launcher:\n"
        "  fire_rate: 12\n"
        "targets:\n"
        "  palette:\n"
        "    - [1, 2, 3]\n"
        "    - nonsense\n"
        "gameplay:\n"
        "  seed: 42\n",
        encoding="utf-8",
    )
    s = load_settings(p)
    assert s.window.width == 800
    assert s.window.height == 768
    assert s.launcher.fire_rate == 12.0
    assert s.launcher.bullet_power == 5
    assert s.targets.palette == [(1, 2, 3), (255, 255, 255)]
    assert s.gameplay.seed == 42


def test_empty_file(tmp_path):
    p = tmp_path / "settings.yaml"
    p.write_text("", encoding="utf-8")
    assert load_settings(p) == Settings()


def test_bad_scalar_raises(tmp_path):
    p = tmp_path / "settings.yaml"
    p.write_text("window:\n  width: wide\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(p)


def test_shipped_settings_match_defaults():
    shipped = Path(__file__).resolve().parent.parent / "config" / "settings.yaml"
    assert load_settings(shipped) == Settings()
