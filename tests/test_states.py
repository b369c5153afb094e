import pytest

from ballblaster.events import SCORE_COLORS, score_color
from ballblaster.states import Button, Mode, can_transition, restart_button, start_button


def test_transition_table():
    assert can_transition(Mode.SPLASH, Mode.TRANSITION)
    assert can_transition(Mode.TRANSITION, Mode.TITLE)
    assert can_transition(Mode.TITLE, Mode.PLAYING)
    assert can_transition(Mode.PLAYING, Mode.GAME_OVER)
    assert can_transition(Mode.GAME_OVER, Mode.PLAYING)
    assert not can_transition(Mode.SPLASH, Mode.PLAYING)
    assert not can_transition(Mode.PLAYING, Mode.TITLE)
    assert not can_transition(Mode.GAME_OVER, Mode.TITLE)


def test_button_hit_test_is_strict():
    b = Button("GO", 100, 100, 40, 20)
    assert b.contains(100, 100)
    assert b.contains(80.01, 90.01)
    assert not b.contains(80, 100)
    assert not b.contains(100, 110)
    assert (b.left, b.top) == (80, 90)


def test_button_layout(arena):
    s = start_button(arena)
    assert (s.cx, s.cy) == (200, 400)
    assert (s.width, s.height) == (170, 50)
    r = restart_button(arena)
    assert (r.cx, r.cy) == pytest.approx((200, 468))
    assert r.label == "PLAY AGAIN"


@pytest.mark.parametrize("points,idx", [(1, 0), (5, 1), (9, 1), (10, 2), (19, 2), (20, 3), (41, 3)])
def test_score_color_tiers(points, idx):
    assert score_color(points) == SCORE_COLORS[idx]
