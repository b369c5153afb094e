import pygame
import pytest

from ballblaster.game import Game
from ballblaster.states import Mode


@pytest.fixture
def game(settings):
    pygame.init()
    g = Game(settings)
    yield g
    g.session.close()
    pygame.quit()


def finger(kind, x, y):
    return pygame.event.Event(kind, touch_id=0, finger_id=0, x=x, y=y, dx=0.0, dy=0.0, pressure=1.0)


def test_tap_counts_as_one_click(game):
    w, h = game.screen.get_size()
    assert game.handle_event(finger(pygame.FINGERDOWN, 0.5, 0.5))
    # SDL follows the finger event with an emulated mouse click
    assert game.handle_event(pygame.event.Event(
        pygame.MOUSEBUTTONDOWN, pos=(w // 2, h // 2), button=1, touch=True))
    assert game.session.mode is Mode.TRANSITION


def test_mouse_click_still_triggers(game):
    game.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=(10, 10), button=1, touch=False))
    assert game.session.mode is Mode.TRANSITION


def test_finger_motion_aims(game):
    w, _ = game.screen.get_size()
    game.handle_event(finger(pygame.FINGERMOTION, 0.25, 0.9))
    game.handle_event(pygame.event.Event(pygame.MOUSEMOTION, pos=(w - 1, 5), rel=(0, 0), buttons=(0, 0, 0), touch=True))
    assert game.session.state.pointer_x == pytest.approx(w * 0.25)


def test_escape_quits(game):
    assert not game.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_ESCAPE, mod=0, unicode="\x1b", scancode=41))
