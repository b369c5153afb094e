import os

import pytest

from ballblaster.config import GameplayConfig, Settings
from ballblaster.context import Arena
from ballblaster.session import GameSession
from ballblaster.states import Mode, start_button

# Headless SDL for the pygame front-end tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")


@pytest.fixture
def settings():
    return Settings(gameplay=GameplayConfig(seed=1234))


@pytest.fixture
def arena(settings):
    # Reference resolution, scale 1.0
    return Arena.from_viewport(400, 600, settings)


@pytest.fixture
def session(settings):
    s = GameSession(settings, 400, 600)
    yield s
    s.close()


@pytest.fixture
def playing(session):
    """Session driven through splash and title into a fresh game."""
    session.click(0, 0)
    session.click(0, 0)
    assert session.mode is Mode.TITLE
    b = start_button(session.arena)
    assert session.click(b.cx, b.cy)
    assert session.mode is Mode.PLAYING
    return session
