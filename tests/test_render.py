import pygame
import pytest

from ballblaster.events import FloatingText, ModeChanged, TargetDestroyed
from ballblaster.render import Renderer, score_rank
from ballblaster.states import Mode, restart_button, start_button


@pytest.fixture
def surface():
    pygame.font.init()
    yield pygame.Surface((400, 600))
    pygame.font.quit()


@pytest.mark.parametrize("score,rank", [
    (0, "ROOKIE"),
    (99, "ROOKIE"),
    (100, "NOVICE"),
    (999, "SHARP SHOOTER"),
    (1999, "MASTER BLASTER"),
    (2000, "LEGENDARY"),
])
def test_score_rank(score, rank):
    assert score_rank(score)[0] == rank


def test_draws_every_mode(session, settings, surface):
    r = Renderer(settings, surface)

    def draw():
        frame = session.snapshot()
        r.consume(frame.events, frame.arena)
        r.update(1000 / 60, frame.arena)
        r.draw(frame)
        return frame

    assert draw().mode is Mode.SPLASH
    session.click(0, 0)
    session.tick(400)
    assert draw().mode is Mode.TRANSITION
    session.click(0, 0)
    assert draw().mode is Mode.TITLE
    b = start_button(session.arena)
    session.click(b.cx, b.cy)
    for _ in range(30):
        session.tick(1000 / 60)
        frame = draw()
    assert frame.mode is Mode.PLAYING
    assert len(r.crystals) == len(frame.targets)

    session.state.mode = Mode.GAME_OVER
    draw()
    assert surface.get_at((0, 0)) != pygame.Color(0, 0, 0)


def test_effects_expire(session, settings, surface):
    r = Renderer(settings, surface)
    session.click(0, 0)
    session.click(0, 0)
    b = start_button(session.arena)
    session.click(b.cx, b.cy)
    frame = session.snapshot()
    r.consume([
        FloatingText("LEVEL 2", 200, 300, (255, 230, 50), lifetime_ms=100),
        TargetDestroyed(100, 100, 30, (10, 20, 30)),
    ], frame.arena)
    assert len(r.floating) == 1
    assert len(r.particles) == 20
    r.update(5000, frame.arena)
    assert r.floating == []
    assert r.particles == []


def test_new_game_forgets_crystal_shapes(session, settings, surface):
    r = Renderer(settings, surface)
    session.click(0, 0)
    session.click(0, 0)
    b = start_button(session.arena)
    session.click(b.cx, b.cy)
    frame = session.snapshot()
    r.consume(frame.events, frame.arena)
    r.draw(frame)
    old = dict(r.crystals)
    assert old

    session.state.mode = Mode.GAME_OVER
    b = restart_button(session.arena)
    session.click(b.cx, b.cy)
    frame = session.snapshot()
    assert ModeChanged("game_over", "playing") in frame.events
    r.consume(frame.events, frame.arena)
    assert r.crystals == {}
    r.draw(frame)
    assert len(r.crystals) == len(frame.targets)
    # Reused entity ids get fresh shapes
    assert all(r.crystals[e] is not old[e] for e in set(old) & set(r.crystals))
