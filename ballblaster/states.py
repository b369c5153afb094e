from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import Arena


class Mode(str, enum.Enum):
    SPLASH = "splash"
    TRANSITION = "transition"
    TITLE = "title"
    PLAYING = "playing"
    GAME_OVER = "game_over"


# Allowed screen transitions; anything else is a programming error.
TRANSITIONS: dict[Mode, frozenset[Mode]] = {
    Mode.SPLASH: frozenset({Mode.TRANSITION}),
    Mode.TRANSITION: frozenset({Mode.TITLE}),
    Mode.TITLE: frozenset({Mode.PLAYING}),
    Mode.PLAYING: frozenset({Mode.GAME_OVER}),
    Mode.GAME_OVER: frozenset({Mode.PLAYING}),
}


def can_transition(src: Mode, dst: Mode) -> bool:
    return dst in TRANSITIONS.get(src, frozenset())


@dataclass(frozen=True)
class Button:
    """Axis-aligned button region, centred on (cx, cy).

    Hit tests are strict: a click exactly on the border is outside.
    """

    label: str
    cx: float
    cy: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.cx - self.width / 2

    @property
    def top(self) -> float:
        return self.cy - self.height / 2

    def contains(self, x: float, y: float) -> bool:
        return (
            self.cx - self.width / 2 < x < self.cx + self.width / 2
            and self.cy - self.height / 2 < y < self.cy + self.height / 2
        )


BUTTON_WIDTH = 170.0
BUTTON_HEIGHT = 50.0


def start_button(arena: Arena) -> Button:
    s = arena.scale
    return Button("START", arena.width / 2, arena.height / 2 + 100 * s, BUTTON_WIDTH * s, BUTTON_HEIGHT * s)


def restart_button(arena: Arena) -> Button:
    s = arena.scale
    return Button("PLAY AGAIN", arena.width / 2, arena.height * 0.78, BUTTON_WIDTH * s, BUTTON_HEIGHT * s)
