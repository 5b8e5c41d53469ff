"""One running game: the random source, the game state and the UI state."""

from __future__ import annotations

import logging
import random
from typing import Optional, Union

from klondike import ui_state as U
from klondike.cards import make_rng
from klondike.game_state import GameState, WonState, new_game, phase_name
from klondike.rules import is_won

logger = logging.getLogger(__name__)

DRAW_COUNTS = (1, 3)

_NAVIGATE = "navigate: arrows"
_RESTART = "[r]estart"

_HOVER_HINTS = {
    "stock": f"{_NAVIGATE} | draw: space | {_RESTART}",
    "talon": f"{_NAVIGATE} | move: shift + arrows | {_RESTART}",
    "foundation": f"{_NAVIGATE} | move: shift + arrows | {_RESTART}",
    "tableau": f"{_NAVIGATE} | move: shift + left/right | take more: shift + up | {_RESTART}",
}


class KlondikeSession:
    """Owns a Klondike game and feeds input events through the UI state machine.

    The session is the ``game`` object :func:`klondike.ui_state.on` works on:
    it exposes the mutable ``state`` and the ``draw_count`` for stock draws.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        seed: Union[str, int, None] = None,
        draw_count: int = 1,
    ):
        if draw_count not in DRAW_COUNTS:
            raise ValueError(f"draw_count must be one of {DRAW_COUNTS}, got {draw_count!r}")
        self._seed = seed
        self.rng = rng if rng is not None else make_rng(seed)
        self.draw_count = draw_count
        self.state: GameState = new_game(self.rng)
        self.ui_state: U.UIState = U.DealingUI()
        self._won_logged = False
        logger.info("New game (seed=%s, draw %d)", seed, draw_count)

    @property
    def seed(self) -> Union[str, int, None]:
        return self._seed

    @property
    def is_won(self) -> bool:
        return is_won(self.state)

    def reset(self) -> None:
        """Deal a fresh game from the session's random source."""
        self.state = new_game(self.rng)
        self.ui_state = U.DealingUI()
        self._won_logged = False
        logger.info("New game (draw %d)", self.draw_count)

    def handle(self, event: U.Event) -> U.UIState:
        before = self.ui_state
        self.ui_state = U.on(self.ui_state, event, self)
        if self.ui_state != before and not isinstance(event, U.Tick):
            logger.debug("%s: %s -> %s", type(event).__name__, before, self.ui_state)
        if isinstance(self.state, WonState) and not self._won_logged:
            self._won_logged = True
            logger.info("Game won")
        return self.ui_state

    def tick(self, dt_ms: int) -> U.UIState:
        return self.handle(U.Tick(dt_ms))

    def status_hint(self) -> str:
        """Key help for whatever the player is doing right now."""
        ui = self.ui_state
        if isinstance(self.state, WonState):
            return f"you won! | {_RESTART}"
        if isinstance(ui, U.DealingUI):
            return "skip: space"
        if isinstance(ui, U.Hovering):
            return _HOVER_HINTS[ui.pile.kind.value]
        if isinstance(ui, (U.SelectingTableau, U.SelectingTalon)):
            return f"take more: shift + up | take less: down | move: left/right | [c]ancel | {_RESTART}"
        if isinstance(ui, U.Moving):
            return f"move: arrows | place: space | [c]ancel | {_RESTART}"
        if isinstance(ui, U.AutoMoving):
            return "auto moving..."
        raise TypeError(f"unhandled UI state: {ui!r}")

    def __repr__(self) -> str:
        return f"KlondikeSession({phase_name(self.state)}, {self.ui_state})"
