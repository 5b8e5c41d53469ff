"""Interaction state machine for the Klondike table.

:func:`on` feeds one input event to the current UI state and returns the next
one. ``game.state`` is only replaced after a rules call succeeds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Union

from klondike import rules
from klondike.errors import RulesError
from klondike.game_state import (
    NUM_FOUNDATIONS,
    NUM_TABLEAU,
    STOCK,
    TALON,
    DealingState,
    PileKind,
    PileRef,
    PlayingState,
    WonState,
    get_stack,
)

logger = logging.getLogger(__name__)

DEAL_INTERVAL_MS = 100
AUTO_MOVE_INITIAL_DELAY_MS = 300
AUTO_MOVE_INITIAL_INTERVAL_MS = 400
AUTO_MOVE_INTERVAL_DECREASE_MS = 25
AUTO_MOVE_MIN_INTERVAL_MS = 50

# Tableau piles 3..6 sit under foundations 0..3
FOUNDATION_COLUMN_OFFSET = NUM_TABLEAU - NUM_FOUNDATIONS


# ---------- Events ----------

class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class Modifiers:
    shift: bool = False
    ctrl: bool = False
    alt: bool = False


NO_MODIFIERS = Modifiers()
SHIFT = Modifiers(shift=True)


@dataclass(frozen=True)
class CardLocation:
    """A clicked pile, and for a non-empty pile how many cards sit above the clicked one."""

    pile: PileRef
    n_from_top: Optional[int] = None


@dataclass(frozen=True)
class Tick:
    dt_ms: int


@dataclass(frozen=True)
class DirectionEvent:
    direction: Direction
    modifiers: Modifiers = NO_MODIFIERS


@dataclass(frozen=True)
class Interact:
    pass


@dataclass(frozen=True)
class Goto:
    digit: int


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class Click:
    location: Optional[CardLocation] = None


Event = Union[Tick, DirectionEvent, Interact, Goto, Cancel, Click]


# ---------- UI states ----------

@dataclass(frozen=True)
class DealingUI:
    since_last_deal: int = 0


@dataclass(frozen=True)
class Hovering:
    pile: PileRef


@dataclass(frozen=True)
class SelectingTableau:
    pile_n: int
    take_n: int

    @property
    def pile(self) -> PileRef:
        return PileRef.tableau(self.pile_n)


@dataclass(frozen=True)
class SelectingTalon:
    take_n = 1

    @property
    def pile(self) -> PileRef:
        return TALON


@dataclass(frozen=True)
class Moving:
    src: PileRef
    take_n: int
    dst: PileRef


@dataclass(frozen=True)
class AutoMoving:
    since_last_move: int
    interval: int
    prev_pile: PileRef

    @classmethod
    def start(cls, prev_pile: PileRef) -> "AutoMoving":
        # the first move fires after the initial delay rather than a full interval
        return cls(
            since_last_move=AUTO_MOVE_INITIAL_INTERVAL_MS - AUTO_MOVE_INITIAL_DELAY_MS,
            interval=AUTO_MOVE_INITIAL_INTERVAL_MS,
            prev_pile=prev_pile,
        )


UIState = Union[DealingUI, Hovering, SelectingTableau, SelectingTalon, Moving, AutoMoving]


# ---------- Helpers ----------

def _goto_pile(digit):
    if digit == 1:
        return STOCK
    if digit == 2:
        return TALON
    if 3 <= digit < 3 + NUM_FOUNDATIONS:
        return PileRef.foundation(digit - 3)
    return None


def _foundation_above(pile_n):
    if pile_n < FOUNDATION_COLUMN_OFFSET:
        return None
    return PileRef.foundation(pile_n - FOUNDATION_COLUMN_OFFSET)


def _side_tableau(pile_n, direction):
    if direction is Direction.LEFT and pile_n > 0:
        return PileRef.tableau(pile_n - 1)
    if direction is Direction.RIGHT and pile_n < NUM_TABLEAU - 1:
        return PileRef.tableau(pile_n + 1)
    return None


def hover_neighbour(pile: PileRef, direction: Direction) -> PileRef:
    """The pile the cursor lands on moving ``direction`` from ``pile`` (itself at an edge)."""
    if pile.kind is PileKind.STOCK:
        if direction is Direction.RIGHT:
            return TALON
        if direction is Direction.DOWN:
            return PileRef.tableau(0)
        return pile
    if pile.kind is PileKind.TALON:
        if direction is Direction.LEFT:
            return STOCK
        if direction is Direction.RIGHT:
            return PileRef.foundation(0)
        if direction is Direction.DOWN:
            return PileRef.tableau(1)
        return pile
    if pile.kind is PileKind.FOUNDATION:
        if direction is Direction.LEFT:
            return TALON if pile.index == 0 else PileRef.foundation(pile.index - 1)
        if direction is Direction.RIGHT:
            return pile if pile.index == NUM_FOUNDATIONS - 1 else PileRef.foundation(pile.index + 1)
        if direction is Direction.DOWN:
            return PileRef.tableau(pile.index + FOUNDATION_COLUMN_OFFSET)
        return pile
    if pile.kind is PileKind.TABLEAU:
        if direction is Direction.UP:
            if pile.index == 0:
                return STOCK
            if pile.index < FOUNDATION_COLUMN_OFFSET:
                return TALON
            return _foundation_above(pile.index)
        if direction is Direction.DOWN:
            return pile
        return _side_tableau(pile.index, direction) or pile
    raise TypeError(f"unhandled pile: {pile!r}")


def move_target(dst: PileRef, direction: Direction, take_n: int) -> Optional[PileRef]:
    """Where a pending move's destination goes when nudged; ``None`` if it can't."""
    target: Optional[PileRef] = None
    if dst.kind in (PileKind.STOCK, PileKind.TALON):
        if direction is Direction.RIGHT:
            target = PileRef.foundation(0)
        elif direction is Direction.DOWN:
            target = PileRef.tableau(0 if dst.kind is PileKind.STOCK else 1)
    elif dst.kind is PileKind.FOUNDATION:
        if direction is Direction.LEFT and dst.index > 0:
            target = PileRef.foundation(dst.index - 1)
        elif direction is Direction.RIGHT and dst.index < NUM_FOUNDATIONS - 1:
            target = PileRef.foundation(dst.index + 1)
        elif direction is Direction.DOWN:
            target = PileRef.tableau(dst.index + FOUNDATION_COLUMN_OFFSET)
    elif dst.kind is PileKind.TABLEAU:
        if direction is Direction.UP:
            target = _foundation_above(dst.index)
        elif direction in (Direction.LEFT, Direction.RIGHT):
            target = _side_tableau(dst.index, direction)
    if target is not None and target.is_foundation and take_n != 1:
        return None
    return target


def _pile(game, pile):
    return get_stack(game.state, pile)


def _pile_len(game, pile):
    cards = _pile(game, pile)
    return len(cards) if cards else 0


def _draw_count(game):
    return getattr(game, "draw_count", 1)


def _settle(game, new_state, prev_pile, otherwise):
    """Store a successful rules result and start auto moving if anything can go up."""
    game.state = new_state
    if rules.can_auto_move(game.state):
        return AutoMoving.start(prev_pile)
    return otherwise


def _draw(game, ui):
    if not isinstance(game.state, PlayingState):
        return Hovering(STOCK)
    new_state = rules.draw_stock(game.state, _draw_count(game))
    return _settle(game, new_state, STOCK, Hovering(STOCK))


def _auto_move(game, pile, take_n, on_error):
    """Run :func:`rules.auto_move_card`; lands on ``Hovering(pile)`` unless it fails."""
    try:
        new_state = rules.auto_move_card(game.state, pile, take_n)
    except RulesError as err:
        logger.debug("Auto move from %s rejected: %s", pile, err)
        return on_error
    return _settle(game, new_state, pile, Hovering(pile))


def _selection_for_click(pile, cards, location):
    depth = location.n_from_top or 0
    take_n = min(depth, len(cards) - 1) + 1
    if not cards[len(cards) - take_n].face_up:
        return SelectingTableau(pile.index, 1)
    return SelectingTableau(pile.index, take_n)


# ---------- Dealing ----------

def _after_deal(game):
    if rules.can_auto_move(game.state):
        return AutoMoving.start(STOCK)
    return Hovering(STOCK)


def _on_dealing(ui: DealingUI, event: Event, game) -> UIState:
    if isinstance(event, Tick):
        since = ui.since_last_deal + event.dt_ms
        # catch up on every deal that fell due, so slow frames don't drop cards
        while since >= DEAL_INTERVAL_MS:
            since -= DEAL_INTERVAL_MS
            if not isinstance(game.state, DealingState):
                return Hovering(STOCK)
            game.state = rules.deal_one(game.state)
            if isinstance(game.state, PlayingState):
                return _after_deal(game)
        return DealingUI(since)
    if isinstance(event, (Interact, Click)):
        if isinstance(game.state, DealingState):
            game.state = rules.deal_all(game.state)
            return _after_deal(game)
        return Hovering(STOCK)
    return ui


# ---------- Hovering ----------

def _hover_shift(ui, direction, game):
    pile = ui.pile
    cards = _pile(game, pile)
    if not cards:
        return ui

    if pile.kind is PileKind.TALON:
        if direction is Direction.RIGHT:
            return Moving(TALON, 1, PileRef.foundation(0))
        if direction is Direction.DOWN:
            return Moving(TALON, 1, PileRef.tableau(1))
        return ui

    if pile.kind is PileKind.TABLEAU:
        if direction is Direction.DOWN:
            return ui
        if direction is Direction.UP:
            if len(cards) == 1:
                dst = _foundation_above(pile.index)
                return Moving(pile, 1, dst) if dst is not None else ui
            if not cards[-2].face_up:
                return ui
            return SelectingTableau(pile.index, 2)
        dst = _side_tableau(pile.index, direction)
        return Moving(pile, 1, dst) if dst is not None else ui

    # neither the stock nor a foundation can be picked up
    return ui


def _hover_click(ui, location, game):
    if location is None:
        return ui
    pile = location.pile
    cards = _pile(game, pile)
    if cards is None:
        return ui
    if not cards and not pile.is_stock:
        return Hovering(pile)

    if pile.kind is PileKind.STOCK:
        return _draw(game, ui)
    if pile.kind is PileKind.TALON:
        return SelectingTalon()
    if pile.kind is PileKind.FOUNDATION:
        return Hovering(pile)
    if pile.kind is PileKind.TABLEAU:
        return _selection_for_click(pile, cards, location)
    raise TypeError(f"unhandled pile: {pile!r}")


def _on_hovering(ui: Hovering, event: Event, game) -> UIState:
    if isinstance(event, DirectionEvent):
        if event.modifiers.shift:
            return _hover_shift(ui, event.direction, game)
        return Hovering(hover_neighbour(ui.pile, event.direction))
    if isinstance(event, Interact):
        if not isinstance(game.state, PlayingState):
            return ui
        if ui.pile.is_stock:
            return _draw(game, ui)
        return _auto_move(game, ui.pile, 1, ui)
    if isinstance(event, Goto):
        target = _goto_pile(event.digit)
        return Hovering(target) if target is not None else ui
    if isinstance(event, Click):
        return _hover_click(ui, event.location, game)
    return ui


# ---------- Selecting ----------

def _selecting_tableau_direction(ui, event, game):
    direction = event.direction
    if direction is Direction.UP:
        if event.modifiers.shift:
            cards = _pile(game, ui.pile)
            if not cards or len(cards) <= ui.take_n:
                return ui
            if not cards[-(ui.take_n + 1)].face_up:
                return ui
            return SelectingTableau(ui.pile_n, ui.take_n + 1)
        dst = _foundation_above(ui.pile_n)
        return Moving(ui.pile, ui.take_n, dst) if dst is not None else ui
    if direction is Direction.DOWN:
        if ui.take_n <= 2:
            return Hovering(ui.pile)
        return SelectingTableau(ui.pile_n, ui.take_n - 1)
    dst = _side_tableau(ui.pile_n, direction)
    return Moving(ui.pile, ui.take_n, dst) if dst is not None else ui


def _selecting_talon_direction(ui, event):
    if event.direction is Direction.RIGHT:
        return Moving(TALON, 1, PileRef.foundation(0))
    if event.direction is Direction.DOWN:
        return Moving(TALON, 1, PileRef.tableau(1))
    return ui


def _selecting_click(ui, location, event, game):
    if location is None:
        return ui
    pile = location.pile
    playing = isinstance(game.state, PlayingState)

    # clicking the selection again sends it wherever it fits
    if playing and pile == ui.pile:
        if isinstance(ui, SelectingTalon) or ui.take_n == (location.n_from_top or 0) + 1:
            return _auto_move(game, pile, ui.take_n, Hovering(pile))

    if pile.kind is PileKind.STOCK:
        return _draw(game, ui) if playing else Hovering(STOCK)
    if pile.kind is PileKind.TALON:
        return SelectingTalon()
    if pile.kind in (PileKind.FOUNDATION, PileKind.TABLEAU):
        if playing:
            try:
                new_state = rules.move_cards(game.state, ui.pile, ui.take_n, pile)
            except RulesError as err:
                logger.debug("Move %s -> %s rejected: %s", ui.pile, pile, err)
            else:
                return _settle(game, new_state, pile, Hovering(pile))
        return _on_hovering(Hovering(pile), event, game)
    raise TypeError(f"unhandled pile: {pile!r}")


def _on_selecting(ui, event: Event, game) -> UIState:
    if isinstance(event, DirectionEvent):
        if isinstance(ui, SelectingTableau):
            return _selecting_tableau_direction(ui, event, game)
        return _selecting_talon_direction(ui, event)
    if isinstance(event, Interact):
        if not isinstance(game.state, PlayingState):
            return ui
        return _auto_move(game, ui.pile, ui.take_n, ui)
    if isinstance(event, Goto):
        target = _goto_pile(event.digit)
        if target is None or not target.is_foundation or ui.take_n != 1:
            return ui
        return Moving(ui.pile, 1, target)
    if isinstance(event, Cancel):
        return Hovering(ui.pile)
    if isinstance(event, Click):
        return _selecting_click(ui, event.location, event, game)
    return ui


# ---------- Moving ----------

def _on_moving(ui: Moving, event: Event, game) -> UIState:
    if isinstance(event, DirectionEvent):
        dst = move_target(ui.dst, event.direction, ui.take_n)
        return Moving(ui.src, ui.take_n, dst) if dst is not None else ui
    if isinstance(event, Interact):
        if not isinstance(game.state, PlayingState):
            return Hovering(ui.src)
        try:
            new_state = rules.move_cards(game.state, ui.src, ui.take_n, ui.dst)
        except RulesError as err:
            logger.debug("Move %s -> %s rejected: %s", ui.src, ui.dst, err)
            return Hovering(ui.src)
        return _settle(game, new_state, ui.dst, Hovering(ui.dst))
    if isinstance(event, Goto):
        target = _goto_pile(event.digit)
        if target is None or not target.is_foundation or ui.take_n != 1:
            return ui
        return Moving(ui.src, ui.take_n, target)
    if isinstance(event, Cancel):
        return Hovering(ui.src)
    if isinstance(event, Click):
        if event.location is None:
            return ui
        if ui.src.is_talon:
            selecting = SelectingTalon()
        elif ui.src.is_tableau:
            cards = _pile(game, ui.src)
            if event.location.pile == ui.src and cards:
                # the clicked card picks the run, as a fresh click would
                selecting = _selection_for_click(ui.src, cards, event.location)
            else:
                selecting = SelectingTableau(ui.src.index, ui.take_n)
        else:
            return ui
        return _on_selecting(selecting, event, game)
    return ui


# ---------- Auto moving ----------

def _on_auto_moving(ui: AutoMoving, event: Event, game) -> UIState:
    # input stays locked out until the cards stop moving
    if not isinstance(event, Tick):
        return ui

    since = ui.since_last_move + event.dt_ms
    interval = ui.interval
    while since >= interval:
        since -= interval
        interval = max(interval - AUTO_MOVE_INTERVAL_DECREASE_MS, AUTO_MOVE_MIN_INTERVAL_MS)
        if not isinstance(game.state, PlayingState):
            return Hovering(ui.prev_pile)
        new_state = rules.auto_move_to_foundation(game.state)
        if isinstance(new_state, WonState):
            game.state = new_state
            return Hovering(ui.prev_pile)
        if new_state == game.state:
            return Hovering(ui.prev_pile)
        game.state = new_state

    if rules.can_auto_move(game.state):
        return AutoMoving(since, interval, ui.prev_pile)
    return Hovering(ui.prev_pile)


# ---------- Dispatch ----------

_HANDLERS: Dict[type, Callable[..., UIState]] = {
    DealingUI: _on_dealing,
    Hovering: _on_hovering,
    SelectingTableau: _on_selecting,
    SelectingTalon: _on_selecting,
    Moving: _on_moving,
    AutoMoving: _on_auto_moving,
}


def on(ui: UIState, event: Event, game) -> UIState:
    """Feed ``event`` to the UI state ``ui`` and return the next UI state."""
    handler = _HANDLERS.get(type(ui))
    if handler is None:
        raise TypeError(f"unhandled UI state: {ui!r}")
    return handler(ui, event, game)


# ---------- Queries for renderers ----------

@dataclass(frozen=True)
class Highlight:
    """What a renderer should emphasise for a UI state."""

    hovered: Optional[PileRef] = None
    selected: Optional[PileRef] = None
    take_n: int = 0
    target: Optional[PileRef] = None


def highlight(ui: UIState) -> Highlight:
    if isinstance(ui, Hovering):
        return Highlight(hovered=ui.pile)
    if isinstance(ui, (SelectingTableau, SelectingTalon)):
        return Highlight(hovered=ui.pile, selected=ui.pile, take_n=ui.take_n)
    if isinstance(ui, Moving):
        return Highlight(selected=ui.src, take_n=ui.take_n, target=ui.dst)
    if isinstance(ui, (DealingUI, AutoMoving)):
        return Highlight()
    raise TypeError(f"unhandled UI state: {ui!r}")
