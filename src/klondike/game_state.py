"""Game state model for Klondike.

A game is always in exactly one of three phases, each its own immutable value:

- :class:`DealingState` while the tableau is being dealt from the stock,
- :class:`PlayingState` once the deal is complete,
- :class:`WonState` after the last card reaches the foundations.

Piles are addressed with :class:`PileRef`. Not every pile exists in every
phase, so :func:`get_stack` returns ``None`` for references the phase cannot
resolve.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple, Union

from klondike.cards import Card, Pile, new_deck, shuffle

NUM_TABLEAU = 7
NUM_FOUNDATIONS = 4
DECK_SIZE = 52
NUM_DEALT = NUM_TABLEAU * (NUM_TABLEAU + 1) // 2


class PileKind(Enum):
    TABLEAU = "tableau"
    FOUNDATION = "foundation"
    STOCK = "stock"
    TALON = "talon"


@dataclass(frozen=True)
class PileRef:
    """Names one pile: ``Tableau(0..6)``, ``Foundation(0..3)``, ``Stock`` or ``Talon``."""

    kind: PileKind
    index: int = 0

    @classmethod
    def tableau(cls, index: int) -> "PileRef":
        return cls(PileKind.TABLEAU, index)

    @classmethod
    def foundation(cls, index: int) -> "PileRef":
        return cls(PileKind.FOUNDATION, index)

    @property
    def is_tableau(self) -> bool:
        return self.kind is PileKind.TABLEAU

    @property
    def is_foundation(self) -> bool:
        return self.kind is PileKind.FOUNDATION

    @property
    def is_stock(self) -> bool:
        return self.kind is PileKind.STOCK

    @property
    def is_talon(self) -> bool:
        return self.kind is PileKind.TALON

    def __str__(self) -> str:
        if self.kind in (PileKind.TABLEAU, PileKind.FOUNDATION):
            return f"{self.kind.value.capitalize()}({self.index})"
        return self.kind.value.capitalize()


STOCK = PileRef(PileKind.STOCK)
TALON = PileRef(PileKind.TALON)

TABLEAU_REFS: Tuple[PileRef, ...] = tuple(PileRef.tableau(i) for i in range(NUM_TABLEAU))
FOUNDATION_REFS: Tuple[PileRef, ...] = tuple(PileRef.foundation(i) for i in range(NUM_FOUNDATIONS))


def _empty_piles(n):
    return tuple(() for _ in range(n))


@dataclass(frozen=True)
class DealingState:
    """Partially dealt tableau plus the remaining stock; no foundations or talon yet."""

    tableau: Tuple[Pile, ...] = field(default_factory=lambda: _empty_piles(NUM_TABLEAU))
    stock: Pile = ()


@dataclass(frozen=True)
class PlayingState:
    tableau: Tuple[Pile, ...] = field(default_factory=lambda: _empty_piles(NUM_TABLEAU))
    foundations: Tuple[Pile, ...] = field(default_factory=lambda: _empty_piles(NUM_FOUNDATIONS))
    stock: Pile = ()
    talon: Pile = ()


@dataclass(frozen=True)
class WonState:
    foundations: Tuple[Pile, ...]


GameState = Union[DealingState, PlayingState, WonState]


def _index(piles, i):
    if 0 <= i < len(piles):
        return piles[i]
    return None


def get_stack(state: GameState, pile: PileRef) -> Optional[Pile]:
    """Return the pile ``pile`` refers to, or ``None`` if it doesn't exist in ``state``."""
    if isinstance(state, DealingState):
        if pile.kind is PileKind.TABLEAU:
            return _index(state.tableau, pile.index)
        if pile.kind is PileKind.FOUNDATION:
            return None
        if pile.kind is PileKind.STOCK:
            return state.stock
        if pile.kind is PileKind.TALON:
            return None
    elif isinstance(state, PlayingState):
        if pile.kind is PileKind.TABLEAU:
            return _index(state.tableau, pile.index)
        if pile.kind is PileKind.FOUNDATION:
            return _index(state.foundations, pile.index)
        if pile.kind is PileKind.STOCK:
            return state.stock
        if pile.kind is PileKind.TALON:
            return state.talon
    elif isinstance(state, WonState):
        if pile.kind is PileKind.FOUNDATION:
            return _index(state.foundations, pile.index)
        if pile.kind in (PileKind.TABLEAU, PileKind.STOCK, PileKind.TALON):
            return None
    raise TypeError(f"unhandled game state or pile: {state!r}, {pile!r}")


def replace_stacks(state: PlayingState, piles: Dict[PileRef, Pile]) -> PlayingState:
    """Return a copy of ``state`` with every pile in ``piles`` swapped in at once."""
    tableau = list(state.tableau)
    foundations = list(state.foundations)
    stock = state.stock
    talon = state.talon
    for ref, cards in piles.items():
        if ref.kind is PileKind.TABLEAU:
            tableau[ref.index] = tuple(cards)
        elif ref.kind is PileKind.FOUNDATION:
            foundations[ref.index] = tuple(cards)
        elif ref.kind is PileKind.STOCK:
            stock = tuple(cards)
        elif ref.kind is PileKind.TALON:
            talon = tuple(cards)
    return PlayingState(
        tableau=tuple(tableau),
        foundations=tuple(foundations),
        stock=stock,
        talon=talon,
    )


def new_game(rng: Optional[random.Random] = None) -> DealingState:
    """Shuffle a fresh deck into the stock of an undealt game."""
    deck = new_deck()
    shuffle(deck, rng)
    return DealingState(stock=tuple(deck))


def dealing_state_from_deck(deck) -> DealingState:
    return DealingState(stock=tuple(c.face_down_copy() for c in deck))


def all_cards(state: GameState) -> Iterator[Card]:
    """Yield every card in every pile ``state`` has."""
    if isinstance(state, DealingState):
        groups = state.tableau + (state.stock,)
    elif isinstance(state, PlayingState):
        groups = state.tableau + state.foundations + (state.stock, state.talon)
    elif isinstance(state, WonState):
        groups = state.foundations
    else:
        raise TypeError(f"unhandled game state: {state!r}")
    for pile in groups:
        yield from pile


def phase_name(state: GameState) -> str:
    if isinstance(state, DealingState):
        return "dealing"
    if isinstance(state, PlayingState):
        return "playing"
    if isinstance(state, WonState):
        return "won"
    raise TypeError(f"unhandled game state: {state!r}")
