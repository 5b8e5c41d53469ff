"""Klondike rules: pure functions from one game state to the next."""

from __future__ import annotations

import logging
from math import isqrt
from typing import Optional, Sequence, Tuple, Union

from klondike.cards import Card, Color, Pile, Rank, NUM_RANKS, take_n, take_one
from klondike.errors import InvalidInput, InvalidMove
from klondike.game_state import (
    DECK_SIZE,
    FOUNDATION_REFS,
    NUM_DEALT,
    NUM_FOUNDATIONS,
    NUM_TABLEAU,
    TABLEAU_REFS,
    STOCK,
    TALON,
    DealingState,
    GameState,
    PileKind,
    PileRef,
    PlayingState,
    WonState,
    get_stack,
    replace_stacks,
)

logger = logging.getLogger(__name__)

MoveResult = Union[PlayingState, WonState]
DealResult = Union[DealingState, PlayingState]


# ---------- Dealing ----------

def _triangular(k):
    return k * (k + 1) // 2


def deal_position(dealt: int) -> Tuple[int, int, bool]:
    """Return ``(round, column, face_up)`` for the card dealt after ``dealt`` cards.

    Round ``r`` deals one card to each pile ``r..6``, so rounds hold 7, 6, ...
    1 cards and the cards still to deal always form a triangular number once
    a round is finished. The card landing on pile ``r`` in round ``r`` is the
    last that pile receives and is the one dealt face-up.
    """
    remaining = NUM_DEALT - dealt
    if remaining <= 0:
        raise ValueError(f"all {NUM_DEALT} tableau cards are already dealt")
    k = (isqrt(8 * remaining + 1) - 1) // 2
    if _triangular(k) < remaining:
        k += 1
    rnd = NUM_TABLEAU - k
    pos = _triangular(k) - remaining
    return rnd, rnd + pos, pos == 0


def _playing_from_dealing(tableau, stock):
    return PlayingState(
        tableau=tuple(tableau),
        foundations=tuple(() for _ in range(NUM_FOUNDATIONS)),
        stock=tuple(stock),
        talon=(),
    )


def deal_one(state: DealingState) -> DealResult:
    """Deal a single card onto the tableau.

    Returns the next :class:`DealingState`, or the :class:`PlayingState` once
    all 28 tableau cards are out.
    """
    dealt = DECK_SIZE - len(state.stock)
    if dealt >= NUM_DEALT:
        return _playing_from_dealing(state.tableau, state.stock)

    _, column, face_up = deal_position(dealt)
    stock, card = take_one(state.stock)
    card = card.face_up_copy() if face_up else card.face_down_copy()
    tableau = list(state.tableau)
    tableau[column] = tableau[column] + (card,)

    if dealt + 1 == NUM_DEALT:
        return _playing_from_dealing(tableau, stock)
    return DealingState(tableau=tuple(tableau), stock=stock)


def deal_all(state: DealingState) -> PlayingState:
    """Deal the whole tableau at once; same layout as repeated :func:`deal_one`."""
    tableau = [list(p) for p in state.tableau]
    stock = list(state.stock)
    dealt = DECK_SIZE - len(stock)
    for rnd in range(NUM_TABLEAU):
        for column in range(rnd, NUM_TABLEAU):
            if dealt > 0:
                # resume a partially dealt tableau
                dealt -= 1
                continue
            card = stock.pop()
            tableau[column].append(card.face_up_copy() if column == rnd else card.face_down_copy())
    return _playing_from_dealing((tuple(p) for p in tableau), stock)


# ---------- Stock ----------

def draw_stock(state: PlayingState, n: int) -> PlayingState:
    """Draw up to ``n`` cards from stock onto talon, or recycle talon when stock is empty."""
    if not state.stock:
        stock = tuple(c.face_down_copy() for c in reversed(state.talon))
        return replace_stacks(state, {STOCK: stock, TALON: ()})

    n = max(0, min(n, len(state.stock)))
    stock, taken = take_n(state.stock, n)
    talon = state.talon + tuple(c.face_up_copy() for c in taken)
    return replace_stacks(state, {STOCK: stock, TALON: talon})


# ---------- Moves ----------

def valid_seq(pile: PileRef, cards: Sequence[Card]) -> bool:
    """Whether ``cards`` (bottom to top) form a run that may sit on ``pile``."""
    if any(not c.face_up for c in cards):
        return False
    if pile.kind is PileKind.TABLEAU:
        for prev, card in zip(cards, cards[1:]):
            if card.color is prev.color:
                return False
            if card.rank is not prev.rank.successor():
                return False
        return True
    if pile.kind is PileKind.FOUNDATION:
        for prev, card in zip(cards, cards[1:]):
            if card.suit is not prev.suit:
                return False
            if card.rank is not prev.rank.predecessor():
                return False
        return True
    if pile.kind is PileKind.STOCK:
        return False
    if pile.kind is PileKind.TALON:
        return True
    raise TypeError(f"unhandled pile: {pile!r}")


def _check_move_input(src, take, dst):
    if take == 0:
        raise InvalidInput("take_n", "cannot take 0 cards")
    if take < 0:
        raise InvalidInput("take_n", "cannot take a negative number of cards")

    if src.kind is PileKind.STOCK:
        raise InvalidInput("src", "cannot move cards from stock")
    if src.kind is PileKind.TALON and take != 1:
        raise InvalidInput("take_n", "cannot move more than 1 card from talon")

    if dst.kind is PileKind.STOCK:
        raise InvalidInput("dst", "cannot move cards to stock")
    if dst.kind is PileKind.TALON:
        raise InvalidInput("dst", "cannot move cards to talon")
    if dst.kind is PileKind.FOUNDATION and take != 1:
        raise InvalidInput("take_n", "cannot move more than 1 card to foundation")


def is_won(state: GameState) -> bool:
    if isinstance(state, WonState):
        return True
    if isinstance(state, PlayingState):
        return all(len(f) == NUM_RANKS for f in state.foundations)
    return False


def move_cards(state: PlayingState, src: PileRef, take: int, dst: PileRef) -> MoveResult:
    """Move the top ``take`` cards of ``src`` onto ``dst``.

    Raises :class:`InvalidInput` for malformed requests and
    :class:`InvalidMove` when the cards may not go there.
    """
    _check_move_input(src, take, dst)

    if src == dst:
        return state

    src_pile = get_stack(state, src)
    if src_pile is None:
        raise InvalidInput("src", "pile does not exist")
    if take > len(src_pile):
        raise InvalidInput("take_n", "not enough cards in src pile")
    dst_pile = get_stack(state, dst)
    if dst_pile is None:
        raise InvalidInput("dst", "pile does not exist")

    rest, taken = take_n(src_pile, take)
    if not valid_seq(src, taken):
        raise InvalidMove("src sequence is invalid")

    if not dst_pile:
        if dst.kind is PileKind.TABLEAU and taken[0].rank is not Rank.KING:
            raise InvalidMove("can only move a King to a space")
        if dst.kind is PileKind.FOUNDATION and taken[0].rank is not Rank.ACE:
            raise InvalidMove("dst sequence is invalid")
    elif not valid_seq(dst, (dst_pile[-1], taken[0])):
        raise InvalidMove("dst sequence is invalid")

    if rest and not rest[-1].face_up:
        rest = rest[:-1] + (rest[-1].face_up_copy(),)

    new_state = replace_stacks(state, {src: rest, dst: dst_pile + taken})
    if dst.kind is PileKind.FOUNDATION and is_won(new_state):
        logger.info("Final card moved to %s, game won", dst)
        return WonState(foundations=new_state.foundations)
    return new_state


def auto_move_card(state: PlayingState, src: PileRef, take: int) -> MoveResult:
    """Move the top ``take`` cards of ``src`` to the first pile that accepts them.

    Foundations are tried first (single cards only), then the other tableau
    piles left to right. Returns ``state`` itself when nothing accepts the
    cards. :class:`InvalidInput` is raised as soon as it is hit.
    """
    if src.kind is PileKind.FOUNDATION:
        return state

    candidates = []
    if take == 1:
        candidates.extend(FOUNDATION_REFS)
    candidates.extend(ref for ref in TABLEAU_REFS if ref != src)

    for dst in candidates:
        try:
            return move_cards(state, src, take, dst)
        except InvalidMove:
            continue
    return state


# ---------- Auto moves to foundation ----------

def _foundation_accepts(foundation, card):
    if not foundation:
        return card.rank is Rank.ACE
    top = foundation[-1]
    return top.suit is card.suit and card.rank is top.rank.predecessor()


def is_safe_to_move_to_foundation(card: Card, foundations: Sequence[Pile]) -> bool:
    """Whether moving ``card`` up can never block a later move.

    Aces and Twos are always safe. Anything higher is safe once both
    foundations of the opposite colour have reached the rank just below it,
    so no card of the other colour could still need it to build on. The count
    of two relies on the deck's two red and two black suits. Whether the card
    has a foundation to go to is not checked here.
    """
    if card.rank in (Rank.ACE, Rank.TWO):
        return True

    needed: Optional[Rank] = card.rank.successor()
    opposite = Color.RED if card.color is Color.BLACK else Color.BLACK
    ready = 0
    for f in foundations:
        if not f:
            continue
        top = f[-1]
        if top.color is opposite and top.rank >= needed:
            ready += 1
    return ready == 2


def auto_move_to_foundation(state: PlayingState) -> MoveResult:
    """Move the first safe card (talon first, then tableau 0..6) to a foundation."""
    for pile in (TALON,) + TABLEAU_REFS:
        cards = get_stack(state, pile)
        if not cards or not cards[-1].face_up:
            continue
        card = cards[-1]
        if not any(_foundation_accepts(f, card) for f in state.foundations):
            continue
        if is_safe_to_move_to_foundation(card, state.foundations):
            logger.debug("Auto moving %s from %s", card, pile)
            return auto_move_card(state, pile, 1)
    return state


def can_auto_move(state: GameState) -> bool:
    """True if :func:`auto_move_to_foundation` would do anything to ``state``."""
    if not isinstance(state, PlayingState):
        return False
    return auto_move_to_foundation(state) != state
