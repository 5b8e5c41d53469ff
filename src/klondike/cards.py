"""Cards, decks and piles. A pile is a tuple whose last card is the top."""

from __future__ import annotations

import random
import re
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Iterable, List, MutableSequence, Optional, Sequence, Tuple, Union

Pile = Tuple["Card", ...]


class Color(Enum):
    BLACK = "black"
    RED = "red"


class Suit(Enum):
    CLUBS = "C"
    SPADES = "S"
    HEARTS = "H"
    DIAMONDS = "D"

    @property
    def color(self) -> Color:
        if self in (Suit.HEARTS, Suit.DIAMONDS):
            return Color.RED
        return Color.BLACK

    @property
    def glyph(self) -> str:
        return _SUIT_GLYPHS[self]


_SUIT_GLYPHS = {
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
}


class Rank(IntEnum):
    """Card rank, valued by face value (Ace low).

    Play runs through the sequence King, Queen, ..., Ace. ``successor`` is the
    next rank along that sequence and ``predecessor`` the previous one, so a
    tableau run is built from successors and a foundation from predecessors.
    """

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    def successor(self) -> Optional["Rank"]:
        if self is Rank.ACE:
            return None
        return Rank(self.value - 1)

    def predecessor(self) -> Optional["Rank"]:
        if self is Rank.KING:
            return None
        return Rank(self.value + 1)

    @property
    def symbol(self) -> str:
        return _RANK_SYMBOLS[self]


_RANK_SYMBOLS = {Rank.ACE: "A", Rank.TEN: "X", Rank.JACK: "J", Rank.QUEEN: "Q", Rank.KING: "K"}
for _r in range(2, 10):
    _RANK_SYMBOLS[Rank(_r)] = str(_r)

NUM_RANKS = len(Rank)


@dataclass(frozen=True)
class Card:
    """A playing card. Equality ignores the face-up flag, ordering uses rank only."""

    suit: Suit
    rank: Rank
    face_up: bool = field(default=False, compare=False)

    @property
    def color(self) -> Color:
        return self.suit.color

    def face_up_copy(self) -> "Card":
        return self if self.face_up else replace(self, face_up=True)

    def face_down_copy(self) -> "Card":
        return replace(self, face_up=False) if self.face_up else self

    def __lt__(self, other: "Card") -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: "Card") -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: "Card") -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: "Card") -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.rank >= other.rank

    def __str__(self) -> str:
        return f"{'' if self.face_up else '#'}{self.rank.symbol}{self.suit.glyph}"

    def __repr__(self) -> str:
        return f"Card({self})"


def new_deck() -> List[Card]:
    """Return the 52 cards face-down, suit-major and rank-minor."""
    return [Card(suit, rank, False) for suit in Suit for rank in Rank]


def shuffle(deck: MutableSequence[Card], rng: Optional[random.Random] = None) -> None:
    """Shuffle ``deck`` in place (Fisher-Yates) with ``rng`` or the global generator."""
    (rng or random).shuffle(deck)


def make_rng(seed: Union[str, int, None] = None) -> random.Random:
    """Return a generator, reproducible when ``seed`` is given."""
    if seed is None:
        return random.Random()
    return random.Random(seed)


def take_n(pile: Sequence[Card], n: int) -> Tuple[Pile, Pile]:
    """Split ``pile`` into ``(remaining, taken)``.

    ``taken`` holds the top ``n`` cards in bottom-to-top order.
    """
    if n < 0 or n > len(pile):
        raise ValueError(f"cannot take {n} cards from a pile of {len(pile)}")
    split = len(pile) - n
    return tuple(pile[:split]), tuple(pile[split:])


def take_one(pile: Sequence[Card]) -> Tuple[Pile, Card]:
    remaining, taken = take_n(pile, 1)
    return remaining, taken[0]


def top_card(pile: Sequence[Card]) -> Optional[Card]:
    return pile[-1] if pile else None


# ---------- Notation ----------

_CARD_PATTERN = re.compile(r"^(?P<hidden>#)?(?P<rank>10|[A1-9XTJQK])(?P<suit>[CSHD♣♠♥♦])$", re.IGNORECASE)

_RANK_ALIASES = {"A": Rank.ACE, "1": Rank.ACE, "X": Rank.TEN, "T": Rank.TEN, "10": Rank.TEN,
                 "J": Rank.JACK, "Q": Rank.QUEEN, "K": Rank.KING}
for _r in range(2, 10):
    _RANK_ALIASES[str(_r)] = Rank(_r)

_SUIT_ALIASES = {"C": Suit.CLUBS, "S": Suit.SPADES, "H": Suit.HEARTS, "D": Suit.DIAMONDS}
_SUIT_ALIASES.update({glyph: suit for suit, glyph in _SUIT_GLYPHS.items()})


def parse_card(text: str) -> Card:
    """Parse notation like ``"KC"``, ``"X♥"`` or ``"#2S"`` (``#`` = face-down)."""
    m = _CARD_PATTERN.match(text.strip())
    if m is None:
        raise ValueError(f"unknown card notation: {text!r}")
    rank = _RANK_ALIASES[m.group("rank").upper()]
    suit = _SUIT_ALIASES[m.group("suit").upper()]
    return Card(suit, rank, face_up=m.group("hidden") is None)


def parse_cards(texts: Iterable[str]) -> Pile:
    return tuple(parse_card(t) for t in texts)


def format_pile(pile: Iterable[Card]) -> str:
    return " ".join(str(c) for c in pile)
