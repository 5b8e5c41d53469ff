import pytest

from klondike.cards import parse_cards
from klondike.game_state import NUM_FOUNDATIONS, NUM_TABLEAU, PlayingState


def build_playing(tableau=(), foundations=(), stock=(), talon=()):
    """PlayingState from card notation; missing piles are empty."""
    tab = [parse_cards(p) for p in tableau] + [()] * (NUM_TABLEAU - len(tableau))
    fnd = [parse_cards(p) for p in foundations] + [()] * (NUM_FOUNDATIONS - len(foundations))
    return PlayingState(
        tableau=tuple(tab),
        foundations=tuple(fnd),
        stock=parse_cards(stock),
        talon=parse_cards(talon),
    )


@pytest.fixture
def playing():
    return build_playing
