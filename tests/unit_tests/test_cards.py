import random

import pytest

from klondike.cards import (
    Card,
    Color,
    Rank,
    Suit,
    format_pile,
    make_rng,
    new_deck,
    parse_card,
    parse_cards,
    shuffle,
    take_n,
    take_one,
    top_card,
)


def test_new_deck_is_suit_major_and_face_down() -> None:
    deck = new_deck()
    assert len(deck) == 52
    assert len(set(deck)) == 52
    assert deck[0] == Card(Suit.CLUBS, Rank.ACE)
    assert deck[12] == Card(Suit.CLUBS, Rank.KING)
    assert deck[13] == Card(Suit.SPADES, Rank.ACE)
    assert deck[-1] == Card(Suit.DIAMONDS, Rank.KING)
    assert not any(c.face_up for c in deck)


def test_suit_colours() -> None:
    assert [s.color for s in Suit] == [Color.BLACK, Color.BLACK, Color.RED, Color.RED]


@pytest.mark.parametrize(
    "rank, successor, predecessor",
    [
        (Rank.KING, Rank.QUEEN, None),
        (Rank.TWO, Rank.ACE, Rank.THREE),
        (Rank.ACE, None, Rank.TWO),
        (Rank.TEN, Rank.NINE, Rank.JACK),
    ],
)
def test_rank_neighbours(rank, successor, predecessor) -> None:
    assert rank.successor() is successor
    assert rank.predecessor() is predecessor


def test_card_equality_ignores_face() -> None:
    up = Card(Suit.HEARTS, Rank.SEVEN, True)
    down = Card(Suit.HEARTS, Rank.SEVEN, False)
    assert up == down
    assert hash(up) == hash(down)
    assert up != Card(Suit.DIAMONDS, Rank.SEVEN, True)


def test_card_ordering_uses_rank_only() -> None:
    assert Card(Suit.SPADES, Rank.TWO) < Card(Suit.CLUBS, Rank.THREE)
    assert Card(Suit.HEARTS, Rank.KING) > Card(Suit.CLUBS, Rank.QUEEN)
    assert Card(Suit.HEARTS, Rank.FIVE) <= Card(Suit.CLUBS, Rank.FIVE)
    assert Card(Suit.HEARTS, Rank.FIVE) >= Card(Suit.CLUBS, Rank.FIVE)


def test_face_copies() -> None:
    c = Card(Suit.CLUBS, Rank.ACE)
    assert c.face_up_copy().face_up
    assert not c.face_up_copy().face_down_copy().face_up
    assert not c.face_up


@pytest.mark.parametrize(
    "text, expected",
    [
        ("KC", Card(Suit.CLUBS, Rank.KING, True)),
        ("X♥", Card(Suit.HEARTS, Rank.TEN, True)),
        ("10d", Card(Suit.DIAMONDS, Rank.TEN, True)),
        ("1S", Card(Suit.SPADES, Rank.ACE, True)),
        ("tH", Card(Suit.HEARTS, Rank.TEN, True)),
    ],
)
def test_parse_card(text, expected) -> None:
    card = parse_card(text)
    assert card == expected
    assert card.face_up


def test_parse_card_face_down_marker() -> None:
    card = parse_card("#2S")
    assert card == Card(Suit.SPADES, Rank.TWO)
    assert not card.face_up


@pytest.mark.parametrize("text", ["", "ZC", "KX", "11H", "K"])
def test_parse_card_rejects_unknown(text) -> None:
    with pytest.raises(ValueError):
        parse_card(text)


def test_str_and_format() -> None:
    assert str(parse_card("KC")) == "K♣"
    assert str(parse_card("#AH")) == "#A♥"
    assert format_pile(parse_cards(["#QD", "XS"])) == "#Q♦ X♠"


def test_take_n_splits_top_cards() -> None:
    pile = parse_cards(["AC", "2C", "3C"])
    remaining, taken = take_n(pile, 2)
    assert remaining == parse_cards(["AC"])
    assert taken == parse_cards(["2C", "3C"])
    assert pile == parse_cards(["AC", "2C", "3C"])


def test_take_one_and_top_card() -> None:
    pile = parse_cards(["AC", "2C"])
    remaining, card = take_one(pile)
    assert card == parse_card("2C")
    assert remaining == parse_cards(["AC"])
    assert top_card(pile) == parse_card("2C")
    assert top_card(()) is None


@pytest.mark.parametrize("n", [-1, 4])
def test_take_n_out_of_range(n) -> None:
    with pytest.raises(ValueError):
        take_n(parse_cards(["AC", "2C", "3C"]), n)


def test_take_one_from_empty_pile() -> None:
    with pytest.raises(ValueError):
        take_one(())


def test_seeded_shuffle_is_reproducible() -> None:
    a, b = new_deck(), new_deck()
    shuffle(a, make_rng(1234))
    shuffle(b, make_rng(1234))
    assert a == b
    assert a != new_deck()
    assert sorted(a, key=lambda c: (c.suit.value, c.rank)) == sorted(new_deck(), key=lambda c: (c.suit.value, c.rank))


def test_shuffle_uses_injected_generator() -> None:
    deck = new_deck()
    expected = list(deck)
    random.Random(7).shuffle(expected)
    shuffle(deck, random.Random(7))
    assert deck == expected
