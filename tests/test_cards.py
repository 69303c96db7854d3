from __future__ import annotations

import pytest

from tonk.cards import Card, Rank, Suit, format_cards, iter_full_deck, parse_card, parse_cards, sort_by_suit


@pytest.mark.parametrize(
    ("rank", "value"),
    [
        (Rank.ACE, 1),
        (Rank.TWO, 2),
        (Rank.NINE, 9),
        (Rank.TEN, 10),
        (Rank.JACK, 10),
        (Rank.QUEEN, 10),
        (Rank.KING, 10),
    ],
)
def test_card_values(rank: Rank, value: int) -> None:
    assert Card(Suit.CLUBS, rank).value == value


def test_rank_index_follows_ace_to_king() -> None:
    assert [rank.position for rank in Rank.ordered()] == list(range(13))
    assert Card(Suit.SPADES, Rank.ACE).rank_index == 0
    assert Card(Suit.SPADES, Rank.KING).rank_index == 12


def test_full_deck_has_52_distinct_cards() -> None:
    deck = list(iter_full_deck())
    assert len(deck) == 52
    assert len(set(deck)) == 52


def test_cards_compare_by_suit_and_rank() -> None:
    assert Card(Suit.HEARTS, Rank.SEVEN) == parse_card("7H")
    assert Card(Suit.HEARTS, Rank.SEVEN) != Card(Suit.DIAMONDS, Rank.SEVEN)
    assert len({parse_card("7H"), parse_card("7h")}) == 1


@pytest.mark.parametrize(("code", "label"), [("10h", "10♥"), ("QS", "Q♠"), ("AD", "A♦"), (" 2c ", "2♣")])
def test_parse_card_codes(code: str, label: str) -> None:
    card = parse_card(code)
    assert card.label() == label
    assert str(card) == label


@pytest.mark.parametrize("code", ["", "1H", "7X", "H", "11S"])
def test_parse_card_rejects_garbage(code: str) -> None:
    with pytest.raises(ValueError):
        parse_card(code)


def test_card_code_round_trips_through_parser() -> None:
    for card in iter_full_deck():
        assert parse_card(card.code) == card


def test_red_suits() -> None:
    assert parse_card("5H").is_red
    assert parse_card("5D").is_red
    assert not parse_card("5C").is_red
    assert not parse_card("5S").is_red


def test_sort_by_suit_groups_then_orders_by_rank() -> None:
    cards = parse_cards(["KS", "2H", "AS", "9H"])
    assert format_cards(sort_by_suit(cards)) == "2♥ 9♥ A♠ K♠"
