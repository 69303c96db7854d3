from __future__ import annotations

import pytest

from tonk.cards import parse_card, parse_cards
from tonk.rules import InvalidSpread
from tonk.spreads import (
    Spread,
    SpreadKind,
    find_possible_spreads,
    hand_points,
    is_valid_book,
    is_valid_run,
    validate,
)


def _spread(codes: str, owner: str = "p0") -> Spread:
    return Spread.from_cards(parse_cards(codes.split()), owner_id=owner)


@pytest.mark.parametrize(
    ("codes", "kind"),
    [
        ("7H 7D 7C", SpreadKind.BOOK),
        ("7H 7D 7C 7S", SpreadKind.BOOK),
        ("4S 5S 6S", SpreadKind.RUN),
        ("6S 4S 5S", SpreadKind.RUN),
        ("AH 2H 3H", SpreadKind.RUN),
        ("JC QC KC", SpreadKind.RUN),
        ("9D 10D JD QD KD", SpreadKind.RUN),
    ],
)
def test_valid_spreads(codes: str, kind: SpreadKind) -> None:
    result = validate(parse_cards(codes.split()))
    assert result.valid
    assert result.kind is kind


@pytest.mark.parametrize(
    "codes",
    [
        "7H 7D",
        "4S 5S",
        "QS KS AS",
        "4S 5H 6S",
        "4S 5S 7S",
        "7H 7H 7D",
        "7H 7D 8C",
        "",
    ],
)
def test_invalid_spreads(codes: str) -> None:
    cards = parse_cards(codes.split())
    result = validate(cards)
    assert not result.valid
    assert result.kind is None


def test_book_and_run_checks_are_independent() -> None:
    book = parse_cards(["9H", "9D", "9S"])
    run = parse_cards(["9H", "10H", "JH"])
    assert is_valid_book(book) and not is_valid_run(book)
    assert is_valid_run(run) and not is_valid_book(run)


def test_hand_points_sums_card_values() -> None:
    assert hand_points(parse_cards(["AS", "10H", "KD", "5C"])) == 26
    assert hand_points([]) == 0


def test_from_cards_sorts_runs_and_rejects_invalid() -> None:
    spread = _spread("6S 4S 5S")
    assert [card.code for card in spread.cards] == ["4S", "5S", "6S"]
    assert spread.points == 15
    with pytest.raises(InvalidSpread):
        _spread("4S 5S 7S")


def test_book_accepts_same_rank_until_four() -> None:
    spread = _spread("7H 7D 7C")
    assert spread.can_add_card(parse_card("7S"))
    assert not spread.can_add_card(parse_card("8S"))
    spread.add_card(parse_card("7S"))
    assert len(spread.cards) == 4
    assert not spread.can_add_card(parse_card("7S"))


def test_run_accepts_either_end_of_same_suit() -> None:
    spread = _spread("5H 6H 7H")
    assert spread.can_add_card(parse_card("4H"))
    assert spread.can_add_card(parse_card("8H"))
    assert not spread.can_add_card(parse_card("9H"))
    assert not spread.can_add_card(parse_card("8S"))
    assert not spread.can_add_card(parse_card("6H"))


def test_run_add_keeps_rank_order() -> None:
    spread = _spread("5H 6H 7H")
    spread.add_card(parse_card("4H"))
    spread.add_card(parse_card("8H"))
    assert [card.code for card in spread.cards] == ["4H", "5H", "6H", "7H", "8H"]
    assert validate(spread.cards).valid


def test_run_does_not_wrap_around_the_king() -> None:
    spread = _spread("JS QS KS")
    assert not spread.can_add_card(parse_card("AS"))
    assert spread.can_add_card(parse_card("10S"))


def test_add_card_rejects_illegal_extension() -> None:
    spread = _spread("5H 6H 7H")
    with pytest.raises(InvalidSpread):
        spread.add_card(parse_card("10H"))
    assert len(spread.cards) == 3


@pytest.mark.parametrize(
    ("codes", "description"),
    [("7H 7D 7C", "7s"), ("6S 4S 5S", "4-6 of spades"), ("QC JC KC", "J-K of clubs")],
)
def test_description(codes: str, description: str) -> None:
    assert _spread(codes).description() == description


def test_find_possible_spreads_reports_books_and_maximal_runs() -> None:
    hand = parse_cards(["7H", "8H", "9H", "10H", "7D", "7C", "2S"])
    candidates = find_possible_spreads(hand)
    kinds = sorted((c.kind.value, tuple(card.code for card in c.cards)) for c in candidates)
    assert kinds == [
        ("book", ("7H", "7D", "7C")),
        ("run", ("7H", "8H", "9H", "10H")),
    ]


def test_find_possible_spreads_caps_books_at_four() -> None:
    candidates = find_possible_spreads(parse_cards(["KH", "KD", "KC", "KS"]))
    assert len(candidates) == 1
    assert len(candidates[0].cards) == 4


def test_find_possible_spreads_finds_separate_runs_in_one_suit() -> None:
    hand = parse_cards(["AS", "2S", "3S", "6S", "7S", "8S"])
    runs = find_possible_spreads(hand)
    assert [c.lowest_rank_index for c in runs] == [0, 5]


def test_no_spreads_in_scattered_hand() -> None:
    assert find_possible_spreads(parse_cards(["AS", "3H", "5D", "7C", "9S"])) == []
