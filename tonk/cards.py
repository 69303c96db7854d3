"""Card abstractions and helpers for Tonk."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Sequence


class Suit(str, Enum):
    """Enumeration of the four suits in a Tonk deck."""

    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    @property
    def symbol(self) -> str:
        return _SUIT_SYMBOLS[self]

    @property
    def code(self) -> str:
        return self.value[0].upper()


_SUIT_SYMBOLS = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}


class Rank(str, Enum):
    """Enumeration of ranks ordered according to Tonk rules."""

    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"

    @classmethod
    def ordered(cls) -> tuple["Rank", ...]:
        """Return ranks in rule order for scoring and run validation."""

        return tuple(cls)

    @property
    def position(self) -> int:
        return _RANK_INDEX[self]

    @property
    def value_points(self) -> int:
        if self is Rank.ACE:
            return 1
        if self in (Rank.JACK, Rank.QUEEN, Rank.KING):
            return 10
        return int(self.value)


_RANK_INDEX = {rank: idx for idx, rank in enumerate(Rank)}


@dataclass(frozen=True, slots=True)
class Card:
    """Value object describing a physical card.

    Two cards with the same suit and rank compare equal; there is only one
    physical copy of each in a 52-card deck.
    """

    suit: Suit
    rank: Rank

    @property
    def value(self) -> int:
        """Point value: A=1, 2-10 face value, J/Q/K=10."""

        return self.rank.value_points

    @property
    def rank_index(self) -> int:
        """Position of the rank in A..K, used for run adjacency."""

        return self.rank.position

    @property
    def symbol(self) -> str:
        return self.suit.symbol

    @property
    def is_red(self) -> bool:
        return self.suit in (Suit.HEARTS, Suit.DIAMONDS)

    @property
    def code(self) -> str:
        """Compact ASCII code such as ``10H`` or ``QS``."""

        return f"{self.rank.value}{self.suit.code}"

    def label(self) -> str:
        """Create a display label suitable for CLI representations."""

        return f"{self.rank.value}{self.suit.symbol}"

    def __str__(self) -> str:
        return self.label()


_SUITS_BY_CODE = {suit.code: suit for suit in Suit}
_RANKS_BY_VALUE = {rank.value: rank for rank in Rank}


def parse_card(code: str) -> Card:
    """Parse a compact code (``"7S"``, ``"10h"``) into a :class:`Card`."""

    text = code.strip().upper()
    if len(text) < 2:
        raise ValueError(f"invalid card code '{code}'")
    rank_text, suit_text = text[:-1], text[-1]
    rank = _RANKS_BY_VALUE.get(rank_text)
    suit = _SUITS_BY_CODE.get(suit_text)
    if rank is None or suit is None:
        raise ValueError(f"invalid card code '{code}'")
    return Card(suit=suit, rank=rank)


def parse_cards(codes: Iterable[str]) -> list[Card]:
    return [parse_card(code) for code in codes]


def iter_full_deck() -> Iterator[Card]:
    """Yield all 52 cards, suit-major in rank order."""

    for suit in Suit:
        for rank in Rank.ordered():
            yield Card(suit=suit, rank=rank)


def sort_by_suit(cards: Iterable[Card]) -> list[Card]:
    return sorted(cards, key=lambda c: (c.suit.value, c.rank_index))


def format_cards(cards: Sequence[Card]) -> str:
    return " ".join(card.label() for card in cards)
