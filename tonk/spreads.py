"""Book and run validation plus spread discovery inside a hand."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence

from .cards import Card, Rank, Suit
from .rules import MAX_BOOK_SIZE, MIN_SPREAD_SIZE, InvalidSpread

__all__ = [
    "SpreadKind",
    "Validation",
    "SpreadCandidate",
    "Spread",
    "hand_points",
    "is_valid_book",
    "is_valid_run",
    "validate",
    "find_possible_spreads",
]


class SpreadKind(str, Enum):
    BOOK = "book"
    RUN = "run"


@dataclass(frozen=True, slots=True)
class Validation:
    """Outcome of :func:`validate`; ``kind`` is ``None`` when invalid."""

    valid: bool
    kind: SpreadKind | None = None


@dataclass(frozen=True, slots=True)
class SpreadCandidate:
    """A spread latent in a hand that has not been laid yet."""

    kind: SpreadKind
    cards: tuple[Card, ...]

    @property
    def points(self) -> int:
        return hand_points(self.cards)

    @property
    def lowest_rank_index(self) -> int:
        return min(card.rank_index for card in self.cards)


def hand_points(cards: Iterable[Card]) -> int:
    return sum(card.value for card in cards)


def _sorted_by_rank(cards: Iterable[Card]) -> list[Card]:
    return sorted(cards, key=lambda c: c.rank_index)


def is_valid_book(cards: Sequence[Card]) -> bool:
    """Three or four cards sharing a rank."""

    if not MIN_SPREAD_SIZE <= len(cards) <= MAX_BOOK_SIZE:
        return False
    if len(set(cards)) != len(cards):
        return False
    rank = cards[0].rank
    return all(card.rank == rank for card in cards)


def is_valid_run(cards: Sequence[Card]) -> bool:
    """Three or more same-suit cards with contiguous ranks (no K-A wrap)."""

    if len(cards) < MIN_SPREAD_SIZE:
        return False
    suit = cards[0].suit
    if any(card.suit != suit for card in cards):
        return False
    ordered = _sorted_by_rank(cards)
    return all(
        current.rank_index == previous.rank_index + 1
        for previous, current in zip(ordered, ordered[1:])
    )


def validate(cards: Sequence[Card]) -> Validation:
    """Classify ``cards`` as a book, a run, or neither."""

    if is_valid_book(cards):
        return Validation(True, SpreadKind.BOOK)
    if is_valid_run(cards):
        return Validation(True, SpreadKind.RUN)
    return Validation(False, None)


@dataclass(slots=True)
class Spread:
    """A laid spread. Once on the table it only ever grows by one card at a time."""

    cards: List[Card]
    kind: SpreadKind
    owner_id: str
    spread_id: str = ""

    @classmethod
    def from_cards(cls, cards: Sequence[Card], owner_id: str, spread_id: str = "") -> "Spread":
        """Validate ``cards`` and build a spread, raising :class:`InvalidSpread`."""

        result = validate(cards)
        if not result.valid or result.kind is None:
            raise InvalidSpread("cards do not form a book or a run")
        ordered = list(cards)
        if result.kind is SpreadKind.RUN:
            ordered = _sorted_by_rank(ordered)
        return cls(cards=ordered, kind=result.kind, owner_id=owner_id, spread_id=spread_id)

    @property
    def rank(self) -> Rank:
        return self.cards[0].rank

    @property
    def suit(self) -> Suit:
        return self.cards[0].suit

    @property
    def points(self) -> int:
        return hand_points(self.cards)

    def can_add_card(self, card: Card) -> bool:
        """Return ``True`` if ``card`` legally extends this spread."""

        if card in self.cards:
            return False
        if self.kind is SpreadKind.BOOK:
            return len(self.cards) < MAX_BOOK_SIZE and card.rank == self.rank
        if card.suit != self.suit:
            return False
        indices = [c.rank_index for c in self.cards]
        return card.rank_index in (min(indices) - 1, max(indices) + 1)

    def add_card(self, card: Card) -> None:
        """Append ``card``; runs are kept sorted by rank."""

        if not self.can_add_card(card):
            raise InvalidSpread(f"{card.label()} cannot be added to {self.description()}")
        self.cards.append(card)
        if self.kind is SpreadKind.RUN:
            self.cards.sort(key=lambda c: c.rank_index)

    def description(self) -> str:
        if self.kind is SpreadKind.BOOK:
            return f"{self.rank.value}s"
        ordered = _sorted_by_rank(self.cards)
        return f"{ordered[0].rank.value}-{ordered[-1].rank.value} of {self.suit.value}"


def _consecutive_runs(cards: Sequence[Card]) -> list[tuple[Card, ...]]:
    """Maximal runs of length >= 3 in a single-suit group."""

    if len(cards) < MIN_SPREAD_SIZE:
        return []
    ordered = _sorted_by_rank(cards)
    runs: list[tuple[Card, ...]] = []
    current = [ordered[0]]
    for card in ordered[1:]:
        if card.rank_index == current[-1].rank_index + 1:
            current.append(card)
            continue
        if len(current) >= MIN_SPREAD_SIZE:
            runs.append(tuple(current))
        current = [card]
    if len(current) >= MIN_SPREAD_SIZE:
        runs.append(tuple(current))
    return runs


def find_possible_spreads(hand: Iterable[Card]) -> list[SpreadCandidate]:
    """Return every book and maximal run latent in ``hand``.

    Candidates may overlap; callers choose which one to lay, which consumes
    its cards.
    """

    by_rank: dict[Rank, list[Card]] = {}
    by_suit: dict[Suit, list[Card]] = {}
    for card in hand:
        by_rank.setdefault(card.rank, []).append(card)
        by_suit.setdefault(card.suit, []).append(card)

    candidates: list[SpreadCandidate] = []
    for rank_cards in by_rank.values():
        if len(rank_cards) >= MIN_SPREAD_SIZE:
            candidates.append(SpreadCandidate(SpreadKind.BOOK, tuple(rank_cards[:MAX_BOOK_SIZE])))
    for suit_cards in by_suit.values():
        for run in _consecutive_runs(suit_cards):
            candidates.append(SpreadCandidate(SpreadKind.RUN, run))
    return candidates
