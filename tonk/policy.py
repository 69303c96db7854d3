"""Rule-based decision policy for computer-controlled seats."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence, runtime_checkable

from .cards import Card, Rank, Suit
from .rules import DrawSource
from .spreads import Spread, SpreadCandidate, SpreadKind, find_possible_spreads, hand_points

__all__ = ["DecisionPolicy", "HeuristicPolicy", "HitOpportunity"]


@dataclass(frozen=True, slots=True)
class HitOpportunity:
    """A hand card that can legally extend a spread on the table."""

    card: Card
    spread: Spread


@runtime_checkable
class DecisionPolicy(Protocol):
    """Decisions a computer seat needs to play a turn.

    Implementations only ever see their own hand plus public information:
    the top discard and the spreads on the table.
    """

    difficulty: str

    def decide_draw(self, hand: Sequence[Card], discard_top: Card | None) -> DrawSource:
        ...

    def find_spreads_to_lay(self, hand: Sequence[Card]) -> list[SpreadCandidate]:
        ...

    def find_hit_opportunities(
        self, hand: Sequence[Card], table_spreads: Sequence[Spread]
    ) -> list[HitOpportunity]:
        ...

    def decide_discard(self, hand: Sequence[Card]) -> Card:
        ...

    def should_knock(self, hand: Sequence[Card]) -> bool:
        ...


def _spread_priority(candidate: SpreadCandidate) -> tuple[int, int, int]:
    # Highest points first, runs before books, then lowest rank.
    kind_order = 0 if candidate.kind is SpreadKind.RUN else 1
    return (-candidate.points, kind_order, candidate.lowest_rank_index)


@dataclass(slots=True)
class HeuristicPolicy:
    """Light-weight greedy policy mirroring a casual human player."""

    difficulty: str = "medium"
    knock_threshold: int = 3
    cautious_knock_threshold: int = 5
    low_card_value: int = 3

    # Draw

    def decide_draw(self, hand: Sequence[Card], discard_top: Card | None) -> DrawSource:
        """Take the discard only when it builds toward a spread."""

        if discard_top is None:
            return DrawSource.DECK

        current = find_possible_spreads(hand)
        with_discard = find_possible_spreads([*hand, discard_top])
        if len(with_discard) > len(current):
            return DrawSource.DISCARD

        if self.helps_near_complete(hand, discard_top):
            return DrawSource.DISCARD

        if discard_top.value <= self.low_card_value and any(c.rank == discard_top.rank for c in hand):
            return DrawSource.DISCARD

        return DrawSource.DECK

    def helps_near_complete(self, hand: Sequence[Card], card: Card) -> bool:
        """Return ``True`` if ``card`` would sit in a near-complete book or run.

        A book needs two held cards of the same rank. A run needs two held
        cards of the same suit that, with ``card``, span at most three ranks;
        this catches both ends and the gap of an open run.
        """

        if sum(1 for c in hand if c.rank == card.rank) >= 2:
            return True

        same_suit = sorted(
            {c.rank_index for c in hand if c.suit == card.suit and c.rank_index != card.rank_index}
        )
        for i, low in enumerate(same_suit):
            for high in same_suit[i + 1 :]:
                ranks = (low, high, card.rank_index)
                if max(ranks) - min(ranks) <= 2:
                    return True
        return False

    # Spreads and hits

    def find_best_spread(self, hand: Sequence[Card]) -> SpreadCandidate | None:
        candidates = find_possible_spreads(hand)
        if not candidates:
            return None
        return min(candidates, key=_spread_priority)

    def find_spreads_to_lay(self, hand: Sequence[Card]) -> list[SpreadCandidate]:
        """Greedily pick the best spread, drop its cards, and repeat."""

        chosen: list[SpreadCandidate] = []
        remaining = list(hand)
        while True:
            best = self.find_best_spread(remaining)
            if best is None:
                return chosen
            chosen.append(best)
            for card in best.cards:
                remaining.remove(card)

    def find_hit_opportunities(
        self, hand: Sequence[Card], table_spreads: Sequence[Spread]
    ) -> list[HitOpportunity]:
        hits = [
            HitOpportunity(card=card, spread=spread)
            for spread in table_spreads
            for card in hand
            if spread.can_add_card(card)
        ]
        # Shed expensive cards first; sort is stable so table order breaks ties.
        hits.sort(key=lambda hit: hit.card.value, reverse=True)
        return hits

    # Discard and knock

    def protected_cards(self, hand: Sequence[Card]) -> set[Card]:
        """Cards that are part of a two-card book or run precursor."""

        protected: set[Card] = set()
        by_rank: dict[Rank, list[Card]] = {}
        by_suit: dict[Suit, list[Card]] = {}
        for card in hand:
            by_rank.setdefault(card.rank, []).append(card)
            by_suit.setdefault(card.suit, []).append(card)

        for cards in by_rank.values():
            if len(cards) >= 2:
                protected.update(cards)

        for cards in by_suit.values():
            ordered = sorted(cards, key=lambda c: c.rank_index)
            for lower, upper in zip(ordered, ordered[1:]):
                if upper.rank_index - lower.rank_index <= 2:
                    protected.add(lower)
                    protected.add(upper)
        return protected

    def decide_discard(self, hand: Sequence[Card]) -> Card:
        """Discard the highest unprotected card, or the highest card overall."""

        if not hand:
            raise ValueError("cannot choose a discard from an empty hand")
        protected = self.protected_cards(hand)
        loose = [card for card in hand if card not in protected]
        pool = loose or list(hand)
        return max(pool, key=lambda c: c.value)

    def should_knock(self, hand: Sequence[Card]) -> bool:
        points = hand_points(hand)
        if points <= self.knock_threshold:
            return True
        if points <= self.cautious_knock_threshold:
            return not find_possible_spreads(hand) or len(hand) <= 2
        return False
