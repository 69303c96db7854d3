"""Configuration and per-seat player state for Tonk."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final, Iterable, List

from . import rules
from .cards import Card, sort_by_suit
from .spreads import Spread, SpreadCandidate, find_possible_spreads, hand_points

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .policy import DecisionPolicy


@dataclass(frozen=True, slots=True)
class TonkConfig:
    """Runtime configuration for a Tonk match."""

    cards_per_player: int = rules.CARDS_PER_PLAYER
    initial_tonk_min: int = rules.INITIAL_TONK_MIN
    initial_tonk_max: int = rules.INITIAL_TONK_MAX
    match_point_limit: int = rules.MATCH_POINT_LIMIT
    min_players: int = rules.MIN_PLAYERS
    max_players: int = rules.MAX_PLAYERS
    # Redeals past this count are logged; they are never capped.
    redeal_warning_threshold: int = 10
    betting: rules.BettingRules = rules.DEFAULT_BETTING

    def validate_player_count(self, player_count: int) -> None:
        if not self.min_players <= player_count <= self.max_players:
            raise ValueError(
                f"player count must be between {self.min_players} and {self.max_players}"
            )


DEFAULT_CONFIG: Final[TonkConfig] = TonkConfig()


@dataclass(slots=True, eq=False)
class Player:
    """A seat at the table: hand, laid spreads and chip ledger.

    Computer seats carry a decision ``policy``; human seats leave it ``None``
    and receive their decisions from the front-end.
    """

    name: str
    player_id: str
    policy: "DecisionPolicy | None" = None
    hand: List[Card] = field(default_factory=list)
    spreads: List[Spread] = field(default_factory=list)
    chips: int = rules.DEFAULT_BETTING.starting_chips
    current_bet: int = 0
    is_eliminated: bool = False

    @property
    def is_human(self) -> bool:
        return self.policy is None

    @property
    def points(self) -> int:
        return hand_points(self.hand)

    @property
    def card_count(self) -> int:
        return len(self.hand)

    def has_empty_hand(self) -> bool:
        return not self.hand

    def has_card(self, card: Card) -> bool:
        return card in self.hand

    def add_card(self, card: Card) -> None:
        self.hand.append(card)

    def add_cards(self, cards: Iterable[Card]) -> None:
        self.hand.extend(cards)

    def remove_card(self, card: Card) -> Card | None:
        """Remove the first card equal to ``card``; ``None`` if it is not held."""

        for idx, held in enumerate(self.hand):
            if held == card:
                return self.hand.pop(idx)
        return None

    def remove_cards(self, cards: Iterable[Card]) -> list[Card]:
        """Remove each card that is present and return the ones removed."""

        removed: list[Card] = []
        for card in cards:
            taken = self.remove_card(card)
            if taken is not None:
                removed.append(taken)
        return removed

    def reorder_card(self, from_index: int, to_index: int) -> None:
        """Move a card within the hand. Display order only; rules ignore it."""

        if not 0 <= from_index < len(self.hand):
            raise IndexError("from_index out of range")
        card = self.hand.pop(from_index)
        to_index = max(0, min(to_index, len(self.hand)))
        self.hand.insert(to_index, card)

    def cards_by_value(self) -> list[Card]:
        return sorted(self.hand, key=lambda c: c.value, reverse=True)

    def cards_by_suit(self) -> list[Card]:
        return sort_by_suit(self.hand)

    def find_possible_spreads(self) -> list[SpreadCandidate]:
        return find_possible_spreads(self.hand)

    def add_spread(self, spread: Spread) -> None:
        self.spreads.append(spread)

    def reset(self) -> None:
        """Clear hand and spreads for a new deal; chips are kept."""

        self.hand = []
        self.spreads = []

    # Chip ledger

    def bet(self, amount: int) -> int:
        """Deduct up to ``amount`` chips (all-in when short); return the deduction."""

        actual = max(0, min(amount, self.chips))
        self.chips -= actual
        self.current_bet += actual
        return actual

    def receive_chips(self, amount: int) -> None:
        self.chips += amount

    def reset_bet(self) -> None:
        self.current_bet = 0

    def can_afford(self, amount: int) -> bool:
        return not self.is_eliminated and self.chips >= amount
