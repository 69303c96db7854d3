"""Typed notifications published by :class:`tonk.game.Game`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Sequence, Union

from .cards import Card
from .rules import DrawSource, Phase, WinCondition

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .scoreboard import RoundSummary
    from .spreads import Spread
    from .state import Player

__all__ = [
    "GameInitialized",
    "RoundStarted",
    "AntesCollected",
    "CardsDealt",
    "InitialTonkDraw",
    "TurnStarted",
    "PhaseChanged",
    "CardDrawn",
    "SpreadLaid",
    "SpreadHit",
    "CardDiscarded",
    "KnockResolved",
    "TurnEnded",
    "RoundOver",
    "BetPlaced",
    "PotAwarded",
    "RoundScored",
    "MatchOver",
    "GameEvent",
    "Listener",
    "EventBus",
]


@dataclass(frozen=True, slots=True)
class GameInitialized:
    players: Sequence["Player"]


@dataclass(frozen=True, slots=True)
class RoundStarted:
    round_number: int


@dataclass(frozen=True, slots=True)
class AntesCollected:
    pot: int
    ante: int


@dataclass(frozen=True, slots=True)
class CardsDealt:
    cards_per_player: int
    first_discard: Card | None


@dataclass(frozen=True, slots=True)
class InitialTonkDraw:
    """Several seats were dealt an initial tonk; the deal is void."""

    players: Sequence["Player"]
    redeal_count: int


@dataclass(frozen=True, slots=True)
class TurnStarted:
    player: "Player"


@dataclass(frozen=True, slots=True)
class PhaseChanged:
    phase: Phase


@dataclass(frozen=True, slots=True)
class CardDrawn:
    player: "Player"
    source: DrawSource
    card: Card


@dataclass(frozen=True, slots=True)
class SpreadLaid:
    player: "Player"
    spread: "Spread"


@dataclass(frozen=True, slots=True)
class SpreadHit:
    player: "Player"
    card: Card
    spread: "Spread"


@dataclass(frozen=True, slots=True)
class CardDiscarded:
    player: "Player"
    card: Card


@dataclass(frozen=True, slots=True)
class KnockResolved:
    knocker: "Player"
    winner: "Player"
    condition: WinCondition


@dataclass(frozen=True, slots=True)
class TurnEnded:
    player: "Player"
    next_player: "Player"


@dataclass(frozen=True, slots=True)
class RoundOver:
    winner: "Player"
    condition: WinCondition
    knocker: "Player | None" = None


@dataclass(frozen=True, slots=True)
class BetPlaced:
    player: "Player"
    amount: int
    pot: int


@dataclass(frozen=True, slots=True)
class PotAwarded:
    winner: "Player"
    amount: int


@dataclass(frozen=True, slots=True)
class RoundScored:
    summary: "RoundSummary"


@dataclass(frozen=True, slots=True)
class MatchOver:
    winner: "Player"
    scores: dict[str, int]


GameEvent = Union[
    GameInitialized,
    RoundStarted,
    AntesCollected,
    CardsDealt,
    InitialTonkDraw,
    TurnStarted,
    PhaseChanged,
    CardDrawn,
    SpreadLaid,
    SpreadHit,
    CardDiscarded,
    KnockResolved,
    TurnEnded,
    RoundOver,
    BetPlaced,
    PotAwarded,
    RoundScored,
    MatchOver,
]

Listener = Callable[[GameEvent], None]


class EventBus:
    """Synchronous publish/subscribe hub.

    Listeners run in registration order on the publishing call stack.
    """

    def __init__(self) -> None:
        self._listeners: list[tuple[Listener, frozenset[type] | None]] = []

    def subscribe(self, listener: Listener, *kinds: type) -> Listener:
        """Register ``listener`` for ``kinds`` (every event when none are given)."""

        self._listeners.append((listener, frozenset(kinds) if kinds else None))
        return listener

    def unsubscribe(self, listener: Listener) -> None:
        self._listeners = [entry for entry in self._listeners if entry[0] is not listener]

    def publish(self, event: GameEvent) -> None:
        for listener, kinds in list(self._listeners):
            if kinds is None or type(event) in kinds:
                listener(event)

    def __len__(self) -> int:
        return len(self._listeners)
