"""Rule utilities and constants for Tonk."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Final, Sequence

if TYPE_CHECKING:
    from .state import Player

__all__ = [
    "CARDS_PER_PLAYER",
    "INITIAL_TONK_MIN",
    "INITIAL_TONK_MAX",
    "MIN_SPREAD_SIZE",
    "MAX_BOOK_SIZE",
    "MIN_PLAYERS",
    "MAX_PLAYERS",
    "MATCH_POINT_LIMIT",
    "Phase",
    "WinCondition",
    "DrawSource",
    "BettingRules",
    "DEFAULT_BETTING",
    "IllegalMove",
    "IllegalPhase",
    "NotYourTurn",
    "InvalidSpread",
    "CardNotInHand",
    "IllegalBet",
    "KnockOutcome",
    "has_initial_tonk",
    "lowest_points_seat",
    "resolve_knock",
]

CARDS_PER_PLAYER: Final[int] = 5
INITIAL_TONK_MIN: Final[int] = 49
INITIAL_TONK_MAX: Final[int] = 50
MIN_SPREAD_SIZE: Final[int] = 3
MAX_BOOK_SIZE: Final[int] = 4
MIN_PLAYERS: Final[int] = 2
MAX_PLAYERS: Final[int] = 4
# First player to reach this cumulative score ends the match.
MATCH_POINT_LIMIT: Final[int] = 100


class Phase(str, Enum):
    """Turn and round phases driven by :class:`tonk.game.Game`."""

    PRE_GAME = "pre-game"
    INITIAL_TONK_CHECK = "initial-tonk-check"
    START_OF_TURN = "start-of-turn"
    DRAW = "draw"
    ACTION = "action"
    GAME_OVER = "game-over"


class WinCondition(str, Enum):
    """How a round was won."""

    TONK = "tonk"
    INITIAL_TONK = "initial-tonk"
    KNOCK = "knock"
    CAUGHT = "caught"
    STOCK_EMPTY = "stock-empty"


class DrawSource(str, Enum):
    DECK = "deck"
    DISCARD = "discard"


@dataclass(frozen=True, slots=True)
class BettingRules:
    """Chip amounts used by the ante/raise ledger."""

    starting_chips: int = 1000
    ante: int = 10
    raise_options: tuple[int, ...] = (10, 25, 50, 100)


DEFAULT_BETTING: Final[BettingRules] = BettingRules()


class IllegalMove(RuntimeError):
    """Raised when an operation is rejected; the game state is untouched."""


class IllegalPhase(IllegalMove):
    """Raised when an operation is attempted in the wrong phase."""


class NotYourTurn(IllegalMove):
    """Raised when a seat other than the current player tries to act."""


class InvalidSpread(IllegalMove):
    """Raised for cards that do not form a spread or cannot extend one."""


class CardNotInHand(IllegalMove):
    """Raised when the actor does not hold the card(s) it tries to use."""


class IllegalBet(IllegalMove):
    """Raised for bets from eliminated players or non-positive amounts."""


@dataclass(frozen=True, slots=True)
class KnockOutcome:
    """Result of comparing a knocker's hand with the rest of the table."""

    knocker_seat: int
    winner_seat: int
    condition: WinCondition
    knocker_points: int
    lowest_other_points: int


def has_initial_tonk(
    points: int,
    minimum: int = INITIAL_TONK_MIN,
    maximum: int = INITIAL_TONK_MAX,
) -> bool:
    """Return ``True`` when a freshly dealt hand wins outright."""

    return minimum <= points <= maximum


def lowest_points_seat(players: Sequence["Player"]) -> int:
    """Return the seat with the fewest hand points.

    Ties go to the first seat encountered in seating order.
    """

    if not players:
        raise ValueError("no players to compare")
    best_seat = 0
    best_points = players[0].points
    for seat, player in enumerate(players):
        if player.points < best_points:
            best_seat = seat
            best_points = player.points
    return best_seat


def resolve_knock(players: Sequence["Player"], knocker_seat: int) -> KnockOutcome:
    """Compare the knocker against the minimum of every other hand.

    The knocker wins only with strictly fewer points; a tie means the knocker
    is caught and the lowest other seat takes the round.
    """

    if len(players) < 2:
        raise ValueError("knocking requires at least two players")
    knocker_points = players[knocker_seat].points
    lowest_seat = -1
    lowest_points = 0
    for seat, player in enumerate(players):
        if seat == knocker_seat:
            continue
        if lowest_seat < 0 or player.points < lowest_points:
            lowest_seat = seat
            lowest_points = player.points

    if knocker_points < lowest_points:
        return KnockOutcome(knocker_seat, knocker_seat, WinCondition.KNOCK, knocker_points, lowest_points)
    return KnockOutcome(knocker_seat, lowest_seat, WinCondition.CAUGHT, knocker_points, lowest_points)
