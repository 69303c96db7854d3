"""Helpers for tracking multi-round Tonk match results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping, Sequence

from .rules import WinCondition

__all__ = ["RoundSummary", "PlayerMatchTotal", "MatchHistory", "PlayerStatistics"]


@dataclass(frozen=True, slots=True)
class RoundSummary:
    """Summary captured after a single round has been settled."""

    round_number: int
    winner_id: str
    condition: WinCondition
    hand_points: Mapping[str, int]
    points_added: Mapping[str, int]
    pot: int
    knocker_id: str | None = None


@dataclass(frozen=True, slots=True)
class PlayerMatchTotal:
    """Aggregate match totals accumulated across all recorded rounds."""

    player_id: str
    wins: int
    points: int
    tonks: int
    knocks: int
    caught: int
    chips_won: int


@dataclass(slots=True)
class MatchHistory:
    """Mutable tracker that accumulates round summaries for a match."""

    player_ids: Sequence[str]
    rounds: list[RoundSummary] = field(default_factory=list)
    _totals: dict[str, dict[str, int]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.player_ids:
            raise ValueError("player_ids must not be empty")
        self.player_ids = tuple(self.player_ids)
        self._totals = {
            pid: {"wins": 0, "points": 0, "tonks": 0, "knocks": 0, "caught": 0, "chips_won": 0}
            for pid in self.player_ids
        }

    def record(self, summary: RoundSummary) -> None:
        """Record ``summary`` and update cumulative totals."""

        if summary.winner_id not in self._totals:
            raise ValueError("winner is not part of this match")
        unknown = set(summary.points_added) - set(self._totals)
        if unknown:
            raise ValueError(f"unknown player ids in summary: {sorted(unknown)}")
        self.rounds.append(summary)

        winner = self._totals[summary.winner_id]
        winner["wins"] += 1
        winner["chips_won"] += summary.pot
        if summary.condition in (WinCondition.TONK, WinCondition.INITIAL_TONK):
            winner["tonks"] += 1
        elif summary.condition is WinCondition.KNOCK:
            winner["knocks"] += 1
        elif summary.condition is WinCondition.CAUGHT and summary.knocker_id is not None:
            self._totals[summary.knocker_id]["caught"] += 1

        for pid, points in summary.points_added.items():
            self._totals[pid]["points"] += points

    def totals(self) -> list[PlayerMatchTotal]:
        """Return the cumulative totals for each player in seating order."""

        return [PlayerMatchTotal(player_id=pid, **self._totals[pid]) for pid in self.player_ids]


@dataclass(slots=True)
class PlayerStatistics:
    """Lifetime record for one player across many rounds."""

    games_played: int = 0
    games_won: int = 0
    games_lost: int = 0
    tonks: int = 0
    knocks: int = 0
    caught_knocking: int = 0
    total_points_won: int = 0
    lowest_winning_hand: int | None = None
    longest_win_streak: int = 0
    current_win_streak: int = 0

    def record(self, won: bool, condition: WinCondition, points: int, *, knocked: bool = False) -> None:
        """Fold one finished round into the record.

        ``points`` is the player's hand total when the round ended and
        ``knocked`` tells whether this player was the one who knocked.
        """

        self.games_played += 1
        if won:
            self.games_won += 1
            self.current_win_streak += 1
            self.longest_win_streak = max(self.longest_win_streak, self.current_win_streak)
            self.total_points_won += points
            if self.lowest_winning_hand is None or points < self.lowest_winning_hand:
                self.lowest_winning_hand = points
            if condition in (WinCondition.TONK, WinCondition.INITIAL_TONK):
                self.tonks += 1
            elif condition is WinCondition.KNOCK:
                self.knocks += 1
            return

        self.games_lost += 1
        self.current_win_streak = 0
        if condition is WinCondition.CAUGHT and knocked:
            self.caught_knocking += 1

    @property
    def win_rate(self) -> float:
        if not self.games_played:
            return 0.0
        return self.games_won / self.games_played

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PlayerStatistics":
        known = {name for name in cls.__dataclass_fields__}
        return cls(**{key: value for key, value in data.items() if key in known})
