"""Harness for playing all-computer Tonk matches."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from . import actions, scoreboard
from .game import Game
from .rules import WinCondition
from .state import TonkConfig

logger = logging.getLogger(__name__)

__all__ = ["SeatBreakdown", "SimulationReport", "run_matches"]

DEFAULT_TURN_LIMIT = 500


@dataclass(slots=True)
class SeatBreakdown:
    """Aggregate results for one seat across every simulated match."""

    seat: int
    match_wins: int = 0
    chips: int = 0
    statistics: scoreboard.PlayerStatistics = field(default_factory=scoreboard.PlayerStatistics)


@dataclass(slots=True)
class SimulationReport:
    """Summary of a batch of simulated matches."""

    matches: int
    seats: list[SeatBreakdown]
    rounds_played: int = 0
    stalled_matches: int = 0
    conditions: dict[WinCondition, int] = field(default_factory=lambda: {c: 0 for c in WinCondition})


def _play_round(game: Game, turn_limit: int) -> bool:
    """Play turns until the round ends; ``False`` if the turn limit hit first."""

    for _ in range(turn_limit):
        if game.is_game_over():
            return True
        actions.execute_turn(game)
    return game.is_game_over()


def _play_match(game: Game, report: SimulationReport, turn_limit: int) -> bool:
    while True:
        if not _play_round(game, turn_limit):
            logger.warning(
                "round %d exceeded %d turns; abandoning match", game.round_number, turn_limit
            )
            return False

        summary = game.settle_round()
        report.rounds_played += 1
        report.conditions[summary.condition] += 1
        for seat, player in enumerate(game.players):
            report.seats[seat].statistics.record(
                player.player_id == summary.winner_id,
                summary.condition,
                summary.hand_points[player.player_id],
                knocked=player.player_id == summary.knocker_id,
            )

        if game.is_match_over():
            return True
        game.start_next_round()


def run_matches(
    matches: int,
    players: int = 2,
    *,
    seed: int = 123,
    config: TonkConfig | None = None,
    turn_limit: int = DEFAULT_TURN_LIMIT,
) -> SimulationReport:
    """Play ``matches`` full matches between computer seats."""

    if matches <= 0:
        raise ValueError("matches must be positive")

    rng = random.Random(seed)
    report = SimulationReport(matches=matches, seats=[SeatBreakdown(seat=s) for s in range(players)])

    for match_number in range(1, matches + 1):
        game = Game(rng=rng, config=config)
        game.initialize(players, humans=0)
        if not _play_match(game, report, turn_limit):
            report.stalled_matches += 1
            continue

        assert game.match_winner is not None
        report.seats[game.seat_of(game.match_winner)].match_wins += 1
        for seat, player in enumerate(game.players):
            report.seats[seat].chips += player.chips
        logger.debug("match %d won by seat %d", match_number, game.seat_of(game.match_winner))

    return report
