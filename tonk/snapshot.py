"""Lossless JSON-friendly snapshots of a :class:`~tonk.game.Game`."""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from .cards import Card, parse_card
from .deck import Deck
from .game import Game
from .policy import HeuristicPolicy
from .rules import BettingRules, Phase, WinCondition
from .scoreboard import MatchHistory, RoundSummary
from .spreads import Spread, SpreadKind
from .state import Player, TonkConfig

__all__ = ["SNAPSHOT_VERSION", "game_to_dict", "game_from_dict", "dumps", "loads"]

SNAPSHOT_VERSION = 1


def _codes(cards: Iterable[Card]) -> list[str]:
    return [card.code for card in cards]


def _cards(codes: Iterable[str]) -> list[Card]:
    return [parse_card(code) for code in codes]


def _player_id(player: Player | None) -> str | None:
    return player.player_id if player is not None else None


def _config_to_dict(config: TonkConfig) -> dict[str, Any]:
    return {
        "cards_per_player": config.cards_per_player,
        "initial_tonk_min": config.initial_tonk_min,
        "initial_tonk_max": config.initial_tonk_max,
        "match_point_limit": config.match_point_limit,
        "min_players": config.min_players,
        "max_players": config.max_players,
        "redeal_warning_threshold": config.redeal_warning_threshold,
        "betting": {
            "starting_chips": config.betting.starting_chips,
            "ante": config.betting.ante,
            "raise_options": list(config.betting.raise_options),
        },
    }


def _config_from_dict(data: Mapping[str, Any]) -> TonkConfig:
    betting = data.get("betting", {})
    fields = {key: value for key, value in data.items() if key != "betting"}
    unknown = set(fields) - set(TonkConfig.__dataclass_fields__)
    if unknown:
        raise ValueError(f"unknown config keys in snapshot: {sorted(unknown)}")
    return TonkConfig(
        **fields,
        betting=BettingRules(
            starting_chips=betting.get("starting_chips", 1000),
            ante=betting.get("ante", 10),
            raise_options=tuple(betting.get("raise_options", (10, 25, 50, 100))),
        ),
    )


def _summary_to_dict(summary: RoundSummary) -> dict[str, Any]:
    return {
        "round_number": summary.round_number,
        "winner_id": summary.winner_id,
        "condition": summary.condition.value,
        "hand_points": dict(summary.hand_points),
        "points_added": dict(summary.points_added),
        "pot": summary.pot,
        "knocker_id": summary.knocker_id,
    }


def _summary_from_dict(data: Mapping[str, Any]) -> RoundSummary:
    return RoundSummary(
        round_number=data["round_number"],
        winner_id=data["winner_id"],
        condition=WinCondition(data["condition"]),
        hand_points=dict(data["hand_points"]),
        points_added=dict(data["points_added"]),
        pot=data["pot"],
        knocker_id=data.get("knocker_id"),
    )


def game_to_dict(game: Game) -> dict[str, Any]:
    """Capture every piece of round and match state, preserving all orders."""

    deck = None
    if game.deck is not None:
        deck = {"cards": _codes(game.deck.cards), "discard_pile": _codes(game.deck.discard_pile)}

    players = []
    for player in game.players:
        policy = player.policy
        players.append(
            {
                "id": player.player_id,
                "name": player.name,
                "ai": policy is not None,
                "difficulty": getattr(policy, "difficulty", None),
                "hand": _codes(player.hand),
                "spreads": [spread.spread_id for spread in player.spreads],
                "chips": player.chips,
                "current_bet": player.current_bet,
                "is_eliminated": player.is_eliminated,
            }
        )

    spreads = [
        {
            "id": spread.spread_id,
            "kind": spread.kind.value,
            "owner": spread.owner_id,
            "cards": _codes(spread.cards),
        }
        for spread in game.spreads_on_table
    ]

    return {
        "version": SNAPSHOT_VERSION,
        "config": _config_to_dict(game.config),
        "phase": game.phase.value,
        "current_player_index": game.current_player_index,
        "round_number": game.round_number,
        "pot": game.pot,
        "highest_bet": game.highest_bet,
        "winner": _player_id(game.winner),
        "win_condition": game.win_condition.value if game.win_condition is not None else None,
        "knocker": _player_id(game.knocker),
        "match_winner": _player_id(game.match_winner),
        "match_scores": dict(game.match_scores),
        "has_drawn_this_turn": game.has_drawn_this_turn,
        "round_settled": game.round_settled,
        "redeal_count": game.redeal_count,
        "next_spread_number": game.next_spread_number,
        "deck": deck,
        "players": players,
        "spreads": spreads,
        "history": [_summary_to_dict(s) for s in game.history.rounds] if game.history is not None else [],
    }


def game_from_dict(data: Mapping[str, Any], rng: Any | None = None) -> Game:
    """Rebuild a game from :func:`game_to_dict` output.

    The random source is not part of a snapshot; pass ``rng`` to continue
    with a specific one.
    """

    version = data.get("version")
    if version != SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {version!r}")

    game = Game(rng=rng, config=_config_from_dict(data.get("config", {})))

    try:
        spreads_by_id: dict[str, Spread] = {}
        for entry in data["spreads"]:
            spread = Spread(
                cards=_cards(entry["cards"]),
                kind=SpreadKind(entry["kind"]),
                owner_id=entry["owner"],
                spread_id=entry["id"],
            )
            spreads_by_id[spread.spread_id] = spread
        game.spreads_on_table = list(spreads_by_id.values())

        for entry in data["players"]:
            policy = HeuristicPolicy(difficulty=entry.get("difficulty") or "medium") if entry["ai"] else None
            game.players.append(
                Player(
                    name=entry["name"],
                    player_id=entry["id"],
                    policy=policy,
                    hand=_cards(entry["hand"]),
                    spreads=[spreads_by_id[sid] for sid in entry["spreads"]],
                    chips=entry["chips"],
                    current_bet=entry["current_bet"],
                    is_eliminated=entry["is_eliminated"],
                )
            )

        deck = data.get("deck")
        if deck is not None:
            game.deck = Deck(game.rng, cards=_cards(deck["cards"]), discard_pile=_cards(deck["discard_pile"]))

        def lookup(player_id: str | None) -> Player | None:
            return game.player_by_id(player_id) if player_id is not None else None

        game.phase = Phase(data["phase"])
        game.current_player_index = data["current_player_index"]
        game.round_number = data["round_number"]
        game.pot = data["pot"]
        game.highest_bet = data["highest_bet"]
        game.winner = lookup(data.get("winner"))
        condition = data.get("win_condition")
        game.win_condition = WinCondition(condition) if condition is not None else None
        game.knocker = lookup(data.get("knocker"))
        game.match_winner = lookup(data.get("match_winner"))
        game.match_scores = dict(data["match_scores"])
        game.has_drawn_this_turn = data.get("has_drawn_this_turn", False)
        game.round_settled = data.get("round_settled", False)
        game.redeal_count = data.get("redeal_count", 0)
        game.next_spread_number = data.get("next_spread_number", len(spreads_by_id) + 1)
    except KeyError as exc:
        raise ValueError(f"snapshot is missing or references unknown entry {exc}") from exc

    if game.players:
        game.history = MatchHistory([player.player_id for player in game.players])
        for summary in data.get("history", []):
            game.history.record(_summary_from_dict(summary))
    return game


def dumps(game: Game, **kwargs: Any) -> str:
    return json.dumps(game_to_dict(game), **kwargs)


def loads(text: str, rng: Any | None = None) -> Game:
    return game_from_dict(json.loads(text), rng=rng)
