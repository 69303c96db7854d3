from __future__ import annotations

import json
import random

import pytest

from tonk import actions, snapshot
from tonk.cards import parse_cards
from tonk.game import Game
from tonk.rules import Phase

from conftest import ordered_factory


def _mid_round_game() -> Game:
    game = Game(rng=random.Random(21), deck_factory=ordered_factory)
    game.initialize(3, humans=1)
    game.players[0].hand = parse_cards(["7H", "7D", "7C", "2S", "9D"])
    game.lay_spread(parse_cards(["7H", "7D", "7C"]), seat=0)
    game.proceed_to_draw(seat=0)
    game.draw_from_deck(seat=0)
    game.place_bet(25, seat=0)
    return game


def test_snapshot_captures_every_order() -> None:
    game = _mid_round_game()
    restored = snapshot.loads(snapshot.dumps(game))

    assert restored.phase is Phase.ACTION
    assert restored.current_player_index == 0
    assert restored.deck.cards == game.deck.cards
    assert restored.deck.discard_pile == game.deck.discard_pile
    assert [p.hand for p in restored.players] == [p.hand for p in game.players]
    assert [p.name for p in restored.players] == [p.name for p in game.players]
    assert [p.chips for p in restored.players] == [p.chips for p in game.players]
    assert restored.pot == game.pot
    assert [s.cards for s in restored.spreads_on_table] == [s.cards for s in game.spreads_on_table]
    assert restored.players[0].spreads[0] is restored.spreads_on_table[0]
    assert restored.players[0].is_human
    assert not restored.players[1].is_human
    assert snapshot.game_to_dict(restored) == snapshot.game_to_dict(game)


def test_restored_game_keeps_playing() -> None:
    game = _mid_round_game()
    restored = snapshot.loads(snapshot.dumps(game), rng=random.Random(1))
    restored.discard(restored.players[0].hand[0], seat=0)

    assert restored.current_player_index == 1
    assert restored.next_spread_number == 2
    actions.execute_turn(restored)
    assert restored.current_player_index == 2 or restored.is_game_over()


def test_snapshot_keeps_match_history() -> None:
    game = Game(rng=random.Random(8), deck_factory=ordered_factory)
    game.initialize(2, humans=0)
    game.knock()
    game.settle_round()

    restored = snapshot.game_from_dict(json.loads(snapshot.dumps(game)))
    assert restored.round_settled
    assert restored.history is not None
    assert len(restored.history.rounds) == 1
    assert restored.history.rounds[0] == game.history.rounds[0]
    assert restored.winner is restored.player_by_id(game.winner.player_id)


def test_unknown_version_is_rejected() -> None:
    data = snapshot.game_to_dict(_mid_round_game())
    data["version"] = 99
    with pytest.raises(ValueError):
        snapshot.game_from_dict(data)


def test_dangling_reference_is_rejected() -> None:
    data = snapshot.game_to_dict(_mid_round_game())
    data["players"][0]["spreads"] = ["spread-404"]
    with pytest.raises(ValueError):
        snapshot.game_from_dict(data)


def test_unknown_config_key_is_rejected() -> None:
    data = snapshot.game_to_dict(_mid_round_game())
    data["config"]["jokers_wild"] = True
    with pytest.raises(ValueError):
        snapshot.game_from_dict(data)
