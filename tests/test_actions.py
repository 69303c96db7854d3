from __future__ import annotations

import pytest

from tonk import actions
from tonk.actions import StepKind
from tonk.cards import parse_card, parse_cards
from tonk.game import Game
from tonk.rules import DrawSource, Phase, WinCondition


def test_computer_turn_draws_then_discards_loose_card(computer_game: Game) -> None:
    steps = actions.execute_turn(computer_game)

    assert [step.kind for step in steps] == [StepKind.DRAW, StepKind.DISCARD]
    assert steps[0].source is DrawSource.DECK
    assert steps[0].card == parse_card("2S")
    assert steps[1].card == parse_card("2S")
    assert computer_game.current_player_index == 1
    assert computer_game.phase is Phase.START_OF_TURN


def test_computer_turn_lays_available_spreads(computer_game: Game) -> None:
    computer_game.players[0].hand = parse_cards(["7H", "7D", "7C", "KS"])

    steps = actions.execute_turn(computer_game)

    assert [step.kind for step in steps] == [StepKind.DRAW, StepKind.SPREAD, StepKind.DISCARD]
    assert steps[1].spread is not None and steps[1].spread.description() == "7s"
    assert steps[2].card == parse_card("KS")
    assert computer_game.players[0].hand == [parse_card("2S")]


def test_computer_turn_hits_table_spreads(computer_game: Game) -> None:
    game = computer_game
    game.players[1].hand = parse_cards(["9H", "9D", "9C", "QD"])
    game.current_player_index = 1
    game.lay_spread(parse_cards(["9H", "9D", "9C"]), seat=1)
    game.current_player_index = 0
    game.players[0].hand = parse_cards(["9S", "KD", "QH", "JC"])

    steps = actions.execute_turn(game)

    assert [step.kind for step in steps] == [StepKind.DRAW, StepKind.HIT, StepKind.DISCARD]
    assert steps[1].card == parse_card("9S")
    assert len(game.spreads_on_table[0].cards) == 4


def test_computer_knocks_with_tiny_hand(computer_game: Game) -> None:
    computer_game.players[0].hand = parse_cards(["AS", "2H"])

    steps = actions.execute_turn(computer_game)

    assert [step.kind for step in steps] == [StepKind.KNOCK]
    assert computer_game.win_condition is WinCondition.KNOCK
    assert computer_game.winner is computer_game.players[0]


def test_turn_stops_when_spread_empties_hand(computer_game: Game) -> None:
    computer_game.players[0].hand = parse_cards(["AS", "3S", "4S"])
    computer_game.deck.discard_pile.clear()

    steps = actions.execute_turn(computer_game)

    assert steps[-1].kind is StepKind.SPREAD
    assert computer_game.win_condition is WinCondition.TONK


def test_iter_turn_yields_step_by_step(computer_game: Game) -> None:
    turn = actions.iter_turn(computer_game)
    first = next(turn)
    assert first.kind is StepKind.DRAW
    assert computer_game.phase is Phase.ACTION
    assert computer_game.current_player_index == 0
    rest = list(turn)
    assert [step.kind for step in rest] == [StepKind.DISCARD]
    assert first.describe() == "drew from deck"
    assert rest[0].describe() == "discarded 2♠"


def test_iter_turn_requires_computer_seat(ordered_game: Game) -> None:
    with pytest.raises(ValueError):
        actions.execute_turn(ordered_game)


def test_iter_turn_requires_start_of_turn(computer_game: Game) -> None:
    computer_game.proceed_to_draw()
    with pytest.raises(ValueError):
        actions.execute_turn(computer_game)
