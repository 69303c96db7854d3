from __future__ import annotations

import pytest
from typer.testing import CliRunner

from tonk import events
from tonk.cards import parse_card
from tonk.cli import main as cli_main
from tonk.cli.main import MAX_EVENT_LOG, _append_event, app, describe_event, menu_entries
from tonk.game import Game
from tonk.rules import DrawSource, WinCondition

runner = CliRunner()


def test_menu_follows_the_turn(ordered_game: Game) -> None:
    assert [entry.key for entry in menu_entries(ordered_game)] == ["draw", "knock"]

    ordered_game.proceed_to_draw()
    assert [entry.key for entry in menu_entries(ordered_game)] == ["deck", "discard-pile"]

    ordered_game.draw_from_discard()
    assert [entry.key for entry in menu_entries(ordered_game)] == ["raise", "discard"]


def test_menu_offers_spreads_when_available(ordered_game: Game) -> None:
    ordered_game.players[0].hand = [parse_card(code) for code in ("7H", "7D", "7C", "KS")]
    assert "spread" in [entry.key for entry in menu_entries(ordered_game)]


def test_event_log_is_bounded() -> None:
    log: list[str] = []
    for idx in range(MAX_EVENT_LOG + 5):
        _append_event(log, str(idx))
    assert len(log) == MAX_EVENT_LOG
    assert log[0] == "5"


def test_describe_event_hides_computer_draws(ordered_game: Game) -> None:
    computer = ordered_game.players[1]
    drawn = events.CardDrawn(player=computer, source=DrawSource.DECK, card=parse_card("9C"))
    assert "9" not in describe_event(drawn)
    over = events.RoundOver(winner=computer, condition=WinCondition.STOCK_EMPTY)
    assert "Stock empty" in describe_event(over)
    assert describe_event(events.PhaseChanged(phase=ordered_game.phase)) is None


def test_simulate_command_prints_report() -> None:
    result = runner.invoke(app, ["simulate", "--matches", "2", "--seed", "3"])
    assert result.exit_code == 0, result.output
    assert "Simulation" in result.output
    assert "round(s) played" in result.output


def test_play_command_runs_computer_only_match() -> None:
    result = runner.invoke(app, ["play", "--humans", "0", "--delay", "0", "--seed", "4", "--players", "3"])
    assert result.exit_code == 0, result.output
    assert "wins the match" in result.output


def test_unknown_log_level_is_rejected() -> None:
    result = runner.invoke(app, ["simulate", "--matches", "1", "--log-level", "chatty"])
    assert result.exit_code != 0


def test_play_pauses_between_computer_actions(monkeypatch: pytest.MonkeyPatch) -> None:
    pauses: list[float] = []
    monkeypatch.setattr(cli_main.time, "sleep", pauses.append)

    result = runner.invoke(app, ["play", "--humans", "0", "--delay", "0.25", "--seed", "2"])

    assert result.exit_code == 0, result.output
    assert pauses
    assert set(pauses) == {0.25}


def test_simulate_reports_configuration_errors_as_bad_parameters(monkeypatch: pytest.MonkeyPatch) -> None:
    def reject(*args: object, **kwargs: object) -> None:
        raise ValueError("player count must be between 2 and 4")

    monkeypatch.setattr(cli_main.simulation, "run_matches", reject)

    result = runner.invoke(app, ["simulate", "--matches", "1"])

    assert result.exit_code == 2
    assert "player count" in result.output


def test_play_reports_configuration_errors_as_bad_parameters(monkeypatch: pytest.MonkeyPatch) -> None:
    def reject(self: Game, *args: object, **kwargs: object) -> None:
        raise ValueError("humans must be between 0 and the number of players")

    monkeypatch.setattr(cli_main.Game, "initialize", reject)

    result = runner.invoke(app, ["play", "--humans", "0", "--delay", "0"])

    assert result.exit_code == 2
    assert "humans must be" in result.output
