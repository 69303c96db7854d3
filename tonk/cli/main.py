"""Typer entry-point wiring for the Tonk CLI."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Sequence

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from .. import actions, events, scoreboard, simulation
from ..cards import Card, parse_cards
from ..game import Game
from ..rules import IllegalMove, Phase, WinCondition
from .render import format_card, format_hand, render_state

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, rich_markup_mode="rich")
console = Console()

MAX_EVENT_LOG = 12

_CONDITION_LABELS = {
    WinCondition.TONK: "Tonk",
    WinCondition.INITIAL_TONK: "Initial tonk",
    WinCondition.KNOCK: "Knock",
    WinCondition.CAUGHT: "Caught knocking",
    WinCondition.STOCK_EMPTY: "Stock empty",
}


@dataclass(slots=True)
class MenuEntry:
    """One option offered to the human seat."""

    key: str
    label: str


def _append_event(log: list[str], message: str) -> None:
    """Append ``message`` to ``log`` maintaining a bounded log length."""

    log.append(message)
    excess = len(log) - MAX_EVENT_LOG
    if excess > 0:
        del log[:excess]


def _configure_logging(level: str) -> None:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise typer.BadParameter(f"Unknown log level: {level}")
    logging.basicConfig(
        level=numeric,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def describe_event(event: events.GameEvent) -> str | None:
    """Return a log line for ``event`` or ``None`` when it is not worth showing."""

    if isinstance(event, events.RoundStarted):
        return f"[bold]Round {event.round_number}[/bold] begins"
    if isinstance(event, events.CardsDealt):
        if event.first_discard is None:
            return f"Dealt {event.cards_per_player} cards each"
        return f"Dealt {event.cards_per_player} cards each, {format_card(event.first_discard)} turned up"
    if isinstance(event, events.InitialTonkDraw):
        names = ", ".join(player.name for player in event.players)
        return f"[yellow]Initial tonk tie ({names}), redealing[/yellow]"
    if isinstance(event, events.CardDrawn):
        if event.player.is_human:
            return f"You drew {format_card(event.card)}"
        if event.source.value == "discard":
            return f"{event.player.name} took {format_card(event.card)} from the discard pile"
        return f"{event.player.name} drew from the deck"
    if isinstance(event, events.SpreadLaid):
        return f"{event.player.name} laid {event.spread.description()}"
    if isinstance(event, events.SpreadHit):
        return f"{event.player.name} hit {event.spread.description()} with {format_card(event.card)}"
    if isinstance(event, events.CardDiscarded):
        return f"{event.player.name} discarded {format_card(event.card)}"
    if isinstance(event, events.KnockResolved):
        return f"[cyan]{event.knocker.name} knocked[/cyan]"
    if isinstance(event, events.BetPlaced):
        return f"{event.player.name} raised {event.amount} (pot {event.pot})"
    if isinstance(event, events.RoundOver):
        label = _CONDITION_LABELS[event.condition]
        return f"[bold green]{event.winner.name} wins the round[/bold green] ({label})"
    if isinstance(event, events.PotAwarded):
        return f"{event.winner.name} collects {event.amount} chips"
    return None


def _event_panel(log: Sequence[str]) -> Panel:
    log_table = Table.grid(expand=True)
    log_table.add_column(justify="left")
    if log:
        for line in log[-MAX_EVENT_LOG:]:
            log_table.add_row(line)
    else:
        log_table.add_row("[dim]Event log will appear here[/dim]")
    return Panel(log_table, title="Event Log", border_style="magenta", box=box.SIMPLE)


def menu_entries(game: Game) -> list[MenuEntry]:
    """Return the options available to the current seat in the current phase."""

    player = game.current_player
    entries: list[MenuEntry] = []
    if game.phase is Phase.START_OF_TURN:
        entries.append(MenuEntry("draw", "Draw"))
        entries.append(MenuEntry("knock", "Knock"))
    elif game.phase is Phase.DRAW:
        entries.append(MenuEntry("deck", f"Draw from deck ({game.get_deck_count()} left)"))
        top = game.get_top_discard()
        if top is not None:
            entries.append(MenuEntry("discard-pile", f"Take discard ({format_card(top)})"))
        return entries

    if game.phase in (Phase.START_OF_TURN, Phase.ACTION):
        if player.find_possible_spreads():
            entries.append(MenuEntry("spread", "Lay a spread"))
        if any(spread.can_add_card(card) for spread in game.spreads_on_table for card in player.hand):
            entries.append(MenuEntry("hit", "Hit a spread"))
    if game.phase is Phase.ACTION:
        if not player.is_eliminated and any(
            player.can_afford(amount) for amount in game.config.betting.raise_options
        ):
            entries.append(MenuEntry("raise", "Raise"))
        entries.append(MenuEntry("discard", "Discard"))
    return entries


def _choose_card(player_hand: Sequence[Card], prompt: str) -> Card:
    console.print(format_hand(player_hand, numbered=True))
    choice = IntPrompt.ask(prompt, choices=[str(i) for i in range(1, len(player_hand) + 1)])
    return player_hand[choice - 1]


def _human_spread(game: Game) -> None:
    player = game.current_player
    candidates = player.find_possible_spreads()
    for idx, candidate in enumerate(candidates, start=1):
        cards = " ".join(format_card(card) for card in candidate.cards)
        console.print(f"[bold]{idx}[/bold] {candidate.kind.value}: {cards}")
    console.print("[dim]Pick a number, or type card codes such as 7S 7H 7D[/dim]")
    answer = Prompt.ask("Spread").strip()
    if answer.isdigit() and 1 <= int(answer) <= len(candidates):
        cards = list(candidates[int(answer) - 1].cards)
    else:
        cards = parse_cards(answer.split())
    game.lay_spread(cards, seat=game.current_player_index)


def _human_hit(game: Game) -> None:
    player = game.current_player
    card = _choose_card(player.hand, "Card to add")
    targets = [spread for spread in game.spreads_on_table if spread.can_add_card(card)]
    if not targets:
        raise IllegalMove(f"{card.label()} does not fit any spread")
    for idx, spread in enumerate(targets, start=1):
        console.print(f"[bold]{idx}[/bold] {spread.description()}")
    choice = IntPrompt.ask("Spread", choices=[str(i) for i in range(1, len(targets) + 1)])
    game.hit_spread(card, targets[choice - 1], seat=game.current_player_index)


def _human_raise(game: Game) -> None:
    player = game.current_player
    options = [amount for amount in game.config.betting.raise_options if player.can_afford(amount)]
    amount = IntPrompt.ask("Raise by", choices=[str(amount) for amount in options])
    game.place_bet(amount, seat=game.current_player_index)


def _apply_choice(game: Game, key: str) -> None:
    seat = game.current_player_index
    if key == "draw":
        game.proceed_to_draw(seat=seat)
    elif key == "knock":
        game.knock(seat=seat)
    elif key == "deck":
        game.draw_from_deck(seat=seat)
    elif key == "discard-pile":
        game.draw_from_discard(seat=seat)
    elif key == "spread":
        _human_spread(game)
    elif key == "hit":
        _human_hit(game)
    elif key == "raise":
        _human_raise(game)
    elif key == "discard":
        game.discard(_choose_card(game.current_player.hand, "Card to discard"), seat=seat)
    else:  # pragma: no cover - menu keys are fixed
        raise ValueError(f"unknown menu option: {key}")


def _play_human_turn(game: Game, log: list[str]) -> None:
    seat = game.current_player_index
    while not game.is_game_over() and game.current_player_index == seat:
        console.print(render_state(game, reveal_players=[seat]))
        console.print(_event_panel(log))
        entries = menu_entries(game)
        for idx, entry in enumerate(entries, start=1):
            console.print(f"[bold]{idx}[/bold] {entry.label}")
        choice = IntPrompt.ask("Choose an option", choices=[str(i) for i in range(1, len(entries) + 1)])
        try:
            _apply_choice(game, entries[choice - 1].key)
        except (IllegalMove, ValueError) as exc:
            console.print(f"[red]{exc}[/red]")


def _play_ai_turn(game: Game, delay: float) -> None:
    player = game.current_player
    for step in actions.iter_turn(game):
        logger.debug("%s %s", player.name, step.describe())
        if delay > 0:
            time.sleep(delay)


def _render_round_summary(game: Game, summary: scoreboard.RoundSummary) -> Table:
    """Return a Rich table describing the outcome of a round."""

    table = Table(
        title=f"Round {summary.round_number} Summary ({_CONDITION_LABELS[summary.condition]})",
        box=box.SIMPLE_HEAVY,
    )
    table.add_column("Player", justify="center")
    table.add_column("Role", justify="center")
    table.add_column("Result", justify="center")
    table.add_column("Hand", justify="right")
    table.add_column("Added", justify="right")
    table.add_column("Match", justify="right")
    table.add_column("Chips", justify="right")

    for player in game.players:
        won = player.player_id == summary.winner_id
        label = player.name
        result = "Loss"
        if won:
            label = f"[bold green]{label}[/bold green]"
            result = "[bold green]Win[/bold green]"
        elif player.player_id == summary.knocker_id:
            result = "Caught"
        table.add_row(
            label,
            "Human" if player.is_human else "AI",
            result,
            str(summary.hand_points[player.player_id]),
            str(summary.points_added.get(player.player_id, 0)),
            str(game.match_scores[player.player_id]),
            str(player.chips),
        )

    return table


def _render_match_summary(game: Game, history: scoreboard.MatchHistory) -> Table:
    """Return the aggregated match summary table."""

    table = Table(title="Match Summary", box=box.DOUBLE_EDGE)
    table.add_column("Player", justify="center")
    table.add_column("Wins", justify="right")
    table.add_column("Tonks", justify="right")
    table.add_column("Knocks", justify="right")
    table.add_column("Caught", justify="right")
    table.add_column("Points", justify="right")
    table.add_column("Chips won", justify="right")

    for total in history.totals():
        player = game.player_by_id(total.player_id)
        label = player.name
        points = str(total.points)
        if player is game.match_winner:
            label = f"[bold blue]{label}[/bold blue]"
            points = f"[bold blue]{points}[/bold blue]"
        table.add_row(
            label,
            str(total.wins),
            str(total.tonks),
            str(total.knocks),
            str(total.caught),
            points,
            str(total.chips_won),
        )

    return table


@app.command()
def play(
    players: int = typer.Option(2, min=2, max=4, help="Number of seated players."),
    humans: int = typer.Option(1, min=0, max=1, help="Human-controlled seats (0 watches the computer play)."),
    name: str = typer.Option("You", help="Name shown for the human seat."),
    seed: int | None = typer.Option(None, help="Random seed for reproducible games (omit for randomness)."),
    delay: float = typer.Option(0.6, min=0.0, help="Pause in seconds between computer actions."),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level for engine diagnostics."),
) -> None:
    """Play a match against computer opponents."""

    _configure_logging(log_level)
    if not name.strip():
        raise typer.BadParameter("Name cannot be empty.")

    game = Game(rng=random.Random(seed))
    log: list[str] = []

    def record(event: events.GameEvent) -> None:
        message = describe_event(event)
        if message is not None:
            _append_event(log, message)

    game.on(record)
    try:
        game.initialize(players, name.strip(), humans=humans)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    while True:
        while not game.is_game_over():
            if game.is_human_turn():
                _play_human_turn(game, log)
            else:
                _play_ai_turn(game, delay)

        summary = game.settle_round()
        console.print(render_state(game, title=f"Round {summary.round_number}"))
        console.print(_event_panel(log))
        console.print(_render_round_summary(game, summary))

        if game.is_match_over():
            assert game.match_winner is not None and game.history is not None
            console.print(_render_match_summary(game, game.history))
            console.print(f"[bold green]{game.match_winner.name} wins the match![/bold green]")
            return
        if humans and not Confirm.ask("Play the next round?", default=True):
            console.print("[cyan]Match abandoned.[/cyan]")
            return
        game.start_next_round()


@app.command()
def simulate(
    matches: int = typer.Option(10, min=1, help="Number of full matches to play."),
    players: int = typer.Option(2, min=2, max=4, help="Number of computer seats."),
    seed: int = typer.Option(123, help="Random seed for the simulation."),
    turn_limit: int = typer.Option(
        simulation.DEFAULT_TURN_LIMIT, min=1, help="Turns allowed per round before a match is abandoned."
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level for engine diagnostics."),
) -> None:
    """Play computer-only matches and report the results."""

    _configure_logging(log_level)
    try:
        report = simulation.run_matches(matches, players, seed=seed, turn_limit=turn_limit)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    table = Table(title="Simulation", box=box.SIMPLE_HEAVY)
    table.add_column("Seat", justify="center")
    table.add_column("Match wins", justify="right")
    table.add_column("Rounds won", justify="right")
    table.add_column("Win rate", justify="right")
    table.add_column("Tonks", justify="right")
    table.add_column("Knocks", justify="right")
    table.add_column("Caught", justify="right")
    table.add_column("Chips", justify="right")

    for seat in report.seats:
        stats = seat.statistics
        table.add_row(
            f"P{seat.seat}",
            str(seat.match_wins),
            str(stats.games_won),
            f"{stats.win_rate:.1%}",
            str(stats.tonks),
            str(stats.knocks),
            str(stats.caught_knocking),
            str(seat.chips),
        )

    console.print(table)

    conditions = ", ".join(
        f"{_CONDITION_LABELS[condition]}: {count}" for condition, count in report.conditions.items() if count
    )
    console.print(f"[cyan]{report.rounds_played} round(s) played.[/cyan] {conditions}")
    if report.stalled_matches:
        console.print(f"[yellow]{report.stalled_matches} match(es) abandoned at the turn limit.[/yellow]")


def main() -> None:
    """Entry-point for ``python -m tonk.cli``."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    main()
