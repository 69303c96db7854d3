"""Composable view primitives for the Tonk CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Set

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table

from ..cards import Card
from ..game import Game
from ..rules import Phase


@dataclass(slots=True)
class StateSummaryView:
    """Renderable summarising the current table state."""

    game: Game
    reveal_players: Set[int]
    card_formatter: Callable[[Card], str]

    def _hand_markup(self, cards: list[Card], visible: bool) -> str:
        if not visible:
            return f"{len(cards)} cards"
        if not cards:
            return "—"
        return " ".join(self.card_formatter(card) for card in cards)

    def _metadata_panel(self) -> Panel:
        game = self.game
        grid = Table.grid(expand=True)
        grid.add_column(justify="left")
        grid.add_row(f"[cyan]Round[/cyan]: {game.round_number}")
        grid.add_row(f"[cyan]Phase[/cyan]: {game.phase.value}")
        grid.add_row(f"[cyan]Stock[/cyan]: {game.get_deck_count()} card(s)")
        top = game.get_top_discard()
        if top is not None:
            grid.add_row(f"[cyan]Discard[/cyan]: {self.card_formatter(top)}")
        else:
            grid.add_row("[cyan]Discard[/cyan]: —")
        grid.add_row(f"[cyan]Pot[/cyan]: {game.pot}")
        return Panel(grid, title="Table State", box=box.SQUARE, border_style="blue")

    def render(self) -> RenderableType:
        game = self.game
        table = Table(box=box.ROUNDED, expand=True)
        table.add_column("Player", justify="left", style="bold")
        table.add_column("Role", justify="left")
        table.add_column("Hand", justify="left")
        table.add_column("Points", justify="right")
        table.add_column("Match", justify="right")
        table.add_column("Chips", justify="right")

        game_over = game.phase is Phase.GAME_OVER
        for idx, player in enumerate(game.players):
            role = "Human" if player.is_human else "AI"
            visible = game_over or idx in self.reveal_players
            points = str(player.points) if visible else "?"
            name = player.name
            if game.winner is player:
                name = f"[bold green]{name}[/bold green]"
            elif idx == game.current_player_index and not game_over:
                name = f"[bold yellow]{name}[/bold yellow]"
            chips = "out" if player.is_eliminated else str(player.chips)
            table.add_row(
                name,
                role,
                self._hand_markup(player.hand, visible),
                points,
                str(game.match_scores.get(player.player_id, 0)),
                chips,
            )

        components: list[RenderableType] = [table, self._metadata_panel()]

        if game.spreads_on_table:
            spread_table = Table(box=box.MINIMAL, expand=True)
            spread_table.add_column("#", justify="left", style="bold")
            spread_table.add_column("Owner", justify="left")
            spread_table.add_column("Kind", justify="left")
            spread_table.add_column("Cards", justify="left")

            for idx, spread in enumerate(game.spreads_on_table, start=1):
                owner = game.player_by_id(spread.owner_id).name
                cards_display = " ".join(self.card_formatter(card) for card in spread.cards)
                spread_table.add_row(str(idx), owner, spread.kind.value.title(), cards_display)

            components.append(Panel(spread_table, title="Spreads", box=box.SQUARE, border_style="green"))

        return Group(*components)
