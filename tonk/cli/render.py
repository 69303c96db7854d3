"""Rendering helpers dedicated to the CLI experience."""

from __future__ import annotations

from typing import Iterable, Sequence

from rich.console import RenderableType
from rich.panel import Panel

from ..cards import Card, Suit
from ..game import Game
from .views import StateSummaryView

_SUIT_COLORS = {
    Suit.SPADES: "cyan",
    Suit.HEARTS: "red",
    Suit.DIAMONDS: "magenta",
    Suit.CLUBS: "green",
}


def format_card(card: Card) -> str:
    """Return a Rich-rendered label for ``card``."""

    color = _SUIT_COLORS.get(card.suit, "white")
    return f"[{color}]{card.label()}[/{color}]"


def format_hand(cards: Sequence[Card], *, numbered: bool = False) -> str:
    if not cards:
        return "—"
    if numbered:
        return " ".join(f"[dim]{idx}:[/dim]{format_card(card)}" for idx, card in enumerate(cards, start=1))
    return " ".join(format_card(card) for card in cards)


def render_state(
    game: Game,
    *,
    reveal_players: Iterable[int] | None = None,
    title: str = "Tonk",
) -> RenderableType:
    """Return a Rich panel describing the current table state."""

    view = StateSummaryView(
        game=game,
        reveal_players=set(reveal_players or set()),
        card_formatter=format_card,
    )
    return Panel(view.render(), title=title, padding=(0, 1), border_style="cyan")
