"""Computer turn choreography built on the game's public operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator

from .cards import Card
from .rules import DrawSource, Phase
from .spreads import Spread

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .game import Game

__all__ = ["StepKind", "TurnStep", "iter_turn", "execute_turn"]


class StepKind(str, Enum):
    KNOCK = "knock"
    DRAW = "draw"
    SPREAD = "spread"
    HIT = "hit"
    DISCARD = "discard"


@dataclass(frozen=True, slots=True)
class TurnStep:
    """One action applied during a computer turn."""

    kind: StepKind
    card: Card | None = None
    cards: tuple[Card, ...] = ()
    spread: Spread | None = None
    source: DrawSource | None = None

    def describe(self) -> str:
        if self.kind is StepKind.KNOCK:
            return "knocked"
        if self.kind is StepKind.DRAW:
            source = self.source.value if self.source is not None else "deck"
            return f"drew from {source}"
        if self.kind is StepKind.SPREAD and self.spread is not None:
            return f"laid {self.spread.description()}"
        if self.kind is StepKind.HIT and self.card is not None and self.spread is not None:
            return f"hit {self.spread.description()} with {self.card.label()}"
        if self.kind is StepKind.DISCARD and self.card is not None:
            return f"discarded {self.card.label()}"
        return self.kind.value


def iter_turn(game: "Game") -> Iterator[TurnStep]:
    """Play the current computer seat's turn, yielding after every action.

    Order: knock check, draw, lay every spread available, hit every spread
    available, then discard one card. The turn stops as soon as the round
    ends. Each yield is a suspension point for hosts that want to pace the
    turn; pausing there has no effect on the game.
    """

    if game.phase is not Phase.START_OF_TURN:
        raise ValueError(f"computer turns start in {Phase.START_OF_TURN.value}, not {game.phase.value}")
    seat = game.current_player_index
    player = game.current_player
    policy = player.policy
    if policy is None:
        raise ValueError(f"{player.name} has no decision policy")

    if policy.should_knock(player.hand):
        game.knock(seat=seat)
        yield TurnStep(StepKind.KNOCK)
        return

    game.proceed_to_draw(seat=seat)
    discard_top = game.get_top_discard()
    source = policy.decide_draw(player.hand, discard_top)
    if source is DrawSource.DISCARD and discard_top is not None:
        card: Card | None = game.draw_from_discard(seat=seat)
    else:
        source = DrawSource.DECK
        card = game.draw_from_deck(seat=seat)
    yield TurnStep(StepKind.DRAW, card=card, source=source)
    if game.is_game_over():
        return

    while True:
        candidates = policy.find_spreads_to_lay(player.hand)
        if not candidates:
            break
        spread = game.lay_spread(candidates[0].cards, seat=seat)
        yield TurnStep(StepKind.SPREAD, cards=tuple(candidates[0].cards), spread=spread)
        if game.is_game_over():
            return

    while True:
        hits = [
            hit
            for hit in policy.find_hit_opportunities(player.hand, game.spreads_on_table)
            if player.has_card(hit.card)
        ]
        if not hits:
            break
        hit = hits[0]
        game.hit_spread(hit.card, hit.spread, seat=seat)
        yield TurnStep(StepKind.HIT, card=hit.card, spread=hit.spread)
        if game.is_game_over():
            return

    if player.hand:
        choice = policy.decide_discard(player.hand)
        game.discard(choice, seat=seat)
        yield TurnStep(StepKind.DISCARD, card=choice)


def execute_turn(game: "Game") -> list[TurnStep]:
    """Run :func:`iter_turn` to completion and return the applied steps."""

    return list(iter_turn(game))
