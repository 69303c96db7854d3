from __future__ import annotations

import random
from typing import Callable, Iterable, Sequence

import pytest

from tonk.cards import Card, iter_full_deck, parse_cards
from tonk.deck import Deck
from tonk.game import Game


def stack_deck(draw_order: Sequence[str]) -> list[Card]:
    """Return a full deck whose next draws follow ``draw_order``."""

    top = parse_cards(draw_order)
    rest = [card for card in iter_full_deck() if card not in top]
    return rest + list(reversed(top))


def deal_order(hands: Sequence[Sequence[str]], first_discard: str, *then: str) -> list[str]:
    """Flatten per-seat hands into the round-robin order used when dealing."""

    order: list[str] = []
    for idx in range(len(hands[0])):
        for hand in hands:
            order.append(hand[idx])
    order.append(first_discard)
    order.extend(then)
    return order


def stacked_factory(stacks: Iterable[Sequence[Card]]) -> Callable[[random.Random], Deck]:
    """Deck factory serving one prepared stack per deal."""

    pending = iter(list(stacks))

    def factory(rng: random.Random) -> Deck:
        return Deck(rng, cards=next(pending))

    return factory


def ordered_factory(rng: random.Random) -> Deck:
    # Unshuffled: seat 0 gets KS JS 9S 7S 5S, seat 1 gets QS 10S 8S 6S 4S, 3S is turned up.
    return Deck(rng, shuffle=False)


@pytest.fixture
def ordered_game() -> Game:
    """Two-seat game dealt from an unshuffled deck, seat 0 human and seat 1 computer."""

    game = Game(rng=random.Random(7), deck_factory=ordered_factory)
    game.initialize(2)
    return game


@pytest.fixture
def computer_game() -> Game:
    """Same deal as ``ordered_game`` with both seats computer-controlled."""

    game = Game(rng=random.Random(7), deck_factory=ordered_factory)
    game.initialize(2, humans=0)
    return game
