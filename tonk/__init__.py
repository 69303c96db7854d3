"""Top-level package for the Tonk game engine."""

from . import actions, cards, deck, events, game, policy, rules, scoreboard, spreads, state

__all__ = [
    "actions",
    "cards",
    "deck",
    "events",
    "game",
    "policy",
    "rules",
    "scoreboard",
    "spreads",
    "state",
]
