from __future__ import annotations

import random

from tonk import events
from tonk.cards import parse_card
from tonk.game import Game
from tonk.rules import DrawSource, Phase

from conftest import ordered_factory


def test_initialize_publishes_setup_events_in_order() -> None:
    seen: list[type] = []
    game = Game(rng=random.Random(7), deck_factory=ordered_factory)
    game.on(lambda event: seen.append(type(event)))
    game.initialize(2)

    assert seen == [
        events.GameInitialized,
        events.RoundStarted,
        events.AntesCollected,
        events.CardsDealt,
        events.TurnStarted,
    ]


def test_filtered_subscription_only_sees_requested_kinds(ordered_game: Game) -> None:
    drawn: list[events.CardDrawn] = []
    ordered_game.on(drawn.append, events.CardDrawn)

    ordered_game.proceed_to_draw()
    ordered_game.draw_from_discard()
    ordered_game.discard(parse_card("KS"))

    assert len(drawn) == 1
    assert drawn[0].source is DrawSource.DISCARD
    assert drawn[0].card == parse_card("3S")
    assert drawn[0].player is ordered_game.players[0]


def test_turn_events_follow_the_state_change(ordered_game: Game) -> None:
    log: list[events.GameEvent] = []
    ordered_game.on(log.append)

    ordered_game.proceed_to_draw()
    ordered_game.draw_from_deck()
    ordered_game.discard(parse_card("KS"))

    assert [type(event) for event in log] == [
        events.PhaseChanged,
        events.CardDrawn,
        events.CardDiscarded,
        events.TurnEnded,
        events.TurnStarted,
    ]
    assert log[0].phase is Phase.DRAW
    assert log[-1].player is ordered_game.players[1]


def test_unsubscribe_stops_delivery(ordered_game: Game) -> None:
    log: list[events.GameEvent] = []
    listener = ordered_game.on(log.append)
    ordered_game.off(listener)
    ordered_game.proceed_to_draw()
    assert log == []


def test_event_bus_runs_listeners_in_registration_order() -> None:
    bus = events.EventBus()
    order: list[str] = []
    bus.subscribe(lambda event: order.append("first"))
    bus.subscribe(lambda event: order.append("second"), events.RoundStarted)
    bus.subscribe(lambda event: order.append("ignored"), events.MatchOver)

    bus.publish(events.RoundStarted(round_number=1))

    assert order == ["first", "second"]
    assert len(bus) == 3


def test_knock_publishes_resolution_then_round_over(ordered_game: Game) -> None:
    log: list[events.GameEvent] = []
    ordered_game.on(log.append, events.KnockResolved, events.RoundOver)
    ordered_game.knock()

    assert [type(event) for event in log] == [events.KnockResolved, events.RoundOver]
    assert log[1].knocker is ordered_game.players[0]
