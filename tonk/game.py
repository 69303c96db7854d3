"""Turn and round state machine for a Tonk match."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from . import events, rules
from .cards import Card
from .deck import Deck
from .policy import HeuristicPolicy
from .rules import (
    CardNotInHand,
    DrawSource,
    IllegalBet,
    IllegalMove,
    IllegalPhase,
    InvalidSpread,
    KnockOutcome,
    NotYourTurn,
    Phase,
    WinCondition,
)
from .scoreboard import MatchHistory, RoundSummary
from .spreads import Spread, validate
from .state import DEFAULT_CONFIG, Player, TonkConfig

logger = logging.getLogger(__name__)

__all__ = ["AI_NAME_POOL", "Game", "ScoreLine", "ScoreChange"]

AI_NAME_POOL: tuple[str, ...] = (
    "Alex", "Jordan", "Sam", "Casey", "Riley", "Morgan",
    "Taylor", "Avery", "Quinn", "Blake", "Parker", "Reese",
    "Charlie", "Frankie", "Jamie", "Skyler", "Drew", "Sage",
    "Max", "Jessie", "Robin", "Dana", "Chris", "Pat",
)

DeckFactory = Callable[[Any], Deck]


@dataclass(frozen=True, slots=True)
class ScoreLine:
    """Hand and match standing for one seat."""

    player: Player
    points: int
    card_count: int
    match_score: int


@dataclass(frozen=True, slots=True)
class ScoreChange:
    """Points charged to a losing seat when a round is scored."""

    player: Player
    points_added: int
    new_total: int


def _default_deck_factory(rng: Any) -> Deck:
    return Deck(rng)


class Game:
    """Single source of truth for a match.

    Every mutation goes through a method here. A rejected call raises an
    :class:`~tonk.rules.IllegalMove` subclass before touching any state.
    Mutating calls take an optional ``seat``; when given it must be the
    current player's seat.
    """

    def __init__(
        self,
        rng: Any | None = None,
        config: TonkConfig | None = None,
        deck_factory: DeckFactory | None = None,
    ) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.config = config if config is not None else DEFAULT_CONFIG
        self.deck_factory: DeckFactory = deck_factory or _default_deck_factory
        self.events = events.EventBus()

        self.deck: Deck | None = None
        self.players: list[Player] = []
        self.current_player_index = 0
        self.phase = Phase.PRE_GAME
        self.spreads_on_table: list[Spread] = []
        self.winner: Player | None = None
        self.win_condition: WinCondition | None = None
        self.knocker: Player | None = None
        self.has_drawn_this_turn = False

        self.match_scores: dict[str, int] = {}
        self.match_winner: Player | None = None
        self.round_number = 0
        self.history: MatchHistory | None = None
        self.round_settled = False
        self.redeal_count = 0

        self.pot = 0
        self.highest_bet = 0
        self.next_spread_number = 1

    # Subscriptions

    def on(self, listener: events.Listener, *kinds: type) -> events.Listener:
        return self.events.subscribe(listener, *kinds)

    def off(self, listener: events.Listener) -> None:
        self.events.unsubscribe(listener)

    def _emit(self, event: events.GameEvent) -> None:
        self.events.publish(event)

    # Match lifecycle

    def initialize(self, player_count: int, human_name: str = "You", *, humans: int = 1) -> None:
        """Seat players, reset match scores and deal the first round."""

        self.config.validate_player_count(player_count)
        if not 0 <= humans <= player_count:
            raise ValueError("humans must be between 0 and the number of players")

        ai_count = player_count - humans
        ai_names = self.rng.sample(AI_NAME_POOL, ai_count) if ai_count else []
        starting_chips = self.config.betting.starting_chips

        self.players = []
        for seat in range(player_count):
            if seat < humans:
                name = human_name if humans == 1 else f"{human_name} {seat + 1}"
                policy = None
            else:
                name = ai_names[seat - humans]
                policy = HeuristicPolicy()
            self.players.append(
                Player(name=name, player_id=f"p{seat}", policy=policy, chips=starting_chips)
            )

        self.match_scores = {player.player_id: 0 for player in self.players}
        self.match_winner = None
        self.history = MatchHistory([player.player_id for player in self.players])
        self.round_number = 1
        self.pot = 0
        self.highest_bet = 0
        self._reset_round_state()

        logger.info("match initialised with %d players (%d human)", player_count, humans)
        self._emit(events.GameInitialized(players=tuple(self.players)))
        self._emit(events.RoundStarted(round_number=self.round_number))
        self._deal_until_playable()

    def start_next_round(self) -> None:
        """Reset hands, table and bets and deal the next round of a settled match."""

        self._require_phase("start the next round", Phase.GAME_OVER)
        if not self.round_settled:
            raise IllegalMove("settle the round before starting the next one")

        self.round_number += 1
        for player in self.players:
            player.reset()
            player.reset_bet()
        self.pot = 0
        self.highest_bet = 0
        self._reset_round_state()

        self._emit(events.RoundStarted(round_number=self.round_number))
        self._deal_until_playable()

    def _reset_round_state(self) -> None:
        self.current_player_index = 0
        self.phase = Phase.PRE_GAME
        self.spreads_on_table = []
        self.winner = None
        self.win_condition = None
        self.knocker = None
        self.has_drawn_this_turn = False
        self.round_settled = False
        self.redeal_count = 0

    def _deal_until_playable(self) -> None:
        """Deal, then redeal for as long as more than one seat has an initial tonk."""

        while True:
            self.phase = Phase.PRE_GAME
            self.deck = self.deck_factory(self.rng)
            self.collect_antes()
            self._deal()

            self.phase = Phase.INITIAL_TONK_CHECK
            qualifying = self.check_initial_tonk()
            if len(qualifying) <= 1:
                break

            self.redeal_count += 1
            if self.redeal_count > self.config.redeal_warning_threshold:
                logger.warning("redeal #%d after tied initial tonk; still no playable deal", self.redeal_count)
            else:
                logger.info("initial tonk tie between %d players, redealing", len(qualifying))
            self._emit(events.InitialTonkDraw(players=tuple(qualifying), redeal_count=self.redeal_count))
            self._refund_antes()
            for player in self.players:
                player.reset()

        if qualifying:
            self._end_round(self.players.index(qualifying[0]), WinCondition.INITIAL_TONK)
            return

        self.current_player_index = 0
        self.phase = Phase.START_OF_TURN
        self._emit(events.TurnStarted(player=self.current_player))

    def _deal(self) -> None:
        deck = self._require_deck()
        per_player = self.config.cards_per_player
        for _ in range(per_player):
            for player in self.players:
                card = deck.draw()
                if card is not None:
                    player.add_card(card)

        first_discard = deck.draw()
        if first_discard is not None:
            deck.discard(first_discard)
        logger.debug("dealt %d cards to %d players", per_player, len(self.players))
        self._emit(events.CardsDealt(cards_per_player=per_player, first_discard=first_discard))

    def check_initial_tonk(self) -> list[Player]:
        """Return the players whose dealt hand totals 49-50 points."""

        return [
            player
            for player in self.players
            if rules.has_initial_tonk(
                player.points, self.config.initial_tonk_min, self.config.initial_tonk_max
            )
        ]

    # Guards

    def _require_phase(self, action: str, *phases: Phase) -> None:
        if self.phase not in phases:
            raise IllegalPhase(f"cannot {action} during {self.phase.value}")

    def _require_turn(self, seat: int | None) -> Player:
        if seat is not None and seat != self.current_player_index:
            raise NotYourTurn(f"seat {seat} cannot act; it is seat {self.current_player_index}'s turn")
        return self.current_player

    def _require_deck(self) -> Deck:
        if self.deck is None:
            raise IllegalPhase("no deck has been dealt")
        return self.deck

    # Turn operations

    def proceed_to_draw(self, seat: int | None = None) -> None:
        self._require_phase("proceed to draw", Phase.START_OF_TURN)
        self._require_turn(seat)
        self.phase = Phase.DRAW
        self._emit(events.PhaseChanged(phase=Phase.DRAW))

    def draw_from_deck(self, seat: int | None = None) -> Card | None:
        """Draw from the stock; an empty stock ends the round instead."""

        self._require_phase("draw", Phase.DRAW)
        player = self._require_turn(seat)
        deck = self._require_deck()

        card = deck.draw()
        if card is None:
            self._end_round(rules.lowest_points_seat(self.players), WinCondition.STOCK_EMPTY)
            return None

        self._take_drawn_card(player, card, DrawSource.DECK)
        return card

    def draw_from_discard(self, seat: int | None = None) -> Card:
        self._require_phase("draw", Phase.DRAW)
        player = self._require_turn(seat)
        deck = self._require_deck()
        if deck.top_discard() is None:
            raise IllegalMove("discard pile is empty")

        card = deck.draw_from_discard()
        assert card is not None
        self._take_drawn_card(player, card, DrawSource.DISCARD)
        return card

    def _take_drawn_card(self, player: Player, card: Card, source: DrawSource) -> None:
        player.add_card(card)
        self.has_drawn_this_turn = True
        self.phase = Phase.ACTION
        logger.debug("%s drew %s from %s", player.name, card.label(), source.value)
        self._emit(events.CardDrawn(player=player, source=source, card=card))

    def lay_spread(self, cards: Sequence[Card], seat: int | None = None) -> Spread:
        """Move a validated book or run from the current hand to the table."""

        self._require_phase("lay a spread", Phase.START_OF_TURN, Phase.ACTION)
        player = self._require_turn(seat)
        cards = list(cards)
        result = validate(cards)
        if not result.valid:
            raise InvalidSpread("cards do not form a book or a run")
        missing = [card for card in cards if not player.has_card(card)]
        if missing:
            raise CardNotInHand(f"{player.name} does not hold {', '.join(c.label() for c in missing)}")

        spread = Spread.from_cards(cards, owner_id=player.player_id, spread_id=self._new_spread_id())
        player.remove_cards(cards)
        self.spreads_on_table.append(spread)
        player.add_spread(spread)
        logger.debug("%s laid %s", player.name, spread.description())
        self._emit(events.SpreadLaid(player=player, spread=spread))

        if player.has_empty_hand():
            self._end_round(self.current_player_index, WinCondition.TONK)
        return spread

    def hit_spread(self, card: Card, spread: Spread | str, seat: int | None = None) -> Spread:
        """Add one card from the current hand to any spread on the table."""

        self._require_phase("hit a spread", Phase.START_OF_TURN, Phase.ACTION)
        player = self._require_turn(seat)
        target = self._table_spread(spread)
        if not player.has_card(card):
            raise CardNotInHand(f"{player.name} does not hold {card.label()}")
        if not target.can_add_card(card):
            raise InvalidSpread(f"{card.label()} cannot be added to {target.description()}")

        player.remove_card(card)
        target.add_card(card)
        logger.debug("%s hit %s with %s", player.name, target.description(), card.label())
        self._emit(events.SpreadHit(player=player, card=card, spread=target))

        if player.has_empty_hand():
            self._end_round(self.current_player_index, WinCondition.TONK)
        return target

    def _table_spread(self, spread: Spread | str) -> Spread:
        spread_id = spread if isinstance(spread, str) else spread.spread_id
        for candidate in self.spreads_on_table:
            if candidate is spread or candidate.spread_id == spread_id:
                return candidate
        raise InvalidSpread("spread is not on the table")

    def discard(self, card: Card, seat: int | None = None) -> None:
        """Discard to end the turn; discarding the last card is a tonk."""

        self._require_phase("discard", Phase.ACTION)
        player = self._require_turn(seat)
        deck = self._require_deck()
        removed = player.remove_card(card)
        if removed is None:
            raise CardNotInHand(f"{player.name} does not hold {card.label()}")

        deck.discard(removed)
        self._emit(events.CardDiscarded(player=player, card=removed))

        if player.has_empty_hand():
            self._end_round(self.current_player_index, WinCondition.TONK)
            return
        self._end_turn()

    def knock(self, seat: int | None = None) -> KnockOutcome:
        """Claim the lowest hand before drawing; ties mean the knocker is caught."""

        self._require_phase("knock", Phase.START_OF_TURN)
        knocker = self._require_turn(seat)
        outcome = rules.resolve_knock(self.players, self.current_player_index)
        winner = self.players[outcome.winner_seat]
        logger.info(
            "%s knocked with %d points (lowest other %d): %s",
            knocker.name,
            outcome.knocker_points,
            outcome.lowest_other_points,
            outcome.condition.value,
        )
        self._emit(events.KnockResolved(knocker=knocker, winner=winner, condition=outcome.condition))
        self._end_round(outcome.winner_seat, outcome.condition, knocker=knocker)
        return outcome

    def _end_turn(self) -> None:
        previous = self.current_player
        self.current_player_index = (self.current_player_index + 1) % len(self.players)
        self.has_drawn_this_turn = False
        self.phase = Phase.START_OF_TURN
        logger.debug("turn passes from %s to %s", previous.name, self.current_player.name)
        self._emit(events.TurnEnded(player=previous, next_player=self.current_player))
        self._emit(events.TurnStarted(player=self.current_player))

    def _end_round(self, winner_seat: int, condition: WinCondition, knocker: Player | None = None) -> None:
        self.winner = self.players[winner_seat]
        self.win_condition = condition
        self.knocker = knocker
        self.phase = Phase.GAME_OVER
        logger.info("round %d won by %s (%s)", self.round_number, self.winner.name, condition.value)
        self._emit(events.RoundOver(winner=self.winner, condition=condition, knocker=knocker))

    def _new_spread_id(self) -> str:
        spread_id = f"spread-{self.next_spread_number}"
        self.next_spread_number += 1
        return spread_id

    # Betting

    def collect_antes(self) -> int:
        """Take the ante from every seat still holding chips."""

        ante = self.config.betting.ante
        self.pot = 0
        self.highest_bet = ante
        for player in self.players:
            if not player.is_eliminated and player.chips <= 0:
                player.is_eliminated = True
                logger.info("%s is out of chips and eliminated from betting", player.name)
            if player.is_eliminated:
                continue
            player.reset_bet()
            self.pot += player.bet(ante)
        self._emit(events.AntesCollected(pot=self.pot, ante=ante))
        return self.pot

    def _refund_antes(self) -> None:
        for player in self.players:
            player.receive_chips(player.current_bet)
            player.reset_bet()
        self.pot = 0
        self.highest_bet = 0

    def place_bet(self, amount: int, seat: int | None = None) -> int:
        """Raise during the action phase; returns the chips actually taken."""

        self._require_phase("raise", Phase.ACTION)
        player = self._require_turn(seat)
        if player.is_eliminated:
            raise IllegalBet("eliminated players cannot bet")
        if amount <= 0:
            raise IllegalBet("bet amount must be positive")

        actual = player.bet(amount)
        self.pot += actual
        if player.current_bet > self.highest_bet:
            self.highest_bet = player.current_bet
        self._emit(events.BetPlaced(player=player, amount=actual, pot=self.pot))
        return actual

    def award_pot(self, winner: Player | None = None) -> int:
        self._require_phase("award the pot", Phase.GAME_OVER)
        recipient = winner if winner is not None else self.winner
        if recipient is None:
            raise IllegalMove("round has no winner")
        winnings = self.pot
        recipient.receive_chips(winnings)
        self.pot = 0
        self._emit(events.PotAwarded(winner=recipient, amount=winnings))
        return winnings

    def get_pot(self) -> int:
        return self.pot

    def get_chips_info(self) -> list[tuple[Player, int, int, bool]]:
        return [(p, p.chips, p.current_bet, p.is_eliminated) for p in self.players]

    def can_player_raise(self, amount: int) -> bool:
        human = next((player for player in self.players if player.is_human), None)
        return human is not None and human.can_afford(amount)

    # Scoring

    def apply_round_scoring(self) -> list[ScoreChange]:
        """Charge every non-winner their current hand total."""

        self._require_phase("score the round", Phase.GAME_OVER)
        changes: list[ScoreChange] = []
        for player in self.players:
            if player is self.winner:
                continue
            points = player.points
            total = self.match_scores.get(player.player_id, 0) + points
            self.match_scores[player.player_id] = total
            changes.append(ScoreChange(player=player, points_added=points, new_total=total))
        return changes

    def check_match_end(self) -> bool:
        """Return ``True`` once any seat reaches the point limit.

        The match winner is the seat with the lowest cumulative score, first
        seat on ties.
        """

        limit = self.config.match_point_limit
        if not any(self.match_scores.get(p.player_id, 0) >= limit for p in self.players):
            return False
        best = self.players[0]
        for player in self.players:
            if self.match_scores[player.player_id] < self.match_scores[best.player_id]:
                best = player
        self.match_winner = best
        return True

    def settle_round(self) -> RoundSummary:
        """Award the pot, score the round and check for match end, exactly once."""

        self._require_phase("settle the round", Phase.GAME_OVER)
        if self.round_settled:
            raise IllegalMove("round has already been settled")
        assert self.winner is not None and self.win_condition is not None

        hand_points = {player.player_id: player.points for player in self.players}
        pot = self.award_pot()
        changes = self.apply_round_scoring()
        summary = RoundSummary(
            round_number=self.round_number,
            winner_id=self.winner.player_id,
            condition=self.win_condition,
            hand_points=hand_points,
            points_added={change.player.player_id: change.points_added for change in changes},
            pot=pot,
            knocker_id=self.knocker.player_id if self.knocker is not None else None,
        )
        if self.history is not None:
            self.history.record(summary)
        self.round_settled = True
        self._emit(events.RoundScored(summary=summary))

        if self.check_match_end():
            assert self.match_winner is not None
            logger.info("match won by %s", self.match_winner.name)
            self._emit(events.MatchOver(winner=self.match_winner, scores=dict(self.match_scores)))
        return summary

    # Read accessors

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    def is_human_turn(self) -> bool:
        return self.current_player.is_human

    def is_game_over(self) -> bool:
        return self.phase is Phase.GAME_OVER

    def is_match_over(self) -> bool:
        return self.match_winner is not None

    def get_scores(self) -> list[ScoreLine]:
        return [
            ScoreLine(
                player=player,
                points=player.points,
                card_count=player.card_count,
                match_score=self.match_scores.get(player.player_id, 0),
            )
            for player in self.players
        ]

    def get_match_scores(self) -> list[tuple[Player, int]]:
        return [(player, self.match_scores.get(player.player_id, 0)) for player in self.players]

    def get_top_discard(self) -> Card | None:
        return self.deck.top_discard() if self.deck is not None else None

    def get_deck_count(self) -> int:
        return self.deck.cards_remaining if self.deck is not None else 0

    def is_stock_empty(self) -> bool:
        return self.deck is None or self.deck.is_empty()

    def player_by_id(self, player_id: str) -> Player:
        for player in self.players:
            if player.player_id == player_id:
                return player
        raise KeyError(player_id)

    def seat_of(self, player: Player) -> int:
        return self.players.index(player)

    def all_cards(self) -> list[Card]:
        """Every card in the round: both piles, all hands, all spreads."""

        cards: list[Card] = []
        if self.deck is not None:
            cards.extend(self.deck.all_cards())
        for player in self.players:
            cards.extend(player.hand)
        for spread in self.spreads_on_table:
            cards.extend(spread.cards)
        return cards
