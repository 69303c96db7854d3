"""Draw and discard piles for a single Tonk round."""

from __future__ import annotations

import logging
import random
from typing import Any, Iterable, List

from .cards import Card, iter_full_deck

logger = logging.getLogger(__name__)

__all__ = ["Deck"]


class Deck:
    """Stock (draw pile) plus discard pile.

    The top of both piles is the end of the list. There is no reshuffling of
    the discard pile: once the stock is empty the round is over.
    """

    def __init__(
        self,
        rng: Any | None = None,
        *,
        cards: Iterable[Card] | None = None,
        discard_pile: Iterable[Card] | None = None,
        shuffle: bool = True,
    ) -> None:
        self.rng = rng if rng is not None else random.Random()
        if cards is None:
            self.cards: List[Card] = list(iter_full_deck())
            if shuffle:
                self.shuffle()
        else:
            self.cards = list(cards)
        self.discard_pile: List[Card] = list(discard_pile or [])

    def shuffle(self) -> None:
        """Fisher-Yates shuffle of the draw pile using the injected source."""

        cards = self.cards
        for i in range(len(cards) - 1, 0, -1):
            j = self.rng.randrange(i + 1)
            cards[i], cards[j] = cards[j], cards[i]

    def draw(self) -> Card | None:
        """Remove and return the top card, or ``None`` when the stock is empty."""

        if not self.cards:
            logger.debug("draw attempted on an empty stock")
            return None
        return self.cards.pop()

    def discard(self, card: Card) -> None:
        self.discard_pile.append(card)

    def top_discard(self) -> Card | None:
        """Peek at the discard pile without removing anything."""

        if not self.discard_pile:
            return None
        return self.discard_pile[-1]

    def draw_from_discard(self) -> Card | None:
        if not self.discard_pile:
            return None
        return self.discard_pile.pop()

    @property
    def cards_remaining(self) -> int:
        return len(self.cards)

    def is_empty(self) -> bool:
        return not self.cards

    def reset(self) -> None:
        """Rebuild a full shuffled deck and clear the discard pile."""

        self.discard_pile = []
        self.cards = list(iter_full_deck())
        self.shuffle()

    def all_cards(self) -> list[Card]:
        """Return every card held by either pile."""

        return list(self.cards) + list(self.discard_pile)
