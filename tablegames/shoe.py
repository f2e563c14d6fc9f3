"""Shoe construction and depletion shared by blackjack and baccarat."""

import logging
import math
from dataclasses import dataclass
from random import Random
from typing import Iterator, Sequence, TypeVar

from tablegames.cards import Card, standard_deck

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Cards left behind a baccarat-style fixed cut card
CUT_CARD_DISTANCE = 14

# Smallest number of cards a randomized cut may leave behind
MIN_CUT_REMAINING = 15


@dataclass(frozen=True)
class CutRatioRange:
    """Range of shoe penetration (fraction dealt past the cut) to draw from."""

    min: float
    max: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.min <= self.max <= 1.0:
            raise ValueError("Cut ratio range must satisfy 0 <= min <= max <= 1")


@dataclass(frozen=True)
class ShoeResult:
    """A freshly built shoe."""

    deck: list[Card]
    shoe_size: int
    cut_card_position: int


def shuffle_cards(cards: Sequence[T], rng: Random | None = None) -> list[T]:
    """Return a Fisher-Yates shuffled copy of ``cards``."""
    rng = rng or Random()
    deck = list(cards)
    for i in range(len(deck) - 1, 0, -1):
        j = rng.randint(0, i)
        deck[i], deck[j] = deck[j], deck[i]
    return deck


def build_shoe(
    deck_count: int,
    cut_ratio_range: CutRatioRange | None = None,
    rng: Random | None = None,
) -> ShoeResult:
    """
    Build a shuffled multi-deck shoe and place its cut card.

    Args:
        deck_count: Number of 52-card decks to combine
        cut_ratio_range: Penetration range for a randomized cut card. Without
            it the cut card sits a fixed distance from the bottom.
        rng: Random number generator for shuffling and cut placement

    Returns:
        The shuffled cards, the shoe size and the number of cards that may be
        dealt before a reshuffle is due.
    """
    rng = rng or Random()
    cards: list[Card] = []
    for _ in range(max(deck_count, 0)):
        cards.extend(standard_deck())

    deck = shuffle_cards(cards, rng)
    shoe_size = len(deck)

    if cut_ratio_range is not None:
        penetration = cut_ratio_range.min + rng.random() * (
            cut_ratio_range.max - cut_ratio_range.min
        )
        cut_card_position = shoe_size - max(
            MIN_CUT_REMAINING, math.floor(shoe_size * penetration)
        )
    else:
        cut_card_position = shoe_size - CUT_CARD_DISTANCE

    return ShoeResult(deck=deck, shoe_size=shoe_size, cut_card_position=cut_card_position)


def should_reshuffle(cards_used: int, cut_card_position: int) -> bool:
    """Check whether the cut card has been reached."""
    return cards_used >= cut_card_position


class Shoe:
    """
    A dealing shoe owned by a single table.

    Cards are drawn from the end of the list. Once the number of cards dealt
    reaches the cut card position the shoe flags that a reshuffle is pending;
    the table decides when to honour it.
    """

    def __init__(self, cards: list[Card], cut_card_position: int) -> None:
        self._cards = list(cards)
        self._shoe_size = len(self._cards)
        self._cut_card_position = cut_card_position
        self.shuffle_pending = False

    @classmethod
    def build(
        cls,
        deck_count: int,
        cut_ratio_range: CutRatioRange | None = None,
        rng: Random | None = None,
    ) -> "Shoe":
        """Build and shuffle a new shoe."""
        result = build_shoe(deck_count, cut_ratio_range, rng)
        logger.debug(
            "Built %d-deck shoe: %d cards, cut after %d",
            deck_count,
            result.shoe_size,
            result.cut_card_position,
        )
        return cls(result.deck, result.cut_card_position)

    def draw(self, face_up: bool = True) -> Card | None:
        """Draw the next card, or return None if the shoe is empty."""
        if not self._cards:
            return None
        card = self._cards.pop()
        if should_reshuffle(self.cards_dealt, self._cut_card_position):
            self.shuffle_pending = True
        return card.revealed() if face_up else card.hidden()

    @property
    def cards_remaining(self) -> int:
        return len(self._cards)

    @property
    def cards_dealt(self) -> int:
        return self._shoe_size - len(self._cards)

    @property
    def shoe_size(self) -> int:
        return self._shoe_size

    @property
    def cut_card_position(self) -> int:
        return self._cut_card_position

    @property
    def cut_card_remaining(self) -> int:
        """Return how many cards sit behind the cut card."""
        return self._shoe_size - self._cut_card_position

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)
