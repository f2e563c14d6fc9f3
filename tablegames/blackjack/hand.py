"""Hand evaluation for blackjack."""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, NamedTuple

from tablegames.cards import Card
from tablegames.blackjack.state import HandResult, HandStatus


class HandValue(NamedTuple):
    total: int
    soft: bool


def hand_value(cards: Iterable[Card]) -> HandValue:
    """
    Calculate the best total of a set of cards.

    Aces count 11 and drop to 1 one at a time while the total is over 21.
    The total is soft while an ace is still counted as 11.
    """
    total = 0
    aces = 0

    for card in cards:
        if card.is_ace:
            aces += 1
        total += card.rank.blackjack_value

    while total > 21 and aces > 0:
        total -= 10
        aces -= 1

    return HandValue(total, aces > 0 and total <= 21)


def is_blackjack(cards: list[Card]) -> bool:
    """Check for a two-card 21."""
    return len(cards) == 2 and hand_value(cards).total == 21


def split_status(cards: list[Card]) -> HandStatus:
    """Status of a hand formed by splitting aces, which takes no further cards."""
    total = hand_value(cards).total
    if total > 21:
        return HandStatus.BUST
    if total == 21:
        return HandStatus.STAND
    return HandStatus.PLAYING


@dataclass
class Hand:
    """A seat's blackjack hand with its wager."""

    id: str
    cards: list[Card] = field(default_factory=list)
    bet: int = 0
    status: HandStatus = HandStatus.WAITING
    result: HandResult | None = None
    is_split_hand: bool = False

    def add_card(self, card: Card) -> None:
        self.cards.append(card)

    @property
    def value(self) -> HandValue:
        return hand_value(self.cards)

    @property
    def total(self) -> int:
        return self.value.total

    @property
    def is_soft(self) -> bool:
        return self.value.soft

    @property
    def is_blackjack(self) -> bool:
        return is_blackjack(self.cards)

    @property
    def is_natural(self) -> bool:
        """A blackjack dealt on the opening two cards, never one made after a split."""
        return self.status == HandStatus.BLACKJACK and not self.is_split_hand

    @property
    def is_busted(self) -> bool:
        return self.total > 21

    @property
    def is_pair(self) -> bool:
        return len(self.cards) == 2 and self.cards[0].rank == self.cards[1].rank

    @property
    def is_splittable(self) -> bool:
        """Check if the hand is an unsplit pair (chips are checked by the table)."""
        return self.is_pair and not self.is_split_hand

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        total, soft = self.value
        value_str = f"(soft {total})" if soft else f"({total})"
        if self.is_blackjack and not self.is_split_hand:
            value_str = "(BLACKJACK)"
        if self.is_busted:
            value_str = "(BUST)"
        return f"{cards_str} {value_str}"
