"""Blackjack table rules and the cut-card ceremony."""

from dataclasses import dataclass
from decimal import Decimal
from random import Random
from typing import Sequence

from config import BlackjackConfig, config
from tablegames.shoe import CutRatioRange

# Cut ratios are never allowed below this penetration
MIN_CUT_RATIO = 0.05

# Re-roll rounds before the cut card owner is drawn at random
MAX_CUT_ROLLS = 5


@dataclass(frozen=True)
class BlackjackRules:
    """
    Blackjack table rules configuration.

    Payout multiples are total returns on the stake: a natural returns 2.5x
    the bet (3:2), an ordinary win 2x, a push 1x.
    """

    num_decks: int = 6
    min_bet: int = 10
    cut_ratio_min: float = 0.2
    cut_ratio_max: float = 0.25

    # H17 vs S17; the lobby's house rule stands on every 17
    dealer_hits_soft_17: bool = False

    blackjack_return: Decimal = Decimal("2.5")
    win_return: int = 2

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if self.num_decks < 1 or self.num_decks > 8:
            raise ValueError("num_decks must be between 1 and 8")
        if self.min_bet < 1:
            raise ValueError("min_bet must be positive")
        if not 0.0 <= self.cut_ratio_min <= 1.0 or not 0.0 <= self.cut_ratio_max <= 1.0:
            raise ValueError("cut ratios must be between 0 and 1")

    @property
    def cut_ratio_range(self) -> CutRatioRange:
        """Cut ratio range clamped to a sane penetration window."""
        low = max(MIN_CUT_RATIO, min(self.cut_ratio_min, self.cut_ratio_max))
        high = max(low, self.cut_ratio_max)
        return CutRatioRange(low, high)

    @staticmethod
    def min_cards_to_deal(seats: int) -> int:
        """Cards the shoe must hold before a round for ``seats`` players may start."""
        return seats * 4 + 6

    @classmethod
    def from_config(cls, table: BlackjackConfig | None = None) -> "BlackjackRules":
        """Build rules from the environment-driven table configuration."""
        table = table or config.blackjack
        low, high = table.cut_ratio
        return cls(
            num_decks=table.num_decks,
            min_bet=table.min_bet,
            cut_ratio_min=low,
            cut_ratio_max=high,
            dealer_hits_soft_17=table.dealer_hits_soft_17,
        )


def roll_cut_card_owner(
    names: Sequence[str],
    rng: Random,
) -> tuple[str, dict[str, int]]:
    """
    Decide who inserts the cut card.

    Every player rolls a die; the single highest roll wins. Ties make everyone
    roll again, up to ``MAX_CUT_ROLLS`` rounds, after which the owner is drawn
    at random.

    Returns:
        The owner's name and the last round of rolls
    """
    if not names:
        return "", {}

    rolls: dict[str, int] = {}
    for _ in range(MAX_CUT_ROLLS):
        rolls = {name: rng.randint(1, 6) for name in names}
        best = max(rolls.values())
        winners = [name for name in names if rolls[name] == best]
        if len(winners) == 1:
            return winners[0], rolls

    return rng.choice(list(names)), rolls
