"""Strategy tables and bet sizing for NPC blackjack players."""

from enum import Enum, auto
from random import Random
from typing import Mapping

from tablegames.cards import Rank

# Upcard values run 2-11 (Ace = 11)
UPCARDS = range(2, 12)

# Largest NPC wager, in minimum bets
NPC_MAX_BET_MULTIPLE = 6


class Action(Enum):
    """Possible NPC actions."""

    HIT = auto()
    STAND = auto()
    SPLIT = auto()

    def __str__(self) -> str:
        return self.name


class NpcStrategy:
    """
    Fixed basic-strategy lookup tables used by NPC seats.

    The tables cover hit/stand only (the table offers no doubling or
    surrender) plus a pair-splitting table keyed by rank.
    """

    def __init__(self) -> None:
        self._hard_table = self._build_hard_table()
        self._soft_table = self._build_soft_table()
        self._pair_table = self._build_pair_table()

    def should_hit(self, total: int, dealer_upcard: int, soft: bool = False) -> bool:
        """Look up the hit/stand decision for a total against the dealer upcard."""
        table = self._soft_table if soft else self._hard_table
        action = table.get((total, dealer_upcard))
        if action is None:
            return total < 17
        return action == Action.HIT

    def should_split(self, rank: Rank, dealer_upcard: int) -> bool:
        """Check whether a pair of ``rank`` should be split against the upcard."""
        return self._pair_table.get((rank, dealer_upcard)) == Action.SPLIT

    def decide(
        self,
        total: int,
        dealer_upcard: int,
        soft: bool,
        pair_rank: Rank | None = None,
    ) -> Action:
        """
        Choose an action for a hand.

        Args:
            total: Hand total
            dealer_upcard: Dealer's upcard value (2-11, Ace=11)
            soft: Whether the total is soft
            pair_rank: Rank of the pair when the hand may be split

        Returns:
            The action to take
        """
        if pair_rank is not None and self.should_split(pair_rank, dealer_upcard):
            return Action.SPLIT
        if self.should_hit(total, dealer_upcard, soft):
            return Action.HIT
        return Action.STAND

    def _build_hard_table(self) -> Mapping[tuple[int, int], Action]:
        """Build hard totals table."""
        H = Action.HIT
        S = Action.STAND

        table: dict[tuple[int, int], Action] = {}

        # Hard 4-11: Always hit
        for total in range(4, 12):
            for dealer in UPCARDS:
                table[(total, dealer)] = H

        # Hard 12: Stand against 4-6
        for dealer in UPCARDS:
            table[(12, dealer)] = S if dealer in (4, 5, 6) else H

        # Hard 13-16: Stand against 2-6
        for total in range(13, 17):
            for dealer in UPCARDS:
                table[(total, dealer)] = S if dealer <= 6 else H

        # Hard 17+: Always stand
        for total in range(17, 22):
            for dealer in UPCARDS:
                table[(total, dealer)] = S

        return table

    def _build_soft_table(self) -> Mapping[tuple[int, int], Action]:
        """Build soft totals table."""
        H = Action.HIT
        S = Action.STAND

        table: dict[tuple[int, int], Action] = {}

        # Soft 12-17: Always hit
        for total in range(12, 18):
            for dealer in UPCARDS:
                table[(total, dealer)] = H

        for total in range(18, 22):
            for dealer in UPCARDS:
                table[(total, dealer)] = S

        return table

    def _build_pair_table(self) -> Mapping[tuple[Rank, int], Action]:
        """Build pair splitting table. Missing entries mean play the total."""
        P = Action.SPLIT

        table: dict[tuple[Rank, int], Action] = {}

        # Aces and 8s: Always split
        for rank in (Rank.ACE, Rank.EIGHT):
            for dealer in UPCARDS:
                table[(rank, dealer)] = P

        # 2s, 3s and 7s against 2-7
        for rank in (Rank.TWO, Rank.THREE, Rank.SEVEN):
            for dealer in range(2, 8):
                table[(rank, dealer)] = P

        # 4s against 5-6
        for dealer in (5, 6):
            table[(Rank.FOUR, dealer)] = P

        # 6s against 2-6
        for dealer in range(2, 7):
            table[(Rank.SIX, dealer)] = P

        # 9s against 2-6, 8 and 9
        for dealer in (2, 3, 4, 5, 6, 8, 9):
            table[(Rank.NINE, dealer)] = P

        # 5s and ten-values: Never split
        return table

    @property
    def hard_table(self) -> Mapping[tuple[int, int], Action]:
        return self._hard_table

    @property
    def soft_table(self) -> Mapping[tuple[int, int], Action]:
        return self._soft_table

    @property
    def pair_table(self) -> Mapping[tuple[Rank, int], Action]:
        return self._pair_table


def decide_npc_bet(chips: int, min_bet: int, rng: Random) -> int:
    """
    Size an NPC wager.

    A random whole number of minimum bets between one and
    ``min(chips, 6 × min_bet)``, never more than the NPC holds.
    """
    if chips <= min_bet:
        return min_bet
    max_stake = min(chips, min_bet * NPC_MAX_BET_MULTIPLE)
    steps = max(1, max_stake // min_bet)
    return min(chips, min_bet * (1 + rng.randrange(steps)))
