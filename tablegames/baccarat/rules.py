"""Baccarat drawing rules, settlement and table configuration."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence

from config import BaccaratConfig, config
from tablegames.cards import Card
from tablegames.baccarat.state import BaccaratBet, BaccaratResult, BetType

# Net winnings per unit staked
PAYOUTS: dict[BetType, Decimal] = {
    BetType.BANKER: Decimal("0.95"),  # 5% commission
    BetType.PLAYER: Decimal("1"),
    BetType.TIE: Decimal("8"),
    BetType.BANKER_PAIR: Decimal("11"),
    BetType.PLAYER_PAIR: Decimal("11"),
}


@dataclass(frozen=True)
class BaccaratRules:
    """Baccarat table configuration."""

    num_decks: int = 8
    min_bet: int = 10

    def __post_init__(self) -> None:
        if self.num_decks < 1 or self.num_decks > 8:
            raise ValueError("num_decks must be between 1 and 8")
        if self.min_bet < 1:
            raise ValueError("min_bet must be positive")

    @classmethod
    def from_config(cls, table: BaccaratConfig | None = None) -> "BaccaratRules":
        table = table or config.baccarat
        return cls(num_decks=table.num_decks, min_bet=table.min_bet)


def card_point_value(card: Card) -> int:
    """Point value of a single card: Ace 1, 2-9 face value, tens and faces 0."""
    return card.rank.baccarat_value


def calculate_points(cards: Iterable[Card]) -> int:
    """Hand points: the last digit of the card total."""
    return sum(card_point_value(card) for card in cards) % 10


def is_natural(points: int) -> bool:
    """A two-card 8 or 9."""
    return points >= 8


def is_pair(cards: Sequence[Card]) -> bool:
    """Check whether the first two cards share a rank."""
    return len(cards) >= 2 and cards[0].rank == cards[1].rank


def should_player_draw(player_points: int) -> bool:
    """The player hand draws on 0-5 and stands on 6-7."""
    return player_points <= 5


def should_banker_draw(
    banker_points: int,
    player_drew: bool,
    player_third_value: int | None = None,
) -> bool:
    """
    Apply the banker's third-card table.

    Args:
        banker_points: Banker's two-card points
        player_drew: Whether the player hand took a third card
        player_third_value: Point value of the player's third card

    Returns:
        True if the banker draws
    """
    # Player stood: banker follows the player's rule
    if not player_drew:
        return banker_points <= 5

    if player_third_value is None:
        return False

    if banker_points <= 2:
        return True
    if banker_points == 3:
        return player_third_value != 8
    if banker_points == 4:
        return player_third_value not in (0, 1, 8, 9)
    if banker_points == 5:
        return player_third_value not in (0, 1, 2, 3, 8, 9)
    if banker_points == 6:
        return player_third_value in (6, 7)
    return False


def evaluate_result(banker_points: int, player_points: int) -> BaccaratResult:
    if banker_points > player_points:
        return BaccaratResult.BANKER_WIN
    if player_points > banker_points:
        return BaccaratResult.PLAYER_WIN
    return BaccaratResult.TIE


def calculate_bet_payout(
    bet_type: BetType,
    amount: int,
    result: BaccaratResult,
    banker_pair: bool,
    player_pair: bool,
) -> int:
    """
    Net result of one bet.

    Returns:
        Positive chips won, the negative stake when lost, 0 when pushed.
        Fractional commission is rounded down to whole chips.
    """
    won = {
        BetType.BANKER: result == BaccaratResult.BANKER_WIN,
        BetType.PLAYER: result == BaccaratResult.PLAYER_WIN,
        BetType.TIE: result == BaccaratResult.TIE,
        BetType.BANKER_PAIR: banker_pair,
        BetType.PLAYER_PAIR: player_pair,
    }[bet_type]

    if won:
        return int(Decimal(amount) * PAYOUTS[bet_type])
    if result == BaccaratResult.TIE and bet_type in (BetType.BANKER, BetType.PLAYER):
        return 0
    return -amount


def calculate_total_payout(
    bets: Iterable[BaccaratBet],
    result: BaccaratResult,
    banker_pair: bool,
    player_pair: bool,
) -> int:
    """Sum of the net results of every bet."""
    return sum(
        calculate_bet_payout(bet.type, bet.amount, result, banker_pair, player_pair)
        for bet in bets
    )
