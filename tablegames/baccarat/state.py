"""Baccarat phases, bet types and round records."""

from dataclasses import dataclass
from enum import Enum


class BaccaratPhase(Enum):
    """
    Table state machine states.

    Flow: BETTING → DEALING → RESULT → BETTING
    """

    BETTING = "BETTING"
    DEALING = "DEALING"
    RESULT = "RESULT"

    def __str__(self) -> str:
        return self.name.title()


class BetType(Enum):
    BANKER = "BANKER"
    PLAYER = "PLAYER"
    TIE = "TIE"
    BANKER_PAIR = "BANKER_PAIR"
    PLAYER_PAIR = "PLAYER_PAIR"


class BaccaratResult(Enum):
    BANKER_WIN = "BANKER_WIN"
    PLAYER_WIN = "PLAYER_WIN"
    TIE = "TIE"


class BetOutcome(Enum):
    WIN = "WIN"
    LOSE = "LOSE"
    PUSH = "PUSH"


@dataclass
class BaccaratBet:
    """A wager on one bet type; repeated bets on the same type accumulate."""

    type: BetType
    amount: int


@dataclass(frozen=True)
class BaccaratHistoryItem:
    """One settled coup, as recorded for the roadmaps."""

    result: BaccaratResult
    banker_points: int
    player_points: int
    banker_pair: bool = False
    player_pair: bool = False
    is_natural: bool = False


class Side(Enum):
    """The two hands dealt each coup."""

    PLAYER = "PLAYER"
    BANKER = "BANKER"
