"""Blackjack phases, hand statuses and results."""

from enum import Enum


class BlackjackPhase(Enum):
    """
    Table state machine states.

    Flow: BETTING → PLAYING → DEALER → RESULT → BETTING
    (BETTING → RESULT directly when the dealer is dealt blackjack)
    """

    BETTING = "BETTING"
    PLAYING = "PLAYING"
    DEALER = "DEALER"
    RESULT = "RESULT"

    def __str__(self) -> str:
        return self.name.title()


class HandStatus(Enum):
    WAITING = "WAITING"
    PLAYING = "PLAYING"
    STAND = "STAND"
    BUST = "BUST"
    BLACKJACK = "BLACKJACK"


class HandResult(Enum):
    WIN = "WIN"
    LOSE = "LOSE"
    PUSH = "PUSH"
    BLACKJACK = "BLACKJACK"
