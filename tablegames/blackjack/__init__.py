"""Blackjack hands, strategy and table engine."""

from tablegames.blackjack.state import BlackjackPhase, HandResult, HandStatus
from tablegames.blackjack.hand import Hand, hand_value
from tablegames.blackjack.rules import BlackjackRules
from tablegames.blackjack.strategy import Action, NpcStrategy
from tablegames.blackjack.engine import BlackjackGame, BlackjackPlayer, TurnRef

__all__ = [
    "BlackjackPhase",
    "HandResult",
    "HandStatus",
    "Hand",
    "hand_value",
    "BlackjackRules",
    "Action",
    "NpcStrategy",
    "BlackjackGame",
    "BlackjackPlayer",
    "TurnRef",
]
