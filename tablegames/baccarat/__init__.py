"""Baccarat rules, roadmaps and table engine."""

from tablegames.baccarat.state import (
    BaccaratBet,
    BaccaratHistoryItem,
    BaccaratPhase,
    BaccaratResult,
    BetType,
    Side,
)
from tablegames.baccarat.rules import BaccaratRules
from tablegames.baccarat.roadmap import generate_bead_plate, generate_big_road
from tablegames.baccarat.engine import BaccaratGame, BaccaratPlayer, DealStep

__all__ = [
    "BaccaratBet",
    "BaccaratHistoryItem",
    "BaccaratPhase",
    "BaccaratResult",
    "BetType",
    "Side",
    "BaccaratRules",
    "generate_bead_plate",
    "generate_big_road",
    "BaccaratGame",
    "BaccaratPlayer",
    "DealStep",
]
