"""Roulette layout and bet resolution."""

from tablegames.roulette.layout import PAYOUTS, WHEEL_ORDER, BetType, Color, number_color
from tablegames.roulette.engine import (
    RouletteBet,
    RouletteGame,
    RouletteHistoryItem,
    RoulettePhase,
    RouletteResult,
    RouletteRules,
)

__all__ = [
    "PAYOUTS",
    "WHEEL_ORDER",
    "BetType",
    "Color",
    "number_color",
    "RouletteBet",
    "RouletteGame",
    "RouletteHistoryItem",
    "RoulettePhase",
    "RouletteResult",
    "RouletteRules",
]
