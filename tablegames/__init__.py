"""Casino table-game rules engine - UI-agnostic."""

from tablegames.cards import Card, Rank, Suit
from tablegames.events import EventEmitter, EventType, GameEvent
from tablegames.players import NpcProfile, ProfileUpdate, Seat
from tablegames.shoe import CutRatioRange, Shoe, ShoeResult, build_shoe, shuffle_cards

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "EventEmitter",
    "EventType",
    "GameEvent",
    "NpcProfile",
    "ProfileUpdate",
    "Seat",
    "CutRatioRange",
    "Shoe",
    "ShoeResult",
    "build_shoe",
    "shuffle_cards",
]
