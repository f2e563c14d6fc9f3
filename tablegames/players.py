"""Seats, NPC profiles and the settlement records handed to the profile store."""

from dataclasses import dataclass, field
from enum import Enum
from random import Random
from typing import Callable, Sequence


@dataclass
class Seat:
    """A player sitting at a table."""

    id: str
    name: str
    chips: int
    is_ai: bool = False

    def __post_init__(self) -> None:
        if self.chips < 0:
            raise ValueError("chips must be non-negative")


@dataclass(frozen=True)
class NpcProfile:
    """
    Personality of a computer-controlled player.

    ``quotes`` maps a mood key (``"WIN"``, ``"LOSE"``, ``"WAITING"`` ...) to the
    lines the NPC may say.
    """

    name: str
    quotes: dict[str, tuple[str, ...]] = field(default_factory=dict)
    avatar: str = ""

    def lines(self, mood: str) -> tuple[str, ...]:
        return self.quotes.get(mood, ())


@dataclass(frozen=True)
class ProfileUpdate:
    """Chip balance and round outcome for one player, sent to the profile store."""

    name: str
    chips: int
    result: str


ProfilesCallback = Callable[[list[ProfileUpdate]], None]
ChipsResolver = Callable[[str], int]


def find_profile(profiles: Sequence[NpcProfile], name: str) -> NpcProfile | None:
    return next((p for p in profiles if p.name == name), None)


def pick_quote(
    profile: NpcProfile | None,
    result: Enum | str | None,
    rng: Random,
) -> str:
    """
    Pick a line matching a round result.

    Winning results (including blackjack) use the WIN lines, losses use LOSE;
    pushes and missing profiles get no quote.
    """
    if profile is None or result is None:
        return ""
    key = result.value if isinstance(result, Enum) else result
    if key in ("WIN", "BLACKJACK"):
        lines = profile.lines("WIN")
    elif key == "LOSE":
        lines = profile.lines("LOSE")
    else:
        return ""
    return rng.choice(lines) if lines else ""
