"""Configuration management with environment variable support."""

import os
from dataclasses import dataclass, field

# Share of the blackjack shoe dealt past the cut card, per preset
CUT_PRESETS: dict[str, tuple[float, float]] = {
    "DEEP": (0.15, 0.2),
    "STANDARD": (0.2, 0.25),
    "SHALLOW": (0.25, 0.3),
}


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _cut_preset() -> str:
    preset = os.getenv("TABLEGAMES_BLACKJACK_CUT_PRESET", "STANDARD").strip().upper()
    if preset not in CUT_PRESETS:
        raise ValueError(
            f"TABLEGAMES_BLACKJACK_CUT_PRESET must be one of {sorted(CUT_PRESETS)}"
        )
    return preset


@dataclass(frozen=True)
class BlackjackConfig:
    """Blackjack table defaults."""

    num_decks: int = field(
        default_factory=lambda: _env_int("TABLEGAMES_BLACKJACK_DECKS", 6)
    )
    min_bet: int = field(
        default_factory=lambda: _env_int("TABLEGAMES_BLACKJACK_MIN_BET", 10)
    )
    cut_preset: str = field(default_factory=_cut_preset)
    dealer_hits_soft_17: bool = field(
        default_factory=lambda: os.getenv("TABLEGAMES_BLACKJACK_H17", "false").lower() == "true"
    )

    @property
    def cut_ratio(self) -> tuple[float, float]:
        return CUT_PRESETS[self.cut_preset]


@dataclass(frozen=True)
class BaccaratConfig:
    """Baccarat table defaults."""

    num_decks: int = field(
        default_factory=lambda: _env_int("TABLEGAMES_BACCARAT_DECKS", 8)
    )
    min_bet: int = field(
        default_factory=lambda: _env_int("TABLEGAMES_BACCARAT_MIN_BET", 10)
    )


@dataclass(frozen=True)
class RouletteConfig:
    """Roulette table defaults."""

    history_limit: int = field(
        default_factory=lambda: _env_int("TABLEGAMES_ROULETTE_HISTORY", 50)
    )


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    blackjack: BlackjackConfig = field(default_factory=BlackjackConfig)
    baccarat: BaccaratConfig = field(default_factory=BaccaratConfig)
    roulette: RouletteConfig = field(default_factory=RouletteConfig)


# Global configuration instance
config = AppConfig()
