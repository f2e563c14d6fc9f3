"""Roulette bet ledger and resolver with state machine."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Iterable
from uuid import uuid4

from transitions import Machine

from config import RouletteConfig, config
from tablegames.events import EventEmitter, EventType, GameEvent
from tablegames.roulette.layout import ALL_NUMBERS, PAYOUTS, BetType, Color, number_color

logger = logging.getLogger(__name__)


class RoulettePhase(Enum):
    """
    Table state machine states.

    Flow: IDLE → BETTING → SPINNING → RESULT → IDLE
    """

    IDLE = "IDLE"
    BETTING = "BETTING"
    SPINNING = "SPINNING"
    RESULT = "RESULT"

    def __str__(self) -> str:
        return self.name.title()


@dataclass(frozen=True)
class RouletteRules:
    """Roulette table configuration."""

    history_limit: int = 50

    def __post_init__(self) -> None:
        if self.history_limit < 1:
            raise ValueError("history_limit must be positive")

    @classmethod
    def from_config(cls, table: RouletteConfig | None = None) -> "RouletteRules":
        table = table or config.roulette
        return cls(history_limit=table.history_limit)


@dataclass(frozen=True)
class RouletteBet:
    """A wager covering a fixed set of numbers."""

    type: BetType
    amount: int
    numbers: frozenset[str]
    player_id: str = "player"
    id: str = field(default_factory=lambda: uuid4().hex[:12])

    def covers(self, number: str) -> bool:
        return number in self.numbers

    def payout(self, number: str) -> int:
        """Chips returned if ``number`` wins: winnings plus the stake, or 0."""
        if not self.covers(number):
            return 0
        return self.amount * PAYOUTS[self.type] + self.amount


@dataclass(frozen=True)
class RouletteResult:
    winning_number: str
    color: Color


@dataclass(frozen=True)
class RouletteHistoryItem:
    result: RouletteResult
    timestamp: datetime = field(default_factory=datetime.now)


class RouletteGame:
    """
    Roulette table engine using a state machine.

    The engine never picks a number itself: the wheel simulation lands the
    ball and hands the winning pocket to ``resolve_round``.
    """

    STATES = [p.name.lower() for p in RoulettePhase]

    TRANSITIONS = [
        {"trigger": "open_betting", "source": "idle", "dest": "betting"},
        {"trigger": "close_betting", "source": ["idle", "betting"], "dest": "idle"},
        {"trigger": "release_ball", "source": "betting", "dest": "spinning"},
        {"trigger": "ball_landed", "source": "spinning", "dest": "result"},
        {"trigger": "clear_table", "source": ["idle", "betting", "result"], "dest": "idle"},
    ]

    def __init__(self, rules: RouletteRules | None = None) -> None:
        self.rules = rules or RouletteRules.from_config()
        self.events = EventEmitter()

        self.bets: list[RouletteBet] = []
        self.history: list[RouletteHistoryItem] = []
        self.winning_number: str | None = None
        self.last_win_amount = 0
        self.player_winnings: dict[str, int] = {}

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="idle",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def phase(self) -> RoulettePhase:
        """Get current phase as enum."""
        return RoulettePhase[self._machine_state.upper()]  # type: ignore[attr-defined]

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to table events."""
        self.events.subscribe(handler, event_type)

    @property
    def can_bet(self) -> bool:
        return self.phase in (RoulettePhase.IDLE, RoulettePhase.BETTING)

    @property
    def total_bet(self) -> int:
        return sum(bet.amount for bet in self.bets)

    def bets_for(self, player_id: str) -> list[RouletteBet]:
        return [bet for bet in self.bets if bet.player_id == player_id]

    def place_bet(
        self,
        bet_type: BetType,
        amount: int,
        numbers: Iterable[str],
        player_id: str = "player",
    ) -> RouletteBet | None:
        """
        Put chips on the layout.

        Args:
            bet_type: Kind of bet, which fixes the payout
            amount: Chips staked
            numbers: Labels the bet covers (see the layout builders)
            player_id: Owner of the bet

        Returns:
            The recorded bet, or None if it was refused
        """
        if not self.can_bet:
            self._reject("Cannot bet in current state", state=self.phase.name)
            return None

        covered = frozenset(numbers)
        if amount <= 0 or not covered or not covered <= ALL_NUMBERS:
            self._reject("Invalid bet", amount=amount, numbers=sorted(covered))
            return None

        bet = RouletteBet(type=bet_type, amount=amount, numbers=covered, player_id=player_id)
        if self.phase == RoulettePhase.IDLE:
            self.open_betting()
        self.bets.append(bet)
        self.events.emit_new(
            EventType.BET_PLACED,
            player=player_id,
            bet_type=bet_type.value,
            amount=amount,
            numbers=sorted(covered),
        )
        return bet

    def clear_bets(self) -> bool:
        """Remove every bet and return to IDLE."""
        if not self.can_bet:
            return self._reject("Cannot clear bets in current state", state=self.phase.name)
        had_bets = bool(self.bets)
        self.bets = []
        self.close_betting()
        if had_bets:
            self.events.emit_new(EventType.BETS_CLEARED)
        return True

    def spin_wheel(self) -> bool:
        """Close betting and wait for the ball to land."""
        if self.phase != RoulettePhase.BETTING or not self.bets:
            return self._reject("No bets to spin for", state=self.phase.name)
        self.release_ball()
        self.events.emit_new(EventType.WHEEL_SPUN, bets=len(self.bets), total_bet=self.total_bet)
        return True

    def resolve_round(self, winning_number: str) -> int | None:
        """
        Pay out the bets for the pocket the ball landed in.

        Returns:
            Total chips returned to the table, or None if not spinning
        """
        if self.phase != RoulettePhase.SPINNING:
            self._reject("Wheel is not spinning", state=self.phase.name)
            return None
        if winning_number not in ALL_NUMBERS:
            self._reject("Unknown roulette number", number=winning_number)
            return None

        winnings: dict[str, int] = {}
        for bet in self.bets:
            returned = bet.payout(winning_number)
            winnings[bet.player_id] = winnings.get(bet.player_id, 0) + returned
            self.events.emit_new(
                EventType.BET_RESOLVED,
                player=bet.player_id,
                bet_type=bet.type.value,
                amount=bet.amount,
                payout=returned,
            )

        result = RouletteResult(winning_number, number_color(winning_number))
        self.winning_number = winning_number
        self.player_winnings = winnings
        self.last_win_amount = sum(winnings.values())
        self.history.insert(0, RouletteHistoryItem(result))
        del self.history[self.rules.history_limit:]

        self.ball_landed()
        logger.info(
            "Roulette landed on %s (%s): %d returned on %d staked",
            winning_number,
            result.color.value,
            self.last_win_amount,
            self.total_bet,
        )
        self.events.emit_new(
            EventType.NUMBER_RESOLVED,
            number=winning_number,
            color=result.color.value,
            total_win=self.last_win_amount,
        )
        return self.last_win_amount

    def reset_game(self) -> bool:
        """Clear bets and the last result, ready for a new round."""
        if self.phase == RoulettePhase.SPINNING:
            return self._reject("Cannot reset while the wheel spins")
        changed = bool(self.bets) or self.winning_number is not None
        self.bets = []
        self.winning_number = None
        self.last_win_amount = 0
        self.player_winnings = {}
        self.clear_table()
        if changed:
            self.events.emit_new(EventType.ROUND_RESET)
        return True

    def _reject(
        self,
        message: str,
        event_type: EventType = EventType.INVALID_ACTION,
        **data: Any,
    ) -> bool:
        self.events.emit_new(event_type, message=message, **data)
        return False
