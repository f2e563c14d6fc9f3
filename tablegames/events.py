"""Table events for the event system."""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable


class EventType(Enum):
    """Types of table events."""

    # Round flow events
    ROUND_STARTED = auto()
    ROUND_ENDED = auto()
    ROUND_RESET = auto()

    # Betting events
    BET_PLACED = auto()
    BETS_CLEARED = auto()

    # Shoe events
    CARD_DEALT = auto()
    SHOE_SHUFFLED = auto()
    CUT_CARD_ROLLED = auto()
    RESHUFFLE_REQUIRED = auto()

    # Player action events
    PLAYER_HIT = auto()
    PLAYER_STAND = auto()
    PLAYER_SPLIT = auto()
    PLAYER_BUSTS = auto()
    TURN_CHANGED = auto()

    # Dealer events
    DEALER_REVEALS = auto()
    DEALER_HITS = auto()
    DEALER_STANDS = auto()
    DEALER_BUSTS = auto()
    DEALER_BLACKJACK = auto()

    # Baccarat events
    NATURAL = auto()
    THIRD_CARD = auto()

    # Roulette events
    WHEEL_SPUN = auto()
    NUMBER_RESOLVED = auto()

    # Outcome events
    HAND_RESOLVED = auto()
    BET_RESOLVED = auto()

    # Error events
    INVALID_ACTION = auto()
    INSUFFICIENT_FUNDS = auto()


@dataclass(frozen=True)
class GameEvent:
    """
    Immutable table event.

    Events are the primary communication mechanism between the rules engine
    and the presentation layer.
    """

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


EventHandler = Callable[[GameEvent], None]

# Events kept per emitter; older ones are dropped first
HISTORY_LIMIT = 1000


class EventEmitter:
    """
    Dispatches table events and keeps a bounded log of them.

    Handlers subscribed to an event type run before catch-all handlers. Only
    the latest ``history_limit`` events stay in the log, so a long session
    at one table does not grow it without end.
    """

    def __init__(self, history_limit: int = HISTORY_LIMIT) -> None:
        if history_limit <= 0:
            raise ValueError("history_limit must be positive")
        self._typed: defaultdict[EventType, list[EventHandler]] = defaultdict(list)
        self._catch_all: list[EventHandler] = []
        self._log: deque[GameEvent] = deque(maxlen=history_limit)

    def _handlers(self, event_type: EventType | None) -> list[EventHandler]:
        return self._catch_all if event_type is None else self._typed[event_type]

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """
        Subscribe to events.

        Args:
            handler: Function to call when event occurs
            event_type: Event type to listen for, or None for every event
        """
        self._handlers(event_type).append(handler)

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """Remove a handler; unknown handlers are ignored."""
        handlers = self._handlers(event_type)
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: GameEvent) -> None:
        self._log.append(event)
        # Snapshot so handlers may unsubscribe while being called
        for handler in [*self._typed.get(event.event_type, ()), *self._catch_all]:
            handler(event)

    def emit_new(self, event_type: EventType, **data: Any) -> GameEvent:
        """Create, emit and return a new event."""
        event = GameEvent(event_type=event_type, data=data)
        self.emit(event)
        return event

    @property
    def history_limit(self) -> int:
        return self._log.maxlen or 0

    @property
    def history(self) -> list[GameEvent]:
        """Logged events, oldest first."""
        return list(self._log)

    def of_type(self, event_type: EventType) -> list[GameEvent]:
        """Logged events of one type, oldest first."""
        return [e for e in self._log if e.event_type == event_type]

    def clear_history(self) -> None:
        self._log.clear()
