"""Baccarat table engine with state machine."""

import logging
from dataclasses import dataclass, field
from random import Random
from typing import Any, Callable, Iterator, Sequence

from transitions import Machine

from tablegames.cards import Card
from tablegames.events import EventEmitter, EventType, GameEvent
from tablegames.players import (
    NpcProfile,
    ProfileUpdate,
    ProfilesCallback,
    Seat,
    find_profile,
)
from tablegames.shoe import Shoe
from tablegames.baccarat.ai import (
    QuoteEvent,
    calculate_ai_bet,
    get_ai_quote,
    get_baccarat_quote,
    reaction_event,
)
from tablegames.baccarat.rules import (
    BaccaratRules,
    calculate_bet_payout,
    calculate_points,
    card_point_value,
    evaluate_result,
    is_natural,
    is_pair,
    should_banker_draw,
    should_player_draw,
)
from tablegames.baccarat.state import (
    BaccaratBet,
    BaccaratHistoryItem,
    BaccaratPhase,
    BaccaratResult,
    BetOutcome,
    BetType,
    Side,
)

logger = logging.getLogger(__name__)

# Most cards a single coup can use
MAX_CARDS_PER_COUP = 6

MSG_PLACE_BETS = "請下注"
MSG_BET_FIRST = "請先下注！"
MSG_INSUFFICIENT_CHIPS = "餘額不足"
MSG_DEALING = "發牌中..."
MSG_PLAYER_DRAWS = "閒家補牌..."
MSG_BANKER_DRAWS = "莊家補牌..."
MSG_NATURAL = "天牌！"
MSG_DOUBLE_NATURAL = "雙方天牌！"
MSG_RESHUFFLED = "牌靴已重新洗牌"


def result_message(result: BaccaratResult, banker_points: int, player_points: int) -> str:
    if result == BaccaratResult.BANKER_WIN:
        return f"莊家 {banker_points} 點勝！"
    if result == BaccaratResult.PLAYER_WIN:
        return f"閒家 {player_points} 點勝！"
    return f"和局！雙方 {banker_points} 點"


@dataclass(frozen=True)
class DealStep:
    """The table right after one card is dealt."""

    side: Side
    card: Card
    player_cards: tuple[Card, ...]
    banker_cards: tuple[Card, ...]
    message: str

    @property
    def player_points(self) -> int:
        return calculate_points(self.player_cards)

    @property
    def banker_points(self) -> int:
        return calculate_points(self.banker_cards)


@dataclass
class BaccaratPlayer:
    """A seat's bets and balance during a coup."""

    id: str
    name: str
    chips: int
    is_ai: bool = False
    bets: list[BaccaratBet] = field(default_factory=list)
    round_winnings: int = 0
    round_start_chips: int = 0
    quote: str | None = None

    @classmethod
    def from_seat(cls, seat: Seat) -> "BaccaratPlayer":
        return cls(
            id=seat.id,
            name=seat.name,
            chips=seat.chips,
            is_ai=seat.is_ai,
            round_start_chips=seat.chips,
        )

    @property
    def total_bet_amount(self) -> int:
        return sum(bet.amount for bet in self.bets)

    def bet_on(self, bet_type: BetType) -> int:
        """Amount currently staked on one bet type."""
        return sum(bet.amount for bet in self.bets if bet.type == bet_type)

    def reset_round(self) -> None:
        self.bets = []
        self.round_winnings = 0
        self.quote = None
        self.round_start_chips = self.chips


class BaccaratGame:
    """
    Baccarat table engine using a state machine.

    The human seat places bets during BETTING; NPC seats bet when the deal
    starts. A coup can be run in one call (``start_deal``) or card by card
    (``iter_deal``) so a presentation layer can pace the animation. The shoe
    uses a fixed cut card; once it is reached the shoe is rebuilt on the next
    ``reset_round`` and the roadmap history starts over.
    """

    STATES = [p.name.lower() for p in BaccaratPhase]

    TRANSITIONS = [
        {"trigger": "begin_deal", "source": "betting", "dest": "dealing"},
        {"trigger": "finish_coup", "source": "dealing", "dest": "result"},
        {"trigger": "next_round", "source": ["result", "betting"], "dest": "betting"},
    ]

    def __init__(
        self,
        seats: Sequence[Seat],
        rules: BaccaratRules | None = None,
        npc_profiles: Sequence[NpcProfile] = (),
        on_profiles_update: ProfilesCallback | None = None,
        rng: Random | None = None,
    ) -> None:
        """
        Initialize a new baccarat table.

        Args:
            seats: Players in seat order; at most one should be human
            rules: Table rules (uses configured defaults if not provided)
            npc_profiles: Profiles supplying NPC quotes
            on_profiles_update: Receives chip balances and results after each coup
            rng: Random number generator for reproducible games
        """
        self.rules = rules or BaccaratRules.from_config()
        self.players = [BaccaratPlayer.from_seat(seat) for seat in seats]
        self.npc_profiles = list(npc_profiles)
        self.events = EventEmitter()

        self._rng = rng or Random()
        self._on_profiles_update = on_profiles_update

        self.shoe = Shoe.build(self.rules.num_decks, rng=self._rng)
        self.banker_cards: list[Card] = []
        self.player_cards: list[Card] = []
        self.history: list[BaccaratHistoryItem] = []
        self.result: BaccaratResult | None = None
        self.message = MSG_PLACE_BETS
        self._processing = False
        self._coup_number = 0

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="betting",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def phase(self) -> BaccaratPhase:
        """Get current phase as enum."""
        return BaccaratPhase[self._machine_state.upper()]  # type: ignore[attr-defined]

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to table events."""
        self.events.subscribe(handler, event_type)

    # ------------------------------------------------------------------
    # Derived state

    @property
    def player(self) -> BaccaratPlayer | None:
        """The human seat."""
        return next((p for p in self.players if not p.is_ai), None)

    @property
    def banker_points(self) -> int:
        return calculate_points(self.banker_cards)

    @property
    def player_points(self) -> int:
        return calculate_points(self.player_cards)

    @property
    def banker_pair(self) -> bool:
        return is_pair(self.banker_cards)

    @property
    def player_pair(self) -> bool:
        return is_pair(self.player_cards)

    @property
    def shuffle_pending(self) -> bool:
        return self.shoe.shuffle_pending

    @property
    def cards_remaining(self) -> int:
        return self.shoe.cards_remaining

    @property
    def shoe_size(self) -> int:
        return self.shoe.shoe_size

    @property
    def can_bet(self) -> bool:
        return self.phase == BaccaratPhase.BETTING and not self._processing

    # ------------------------------------------------------------------
    # Betting

    def place_bet(self, bet_type: BetType, amount: int) -> bool:
        """
        Add chips to one of the human player's bets.

        Bets of the same type accumulate. The bet is refused if the player's
        total stake would exceed their chips.
        """
        player = self.player
        if not self.can_bet or player is None:
            return self._reject("Cannot bet in current state", state=self.phase.name)
        if amount <= 0:
            return self._reject("Bet amount must be positive", amount=amount)
        if player.total_bet_amount + amount > player.chips:
            return self._reject(
                MSG_INSUFFICIENT_CHIPS,
                EventType.INSUFFICIENT_FUNDS,
                display=True,
                required=player.total_bet_amount + amount,
                available=player.chips,
            )

        existing = next((b for b in player.bets if b.type == bet_type), None)
        if existing is None:
            player.bets.append(BaccaratBet(bet_type, amount))
        else:
            existing.amount += amount

        self.events.emit_new(
            EventType.BET_PLACED,
            player=player.name,
            bet_type=bet_type.value,
            amount=amount,
        )
        return True

    def clear_bets(self) -> bool:
        """Withdraw every bet on the table."""
        if not self.can_bet:
            return self._reject("Cannot clear bets in current state", state=self.phase.name)
        if any(p.bets for p in self.players):
            for player in self.players:
                player.bets = []
            self.events.emit_new(EventType.BETS_CLEARED)
        return True

    def _place_ai_bets(self) -> None:
        for player in self.players:
            if not player.is_ai:
                continue
            player.bets = calculate_ai_bet(player.chips, self.rules.min_bet, self._rng)
            for bet in player.bets:
                self.events.emit_new(
                    EventType.BET_PLACED,
                    player=player.name,
                    bet_type=bet.type.value,
                    amount=bet.amount,
                )

    # ------------------------------------------------------------------
    # Dealing

    def start_deal(self) -> bool:
        """
        Deal and settle a whole coup.

        A coup left unfinished by an abandoned ``iter_deal`` iterator is run
        to settlement instead of starting a new one.

        Returns:
            True if a coup was dealt
        """
        if self.phase == BaccaratPhase.DEALING and not self._processing:
            self._complete_coup()
            return True

        steps = self.iter_deal()
        if steps is None:
            return False
        for _ in steps:
            pass
        return True

    def iter_deal(self) -> Iterator[DealStep] | None:
        """
        Start a coup and return an iterator yielding one step per card.

        NPC bets are placed and every stake is taken before the first card.
        The coup settles when the iterator is exhausted. Progress is kept on
        the table, so an iterator dropped part-way is finished later by
        ``start_deal`` or ``reset_round``. Returns None if the deal is refused.
        """
        player = self.player
        if self.phase != BaccaratPhase.BETTING or self._processing:
            self._reject("Cannot deal in current state", state=self.phase.name)
            return None
        if player is None or not player.bets:
            self._reject(MSG_BET_FIRST, display=True)
            return None

        if self.shoe.cards_remaining < MAX_CARDS_PER_COUP:
            self._reshuffle()

        self._processing = True
        try:
            self._place_ai_bets()
            for seat in self.players:
                seat.round_start_chips = seat.chips
                seat.chips -= seat.total_bet_amount

            self.banker_cards = []
            self.player_cards = []
            self.result = None
            self._coup_number += 1
            self.begin_deal()
            self.message = MSG_DEALING
            self.events.emit_new(
                EventType.ROUND_STARTED,
                stakes={p.name: p.total_bet_amount for p in self.players if p.bets},
            )
        finally:
            self._processing = False
        return self._deal_steps(self._coup_number)

    def _deal_steps(self, coup: int) -> Iterator[DealStep]:
        # Stops quietly once the coup has been settled elsewhere
        while self.phase == BaccaratPhase.DEALING and coup == self._coup_number:
            step = self._run_step()
            if step is None:
                return
            yield step

    def _complete_coup(self) -> None:
        while self.phase == BaccaratPhase.DEALING and self._run_step() is not None:
            pass

    def _run_step(self) -> DealStep | None:
        self._processing = True
        try:
            return self._advance_coup()
        finally:
            self._processing = False

    def _advance_coup(self) -> DealStep | None:
        """
        Deal the next card the tableau calls for, or settle the coup.

        Every decision is read off the cards already on the table, so the
        coup can be resumed from any point.
        """
        if len(self.banker_cards) < 2:
            side = Side.PLAYER if len(self.player_cards) == len(self.banker_cards) else Side.BANKER
            return self._deal_to(side)

        player_points = calculate_points(self.player_cards[:2])
        banker_points = calculate_points(self.banker_cards[:2])
        natural = is_natural(player_points) or is_natural(banker_points)

        if natural:
            both = is_natural(player_points) and is_natural(banker_points)
            self.message = MSG_DOUBLE_NATURAL if both else MSG_NATURAL
            self.events.emit_new(
                EventType.NATURAL,
                player_points=player_points,
                banker_points=banker_points,
            )
        else:
            if len(self.player_cards) == 2 and should_player_draw(player_points):
                self.message = MSG_PLAYER_DRAWS
                step = self._deal_to(Side.PLAYER)
                self.events.emit_new(EventType.THIRD_CARD, side=Side.PLAYER.value, card=str(step.card))
                return step

            player_drew = len(self.player_cards) == 3
            third_value = card_point_value(self.player_cards[2]) if player_drew else None
            if len(self.banker_cards) == 2 and should_banker_draw(banker_points, player_drew, third_value):
                self.message = MSG_BANKER_DRAWS
                step = self._deal_to(Side.BANKER)
                self.events.emit_new(EventType.THIRD_CARD, side=Side.BANKER.value, card=str(step.card))
                return step

        self._settle(natural)
        return None

    def _deal_to(self, side: Side) -> DealStep:
        card = self.shoe.draw()
        if card is None:
            # Shoe was topped up before the deal; only a hand-built shoe runs dry
            raise RuntimeError("Shoe ran out of cards mid-coup")
        target = self.player_cards if side == Side.PLAYER else self.banker_cards
        target.append(card)
        self.events.emit_new(EventType.CARD_DEALT, card=str(card), hand=side.value)
        return DealStep(
            side=side,
            card=card,
            player_cards=tuple(self.player_cards),
            banker_cards=tuple(self.banker_cards),
            message=self.message,
        )

    # ------------------------------------------------------------------
    # Settlement

    def _settle(self, natural: bool) -> None:
        banker_points = self.banker_points
        player_points = self.player_points
        result = evaluate_result(banker_points, player_points)
        banker_pair = self.banker_pair
        player_pair = self.player_pair

        self.result = result
        self.history.append(
            BaccaratHistoryItem(
                result=result,
                banker_points=banker_points,
                player_points=player_points,
                banker_pair=banker_pair,
                player_pair=player_pair,
                is_natural=natural,
            )
        )
        if self.shoe.shuffle_pending:
            self.events.emit_new(EventType.RESHUFFLE_REQUIRED, cards_remaining=self.shoe.cards_remaining)

        updates: list[ProfileUpdate] = []
        for player in self.players:
            winnings = 0
            for bet in player.bets:
                payout = calculate_bet_payout(bet.type, bet.amount, result, banker_pair, player_pair)
                winnings += payout
                self.events.emit_new(
                    EventType.BET_RESOLVED,
                    player=player.name,
                    bet_type=bet.type.value,
                    amount=bet.amount,
                    payout=payout,
                )
            player.chips += player.total_bet_amount + winnings
            player.round_winnings = winnings

            if player.is_ai and player.bets:
                profile = find_profile(self.npc_profiles, player.name)
                if profile is not None:
                    event = reaction_event(
                        result, player.bets, winnings, natural, banker_pair, player_pair
                    )
                    if event is not None:
                        player.quote = get_baccarat_quote(event, profile, self._rng)
                    else:
                        player.quote = get_ai_quote(result, player.bets, profile, self._rng)

            outcome = BetOutcome.WIN if winnings > 0 else BetOutcome.LOSE if winnings < 0 else BetOutcome.PUSH
            updates.append(ProfileUpdate(player.name, player.chips, outcome.value))

        self.message = result_message(result, banker_points, player_points)
        self.finish_coup()

        logger.info(
            "Baccarat coup settled: %s (banker %d, player %d)",
            result.value,
            banker_points,
            player_points,
        )
        self.events.emit_new(
            EventType.ROUND_ENDED,
            result=result.value,
            banker_points=banker_points,
            player_points=player_points,
            winnings={p.name: p.round_winnings for p in self.players},
        )
        if self._on_profiles_update is not None:
            self._on_profiles_update(updates)

    # ------------------------------------------------------------------
    # Round reset

    def reset_round(self) -> bool:
        """
        Clear the table for the next coup.

        A coup still being dealt is first run to settlement. A pending
        reshuffle is carried out here: the shoe is rebuilt and the roadmap
        history is cleared. NPCs with a profile pass the time with one of
        their WAITING lines.
        """
        if self._processing:
            return self._reject("Cannot reset during a coup", state=self.phase.name)
        if self.phase == BaccaratPhase.DEALING:
            self._complete_coup()

        was_result = self.phase == BaccaratPhase.RESULT
        self.banker_cards = []
        self.player_cards = []
        self.result = None
        self.message = MSG_PLACE_BETS
        for player in self.players:
            player.reset_round()
            profile = find_profile(self.npc_profiles, player.name) if player.is_ai else None
            if profile is not None:
                player.quote = get_baccarat_quote(QuoteEvent.WAITING, profile, self._rng) or None

        if self.shoe.shuffle_pending:
            self._reshuffle()
            self.history = []
            self.message = MSG_RESHUFFLED

        self.next_round()
        if was_result:
            self.events.emit_new(EventType.ROUND_RESET)
        return True

    def _reshuffle(self) -> None:
        self.shoe = Shoe.build(self.rules.num_decks, rng=self._rng)
        logger.info("Baccarat shoe reshuffled: %d cards", self.shoe.shoe_size)
        self.events.emit_new(
            EventType.SHOE_SHUFFLED,
            shoe_size=self.shoe.shoe_size,
            cut_card_position=self.shoe.cut_card_position,
        )

    def _reject(
        self,
        message: str,
        event_type: EventType = EventType.INVALID_ACTION,
        display: bool = False,
        **data: Any,
    ) -> bool:
        """Report a rejected action, showing the message at the table if asked."""
        if display:
            self.message = message
        self.events.emit_new(event_type, message=message, **data)
        return False
