"""Multi-seat blackjack table engine with state machine."""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from random import Random
from typing import Any, Callable, Sequence

from transitions import Machine

from tablegames.cards import Card
from tablegames.events import EventEmitter, EventType, GameEvent
from tablegames.players import (
    ChipsResolver,
    NpcProfile,
    ProfileUpdate,
    ProfilesCallback,
    Seat,
    find_profile,
    pick_quote,
)
from tablegames.shoe import Shoe
from tablegames.blackjack.hand import Hand, hand_value, is_blackjack, split_status
from tablegames.blackjack.rules import BlackjackRules, roll_cut_card_owner
from tablegames.blackjack.state import BlackjackPhase, HandResult, HandStatus
from tablegames.blackjack.strategy import Action, NpcStrategy, decide_npc_bet

logger = logging.getLogger(__name__)

MSG_INSUFFICIENT_CHIPS = "餘額不足，無法下注"
MSG_CUT_ROLL_REQUIRED = "請先擲骰決定插牌者"
MSG_CUT_CARD_REACHED = "切牌已到，請擲骰重設牌靴"
MSG_DEALER_BLACKJACK = "莊家 BlackJack"
MSG_ROUND_SETTLED = "本局結算完成"


@dataclass(frozen=True)
class TurnRef:
    """Identifies one hand in deal order."""

    player_index: int
    hand_index: int


@dataclass
class BlackjackPlayer:
    """A seat's state during a round."""

    id: str
    name: str
    chips: int
    is_ai: bool = False
    avatar: str = ""
    hands: list[Hand] = field(default_factory=list)
    quote: str | None = None
    overall_result: HandResult | None = None
    round_start_chips: int | None = None

    @classmethod
    def from_seat(cls, seat: Seat) -> "BlackjackPlayer":
        return cls(id=seat.id, name=seat.name, chips=seat.chips, is_ai=seat.is_ai)

    @property
    def bet_placed(self) -> bool:
        return any(hand.bet > 0 for hand in self.hands)

    def reset_round(self) -> None:
        self.hands = []
        self.quote = None
        self.overall_result = None
        self.round_start_chips = None


def hand_order(players: Sequence[BlackjackPlayer]) -> list[TurnRef]:
    """Every hand in deal order: all hands of player 0, then player 1, ..."""
    return [
        TurnRef(p_idx, h_idx)
        for p_idx, player in enumerate(players)
        for h_idx in range(len(player.hands))
    ]


def find_next_playable(
    players: Sequence[BlackjackPlayer],
    after: TurnRef | None = None,
) -> TurnRef | None:
    """Find the first PLAYING hand after ``after`` (or from the start)."""
    order = hand_order(players)
    start = order.index(after) + 1 if after in order else 0
    for turn in order[start:]:
        if players[turn.player_index].hands[turn.hand_index].status == HandStatus.PLAYING:
            return turn
    return None


class BlackjackGame:
    """
    Blackjack table engine using a state machine.

    Seats play against a single dealer from one shared shoe. Human actions go
    through ``hit``/``stand``/``split``; NPC seats act one decision at a time
    through ``play_npc_turn`` so the caller controls pacing. Illegal actions
    are rejected with ``False`` and an event, never an exception.
    """

    STATES = [p.name.lower() for p in BlackjackPhase]

    TRANSITIONS = [
        {"trigger": "begin_play", "source": "betting", "dest": "playing"},
        {"trigger": "dealer_blackjack", "source": "betting", "dest": "result"},
        {"trigger": "players_done", "source": "playing", "dest": "dealer"},
        {"trigger": "settle", "source": "dealer", "dest": "result"},
        {"trigger": "new_round", "source": ["result", "betting"], "dest": "betting"},
    ]

    def __init__(
        self,
        seats: Sequence[Seat],
        rules: BlackjackRules | None = None,
        npc_profiles: Sequence[NpcProfile] = (),
        on_profiles_update: ProfilesCallback | None = None,
        resolve_chips: ChipsResolver | None = None,
        rng: Random | None = None,
    ) -> None:
        """
        Initialize a new blackjack table.

        Args:
            seats: Players in seat order; at most one should be human
            rules: Table rules (uses configured defaults if not provided)
            npc_profiles: Profiles supplying NPC quotes and replacement NPCs
            on_profiles_update: Receives chip balances and results after each round
            resolve_chips: Looks up a profile's stored chips by name
            rng: Random number generator for reproducible games
        """
        self.rules = rules or BlackjackRules.from_config()
        self.players = [BlackjackPlayer.from_seat(seat) for seat in seats]
        self.npc_profiles = list(npc_profiles)
        self.strategy = NpcStrategy()
        self.events = EventEmitter()

        self._rng = rng or Random()
        self._on_profiles_update = on_profiles_update
        self._resolve_chips = resolve_chips

        # No shoe until the first cut-card roll
        self.shoe = Shoe([], 0)
        self.dealer_cards: list[Card] = []
        self.current_turn: TurnRef | None = None
        self.message = ""
        self.cut_roll_pending = True
        self.cut_card_owner = ""
        self.cut_card_rolls: dict[str, int] = {}
        self._player_bet = self.rules.min_bet
        self._processing = False

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="betting",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def phase(self) -> BlackjackPhase:
        """Get current phase as enum."""
        return BlackjackPhase[self._machine_state.upper()]  # type: ignore[attr-defined]

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
    def player_index(self) -> int:
        """Index of the human seat, or -1."""
        return next((i for i, p in enumerate(self.players) if not p.is_ai), -1)

    @property
    def player(self) -> BlackjackPlayer | None:
        idx = self.player_index
        return self.players[idx] if idx >= 0 else None

    @property
    def player_bet(self) -> int:
        return self._player_bet

    @player_bet.setter
    def player_bet(self, amount: int) -> None:
        chips = self.player.chips if self.player else 0
        self._player_bet = max(self.rules.min_bet, min(amount, chips))

    @property
    def shuffle_pending(self) -> bool:
        return self.shoe.shuffle_pending

    @property
    def dealer_visible(self) -> list[Card]:
        return [card for card in self.dealer_cards if card.face_up]

    @property
    def dealer_value(self) -> int:
        """Total of the dealer's face-up cards."""
        return hand_value(self.dealer_visible).total

    @property
    def dealer_up_card(self) -> Card | None:
        visible = self.dealer_visible
        return visible[0] if visible else None

    @property
    def dealer_up_value(self) -> int:
        card = self.dealer_up_card
        return card.rank.blackjack_value if card else 10

    @property
    def active_player(self) -> BlackjackPlayer | None:
        if self.current_turn is None:
            return None
        return self.players[self.current_turn.player_index]

    @property
    def active_hand(self) -> Hand | None:
        if self.current_turn is None:
            return None
        return self._hand_at(self.current_turn)

    @property
    def is_player_turn(self) -> bool:
        return (
            self.phase == BlackjackPhase.PLAYING
            and self.current_turn is not None
            and self.current_turn.player_index == self.player_index
        )

    @property
    def can_bet(self) -> bool:
        player = self.player
        return (
            self.phase == BlackjackPhase.BETTING
            and player is not None
            and player.chips >= self.rules.min_bet
        )

    @property
    def can_split_hand(self) -> bool:
        if not self.is_player_turn:
            return False
        player, hand = self.active_player, self.active_hand
        return player is not None and hand is not None and self._can_split(player, hand)

    # ------------------------------------------------------------------
    # Shoe

    def roll_cut_card(self) -> bool:
        """
        Run the cut-card ceremony and rebuild the shoe.

        Each seat rolls a die; the highest unique roll owns the cut. The shoe
        is rebuilt with a cut card placed inside the table's ratio range.
        """
        if self.phase != BlackjackPhase.BETTING or self._processing:
            return self._reject("Cannot reshuffle during a round")

        owner, rolls = roll_cut_card_owner([p.name for p in self.players], self._rng)
        self.shoe = Shoe.build(self.rules.num_decks, self.rules.cut_ratio_range, self._rng)
        self.cut_card_owner = owner
        self.cut_card_rolls = rolls
        self.cut_roll_pending = False
        self.message = f"擲骰完成：{owner} 插牌"

        logger.info("Cut card rolled by %s; %d cards in shoe", owner, self.shoe.shoe_size)
        self.events.emit_new(EventType.CUT_CARD_ROLLED, owner=owner, rolls=dict(rolls))
        self.events.emit_new(
            EventType.SHOE_SHUFFLED,
            shoe_size=self.shoe.shoe_size,
            cut_card_position=self.shoe.cut_card_position,
        )
        return True

    def _draw(self, face_up: bool = True, target: str = "") -> Card | None:
        was_pending = self.shoe.shuffle_pending
        card = self.shoe.draw(face_up)
        if card is None:
            return None
        self.events.emit_new(EventType.CARD_DEALT, card=str(card), hand=target)
        if self.shoe.shuffle_pending and not was_pending:
            self.events.emit_new(
                EventType.RESHUFFLE_REQUIRED,
                cards_remaining=self.shoe.cards_remaining,
            )
        return card

    # ------------------------------------------------------------------
    # Round flow

    def start_hand(self) -> bool:
        """
        Take bets and deal a new round.

        Returns:
            True if the round was dealt
        """
        if self.phase != BlackjackPhase.BETTING or self._processing:
            return self._reject("Cannot deal in current state", state=self.phase.name)

        player = self.player
        if player is None or player.chips < self.rules.min_bet:
            return self._reject(
                MSG_INSUFFICIENT_CHIPS,
                EventType.INSUFFICIENT_FUNDS,
                display=True,
                required=self.rules.min_bet,
                available=player.chips if player else 0,
            )

        if self.cut_roll_pending:
            return self._reject(MSG_CUT_ROLL_REQUIRED, display=True)

        active_seats = [p for p in self.players if p.chips >= self.rules.min_bet]
        needed = self.rules.min_cards_to_deal(len(active_seats))
        if self.shoe.shuffle_pending or self.shoe.cards_remaining < needed:
            self.cut_roll_pending = True
            self.events.emit_new(
                EventType.RESHUFFLE_REQUIRED,
                cards_remaining=self.shoe.cards_remaining,
                needed=needed,
            )
            return self._reject(MSG_CUT_CARD_REACHED, display=True)

        self._processing = True
        try:
            self._deal_round()
        finally:
            self._processing = False
        return True

    def _deal_round(self) -> None:
        min_bet = self.rules.min_bet
        self.dealer_cards = []
        self.current_turn = None
        self.message = ""

        for player in self.players:
            player.reset_round()
            player.round_start_chips = player.chips
            if player.chips < min_bet:
                continue

            if player.is_ai:
                bet = decide_npc_bet(player.chips, min_bet, self._rng)
            else:
                bet = min(max(self._player_bet, min_bet), player.chips)

            hand = Hand(id=f"{player.id}-hand-1", bet=bet, status=HandStatus.PLAYING)
            player.chips -= bet
            player.hands.append(hand)
            self.events.emit_new(EventType.BET_PLACED, player=player.name, amount=bet)

            for _ in range(2):
                card = self._draw(target=hand.id)
                if card is not None:
                    hand.add_card(card)
            if hand.is_blackjack:
                hand.status = HandStatus.BLACKJACK

        for face_up in (False, True):
            card = self._draw(face_up, target="dealer")
            if card is not None:
                self.dealer_cards.append(card)

        self.events.emit_new(EventType.ROUND_STARTED, seats=sum(1 for p in self.players if p.hands))

        if is_blackjack(self.dealer_cards):
            self._settle_dealer_blackjack()
            return

        self.begin_play()
        first = find_next_playable(self.players)
        if first is None:
            self._finish_dealer_turn()
        else:
            self._set_turn(first)

    def _settle_dealer_blackjack(self) -> None:
        self.dealer_cards = [card.revealed() for card in self.dealer_cards]
        self.events.emit_new(EventType.DEALER_BLACKJACK)

        for player in self.players:
            for hand in player.hands:
                if hand.status == HandStatus.BLACKJACK:
                    hand.result = HandResult.PUSH
                    player.chips += hand.bet
                elif hand.bet > 0:
                    hand.result = HandResult.LOSE
                self._emit_hand_result(player, hand)

        self.dealer_blackjack()
        self._settle_round(MSG_DEALER_BLACKJACK)

    def _set_turn(self, turn: TurnRef) -> None:
        self.current_turn = turn
        self.events.emit_new(
            EventType.TURN_CHANGED,
            player=self.players[turn.player_index].name,
            hand_index=turn.hand_index,
        )

    def _advance_turn(self, after: TurnRef) -> None:
        next_turn = find_next_playable(self.players, after)
        if next_turn is None:
            self._finish_dealer_turn()
        else:
            self._set_turn(next_turn)

    def _hand_at(self, turn: TurnRef) -> Hand | None:
        if not 0 <= turn.player_index < len(self.players):
            return None
        hands = self.players[turn.player_index].hands
        return hands[turn.hand_index] if 0 <= turn.hand_index < len(hands) else None

    # ------------------------------------------------------------------
    # Player actions

    def hit(self) -> bool:
        """Human player takes another card."""
        if not self.is_player_turn or self.current_turn is None:
            return self._reject("Not your turn")
        return self._hit_at(self.current_turn)

    def stand(self) -> bool:
        """Human player keeps the current hand."""
        if not self.is_player_turn or self.current_turn is None:
            return self._reject("Not your turn")
        return self._stand_at(self.current_turn)

    def split(self) -> bool:
        """Human player splits a pair."""
        if not self.is_player_turn or self.current_turn is None:
            return self._reject("Not your turn")
        return self._split_at(self.current_turn)

    def _hit_at(self, turn: TurnRef) -> bool:
        hand = self._hand_at(turn)
        if self.phase != BlackjackPhase.PLAYING or hand is None or hand.status != HandStatus.PLAYING:
            return self._reject("Cannot hit")

        card = self._draw(target=hand.id)
        if card is None:
            return self._reject("Shoe is empty")
        hand.add_card(card)

        total = hand.total
        if total > 21:
            hand.status = HandStatus.BUST
            hand.result = HandResult.LOSE
        elif total == 21:
            hand.status = HandStatus.STAND

        self.events.emit_new(EventType.PLAYER_HIT, hand=hand.id, hand_value=total)
        if hand.status == HandStatus.BUST:
            self.events.emit_new(EventType.PLAYER_BUSTS, hand=hand.id)

        if hand.status != HandStatus.PLAYING:
            self._advance_turn(turn)
        return True

    def _stand_at(self, turn: TurnRef) -> bool:
        hand = self._hand_at(turn)
        if self.phase != BlackjackPhase.PLAYING or hand is None or hand.status != HandStatus.PLAYING:
            return self._reject("Cannot stand")

        hand.status = HandStatus.STAND
        self.events.emit_new(EventType.PLAYER_STAND, hand=hand.id, hand_value=hand.total)
        self._advance_turn(turn)
        return True

    def _can_split(self, player: BlackjackPlayer, hand: Hand) -> bool:
        return (
            hand.status == HandStatus.PLAYING
            and hand.is_splittable
            and player.chips >= hand.bet
        )

    def _split_at(self, turn: TurnRef) -> bool:
        hand = self._hand_at(turn)
        if self.phase != BlackjackPhase.PLAYING or hand is None:
            return self._reject("Cannot split")
        player = self.players[turn.player_index]
        if not self._can_split(player, hand):
            return self._reject("Cannot split")
        if self.shoe.cards_remaining < 2:
            return self._reject("Shoe is empty")

        first, second = hand.cards
        extra_first = self._draw(target=f"{hand.id}-a")
        extra_second = self._draw(target=f"{hand.id}-b")
        if extra_first is None or extra_second is None:
            return self._reject("Shoe is empty")

        split_hands = []
        for suffix, cards in (("a", [first, extra_first]), ("b", [second, extra_second])):
            status = split_status(cards) if first.is_ace else HandStatus.PLAYING
            split_hands.append(
                Hand(
                    id=f"{hand.id}-{suffix}",
                    cards=cards,
                    bet=hand.bet,
                    status=status,
                    result=HandResult.LOSE if status == HandStatus.BUST else None,
                    is_split_hand=True,
                )
            )

        player.hands[turn.hand_index:turn.hand_index + 1] = split_hands
        player.chips -= hand.bet
        self.events.emit_new(
            EventType.PLAYER_SPLIT,
            player=player.name,
            hand1_value=split_hands[0].total,
            hand2_value=split_hands[1].total,
        )

        if split_hands[0].status != HandStatus.PLAYING:
            self._advance_turn(turn)
        else:
            self._set_turn(turn)
        return True

    # ------------------------------------------------------------------
    # NPC turns

    def play_npc_turn(self) -> bool:
        """
        Make one decision for the NPC whose hand is current.

        Returns:
            True if an NPC acted, False if it is not an NPC's turn
        """
        turn = self.current_turn
        if self.phase != BlackjackPhase.PLAYING or turn is None:
            return False
        player, hand = self.active_player, self.active_hand
        if player is None or hand is None or not player.is_ai or hand.status != HandStatus.PLAYING:
            return False

        total, soft = hand.value
        pair_rank = hand.cards[0].rank if self._can_split(player, hand) else None
        action = self.strategy.decide(total, self.dealer_up_value, soft, pair_rank)
        logger.debug("%s holds %d (soft=%s) vs %d: %s", player.name, total, soft, self.dealer_up_value, action)

        if action == Action.SPLIT:
            return self._split_at(turn)
        if action == Action.HIT:
            return self._hit_at(turn)
        return self._stand_at(turn)

    def run_npc_turns(self) -> int:
        """Play NPC decisions until a human must act or the round ends."""
        moves = 0
        while self.play_npc_turn():
            moves += 1
        return moves

    # ------------------------------------------------------------------
    # Dealer and settlement

    def _dealer_should_hit(self) -> bool:
        total, soft = hand_value(self.dealer_cards)
        if total < 17:
            return True
        return total == 17 and soft and self.rules.dealer_hits_soft_17

    def _finish_dealer_turn(self) -> None:
        self.players_done()
        self.current_turn = None

        self.dealer_cards = [card.revealed() for card in self.dealer_cards]
        self.events.emit_new(
            EventType.DEALER_REVEALS,
            cards=[str(card) for card in self.dealer_cards],
            hand_value=hand_value(self.dealer_cards).total,
        )

        while self._dealer_should_hit():
            card = self._draw(target="dealer")
            if card is None:
                break
            self.dealer_cards.append(card)
            self.events.emit_new(EventType.DEALER_HITS, hand_value=hand_value(self.dealer_cards).total)

        dealer_total = hand_value(self.dealer_cards).total
        if dealer_total > 21:
            self.events.emit_new(EventType.DEALER_BUSTS, hand_value=dealer_total)
        else:
            self.events.emit_new(EventType.DEALER_STANDS, hand_value=dealer_total)

        self._evaluate_round()

    def _returns(self, bet: int, multiple: Decimal | int) -> int:
        """Chips returned for a stake at a total-return multiple, rounded down."""
        return int(Decimal(bet) * Decimal(multiple))

    def _evaluate_round(self) -> None:
        dealer_total = hand_value(self.dealer_cards).total
        dealer_blackjack = is_blackjack(self.dealer_cards)

        for player in self.players:
            for hand in player.hands:
                if hand.bet <= 0:
                    continue
                result, returned = self._resolve_hand(hand, dealer_total, dealer_blackjack)
                hand.result = result
                player.chips += returned
                self._emit_hand_result(player, hand, returned)

        self.settle()
        self._settle_round(MSG_ROUND_SETTLED)

    def _resolve_hand(
        self,
        hand: Hand,
        dealer_total: int,
        dealer_blackjack: bool,
    ) -> tuple[HandResult, int]:
        """Return a hand's result and the chips paid back to its owner."""
        if hand.status == HandStatus.BUST:
            return HandResult.LOSE, 0

        if dealer_blackjack:
            if hand.is_natural:
                return HandResult.PUSH, hand.bet
            return HandResult.LOSE, 0

        if hand.is_natural:
            return HandResult.BLACKJACK, self._returns(hand.bet, self.rules.blackjack_return)

        if dealer_total > 21 or hand.total > dealer_total:
            return HandResult.WIN, self._returns(hand.bet, self.rules.win_return)
        if hand.total < dealer_total:
            return HandResult.LOSE, 0
        return HandResult.PUSH, hand.bet

    def _emit_hand_result(self, player: BlackjackPlayer, hand: Hand, returned: int = 0) -> None:
        if hand.result is None:
            return
        self.events.emit_new(
            EventType.HAND_RESOLVED,
            player=player.name,
            hand=hand.id,
            result=hand.result.value,
            returned=returned,
        )

    def _settle_round(self, message: str) -> None:
        updates: list[ProfileUpdate] = []
        for player in self.players:
            if not player.bet_placed:
                player.overall_result = None
                continue
            start = player.round_start_chips if player.round_start_chips is not None else player.chips
            delta = player.chips - start
            if delta > 0:
                has_blackjack = any(h.result == HandResult.BLACKJACK for h in player.hands)
                player.overall_result = HandResult.BLACKJACK if has_blackjack else HandResult.WIN
            elif delta < 0:
                player.overall_result = HandResult.LOSE
            else:
                player.overall_result = HandResult.PUSH
            updates.append(ProfileUpdate(player.name, player.chips, player.overall_result.value))

        for player in self.players:
            if player.is_ai:
                profile = find_profile(self.npc_profiles, player.name)
                player.quote = pick_quote(profile, player.overall_result, self._rng)

        self.current_turn = None
        self.message = message
        logger.info(
            "Blackjack round settled: dealer %d, %s",
            hand_value(self.dealer_cards).total,
            ", ".join(f"{u.name}={u.result}" for u in updates) or "no bets",
        )
        self.events.emit_new(
            EventType.ROUND_ENDED,
            dealer_value=hand_value(self.dealer_cards).total,
            results={u.name: u.result for u in updates},
        )
        if self._on_profiles_update is not None:
            self._on_profiles_update(updates)

    def reset_to_betting(self) -> bool:
        """
        Clear the table for the next round.

        NPC seats that can no longer cover the minimum bet are handed to the
        next NPC profile not already seated whose stored chips cover it.
        """
        if self.phase not in (BlackjackPhase.RESULT, BlackjackPhase.BETTING) or self._processing:
            return self._reject("Cannot reset during a round", state=self.phase.name)

        min_bet = self.rules.min_bet
        seated = {p.name for p in self.players}
        available: list[NpcProfile] = []
        if self._resolve_chips is not None:
            available = [
                npc for npc in self.npc_profiles
                if npc.name not in seated and self._resolve_chips(npc.name) >= min_bet
            ]

        for player in self.players:
            player.reset_round()
            if player.is_ai and player.chips < min_bet and available:
                npc = available.pop(0)
                logger.info("%s leaves the table; %s sits down", player.name, npc.name)
                player.name = npc.name
                player.avatar = npc.avatar
                player.chips = self._resolve_chips(npc.name)  # type: ignore[misc]

        self.dealer_cards = []
        self.message = ""
        self.current_turn = None
        self.new_round()
        self.events.emit_new(EventType.ROUND_RESET)
        return True

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
