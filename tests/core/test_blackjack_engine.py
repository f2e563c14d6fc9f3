"""Tests for the blackjack table engine."""

import pytest

from tablegames.events import EventType
from tablegames.players import Seat
from tablegames.shoe import Shoe
from tablegames.blackjack import BlackjackGame, BlackjackRules
from tablegames.blackjack.engine import (
    MSG_CUT_CARD_REACHED,
    MSG_CUT_ROLL_REQUIRED,
    MSG_DEALER_BLACKJACK,
    MSG_INSUFFICIENT_CHIPS,
    TurnRef,
    find_next_playable,
)
from tablegames.blackjack.state import BlackjackPhase, HandResult, HandStatus


@pytest.fixture
def scripted(blackjack_game, stack_shoe):
    """Deal a heads-up round of 100 from a scripted shoe."""

    def deal(*draw_order, **shoe_options):
        blackjack_game.shoe = stack_shoe(draw_order, **shoe_options)
        blackjack_game.player_bet = 100
        assert blackjack_game.start_hand()
        return blackjack_game

    return deal


@pytest.fixture
def npc_table(human_seat, npc_seats, npc_profiles, blackjack_rules, rng, stack_shoe):
    """NPC in seat one, the human in seat two."""
    updates = []
    game = BlackjackGame(
        [npc_seats[0], human_seat],
        rules=blackjack_rules,
        npc_profiles=npc_profiles,
        on_profiles_update=updates.extend,
        rng=rng,
    )
    game.roll_cut_card()
    # NPC 10-7, human 10-9, dealer 10 in the hole and 6 up
    game.shoe = stack_shoe(["10S", "7H", "10D", "9C", "10C", "6D"])
    return game, updates


class TestDealing:
    """Tests for starting a round."""

    def test_initial_deal(self, scripted):
        game = scripted("10S", "9H", "5C", "7D")

        assert game.phase == BlackjackPhase.PLAYING
        hand = game.player.hands[0]
        assert [str(c) for c in hand.cards] == ["10♠", "9♥"]
        assert hand.bet == 100
        assert hand.status == HandStatus.PLAYING
        assert game.player.chips == 900
        assert game.current_turn == TurnRef(0, 0)
        assert game.is_player_turn

    def test_dealer_hole_card_hidden(self, scripted):
        """The dealer's first card is dealt face down."""
        game = scripted("10S", "9H", "5C", "7D")

        assert not game.dealer_cards[0].face_up
        assert game.dealer_cards[1].face_up
        assert game.dealer_value == 7
        assert game.dealer_up_value == 7

    def test_card_events(self, scripted):
        game = scripted("10S", "9H", "5C", "7D")
        assert len(game.events.of_type(EventType.CARD_DEALT)) == 4

    def test_cut_roll_required(self, human_seat, rng):
        """A fresh table refuses to deal until the cut card is rolled."""
        game = BlackjackGame([human_seat], rules=BlackjackRules(), rng=rng)

        assert not game.start_hand()
        assert game.message == MSG_CUT_ROLL_REQUIRED
        assert game.phase == BlackjackPhase.BETTING

    def test_insufficient_chips(self, rng):
        game = BlackjackGame([Seat("human", "You", 5)], rules=BlackjackRules(), rng=rng)
        game.roll_cut_card()

        assert not game.start_hand()
        assert game.message == MSG_INSUFFICIENT_CHIPS
        assert game.events.of_type(EventType.INSUFFICIENT_FUNDS)

    def test_pending_reshuffle_blocks_deal(self, blackjack_game):
        blackjack_game.shoe.shuffle_pending = True

        assert not blackjack_game.start_hand()
        assert blackjack_game.message == MSG_CUT_CARD_REACHED
        assert blackjack_game.cut_roll_pending

    def test_short_shoe_blocks_deal(self, blackjack_game, stack_shoe):
        """A heads-up round needs at least ten cards in the shoe."""
        blackjack_game.shoe = stack_shoe(["10S", "9H", "5C"], padding=6)

        assert not blackjack_game.start_hand()
        assert blackjack_game.cut_roll_pending

    def test_crossing_cut_card_requires_roll(self, scripted):
        game = scripted("10S", "9H", "10C", "7D", cut_card_position=3)
        assert game.shuffle_pending
        assert game.events.of_type(EventType.RESHUFFLE_REQUIRED)

        game.stand()
        game.reset_to_betting()
        assert not game.start_hand()
        assert game.cut_roll_pending

        assert game.roll_cut_card()
        assert not game.shuffle_pending
        assert game.start_hand()

    def test_player_bet_clamped(self, blackjack_game):
        blackjack_game.player_bet = 5
        assert blackjack_game.player_bet == 10
        blackjack_game.player_bet = 5000
        assert blackjack_game.player_bet == 1000

    def test_deal_rejected_mid_round(self, scripted):
        game = scripted("10S", "9H", "5C", "7D")
        assert not game.start_hand()


class TestCutCard:
    """Tests for the cut-card ceremony."""

    def test_roll_rebuilds_shoe(self, human_seat, rng):
        game = BlackjackGame([human_seat], rules=BlackjackRules(), rng=rng)
        assert game.roll_cut_card()

        assert game.shoe.shoe_size == 312
        assert game.cut_card_owner == "You"
        assert not game.cut_roll_pending
        assert 62 <= game.shoe.cut_card_remaining <= 78
        assert game.events.of_type(EventType.CUT_CARD_ROLLED)

    def test_roll_rejected_mid_round(self, scripted):
        game = scripted("10S", "9H", "5C", "7D")
        assert not game.roll_cut_card()


class TestPlayerActions:
    """Tests for hit, stand and split."""

    def test_hit_keeps_turn(self, scripted):
        game = scripted("5S", "6H", "10C", "7D", "2S")

        assert game.hit()
        assert game.player.hands[0].total == 13
        assert game.current_turn == TurnRef(0, 0)
        assert game.phase == BlackjackPhase.PLAYING

    def test_hit_to_21_stands(self, scripted):
        game = scripted("5S", "6H", "10C", "7D", "10H")

        assert game.hit()
        hand = game.player.hands[0]
        assert hand.status == HandStatus.STAND
        assert hand.result == HandResult.WIN
        assert game.phase == BlackjackPhase.RESULT
        assert game.player.chips == 1100

    def test_hit_bust(self, scripted):
        game = scripted("10S", "6H", "10C", "7D", "KS")

        assert game.hit()
        hand = game.player.hands[0]
        assert hand.total == 26
        assert hand.status == HandStatus.BUST
        assert hand.result == HandResult.LOSE
        assert game.phase == BlackjackPhase.RESULT
        assert game.player.chips == 900

    def test_stand_and_lose(self, scripted):
        game = scripted("10S", "8H", "10C", "9D")

        assert game.stand()
        assert game.player.hands[0].result == HandResult.LOSE
        assert game.player.overall_result == HandResult.LOSE

    def test_push_returns_bet(self, scripted):
        game = scripted("10S", "8H", "10C", "8D")

        game.stand()
        assert game.player.hands[0].result == HandResult.PUSH
        assert game.player.overall_result == HandResult.PUSH
        assert game.player.chips == 1000

    def test_actions_outside_turn_rejected(self, blackjack_game):
        """Actions in BETTING are no-ops reported as invalid."""
        assert not blackjack_game.hit()
        assert not blackjack_game.stand()
        assert not blackjack_game.split()
        assert len(blackjack_game.events.of_type(EventType.INVALID_ACTION)) == 3
        assert blackjack_game.phase == BlackjackPhase.BETTING

    def test_split_pair(self, scripted):
        game = scripted("8S", "8H", "10C", "7D", "3C", "2D")

        assert game.can_split_hand
        assert game.split()

        first, second = game.player.hands
        assert first.id.endswith("-a") and second.id.endswith("-b")
        assert [str(c) for c in first.cards] == ["8♠", "3♣"]
        assert [str(c) for c in second.cards] == ["8♥", "2♦"]
        assert first.is_split_hand and second.is_split_hand
        assert first.bet == second.bet == 100
        assert game.player.chips == 800
        assert game.current_turn == TurnRef(0, 0)
        assert not game.can_split_hand

    def test_split_hands_played_in_order(self, scripted):
        game = scripted("8S", "8H", "10C", "7D", "3C", "2D")
        game.split()

        game.stand()
        assert game.current_turn == TurnRef(0, 1)
        game.stand()
        assert game.phase == BlackjackPhase.RESULT
        assert [h.result for h in game.player.hands] == [HandResult.LOSE, HandResult.LOSE]
        assert game.player.chips == 800

    def test_split_aces_auto_evaluated(self, scripted):
        """A split ace drawing a ten stands on 21 and the turn moves on."""
        game = scripted("AS", "AH", "10C", "7D", "KC", "5D")
        game.split()

        first, second = game.player.hands
        assert first.status == HandStatus.STAND
        assert second.status == HandStatus.PLAYING
        assert game.current_turn == TurnRef(0, 1)

        game.stand()
        # Split 21 is an ordinary win, not a natural
        assert first.result == HandResult.WIN
        assert second.result == HandResult.LOSE
        assert game.player.chips == 1000

    def test_split_requires_pair(self, scripted):
        game = scripted("8S", "9H", "10C", "7D")
        assert not game.can_split_hand
        assert not game.split()
        assert len(game.player.hands) == 1

    def test_split_requires_chips(self, rng, stack_shoe):
        game = BlackjackGame([Seat("human", "You", 150)], rules=BlackjackRules(), rng=rng)
        game.roll_cut_card()
        game.shoe = stack_shoe(["8S", "8H", "10C", "7D"])
        game.player_bet = 100
        game.start_hand()

        assert not game.can_split_hand
        assert not game.split()


class TestSettlement:
    """Tests for dealer play and payouts."""

    def test_natural_pays_three_to_two(self, scripted):
        """Blackjack on 100 against a dealer 20 returns 250."""
        game = scripted("AS", "KH", "10C", "QD")

        hand = game.player.hands[0]
        assert hand.status == HandStatus.BLACKJACK
        assert hand.result == HandResult.BLACKJACK
        assert game.player.chips == 1150
        assert game.player.overall_result == HandResult.BLACKJACK
        assert game.phase == BlackjackPhase.RESULT

    def test_natural_payout_rounds_down(self, blackjack_game, stack_shoe):
        blackjack_game.shoe = stack_shoe(["AS", "KH", "10C", "QD"])
        blackjack_game.player_bet = 15
        blackjack_game.start_hand()
        assert blackjack_game.player.chips == 1000 - 15 + 37

    def test_dealer_blackjack_beats_hand(self, scripted):
        game = scripted("10S", "9H", "AC", "KD")

        assert game.phase == BlackjackPhase.RESULT
        assert all(card.face_up for card in game.dealer_cards)
        assert game.player.hands[0].result == HandResult.LOSE
        assert game.player.chips == 900
        assert game.message == MSG_DEALER_BLACKJACK

    def test_dealer_blackjack_pushes_natural(self, scripted):
        game = scripted("AS", "KH", "AC", "KD")

        assert game.player.hands[0].result == HandResult.PUSH
        assert game.player.chips == 1000

    def test_dealer_draws_to_17(self, scripted):
        """Dealer 16 takes a card (the filler two) and stands on 18."""
        game = scripted("10S", "8H", "6C", "10D")
        game.stand()

        assert len(game.dealer_cards) == 3
        assert game.player.hands[0].result == HandResult.PUSH

    def test_dealer_stands_on_soft_17(self, scripted):
        game = scripted("10S", "8H", "AC", "6D")
        game.stand()

        assert len(game.dealer_cards) == 2
        assert game.player.hands[0].result == HandResult.WIN
        assert game.player.chips == 1100

    def test_dealer_hits_soft_17_when_configured(self, human_seat, rng, stack_shoe):
        game = BlackjackGame([human_seat], rules=BlackjackRules(dealer_hits_soft_17=True), rng=rng)
        game.roll_cut_card()
        game.shoe = stack_shoe(["10S", "8H", "AC", "6D"])
        game.player_bet = 100
        game.start_hand()
        game.stand()

        assert len(game.dealer_cards) == 3
        assert game.player.hands[0].result == HandResult.LOSE

    def test_dealer_bust(self, scripted):
        game = scripted("10S", "2H", "10C", "6D", "10H")
        game.stand()
        # Dealer draws the 10 and busts on 26
        assert game.events.of_type(EventType.DEALER_BUSTS)
        assert game.player.hands[0].result == HandResult.WIN

    def test_profile_updates(self, human_seat, rng, stack_shoe):
        updates = []
        game = BlackjackGame(
            [human_seat],
            rules=BlackjackRules(),
            on_profiles_update=updates.extend,
            rng=rng,
        )
        game.roll_cut_card()
        game.shoe = stack_shoe(["AS", "KH", "10C", "QD"])
        game.player_bet = 100
        game.start_hand()

        assert len(updates) == 1
        assert updates[0].name == "You"
        assert updates[0].chips == 1150
        assert updates[0].result == "BLACKJACK"


class TestNpcTurns:
    """Tests for NPC seats."""

    def test_npc_acts_before_human(self, npc_table):
        game, _ = npc_table
        game.player_bet = 100
        game.start_hand()

        assert game.current_turn == TurnRef(0, 0)
        assert not game.is_player_turn
        assert not game.hit()

        assert game.run_npc_turns() == 1
        assert game.players[0].hands[0].status == HandStatus.STAND
        assert game.current_turn == TurnRef(1, 0)
        assert game.is_player_turn

    def test_npc_round_settles(self, npc_table):
        game, updates = npc_table
        game.player_bet = 100
        game.start_hand()
        npc = game.players[0]
        npc_bet = npc.hands[0].bet

        assert 10 <= npc_bet <= 60
        assert npc.chips == 500 - npc_bet

        game.run_npc_turns()
        game.stand()

        # Dealer 16 draws the filler two: 18 beats the NPC's 17, loses to 19
        assert npc.overall_result == HandResult.LOSE
        assert npc.quote == "Ugh."
        assert game.player.overall_result == HandResult.WIN
        assert game.player.quote is None
        assert {u.name for u in updates} == {"Alice", "You"}

    def test_play_npc_turn_on_human_turn(self, scripted):
        game = scripted("10S", "9H", "5C", "7D")
        assert not game.play_npc_turn()

    def test_single_current_turn(self, npc_table):
        """The current turn is always the earliest hand still playing."""
        game, _ = npc_table
        game.start_hand()
        while game.phase == BlackjackPhase.PLAYING:
            playing = [
                TurnRef(p_idx, h_idx)
                for p_idx, player in enumerate(game.players)
                for h_idx, hand in enumerate(player.hands)
                if hand.status == HandStatus.PLAYING
            ]
            assert game.current_turn == playing[0]
            assert game.current_turn == find_next_playable(game.players)
            if not game.play_npc_turn():
                game.stand()


class TestReset:
    """Tests for returning to betting."""

    def test_reset_after_round(self, scripted):
        game = scripted("10S", "8H", "10C", "9D")
        game.stand()

        assert game.reset_to_betting()
        assert game.phase == BlackjackPhase.BETTING
        assert game.player.hands == []
        assert game.dealer_cards == []
        assert game.player.overall_result is None

    def test_reset_idempotent(self, blackjack_game):
        assert blackjack_game.reset_to_betting()
        assert blackjack_game.reset_to_betting()
        assert blackjack_game.phase == BlackjackPhase.BETTING

    def test_reset_rejected_mid_round(self, scripted):
        game = scripted("10S", "9H", "5C", "7D")
        assert not game.reset_to_betting()
        assert game.phase == BlackjackPhase.PLAYING

    def test_broke_npc_replaced(self, human_seat, npc_profiles, rng):
        stored = {"Bob": 5, "Carol": 300}
        game = BlackjackGame(
            [human_seat, Seat("npc-1", "Alice", 0, is_ai=True)],
            rules=BlackjackRules(),
            npc_profiles=npc_profiles,
            resolve_chips=lambda name: stored.get(name, 0),
            rng=rng,
        )

        game.reset_to_betting()

        assert game.players[1].name == "Carol"
        assert game.players[1].chips == 300

    def test_reset_keeps_shoe(self, blackjack_game):
        """Resetting never rebuilds the shoe on its own."""
        shoe = blackjack_game.shoe
        blackjack_game.reset_to_betting()
        assert blackjack_game.shoe is shoe
        assert isinstance(shoe, Shoe)
