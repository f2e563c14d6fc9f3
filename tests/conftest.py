"""Pytest fixtures for table-game engine tests."""

import pytest
from random import Random

from tablegames.cards import Card, Rank, Suit
from tablegames.players import NpcProfile, Seat
from tablegames.shoe import Shoe
from tablegames.blackjack import BlackjackGame, BlackjackRules
from tablegames.baccarat import BaccaratGame, BaccaratRules
from tablegames.roulette import RouletteGame, RouletteRules

FILLER = Card(Rank.TWO, Suit.CLUBS)


def stacked_shoe(draw_order, padding=60, filler=FILLER, cut_card_position=None):
    """
    Build a shoe that deals ``draw_order`` first.

    Args:
        draw_order: Card strings ('A♠', 'KH', ...) in the order they are drawn
        padding: Filler cards left under the scripted ones
        filler: Card used for padding
        cut_card_position: Cards dealt before a reshuffle is flagged
            (defaults to the whole shoe)
    """
    scripted = [Card.from_string(s) for s in draw_order]
    cards = [filler] * padding + list(reversed(scripted))
    cut = len(cards) if cut_card_position is None else cut_card_position
    return Shoe(cards, cut)


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def stack_shoe():
    """Factory for shoes with a scripted draw order."""
    return stacked_shoe


@pytest.fixture
def human_seat():
    return Seat(id="human", name="You", chips=1000)


@pytest.fixture
def npc_seats():
    return [
        Seat(id="npc-1", name="Alice", chips=500, is_ai=True),
        Seat(id="npc-2", name="Bob", chips=500, is_ai=True),
    ]


@pytest.fixture
def npc_profiles():
    """Profiles with one line per mood so quotes are predictable."""
    return [
        NpcProfile("Alice", {"WIN": ("Lucky me!",), "LOSE": ("Ugh.",), "WAITING": ("...",)}),
        NpcProfile("Bob", {"WIN": ("Ha!",), "LOSE": ("Next time.",)}),
        NpcProfile("Carol", {"WIN": ("Yes!",), "LOSE": ("No!",)}),
    ]


@pytest.fixture
def blackjack_rules():
    """Six decks, minimum bet 10, dealer stands on soft 17."""
    return BlackjackRules()


@pytest.fixture
def blackjack_game(human_seat, blackjack_rules, rng):
    """A heads-up blackjack table with the cut card already rolled."""
    game = BlackjackGame([human_seat], rules=blackjack_rules, rng=rng)
    game.roll_cut_card()
    return game


@pytest.fixture
def baccarat_game(human_seat, rng):
    """A heads-up baccarat table."""
    return BaccaratGame([human_seat], rules=BaccaratRules(), rng=rng)


@pytest.fixture
def roulette_game():
    return RouletteGame(rules=RouletteRules())
