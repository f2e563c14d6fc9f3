"""Tests for Card, Rank and Suit."""

import pytest

from tablegames.cards import Card, Rank, Suit, standard_deck


class TestCard:
    """Tests for the Card class."""

    def test_card_creation(self):
        """Test creating a card."""
        card = Card(Rank.ACE, Suit.SPADES)
        assert card.rank == Rank.ACE
        assert card.suit == Suit.SPADES
        assert card.face_up

    def test_card_immutability(self):
        """Test that cards are immutable."""
        card = Card(Rank.ACE, Suit.SPADES)
        with pytest.raises(AttributeError):
            card.rank = Rank.KING

    def test_equality_ignores_face(self):
        """A face-down card equals the same card face up."""
        assert Card(Rank.KING, Suit.CLUBS, face_up=False) == Card(Rank.KING, Suit.CLUBS)
        assert hash(Card(Rank.KING, Suit.CLUBS, face_up=False)) == hash(Card(Rank.KING, Suit.CLUBS))

    def test_flip(self):
        """Test turning cards over."""
        card = Card(Rank.SEVEN, Suit.HEARTS)
        hidden = card.hidden()
        assert not hidden.face_up
        assert hidden.revealed().face_up
        assert card.revealed() is card

    def test_blackjack_values(self):
        """Test card blackjack values."""
        assert Rank.TWO.blackjack_value == 2
        assert Rank.TEN.blackjack_value == 10
        assert Rank.JACK.blackjack_value == 10
        assert Rank.KING.blackjack_value == 10
        assert Rank.ACE.blackjack_value == 11

    def test_baccarat_values(self):
        """Test card baccarat values."""
        assert Rank.ACE.baccarat_value == 1
        assert Rank.NINE.baccarat_value == 9
        assert Rank.TEN.baccarat_value == 0
        assert Rank.QUEEN.baccarat_value == 0

    def test_card_from_string(self):
        """Test creating cards from strings."""
        assert Card.from_string("AS") == Card(Rank.ACE, Suit.SPADES)
        assert Card.from_string("10D") == Card(Rank.TEN, Suit.DIAMONDS)
        assert Card.from_string("Td") == Card(Rank.TEN, Suit.DIAMONDS)
        assert Card.from_string("K♥") == Card(Rank.KING, Suit.HEARTS)

    def test_card_from_invalid_string(self):
        """Test invalid card strings."""
        with pytest.raises(ValueError):
            Card.from_string("X")
        with pytest.raises(ValueError):
            Card.from_string("1S")
        with pytest.raises(ValueError):
            Card.from_string("AX")

    def test_card_str(self):
        """Test string representation."""
        assert str(Card(Rank.ACE, Suit.SPADES)) == "A♠"
        assert str(Card(Rank.TEN, Suit.HEARTS)) == "10♥"
        assert str(Card(Rank.ACE, Suit.SPADES, face_up=False)) == "??"


class TestStandardDeck:
    """Tests for the ordered 52-card deck."""

    def test_deck_size(self):
        assert len(standard_deck()) == 52

    def test_deck_unique(self):
        assert len(set(standard_deck())) == 52

    def test_deck_face_down_by_default(self):
        assert not any(card.face_up for card in standard_deck())
