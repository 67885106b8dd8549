"""牌组与手牌测试"""
import random
import pytest

from core.cards import Card, Rank, Suit, FULL_DECK, THREE_OF_SPADES, str_to_cards
from core.deck import Hand, Deck, CARDS_PER_PLAYER, new_shuffled_deck, deal


class TestHand:
    """Hand 测试"""

    def test_sorted(self):
        hand = Hand(str_to_cards("2H 3S 10D"))
        assert hand.cards == sorted(str_to_cards("2H 3S 10D"))
        assert hand.lowest() == THREE_OF_SPADES

    def test_duplicates_rejected(self):
        with pytest.raises(ValueError):
            Hand(str_to_cards("3S 3S"))

    def test_cards_is_copy(self):
        hand = Hand(str_to_cards("3S 4S"))
        hand.cards.append(Card(Rank.TWO, Suit.HEARTS))
        assert len(hand) == 2

    def test_contains(self):
        hand = Hand(str_to_cards("3S 4S 5S"))
        assert THREE_OF_SPADES in hand
        assert hand.contains_all(str_to_cards("3S 5S"))
        assert not hand.contains_all(str_to_cards("3S 6S"))
        assert not hand.contains_all(str_to_cards("3S 3S"))

    def test_remove_cards(self):
        hand = Hand(str_to_cards("3S 4S 5S"))
        hand.remove_cards(str_to_cards("4S"))
        assert hand.cards == str_to_cards("3S 5S")

    def test_remove_is_atomic(self):
        hand = Hand(str_to_cards("3S 4S 5S"))
        with pytest.raises(ValueError):
            hand.remove_cards(str_to_cards("3S 9H"))
        assert len(hand) == 3

    def test_remove_duplicates_rejected(self):
        hand = Hand(str_to_cards("3S 4S"))
        with pytest.raises(ValueError):
            hand.remove_cards(str_to_cards("3S 3S"))
        assert len(hand) == 2

    def test_remove_all_empties(self):
        hand = Hand(str_to_cards("3S 4S"))
        hand.remove_cards(str_to_cards("4S 3S"))
        assert hand.is_empty
        assert hand.lowest() is None

    def test_by_rank(self):
        hand = Hand(str_to_cards("5S 5H 7D"))
        groups = hand.by_rank()
        assert groups[Rank.FIVE] == str_to_cards("5S 5H")
        assert hand.count_rank(Rank.FIVE) == 2
        assert hand.cards_of_rank(Rank.SEVEN) == str_to_cards("7D")
        assert hand.count_rank(Rank.TWO) == 0


class TestDeck:
    """Deck 测试"""

    def test_new_deck(self):
        deck = Deck()
        assert len(deck) == 52
        assert deck.cards == list(FULL_DECK)

    def test_shuffle_keeps_cards(self):
        deck = Deck()
        deck.shuffle(random.Random(1))
        assert sorted(deck.cards) == list(FULL_DECK)

    def test_seeded_shuffle_reproducible(self):
        assert new_shuffled_deck(42).cards == new_shuffled_deck(42).cards
        assert new_shuffled_deck(42).cards != new_shuffled_deck(43).cards

    def test_deal_four(self):
        hands = new_shuffled_deck(7).deal(4)
        assert len(hands) == 4
        assert all(len(h) == CARDS_PER_PLAYER for h in hands)
        all_cards = [c for h in hands for c in h]
        assert sorted(all_cards) == list(FULL_DECK)

    def test_deal_round_robin(self):
        deck = Deck()
        hands = deck.deal(4)
        # 未洗牌时第 i 张发给玩家 i % 4，即每人拿到一种花色
        for player, hand in enumerate(hands):
            assert all(card.suit == player for card in hand)

    def test_deal_empties_deck(self):
        deck = Deck()
        deal(deck, 4)
        assert len(deck) == 0

    def test_exactly_one_three_of_spades(self):
        hands = new_shuffled_deck(3).deal(4)
        assert sum(1 for h in hands if THREE_OF_SPADES in h) == 1

    def test_deal_uneven_rejected(self):
        with pytest.raises(ValueError):
            Deck().deal(3)

    def test_deal_incomplete_rejected(self):
        deck = Deck(FULL_DECK[:51])
        with pytest.raises(ValueError):
            deck.deal(4)

    def test_deal_twice_rejected(self):
        deck = Deck()
        deck.deal(4)
        with pytest.raises(ValueError):
            deck.deal(4)
