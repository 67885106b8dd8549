"""牌编码/解码测试"""
import pytest
import numpy as np

from core.cards import (
    Card,
    Rank,
    Suit,
    FULL_DECK,
    DECK_SIZE,
    THREE_OF_SPADES,
    RANK_TO_STR,
    STR_TO_RANK,
    card_from_str,
    cards_to_array,
    array_to_cards,
    cards_to_str,
    str_to_cards,
    cards_to_matrix,
)


class TestRankSuit:
    """点数/花色枚举测试"""

    def test_rank_values(self):
        assert Rank.THREE == 0
        assert Rank.ACE == 11
        assert Rank.TWO == 12

    def test_rank_ordering(self):
        assert Rank.THREE < Rank.FOUR < Rank.ACE < Rank.TWO

    def test_suit_ordering(self):
        assert Suit.SPADES < Suit.CLUBS < Suit.DIAMONDS < Suit.HEARTS

    def test_rank_str_mapping(self):
        for rank, s in RANK_TO_STR.items():
            assert STR_TO_RANK[s] == rank


class TestCard:
    """Card 测试"""

    def test_value_equality(self):
        assert Card(Rank.FIVE, Suit.HEARTS) == Card(2, 3)
        assert hash(Card(Rank.FIVE, Suit.HEARTS)) == hash(Card(2, 3))

    def test_coerced_to_enums(self):
        card = Card(2, 3)
        assert isinstance(card.rank, Rank)
        assert isinstance(card.suit, Suit)

    def test_ordering_rank_then_suit(self):
        assert Card(Rank.THREE, Suit.HEARTS) < Card(Rank.FOUR, Suit.SPADES)
        assert Card(Rank.TWO, Suit.SPADES) < Card(Rank.TWO, Suit.HEARTS)

    def test_invalid_rank(self):
        with pytest.raises(ValueError):
            Card(13, 0)

    def test_invalid_suit(self):
        with pytest.raises(ValueError):
            Card(0, 4)

    def test_index_roundtrip(self):
        for i in range(DECK_SIZE):
            assert Card.from_index(i).index == i

    def test_str(self):
        assert str(Card(Rank.TEN, Suit.HEARTS)) == "10♥"
        assert str(THREE_OF_SPADES) == "3♠"
        assert repr(THREE_OF_SPADES) == "Card(3♠)"

    def test_immutable(self):
        card = Card(Rank.ACE, Suit.CLUBS)
        with pytest.raises(Exception):
            card.rank = Rank.TWO


class TestFullDeck:
    """完整牌组测试"""

    def test_deck_size(self):
        assert len(FULL_DECK) == 52

    def test_deck_unique(self):
        assert len(set(FULL_DECK)) == 52

    def test_deck_sorted(self):
        assert list(FULL_DECK) == sorted(FULL_DECK)

    def test_each_rank_has_four_suits(self):
        from collections import Counter
        counter = Counter(card.rank for card in FULL_DECK)
        assert all(n == 4 for n in counter.values())


class TestParsing:
    """字符串解析测试"""

    def test_symbol_and_letter_suits(self):
        assert card_from_str("3♠") == card_from_str("3S") == THREE_OF_SPADES
        assert card_from_str("10h") == Card(Rank.TEN, Suit.HEARTS)

    def test_face_cards(self):
        assert card_from_str("QD") == Card(Rank.QUEEN, Suit.DIAMONDS)
        assert card_from_str("2C") == Card(Rank.TWO, Suit.CLUBS)

    def test_invalid(self):
        for bad in ["1S", "11H", "3X", "", "JOKER"]:
            with pytest.raises(ValueError):
                card_from_str(bad)

    def test_str_to_cards(self):
        cards = str_to_cards("3S, 4S 5h")
        assert cards == [
            Card(Rank.THREE, Suit.SPADES),
            Card(Rank.FOUR, Suit.SPADES),
            Card(Rank.FIVE, Suit.HEARTS),
        ]

    def test_str_to_cards_empty(self):
        assert str_to_cards("") == []

    def test_cards_to_str_sorted(self):
        assert cards_to_str(str_to_cards("2H 3S 10D")) == "3♠ 10♦ 2♥"


class TestArrays:
    """数组编码测试"""

    def test_empty_cards(self):
        arr = cards_to_array([])
        assert arr.shape == (52,)
        assert arr.sum() == 0

    def test_cards_to_array(self):
        arr = cards_to_array(str_to_cards("3S 2H"))
        assert arr[0] == 1
        assert arr[51] == 1
        assert arr.sum() == 2
        assert arr.dtype == np.float32

    def test_array_roundtrip(self):
        cards = str_to_cards("3S 7D KC 2H")
        assert array_to_cards(cards_to_array(cards)) == sorted(cards)

    def test_matrix(self):
        mat = cards_to_matrix(str_to_cards("3S 3H AC"))
        assert mat.shape == (4, 13)
        assert mat[Suit.SPADES, Rank.THREE] == 1
        assert mat[Suit.HEARTS, Rank.THREE] == 1
        assert mat[Suit.CLUBS, Rank.ACE] == 1
        assert mat.sum() == 3
