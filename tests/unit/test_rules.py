"""规则引擎测试"""
import itertools
import random
import pytest

from core.cards import Card, Rank, Suit, FULL_DECK, THREE_OF_SPADES, str_to_cards
from core.actions import ComboType, ComboGenerator, BOMB_TYPES
from core.deck import Hand
from core.rules import RuleEngine, RejectReason, PlayVerdict


def cards(s: str):
    return str_to_cards(s)


class TestDetectType:
    """牌型检测测试"""

    def test_empty(self):
        assert RuleEngine.detect_type([]) == ComboType.INVALID

    def test_single(self):
        assert RuleEngine.detect_type(cards("5S")) == ComboType.SINGLE
        assert RuleEngine.detect_type(cards("2H")) == ComboType.SINGLE

    def test_pair(self):
        assert RuleEngine.detect_type(cards("5S 5H")) == ComboType.PAIR
        assert RuleEngine.detect_type(cards("5S 6S")) == ComboType.INVALID

    def test_triple(self):
        assert RuleEngine.detect_type(cards("5S 5C 5H")) == ComboType.TRIPLE
        assert RuleEngine.detect_type(cards("5S 5C 6H")) == ComboType.INVALID

    def test_quad(self):
        assert RuleEngine.detect_type(cards("5S 5C 5D 5H")) == ComboType.QUAD

    def test_four_card_straight(self):
        assert RuleEngine.detect_type(cards("3S 4C 5D 6H")) == ComboType.STRAIGHT

    def test_four_card_invalid(self):
        assert RuleEngine.detect_type(cards("3S 3C 5D 6H")) == ComboType.INVALID

    def test_unsorted_input(self):
        assert RuleEngine.detect_type(cards("7H 5D 3S 6C 4S")) == ComboType.STRAIGHT

    def test_consecutive_pairs(self):
        assert RuleEngine.detect_type(cards("3S 3C 4S 4C 5S 5C")) == ComboType.CONSECUTIVE_PAIRS
        assert RuleEngine.detect_type(cards("3S 3C 4S 4C 5S 5C 6D 6H")) == ComboType.CONSECUTIVE_PAIRS

    def test_consecutive_pairs_with_two(self):
        assert RuleEngine.detect_type(cards("KS KC AS AC 2S 2C")) == ComboType.CONSECUTIVE_PAIRS

    def test_five_card_invalid(self):
        assert RuleEngine.detect_type(cards("3S 3C 3D 4S 4C")) == ComboType.INVALID

    def test_classification_totality(self):
        rng = random.Random(0)
        for _ in range(500):
            hand = rng.sample(FULL_DECK, rng.randint(0, 13))
            combo_type = RuleEngine.detect_type(hand)
            assert isinstance(combo_type, ComboType)
            assert RuleEngine.is_valid(hand) == (combo_type != ComboType.INVALID)


class TestStraight:
    """顺子测试"""

    def test_min_length(self):
        assert not RuleEngine.is_straight(cards("3S 4S 5S"))
        assert RuleEngine.is_straight(cards("3S 4S 5S 6S"))

    def test_max_length(self):
        assert RuleEngine.is_straight(cards("3S 4S 5S 6S 7S 8S 9S 10S JS"))
        assert not RuleEngine.is_straight(cards("3S 4S 5S 6S 7S 8S 9S 10S JS QS"))

    def test_ten_card_run_is_invalid(self):
        run = cards("3S 4S 5S 6S 7S 8S 9S 10S JS QS")
        assert RuleEngine.detect_type(run) == ComboType.INVALID
        assert not RuleEngine.is_valid(run)
        assert not RuleEngine.beats(run, cards("3C 4C 5C 6C 7C 8C 9C 10C JC"))

        lengths = {len(s) for s in ComboGenerator(run).gen_straights()}
        assert lengths == set(range(4, 10))

    def test_no_two(self):
        assert not RuleEngine.is_straight(cards("JS QS KS AS 2S"))
        assert not RuleEngine.is_straight(cards("QS KS AS 2S"))
        assert RuleEngine.is_straight(cards("JS QS KS AS"))

    def test_gap(self):
        assert not RuleEngine.is_straight(cards("3S 4S 6S 7S"))

    def test_duplicate_rank(self):
        assert not RuleEngine.is_straight(cards("3S 4S 4C 5S 6S"))

    def test_straight_exclusion_exhaustive(self):
        """每个长度只在不触及 2 的窗口上成立"""
        for length in range(4, 10):
            for start in range(0, 13 - length + 1):
                run = [Card(Rank(r), Suit.SPADES) for r in range(start, start + length)]
                touches_two = start + length - 1 == Rank.TWO
                assert RuleEngine.is_straight(run) == (not touches_two)
                if RuleEngine.is_straight(run):
                    assert all(c.rank != Rank.TWO for c in run)


class TestConsecutivePairs:
    """连对测试"""

    def test_needs_three_pairs(self):
        assert not RuleEngine.is_consecutive_pairs(cards("3S 3C 4S 4C"))

    def test_odd_length(self):
        assert not RuleEngine.is_consecutive_pairs(cards("3S 3C 4S 4C 5S 5C 6S"))

    def test_not_consecutive(self):
        assert not RuleEngine.is_consecutive_pairs(cards("3S 3C 4S 4C 6S 6C"))

    def test_mismatched_pair(self):
        assert not RuleEngine.is_consecutive_pairs(cards("3S 3C 4S 5C 5S 6C"))


class TestStrength:
    """强度测试"""

    def test_empty(self):
        assert RuleEngine.get_strength([]) == -1

    def test_top_card(self):
        assert RuleEngine.get_strength(cards("9S 9H")) == Rank.NINE * 4 + Suit.HEARTS

    def test_suit_tiebreak(self):
        assert RuleEngine.get_strength(cards("9H")) > RuleEngine.get_strength(cards("9S"))

    def test_rank_dominates(self):
        assert RuleEngine.get_strength(cards("10S")) > RuleEngine.get_strength(cards("9H"))


class TestBeats:
    """大小比较测试"""

    def test_single(self):
        assert RuleEngine.beats(cards("9S"), cards("7C"))
        assert not RuleEngine.beats(cards("7C"), cards("9S"))

    def test_single_suit(self):
        assert RuleEngine.beats(cards("7H"), cards("7C"))
        assert not RuleEngine.beats(cards("7C"), cards("7H"))

    def test_equal(self):
        assert not RuleEngine.beats(cards("7C"), cards("7C"))

    def test_pair(self):
        assert RuleEngine.beats(cards("8S 8C"), cards("7D 7H"))
        assert RuleEngine.beats(cards("7S 7H"), cards("7C 7D"))

    def test_type_mismatch(self):
        assert not RuleEngine.beats(cards("8S 8C"), cards("7D"))
        assert not RuleEngine.beats(cards("8S 8C 8D"), cards("7D 7H"))

    def test_straight_length_must_match(self):
        assert not RuleEngine.beats(cards("4S 5S 6S 7S 8S"), cards("3C 4C 5C 6C"))
        assert not RuleEngine.beats(cards("9S 10S JS QS"), cards("3C 4C 5C 6C 7C"))
        assert RuleEngine.beats(cards("4S 5S 6S 7S"), cards("3C 4C 5C 6C"))

    def test_invalid_never_beats(self):
        assert not RuleEngine.beats(cards("3S 5S"), cards("3C"))
        assert not RuleEngine.beats(cards("3C"), cards("3S 5S"))
        assert not RuleEngine.beats([], cards("3C"))

    def test_quad_vs_quad(self):
        assert RuleEngine.beats(cards("6S 6C 6D 6H"), cards("5S 5C 5D 5H"))

    def test_consecutive_pairs_length_must_match(self):
        assert not RuleEngine.beats(
            cards("4S 4C 5S 5C 6S 6C 7S 7C"), cards("3D 3H 4D 4H 5D 5H")
        )

    def test_quad_beats_single_two(self):
        assert RuleEngine.beats(cards("5S 5C 5D 5H"), cards("2H"))

    def test_quad_beats_pair_of_twos(self):
        assert RuleEngine.beats(cards("5S 5C 5D 5H"), cards("2S 2C"))

    def test_consecutive_pairs_beat_two(self):
        run = cards("3S 3C 4S 4C 5S 5C")
        assert RuleEngine.beats(run, cards("2H"))
        assert RuleEngine.beats(run, cards("2D 2H"))

    def test_bomb_vs_non_two(self):
        quad = cards("5S 5C 5D 5H")
        assert not RuleEngine.beats(quad, cards("AH"))
        assert not RuleEngine.beats(quad, cards("AS AH"))
        assert not RuleEngine.beats(quad, cards("3S 4S 5D 6D"))
        assert not RuleEngine.beats(quad, cards("2S 2C 2D"))

    def test_bomb_vs_other_bomb_type(self):
        assert not RuleEngine.beats(cards("5S 5C 5D 5H"), cards("3S 3C 4S 4C 5S 5C"))
        assert not RuleEngine.beats(cards("3S 3C 4S 4C 5S 5C"), cards("5S 5C 5D 5H"))

    def test_two_does_not_beat_bomb(self):
        assert not RuleEngine.beats(cards("2H"), cards("5S 5C 5D 5H"))

    def test_bomb_override_scope(self):
        """炸弹只能压单张 2 或一对 2"""
        quad = cards("9S 9C 9D 9H")
        for card in FULL_DECK:
            if card.rank == Rank.NINE:
                continue
            assert RuleEngine.beats(quad, [card]) == (card.rank == Rank.TWO)
        for rank in Rank:
            if rank == Rank.NINE:
                continue
            pair = [Card(rank, Suit.SPADES), Card(rank, Suit.HEARTS)]
            assert RuleEngine.beats(quad, pair) == (rank == Rank.TWO)

    def test_antisymmetry_within_type(self):
        hand = cards("3S 3C 3D 4S 4H 5S 5C 6S 6D 7S 7H 8C 8D 9S 9H 2S 2H")
        by_key = {}
        for combo in ComboGenerator(hand).generate_all():
            by_key.setdefault((combo.combo_type, len(combo)), []).append(combo)
        for group in by_key.values():
            for a, b in itertools.combinations(group, 2):
                ab = RuleEngine.beats(a.cards, b.cards)
                ba = RuleEngine.beats(b.cards, a.cards)
                assert not (ab and ba)
                if not ab and not ba:
                    assert a.strength == b.strength


class TestCanBeat:
    """can_beat 测试"""

    def test_empty_table(self):
        from core.actions import Combo
        assert RuleEngine.can_beat(cards("3S"), Combo.pass_combo())

    def test_can_and_cannot(self):
        from core.actions import Combo
        table = Combo.from_cards(cards("2H"))
        assert not RuleEngine.can_beat(cards("3S 4C AH"), table)
        assert RuleEngine.can_beat(cards("5S 5C 5D 5H"), table)


class TestValidatePlay:
    """出牌校验测试"""

    def setup_method(self):
        self.hand = Hand(cards("3S 4S 5H 7C 7D 9S 2H"))

    def test_ok(self):
        verdict = RuleEngine.validate_play(cards("7C 7D"), self.hand)
        assert verdict.accepted
        assert verdict
        assert verdict.reason == RejectReason.NONE

    def test_empty(self):
        verdict = RuleEngine.validate_play([], self.hand)
        assert verdict.reason == RejectReason.EMPTY_PLAY
        assert not verdict

    def test_duplicate(self):
        verdict = RuleEngine.validate_play([THREE_OF_SPADES, THREE_OF_SPADES], self.hand)
        assert verdict.reason == RejectReason.DUPLICATE_CARDS

    def test_not_in_hand(self):
        verdict = RuleEngine.validate_play(cards("8S"), self.hand)
        assert verdict.reason == RejectReason.CARDS_NOT_IN_HAND
        assert "8♠" in verdict.message

    def test_invalid_combination(self):
        verdict = RuleEngine.validate_play(cards("3S 4S"), self.hand)
        assert verdict.reason == RejectReason.INVALID_COMBINATION

    def test_first_turn_requires_three_of_spades(self):
        verdict = RuleEngine.validate_play(cards("4S"), self.hand, is_first_turn=True)
        assert verdict.reason == RejectReason.MISSING_OPENING_CARD
        assert RuleEngine.validate_play(cards("3S"), self.hand, is_first_turn=True)

    def test_first_turn_without_three_of_spades(self):
        hand = Hand(cards("4S 5H"))
        assert RuleEngine.validate_play(cards("5H"), hand, is_first_turn=True)

    def test_does_not_beat(self):
        verdict = RuleEngine.validate_play(cards("5H"), self.hand, table=cards("7S"))
        assert verdict.reason == RejectReason.DOES_NOT_BEAT

    def test_beats_table(self):
        assert RuleEngine.validate_play(cards("9S"), self.hand, table=cards("7S"))

    def test_accepts_plain_list_hand(self):
        assert RuleEngine.validate_play(cards("9S"), cards("9S 3C"))


class TestValidatePass:
    """过牌校验测试"""

    def test_leader_cannot_pass(self):
        verdict = RuleEngine.validate_pass([])
        assert verdict.reason == RejectReason.LEAD_MUST_PLAY
        assert RuleEngine.validate_pass(None).reason == RejectReason.LEAD_MUST_PLAY

    def test_follower_can_pass(self):
        assert RuleEngine.validate_pass(cards("7S")) == PlayVerdict.ok()
