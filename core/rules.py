"""
规则引擎 - 牌型检测、大小比较、合法性验证

所有方法都是纯函数，无状态
"""
from enum import Enum
from dataclasses import dataclass
from typing import List, Optional, Iterable, Sequence
from collections import Counter

from .cards import Card, Rank, THREE_OF_SPADES, NUM_SUITS
from .actions import (
    Combo,
    ComboType,
    ComboGenerator,
    BOMB_TYPES,
    MIN_STRAIGHT_LEN,
    MAX_STRAIGHT_LEN,
    MIN_CONSECUTIVE_PAIRS,
)


class RejectReason(Enum):
    """出牌被拒绝的原因"""
    NONE = "none"
    EMPTY_PLAY = "empty_play"
    DUPLICATE_CARDS = "duplicate_cards"
    CARDS_NOT_IN_HAND = "cards_not_in_hand"
    INVALID_COMBINATION = "invalid_combination"
    MISSING_OPENING_CARD = "missing_opening_card"
    DOES_NOT_BEAT = "does_not_beat"
    LEAD_MUST_PLAY = "lead_must_play"
    NOT_YOUR_TURN = "not_your_turn"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class PlayVerdict:
    """
    出牌校验结果

    Attributes:
        accepted: 是否接受
        reason: 拒绝原因 (接受时为 NONE)
        message: 可展示给玩家的说明
    """
    accepted: bool
    reason: RejectReason = RejectReason.NONE
    message: str = ""

    @classmethod
    def ok(cls) -> 'PlayVerdict':
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: RejectReason, message: str) -> 'PlayVerdict':
        return cls(accepted=False, reason=reason, message=message)

    def __bool__(self) -> bool:
        return self.accepted


def _as_cards(cards: Iterable[Card]) -> List[Card]:
    return sorted(cards)


class RuleEngine:
    """
    进级规则引擎

    提供牌型检测、大小比较、合法性验证等功能
    所有方法都是静态方法，无状态
    """

    @staticmethod
    def is_consecutive(ranks: Sequence[int]) -> bool:
        """
        检查点数序列是否严格连续 (相邻差恰好为 1)

        Args:
            ranks: 已排序的点数列表
        """
        for i in range(len(ranks) - 1):
            if ranks[i + 1] - ranks[i] != 1:
                return False
        return True

    @staticmethod
    def is_straight(cards: Iterable[Card]) -> bool:
        """
        检查是否为顺子

        至少 4 张、不含 2、点数严格连续 (任何重复点数都不成立)
        """
        cards = _as_cards(cards)
        if not MIN_STRAIGHT_LEN <= len(cards) <= MAX_STRAIGHT_LEN:
            return False
        if any(c.rank == Rank.TWO for c in cards):
            return False
        return RuleEngine.is_consecutive([int(c.rank) for c in cards])

    @staticmethod
    def is_consecutive_pairs(cards: Iterable[Card]) -> bool:
        """
        检查是否为连对

        偶数张且至少 3 对，每对点数相同，相邻对点数差为 1
        """
        cards = _as_cards(cards)
        n = len(cards)
        if n % 2 != 0 or n < MIN_CONSECUTIVE_PAIRS * 2:
            return False

        pair_ranks = []
        for i in range(0, n, 2):
            if cards[i].rank != cards[i + 1].rank:
                return False
            pair_ranks.append(int(cards[i].rank))
        return RuleEngine.is_consecutive(pair_ranks)

    @staticmethod
    def detect_type(cards: Iterable[Card]) -> ComboType:
        """
        检测牌型

        Args:
            cards: 牌列表 (任意顺序)

        Returns:
            牌型枚举值
        """
        cards = _as_cards(cards)
        n = len(cards)

        if n == 0:
            return ComboType.INVALID

        # 单张
        if n == 1:
            return ComboType.SINGLE

        same_rank = len({c.rank for c in cards}) == 1

        # 对子
        if n == 2:
            return ComboType.PAIR if same_rank else ComboType.INVALID

        # 三张
        if n == 3:
            return ComboType.TRIPLE if same_rank else ComboType.INVALID

        # 四张: 炸弹 或 4 张顺子
        if n == 4:
            if same_rank:
                return ComboType.QUAD
            if RuleEngine.is_straight(cards):
                return ComboType.STRAIGHT
            return ComboType.INVALID

        # 5 张及以上: 顺子 或 连对
        if RuleEngine.is_straight(cards):
            return ComboType.STRAIGHT
        if RuleEngine.is_consecutive_pairs(cards):
            return ComboType.CONSECUTIVE_PAIRS
        return ComboType.INVALID

    @staticmethod
    def is_valid(cards: Iterable[Card]) -> bool:
        """是否为合法牌型"""
        return RuleEngine.detect_type(cards) != ComboType.INVALID

    @staticmethod
    def get_strength(cards: Iterable[Card]) -> int:
        """
        获取组合强度 (仅用于同类型同长度比较)

        取最大的一张牌: rank * 4 + suit，空组合返回 -1
        """
        cards = _as_cards(cards)
        if not cards:
            return -1
        top = cards[-1]
        return int(top.rank) * NUM_SUITS + int(top.suit)

    @staticmethod
    def is_top_single(cards: Iterable[Card]) -> bool:
        """是否为单张 2"""
        cards = _as_cards(cards)
        return len(cards) == 1 and cards[0].rank == Rank.TWO

    @staticmethod
    def is_top_pair(cards: Iterable[Card]) -> bool:
        """是否为一对 2"""
        cards = _as_cards(cards)
        return len(cards) == 2 and all(c.rank == Rank.TWO for c in cards)

    @staticmethod
    def beats(attacker: Iterable[Card], defender: Iterable[Card]) -> bool:
        """
        判断 attacker 能否压过 defender

        - 任意一方非法: False
        - 同类型: 顺子/连对要求长度相同，再比较强度
        - 不同类型: 只有炸弹 (四张/连对) 能压单张 2 或一对 2

        Args:
            attacker: 出的牌
            defender: 桌面上的牌

        Returns:
            是否能压过
        """
        attacker = _as_cards(attacker)
        defender = _as_cards(defender)

        a_type = RuleEngine.detect_type(attacker)
        d_type = RuleEngine.detect_type(defender)

        if a_type == ComboType.INVALID or d_type == ComboType.INVALID:
            return False

        if a_type == d_type:
            if a_type in (ComboType.STRAIGHT, ComboType.CONSECUTIVE_PAIRS):
                if len(attacker) != len(defender):
                    return False
            return RuleEngine.get_strength(attacker) > RuleEngine.get_strength(defender)

        # 炸弹压 2
        if a_type in BOMB_TYPES and d_type not in BOMB_TYPES:
            return RuleEngine.is_top_single(defender) or RuleEngine.is_top_pair(defender)

        return False

    @staticmethod
    def can_beat(hand: Iterable[Card], table: Combo) -> bool:
        """
        检查手牌中是否有能压过桌面的组合

        Args:
            hand: 当前手牌
            table: 桌面组合
        """
        if table.is_pass:
            return True
        return bool(ComboGenerator(hand).generate_responses(table))

    @staticmethod
    def validate_play(
        cards: Iterable[Card],
        hand: Iterable[Card],
        table: Optional[Iterable[Card]] = None,
        is_first_turn: bool = False,
    ) -> PlayVerdict:
        """
        验证出牌是否合法 (人类与 AI 使用同一套校验)

        Args:
            cards: 要出的牌
            hand: 当前手牌
            table: 桌面组合，None 或空表示主动出牌
            is_first_turn: 是否为整局第一手

        Returns:
            PlayVerdict
        """
        cards = list(cards)
        hand_cards = set(hand)
        table_cards = _as_cards(table or [])

        if not cards:
            return PlayVerdict.reject(RejectReason.EMPTY_PLAY, "no cards selected")

        duplicates = [c for c, n in Counter(cards).items() if n > 1]
        if duplicates:
            return PlayVerdict.reject(
                RejectReason.DUPLICATE_CARDS,
                f"card selected more than once: {' '.join(str(c) for c in duplicates)}",
            )

        missing = [c for c in cards if c not in hand_cards]
        if missing:
            return PlayVerdict.reject(
                RejectReason.CARDS_NOT_IN_HAND,
                f"not in hand: {' '.join(str(c) for c in sorted(missing))}",
            )

        if RuleEngine.detect_type(cards) == ComboType.INVALID:
            return PlayVerdict.reject(RejectReason.INVALID_COMBINATION, "not a valid combination")

        # 首手必须包含 3♠ (前提是持有)
        if is_first_turn and THREE_OF_SPADES in hand_cards and THREE_OF_SPADES not in cards:
            return PlayVerdict.reject(
                RejectReason.MISSING_OPENING_CARD,
                f"opening play must include {THREE_OF_SPADES}",
            )

        if table_cards and not RuleEngine.beats(cards, table_cards):
            return PlayVerdict.reject(RejectReason.DOES_NOT_BEAT, "does not beat the table")

        return PlayVerdict.ok()

    @staticmethod
    def validate_pass(table: Optional[Iterable[Card]] = None) -> PlayVerdict:
        """
        验证过牌是否合法

        主动出牌 (桌面为空) 时不能过
        """
        if not list(table or []):
            return PlayVerdict.reject(RejectReason.LEAD_MUST_PLAY, "the leader must play")
        return PlayVerdict.ok()


# 便捷函数
detect_type = RuleEngine.detect_type
is_straight = RuleEngine.is_straight
is_consecutive_pairs = RuleEngine.is_consecutive_pairs
is_valid = RuleEngine.is_valid
get_strength = RuleEngine.get_strength
beats = RuleEngine.beats
