"""
牌型定义与出牌生成器

进级共有 6 种合法牌型 (另加 INVALID):
单张、对子、三张、顺子、四张 (炸弹)、连对 (炸弹)
"""
from enum import IntEnum
from dataclasses import dataclass
from typing import List, Tuple, Optional, Iterator, Iterable, Dict
from collections import defaultdict
import itertools

from .cards import Card, Rank, NUM_RANKS


class ComboType(IntEnum):
    """牌型类型"""
    INVALID = 0            # 非法牌型 (含空)
    SINGLE = 1             # 单张
    PAIR = 2               # 对子
    TRIPLE = 3             # 三张
    STRAIGHT = 4           # 顺子 (4-9 张，不含 2)
    QUAD = 5               # 四张 (炸弹)
    CONSECUTIVE_PAIRS = 6  # 连对 (至少 3 对，炸弹)


# 炸弹牌型
BOMB_TYPES = (ComboType.QUAD, ComboType.CONSECUTIVE_PAIRS)

# 顺子/连对的长度限制
MIN_STRAIGHT_LEN = 4
MAX_STRAIGHT_LEN = 9
MIN_CONSECUTIVE_PAIRS = 3


@dataclass(frozen=True)
class Combo:
    """
    不可变出牌组合

    每次由牌列表重新计算，不作为共享状态缓存

    Attributes:
        cards: 升序排列的牌
        combo_type: 牌型
    """
    cards: Tuple[Card, ...]
    combo_type: ComboType

    @classmethod
    def pass_combo(cls) -> 'Combo':
        """空组合 (表示过牌)"""
        return cls(cards=(), combo_type=ComboType.INVALID)

    @classmethod
    def from_cards(cls, cards: Iterable[Card], combo_type: Optional[ComboType] = None) -> 'Combo':
        """从牌列表创建组合"""
        sorted_cards = tuple(sorted(cards))
        if combo_type is None:
            from .rules import RuleEngine
            combo_type = RuleEngine.detect_type(sorted_cards)
        return cls(cards=sorted_cards, combo_type=combo_type)

    @property
    def is_pass(self) -> bool:
        return not self.cards

    @property
    def is_valid(self) -> bool:
        return self.combo_type != ComboType.INVALID

    @property
    def is_bomb(self) -> bool:
        return self.combo_type in BOMB_TYPES

    @property
    def top_card(self) -> Optional[Card]:
        """决定大小的那张牌 (最大的一张)"""
        return self.cards[-1] if self.cards else None

    @property
    def strength(self) -> int:
        from .rules import RuleEngine
        return RuleEngine.get_strength(self.cards)

    @property
    def pair_count(self) -> int:
        """连对的对数"""
        if self.combo_type == ComboType.CONSECUTIVE_PAIRS:
            return len(self.cards) // 2
        return 0

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        if self.is_pass:
            return "Pass"
        return ' '.join(str(c) for c in self.cards)


class ComboGenerator:
    """
    候选出牌生成器

    根据手牌生成各牌型的候选组合。顺子和连对中，非最高点数只取最小的牌，
    最高点数 (决定大小) 枚举所有选择，保持搜索空间很小。
    """

    def __init__(self, hand_cards: Iterable[Card]):
        """
        Args:
            hand_cards: 手牌
        """
        self.hand = sorted(hand_cards)
        self.by_rank: Dict[int, List[Card]] = defaultdict(list)

        for card in self.hand:
            self.by_rank[int(card.rank)].append(card)

    def count(self, rank: int) -> int:
        return len(self.by_rank.get(rank, []))

    def gen_singles(self) -> List[List[Card]]:
        """生成所有单张 (升序)"""
        return [[card] for card in self.hand]

    def _gen_same_rank(self, size: int) -> List[List[Card]]:
        result = []
        for rank in sorted(self.by_rank):
            cards = self.by_rank[rank]
            if len(cards) >= size:
                result.extend(list(combo) for combo in itertools.combinations(cards, size))
        # 按最大牌排序，弱的在前
        result.sort(key=lambda combo: combo[-1])
        return result

    def gen_pairs(self) -> List[List[Card]]:
        """生成所有对子"""
        return self._gen_same_rank(2)

    def gen_triples(self) -> List[List[Card]]:
        """生成所有三张"""
        return self._gen_same_rank(3)

    def gen_quads(self) -> List[List[Card]]:
        """生成所有四张"""
        return [list(self.by_rank[rank]) for rank in sorted(self.by_rank) if len(self.by_rank[rank]) == 4]

    def _gen_serial(self, repeat: int, min_len: int, max_len: int,
                    required_len: int = 0, allow_two: bool = False) -> List[List[Card]]:
        """
        生成连续牌型的通用方法

        Args:
            repeat: 每个点数取几张 (1=顺子, 2=连对)
            min_len: 最小连续点数个数
            max_len: 最大连续点数个数
            required_len: 要求的精确长度，0 表示不限制
            allow_two: 是否允许包含 2
        """
        top_rank = NUM_RANKS if allow_two else int(Rank.TWO)
        lengths = [required_len] if required_len else range(min_len, max_len + 1)

        result = []
        for length in lengths:
            if length < min_len or length > max_len:
                continue
            for start in range(0, top_rank - length + 1):
                ranks = range(start, start + length)
                if any(self.count(r) < repeat for r in ranks):
                    continue

                base: List[Card] = []
                for rank in ranks[:-1]:
                    base.extend(self.by_rank[rank][:repeat])

                # 最高点数决定大小，枚举所有选择
                for top in itertools.combinations(self.by_rank[ranks[-1]], repeat):
                    result.append(base + list(top))
        return result

    def gen_straights(self, required_len: int = 0) -> List[List[Card]]:
        """生成顺子"""
        return self._gen_serial(1, MIN_STRAIGHT_LEN, MAX_STRAIGHT_LEN, required_len)

    def gen_consecutive_pairs(self, required_pairs: int = 0) -> List[List[Card]]:
        """生成连对"""
        return self._gen_serial(2, MIN_CONSECUTIVE_PAIRS, NUM_RANKS, required_pairs, allow_two=True)

    def gen_bombs(self) -> List[Combo]:
        """生成所有炸弹 (四张在前，连对在后)"""
        bombs = [Combo(tuple(cards), ComboType.QUAD) for cards in self.gen_quads()]
        bombs.extend(
            Combo(tuple(cards), ComboType.CONSECUTIVE_PAIRS)
            for cards in self.gen_consecutive_pairs()
        )
        return bombs

    def generate_all(self) -> List[Combo]:
        """
        生成所有可能的出牌 (主动出牌)

        Returns:
            所有合法组合列表
        """
        combos = []

        for cards in self.gen_singles():
            combos.append(Combo(tuple(cards), ComboType.SINGLE))
        for cards in self.gen_pairs():
            combos.append(Combo(tuple(cards), ComboType.PAIR))
        for cards in self.gen_triples():
            combos.append(Combo(tuple(cards), ComboType.TRIPLE))
        for cards in self.gen_straights():
            combos.append(Combo(tuple(cards), ComboType.STRAIGHT))
        combos.extend(self.gen_bombs())

        return combos

    def generate_responses(self, table: Optional[Combo]) -> List[Combo]:
        """
        生成能打过桌面组合的所有出牌 (不含过牌)

        Args:
            table: 桌面组合，None 或空表示主动出牌

        Returns:
            合法响应列表
        """
        from .rules import RuleEngine

        if table is None or table.is_pass:
            return self.generate_all()

        table_type = table.combo_type
        candidates: List[Combo] = []

        if table_type == ComboType.SINGLE:
            candidates = [Combo(tuple(c), ComboType.SINGLE) for c in self.gen_singles()]
        elif table_type == ComboType.PAIR:
            candidates = [Combo(tuple(c), ComboType.PAIR) for c in self.gen_pairs()]
        elif table_type == ComboType.TRIPLE:
            candidates = [Combo(tuple(c), ComboType.TRIPLE) for c in self.gen_triples()]
        elif table_type == ComboType.STRAIGHT:
            candidates = [
                Combo(tuple(c), ComboType.STRAIGHT)
                for c in self.gen_straights(len(table))
            ]

        # 炸弹: 同类炸弹比大小，或压 2
        candidates.extend(self.gen_bombs())

        return [c for c in candidates if RuleEngine.beats(c.cards, table.cards)]
