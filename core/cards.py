"""
牌的定义与编码

进级 (Tiến Lên) 使用一副 52 张牌 (无王):
- 点数 3-10, J, Q, K, A, 2 (2 最大)
- 花色 ♠ < ♣ < ♦ < ♥ (♥ 最大)
"""
from enum import IntEnum
from dataclasses import dataclass
from typing import List, Tuple, Dict, Iterable
import re
import numpy as np


class Rank(IntEnum):
    """点数定义 (序号即大小)"""
    THREE = 0
    FOUR = 1
    FIVE = 2
    SIX = 3
    SEVEN = 4
    EIGHT = 5
    NINE = 6
    TEN = 7
    JACK = 8
    QUEEN = 9
    KING = 10
    ACE = 11
    TWO = 12


class Suit(IntEnum):
    """花色定义 (黑桃最小，红心最大)"""
    SPADES = 0
    CLUBS = 1
    DIAMONDS = 2
    HEARTS = 3


NUM_RANKS = 13
NUM_SUITS = 4
DECK_SIZE = NUM_RANKS * NUM_SUITS

# 点数到显示字符的映射
RANK_TO_STR: Dict[int, str] = {
    0: '3', 1: '4', 2: '5', 3: '6', 4: '7', 5: '8', 6: '9',
    7: '10', 8: 'J', 9: 'Q', 10: 'K', 11: 'A', 12: '2'
}

# 显示字符到点数的映射
STR_TO_RANK: Dict[str, int] = {v: k for k, v in RANK_TO_STR.items()}

# 花色符号
SUIT_TO_STR: Dict[int, str] = {0: '♠', 1: '♣', 2: '♦', 3: '♥'}

# 花色输入别名 (符号或字母)
STR_TO_SUIT: Dict[str, int] = {
    '♠': 0, 'S': 0,
    '♣': 1, 'C': 1,
    '♦': 2, 'D': 2,
    '♥': 3, 'H': 3,
}

_CARD_PATTERN = re.compile(r'^(10|[2-9JQKA])([♠♣♦♥SCDH])$')


@dataclass(frozen=True, order=True)
class Card:
    """
    不可变的牌

    按 (点数, 花色) 排序，按值比较

    Attributes:
        rank: 点数序号 0-12
        suit: 花色序号 0-3
    """
    rank: Rank
    suit: Suit

    def __post_init__(self):
        if not 0 <= int(self.rank) < NUM_RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")
        if not 0 <= int(self.suit) < NUM_SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")
        # 统一为枚举类型
        object.__setattr__(self, 'rank', Rank(self.rank))
        object.__setattr__(self, 'suit', Suit(self.suit))

    @property
    def index(self) -> int:
        """在 52 维编码中的位置"""
        return int(self.rank) * NUM_SUITS + int(self.suit)

    @classmethod
    def from_index(cls, index: int) -> 'Card':
        return cls(Rank(index // NUM_SUITS), Suit(index % NUM_SUITS))

    def __str__(self) -> str:
        return f"{RANK_TO_STR[self.rank]}{SUIT_TO_STR[self.suit]}"

    def __repr__(self) -> str:
        return f"Card({self})"


# 完整牌组 (52 张，升序)
FULL_DECK: Tuple[Card, ...] = tuple(
    Card(Rank(r), Suit(s)) for r in range(NUM_RANKS) for s in range(NUM_SUITS)
)

# 首轮必须包含的牌
THREE_OF_SPADES = Card(Rank.THREE, Suit.SPADES)


def card_from_str(s: str) -> Card:
    """
    解析单张牌

    Args:
        s: 如 "3♠", "10H", "qd"

    Returns:
        Card
    """
    m = _CARD_PATTERN.match(s.strip().upper())
    if m is None:
        raise ValueError(f"Cannot parse card: {s!r}")
    return Card(Rank(STR_TO_RANK[m.group(1)]), Suit(STR_TO_SUIT[m.group(2)]))


def str_to_cards(s: str) -> List[Card]:
    """
    将字符串转换为牌列表

    Args:
        s: 以空格或逗号分隔的牌，如 "3♠ 4♠ 5H"

    Returns:
        牌列表 (保持输入顺序)
    """
    tokens = [t for t in re.split(r'[\s,]+', s.strip()) if t]
    return [card_from_str(t) for t in tokens]


def cards_to_str(cards: Iterable[Card]) -> str:
    """
    将牌列表转换为可读字符串

    Returns:
        如 "3♠ 4♠ 5♥"
    """
    return ' '.join(str(c) for c in sorted(cards))


def cards_to_array(cards: Iterable[Card]) -> np.ndarray:
    """
    将牌列表转换为 52 维 one-hot 向量

    第 i 维对应 Card.index == i

    Args:
        cards: 牌列表

    Returns:
        52 维 numpy 数组
    """
    array = np.zeros(DECK_SIZE, dtype=np.float32)
    for card in cards:
        array[card.index] = 1
    return array


def array_to_cards(array: np.ndarray) -> List[Card]:
    """
    将 52 维数组转换回牌列表

    Args:
        array: 52 维数组 (非零位表示持有)

    Returns:
        升序牌列表
    """
    array = np.asarray(array).reshape(-1)
    if array.shape[0] != DECK_SIZE:
        raise ValueError(f"Expected {DECK_SIZE} entries, got {array.shape[0]}")
    return [Card.from_index(int(i)) for i in np.flatnonzero(array > 0)]


def cards_to_matrix(cards: Iterable[Card]) -> np.ndarray:
    """
    将牌列表转换为 4×13 矩阵 (行: 花色, 列: 点数)

    适用于卷积网络输入
    """
    matrix = np.zeros((NUM_SUITS, NUM_RANKS), dtype=np.float32)
    for card in cards:
        matrix[card.suit, card.rank] = 1
    return matrix
