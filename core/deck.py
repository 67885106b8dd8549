"""
牌组与手牌

Deck: 52 张牌，洗牌后一次性发完
Hand: 单个玩家持有的可变手牌
"""
from typing import List, Optional, Iterable, Iterator, Dict
from collections import Counter, defaultdict
import random

from .cards import Card, Rank, FULL_DECK, DECK_SIZE, cards_to_str

CARDS_PER_PLAYER = 13


class Hand:
    """
    玩家手牌

    发牌后只减不增；所有移除操作都是原子的
    """

    def __init__(self, cards: Optional[Iterable[Card]] = None):
        self._cards: List[Card] = sorted(cards or [])
        if len(set(self._cards)) != len(self._cards):
            raise ValueError("Hand cannot contain duplicate cards")

    @property
    def cards(self) -> List[Card]:
        """升序手牌副本"""
        return list(self._cards)

    @property
    def is_empty(self) -> bool:
        return not self._cards

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(list(self._cards))

    def __contains__(self, card: object) -> bool:
        return card in self._cards

    def __repr__(self) -> str:
        return f"Hand({cards_to_str(self._cards)})"

    def contains_all(self, cards: Iterable[Card]) -> bool:
        """检查所有牌都在手中 (重复请求视为不在手中)"""
        requested = Counter(cards)
        return all(count == 1 and card in self._cards for card, count in requested.items())

    def remove_cards(self, cards: Iterable[Card]) -> None:
        """
        移除一组牌

        任意一张不在手中时抛出 ValueError，且手牌保持不变

        Args:
            cards: 要移除的牌
        """
        cards = list(cards)
        duplicates = [c for c, n in Counter(cards).items() if n > 1]
        if duplicates:
            raise ValueError(f"Duplicate cards in request: {cards_to_str(duplicates)}")
        missing = [c for c in cards if c not in self._cards]
        if missing:
            raise ValueError(f"Cards not in hand: {cards_to_str(missing)}")
        removing = set(cards)
        self._cards = [c for c in self._cards if c not in removing]

    def by_rank(self) -> Dict[Rank, List[Card]]:
        """按点数分组 (每组按花色升序)"""
        groups: Dict[Rank, List[Card]] = defaultdict(list)
        for card in self._cards:
            groups[card.rank].append(card)
        return dict(groups)

    def cards_of_rank(self, rank: int) -> List[Card]:
        return [c for c in self._cards if c.rank == rank]

    def count_rank(self, rank: int) -> int:
        return sum(1 for c in self._cards if c.rank == rank)

    def lowest(self) -> Optional[Card]:
        """最小的一张牌"""
        return self._cards[0] if self._cards else None

    def clear(self) -> None:
        """清空手牌 (重开一局时使用)"""
        self._cards = []


class Deck:
    """
    一副 52 张的牌

    每局新建，洗牌后通过 deal() 发完
    """

    def __init__(self, cards: Optional[Iterable[Card]] = None):
        self.cards: List[Card] = list(cards) if cards is not None else list(FULL_DECK)

    def __len__(self) -> int:
        return len(self.cards)

    def shuffle(self, rng: Optional[random.Random] = None) -> None:
        """
        原地洗牌 (Fisher-Yates)

        Args:
            rng: 随机数生成器，传入带种子的实例可复现
        """
        rng = rng or random.Random()
        for i in range(len(self.cards) - 1, 0, -1):
            j = rng.randint(0, i)
            self.cards[i], self.cards[j] = self.cards[j], self.cards[i]

    def deal(self, num_players: int = 4) -> List[Hand]:
        """
        轮流发牌: 第 i 张发给玩家 i % num_players

        Args:
            num_players: 玩家数

        Returns:
            各玩家手牌
        """
        if len(self.cards) != DECK_SIZE or len(set(self.cards)) != DECK_SIZE:
            raise ValueError("Deck must contain 52 unique cards before dealing")
        if num_players <= 0 or DECK_SIZE % num_players != 0:
            raise ValueError(f"Cannot deal 52 cards evenly to {num_players} players")

        dealt: List[List[Card]] = [[] for _ in range(num_players)]
        for i, card in enumerate(self.cards):
            dealt[i % num_players].append(card)
        self.cards = []
        return [Hand(cards) for cards in dealt]


def new_shuffled_deck(seed: Optional[int] = None) -> Deck:
    """
    创建洗好的新牌组

    Args:
        seed: 随机种子

    Returns:
        Deck
    """
    deck = Deck()
    deck.shuffle(random.Random(seed))
    return deck


def deal(deck: Deck, num_players: int = 4) -> List[Hand]:
    """便捷函数：发牌"""
    return deck.deal(num_players)
