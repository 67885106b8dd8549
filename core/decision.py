"""
决策引擎 (AI)

给定手牌与桌面状态，选择一手出牌或过牌 (返回空列表)。
所有策略都是纯函数，不修改手牌与状态，由调用方按人类出牌的同一流程应用结果。

策略:
    simple: 保守基线策略
    scored: 评分策略 (节省大牌、优先出完)
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Iterable, Type, Union
from collections import defaultdict
import logging

from .cards import Card, Rank, THREE_OF_SPADES
from .actions import Combo, ComboType, ComboGenerator
from .rules import RuleEngine
from .state import GameState

logger = logging.getLogger(__name__)


class Strategy:
    """策略基类"""

    name = "base"

    def decide(self, hand: Iterable[Card], state: GameState, is_first_turn: bool) -> List[Card]:
        """
        选择出牌

        Args:
            hand: 手牌
            state: 当前游戏状态 (只读)
            is_first_turn: 是否为整局第一手

        Returns:
            要出的牌，空列表表示过牌
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class SimpleStrategy(Strategy):
    """
    保守基线策略

    1. 首手持有 3♠ 时只出 3♠
    2. 主动出牌时出最小的单张
    3. 跟牌时只在同牌型中找能压过的最小组合
    4. 桌面是单张 2 或一对 2 (或炸弹) 时找最小的炸弹
    5. 否则过牌
    """

    name = "simple"

    def decide(self, hand: Iterable[Card], state: GameState, is_first_turn: bool) -> List[Card]:
        cards = sorted(hand)
        if not cards:
            return []

        if is_first_turn and THREE_OF_SPADES in cards:
            return [THREE_OF_SPADES]

        table = sorted(state.table_combo)
        if not table:
            return [cards[0]]

        generator = ComboGenerator(cards)
        table_type = RuleEngine.detect_type(table)

        if table_type in (ComboType.QUAD, ComboType.CONSECUTIVE_PAIRS):
            return self._find_bomb(generator, table)

        found = self._find_same_type(generator, table, table_type)
        if found:
            return found

        if RuleEngine.is_top_single(table) or RuleEngine.is_top_pair(table):
            return self._find_bomb(generator, table)

        return []

    def _find_same_type(self, generator: ComboGenerator, table: List[Card],
                        table_type: ComboType) -> List[Card]:
        if table_type == ComboType.SINGLE:
            for card in generator.hand:
                if RuleEngine.beats([card], table):
                    return [card]
            return []

        if table_type in (ComboType.PAIR, ComboType.TRIPLE):
            size = len(table)
            table_rank = int(table[0].rank)
            for rank in range(table_rank + 1, int(Rank.TWO) + 1):
                group = generator.by_rank.get(rank, [])
                if len(group) >= size:
                    return list(group[:size])
            return []

        if table_type == ComboType.STRAIGHT:
            # 顺子只能被等长顺子压过
            for candidate in generator.gen_straights(len(table)):
                if RuleEngine.beats(candidate, table):
                    return candidate
            return []

        return []

    def _find_bomb(self, generator: ComboGenerator, table: List[Card]) -> List[Card]:
        """按点数升序找最小的能压过桌面的炸弹 (先四张，后连对)"""
        for quad in generator.gen_quads():
            if RuleEngine.beats(quad, table):
                return quad
        for run in generator.gen_consecutive_pairs():
            if RuleEngine.beats(run, table):
                return run
        return []


@dataclass
class ScoringWeights:
    """
    评分策略权重 (启发式参数，可调)

    Attributes:
        card_bonus: 每出一张牌的奖励
        empty_hand_bonus: 出完手牌的奖励
        strength_penalty: 每单位组合强度的惩罚 (优先出小牌)
        two_penalty: 每张 2 的惩罚 (出完或炸 2 时不计)
        ace_penalty: 每张 A 的惩罚
        bomb_penalty: 非压 2 时使用炸弹的惩罚
        split_penalty: 拆散同点数组合的惩罚
        pass_threshold: 跟牌时最佳得分低于此值则过牌
    """
    card_bonus: float = 10.0
    empty_hand_bonus: float = 1000.0
    strength_penalty: float = 1.0
    two_penalty: float = 500.0
    ace_penalty: float = 100.0
    bomb_penalty: float = 300.0
    split_penalty: float = 15.0
    pass_threshold: float = -200.0

    @classmethod
    def from_dict(cls, d: dict) -> 'ScoringWeights':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered)


class ScoredStrategy(Strategy):
    """
    评分策略

    枚举所有合法出牌并打分:
    - 奖励出牌数量与出完手牌
    - 惩罚浪费 2 和 A (出完手牌或用炸弹压 2 时除外)
    - 惩罚主动使用炸弹、拆散对子/三张
    - 跟牌时最佳得分过低则主动过牌
    """

    name = "scored"

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self.weights = weights or ScoringWeights()

    def decide(self, hand: Iterable[Card], state: GameState, is_first_turn: bool) -> List[Card]:
        cards = sorted(hand)
        if not cards:
            return []

        table = Combo.from_cards(state.table_combo)
        generator = ComboGenerator(cards)
        legal = generator.generate_responses(None if table.is_pass else table)

        if is_first_turn and THREE_OF_SPADES in cards:
            legal = [c for c in legal if THREE_OF_SPADES in c.cards]

        if not legal:
            return []

        scored = [(self.score(combo, cards, table), combo) for combo in legal]
        # 同分时选强度更低的组合
        best_score, best = max(scored, key=lambda item: (item[0], -item[1].strength))

        if not table.is_pass and best_score < self.weights.pass_threshold:
            logger.debug("Strategic pass: best %s scored %.1f", best, best_score)
            return []

        return list(best.cards)

    def score(self, combo: Combo, hand: List[Card], table: Combo) -> float:
        """
        为一手出牌打分

        Args:
            combo: 候选出牌
            hand: 出牌前的手牌
            table: 桌面组合 (可能为空)

        Returns:
            得分，越高越好
        """
        w = self.weights
        played = len(combo)
        score = played * w.card_bonus

        if played == len(hand):
            return score + w.empty_hand_bonus

        score -= combo.strength * w.strength_penalty

        bombing_two = combo.is_bomb and (
            RuleEngine.is_top_single(table.cards) or RuleEngine.is_top_pair(table.cards)
        )
        if not bombing_two:
            twos = sum(1 for c in combo.cards if c.rank == Rank.TWO)
            aces = sum(1 for c in combo.cards if c.rank == Rank.ACE)
            score -= twos * w.two_penalty + aces * w.ace_penalty
            if combo.is_bomb:
                score -= w.bomb_penalty

        score -= self._split_count(combo, hand) * w.split_penalty
        return score

    @staticmethod
    def _split_count(combo: Combo, hand: List[Card]) -> int:
        """出牌后留下落单的同点数牌的点数个数"""
        in_hand: Dict[int, int] = defaultdict(int)
        for card in hand:
            in_hand[int(card.rank)] += 1
        used: Dict[int, int] = defaultdict(int)
        for card in combo.cards:
            used[int(card.rank)] += 1
        return sum(1 for rank, n in used.items() if in_hand[rank] - n == 1)


# 策略注册表
STRATEGIES: Dict[str, Type[Strategy]] = {
    "simple": SimpleStrategy,
    "scored": ScoredStrategy,
}


class StrategyRegistry:
    """
    策略注册与工厂

    单例模式管理策略类
    """

    _instance: Optional['StrategyRegistry'] = None

    def __init__(self):
        self._strategies: Dict[str, Type[Strategy]] = dict(STRATEGIES)

    @classmethod
    def get_instance(cls) -> 'StrategyRegistry':
        """获取单例实例"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register(self, name: str, strategy_cls: Type[Strategy]):
        """注册策略"""
        self._strategies[name] = strategy_cls

    def get(self, name: str) -> Type[Strategy]:
        if name not in self._strategies:
            raise ValueError(f"Unknown strategy: {name}")
        return self._strategies[name]

    def list_strategies(self) -> List[str]:
        return list(self._strategies.keys())

    def build(self, name: str, **kwargs) -> Strategy:
        return self.get(name)(**kwargs)


def build_strategy(name: str, **kwargs) -> Strategy:
    """
    便捷函数：按名称创建策略

    Args:
        name: 策略名 ("simple", "scored", 或已注册的名称)
        **kwargs: 策略构造参数

    Returns:
        Strategy 实例
    """
    return StrategyRegistry.get_instance().build(name, **kwargs)


class DecisionEngine:
    """
    决策引擎

    包装一个可插拔策略，对外提供统一的 decide_play 接口
    """

    def __init__(self, strategy: Union[str, Strategy] = "simple"):
        self.strategy = build_strategy(strategy) if isinstance(strategy, str) else strategy

    def decide_play(self, hand: Iterable[Card], state: GameState,
                    is_first_turn: Optional[bool] = None) -> List[Card]:
        """
        选择出牌

        Args:
            hand: 手牌
            state: 游戏状态
            is_first_turn: 是否为整局第一手，None 时取 state.is_first_turn_of_game

        Returns:
            要出的牌，空列表表示过牌
        """
        if is_first_turn is None:
            is_first_turn = state.is_first_turn_of_game
        return self.strategy.decide(hand, state, is_first_turn)


def decide_play(hand: Iterable[Card], state: GameState, is_first_turn: bool,
                strategy: Union[str, Strategy] = "simple") -> List[Card]:
    """便捷函数：用指定策略做一次决策"""
    return DecisionEngine(strategy).decide_play(hand, state, is_first_turn)
