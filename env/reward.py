"""
奖励函数

支持:
- 终局奖励 (sparse)
- 过程奖励 (shaped): 终局奖励 + 出牌奖励 + 剩余牌惩罚
"""
from dataclasses import dataclass
from typing import Optional
from enum import Enum

from core.session import GameSession


class RewardType(Enum):
    """奖励类型"""
    SPARSE = "sparse"      # 仅终局奖励
    SHAPED = "shaped"      # 过程奖励


@dataclass
class RewardConfig:
    """奖励配置"""
    reward_type: RewardType = RewardType.SPARSE
    win_reward: float = 1.0
    lose_reward: float = -1.0
    card_reward: float = 0.01     # 每出一张牌的奖励
    card_penalty: float = 0.0     # 输局时每张剩余牌的惩罚


class RewardCalculator:
    """
    奖励计算器

    根据配置计算不同类型的奖励
    """

    def __init__(self, config: Optional[RewardConfig] = None):
        self.config = config or RewardConfig()

    def compute(
        self,
        session: GameSession,
        player: int,
        prev_cards_left: Optional[int] = None,
    ) -> float:
        """
        计算奖励

        Args:
            session: 对局会话
            player: 计算奖励的玩家视角
            prev_cards_left: 上一步该玩家的手牌数 (用于 shaped 奖励)

        Returns:
            奖励值
        """
        if self.config.reward_type == RewardType.SPARSE:
            return self._sparse_reward(session, player)
        elif self.config.reward_type == RewardType.SHAPED:
            return self._shaped_reward(session, player, prev_cards_left)
        return 0.0

    def _sparse_reward(self, session: GameSession, player: int) -> float:
        """
        稀疏奖励：仅在游戏结束时给予

        Returns:
            胜利: win_reward, 失败: lose_reward, 其他: 0
        """
        if not session.is_over:
            return 0.0
        if session.winner == player:
            return self.config.win_reward
        return self.config.lose_reward

    def _shaped_reward(
        self,
        session: GameSession,
        player: int,
        prev_cards_left: Optional[int],
    ) -> float:
        reward = self._sparse_reward(session, player)
        cards_left = len(session.hands[player])

        if prev_cards_left is not None and prev_cards_left > cards_left:
            reward += (prev_cards_left - cards_left) * self.config.card_reward

        if session.is_over and session.winner != player:
            reward -= cards_left * self.config.card_penalty

        return reward


def create_reward_calculator(reward_type: str = "sparse", **kwargs) -> RewardCalculator:
    """
    工厂函数：创建奖励计算器

    Args:
        reward_type: 奖励类型 ("sparse", "shaped")
        **kwargs: 其他配置参数
    """
    config = RewardConfig(reward_type=RewardType(reward_type), **kwargs)
    return RewardCalculator(config)
