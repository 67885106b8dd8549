"""
观察空间编码

将对局会话转换为神经网络可用的特征表示
"""
from dataclasses import dataclass
from typing import Dict, List, Optional
import numpy as np

from core.cards import DECK_SIZE, cards_to_array
from core.actions import Combo
from core.session import GameSession


@dataclass
class Observation:
    """
    结构化观测

    Attributes:
        hand: 自己的手牌 (52,)
        table: 桌面组合 (52,)
        played_cards: 各玩家已出牌累计 (num_players, 52)
        cards_left: 各玩家剩余牌数 (归一化) (num_players,)
        position: 自己座位 one-hot (num_players,)
        current: 当前行动玩家 one-hot (num_players,)
        first_turn: 是否整局第一手 (1,)
        legal_actions: 合法出牌列表
    """
    hand: np.ndarray
    table: np.ndarray
    played_cards: np.ndarray
    cards_left: np.ndarray
    position: np.ndarray
    current: np.ndarray
    first_turn: np.ndarray
    legal_actions: List[Combo]

    def to_dict(self) -> Dict[str, np.ndarray]:
        """转换为字典格式"""
        return {
            "hand": self.hand,
            "table": self.table,
            "played_cards": self.played_cards,
            "cards_left": self.cards_left,
            "position": self.position,
            "current": self.current,
            "first_turn": self.first_turn,
        }

    def to_flat_array(self) -> np.ndarray:
        """展平为单一向量 (用于简单网络)"""
        return np.concatenate([
            self.hand,
            self.table,
            self.played_cards.flatten(),
            self.cards_left,
            self.position,
            self.current,
            self.first_turn,
        ])


class ObservationBuilder:
    """
    观测构建器

    负责将 GameSession 转换为 Observation (不完全信息: 只看得到自己的手牌)
    """

    def __init__(self, num_players: int = 4):
        self.num_players = num_players

    def build(self, session: GameSession, perspective: Optional[int] = None) -> Observation:
        """
        从对局会话构建观测

        Args:
            session: 已开局的会话
            perspective: 视角玩家 (默认为当前玩家)

        Returns:
            Observation 对象
        """
        state = session.state
        if state is None:
            raise RuntimeError("Session not started")

        if perspective is None:
            perspective = state.current_player

        hand = cards_to_array(session.hands[perspective])
        table = cards_to_array(state.table_combo)

        played_cards = np.zeros((self.num_players, DECK_SIZE), dtype=np.float32)
        for player, cards in enumerate(session.played_cards):
            played_cards[player] = cards_to_array(cards)

        cards_left = np.array(session.cards_left(), dtype=np.float32) / (DECK_SIZE // self.num_players)

        position = self._one_hot(perspective)
        current = self._one_hot(state.current_player)
        first_turn = np.array([float(state.is_first_turn_of_game)], dtype=np.float32)

        if state.current_player == perspective:
            legal_actions = session.legal_actions(perspective)
        else:
            legal_actions = []

        return Observation(
            hand=hand,
            table=table,
            played_cards=played_cards,
            cards_left=cards_left,
            position=position,
            current=current,
            first_turn=first_turn,
            legal_actions=legal_actions,
        )

    def _one_hot(self, index: int) -> np.ndarray:
        vec = np.zeros(self.num_players, dtype=np.float32)
        vec[index] = 1
        return vec


def build_legal_mask(legal_actions: List[Combo]) -> np.ndarray:
    """
    合法出牌的选牌掩码矩阵

    Returns:
        (len(legal_actions), 52) 数组，过牌为全零行
    """
    if not legal_actions:
        return np.zeros((0, DECK_SIZE), dtype=np.int8)
    return np.stack([cards_to_array(a.cards) for a in legal_actions]).astype(np.int8)
