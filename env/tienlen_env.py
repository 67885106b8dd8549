"""
进级 Gymnasium 环境

遵循标准 Gymnasium API，智能体控制一个座位，其余座位由 AI 策略驱动
"""
from dataclasses import replace
from typing import Dict, Any, Tuple, Optional, List, Union
import numpy as np
import gymnasium as gym
from gymnasium import spaces

from core.cards import Card, DECK_SIZE, array_to_cards, cards_to_array, cards_to_str
from core.actions import Combo
from core.config import GameConfig
from core.session import GameSession

from .observation import ObservationBuilder
from .reward import RewardCalculator, RewardConfig, RewardType

ActionLike = Union[np.ndarray, List[int], List[Card], Combo]


class TienLenEnv(gym.Env):
    """
    进级 Gymnasium 环境

    动作: MultiBinary(52) 选牌掩码 (全零表示过牌)，也接受 Card 列表或 Combo
    非法动作: 状态不变，返回惩罚，info["error"] 给出拒绝原因

    API:
    - reset() -> observation, info
    - step(action) -> observation, reward, terminated, truncated, info
    """

    metadata = {
        "render_modes": ["human", "ansi"],
        "name": "TienLen-v0",
    }

    def __init__(
        self,
        render_mode: Optional[str] = None,
        reward_type: str = "sparse",
        agent_seat: int = 0,
        opponent_strategy: str = "simple",
        num_players: int = 4,
        invalid_action_penalty: float = -1.0,
        seed: Optional[int] = None,
    ):
        """
        Args:
            render_mode: 渲染模式 ("human", "ansi", None)
            reward_type: 奖励类型 ("sparse", "shaped")
            agent_seat: 智能体座位
            opponent_strategy: 其他座位的策略名
            num_players: 玩家数
            invalid_action_penalty: 非法动作的奖励
            seed: 随机种子
        """
        super().__init__()

        if not 0 <= agent_seat < num_players:
            raise ValueError(f"agent_seat must be in [0, {num_players})")

        self.render_mode = render_mode
        self.agent_seat = agent_seat
        self.invalid_action_penalty = invalid_action_penalty
        self._seed = seed

        self._config = GameConfig(num_players=num_players, strategy=opponent_strategy)
        self._obs_builder = ObservationBuilder(num_players=num_players)
        self._reward_calculator = RewardCalculator(
            RewardConfig(reward_type=RewardType(reward_type))
        )

        self._session: Optional[GameSession] = None

        self._define_spaces(num_players)

    def _define_spaces(self, num_players: int):
        """定义观测和动作空间"""
        self.action_space = spaces.MultiBinary(DECK_SIZE)

        self.observation_space = spaces.Dict({
            "hand": spaces.Box(0, 1, shape=(DECK_SIZE,), dtype=np.float32),
            "table": spaces.Box(0, 1, shape=(DECK_SIZE,), dtype=np.float32),
            "played_cards": spaces.Box(0, 1, shape=(num_players, DECK_SIZE), dtype=np.float32),
            "cards_left": spaces.Box(0, 1, shape=(num_players,), dtype=np.float32),
            "position": spaces.Box(0, 1, shape=(num_players,), dtype=np.float32),
            "current": spaces.Box(0, 1, shape=(num_players,), dtype=np.float32),
            "first_turn": spaces.Box(0, 1, shape=(1,), dtype=np.float32),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        重置环境: 发牌，并让其他座位行动直到轮到智能体

        Returns:
            (observation, info) 元组
        """
        super().reset(seed=seed)

        if seed is not None:
            game_seed = seed
        elif self._seed is not None:
            # 构造时的种子只用于第一局
            game_seed, self._seed = self._seed, None
        else:
            game_seed = int(self.np_random.integers(0, 2**31 - 1))

        self._session = GameSession(replace(self._config, seed=game_seed))
        self._session.start()
        self._advance_opponents()

        if self.render_mode == "human":
            self.render()

        return self._build_observation(), self._build_info()

    def step(
        self,
        action: ActionLike,
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        执行动作

        Args:
            action: 选牌掩码、Card 列表或 Combo

        Returns:
            (observation, reward, terminated, truncated, info) 元组
        """
        session = self._require_session()
        if session.is_over:
            raise RuntimeError("Episode is over. Call reset() first.")

        cards = self._decode_action(action)
        prev_cards_left = len(session.hands[self.agent_seat])

        result = session.submit(self.agent_seat, cards)
        if not result.accepted:
            # 非法动作：给予惩罚并保持状态
            info = self._build_info()
            info["error"] = result.verdict.reason.value
            info["message"] = result.verdict.message
            return self._build_observation(), self.invalid_action_penalty, False, False, info

        self._advance_opponents()

        reward = self._reward_calculator.compute(session, self.agent_seat, prev_cards_left)
        terminated = session.is_over

        if self.render_mode == "human":
            self.render()

        return self._build_observation(), reward, terminated, False, self._build_info()

    def _advance_opponents(self):
        session = self._require_session()
        while not session.is_over and session.current_player != self.agent_seat:
            session.step_ai()

    def _decode_action(self, action: ActionLike) -> List[Card]:
        """解码动作为牌列表"""
        if isinstance(action, Combo):
            return list(action.cards)
        if isinstance(action, (list, tuple)) and all(isinstance(c, Card) for c in action):
            return list(action)
        array = np.asarray(action)
        if array.shape != (DECK_SIZE,):
            raise ValueError(f"Action mask must have shape ({DECK_SIZE},), got {array.shape}")
        return array_to_cards(array)

    def _build_observation(self) -> Dict[str, np.ndarray]:
        return self._obs_builder.build(self._require_session(), self.agent_seat).to_dict()

    def _build_info(self) -> Dict[str, Any]:
        """构建 info 字典"""
        session = self._require_session()
        info = {
            "current_player": session.current_player,
            "legal_actions": self.get_legal_actions(),
            "step_count": session.plies,
            "rounds": session.rounds,
            "bombs": session.bombs,
            "cards_left": session.cards_left(),
        }
        if session.is_over:
            info["winner"] = session.winner
        return info

    def render(self) -> Optional[str]:
        """渲染环境"""
        if self.render_mode in ("ansi", "human"):
            return self._render_text()
        return None

    def _render_text(self) -> str:
        """文本渲染"""
        session = self._require_session()
        state = session.state
        lines = ["=" * 50, f"Current Player: {state.current_player}"]

        for player, hand in enumerate(session.hands):
            if player == self.agent_seat:
                lines.append(f"Player {player} (agent): {cards_to_str(hand)} ({len(hand)})")
            else:
                lines.append(f"Player {player}: {len(hand)} cards")

        if state.table_combo:
            lines.append(f"Table: {cards_to_str(state.table_combo)} by {state.last_player_to_play}")
        if session.is_over:
            lines.append(f"Winner: {session.winner}")
        lines.append("=" * 50)

        output = "\n".join(lines)
        if self.render_mode == "human":
            print(output)
        return output

    @property
    def session(self) -> Optional[GameSession]:
        """获取当前会话 (用于调试)"""
        return self._session

    def get_legal_actions(self) -> List[Combo]:
        """获取智能体当前合法动作 (非智能体回合为空)"""
        session = self._session
        if session is None or session.is_over or session.current_player != self.agent_seat:
            return []
        return session.legal_actions(self.agent_seat)

    def sample_action(self) -> np.ndarray:
        """随机采样一个合法动作 (选牌掩码)"""
        legal_actions = self.get_legal_actions()
        if not legal_actions:
            return np.zeros(DECK_SIZE, dtype=np.int8)
        idx = self.np_random.integers(len(legal_actions))
        return cards_to_array(legal_actions[idx].cards).astype(np.int8)

    def _require_session(self) -> GameSession:
        if self._session is None:
            raise RuntimeError("Environment not reset. Call reset() first.")
        return self._session


def make_env(**kwargs) -> TienLenEnv:
    """
    工厂函数：创建环境

    Args:
        **kwargs: 环境参数

    Returns:
        TienLenEnv 实例
    """
    return TienLenEnv(**kwargs)
