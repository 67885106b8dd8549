"""
评估器

评估 AI 策略的对局表现
"""
from typing import Dict, List, Optional, Union
from dataclasses import dataclass, field
from dataclasses import replace
import numpy as np
import logging

from core.cards import Card
from core.actions import Combo
from core.state import GameState
from core.config import GameConfig
from core.decision import DecisionEngine, Strategy
from core.session import GameSession

from .metrics import MetricsAggregator

logger = logging.getLogger(__name__)


@dataclass
class EvalResult:
    """评估结果"""
    win_rate: float
    avg_length: float
    games_played: int
    avg_rounds: float = 0.0
    avg_cards_left: float = 0.0
    bomb_rate: float = 0.0
    extra_stats: Dict[str, float] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"EvalResult(win_rate={self.win_rate:.2%}, "
            f"avg_cards_left={self.avg_cards_left:.2f}, "
            f"games={self.games_played})"
        )


class Agent:
    """智能体基类"""

    def __init__(self, name: str = "agent"):
        self.name = name

    def act(self, hand: List[Card], state: GameState, legal_actions: List[Combo]) -> List[Card]:
        """
        选择出牌

        Args:
            hand: 手牌
            state: 游戏状态 (只读)
            legal_actions: 合法出牌 (空 Combo 表示过牌)

        Returns:
            要出的牌，空列表表示过牌
        """
        raise NotImplementedError

    def reset(self):
        """重置状态"""
        pass


class RandomAgent(Agent):
    """随机智能体"""

    def __init__(self, name: str = "random", seed: Optional[int] = None):
        super().__init__(name)
        self._rng = np.random.default_rng(seed)

    def act(self, hand: List[Card], state: GameState, legal_actions: List[Combo]) -> List[Card]:
        if not legal_actions:
            return []
        idx = self._rng.integers(len(legal_actions))
        return list(legal_actions[idx].cards)


class StrategyAgent(Agent):
    """策略智能体 (包装决策引擎)"""

    def __init__(self, strategy: Union[str, Strategy] = "simple", name: Optional[str] = None):
        engine = DecisionEngine(strategy)
        super().__init__(name or engine.strategy.name)
        self.engine = engine

    def act(self, hand: List[Card], state: GameState, legal_actions: List[Combo]) -> List[Card]:
        return self.engine.decide_play(hand, state, state.is_first_turn_of_game)


def play_game(agents: List[Agent], config: GameConfig) -> GameSession:
    """
    让一组智能体完成一局

    Args:
        agents: 每个座位一个智能体
        config: 对局配置

    Returns:
        结束后的会话
    """
    if len(agents) != config.num_players:
        raise ValueError(f"Need exactly {config.num_players} agents, got {len(agents)}")

    for agent in agents:
        agent.reset()

    session = GameSession(config)
    session.start()

    for _ in range(config.max_steps):
        if session.is_over:
            break
        player = session.current_player
        legal_actions = session.legal_actions(player)
        cards = agents[player].act(session.hands[player].cards, session.state, legal_actions)
        result = session.submit(player, cards)
        if not result.accepted:
            raise RuntimeError(
                f"Agent {agents[player].name} made an illegal move: {result.verdict.message}"
            )

    if not session.is_over:
        logger.warning("Game did not finish within %d steps", config.max_steps)
    return session


class Evaluator:
    """
    评估器

    让智能体轮流坐各个座位，统计其表现
    """

    def __init__(self, config: Optional[GameConfig] = None):
        self.config = config or GameConfig()

    def _game_config(self, game_idx: int) -> GameConfig:
        seed = None if self.config.seed is None else self.config.seed + game_idx
        return replace(self.config, seed=seed)

    def evaluate(
        self,
        agent: Agent,
        n_games: int = 100,
        opponents: Optional[List[Agent]] = None,
        verbose: bool = False,
    ) -> EvalResult:
        """
        评估智能体

        Args:
            agent: 待评估智能体
            n_games: 游戏数量
            opponents: 对手列表 (num_players - 1 个)
            verbose: 是否输出详情

        Returns:
            评估结果
        """
        num_players = self.config.num_players
        if opponents is None:
            opponents = [RandomAgent(f"opp{i}") for i in range(num_players - 1)]
        if len(opponents) != num_players - 1:
            raise ValueError(f"Need exactly {num_players - 1} opponents")

        aggregator = MetricsAggregator()

        for game_idx in range(n_games):
            # 确定智能体位置 (轮流)
            agent_seat = game_idx % num_players
            agents = list(opponents)
            agents.insert(agent_seat, agent)

            session = play_game(agents, self._game_config(game_idx))
            aggregator.add_session(session, agent_seat)

            if verbose and (game_idx + 1) % 10 == 0:
                logger.info(
                    f"Game {game_idx + 1}/{n_games}, Win rate: {aggregator.mean('won'):.2%}"
                )

        return EvalResult(
            win_rate=aggregator.mean("won"),
            avg_length=aggregator.mean("plies"),
            games_played=n_games,
            avg_rounds=aggregator.mean("rounds"),
            avg_cards_left=aggregator.mean("cards_left"),
            bomb_rate=aggregator.mean("bombs"),
            extra_stats=aggregator.flatten() if n_games > 0 else {},
        )

    def compare(
        self,
        agent1: Agent,
        agent2: Agent,
        n_games: int = 100,
    ) -> Dict[str, float]:
        """
        对比两个智能体

        两者交替占据座位 (4 人局各占两个座位)，每局交换先后

        Returns:
            对比结果
        """
        num_players = self.config.num_players

        agent1_wins = 0
        agent2_wins = 0

        for game_idx in range(n_games):
            first, second = (agent1, agent2) if game_idx % 2 == 0 else (agent2, agent1)
            agents = [first if seat % 2 == 0 else second for seat in range(num_players)]

            session = play_game(agents, self._game_config(game_idx))
            if session.winner < 0:
                continue
            if agents[session.winner] is agent1:
                agent1_wins += 1
            else:
                agent2_wins += 1

        return {
            "agent1_wins": agent1_wins,
            "agent2_wins": agent2_wins,
            "agent1_win_rate": agent1_wins / n_games if n_games > 0 else 0.0,
            "agent2_win_rate": agent2_wins / n_games if n_games > 0 else 0.0,
        }
