"""
评估指标

定义和计算对局指标
"""
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field
from collections import defaultdict
import numpy as np

from core.session import GameSession


@dataclass
class GameMetrics:
    """
    单局游戏指标

    Attributes:
        winner: 赢家名称 (未结束为空字符串)
        players: 按座位排列的玩家名称
        length: 总步数 (出牌 + 过牌)
        rounds: 完整轮数
        bombs: 打出的炸弹数
        cards_left: 各玩家结束时剩余牌数
    """
    winner: str
    players: Tuple[str, ...]
    length: int
    rounds: int = 0
    bombs: int = 0
    cards_left: Dict[str, int] = field(default_factory=dict)


class MetricsCollector:
    """
    指标收集器

    收集和计算游戏指标
    """

    def __init__(self):
        self.games: List[GameMetrics] = []
        self._stats: Dict[str, Dict] = defaultdict(lambda: defaultdict(list))

    def add_game(self, metrics: GameMetrics):
        """添加游戏指标"""
        self.games.append(metrics)

        for player in metrics.players:
            self._stats[player]["games"].append(1)
            self._stats[player]["wins"].append(1 if metrics.winner == player else 0)
            self._stats[player]["lengths"].append(metrics.length)
            self._stats[player]["bombs"].append(metrics.bombs)
            if player in metrics.cards_left:
                self._stats[player]["cards_left"].append(metrics.cards_left[player])

    def compute_metrics(self, player: Optional[str] = None) -> Dict[str, float]:
        """
        计算指标

        Args:
            player: 指定玩家，None 表示全局

        Returns:
            指标字典
        """
        if player is not None:
            stats = self._stats[player]
            n_games = len(stats["games"])

            if n_games == 0:
                return {}

            return {
                "games": n_games,
                "win_rate": sum(stats["wins"]) / n_games,
                "avg_length": np.mean(stats["lengths"]),
                "avg_bombs": np.mean(stats["bombs"]),
                "avg_cards_left": np.mean(stats["cards_left"]) if stats["cards_left"] else 0.0,
            }
        else:
            # 全局统计
            n_games = len(self.games)
            if n_games == 0:
                return {}

            finished = sum(1 for g in self.games if g.winner)

            return {
                "total_games": n_games,
                "finish_rate": finished / n_games,
                "avg_length": np.mean([g.length for g in self.games]),
                "avg_rounds": np.mean([g.rounds for g in self.games]),
                "avg_bombs": np.mean([g.bombs for g in self.games]),
                "bomb_rate": np.mean([1 if g.bombs else 0 for g in self.games]),
            }

    def reset(self):
        """重置"""
        self.games.clear()
        self._stats.clear()


class RunningStats:
    """
    单个数值的在线统计 (Welford)

    用于逐局累计步数、轮数、剩余牌数等，无需保存每局数据
    """

    def __init__(self):
        self.count = 0
        self.mean = 0.0
        self._m2 = 0.0
        self.low = 0.0
        self.high = 0.0

    def update(self, x: float):
        x = float(x)
        if self.count == 0:
            self.low = self.high = x
        else:
            self.low = min(self.low, x)
            self.high = max(self.high, x)
        self.count += 1
        delta = x - self.mean
        self.mean += delta / self.count
        self._m2 += delta * (x - self.mean)

    @property
    def std(self) -> float:
        """样本标准差，少于两个样本时为 0"""
        if self.count < 2:
            return 0.0
        return float(np.sqrt(self._m2 / (self.count - 1)))

    def to_dict(self) -> Dict[str, float]:
        return {
            "mean": self.mean,
            "std": self.std,
            "min": self.low,
            "max": self.high,
        }


class MetricsAggregator:
    """
    按座位聚合多局指标

    每局结束后调用 add_session，记录该座位视角下的
    步数、轮数、炸弹数、剩余牌数和胜负
    """

    FIELDS = ("plies", "rounds", "bombs", "cards_left", "won")

    def __init__(self):
        self.stats: Dict[str, RunningStats] = {name: RunningStats() for name in self.FIELDS}

    @property
    def games(self) -> int:
        return self.stats["plies"].count

    def add_session(self, session: GameSession, seat: int):
        """
        记录一局结果

        Args:
            session: 已结束 (或达到步数上限) 的会话
            seat: 关注的座位
        """
        self.stats["plies"].update(session.plies)
        self.stats["rounds"].update(session.rounds)
        self.stats["bombs"].update(session.bombs)
        self.stats["cards_left"].update(len(session.hands[seat]))
        self.stats["won"].update(1.0 if session.winner == seat else 0.0)

    def mean(self, name: str) -> float:
        return self.stats[name].mean

    def flatten(self) -> Dict[str, float]:
        """展开为 "<字段>_<统计量>" 形式的扁平字典"""
        flat = {}
        for name, stats in self.stats.items():
            for key, value in stats.to_dict().items():
                flat[f"{name}_{key}"] = value
        return flat
