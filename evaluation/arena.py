"""
对战竞技场

组织多智能体对战
"""
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, replace
from collections import defaultdict
from itertools import permutations
import numpy as np
import logging
from concurrent.futures import ThreadPoolExecutor

from core.config import GameConfig
from core.session import GameSession

from .evaluator import Agent, play_game
from .metrics import GameMetrics, MetricsCollector

logger = logging.getLogger(__name__)


@dataclass
class MatchResult:
    """对局结果"""
    agents: Tuple[str, ...]  # 按座位排列
    winner: int              # 赢家座位，未结束为 -1
    winner_agent: str
    length: int
    rounds: int
    bombs: int
    cards_left: Tuple[int, ...]

    @classmethod
    def from_session(cls, agents: List[Agent], session: GameSession) -> "MatchResult":
        winner = session.winner
        return cls(
            agents=tuple(agent.name for agent in agents),
            winner=winner,
            winner_agent=agents[winner].name if winner >= 0 else "",
            length=session.plies,
            rounds=session.rounds,
            bombs=session.bombs,
            cards_left=tuple(session.cards_left()),
        )


@dataclass
class TournamentResult:
    """锦标赛结果"""
    standings: Dict[str, Dict[str, float]]
    total_games: int
    matches: List[MatchResult]

    def get_ranking(self) -> List[Tuple[str, float]]:
        """获取排名"""
        return sorted(
            [(name, stats.get("win_rate", 0.0)) for name, stats in self.standings.items()],
            key=lambda x: x[1],
            reverse=True,
        )

    def to_dict(self) -> Dict:
        return {
            "total_games": self.total_games,
            "standings": {name: dict(stats) for name, stats in self.standings.items()},
            "ranking": self.get_ranking(),
        }

    def __repr__(self) -> str:
        ranking = self.get_ranking()
        lines = [f"Tournament Results ({self.total_games} games):"]
        for i, (name, win_rate) in enumerate(ranking):
            lines.append(f"  {i+1}. {name}: {win_rate:.2%}")
        return "\n".join(lines)


class Arena:
    """
    对战竞技场

    组织智能体之间的对战。智能体名称必须唯一
    """

    def __init__(self, config: Optional[GameConfig] = None, seed: Optional[int] = None):
        self.config = config or GameConfig()
        self._rng = np.random.default_rng(seed)
        self._games_played = 0
        self.collector = MetricsCollector()

    @property
    def num_players(self) -> int:
        return self.config.num_players

    def _next_config(self) -> GameConfig:
        # 每局使用不同种子，保证可复现
        seed = None
        if self.config.seed is not None:
            seed = self.config.seed + self._games_played
        self._games_played += 1
        return replace(self.config, seed=seed)

    def _record(self, result: MatchResult):
        self.collector.add_game(GameMetrics(
            winner=result.winner_agent,
            players=result.agents,
            length=result.length,
            rounds=result.rounds,
            bombs=result.bombs,
            cards_left=dict(zip(result.agents, result.cards_left)),
        ))

    def _run_single(self, agents: List[Agent], config: GameConfig) -> MatchResult:
        session = play_game(agents, config)
        return MatchResult.from_session(agents, session)

    def play_match(
        self,
        agents: List[Agent],
        n_games: int = 1,
    ) -> List[MatchResult]:
        """
        进行对局

        Args:
            agents: 每个座位一个智能体
            n_games: 对局数

        Returns:
            对局结果列表
        """
        if len(agents) != self.num_players:
            raise ValueError(f"Need exactly {self.num_players} agents, got {len(agents)}")

        results = []
        for _ in range(n_games):
            result = self._run_single(agents, self._next_config())
            self._record(result)
            results.append(result)

        return results

    def _update_standings(
        self,
        standings: Dict[str, Dict[str, float]],
        results: List[MatchResult],
    ):
        for result in results:
            for seat, name in enumerate(result.agents):
                standings[name]["games"] += 1
                standings[name]["cards_left"] += result.cards_left[seat]
                if seat == result.winner:
                    standings[name]["wins"] += 1
                    if seat == 0:
                        standings[name]["seat0_wins"] += 1

    @staticmethod
    def _finalize(standings: Dict[str, Dict[str, float]]):
        for name, stats in standings.items():
            if stats["games"] > 0:
                stats["win_rate"] = stats["wins"] / stats["games"]
                stats["avg_cards_left"] = stats["cards_left"] / stats["games"]

    def round_robin(
        self,
        agents: List[Agent],
        games_per_match: int = 10,
    ) -> TournamentResult:
        """
        循环赛

        每种座位排列都对战

        Args:
            agents: 智能体列表 (至少 num_players 个)
            games_per_match: 每场比赛的对局数

        Returns:
            锦标赛结果
        """
        if len(agents) < self.num_players:
            raise ValueError(f"Round robin needs at least {self.num_players} agents")

        standings = {agent.name: defaultdict(float) for agent in agents}
        all_matches = []

        # 生成所有位置组合
        for perm in permutations(range(len(agents)), self.num_players):
            match_agents = [agents[i] for i in perm]

            results = self.play_match(match_agents, games_per_match)
            all_matches.extend(results)
            self._update_standings(standings, results)

        self._finalize(standings)
        logger.info("Round robin finished: %d games", len(all_matches))

        return TournamentResult(
            standings=dict(standings),
            total_games=len(all_matches),
            matches=all_matches,
        )

    def tournament(
        self,
        agents: List[Agent],
        n_rounds: int = 100,
    ) -> TournamentResult:
        """
        锦标赛

        随机配对进行多轮比赛，智能体不足一桌时重复使用

        Args:
            agents: 智能体列表
            n_rounds: 轮数

        Returns:
            锦标赛结果
        """
        if not agents:
            raise ValueError("Tournament needs at least one agent")

        standings = {agent.name: defaultdict(float) for agent in agents}
        all_matches = []

        for _ in range(n_rounds):
            replace_pick = len(agents) < self.num_players
            selected = self._rng.choice(len(agents), self.num_players, replace=replace_pick)
            match_agents = [agents[i] for i in selected]

            results = self.play_match(match_agents, n_games=1)
            all_matches.extend(results)
            self._update_standings(standings, results)

        self._finalize(standings)

        return TournamentResult(
            standings=dict(standings),
            total_games=len(all_matches),
            matches=all_matches,
        )


class ParallelArena(Arena):
    """
    并行对战竞技场

    使用多线程加速对战。智能体在线程间共享，需无状态或线程安全
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        n_workers: int = 4,
    ):
        super().__init__(config, seed)
        self.n_workers = n_workers

    def play_match(
        self,
        agents: List[Agent],
        n_games: int = 1,
    ) -> List[MatchResult]:
        """并行对局 (结果按对局顺序返回)"""
        if n_games <= 1:
            return super().play_match(agents, n_games)
        if len(agents) != self.num_players:
            raise ValueError(f"Need exactly {self.num_players} agents, got {len(agents)}")

        configs = [self._next_config() for _ in range(n_games)]
        with ThreadPoolExecutor(max_workers=self.n_workers) as executor:
            futures = [
                executor.submit(self._run_single, agents, config)
                for config in configs
            ]
            results = [future.result() for future in futures]

        for result in results:
            self._record(result)
        return results


class LeaderBoard:
    """
    排行榜

    跨多次锦标赛累计每个智能体的胜场与剩余手牌;
    胜率相同时剩余手牌少者靠前
    """

    def __init__(self):
        self.records: Dict[str, Dict[str, float]] = {}
        self.history: List[Dict] = []

    def update(self, tournament_result: TournamentResult):
        for name, stats in tournament_result.standings.items():
            record = self.records.setdefault(name, defaultdict(float))
            record["games"] += stats.get("games", 0)
            record["wins"] += stats.get("wins", 0)
            record["cards_left"] += stats.get("cards_left", 0)

        self.history.append({
            "standings": tournament_result.standings,
            "total_games": tournament_result.total_games,
        })

    def stats_for(self, name: str) -> Dict[str, float]:
        """
        单个智能体的累计数据

        Returns:
            games / wins / win_rate / avg_cards_left, 未知名称返回空字典
        """
        record = self.records.get(name)
        if not record or record["games"] == 0:
            return {}
        return {
            "games": int(record["games"]),
            "wins": int(record["wins"]),
            "win_rate": record["wins"] / record["games"],
            "avg_cards_left": record["cards_left"] / record["games"],
        }

    def get_ranking(self) -> List[Tuple[str, float, int]]:
        """获取排名 (名称, 胜率, 总场次)"""
        rows = []
        for name in self.records:
            stats = self.stats_for(name)
            if stats:
                rows.append((name, stats["win_rate"], stats["games"], stats["avg_cards_left"]))
        rows.sort(key=lambda r: (-r[1], r[3], -r[2]))
        return [(name, win_rate, games) for name, win_rate, games, _ in rows]

    def __repr__(self) -> str:
        lines = ["Leaderboard:"]
        for i, (name, win_rate, games) in enumerate(self.get_ranking()):
            left = self.stats_for(name)["avg_cards_left"]
            lines.append(f"  {i+1}. {name}: {win_rate:.2%} ({games} games, {left:.1f} cards left)")
        return "\n".join(lines)
