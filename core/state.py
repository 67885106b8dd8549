"""
游戏状态定义

可变的回合状态机:
- 当前玩家游标
- 本轮过牌标记 / 在局玩家标记
- 桌面组合
- 轮次与胜负判定

"一轮结束" 与 "游戏结束" 都是每次转移后检查的派生条件，不是独立状态
"""
from dataclasses import dataclass, field
from typing import List, Iterable
import copy
import logging

from .cards import Card
from .actions import ComboType
from .rules import RuleEngine

logger = logging.getLogger(__name__)


class GameStateError(RuntimeError):
    """状态一致性被破坏 (上游漏调 reset_round 等编排错误)"""


@dataclass
class GameState:
    """
    可变游戏状态

    由对局会话独占，单线程写入

    Attributes:
        num_players: 玩家数
        current_player: 当前行动玩家
        table_combo: 本轮最近一次被接受的出牌，空表示本轮尚无人出牌
        passed_players: 本轮已过牌标记
        active_players: 在局标记 (出完牌即永久退出)
        consecutive_passes: 连续过牌数
        last_player_to_play: 本轮最后出牌的玩家，-1 表示本轮无人出牌
        is_first_turn_of_game: 整局第一手尚未被接受
        winner: 赢家，-1 表示未结束
        strict: 一致性错误时抛出 GameStateError 而非只记录日志
    """
    num_players: int = 4
    current_player: int = 0
    table_combo: List[Card] = field(default_factory=list)
    passed_players: List[bool] = field(default_factory=list)
    active_players: List[bool] = field(default_factory=list)
    consecutive_passes: int = 0
    last_player_to_play: int = -1
    is_first_turn_of_game: bool = True
    winner: int = -1
    strict: bool = False

    def __post_init__(self):
        if self.num_players < 2:
            raise ValueError(f"Need at least 2 players, got {self.num_players}")
        if not self.passed_players:
            self.passed_players = [False] * self.num_players
        if not self.active_players:
            self.active_players = [True] * self.num_players
        if len(self.passed_players) != self.num_players or len(self.active_players) != self.num_players:
            raise ValueError("Player flag lists must match num_players")
        if not 0 <= self.current_player < self.num_players:
            raise ValueError(f"Invalid current_player: {self.current_player}")

    # ------------------------------------------------------------------
    # 派生属性
    # ------------------------------------------------------------------

    @property
    def game_over(self) -> bool:
        return self.winner != -1

    @property
    def active_count(self) -> int:
        return sum(self.active_players)

    @property
    def table_type(self) -> ComboType:
        """桌面牌型 (空桌面为 INVALID)"""
        return RuleEngine.detect_type(self.table_combo)

    @property
    def is_round_open(self) -> bool:
        """本轮尚无人出牌"""
        return not self.table_combo

    # ------------------------------------------------------------------
    # 状态转移
    # ------------------------------------------------------------------

    def mark_player_played(self) -> None:
        """当前玩家出牌: 清除其过牌标记，连续过牌清零，记录最后出牌者"""
        self.passed_players[self.current_player] = False
        self.consecutive_passes = 0
        self.last_player_to_play = self.current_player

    def mark_player_passed(self) -> None:
        """当前玩家过牌"""
        self.passed_players[self.current_player] = True
        self.consecutive_passes += 1

        if self.consecutive_passes > max(self.active_count - 1, 0):
            self._inconsistent(
                f"consecutive_passes={self.consecutive_passes} exceeds "
                f"active players - 1 ({self.active_count - 1}); missing reset_round()?"
            )

    def set_table_combo(self, cards: Iterable[Card]) -> None:
        """替换桌面组合 (保存副本)"""
        self.table_combo = sorted(cards)

    def next_player(self) -> int:
        """
        轮转到下一个既在局又未过牌的玩家

        最多探测 num_players 次；若无合格玩家，保持 current_player 不变并告警

        Returns:
            新的当前玩家
        """
        for step in range(1, self.num_players + 1):
            candidate = (self.current_player + step) % self.num_players
            if self.active_players[candidate] and not self.passed_players[candidate]:
                self.current_player = candidate
                return candidate

        self._inconsistent(
            f"next_player found no eligible player (passed={self.passed_players}, "
            f"active={self.active_players})",
            level=logging.WARNING,
        )
        return self.current_player

    def all_others_passed(self) -> bool:
        """
        本轮是否结束: 有人出过牌，且除最后出牌者外所有在局玩家都已过牌
        """
        if self.last_player_to_play == -1:
            return False
        for player in range(self.num_players):
            if player == self.last_player_to_play or not self.active_players[player]:
                continue
            if not self.passed_players[player]:
                return False
        return True

    def reset_round(self) -> None:
        """
        开始新一轮

        不修改 current_player，由编排方设置为本轮赢家
        """
        self.passed_players = [False] * self.num_players
        self.table_combo = []
        self.consecutive_passes = 0
        self.last_player_to_play = -1

    def mark_player_inactive(self, player: int) -> None:
        """玩家出完牌，永久退出"""
        if not 0 <= player < self.num_players:
            raise ValueError(f"Invalid player: {player}")
        self.active_players[player] = False

    def check_game_over(self) -> bool:
        """
        仅剩一名在局玩家时结束，并将其记为赢家

        编排方通常在有人出完牌时直接结束游戏，此处为兜底检查
        """
        if self.active_count == 1:
            self.winner = self.active_players.index(True)
            return True
        return False

    def declare_winner(self, player: int) -> None:
        """有人出完牌，立即结束"""
        if not 0 <= player < self.num_players:
            raise ValueError(f"Invalid player: {player}")
        self.winner = player

    def copy(self) -> 'GameState':
        return copy.deepcopy(self)

    def _inconsistent(self, message: str, level: int = logging.ERROR) -> None:
        logger.log(level, "Game state inconsistency: %s", message)
        if self.strict:
            raise GameStateError(message)
