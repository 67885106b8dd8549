"""
对局通知

会话在每次状态变化时产生事件，供界面层渲染
"""
from enum import Enum
from dataclasses import dataclass
from typing import Callable, Tuple, Union

from .cards import Card
from .actions import ComboType


class EventType(Enum):
    """事件类型"""
    TURN_CHANGED = "turn_changed"
    PLAY_ACCEPTED = "play_accepted"
    PLAYER_PASSED = "player_passed"
    ROUND_RESET = "round_reset"
    GAME_ENDED = "game_ended"


@dataclass(frozen=True)
class TurnChanged:
    """轮到新玩家"""
    player: int
    event_type: EventType = EventType.TURN_CHANGED


@dataclass(frozen=True)
class PlayAccepted:
    """
    出牌被接受

    Attributes:
        player: 出牌玩家
        cards: 出的牌
        combo_type: 牌型
        opened_round: 是否为本轮第一手
    """
    player: int
    cards: Tuple[Card, ...]
    combo_type: ComboType
    opened_round: bool
    event_type: EventType = EventType.PLAY_ACCEPTED


@dataclass(frozen=True)
class PlayerPassed:
    """玩家过牌"""
    player: int
    event_type: EventType = EventType.PLAYER_PASSED


@dataclass(frozen=True)
class RoundReset:
    """一轮结束，leader 赢得本轮并领出下一轮"""
    leader: int
    event_type: EventType = EventType.ROUND_RESET


@dataclass(frozen=True)
class GameEnded:
    """游戏结束"""
    winner: int
    event_type: EventType = EventType.GAME_ENDED


GameEvent = Union[TurnChanged, PlayAccepted, PlayerPassed, RoundReset, GameEnded]

# 事件监听器: 普通可调用对象
EventListener = Callable[[GameEvent], None]
