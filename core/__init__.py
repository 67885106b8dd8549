"""
Core Layer - 纯游戏逻辑 (无 ML / 环境依赖)

Modules:
    cards: 牌定义与编码
    deck: 牌组、手牌与发牌
    actions: 牌型与候选出牌生成
    rules: 规则引擎 (牌型检测、大小比较、出牌校验)
    state: 回合状态机
    decision: 决策引擎 (AI 策略)
    events: 对局通知
    session: 对局会话编排
    config: 对局配置
"""
from .cards import (
    Rank,
    Suit,
    Card,
    FULL_DECK,
    THREE_OF_SPADES,
    RANK_TO_STR,
    SUIT_TO_STR,
    card_from_str,
    str_to_cards,
    cards_to_str,
    cards_to_array,
    array_to_cards,
    cards_to_matrix,
)

from .deck import (
    Hand,
    Deck,
    CARDS_PER_PLAYER,
    new_shuffled_deck,
    deal,
)

from .actions import (
    ComboType,
    Combo,
    ComboGenerator,
    BOMB_TYPES,
    MIN_STRAIGHT_LEN,
    MAX_STRAIGHT_LEN,
    MIN_CONSECUTIVE_PAIRS,
)

from .rules import (
    RuleEngine,
    RejectReason,
    PlayVerdict,
    detect_type,
    is_straight,
    is_consecutive_pairs,
    is_valid,
    get_strength,
    beats,
)

from .state import GameState, GameStateError

from .decision import (
    Strategy,
    SimpleStrategy,
    ScoredStrategy,
    ScoringWeights,
    StrategyRegistry,
    DecisionEngine,
    build_strategy,
    decide_play,
)

from .events import (
    EventType,
    TurnChanged,
    PlayAccepted,
    PlayerPassed,
    RoundReset,
    GameEnded,
)

from .config import GameConfig

from .session import GameSession, PlayResult

__all__ = [
    # cards
    "Rank",
    "Suit",
    "Card",
    "FULL_DECK",
    "THREE_OF_SPADES",
    "RANK_TO_STR",
    "SUIT_TO_STR",
    "card_from_str",
    "str_to_cards",
    "cards_to_str",
    "cards_to_array",
    "array_to_cards",
    "cards_to_matrix",
    # deck
    "Hand",
    "Deck",
    "CARDS_PER_PLAYER",
    "new_shuffled_deck",
    "deal",
    # actions
    "ComboType",
    "Combo",
    "ComboGenerator",
    "BOMB_TYPES",
    "MIN_STRAIGHT_LEN",
    "MAX_STRAIGHT_LEN",
    "MIN_CONSECUTIVE_PAIRS",
    # rules
    "RuleEngine",
    "RejectReason",
    "PlayVerdict",
    "detect_type",
    "is_straight",
    "is_consecutive_pairs",
    "is_valid",
    "get_strength",
    "beats",
    # state
    "GameState",
    "GameStateError",
    # decision
    "Strategy",
    "SimpleStrategy",
    "ScoredStrategy",
    "ScoringWeights",
    "StrategyRegistry",
    "DecisionEngine",
    "build_strategy",
    "decide_play",
    # events
    "EventType",
    "TurnChanged",
    "PlayAccepted",
    "PlayerPassed",
    "RoundReset",
    "GameEnded",
    # config
    "GameConfig",
    # session
    "GameSession",
    "PlayResult",
]
