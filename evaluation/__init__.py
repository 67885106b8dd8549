"""
Evaluation Layer - 评估框架

Modules:
    evaluator: 评估器和智能体
    arena: 对战竞技场
    metrics: 评估指标
"""
from .evaluator import (
    EvalResult,
    Agent,
    RandomAgent,
    StrategyAgent,
    play_game,
    Evaluator,
)
from .arena import (
    MatchResult,
    TournamentResult,
    Arena,
    ParallelArena,
    LeaderBoard,
)
from .metrics import (
    GameMetrics,
    MetricsCollector,
    RunningStats,
    MetricsAggregator,
)

__all__ = [
    # evaluator
    "EvalResult",
    "Agent",
    "RandomAgent",
    "StrategyAgent",
    "play_game",
    "Evaluator",
    # arena
    "MatchResult",
    "TournamentResult",
    "Arena",
    "ParallelArena",
    "LeaderBoard",
    # metrics
    "GameMetrics",
    "MetricsCollector",
    "RunningStats",
    "MetricsAggregator",
]
