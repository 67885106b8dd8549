"""
Environment Layer - Gymnasium 兼容环境

Modules:
    tienlen_env: 主环境类
    observation: 观测空间构建
    reward: 奖励函数
"""
from .tienlen_env import (
    TienLenEnv,
    make_env,
)

from .observation import (
    Observation,
    ObservationBuilder,
    build_legal_mask,
)

from .reward import (
    RewardType,
    RewardConfig,
    RewardCalculator,
    create_reward_calculator,
)

__all__ = [
    # env
    "TienLenEnv",
    "make_env",
    # observation
    "Observation",
    "ObservationBuilder",
    "build_legal_mask",
    # reward
    "RewardType",
    "RewardConfig",
    "RewardCalculator",
    "create_reward_calculator",
]
