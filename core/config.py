"""
对局配置

定义对局与 AI 相关的配置
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any


@dataclass
class GameConfig:
    """
    对局配置

    Attributes:
        num_players: 玩家数 (52 张需能整除)
        seed: 洗牌随机种子，None 表示不固定
        strategy: 默认 AI 策略名
        seat_strategies: 按座位覆盖的策略名
        strict: 状态一致性错误时抛异常
        max_steps: 自动对局的最大步数
    """
    num_players: int = 4
    seed: Optional[int] = None
    strategy: str = "simple"
    seat_strategies: Dict[int, str] = field(default_factory=dict)
    strict: bool = False
    max_steps: int = 2000

    def __post_init__(self):
        if self.num_players < 2 or 52 % self.num_players != 0:
            raise ValueError(f"Unsupported number of players: {self.num_players}")

    def strategy_for(self, seat: int) -> str:
        return self.seat_strategies.get(seat, self.strategy)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'GameConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        if "seat_strategies" in filtered:
            filtered["seat_strategies"] = {
                int(seat): name for seat, name in filtered["seat_strategies"].items()
            }
        return cls(**filtered)
