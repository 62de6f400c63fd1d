"""
游戏配置

定义规则常量和对局配置
"""
from dataclasses import dataclass, field
from typing import Dict, Optional

# 每人起手牌数
HAND_SIZE: int = 5

# 宣告所需最低手牌分值
DECLARE_THRESHOLD: int = 7

# 人数 -> 目标分
TARGET_SCORES: Dict[int, int] = {2: 40, 3: 35, 4: 30}

# 其他人数使用的目标分
DEFAULT_TARGET_SCORE: int = 40


@dataclass
class GameConfig:
    """
    对局配置

    Attributes:
        hand_size: 起手牌数
        declare_threshold: 宣告门槛
        target_scores: 人数到目标分的映射
        default_target_score: 未列出人数时的目标分
        max_rounds: 最多进行的轮数 (防止无限对局)
        seed: 随机种子
    """
    hand_size: int = HAND_SIZE
    declare_threshold: int = DECLARE_THRESHOLD
    target_scores: Dict[int, int] = field(default_factory=lambda: dict(TARGET_SCORES))
    default_target_score: int = DEFAULT_TARGET_SCORE
    max_rounds: int = 100
    seed: Optional[int] = None

    def target_score(self, player_count: int) -> int:
        return self.target_scores.get(player_count, self.default_target_score)

    def to_dict(self) -> dict:
        return {
            "hand_size": self.hand_size,
            "declare_threshold": self.declare_threshold,
            "target_scores": {str(k): v for k, v in self.target_scores.items()},
            "default_target_score": self.default_target_score,
            "max_rounds": self.max_rounds,
            "seed": self.seed,
        }

    @classmethod
    def from_dict(cls, d: dict) -> 'GameConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        if "target_scores" in filtered:
            filtered["target_scores"] = {int(k): int(v) for k, v in filtered["target_scores"].items()}
        return cls(**filtered)
