"""
Core Layer - 纯游戏逻辑 (无 I/O)

Modules:
    cards: 牌目录、建牌组、洗牌
    rules: 配对与计分规则
    state: 回合状态机
    effects: 配对效果分派
    session: 多轮对局
    actions: 动作类型与合法动作生成
    validator: 状态校验
    config: 规则常量与配置
    errors: 异常
"""
from .cards import (
    Card,
    CardCategory,
    CardColor,
    PairEffect,
    CATALOG,
    CARD_COUNTS,
    DECK_SIZE,
    build_deck,
    shuffle,
    get_card,
    hand_value,
    color_counts,
    hand_to_array,
    cards_to_str,
)

from .config import (
    GameConfig,
    HAND_SIZE,
    DECLARE_THRESHOLD,
    TARGET_SCORES,
)

from .errors import (
    GameError,
    IllegalActionError,
    InvalidSelectionError,
)

from .rules import (
    RuleEngine,
    HandScore,
    DeclarationResult,
)

from .state import (
    Phase,
    DeclarationKind,
    Player,
    RoundState,
    DrawResult,
    TakeResult,
    StealResult,
    Settlement,
)

from .effects import (
    EffectArgs,
    EffectOutcome,
    apply_pair_effect,
)

from .session import GameSession

from .actions import (
    ActionType,
    Action,
    ActionGenerator,
    perform,
)

from .validator import (
    ValidationResult,
    validate,
)

__all__ = [
    # cards
    "Card",
    "CardCategory",
    "CardColor",
    "PairEffect",
    "CATALOG",
    "CARD_COUNTS",
    "DECK_SIZE",
    "build_deck",
    "shuffle",
    "get_card",
    "hand_value",
    "color_counts",
    "hand_to_array",
    "cards_to_str",
    # config
    "GameConfig",
    "HAND_SIZE",
    "DECLARE_THRESHOLD",
    "TARGET_SCORES",
    # errors
    "GameError",
    "IllegalActionError",
    "InvalidSelectionError",
    # rules
    "RuleEngine",
    "HandScore",
    "DeclarationResult",
    # state
    "Phase",
    "DeclarationKind",
    "Player",
    "RoundState",
    "DrawResult",
    "TakeResult",
    "StealResult",
    "Settlement",
    # effects
    "EffectArgs",
    "EffectOutcome",
    "apply_pair_effect",
    # session
    "GameSession",
    # actions
    "ActionType",
    "Action",
    "ActionGenerator",
    "perform",
    # validator
    "ValidationResult",
    "validate",
]
