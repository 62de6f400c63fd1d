"""
动作类型定义与合法动作生成器

一个回合: 先抽牌或拿弃牌，然后可以打出配对，最后宣告或结束回合
"""
from enum import IntEnum
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from .cards import PairEffect
from .effects import EffectArgs
from .rules import RuleEngine
from .session import GameSession
from .state import DeclarationKind, Phase, RoundState


class ActionType(IntEnum):
    """动作类型"""
    DRAW = 0           # 从牌组抽 2 留 1
    TAKE_DISCARD = 1   # 拿弃牌堆顶的牌
    PLAY_PAIR = 2      # 打出配对
    DECLARE = 3        # 宣告
    END_TURN = 4       # 结束回合


@dataclass(frozen=True)
class Action:
    """
    不可变动作表示

    Attributes:
        action_type: 动作类型
        pile_index: DRAW/TAKE_DISCARD 使用的弃牌堆
        keep_choice: DRAW 留下第几张
        pair: PLAY_PAIR 的两张牌下标
        effect_args: PLAY_PAIR 的效果参数
        declaration: DECLARE 的宣告类型
    """
    action_type: ActionType
    pile_index: int = 0
    keep_choice: int = 0
    pair: Optional[Tuple[int, int]] = None
    effect_args: Optional[EffectArgs] = None
    declaration: Optional[DeclarationKind] = None

    @classmethod
    def draw(cls, pile_index: int, keep_choice: int) -> 'Action':
        return cls(ActionType.DRAW, pile_index=pile_index, keep_choice=keep_choice)

    @classmethod
    def take(cls, pile_index: int) -> 'Action':
        return cls(ActionType.TAKE_DISCARD, pile_index=pile_index)

    @classmethod
    def play_pair(cls, i: int, j: int, args: Optional[EffectArgs] = None) -> 'Action':
        return cls(ActionType.PLAY_PAIR, pair=(i, j), effect_args=args)

    @classmethod
    def declare(cls, kind: DeclarationKind) -> 'Action':
        return cls(ActionType.DECLARE, declaration=kind)

    @classmethod
    def end_turn(cls) -> 'Action':
        return cls(ActionType.END_TURN)

    @property
    def is_draw_phase(self) -> bool:
        """是否为回合开始的取牌动作"""
        return self.action_type in (ActionType.DRAW, ActionType.TAKE_DISCARD)

    @property
    def ends_turn(self) -> bool:
        return self.action_type in (ActionType.END_TURN, ActionType.DECLARE)


class ActionGenerator:
    """
    合法动作生成器

    根据回合状态生成当前玩家的所有合法动作，本回合是否已取牌由状态记录
    """

    def __init__(self, state: RoundState, declare_threshold: Optional[int] = None):
        """
        Args:
            state: 回合状态
            declare_threshold: 宣告门槛，None 使用默认值
        """
        self.state = state
        self.declare_threshold = declare_threshold

    def gen_draws(self) -> List[Action]:
        actions = []
        if self.state.can_draw:
            actions.extend(Action.draw(pile, keep) for pile in (0, 1) for keep in (0, 1))
        actions.extend(Action.take(pile) for pile in (0, 1) if self.state.discard_piles[pile])
        return actions

    def gen_pairs(self) -> List[Action]:
        """每个可打出的配对，按效果填入默认参数"""
        state = self.state
        hand = state.current_player.hand
        actions = []
        for i, j in state.playable_pairs():
            effect = RuleEngine.pair_effect_of(hand[i], hand[j])
            if effect == PairEffect.DRAW:
                if state.can_draw:
                    actions.append(Action.play_pair(i, j, EffectArgs(pile_index=0, keep_choice=0)))
            elif effect == PairEffect.TAKE_DISCARD:
                for pile in (0, 1):
                    if state.discard_piles[pile]:
                        actions.append(Action.play_pair(i, j, EffectArgs(pile_index=pile)))
            elif effect == PairEffect.STEAL:
                for victim, player in enumerate(state.players):
                    if victim != state.current_player_index and player.hand:
                        actions.append(Action.play_pair(i, j, EffectArgs(victim_index=victim)))
            else:
                actions.append(Action.play_pair(i, j))
        return actions

    def gen_declarations(self) -> List[Action]:
        state = self.state
        if state.phase != Phase.DRAWING:
            return []
        if self.declare_threshold is None:
            allowed = RuleEngine.can_declare(state.current_player.hand)
        else:
            allowed = RuleEngine.can_declare(state.current_player.hand, self.declare_threshold)
        if not allowed:
            return []
        return [Action.declare(DeclarationKind.IMMEDIATE), Action.declare(DeclarationKind.LAST_CHANCE)]

    def generate_all(self) -> List[Action]:
        """
        生成所有合法动作

        Returns:
            需要取牌时为取牌动作，否则为配对、宣告和结束回合 (无牌可取时直接进入后者)
        """
        if self.state.phase == Phase.SCORING:
            return []
        if self.state.must_draw:
            return self.gen_draws()
        return self.gen_pairs() + self.gen_declarations() + [Action.end_turn()]


def perform(session: GameSession, player_id: str, action: Action) -> Any:
    """
    在会话上执行动作

    Returns:
        对应会话方法的返回值
    """
    if action.action_type == ActionType.DRAW:
        return session.draw_from_deck(player_id, action.pile_index, action.keep_choice)
    if action.action_type == ActionType.TAKE_DISCARD:
        return session.take_from_discard(player_id, action.pile_index)
    if action.action_type == ActionType.PLAY_PAIR:
        i, j = action.pair
        return session.play_pair(player_id, i, j, action.effect_args)
    if action.action_type == ActionType.DECLARE:
        return session.declare(player_id, action.declaration)
    if action.action_type == ActionType.END_TURN:
        return session.end_turn(player_id)
    raise ValueError(f"Unknown action type: {action.action_type}")
