"""
配对效果分派

效果本身复用回合状态的基本动作:
- DRAW: 从牌组抽 2 留 1
- TAKE_DISCARD: 从弃牌堆拿牌
- EXTRA_TURN: 结束回合后再行动一次
- STEAL: 从对手手牌偷 1 张
"""
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .cards import Card, PairEffect
from .state import RoundState


@dataclass(frozen=True)
class EffectArgs:
    """
    效果参数

    Attributes:
        pile_index: DRAW 放弃牌的弃牌堆 / TAKE_DISCARD 拿牌的弃牌堆
        keep_choice: DRAW 留下第几张
        victim_index: STEAL 的对象
        card_index: STEAL 偷对象的第几张手牌
    """
    pile_index: int = 0
    keep_choice: int = 0
    victim_index: Optional[int] = None
    card_index: int = 0


@dataclass(frozen=True)
class EffectOutcome:
    """效果结果，card 为玩家因效果获得的牌"""
    state: RoundState
    effect: Optional[PairEffect]
    card: Optional[Card] = None


def _draw(state: RoundState, args: EffectArgs) -> EffectOutcome:
    result = state.with_draw_from_deck(args.pile_index, args.keep_choice, by_effect=True)
    return EffectOutcome(result.state, PairEffect.DRAW, result.kept_card)


def _take_discard(state: RoundState, args: EffectArgs) -> EffectOutcome:
    result = state.with_take_from_discard(args.pile_index, by_effect=True)
    return EffectOutcome(result.state, PairEffect.TAKE_DISCARD, result.taken_card)


def _extra_turn(state: RoundState, args: EffectArgs) -> EffectOutcome:
    return EffectOutcome(state.with_extra_turn(), PairEffect.EXTRA_TURN)


def _steal(state: RoundState, args: EffectArgs) -> EffectOutcome:
    if args.victim_index is None:
        raise ValueError("Steal effect requires victim_index")
    result = state.with_steal(args.victim_index, args.card_index)
    return EffectOutcome(result.state, PairEffect.STEAL, result.stolen_card)


EFFECT_HANDLERS: Dict[PairEffect, Callable[[RoundState, EffectArgs], EffectOutcome]] = {
    PairEffect.DRAW: _draw,
    PairEffect.TAKE_DISCARD: _take_discard,
    PairEffect.EXTRA_TURN: _extra_turn,
    PairEffect.STEAL: _steal,
}


def apply_pair_effect(
    state: RoundState,
    i: int,
    j: int,
    args: Optional[EffectArgs] = None,
) -> EffectOutcome:
    """
    当前玩家打出第 i、j 张牌并执行配对效果

    效果失败时 (如无牌可偷、弃牌堆为空) 整个动作不生效，原状态不变

    Args:
        state: 当前状态
        i: 第一张牌下标
        j: 第二张牌下标
        args: 效果参数

    Returns:
        效果结果

    Raises:
        InvalidSelectionError: 配对无效
    """
    args = args or EffectArgs()
    played, effect = state.with_pair_played(i, j)
    if effect is None:
        return EffectOutcome(played, None)
    outcome = EFFECT_HANDLERS[effect](played, args)
    if effect == PairEffect.TAKE_DISCARD and outcome.card is None:
        # 弃牌堆为空: 配对不算打出
        return EffectOutcome(state, effect, None)
    return outcome
