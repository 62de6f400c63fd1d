"""
状态校验

诊断用，规则引擎本身不调用 (对战竞技场在每步之后调用)
"""
from collections import Counter
from dataclasses import dataclass, field
from typing import List

from .cards import DECK_SIZE
from .state import Phase, RoundState


@dataclass
class ValidationResult:
    """校验结果"""
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate(state: RoundState, strict: bool = False) -> ValidationResult:
    """
    检查状态的结构不变量

    基本检查: 有玩家、牌组是序列、恰好两个弃牌堆、当前玩家下标合法
    strict 时额外检查: 总牌数为 64、uid 不重复、宣告状态一致

    Args:
        state: 回合状态
        strict: 是否做完整检查

    Returns:
        校验结果
    """
    result = ValidationResult()
    errors = result.errors

    if not state.players:
        errors.append("No players in game")

    if not isinstance(state.deck, (tuple, list)):
        errors.append("Invalid deck")

    if state.discard_piles is None or len(state.discard_piles) != 2:
        errors.append("Invalid discard piles")

    if not 0 <= state.current_player_index < len(state.players):
        errors.append("Invalid current player index")

    if not strict or errors:
        return result

    if state.total_cards != DECK_SIZE:
        errors.append(f"Card count is {state.total_cards}, expected {DECK_SIZE}")

    uids = [card.uid for card in state.deck]
    uids += [card.uid for pile in state.discard_piles for card in pile]
    uids += [card.uid for player in state.players for card in player.hand]
    duplicates = sorted(uid for uid, count in Counter(uids).items() if count > 1)
    if duplicates:
        errors.append(f"Duplicate cards: {', '.join(duplicates)}")

    if state.phase == Phase.DECLARING:
        if state.declarer_index is None:
            errors.append("Declaring phase without declarer")
        elif state.declarer_index in state.last_chance_pending:
            errors.append("Declarer cannot be owed a last-chance turn")
    elif state.last_chance_pending:
        errors.append("Pending last-chance turns outside declaring phase")

    return result
