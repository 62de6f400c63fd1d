"""
智能体

按回合状态和合法动作选择动作
"""
from typing import List, Optional

import numpy as np

from core.actions import Action, ActionType
from core.cards import KIND_TO_INDEX, PairEffect, hand_to_array, hand_value
from core.rules import RuleEngine
from core.state import DeclarationKind, RoundState


class Agent:
    """智能体基类"""

    def __init__(self, name: str = "agent"):
        self.name = name

    def act(self, state: RoundState, legal_actions: List[Action]) -> Action:
        """选择动作"""
        raise NotImplementedError

    def reset(self, seed: Optional[int] = None):
        """重置状态"""
        pass


class RandomAgent(Agent):
    """随机智能体"""

    def __init__(self, name: str = "random", seed: Optional[int] = None):
        super().__init__(name)
        self._rng = np.random.default_rng(seed)

    def reset(self, seed: Optional[int] = None):
        if seed is not None:
            self._rng = np.random.default_rng(seed)

    def act(self, state: RoundState, legal_actions: List[Action]) -> Action:
        if not legal_actions:
            return Action.end_turn()
        idx = int(self._rng.integers(len(legal_actions)))
        return legal_actions[idx]


class GreedyAgent(Agent):
    """
    贪心智能体

    规则:
    - 能宣告且同色奖励严格领先 (或牌组快空) 时立即宣告
    - 优先打出偷牌、抽牌配对，其次其他配对
    - 弃牌堆顶的牌能凑成配对或分值 >= 3 时拿它，否则抽牌
    """

    # 效果优先级，越小越优先
    EFFECT_PRIORITY = {
        PairEffect.STEAL: 0,
        PairEffect.DRAW: 1,
        PairEffect.TAKE_DISCARD: 2,
        PairEffect.EXTRA_TURN: 3,
        None: 4,
    }

    def __init__(self, name: str = "greedy", low_deck: int = 10):
        super().__init__(name)
        self.low_deck = low_deck

    def _should_declare(self, state: RoundState) -> bool:
        me = state.current_player_index
        bonuses = [
            RuleEngine.calculate_hand_score(p.hand, False).color_bonus
            for p in state.players
        ]
        others = [b for i, b in enumerate(bonuses) if i != me]
        leading = not others or bonuses[me] > max(others)
        return leading or len(state.deck) < self.low_deck

    def _pair_priority(self, state: RoundState, action: Action) -> int:
        hand = state.current_player.hand
        i, j = action.pair
        return self.EFFECT_PRIORITY[RuleEngine.pair_effect_of(hand[i], hand[j])]

    def _worth_taking(self, state: RoundState, pile_index: int) -> bool:
        top = state.discard_piles[pile_index][-1]
        hand = state.current_player.hand
        counts = hand_to_array(hand)
        same_kind = counts[KIND_TO_INDEX[top.kind]] > 0
        return same_kind or any(RuleEngine.is_valid_pair(top, card) for card in hand) or top.value >= 3

    def act(self, state: RoundState, legal_actions: List[Action]) -> Action:
        if not legal_actions:
            return Action.end_turn()

        by_type = {}
        for action in legal_actions:
            by_type.setdefault(action.action_type, []).append(action)

        declares = by_type.get(ActionType.DECLARE, [])
        if declares and self._should_declare(state):
            return next(a for a in declares if a.declaration == DeclarationKind.IMMEDIATE)

        pairs = by_type.get(ActionType.PLAY_PAIR, [])
        if pairs:
            return min(pairs, key=lambda a: self._pair_priority(state, a))

        for action in by_type.get(ActionType.TAKE_DISCARD, []):
            if self._worth_taking(state, action.pile_index):
                return action

        draws = by_type.get(ActionType.DRAW, [])
        if draws:
            # 弃牌放到顶牌分值较低的弃牌堆
            piles = state.discard_piles
            target = 0 if hand_value(piles[0][-1:]) <= hand_value(piles[1][-1:]) else 1
            return next(a for a in draws if a.pile_index == target)

        return legal_actions[-1]
