"""
规则引擎 - 配对判定、手牌计分、宣告胜负

所有方法都是纯函数，无状态
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .cards import Card, PairEffect, color_counts, hand_value
from .config import DECLARE_THRESHOLD, DEFAULT_TARGET_SCORE, TARGET_SCORES

# 鲨鱼与人可以跨牌种配对
CROSS_PAIR: frozenset = frozenset({"shark", "human"})


@dataclass(frozen=True)
class HandScore:
    """手牌得分明细"""
    base_score: int
    color_bonus: int
    total: int


@dataclass(frozen=True)
class DeclarationResult:
    """
    宣告胜负

    Attributes:
        is_declarer_winner: 宣告者是否严格高于所有其他玩家
        declarer_score: 宣告者的 total
        max_other_score: 其他玩家 total 的最大值，无其他玩家时为 None
    """
    is_declarer_winner: bool
    declarer_score: int
    max_other_score: Optional[int]


class RuleEngine:
    """
    海盐与纸牌规则引擎

    提供配对判定、计分、宣告判定等功能
    所有方法都是静态方法，无状态
    """

    # ------------------------------------------------------------------
    # 配对
    # ------------------------------------------------------------------

    @staticmethod
    def is_valid_pair(a: Optional[Card], b: Optional[Card]) -> bool:
        """
        检查两张牌能否配对

        同种牌总能配对 (包括鲨鱼+鲨鱼、人+人)，鲨鱼+人也能配对

        Args:
            a: 第一张牌，可为 None
            b: 第二张牌，可为 None

        Returns:
            是否构成有效配对
        """
        if a is None or b is None:
            return False
        if a.kind == b.kind:
            return True
        return {a.kind, b.kind} == CROSS_PAIR

    @staticmethod
    def pair_effect_of(a: Card, b: Card) -> Optional[PairEffect]:
        """配对触发的效果，收集牌配对没有效果"""
        if not RuleEngine.is_valid_pair(a, b):
            return None
        if {a.kind, b.kind} == CROSS_PAIR:
            return PairEffect.STEAL
        return a.pair_effect

    @staticmethod
    def find_valid_pairs(hand: Sequence[Card]) -> List[Tuple[int, int]]:
        """
        枚举手牌中所有有效配对

        Args:
            hand: 手牌

        Returns:
            (i, j) 列表，i < j，先按 i 再按 j 升序
        """
        pairs = []
        for i in range(len(hand)):
            for j in range(i + 1, len(hand)):
                if RuleEngine.is_valid_pair(hand[i], hand[j]):
                    pairs.append((i, j))
        return pairs

    @staticmethod
    def validate_pair_selection(hand: Sequence[Card], i: int, j: int) -> bool:
        """
        检查玩家选择的两张牌是否为有效配对

        Args:
            hand: 手牌
            i: 第一张牌的下标
            j: 第二张牌的下标

        Returns:
            {i, j} 是否在 find_valid_pairs 的结果中

        Raises:
            ValueError: 下标越界
        """
        for index in (i, j):
            if not 0 <= index < len(hand):
                raise ValueError(f"Card index out of range: {index} (hand size {len(hand)})")
        if i == j:
            return False
        return (min(i, j), max(i, j)) in RuleEngine.find_valid_pairs(hand)

    # ------------------------------------------------------------------
    # 计分
    # ------------------------------------------------------------------

    @staticmethod
    def calculate_hand_score(hand: Sequence[Card], is_declaration_winner: bool) -> HandScore:
        """
        计算手牌得分

        - base_score: 手牌分值之和
        - color_bonus: 同色最多的张数
        - total: 宣告胜者为 base_score + color_bonus，否则只有 color_bonus

        Args:
            hand: 手牌
            is_declaration_winner: 是否为宣告胜者

        Returns:
            得分明细
        """
        base_score = hand_value(hand)
        color_bonus = int(color_counts(hand).max()) if hand else 0
        total = base_score + color_bonus if is_declaration_winner else color_bonus
        return HandScore(base_score=base_score, color_bonus=color_bonus, total=total)

    @staticmethod
    def can_declare(hand: Sequence[Card], threshold: int = DECLARE_THRESHOLD) -> bool:
        """手牌分值达到门槛才能宣告，空手牌不能宣告"""
        if not hand:
            return False
        return hand_value(hand) >= threshold

    @staticmethod
    def determine_declaration_winner(
        scores: Sequence[HandScore],
        declarer_index: int,
    ) -> DeclarationResult:
        """
        判定宣告者是否获胜

        宣告者必须严格高于其他所有玩家，平分算宣告者输

        Args:
            scores: 各玩家得分 (按座位顺序)
            declarer_index: 宣告者下标

        Returns:
            宣告胜负
        """
        if not 0 <= declarer_index < len(scores):
            raise ValueError(f"Declarer index out of range: {declarer_index}")

        declarer_score = scores[declarer_index].total
        others = [s.total for i, s in enumerate(scores) if i != declarer_index]
        return DeclarationResult(
            is_declarer_winner=all(total < declarer_score for total in others),
            declarer_score=declarer_score,
            max_other_score=max(others) if others else None,
        )

    @staticmethod
    def settlement_points(
        scores: Sequence[HandScore],
        declarer_index: int,
        is_declarer_winner: bool,
    ) -> List[int]:
        """
        按结算表计算每位玩家本轮得分

        | 玩家   | 宣告者胜                 | 宣告者负                 |
        | 宣告者 | base_score + color_bonus | color_bonus              |
        | 其他   | color_bonus              | base_score + color_bonus |
        """
        points = []
        for i, score in enumerate(scores):
            full = (i == declarer_index) == is_declarer_winner
            points.append(score.base_score + score.color_bonus if full else score.color_bonus)
        return points

    @staticmethod
    def get_target_score(player_count: int) -> int:
        """目标分: 2 人 40，3 人 35，4 人 30，其他 40"""
        return TARGET_SCORES.get(player_count, DEFAULT_TARGET_SCORE)
