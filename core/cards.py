"""
牌的定义与编码

海盐与纸牌使用 64 张牌：
- 效果牌: 鱼、螃蟹、船、鲨鱼、人 各 8 张
- 收集牌: 贝壳、章鱼、企鹅 各 8 张

牌组顶部为列表末尾
"""
import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np


class CardCategory(Enum):
    """牌的类别"""
    PAIR_EFFECT = "pairEffect"   # 配对时发动效果
    COLLECTION = "collection"    # 只计分


class CardColor(Enum):
    """牌的颜色 (计算同色奖励)"""
    BLUE = "blue"
    RED = "red"
    GREEN = "green"
    ORANGE = "orange"
    PURPLE = "purple"
    YELLOW = "yellow"
    PINK = "pink"
    CYAN = "cyan"


class PairEffect(Enum):
    """配对效果"""
    DRAW = "draw"                  # 抽 2 张，留 1 张
    TAKE_DISCARD = "takeDiscard"   # 从弃牌堆拿牌
    EXTRA_TURN = "extraTurn"       # 额外回合
    STEAL = "steal"                # 偷对手 1 张牌


@dataclass(frozen=True)
class Card:
    """
    一张牌

    Attributes:
        kind: 牌种标识 (fish, crab, ...)
        name: 显示名称
        category: 类别
        value: 分值
        color: 颜色
        pair_effect: 配对效果，收集牌为 None
        uid: 同种牌之间的唯一标识，如 "fish_3"
    """
    kind: str
    name: str
    category: CardCategory
    value: int
    color: CardColor
    pair_effect: Optional[PairEffect] = None
    uid: str = ""

    def copy_with_uid(self, index: int) -> 'Card':
        return Card(
            kind=self.kind,
            name=self.name,
            category=self.category,
            value=self.value,
            color=self.color,
            pair_effect=self.pair_effect,
            uid=f"{self.kind}_{index}",
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.kind,
            "name": self.name,
            "type": self.category.value,
            "value": self.value,
            "color": self.color.value,
            "pairEffect": self.pair_effect.value if self.pair_effect else None,
            "uniqueId": self.uid,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, object]) -> 'Card':
        effect = d.get("pairEffect")
        return cls(
            kind=str(d["id"]),
            name=str(d["name"]),
            category=CardCategory(d["type"]),
            value=int(d["value"]),
            color=CardColor(d["color"]),
            pair_effect=PairEffect(effect) if effect else None,
            uid=str(d.get("uniqueId", "")),
        )

    def __repr__(self) -> str:
        return f"Card({self.uid or self.kind}, {self.value}pt, {self.color.value})"


# 牌种目录
CATALOG: Tuple[Card, ...] = (
    Card("fish", "魚", CardCategory.PAIR_EFFECT, 1, CardColor.BLUE, PairEffect.DRAW),
    Card("crab", "螃蟹", CardCategory.PAIR_EFFECT, 2, CardColor.RED, PairEffect.TAKE_DISCARD),
    Card("ship", "船", CardCategory.PAIR_EFFECT, 3, CardColor.GREEN, PairEffect.EXTRA_TURN),
    Card("shark", "鯊魚", CardCategory.PAIR_EFFECT, 4, CardColor.ORANGE, PairEffect.STEAL),
    Card("human", "人", CardCategory.PAIR_EFFECT, 4, CardColor.PURPLE, PairEffect.STEAL),
    Card("shell", "貝殼", CardCategory.COLLECTION, 1, CardColor.YELLOW),
    Card("octopus", "章魚", CardCategory.COLLECTION, 2, CardColor.PINK),
    Card("penguin", "企鵝", CardCategory.COLLECTION, 3, CardColor.CYAN),
)

# 牌种标识到目录项的映射
KIND_TO_CARD: Dict[str, Card] = {c.kind: c for c in CATALOG}

# 牌种标识到编码索引的映射 (用于计数向量)
KIND_TO_INDEX: Dict[str, int] = {c.kind: i for i, c in enumerate(CATALOG)}

COLOR_TO_INDEX: Dict[CardColor, int] = {c: i for i, c in enumerate(CardColor)}

# 每种牌的张数
CARD_COUNTS: Dict[str, int] = {c.kind: 8 for c in CATALOG}

DECK_SIZE: int = sum(CARD_COUNTS.values())


def get_card(kind: str, index: int = 0) -> Card:
    """按牌种取一张带 uid 的牌 (测试与构造局面用)"""
    if kind not in KIND_TO_CARD:
        raise ValueError(f"Unknown card kind: {kind}")
    return KIND_TO_CARD[kind].copy_with_uid(index)


def shuffle(cards: Sequence[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """
    Fisher-Yates 洗牌

    不修改输入，返回新列表

    Args:
        cards: 待洗的牌
        rng: 随机数生成器，None 时使用 random 模块

    Returns:
        洗好的新列表
    """
    rng = rng or random
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def build_deck(rng: Optional[random.Random] = None) -> List[Card]:
    """
    构建并洗好完整牌组 (64 张)

    Args:
        rng: 随机数生成器

    Returns:
        洗好的牌组，顶部为末尾
    """
    deck = [
        KIND_TO_CARD[kind].copy_with_uid(i)
        for kind, count in CARD_COUNTS.items()
        for i in range(count)
    ]
    return shuffle(deck, rng)


def hand_value(cards: Sequence[Card]) -> int:
    """手牌分值之和"""
    return sum(card.value for card in cards)


def color_counts(cards: Sequence[Card]) -> np.ndarray:
    """各颜色张数，长度为颜色数的向量"""
    if not cards:
        return np.zeros(len(COLOR_TO_INDEX), dtype=np.int64)
    indices = [COLOR_TO_INDEX[card.color] for card in cards]
    return np.bincount(indices, minlength=len(COLOR_TO_INDEX))


def hand_to_array(cards: Sequence[Card]) -> np.ndarray:
    """
    将手牌转换为各牌种的计数向量

    Args:
        cards: 手牌

    Returns:
        长度为 8 的 float32 向量，按 CATALOG 顺序
    """
    array = np.zeros(len(CATALOG), dtype=np.float32)
    for card in cards:
        array[KIND_TO_INDEX[card.kind]] += 1
    return array


def cards_to_str(cards: Sequence[Card]) -> str:
    """
    将牌列表转换为可读字符串

    Returns:
        如 "魚(1) 鯊魚(4)"，空列表为 "-"
    """
    if not cards:
        return "-"
    return " ".join(f"{card.name}({card.value})" for card in cards)
