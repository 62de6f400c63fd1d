"""测试公用夹具"""
import pytest

from core.cards import get_card
from core.state import Player, RoundState


class CardFactory:
    """按牌种发牌，同种牌的 uid 依次递增，保证同一测试内不重复"""

    def __init__(self):
        self._next = {}

    def __call__(self, kind):
        index = self._next.get(kind, 0)
        self._next[kind] = index + 1
        return get_card(kind, index)

    def many(self, *kinds):
        return tuple(self(kind) for kind in kinds)


@pytest.fixture
def cards():
    return CardFactory()


@pytest.fixture
def make_state(cards):
    """
    构造回合状态

    hands: 每位玩家的牌种列表
    deck / piles: 牌种列表，末尾为顶部
    默认当前玩家本回合已取过牌，测试取牌时传 has_drawn=False
    """

    def _make(hands, deck=(), piles=((), ()), scores=None, **kwargs):
        kwargs.setdefault("has_drawn", True)
        scores = scores or [0] * len(hands)
        players = tuple(
            Player(player_id=f"p{i}", name=f"P{i}", hand=cards.many(*hand), score=score)
            for i, (hand, score) in enumerate(zip(hands, scores))
        )
        return RoundState(
            deck=cards.many(*deck),
            discard_piles=(cards.many(*piles[0]), cards.many(*piles[1])),
            players=players,
            **kwargs,
        )

    return _make
