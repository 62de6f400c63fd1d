"""
回合状态定义

使用不可变数据结构，每个动作返回新状态:
- 便于快照同步
- 便于测试 (无全局状态)
- 动作失败时旧状态保持不变
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple
import logging

from .cards import Card, PairEffect, cards_to_str
from .config import DECLARE_THRESHOLD, HAND_SIZE
from .errors import IllegalActionError, InvalidSelectionError
from .rules import DeclarationResult, HandScore, RuleEngine

logger = logging.getLogger(__name__)


class Phase(Enum):
    """回合阶段"""
    DRAWING = "drawing"      # 等待当前玩家抽牌/拿牌
    DECLARING = "declaring"  # 已宣告最后机会，其他玩家各再行动一次
    SCORING = "scoring"      # 结算中


class DeclarationKind(Enum):
    """宣告类型"""
    IMMEDIATE = "immediate"     # 到此为止
    LAST_CHANCE = "lastChance"  # 最后机会


@dataclass(frozen=True)
class Player:
    """
    玩家

    Attributes:
        player_id: 玩家标识
        name: 显示名称
        hand: 手牌
        score: 累计得分
        round_score: 上一轮得分
        is_active: 是否在局中
    """
    player_id: str
    name: str
    hand: Tuple[Card, ...] = ()
    score: int = 0
    round_score: int = 0
    is_active: bool = True

    def with_hand(self, hand: Sequence[Card]) -> 'Player':
        return replace(self, hand=tuple(hand))

    def to_dict(self) -> dict:
        return {
            "id": self.player_id,
            "name": self.name,
            "hand": [card.to_dict() for card in self.hand],
            "score": self.score,
            "roundScore": self.round_score,
            "isActive": self.is_active,
        }

    @classmethod
    def from_dict(cls, d: dict) -> 'Player':
        return cls(
            player_id=str(d["id"]),
            name=str(d["name"]),
            hand=tuple(Card.from_dict(c) for c in d.get("hand", [])),
            score=int(d.get("score", 0)),
            round_score=int(d.get("roundScore", 0)),
            is_active=bool(d.get("isActive", True)),
        )


@dataclass(frozen=True)
class DrawResult:
    """从牌组抽牌的结果，牌组只剩 1 张时 discarded_card 为 None"""
    state: 'RoundState'
    kept_card: Card
    discarded_card: Optional[Card]


@dataclass(frozen=True)
class TakeResult:
    """从弃牌堆拿牌的结果，弃牌堆为空时 taken_card 为 None 且状态不变"""
    state: 'RoundState'
    taken_card: Optional[Card]

    @property
    def is_empty(self) -> bool:
        return self.taken_card is None


@dataclass(frozen=True)
class StealResult:
    """偷牌结果"""
    state: 'RoundState'
    stolen_card: Card
    victim_index: int


@dataclass(frozen=True)
class Settlement:
    """
    回合结算结果

    Attributes:
        state: 结算后的状态 (SCORING 阶段)
        declarer_index: 宣告者
        scores: 各玩家手牌得分 (按非胜者计算)
        points: 各玩家本轮实得分
        declaration: 宣告胜负
        game_winner_index: 达到目标分的第一位玩家，无则为 None
    """
    state: 'RoundState'
    declarer_index: int
    scores: Tuple[HandScore, ...]
    points: Tuple[int, ...]
    declaration: DeclarationResult
    game_winner_index: Optional[int]

    @property
    def is_declarer_winner(self) -> bool:
        return self.declaration.is_declarer_winner


@dataclass(frozen=True)
class RoundState:
    """
    不可变回合状态

    Attributes:
        deck: 牌组，顶部为末尾
        discard_piles: 两个弃牌堆，顶部为末尾
        players: 玩家 (座位顺序，回合内人数固定)
        current_player_index: 当前行动玩家
        round_number: 轮次，从 0 开始
        phase: 回合阶段
        declarer_index: 最后机会宣告者
        declaration_kind: 宣告类型
        last_chance_pending: 还欠最后一次行动的玩家
        extra_turn: 当前玩家结束回合后是否再行动一次
        has_drawn: 当前玩家本回合是否已从牌组或弃牌堆取牌
        played_uids: 本轮已打出效果的牌 (仍留在手牌中计分，不能再次配对)
    """
    deck: Tuple[Card, ...]
    discard_piles: Tuple[Tuple[Card, ...], Tuple[Card, ...]]
    players: Tuple[Player, ...]
    current_player_index: int = 0
    round_number: int = 0
    phase: Phase = Phase.DRAWING
    declarer_index: Optional[int] = None
    declaration_kind: Optional[DeclarationKind] = None
    last_chance_pending: Tuple[int, ...] = ()
    extra_turn: bool = False
    has_drawn: bool = False
    played_uids: FrozenSet[str] = frozenset()

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def target_score(self) -> int:
        return RuleEngine.get_target_score(self.player_count)

    @property
    def total_cards(self) -> int:
        """牌组 + 弃牌堆 + 所有手牌的总张数 (应恒为 64)"""
        return (
            len(self.deck)
            + sum(len(pile) for pile in self.discard_piles)
            + sum(len(p.hand) for p in self.players)
        )

    @property
    def ready_to_settle(self) -> bool:
        """最后机会的所有玩家都已行动完"""
        return self.phase == Phase.DECLARING and not self.last_chance_pending

    @property
    def can_draw(self) -> bool:
        """牌组或任一弃牌堆中还有牌"""
        return bool(self.deck) or any(self.discard_piles)

    @property
    def must_draw(self) -> bool:
        """当前玩家还需先取牌才能配对、宣告或结束回合"""
        return not self.has_drawn and self.can_draw

    def get_hand(self, index: int) -> Tuple[Card, ...]:
        return self.players[index].hand

    def player_index(self, player_id: str) -> int:
        for i, player in enumerate(self.players):
            if player.player_id == player_id:
                return i
        raise ValueError(f"Unknown player: {player_id}")

    def is_turn_of(self, player_id: str) -> bool:
        return self.current_player.player_id == player_id

    @classmethod
    def deal(
        cls,
        players: Sequence[Player],
        deck: Sequence[Card],
        round_number: int = 0,
        hand_size: int = HAND_SIZE,
    ) -> 'RoundState':
        """
        发牌，创建新回合

        从牌组顶部逐张轮流发牌，直到每人 hand_size 张
        玩家的累计分保留，手牌清空后重发

        Args:
            players: 玩家列表
            deck: 已洗好的牌组
            round_number: 轮次
            hand_size: 每人张数

        Returns:
            DRAWING 阶段的新状态，当前玩家为 0
        """
        if not players:
            raise ValueError("Cannot deal without players")
        if len(deck) < hand_size * len(players):
            raise ValueError(
                f"Deck too small: {len(deck)} cards for {len(players)} players"
            )

        remaining = list(deck)
        hands: List[List[Card]] = [[] for _ in players]
        for _ in range(hand_size):
            for hand in hands:
                hand.append(remaining.pop())

        dealt = tuple(
            replace(player, hand=tuple(hand), is_active=True)
            for player, hand in zip(players, hands)
        )
        logger.debug(f"Dealt round {round_number}: {len(dealt)} players, {len(remaining)} cards left")

        return cls(
            deck=tuple(remaining),
            discard_piles=((), ()),
            players=dealt,
            current_player_index=0,
            round_number=round_number,
            phase=Phase.DRAWING,
        )

    # ------------------------------------------------------------------
    # 内部工具
    # ------------------------------------------------------------------

    def _require_phase(self, *phases: Phase) -> None:
        if self.phase not in phases:
            raise IllegalActionError(f"Action not allowed in {self.phase.value} phase")

    def _require_not_drawn(self) -> None:
        if self.has_drawn:
            raise IllegalActionError("Player already drew this turn")

    def _require_drawn(self) -> None:
        if self.must_draw:
            raise IllegalActionError("Player must draw or take a card first")

    @staticmethod
    def _check_pile_index(pile_index: int) -> None:
        if pile_index not in (0, 1):
            raise ValueError(f"Discard pile index must be 0 or 1, got {pile_index}")

    def _with_current_hand(self, hand: Sequence[Card], **changes) -> 'RoundState':
        players = list(self.players)
        players[self.current_player_index] = players[self.current_player_index].with_hand(hand)
        return replace(self, players=tuple(players), **changes)

    # ------------------------------------------------------------------
    # 基本动作
    # ------------------------------------------------------------------

    def with_draw_from_deck(
        self,
        pile_index: int,
        keep_choice: int,
        by_effect: bool = False,
    ) -> DrawResult:
        """
        从牌组抽 2 张，留 1 张，另一张放入指定弃牌堆

        牌组不足 2 张时，先把两个弃牌堆 (0 号在下) 接到牌组底部，剩余牌仍在顶部

        Args:
            pile_index: 弃牌放入的弃牌堆 (0/1)
            keep_choice: 留下第几张 (0/1)
            by_effect: 由抽牌配对效果触发，不占用本回合的取牌

        Returns:
            抽牌结果

        Raises:
            IllegalActionError: 本回合已取过牌，或牌组与弃牌堆都为空
        """
        self._require_phase(Phase.DRAWING, Phase.DECLARING)
        self._check_pile_index(pile_index)
        if keep_choice not in (0, 1):
            raise ValueError(f"Keep choice must be 0 or 1, got {keep_choice}")
        if not by_effect:
            self._require_not_drawn()

        deck = list(self.deck)
        piles = [list(pile) for pile in self.discard_piles]

        if len(deck) < 2:
            discarded = piles[0] + piles[1]
            if not deck and not discarded:
                raise IllegalActionError("No cards left to draw")
            deck = discarded + deck
            piles = [[], []]
            logger.debug(f"Moved {len(discarded)} discarded cards into deck ({len(deck)} cards)")

        drawn = [deck.pop() for _ in range(min(2, len(deck)))]
        if len(drawn) == 1:
            kept, discarded_card = drawn[0], None
        else:
            kept, discarded_card = drawn[keep_choice], drawn[1 - keep_choice]
            piles[pile_index].append(discarded_card)

        state = self._with_current_hand(
            self.current_player.hand + (kept,),
            deck=tuple(deck),
            discard_piles=(tuple(piles[0]), tuple(piles[1])),
            has_drawn=self.has_drawn or not by_effect,
        )
        logger.debug(
            f"Player {self.current_player_index} drew {cards_to_str(drawn)}, kept {cards_to_str([kept])}"
        )
        return DrawResult(state=state, kept_card=kept, discarded_card=discarded_card)

    def with_take_from_discard(self, pile_index: int, by_effect: bool = False) -> TakeResult:
        """
        拿指定弃牌堆顶部的牌

        Args:
            pile_index: 弃牌堆 (0/1)
            by_effect: 由拿弃牌配对效果触发，不占用本回合的取牌

        Returns:
            拿牌结果，弃牌堆为空时 taken_card 为 None 且状态不变

        Raises:
            IllegalActionError: 本回合已取过牌
        """
        self._require_phase(Phase.DRAWING, Phase.DECLARING)
        self._check_pile_index(pile_index)
        if not by_effect:
            self._require_not_drawn()

        pile = self.discard_piles[pile_index]
        if not pile:
            return TakeResult(state=self, taken_card=None)

        taken = pile[-1]
        piles = list(self.discard_piles)
        piles[pile_index] = pile[:-1]
        state = self._with_current_hand(
            self.current_player.hand + (taken,),
            discard_piles=(piles[0], piles[1]),
            has_drawn=self.has_drawn or not by_effect,
        )
        logger.debug(f"Player {self.current_player_index} took {taken!r} from pile {pile_index}")
        return TakeResult(state=state, taken_card=taken)

    # ------------------------------------------------------------------
    # 配对效果
    # ------------------------------------------------------------------

    def playable_pairs(self) -> List[Tuple[int, int]]:
        """当前玩家还能打出的配对 (排除本轮已打出过的牌)"""
        hand = self.current_player.hand
        return [
            (i, j) for i, j in RuleEngine.find_valid_pairs(hand)
            if hand[i].uid not in self.played_uids and hand[j].uid not in self.played_uids
        ]

    def with_pair_played(self, i: int, j: int) -> Tuple['RoundState', Optional[PairEffect]]:
        """
        当前玩家打出一对牌

        两张牌留在手牌中，记入 played_uids

        Returns:
            (新状态, 配对效果)，收集牌配对的效果为 None

        Raises:
            InvalidSelectionError: 不是有效配对，或牌已打出过
        """
        self._require_phase(Phase.DRAWING, Phase.DECLARING)
        self._require_drawn()
        hand = self.current_player.hand
        if not RuleEngine.validate_pair_selection(hand, i, j):
            raise InvalidSelectionError(f"Cards {i} and {j} do not form a valid pair")
        if hand[i].uid in self.played_uids or hand[j].uid in self.played_uids:
            raise InvalidSelectionError(f"Cards {i} and {j} were already played as a pair")

        effect = RuleEngine.pair_effect_of(hand[i], hand[j])
        state = replace(self, played_uids=self.played_uids | {hand[i].uid, hand[j].uid})
        logger.debug(
            f"Player {self.current_player_index} played pair {cards_to_str([hand[i], hand[j]])}"
        )
        return state, effect

    def with_steal(self, victim_index: int, card_index: int) -> StealResult:
        """
        从其他玩家手牌中偷 1 张

        Args:
            victim_index: 被偷玩家
            card_index: 被偷手牌下标

        Returns:
            偷牌结果
        """
        self._require_phase(Phase.DRAWING, Phase.DECLARING)
        if not 0 <= victim_index < self.player_count:
            raise ValueError(f"Player index out of range: {victim_index}")
        if victim_index == self.current_player_index:
            raise InvalidSelectionError("Cannot steal from yourself")

        victim = self.players[victim_index]
        if not victim.hand:
            raise IllegalActionError(f"Player {victim_index} has no cards to steal")
        if not 0 <= card_index < len(victim.hand):
            raise ValueError(f"Card index out of range: {card_index} (hand size {len(victim.hand)})")

        stolen = victim.hand[card_index]
        players = list(self.players)
        players[victim_index] = victim.with_hand(victim.hand[:card_index] + victim.hand[card_index + 1:])
        thief = players[self.current_player_index]
        players[self.current_player_index] = thief.with_hand(thief.hand + (stolen,))

        logger.debug(f"Player {self.current_player_index} stole {stolen!r} from player {victim_index}")
        return StealResult(
            state=replace(self, players=tuple(players)),
            stolen_card=stolen,
            victim_index=victim_index,
        )

    def with_extra_turn(self) -> 'RoundState':
        """当前玩家结束回合后再行动一次"""
        self._require_phase(Phase.DRAWING, Phase.DECLARING)
        return replace(self, extra_turn=True)

    # ------------------------------------------------------------------
    # 回合推进
    # ------------------------------------------------------------------

    def with_turn_advanced(self) -> 'RoundState':
        """轮到下一位玩家，阶段回到 DRAWING"""
        return replace(
            self,
            current_player_index=(self.current_player_index + 1) % self.player_count,
            phase=Phase.DRAWING,
            extra_turn=False,
            has_drawn=False,
        )

    def with_turn_ended(self) -> 'RoundState':
        """
        当前玩家结束回合

        - 最后机会阶段: 交给下一位欠行动的玩家，全部行动完后回到宣告者
        - 有额外回合: 当前玩家继续
        - 否则: 轮到下一位
        """
        self._require_phase(Phase.DRAWING, Phase.DECLARING)
        self._require_drawn()

        if self.phase == Phase.DECLARING:
            pending = tuple(i for i in self.last_chance_pending if i != self.current_player_index)
            next_index = pending[0] if pending else self.declarer_index
            return replace(
                self,
                current_player_index=next_index,
                last_chance_pending=pending,
                extra_turn=False,
                has_drawn=False,
            )

        if self.extra_turn:
            return replace(self, extra_turn=False, has_drawn=False)
        return self.with_turn_advanced()

    # ------------------------------------------------------------------
    # 宣告与结算
    # ------------------------------------------------------------------

    def _check_declarer(self, declarer_index: int, threshold: int) -> None:
        if not 0 <= declarer_index < self.player_count:
            raise ValueError(f"Declarer index out of range: {declarer_index}")
        if not RuleEngine.can_declare(self.players[declarer_index].hand, threshold):
            raise InvalidSelectionError(
                f"Player {declarer_index} needs at least {threshold} points to declare"
            )

    def declare(
        self,
        declarer_index: int,
        kind: DeclarationKind = DeclarationKind.IMMEDIATE,
        threshold: int = DECLARE_THRESHOLD,
        target_score: Optional[int] = None,
    ) -> Settlement:
        """
        宣告并立即结算

        两种宣告的结算方式相同，最后机会的额外行动由 with_last_chance 编排

        Raises:
            InvalidSelectionError: 手牌分值不足
        """
        self._require_phase(Phase.DRAWING)
        self._require_drawn()
        self._check_declarer(declarer_index, threshold)
        logger.debug(f"Player {declarer_index} declared ({kind.value})")
        return replace(self, declaration_kind=kind).settle(declarer_index, target_score)

    def with_last_chance(
        self,
        declarer_index: int,
        threshold: int = DECLARE_THRESHOLD,
    ) -> 'RoundState':
        """
        宣告最后机会: 其他玩家按座位顺序各再行动一次

        Returns:
            DECLARING 阶段的状态，当前玩家为第一位欠行动的玩家
        """
        self._require_phase(Phase.DRAWING)
        self._require_drawn()
        self._check_declarer(declarer_index, threshold)

        n = self.player_count
        pending = tuple((declarer_index + k) % n for k in range(1, n))
        logger.debug(f"Player {declarer_index} declared last chance, pending {pending}")
        return replace(
            self,
            phase=Phase.DECLARING,
            declarer_index=declarer_index,
            declaration_kind=DeclarationKind.LAST_CHANCE,
            last_chance_pending=pending,
            current_player_index=pending[0] if pending else declarer_index,
            has_drawn=False,
            extra_turn=False,
        )

    def settle(self, declarer_index: int, target_score: Optional[int] = None) -> Settlement:
        """
        回合结算

        按非胜者计算所有玩家手牌得分 (即只比较同色奖励)，判定宣告胜负后按结算表加分
        有玩家达到目标分时返回第一位这样的玩家

        Args:
            declarer_index: 宣告者
            target_score: 目标分，None 时按人数取默认值

        Returns:
            结算结果
        """
        self._require_phase(Phase.DRAWING, Phase.DECLARING)
        if not 0 <= declarer_index < self.player_count:
            raise ValueError(f"Declarer index out of range: {declarer_index}")

        scores = tuple(RuleEngine.calculate_hand_score(p.hand, False) for p in self.players)
        declaration = RuleEngine.determine_declaration_winner(scores, declarer_index)
        points = RuleEngine.settlement_points(scores, declarer_index, declaration.is_declarer_winner)

        players = tuple(
            replace(p, score=p.score + pts, round_score=pts)
            for p, pts in zip(self.players, points)
        )
        target = target_score if target_score is not None else self.target_score
        game_winner_index = next((i for i, p in enumerate(players) if p.score >= target), None)

        state = replace(
            self,
            players=players,
            phase=Phase.SCORING,
            declarer_index=declarer_index,
            last_chance_pending=(),
            extra_turn=False,
            has_drawn=False,
        )
        logger.debug(
            f"Settled round {self.round_number}: declarer {declarer_index} "
            f"{'won' if declaration.is_declarer_winner else 'lost'}, points {points}"
        )
        return Settlement(
            state=state,
            declarer_index=declarer_index,
            scores=scores,
            points=tuple(points),
            declaration=declaration,
            game_winner_index=game_winner_index,
        )

    # ------------------------------------------------------------------
    # 视图与序列化
    # ------------------------------------------------------------------

    def status(self) -> Dict[str, object]:
        """当前局面摘要"""
        return {
            "currentPlayerIndex": self.current_player_index,
            "currentPlayerName": self.current_player.name,
            "gamePhase": self.phase.value,
            "targetScore": self.target_score,
            "playerScores": [
                {"name": p.name, "score": p.score, "handSize": len(p.hand)}
                for p in self.players
            ],
            "deckSize": len(self.deck),
            "discardPiles": [
                {"topCard": pile[-1].to_dict() if pile else None, "size": len(pile)}
                for pile in self.discard_piles
            ],
        }

    def round_summary(self) -> str:
        return (
            f"Round {self.round_number + 1} | Current: {self.current_player.name} "
            f"| Phase: {self.phase.value}"
        )

    def to_dict(self) -> dict:
        return {
            "deck": [card.to_dict() for card in self.deck],
            "discardPiles": [[card.to_dict() for card in pile] for pile in self.discard_piles],
            "players": [p.to_dict() for p in self.players],
            "currentPlayerIndex": self.current_player_index,
            "roundNumber": self.round_number,
            "gamePhase": self.phase.value,
            "declarerIndex": self.declarer_index,
            "declarationKind": self.declaration_kind.value if self.declaration_kind else None,
            "lastChancePending": list(self.last_chance_pending),
            "extraTurn": self.extra_turn,
            "hasDrawn": self.has_drawn,
            "playedUids": sorted(self.played_uids),
        }

    @classmethod
    def from_dict(cls, d: dict) -> 'RoundState':
        piles = [tuple(Card.from_dict(c) for c in pile) for pile in d["discardPiles"]]
        if len(piles) != 2:
            raise ValueError(f"Expected 2 discard piles, got {len(piles)}")
        kind = d.get("declarationKind")
        return cls(
            deck=tuple(Card.from_dict(c) for c in d["deck"]),
            discard_piles=(piles[0], piles[1]),
            players=tuple(Player.from_dict(p) for p in d["players"]),
            current_player_index=int(d.get("currentPlayerIndex", 0)),
            round_number=int(d.get("roundNumber", 0)),
            phase=Phase(d.get("gamePhase", Phase.DRAWING.value)),
            declarer_index=d.get("declarerIndex"),
            declaration_kind=DeclarationKind(kind) if kind else None,
            last_chance_pending=tuple(d.get("lastChancePending", ())),
            extra_turn=bool(d.get("extraTurn", False)),
            has_drawn=bool(d.get("hasDrawn", False)),
            played_uids=frozenset(d.get("playedUids", ())),
        )
