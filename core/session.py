"""
对局会话

管理多轮对局:
- 发牌开始一轮
- 校验行动玩家后把动作交给回合状态
- 宣告结算后判断是否有人达到目标分，否则带着累计分重新发牌
"""
from typing import Any, Dict, List, Optional, Sequence
import logging
import random

from .cards import build_deck
from .config import GameConfig
from .effects import EffectArgs, EffectOutcome, apply_pair_effect
from .errors import IllegalActionError
from .state import DeclarationKind, DrawResult, Player, RoundState, Settlement, TakeResult

logger = logging.getLogger(__name__)


class GameSession:
    """
    海盐与纸牌对局

    会话持有唯一的权威状态，每个动作前都重新校验是否轮到该玩家

    API:
    - start() -> RoundState
    - draw_from_deck / take_from_discard / play_pair / end_turn / declare
    """

    def __init__(
        self,
        players: Sequence[Player],
        config: Optional[GameConfig] = None,
    ):
        """
        Args:
            players: 座位顺序的玩家
            config: 对局配置
        """
        if not players:
            raise ValueError("A game needs at least one player")
        ids = [p.player_id for p in players]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate player ids: {ids}")

        self.config = config or GameConfig()
        self._players = tuple(players)
        self._rng = random.Random(self.config.seed)
        self._state: Optional[RoundState] = None
        self._winner_index: Optional[int] = None
        self._last_settlement: Optional[Settlement] = None
        self._last_round: Optional[Dict[str, Any]] = None

    @classmethod
    def from_names(cls, names: Sequence[str], config: Optional[GameConfig] = None) -> 'GameSession':
        """按名字创建玩家，id 为 p0, p1, ..."""
        players = [Player(player_id=f"p{i}", name=name) for i, name in enumerate(names)]
        return cls(players, config)

    # ------------------------------------------------------------------
    # 属性
    # ------------------------------------------------------------------

    @property
    def state(self) -> RoundState:
        if self._state is None:
            raise RuntimeError("Game not started. Call start() first.")
        return self._state

    @property
    def players(self) -> Sequence[Player]:
        return self._state.players if self._state is not None else self._players

    @property
    def target_score(self) -> int:
        return self.config.target_score(len(self._players))

    @property
    def is_started(self) -> bool:
        return self._state is not None

    @property
    def is_finished(self) -> bool:
        return self._winner_index is not None

    @property
    def winner(self) -> Optional[Player]:
        if self._winner_index is None:
            return None
        return self.state.players[self._winner_index]

    @property
    def final_scores(self) -> Dict[str, int]:
        return {p.player_id: p.score for p in self.players}

    @property
    def last_settlement(self) -> Optional[Settlement]:
        return self._last_settlement

    @property
    def last_round(self) -> Optional[Dict[str, Any]]:
        """上一轮结算摘要"""
        return self._last_round

    # ------------------------------------------------------------------
    # 生命周期
    # ------------------------------------------------------------------

    def start(self) -> RoundState:
        """发第一轮牌"""
        if self._state is not None:
            raise IllegalActionError("Game already started")
        self._state = self._deal(self._players, round_number=0)
        logger.info(f"Game started: {len(self._players)} players, target {self.target_score}")
        return self._state

    def _deal(self, players: Sequence[Player], round_number: int) -> RoundState:
        deck = build_deck(self._rng)
        return RoundState.deal(players, deck, round_number=round_number, hand_size=self.config.hand_size)

    def _require_turn(self, player_id: str) -> int:
        if self.is_finished:
            raise IllegalActionError("Game is finished")
        state = self.state
        index = state.player_index(player_id)
        if index != state.current_player_index:
            raise IllegalActionError(
                f"Not {player_id}'s turn (current: {state.current_player.player_id})"
            )
        return index

    def _finish_round(self, settlement: Settlement) -> None:
        self._last_settlement = settlement
        self._last_round = {
            "roundNumber": settlement.state.round_number,
            "declarerIndex": settlement.declarer_index,
            "isDeclarerWinner": settlement.is_declarer_winner,
            "points": list(settlement.points),
        }
        state = settlement.state
        logger.info(
            f"Round {state.round_number} settled: declarer {settlement.declarer_index} "
            f"{'won' if settlement.is_declarer_winner else 'lost'}, "
            f"scores {[p.score for p in state.players]}"
        )

        winner_index = settlement.game_winner_index
        if winner_index is None and state.round_number + 1 >= self.config.max_rounds:
            best = max(p.score for p in state.players)
            winner_index = next(i for i, p in enumerate(state.players) if p.score == best)
            logger.warning(f"Reached max rounds ({self.config.max_rounds}), ending game")

        if winner_index is not None:
            self._winner_index = winner_index
            self._state = state
            logger.info(f"Game over: {state.players[winner_index].name} wins with {state.players[winner_index].score}")
            return

        self._state = self._deal(state.players, round_number=state.round_number + 1)

    # ------------------------------------------------------------------
    # 玩家动作
    # ------------------------------------------------------------------

    def draw_from_deck(self, player_id: str, pile_index: int, keep_choice: int) -> DrawResult:
        """抽 2 张留 1 张，每回合只能取牌一次"""
        self._require_turn(player_id)
        result = self.state.with_draw_from_deck(pile_index, keep_choice)
        self._state = result.state
        return result

    def take_from_discard(self, player_id: str, pile_index: int) -> TakeResult:
        """从弃牌堆拿牌，弃牌堆为空时 taken_card 为 None 且不算取牌"""
        self._require_turn(player_id)
        result = self.state.with_take_from_discard(pile_index)
        self._state = result.state
        return result

    def play_pair(
        self,
        player_id: str,
        i: int,
        j: int,
        args: Optional[EffectArgs] = None,
    ) -> EffectOutcome:
        """打出一对并执行效果"""
        self._require_turn(player_id)
        outcome = apply_pair_effect(self.state, i, j, args)
        self._state = outcome.state
        return outcome

    def end_turn(self, player_id: str) -> RoundState:
        """
        结束回合

        最后机会的所有玩家都行动完后自动结算
        """
        self._require_turn(player_id)
        state = self.state.with_turn_ended()
        self._state = state
        if state.ready_to_settle:
            self._finish_round(state.settle(state.declarer_index, self.target_score))
        return self.state

    def declare(
        self,
        player_id: str,
        kind: DeclarationKind = DeclarationKind.IMMEDIATE,
    ) -> Optional[Settlement]:
        """
        宣告

        - IMMEDIATE: 立即结算，返回结算结果
        - LAST_CHANCE: 其他玩家各再行动一次，返回 None，结算在最后一人结束回合时进行

        Raises:
            InvalidSelectionError: 手牌分值不足
        """
        index = self._require_turn(player_id)
        threshold = self.config.declare_threshold

        if kind == DeclarationKind.IMMEDIATE:
            settlement = self.state.declare(index, kind, threshold, self.target_score)
            self._finish_round(settlement)
            return settlement

        state = self.state.with_last_chance(index, threshold)
        self._state = state
        logger.info(f"{player_id} declared last chance")
        if state.ready_to_settle:
            settlement = state.settle(index, self.target_score)
            self._finish_round(settlement)
            return settlement
        return None

    # ------------------------------------------------------------------
    # 快照
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        version, internal, gauss_next = self._rng.getstate()
        return {
            "config": self.config.to_dict(),
            "players": [p.to_dict() for p in self._players],
            "state": self._state.to_dict() if self._state is not None else None,
            "winnerIndex": self._winner_index,
            "lastRound": self._last_round,
            "rngState": [version, list(internal), gauss_next],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'GameSession':
        session = cls(
            [Player.from_dict(p) for p in d["players"]],
            GameConfig.from_dict(d.get("config", {})),
        )
        if d.get("state") is not None:
            session._state = RoundState.from_dict(d["state"])
        session._winner_index = d.get("winnerIndex")
        session._last_round = d.get("lastRound")
        rng_state: Optional[List[Any]] = d.get("rngState")
        if rng_state:
            version, internal, gauss_next = rng_state
            session._rng.setstate((version, tuple(internal), gauss_next))
        return session
