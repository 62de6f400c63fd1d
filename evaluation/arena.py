"""
对战竞技场

让智能体通过对局会话打完整局，并统计结果
"""
from typing import Dict, List, Optional, Sequence
from dataclasses import dataclass, field
from collections import defaultdict
import numpy as np
import logging

from core.actions import ActionGenerator, perform
from core.config import GameConfig
from core.session import GameSession
from core.validator import validate

from .evaluator import Agent

logger = logging.getLogger(__name__)


@dataclass
class MatchResult:
    """对局结果"""
    agents: List[str]
    winner: Optional[str]          # 获胜智能体名，截断时为 None
    winner_seat: Optional[int]
    scores: List[int]
    rounds: int
    turns: int
    truncated: bool = False


@dataclass
class TournamentResult:
    """多局统计"""
    wins: Dict[str, int]
    seat_wins: List[int]
    total_games: int
    avg_rounds: float
    avg_turns: float
    matches: List[MatchResult] = field(default_factory=list)

    def win_rate(self, name: str) -> float:
        if self.total_games == 0:
            return 0.0
        return self.wins.get(name, 0) / self.total_games

    def __repr__(self) -> str:
        lines = [f"Tournament Results ({self.total_games} games):"]
        ranking = sorted(self.wins.items(), key=lambda x: x[1], reverse=True)
        for i, (name, wins) in enumerate(ranking):
            lines.append(f"  {i+1}. {name}: {wins / max(self.total_games, 1):.2%}")
        lines.append(f"  avg rounds {self.avg_rounds:.1f}, avg turns {self.avg_turns:.1f}")
        return "\n".join(lines)


class Arena:
    """
    对战竞技场

    每一步都检查状态结构与牌数守恒
    """

    def __init__(self, config: Optional[GameConfig] = None, max_turns: int = 5000):
        self.config = config or GameConfig()
        self.max_turns = max_turns

    def play_game(self, agents: Sequence[Agent], seed: Optional[int] = None) -> MatchResult:
        """
        进行一局

        Args:
            agents: 座位顺序的智能体 (2-4 个)
            seed: 随机种子，覆盖配置中的种子

        Returns:
            对局结果
        """
        config = GameConfig.from_dict(self.config.to_dict())
        if seed is not None:
            config.seed = seed

        session = GameSession.from_names([a.name for a in agents], config)
        session.start()
        for i, agent in enumerate(agents):
            agent.reset(None if seed is None else seed + i)

        turns = 0
        while not session.is_finished and turns < self.max_turns:
            state = session.state
            legal_actions = ActionGenerator(state, config.declare_threshold).generate_all()
            action = agents[state.current_player_index].act(state, legal_actions)
            perform(session, state.current_player.player_id, action)
            if action.ends_turn:
                turns += 1

            result = validate(session.state, strict=True)
            if not result.is_valid:
                raise RuntimeError(f"Invalid state after {action}: {result.errors}")

        truncated = not session.is_finished
        if truncated:
            logger.warning(f"Game truncated after {turns} turns")

        winner = session.winner
        winner_seat = session.state.player_index(winner.player_id) if winner else None
        return MatchResult(
            agents=[a.name for a in agents],
            winner=agents[winner_seat].name if winner_seat is not None else None,
            winner_seat=winner_seat,
            scores=[p.score for p in session.state.players],
            rounds=session.state.round_number + 1,
            turns=turns,
            truncated=truncated,
        )

    def play_many(
        self,
        agents: Sequence[Agent],
        n_games: int = 10,
        seed: Optional[int] = None,
    ) -> TournamentResult:
        """
        进行多局并统计

        Args:
            agents: 座位顺序的智能体
            n_games: 局数
            seed: 起始种子，第 k 局使用 seed + k

        Returns:
            统计结果
        """
        wins: Dict[str, int] = defaultdict(int)
        seat_wins = [0] * len(agents)
        matches = []

        for game_idx in range(n_games):
            game_seed = None if seed is None else seed + game_idx
            result = self.play_game(agents, game_seed)
            matches.append(result)
            if result.winner is not None:
                wins[result.winner] += 1
                seat_wins[result.winner_seat] += 1
            logger.info(
                f"Game {game_idx + 1}/{n_games}: winner {result.winner}, "
                f"scores {result.scores}, rounds {result.rounds}"
            )

        return TournamentResult(
            wins=dict(wins),
            seat_wins=seat_wins,
            total_games=n_games,
            avg_rounds=float(np.mean([m.rounds for m in matches])) if matches else 0.0,
            avg_turns=float(np.mean([m.turns for m in matches])) if matches else 0.0,
            matches=matches,
        )
