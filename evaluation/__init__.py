"""
Evaluation Layer - 自动对局

Modules:
    evaluator: 智能体
    arena: 对战竞技场
"""
from .evaluator import (
    Agent,
    RandomAgent,
    GreedyAgent,
)
from .arena import (
    MatchResult,
    TournamentResult,
    Arena,
)

__all__ = [
    # evaluator
    "Agent",
    "RandomAgent",
    "GreedyAgent",
    # arena
    "MatchResult",
    "TournamentResult",
    "Arena",
]
