"""对战脚本测试"""
import argparse
import importlib.util
from pathlib import Path

import pytest

from core.config import GameConfig
from core.session import GameSession
from core.state import Player

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "play.py"


@pytest.fixture(scope="module")
def play():
    spec = importlib.util.spec_from_file_location("play_script", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def game_args(**kwargs):
    defaults = dict(agent="greedy", seed=11, players=2, delay=0.0, max_rounds=50)
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


class TestCreateAgents:
    """智能体创建测试"""

    def test_random_agents_get_distinct_seeds(self, play):
        agents = play.create_agents(game_args(agent="random", seed=3), 2)
        choices = list(range(1000))
        picks = [[agent.act(None, choices) for _ in range(8)] for agent in agents]
        assert picks[0] != picks[1]

    def test_seeded_agents_are_reproducible(self, play):
        args = game_args(agent="random", seed=3)
        first = [a.act(None, list(range(1000))) for a in play.create_agents(args, 3)]
        second = [a.act(None, list(range(1000))) for a in play.create_agents(args, 3)]
        assert first == second

    def test_names(self, play):
        agents = play.create_agents(game_args(), 3, prefix="bot")
        assert [a.name for a in agents] == ["bot_0", "bot_1", "bot_2"]


class TestRoundResult:
    """轮次结果输出测试"""

    def test_final_round_is_printed(self, play, make_state, capsys):
        state = make_state([["fish", "fish", "fish", "shark"], ["crab", "crab", "ship"]], scores=[35, 0])
        session = GameSession.from_dict({
            "config": GameConfig(seed=0).to_dict(),
            "players": [Player(p.player_id, p.name).to_dict() for p in state.players],
            "state": state.to_dict(),
        })
        previous = session.last_round
        session.declare("p0")
        assert session.is_finished

        assert play.print_round_result(session, previous)
        assert "第 1 轮结束, 宣告者获胜, 得分 [10, 2]" in capsys.readouterr().out
        assert not play.print_round_result(session, session.last_round)

    def test_no_round_yet(self, play, capsys):
        session = GameSession.from_names(["a", "b"], GameConfig(seed=1))
        session.start()
        assert not play.print_round_result(session, None)
        assert capsys.readouterr().out == ""

    def test_watch_game_ends_with_summary(self, play, capsys):
        play.run_game(game_args())
        out = capsys.readouterr().out
        before_end = out.split("游戏结束")[0].rstrip("=\n ")
        assert "轮结束" in before_end.splitlines()[-1]
