"""动作生成器测试"""
import pytest

from core.actions import Action, ActionGenerator, ActionType, perform
from core.config import GameConfig
from core.session import GameSession
from core.state import DeclarationKind, Phase


class TestAction:
    """Action 测试"""

    def test_draw(self):
        action = Action.draw(1, 0)
        assert action.action_type == ActionType.DRAW
        assert action.pile_index == 1
        assert action.is_draw_phase
        assert not action.ends_turn

    def test_declare_ends_turn(self):
        action = Action.declare(DeclarationKind.LAST_CHANCE)
        assert action.ends_turn
        assert action.declaration == DeclarationKind.LAST_CHANCE

    def test_end_turn(self):
        assert Action.end_turn().ends_turn
        assert not Action.end_turn().is_draw_phase

    def test_immutable(self):
        action = Action.take(0)
        with pytest.raises(AttributeError):
            action.pile_index = 1


class TestActionGenerator:
    """合法动作生成测试"""

    def test_draws_before_drawing(self, make_state):
        state = make_state(
            [["fish"], ["crab"]], deck=["shell", "ship"], piles=(["octopus"], []), has_drawn=False
        )
        actions = ActionGenerator(state).generate_all()
        types = [a.action_type for a in actions]
        assert types.count(ActionType.DRAW) == 4
        assert [a.pile_index for a in actions if a.action_type == ActionType.TAKE_DISCARD] == [0]

    def test_nothing_to_draw(self, make_state):
        state = make_state([["fish"], ["crab"]], has_drawn=False)
        actions = ActionGenerator(state).generate_all()
        assert actions == [Action.end_turn()]

    def test_after_drawing(self, make_state):
        state = make_state([["shark", "human", "ship"], ["crab"]], deck=["shell", "fish"])
        actions = ActionGenerator(state).generate_all()
        types = [a.action_type for a in actions]
        assert ActionType.DRAW not in types
        assert types[-1] == ActionType.END_TURN
        # 11 分可以宣告
        assert types.count(ActionType.DECLARE) == 2
        pair = next(a for a in actions if a.action_type == ActionType.PLAY_PAIR)
        assert pair.pair == (0, 1)
        assert pair.effect_args.victim_index == 1

    def test_no_steal_target(self, make_state):
        state = make_state([["shark", "human"], []])
        actions = ActionGenerator(state).generate_all()
        assert all(a.action_type != ActionType.PLAY_PAIR for a in actions)

    def test_take_discard_pair(self, make_state):
        state = make_state([["crab", "crab"], ["fish"]], piles=(["fish"], ["shell"]))
        actions = ActionGenerator(state).gen_pairs()
        assert [a.effect_args.pile_index for a in actions] == [0, 1]

    def test_custom_threshold(self, make_state):
        state = make_state([["fish"], ["crab"]])
        assert ActionGenerator(state).gen_declarations() == []
        assert len(ActionGenerator(state, declare_threshold=1).gen_declarations()) == 2

    def test_no_declaration_during_last_chance(self, make_state):
        state = make_state([["shark", "ship"], ["shark", "ship"]]).with_last_chance(0)
        assert ActionGenerator(state).gen_declarations() == []

    def test_scoring(self, make_state):
        state = make_state([["fish"], ["crab"]], phase=Phase.SCORING, has_drawn=False)
        assert ActionGenerator(state).generate_all() == []


class TestPerform:
    """perform 测试"""

    def test_draw_and_end(self):
        session = GameSession.from_names(["a", "b"], GameConfig(seed=4))
        session.start()
        perform(session, "p0", Action.draw(0, 0))
        assert len(session.state.players[0].hand) == 6
        perform(session, "p0", Action.end_turn())
        assert session.state.current_player_index == 1
