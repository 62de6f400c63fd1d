"""状态校验测试"""
import random
from dataclasses import replace

from core.cards import build_deck
from core.state import Phase, Player, RoundState
from core.validator import validate


def dealt_state():
    players = [Player("p0", "P0"), Player("p1", "P1")]
    return RoundState.deal(players, build_deck(random.Random(0)))


class TestValidate:
    """validate 测试"""

    def test_dealt_state_is_valid(self):
        assert validate(dealt_state()).is_valid
        assert validate(dealt_state(), strict=True).is_valid

    def test_no_players(self):
        state = replace(dealt_state(), players=())
        result = validate(state)
        assert not result.is_valid
        assert "No players in game" in result.errors

    def test_bad_current_player(self):
        state = replace(dealt_state(), current_player_index=2)
        assert "Invalid current player index" in validate(state).errors

    def test_bad_piles(self):
        state = replace(dealt_state(), discard_piles=((),))
        assert "Invalid discard piles" in validate(state).errors

    def test_bad_deck(self):
        state = replace(dealt_state(), deck=None)
        assert "Invalid deck" in validate(state).errors

    def test_basic_ignores_card_count(self, make_state):
        state = make_state([["fish"], ["crab"]])
        assert validate(state).is_valid
        assert not validate(state, strict=True).is_valid


class TestValidateStrict:
    """strict 检查测试"""

    def test_missing_card(self):
        state = dealt_state()
        state = replace(state, deck=state.deck[1:])
        errors = validate(state, strict=True).errors
        assert any("Card count" in e for e in errors)

    def test_duplicate_card(self):
        state = dealt_state()
        state = replace(state, deck=state.deck[1:] + (state.players[0].hand[0],))
        errors = validate(state, strict=True).errors
        assert any("Duplicate" in e for e in errors)

    def test_pending_outside_declaring(self):
        state = replace(dealt_state(), last_chance_pending=(1,))
        errors = validate(state, strict=True).errors
        assert "Pending last-chance turns outside declaring phase" in errors

    def test_declaring_without_declarer(self):
        state = replace(dealt_state(), phase=Phase.DECLARING)
        errors = validate(state, strict=True).errors
        assert "Declaring phase without declarer" in errors
