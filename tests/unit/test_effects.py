"""配对效果测试"""
import pytest

from core.cards import PairEffect
from core.effects import EFFECT_HANDLERS, EffectArgs, apply_pair_effect
from core.errors import IllegalActionError, InvalidSelectionError


class TestEffectHandlers:
    """效果分派表测试"""

    def test_all_effects_handled(self):
        assert set(EFFECT_HANDLERS) == set(PairEffect)


class TestApplyPairEffect:
    """配对效果执行测试"""

    def test_draw(self, make_state):
        state = make_state([["fish", "fish"], ["crab"]], deck=["shell", "ship", "shark"])
        outcome = apply_pair_effect(state, 0, 1, EffectArgs(pile_index=1, keep_choice=1))
        assert outcome.effect == PairEffect.DRAW
        assert outcome.card.kind == "ship"
        assert len(outcome.state.players[0].hand) == 3
        assert outcome.state.discard_piles[1][-1].kind == "shark"

    def test_draw_refills_from_discards(self, make_state):
        state = make_state([["fish", "fish"], ["crab"]], piles=(["shell", "octopus"], ["penguin"]))
        outcome = apply_pair_effect(state, 0, 1, EffectArgs(pile_index=0, keep_choice=0))
        assert outcome.card.kind == "penguin"
        assert [c.kind for c in outcome.state.deck] == ["shell"]
        assert [c.kind for c in outcome.state.discard_piles[0]] == ["octopus"]
        assert outcome.state.total_cards == state.total_cards

    def test_draw_keeps_turn_draw(self, make_state):
        state = make_state([["fish", "fish"], ["crab"]], deck=["shell"] * 4)
        outcome = apply_pair_effect(state, 0, 1, EffectArgs(pile_index=0, keep_choice=0))
        assert outcome.state.has_drawn
        with pytest.raises(IllegalActionError):
            outcome.state.with_draw_from_deck(0, 0)

    def test_take_discard(self, make_state):
        state = make_state([["crab", "crab"], ["fish"]], piles=([], ["penguin"]))
        outcome = apply_pair_effect(state, 0, 1, EffectArgs(pile_index=1))
        assert outcome.effect == PairEffect.TAKE_DISCARD
        assert outcome.card.kind == "penguin"
        assert outcome.state.discard_piles[1] == ()

    def test_take_empty_discard_keeps_pair(self, make_state):
        state = make_state([["crab", "crab"], ["fish"]], piles=([], ["penguin"]))
        outcome = apply_pair_effect(state, 0, 1, EffectArgs(pile_index=0))
        assert outcome.effect == PairEffect.TAKE_DISCARD
        assert outcome.card is None
        assert outcome.state == state
        assert outcome.state.played_uids == frozenset()
        assert outcome.state.playable_pairs() == [(0, 1)]

    def test_extra_turn(self, make_state):
        state = make_state([["ship", "ship"], ["fish"]])
        outcome = apply_pair_effect(state, 0, 1)
        assert outcome.effect == PairEffect.EXTRA_TURN
        assert outcome.state.extra_turn
        assert outcome.state.with_turn_ended().current_player_index == 0

    def test_steal(self, make_state):
        state = make_state([["human", "shark"], ["fish", "penguin"]])
        outcome = apply_pair_effect(state, 0, 1, EffectArgs(victim_index=1, card_index=1))
        assert outcome.effect == PairEffect.STEAL
        assert outcome.card.kind == "penguin"
        assert len(outcome.state.players[0].hand) == 3
        assert len(outcome.state.players[1].hand) == 1

    def test_steal_requires_victim(self, make_state):
        state = make_state([["shark", "shark"], ["fish"]])
        with pytest.raises(ValueError):
            apply_pair_effect(state, 0, 1)

    def test_steal_from_empty_hand(self, make_state):
        state = make_state([["shark", "human"], []])
        with pytest.raises(IllegalActionError):
            apply_pair_effect(state, 0, 1, EffectArgs(victim_index=1))

    def test_collection_pair(self, make_state):
        state = make_state([["penguin", "penguin"], ["fish"]])
        outcome = apply_pair_effect(state, 0, 1)
        assert outcome.effect is None
        assert outcome.card is None
        assert outcome.state.players == state.players

    def test_invalid_pair(self, make_state):
        state = make_state([["fish", "crab"], ["fish"]])
        with pytest.raises(InvalidSelectionError):
            apply_pair_effect(state, 0, 1)
