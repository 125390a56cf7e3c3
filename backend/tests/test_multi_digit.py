"""Tests for the multi-digit orchestrator."""
import random

import pytest

from soroban.core.errors import InvariantViolation
from soroban.models.abacus import Action
from soroban.models.rule_config import RuleConfig
from soroban.services.bead_physics import can_move
from soroban.services.multi_digit import MultiDigitOrchestrator
from soroban.services.state_model import DigitState


def _orch(**kw) -> MultiDigitOrchestrator:
    return MultiDigitOrchestrator(RuleConfig(**kw))


def _all_moves_direct(state: DigitState, action: Action) -> bool:
    regs = list(state.registers)
    for index, delta in action.register_ops():
        if not can_move(regs[index], delta):
            return False
        regs[index] += delta
    return True


class TestPlainActions:
    def test_single_digit_from_zero(self):
        orch = _orch()
        values = sorted(a.value for a in orch.plain_actions(DigitState.zeros(2)))
        assert values == list(range(1, 10))

    def test_respects_plain_digits(self):
        orch = _orch(digits=[2, 7])
        values = {a.value for a in orch.plain_actions(DigitState([0, 0]))}
        assert values == {2, 7}

    def test_two_digit_actions_keep_full_width(self):
        orch = _orch(action_width=2)
        state = DigitState([3, 6, 0])
        actions = orch.plain_actions(state, rng=random.Random(1))
        assert actions
        for action in actions:
            assert 10 <= action.magnitude <= 99
            assert _all_moves_direct(state, action)
            assert action.parts

    def test_variable_width_allows_short_actions(self):
        orch = _orch(action_width=2, variable_width=True)
        values = {a.magnitude for a in orch.plain_actions(DigitState([0, 0, 0]))}
        assert any(v < 10 for v in values)
        assert any(v >= 10 for v in values)

    def test_wide_actions_are_sampled(self):
        orch = _orch(action_width=4)
        actions = orch.plain_actions(DigitState([2, 2, 2, 2, 0]), rng=random.Random(3))
        # 1080 positive combinations exist; only a sample of them is built
        assert 0 < len([a for a in actions if a.value > 0]) <= 40
        assert all(1000 <= a.magnitude <= 9999 for a in actions)


class TestSpecialActions:
    def test_target_register_only(self):
        orch = _orch(family="friends", digits=[9], action_width=2, steps=5, only_addition=True)
        state = DigitState([3, 4, 0])
        actions = orch.special_actions(state, rng=random.Random(0))
        assert len(actions) == 1
        action = actions[0]
        assert action.target == 1
        assert 90 <= action.value <= 99
        assert all(reg < 1 for reg, _ in action.parts)
        after = orch.apply(state, action)
        assert after[2] == 1
        assert after[1] == 3
        assert after.value == state.value + action.value

    def test_blocked_carry(self):
        orch = _orch(family="friends", digits=[9], only_addition=True, steps=5)
        assert orch.special_actions(DigitState([3, 9])) == []

    def test_brothers_stay_on_target(self):
        orch = _orch(family="brothers", digits=[4])
        actions = orch.special_actions(DigitState([6, 0]))
        assert [a.value for a in actions] == [-4]


class TestFirstAction:
    @pytest.mark.parametrize("width", [1, 2, 3])
    def test_subtraction_only_fills_spare_register(self, width):
        orch = _orch(family="friends", digits=[9], action_width=width, only_subtraction=True, steps=5)
        rng = random.Random(11)
        for _ in range(40):
            action = orch.first_action(rng)
            assert 10 ** width <= action.value <= 10 ** (width + 1) - 1
            assert not action.is_special

    @pytest.mark.parametrize("width", [1, 2, 3])
    def test_positive_full_width(self, width):
        orch = _orch(action_width=width)
        rng = random.Random(5)
        for _ in range(40):
            action = orch.first_action(rng)
            assert 10 ** (width - 1) <= action.value <= 10 ** width - 1

    def test_without_upper_bead(self):
        orch = _orch(digits=[1, 2, 3, 4], include_five=False)
        rng = random.Random(2)
        assert all(1 <= orch.first_action(rng).value <= 4 for _ in range(20))


class TestApply:
    def test_illegal_move_is_invariant_violation(self):
        orch = _orch()
        with pytest.raises(InvariantViolation):
            orch.apply(DigitState([4, 0]), Action(value=1, parts=((0, 1),)))

    def test_plain_apply(self):
        orch = _orch()
        assert orch.apply(DigitState([3, 0]), Action(value=5, parts=((0, 5),))).value == 8
