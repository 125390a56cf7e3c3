"""
Multi-digit orchestration: lifts a single-rod RuleStrategy to a DigitState.

Layout for action width w:

    registers 0 .. w-1   display registers, touched by plain digits
    register  w-1        target register, the only rod where the rule
                         family may apply its composite formula
    register  w          spare register, absorbs the +-1 carry of
                         Friends/Mix formulas (and the first step under
                         subtraction-only)

Every non-target register changes, if at all, through a direct bead move.
An action is never built if it would push a non-target rod through a
state that needs a formula.
"""

from __future__ import annotations

import itertools
import logging
import math
import random

from soroban.core.errors import InvariantViolation
from soroban.models.abacus import Action, Direction
from soroban.models.rule_config import RuleConfig
from soroban.services.bead_physics import can_move
from soroban.services.state_model import DigitState
from soroban.skills.base import RuleStrategy
from soroban.skills.registry import get_rule

logger = logging.getLogger("soroban.multi_digit")

# Enumerate every digit combination up to this many, sample beyond it
_ENUMERATE_LIMIT = 400
_SAMPLE_SIZE = 40


def _action_from_digits(digits: list[int], sign: int) -> Action | None:
    parts = tuple((i, sign * d) for i, d in enumerate(digits) if d)
    if not parts:
        return None
    value = sign * sum(d * 10 ** i for i, d in enumerate(digits))
    return Action(value=value, target=max(i for i, _ in parts), parts=parts)


class MultiDigitOrchestrator:
    def __init__(self, config: RuleConfig, rule: RuleStrategy | None = None):
        self.config = config
        self.rule = rule or get_rule(config.family)
        self.width = config.action_width
        self.target = config.target_register

    # ──────────────────────────────────────────
    # Per-register options
    # ──────────────────────────────────────────
    def register_options(self, state: DigitState, index: int, sign: int,
                         include_zero: bool = True, digits=None) -> list[int]:
        """Unsigned digits that are a direct move of `sign` on register `index`."""
        cfg = self.config
        deltas = self.rule.plain_options(state[index], digits or cfg.plain_digits, (sign,), cfg.include_five)
        options = sorted(abs(d) for d in deltas)
        return ([0] if include_zero else []) + options

    def _combine(self, per_register: list[list[int]], sign: int,
                 rng: random.Random | None) -> list[Action]:
        if any(not opts for opts in per_register):
            return []
        total = math.prod(len(opts) for opts in per_register)
        if total <= _ENUMERATE_LIMIT or rng is None:
            combos = itertools.islice(itertools.product(*per_register), _ENUMERATE_LIMIT)
        else:
            combos = {tuple(rng.choice(opts) for opts in per_register) for _ in range(_SAMPLE_SIZE)}
        actions = []
        for combo in combos:
            action = _action_from_digits(list(combo), sign)
            if action is not None:
                actions.append(action)
        return actions

    # ──────────────────────────────────────────
    # Action builders
    # ──────────────────────────────────────────
    def plain_actions(self, state: DigitState, signs=None, rng: random.Random | None = None,
                      strict_width: bool | None = None) -> list[Action]:
        """Plain actions over the display registers.

        With strict_width the top display register must move, so every
        action has exactly `action_width` digits.
        """
        cfg = self.config
        signs = signs or cfg.plain_signs
        strict = (not cfg.variable_width) if strict_width is None else strict_width
        actions = []
        for sign in signs:
            per_register = [
                self.register_options(state, i, sign, include_zero=not (strict and i == self.width - 1))
                for i in range(self.width)
            ]
            actions.extend(self._combine(per_register, sign, rng))
        return actions

    def special_actions(self, state: DigitState, rng: random.Random | None = None,
                        digits=None, signs=None) -> list[Action]:
        """Rule-family actions at the target register, one per (digit, sign) option.

        Registers below the target receive plain digits of the same sign.
        """
        cfg = self.config
        t = self.target
        options = self.rule.special_options(state[t], state[t + 1], digits or cfg.digits, signs or cfg.signs)
        actions = []
        for digit, sign, formula in options:
            parts = self._lower_parts(state, sign, rng)
            value = sign * digit * 10 ** t + sum(delta * 10 ** reg for reg, delta in parts)
            actions.append(Action(
                value=value,
                tag=self.rule.tag,
                digit=digit,
                formula=formula,
                target=t,
                parts=parts,
            ))
        return actions

    def _lower_parts(self, state: DigitState, sign: int, rng: random.Random | None) -> tuple:
        parts = []
        for index in range(self.target):
            options = self.register_options(state, index, sign, include_zero=self.config.variable_width)
            if not options:
                continue
            digit = rng.choice(options) if rng is not None else options[-1]
            if digit:
                parts.append((index, sign * digit))
        return tuple(parts)

    def first_action(self, rng: random.Random) -> Action:
        """Always plain and positive.

        Under subtraction-only the first number also fills the spare register,
        so its magnitude lies in [10^w, 10^(w+1) - 1].
        """
        cfg = self.config
        zero = DigitState.zeros(cfg.register_count)
        top = self.width if cfg.direction is Direction.SUBTRACTION_ONLY else self.width - 1
        digits = []
        for index in range(top + 1):
            options = self.register_options(zero, index, 1, include_zero=index != top)
            digits.append(rng.choice(options) if options else 1)
        action = _action_from_digits(digits, 1)
        if action is None:
            action = Action(value=1, parts=((0, 1),))
        return action

    # ──────────────────────────────────────────
    # Apply
    # ──────────────────────────────────────────
    def apply(self, state: DigitState, action: Action) -> DigitState:
        """Replay the action move by move, checking every move is direct."""
        regs = list(state.registers)
        for index, delta in action.register_ops():
            if not 0 <= index < len(regs) or not can_move(regs[index], delta):
                raise InvariantViolation(
                    f"{action.value:+d}: move {delta:+d} on register {index} is not a direct move from {regs}"
                )
            regs[index] += delta
        after = self.rule.apply(state, action)
        expected = state.apply_delta(action.value)
        if after != expected or list(after.registers) != regs:
            raise InvariantViolation(f"{action.value:+d}: bead replay {after} != arithmetic {expected}")
        return after
