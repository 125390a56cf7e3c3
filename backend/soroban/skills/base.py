"""Base rule-strategy contract for sequence generation.

Every rule family (Simple, Brothers, Friends, Mix) subclasses RuleStrategy
and overrides the relevant hooks. Strategies look at one rod, the target
register, plus the rod above it for carry-based families. Lifting to a
whole DigitState is done by the multi-digit orchestrator.
"""

from soroban.models.abacus import Action, ActionTag, AtomicOp, Example, RuleFamily, Step
from soroban.services.bead_physics import legal_deltas
from soroban.services.formula_builder import build_formula, formula_value, replay_formula
from soroban.services.requirement_tables import carry_allowed, needs_formula, uses_carry
from soroban.services.state_model import DigitState


class RuleStrategy:
    family: RuleFamily = RuleFamily.SIMPLE
    tag: ActionTag = ActionTag.PLAIN

    def special_options(self, target_value: int, next_value: int | None,
                        digits, signs) -> list[tuple[int, int, tuple[AtomicOp, ...]]]:
        """(digit, sign, formula) triples whose formula is mandatory from target_value."""
        return []

    def plain_options(self, value: int, digits, signs, include_five: bool = True) -> list[int]:
        """Signed direct moves on a single rod whose magnitude is an allowed digit."""
        allowed = set(digits)
        return [d for d in legal_deltas(value, include_five=include_five)
                if abs(d) in allowed and (1 if d > 0 else -1) in signs]

    def available_actions(self, state: DigitState, target: int, digits, signs,
                          plain_digits=None, include_five: bool = True) -> list[Action]:
        """Single-register view: every special and plain action at the target rod."""
        next_value = state[target + 1] if target + 1 < len(state) else None
        actions = []
        for digit, sign, formula in self.special_options(state[target], next_value, digits, signs):
            actions.append(Action(
                value=sign * digit * 10 ** target,
                tag=self.tag,
                digit=digit,
                formula=formula,
                target=target,
            ))
        for delta in self.plain_options(state[target], plain_digits or digits, signs, include_five):
            actions.append(Action(value=delta * 10 ** target, target=target, parts=((target, delta),)))
        return actions

    def apply(self, state: DigitState, action: Action) -> DigitState:
        return state.apply_ops(action.register_ops())

    def validate(self, example: Example, config) -> list[str]:
        """Family-specific checks on an assembled example; returns issue strings."""
        issues = []
        for i, step in enumerate(example.steps):
            action = step.action
            if not action.is_special:
                continue
            if action.tag is not self.tag:
                issues.append(f"FAMILY: step {i} tagged {action.tag.value}, expected {self.tag.value}")
                continue
            issues.extend(self.check_step(i, step))
        return issues

    def check_step(self, index: int, step: Step) -> list[str]:
        action = step.action
        issues = []
        target_before = step.before[action.target]
        if not needs_formula(self.family, action.digit, action.sign, target_before):
            issues.append(
                f"PRESTATE: step {index} {self.family.value} {action.sign * action.digit:+d} "
                f"from rod value {target_before}"
            )
        if action.formula != build_formula(self.family, action.digit, action.sign):
            issues.append(f"FORMULA: step {index} is not the canonical formula")
        lower = sum(delta * 10 ** reg for reg, delta in action.parts)
        if formula_value(action.formula) * 10 ** action.target + lower != action.value:
            issues.append(f"FORMULA: step {index} formula does not sum to {action.value}")
        return issues


class CompositeRuleStrategy(RuleStrategy):
    """Shared table lookup for the families that use a composite formula."""

    def special_options(self, target_value, next_value, digits, signs):
        options = []
        for digit in digits:
            for sign in signs:
                if not needs_formula(self.family, digit, sign, target_value):
                    continue
                formula = build_formula(self.family, digit, sign)
                if uses_carry(self.family):
                    if next_value is None or not carry_allowed(next_value, sign):
                        continue
                if replay_formula(target_value, formula, next_value) is None:
                    continue
                options.append((digit, sign, formula))
        return options
