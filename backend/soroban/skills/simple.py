"""Simple ("prosto") family: direct bead moves only, no formulas."""

from .base import RuleStrategy
from soroban.models.abacus import ActionTag, RuleFamily


class SimpleRule(RuleStrategy):
    family = RuleFamily.SIMPLE
    tag = ActionTag.PLAIN

    def validate(self, example, config) -> list[str]:
        issues = []
        for i, step in enumerate(example.steps):
            if step.action.is_special:
                issues.append(f"FAMILY: step {i} is {step.action.tag.value} in a simple exercise")
        return issues
