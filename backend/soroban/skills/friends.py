"""Friends family: +-n through a carry/borrow of ten using the complement 10-n."""

from .base import CompositeRuleStrategy
from soroban.models.abacus import ActionTag, RuleFamily


class FriendsRule(CompositeRuleStrategy):
    family = RuleFamily.FRIENDS
    tag = ActionTag.FRIEND

    def check_step(self, index, step):
        issues = super().check_step(index, step)
        action = step.action
        carry_index = action.target + 1
        if step.after[carry_index] - step.before[carry_index] != action.sign:
            issues.append(f"CARRY: step {index} did not move register {carry_index} by {action.sign:+d}")
        return issues
