"""Mix family (digits 6-9): a Brothers move nested inside a Friends carry."""

from .friends import FriendsRule
from soroban.models.abacus import ActionTag, RuleFamily


class MixRule(FriendsRule):
    family = RuleFamily.MIX
    tag = ActionTag.MIX

    def check_step(self, index, step):
        issues = super().check_step(index, step)
        if len(step.action.formula) != 3:
            issues.append(f"FORMULA: step {index} mix formula has {len(step.action.formula)} ops")
        return issues
