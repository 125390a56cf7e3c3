"""Brothers family: +-n through the upper bead using the complement 5-n."""

from .base import CompositeRuleStrategy
from soroban.models.abacus import ActionTag, RuleFamily


class BrothersRule(CompositeRuleStrategy):
    family = RuleFamily.BROTHERS
    tag = ActionTag.BROTHER
