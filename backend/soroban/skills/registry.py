"""Read-only rule registry: maps a RuleFamily to its strategy instance."""

from .brothers import BrothersRule
from .friends import FriendsRule
from .mix import MixRule
from .simple import SimpleRule
from soroban.models.abacus import RuleFamily

RULE_REGISTRY = {
    RuleFamily.SIMPLE: SimpleRule(),
    RuleFamily.BROTHERS: BrothersRule(),
    RuleFamily.FRIENDS: FriendsRule(),
    RuleFamily.MIX: MixRule(),
}


def get_rule(family: RuleFamily):
    return RULE_REGISTRY[RuleFamily(family)]
