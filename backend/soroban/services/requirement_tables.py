"""Pre-states that make a composite formula mandatory.

A rod value v belongs to the table for (family, digit, sign) when the
direct move of sign*digit is impossible from v and every target-rod op of
the family formula is a legal direct move replayed from v. The tables are
derived from bead physics at import time rather than typed in by hand.
"""

from functools import lru_cache

from soroban.models.abacus import RuleFamily
from soroban.models.rule_config import VALID_DIGITS
from soroban.services.bead_physics import can_move
from soroban.services.formula_builder import build_formula, replay_formula

SPECIAL_FAMILIES = (RuleFamily.BROTHERS, RuleFamily.FRIENDS, RuleFamily.MIX)


@lru_cache(maxsize=None)
def requirement_states(family: RuleFamily, digit: int, sign: int) -> frozenset[int]:
    formula = build_formula(family, digit, sign)
    states = set()
    for v in range(10):
        if can_move(v, sign * digit):
            continue
        if replay_formula(v, formula) is not None:
            states.add(v)
    return frozenset(states)


REQUIREMENT_TABLES: dict[tuple[RuleFamily, int, int], frozenset[int]] = {
    (family, digit, sign): requirement_states(family, digit, sign)
    for family in SPECIAL_FAMILIES
    for digit in VALID_DIGITS[family]
    for sign in (1, -1)
}


def needs_formula(family: RuleFamily, digit: int, sign: int, value: int) -> bool:
    return value in REQUIREMENT_TABLES.get((family, digit, sign), frozenset())


def uses_carry(family: RuleFamily) -> bool:
    return family in (RuleFamily.FRIENDS, RuleFamily.MIX)


def carry_allowed(next_value: int, sign: int) -> bool:
    """The ±1 on the register above the target must itself be a direct move."""
    return can_move(next_value, sign)


def nearest_prestate(family: RuleFamily, digit: int, sign: int, value: int) -> int | None:
    """Closest table entry to value (ties go to the smaller state)."""
    table = REQUIREMENT_TABLES.get((family, digit, sign))
    if not table:
        return None
    return min(table, key=lambda s: (abs(s - value), s))


def requires_any_rule(value: int, delta: int) -> bool:
    """True when a single-rod change of delta from value is not a direct move."""
    return delta != 0 and not can_move(value, delta)
