"""Canonical composite formulas per rule family.

A formula is an ordered tuple of AtomicOp(offset, delta) where offset is
relative to the target register (0 = target, 1 = the register above it).
Every op is a single direct bead move on its own.

    Brothers  +d: [0:+5, 0:-(5-d)]            -d: [0:-5, 0:+(5-d)]
    Friends   +d: [1:+1, 0:-(10-d)]           -d: [1:-1, 0:+(10-d)]
    Mix       +d: [0:-5, 0:+b, 1:+1]          -d: [0:+5, 0:-b, 1:-1]
              where b = 5 - (10 - d)
"""

from soroban.core.errors import ConfigurationError
from soroban.models.abacus import AtomicOp, RuleFamily
from soroban.services.bead_physics import can_move


def build_formula(family: RuleFamily, digit: int, sign: int) -> tuple[AtomicOp, ...]:
    if sign not in (1, -1):
        raise ConfigurationError(f"sign must be +1 or -1, got {sign}")

    if family is RuleFamily.BROTHERS:
        if not 1 <= digit <= 4:
            raise ConfigurationError(f"brothers digit must be 1-4, got {digit}")
        brother = 5 - digit
        return (AtomicOp(0, 5 * sign), AtomicOp(0, -brother * sign))

    if family is RuleFamily.FRIENDS:
        if not 1 <= digit <= 9:
            raise ConfigurationError(f"friends digit must be 1-9, got {digit}")
        friend = 10 - digit
        return (AtomicOp(1, sign), AtomicOp(0, -friend * sign))

    if family is RuleFamily.MIX:
        if not 6 <= digit <= 9:
            raise ConfigurationError(f"mix digit must be 6-9, got {digit}")
        brother = 5 - (10 - digit)
        return (AtomicOp(0, -5 * sign), AtomicOp(0, brother * sign), AtomicOp(1, sign))

    raise ConfigurationError(f"family {family.value!r} has no composite formula")


def formula_value(formula) -> int:
    """Net signed value of a formula weighted by place value."""
    return sum(op.delta * 10 ** op.offset for op in formula)


def replay_formula(target_value: int, formula, next_value: int | None = None) -> list[int] | None:
    """Walk the formula on the target rod (and the next rod if given).

    Returns the target-register value after each op, or None as soon as an
    op is not a legal direct move. Ops on the next register are skipped
    when next_value is None.
    """
    local = target_value
    upper_rod = next_value
    trace = []
    for op in formula:
        if op.offset == 0:
            if not can_move(local, op.delta):
                return None
            local += op.delta
        elif upper_rod is not None:
            if not can_move(upper_rod, op.delta):
                return None
            upper_rod += op.delta
        trace.append(local)
    return trace
