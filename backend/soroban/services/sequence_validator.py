"""Post-hoc checks on an assembled Example.

validate_example() never raises. It returns a list of issue strings in
the form "CODE: detail"; an empty list means the example is accepted.

Codes: LENGTH, QUOTA, FIRST_STEP, REPLAY, RANGE, LEGALITY, REPEAT,
DIRECTION, DIGIT, plus the family checks (PRESTATE, FORMULA, CARRY, FAMILY).
"""

import logging
from typing import List, Optional

from soroban.models.abacus import Direction, Example
from soroban.models.rule_config import RuleConfig
from soroban.services.bead_physics import can_move
from soroban.skills.registry import get_rule

logger = logging.getLogger("soroban.validator")

# Codes the fallback synthesizer may leave behind without breaking arithmetic
SOFT_CODES = frozenset({"LENGTH", "QUOTA", "REPEAT"})


def issue_code(issue: str) -> str:
    return issue.split(":", 1)[0]


def is_soft(issues: List[str]) -> bool:
    return all(issue_code(i) in SOFT_CODES for i in issues)


def _check_length(example: Example, config: RuleConfig, length: Optional[int]) -> List[str]:
    n = len(example.steps)
    if length is not None:
        if n != length:
            return [f"LENGTH: got {n}, expected {length}"]
    elif not config.min_steps <= n <= config.max_steps:
        return [f"LENGTH: got {n}, expected {config.min_steps}-{config.max_steps}"]
    return []


def _check_first_step(example: Example, config: RuleConfig) -> List[str]:
    if not example.steps:
        return []
    first = example.steps[0].action
    issues = []
    if first.is_special:
        issues.append("FIRST_STEP: first action must be plain")
    if first.value <= 0:
        issues.append(f"FIRST_STEP: first action {first.value} is not positive")
    if config.direction is Direction.SUBTRACTION_ONLY:
        w = config.action_width
        if not 10 ** w <= first.value <= 10 ** (w + 1) - 1:
            issues.append(f"FIRST_STEP: {first.value} outside [{10 ** w}, {10 ** (w + 1) - 1}]")
    return issues


def _check_replay(example: Example, config: RuleConfig) -> List[str]:
    issues = []
    if any(example.start):
        issues.append(f"REPLAY: start {example.start} is not zero")
    state = example.start
    for i, step in enumerate(example.steps):
        if step.before != state:
            issues.append(f"REPLAY: step {i} starts from {step.before}, expected {state}")
        expected = state.apply_delta(step.action.value)
        if expected is None:
            issues.append(f"RANGE: step {i} {step.action.value:+d} leaves the abacus from {state.value}")
            return issues
        if expected != step.after:
            issues.append(f"REPLAY: step {i} ends at {step.after}, arithmetic gives {expected}")
        if len(step.after) != config.register_count or step.after.value > config.max_value:
            issues.append(f"RANGE: step {i} value {step.after.value} exceeds {config.max_value}")
        state = step.after
    if state != example.answer:
        issues.append(f"REPLAY: answer {example.answer.value} != folded {state.value}")
    return issues


def _check_legality(example: Example, config: RuleConfig) -> List[str]:
    issues = []
    target = config.target_register
    for i, step in enumerate(example.steps):
        action = step.action
        regs = list(step.before.registers)
        for index, delta in action.register_ops():
            if not 0 <= index < len(regs) or not can_move(regs[index], delta):
                issues.append(f"LEGALITY: step {i} move {delta:+d} on register {index} is not direct")
                break
            regs[index] += delta
        if action.is_special:
            if action.target != target:
                issues.append(f"LEGALITY: step {i} applies a formula on register {action.target}")
            if any(reg >= target for reg, _ in action.parts):
                issues.append(f"LEGALITY: step {i} mixes plain digits into the target register")
        elif action.formula:
            issues.append(f"LEGALITY: plain step {i} carries a formula")
    return issues


def _check_repeat(example: Example) -> List[str]:
    issues = []
    for i in range(1, len(example.steps)):
        prev = example.steps[i - 1].action.magnitude
        cur = example.steps[i].action.magnitude
        if prev == cur:
            issues.append(f"REPEAT: steps {i - 1} and {i} both have magnitude {cur}")
    return issues


def _check_direction(example: Example, config: RuleConfig) -> List[str]:
    issues = []
    for i, step in enumerate(example.steps[1:], 1):
        action = step.action
        allowed = config.signs if action.is_special else config.plain_signs
        if action.sign not in allowed:
            issues.append(f"DIRECTION: step {i} {action.value:+d} not allowed under {config.direction.value}")
        if action.is_special and action.digit not in config.digits:
            issues.append(f"DIGIT: step {i} trains {action.digit}, not in {list(config.digits)}")
    return issues


def validate_example(example: Example, config: RuleConfig, rule=None,
                     length: Optional[int] = None) -> List[str]:
    """Run every check; returns [] when the example is acceptable."""
    rule = rule or get_rule(config.family)
    issues: List[str] = []
    issues += _check_length(example, config, length)

    target_len = length if length is not None else len(example.steps)
    quota = config.special_quota(target_len)
    got = example.special_count()
    if got < quota:
        issues.append(f"QUOTA: got {got}, expected {quota}")

    issues += _check_first_step(example, config)
    issues += _check_replay(example, config)
    issues += _check_legality(example, config)
    issues += _check_repeat(example)
    issues += _check_direction(example, config)
    issues += rule.validate(example, config)
    return issues
