"""
Settings mapper: turns the trainer's UI settings slice into a RuleConfig.

Expected shape (every key optional):

    {
      "digits": 1,                      # action width
      "combineLevels": false,           # variable action width
      "actions": {"min": 3, "max": 5, "count": 4, "infinite": false},
      "blocks": {
        "simple":   {"digits": [1..9], "includeFive": true,
                     "onlyAddition": false, "onlySubtraction": false},
        "brothers": {"digits": [], "onlyAddition": false, "onlySubtraction": false},
        "friends":  {"digits": [], "onlyAddition": false, "onlySubtraction": false},
        "mix":      {"digits": [], "onlyAddition": false, "onlySubtraction": false},
      },
    }

A block is active when it carries at least one digit. When several are
active the most demanding family wins: Mix, then Friends, then Brothers,
then Simple. The Simple block digits become the plain-move digits of the
rule families.
"""

import logging

from soroban.models.abacus import RuleFamily
from soroban.models.rule_config import RuleConfig

logger = logging.getLogger("soroban.settings_mapper")

# Step range used when the trainer runs in "infinite" mode
INFINITE_MIN_STEPS = 2
INFINITE_MAX_STEPS = 12
DEFAULT_MIN_STEPS = 2
DEFAULT_MAX_STEPS = 4

_PRIORITY = (RuleFamily.MIX, RuleFamily.FRIENDS, RuleFamily.BROTHERS)


def _parse_digits(raw) -> list[int]:
    if not isinstance(raw, (list, tuple)):
        return []
    out = []
    for d in raw:
        if d is None or d == "":
            continue
        try:
            out.append(int(d))
        except (TypeError, ValueError):
            logger.warning("[settings_mapper] ignoring non-numeric digit %r", d)
    return sorted(set(out))


def _step_range(actions: dict) -> tuple[int, int]:
    if actions.get("infinite") is True:
        return INFINITE_MIN_STEPS, INFINITE_MAX_STEPS
    count = actions.get("count")
    lo = actions.get("min", count)
    hi = actions.get("max", count)
    lo = int(lo) if lo is not None else DEFAULT_MIN_STEPS
    hi = int(hi) if hi is not None else DEFAULT_MAX_STEPS
    return lo, max(lo, hi)


def _action_width(raw) -> int:
    try:
        width = int(raw)
    except (TypeError, ValueError):
        return 1
    return width if width > 0 else 1


def active_family(settings: dict) -> RuleFamily:
    blocks = settings.get("blocks") or {}
    for family in _PRIORITY:
        if _parse_digits((blocks.get(family.value) or {}).get("digits")):
            return family
    return RuleFamily.SIMPLE


def build_rule_config(settings: dict | None = None, **overrides) -> RuleConfig:
    """Map a UI settings dict to a RuleConfig.

    Raises ConfigurationError when a block sets both direction flags.
    Extra keyword arguments are passed straight to RuleConfig.
    """
    settings = settings or {}
    blocks = settings.get("blocks") or {}
    simple = blocks.get("simple") or {}
    family = active_family(settings)
    block = blocks.get(family.value) or {}

    simple_digits = _parse_digits(simple.get("digits")) or list(range(1, 10))
    min_steps, max_steps = _step_range(settings.get("actions") or {})

    fields = {
        "family": family,
        "action_width": _action_width(settings.get("digits")),
        "variable_width": settings.get("combineLevels") is True,
        "min_steps": min_steps,
        "max_steps": max_steps,
        "only_addition": bool(block.get("onlyAddition", False)),
        "only_subtraction": bool(block.get("onlySubtraction", False)),
        "silent": settings.get("silent", True),
    }
    if family is RuleFamily.SIMPLE:
        fields["digits"] = simple_digits
        if simple.get("includeFive") is not None:
            fields["include_five"] = bool(simple["includeFive"])
    else:
        fields["digits"] = _parse_digits(block.get("digits"))
        fields["plain_digits"] = simple_digits

    fields.update(overrides)
    logger.debug("[settings_mapper] %s -> %s", family.value, fields)
    return RuleConfig(**fields)
