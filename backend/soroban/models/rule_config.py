"""RuleConfig: the immutable per-request generator configuration."""

import logging
import random
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from soroban.core.config import get_settings
from soroban.models.abacus import Direction, RuleFamily

logger = logging.getLogger("soroban.config")

VALID_DIGITS: dict[RuleFamily, tuple[int, ...]] = {
    RuleFamily.SIMPLE: tuple(range(1, 10)),
    RuleFamily.BROTHERS: (1, 2, 3, 4),
    RuleFamily.FRIENDS: tuple(range(1, 10)),
    RuleFamily.MIX: (6, 7, 8, 9),
}

DEFAULT_DIGITS: dict[RuleFamily, tuple[int, ...]] = {
    RuleFamily.SIMPLE: tuple(range(1, 10)),
    RuleFamily.BROTHERS: (4,),
    RuleFamily.FRIENDS: (1,),
    RuleFamily.MIX: (6,),
}

MIN_LENGTH: dict[RuleFamily, int] = {
    RuleFamily.SIMPLE: 1,
    RuleFamily.BROTHERS: 2,
    RuleFamily.FRIENDS: 3,
    RuleFamily.MIX: 4,
}

_REPEAT_WINDOW: dict[RuleFamily, int] = {
    RuleFamily.SIMPLE: 1,
    RuleFamily.BROTHERS: 1,
    RuleFamily.FRIENDS: 1,
    RuleFamily.MIX: 3,
}

# Plain steps in a row before a special action is forced
MAX_PLAIN_RUN = 3


def _ceil_percent(n: int, percent: int) -> int:
    return -(-n * percent // 100)


def _clean_digits(raw, allowed: tuple[int, ...]) -> tuple[int, ...]:
    out = set()
    for d in raw or ():
        try:
            n = int(d)
        except (TypeError, ValueError):
            continue
        if n in allowed:
            out.add(n)
    return tuple(sorted(out))


class RuleConfig(BaseModel):
    """Immutable configuration for one generation call.

    Construct with either `steps` (exact length) or `min_steps`/`max_steps`.
    The legacy `only_addition` / `only_subtraction` flags are accepted and
    folded into `direction`; setting both raises ConfigurationError.
    """
    model_config = ConfigDict(frozen=True)

    family: RuleFamily = RuleFamily.SIMPLE
    digits: tuple[int, ...] = ()
    plain_digits: tuple[int, ...] = tuple(range(1, 10))
    include_five: bool = True
    action_width: int = Field(1, ge=1, le=6)
    variable_width: bool = False
    min_steps: int = Field(2, ge=1, le=100)
    max_steps: int = Field(4, ge=1, le=100)
    direction: Direction = Direction.MIXED
    min_special_quota: Optional[int] = Field(None, ge=0)
    avoid_repeat_window: Optional[int] = Field(None, ge=1)
    special_rate: Optional[float] = Field(None, ge=0.0, le=1.0)
    plain_follows_direction: bool = False
    max_attempts: Optional[int] = Field(None, ge=1)
    silent: bool = True

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)

        family = RuleFamily(data.get("family", RuleFamily.SIMPLE))
        data["family"] = family

        only_add = bool(data.pop("only_addition", False))
        only_sub = bool(data.pop("only_subtraction", False))
        if only_add or only_sub:
            data["direction"] = Direction.from_flags(only_add, only_sub)

        digits = _clean_digits(data.get("digits"), VALID_DIGITS[family])
        if not digits:
            digits = DEFAULT_DIGITS[family]
            logger.warning(
                "[rule_config] no valid %s digits in %r, using %r",
                family.value, data.get("digits"), digits,
            )
        data["digits"] = digits

        if family is RuleFamily.SIMPLE:
            include_five = data.get("include_five")
            if include_five is None:
                include_five = 5 in digits or any(d > 5 for d in digits)
            if not include_five:
                digits = tuple(d for d in digits if d < 5) or (1, 2, 3, 4)
                data["digits"] = digits
            data["include_five"] = bool(include_five)
            data["plain_digits"] = digits
        else:
            data["include_five"] = True
            if data.get("plain_digits") is not None:
                plain = _clean_digits(data["plain_digits"], VALID_DIGITS[RuleFamily.SIMPLE])
                data["plain_digits"] = plain or tuple(range(1, 10))
            else:
                data.pop("plain_digits", None)

        steps = data.pop("steps", None)
        if steps is not None:
            data["min_steps"] = data["max_steps"] = int(steps)
        lo = int(data.get("min_steps", 2))
        hi = int(data.get("max_steps", max(lo, 4)))
        floor = MIN_LENGTH[family]
        if lo < floor:
            logger.warning("[rule_config] %s needs at least %d steps, raising %d", family.value, floor, lo)
            lo = floor
        hi = max(hi, lo)
        data["min_steps"], data["max_steps"] = lo, hi
        return data

    # ── Register layout ──────────────────────────────────────────

    @property
    def register_count(self) -> int:
        return self.action_width + 1

    @property
    def target_register(self) -> int:
        return self.action_width - 1

    @property
    def max_value(self) -> int:
        return 10 ** self.register_count - 1

    # ── Derived tuning ───────────────────────────────────────────

    @property
    def signs(self) -> tuple[int, ...]:
        return self.direction.signs

    @property
    def plain_signs(self) -> tuple[int, ...]:
        if self.family is RuleFamily.SIMPLE or self.plain_follows_direction:
            return self.direction.signs
        return (1, -1)

    @property
    def repeat_window(self) -> int:
        if self.avoid_repeat_window is not None:
            return self.avoid_repeat_window
        return _REPEAT_WINDOW[self.family]

    @property
    def attempt_budget(self) -> int:
        if self.max_attempts is not None:
            return self.max_attempts
        settings = get_settings()
        if self.action_width == 1:
            return settings.default_max_attempts
        return settings.multi_digit_max_attempts

    @property
    def special_probability(self) -> float:
        if self.special_rate is not None:
            return self.special_rate
        if self.family is RuleFamily.BROTHERS:
            return {1: 0.75, 2: 0.70, 3: 0.65}.get(self.action_width, 0.60)
        if self.family is RuleFamily.FRIENDS:
            return 0.5
        if self.family is RuleFamily.MIX:
            return 0.4
        return 0.0

    def pick_length(self, rng: random.Random) -> int:
        return rng.randint(self.min_steps, self.max_steps)

    def special_quota(self, length: int) -> int:
        if self.family is RuleFamily.SIMPLE:
            return 0
        if self.min_special_quota is not None:
            return min(self.min_special_quota, max(length - 1, 0))
        if self.family is RuleFamily.BROTHERS:
            if length <= 7:
                quota = max(1, _ceil_percent(length, 25))
            elif length <= 12:
                quota = _ceil_percent(length, 30)
            else:
                quota = _ceil_percent(length, 35)
        elif self.family is RuleFamily.FRIENDS:
            quota = max(1, length * 20 // 100)
        else:
            quota = 1
        return min(quota, max(length - 1, 0))
