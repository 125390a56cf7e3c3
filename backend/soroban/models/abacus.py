"""Value types shared by every generator component."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from soroban.core.errors import ConfigurationError

if TYPE_CHECKING:
    from soroban.services.state_model import DigitState


class RuleFamily(str, Enum):
    SIMPLE = "simple"
    BROTHERS = "brothers"
    FRIENDS = "friends"
    MIX = "mix"


class ActionTag(str, Enum):
    PLAIN = "plain"
    BROTHER = "brother"
    FRIEND = "friend"
    MIX = "mix"


FAMILY_TAGS: dict[RuleFamily, ActionTag] = {
    RuleFamily.SIMPLE: ActionTag.PLAIN,
    RuleFamily.BROTHERS: ActionTag.BROTHER,
    RuleFamily.FRIENDS: ActionTag.FRIEND,
    RuleFamily.MIX: ActionTag.MIX,
}


class Direction(str, Enum):
    MIXED = "mixed"
    ADDITION_ONLY = "addition_only"
    SUBTRACTION_ONLY = "subtraction_only"

    @classmethod
    def from_flags(cls, only_addition: bool = False, only_subtraction: bool = False) -> "Direction":
        if only_addition and only_subtraction:
            raise ConfigurationError("only_addition and only_subtraction are mutually exclusive")
        if only_addition:
            return cls.ADDITION_ONLY
        if only_subtraction:
            return cls.SUBTRACTION_ONLY
        return cls.MIXED

    @property
    def signs(self) -> tuple[int, ...]:
        if self is Direction.ADDITION_ONLY:
            return (1,)
        if self is Direction.SUBTRACTION_ONLY:
            return (-1,)
        return (1, -1)


@dataclass(frozen=True)
class AtomicOp:
    """One direct bead move: `delta` on the register `offset` places above the target."""
    offset: int
    delta: int

    def to_list(self) -> list[int]:
        return [self.offset, self.delta]


@dataclass(frozen=True)
class Action:
    """A signed step of the exercise.

    Plain actions carry their per-register digit deltas in `parts`.
    Special actions carry the rule `formula` (relative to `target`) plus
    `parts` for any plain digits on registers below the target.
    """
    value: int
    tag: ActionTag = ActionTag.PLAIN
    digit: int | None = None
    formula: tuple[AtomicOp, ...] = ()
    target: int = 0
    parts: tuple[tuple[int, int], ...] = ()

    @property
    def is_special(self) -> bool:
        return self.tag is not ActionTag.PLAIN

    @property
    def magnitude(self) -> int:
        return abs(self.value)

    @property
    def sign(self) -> int:
        return 1 if self.value >= 0 else -1

    def register_ops(self) -> list[tuple[int, int]]:
        """Absolute (register, delta) moves in the order they are performed."""
        ops = [(self.target + op.offset, op.delta) for op in self.formula]
        ops.extend(sorted(self.parts, key=lambda p: -p[0]))
        return ops

    def to_output(self) -> int | dict:
        if not self.is_special:
            return self.value
        return {
            "value": self.value,
            "family": self.tag.value,
            "digit": self.digit,
            "formula": [op.to_list() for op in self.formula],
        }


@dataclass(frozen=True)
class Step:
    action: Action
    before: "DigitState"
    after: "DigitState"

    @property
    def target_before(self) -> int:
        return self.before[self.action.target]


@dataclass
class Example:
    start: "DigitState"
    steps: list[Step]
    answer: "DigitState"
    best_effort: bool = False
    issues: list[str] = field(default_factory=list)
    attempts: int = 0

    @property
    def actions(self) -> list[Action]:
        return [s.action for s in self.steps]

    def special_count(self) -> int:
        return sum(1 for s in self.steps if s.action.is_special)

    def to_output(self) -> dict:
        return {
            "start": self.start.value,
            "steps": [s.action.to_output() for s in self.steps],
            "answer": self.answer.value,
            "best_effort": self.best_effort,
            "issues": list(self.issues),
        }
