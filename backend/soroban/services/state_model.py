"""Whole-abacus state: a fixed-width vector of digit registers.

Index 0 is the least significant rod. The vector is immutable; every
operation returns a new DigitState.
"""

from __future__ import annotations

from typing import Iterable

from soroban.core.errors import InvariantViolation


def normalize(registers: list[int]) -> list[int] | None:
    """Push carries/borrows upward until every register is in [0,9].

    Returns None when the top register overflows or the value goes negative.
    """
    regs = list(registers)
    for i in range(len(regs) - 1):
        while regs[i] > 9:
            regs[i] -= 10
            regs[i + 1] += 1
        while regs[i] < 0:
            regs[i] += 10
            regs[i + 1] -= 1
    if not regs or not (0 <= regs[-1] <= 9):
        return None
    return regs


def split_digits(value: int, size: int) -> list[int]:
    """Place-value digits of abs(value), least significant first, padded to size."""
    value = abs(value)
    out = []
    for _ in range(size):
        out.append(value % 10)
        value //= 10
    return out


class DigitState:
    __slots__ = ("registers",)

    def __init__(self, registers: Iterable[int]):
        regs = tuple(int(r) for r in registers)
        for r in regs:
            if not 0 <= r <= 9:
                raise InvariantViolation(f"register out of range in {regs}")
        self.registers = regs

    @classmethod
    def zeros(cls, size: int) -> "DigitState":
        return cls([0] * size)

    @classmethod
    def from_number(cls, value: int, size: int) -> "DigitState":
        if value < 0 or value > 10 ** size - 1:
            raise InvariantViolation(f"{value} does not fit in {size} registers")
        return cls(split_digits(value, size))

    @property
    def value(self) -> int:
        return sum(r * 10 ** i for i, r in enumerate(self.registers))

    @property
    def size(self) -> int:
        return len(self.registers)

    @property
    def max_value(self) -> int:
        return 10 ** len(self.registers) - 1

    def __len__(self) -> int:
        return len(self.registers)

    def __getitem__(self, index: int) -> int:
        return self.registers[index]

    def __iter__(self):
        return iter(self.registers)

    def __eq__(self, other) -> bool:
        if isinstance(other, DigitState):
            return self.registers == other.registers
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.registers)

    def __repr__(self) -> str:
        return f"DigitState({list(self.registers)})"

    def with_register(self, index: int, value: int) -> "DigitState":
        regs = list(self.registers)
        regs[index] = value
        return DigitState(regs)

    def apply_delta(self, delta: int) -> "DigitState | None":
        """Add a signed number with carry/borrow normalization.

        Returns None when the result would be negative or exceed max_value.
        """
        sign = 1 if delta >= 0 else -1
        digits = split_digits(delta, len(self.registers))
        if abs(delta) > self.max_value:
            return None
        regs = [r + sign * d for r, d in zip(self.registers, digits)]
        regs = normalize(regs)
        if regs is None:
            return None
        return DigitState(regs)

    def apply_ops(self, ops: Iterable[tuple[int, int]]) -> "DigitState":
        """Apply (register, delta) moves one at a time without normalization.

        Every intermediate register must stay in [0,9]; anything else is a
        programming error in the caller.
        """
        regs = list(self.registers)
        for index, delta in ops:
            if not 0 <= index < len(regs):
                raise InvariantViolation(f"register {index} outside state of size {len(regs)}")
            regs[index] += delta
            if not 0 <= regs[index] <= 9:
                raise InvariantViolation(
                    f"register {index} left [0,9] ({regs[index]}) applying {delta}"
                )
        return DigitState(regs)
