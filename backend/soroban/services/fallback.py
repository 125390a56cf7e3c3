"""
Fallback synthesizer: the last resort after the search budget is spent.

Construction, in order:
  1. one plain first action
  2. for each special action still owed by the quota: over every trained
     digit, sign and pre-state, take the shortest path of plain direct moves
     that walks the target rod there, ranked by the steps the remaining
     specials would need from the resulting rod value; then apply the formula
  3. pad the remaining steps with plain moves, preferring magnitudes not yet
     used in the exercise

Preparatory moves use only the configured plain signs and digits. Every
loop is bounded. Nothing here raises for a dead end; the example is
returned as far as it got and flagged best-effort by the caller.
"""

from __future__ import annotations

import logging
import random
from collections import deque

from soroban.models.abacus import Action, Example, Step
from soroban.models.rule_config import RuleConfig
from soroban.services.bead_physics import legal_deltas
from soroban.services.multi_digit import MultiDigitOrchestrator
from soroban.services.requirement_tables import (
    REQUIREMENT_TABLES,
    carry_allowed,
    uses_carry,
)
from soroban.services.state_model import DigitState

PATH_ITERATIONS = 20

_ALL_SIGNS = (1, -1)
_ALL_DIGITS = tuple(range(1, 10))


def plain_paths(start: int, signs=_ALL_SIGNS, digits=_ALL_DIGITS, include_five: bool = True,
                max_length: int = PATH_ITERATIONS) -> dict[int, list[int]]:
    """Shortest signed direct-move paths on one rod from `start` to every reachable value.

    Only moves whose sign is in `signs` and whose magnitude is in `digits`
    are used. Values not reachable within `max_length` moves are absent.
    """
    paths = {start: []}
    queue = deque([start])
    while queue:
        v = queue.popleft()
        if len(paths[v]) >= max_length:
            continue
        for delta in legal_deltas(v, None, include_five):
            if (1 if delta > 0 else -1) not in signs or abs(delta) not in digits:
                continue
            nxt = v + delta
            if nxt not in paths:
                paths[nxt] = paths[v] + [delta]
                queue.append(nxt)
    return paths


def find_plain_path(start: int, goal: int, signs=_ALL_SIGNS, digits=_ALL_DIGITS,
                    include_five: bool = True, max_iterations: int = PATH_ITERATIONS) -> list[int] | None:
    """Shortest signed direct moves on one rod that take `start` to `goal`, or None."""
    return plain_paths(start, signs, digits, include_five, max_iterations).get(goal)


class FallbackSynthesizer:
    def __init__(self, config: RuleConfig, orchestrator: MultiDigitOrchestrator,
                 rng: random.Random | None = None, logger: logging.Logger | None = None):
        self.config = config
        self.orchestrator = orchestrator
        self.rule = orchestrator.rule
        self.rng = rng or random.Random()
        self.logger = logger or logging.getLogger("soroban.fallback")
        self._path_cache: dict[int, dict[int, list[int]]] = {}
        self._cost_cache: dict[tuple[int, int], int] = {}

    def synthesize(self, length: int) -> Example:
        cfg = self.config
        quota = cfg.special_quota(length)
        start = DigitState.zeros(cfg.register_count)
        steps: list[Step] = []

        first = self.orchestrator.first_action(self.rng)
        state = self._push(steps, start, first)

        usage = {d: 0 for d in cfg.digits}
        placed = 0
        while placed < quota and len(steps) < length:
            # reserve one slot per special still owed after this one
            budget = length - len(steps) - (quota - placed - 1)
            plan = self._plan_special(state, steps, usage, budget, quota - placed)
            if plan is None:
                self.logger.info("[fallback] could not place special %d/%d", placed + 1, quota)
                break
            for action in plan:
                state = self._push(steps, state, action)
            usage[plan[-1].digit] += 1
            placed += 1

        while len(steps) < length:
            action = self._pad_action(state, steps)
            if action is None:
                self.logger.info("[fallback] no plain move left at %s", state)
                break
            state = self._push(steps, state, action)

        example = Example(start=start, steps=steps, answer=state)
        example.best_effort = len(steps) != length or placed < quota
        return example

    # ──────────────────────────────────────────
    # Helpers
    # ──────────────────────────────────────────
    def _push(self, steps: list[Step], state: DigitState, action: Action) -> DigitState:
        after = self.orchestrator.apply(state, action)
        steps.append(Step(action=action, before=state, after=after))
        return after

    def _paths(self, start: int) -> dict[int, list[int]]:
        if start not in self._path_cache:
            cfg = self.config
            self._path_cache[start] = plain_paths(start, cfg.plain_signs, cfg.plain_digits, cfg.include_five)
        return self._path_cache[start]

    def _remaining_cost(self, value: int, count: int) -> int:
        """Fewest steps to place `count` more specials with the target rod at `value`."""
        if count <= 0:
            return 0
        key = (value, count)
        if key not in self._cost_cache:
            cfg = self.config
            paths = self._paths(value)
            best = (PATH_ITERATIONS + 2) * count
            for digit in cfg.digits:
                for sign in cfg.signs:
                    for pre in REQUIREMENT_TABLES.get((cfg.family, digit, sign), ()):
                        if pre in paths:
                            after = (pre + sign * digit) % 10
                            best = min(best, len(paths[pre]) + 1 + self._remaining_cost(after, count - 1))
            self._cost_cache[key] = best
        return self._cost_cache[key]

    def _plan_special(self, state: DigitState, steps: list[Step], usage: dict,
                      budget: int, owed: int) -> list[Action] | None:
        """Cheapest plain path + formula over every digit, sign and pre-state that fits in budget.

        Candidates are ranked by the total steps needed for this special and
        the `owed - 1` after it, then by their own length.
        """
        cfg = self.config
        t = self.orchestrator.target
        next_value = state[t + 1]
        last = steps[-1].action.magnitude if steps else None
        paths = self._paths(state[t])

        best = None
        for digit in cfg.digits:
            for sign in cfg.signs:
                if uses_carry(cfg.family) and not carry_allowed(next_value, sign):
                    continue
                table = REQUIREMENT_TABLES.get((cfg.family, digit, sign), frozenset())
                for pre in sorted(table):
                    path = paths.get(pre)
                    if path is None or len(path) + 1 > budget:
                        continue
                    plan = self._build_plan(state, path, digit, sign)
                    if plan is None:
                        continue
                    after = (pre + sign * digit) % 10
                    key = (
                        len(plan) + self._remaining_cost(after, owed - 1),
                        len(plan),
                        usage[digit],
                        _count_repeats(last, plan),
                        self.rng.random(),
                    )
                    if best is None or key < best[0]:
                        best = (key, plan)
        return best[1] if best else None

    def _build_plan(self, state: DigitState, path: list[int], digit: int, sign: int) -> list[Action] | None:
        t = self.orchestrator.target
        plan = []
        for delta in path:
            action = Action(value=delta * 10 ** t, target=t, parts=((t, delta),))
            state = state.apply_delta(action.value)
            if state is None:
                return None
            plan.append(action)
        specials = self.orchestrator.special_actions(state, self.rng, digits=(digit,), signs=(sign,))
        if not specials:
            return None
        plan.append(specials[0])
        return plan

    def _pad_action(self, state: DigitState, steps: list[Step]) -> Action | None:
        candidates = self.orchestrator.plain_actions(state, rng=self.rng)
        if not candidates:
            candidates = self.orchestrator.plain_actions(state, rng=self.rng, strict_width=False)
        if not candidates:
            return None
        last = steps[-1].action.magnitude if steps else None
        used = {s.action.magnitude for s in steps}
        fresh = [a for a in candidates if a.magnitude != last]
        unused = [a for a in fresh if a.magnitude not in used]
        pool = unused or fresh or candidates
        return self.rng.choice(pool)


def _count_repeats(last: int | None, plan: list[Action]) -> int:
    count = 0
    for action in plan:
        if last is not None and action.magnitude == last:
            count += 1
        last = action.magnitude
    return count
