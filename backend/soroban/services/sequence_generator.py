"""
Sequence generator: bounded stochastic search for one exercise.

    Building -> Validating -> Accepted
                          -> RetryBuilding   (until the attempt budget is spent)
    budget spent -> Fallback -> Accepted (possibly best-effort)

Per step the generator decides whether to try a rule-family action. The
decision is forced once the quota shortfall equals the remaining steps and
after a run of plain steps; otherwise it is a coin flip weighted by the
family's special rate. Trained digits are picked with a bias toward the
least used one. Plain moves are steered toward pre-states while the quota
is still owed. A step with no candidate aborts the attempt; nothing in the
loop raises for a dead end.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from soroban.core.errors import GenerationExhausted
from soroban.models.abacus import Action, Example, Step
from soroban.models.rule_config import MAX_PLAIN_RUN, RuleConfig
from soroban.services.fallback import FallbackSynthesizer
from soroban.services.multi_digit import MultiDigitOrchestrator
from soroban.services.sequence_validator import validate_example
from soroban.services.state_model import DigitState
from soroban.skills.registry import get_rule

# Probability of steering a plain move toward a pre-state while the quota is owed
STEER_RATE = 0.6

_silent_logger = logging.getLogger("soroban.silent")
_silent_logger.addHandler(logging.NullHandler())
_silent_logger.propagate = False
_silent_logger.disabled = True


class SequenceGenerator:
    def __init__(self, config: RuleConfig, rng: Optional[random.Random] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config
        self.rng = rng or random.Random()
        if logger is None:
            logger = _silent_logger if config.silent else logging.getLogger("soroban.generator")
        self.logger = logger
        self.rule = get_rule(config.family)
        self.orchestrator = MultiDigitOrchestrator(config, self.rule)
        self.fallback = FallbackSynthesizer(config, self.orchestrator, self.rng, self.logger)

    # ──────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────
    def generate(self, length: Optional[int] = None) -> Example:
        """Return one example. Never raises for search failures."""
        if length is None:
            length = self.config.pick_length(self.rng)
        try:
            return self.search(length)
        except GenerationExhausted as exc:
            self.logger.warning(
                "[sequence_generator] %s (last issues: %s), falling back",
                exc, "; ".join(exc.last_issues[:3]),
            )
        example = self.fallback.synthesize(length)
        example.attempts = self.config.attempt_budget
        example.issues = validate_example(example, self.config, self.rule, length)
        example.best_effort = example.best_effort or bool(example.issues)
        return example

    def search(self, length: int) -> Example:
        """Bounded attempts; raises GenerationExhausted when none validates."""
        last_issues: list[str] = []
        budget = self.config.attempt_budget
        for attempt in range(1, budget + 1):
            example = self._attempt(length)
            if example is None:
                continue
            issues = validate_example(example, self.config, self.rule, length)
            if not issues:
                example.attempts = attempt
                self.logger.debug("[sequence_generator] accepted after %d attempts", attempt)
                return example
            last_issues = issues
            self.logger.debug("[sequence_generator] attempt %d rejected: %s", attempt, issues)
        raise GenerationExhausted(budget, last_issues)

    # ──────────────────────────────────────────
    # One attempt
    # ──────────────────────────────────────────
    def _attempt(self, length: int) -> Optional[Example]:
        cfg = self.config
        quota = cfg.special_quota(length)
        start = DigitState.zeros(cfg.register_count)
        first = self.orchestrator.first_action(self.rng)
        state = self.orchestrator.apply(start, first)
        steps = [Step(action=first, before=start, after=state)]

        usage = {d: 0 for d in cfg.digits}
        specials = 0
        plain_run = 0
        for index in range(1, length):
            remaining = length - index
            shortfall = quota - specials
            forced = shortfall > 0 and shortfall >= remaining
            want_special = cfg.special_probability > 0 and (
                forced or plain_run > MAX_PLAIN_RUN or self.rng.random() < cfg.special_probability
            )

            action = self._pick_special(state, steps, usage) if want_special else None
            if action is None:
                if forced:
                    return None
                steer = shortfall > 0 and (shortfall >= remaining - 1 or self.rng.random() < STEER_RATE)
                action = self._pick_plain(state, steps, steer)
            if action is None:
                return None

            after = self.orchestrator.apply(state, action)
            steps.append(Step(action=action, before=state, after=after))
            state = after
            if action.is_special:
                specials += 1
                usage[action.digit] += 1
                plain_run = 0
            else:
                plain_run += 1

        return Example(start=start, steps=steps, answer=state)

    def _recent(self, steps: list[Step]) -> tuple[Optional[int], set[int]]:
        window = self.config.repeat_window
        mags = [s.action.magnitude for s in steps[-window:]]
        return (mags[-1] if mags else None), set(mags)

    def _pick_special(self, state: DigitState, steps: list[Step], usage: dict) -> Optional[Action]:
        last, recent = self._recent(steps)
        candidates = [a for a in self.orchestrator.special_actions(state, self.rng) if a.magnitude != last]
        if not candidates:
            return None
        preferred = [a for a in candidates if a.magnitude not in recent] or candidates
        weights = [1.0 / (1 + usage.get(a.digit, 0)) ** 2 for a in preferred]
        return self.rng.choices(preferred, weights=weights, k=1)[0]

    def _pick_plain(self, state: DigitState, steps: list[Step], steer: bool) -> Optional[Action]:
        last, recent = self._recent(steps)
        candidates = [a for a in self.orchestrator.plain_actions(state, rng=self.rng) if a.magnitude != last]
        if not candidates:
            return None

        if steer:
            t = self.orchestrator.target
            digits, signs = self.config.digits, self.config.signs
            steered = []
            for action in candidates:
                after = state.apply_delta(action.value)
                if after is not None and self.rule.special_options(after[t], after[t + 1], digits, signs):
                    steered.append(action)
            candidates = steered or candidates

        used = {s.action.magnitude for s in steps}
        fresh = [a for a in candidates if a.magnitude not in recent]
        unused = [a for a in fresh if a.magnitude not in used]
        pool = unused or fresh or candidates
        return self.rng.choice(pool)


def generate_example(config: RuleConfig, rng: Optional[random.Random] = None,
                     logger: Optional[logging.Logger] = None) -> Example:
    return SequenceGenerator(config, rng=rng, logger=logger).generate()
