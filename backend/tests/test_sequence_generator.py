"""
Tests for the sequence generator.

Property checks run over many seeds per configuration; the named
scenarios pin down the worked examples of each rule family.
"""
import logging
import random

import pytest

from soroban.models.abacus import ActionTag, Direction, RuleFamily
from soroban.models.rule_config import RuleConfig
from soroban.services.formula_builder import formula_value
from soroban.services.requirement_tables import REQUIREMENT_TABLES
from soroban.services.sequence_generator import SequenceGenerator, generate_example
from soroban.services.sequence_validator import validate_example

SEEDS = range(25)

CONFIGS = [
    dict(family="simple", digits=list(range(1, 10)), steps=6),
    dict(family="simple", digits=[1, 2, 3, 4], steps=5),
    dict(family="simple", digits=list(range(1, 10)), steps=5, only_subtraction=True),
    dict(family="brothers", digits=[1, 2, 3, 4], steps=7),
    dict(family="brothers", digits=[4], steps=10, only_addition=True),
    dict(family="brothers", digits=[2, 3], steps=6, action_width=2),
    dict(family="friends", digits=[9], steps=5, only_subtraction=True),
    dict(family="friends", digits=list(range(1, 10)), steps=8),
    dict(family="friends", digits=[3, 7], steps=6, action_width=2, only_addition=True),
    dict(family="mix", digits=[6, 7, 8, 9], steps=6),
    dict(family="mix", digits=[6], steps=5, only_addition=True),
    dict(family="mix", digits=[7, 8], steps=6, action_width=3),
]


def _assert_sound(example, config):
    """Properties that hold for every returned example, best-effort or not."""
    assert example.start.value == 0
    state = example.start
    for step in example.steps:
        assert step.before == state
        assert all(0 <= r <= 9 for r in step.after)
        assert step.after.value <= config.max_value
        assert step.after.value == state.value + step.action.value
        state = step.after
    assert state == example.answer

    first = example.steps[0].action
    assert not first.is_special
    assert first.value > 0
    if config.direction is Direction.SUBTRACTION_ONLY:
        w = config.action_width
        assert 10 ** w <= first.value <= 10 ** (w + 1) - 1

    for step in example.steps:
        action = step.action
        if action.is_special:
            table = REQUIREMENT_TABLES[(config.family, action.digit, action.sign)]
            assert step.before[action.target] in table
            lower = sum(d * 10 ** r for r, d in action.parts)
            assert formula_value(action.formula) * 10 ** action.target + lower == action.value


class TestProperties:
    @pytest.mark.parametrize("cfg", CONFIGS, ids=lambda c: f"{c['family']}-{c.get('action_width', 1)}")
    def test_generated_examples(self, cfg):
        config = RuleConfig(**cfg)
        for seed in SEEDS:
            example = SequenceGenerator(config, rng=random.Random(seed)).generate()
            _assert_sound(example, config)
            if example.best_effort:
                assert example.issues
                continue
            n = len(example.steps)
            assert n == cfg["steps"] or n == config.min_steps
            assert example.special_count() >= config.special_quota(n)
            mags = [a.magnitude for a in example.actions]
            assert all(a != b for a, b in zip(mags, mags[1:]))
            assert validate_example(example, config, length=n) == []

    def test_exact_length_requested(self):
        config = RuleConfig(family="brothers", digits=[1, 2, 3, 4], min_steps=3, max_steps=12)
        gen = SequenceGenerator(config, rng=random.Random(4))
        for length in (3, 8, 12):
            assert len(gen.generate(length=length).steps) == length

    def test_length_within_range(self):
        config = RuleConfig(min_steps=3, max_steps=6)
        gen = SequenceGenerator(config, rng=random.Random(9))
        for _ in range(20):
            assert 3 <= len(gen.generate().steps) <= 6

    def test_simple_direction(self):
        config = RuleConfig(steps=3, only_addition=True, digits=[1, 2])
        for seed in SEEDS:
            example = generate_example(config, rng=random.Random(seed))
            assert all(a.value > 0 for a in example.actions)

    def test_specials_follow_direction(self):
        config = RuleConfig(family="brothers", digits=[4], steps=7, only_subtraction=True)
        for seed in SEEDS:
            example = generate_example(config, rng=random.Random(seed))
            assert all(a.value < 0 for a in example.actions if a.is_special)


class TestScenarios:
    def test_friends_nine_subtraction(self):
        config = RuleConfig(family="friends", digits=[9], only_subtraction=True, action_width=1, steps=5)
        for seed in range(40):
            example = generate_example(config, rng=random.Random(seed))
            assert not example.best_effort
            assert 10 <= example.steps[0].action.value <= 99
            assert any(
                a.tag is ActionTag.FRIEND and a.digit == 9 and a.value < 0
                for a in example.actions
            )
            assert 0 <= example.answer.value <= 99

    def test_brothers_four(self):
        config = RuleConfig(family="brothers", digits=[4], steps=7)
        for seed in range(40):
            example = generate_example(config, rng=random.Random(seed))
            assert not example.best_effort
            first = example.steps[0].action
            assert not first.is_special and first.value > 0
            brothers = [s for s in example.steps if s.action.tag is ActionTag.BROTHER]
            assert len(brothers) >= 2
            for step in brothers:
                if step.action.value > 0:
                    assert step.before[0] in {1, 2, 3, 4}
                else:
                    assert step.before[0] in {5, 6, 7, 8}

    def test_mix_six_addition(self):
        config = RuleConfig(family="mix", digits=[6], only_addition=True, steps=5)
        for seed in range(20):
            example = generate_example(config, rng=random.Random(seed))
            for step in example.steps:
                if step.action.is_special:
                    assert len(step.action.formula) == 3
                    assert step.before[0] in {5, 6, 7, 8}
                    assert step.after[0] == step.before[0] - 4
                    assert step.after[1] == step.before[1] + 1


class TestDeterminism:
    def test_same_seed_same_example(self):
        config = RuleConfig(family="friends", digits=[3, 6, 9], steps=8, action_width=2)
        a = SequenceGenerator(config, rng=random.Random(123)).generate().to_output()
        b = SequenceGenerator(config, rng=random.Random(123)).generate().to_output()
        assert a == b


class TestFallbackEscalation:
    def test_exhaustion_falls_back(self, monkeypatch):
        config = RuleConfig(family="brothers", digits=[4], steps=7, max_attempts=3)
        monkeypatch.setattr(SequenceGenerator, "_attempt", lambda self, length: None)
        example = SequenceGenerator(config, rng=random.Random(0)).generate()
        _assert_sound(example, config)
        assert example.attempts == 3
        assert example.special_count() >= 2 or example.best_effort

    def test_silent_by_default(self, monkeypatch, caplog):
        config = RuleConfig(family="brothers", digits=[4], steps=7, max_attempts=2)
        monkeypatch.setattr(SequenceGenerator, "_attempt", lambda self, length: None)
        with caplog.at_level(logging.DEBUG):
            SequenceGenerator(config, rng=random.Random(0)).generate()
        assert not [r for r in caplog.records if r.name.startswith("soroban.generator")]

    def test_verbose_logs_fallback(self, monkeypatch, caplog):
        config = RuleConfig(family="brothers", digits=[4], steps=7, max_attempts=2, silent=False)
        monkeypatch.setattr(SequenceGenerator, "_attempt", lambda self, length: None)
        with caplog.at_level(logging.DEBUG, logger="soroban.generator"):
            SequenceGenerator(config, rng=random.Random(0)).generate()
        assert any("falling back" in r.getMessage() for r in caplog.records)

    def test_injected_logger(self, monkeypatch):
        records = []

        class _Capture(logging.Handler):
            def emit(self, record):
                records.append(record)

        logger = logging.getLogger("test.injected")
        logger.setLevel(logging.DEBUG)
        logger.addHandler(_Capture())
        config = RuleConfig(family="friends", digits=[9], steps=5, max_attempts=1)
        monkeypatch.setattr(SequenceGenerator, "_attempt", lambda self, length: None)
        SequenceGenerator(config, rng=random.Random(0), logger=logger).generate()
        assert records
