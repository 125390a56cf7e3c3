#!/usr/bin/env python3
"""
Print a handful of generated examples for a rule family.

Usage:
    cd backend && python scripts/print_examples.py --family friends --digits 9 --only-subtraction --steps 5
    cd backend && python scripts/print_examples.py --family mix --digits 6 7 --width 2 --count 10 --seed 42
"""

import argparse
import random
import sys
from pathlib import Path

# ── Path setup ────────────────────────────────────────────────────────────────
BACKEND_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BACKEND_DIR))

from soroban.core.errors import ConfigurationError
from soroban.models.rule_config import RuleConfig
from soroban.services.narration import dictation, format_example
from soroban.services.sequence_generator import SequenceGenerator


def parse_args(argv=None):
    p = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    p.add_argument("--family", default="simple", choices=["simple", "brothers", "friends", "mix"])
    p.add_argument("--digits", type=int, nargs="*", default=[])
    p.add_argument("--width", type=int, default=1)
    p.add_argument("--steps", type=int, default=None)
    p.add_argument("--only-addition", action="store_true")
    p.add_argument("--only-subtraction", action="store_true")
    p.add_argument("--count", type=int, default=5)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--speak", default=None, help="also print dictation text (ua, ru, en, es)")
    p.add_argument("--verbose", action="store_true", help="log generator diagnostics")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        config = RuleConfig(
            family=args.family,
            digits=args.digits,
            action_width=args.width,
            steps=args.steps,
            only_addition=args.only_addition,
            only_subtraction=args.only_subtraction,
            silent=not args.verbose,
        )
    except ConfigurationError as e:
        print(f"config error: {e}", file=sys.stderr)
        return 2

    rng = random.Random(args.seed)
    generator = SequenceGenerator(config, rng=rng)
    for i in range(1, args.count + 1):
        example = generator.generate()
        flag = "  [best-effort]" if example.best_effort else ""
        print(f"{i:>3}. {format_example(example)}{flag}")
        for step in example.steps:
            if step.action.is_special:
                ops = ", ".join(f"r{step.action.target + op.offset}{op.delta:+d}" for op in step.action.formula)
                print(f"       {step.action.value:+d} ({step.action.tag.value} {step.action.digit}): {ops}")
        if args.speak:
            print("       " + " / ".join(dictation(example, args.speak)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
