#!/usr/bin/env python3
"""
Generation audit: runs every family x direction x width over many seeds and
reports how often the search fell back to a best-effort example.

Checks per combination:
  1. BEST_EFFORT   share of examples returned by the fallback with issues
  2. ATTEMPTS      mean attempts before acceptance
  3. HARD_ISSUES   issues other than LENGTH / QUOTA / REPEAT (should be zero)

Usage:
    cd backend && python scripts/audit_generation.py [seeds_per_combo]
"""

import json
import random
import sys
from pathlib import Path

# ── Path setup ────────────────────────────────────────────────────────────────
SCRIPT_DIR = Path(__file__).parent
BACKEND_DIR = SCRIPT_DIR.parent
sys.path.insert(0, str(BACKEND_DIR))

from soroban.models.abacus import Direction, RuleFamily
from soroban.models.rule_config import VALID_DIGITS, RuleConfig
from soroban.services.sequence_generator import SequenceGenerator
from soroban.services.sequence_validator import SOFT_CODES, issue_code

REPORT_PATH = SCRIPT_DIR / "generation_audit.json"


def audit_combo(family: RuleFamily, direction: Direction, width: int, seeds: int) -> dict:
    config = RuleConfig(
        family=family,
        digits=list(VALID_DIGITS[family]),
        direction=direction,
        action_width=width,
        min_steps=4,
        max_steps=10,
    )
    best_effort = 0
    attempts = 0
    hard = []
    for seed in range(seeds):
        example = SequenceGenerator(config, rng=random.Random(seed)).generate()
        attempts += example.attempts
        if example.best_effort:
            best_effort += 1
        hard += [i for i in example.issues if issue_code(i) not in SOFT_CODES]
    return {
        "family": family.value,
        "direction": direction.value,
        "width": width,
        "best_effort_rate": round(best_effort / seeds, 3),
        "mean_attempts": round(attempts / seeds, 1),
        "hard_issues": hard[:10],
    }


def main() -> int:
    seeds = int(sys.argv[1]) if len(sys.argv) > 1 else 50
    rows = []
    for family in RuleFamily:
        for direction in Direction:
            for width in (1, 2, 3):
                row = audit_combo(family, direction, width, seeds)
                rows.append(row)
                marker = "!!" if row["hard_issues"] else "  "
                print(
                    f"{marker} {row['family']:<9} {row['direction']:<17} w={width} "
                    f"best_effort={row['best_effort_rate']:.3f} attempts={row['mean_attempts']}"
                )
    REPORT_PATH.write_text(json.dumps(rows, indent=2), encoding="utf-8")
    print(f"\nReport written to {REPORT_PATH}")
    return 1 if any(r["hard_issues"] for r in rows) else 0


if __name__ == "__main__":
    sys.exit(main())
