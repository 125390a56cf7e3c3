"""
Worksheet batch driver: many independent examples for printing.

Each example gets its own random.Random seeded from the batch seed, so a
seeded worksheet is reproducible regardless of thread scheduling. Examples
share only the immutable RuleConfig.
"""

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Optional

from soroban.core.config import get_settings
from soroban.models.rule_config import RuleConfig
from soroban.services.sequence_generator import SequenceGenerator

logger = logging.getLogger("soroban.worksheet")

WORKSHEET_VERSION = 2


def _build_one(config: RuleConfig, index: int, seed: int) -> dict:
    example = SequenceGenerator(config, rng=random.Random(seed)).generate()
    out = example.to_output()
    return {
        "index": index,
        "start": out["start"],
        "steps": out["steps"],
        "answer": out["answer"],
        "best_effort": out["best_effort"],
    }


def generate_worksheet(config: RuleConfig, examples_count: int = 20, show_answers: bool = False,
                       seed: Optional[int] = None, max_workers: Optional[int] = None) -> dict:
    settings = get_settings()
    if examples_count < 1:
        raise ValueError("examples_count must be at least 1")
    if examples_count > settings.worksheet_max_examples:
        logger.warning(
            "[worksheet] %d examples requested, capping at %d",
            examples_count, settings.worksheet_max_examples,
        )
        examples_count = settings.worksheet_max_examples

    batch_rng = random.Random(seed)
    seeds = [batch_rng.getrandbits(64) for _ in range(examples_count)]
    workers = max_workers or settings.worksheet_max_workers

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_build_one, config, i + 1, s) for i, s in enumerate(seeds)]
        examples = [f.result() for f in futures]

    best_effort = sum(1 for e in examples if e["best_effort"])
    if best_effort:
        logger.info("[worksheet] %d/%d examples are best-effort", best_effort, len(examples))

    return {
        "examples": examples,
        "settings": config.model_dump(mode="json"),
        "created_at": datetime.now(timezone.utc).isoformat(),
        "show_answers": bool(show_answers),
        "version": WORKSHEET_VERSION,
    }
