"""Tests for the worksheet batch driver."""
import pytest

from soroban.core.config import Settings
from soroban.models.rule_config import RuleConfig
from soroban.services import worksheet as worksheet_module
from soroban.services.worksheet import WORKSHEET_VERSION, generate_worksheet

CONFIG = RuleConfig(family="friends", digits=[9, 8], steps=4)


class TestGenerateWorksheet:
    def test_shape(self):
        sheet = generate_worksheet(CONFIG, examples_count=6, seed=1)
        assert sheet["version"] == WORKSHEET_VERSION
        assert sheet["show_answers"] is False
        assert sheet["settings"]["family"] == "friends"
        assert [e["index"] for e in sheet["examples"]] == [1, 2, 3, 4, 5, 6]
        assert "created_at" in sheet

    def test_examples_are_consistent(self):
        sheet = generate_worksheet(CONFIG, examples_count=5, seed=3)
        for example in sheet["examples"]:
            total = example["start"] + sum(
                s["value"] if isinstance(s, dict) else s for s in example["steps"]
            )
            assert total == example["answer"]

    def test_seed_is_reproducible_across_worker_counts(self):
        a = generate_worksheet(CONFIG, examples_count=8, seed=42, max_workers=1)
        b = generate_worksheet(CONFIG, examples_count=8, seed=42, max_workers=4)
        assert a["examples"] == b["examples"]

    def test_zero_examples_rejected(self):
        with pytest.raises(ValueError):
            generate_worksheet(CONFIG, examples_count=0)

    def test_count_is_capped(self, monkeypatch):
        monkeypatch.setattr(worksheet_module, "get_settings", lambda: Settings(worksheet_max_examples=3))
        sheet = generate_worksheet(CONFIG, examples_count=10, seed=0)
        assert len(sheet["examples"]) == 3
