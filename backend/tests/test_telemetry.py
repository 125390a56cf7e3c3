"""Tests for telemetry events and the instrument decorator."""
import asyncio
import json
import logging

import pytest

from soroban.models.abacus import Example
from soroban.services.state_model import DigitState
from soroban.services.telemetry import emit_event, emit_generation, instrument


def _logged_payloads(caplog):
    return [
        json.loads(r.getMessage().split("telemetry=", 1)[1])
        for r in caplog.records
        if r.name == "soroban.telemetry"
    ]


class TestEmitEvent:
    def test_payload_is_logged_as_json(self, caplog):
        caplog.set_level(logging.INFO, logger="soroban.telemetry")
        payload = emit_event("x", route="/r", version="v1", family="mix", ok=True)
        assert payload["event"] == "x"
        logged = _logged_payloads(caplog)
        assert logged[-1]["family"] == "mix"
        assert logged[-1]["route"] == "/r"

    def test_emit_generation(self, caplog):
        caplog.set_level(logging.INFO, logger="soroban.telemetry")
        zero = DigitState.zeros(2)
        example = Example(start=zero, steps=[], answer=zero, best_effort=True, attempts=100)
        payload = emit_generation(example, route="/g", version="v1", family="friends")
        assert payload["attempts"] == 100
        assert payload["best_effort"] is True


class TestInstrument:
    def test_sync_success(self, caplog):
        caplog.set_level(logging.INFO, logger="soroban.telemetry")

        @instrument(route="/sync", version="v1")
        def handler(x):
            return x * 2

        assert handler(4) == 8
        event = _logged_payloads(caplog)[-1]
        assert event["ok"] is True
        assert event["error_type"] is None

    def test_sync_error_is_reported_and_reraised(self, caplog):
        caplog.set_level(logging.INFO, logger="soroban.telemetry")

        @instrument(route="/sync", version="v1")
        def handler():
            raise KeyError("boom")

        with pytest.raises(KeyError):
            handler()
        event = _logged_payloads(caplog)[-1]
        assert event["ok"] is False
        assert event["error_type"] == "KeyError"

    def test_async(self, caplog):
        caplog.set_level(logging.INFO, logger="soroban.telemetry")

        @instrument(route="/async", version="v1")
        async def handler():
            return "done"

        assert asyncio.run(handler()) == "done"
        assert _logged_payloads(caplog)[-1]["route"] == "/async"
