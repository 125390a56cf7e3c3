import logging
import random
from fastapi import APIRouter, HTTPException

from soroban.api.schemas import ExampleResponse, GenerateRequest, SettingsRequest
from soroban.core.errors import ConfigurationError
from soroban.models.abacus import Example
from soroban.services.narration import format_example, to_trainer_format
from soroban.services.sequence_generator import SequenceGenerator
from soroban.services.settings_mapper import build_rule_config
from soroban.services.telemetry import emit_generation, instrument

logger = logging.getLogger("soroban.api.examples")
router = APIRouter(prefix="/api/v1/examples", tags=["examples-v1"])


def _to_response(example: Example) -> ExampleResponse:
    out = example.to_output()
    return ExampleResponse(
        **out,
        attempts=example.attempts,
        trainer=to_trainer_format(example),
        text=format_example(example),
    )


def _generate(config, seed: int | None, route: str) -> ExampleResponse:
    example = SequenceGenerator(config, rng=random.Random(seed)).generate()
    emit_generation(example, route=route, version="v1", family=config.family.value)
    if example.best_effort:
        logger.info("[examples] best-effort example: %s", example.issues)
    return _to_response(example)


@router.post("/generate", response_model=ExampleResponse)
@instrument(route="/api/v1/examples/generate", version="v1")
def generate_example(req: GenerateRequest):
    try:
        config = req.to_rule_config()
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _generate(config, req.seed, "/api/v1/examples/generate")


@router.post("/from-settings", response_model=ExampleResponse)
@instrument(route="/api/v1/examples/from-settings", version="v1")
def generate_from_settings(req: SettingsRequest):
    try:
        config = build_rule_config(req.settings)
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _generate(config, req.seed, "/api/v1/examples/from-settings")
