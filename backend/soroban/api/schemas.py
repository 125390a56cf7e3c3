from pydantic import BaseModel, Field
from typing import Any, Literal

from soroban.models.abacus import Direction, RuleFamily
from soroban.models.rule_config import RuleConfig


class RuleConfigRequest(BaseModel):
    family: RuleFamily = RuleFamily.SIMPLE
    digits: list[int] = []
    plain_digits: list[int] | None = None
    include_five: bool | None = None
    action_width: int = Field(1, ge=1, le=6)
    variable_width: bool = False
    steps: int | None = Field(None, ge=1, le=100)
    min_steps: int = Field(2, ge=1, le=100)
    max_steps: int = Field(4, ge=1, le=100)
    direction: Direction | None = None
    only_addition: bool = False
    only_subtraction: bool = False
    min_special_quota: int | None = Field(None, ge=0)
    avoid_repeat_window: int | None = Field(None, ge=1)
    plain_follows_direction: bool = False

    def to_rule_config(self) -> RuleConfig:
        return RuleConfig(**self.model_dump(exclude_none=True))


class GenerateRequest(RuleConfigRequest):
    seed: int | None = None


class SettingsRequest(BaseModel):
    settings: dict[str, Any] = {}
    seed: int | None = None


class ExampleResponse(BaseModel):
    start: int
    steps: list[int | dict[str, Any]]
    answer: int
    best_effort: bool
    issues: list[str]
    attempts: int
    trainer: dict[str, Any]
    text: str


class WorksheetRequest(BaseModel):
    config: RuleConfigRequest = RuleConfigRequest()
    examples_count: int = Field(20, ge=1, le=200)
    show_answers: bool = False
    seed: int | None = None


class WorksheetPdfRequest(WorksheetRequest):
    pdf_type: Literal["full", "student", "answer_key"] = "full"
