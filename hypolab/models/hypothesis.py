"""Hypothesis model, its success criteria and the transition audit record."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from hypolab.models.base import utcnow


class HypothesisStatus(StrEnum):
    DRAFT = "DRAFT"
    RESEARCH = "RESEARCH"
    SCORED = "SCORED"
    READY_FOR_TESTING = "READY_FOR_TESTING"
    IN_EXPERIMENT = "IN_EXPERIMENT"
    VALIDATED = "VALIDATED"
    INVALIDATED = "INVALIDATED"
    ITERATION = "ITERATION"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class HypothesisLevel(StrEnum):
    LEVEL_1 = "LEVEL_1"
    LEVEL_2 = "LEVEL_2"


class HypothesisStage(StrEnum):
    DESK_RESEARCH = "DESK_RESEARCH"
    EXPERIMENT_DESIGN = "EXPERIMENT_DESIGN"
    EXPERIMENT_EXECUTION = "EXPERIMENT_EXECUTION"
    CONCLUSION = "CONCLUSION"


class SuccessCriteria(BaseModel):
    """A named, unit-bearing target a hypothesis or experiment must meet."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    hypothesis_id: int | None = None
    experiment_id: int | None = None
    name: str
    description: str = ""
    target_value: float
    unit: str = ""
    actual_value: float | None = None

    # Higher is better for every criterion; there is no orientation flag.
    @computed_field  # type: ignore[prop-decorator]
    @property
    def achieved(self) -> bool:
        return self.actual_value is not None and self.actual_value >= self.target_value


class Hypothesis(BaseModel):
    """An "if / then / because" statement derived from an idea."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    idea_id: int
    title: str
    statement: str = ""
    description: str = ""

    level: HypothesisLevel = HypothesisLevel.LEVEL_1
    stage: HypothesisStage | None = None
    status: HypothesisStatus = HypothesisStatus.DRAFT
    confidence_level: int = Field(default=50, ge=0, le=100)

    # RICE inputs and derived score
    reach: float | None = None
    impact: float | None = None
    confidence: float | None = None
    effort: float | None = None
    rice_score: float | None = None
    ice_score: float | None = None

    # Desk research
    desk_research_notes: str = ""
    desk_research_sources: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)
    desk_research_date: datetime | None = None

    success_criteria: list[SuccessCriteria] = Field(default_factory=list)

    version: int = 0
    created_by: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: datetime | None = None

    @model_validator(mode="after")
    def _stage_requires_level_2(self) -> Hypothesis:
        if self.level == HypothesisLevel.LEVEL_1 and self.stage is not None:
            raise ValueError("stage can only be set on LEVEL_2 hypotheses")
        return self


class HypothesisTransition(BaseModel):
    """Append-only audit record written for every accepted transition."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    hypothesis_id: int
    from_status: HypothesisStatus
    to_status: HypothesisStatus
    from_level: HypothesisLevel
    to_level: HypothesisLevel
    from_stage: HypothesisStage | None = None
    to_stage: HypothesisStage | None = None
    actor: str
    reason: str = ""
    created_at: datetime = Field(default_factory=utcnow)
