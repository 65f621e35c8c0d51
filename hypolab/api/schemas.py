"""API request/response schemas (separate from domain models)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from hypolab.engine.readiness import Readiness
from hypolab.engine.scoring import IceAverage
from hypolab.models.analysis import AnalysisReport
from hypolab.models.experiment import (
    Experiment,
    ExperimentResult,
    ExperimentStatus,
    ExperimentType,
)
from hypolab.models.hypothesis import (
    Hypothesis,
    HypothesisStage,
    HypothesisStatus,
    HypothesisTransition,
)
from hypolab.models.idea import IceScore, Idea, IdeaPriority

# --- Responses ---


class HealthResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str
    version: str
    db_connected: bool


class IdeaListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    ideas: list[Idea]
    total: int


class IceScoreListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    scores: list[IceScore]
    average: IceAverage
    total: int


class IceScoreSubmitResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: IceScore
    idea: Idea


class FunnelResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    idea_id: int
    total_hypotheses: int
    validated_hypotheses: int
    invalidated_hypotheses: int
    total_experiments: int
    running_experiments: int
    completed_experiments: int
    total_results: int
    success_rate: int


class HypothesisListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    hypotheses: list[Hypothesis]
    total: int


class TransitionOptionResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: HypothesisStatus
    allowed: bool
    missing: list[str]


class ReadinessResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    hypothesis_id: int
    facts: Readiness
    ready_for_level_2: bool
    available_transitions: list[TransitionOptionResponse]


class TransitionListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    transitions: list[HypothesisTransition]
    total: int


class ExperimentListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    experiments: list[Experiment]
    total: int


class ResultListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    results: list[ExperimentResult]
    total: int


class ApplyRecommendationResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    applied: bool
    hypothesis: Hypothesis
    report: AnalysisReport


# --- Requests ---


class IdeaCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    category: str = ""
    priority: IdeaPriority = IdeaPriority.MEDIUM
    created_by: str = "api"


class RiceScoreRequest(BaseModel):
    reach: float | None = None
    impact: float | None = None
    confidence: float | None = None
    effort: float | None = None


class IceScoreRequest(BaseModel):
    user_id: str = Field(min_length=1)
    impact: int
    confidence: int
    ease: int
    comment: str = ""


class HypothesisIceScoreRequest(BaseModel):
    impact: int
    confidence: int
    ease: int


class HypothesisCreateRequest(BaseModel):
    idea_id: int
    title: str = Field(min_length=1)
    statement: str = ""
    description: str = ""
    confidence_level: int = Field(default=50, ge=0, le=100)
    created_by: str = "api"


class HypothesisUpdateRequest(BaseModel):
    description: str


class DeskResearchRequest(BaseModel):
    notes: str
    sources: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)


class SuccessCriterionRequest(BaseModel):
    name: str = Field(min_length=1)
    target_value: float
    unit: str = ""
    description: str = ""


class ActualValueRequest(BaseModel):
    actual_value: float | None


class TransitionRequest(BaseModel):
    target: HypothesisStatus
    actor: str = "api"


class StageTransitionRequest(BaseModel):
    target: HypothesisStage
    actor: str = "api"


class ActorRequest(BaseModel):
    actor: str = "api"


class ExperimentCreateRequest(BaseModel):
    hypothesis_id: int
    title: str = Field(min_length=1)
    type: ExperimentType = ExperimentType.OTHER
    description: str = ""
    methodology: str = ""
    success_metrics: str = ""
    created_by: str = "api"


class ExperimentStatusRequest(BaseModel):
    status: ExperimentStatus


class ResultRequest(BaseModel):
    metric_name: str = Field(min_length=1)
    value: float
    unit: str = ""
    notes: str = ""
