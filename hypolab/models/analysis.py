"""Structured output of the experiment analyzer."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from hypolab.models.experiment import ExperimentStatus, ExperimentType
from hypolab.models.hypothesis import HypothesisStatus


class Significance(StrEnum):
    INSUFFICIENT_DATA = "insufficient_data"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"


class InsightType(StrEnum):
    SUCCESS = "success"
    MIXED = "mixed"
    WARNING = "warning"
    INFO = "info"


class MatchedResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int | None
    metric_name: str
    value: float
    unit: str = ""


class CriterionAnalysis(BaseModel):
    """Per-criterion outcome of matching against the recorded results."""

    model_config = ConfigDict(frozen=True)

    criterion_id: int | None
    name: str
    description: str = ""
    target_value: float
    unit: str = ""
    actual_value: float | None = None
    achieved: bool = False
    achievement_percent: float = 0.0
    result: MatchedResult | None = None


class Insight(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: InsightType
    title: str
    description: str


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    priority: str
    action: str
    description: str
    timeframe: str


class ExperimentSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int | None
    title: str
    status: ExperimentStatus
    type: ExperimentType


class HypothesisVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int | None
    title: str
    statement: str
    current_status: HypothesisStatus
    recommended_status: HypothesisStatus
    status_reason: str = ""


class AnalysisMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_results: int
    total_criteria: int
    achieved_criteria: int
    success_rate: int
    statistical_significance: Significance


class AnalysisReport(BaseModel):
    """Read-only report; recommends a status but never applies it."""

    model_config = ConfigDict(frozen=True)

    experiment: ExperimentSummary
    hypothesis: HypothesisVerdict
    metrics: AnalysisMetrics
    criteria_analysis: list[CriterionAnalysis] = Field(default_factory=list)
    insights: list[Insight] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)
    generated_at: datetime
