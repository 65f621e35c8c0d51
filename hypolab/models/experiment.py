"""Experiment model and its recorded results."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from hypolab.models.base import utcnow


class ExperimentStatus(StrEnum):
    PLANNING = "PLANNING"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ExperimentType(StrEnum):
    USER_INTERVIEW = "USER_INTERVIEW"
    AB_TEST = "AB_TEST"
    PROTOTYPE_TEST = "PROTOTYPE_TEST"
    MVP_TEST = "MVP_TEST"
    SURVEY = "SURVEY"
    MARKET_RESEARCH = "MARKET_RESEARCH"
    WIZARD_OF_OZ = "WIZARD_OF_OZ"
    LANDING_PAGE = "LANDING_PAGE"
    DATA_ANALYSIS = "DATA_ANALYSIS"
    OTHER = "OTHER"


class Experiment(BaseModel):
    """A test run against one hypothesis."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    hypothesis_id: int
    title: str
    description: str = ""
    type: ExperimentType = ExperimentType.OTHER
    status: ExperimentStatus = ExperimentStatus.PLANNING

    methodology: str = ""
    timeline: str = ""
    resources: str = ""
    success_metrics: str = ""
    start_date: datetime | None = None
    end_date: datetime | None = None

    created_by: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ExperimentResult(BaseModel):
    """A single measured metric. Append-only."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    experiment_id: int
    metric_name: str
    value: float
    unit: str = ""
    notes: str = ""
    created_at: datetime = Field(default_factory=utcnow)
