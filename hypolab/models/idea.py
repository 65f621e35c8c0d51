"""Idea model: the top of the funnel, scored with RICE and ICE."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from hypolab.models.base import utcnow


class IdeaStatus(StrEnum):
    NEW = "NEW"
    SCORED = "SCORED"
    SELECTED = "SELECTED"
    IN_HYPOTHESIS = "IN_HYPOTHESIS"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class IdeaPriority(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class Idea(BaseModel):
    """A proposal that may spawn one or more hypotheses."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    title: str
    description: str = ""
    category: str = ""
    priority: IdeaPriority = IdeaPriority.MEDIUM
    status: IdeaStatus = IdeaStatus.NEW

    # RICE inputs and derived score
    reach: float | None = None
    impact: float | None = None
    confidence: float | None = None
    effort: float | None = None
    rice_score: float | None = None

    # Aggregate of all ICE submissions
    ice_score: float | None = None

    created_by: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: datetime | None = None


class IceScore(BaseModel):
    """One user's ICE assessment of an idea. Unique per (user_id, idea_id)."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    idea_id: int
    user_id: str
    impact: int = Field(ge=1, le=10)
    confidence: int = Field(ge=1, le=10)
    ease: int = Field(ge=1, le=10)
    comment: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
