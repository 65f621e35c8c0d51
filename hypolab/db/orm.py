"""SQLAlchemy ORM models mapping to the hypolab database tables."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow_str() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _in_check(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


IDEA_STATUSES = ("NEW", "SCORED", "SELECTED", "IN_HYPOTHESIS", "COMPLETED", "ARCHIVED")
IDEA_PRIORITIES = ("LOW", "MEDIUM", "HIGH", "CRITICAL")
HYPOTHESIS_STATUSES = (
    "DRAFT",
    "RESEARCH",
    "SCORED",
    "READY_FOR_TESTING",
    "IN_EXPERIMENT",
    "VALIDATED",
    "INVALIDATED",
    "ITERATION",
    "COMPLETED",
    "ARCHIVED",
)
HYPOTHESIS_LEVELS = ("LEVEL_1", "LEVEL_2")
HYPOTHESIS_STAGES = ("DESK_RESEARCH", "EXPERIMENT_DESIGN", "EXPERIMENT_EXECUTION", "CONCLUSION")
EXPERIMENT_STATUSES = ("PLANNING", "RUNNING", "PAUSED", "COMPLETED", "CANCELLED")


class Base(DeclarativeBase):
    pass


class IdeaRow(Base):
    __tablename__ = "ideas"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(Text, nullable=False, default="")
    priority: Mapped[str] = mapped_column(Text, nullable=False, default="MEDIUM")
    status: Mapped[str] = mapped_column(Text, nullable=False, default="NEW")

    reach: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    impact: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    confidence: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    effort: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    rice_score: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    ice_score: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)

    created_by: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)
    updated_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)
    deleted_at: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    __table_args__ = (
        CheckConstraint(_in_check("status", IDEA_STATUSES), name="ck_ideas_status"),
        CheckConstraint(_in_check("priority", IDEA_PRIORITIES), name="ck_ideas_priority"),
    )


class IceScoreRow(Base):
    __tablename__ = "ice_scores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    idea_id: Mapped[int] = mapped_column(Integer, ForeignKey("ideas.id"), nullable=False)
    user_id: Mapped[str] = mapped_column(Text, nullable=False)
    impact: Mapped[int] = mapped_column(Integer, nullable=False)
    confidence: Mapped[int] = mapped_column(Integer, nullable=False)
    ease: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)
    updated_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)

    __table_args__ = (
        UniqueConstraint("idea_id", "user_id", name="uq_ice_scores_idea_user"),
        Index("idx_ice_scores_idea", "idea_id"),
    )


class HypothesisRow(Base):
    __tablename__ = "hypotheses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    idea_id: Mapped[int] = mapped_column(Integer, ForeignKey("ideas.id"), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    statement: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    level: Mapped[str] = mapped_column(Text, nullable=False, default="LEVEL_1")
    stage: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="DRAFT")
    confidence_level: Mapped[int] = mapped_column(Integer, nullable=False, default=50)

    reach: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    impact: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    confidence: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    effort: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    rice_score: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    ice_score: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)

    # Newline-separated lists
    desk_research_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    desk_research_sources: Mapped[str] = mapped_column(Text, nullable=False, default="")
    risks: Mapped[str] = mapped_column(Text, nullable=False, default="")
    opportunities: Mapped[str] = mapped_column(Text, nullable=False, default="")
    desk_research_date: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_by: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)
    updated_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)
    deleted_at: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    __table_args__ = (
        CheckConstraint(_in_check("status", HYPOTHESIS_STATUSES), name="ck_hypotheses_status"),
        CheckConstraint(_in_check("level", HYPOTHESIS_LEVELS), name="ck_hypotheses_level"),
        CheckConstraint(
            "stage IS NULL OR (level = 'LEVEL_2' AND "
            + _in_check("stage", HYPOTHESIS_STAGES)
            + ")",
            name="ck_hypotheses_stage",
        ),
        Index("idx_hypotheses_idea", "idea_id"),
    )


class SuccessCriteriaRow(Base):
    __tablename__ = "success_criteria"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    hypothesis_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("hypotheses.id"), nullable=True
    )
    experiment_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("experiments.id"), nullable=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    target_value: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(Text, nullable=False, default="")
    actual_value: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    achieved: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)

    __table_args__ = (
        CheckConstraint(
            "(hypothesis_id IS NULL) != (experiment_id IS NULL)",
            name="ck_success_criteria_owner",
        ),
        Index("idx_success_criteria_hypothesis", "hypothesis_id"),
        Index("idx_success_criteria_experiment", "experiment_id"),
    )


class ExperimentRow(Base):
    __tablename__ = "experiments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    hypothesis_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("hypotheses.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(Text, nullable=False, default="OTHER")
    status: Mapped[str] = mapped_column(Text, nullable=False, default="PLANNING")

    methodology: Mapped[str] = mapped_column(Text, nullable=False, default="")
    timeline: Mapped[str] = mapped_column(Text, nullable=False, default="")
    resources: Mapped[str] = mapped_column(Text, nullable=False, default="")
    success_metrics: Mapped[str] = mapped_column(Text, nullable=False, default="")
    start_date: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    end_date: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    created_by: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)
    updated_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)

    __table_args__ = (
        CheckConstraint(_in_check("status", EXPERIMENT_STATUSES), name="ck_experiments_status"),
        Index("idx_experiments_hypothesis", "hypothesis_id"),
    )


class ExperimentResultRow(Base):
    __tablename__ = "experiment_results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    experiment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("experiments.id"), nullable=False
    )
    metric_name: Mapped[str] = mapped_column(Text, nullable=False)
    value: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(Text, nullable=False, default="")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)

    __table_args__ = (Index("idx_experiment_results_experiment", "experiment_id"),)


class HypothesisTransitionRow(Base):
    __tablename__ = "hypothesis_transitions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    hypothesis_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("hypotheses.id"), nullable=False
    )
    from_status: Mapped[str] = mapped_column(Text, nullable=False)
    to_status: Mapped[str] = mapped_column(Text, nullable=False)
    from_level: Mapped[str] = mapped_column(Text, nullable=False)
    to_level: Mapped[str] = mapped_column(Text, nullable=False)
    from_stage: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    to_stage: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    actor: Mapped[str] = mapped_column(Text, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[str] = mapped_column(Text, nullable=False, default=_utcnow_str)

    __table_args__ = (Index("idx_hypothesis_transitions_hypothesis", "hypothesis_id"),)
