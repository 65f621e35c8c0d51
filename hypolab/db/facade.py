"""SQLAlchemy-backed database connection and CRUD helpers."""

from __future__ import annotations

import threading
from contextlib import contextmanager, nullcontext
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, TypedDict

from sqlalchemy import func, select, text

from hypolab.db.engine import MEMORY, create_db_engine, create_session_factory
from hypolab.db.orm import (
    Base,
    ExperimentResultRow,
    ExperimentRow,
    HypothesisRow,
    HypothesisTransitionRow,
    IceScoreRow,
    IdeaRow,
    SuccessCriteriaRow,
)
from hypolab.engine.scoring import ice_average
from hypolab.errors import InvalidTransitionError, NotFoundError
from hypolab.models.experiment import (
    Experiment,
    ExperimentResult,
    ExperimentStatus,
    ExperimentType,
)
from hypolab.models.hypothesis import (
    Hypothesis,
    HypothesisLevel,
    HypothesisStage,
    HypothesisStatus,
    HypothesisTransition,
    SuccessCriteria,
)
from hypolab.models.idea import IceScore, Idea, IdeaPriority, IdeaStatus

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from contextlib import AbstractContextManager
    from pathlib import Path

    from sqlalchemy import Engine
    from sqlalchemy.orm import Session, sessionmaker

    from hypolab.engine.state_machine import TransitionOutcome


class FunnelDict(TypedDict):
    idea_id: int
    total_hypotheses: int
    validated_hypotheses: int
    invalidated_hypotheses: int
    total_experiments: int
    running_experiments: int
    completed_experiments: int
    total_results: int
    success_rate: int


class Database:
    """SQLAlchemy-backed store for ideas, hypotheses, experiments and their audit trail."""

    def __init__(self, db_path: str | Path = ":memory:", busy_timeout_ms: int = 30_000):
        self.db_path = str(db_path)
        self._engine: Engine = create_db_engine(self.db_path, busy_timeout_ms=busy_timeout_ms)
        self._session_factory: sessionmaker[Session] = create_session_factory(self._engine)
        # An in-memory store is one shared connection; SQLite cannot nest BEGIN on it,
        # so writers queue on a process lock instead of the database lock.
        self._write_lock: AbstractContextManager[object] = (
            threading.Lock() if self.db_path == MEMORY else nullcontext()
        )

    @property
    def engine(self) -> Engine:
        """Expose the SQLAlchemy engine for inspection and advanced use."""
        return self._engine

    @property
    def Session(self) -> sessionmaker[Session]:  # noqa: N802
        """Expose the session factory for consumers that need direct access."""
        return self._session_factory

    def init_schema(self) -> None:
        """Create all tables via ORM metadata."""
        Base.metadata.create_all(self._engine)

    def close(self) -> None:
        self._engine.dispose()

    def check_connection(self) -> bool:
        """Verify the database is reachable. Returns True or raises."""
        with self._session_factory() as session:
            session.execute(text("SELECT 1"))
        return True

    @contextmanager
    def write_transaction(self) -> Iterator[Session]:
        """Session holding the SQLite write lock for its whole lifetime.

        ``BEGIN IMMEDIATE`` serializes writers, so anything read inside the
        block cannot change underneath it. Everything written inside commits
        or rolls back together. Convert rows to models before leaving the block.
        In-memory stores serialize on a thread lock since all sessions share
        one connection.
        """
        with self._write_lock, self._session_factory() as session:
            raw_conn = session.connection().connection.dbapi_connection
            raw_conn.execute("BEGIN IMMEDIATE")  # type: ignore[union-attr]
            try:
                yield session
                session.flush()
                raw_conn.execute("COMMIT")  # type: ignore[union-attr]
            except Exception:
                # A failed flush has already rolled the connection back.
                if raw_conn.in_transaction:  # type: ignore[union-attr]
                    raw_conn.execute("ROLLBACK")  # type: ignore[union-attr]
                raise

    # --- Ideas ---

    def create_idea(self, idea: Idea) -> Idea:
        with self._session_factory() as session:
            row = IdeaRow(
                title=idea.title,
                description=idea.description,
                category=idea.category,
                priority=idea.priority.value,
                status=idea.status.value,
                reach=idea.reach,
                impact=idea.impact,
                confidence=idea.confidence,
                effort=idea.effort,
                rice_score=idea.rice_score,
                created_by=idea.created_by,
            )
            session.add(row)
            session.commit()
            return self._row_to_idea(row)

    def get_idea(self, idea_id: int, include_deleted: bool = False) -> Idea | None:
        with self._session_factory() as session:
            row = session.get(IdeaRow, idea_id)
            if row is None or (row.deleted_at is not None and not include_deleted):
                return None
            return self._row_to_idea(row)

    def list_ideas(
        self, status: IdeaStatus | None = None, include_deleted: bool = False
    ) -> list[Idea]:
        with self._session_factory() as session:
            stmt = select(IdeaRow).order_by(IdeaRow.id)
            if status:
                stmt = stmt.where(IdeaRow.status == status.value)
            if not include_deleted:
                stmt = stmt.where(IdeaRow.deleted_at.is_(None))
            return [self._row_to_idea(r) for r in session.scalars(stmt).all()]

    def update_idea(self, idea_id: int, **values: object) -> Idea:
        """Overwrite the given columns of a live idea."""
        with self._session_factory() as session:
            row = self._live_idea_row(session, idea_id)
            for key, value in values.items():
                setattr(row, key, _to_column(value))
            row.updated_at = _utcnow_str()
            session.commit()
            return self._row_to_idea(row)

    def soft_delete_idea(self, idea_id: int) -> None:
        self.update_idea(idea_id, deleted_at=_utcnow_str())

    # --- ICE scores ---

    def upsert_ice_score(self, score: IceScore) -> tuple[IceScore, Idea]:
        """Replace-or-insert the (user, idea) score and refresh the idea aggregate.

        Both writes happen under one write lock. The first score moves a NEW
        idea to SCORED.
        """
        with self.write_transaction() as session:
            idea_row = self._live_idea_row(session, score.idea_id)
            row = session.scalars(
                select(IceScoreRow).where(
                    IceScoreRow.idea_id == score.idea_id,
                    IceScoreRow.user_id == score.user_id,
                )
            ).first()
            now = _utcnow_str()
            if row is None:
                row = IceScoreRow(idea_id=score.idea_id, user_id=score.user_id)
                session.add(row)
            row.impact = score.impact
            row.confidence = score.confidence
            row.ease = score.ease
            row.comment = score.comment
            row.updated_at = now
            session.flush()

            self._refresh_ice_aggregate(session, idea_row)
            return self._row_to_ice(row), self._row_to_idea(idea_row)

    def delete_ice_score(self, idea_id: int, user_id: str) -> Idea:
        with self.write_transaction() as session:
            idea_row = self._live_idea_row(session, idea_id)
            row = session.scalars(
                select(IceScoreRow).where(
                    IceScoreRow.idea_id == idea_id, IceScoreRow.user_id == user_id
                )
            ).first()
            if row is None:
                raise NotFoundError("ice score", idea_id)
            session.delete(row)
            session.flush()
            self._refresh_ice_aggregate(session, idea_row)
            return self._row_to_idea(idea_row)

    def list_ice_scores(self, idea_id: int) -> list[IceScore]:
        with self._session_factory() as session:
            stmt = (
                select(IceScoreRow)
                .where(IceScoreRow.idea_id == idea_id)
                .order_by(IceScoreRow.id)
            )
            return [self._row_to_ice(r) for r in session.scalars(stmt).all()]

    def _refresh_ice_aggregate(self, session: Session, idea_row: IdeaRow) -> None:
        rows = session.scalars(
            select(IceScoreRow).where(IceScoreRow.idea_id == idea_row.id)
        ).all()
        average = ice_average(rows)
        if average.total_scores == 0:
            idea_row.ice_score = None
            if idea_row.status == IdeaStatus.SCORED.value and idea_row.rice_score is None:
                idea_row.status = IdeaStatus.NEW.value
        else:
            idea_row.ice_score = average.total
            if idea_row.status == IdeaStatus.NEW.value:
                idea_row.status = IdeaStatus.SCORED.value
        idea_row.updated_at = _utcnow_str()

    # --- Hypotheses ---

    def create_hypothesis(
        self,
        hypothesis: Hypothesis,
        accepted_idea_statuses: frozenset[IdeaStatus] | None = None,
    ) -> Hypothesis:
        """Insert a hypothesis and move its idea to IN_HYPOTHESIS in one transaction.

        When *accepted_idea_statuses* is given, the idea must currently be in
        one of them; otherwise ``InvalidTransitionError`` is raised and nothing is
        written.
        """
        with self.write_transaction() as session:
            idea_row = self._live_idea_row(session, hypothesis.idea_id)
            if accepted_idea_statuses is not None and idea_row.status not in {
                s.value for s in accepted_idea_statuses
            }:
                raise InvalidTransitionError(
                    f"Idea {idea_row.id} must be selected before creating a hypothesis "
                    f"(status: {idea_row.status})",
                    current=idea_row.status,
                    target=IdeaStatus.IN_HYPOTHESIS.value,
                )
            row = HypothesisRow(
                idea_id=hypothesis.idea_id,
                title=hypothesis.title,
                statement=hypothesis.statement,
                description=hypothesis.description,
                level=hypothesis.level.value,
                stage=hypothesis.stage.value if hypothesis.stage else None,
                status=hypothesis.status.value,
                confidence_level=hypothesis.confidence_level,
                created_by=hypothesis.created_by,
            )
            session.add(row)
            idea_row.status = IdeaStatus.IN_HYPOTHESIS.value
            idea_row.updated_at = _utcnow_str()
            session.flush()
            return self._row_to_hypothesis(row, [])

    def get_hypothesis(self, hypothesis_id: int) -> Hypothesis | None:
        with self._session_factory() as session:
            row = session.get(HypothesisRow, hypothesis_id)
            if row is None or row.deleted_at is not None:
                return None
            return self._row_to_hypothesis(row, self._criteria_rows(session, hypothesis_id))

    def list_hypotheses(
        self,
        idea_id: int | None = None,
        status: HypothesisStatus | None = None,
    ) -> list[Hypothesis]:
        with self._session_factory() as session:
            stmt = (
                select(HypothesisRow)
                .where(HypothesisRow.deleted_at.is_(None))
                .order_by(HypothesisRow.id)
            )
            if idea_id is not None:
                stmt = stmt.where(HypothesisRow.idea_id == idea_id)
            if status:
                stmt = stmt.where(HypothesisRow.status == status.value)
            return [
                self._row_to_hypothesis(r, self._criteria_rows(session, r.id))
                for r in session.scalars(stmt).all()
            ]

    def update_hypothesis(self, hypothesis_id: int, **values: object) -> Hypothesis:
        """Overwrite content columns (scores, desk research, text) of a live hypothesis.

        Status, level and stage only change through ``apply_transition``.
        """
        guarded = {"status", "level", "stage", "version"} & values.keys()
        if guarded:
            raise ValueError(f"Use apply_transition to change {', '.join(sorted(guarded))}")
        with self._session_factory() as session:
            row = self._live_hypothesis_row(session, hypothesis_id)
            for key, value in values.items():
                setattr(row, key, _to_column(value))
            row.updated_at = _utcnow_str()
            session.commit()
            return self._row_to_hypothesis(row, self._criteria_rows(session, hypothesis_id))

    def soft_delete_hypothesis(self, hypothesis_id: int) -> None:
        self.update_hypothesis(hypothesis_id, deleted_at=_utcnow_str())

    def apply_transition(
        self,
        hypothesis_id: int,
        decide: Callable[[Hypothesis], TransitionOutcome],
    ) -> tuple[Hypothesis, HypothesisTransition]:
        """Load, decide and persist a transition as one serialized unit.

        *decide* receives the snapshot read under the write lock and either
        raises (nothing is written) or returns the updated hypothesis and the
        audit record. The status/level/stage update and the audit insert
        commit together.
        """
        with self.write_transaction() as session:
            row = self._live_hypothesis_row(session, hypothesis_id)
            snapshot = self._row_to_hypothesis(row, self._criteria_rows(session, hypothesis_id))
            updated, transition = decide(snapshot)

            row.status = updated.status.value
            row.level = updated.level.value
            row.stage = updated.stage.value if updated.stage else None
            row.version = updated.version
            row.updated_at = _dt_str(updated.updated_at)

            audit = HypothesisTransitionRow(
                hypothesis_id=hypothesis_id,
                from_status=transition.from_status.value,
                to_status=transition.to_status.value,
                from_level=transition.from_level.value,
                to_level=transition.to_level.value,
                from_stage=transition.from_stage.value if transition.from_stage else None,
                to_stage=transition.to_stage.value if transition.to_stage else None,
                actor=transition.actor,
                reason=transition.reason,
                created_at=_dt_str(transition.created_at),
            )
            session.add(audit)
            session.flush()
            return (
                self._row_to_hypothesis(row, self._criteria_rows(session, hypothesis_id)),
                self._row_to_transition(audit),
            )

    def list_transitions(self, hypothesis_id: int) -> list[HypothesisTransition]:
        with self._session_factory() as session:
            stmt = (
                select(HypothesisTransitionRow)
                .where(HypothesisTransitionRow.hypothesis_id == hypothesis_id)
                .order_by(HypothesisTransitionRow.id)
            )
            return [self._row_to_transition(r) for r in session.scalars(stmt).all()]

    # --- Success criteria ---

    def add_success_criterion(self, criterion: SuccessCriteria) -> SuccessCriteria:
        if (criterion.hypothesis_id is None) == (criterion.experiment_id is None):
            raise ValueError("A success criterion belongs to exactly one hypothesis or experiment")
        with self._session_factory() as session:
            if criterion.hypothesis_id is not None:
                self._live_hypothesis_row(session, criterion.hypothesis_id)
            elif session.get(ExperimentRow, criterion.experiment_id) is None:
                raise NotFoundError("experiment", criterion.experiment_id or 0)
            row = SuccessCriteriaRow(
                hypothesis_id=criterion.hypothesis_id,
                experiment_id=criterion.experiment_id,
                name=criterion.name,
                description=criterion.description,
                target_value=criterion.target_value,
                unit=criterion.unit,
                actual_value=criterion.actual_value,
                achieved=int(criterion.achieved),
            )
            session.add(row)
            session.commit()
            return self._row_to_criterion(row)

    def get_success_criterion(self, criterion_id: int) -> SuccessCriteria | None:
        with self._session_factory() as session:
            row = session.get(SuccessCriteriaRow, criterion_id)
            return self._row_to_criterion(row) if row else None

    def list_experiment_criteria(self, experiment_id: int) -> list[SuccessCriteria]:
        with self._session_factory() as session:
            stmt = (
                select(SuccessCriteriaRow)
                .where(SuccessCriteriaRow.experiment_id == experiment_id)
                .order_by(SuccessCriteriaRow.id)
            )
            return [self._row_to_criterion(r) for r in session.scalars(stmt).all()]

    def record_actual_value(self, criterion_id: int, actual_value: float | None) -> SuccessCriteria:
        with self._session_factory() as session:
            row = session.get(SuccessCriteriaRow, criterion_id)
            if row is None:
                raise NotFoundError("success criterion", criterion_id)
            row.actual_value = actual_value
            row.achieved = int(actual_value is not None and actual_value >= row.target_value)
            session.commit()
            return self._row_to_criterion(row)

    # --- Experiments ---

    def create_experiment(self, experiment: Experiment) -> Experiment:
        with self._session_factory() as session:
            self._live_hypothesis_row(session, experiment.hypothesis_id)
            row = ExperimentRow(
                hypothesis_id=experiment.hypothesis_id,
                title=experiment.title,
                description=experiment.description,
                type=experiment.type.value,
                status=experiment.status.value,
                methodology=experiment.methodology,
                timeline=experiment.timeline,
                resources=experiment.resources,
                success_metrics=experiment.success_metrics,
                start_date=_dt_str_opt(experiment.start_date),
                end_date=_dt_str_opt(experiment.end_date),
                created_by=experiment.created_by,
            )
            session.add(row)
            session.commit()
            return self._row_to_experiment(row)

    def get_experiment(self, experiment_id: int) -> Experiment | None:
        with self._session_factory() as session:
            row = session.get(ExperimentRow, experiment_id)
            return self._row_to_experiment(row) if row else None

    def list_experiments(
        self,
        hypothesis_id: int | None = None,
        status: ExperimentStatus | None = None,
    ) -> list[Experiment]:
        with self._session_factory() as session:
            stmt = select(ExperimentRow).order_by(ExperimentRow.id)
            if hypothesis_id is not None:
                stmt = stmt.where(ExperimentRow.hypothesis_id == hypothesis_id)
            if status:
                stmt = stmt.where(ExperimentRow.status == status.value)
            return [self._row_to_experiment(r) for r in session.scalars(stmt).all()]

    def update_experiment_status(
        self,
        experiment_id: int,
        status: ExperimentStatus,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> Experiment:
        with self._session_factory() as session:
            row = session.get(ExperimentRow, experiment_id)
            if row is None:
                raise NotFoundError("experiment", experiment_id)
            row.status = status.value
            if start_date is not None:
                row.start_date = _dt_str(start_date)
            if end_date is not None:
                row.end_date = _dt_str(end_date)
            row.updated_at = _utcnow_str()
            session.commit()
            return self._row_to_experiment(row)

    # --- Results ---

    def add_result(self, result: ExperimentResult) -> ExperimentResult:
        with self._session_factory() as session:
            if session.get(ExperimentRow, result.experiment_id) is None:
                raise NotFoundError("experiment", result.experiment_id)
            row = ExperimentResultRow(
                experiment_id=result.experiment_id,
                metric_name=result.metric_name,
                value=result.value,
                unit=result.unit,
                notes=result.notes,
            )
            session.add(row)
            session.commit()
            return self._row_to_result(row)

    def list_results(self, experiment_id: int) -> list[ExperimentResult]:
        """Results for an experiment, most recent first."""
        with self._session_factory() as session:
            stmt = (
                select(ExperimentResultRow)
                .where(ExperimentResultRow.experiment_id == experiment_id)
                .order_by(ExperimentResultRow.id.desc())
            )
            return [self._row_to_result(r) for r in session.scalars(stmt).all()]

    # --- Reporting ---

    def idea_funnel(self, idea_id: int) -> FunnelDict:
        """Counts along Idea -> Hypothesis -> Experiment -> Result for one idea."""
        with self._session_factory() as session:
            self._live_idea_row(session, idea_id)
            statuses = session.scalars(
                select(HypothesisRow.status).where(
                    HypothesisRow.idea_id == idea_id, HypothesisRow.deleted_at.is_(None)
                )
            ).all()
            exp_statuses = session.scalars(
                select(ExperimentRow.status)
                .join(HypothesisRow, ExperimentRow.hypothesis_id == HypothesisRow.id)
                .where(HypothesisRow.idea_id == idea_id, HypothesisRow.deleted_at.is_(None))
            ).all()
            total_results = session.scalar(
                select(func.count(ExperimentResultRow.id))
                .join(ExperimentRow, ExperimentResultRow.experiment_id == ExperimentRow.id)
                .join(HypothesisRow, ExperimentRow.hypothesis_id == HypothesisRow.id)
                .where(HypothesisRow.idea_id == idea_id, HypothesisRow.deleted_at.is_(None))
            )

        validated = statuses.count(HypothesisStatus.VALIDATED.value)
        return {
            "idea_id": idea_id,
            "total_hypotheses": len(statuses),
            "validated_hypotheses": validated,
            "invalidated_hypotheses": statuses.count(HypothesisStatus.INVALIDATED.value),
            "total_experiments": len(exp_statuses),
            "running_experiments": exp_statuses.count(ExperimentStatus.RUNNING.value),
            "completed_experiments": exp_statuses.count(ExperimentStatus.COMPLETED.value),
            "total_results": total_results or 0,
            "success_rate": round(validated / len(statuses) * 100) if statuses else 0,
        }

    # --- Helpers ---

    @staticmethod
    def _live_idea_row(session: Session, idea_id: int) -> IdeaRow:
        row = session.get(IdeaRow, idea_id)
        if row is None or row.deleted_at is not None:
            raise NotFoundError("idea", idea_id)
        return row

    @staticmethod
    def _live_hypothesis_row(session: Session, hypothesis_id: int) -> HypothesisRow:
        row = session.get(HypothesisRow, hypothesis_id)
        if row is None or row.deleted_at is not None:
            raise NotFoundError("hypothesis", hypothesis_id)
        return row

    @staticmethod
    def _criteria_rows(session: Session, hypothesis_id: int) -> list[SuccessCriteriaRow]:
        stmt = (
            select(SuccessCriteriaRow)
            .where(SuccessCriteriaRow.hypothesis_id == hypothesis_id)
            .order_by(SuccessCriteriaRow.id)
        )
        return list(session.scalars(stmt).all())

    @staticmethod
    def _parse_dt(value: str) -> datetime:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))

    @staticmethod
    def _parse_dt_opt(value: str | None) -> datetime | None:
        if value is None:
            return None
        return datetime.fromisoformat(value.replace("Z", "+00:00"))

    @staticmethod
    def _row_to_idea(row: IdeaRow) -> Idea:
        return Idea(
            id=row.id,
            title=row.title,
            description=row.description,
            category=row.category,
            priority=IdeaPriority(row.priority),
            status=IdeaStatus(row.status),
            reach=row.reach,
            impact=row.impact,
            confidence=row.confidence,
            effort=row.effort,
            rice_score=row.rice_score,
            ice_score=row.ice_score,
            created_by=row.created_by,
            created_at=Database._parse_dt(row.created_at),
            updated_at=Database._parse_dt(row.updated_at),
            deleted_at=Database._parse_dt_opt(row.deleted_at),
        )

    @staticmethod
    def _row_to_ice(row: IceScoreRow) -> IceScore:
        return IceScore(
            id=row.id,
            idea_id=row.idea_id,
            user_id=row.user_id,
            impact=row.impact,
            confidence=row.confidence,
            ease=row.ease,
            comment=row.comment,
            created_at=Database._parse_dt(row.created_at),
            updated_at=Database._parse_dt(row.updated_at),
        )

    @staticmethod
    def _row_to_criterion(row: SuccessCriteriaRow) -> SuccessCriteria:
        return SuccessCriteria(
            id=row.id,
            hypothesis_id=row.hypothesis_id,
            experiment_id=row.experiment_id,
            name=row.name,
            description=row.description,
            target_value=row.target_value,
            unit=row.unit,
            actual_value=row.actual_value,
        )

    @staticmethod
    def _row_to_hypothesis(row: HypothesisRow, criteria: list[SuccessCriteriaRow]) -> Hypothesis:
        return Hypothesis(
            id=row.id,
            idea_id=row.idea_id,
            title=row.title,
            statement=row.statement,
            description=row.description,
            level=HypothesisLevel(row.level),
            stage=HypothesisStage(row.stage) if row.stage else None,
            status=HypothesisStatus(row.status),
            confidence_level=row.confidence_level,
            reach=row.reach,
            impact=row.impact,
            confidence=row.confidence,
            effort=row.effort,
            rice_score=row.rice_score,
            ice_score=row.ice_score,
            desk_research_notes=row.desk_research_notes,
            desk_research_sources=_split_lines(row.desk_research_sources),
            risks=_split_lines(row.risks),
            opportunities=_split_lines(row.opportunities),
            desk_research_date=Database._parse_dt_opt(row.desk_research_date),
            success_criteria=[Database._row_to_criterion(c) for c in criteria],
            version=row.version,
            created_by=row.created_by,
            created_at=Database._parse_dt(row.created_at),
            updated_at=Database._parse_dt(row.updated_at),
            deleted_at=Database._parse_dt_opt(row.deleted_at),
        )

    @staticmethod
    def _row_to_transition(row: HypothesisTransitionRow) -> HypothesisTransition:
        return HypothesisTransition(
            id=row.id,
            hypothesis_id=row.hypothesis_id,
            from_status=HypothesisStatus(row.from_status),
            to_status=HypothesisStatus(row.to_status),
            from_level=HypothesisLevel(row.from_level),
            to_level=HypothesisLevel(row.to_level),
            from_stage=HypothesisStage(row.from_stage) if row.from_stage else None,
            to_stage=HypothesisStage(row.to_stage) if row.to_stage else None,
            actor=row.actor,
            reason=row.reason,
            created_at=Database._parse_dt(row.created_at),
        )

    @staticmethod
    def _row_to_experiment(row: ExperimentRow) -> Experiment:
        return Experiment(
            id=row.id,
            hypothesis_id=row.hypothesis_id,
            title=row.title,
            description=row.description,
            type=ExperimentType(row.type),
            status=ExperimentStatus(row.status),
            methodology=row.methodology,
            timeline=row.timeline,
            resources=row.resources,
            success_metrics=row.success_metrics,
            start_date=Database._parse_dt_opt(row.start_date),
            end_date=Database._parse_dt_opt(row.end_date),
            created_by=row.created_by,
            created_at=Database._parse_dt(row.created_at),
            updated_at=Database._parse_dt(row.updated_at),
        )

    @staticmethod
    def _row_to_result(row: ExperimentResultRow) -> ExperimentResult:
        return ExperimentResult(
            id=row.id,
            experiment_id=row.experiment_id,
            metric_name=row.metric_name,
            value=row.value,
            unit=row.unit,
            notes=row.notes,
            created_at=Database._parse_dt(row.created_at),
        )


def _utcnow_str() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _dt_str(value: datetime) -> str:
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _dt_str_opt(value: datetime | None) -> str | None:
    return _dt_str(value) if value is not None else None


def _split_lines(value: str) -> list[str]:
    return [line for line in value.splitlines() if line.strip()]


def _to_column(value: object) -> object:
    """Map model-level values onto column storage (lists as lines, datetimes as text)."""
    if isinstance(value, list):
        return "\n".join(str(v) for v in value)
    if isinstance(value, datetime):
        return _dt_str(value)
    if isinstance(value, StrEnum):
        return value.value
    return value
