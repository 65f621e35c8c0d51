"""Database package: engine, ORM models, and CRUD facade."""

from hypolab.db.engine import create_db_engine, create_session_factory
from hypolab.db.facade import Database, FunnelDict
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

__all__ = [
    "Base",
    "Database",
    "ExperimentResultRow",
    "ExperimentRow",
    "FunnelDict",
    "HypothesisRow",
    "HypothesisTransitionRow",
    "IceScoreRow",
    "IdeaRow",
    "SuccessCriteriaRow",
    "create_db_engine",
    "create_session_factory",
]
