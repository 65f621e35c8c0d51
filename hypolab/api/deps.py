"""FastAPI dependency injection."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from hypolab.config import Settings
from hypolab.db import Database
from hypolab.workflow import HypothesisWorkflow


def _get_db(request: Request) -> Database:
    """Get the database instance from app state."""
    return request.app.state.db  # type: ignore[no-any-return]


def _get_settings(request: Request) -> Settings:
    """Get the settings instance from app state."""
    return request.app.state.settings  # type: ignore[no-any-return]


DbDep = Annotated[Database, Depends(_get_db)]
SettingsDep = Annotated[Settings, Depends(_get_settings)]


def _get_workflow(db: DbDep, settings: SettingsDep) -> HypothesisWorkflow:
    return HypothesisWorkflow.from_settings(db, settings)


WorkflowDep = Annotated[HypothesisWorkflow, Depends(_get_workflow)]
