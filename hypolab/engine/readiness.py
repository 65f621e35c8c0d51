"""Readiness facts that gate hypothesis transitions."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from hypolab.engine.scoring import rice_score

if TYPE_CHECKING:
    from collections.abc import Iterable

    from hypolab.models.hypothesis import Hypothesis


class Fact(StrEnum):
    HAS_DESCRIPTION = "hasDescription"
    HAS_DESK_RESEARCH = "hasDeskResearch"
    HAS_RICE_SCORING = "hasRiceScoring"
    HAS_SUCCESS_CRITERIA = "hasSuccessCriteria"


# Canonical order used when reporting missing facts.
FACT_ORDER: tuple[Fact, ...] = (
    Fact.HAS_DESCRIPTION,
    Fact.HAS_DESK_RESEARCH,
    Fact.HAS_RICE_SCORING,
    Fact.HAS_SUCCESS_CRITERIA,
)


class Readiness(BaseModel):
    """Which of the four readiness facts hold for a hypothesis snapshot."""

    model_config = ConfigDict(frozen=True)

    has_description: bool = False
    has_desk_research: bool = False
    has_rice_scoring: bool = False
    has_success_criteria: bool = False

    def holds(self, fact: Fact) -> bool:
        return {
            Fact.HAS_DESCRIPTION: self.has_description,
            Fact.HAS_DESK_RESEARCH: self.has_desk_research,
            Fact.HAS_RICE_SCORING: self.has_rice_scoring,
            Fact.HAS_SUCCESS_CRITERIA: self.has_success_criteria,
        }[fact]

    def missing(self, required: Iterable[Fact]) -> list[Fact]:
        required = frozenset(required)
        return [f for f in FACT_ORDER if f in required and not self.holds(f)]

    @property
    def ready_for_level_2(self) -> bool:
        """Desk research plus a completed score. A signal only; promotion is explicit."""
        return self.has_desk_research and self.has_rice_scoring


def evaluate(hypothesis: Hypothesis) -> Readiness:
    """Compute readiness from the snapshot alone."""
    scored = (
        rice_score(hypothesis.reach, hypothesis.impact, hypothesis.confidence, hypothesis.effort)
        is not None
        or hypothesis.ice_score is not None
    )
    return Readiness(
        has_description=bool(hypothesis.description.strip()),
        has_desk_research=bool(hypothesis.desk_research_notes.strip()),
        has_rice_scoring=scored,
        has_success_criteria=len(hypothesis.success_criteria) > 0,
    )
