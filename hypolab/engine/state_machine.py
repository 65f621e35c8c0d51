"""Hypothesis status / level / stage state machine.

The lookup tables below are the whole rule set. They are built once at import
and exposed read-only; every operation is a pure function of a hypothesis
snapshot that either raises or returns the updated snapshot together with the
audit record to append. Persisting both atomically is the caller's job
(see ``hypolab.workflow``).
"""

from __future__ import annotations

from datetime import datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, NamedTuple

import structlog

from hypolab.engine import readiness
from hypolab.engine.readiness import Fact
from hypolab.errors import InvalidLevelError, InvalidTransitionError, UnmetPreconditionError
from hypolab.models.base import utcnow
from hypolab.models.hypothesis import (
    Hypothesis,
    HypothesisLevel,
    HypothesisStage,
    HypothesisStatus,
    HypothesisTransition,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

logger = structlog.get_logger()

S = HypothesisStatus

ALLOWED_TRANSITIONS: Mapping[HypothesisStatus, frozenset[HypothesisStatus]] = MappingProxyType(
    {
        S.DRAFT: frozenset({S.RESEARCH}),
        S.RESEARCH: frozenset({S.SCORED}),
        S.SCORED: frozenset({S.READY_FOR_TESTING}),
        S.READY_FOR_TESTING: frozenset({S.IN_EXPERIMENT}),
        S.IN_EXPERIMENT: frozenset({S.VALIDATED, S.INVALIDATED, S.ITERATION}),
        S.INVALIDATED: frozenset({S.ITERATION}),
        S.ITERATION: frozenset({S.RESEARCH, S.SCORED}),
        S.VALIDATED: frozenset(),
        S.COMPLETED: frozenset(),
        S.ARCHIVED: frozenset(),
    }
)

_FULL_PREP = frozenset(
    {
        Fact.HAS_DESCRIPTION,
        Fact.HAS_DESK_RESEARCH,
        Fact.HAS_RICE_SCORING,
        Fact.HAS_SUCCESS_CRITERIA,
    }
)

REQUIRED_FACTS: Mapping[HypothesisStatus, frozenset[Fact]] = MappingProxyType(
    {
        S.DRAFT: frozenset(),
        S.RESEARCH: frozenset({Fact.HAS_DESCRIPTION}),
        S.SCORED: frozenset({Fact.HAS_DESCRIPTION, Fact.HAS_DESK_RESEARCH}),
        S.READY_FOR_TESTING: _FULL_PREP,
        S.IN_EXPERIMENT: _FULL_PREP,
        S.VALIDATED: frozenset(),
        S.INVALIDATED: frozenset(),
        S.ITERATION: frozenset(),
        S.COMPLETED: frozenset(),
        S.ARCHIVED: frozenset(),
    }
)

STATUS_LEVELS: Mapping[HypothesisStatus, HypothesisLevel] = MappingProxyType(
    {
        status: (
            HypothesisLevel.LEVEL_1
            if status in (S.DRAFT, S.RESEARCH)
            else HypothesisLevel.LEVEL_2
        )
        for status in HypothesisStatus
    }
)

STAGE_CHAIN: tuple[HypothesisStage, ...] = (
    HypothesisStage.DESK_RESEARCH,
    HypothesisStage.EXPERIMENT_DESIGN,
    HypothesisStage.EXPERIMENT_EXECUTION,
    HypothesisStage.CONCLUSION,
)

NEXT_STAGE: Mapping[HypothesisStage, HypothesisStage] = MappingProxyType(
    dict(zip(STAGE_CHAIN, STAGE_CHAIN[1:], strict=False))
)

_STAGE_STATUSES: Mapping[HypothesisStage, HypothesisStatus] = MappingProxyType(
    {
        HypothesisStage.EXPERIMENT_EXECUTION: S.IN_EXPERIMENT,
        HypothesisStage.CONCLUSION: S.COMPLETED,
    }
)

_PROMOTION_FACTS = frozenset({Fact.HAS_DESK_RESEARCH, Fact.HAS_RICE_SCORING})


class TransitionOutcome(NamedTuple):
    hypothesis: Hypothesis
    transition: HypothesisTransition


class TransitionOption(NamedTuple):
    status: HypothesisStatus
    allowed: bool
    missing: list[Fact]


def status_for_stage(stage: HypothesisStage, current: HypothesisStatus) -> HypothesisStatus:
    """Status implied by entering *stage*; stages without a mapping keep *current*."""
    return _STAGE_STATUSES.get(stage, current)


def allowed_targets(status: HypothesisStatus) -> frozenset[HypothesisStatus]:
    return ALLOWED_TRANSITIONS.get(status, frozenset())


def available_transitions(hypothesis: Hypothesis) -> list[TransitionOption]:
    """Every adjacent target, whether it can be taken now, and what is missing."""
    facts = readiness.evaluate(hypothesis)
    options = []
    for target in sorted(allowed_targets(hypothesis.status), key=list(HypothesisStatus).index):
        missing = facts.missing(REQUIRED_FACTS[target])
        options.append(TransitionOption(status=target, allowed=not missing, missing=missing))
    return options


def _level_and_stage(
    hypothesis: Hypothesis, target: HypothesisStatus
) -> tuple[HypothesisLevel, HypothesisStage | None]:
    level = STATUS_LEVELS[target]
    if level == HypothesisLevel.LEVEL_1:
        # Only a regression out of ITERATION demotes; a promoted hypothesis
        # moving forward through LEVEL_1 statuses keeps its level and stage.
        if (
            hypothesis.level == HypothesisLevel.LEVEL_2
            and hypothesis.status != HypothesisStatus.ITERATION
        ):
            return HypothesisLevel.LEVEL_2, hypothesis.stage or HypothesisStage.DESK_RESEARCH
        return level, None
    return level, hypothesis.stage or HypothesisStage.DESK_RESEARCH


def request_transition(
    hypothesis: Hypothesis,
    target: HypothesisStatus,
    actor: str,
    now: datetime,
) -> TransitionOutcome:
    """Move *hypothesis* to status *target* if adjacent and all required facts hold.

    Raises:
        InvalidTransitionError: *target* is not a next status of the current one.
        UnmetPreconditionError: a readiness fact required by *target* is missing;
            ``missing`` lists them in canonical order.
    """
    current = hypothesis.status
    if target not in allowed_targets(current):
        raise InvalidTransitionError(
            f"Cannot move hypothesis from {current.value} to {target.value}",
            current=current.value,
            target=target.value,
        )

    missing = readiness.evaluate(hypothesis).missing(REQUIRED_FACTS[target])
    if missing:
        raise UnmetPreconditionError(
            f"Hypothesis is not ready for {target.value}: missing "
            + ", ".join(f.value for f in missing),
            missing=[f.value for f in missing],
        )

    level, stage = _level_and_stage(hypothesis, target)
    updated = hypothesis.model_copy(
        update={
            "status": target,
            "level": level,
            "stage": stage,
            "version": hypothesis.version + 1,
            "updated_at": now,
        }
    )
    transition = HypothesisTransition(
        hypothesis_id=hypothesis.id or 0,
        from_status=current,
        to_status=target,
        from_level=hypothesis.level,
        to_level=level,
        from_stage=hypothesis.stage,
        to_stage=stage,
        actor=actor,
        reason=f"Status changed from {current.value} to {target.value}",
        created_at=now,
    )
    logger.debug(
        "Status transition accepted",
        hypothesis_id=hypothesis.id,
        from_status=current.value,
        to_status=target.value,
    )
    return TransitionOutcome(updated, transition)


def request_stage_transition(
    hypothesis: Hypothesis,
    target: HypothesisStage,
    actor: str,
    now: datetime,
) -> TransitionOutcome:
    """Advance a LEVEL_2 hypothesis to the next stage in the fixed chain.

    Raises:
        InvalidLevelError: hypothesis is not LEVEL_2.
        InvalidTransitionError: *target* is not the immediate successor.
    """
    if hypothesis.level != HypothesisLevel.LEVEL_2:
        raise InvalidLevelError(
            f"Stage transitions require LEVEL_2 (hypothesis is {hypothesis.level.value})"
        )

    current = hypothesis.stage
    if current is None or NEXT_STAGE.get(current) != target:
        raise InvalidTransitionError(
            f"Cannot move stage from {current.value if current else 'none'} to {target.value}",
            current=current.value if current else None,
            target=target.value,
        )

    status = status_for_stage(target, hypothesis.status)
    updated = hypothesis.model_copy(
        update={
            "stage": target,
            "status": status,
            "version": hypothesis.version + 1,
            "updated_at": now,
        }
    )
    transition = HypothesisTransition(
        hypothesis_id=hypothesis.id or 0,
        from_status=hypothesis.status,
        to_status=status,
        from_level=HypothesisLevel.LEVEL_2,
        to_level=HypothesisLevel.LEVEL_2,
        from_stage=current,
        to_stage=target,
        actor=actor,
        reason=f"Stage changed to {target.value}",
        created_at=now,
    )
    return TransitionOutcome(updated, transition)


def promote_to_level_2(hypothesis: Hypothesis, actor: str, now: datetime) -> TransitionOutcome:
    """Explicit LEVEL_1 -> LEVEL_2 promotion once desk research and scoring are in.

    Status is left as is; the hypothesis enters the DESK_RESEARCH stage.
    """
    if hypothesis.level != HypothesisLevel.LEVEL_1:
        raise InvalidLevelError("Only LEVEL_1 hypotheses can be promoted")

    missing = readiness.evaluate(hypothesis).missing(_PROMOTION_FACTS)
    if missing:
        raise UnmetPreconditionError(
            "Hypothesis is not ready for LEVEL_2: missing " + ", ".join(f.value for f in missing),
            missing=[f.value for f in missing],
        )

    updated = hypothesis.model_copy(
        update={
            "level": HypothesisLevel.LEVEL_2,
            "stage": HypothesisStage.DESK_RESEARCH,
            "version": hypothesis.version + 1,
            "updated_at": now,
        }
    )
    transition = HypothesisTransition(
        hypothesis_id=hypothesis.id or 0,
        from_status=hypothesis.status,
        to_status=hypothesis.status,
        from_level=HypothesisLevel.LEVEL_1,
        to_level=HypothesisLevel.LEVEL_2,
        from_stage=None,
        to_stage=HypothesisStage.DESK_RESEARCH,
        actor=actor,
        reason="Promoted to LEVEL_2 after desk research and scoring",
        created_at=now,
    )
    return TransitionOutcome(updated, transition)


class HypothesisStateMachine:
    """Thin object facade over the module functions, with an injectable clock."""

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or utcnow

    def readiness(self, hypothesis: Hypothesis) -> readiness.Readiness:
        return readiness.evaluate(hypothesis)

    def available_transitions(self, hypothesis: Hypothesis) -> list[TransitionOption]:
        return available_transitions(hypothesis)

    def request_transition(
        self, hypothesis: Hypothesis, target: HypothesisStatus, actor: str
    ) -> TransitionOutcome:
        return request_transition(hypothesis, target, actor, self._clock())

    def request_stage_transition(
        self, hypothesis: Hypothesis, target: HypothesisStage, actor: str
    ) -> TransitionOutcome:
        return request_stage_transition(hypothesis, target, actor, self._clock())

    def promote_to_level_2(self, hypothesis: Hypothesis, actor: str) -> TransitionOutcome:
        return promote_to_level_2(hypothesis, actor, self._clock())
