"""Pure decision logic: scoring, readiness, the hypothesis state machine and analysis."""

from hypolab.engine.analyzer import Thresholds, analyze, match_result
from hypolab.engine.readiness import Fact, Readiness, evaluate
from hypolab.engine.scoring import IceAverage, ice_average, ice_score_for_entry, rice_score
from hypolab.engine.state_machine import (
    HypothesisStateMachine,
    TransitionOption,
    TransitionOutcome,
    status_for_stage,
)

__all__ = [
    "Fact",
    "HypothesisStateMachine",
    "IceAverage",
    "Readiness",
    "Thresholds",
    "TransitionOption",
    "TransitionOutcome",
    "analyze",
    "evaluate",
    "ice_average",
    "ice_score_for_entry",
    "match_result",
    "rice_score",
    "status_for_stage",
]
