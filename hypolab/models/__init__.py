"""Re-exports all Pydantic models."""

from hypolab.models.analysis import (
    AnalysisMetrics,
    AnalysisReport,
    CriterionAnalysis,
    ExperimentSummary,
    HypothesisVerdict,
    Insight,
    InsightType,
    MatchedResult,
    Recommendation,
    Significance,
)
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

__all__ = [
    "AnalysisMetrics",
    "AnalysisReport",
    "CriterionAnalysis",
    "Experiment",
    "ExperimentResult",
    "ExperimentStatus",
    "ExperimentSummary",
    "ExperimentType",
    "Hypothesis",
    "HypothesisLevel",
    "HypothesisStage",
    "HypothesisStatus",
    "HypothesisTransition",
    "HypothesisVerdict",
    "IceScore",
    "Idea",
    "IdeaPriority",
    "IdeaStatus",
    "Insight",
    "InsightType",
    "MatchedResult",
    "Recommendation",
    "Significance",
    "SuccessCriteria",
]
