"""RICE and ICE prioritization scores.

Pure functions: no I/O, no persistence, never raise on bad input. A missing or
non-positive RICE input yields ``None``, which callers read as "not yet scored".
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Protocol

from pydantic import BaseModel, ConfigDict


class IceEntry(Protocol):
    impact: float
    confidence: float
    ease: float


class IceAverage(BaseModel):
    """Per-dimension means across all ICE submissions."""

    model_config = ConfigDict(frozen=True)

    impact: float = 0.0
    confidence: float = 0.0
    ease: float = 0.0
    total: float = 0.0
    total_scores: int = 0


def rice_score(
    reach: float | None,
    impact: float | None,
    confidence: float | None,
    effort: float | None,
) -> float | None:
    """(reach * impact * confidence) / effort, confidence as a raw percentage.

    >>> rice_score(1000, 3, 80, 2)
    120000.0
    >>> rice_score(1000, 3, 0, 2) is None
    True
    """
    values = (reach, impact, confidence, effort)
    if any(v is None or v <= 0 for v in values):
        return None
    return (reach * impact * confidence) / effort  # type: ignore[operator]


def ice_score_for_entry(impact: float, confidence: float, ease: float) -> float:
    """Composite for a single scorer: the mean of the three dimensions."""
    return (impact + confidence + ease) / 3


def _dimensions(entry: IceEntry | Mapping[str, float]) -> tuple[float, float, float]:
    if isinstance(entry, Mapping):
        return entry["impact"], entry["confidence"], entry["ease"]
    return entry.impact, entry.confidence, entry.ease


def ice_average(scores: Iterable[IceEntry | Mapping[str, float]]) -> IceAverage:
    """Average every dimension over all scorers; overall ICE is the mean of the three."""
    rows = [_dimensions(s) for s in scores]
    if not rows:
        return IceAverage()

    count = len(rows)
    impact = sum(r[0] for r in rows) / count
    confidence = sum(r[1] for r in rows) / count
    ease = sum(r[2] for r in rows) / count
    return IceAverage(
        impact=impact,
        confidence=confidence,
        ease=ease,
        total=(impact + confidence + ease) / 3,
        total_scores=count,
    )
