"""Shared helpers for domain models."""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Default clock: current aware UTC time."""
    return datetime.now(UTC)
