"""Error kinds raised by the workflow engine.

All of them are semantic rejections of a request: none represent a transient
failure and none are retried.
"""

from __future__ import annotations


class HypolabError(Exception):
    """Base class for engine errors."""


class InvalidTransitionError(HypolabError):
    """Requested status or stage is not adjacent to the current one."""

    def __init__(self, message: str, *, current: str | None = None, target: str | None = None):
        super().__init__(message)
        self.current = current
        self.target = target


class UnmetPreconditionError(HypolabError):
    """Transition is adjacent but required readiness facts are missing."""

    def __init__(self, message: str, missing: list[str]):
        super().__init__(message)
        self.missing = list(missing)


class InvalidLevelError(HypolabError):
    """Operation is not allowed at the hypothesis' current level."""


class NotFoundError(HypolabError):
    """Referenced entity does not exist (or is soft-deleted)."""

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity.capitalize()} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id
