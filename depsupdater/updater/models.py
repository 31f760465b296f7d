"""Data models for the update engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from depsupdater.scanner.models import Dependency


@dataclass
class UpdateOutcome:
    """A dependency that was rewritten during a batch, and its new version text."""

    dependency: Dependency
    new_version: str


@dataclass
class BatchResult:
    """Summary of one batch run."""

    scanned: int
    eligible: int
    outcomes: list[UpdateOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def updated(self) -> int:
        return len(self.outcomes)
