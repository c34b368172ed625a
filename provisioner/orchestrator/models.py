"""Data models for provisioning run results."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class StepStatus(Enum):
    """Terminal outcome of one step."""

    SATISFIED = "satisfied"
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"

    @property
    def is_complete(self) -> bool:
        """Whether dependents may run after this outcome."""
        return self in (StepStatus.SATISFIED, StepStatus.SUCCEEDED)


@dataclass
class StepOutcome:
    """Result of a single step."""

    name: str
    status: StepStatus
    reason: Optional[str] = None
    duration_seconds: float = 0.0
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "reason": self.reason,
            "duration_seconds": self.duration_seconds,
            "details": self.details,
        }


@dataclass
class RunReport:
    """Aggregate result of a full provisioning run.

    step_results keeps execution order.
    """

    started_at: datetime
    finished_at: Optional[datetime] = None
    step_results: dict[str, StepOutcome] = field(default_factory=dict)
    aborted: bool = False
    verification: dict[str, str] = field(default_factory=dict)

    def record(self, outcome: StepOutcome) -> None:
        self.step_results[outcome.name] = outcome

    def status_of(self, name: str) -> Optional[StepStatus]:
        outcome = self.step_results.get(name)
        return outcome.status if outcome else None

    def counts(self) -> dict[str, int]:
        """Number of steps per status."""
        tally = Counter(outcome.status for outcome in self.step_results.values())
        return {status.value: tally.get(status, 0) for status in StepStatus}

    @property
    def exit_code(self) -> int:
        return 1 if self.aborted else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "aborted": self.aborted,
            "exit_code": self.exit_code,
            "counts": self.counts(),
            "steps": [outcome.to_dict() for outcome in self.step_results.values()],
            "verification": dict(self.verification),
        }
