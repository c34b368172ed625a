"""Pipeline orchestrator for provisioning runs.

Orders steps by dependency, applies the idempotency and failure policy,
and produces a RunReport.
"""

from .exceptions import (
    CycleError,
    DuplicateStepError,
    StepGraphError,
    UnknownDependencyError,
    UnknownStepError,
)
from .graph import order_steps, validate_steps
from .models import RunReport, StepOutcome, StepStatus
from .pipeline import ProvisioningOrchestrator

__all__ = [
    "ProvisioningOrchestrator",
    "RunReport",
    "StepOutcome",
    "StepStatus",
    "order_steps",
    "validate_steps",
    "StepGraphError",
    "CycleError",
    "UnknownDependencyError",
    "DuplicateStepError",
    "UnknownStepError",
]
