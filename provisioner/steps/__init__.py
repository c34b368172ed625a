"""Step descriptor model.

Public API:
    - Step: One unit of provisioning work
    - StepKind, FailureMode, BuildSystem: Step classification enums
    - SourceArtifact, ArchiveOrigin, RepositoryOrigin: Source acquisition data
    - Check and its combinators: Idempotency predicates
"""

from .checks import (
    AllOf,
    AnyOf,
    Check,
    CommandAvailable,
    Never,
    PackagesInstalled,
    PathExists,
)
from .models import (
    ArchiveOrigin,
    BuildOptionValue,
    BuildSystem,
    FailureMode,
    RepositoryOrigin,
    SourceArtifact,
    Step,
    StepKind,
)

__all__ = [
    "Step",
    "StepKind",
    "FailureMode",
    "BuildSystem",
    "BuildOptionValue",
    "SourceArtifact",
    "ArchiveOrigin",
    "RepositoryOrigin",
    "Check",
    "PathExists",
    "CommandAvailable",
    "PackagesInstalled",
    "AllOf",
    "AnyOf",
    "Never",
]
