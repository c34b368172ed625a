"""Idempotency checks: predicates over the current system state.

Each check is a small frozen dataclass that is called with a SystemState
and answers "is this step's effect already present?". Checks carry no
cache; they are evaluated fresh on every run.
"""

from dataclasses import dataclass
from pathlib import Path

from provisioner.system.state import SystemState


class Check:
    """Base class for idempotency predicates."""

    def __call__(self, state: SystemState) -> bool:
        raise NotImplementedError

    def describe(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class PathExists(Check):
    path: Path

    def __call__(self, state: SystemState) -> bool:
        return state.path_exists(Path(self.path))

    def describe(self) -> str:
        return f"exists {self.path}"


@dataclass(frozen=True)
class CommandAvailable(Check):
    name: str

    def __call__(self, state: SystemState) -> bool:
        return state.which(self.name) is not None

    def describe(self) -> str:
        return f"command {self.name}"


@dataclass(frozen=True)
class PackagesInstalled(Check):
    """True when every listed package is reported installed."""

    packages: tuple[str, ...]

    def __call__(self, state: SystemState) -> bool:
        return all(state.package_installed(name) for name in self.packages)

    def describe(self) -> str:
        return f"packages {', '.join(self.packages)}"


class AllOf(Check):
    def __init__(self, *checks: Check):
        self.checks = checks

    def __call__(self, state: SystemState) -> bool:
        return all(check(state) for check in self.checks)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, AllOf) and self.checks == other.checks

    def __hash__(self) -> int:
        return hash(("all", self.checks))

    def describe(self) -> str:
        return " and ".join(check.describe() for check in self.checks)


class AnyOf(Check):
    def __init__(self, *checks: Check):
        self.checks = checks

    def __call__(self, state: SystemState) -> bool:
        return any(check(state) for check in self.checks)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, AnyOf) and self.checks == other.checks

    def __hash__(self) -> int:
        return hash(("any", self.checks))

    def describe(self) -> str:
        return " or ".join(check.describe() for check in self.checks)


@dataclass(frozen=True)
class Never(Check):
    """Always false: the step runs every time."""

    def __call__(self, state: SystemState) -> bool:
        return False

    def describe(self) -> str:
        return "never"
