"""Host access layer: running external tools and querying system state.

Public API:
    - CommandRunner: Interface for running external tools
    - SubprocessRunner: subprocess-backed runner with optional sudo
    - CommandResult: Exit status and captured output of one command
    - SystemState: Interface for idempotency queries
    - LocalSystemState: Live filesystem, PATH and package database
    - InMemorySystemState: Fake state for tests
"""

from .runner import NOT_FOUND_RETURNCODE, CommandResult, CommandRunner, SubprocessRunner
from .state import InMemorySystemState, LocalSystemState, SystemState

__all__ = [
    "CommandRunner",
    "SubprocessRunner",
    "CommandResult",
    "NOT_FOUND_RETURNCODE",
    "SystemState",
    "LocalSystemState",
    "InMemorySystemState",
]
