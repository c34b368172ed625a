"""Build executor for Autotools and CMake projects.

Public API:
    - BuildExecutor: Runs configure/build/install transitions
    - BuildState: Build state machine states
    - BuildResult: Outcome of a successful build
    - BuildError: Failed transition with captured output
    - autotools_flags, cmake_flags: Option rendering
"""

from .build_executor import BuildExecutor
from .exceptions import BuildError
from .flags import autotools_flags, cmake_flags
from .models import BuildResult, BuildState

__all__ = [
    "BuildExecutor",
    "BuildState",
    "BuildResult",
    "BuildError",
    "autotools_flags",
    "cmake_flags",
]
