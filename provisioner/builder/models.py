"""Data models for native builds."""

from dataclasses import dataclass
from enum import Enum


class BuildState(Enum):
    """Progress of a single build. Transitions only move forward."""

    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    BUILT = "built"
    INSTALLED = "installed"

    @property
    def action(self) -> str:
        """Verb for the transition that enters this state."""
        return _ACTIONS[self]


_ACTIONS = {
    BuildState.UNCONFIGURED: "prepare",
    BuildState.CONFIGURED: "configure",
    BuildState.BUILT: "build",
    BuildState.INSTALLED: "install",
}


@dataclass
class BuildResult:
    """Outcome of a completed build.

    Attributes:
        state: Final state reached (INSTALLED on success).
        candidate_index: Index of the configuration candidate that
            configured successfully.
        linker_cache_refreshed: Whether the linker cache was rebuilt.
    """

    state: BuildState
    candidate_index: int = 0
    linker_cache_refreshed: bool = False
