"""Preflight checks for the tools a provisioning run relies on."""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from provisioner.system.state import SystemState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Prerequisite:
    """An environment tool the run needs.

    Attributes:
        name: Label shown to the user.
        commands: Executables, any one of which satisfies the requirement.
        provided_by: Step that installs the tool, or None when the run
            cannot proceed without it.
    """

    name: str
    commands: tuple[str, ...]
    provided_by: Optional[str] = None


@dataclass
class PrerequisiteStatus:
    prerequisite: Prerequisite
    found: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.found is not None

    @property
    def blocking(self) -> bool:
        """Missing and not installable by any step."""
        return not self.available and self.prerequisite.provided_by is None


def run_preflight(
    state: SystemState, prerequisites: Sequence[Prerequisite]
) -> list[PrerequisiteStatus]:
    """Resolve every prerequisite against the host.

    Returns:
        One status per prerequisite, in order.
    """
    statuses = []
    for prerequisite in prerequisites:
        found = None
        for command in prerequisite.commands:
            found = state.which(command)
            if found:
                break
        status = PrerequisiteStatus(prerequisite, found)
        if status.blocking:
            logger.error("Missing %s (%s)", prerequisite.name, " or ".join(prerequisite.commands))
        elif not status.available:
            logger.warning(
                "Missing %s; step '%s' will install it", prerequisite.name, prerequisite.provided_by
            )
        statuses.append(status)
    return statuses
