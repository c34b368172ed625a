"""Data model for a built-in provisioning variant."""

from dataclasses import dataclass, field
from typing import Callable, Optional

from provisioner.installer import PackageInstaller
from provisioner.preflight import Prerequisite
from provisioner.steps.models import Step
from provisioner.system.runner import CommandRunner
from provisioner.verification import Probe


@dataclass(frozen=True)
class Variant:
    """Everything that differs between host operating systems.

    Attributes:
        name: Target name ("posix" or "windows").
        steps: Step list in declaration order.
        probes: Tools reported by the verification stage.
        installer_factory: Builds the package installer for a runner.
        linker_cache_command: Rebuilds the linker cache, if the OS has one.
        cmake_config: Build configuration for multi-config generators.
        prerequisites: Tools checked by the preflight command.
    """

    name: str
    steps: tuple[Step, ...]
    probes: tuple[Probe, ...]
    installer_factory: Callable[[CommandRunner], PackageInstaller]
    linker_cache_command: Optional[tuple[str, ...]] = None
    cmake_config: Optional[str] = None
    prerequisites: tuple[Prerequisite, ...] = field(default_factory=tuple)

    def step_names(self) -> list[str]:
        return [step.name for step in self.steps]
