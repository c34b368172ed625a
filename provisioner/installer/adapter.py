"""Abstract interface for host package managers."""

import logging
from abc import ABC, abstractmethod
from typing import Iterable

from .exceptions import InstallError

logger = logging.getLogger(__name__)


class PackageInstaller(ABC):
    """Abstract base class for package manager adapters.

    Implementations never retry: a failed install is reported once and
    the orchestrator decides what it means for the run.

    Example usage:
        installer = AptInstaller(runner)
        installer.install("cmake")
    """

    @abstractmethod
    def install(self, package: str) -> None:
        """Install a single package.

        Args:
            package: Package name as known to the package manager.

        Raises:
            InstallError: The package manager reported a failure.
        """
        pass

    @abstractmethod
    def is_installed(self, package: str) -> bool:
        """Check whether a package is already installed."""
        pass

    @property
    @abstractmethod
    def manager_name(self) -> str:
        """Return the executable name of the package manager."""
        pass


def install_packages(installer: PackageInstaller, packages: Iterable[str]) -> list[str]:
    """Install every package, continuing past individual failures.

    Args:
        installer: Adapter used for each install.
        packages: Package names, installed in order.

    Returns:
        The names that were installed.

    Raises:
        InstallError: At least one package failed. Names every failed
            package and carries their combined output.
    """
    installed: list[str] = []
    failed: list[str] = []
    outputs: list[str] = []

    for package in packages:
        try:
            installer.install(package)
        except InstallError as e:
            logger.warning("Package '%s' failed to install via %s", package, installer.manager_name)
            failed.append(package)
            if e.output:
                outputs.append(e.output)
            continue
        installed.append(package)

    if failed:
        raise InstallError(failed, output="\n".join(outputs))
    return installed
