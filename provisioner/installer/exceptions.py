"""Custom exceptions for the installer module."""

from typing import Sequence

from provisioner.exceptions import ProvisionError


class InstallError(ProvisionError):
    """The host package manager failed to install one or more packages.

    Attributes:
        packages: Names of the packages that failed.
        output: Captured package manager output for diagnostics.
    """

    def __init__(self, packages: Sequence[str], output: str = ""):
        self.packages = tuple(packages)
        self.output = output
        super().__init__(f"failed to install: {', '.join(self.packages)}")
