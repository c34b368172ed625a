"""Chocolatey adapter for Windows hosts."""

import logging

from provisioner.system.runner import CommandRunner

from .adapter import PackageInstaller
from .exceptions import InstallError

logger = logging.getLogger(__name__)


class ChocoInstaller(PackageInstaller):
    """Installs packages with choco."""

    def __init__(self, runner: CommandRunner):
        self._runner = runner

    @property
    def manager_name(self) -> str:
        return "choco"

    def install(self, package: str) -> None:
        result = self._runner.run(
            ["choco", "install", "-y", "--no-progress", package], privileged=True
        )
        if not result.ok:
            raise InstallError([package], output=result.output)
        logger.debug("Installed %s", package)

    def is_installed(self, package: str) -> bool:
        result = self._runner.run(
            ["choco", "list", "--exact", "--limit-output", package]
        )
        if not result.ok:
            return False
        # --limit-output prints "name|version" per installed match
        return any(
            line.split("|", 1)[0].lower() == package.lower()
            for line in result.output.splitlines()
        )
