"""apt-get adapter for Debian and Ubuntu hosts."""

import logging

from provisioner.system.runner import CommandRunner

from .adapter import PackageInstaller
from .exceptions import InstallError

logger = logging.getLogger(__name__)

NONINTERACTIVE_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


class AptInstaller(PackageInstaller):
    """Installs packages with apt-get.

    The package index is refreshed once, lazily, before the first
    install of the process.
    """

    def __init__(self, runner: CommandRunner):
        self._runner = runner
        self._index_updated = False

    @property
    def manager_name(self) -> str:
        return "apt-get"

    def _update_index(self) -> None:
        if self._index_updated:
            return
        logger.info("Refreshing apt package index")
        result = self._runner.run(
            ["apt-get", "update"], env=NONINTERACTIVE_ENV, privileged=True
        )
        if not result.ok:
            # A stale index still lets most installs succeed
            logger.warning("apt-get update failed (status %d)", result.returncode)
        self._index_updated = True

    def install(self, package: str) -> None:
        self._update_index()
        result = self._runner.run(
            ["apt-get", "install", "-y", package],
            env=NONINTERACTIVE_ENV,
            privileged=True,
        )
        if not result.ok:
            raise InstallError([package], output=result.output)
        logger.debug("Installed %s", package)

    def is_installed(self, package: str) -> bool:
        result = self._runner.run(["dpkg-query", "-W", "-f=${Status}", package])
        return result.ok and "install ok installed" in result.output
