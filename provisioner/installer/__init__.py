"""Package installer adapters over the host package manager.

Public API:
    - PackageInstaller: Interface for package manager adapters
    - AptInstaller: apt-get (Debian/Ubuntu)
    - ChocoInstaller: Chocolatey (Windows)
    - install_packages: Install a list, aggregating failures
    - InstallError: Package manager failure
"""

from .adapter import PackageInstaller, install_packages
from .apt_installer import AptInstaller
from .choco_installer import ChocoInstaller
from .exceptions import InstallError

__all__ = [
    "PackageInstaller",
    "AptInstaller",
    "ChocoInstaller",
    "install_packages",
    "InstallError",
]
