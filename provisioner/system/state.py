"""System state queries backing the idempotency checks."""

import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional, Set


class SystemState(ABC):
    """Read-only view of the host used to decide whether work is already done.

    Implementations:
    - LocalSystemState: the real filesystem, PATH and package database
    - InMemorySystemState: a fake for tests
    """

    @abstractmethod
    def path_exists(self, path: Path) -> bool:
        """Check whether a file or directory exists."""
        pass

    @abstractmethod
    def which(self, name: str) -> Optional[str]:
        """Resolve an executable on PATH.

        Returns:
            Full path to the executable, or None if not available.
        """
        pass

    @abstractmethod
    def package_installed(self, name: str) -> bool:
        """Check whether the host package manager reports a package as installed."""
        pass


class LocalSystemState(SystemState):
    """Queries the live host.

    Package queries are delegated to ``package_query`` (normally the
    installer adapter's ``is_installed``) so this class stays independent
    of any particular package manager.
    """

    def __init__(self, package_query: Optional[Callable[[str], bool]] = None) -> None:
        self._package_query = package_query

    def path_exists(self, path: Path) -> bool:
        return Path(path).exists()

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name)

    def package_installed(self, name: str) -> bool:
        if self._package_query is None:
            return False
        return self._package_query(name)


class InMemorySystemState(SystemState):
    """In-memory implementation for tests.

    Nothing exists until it is added, so every check starts out false.
    """

    def __init__(self) -> None:
        self._paths: Set[Path] = set()
        self._commands: Set[str] = set()
        self._packages: Set[str] = set()

    def path_exists(self, path: Path) -> bool:
        return Path(path) in self._paths

    def which(self, name: str) -> Optional[str]:
        if name in self._commands:
            return f"/usr/bin/{name}"
        return None

    def package_installed(self, name: str) -> bool:
        return name in self._packages

    def add_path(self, path: Path) -> None:
        self._paths.add(Path(path))

    def add_command(self, name: str) -> None:
        self._commands.add(name)

    def add_package(self, name: str) -> None:
        self._packages.add(name)

    def clear(self) -> None:
        """Forget everything. Useful for testing."""
        self._paths.clear()
        self._commands.clear()
        self._packages.clear()
