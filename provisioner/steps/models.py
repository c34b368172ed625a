"""Data models describing provisioning steps."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, Union

from provisioner.system.state import SystemState

from .checks import Check, Never

BuildOptionValue = Union[str, bool, int, None]


class StepKind(Enum):
    """What a step does when it is not already satisfied."""

    PACKAGE_INSTALL = "package_install"
    SOURCE_BUILD = "source_build"


class FailureMode(Enum):
    """Whether a failure aborts the whole run."""

    FATAL = "fatal"
    RECOVERABLE = "recoverable"


class BuildSystem(Enum):
    AUTOTOOLS = "autotools"
    CMAKE = "cmake"


@dataclass(frozen=True)
class ArchiveOrigin:
    """A single downloadable file, optionally an archive to unpack.

    Attributes:
        url: Download URL.
        version: Version tag, informational.
        extract: Unpack the download (tar.* or zip) into the local path.
    """

    url: str
    version: str = "latest"
    extract: bool = False


@dataclass(frozen=True)
class RepositoryOrigin:
    """A git repository.

    Attributes:
        url: Clone URL.
        depth: Shallow clone depth, or None for full history.
        refresh: Pull an existing checkout instead of leaving it as is.
        branch: Branch or tag to clone, or None for the default branch.
    """

    url: str
    depth: Optional[int] = None
    refresh: bool = False
    branch: Optional[str] = None


@dataclass(frozen=True)
class SourceArtifact:
    """Source code (or data) acquired and optionally built by a step.

    Attributes:
        origin: Where the source comes from.
        local_path: Checkout, extraction or download destination.
        build_system: How to build it, or None when the fetched
            artifact is itself the product.
        build_options: Ordered configuration candidates. The first
            candidate that configures successfully is used.
        source_subdir: Sub-directory of local_path holding the build root.
        build_dir_name: Out-of-source build directory (CMake).
        refresh_linker_cache: Rebuild the dynamic linker cache after install.
        install_path: For fetch-only artifacts, where the fetched file is
            installed (with elevation) after download.
    """

    origin: Union[ArchiveOrigin, RepositoryOrigin]
    local_path: Path
    build_system: Optional[BuildSystem] = None
    build_options: tuple[Mapping[str, BuildOptionValue], ...] = ({},)
    source_subdir: Optional[str] = None
    build_dir_name: str = "build"
    refresh_linker_cache: bool = True
    install_path: Optional[Path] = None

    @property
    def source_root(self) -> Path:
        if self.source_subdir:
            return self.local_path / self.source_subdir
        return self.local_path

    @property
    def build_dir(self) -> Path:
        return self.source_root / self.build_dir_name


@dataclass(frozen=True)
class Step:
    """One unit of provisioning work.

    Attributes:
        name: Unique identifier.
        kind: Package install or source build.
        failure_mode: Whether a failure here aborts the run.
        depends_on: Names of steps that must be satisfied or succeed first.
        check: Idempotency predicate; when true the step is skipped.
        packages: Packages installed by a PACKAGE_INSTALL step.
        artifact: Source fetched (and built) by a SOURCE_BUILD step.
        description: Human-readable summary.
    """

    name: str
    kind: StepKind
    failure_mode: FailureMode
    depends_on: tuple[str, ...] = ()
    check: Check = field(default_factory=Never)
    packages: tuple[str, ...] = ()
    artifact: Optional[SourceArtifact] = None
    description: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Step name must not be empty")
        if self.kind is StepKind.PACKAGE_INSTALL:
            if not self.packages:
                raise ValueError(f"Step '{self.name}' installs packages but lists none")
            if self.artifact is not None:
                raise ValueError(f"Step '{self.name}' installs packages and cannot carry a source artifact")
        elif self.artifact is None:
            raise ValueError(f"Step '{self.name}' is a source build without an artifact")

    @property
    def is_fatal(self) -> bool:
        return self.failure_mode is FailureMode.FATAL

    def is_satisfied(self, state: SystemState) -> bool:
        """Evaluate the idempotency check against live state."""
        return self.check(state)
