"""BuildExecutor - configure, build and install native projects."""

import logging
from pathlib import Path
from typing import Optional, Sequence

from provisioner.steps.models import BuildSystem, SourceArtifact
from provisioner.system.runner import CommandResult, CommandRunner

from .exceptions import BuildError
from .flags import autotools_flags, cmake_flags
from .models import BuildResult, BuildState

logger = logging.getLogger(__name__)

CMAKE_CACHE_FILE = "CMakeCache.txt"


class BuildExecutor:
    """Drives a build through UNCONFIGURED -> CONFIGURED -> BUILT -> INSTALLED.

    A failed transition raises BuildError and the remaining transitions
    are not attempted. Configuration candidates are tried in order until
    one configures. CMake projects always build out of source.

    Example:
        executor = BuildExecutor(SubprocessRunner(use_sudo=True), jobs=8)
        result = executor.build(artifact)
    """

    def __init__(
        self,
        runner: CommandRunner,
        jobs: int = 1,
        linker_cache_command: Optional[Sequence[str]] = ("ldconfig",),
        cmake_config: Optional[str] = None,
    ):
        """Initialize the executor.

        Args:
            runner: Runs the build tools.
            jobs: Compiler parallelism for a single build.
            linker_cache_command: Command rebuilding the dynamic linker
                cache after install, or None where there is none.
            cmake_config: Configuration for multi-config CMake
                generators (e.g. "Release" on Windows).
        """
        self._runner = runner
        self._jobs = max(1, jobs)
        self._linker_cache_command = tuple(linker_cache_command) if linker_cache_command else None
        self._cmake_config = cmake_config

    def build(self, artifact: SourceArtifact) -> BuildResult:
        """Configure, build and install an artifact.

        Args:
            artifact: A fetched artifact with a build system.

        Returns:
            BuildResult in state INSTALLED.

        Raises:
            BuildError: A transition failed.
            ValueError: The artifact has no build system.
        """
        if artifact.build_system is BuildSystem.AUTOTOOLS:
            result = self._build_autotools(artifact)
        elif artifact.build_system is BuildSystem.CMAKE:
            result = self._build_cmake(artifact)
        else:
            raise ValueError(f"{artifact.local_path} has no build system to run")

        if artifact.refresh_linker_cache and self._linker_cache_command:
            self._refresh_linker_cache()
            result.linker_cache_refreshed = True
        return result

    def install_file(self, artifact: SourceArtifact) -> None:
        """Copy a fetched file to its install path with elevation.

        Raises:
            BuildError: The copy failed.
            ValueError: The artifact has no install path.
        """
        if artifact.install_path is None:
            raise ValueError(f"{artifact.local_path} has no install path")
        self._run(
            BuildState.INSTALLED,
            ["install", "-D", "-m", "0644", str(artifact.local_path), str(artifact.install_path)],
            privileged=True,
        )

    def _run(
        self,
        state: BuildState,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        privileged: bool = False,
    ) -> CommandResult:
        logger.info("%s: %s", state.action, " ".join(args))
        result = self._runner.run(args, cwd=cwd, privileged=privileged)
        if not result.ok:
            raise BuildError(state, output=result.output, detail=" ".join(args))
        return result

    def _configure(self, artifact: SourceArtifact, command_for) -> int:
        """Try each configuration candidate; return the winning index."""
        candidates = artifact.build_options or ({},)
        last: Optional[CommandResult] = None
        for index, options in enumerate(candidates):
            if index > 0:
                logger.warning(
                    "Configuration candidate %d/%d failed for %s, trying the next one",
                    index,
                    len(candidates),
                    artifact.source_root,
                )
                self._before_retry(artifact)
            args, cwd = command_for(options)
            last = self._runner.run(args, cwd=cwd)
            if last.ok:
                logger.info("Configured %s (candidate %d)", artifact.source_root, index)
                return index

        raise BuildError(
            BuildState.CONFIGURED,
            output=last.output if last else "",
            detail=f"all {len(candidates)} configuration candidate(s) failed",
        )

    def _before_retry(self, artifact: SourceArtifact) -> None:
        if artifact.build_system is BuildSystem.CMAKE:
            cache = artifact.build_dir / CMAKE_CACHE_FILE
            if cache.exists():
                logger.debug("Removing stale %s", cache)
                cache.unlink()

    def _build_autotools(self, artifact: SourceArtifact) -> BuildResult:
        root = artifact.source_root
        if (root / "autogen.sh").exists():
            self._run(BuildState.CONFIGURED, ["./autogen.sh"], cwd=root)

        index = self._configure(
            artifact, lambda options: (["./configure", *autotools_flags(options)], root)
        )
        self._run(BuildState.BUILT, ["make", f"-j{self._jobs}"], cwd=root)
        self._run(BuildState.INSTALLED, ["make", "install"], cwd=root, privileged=True)
        return BuildResult(state=BuildState.INSTALLED, candidate_index=index)

    def _build_cmake(self, artifact: SourceArtifact) -> BuildResult:
        root = artifact.source_root
        build_dir = artifact.build_dir
        build_dir.mkdir(parents=True, exist_ok=True)

        index = self._configure(
            artifact,
            lambda options: (
                ["cmake", "-S", str(root), "-B", str(build_dir), *cmake_flags(options)],
                None,
            ),
        )

        build_args = ["cmake", "--build", str(build_dir), "--parallel", str(self._jobs)]
        install_args = ["cmake", "--install", str(build_dir)]
        if self._cmake_config:
            build_args += ["--config", self._cmake_config]
            install_args += ["--config", self._cmake_config]

        self._run(BuildState.BUILT, build_args)
        self._run(BuildState.INSTALLED, install_args, privileged=True)
        return BuildResult(state=BuildState.INSTALLED, candidate_index=index)

    def _refresh_linker_cache(self) -> None:
        logger.info("Refreshing dynamic linker cache")
        self._run(BuildState.INSTALLED, self._linker_cache_command, privileged=True)
