"""Command execution abstraction used by installers, fetcher, builder and probes."""

import logging
import os
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

# Shell convention for "command not found"
NOT_FOUND_RETURNCODE = 127


@dataclass
class CommandResult:
    """Outcome of one external command.

    Attributes:
        args: The command line that was run (after elevation).
        returncode: Process exit status.
        output: Combined stdout and stderr.
    """

    args: tuple[str, ...]
    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def not_found(self) -> bool:
        return self.returncode == NOT_FOUND_RETURNCODE


class CommandRunner(ABC):
    """Interface for running external tools.

    Implementations never raise for a failing command: callers inspect
    CommandResult.ok and decide how to classify the failure.
    """

    @abstractmethod
    def run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        privileged: bool = False,
    ) -> CommandResult:
        """Run a command to completion.

        Args:
            args: Program and arguments.
            cwd: Working directory.
            env: Extra environment variables layered over the current ones.
            privileged: Run with elevated privileges (install steps).

        Returns:
            CommandResult with exit status and captured output.
        """
        pass


class SubprocessRunner(CommandRunner):
    """Runs commands with subprocess, optionally elevating with sudo."""

    def __init__(self, use_sudo: bool = False):
        self._use_sudo = use_sudo

    def _command_line(self, args: Sequence[str], privileged: bool) -> tuple[str, ...]:
        if privileged and self._use_sudo:
            return ("sudo", *args)
        return tuple(args)

    def run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        privileged: bool = False,
    ) -> CommandResult:
        command = self._command_line(args, privileged)
        full_env = None
        if env:
            full_env = {**os.environ, **env}
            if privileged and self._use_sudo:
                # sudo drops the caller's environment unless told otherwise
                command = ("sudo", *(f"{k}={v}" for k, v in env.items()), *args)

        logger.debug("Running: %s", " ".join(command))
        try:
            completed = subprocess.run(
                command,
                cwd=str(cwd) if cwd else None,
                env=full_env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            logger.debug("Executable not found: %s", command[0])
            return CommandResult(
                args=command,
                returncode=NOT_FOUND_RETURNCODE,
                output=f"{command[0]}: command not found",
            )

        output = completed.stdout or ""
        if output:
            logger.debug("Output of %s:\n%s", command[0], output.rstrip())
        if completed.returncode != 0:
            logger.debug("%s exited with status %d", command[0], completed.returncode)
        return CommandResult(
            args=command,
            returncode=completed.returncode,
            output=output,
        )
