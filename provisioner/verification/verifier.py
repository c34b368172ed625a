"""Verifier - probe installed tools and record their versions."""

import logging
import re
from dataclasses import dataclass
from typing import Sequence

from provisioner.system.runner import CommandRunner

logger = logging.getLogger(__name__)

NOT_FOUND = "not found"
VERSION_PATTERN = r"(\d+(?:\.\d+)+)"


@dataclass(frozen=True)
class Probe:
    """A tool whose installed version is reported after a run.

    Attributes:
        name: Label used in the report.
        command: Command printing the version.
        pattern: Regex whose first group is the version string.
    """

    name: str
    command: tuple[str, ...]
    pattern: str = VERSION_PATTERN


class Verifier:
    """Runs probes and reports versions. Never raises, never mutates.

    Example:
        verifier = Verifier(runner, [Probe("cmake", ("cmake", "--version"))])
        verifier.verify()  # {"cmake": "3.28.1"}
    """

    def __init__(self, runner: CommandRunner, probes: Sequence[Probe]):
        self._runner = runner
        self._probes = tuple(probes)

    @property
    def probes(self) -> tuple[Probe, ...]:
        return self._probes

    def probe(self, probe: Probe) -> str:
        """Return the detected version of one tool, or "not found"."""
        try:
            result = self._runner.run(probe.command)
        except Exception:
            logger.exception("Probe '%s' could not be run", probe.name)
            return NOT_FOUND

        if not result.ok:
            logger.warning("%s: not found (status %d)", probe.name, result.returncode)
            return NOT_FOUND

        match = re.search(probe.pattern, result.output)
        if not match:
            logger.warning("%s: no version in output %r", probe.name, result.output[:200])
            return NOT_FOUND

        version = match.group(1)
        logger.info("%s: %s", probe.name, version)
        return version

    def verify(self) -> dict[str, str]:
        """Probe every configured tool.

        Returns:
            Mapping of probe name to version string or "not found".
        """
        return {probe.name: self.probe(probe) for probe in self._probes}
