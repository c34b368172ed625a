"""Custom exceptions for the builder module."""

from provisioner.exceptions import ProvisionError

from .models import BuildState

# Keep error messages readable; the full output is logged at DEBUG
OUTPUT_TAIL_LINES = 20


class BuildError(ProvisionError):
    """A configure, build or install transition failed.

    Attributes:
        transition: The state the build was trying to enter.
        output: Captured tool output of the failing command.
    """

    def __init__(self, transition: BuildState, output: str = "", detail: str = ""):
        self.transition = transition
        self.output = output
        message = f"{transition.action} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)

    @property
    def output_tail(self) -> str:
        """Last lines of the captured output."""
        lines = self.output.rstrip().splitlines()
        return "\n".join(lines[-OUTPUT_TAIL_LINES:])
