"""Custom exceptions for the orchestrator module.

All of these are raised before any step executes.
"""

from typing import Sequence

from provisioner.exceptions import ProvisionError


class StepGraphError(ProvisionError):
    """Base exception for an invalid step list."""

    pass


class CycleError(StepGraphError):
    """The dependency graph contains a cycle.

    Attributes:
        steps: Names of the steps that could not be ordered.
    """

    def __init__(self, steps: Sequence[str]):
        self.steps = tuple(steps)
        super().__init__(f"dependency cycle among steps: {', '.join(self.steps)}")


class UnknownDependencyError(StepGraphError):
    """A step depends on a name that is not declared.

    Attributes:
        step: The declaring step.
        dependency: The missing name.
    """

    def __init__(self, step: str, dependency: str):
        self.step = step
        self.dependency = dependency
        super().__init__(f"step '{step}' depends on unknown step '{dependency}'")


class DuplicateStepError(StepGraphError):
    """Two steps share a name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"duplicate step name '{name}'")


class UnknownStepError(StepGraphError):
    """A step referenced from outside the graph (e.g. --skip) does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown step '{name}'")
