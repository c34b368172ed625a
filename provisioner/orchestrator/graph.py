"""Dependency ordering of steps."""

from typing import Sequence

from provisioner.steps.models import Step

from .exceptions import CycleError, DuplicateStepError, UnknownDependencyError


def validate_steps(steps: Sequence[Step]) -> None:
    """Reject duplicate names and references to undeclared steps.

    Raises:
        DuplicateStepError: Two steps share a name.
        UnknownDependencyError: A dependency is not declared.
    """
    names: set[str] = set()
    for step in steps:
        if step.name in names:
            raise DuplicateStepError(step.name)
        names.add(step.name)

    for step in steps:
        for dependency in step.depends_on:
            if dependency not in names:
                raise UnknownDependencyError(step.name, dependency)


def order_steps(steps: Sequence[Step]) -> list[Step]:
    """Topologically sort steps by ``depends_on``.

    Kahn's algorithm; among the steps ready at any point the one declared
    first runs first, so the order is deterministic.

    Raises:
        DuplicateStepError, UnknownDependencyError: See validate_steps.
        CycleError: The remaining steps form at least one cycle.
    """
    validate_steps(steps)

    position = {step.name: index for index, step in enumerate(steps)}
    remaining = {step.name: len(set(step.depends_on)) for step in steps}
    dependents: dict[str, list[str]] = {step.name: [] for step in steps}
    for step in steps:
        for dependency in set(step.depends_on):
            dependents[dependency].append(step.name)

    ready = [step.name for step in steps if remaining[step.name] == 0]
    ordered: list[Step] = []
    while ready:
        ready.sort(key=position.__getitem__)
        name = ready.pop(0)
        ordered.append(steps[position[name]])
        for dependent in dependents[name]:
            remaining[dependent] -= 1
            if remaining[dependent] == 0:
                ready.append(dependent)

    if len(ordered) != len(steps):
        stuck = [step.name for step in steps if remaining[step.name] > 0]
        raise CycleError(stuck)
    return ordered
