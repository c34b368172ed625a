"""ProvisioningOrchestrator - runs steps in dependency order."""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Sequence

from provisioner.builder import BuildExecutor
from provisioner.fetcher import SourceFetcher
from provisioner.installer import PackageInstaller, install_packages
from provisioner.steps.models import Step, StepKind
from provisioner.system.state import SystemState
from provisioner.verification import Verifier

from .exceptions import UnknownStepError
from .graph import order_steps
from .models import RunReport, StepOutcome, StepStatus

logger = logging.getLogger(__name__)

SKIPPED_BY_REQUEST = "skipped by request"


class ProvisioningOrchestrator:
    """Orchestrates a provisioning run.

    Steps run one at a time in topological order. Each step is either
    already satisfied, skipped because a dependency is incomplete, or
    executed inside an error boundary. A failed FATAL step aborts the
    run; a failed RECOVERABLE step only skips its dependents. The
    verifier runs at the end, including after an abort.

    Example:
        orchestrator = ProvisioningOrchestrator(
            steps, state, installer, fetcher, executor, verifier
        )
        report = orchestrator.run()
        sys.exit(report.exit_code)
    """

    def __init__(
        self,
        steps: Sequence[Step],
        state: SystemState,
        installer: PackageInstaller,
        fetcher: SourceFetcher,
        executor: BuildExecutor,
        verifier: Optional[Verifier] = None,
        skip: Iterable[str] = (),
    ):
        """Initialize the orchestrator.

        Raises:
            UnknownStepError: ``skip`` names a step that is not declared.
        """
        self._steps = tuple(steps)
        self._state = state
        self._installer = installer
        self._fetcher = fetcher
        self._executor = executor
        self._verifier = verifier
        self._skip = frozenset(skip)

        names = {step.name for step in self._steps}
        for name in sorted(self._skip):
            if name not in names:
                raise UnknownStepError(name)

    def plan(self) -> list[Step]:
        """Return the execution order.

        Raises:
            StepGraphError: The step list is not a valid DAG.
        """
        return order_steps(self._steps)

    def run(self) -> RunReport:
        """Execute the pipeline.

        Returns:
            RunReport with per-step outcomes and verification results.

        Raises:
            StepGraphError: Raised before any step executes.
        """
        ordered = self.plan()
        report = RunReport(started_at=datetime.now(timezone.utc))
        logger.info("Provisioning %d steps", len(ordered))

        try:
            self._execute(ordered, report)
        finally:
            if self._verifier is not None:
                logger.info("Verifying installed tools")
                report.verification = self._verifier.verify()
            report.finished_at = datetime.now(timezone.utc)

        logger.info(
            "Run %s: %s",
            "aborted" if report.aborted else "finished",
            ", ".join(f"{count} {status}" for status, count in report.counts().items()),
        )
        return report

    def _execute(self, ordered: list[Step], report: RunReport) -> None:
        for position, step in enumerate(ordered):
            outcome = self._process(step, report)
            report.record(outcome)

            if outcome.status is StepStatus.FAILED and step.is_fatal:
                report.aborted = True
                reason = f"run aborted after fatal failure in '{step.name}'"
                for remaining in ordered[position + 1:]:
                    report.record(StepOutcome(remaining.name, StepStatus.SKIPPED, reason=reason))
                logger.error("Aborting run: step '%s' failed fatally", step.name)
                return

    def _process(self, step: Step, report: RunReport) -> StepOutcome:
        extra = {"step": step.name}

        if self._is_satisfied(step):
            logger.info("Step '%s' already satisfied", step.name, extra=extra)
            return StepOutcome(step.name, StepStatus.SATISFIED)

        if step.name in self._skip:
            logger.info("Step '%s' skipped by request", step.name, extra=extra)
            return StepOutcome(step.name, StepStatus.SKIPPED, reason=SKIPPED_BY_REQUEST)

        incomplete = [
            name for name in step.depends_on if not _is_complete(report.status_of(name))
        ]
        if incomplete:
            reason = f"dependency not satisfied: {', '.join(incomplete)}"
            logger.warning("Step '%s' skipped (%s)", step.name, reason, extra=extra)
            return StepOutcome(step.name, StepStatus.SKIPPED, reason=reason)

        return self._run_step(step)

    def _is_satisfied(self, step: Step) -> bool:
        try:
            return step.is_satisfied(self._state)
        except Exception:
            logger.warning(
                "Idempotency check for '%s' failed; treating step as not done",
                step.name,
                exc_info=True,
                extra={"step": step.name},
            )
            return False

    def _run_step(self, step: Step) -> StepOutcome:
        """Run a step with timing and error isolation."""
        extra = {"step": step.name}
        logger.info("Running step '%s' (%s)", step.name, step.kind.value, extra=extra)
        start = time.monotonic()
        try:
            if step.kind is StepKind.PACKAGE_INSTALL:
                details = self._install(step)
            else:
                details = self._fetch_and_build(step)
        except Exception as e:
            duration = round(time.monotonic() - start, 2)
            if step.is_fatal:
                logger.exception("Step '%s' failed", step.name, extra=extra)
            else:
                logger.warning("Step '%s' failed (recoverable): %s", step.name, e, extra=extra)
            failure_details = {}
            output_tail = getattr(e, "output_tail", None)
            if output_tail:
                failure_details["output_tail"] = output_tail
            return StepOutcome(
                step.name,
                StepStatus.FAILED,
                reason=str(e),
                duration_seconds=duration,
                details=failure_details,
            )

        duration = round(time.monotonic() - start, 2)
        logger.info("Step '%s' succeeded in %.2fs", step.name, duration, extra=extra)
        return StepOutcome(
            step.name,
            StepStatus.SUCCEEDED,
            duration_seconds=duration,
            details=details,
        )

    def _install(self, step: Step) -> dict[str, Any]:
        installed = install_packages(self._installer, step.packages)
        return {"packages_installed": len(installed)}

    def _fetch_and_build(self, step: Step) -> dict[str, Any]:
        artifact = step.artifact
        self._fetcher.fetch(artifact)
        details: dict[str, Any] = {"path": str(artifact.local_path)}
        if artifact.build_system is None:
            if artifact.install_path is not None:
                self._executor.install_file(artifact)
                details["installed_to"] = str(artifact.install_path)
            return details

        result = self._executor.build(artifact)
        details["build_system"] = artifact.build_system.value
        details["candidate"] = result.candidate_index
        details["linker_cache_refreshed"] = result.linker_cache_refreshed
        return details


def _is_complete(status: Optional[StepStatus]) -> bool:
    return status is not None and status.is_complete
