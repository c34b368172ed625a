"""CLI entry point for the provisioning pipeline."""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from provisioner.builder import BuildExecutor
from provisioner.config import TARGETS, ProvisionConfig
from provisioner.exceptions import ConfigError
from provisioner.fetcher import SourceFetcher
from provisioner.logging_config import configure_logging
from provisioner.orchestrator import (
    ProvisioningOrchestrator,
    RunReport,
    StepGraphError,
    order_steps,
)
from provisioner.preflight import run_preflight
from provisioner.system import LocalSystemState, SubprocessRunner
from provisioner.variants import Variant, get_variant
from provisioner.verification import Verifier

EXIT_INVALID_GRAPH = 2


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--target",
        choices=TARGETS,
        default=None,
        help="Step list variant (default: host OS)",
    )
    common.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set logging level (overrides LOG_LEVEL env var)",
    )

    parser = argparse.ArgumentParser(
        description="Provision the native OCR and license plate recognition tool chain"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    run = commands.add_parser("run", parents=[common], help="Run the provisioning pipeline")
    run.add_argument(
        "--force-clean",
        action="store_true",
        help="Delete and re-acquire existing source checkouts",
    )
    run.add_argument(
        "--skip",
        action="append",
        default=[],
        metavar="STEP",
        help="Skip a step by name (repeatable)",
    )
    run.add_argument(
        "--report-json",
        type=Path,
        metavar="PATH",
        help="Write the run report as JSON to PATH",
    )

    commands.add_parser("plan", parents=[common], help="Print the execution order")
    commands.add_parser("check", parents=[common], help="Check for required host tools")
    return parser


def print_report(report: RunReport) -> None:
    print("\n--- Provisioning Summary ---")
    for outcome in report.step_results.values():
        print(f"  {outcome.name}: {outcome.status.value.upper()} ({outcome.duration_seconds}s)")
        for key, value in outcome.details.items():
            if key == "output_tail":
                continue
            print(f"    {key}: {value}")
        if outcome.reason:
            print(f"    reason: {outcome.reason}")

    if report.verification:
        print("\n--- Installed Tools ---")
        for name, version in report.verification.items():
            print(f"  {name}: {version}")

    overall = "ABORTED" if report.aborted else "COMPLETED"
    print(f"\nResult: {overall}")


def write_report(report: RunReport, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report.to_dict(), indent=2), encoding="utf-8")


def cmd_plan(variant: Variant) -> int:
    try:
        ordered = order_steps(variant.steps)
    except StepGraphError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_INVALID_GRAPH

    print(f"Execution order ({variant.name}):")
    for position, step in enumerate(ordered, start=1):
        depends = ", ".join(step.depends_on) or "-"
        print(
            f"  {position:2d}. {step.name} "
            f"[{step.kind.value}, {step.failure_mode.value}] after: {depends}"
        )
        if step.description:
            print(f"      {step.description}")
    return 0


def cmd_check(variant: Variant, state: LocalSystemState) -> int:
    statuses = run_preflight(state, variant.prerequisites)
    for status in statuses:
        prerequisite = status.prerequisite
        if status.available:
            line = f"ok ({status.found})"
        elif status.blocking:
            line = "MISSING"
        else:
            line = f"missing, installed by '{prerequisite.provided_by}'"
        print(f"  {prerequisite.name}: {line}")
    return 1 if any(status.blocking for status in statuses) else 0


def cmd_run(
    args: argparse.Namespace,
    config: ProvisionConfig,
    variant: Variant,
    runner: SubprocessRunner,
    state: LocalSystemState,
    installer,
) -> int:
    fetcher = SourceFetcher(runner, force_clean=args.force_clean)
    executor = BuildExecutor(
        runner,
        jobs=config.jobs,
        linker_cache_command=variant.linker_cache_command,
        cmake_config=variant.cmake_config,
    )
    verifier = Verifier(runner, variant.probes)

    try:
        orchestrator = ProvisioningOrchestrator(
            variant.steps,
            state,
            installer,
            fetcher,
            executor,
            verifier=verifier,
            skip=args.skip,
        )
        report = orchestrator.run()
    except StepGraphError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_INVALID_GRAPH

    print_report(report)
    if args.report_json:
        try:
            write_report(report, args.report_json)
        except OSError as e:
            print(f"ERROR: cannot write report to {args.report_json}: {e}", file=sys.stderr)
        else:
            print(f"Report written to {args.report_json}")
    return report.exit_code


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()

    args = build_parser().parse_args(argv)
    configure_logging(level_override=args.log_level)

    try:
        config = ProvisionConfig.from_env(target=args.target)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_INVALID_GRAPH

    variant = get_variant(config.target, config)
    runner = SubprocessRunner(use_sudo=config.use_sudo)
    installer = variant.installer_factory(runner)
    state = LocalSystemState(package_query=installer.is_installed)

    if args.command == "plan":
        return cmd_plan(variant)
    if args.command == "check":
        return cmd_check(variant, state)
    return cmd_run(args, config, variant, runner, state, installer)


if __name__ == "__main__":
    sys.exit(main())
