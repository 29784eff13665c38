"""Entry point for reconciling a Pinot controller with a manifest."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

from src.constants import DEFAULT_STATE_FILE
from src.enums import ResourceKind
from src.logger import LOGGER
from src.pinot_engine.client import ControllerConfig
from src.pinot_engine.desired.loader import load_catalog
from src.pinot_engine.engine import Engine
from src.pinot_engine.errors import PinotEngineError
from src.pinot_engine.execute.ports import ExecutionPolicy
from src.pinot_engine.orchestrator import OrchestrationReport, OrchestratorOptions
from src.pinot_engine.state.store import StateStore
from src.pinot_engine.validation.diagnostics import DiagnosticLevel


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Reconcile Pinot schemas, tables and users.")
    parser.add_argument("--state", default=DEFAULT_STATE_FILE, help="State file path")
    parser.add_argument(
        "--controller-url", default=None, help="Controller URL (default: PINOT_CONTROLLER_URL)"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("plan", "Refresh, validate and show the actions that apply would run."),
        ("apply", "Refresh, validate and apply the plan; then save the state file."),
    ):
        command = sub.add_parser(name, help=help_text)
        command.add_argument("--manifest", required=True, help="YAML manifest path")
        command.add_argument(
            "--prune", action="store_true", help="Delete tracked resources no longer declared"
        )

    p_import = sub.add_parser("import", help="Start tracking an existing resource.")
    p_import.add_argument("kind", choices=[k.value for k in ResourceKind])
    p_import.add_argument(
        "resource_id", help="schema name, <table>_<TYPE>, or <username>|<COMPONENT>"
    )
    return parser


def log_report(report: OrchestrationReport) -> None:
    for diagnostic in (*report.refresh.diagnostics, *report.validation.diagnostics):
        LOGGER.log(
            logging.ERROR if diagnostic.level == DiagnosticLevel.ERROR else logging.WARNING,
            "[%s] %s: %s",
            diagnostic.code,
            diagnostic.resource_key or "-",
            diagnostic.message,
        )
    for action in report.plan.actions:
        LOGGER.info("  %s", action.describe())
    if report.apply_report is not None:
        for result in report.apply_report.results:
            LOGGER.info("  [%s] %s", result.status.value, result.message)
        for diagnostic in report.apply_report.diagnostics:
            LOGGER.warning("[%s] %s", diagnostic.code, diagnostic.message)
    for note in report.notes:
        LOGGER.warning("%s", note)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    store = StateStore(args.state)

    try:
        engine = Engine(config=ControllerConfig.resolve(controller_url=args.controller_url))
        tracked = store.load()

        if args.command == "import":
            store.save(engine.import_resource(ResourceKind(args.kind), args.resource_id, tracked))
            return 0

        desired = load_catalog(args.manifest)
        options = OrchestratorOptions(
            prune=args.prune,
            execute=args.command == "apply",
            execution_policy=ExecutionPolicy(),
        )
        report = engine.run(desired, tracked, options)
    except PinotEngineError as e:
        LOGGER.error("%s", e)
        return 1

    log_report(report)
    if args.command == "apply":
        store.save(report.state)
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
