"""
End-to-end orchestration for the Pinot engine.

Flow (one pass):
  1) Refresh every tracked resource from the controller.
  2) Run validation rules (model/state/catalog) against the refreshed state.
  3) Diff desired vs refreshed state into actions; order into a plan.
  4) Optionally execute the plan and return the new tracked state.

Design goals:
- Clear boundaries: refresh, validate, plan, execute are separate steps.
- No HTTP here: this file glues injected components together.
- Refresh never guesses: a confirmed 404 drops the resource; any other
  failure keeps the previous state, reports an ERROR diagnostic and blocks
  the apply step for the whole run.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from src.enums import ResourceKind
from src.logger import LOGGER
from src.pinot_engine.desired.models import DesiredCatalog
from src.pinot_engine.errors import PinotEngineError
from src.pinot_engine.execute.ports import ApplyReport, ExecutionPolicy
from src.pinot_engine.execute.runner import PlanRunner
from src.pinot_engine.lifecycle.ports import ResourceController
from src.pinot_engine.plan.differ import Differ, DiffOptions
from src.pinot_engine.plan.plan_builder import Plan, PlanBuilder
from src.pinot_engine.state.states import TrackedState
from src.pinot_engine.validation.diagnostics import Diagnostic, DiagnosticLevel, ValidationReport
from src.pinot_engine.validation.validator import Validator

REFRESH_FAILED = "REFRESH_FAILED"

# ---------- orchestration inputs/outputs ----------


@dataclass(frozen=True)
class OrchestratorOptions:
    """
    Orchestrator toggles for a single run.

    prune:
        Delete tracked resources that the manifest no longer declares.
    execute:
        If False, stop after refresh+validation+planning (no changes applied).
    fail_on_validation_errors:
        If True, block execution when validation has any ERROR.
    execution_policy:
        How to apply actions (dry-run, stop-on-first-error).
    """

    prune: bool = False
    execute: bool = True
    fail_on_validation_errors: bool = True
    execution_policy: ExecutionPolicy = ExecutionPolicy()


@dataclass(frozen=True)
class RefreshResult:
    """Tracked state after reading every resource back from the controller."""

    state: TrackedState
    dropped: tuple[str, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        """False when any tracked resource could not be read back."""
        return not any(d.level == DiagnosticLevel.ERROR for d in self.diagnostics)


@dataclass(frozen=True)
class OrchestrationReport:
    """Everything a caller would want to inspect or log from a single run."""

    refresh: RefreshResult
    plan: Plan
    validation: ValidationReport
    apply_report: ApplyReport | None = None
    notes: tuple[str, ...] = ()

    @property
    def state(self) -> TrackedState:
        """State to persist: after apply when one ran, else the refreshed state."""
        if self.apply_report is not None:
            return self.apply_report.state
        return self.refresh.state

    @property
    def ok(self) -> bool:
        if not self.refresh.ok or not self.validation.ok:
            return False
        return self.apply_report is None or self.apply_report.ok


# ---------- orchestrator ----------


class Orchestrator:
    """
    Glue for refresh → validate → plan → (optional) execute.

    This class does not make controller calls itself; it delegates to injected components.
    """

    def __init__(
        self,
        controllers: Mapping[ResourceKind, ResourceController],
        differ: Differ,
        plan_builder: PlanBuilder,
        validator: Validator,
    ) -> None:
        self._controllers = dict(controllers)
        self._differ = differ
        self._plan_builder = plan_builder
        self._validator = validator

    # ----- public API -----

    def run(
        self,
        desired: DesiredCatalog,
        tracked: TrackedState,
        options: OrchestratorOptions,
    ) -> OrchestrationReport:
        """Run the full flow once; optionally executes changes."""
        LOGGER.info(
            "Starting reconciliation for %d declared and %d tracked resource(s).",
            len(desired.resources()),
            len(tracked),
        )
        refresh = self.refresh(tracked)
        validation = self._validator.validate(desired, refresh.state)
        plan = self._plan(desired, refresh.state, options.prune)
        LOGGER.info("Plan generated: %s", plan.summary())

        apply_report: ApplyReport | None = None
        notes: list[str] = []
        if not refresh.ok:
            notes.append("Plan not applied: refresh errors.")
        if not validation.ok:
            LOGGER.warning("Validation found %d error(s).", len(validation.errors))
            if options.fail_on_validation_errors:
                notes.append("Plan not applied: validation errors.")
        can_apply = refresh.ok and (validation.ok or not options.fail_on_validation_errors)
        if options.execute and can_apply:
            runner = PlanRunner(self._controllers)
            apply_report = runner.apply(plan, refresh.state, policy=options.execution_policy)

        LOGGER.info("Reconciliation completed.")
        return OrchestrationReport(
            refresh=refresh,
            plan=plan,
            validation=validation,
            apply_report=apply_report,
            notes=tuple(notes),
        )

    def refresh(self, tracked: TrackedState) -> RefreshResult:
        """Read every tracked resource back from the controller."""
        state = tracked
        dropped: list[str] = []
        diagnostics: list[Diagnostic] = []

        for current in tracked:
            controller = self._controllers[current.kind]
            try:
                observed = controller.read(current)
            except PinotEngineError as e:
                message = f"Could not refresh {current.kind.value} {current.resource_key}: {e}"
                LOGGER.error("%s", message)
                diagnostics.append(
                    Diagnostic(
                        resource_key=current.resource_key,
                        level=DiagnosticLevel.ERROR,
                        code=REFRESH_FAILED,
                        message=message,
                        hint="The previously tracked state is kept; nothing is applied.",
                    )
                )
                continue

            state = state.without(current.kind, current.resource_key)
            if observed is None:
                LOGGER.info("%s %s no longer exists", current.kind.value, current.resource_key)
                dropped.append(current.resource_key)
            else:
                state = state.with_resource(observed)

        return RefreshResult(state=state, dropped=tuple(dropped), diagnostics=tuple(diagnostics))

    # ----- steps -----

    def _plan(self, desired: DesiredCatalog, live: TrackedState, prune: bool) -> Plan:
        """Diff desired vs refreshed state into actions, then order them deterministically."""
        actions = self._differ.diff(desired, live, DiffOptions(prune=prune))
        return self._plan_builder.build(actions)
