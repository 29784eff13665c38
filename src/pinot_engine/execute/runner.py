"""
Plan Runner

Purpose
-------
Execute an ordered Plan action by action through the lifecycle controller of
each action's kind, threading the tracked state through the run.

Design
------
- No HTTP here. All controller calls are delegated to the injected
  lifecycle controllers.
- Every action walks the resource state machine; a failed call rolls the
  status back and leaves the tracked state for that resource unchanged.
- Respects ExecutionPolicy:
  - dry_run=True: nothing is called; every action is SKIPPED with a
    descriptive message.
  - stop_on_first_error=True: after the first FAILED result, remaining
    actions are marked SKIPPED with a short-circuit message.
- Returns an ApplyReport aggregating all per-action results and the new state.
"""

from __future__ import annotations

from collections.abc import Mapping

from src.enums import ResourceKind, ResourceStatus
from src.logger import LOGGER
from src.pinot_engine.errors import PinotEngineError
from src.pinot_engine.execute.ports import (
    ActionResult,
    ApplyReport,
    ApplyStatus,
    ExecutionPolicy,
)
from src.pinot_engine.lifecycle.ports import ResourceController
from src.pinot_engine.plan.actions import Action, CreateResource, DeleteResource, UpdateResource
from src.pinot_engine.plan.plan_builder import Plan
from src.pinot_engine.state.lifecycle import ResourceLifecycle
from src.pinot_engine.state.states import TrackedState
from src.pinot_engine.validation.diagnostics import Diagnostic


class PlanRunner:
    """
    Execute all actions of a Plan in the order given.

    Thin orchestration: controllers are injected, one per resource kind.
    """

    def __init__(self, controllers: Mapping[ResourceKind, ResourceController]) -> None:
        self._controllers = dict(controllers)

    def apply(self, plan: Plan, state: TrackedState, *, policy: ExecutionPolicy) -> ApplyReport:
        """Apply the plan starting from `state` and return an aggregated ApplyReport."""
        results: list[ActionResult] = []
        failed = False

        for action in plan.actions:
            if failed and policy.stop_on_first_error:
                results.append(
                    ActionResult(
                        action=action,
                        status=ApplyStatus.SKIPPED,
                        message="Skipped due to previous failure (stop_on_first_error)",
                    )
                )
                continue

            if policy.dry_run:
                results.append(
                    ActionResult(
                        action=action,
                        status=ApplyStatus.SKIPPED,
                        message=f"(dry-run) {action.describe()}",
                    )
                )
                continue

            result, state = self._apply_one(action, state)
            results.append(result)
            failed = failed or result.status == ApplyStatus.FAILED

        return ApplyReport(results=tuple(results), state=state)

    # ---------- helpers ----------

    def _apply_one(self, action: Action, state: TrackedState) -> tuple[ActionResult, TrackedState]:
        controller = self._controllers[action.kind]
        lifecycle = _lifecycle_for(action)
        diagnostics: tuple[Diagnostic, ...] = ()

        try:
            match action:
                case CreateResource():
                    lifecycle.advance(ResourceStatus.CREATING)
                    outcome = controller.create(action.desired)
                    lifecycle.advance(ResourceStatus.PRESENT)
                    state = state.with_resource(outcome.state)
                    diagnostics = outcome.diagnostics
                case UpdateResource():
                    lifecycle.advance(ResourceStatus.UPDATING)
                    outcome = controller.update(action.desired, action.current)
                    lifecycle.advance(ResourceStatus.PRESENT)
                    state = state.with_resource(outcome.state)
                    diagnostics = outcome.diagnostics
                case DeleteResource():
                    lifecycle.advance(ResourceStatus.DELETING)
                    controller.delete(action.current)
                    lifecycle.advance(ResourceStatus.ABSENT)
                    state = state.without(action.kind, action.resource_key)
                case _:
                    raise TypeError(f"Unsupported action type: {type(action).__name__}")
        except PinotEngineError as error:
            lifecycle.roll_back()
            message = f"Failed to {action.describe()}: {type(error).__name__}: {error}"
            LOGGER.error("%s", message)
            return ActionResult(action=action, status=ApplyStatus.FAILED, message=message), state

        return (
            ActionResult(
                action=action,
                status=ApplyStatus.OK,
                message=f"{action.describe()}: done",
                diagnostics=diagnostics,
            ),
            state,
        )


def _lifecycle_for(action: Action) -> ResourceLifecycle:
    start = ResourceStatus.PLANNED if isinstance(action, CreateResource) else ResourceStatus.PRESENT
    return ResourceLifecycle(resource_key=action.resource_key, status=start)
