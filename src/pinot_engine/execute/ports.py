"""
Execution ports and result types.

- ExecutionPolicy: toggles for dry-run and error handling
- ActionResult / ApplyReport: structured outcomes to log or surface upstream
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from src.pinot_engine.plan.actions import Action
from src.pinot_engine.state.states import TrackedState
from src.pinot_engine.validation.diagnostics import Diagnostic


class ApplyStatus(StrEnum):
    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"  # dry-run or short-circuited after a failure


@dataclass(frozen=True)
class ExecutionPolicy:
    """Controls how the runner behaves."""

    dry_run: bool = False
    stop_on_first_error: bool = True


@dataclass(frozen=True)
class ActionResult:
    """Outcome for a single action."""

    action: Action
    status: ApplyStatus
    message: str  # one line, never contains secrets
    diagnostics: tuple[Diagnostic, ...] = ()


@dataclass(frozen=True)
class ApplyReport:
    """
    Outcome for applying a whole plan.

    `state` holds the tracked state after every successful action; failed
    and skipped actions leave their resource as it was.
    """

    results: tuple[ActionResult, ...]
    state: TrackedState

    @property
    def ok(self) -> bool:
        return all(result.status != ApplyStatus.FAILED for result in self.results)

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return tuple(d for result in self.results for d in result.diagnostics)
