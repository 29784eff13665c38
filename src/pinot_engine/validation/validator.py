"""
Validator core: run model and state rules per resource, then catalog rules once.

Responsibilities
----------------
- Keep rules decoupled via simple Protocols (each rule receives only what it needs).
- Perform no I/O. Caller supplies the desired catalog and the tracked state.
- Produce a ValidationReport (immutable) with a convenience .ok flag.

Conventions
-----------
- Model and state rules declare the `kind` they apply to; the validator only
  hands them resources of that kind.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol

from src.enums import ResourceKind
from src.pinot_engine.desired.models import DesiredCatalog
from src.pinot_engine.state.states import ResourceState, TrackedState
from src.pinot_engine.validation.diagnostics import Diagnostic, ValidationReport

# ---------- rule protocols ----------


class ModelRule(Protocol):
    """
    A model-only rule.

    Contract
    --------
    - Receives one desired resource of `kind`.
    - Returns zero or more diagnostics; must not raise for normal invalid input.
    """

    kind: ResourceKind
    code: str
    description: str

    def check(self, desired: Any) -> list[Diagnostic]: ...


class StateRule(Protocol):
    """
    A rule that considers the desired resource and its tracked state (or None).
    """

    kind: ResourceKind
    code: str
    description: str

    def check(self, desired: Any, live: ResourceState | None) -> list[Diagnostic]: ...


class CatalogRule(Protocol):
    """A global rule over the whole desired catalog."""

    code: str
    description: str

    def check(self, desired: DesiredCatalog) -> list[Diagnostic]: ...


# ---------- validator orchestrator ----------


class Validator:
    """
    Orchestrates validation in three stages:

      1) Model rules        (per resource, desired only)
      2) State rules        (per resource, desired + tracked state)
      3) Catalog rules      (once, whole catalog)

    This class performs no I/O and never talks to the controller.
    """

    def __init__(
        self,
        model_rules: Iterable[ModelRule] = (),
        state_rules: Iterable[StateRule] = (),
        catalog_rules: Iterable[CatalogRule] = (),
    ) -> None:
        self._model_rules = tuple(model_rules)
        self._state_rules = tuple(state_rules)
        self._catalog_rules = tuple(catalog_rules)

    def validate(self, desired: DesiredCatalog, live: TrackedState) -> ValidationReport:
        """Run all configured rules and return a ValidationReport."""
        diagnostics: list[Diagnostic] = []

        for resource in desired.resources():
            tracked = live.get(resource.kind, resource.resource_key)

            # 1) model-only
            for rule in self._model_rules:
                if rule.kind is resource.kind:
                    diagnostics.extend(rule.check(resource))

            # 2) state-aware
            for rule in self._state_rules:
                if rule.kind is resource.kind:
                    diagnostics.extend(rule.check(resource, tracked))

        # 3) catalog-wide
        for rule in self._catalog_rules:
            diagnostics.extend(rule.check(desired))

        return ValidationReport(diagnostics=tuple(diagnostics))
