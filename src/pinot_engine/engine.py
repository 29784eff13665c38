"""
Engine: high-level entry point for the Pinot engine.

Responsibilities
----------------
- Wire default components (client, lifecycle controllers, differ, plan
  builder, validator) from a ControllerConfig.
- Expose the entry points used by the command line:
    - run(desired, tracked, options)
    - import_resource(kind, resource_id, tracked)

Notes:
-----
- No HTTP here; work is delegated to injected components.
- Defaults are provided, but everything can be overridden for testing or custom behaviour.
"""

from __future__ import annotations

from collections.abc import Mapping

from src.enums import ResourceKind, ResourceStatus
from src.logger import LOGGER
from src.pinot_engine.client import ControllerClient, ControllerConfig
from src.pinot_engine.desired.models import DesiredCatalog
from src.pinot_engine.lifecycle.ports import ControllerApi, ResourceController
from src.pinot_engine.lifecycle.schema_controller import SchemaController
from src.pinot_engine.lifecycle.table_controller import TableController
from src.pinot_engine.lifecycle.user_controller import UserController
from src.pinot_engine.orchestrator import OrchestrationReport, Orchestrator, OrchestratorOptions
from src.pinot_engine.plan.differ import Differ
from src.pinot_engine.plan.plan_builder import PlanBuilder
from src.pinot_engine.state.lifecycle import ResourceLifecycle
from src.pinot_engine.state.states import TrackedState
from src.pinot_engine.validation.rules import default_rule_set
from src.pinot_engine.validation.validator import Validator


def default_controllers(client: ControllerApi) -> dict[ResourceKind, ResourceController]:
    return {
        ResourceKind.SCHEMA: SchemaController(client),
        ResourceKind.TABLE: TableController(client),
        ResourceKind.USER: UserController(client),
    }


class Engine:
    """
    High-level entry point for the Pinot engine.

    You can:
      - pass your own components (for custom behaviour), or
      - rely on defaults built from a ControllerConfig.
    """

    def __init__(
        self,
        config: ControllerConfig | None = None,
        client: ControllerApi | None = None,
        controllers: Mapping[ResourceKind, ResourceController] | None = None,
        differ: Differ | None = None,
        plan_builder: PlanBuilder | None = None,
        validator: Validator | None = None,
    ) -> None:
        # Wire defaults if not supplied
        if client is None and controllers is None:
            client = ControllerClient(config or ControllerConfig.resolve())
        self.client = client
        self.controllers = (
            dict(controllers) if controllers is not None else default_controllers(client)
        )
        self.differ = differ or Differ()
        self.plan_builder = plan_builder or PlanBuilder()

        if validator is None:
            model_rules, state_rules, catalog_rules = default_rule_set()
            self.validator = Validator(
                model_rules=model_rules,
                state_rules=state_rules,
                catalog_rules=catalog_rules,
            )
        else:
            self.validator = validator

        # Orchestrator (glue)
        self.orchestrator = Orchestrator(
            controllers=self.controllers,
            differ=self.differ,
            plan_builder=self.plan_builder,
            validator=self.validator,
        )

    def run(
        self,
        desired: DesiredCatalog,
        tracked: TrackedState,
        options: OrchestratorOptions,
    ) -> OrchestrationReport:
        """Refresh, validate, plan and (optionally) apply."""
        return self.orchestrator.run(desired, tracked, options)

    def import_resource(
        self, kind: ResourceKind, resource_id: str, tracked: TrackedState
    ) -> TrackedState:
        """
        Start tracking an existing resource.

        Import ids: schema name; "<logical>_<TYPE>" for tables; "<username>|<COMPONENT>"
        for users. The resource goes PLANNED -> PRESENT once the controller returns
        it; raises NotFoundError when the controller does not have it.
        """
        lifecycle = ResourceLifecycle(resource_key=resource_id)
        state = self.controllers[kind].import_(resource_id)
        lifecycle.advance(ResourceStatus.PRESENT)
        LOGGER.info("Imported %s %s", kind.value, state.resource_key)
        return tracked.with_resource(state)
