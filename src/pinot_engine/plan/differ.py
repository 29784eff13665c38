"""
Diff engine: desired catalog + tracked state -> concrete plan actions.

Principles
----------
- No side effects; this module only computes actions.
- Documents are compared by canonical JSON (key order and whitespace never
  count as a change).
- Table configs are compared with the credential redacted on both sides; the
  Kafka credential inputs are compared on their own.
- User tables and permissions are compared as sets. A password counts as
  changed only when one is declared and it differs from the local value.
- Tracked resources that are no longer declared are deleted only when
  `DiffOptions.prune` is set.

Output
------
Flat list of `Action` objects (see plan/actions.py). PlanBuilder orders them.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.enums import ResourceKind
from src.pinot_engine.desired.models import (
    DesiredCatalog,
    DesiredResource,
    DesiredSchema,
    DesiredTable,
    DesiredUser,
)
from src.pinot_engine.documents import changed_keys, redact_secret
from src.pinot_engine.plan.actions import Action, CreateResource, DeleteResource, UpdateResource
from src.pinot_engine.state.states import (
    ResourceState,
    SchemaState,
    TableState,
    TrackedState,
    UserState,
)
from src.pinot_engine.users import same_members

KAFKA_CREDENTIALS_FIELD = "kafka_credentials"


@dataclass(frozen=True)
class DiffOptions:
    """Feature switches for a single diff."""

    prune: bool = False  # delete tracked resources that are no longer declared


class Differ:
    """
    Compute the actions needed to move tracked state to the desired catalog.

    Workflow
    --------
    1. For each desired resource, look up its tracked state by key.
    2. Untracked -> CreateResource.
    3. Tracked -> UpdateResource when any managed field differs.
    4. With prune, every tracked key without a declaration -> DeleteResource.
    """

    def diff(
        self, desired: DesiredCatalog, live: TrackedState, options: DiffOptions | None = None
    ) -> list[Action]:
        options = options or DiffOptions()
        actions: list[Action] = []
        declared: set[tuple[ResourceKind, str]] = set()

        for resource in desired.resources():
            declared.add((resource.kind, resource.resource_key))
            current = live.get(resource.kind, resource.resource_key)
            action = self._diff_resource(resource, current)
            if action is not None:
                actions.append(action)

        if options.prune:
            for state in live:
                if (state.kind, state.resource_key) not in declared:
                    actions.append(
                        DeleteResource(
                            kind=state.kind, resource_key=state.resource_key, current=state
                        )
                    )
        return actions

    @staticmethod
    def _diff_resource(resource: DesiredResource, current: ResourceState | None) -> Action | None:
        if current is None:
            return CreateResource(
                kind=resource.kind, resource_key=resource.resource_key, desired=resource
            )

        changed = _changed_fields(resource, current)
        if not changed:
            return None
        return UpdateResource(
            kind=resource.kind,
            resource_key=resource.resource_key,
            desired=resource,
            current=current,
            changed_fields=changed,
        )


# ---------- per-kind helpers ----------


def _changed_fields(resource: DesiredResource, current: ResourceState) -> tuple[str, ...]:
    match resource, current:
        case DesiredSchema(), SchemaState():
            return _diff_schema(resource, current)
        case DesiredTable(), TableState():
            return _diff_table(resource, current)
        case DesiredUser(), UserState():
            return _diff_user(resource, current)
    raise TypeError(f"Cannot diff {type(resource).__name__} against {type(current).__name__}")


def _diff_schema(desired: DesiredSchema, current: SchemaState) -> tuple[str, ...]:
    return changed_keys(desired.schema, current.schema)


def _diff_table(desired: DesiredTable, current: TableState) -> tuple[str, ...]:
    changed = list(changed_keys(redact_secret(desired.table_config), current.table_config))
    if _credentials(desired) != _credentials(current):
        changed.append(KAFKA_CREDENTIALS_FIELD)
    return tuple(changed)


def _diff_user(desired: DesiredUser, current: UserState) -> tuple[str, ...]:
    changed: list[str] = []
    if desired.role != current.role:
        changed.append("role")
    if not same_members(desired.tables, current.tables):
        changed.append("tables")
    if not same_members(desired.permissions, current.permissions):
        changed.append("permissions")
    if desired.password and desired.password != current.password:
        changed.append("password")
    return tuple(changed)


def _credentials(resource: DesiredTable | TableState) -> tuple[str | None, str | None]:
    # "" and None both mean "no credential".
    return (resource.kafka_username or None, resource.kafka_password or None)
