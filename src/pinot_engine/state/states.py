"""
Tracked resource state dataclasses.

These types capture what the engine last observed for each managed resource:
- SchemaState: the schema document as the controller returned it
- TableState: logical identity, redacted config and the side-channel credential
- UserState: the user record plus the locally held password
- TrackedState: every tracked resource keyed by (kind, resource key)

Notes:
- Table configs stored here never contain `sasl.jaas.config`; the live
  credential is kept apart in `TableState.sasl_jaas_config`.
- Passwords are write-only on the controller, so `UserState.password` is the
  local value and survives refreshes.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import ClassVar, Self, TypeAlias

from src.enums import ResourceKind
from src.pinot_engine.documents import JsonDocument
from src.pinot_engine.identifiers import format_table_id, format_user_import_id

StateKey: TypeAlias = tuple[ResourceKind, str]


@dataclass(frozen=True)
class SchemaState:
    """Observed schema."""

    kind: ClassVar[ResourceKind] = ResourceKind.SCHEMA

    schema_name: str
    schema: JsonDocument = field(default_factory=dict)

    @property
    def resource_key(self) -> str:
        return self.schema_name


@dataclass(frozen=True)
class TableState:
    """Observed table with its side-channel Kafka credential."""

    kind: ClassVar[ResourceKind] = ResourceKind.TABLE

    table_name: str
    table_type: str
    table_config: JsonDocument = field(default_factory=dict)
    kafka_username: str | None = None
    kafka_password: str | None = field(default=None, repr=False)
    sasl_jaas_config: str | None = field(default=None, repr=False)

    @property
    def table_id(self) -> str:
        """Composite id: 'events_OFFLINE'."""
        return format_table_id(self.table_name, self.table_type)

    @property
    def resource_key(self) -> str:
        return self.table_id


@dataclass(frozen=True)
class UserState:
    """Observed user; `password` is the locally held value."""

    kind: ClassVar[ResourceKind] = ResourceKind.USER

    username: str
    component: str
    role: str = ""
    tables: tuple[str, ...] = ()
    permissions: tuple[str, ...] = ()
    password: str | None = field(default=None, repr=False)

    @property
    def resource_key(self) -> str:
        return format_user_import_id(self.username, self.component)


ResourceState = SchemaState | TableState | UserState


def state_key(resource: ResourceState) -> StateKey:
    return (resource.kind, resource.resource_key)


@dataclass(frozen=True)
class TrackedState:
    """Point-in-time view of every tracked resource, keyed by (kind, resource key)."""

    resources: Mapping[StateKey, ResourceState] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __iter__(self) -> Iterator[ResourceState]:
        return iter(self.resources.values())

    def __len__(self) -> int:
        return len(self.resources)

    def get(self, kind: ResourceKind, resource_key: str) -> ResourceState | None:
        """Return the tracked state, or None when not tracked."""
        return self.resources.get((kind, resource_key))

    def of_kind(self, kind: ResourceKind) -> tuple[ResourceState, ...]:
        return tuple(r for (k, _), r in self.resources.items() if k is kind)

    def with_resource(self, resource: ResourceState) -> Self:
        """Copy with `resource` added or replaced."""
        updated = dict(self.resources)
        updated[state_key(resource)] = resource
        return type(self)(resources=MappingProxyType(updated))

    def without(self, kind: ResourceKind, resource_key: str) -> Self:
        """Copy with the resource removed (no-op when untracked)."""
        updated = dict(self.resources)
        updated.pop((kind, resource_key), None)
        return type(self)(resources=MappingProxyType(updated))

    @classmethod
    def of(cls, *resources: ResourceState) -> Self:
        return cls(resources=MappingProxyType({state_key(r): r for r in resources}))
