"""
Desired resource specification models.

These dataclasses describe the *intended* controller resources. The differ
compares them with the refreshed tracked state and produces actions.

Conventions and semantics
-------------------------
- `resource_key`: stable identity within one kind.
    schema -> schema name
    table  -> "<logical>_<TYPE>"
    user   -> "<username>|<COMPONENT>"
- `schema` / `table_config`: passthrough JSON objects; unknown keys are kept.
- `kafka_username` / `kafka_password`: side-channel inputs, never part of
  `table_config`. Both None means "no credential".
- `DesiredUser.password`: required on create, optional afterwards
  (None keeps the controller's current password).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from src.enums import ResourceKind
from src.pinot_engine.documents import JsonDocument
from src.pinot_engine.identifiers import format_user_import_id


@dataclass(frozen=True)
class DesiredSchema:
    """Desired state for a single schema."""

    kind: ClassVar[ResourceKind] = ResourceKind.SCHEMA

    schema_name: str
    schema: JsonDocument

    @property
    def resource_key(self) -> str:
        return self.schema_name


@dataclass(frozen=True)
class DesiredTable:
    """Desired state for a single OFFLINE or REALTIME table."""

    kind: ClassVar[ResourceKind] = ResourceKind.TABLE

    table_name: str
    table_type: str
    table_config: JsonDocument
    kafka_username: str | None = None
    kafka_password: str | None = field(default=None, repr=False)

    @property
    def resource_key(self) -> str:
        # Unvalidated on purpose: validation rules report bad types with this key.
        return f"{self.table_name.strip()}_{self.table_type.strip().upper()}"


@dataclass(frozen=True)
class DesiredUser:
    """Desired state for a single user account on one component."""

    kind: ClassVar[ResourceKind] = ResourceKind.USER

    username: str
    component: str
    role: str
    permissions: tuple[str, ...]
    tables: tuple[str, ...] = ()
    password: str | None = field(default=None, repr=False)

    @property
    def resource_key(self) -> str:
        return format_user_import_id(self.username, self.component)


DesiredResource = DesiredSchema | DesiredTable | DesiredUser


@dataclass(frozen=True)
class DesiredCatalog:
    """A set of desired resources to manage."""

    schemas: tuple[DesiredSchema, ...] = ()
    tables: tuple[DesiredTable, ...] = ()
    users: tuple[DesiredUser, ...] = ()

    def resources(self) -> tuple[DesiredResource, ...]:
        """All resources, schemas first."""
        return (*self.schemas, *self.tables, *self.users)
