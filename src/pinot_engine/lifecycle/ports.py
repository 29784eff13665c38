"""
Lifecycle ports and result types.

- ControllerApi: the slice of ControllerClient the lifecycle controllers use
  (the real client, or a recording fake in tests)
- ResourceController: uniform create/read/update/delete/import surface per kind
- OperationResult: resulting state plus any downgraded (warning) diagnostics
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

from src.enums import ResourceKind
from src.pinot_engine.documents import JsonDocument
from src.pinot_engine.state.states import ResourceState
from src.pinot_engine.validation.diagnostics import Diagnostic

StateT = TypeVar("StateT", bound=ResourceState)


@dataclass(frozen=True)
class OperationResult(Generic[StateT]):
    """Outcome of a successful create or update."""

    state: StateT
    diagnostics: tuple[Diagnostic, ...] = ()


class ControllerApi(Protocol):
    def create_schema(self, schema: JsonDocument) -> None: ...
    def get_schema(self, schema_name: str) -> JsonDocument: ...
    def update_schema(self, schema: JsonDocument) -> None: ...
    def delete_schema(self, schema_name: str) -> None: ...

    def create_table(self, table_config: JsonDocument) -> None: ...
    def get_table(self, table_id: str) -> JsonDocument: ...
    def update_table(self, table_config: JsonDocument) -> None: ...
    def delete_table(self, logical_name: str, table_type: str) -> None: ...
    def delete_table_by_id(self, table_id: str) -> None: ...
    def reload_table_segments(self, logical_name: str, table_type: str) -> None: ...

    def create_user(self, user: JsonDocument) -> None: ...
    def get_user(self, username: str, component: str) -> JsonDocument: ...
    def update_user(self, user: JsonDocument) -> None: ...
    def delete_user(self, username: str, component: str) -> None: ...


class ResourceController(Protocol):
    """
    Contract
    --------
    - create/update validate before any network call and return the new state.
    - read returns None only when the controller confirms the resource is gone;
      every other failure propagates.
    - delete raises on failure; success means the resource is absent.
    - import_ reads an existing resource by its import id.
    """

    kind: ResourceKind

    def create(self, desired: Any) -> OperationResult: ...
    def read(self, current: Any) -> ResourceState | None: ...
    def update(self, desired: Any, current: Any) -> OperationResult: ...
    def delete(self, current: Any) -> None: ...
    def import_(self, resource_id: str) -> ResourceState: ...
