"""
Plan actions: immutable, declarative operations targeting a single resource.

Conventions
-----------
- Every action is tied to one (kind, resource_key).
- Verbs: Create*, Update*, Delete*. There is no in-place rename; a changed
  identity is a different resource.
- `changed_fields` on updates lists what differs, for display only.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.enums import ResourceKind
from src.pinot_engine.desired.models import DesiredResource
from src.pinot_engine.state.states import ResourceState

# ---------- base ----------


@dataclass(frozen=True)
class Action:
    """Base action tied to a single resource."""

    kind: ResourceKind
    resource_key: str

    @property
    def verb(self) -> str:
        return "noop"

    def describe(self) -> str:
        return f"{self.verb} {self.kind.value} {self.resource_key}"


# ---------- executable actions ----------


@dataclass(frozen=True)
class CreateResource(Action):
    """Create a resource that is not tracked yet."""

    desired: DesiredResource

    @property
    def verb(self) -> str:
        return "create"


@dataclass(frozen=True)
class UpdateResource(Action):
    """Replace a tracked resource whose declaration differs from what was observed."""

    desired: DesiredResource
    current: ResourceState
    changed_fields: tuple[str, ...] = ()

    @property
    def verb(self) -> str:
        return "update"

    def describe(self) -> str:
        return f"{super().describe()} ({', '.join(self.changed_fields)})"


@dataclass(frozen=True)
class DeleteResource(Action):
    """Delete a tracked resource that is no longer declared."""

    current: ResourceState

    @property
    def verb(self) -> str:
        return "delete"
