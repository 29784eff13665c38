"""
Resource lifecycle state machine.

    PLANNED -> CREATING -> PRESENT -> (UPDATING -> PRESENT)* -> DELETING -> ABSENT
    PLANNED -> PRESENT                      (import)
    PRESENT -> ABSENT                       (refresh found it gone)

An in-flight status (CREATING, UPDATING, DELETING) whose remote call fails
rolls back to the status it started from; nothing else is recorded.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.enums import ResourceStatus
from src.pinot_engine.errors import InvalidTransitionError

_TRANSITIONS: dict[ResourceStatus, frozenset[ResourceStatus]] = {
    ResourceStatus.PLANNED: frozenset({ResourceStatus.CREATING, ResourceStatus.PRESENT}),
    ResourceStatus.CREATING: frozenset({ResourceStatus.PRESENT}),
    ResourceStatus.PRESENT: frozenset(
        {ResourceStatus.UPDATING, ResourceStatus.DELETING, ResourceStatus.ABSENT}
    ),
    ResourceStatus.UPDATING: frozenset({ResourceStatus.PRESENT}),
    ResourceStatus.DELETING: frozenset({ResourceStatus.ABSENT}),
    ResourceStatus.ABSENT: frozenset(),
}

_IN_FLIGHT = frozenset({ResourceStatus.CREATING, ResourceStatus.UPDATING, ResourceStatus.DELETING})


def can_transition(current: ResourceStatus, target: ResourceStatus) -> bool:
    return target in _TRANSITIONS[current]


@dataclass
class ResourceLifecycle:
    """Mutable status tracker for one resource during one apply."""

    resource_key: str
    status: ResourceStatus = ResourceStatus.PLANNED
    history: list[ResourceStatus] = field(default_factory=list)

    def advance(self, target: ResourceStatus) -> None:
        """Move to `target`; raise InvalidTransitionError when the machine forbids it."""
        if not can_transition(self.status, target):
            raise InvalidTransitionError(
                f"{self.resource_key}: cannot go from {self.status.value} to {target.value}"
            )
        self.history.append(self.status)
        self.status = target

    def roll_back(self) -> None:
        """Undo an in-flight status after its remote call failed."""
        if self.status not in _IN_FLIGHT or not self.history:
            raise InvalidTransitionError(
                f"{self.resource_key}: nothing in flight to roll back from {self.status.value}"
            )
        self.status = self.history.pop()
