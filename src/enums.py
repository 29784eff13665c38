"""Enumerations used throughout the Pinot engine."""

from enum import StrEnum


class TableType(StrEnum):
    """Physical flavor of a Pinot table."""

    OFFLINE = "OFFLINE"
    REALTIME = "REALTIME"


class Component(StrEnum):
    """Pinot component a user account applies to."""

    CONTROLLER = "CONTROLLER"
    BROKER = "BROKER"
    SERVER = "SERVER"


class ResourceKind(StrEnum):
    """Kinds of controller resources managed by the engine."""

    SCHEMA = "schema"
    TABLE = "table"
    USER = "user"

    @property
    def apply_rank(self) -> int:
        """Order used when creating or updating: schemas before the tables that use them."""
        mapping = {
            ResourceKind.SCHEMA: 0,
            ResourceKind.TABLE: 1,
            ResourceKind.USER: 2,
        }
        return mapping[self]


class ResourceStatus(StrEnum):
    """Lifecycle status of a single managed resource."""

    PLANNED = "planned"
    CREATING = "creating"
    PRESENT = "present"
    UPDATING = "updating"
    DELETING = "deleting"
    ABSENT = "absent"
