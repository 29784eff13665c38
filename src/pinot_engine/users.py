"""
User records and the user-lookup response disambiguator.

GET /users/{username}?component=... answers in one of three shapes depending
on the controller version:

  1) a plain user object:           {"username": "alice", "component": "BROKER", ...}
  2) a wrapper keyed by user key:   {"alice_BROKER": {...}}
  3) a wrapper with a single entry: {"<anything>": {...}}

The rules are tried strictly in that order. An empty body means the user
does not exist.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from src.pinot_engine.errors import UnrecognizedUserResponseShapeError
from src.pinot_engine.identifiers import format_user_key


@dataclass(frozen=True)
class UserRecord:
    """Canonical user as read from (or sent to) the controller."""

    username: str
    component: str
    role: str = ""
    tables: tuple[str, ...] = ()
    permissions: tuple[str, ...] = ()
    password: str | None = field(default=None, repr=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> UserRecord:
        """Build a record from controller JSON; missing lists become empty tuples."""
        return cls(
            username=str(data.get("username") or ""),
            component=str(data.get("component") or ""),
            role=str(data.get("role") or ""),
            tables=_as_string_tuple(data.get("tables")),
            permissions=_as_string_tuple(data.get("permissions")),
        )

    def to_payload(self, include_password: bool = True) -> dict[str, Any]:
        """Request body for POST/PUT /users; password only when set and requested."""
        payload: dict[str, Any] = {
            "username": self.username,
            "component": self.component,
            "role": self.role,
            "tables": list(self.tables),
            "permissions": list(self.permissions),
        }
        if include_password and self.password:
            payload["password"] = self.password
        return payload


def _as_string_tuple(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Iterable):
        return tuple(str(item) for item in value)
    return (str(value),)


def same_members(left: Iterable[str], right: Iterable[str]) -> bool:
    """Order-insensitive comparison for table and permission lists."""
    return sorted(left) == sorted(right)


# ---------- disambiguation ----------


class LookupStatus(StrEnum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class UserLookup:
    """Tagged outcome of resolving a user lookup response."""

    status: LookupStatus
    record: UserRecord | None = None
    detail: str = ""


def resolve_user_response(
    raw: Mapping[str, Any] | None, username: str, component: str
) -> UserLookup:
    """Pick the user record out of `raw` using the three documented shapes."""
    if not raw:
        return UserLookup(status=LookupStatus.NOT_FOUND, detail="empty response")

    # 1) plain object; must come first so a record is never mistaken for a wrapper
    if "username" in raw:
        return UserLookup(status=LookupStatus.FOUND, record=UserRecord.from_mapping(raw))

    # 2) wrapper keyed by "<username>_<COMPONENT>"
    key = format_user_key(username, component)
    if key in raw:
        return _from_wrapped(raw[key], f"value under {key!r}")

    # 3) single-entry wrapper with an unknown key
    if len(raw) == 1:
        only_key, only_value = next(iter(raw.items()))
        return _from_wrapped(only_value, f"value under {only_key!r}")

    return UserLookup(
        status=LookupStatus.UNRECOGNIZED,
        detail=f"neither plain object nor wrapper with key {key!r}",
    )


def _from_wrapped(value: object, where: str) -> UserLookup:
    if isinstance(value, Mapping):
        return UserLookup(status=LookupStatus.FOUND, record=UserRecord.from_mapping(value))
    return UserLookup(
        status=LookupStatus.UNRECOGNIZED,
        detail=f"{where} is {type(value).__name__}, not an object",
    )


def extract_user_record(
    raw: Mapping[str, Any] | None, username: str, component: str
) -> UserRecord | None:
    """Resolve `raw`; None when the user is absent, raise when the shape is unknown."""
    lookup = resolve_user_response(raw, username, component)
    if lookup.status is LookupStatus.UNRECOGNIZED:
        raise UnrecognizedUserResponseShapeError(
            f"unexpected user response for {username!r}: {lookup.detail}"
        )
    return lookup.record
