"""
Identifier utilities for the Pinot engine.

This module defines:
- Canonical table identity dataclass: TableIdentifier.
- Helpers to format, split, and parse composite table ids ("<logical>_<TYPE>").
- Identity checks between a declared table and its embedded JSON fields.
- User keys and import ids.

Conventions:
- Verbs: format_*, split_*, parse_*, normalize_*, validate_*.
- Use `table_id` for the composite string and `logical_name` for the bare name.
- Table types are upper-cased before use; lookups are case-insensitive.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from src.constants import USER_IMPORT_SEPARATOR
from src.enums import Component, TableType
from src.pinot_engine.errors import (
    AmbiguousTableIdError,
    IdentityMismatchError,
    InvalidTableTypeError,
    ValidationError,
)

# Longest suffix first so the match is unambiguous.
_TABLE_ID_SUFFIXES: tuple[tuple[str, TableType], ...] = tuple(
    sorted(
        ((f"_{table_type.value}", table_type) for table_type in TableType),
        key=lambda item: len(item[0]),
        reverse=True,
    )
)


# -----------------------------
# Core identity data structure
# -----------------------------


@dataclass(frozen=True)
class TableIdentifier:
    """Logical table name plus its physical type."""

    logical_name: str
    table_type: TableType

    @property
    def table_id(self) -> str:
        """Composite id as the controller knows it: 'events_OFFLINE'."""
        return format_table_id(self.logical_name, self.table_type)


# -----------------------------
# Table ids
# -----------------------------


def normalize_table_type(table_type: str) -> TableType:
    """Trim and upper-case `table_type`; raise InvalidTableTypeError for anything else."""
    text = str(table_type or "").strip().upper()
    try:
        return TableType(text)
    except ValueError:
        allowed = ", ".join(t.value for t in TableType)
        raise InvalidTableTypeError(
            f"Invalid table type {table_type!r}; expected one of: {allowed}"
        ) from None


def format_table_id(logical_name: str, table_type: str) -> str:
    """
    Build the composite id '<logical>_<TYPE>'.

    Examples:
        format_table_id("events", "offline") -> "events_OFFLINE"
    """
    normalized_type = normalize_table_type(table_type)
    logical = str(logical_name or "").strip()
    if logical == "":
        raise ValidationError("Logical table name must not be empty.")
    return f"{logical}_{normalized_type.value}"


def split_table_id(table_id: str) -> tuple[str, str]:
    """
    Split 'events_OFFLINE' into ('events', 'OFFLINE').

    When no known suffix matches, the whole id is returned as the logical name
    with an empty type. Callers needing a usable identity use parse_table_id.
    """
    for suffix, table_type in _TABLE_ID_SUFFIXES:
        if table_id.endswith(suffix):
            return table_id[: -len(suffix)], table_type.value
    return table_id, ""


def parse_table_id(table_id: str) -> TableIdentifier:
    """Parse a composite id, failing fast when the identity is partial."""
    logical_name, table_type = split_table_id(str(table_id or "").strip())
    if not table_type or not logical_name:
        raise AmbiguousTableIdError(
            f"Table id {table_id!r} must be in format tableName_TYPE "
            "(e.g., myTable_OFFLINE or myTable_REALTIME)"
        )
    return TableIdentifier(logical_name=logical_name, table_type=TableType(table_type))


def validate_document_identity(
    document: Mapping[str, Any],
    expected_table_id: str,
    expected_table_type: str,
) -> None:
    """
    Check the embedded `tableName` / `tableType` against the declared identity.

    Missing or empty fields are accepted as-is; present values must agree.
    `tableType` is compared case-insensitively.
    """
    embedded_name = document.get("tableName")
    if embedded_name not in (None, "") and embedded_name != expected_table_id:
        raise IdentityMismatchError(
            f"The table configuration name must be {expected_table_id}, got {embedded_name!r}"
        )

    embedded_type = document.get("tableType")
    expected_type = str(expected_table_type).strip().upper()
    if embedded_type not in (None, ""):
        if not isinstance(embedded_type, str) or embedded_type.strip().upper() != expected_type:
            raise IdentityMismatchError(
                f"The table configuration type must be {expected_type}, got {embedded_type!r}"
            )


# -----------------------------
# Users
# -----------------------------


def normalize_component(component: str) -> Component:
    """Trim and upper-case a component name; raise ValidationError when unknown."""
    text = str(component or "").strip().upper()
    try:
        return Component(text)
    except ValueError:
        allowed = ", ".join(c.value for c in Component)
        raise ValidationError(
            f"Invalid component {component!r}; expected one of: {allowed}"
        ) from None


def format_user_key(username: str, component: str) -> str:
    """Controller wrapper key for a user: 'alice_BROKER'."""
    return f"{username}_{str(component).strip().upper()}"


def format_user_import_id(username: str, component: str) -> str:
    """Import id and tracked-state key for a user: 'alice|BROKER'."""
    return f"{username}{USER_IMPORT_SEPARATOR}{str(component).strip().upper()}"


def parse_user_import_id(import_id: str) -> tuple[str, Component]:
    """Parse 'alice|BROKER' into ('alice', Component.BROKER)."""
    username, separator, component = str(import_id or "").partition(USER_IMPORT_SEPARATOR)
    username = username.strip()
    if not separator or not username or not component.strip():
        raise ValidationError(
            f"User import id {import_id!r} must be in format username|COMPONENT "
            "(e.g., alice|CONTROLLER)"
        )
    return username, normalize_component(component)
