"""
Load a DesiredCatalog from a YAML manifest.

Manifest shape::

    schemas:
      - schema_name: events
        schema_file: schemas/events.json      # or `schema:` inline / JSON string
    tables:
      - table_name: events
        table_type: REALTIME
        table_config_file: tables/events.json
        kafka_username: ${KAFKA_USERNAME}
        kafka_password: ${KAFKA_PASSWORD}
    users:
      - username: alice
        component: BROKER
        role: USER
        permissions: [READ]
        tables: [events]
        password: ${ALICE_PASSWORD}

Notes
-----
- `*_file` paths are relative to the manifest's directory.
- A scalar of the exact form `${VAR}` resolves from the environment; an unset
  variable resolves to None (so unset Kafka credentials mean "no credential").
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from src.pinot_engine.desired.models import (
    DesiredCatalog,
    DesiredSchema,
    DesiredTable,
    DesiredUser,
)
from src.pinot_engine.documents import JsonDocument, load_document
from src.pinot_engine.errors import ConfigurationError


def load_catalog(manifest_path: str | Path) -> DesiredCatalog:
    """Read the manifest at `manifest_path` and build the desired catalog."""
    path = Path(manifest_path)
    try:
        with path.open("r") as f:
            manifest = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read manifest {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Manifest {path} is not valid YAML: {e}") from e

    return parse_catalog(manifest or {}, base_dir=path.parent)


def parse_catalog(manifest: Mapping[str, Any], base_dir: Path | None = None) -> DesiredCatalog:
    """Build a DesiredCatalog from an already-parsed manifest mapping."""
    if not isinstance(manifest, Mapping):
        raise ConfigurationError("Manifest must be a mapping with schemas/tables/users.")
    base = base_dir or Path.cwd()

    schemas = tuple(_schema(entry, base) for entry in _entries(manifest, "schemas"))
    tables = tuple(_table(entry, base) for entry in _entries(manifest, "tables"))
    users = tuple(_user(entry) for entry in _entries(manifest, "users"))
    return DesiredCatalog(schemas=schemas, tables=tables, users=users)


# ---------- entries ----------


def _schema(entry: Mapping[str, Any], base: Path) -> DesiredSchema:
    return DesiredSchema(
        schema_name=_required(entry, "schema_name", "schemas"),
        schema=_document(entry, "schema", base),
    )


def _table(entry: Mapping[str, Any], base: Path) -> DesiredTable:
    return DesiredTable(
        table_name=_required(entry, "table_name", "tables"),
        table_type=_required(entry, "table_type", "tables"),
        table_config=_document(entry, "table_config", base),
        kafka_username=_optional(entry, "kafka_username"),
        kafka_password=_optional(entry, "kafka_password"),
    )


def _user(entry: Mapping[str, Any]) -> DesiredUser:
    return DesiredUser(
        username=_required(entry, "username", "users"),
        component=_required(entry, "component", "users"),
        role=_optional(entry, "role") or "",
        permissions=_string_list(entry, "permissions"),
        tables=_string_list(entry, "tables"),
        password=_optional(entry, "password"),
    )


# ---------- helpers ----------


def _entries(manifest: Mapping[str, Any], section: str) -> list[Mapping[str, Any]]:
    entries = manifest.get(section) or []
    if not isinstance(entries, list) or not all(isinstance(e, Mapping) for e in entries):
        raise ConfigurationError(f"'{section}' must be a list of mappings.")
    return entries


def _resolve(value: Any) -> Any:
    """Resolve a `${VAR}` placeholder from the environment; other values pass through."""
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        return os.environ.get(value[2:-1])
    return value


def _required(entry: Mapping[str, Any], key: str, section: str) -> str:
    value = _resolve(entry.get(key))
    if value is None or str(value).strip() == "":
        raise ConfigurationError(f"Every entry in '{section}' needs '{key}'.")
    return str(value)


def _optional(entry: Mapping[str, Any], key: str) -> str | None:
    value = _resolve(entry.get(key))
    return None if value is None else str(value)


def _string_list(entry: Mapping[str, Any], key: str) -> tuple[str, ...]:
    value = entry.get(key) or []
    if isinstance(value, str):
        value = [value]
    items = []
    for item in value:
        resolved = _resolve(item)
        if resolved is None:
            raise ConfigurationError(f"Environment variable for {item} in '{key}' is not set.")
        items.append(str(resolved))
    return tuple(items)


def _document(entry: Mapping[str, Any], key: str, base: Path) -> JsonDocument:
    """Read `key` inline (mapping or JSON string) or from `<key>_file`."""
    file_key = f"{key}_file"
    if file_key in entry:
        document_path = base / str(_resolve(entry[file_key]))
        try:
            text = document_path.read_text()
        except OSError as e:
            raise ConfigurationError(f"Cannot read {file_key} {document_path}: {e}") from e
        return load_document(text)
    if key not in entry:
        raise ConfigurationError(f"Entry needs '{key}' or '{file_key}'.")
    return load_document(entry[key])
