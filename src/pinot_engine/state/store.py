"""
JSON state file for TrackedState.

Layout::

    {"version": 1, "resources": [{"kind": "table", "key": "events_REALTIME", "attributes": {...}}]}

Notes
-----
- Table configs are stored redacted; the Kafka credential inputs and user
  passwords are stored because the controller never returns them. Keep the
  file private.
- A missing file loads as an empty TrackedState.
- Writes go to a sibling temp file first and are then renamed into place.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any

from src.enums import ResourceKind
from src.pinot_engine.errors import ConfigurationError
from src.pinot_engine.state.states import (
    ResourceState,
    SchemaState,
    TableState,
    TrackedState,
    UserState,
)

STATE_FILE_VERSION = 1

_STATE_TYPES: dict[ResourceKind, type] = {
    ResourceKind.SCHEMA: SchemaState,
    ResourceKind.TABLE: TableState,
    ResourceKind.USER: UserState,
}


def state_to_dict(state: TrackedState) -> dict[str, Any]:
    resources = [
        {"kind": r.kind.value, "key": r.resource_key, "attributes": asdict(r)}
        for r in sorted(state, key=lambda r: (r.kind.apply_rank, r.resource_key))
    ]
    return {"version": STATE_FILE_VERSION, "resources": resources}


def state_from_dict(data: dict[str, Any]) -> TrackedState:
    if not isinstance(data, dict):
        raise ConfigurationError(f"State file must hold a JSON object, got {type(data).__name__}")
    version = data.get("version")
    if version != STATE_FILE_VERSION:
        raise ConfigurationError(f"Unsupported state file version: {version!r}")
    resources = data.get("resources", [])
    if not isinstance(resources, list):
        raise ConfigurationError("State file 'resources' must be a list.")
    return TrackedState.of(*(_resource_from_dict(entry) for entry in resources))


def _resource_from_dict(entry: dict[str, Any]) -> ResourceState:
    try:
        kind = ResourceKind(entry["kind"])
        attributes = dict(entry["attributes"])
    except (KeyError, ValueError, TypeError) as e:
        raise ConfigurationError(f"Malformed state entry: {entry!r}") from e

    if kind is ResourceKind.USER:
        attributes["tables"] = tuple(attributes.get("tables") or ())
        attributes["permissions"] = tuple(attributes.get("permissions") or ())
    try:
        return _STATE_TYPES[kind](**attributes)
    except TypeError as e:
        raise ConfigurationError(f"Malformed {kind.value} attributes: {e}") from e


class StateStore:
    """Load and save TrackedState as a JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> TrackedState:
        if not self.path.exists():
            return TrackedState()
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"State file {self.path} is not valid JSON: {e}") from e
        return state_from_dict(data)

    def save(self, state: TrackedState) -> None:
        temporary = self.path.with_name(f"{self.path.name}.tmp")
        temporary.write_text(json.dumps(state_to_dict(state), indent=2, sort_keys=True))
        os.replace(temporary, self.path)
