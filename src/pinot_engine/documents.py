"""
Document normalisation for schema and table JSON.

Table configurations are passthrough trees (`dict[str, Any]`): fields the
controller adds are never dropped. Every transformation here returns a new
tree; inputs are never mutated.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from typing import Any, TypeAlias

from src.constants import (
    INGESTION_CONFIG_KEY,
    SASL_JAAS_CONFIG_KEY,
    STREAM_CONFIG_MAPS_KEY,
    STREAM_INGESTION_CONFIG_KEY,
)
from src.enums import TableType
from src.pinot_engine.errors import SchemaNameMismatchError, ValidationError

JsonDocument: TypeAlias = dict[str, Any]

_FIELD_SPEC_KEYS = ("dimensionFieldSpecs", "metricFieldSpecs", "dateTimeFieldSpecs")
_DATE_TIME_REQUIRED = ("format", "granularity")


# ---------- parsing / comparison ----------


def load_document(text: str | Mapping[str, Any]) -> JsonDocument:
    """Parse a JSON object (or copy a mapping); anything else is a ValidationError."""
    if isinstance(text, Mapping):
        return copy.deepcopy(dict(text))
    try:
        document = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise ValidationError(f"Document is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise ValidationError(f"Document must be a JSON object, got {type(document).__name__}")
    return document


def canonical_json(document: Mapping[str, Any]) -> str:
    """Key-sorted, whitespace-free JSON; two documents are equal when these strings are."""
    return json.dumps(document, sort_keys=True, separators=(",", ":"))


def documents_equal(left: Mapping[str, Any], right: Mapping[str, Any]) -> bool:
    return canonical_json(left) == canonical_json(right)


def changed_keys(desired: Mapping[str, Any], live: Mapping[str, Any]) -> tuple[str, ...]:
    """Sorted top-level keys whose values differ (added, removed or changed)."""
    keys = set(desired) | set(live)
    return tuple(
        sorted(
            key
            for key in keys
            if key not in desired
            or key not in live
            or canonical_json({"v": desired[key]}) != canonical_json({"v": live[key]})
        )
    )


# ---------- schemas ----------


def schema_name_of(document: Mapping[str, Any]) -> str:
    """The `schemaName` used in PUT/DELETE paths."""
    name = document.get("schemaName")
    if not isinstance(name, str) or not name:
        raise ValidationError("schema name not found")
    return name


def validate_schema_name(document: Mapping[str, Any], declared_name: str) -> None:
    """The embedded schemaName must equal the declared name exactly."""
    embedded = document.get("schemaName")
    if embedded != declared_name:
        raise SchemaNameMismatchError(
            f"The schema_name attribute ({declared_name}) must match the schemaName "
            f"in the JSON configuration ({embedded})"
        )


def validate_schema_document(document: Mapping[str, Any]) -> None:
    """
    Structural check of the field spec lists.

    Each list must hold mappings with `name` and `dataType`; date-time specs
    also need `format` and `granularity`. Other keys pass through unchecked.
    """
    for key in _FIELD_SPEC_KEYS:
        specs = document.get(key)
        if specs is None:
            continue
        if not isinstance(specs, list):
            raise ValidationError(f"'{key}' must be a list of field specs")
        for position, spec in enumerate(specs):
            if not isinstance(spec, Mapping):
                raise ValidationError(f"'{key}[{position}]' must be an object")
            required = ("name", "dataType")
            if key == "dateTimeFieldSpecs":
                required = required + _DATE_TIME_REQUIRED
            missing = [field for field in required if not spec.get(field)]
            if missing:
                raise ValidationError(f"'{key}[{position}]' is missing {missing}")


# ---------- tables ----------


def table_name_of(document: Mapping[str, Any]) -> str:
    """The `tableName` used in the PUT path."""
    name = document.get("tableName")
    if not isinstance(name, str) or not name:
        raise ValidationError("table name not found")
    return name


def extract_physical_config(
    raw: Mapping[str, Any], table_type: str | None = None
) -> JsonDocument:
    """
    Unwrap a GET /tables response.

    The controller wraps the live config under "OFFLINE" or "REALTIME". The
    requested type is tried first, then OFFLINE, then REALTIME. A response
    without either wrapper is returned unchanged.
    """
    candidates: list[str] = [t.value for t in TableType]
    if table_type:
        preferred = str(table_type).strip().upper()
        candidates = [preferred, *(c for c in candidates if c != preferred)]

    for key in candidates:
        wrapped = raw.get(key)
        if isinstance(wrapped, Mapping):
            return dict(wrapped)
    return dict(raw)


def redact_secret(document: Mapping[str, Any]) -> JsonDocument:
    """
    Return a deep copy without `sasl.jaas.config` in the stream config maps.

    Handles both shapes of `streamConfigMaps`: a single mapping, or a list of
    mappings. List order is kept and non-mapping elements are left alone.
    """
    redacted = copy.deepcopy(dict(document))

    ingestion = redacted.get(INGESTION_CONFIG_KEY)
    if not isinstance(ingestion, dict):
        return redacted
    stream_ingestion = ingestion.get(STREAM_INGESTION_CONFIG_KEY)
    if not isinstance(stream_ingestion, dict):
        return redacted

    config_maps = stream_ingestion.get(STREAM_CONFIG_MAPS_KEY)
    if isinstance(config_maps, dict):
        config_maps.pop(SASL_JAAS_CONFIG_KEY, None)
    elif isinstance(config_maps, list):
        for element in config_maps:
            if isinstance(element, dict):
                element.pop(SASL_JAAS_CONFIG_KEY, None)
    return redacted
