"""
Kafka SASL credential handling for realtime table configs.

The credential is derived from `kafka_username` / `kafka_password`, injected
into the payload sent to the controller, and stripped again (see
documents.redact_secret) before anything is stored.

Known limitation: the template embeds both values verbatim. Double quotes or
backslashes in either value are not escaped.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from src.constants import (
    INGESTION_CONFIG_KEY,
    JAAS_CONFIG_TEMPLATE,
    SASL_JAAS_CONFIG_KEY,
    STREAM_CONFIG_MAPS_KEY,
    STREAM_INGESTION_CONFIG_KEY,
)
from src.pinot_engine.documents import JsonDocument
from src.pinot_engine.errors import IncompleteCredentialsError


def _is_supplied(value: str | None) -> bool:
    return value is not None and value != ""


def build_jaas_config(username: str | None, password: str | None) -> str | None:
    """
    Build the `sasl.jaas.config` line, or None when no credentials are given.

    Both-or-neither: one value alone, or a blank value, is an error.
    """
    has_username = _is_supplied(username)
    has_password = _is_supplied(password)

    if not has_username and not has_password:
        return None
    if has_username != has_password:
        raise IncompleteCredentialsError(
            "both kafka_username and kafka_password must be provided together"
        )
    if not str(username).strip() or not str(password).strip():
        raise IncompleteCredentialsError(
            "both kafka_username and kafka_password must be non-empty"
        )
    return JAAS_CONFIG_TEMPLATE.format(username=username, password=password)


def inject_jaas_config(document: Mapping[str, Any], jaas_config: str) -> JsonDocument:
    """
    Return a copy of `document` with `jaas_config` set in the stream config maps.

    Shapes at ingestionConfig.streamIngestionConfig.streamConfigMaps:
      - mapping        -> set the key in that mapping
      - non-empty list -> set the key on the first element only
                          (replaced by a new mapping if it is not one)
      - empty list, absent, or anything else -> one-element list
    """
    payload = copy.deepcopy(dict(document))

    ingestion = payload.get(INGESTION_CONFIG_KEY)
    if not isinstance(ingestion, dict):
        ingestion = {}
        payload[INGESTION_CONFIG_KEY] = ingestion

    stream_ingestion = ingestion.get(STREAM_INGESTION_CONFIG_KEY)
    if not isinstance(stream_ingestion, dict):
        stream_ingestion = {}
        ingestion[STREAM_INGESTION_CONFIG_KEY] = stream_ingestion

    config_maps = stream_ingestion.get(STREAM_CONFIG_MAPS_KEY)
    if isinstance(config_maps, dict):
        config_maps[SASL_JAAS_CONFIG_KEY] = jaas_config
    elif isinstance(config_maps, list) and config_maps:
        first = config_maps[0]
        if isinstance(first, dict):
            first[SASL_JAAS_CONFIG_KEY] = jaas_config
        else:
            config_maps[0] = {SASL_JAAS_CONFIG_KEY: jaas_config}
    else:
        stream_ingestion[STREAM_CONFIG_MAPS_KEY] = [{SASL_JAAS_CONFIG_KEY: jaas_config}]

    return payload
