"""Shared constant values used across the Pinot engine."""

from typing import Final

SASL_JAAS_CONFIG_KEY: Final[str] = "sasl.jaas.config"
INGESTION_CONFIG_KEY: Final[str] = "ingestionConfig"
STREAM_INGESTION_CONFIG_KEY: Final[str] = "streamIngestionConfig"
STREAM_CONFIG_MAPS_KEY: Final[str] = "streamConfigMaps"

# Verbatim SCRAM login module line; values are embedded without escaping.
JAAS_CONFIG_TEMPLATE: Final[str] = (
    "org.apache.kafka.common.security.scram.ScramLoginModule required "
    'username="{username}" password="{password}";'
)

USER_IMPORT_SEPARATOR: Final[str] = "|"
DEFAULT_STATE_FILE: Final[str] = "pinot-state.json"
