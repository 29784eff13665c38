"""Configuration values sourced from environment variables."""

import os
from typing import Final

PINOT_CONTROLLER_URL: Final[str] = os.getenv(key="PINOT_CONTROLLER_URL", default="")
PINOT_USERNAME: Final[str] = os.getenv(key="PINOT_USERNAME", default="")
PINOT_PASSWORD: Final[str] = os.getenv(key="PINOT_PASSWORD", default="")
PINOT_TOKEN: Final[str] = os.getenv(key="PINOT_TOKEN", default="")
PINOT_DATABASE: Final[str] = os.getenv(key="PINOT_DATABASE", default="")
PINOT_TIMEOUT_SECONDS: Final[float] = float(os.getenv(key="PINOT_TIMEOUT_SECONDS", default="30"))

LOG_LEVEL: Final[str] = os.getenv(key="LOG_LEVEL", default="INFO")
LOGGER_NAME: Final[str] = os.getenv(key="LOGGER_NAME", default="pinot-engine")
LOG_COLOUR_ENABLED: Final[bool] = bool(
    os.getenv(key="LOG_COLOUR_ENABLED", default="True").upper() == "TRUE"
)
