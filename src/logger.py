"""Logging configuration for the Pinot engine.

Every LOGGER record passes through SecretMaskingFilter before it is handled, so a
JAAS line or a password that ends up in an exception message (for example a
controller error body echoing the request) is masked on the console. The
formatters mask again after rendering so traceback text is covered too.
"""

import logging
import re
import typing
from enum import StrEnum

from src import settings

MASK = "***"

_SECRET_PATTERNS = (
    # password="..." inside a JAAS login module line
    re.compile(r'(password=")[^"]*(")'),
    # "password": "..." inside a JSON body
    re.compile(r'("password"\s*:\s*")[^"]*(")'),
    # 'password': '...' inside a repr'd mapping
    re.compile(r"('password'\s*:\s*')[^']*(')"),
)


class ConsoleFormat(StrEnum):
    """ANSI codes used by the colour formatter.

    <https://en.wikipedia.org/wiki/ANSI_escape_code#Select_Graphic_Rendition_parameters>
    """

    RESET = "\033[0m"

    BLACK = "\033[30m"
    RED = "\033[31m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    LIGHT_GREY = "\033[37m"

    HIGHLIGHT_RED = "\033[41m"
    BOLD = "\033[1m"


def mask_secrets(text: str) -> str:
    """Replace password values in `text` with MASK."""
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(rf"\g<1>{MASK}\g<2>", text)
    return text


class SecretMaskingFilter(logging.Filter):
    """Render the message once, mask it, and drop the args."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = mask_secrets(record.getMessage())
        record.args = None
        return True


class DefaultConsoleFormatter(logging.Formatter):
    """Plain console formatter: time, logger name, level and message.

    The whole rendered line is masked again, traceback included; the filter only
    sees the message.
    """

    fmt = "{asctime} - {name} - {levelname} - {message}"
    style = "{"
    validate = True

    def _formatted_message(self, *_: typing.Any, **__: typing.Any) -> str:
        return self.fmt

    def format(self, record: logging.LogRecord) -> str:
        formatter = logging.Formatter(
            self._formatted_message(record),
            style=self.style,  # type: ignore[arg-type]
            validate=self.validate,
        )
        return mask_secrets(formatter.format(record))


class ColourConsoleFormatter(DefaultConsoleFormatter):
    """Console formatter that colours each line by level."""

    COLOURS = {
        logging.DEBUG: ConsoleFormat.LIGHT_GREY,
        logging.INFO: ConsoleFormat.BLUE,
        logging.WARNING: ConsoleFormat.YELLOW,
        logging.ERROR: ConsoleFormat.RED,
        logging.CRITICAL: ConsoleFormat.BOLD + ConsoleFormat.HIGHLIGHT_RED + ConsoleFormat.BLACK,
    }

    def _formatted_message(self, record: logging.LogRecord) -> str:
        log_colour = self.COLOURS.get(record.levelno, ConsoleFormat.RESET)
        return f"{log_colour}{self.fmt}{ConsoleFormat.RESET}"


def build_handler(colour: bool = settings.LOG_COLOUR_ENABLED) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(settings.LOG_LEVEL)
    handler.setFormatter(ColourConsoleFormatter() if colour else DefaultConsoleFormatter())
    return handler


LOGGER = logging.getLogger(settings.LOGGER_NAME)
LOGGER.setLevel(settings.LOG_LEVEL)
LOGGER.addFilter(SecretMaskingFilter())
LOGGER.addHandler(build_handler())
