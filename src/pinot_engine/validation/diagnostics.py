"""
Diagnostics primitives shared by the validator, rules and lifecycle controllers.

- DiagnosticLevel: error/warning/info
- Diagnostic: a single finding about one resource
- ValidationReport: an immutable bag of diagnostics with a convenience .ok flag

Notes
-----
- `resource_key` is the tracked-state key of the resource (schema name,
  "<logical>_<TYPE>", or "<username>|<COMPONENT>"). Use "" for global findings.
- Codes are UPPER_SNAKE_CASE with full words, e.g., "SCHEMA_NAME_MATCHES".
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TypeAlias

ResourceKey: TypeAlias = str


class DiagnosticLevel(StrEnum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """
    A single finding.

    resource_key:
        Tracked-state key of the resource, or "" for global diagnostics.
    code:
        Stable identifier in UPPER_SNAKE_CASE.
    message:
        One-line human-readable message. Never contains secrets.
    hint:
        Optional guidance; empty string means "no hint".
    """

    resource_key: ResourceKey
    level: DiagnosticLevel
    code: str
    message: str
    hint: str = ""


@dataclass(frozen=True, slots=True)
class ValidationReport:
    """Immutable bag of diagnostics with a convenience 'ok' property."""

    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        return not any(d.level == DiagnosticLevel.ERROR for d in self.diagnostics)

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.level == DiagnosticLevel.ERROR)

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.level == DiagnosticLevel.WARNING)
