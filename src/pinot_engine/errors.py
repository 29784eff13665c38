"""
Exception hierarchy for the Pinot engine.

- ValidationError and subclasses: raised before any network call; never auto-corrected.
- TransportError / NotFoundError: non-2xx controller responses or network failures.
- Everything derives from PinotEngineError so callers can catch one base type.
"""

from __future__ import annotations


class PinotEngineError(Exception):
    """Base error for the Pinot engine."""


class ConfigurationError(PinotEngineError):
    """Controller configuration is missing or malformed."""


class ValidationError(PinotEngineError):
    """A declared resource failed validation."""


class InvalidTableTypeError(ValidationError):
    """Table type is not OFFLINE or REALTIME."""


class AmbiguousTableIdError(ValidationError):
    """A table id does not end with a known table type suffix."""


class IdentityMismatchError(ValidationError):
    """Embedded tableName/tableType disagree with the declared identity."""


class SchemaNameMismatchError(ValidationError):
    """Embedded schemaName disagrees with the declared schema name."""


class IncompleteCredentialsError(PinotEngineError):
    """Only one of the Kafka username/password was supplied, or one is blank."""


class UnrecognizedUserResponseShapeError(PinotEngineError):
    """A user lookup returned a body none of the known shapes match."""


class InvalidTransitionError(PinotEngineError):
    """A resource lifecycle transition that the state machine forbids."""


class TransportError(PinotEngineError):
    """
    A controller call failed.

    status is None for network-level failures (connection refused, timeout).
    body is the raw response text, kept verbatim for diagnosis.
    """

    def __init__(self, message: str, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    @classmethod
    def from_response(cls, method: str, url: str, status: int, body: str) -> TransportError:
        """Build the right subclass for an HTTP error status."""
        message = f"{method} {url} failed: API error (status {status}): {body}"
        error_type = NotFoundError if status == 404 else cls
        return error_type(message, status=status, body=body)


class NotFoundError(TransportError):
    """The controller answered 404: the resource is confirmed absent."""


class TableDeletionError(PinotEngineError):
    """Both the primary and the fallback table delete failed."""

    def __init__(self, table_id: str, primary: Exception, fallback: Exception) -> None:
        super().__init__(
            f"Could not delete table {table_id}: "
            f"logical delete failed: {primary}; fallback delete failed: {fallback}"
        )
        self.table_id = table_id
        self.primary = primary
        self.fallback = fallback
