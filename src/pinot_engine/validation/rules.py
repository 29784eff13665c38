"""
Concrete validation rules.

- Centralised RuleCode (StrEnum)
- Model rules (desired only), state rules (desired + tracked state) and
  catalog rules (the whole desired catalog at once)
- A 'default_rule_set()' factory that returns (model_rules, state_rules, catalog_rules)

Rules convert the codec's exceptions into diagnostics so that every problem
in a manifest is reported in one pass, before any network call.
"""

from __future__ import annotations

from collections import Counter
from enum import StrEnum

from src.enums import ResourceKind
from src.pinot_engine.credentials import build_jaas_config
from src.pinot_engine.desired.models import (
    DesiredCatalog,
    DesiredResource,
    DesiredSchema,
    DesiredTable,
    DesiredUser,
)
from src.pinot_engine.documents import validate_schema_document, validate_schema_name
from src.pinot_engine.errors import IncompleteCredentialsError, ValidationError
from src.pinot_engine.identifiers import (
    format_table_id,
    normalize_component,
    validate_document_identity,
)
from src.pinot_engine.state.states import ResourceState
from src.pinot_engine.validation.diagnostics import Diagnostic, DiagnosticLevel

# ---------- Centralised rule codes (full words, no abbreviations) ----------


class RuleCode(StrEnum):
    """Stable codes so a diagnostic can be traced back to the rule that raised it."""

    SCHEMA_NAME_MATCHES = "SCHEMA_NAME_MATCHES"
    SCHEMA_FIELD_SPECS_WELL_FORMED = "SCHEMA_FIELD_SPECS_WELL_FORMED"
    TABLE_IDENTITY_CONSISTENT = "TABLE_IDENTITY_CONSISTENT"
    KAFKA_CREDENTIALS_COMPLETE = "KAFKA_CREDENTIALS_COMPLETE"
    USER_IDENTITY_VALID = "USER_IDENTITY_VALID"
    USER_CREATE_REQUIRES_PASSWORD = "USER_CREATE_REQUIRES_PASSWORD"
    RESOURCE_KEYS_UNIQUE = "RESOURCE_KEYS_UNIQUE"


def _error(resource: DesiredResource, code: str, message: str, hint: str = "") -> Diagnostic:
    return Diagnostic(
        resource_key=resource.resource_key,
        level=DiagnosticLevel.ERROR,
        code=code,
        message=message,
        hint=hint,
    )


# ---------- MODEL RULES (desired only) ----------


class SchemaNameMatchesDocument:
    """The declared schema name must equal the document's schemaName."""

    kind = ResourceKind.SCHEMA
    code = RuleCode.SCHEMA_NAME_MATCHES.value
    description = "schema_name must match schemaName in the schema document."

    def check(self, desired: DesiredSchema) -> list[Diagnostic]:
        try:
            validate_schema_name(desired.schema, desired.schema_name)
        except ValidationError as e:
            return [_error(desired, self.code, str(e), "Rename one side; names are never corrected.")]
        return []


class SchemaFieldSpecsWellFormed:
    """Field spec lists must hold objects with the keys the controller requires."""

    kind = ResourceKind.SCHEMA
    code = RuleCode.SCHEMA_FIELD_SPECS_WELL_FORMED.value
    description = "Schema field specs must carry name and dataType."

    def check(self, desired: DesiredSchema) -> list[Diagnostic]:
        try:
            validate_schema_document(desired.schema)
        except ValidationError as e:
            return [_error(desired, self.code, str(e))]
        return []


class TableIdentityConsistent:
    """Table type must be valid and embedded tableName/tableType must agree with it."""

    kind = ResourceKind.TABLE
    code = RuleCode.TABLE_IDENTITY_CONSISTENT.value
    description = "Declared table identity and table config must agree."

    def check(self, desired: DesiredTable) -> list[Diagnostic]:
        try:
            table_id = format_table_id(desired.table_name, desired.table_type)
            validate_document_identity(desired.table_config, table_id, desired.table_type)
        except ValidationError as e:
            return [_error(desired, self.code, str(e))]
        return []


class KafkaCredentialsComplete:
    """Kafka username and password are given together or not at all."""

    kind = ResourceKind.TABLE
    code = RuleCode.KAFKA_CREDENTIALS_COMPLETE.value
    description = "kafka_username and kafka_password must be provided together."

    def check(self, desired: DesiredTable) -> list[Diagnostic]:
        try:
            build_jaas_config(desired.kafka_username, desired.kafka_password)
        except IncompleteCredentialsError as e:
            return [_error(desired, self.code, str(e))]
        return []


class UserIdentityValid:
    """Username must be non-empty and the component one of CONTROLLER, BROKER, SERVER."""

    kind = ResourceKind.USER
    code = RuleCode.USER_IDENTITY_VALID.value
    description = "Users need a username and a known component."

    def check(self, desired: DesiredUser) -> list[Diagnostic]:
        findings: list[Diagnostic] = []
        if not desired.username.strip():
            findings.append(_error(desired, self.code, "username must not be empty"))
        try:
            normalize_component(desired.component)
        except ValidationError as e:
            findings.append(_error(desired, self.code, str(e)))
        return findings


# ---------- STATE RULES (desired + tracked state) ----------


class UserCreateRequiresPassword:
    """A user that is not tracked yet will be created, which needs a password."""

    kind = ResourceKind.USER
    code = RuleCode.USER_CREATE_REQUIRES_PASSWORD.value
    description = "Creating a user requires a non-empty password."

    def check(self, desired: DesiredUser, live: ResourceState | None) -> list[Diagnostic]:
        if live is not None or desired.password:
            return []
        return [
            _error(
                desired,
                self.code,
                "Creating a Pinot user requires a non-empty password.",
                "Set password, or import the existing user first.",
            )
        ]


# ---------- CATALOG RULES (whole desired catalog) ----------


class ResourceKeysUnique:
    """Two declarations of the same kind must not share a resource key."""

    code = RuleCode.RESOURCE_KEYS_UNIQUE.value
    description = "Each resource may be declared once."

    def check(self, desired: DesiredCatalog) -> list[Diagnostic]:
        counts = Counter((r.kind, r.resource_key) for r in desired.resources())
        return [
            Diagnostic(
                resource_key=key,
                level=DiagnosticLevel.ERROR,
                code=self.code,
                message=f"{kind.value} {key!r} is declared {count} times",
            )
            for (kind, key), count in counts.items()
            if count > 1
        ]


# ---------- default set ----------


def default_rule_set() -> tuple[tuple, tuple, tuple]:
    """Return (model_rules, state_rules, catalog_rules)."""
    model_rules = (
        SchemaNameMatchesDocument(),
        SchemaFieldSpecsWellFormed(),
        TableIdentityConsistent(),
        KafkaCredentialsComplete(),
        UserIdentityValid(),
    )
    state_rules = (UserCreateRequiresPassword(),)
    catalog_rules = (ResourceKeysUnique(),)
    return model_rules, state_rules, catalog_rules
