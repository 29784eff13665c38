"""
Table lifecycle for OFFLINE and REALTIME tables.

Responsibilities
----------------
- Check the declared identity against the embedded tableName/tableType.
- Inject the Kafka SASL credential into the outgoing payload only; what is
  kept in state is always redacted.
- After a replace, ask the controller to reload segments. A failed reload
  does not fail the update; it becomes a WARNING diagnostic.
- Delete through DELETE /tables/{logical}?type= and fall back to the
  composite-id path when that fails.
"""

from __future__ import annotations

import copy
from dataclasses import replace

from src.enums import ResourceKind
from src.logger import LOGGER
from src.pinot_engine.credentials import build_jaas_config, inject_jaas_config
from src.pinot_engine.desired.models import DesiredTable
from src.pinot_engine.documents import JsonDocument, extract_physical_config, redact_secret
from src.pinot_engine.errors import NotFoundError, PinotEngineError, TableDeletionError
from src.pinot_engine.identifiers import (
    format_table_id,
    normalize_table_type,
    parse_table_id,
    validate_document_identity,
)
from src.pinot_engine.lifecycle.ports import ControllerApi, OperationResult
from src.pinot_engine.state.states import TableState
from src.pinot_engine.validation.diagnostics import Diagnostic, DiagnosticLevel

SEGMENT_RELOAD_FAILED = "SEGMENT_RELOAD_FAILED"


class TableController:
    kind = ResourceKind.TABLE

    def __init__(self, client: ControllerApi) -> None:
        self._client = client

    # ---------- create / update ----------

    def create(self, desired: DesiredTable) -> OperationResult[TableState]:
        payload, jaas_config = self._prepare_payload(desired)
        self._client.create_table(payload)
        state = self._state_after_write(desired, payload, jaas_config)
        LOGGER.info("Created table %s", state.table_id)
        return OperationResult(state=state)

    def update(self, desired: DesiredTable, current: TableState) -> OperationResult[TableState]:
        payload, jaas_config = self._prepare_payload(desired)
        self._client.update_table(payload)
        state = self._state_after_write(desired, payload, jaas_config)
        LOGGER.info("Replaced table %s", state.table_id)

        diagnostics: tuple[Diagnostic, ...] = ()
        try:
            self._client.reload_table_segments(state.table_name, state.table_type)
        except PinotEngineError as e:
            message = f"Updated table {state.table_id} but segment reload failed: {e}"
            LOGGER.warning("%s", message)
            diagnostics = (
                Diagnostic(
                    resource_key=state.table_id,
                    level=DiagnosticLevel.WARNING,
                    code=SEGMENT_RELOAD_FAILED,
                    message=message,
                ),
            )
        return OperationResult(state=state, diagnostics=diagnostics)

    # ---------- read / import ----------

    def read(self, current: TableState) -> TableState | None:
        try:
            raw = self._client.get_table(current.table_id)
        except NotFoundError:
            return None
        config = redact_secret(extract_physical_config(raw, current.table_type))
        # The controller never reveals the credential; keep the inputs, drop the derived value.
        return replace(current, table_config=config, sasl_jaas_config=None)

    def import_(self, resource_id: str) -> TableState:
        identifier = parse_table_id(resource_id)
        placeholder = TableState(
            table_name=identifier.logical_name, table_type=identifier.table_type.value
        )
        state = self.read(placeholder)
        if state is None:
            raise NotFoundError(f"table {resource_id!r} not found on the controller", status=404)
        return state

    # ---------- delete ----------

    def delete(self, current: TableState) -> None:
        table_id = current.table_id
        try:
            self._client.delete_table(current.table_name, current.table_type)
        except NotFoundError:
            LOGGER.info("Table %s was already absent", table_id)
            return
        except PinotEngineError as primary:
            try:
                self._client.delete_table_by_id(table_id)
            except PinotEngineError as fallback:
                raise TableDeletionError(table_id, primary, fallback) from fallback
        LOGGER.info("Deleted table %s", table_id)

    # ---------- helpers ----------

    @staticmethod
    def _prepare_payload(desired: DesiredTable) -> tuple[JsonDocument, str | None]:
        """Validate identity and credentials, then build the outgoing payload."""
        table_id = format_table_id(desired.table_name, desired.table_type)
        validate_document_identity(desired.table_config, table_id, desired.table_type)
        jaas_config = build_jaas_config(desired.kafka_username, desired.kafka_password)
        if jaas_config is None:
            return copy.deepcopy(desired.table_config), None
        return inject_jaas_config(desired.table_config, jaas_config), jaas_config

    @staticmethod
    def _state_after_write(
        desired: DesiredTable, payload: JsonDocument, jaas_config: str | None
    ) -> TableState:
        return TableState(
            table_name=desired.table_name.strip(),
            table_type=normalize_table_type(desired.table_type).value,
            table_config=redact_secret(payload),
            kafka_username=desired.kafka_username,
            kafka_password=desired.kafka_password,
            sasl_jaas_config=jaas_config,
        )
