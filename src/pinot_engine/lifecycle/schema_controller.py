"""
Schema lifecycle: create, read, replace, delete and import by name.

The declared name must equal the document's schemaName; a mismatch is
rejected before any call is made.
"""

from __future__ import annotations

from src.enums import ResourceKind
from src.logger import LOGGER
from src.pinot_engine.desired.models import DesiredSchema
from src.pinot_engine.documents import (
    JsonDocument,
    load_document,
    validate_schema_document,
    validate_schema_name,
)
from src.pinot_engine.errors import NotFoundError
from src.pinot_engine.lifecycle.ports import ControllerApi, OperationResult
from src.pinot_engine.state.states import SchemaState


class SchemaController:
    kind = ResourceKind.SCHEMA

    def __init__(self, client: ControllerApi) -> None:
        self._client = client

    def create(self, desired: DesiredSchema) -> OperationResult[SchemaState]:
        document = self._validated_document(desired)
        self._client.create_schema(document)
        LOGGER.info("Created schema %s", desired.schema_name)
        return OperationResult(state=SchemaState(desired.schema_name, document))

    def read(self, current: SchemaState) -> SchemaState | None:
        try:
            raw = self._client.get_schema(current.schema_name)
        except NotFoundError:
            return None
        return SchemaState(current.schema_name, raw)

    def update(self, desired: DesiredSchema, current: SchemaState) -> OperationResult[SchemaState]:
        document = self._validated_document(desired)
        self._client.update_schema(document)
        LOGGER.info("Replaced schema %s", desired.schema_name)
        return OperationResult(state=SchemaState(desired.schema_name, document))

    def delete(self, current: SchemaState) -> None:
        self._client.delete_schema(current.schema_name)
        LOGGER.info("Deleted schema %s", current.schema_name)

    def import_(self, resource_id: str) -> SchemaState:
        state = self.read(SchemaState(schema_name=resource_id))
        if state is None:
            raise NotFoundError(f"schema {resource_id!r} not found on the controller", status=404)
        return state

    @staticmethod
    def _validated_document(desired: DesiredSchema) -> JsonDocument:
        document = load_document(desired.schema)
        validate_schema_name(document, desired.schema_name)
        validate_schema_document(document)
        return document
