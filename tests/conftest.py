import copy

import pytest

from src.pinot_engine.errors import NotFoundError


class FakeControllerApi:
    """
    In-memory stand-in for ControllerClient.

    Records every call as a tuple in `calls`. Put an exception in
    `failures[method_name]` to make that method raise before it mutates anything.
    GET /tables responses are stored wrapped under the table type, the way the
    controller answers.
    """

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.failures: dict[str, Exception] = {}
        self.schemas: dict[str, dict] = {}
        self.tables: dict[str, dict] = {}
        self.users: dict[tuple[str, str], dict] = {}

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.failures:
            raise self.failures[name]

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]

    # ----- schemas -----

    def create_schema(self, schema: dict) -> None:
        self._record("create_schema", copy.deepcopy(schema))
        self.schemas[schema["schemaName"]] = copy.deepcopy(schema)

    def get_schema(self, schema_name: str) -> dict:
        self._record("get_schema", schema_name)
        if schema_name not in self.schemas:
            raise NotFoundError(f"GET /schemas/{schema_name} failed", status=404)
        return copy.deepcopy(self.schemas[schema_name])

    def update_schema(self, schema: dict) -> None:
        self._record("update_schema", copy.deepcopy(schema))
        self.schemas[schema["schemaName"]] = copy.deepcopy(schema)

    def delete_schema(self, schema_name: str) -> None:
        self._record("delete_schema", schema_name)
        if self.schemas.pop(schema_name, None) is None:
            raise NotFoundError(f"DELETE /schemas/{schema_name} failed", status=404)

    # ----- tables -----

    def _store_table(self, table_config: dict) -> None:
        table_type = str(table_config.get("tableType", "OFFLINE")).upper()
        table_id = table_config.get("tableName") or "unnamed"
        self.tables[table_id] = {table_type: copy.deepcopy(table_config)}

    def create_table(self, table_config: dict) -> None:
        self._record("create_table", copy.deepcopy(table_config))
        self._store_table(table_config)

    def get_table(self, table_id: str) -> dict:
        self._record("get_table", table_id)
        if table_id not in self.tables:
            raise NotFoundError(f"GET /tables/{table_id} failed", status=404)
        return copy.deepcopy(self.tables[table_id])

    def update_table(self, table_config: dict) -> None:
        self._record("update_table", copy.deepcopy(table_config))
        self._store_table(table_config)

    def delete_table(self, logical_name: str, table_type: str) -> None:
        self._record("delete_table", logical_name, table_type)
        table_id = f"{logical_name}_{table_type.upper()}"
        if self.tables.pop(table_id, None) is None:
            raise NotFoundError(f"DELETE /tables/{logical_name} failed", status=404)

    def delete_table_by_id(self, table_id: str) -> None:
        self._record("delete_table_by_id", table_id)
        if self.tables.pop(table_id, None) is None:
            raise NotFoundError(f"DELETE /tables/{table_id} failed", status=404)

    def reload_table_segments(self, logical_name: str, table_type: str) -> None:
        self._record("reload_table_segments", logical_name, table_type)

    # ----- users -----

    def create_user(self, user: dict) -> None:
        self._record("create_user", copy.deepcopy(user))
        stored = {k: v for k, v in user.items() if k != "password"}
        self.users[(user["username"], user["component"].upper())] = stored

    def get_user(self, username: str, component: str) -> dict:
        self._record("get_user", username, component)
        user = self.users.get((username, component.upper()))
        return copy.deepcopy(user) if user is not None else {}

    def update_user(self, user: dict) -> None:
        self._record("update_user", copy.deepcopy(user))
        stored = {k: v for k, v in user.items() if k != "password"}
        self.users[(user["username"], user["component"].upper())] = stored

    def delete_user(self, username: str, component: str) -> None:
        self._record("delete_user", username, component)
        self.users.pop((username, component.upper()), None)


class FakeLogger:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def _log(self, level: str, msg: str, *args) -> None:
        # match logging API: %-style formatting
        self.messages.append((level, msg % args if args else msg))

    def info(self, msg: str, *args) -> None:
        self._log("info", msg, *args)

    def warning(self, msg: str, *args) -> None:
        self._log("warning", msg, *args)

    def error(self, msg: str, *args) -> None:
        self._log("error", msg, *args)

    def texts(self, level: str | None = None) -> list[str]:
        return [text for lvl, text in self.messages if level is None or lvl == level]


@pytest.fixture
def fake_api() -> FakeControllerApi:
    return FakeControllerApi()


@pytest.fixture
def fake_logger() -> FakeLogger:
    return FakeLogger()


@pytest.fixture
def realtime_config() -> dict:
    return {
        "tableName": "events_REALTIME",
        "tableType": "REALTIME",
        "segmentsConfig": {"schemaName": "events", "replication": "1"},
        "ingestionConfig": {
            "streamIngestionConfig": {
                "streamConfigMaps": [
                    {"streamType": "kafka", "stream.kafka.topic.name": "events"}
                ]
            }
        },
    }


@pytest.fixture
def events_schema() -> dict:
    return {
        "schemaName": "events",
        "dimensionFieldSpecs": [{"name": "id", "dataType": "STRING"}],
        "metricFieldSpecs": [{"name": "count", "dataType": "LONG"}],
        "dateTimeFieldSpecs": [
            {
                "name": "ts",
                "dataType": "LONG",
                "format": "1:MILLISECONDS:EPOCH",
                "granularity": "1:MILLISECONDS",
            }
        ],
    }
