import pytest

from src.enums import ResourceKind
from src.pinot_engine.desired.models import DesiredCatalog, DesiredSchema, DesiredTable, DesiredUser
from src.pinot_engine.plan.actions import CreateResource, DeleteResource, UpdateResource
from src.pinot_engine.plan.differ import KAFKA_CREDENTIALS_FIELD, Differ, DiffOptions
from src.pinot_engine.state.states import SchemaState, TableState, TrackedState, UserState

SECRET = "sasl.jaas.config"


def diff_one(resource, current, **options):
    catalog = DesiredCatalog(
        schemas=tuple(r for r in [resource] if isinstance(r, DesiredSchema)),
        tables=tuple(r for r in [resource] if isinstance(r, DesiredTable)),
        users=tuple(r for r in [resource] if isinstance(r, DesiredUser)),
    )
    live = TrackedState.of(current) if current is not None else TrackedState()
    return Differ().diff(catalog, live, DiffOptions(**options))


def alice(**overrides) -> DesiredUser:
    base = dict(
        username="alice",
        component="BROKER",
        role="USER",
        permissions=("READ",),
        tables=("events", "orders"),
    )
    base.update(overrides)
    return DesiredUser(**base)


def alice_state(**overrides) -> UserState:
    base = dict(
        username="alice",
        component="BROKER",
        role="USER",
        tables=("orders", "events"),
        permissions=("READ",),
        password="pw",
    )
    base.update(overrides)
    return UserState(**base)


# --- create / no-op ---


def test_untracked_resource_is_created(events_schema):
    (action,) = diff_one(DesiredSchema("events", events_schema), None)

    assert isinstance(action, CreateResource)
    assert (action.kind, action.resource_key) == (ResourceKind.SCHEMA, "events")
    assert action.describe() == "create schema events"


def test_key_order_and_whitespace_are_not_changes():
    desired = DesiredSchema("events", {"schemaName": "events", "a": {"x": 1, "y": 2}})
    current = SchemaState("events", {"a": {"y": 2, "x": 1}, "schemaName": "events"})

    assert diff_one(desired, current) == []


def test_changed_schema_lists_top_level_keys(events_schema):
    current = SchemaState("events", dict(events_schema, metricFieldSpecs=[]))

    (action,) = diff_one(DesiredSchema("events", events_schema), current)

    assert isinstance(action, UpdateResource)
    assert action.changed_fields == ("metricFieldSpecs",)
    assert action.describe() == "update schema events (metricFieldSpecs)"


# --- tables ---


def test_secret_in_desired_config_is_ignored(realtime_config):
    stream_map = {"streamType": "kafka", "stream.kafka.topic.name": "events", SECRET: "x"}
    declared = dict(realtime_config)
    declared["ingestionConfig"] = {"streamIngestionConfig": {"streamConfigMaps": [stream_map]}}

    actions = diff_one(
        DesiredTable("events", "REALTIME", declared),
        TableState("events", "REALTIME", realtime_config),
    )

    assert actions == []


def test_controller_added_fields_are_drift(realtime_config):
    live = dict(realtime_config, metadata={"customConfigs": {}})

    (action,) = diff_one(
        DesiredTable("events", "REALTIME", realtime_config),
        TableState("events", "REALTIME", live),
    )

    assert action.changed_fields == ("metadata",)


@pytest.mark.parametrize(
    "desired_creds, tracked_creds, changed",
    [
        (("u", "p"), ("u", "p"), False),
        ((None, None), ("", ""), False),
        (("u", "p"), (None, None), True),
        (("u", "new"), ("u", "old"), True),
        ((None, None), ("u", "p"), True),
    ],
)
def test_credential_changes(realtime_config, desired_creds, tracked_creds, changed):
    desired = DesiredTable(
        "events", "REALTIME", realtime_config,
        kafka_username=desired_creds[0], kafka_password=desired_creds[1],
    )
    current = TableState(
        "events", "REALTIME", realtime_config,
        kafka_username=tracked_creds[0], kafka_password=tracked_creds[1],
    )

    actions = diff_one(desired, current)

    if changed:
        assert actions[0].changed_fields == (KAFKA_CREDENTIALS_FIELD,)
    else:
        assert actions == []


# --- users ---


def test_user_lists_compare_as_sets():
    assert diff_one(alice(), alice_state()) == []


def test_user_field_changes():
    (action,) = diff_one(
        alice(role="ADMIN", tables=("events",), permissions=("READ", "UPDATE")),
        alice_state(),
    )
    assert action.changed_fields == ("role", "tables", "permissions")


def test_user_password_only_counts_when_declared_and_different():
    assert diff_one(alice(password=None), alice_state(password="pw")) == []
    assert diff_one(alice(password="pw"), alice_state(password="pw")) == []

    (action,) = diff_one(alice(password="new"), alice_state(password="pw"))
    assert action.changed_fields == ("password",)


# --- prune ---


def test_undeclared_resources_are_kept_without_prune():
    live = TrackedState.of(SchemaState("old"), UserState("bob", "SERVER"))
    assert Differ().diff(DesiredCatalog(), live) == []


def test_prune_deletes_every_undeclared_resource():
    live = TrackedState.of(SchemaState("old"), UserState("bob", "SERVER"))

    actions = Differ().diff(DesiredCatalog(), live, DiffOptions(prune=True))

    assert all(isinstance(a, DeleteResource) for a in actions)
    assert {a.describe() for a in actions} == {"delete schema old", "delete user bob|SERVER"}


def test_changed_identity_is_create_plus_prune(realtime_config):
    offline = {"tableName": "events_OFFLINE", "tableType": "OFFLINE"}
    desired = DesiredCatalog(tables=(DesiredTable("events", "REALTIME", realtime_config),))
    live = TrackedState.of(TableState("events", "OFFLINE", offline))

    actions = Differ().diff(desired, live, DiffOptions(prune=True))

    assert [a.describe() for a in actions] == [
        "create table events_REALTIME",
        "delete table events_OFFLINE",
    ]
