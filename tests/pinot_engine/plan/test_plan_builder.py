from src.enums import ResourceKind
from src.pinot_engine.desired.models import DesiredSchema, DesiredTable, DesiredUser
from src.pinot_engine.plan.actions import CreateResource, DeleteResource, UpdateResource
from src.pinot_engine.plan.plan_builder import Plan, PlanBuilder
from src.pinot_engine.state.states import SchemaState, TableState, UserState


def create(resource) -> CreateResource:
    return CreateResource(kind=resource.kind, resource_key=resource.resource_key, desired=resource)


def delete(state) -> DeleteResource:
    return DeleteResource(kind=state.kind, resource_key=state.resource_key, current=state)


def test_creates_follow_dependency_order_then_key():
    actions = [
        create(DesiredUser("alice", "BROKER", "USER", ("READ",))),
        create(DesiredTable("b", "OFFLINE", {})),
        create(DesiredTable("a", "OFFLINE", {})),
        create(DesiredSchema("events", {})),
    ]

    plan = PlanBuilder().build(actions)

    assert [a.describe() for a in plan.actions] == [
        "create schema events",
        "create table a_OFFLINE",
        "create table b_OFFLINE",
        "create user alice|BROKER",
    ]


def test_deletes_run_last_in_reverse_dependency_order():
    schema = SchemaState("events")
    table = TableState("events", "OFFLINE")
    user = UserState("alice", "BROKER")
    update = UpdateResource(
        kind=ResourceKind.SCHEMA,
        resource_key="orders",
        desired=DesiredSchema("orders", {}),
        current=SchemaState("orders"),
        changed_fields=("x",),
    )

    plan = PlanBuilder().build([delete(schema), delete(table), update, delete(user)])

    assert [a.describe() for a in plan.actions] == [
        "update schema orders (x)",
        "delete user alice|BROKER",
        "delete table events_OFFLINE",
        "delete schema events",
    ]


def test_plan_summary_and_emptiness():
    assert Plan().is_empty
    assert Plan().summary() == "create=0, update=0, delete=0"

    plan = PlanBuilder().build(
        [create(DesiredSchema("a", {})), create(DesiredSchema("b", {})), delete(SchemaState("c"))]
    )

    assert not plan.is_empty
    assert plan.summary() == "create=2, update=0, delete=1"
