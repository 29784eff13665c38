from src.enums import ResourceKind
from src.pinot_engine.desired.models import DesiredCatalog, DesiredSchema, DesiredTable, DesiredUser
from src.pinot_engine.state.states import TrackedState, UserState
from src.pinot_engine.validation.diagnostics import Diagnostic, DiagnosticLevel, ValidationReport
from src.pinot_engine.validation.rules import RuleCode, default_rule_set
from src.pinot_engine.validation.validator import Validator

# --- fakes ---


class RecordingModelRule:
    def __init__(self, kind, level=DiagnosticLevel.ERROR):
        self.kind = kind
        self.code = f"MODEL_{kind.name}"
        self.description = "records calls"
        self.level = level
        self.seen = []

    def check(self, desired):
        self.seen.append(desired.resource_key)
        return [Diagnostic(desired.resource_key, self.level, self.code, "model")]


class RecordingStateRule:
    kind = ResourceKind.USER
    code = "STATE_USER"
    description = "records calls"

    def __init__(self):
        self.seen = []

    def check(self, desired, live):
        self.seen.append((desired.resource_key, live))
        return []


class CountingCatalogRule:
    code = "CATALOG"
    description = "counts resources"

    def check(self, desired):
        count = len(desired.resources())
        return [Diagnostic("", DiagnosticLevel.INFO, self.code, f"{count} resources")]


def catalog() -> DesiredCatalog:
    return DesiredCatalog(
        schemas=(DesiredSchema("events", {"schemaName": "events"}),),
        tables=(DesiredTable("events", "OFFLINE", {}),),
        users=(DesiredUser("alice", "BROKER", "USER", ("READ",), password="pw"),),
    )


# --- tests ---


def test_rules_only_see_resources_of_their_kind():
    table_rule = RecordingModelRule(ResourceKind.TABLE)
    user_rule = RecordingModelRule(ResourceKind.USER)

    report = Validator(model_rules=[table_rule, user_rule]).validate(catalog(), TrackedState())

    assert table_rule.seen == ["events_OFFLINE"]
    assert user_rule.seen == ["alice|BROKER"]
    assert [d.code for d in report.diagnostics] == ["MODEL_TABLE", "MODEL_USER"]


def test_state_rules_receive_tracked_state_or_none():
    rule = RecordingStateRule()
    tracked = UserState("alice", "BROKER")

    Validator(state_rules=[rule]).validate(catalog(), TrackedState.of(tracked))
    Validator(state_rules=[rule]).validate(catalog(), TrackedState())

    assert rule.seen == [("alice|BROKER", tracked), ("alice|BROKER", None)]


def test_catalog_rules_run_once_after_per_resource_rules():
    schema_rule = RecordingModelRule(ResourceKind.SCHEMA)

    report = Validator(model_rules=[schema_rule], catalog_rules=[CountingCatalogRule()]).validate(
        catalog(), TrackedState()
    )

    assert [d.code for d in report.diagnostics] == ["MODEL_SCHEMA", "CATALOG"]
    assert report.diagnostics[-1].message == "3 resources"


def test_report_flags():
    warning = RecordingModelRule(ResourceKind.SCHEMA, level=DiagnosticLevel.WARNING)
    report = Validator(model_rules=[warning]).validate(catalog(), TrackedState())

    assert report.ok
    assert len(report.warnings) == 1 and report.errors == ()
    assert ValidationReport().ok


def test_default_rules_accept_a_clean_catalog():
    model_rules, state_rules, catalog_rules = default_rule_set()

    report = Validator(model_rules, state_rules, catalog_rules).validate(catalog(), TrackedState())

    assert report.ok
    assert report.diagnostics == ()


def test_default_rules_collect_every_problem_in_one_pass():
    broken = DesiredCatalog(
        schemas=(DesiredSchema("orders", {"schemaName": "events"}),),
        tables=(DesiredTable("events", "HYBRID", {}, kafka_username="u"),),
        users=(DesiredUser("alice", "BROKER", "USER", ("READ",)),),
    )

    report = Validator(*default_rule_set()).validate(broken, TrackedState())

    assert not report.ok
    assert {d.code for d in report.errors} == {
        RuleCode.SCHEMA_NAME_MATCHES,
        RuleCode.TABLE_IDENTITY_CONSISTENT,
        RuleCode.KAFKA_CREDENTIALS_COMPLETE,
        RuleCode.USER_CREATE_REQUIRES_PASSWORD,
    }
