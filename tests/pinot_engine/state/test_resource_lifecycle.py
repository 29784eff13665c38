import pytest

from src.enums import ResourceStatus as S
from src.pinot_engine.errors import InvalidTransitionError
from src.pinot_engine.state.lifecycle import ResourceLifecycle, can_transition


def test_full_happy_path():
    lifecycle = ResourceLifecycle("events")

    for target in (S.CREATING, S.PRESENT, S.UPDATING, S.PRESENT, S.DELETING, S.ABSENT):
        lifecycle.advance(target)

    assert lifecycle.status is S.ABSENT
    assert lifecycle.history == [S.PLANNED, S.CREATING, S.PRESENT, S.UPDATING, S.PRESENT, S.DELETING]


def test_import_goes_straight_to_present():
    assert can_transition(S.PLANNED, S.PRESENT)


def test_refresh_can_find_resource_gone():
    assert can_transition(S.PRESENT, S.ABSENT)


@pytest.mark.parametrize(
    "current, target",
    [
        (S.PLANNED, S.UPDATING),
        (S.PLANNED, S.DELETING),
        (S.CREATING, S.DELETING),
        (S.UPDATING, S.DELETING),
        (S.PRESENT, S.CREATING),
        (S.ABSENT, S.CREATING),
        (S.ABSENT, S.PRESENT),
    ],
)
def test_forbidden_transitions(current, target):
    assert not can_transition(current, target)


def test_advance_refuses_forbidden_transition():
    lifecycle = ResourceLifecycle("events", status=S.ABSENT)

    with pytest.raises(InvalidTransitionError, match="events: cannot go from absent to present"):
        lifecycle.advance(S.PRESENT)
    assert lifecycle.status is S.ABSENT


@pytest.mark.parametrize(
    "start, in_flight", [(S.PLANNED, S.CREATING), (S.PRESENT, S.UPDATING), (S.PRESENT, S.DELETING)]
)
def test_roll_back_returns_to_starting_status(start, in_flight):
    lifecycle = ResourceLifecycle("events", status=start)
    lifecycle.advance(in_flight)

    lifecycle.roll_back()

    assert lifecycle.status is start
    assert lifecycle.history == []


def test_roll_back_needs_something_in_flight():
    lifecycle = ResourceLifecycle("events", status=S.PRESENT)
    with pytest.raises(InvalidTransitionError, match="nothing in flight"):
        lifecycle.roll_back()
