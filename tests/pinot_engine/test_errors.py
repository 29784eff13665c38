from src.pinot_engine.errors import (
    NotFoundError,
    PinotEngineError,
    TableDeletionError,
    TransportError,
    ValidationError,
)


def test_from_response_maps_404_to_not_found():
    error = TransportError.from_response("GET", "http://c/tables/t", 404, "nope")

    assert isinstance(error, NotFoundError)
    assert (error.status, error.body) == (404, "nope")
    assert str(error) == "GET http://c/tables/t failed: API error (status 404): nope"


def test_from_response_keeps_other_statuses_generic():
    error = TransportError.from_response("PUT", "http://c/schemas/s", 409, "conflict")

    assert type(error) is TransportError
    assert error.status == 409


def test_table_deletion_error_carries_both_causes():
    primary = TransportError("primary boom", status=500)
    fallback = NotFoundError("fallback gone", status=404)

    error = TableDeletionError("events_OFFLINE", primary, fallback)

    assert error.primary is primary and error.fallback is fallback
    assert "events_OFFLINE" in str(error)
    assert "primary boom" in str(error) and "fallback gone" in str(error)


def test_everything_is_a_pinot_engine_error():
    for error_type in (ValidationError, TransportError, NotFoundError, TableDeletionError):
        assert issubclass(error_type, PinotEngineError)
