"""Error hierarchy tests — REST envelope shape and status mapping."""

from medsync.core.errors import (
    AnalysisServiceError, EngineClosedError, ErrorContext, ResourceNotFoundError,
    SeedDataError,
)


def test_not_found_envelope_lists_only_set_context():
    error = ResourceNotFoundError("Facility", "h9", ErrorContext(facility_id="h9"))
    body = error.to_response()["error"]
    assert error.http_status == 404
    assert body["code"] == "RESOURCE_NOT_FOUND"
    assert body["message"] == "Facility 'h9' not found"
    assert body["context"] == {"facility_id": "h9"}


def test_user_message_overrides_internal_message():
    error = SeedDataError(
        "bad row", ErrorContext(user_message="Seed file rejected"),
    )
    assert error.to_response()["error"]["message"] == "Seed file rejected"


def test_debug_info_never_in_response():
    error = SeedDataError("x", ErrorContext(debug_info={"errors": ["secret"]}))
    assert "secret" not in str(error.to_response())


def test_analysis_error_carries_retry_after():
    error = AnalysisServiceError("slow down", "rate_limit", retry_after_ms=2000)
    assert error.http_status == 503
    assert error.to_response()["error"]["context"] == {"retry_after_ms": 2000}


def test_engine_closed_is_conflict_warning():
    error = EngineClosedError("start")
    assert error.http_status == 409
    assert error.to_response()["error"]["severity"] == "warning"
    assert error.log_extra() == {"error_code": "ENGINE_CLOSED"}
