"""
Tests for response helper functions and the response-v2 envelope.
"""

from dataclasses import asdict

from conftest import RESPONSE_CONTRACT_VERSION
from upm_stamp.core.context import sync_request_context
from upm_stamp.core.errors import DestinationExistsError, PackageNotReadyError
from upm_stamp.core.responses import (
    ErrorCode,
    ErrorType,
    ToolResponse,
    error_from_exception,
    error_response,
    internal_error,
    success_response,
    validation_error,
)


class TestSuccessResponse:
    def test_envelope_shape(self):
        response = asdict(success_response({"package_id": "com.example.tool"}))
        assert set(response) == {"success", "data", "error", "meta"}
        assert response["success"] is True
        assert response["error"] is None
        assert response["data"] == {"package_id": "com.example.tool"}
        assert response["meta"]["version"] == RESPONSE_CONTRACT_VERSION

    def test_fields_merge_into_data(self):
        response = success_response({"a": 1}, b=2)
        assert response.data == {"a": 1, "b": 2}

    def test_warnings_and_telemetry_go_to_meta(self):
        response = success_response(warnings=["careful"], telemetry={"duration_ms": 3.5})
        assert response.meta["warnings"] == ["careful"]
        assert response.meta["telemetry"] == {"duration_ms": 3.5}

    def test_empty_warnings_are_omitted(self):
        assert "warnings" not in success_response(warnings=[]).meta

    def test_request_id_comes_from_context(self):
        """The active correlation ID is attached automatically."""
        with sync_request_context(correlation_id="cli_abc123"):
            response = success_response()
        assert response.meta["request_id"] == "cli_abc123"

    def test_no_request_id_outside_context(self):
        assert "request_id" not in success_response().meta


class TestErrorResponse:
    def test_defaults_to_internal(self):
        response = error_response("boom")
        assert response.success is False
        assert response.error == "boom"
        assert response.data["error_code"] == "INTERNAL_ERROR"
        assert response.data["error_type"] == "internal"

    def test_codes_are_serialized_as_strings(self):
        response = error_response(
            "bad", error_code=ErrorCode.CONFLICT, error_type=ErrorType.CONFLICT
        )
        assert response.data["error_code"] == "CONFLICT"
        assert response.data["error_type"] == "conflict"

    def test_validation_error_records_field(self):
        response = validation_error("Unknown property", field="packge_name")
        assert response.data["error_code"] == "VALIDATION_ERROR"
        assert response.data["details"] == {"field": "packge_name"}

    def test_internal_error_references_request(self):
        response = internal_error(PermissionError("Packages is read-only"), request_id="req_1")
        assert response.error == "PermissionError: Packages is read-only"
        assert "req_1" in response.data["remediation"]
        assert response.meta["request_id"] == "req_1"


class TestErrorFromException:
    def test_carries_code_remediation_and_details(self):
        exc = DestinationExistsError(
            "Package folder already exists: /tmp/Tool", details={"package_root": "/tmp/Tool"}
        )
        response = error_from_exception(exc)
        assert response.error == "Package folder already exists: /tmp/Tool"
        assert response.data["error_code"] == "CONFLICT"
        assert response.data["error_type"] == "conflict"
        assert response.data["details"] == {"package_root": "/tmp/Tool"}
        assert response.data["remediation"]

    def test_explicit_remediation_wins(self):
        exc = PackageNotReadyError("not ready", remediation="Fill in package_name")
        response = error_from_exception(exc)
        assert response.data["remediation"] == "Fill in package_name"
        assert response.data["error_code"] == "VALIDATION_ERROR"


def test_tool_response_defaults():
    response = ToolResponse(success=True)
    assert response.data == {}
    assert response.meta == {"version": RESPONSE_CONTRACT_VERSION}
