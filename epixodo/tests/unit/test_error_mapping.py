from __future__ import annotations

import pytest

from epixodo.adapters.api_errors import ApiClientError, ApiError, ApiServerError, ApiTimeoutError
from epixodo.domain.ports import UseCaseError
from epixodo.usecases.error_mapping import map_api_error

_FIELD_BODY = {
    "code": 400,
    "message": "Failed to create record.",
    "data": {"title": {"code": "validation_required", "message": "Missing required value."}},
}


def _map(exc: Exception) -> UseCaseError:
    return map_api_error(exc, default_code="FETCH_FAILED", default_message="Could not load.")


def test_validation_errors_keep_field_hints() -> None:
    err = ApiClientError("bad", status=400, payload=_FIELD_BODY)
    mapped = _map(err)
    assert mapped.code == "INVALID_FIELDS"
    assert "title: Missing required value." in mapped.message
    assert mapped.meta["fields"] == {"title": "Missing required value."}


@pytest.mark.parametrize(
    "exc, code",
    [
        (ApiTimeoutError("slow"), "REQUEST_TIMEOUT"),
        (ApiClientError("no", status=401), "AUTH_FAILED"),
        (ApiClientError("no", status=403), "AUTH_FAILED"),
        (ApiClientError("gone", status=404), "NOT_FOUND"),
        (ApiClientError("teapot", status=418), "REQUEST_FAILED"),
        (ApiServerError("boom", status=500), "SERVER_ERROR"),
        (ApiError("odd"), "API_ERROR"),
        (RuntimeError("whatever"), "FETCH_FAILED"),
    ],
)
def test_status_codes_map_to_stable_codes(exc: Exception, code: str) -> None:
    assert _map(exc).code == code


def test_default_message_and_passthrough() -> None:
    assert _map(RuntimeError("x")).message == "Could not load."
    original = UseCaseError("CUSTOM", "kept")
    assert _map(original) is original
