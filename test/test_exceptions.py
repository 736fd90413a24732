"""
Tests for custom exception classes and the JSON error envelope
"""

import json

from fastapi import status
from starlette.requests import Request

from restmeta.exception_handlers import create_error_response, get_error_type, restmeta_exception_handler
from restmeta.exceptions import (
    AuthenticationError,
    FieldPermissionError,
    FieldUpdateError,
    FieldValidationError,
    InvalidPostIdError,
    PostNotFoundError,
    RestMetaError,
)


class TestRestMetaError:
    def test_defaults(self):
        exc = RestMetaError("Test error")
        assert str(exc) == "Test error"
        assert exc.message == "Test error"
        assert exc.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert exc.error_code == "internal_error"
        assert exc.details == {}

    def test_custom_error_code(self):
        exc = RestMetaError("Test error", error_code="create_failed")
        assert exc.error_code == "create_failed"
        assert RestMetaError.error_code == "internal_error"


class TestErrorTaxonomy:
    def test_invalid_post_id(self):
        exc = InvalidPostIdError("abc")
        assert exc.status_code == 400
        assert exc.error_code == "invalid_post_id"
        assert exc.message == "Invalid post ID provided."
        assert exc.details == {"post_id": "abc"}

    def test_invalid_post_id_without_value(self):
        assert InvalidPostIdError().details == {}

    def test_field_validation(self):
        exc = FieldValidationError(field="custom_meta", message="custom_meta is not of type string.")
        assert exc.status_code == 400
        assert exc.error_code == "invalid_param"
        assert exc.details == {"field": "custom_meta"}

    def test_authentication(self):
        exc = AuthenticationError()
        assert exc.status_code == 401
        assert exc.error_code == "unauthorized"

    def test_permission(self):
        exc = FieldPermissionError(post_id=42)
        assert exc.status_code == 403
        assert exc.error_code == "forbidden"
        assert exc.details == {"required_capability": "edit_post", "post_id": 42}

    def test_not_found(self):
        exc = PostNotFoundError(7)
        assert exc.status_code == 404
        assert exc.error_code == "post_not_found"
        assert "7" in exc.message

    def test_update_failed(self):
        exc = FieldUpdateError("custom_meta")
        assert exc.status_code == 500
        assert exc.error_code == "update_failed"
        assert exc.details == {"field": "custom_meta"}


class TestErrorResponse:
    def test_envelope(self):
        response = create_error_response(403, "Nope", error_code="forbidden", path="/api/v1/posts/1")
        body = json.loads(response.body)
        assert response.status_code == 403
        assert body == {
            "error": {
                "status_code": 403,
                "message": "Nope",
                "type": "Forbidden",
                "error_code": "forbidden",
                "path": "/api/v1/posts/1",
            }
        }

    def test_unknown_status_type(self):
        assert get_error_type(418) == "Error"

    async def test_handler_renders_exception(self):
        request = Request({"type": "http", "method": "GET", "path": "/api/v1/posts/x", "headers": [], "query_string": b""})
        response = await restmeta_exception_handler(request, InvalidPostIdError("x"))
        body = json.loads(response.body)
        assert response.status_code == 400
        assert body["error"]["error_code"] == "invalid_post_id"
        assert body["error"]["details"] == {"post_id": "x"}

    async def test_handler_adds_auth_header_on_401(self):
        request = Request({"type": "http", "method": "GET", "path": "/", "headers": [], "query_string": b""})
        response = await restmeta_exception_handler(request, AuthenticationError())
        assert response.headers["www-authenticate"] == "Bearer"
