"""
Tests for error handling.
Tests custom exceptions, error response formatting and the request id contract.
"""

import json
import pytest
from unittest.mock import Mock
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from homedirect.services.error_handler import ErrorHandlerService
from homedirect.utils.exceptions import (
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    InvalidCredentialsError,
    InvalidSessionError,
    InsufficientPermissionsError,
    EmailNotVerifiedError,
    VerificationError,
    AlreadyVerifiedError,
    PropertyNotFoundError,
    PropertyNotApprovedError,
    DuplicateResourceError
)


class TestErrorHandlerService:
    """Test error handler service functionality."""

    def test_format_error_response(self):
        """Test error response formatting."""
        response = ErrorHandlerService.format_error_response(
            error_code="TEST_ERROR",
            message="Test error message",
            details=[{"field": "test", "message": "Test field error"}],
            request_id="test123"
        )

        assert response["error"]["code"] == "TEST_ERROR"
        assert response["error"]["message"] == "Test error message"
        assert response["error"]["request_id"] == "test123"
        assert response["error"]["details"][0]["field"] == "test"
        assert response["error"]["timestamp"].endswith("Z")

    def test_format_error_response_without_details(self):
        response = ErrorHandlerService.format_error_response("TEST_ERROR", "Test error message")

        assert "details" not in response["error"]

    def test_handle_api_exception(self):
        """Test API exception handling."""
        exception = ValidationError(
            "Test validation error",
            field_errors=[{"field": "price", "message": "must be positive"}]
        )
        response = ErrorHandlerService.handle_api_exception(exception)

        assert response.status_code == 422
        response_data = json.loads(response.body)
        assert response_data["error"]["code"] == "VALIDATION_ERROR"
        assert response_data["error"]["message"] == "Test validation error"
        assert response_data["error"]["details"] == [{"field": "price", "message": "must be positive"}]

    def test_handle_validation_error_does_not_echo_input(self):
        """Test validation errors list fields without the submitted values."""
        mock_error = Mock()
        mock_error.errors.return_value = [
            {
                "loc": ("body", "password"),
                "msg": "String should have at least 8 characters",
                "type": "string_too_short",
                "input": "secret"
            }
        ]

        response = ErrorHandlerService.handle_validation_error(mock_error)

        assert response.status_code == 422
        response_data = json.loads(response.body)
        assert response_data["error"]["details"] == [{
            "field": "body -> password",
            "message": "String should have at least 8 characters",
            "type": "string_too_short"
        }]
        assert "secret" not in response.body.decode()

    def test_handle_integrity_error(self):
        exception = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: users.email"))

        response = ErrorHandlerService.handle_database_error(exception)

        assert response.status_code == 409
        response_data = json.loads(response.body)
        assert response_data["error"]["code"] == "INTEGRITY_ERROR"
        assert response_data["error"]["message"] == "Constraint violation: Duplicate value for unique field"

    def test_handle_operational_error(self):
        exception = OperationalError("SELECT 1", {}, Exception("database is locked"))

        response = ErrorHandlerService.handle_database_error(exception)

        assert response.status_code == 500
        response_data = json.loads(response.body)
        assert response_data["error"]["code"] == "DATABASE_ERROR"
        assert "locked" not in response_data["error"]["message"]

    def test_handle_http_exception(self):
        response = ErrorHandlerService.handle_http_exception(StarletteHTTPException(405, "Method Not Allowed"))

        assert response.status_code == 405
        assert json.loads(response.body)["error"]["code"] == "HTTP_405"

    def test_handle_unexpected_error_hides_details(self):
        response = ErrorHandlerService.handle_unexpected_error(RuntimeError("connection string with password"))

        assert response.status_code == 500
        assert "password" not in response.body.decode()

    def test_request_id_is_reused(self):
        request = Mock()
        request.state.request_id = "abc12345"

        assert ErrorHandlerService._get_request_id(request) == "abc12345"
        assert len(ErrorHandlerService._get_request_id(None)) == 8


class TestCustomExceptions:
    """Test status codes and error codes of the exception hierarchy."""

    @pytest.mark.parametrize("exception, status_code, error_code", [
        (ValidationError("bad"), 422, "VALIDATION_ERROR"),
        (NotFoundError("User"), 404, "NOT_FOUND"),
        (UnauthorizedError(), 401, "UNAUTHORIZED"),
        (ForbiddenError(), 403, "FORBIDDEN"),
        (ConflictError("taken"), 409, "CONFLICT"),
        (InvalidCredentialsError(), 401, "INVALID_CREDENTIALS"),
        (InvalidSessionError(), 401, "UNAUTHORIZED"),
        (InsufficientPermissionsError("approve properties"), 403, "FORBIDDEN"),
        (EmailNotVerifiedError(), 403, "EMAIL_NOT_VERIFIED"),
        (VerificationError(), 400, "VERIFICATION_FAILED"),
        (AlreadyVerifiedError(), 400, "ALREADY_VERIFIED"),
        (PropertyNotFoundError(7), 404, "NOT_FOUND"),
        (PropertyNotApprovedError(), 403, "NOT_APPROVED"),
        (DuplicateResourceError("User", "email"), 409, "CONFLICT"),
    ])
    def test_codes(self, exception, status_code, error_code):
        assert exception.status_code == status_code
        assert exception.error_code == error_code

    def test_messages(self):
        assert PropertyNotFoundError(7).detail == "Property not found with ID: 7"
        assert InsufficientPermissionsError("approve properties").detail == (
            "Insufficient permissions to approve properties"
        )
        assert DuplicateResourceError("User", "email").detail == "User with this email already exists"


class TestErrorResponses:
    """Test error responses produced by the running application."""

    @pytest.mark.asyncio
    async def test_unknown_route(self, async_client):
        response = await async_client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "HTTP_404"

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id_header(self, async_client):
        response = await async_client.get("/api/user")

        assert response.status_code == 401
        assert response.headers["X-Request-ID"] == response.json()["error"]["request_id"]
        assert "X-Processing-Time" in response.headers

    @pytest.mark.asyncio
    async def test_invalid_path_parameter(self, async_client):
        response = await async_client.get("/api/properties/not-a-number")

        assert response.status_code == 422
        details = response.json()["error"]["details"]
        assert details[0]["field"] == "path -> property_id"
