"""Tests for domain exceptions (error_code, message, details)."""

from userauth.domain.exceptions import (
    INVALID_TOKEN_MESSAGE,
    AuthenticationException,
    AuthorizationException,
    ConflictException,
    InvalidTokenError,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    UserAlreadyExistsException,
    UserAuthException,
    ValidationException,
)
from userauth.infrastructure.exceptions import MailDeliveryException


def test_base_exception_default_error_code() -> None:
    """Base UserAuthException uses class name as error_code when not provided."""
    exc = UserAuthException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "UserAuthException"
    assert exc.details == {}


def test_to_dict_omits_empty_details() -> None:
    assert UserAuthException("Oops", error_code="CUSTOM").to_dict() == {
        "error": "CUSTOM",
        "message": "Oops",
    }
    assert UserAuthException("Oops", "CUSTOM", {"k": "v"}).to_dict()["details"] == {"k": "v"}


def test_validation_exception() -> None:
    """ValidationException sets VALIDATION_ERROR and optional field in details."""
    exc = ValidationException("Passwords do not match", field="confirm_password")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "confirm_password"}
    assert ValidationException("Invalid").details == {}


def test_authentication_exception() -> None:
    exc = AuthenticationException()
    assert exc.message == "Authentication failed"
    assert exc.error_code == "AUTHENTICATION_ERROR"
    assert AuthenticationException(INVALID_TOKEN_MESSAGE).message == "Invalid or expired token"


def test_authorization_exception_with_resource_and_action() -> None:
    exc = AuthorizationException(resource="user", action="manage")
    assert exc.message == "Permission denied: manage on user"
    assert exc.error_code == "PERMISSION_DENIED"
    assert exc.details == {"resource": "user", "action": "manage"}
    assert AuthorizationException().details == {}


def test_resource_not_found_exception() -> None:
    exc = ResourceNotFoundException("user", "u1")
    assert exc.message == "user not found: u1"
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.details == {"resource_type": "user", "resource_id": "u1"}


def test_user_already_exists_is_conflict_without_echoing_email() -> None:
    exc = UserAlreadyExistsException()
    assert isinstance(exc, ConflictException)
    assert exc.error_code == "CONFLICT"
    assert "@" not in exc.message


def test_infrastructure_error_codes() -> None:
    assert SqlNotConfiguredException().error_code == "SERVICE_UNAVAILABLE"
    mail = MailDeliveryException("SMTPConnectError")
    assert mail.error_code == "MAIL_DELIVERY_ERROR"
    assert mail.details == {"reason": "SMTPConnectError"}


def test_invalid_token_error_keeps_reason() -> None:
    exc = InvalidTokenError("expired", "Token has expired")
    assert isinstance(exc, ValueError)
    assert exc.reason == "expired"
    assert "expired" in str(exc)
