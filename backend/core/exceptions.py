"""
Typed domain errors and the DRF exception handler that renders them.

Every failure leaving the API has the same discriminated shape::

    {"success": false, "error": "<human message>", "code": "<MACHINE_CODE>", "details": {...}}

so clients can either toast the message or map ``details`` onto form fields.
"""

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


class AppError(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "The request could not be completed."
    default_code = "ERROR"

    def __init__(self, message: str | None = None, *, details: dict | None = None):
        super().__init__(detail=message or self.default_detail, code=self.default_code)
        self.message = str(self.detail)
        self.code = self.default_code
        self.details = details

    def __str__(self):
        return self.message


class ValidationError(AppError):
    default_detail = "Validation failed"
    default_code = "VALIDATION_ERROR"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"
    default_code = "AUTHENTICATION_ERROR"


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"
    default_code = "AUTHORIZATION_ERROR"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", *, details: dict | None = None):
        super().__init__(f"{resource} not found", details=details)


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"
    default_code = "CONFLICT"


class PaymentGatewayError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Payment provider is unavailable. Please retry."
    default_code = "PAYMENT_GATEWAY_ERROR"


# DRF's own exceptions normalized onto the domain codes.
_DRF_CODES = (
    (exceptions.ValidationError, "VALIDATION_ERROR"),
    (exceptions.NotAuthenticated, "AUTHENTICATION_ERROR"),
    (exceptions.AuthenticationFailed, "AUTHENTICATION_ERROR"),
    (exceptions.PermissionDenied, "AUTHORIZATION_ERROR"),
    (exceptions.NotFound, "NOT_FOUND"),
)


def error_body(message: str, code: str, details=None) -> dict:
    body = {"success": False, "error": message, "code": code}
    if details:
        body["details"] = details
    return body


def _drf_code(exc: exceptions.APIException) -> str:
    for exc_class, code in _DRF_CODES:
        if isinstance(exc, exc_class):
            return code
    return str(exc.default_code).upper()


def api_exception_handler(exc, context):
    if isinstance(exc, AppError):
        set_rollback()
        return Response(
            error_body(exc.message, exc.code, exc.details),
            status=exc.status_code,
        )

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.error(
            "Unhandled error in %s",
            type(view).__name__ if view is not None else "unknown view",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        return Response(
            error_body(INTERNAL_ERROR_MESSAGE, "INTERNAL_ERROR"),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    # Django's Http404/PermissionDenied were converted by DRF above.
    if not isinstance(exc, exceptions.APIException):
        exc = exceptions.NotFound() if response.status_code == 404 else exceptions.PermissionDenied()

    if isinstance(exc, exceptions.ValidationError):
        details = response.data if isinstance(response.data, dict) else {"non_field_errors": response.data}
        response.data = error_body("Validation failed", "VALIDATION_ERROR", details)
    else:
        message = response.data.get("detail", exc.default_detail) if isinstance(response.data, dict) else exc.default_detail
        response.data = error_body(str(message), _drf_code(exc))
    return response
